"""
Paste lifecycle engine.
Decides visibility, decryption, view counting and burn-after-read for each request.
"""
import logging
from datetime import timedelta
from typing import List

from pastebin import crypto
from pastebin.config import settings
from pastebin.database import PasteStore
from pastebin.errors import (
    DecryptionError,
    DuplicatePasteIdError,
    InvalidPasswordError,
    NotFoundError,
    PasswordRequiredError,
    StorageError,
)
from pastebin.ids import generate_paste_id
from pastebin.models import Paste, PasteCreate, PasteSummary

logger = logging.getLogger(__name__)


class PasteService:
    """Create, read, preview, list and delete pastes against a PasteStore."""

    def __init__(self, store: PasteStore):
        self.store = store

    def create_paste(self, data: PasteCreate) -> str:
        """
        Create a new paste.

        Args:
            data: Validated create request

        Returns:
            The new paste id

        Raises:
            StorageError: the row could not be written
        """
        now = self.store.now()
        is_encrypted = bool(data.password)
        content = crypto.encrypt(data.content, data.password) if is_encrypted else data.content

        # A missing or zero offset means the paste never expires
        expires_at = None
        if data.expires_in:
            expires_at = now + timedelta(milliseconds=data.expires_in)

        for attempt in range(1, settings.ID_RETRY_ATTEMPTS + 1):
            paste = Paste(
                id=generate_paste_id(),
                content=content,
                language=data.language,
                created_at=now,
                expires_at=expires_at,
                burn_after_read=data.burn_after_read,
                is_private=data.is_private,
                is_encrypted=is_encrypted,
                views=0,
                deleted=False,
            )
            try:
                self.store.insert(paste)
            except DuplicatePasteIdError:
                logger.warning(f"Retrying paste creation after id collision (attempt {attempt})")
                continue
            logger.info(f"Created paste {paste.id} (encrypted={is_encrypted}, burn={paste.burn_after_read})")
            return paste.id

        raise StorageError("Failed to allocate a paste id")

    def read_paste(self, paste_id: str, password: str = None) -> Paste:
        """
        Fetch a paste with its full content, counting the view.

        Checks run in order: liveness, password presence, decryption. None of
        the failures count a view or delete anything.

        Raises:
            NotFoundError: absent, expired, deleted, or already burned
            PasswordRequiredError: encrypted and no password given
            InvalidPasswordError: the password does not decrypt the content
        """
        paste = self.store.get_live_by_id(paste_id)
        if paste is None:
            raise NotFoundError()

        content = paste.content
        if paste.is_encrypted:
            if not password:
                raise PasswordRequiredError()
            try:
                content = crypto.decrypt(paste.content, password)
            except DecryptionError:
                logger.info(f"Rejected password for paste {paste_id}")
                raise InvalidPasswordError()

        views = self.store.increment_views(paste_id)

        if paste.burn_after_read:
            try:
                self.store.soft_delete(paste_id)
            except StorageError:
                # The view is already counted, so later reads will see the paste as consumed
                logger.error(f"Burn of paste {paste_id} failed after its view was counted; content not delivered")
                raise
            if views > 1:
                # A concurrent read got here first and already received the content
                logger.info(f"Paste {paste_id} was burned by a concurrent read")
                raise NotFoundError()
            logger.info(f"Paste {paste_id} burned after read")

        return paste.model_copy(update={"content": content})

    def preview_paste(self, paste_id: str) -> PasteSummary:
        """Metadata and a content snippet. No password, no view counted."""
        summary = self.store.get_summary_by_id(paste_id)
        if summary is None:
            raise NotFoundError()
        return summary

    def list_pastes(self) -> List[PasteSummary]:
        return self.store.list_live(settings.LIST_LIMIT)

    def delete_paste(self, paste_id: str) -> None:
        """
        Soft delete a paste. Expired pastes can still be deleted; a paste that
        is already deleted reports NotFoundError.
        """
        if not self.store.exists_not_deleted(paste_id):
            raise NotFoundError()
        self.store.soft_delete(paste_id)
