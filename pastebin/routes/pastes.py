"""
Paste routes.
Handles create, fetch, preview, list and delete operations.
Handlers are plain functions so FastAPI runs them in its threadpool: the Redis
client and password key derivation both block.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Request

from pastebin.config import settings
from pastebin.models import DeleteResponse, Paste, PasteCreate, PasteResponse, PasteSummary
from pastebin.service import PasteService

router = APIRouter()
logger = logging.getLogger(__name__)


def get_paste_service(request: Request) -> PasteService:
    """Engine bound to the store created at startup."""
    return PasteService(request.app.state.store)


@router.post("/api/pastes", response_model=PasteResponse, status_code=201)
def create_paste(
    paste: PasteCreate,
    service: PasteService = Depends(get_paste_service),
) -> PasteResponse:
    """
    Create a new paste.

    Args:
        paste: Paste data (content, optional expiresIn, language, burnAfterRead,
            isPrivate, optional password)
        service: Lifecycle engine

    Returns:
        Paste ID and shareable URL
    """
    paste_id = service.create_paste(paste)

    base_url = settings.APP_DOMAIN.rstrip("/")
    url = f"{base_url}/api/pastes/{paste_id}"

    return PasteResponse(id=paste_id, url=url)


@router.get("/api/pastes", response_model=List[PasteSummary])
def list_pastes(
    service: PasteService = Depends(get_paste_service),
) -> List[PasteSummary]:
    """Most recent live pastes, content truncated. Private pastes are flagged, not hidden."""
    return service.list_pastes()


@router.get("/api/pastes/{paste_id}", response_model=Paste)
def fetch_paste(
    paste_id: str,
    password: Optional[str] = None,
    service: PasteService = Depends(get_paste_service),
) -> Paste:
    """
    Fetch a paste with its full content.
    Each successful fetch increments the view count; burn-after-read pastes
    are deleted by their first successful fetch.

    Args:
        paste_id: Unique paste identifier
        password: Password for encrypted pastes (query parameter)
        service: Lifecycle engine

    Returns:
        Paste with decrypted content

    Raises:
        NotFoundError: paste not found, expired or deleted (404)
        PasswordRequiredError / InvalidPasswordError: encrypted paste (401)
    """
    return service.read_paste(paste_id, password)


@router.get("/api/preview/{paste_id}", response_model=PasteSummary)
def preview_paste(
    paste_id: str,
    service: PasteService = Depends(get_paste_service),
) -> PasteSummary:
    """Paste metadata and content snippet. Never decrypts, never counts a view."""
    return service.preview_paste(paste_id)


@router.delete("/api/pastes/{paste_id}", response_model=DeleteResponse)
def delete_paste(
    paste_id: str,
    service: PasteService = Depends(get_paste_service),
) -> DeleteResponse:
    service.delete_paste(paste_id)
    return DeleteResponse(message="Paste deleted successfully")
