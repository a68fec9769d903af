"""
Paste store backed by Redis, with an in-memory fallback for development.
Handles paste rows, liveness filtering, listing, view counting and soft deletes.
"""
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from redis import Redis
from redis.exceptions import RedisError

from pastebin.config import settings
from pastebin.errors import DuplicatePasteIdError, StorageError
from pastebin.models import Paste, PasteSummary

logger = logging.getLogger(__name__)

PASTE_KEY = "paste:{}"
CREATED_INDEX_KEY = "pastes:by_created"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryStore:
    """Subset of the Redis API used by PasteStore, kept in process memory."""

    def __init__(self):
        self.store: Dict[str, Dict[str, str]] = {}
        self.sorted_sets: Dict[str, Dict[str, float]] = {}
        self._lock = threading.Lock()

    def hsetnx(self, key: str, field: str, value: Any) -> int:
        """Set a hash field only if it does not exist yet."""
        with self._lock:
            row = self.store.setdefault(key, {})
            if field in row:
                return 0
            row[field] = str(value)
            return 1

    def hset(self, key: str, field: str = None, value: Any = None, mapping: Dict[str, Any] = None) -> int:
        """Store hash data."""
        with self._lock:
            row = self.store.setdefault(key, {})
            items = dict(mapping or {})
            if field is not None:
                items[field] = value
            added = sum(1 for name in items if name not in row)
            row.update({name: str(val) for name, val in items.items()})
            return added

    def hgetall(self, key: str) -> Dict[str, str]:
        """Retrieve hash data."""
        with self._lock:
            return dict(self.store.get(key, {}))

    def hincrby(self, key: str, field: str, increment: int) -> int:
        """Increment hash field."""
        with self._lock:
            row = self.store.setdefault(key, {})
            current = int(row.get(field, 0)) + increment
            row[field] = str(current)
            return current

    def zadd(self, key: str, mapping: Dict[str, float]) -> int:
        with self._lock:
            zset = self.sorted_sets.setdefault(key, {})
            added = sum(1 for member in mapping if member not in zset)
            zset.update(mapping)
            return added

    def zrem(self, key: str, *members: str) -> int:
        with self._lock:
            zset = self.sorted_sets.get(key, {})
            return sum(1 for member in members if zset.pop(member, None) is not None)

    def zrevrange(self, key: str, start: int, end: int) -> List[str]:
        """Members by descending score, inclusive range like Redis."""
        with self._lock:
            zset = self.sorted_sets.get(key, {})
            ordered = sorted(zset, key=lambda member: (zset[member], member), reverse=True)
        stop = None if end == -1 else end + 1
        return ordered[start:stop]

    def pipeline(self, transaction: bool = True) -> "InMemoryPipeline":
        return InMemoryPipeline(self)

    def ping(self):
        """Health check."""
        return True

    def close(self):
        pass


class InMemoryPipeline:
    """Buffers commands and applies them on execute(), like a Redis MULTI block."""

    def __init__(self, store: InMemoryStore):
        self.store = store
        self.commands: List[tuple] = []

    def __getattr__(self, name: str):
        command = getattr(self.store, name)

        def queue(*args, **kwargs):
            self.commands.append((command, args, kwargs))
            return self
        return queue

    def execute(self) -> List[Any]:
        commands, self.commands = self.commands, []
        return [command(*args, **kwargs) for command, args, kwargs in commands]


def paste_to_hash(paste: Paste) -> Dict[str, str]:
    """Flatten a paste into Redis hash fields (all strings)."""
    return {
        "id": paste.id,
        "content": paste.content,
        "language": paste.language,
        "created_at": paste.created_at.isoformat(),
        "expires_at": paste.expires_at.isoformat() if paste.expires_at else "",
        "burn_after_read": "1" if paste.burn_after_read else "0",
        "is_private": "1" if paste.is_private else "0",
        "is_encrypted": "1" if paste.is_encrypted else "0",
        "views": str(paste.views),
        "deleted": "1" if paste.deleted else "0",
    }


def paste_from_hash(data: Dict[str, str]) -> Paste:
    """Inverse of paste_to_hash. Missing flags read as false."""
    expires_at = data.get("expires_at")
    return Paste(
        id=data["id"],
        content=data.get("content", ""),
        language=data.get("language") or "plain",
        created_at=datetime.fromisoformat(data["created_at"]),
        expires_at=datetime.fromisoformat(expires_at) if expires_at else None,
        burn_after_read=data.get("burn_after_read") == "1",
        is_private=data.get("is_private") == "1",
        is_encrypted=data.get("is_encrypted") == "1",
        views=int(data.get("views", 0)),
        deleted=data.get("deleted") == "1",
    )


class PasteStore:
    """Paste rows on top of a Redis client (or InMemoryStore)."""

    def __init__(self, redis, using_fallback: bool = False, clock: Callable[[], datetime] = None):
        self.redis = redis
        self.using_fallback = using_fallback
        self._clock = clock or utcnow

    def now(self) -> datetime:
        """Current UTC time as seen by the store's liveness checks."""
        return self._clock()

    def is_healthy(self) -> bool:
        """Check if database connection is alive."""
        try:
            self.redis.ping()
            return True
        except RedisError as e:
            logger.error(f"Health check failed: {e}")
        return False

    def close(self):
        try:
            self.redis.close()
        except RedisError as e:
            logger.warning(f"Error closing store connection: {e}")

    def insert(self, paste: Paste) -> None:
        """
        Write a new paste row and add it to the listing index.

        Raises:
            DuplicatePasteIdError: the id is already taken
            StorageError: the backend is unreachable
        """
        key = PASTE_KEY.format(paste.id)
        try:
            if not self.redis.hsetnx(key, "id", paste.id):
                logger.warning(f"Paste id collision on {paste.id}")
                raise DuplicatePasteIdError()
            # Row and index entry land together; a failed claim-only stub has no
            # created_at and reads as absent
            pipe = self.redis.pipeline(transaction=True)
            pipe.hset(key, mapping=paste_to_hash(paste))
            pipe.zadd(CREATED_INDEX_KEY, {paste.id: paste.created_at.timestamp()})
            pipe.execute()
        except RedisError as e:
            logger.error(f"Error saving paste {paste.id}: {e}")
            raise StorageError() from e
        logger.info(f"Paste {paste.id} saved successfully")

    def _fetch(self, paste_id: str) -> Optional[Paste]:
        try:
            data = self.redis.hgetall(PASTE_KEY.format(paste_id))
        except RedisError as e:
            logger.error(f"Error fetching paste {paste_id}: {e}")
            raise StorageError() from e
        if not data or "created_at" not in data:
            return None
        return paste_from_hash(data)

    def get_live_by_id(self, paste_id: str) -> Optional[Paste]:
        """
        Fetch a paste if it is live.

        Args:
            paste_id: Unique paste identifier

        Returns:
            The full row (content untouched) or None if absent, expired or deleted
        """
        paste = self._fetch(paste_id)
        if paste is None or not paste.is_live(self.now()):
            return None
        return paste

    def get_summary_by_id(self, paste_id: str) -> Optional[PasteSummary]:
        """Like get_live_by_id, with content truncated or replaced by a placeholder."""
        paste = self.get_live_by_id(paste_id)
        return paste.to_summary() if paste else None

    def list_live(self, limit: int = None) -> List[PasteSummary]:
        """
        Live pastes, newest first, summarized.

        Private pastes are included; is_private is only reported, not filtered on.
        """
        if limit is None:
            limit = settings.LIST_LIMIT
        now = self.now()
        summaries: List[PasteSummary] = []
        stale: List[str] = []
        start = 0
        try:
            while len(summaries) < limit:
                ids = self.redis.zrevrange(CREATED_INDEX_KEY, start, start + limit - 1)
                if not ids:
                    break
                start += len(ids)
                for paste_id in ids:
                    paste = self._fetch(paste_id)
                    if paste is None or not paste.is_live(now):
                        # Expired and deleted rows never become live again
                        stale.append(paste_id)
                        continue
                    summaries.append(paste.to_summary())
                    if len(summaries) >= limit:
                        break
            if stale:
                self.redis.zrem(CREATED_INDEX_KEY, *stale)
        except RedisError as e:
            logger.error(f"Error listing pastes: {e}")
            raise StorageError() from e
        return summaries

    def increment_views(self, paste_id: str) -> int:
        """
        Increment view count for a paste (atomic operation).

        Returns:
            The view count after the increment
        """
        try:
            views = self.redis.hincrby(PASTE_KEY.format(paste_id), "views", 1)
        except RedisError as e:
            logger.error(f"Error incrementing views for {paste_id}: {e}")
            raise StorageError() from e
        logger.info(f"View count incremented for paste {paste_id}")
        return int(views)

    def soft_delete(self, paste_id: str) -> None:
        """Mark a paste deleted. Calling it again is harmless."""
        try:
            self.redis.hset(PASTE_KEY.format(paste_id), "deleted", "1")
            self.redis.zrem(CREATED_INDEX_KEY, paste_id)
        except RedisError as e:
            logger.error(f"Error deleting paste {paste_id}: {e}")
            raise StorageError() from e
        logger.info(f"Paste {paste_id} deleted")

    def exists_not_deleted(self, paste_id: str) -> bool:
        """True if the row exists and is not deleted, whether or not it has expired."""
        paste = self._fetch(paste_id)
        return paste is not None and not paste.deleted


def create_store(clock: Callable[[], datetime] = None) -> PasteStore:
    """Connect to Redis, fall back to in-memory storage if that fails."""
    if settings.USE_IN_MEMORY_STORE:
        logger.info("USE_IN_MEMORY_STORE set, skipping Redis")
        return PasteStore(InMemoryStore(), using_fallback=True, clock=clock)

    try:
        logger.info(f"Attempting to connect to Redis: {settings.REDIS_URL[:30]}...")
        redis = Redis.from_url(settings.REDIS_URL, decode_responses=True)
        redis.ping()
        logger.info("Redis connected successfully")
        return PasteStore(redis, clock=clock)
    except (RedisError, ValueError) as e:
        logger.error(f"Error connecting to Redis: {type(e).__name__}: {e}")
        logger.warning("Using in-memory fallback for development. Data will NOT persist across restarts.")
        return PasteStore(InMemoryStore(), using_fallback=True, clock=clock)
