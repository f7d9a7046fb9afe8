"""
Shared API dependencies.
"""
import logging
import uuid
from typing import Annotated, Callable, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from brigade.core.cache import create_cache
from brigade.core.config import settings
from brigade.core.database import get_session
from brigade.core.exceptions import InsufficientTierError, UnauthorizedError
from brigade.core.security import verify_token
from brigade.core.tiers import has_access
from brigade.models.user import User
from brigade.services.entry_store import (
    JournalRepository,
    LocalEntryCache,
    RecordStore,
    SqlRecordStore,
    SupabaseRecordStore,
)
from brigade.services.journal_service import JournalService

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

_local_cache = None
_supabase_store: Optional[SupabaseRecordStore] = None


async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
    session: Annotated[Session, Depends(get_session)],
) -> User:
    """
    Dependency to get the current authenticated user from the bearer token.
    Raises HTTPException 401 if authentication fails and 403 for inactive accounts.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise credentials_exception

    try:
        payload = verify_token(credentials.credentials)
        user_id = uuid.UUID(payload["sub"])
    except UnauthorizedError as e:
        logger.warning("Token validation failed", extra={"error": str(e)})
        raise credentials_exception
    except ValueError:
        logger.warning("Token subject is not a user id")
        raise credentials_exception

    user = session.get(User, user_id)
    if user is None:
        raise credentials_exception

    if not user.is_active:
        logger.info("Inactive user access attempt", extra={"user_id": str(user_id)})
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive"
        )
    return user


def require_tier(required_tier: str) -> Callable:
    """
    Build a dependency that admits users whose tier meets ``required_tier``.

    Usage:
        @router.get("/deep-dives")
        async def deep_dives(user: Annotated[User, Depends(require_tier("fraternity"))]):
            ...
    """
    async def _check_tier(current_user: Annotated[User, Depends(get_current_user)]) -> User:
        if not has_access(current_user.tier, required_tier):
            logger.info(
                "Tier check failed",
                extra={"user_id": str(current_user.id), "tier": current_user.tier, "required": required_tier}
            )
            raise InsufficientTierError(required_tier, current_user.tier)
        return current_user

    return _check_tier


def get_local_cache():
    """Process-wide cache holding the journal fallback mirror."""
    global _local_cache
    if _local_cache is None:
        _local_cache = create_cache(settings.redis_url)
    return _local_cache


def get_record_store(session: Annotated[Session, Depends(get_session)]) -> RecordStore:
    """The remote record store selected by ``RECORD_STORE_BACKEND``."""
    if settings.record_store_backend == "supabase":
        global _supabase_store
        if _supabase_store is None:
            _supabase_store = SupabaseRecordStore(
                settings.supabase_url,
                settings.supabase_service_key,
                table=settings.supabase_table,
                timeout=settings.remote_timeout_seconds,
            )
        return _supabase_store
    return SqlRecordStore(session)


def close_record_store() -> None:
    """Release the shared remote store client, if one was created."""
    global _supabase_store
    if _supabase_store is not None:
        _supabase_store.close()
        _supabase_store = None
        logger.info("Record store HTTP client closed")


def get_journal_service(
    store: Annotated[RecordStore, Depends(get_record_store)],
    cache: Annotated[object, Depends(get_local_cache)],
) -> JournalService:
    return JournalService(JournalRepository(store, LocalEntryCache(cache)))


CurrentUser = Annotated[User, Depends(get_current_user)]
JournalUser = Annotated[User, Depends(require_tier(settings.journal_required_tier))]
JournalServiceDep = Annotated[JournalService, Depends(get_journal_service)]
