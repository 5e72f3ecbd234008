import hashlib
import secrets
from datetime import datetime, timedelta
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session, joinedload

from untrivially.core.config import settings
from untrivially.core.log import get_logger
from untrivially.models.session_db.refresh_token_db import RefreshToken
from untrivially.models.user_db.user_db import User

log = get_logger(__name__)

TOKEN_BYTES = 40


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _freshness_cutoff() -> Optional[datetime]:
    if not settings.REFRESH_TOKEN_EXPIRE_DAYS:
        return None
    return datetime.utcnow() - timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)


def create_refresh_token(db: Session, user_id: UUID, user_agent: Optional[str], ip_address: Optional[str]) -> str:
    """
    Persists a new session for `user_id` and returns the raw refresh token.

    Only the sha256 of the token is stored; the raw value goes back to the
    caller for transport and is never written anywhere. Sessions of the same
    user that are past the refresh lifetime are purged in the same commit.
    """
    cutoff = _freshness_cutoff()
    if cutoff is not None:
        purged = (
            db.query(RefreshToken)
            .filter(RefreshToken.user_id == user_id, RefreshToken.created_at < cutoff)
            .delete(synchronize_session=False)
        )
        if purged:
            log.info("stale refresh tokens purged", extra={"user_id": str(user_id), "count": purged})

    refresh_token = secrets.token_hex(TOKEN_BYTES)
    db.add(
        RefreshToken(
            user_id=user_id,
            hashed_token=hash_token(refresh_token),
            user_agent=user_agent,
            ip_address=ip_address,
        )
    )
    db.commit()
    return refresh_token


def find_refresh_token(db: Session, token: str) -> Optional[RefreshToken]:
    query = (
        db.query(RefreshToken)
        .options(joinedload(RefreshToken.user))
        .filter(RefreshToken.hashed_token == hash_token(token))
    )
    cutoff = _freshness_cutoff()
    if cutoff is not None:
        query = query.filter(RefreshToken.created_at >= cutoff)
    return query.first()


def delete_refresh_token(db: Session, token: str) -> int:
    # hashed_token is unique, so this removes at most one row
    count = (
        db.query(RefreshToken)
        .filter(RefreshToken.hashed_token == hash_token(token))
        .delete(synchronize_session=False)
    )
    db.commit()
    return count


def rotate_refresh_token(
    db: Session, token: str, user_agent: Optional[str], ip_address: Optional[str]
) -> Optional[Tuple[User, str]]:
    """
    Exchanges a refresh token for a new one bound to the same user.

    The old record is removed with a delete scoped to its id; only the
    request whose delete actually removed the row gets a new token, so two
    concurrent requests presenting the same token cannot both rotate it.

    Returns:
        (user, new_raw_token), or None when the token is unknown, stale,
        already rotated or lost the race.
    """
    record = find_refresh_token(db, token)
    if record is None:
        log.warning("refresh token not found")
        return None

    user = record.user
    user_id = user.id
    deleted = (
        db.query(RefreshToken)
        .filter(RefreshToken.id == record.id, RefreshToken.hashed_token == record.hashed_token)
        .delete(synchronize_session=False)
    )
    if deleted != 1:
        db.rollback()
        log.warning("refresh token consumed concurrently", extra={"user_id": str(user_id)})
        return None

    new_token = create_refresh_token(db, user_id, user_agent, ip_address)
    log.info("refresh token rotated", extra={"user_id": str(user_id)})
    return user, new_token


def list_refresh_tokens(db: Session, user_id: UUID) -> List[RefreshToken]:
    query = db.query(RefreshToken).filter(RefreshToken.user_id == user_id)
    cutoff = _freshness_cutoff()
    if cutoff is not None:
        query = query.filter(RefreshToken.created_at >= cutoff)
    return query.order_by(RefreshToken.created_at.desc()).all()


def revoke_refresh_token(db: Session, user_id: UUID, session_id: UUID) -> int:
    count = (
        db.query(RefreshToken)
        .filter(RefreshToken.id == session_id, RefreshToken.user_id == user_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    return count


def revoke_user_refresh_tokens(db: Session, user_id: UUID, except_hash: Optional[str] = None) -> int:
    query = db.query(RefreshToken).filter(RefreshToken.user_id == user_id)
    if except_hash:
        query = query.filter(RefreshToken.hashed_token != except_hash)
    count = query.delete(synchronize_session=False)
    db.commit()
    log.info("user sessions revoked", extra={"user_id": str(user_id), "count": count})
    return count
