# core/security.py
from datetime import datetime, timedelta, timezone
from typing import Optional
from dataclasses import dataclass
import logging
import secrets

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from passlib.context import CryptContext

from core.config import settings
from core.errors import ForbiddenError, NotFoundError, UnauthenticatedError
from core.store import RecordStore, get_store
from models.models import Account, RevokedToken, as_utc, utcnow

logger = logging.getLogger(__name__)


# ========================================
# 🔑 SESSION / APP CONFIG
# ========================================
SECRET_KEY = settings.SECRET_KEY
ALGORITHM = settings.ALGORITHM or "HS256"
SESSION_MAX_AGE = timedelta(hours=settings.SESSION_EXPIRE_HOURS)

bearer_scheme = HTTPBearer(auto_error=False)


# ========================================
# 🔐 Password Hashing (Argon2)
# ========================================
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash password using Argon2."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password using Argon2."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


# ========================================
# 🔑 Session Tokens
# ========================================
@dataclass(frozen=True)
class SessionClaims:
    account_id: int
    email: str
    role: str
    issued_at: datetime
    expires_at: datetime
    jti: str


def issue_session_token(account: Account, issued_at: Optional[datetime] = None) -> str:
    """Sign {account id, email, role, issue time} into a session token."""
    issued = issued_at or datetime.now(timezone.utc)
    if issued.tzinfo is None:
        issued = issued.replace(tzinfo=timezone.utc)

    payload = {
        "sub": str(account.id),
        "email": account.email,
        "role": account.role,
        "iat": int(issued.timestamp()),
        "exp": int((issued + SESSION_MAX_AGE).timestamp()),
        "jti": secrets.token_hex(16),
    }
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def validate_session_token(token: str, now: Optional[datetime] = None) -> Optional[SessionClaims]:
    """
    Decode and check a session token.
    Returns None when the token is malformed, not signed by us,
    or older than the session lifetime.
    """
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None

    try:
        issued_at = datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc)
        expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
        claims = SessionClaims(
            account_id=int(payload["sub"]),
            email=payload["email"],
            role=payload["role"],
            issued_at=issued_at,
            expires_at=expires_at,
            jti=payload["jti"],
        )
    except (KeyError, TypeError, ValueError):
        return None

    current = now or datetime.now(timezone.utc)
    if current - claims.issued_at > SESSION_MAX_AGE or current >= claims.expires_at:
        return None
    return claims


def purge_expired_revocations(store: RecordStore, now: Optional[datetime] = None) -> int:
    """Drop revocation rows for tokens that have expired anyway."""
    cutoff = as_utc(now) if now else utcnow()
    removed = store.delete_where(RevokedToken, RevokedToken.expires_at <= cutoff)
    if removed:
        logger.info("Purged %s expired session revocations", removed)
    return removed


def revoke_session(store: RecordStore, claims: SessionClaims) -> None:
    purge_expired_revocations(store)
    if store.get(RevokedToken, claims.jti) is not None:
        return
    store.create(
        RevokedToken,
        RevokedToken(
            jti=claims.jti,
            account_id=claims.account_id,
            expires_at=claims.expires_at,
        ),
    )
    logger.info("Revoked session %s for account %s", claims.jti[:8], claims.account_id)


# ========================================
# 👤 Authentication
# ========================================
def get_session_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    store: RecordStore = Depends(get_store),
) -> SessionClaims:
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError("No token provided")

    claims = validate_session_token(credentials.credentials)
    if claims is None:
        raise UnauthenticatedError("Invalid or expired token")
    if store.get(RevokedToken, claims.jti) is not None:
        raise UnauthenticatedError("Invalid or expired token")
    return claims


def get_current_account(
    claims: SessionClaims = Depends(get_session_claims),
    store: RecordStore = Depends(get_store),
) -> Account:
    """Load the portal account behind the bearer token."""
    account = store.get(Account, claims.account_id)
    if not account or not account.is_active:
        raise NotFoundError("User not found or inactive")
    return account


# ========================================
# 🛡️ Authorization Gate
# ========================================
def require_representative(account: Account) -> Account:
    """Only an organization's representative may act on its resources."""
    if not account.is_representative or not account.organization_id:
        raise ForbiddenError("Forbidden")
    return account


def get_current_representative(current_account: Account = Depends(get_current_account)) -> Account:
    return require_representative(current_account)


def require_master_admin(account: Account) -> Account:
    if not account.is_master_admin:
        raise ForbiddenError("Forbidden")
    return account


def get_current_master_admin(current_account: Account = Depends(get_current_account)) -> Account:
    return require_master_admin(current_account)


def ensure_organization_access(account: Account, organization_id: int) -> None:
    if account.is_master_admin:
        return
    if account.is_representative and account.organization_id and account.organization_id == organization_id:
        return
    raise ForbiddenError("Forbidden")
