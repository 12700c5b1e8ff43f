from fastapi import APIRouter, Depends
import logging

from models.models import Account
from schemas.account_schema import AccountEnvelope, AccountRead, LoginRequest, LoginResponse
from core.errors import ForbiddenError, UnauthenticatedError
from core.store import RecordStore, get_store
from core.validators import normalize_email
from core.security import (
    SessionClaims, get_current_account, get_session_claims,
    issue_session_token, revoke_session, verify_password,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Authentication"])


# ==========================================================
# ✅ Login: portal accounts only
# ==========================================================
@router.post("/login", response_model=LoginResponse)
def login(credentials: LoginRequest, store: RecordStore = Depends(get_store)):
    """Authenticate a portal account and issue a session token"""
    account = store.first(Account, Account.email == normalize_email(credentials.email))

    # Staff members have no portal account, so their credentials land here too
    if not account or not verify_password(credentials.password, account.password_hash):
        raise UnauthenticatedError("Invalid email or password.")

    if not account.is_active:
        raise ForbiddenError("Your account is inactive. Contact your administrator.")

    token = issue_session_token(account)
    logger.info("Login successful for account %s", account.id)

    return LoginResponse(token=token, user=AccountRead.model_validate(account))


# ==========================================================
# ✅ Get Current Authenticated Account
# ==========================================================
@router.get("/me", response_model=AccountEnvelope)
def get_current_account_info(current_account: Account = Depends(get_current_account)):
    """Return the authenticated account without its credential"""
    return AccountEnvelope(user=AccountRead.model_validate(current_account))


# ==========================================================
# ✅ Logout: revoke the presented token
# ==========================================================
@router.post("/logout")
def logout(
    current_account: Account = Depends(get_current_account),
    claims: SessionClaims = Depends(get_session_claims),
    store: RecordStore = Depends(get_store),
):
    revoke_session(store, claims)
    return {"success": True, "message": "Logged out"}
