from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from core.errors import ForbiddenError
from core.security import (
    SECRET_KEY, ensure_organization_access, hash_password, issue_session_token,
    purge_expired_revocations, require_master_admin, require_representative,
    revoke_session, validate_session_token, verify_password,
)
from models.models import AccountRole, RevokedToken


def test_password_hash_round_trip():
    hashed = hash_password("password123")
    assert hashed != "password123"
    assert verify_password("password123", hashed)
    assert not verify_password("password124", hashed)


def test_verify_password_rejects_garbage_hash():
    assert verify_password("password123", "not-a-hash") is False


def test_issued_token_carries_account_claims(make_account):
    account = make_account("rep@techcorp.com")
    claims = validate_session_token(issue_session_token(account))

    assert claims is not None
    assert claims.account_id == account.id
    assert claims.email == "rep@techcorp.com"
    assert claims.role == AccountRole.COMPANY_REPRESENTATIVE.value
    assert claims.expires_at - claims.issued_at == timedelta(hours=24)


def test_token_older_than_a_day_is_rejected(make_account):
    account = make_account("rep@techcorp.com")
    issued = datetime.now(timezone.utc) - timedelta(hours=25)
    assert validate_session_token(issue_session_token(account, issued_at=issued)) is None


def test_token_checked_against_supplied_clock(make_account):
    account = make_account("rep@techcorp.com")
    issued = datetime.now(timezone.utc)
    token = issue_session_token(account, issued_at=issued)

    assert validate_session_token(token, now=issued + timedelta(hours=23)) is not None
    assert validate_session_token(token, now=issued + timedelta(hours=25)) is None


def test_token_signed_with_another_key_is_rejected(make_account):
    account = make_account("rep@techcorp.com")
    genuine = jwt.get_unverified_claims(issue_session_token(account))
    forged = jwt.encode(genuine, "someone-elses-key", algorithm="HS256")

    assert validate_session_token(forged) is None


def test_token_missing_claims_is_rejected():
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {"sub": "1", "exp": int((now + timedelta(hours=1)).timestamp())},
        SECRET_KEY,
        algorithm="HS256",
    )
    assert validate_session_token(token) is None


@pytest.mark.parametrize("token", ["", "abc", "a.b.c"])
def test_malformed_token_is_rejected(token):
    assert validate_session_token(token) is None


def test_revoke_session_is_idempotent(store, make_account):
    account = make_account("rep@techcorp.com")
    claims = validate_session_token(issue_session_token(account))

    revoke_session(store, claims)
    revoke_session(store, claims)

    assert store.count(RevokedToken) == 1


def test_revoking_a_session_drops_expired_revocations(store, make_account):
    account = make_account("rep@techcorp.com")
    now = datetime.now(timezone.utc)
    store.create(RevokedToken, RevokedToken(
        jti="stale", account_id=account.id,
        revoked_at=now - timedelta(days=3), expires_at=now - timedelta(days=2),
    ))

    claims = validate_session_token(issue_session_token(account))
    revoke_session(store, claims)

    assert store.get(RevokedToken, "stale") is None
    assert [r.jti for r in store.list(RevokedToken)] == [claims.jti]


def test_purge_keeps_revocations_that_are_still_live(store, make_account):
    account = make_account("rep@techcorp.com")
    now = datetime(2025, 10, 1, 12, 0, tzinfo=timezone.utc)
    for jti, expires_at in [("old", now - timedelta(minutes=1)), ("live", now + timedelta(hours=5))]:
        store.create(RevokedToken, RevokedToken(jti=jti, account_id=account.id, expires_at=expires_at))

    assert purge_expired_revocations(store, now=now) == 1
    assert [r.jti for r in store.list(RevokedToken)] == ["live"]


def test_require_representative_rejects_admin(make_account):
    admin = make_account("admin@receiptcapture.com", role=AccountRole.MASTER_ADMIN.value)
    with pytest.raises(ForbiddenError):
        require_representative(admin)


def test_organization_access(make_organization, make_account):
    org_a = make_organization("Alpha Ltd")
    org_b = make_organization("Beta Ltd")
    rep_a = make_account("rep@alpha.com", org_a)
    admin = make_account("admin@receiptcapture.com", role=AccountRole.MASTER_ADMIN.value)

    ensure_organization_access(rep_a, org_a.id)
    ensure_organization_access(admin, org_b.id)
    with pytest.raises(ForbiddenError):
        ensure_organization_access(rep_a, org_b.id)


def test_require_master_admin(make_organization, make_account):
    rep = make_account("rep@alpha.com", make_organization("Alpha Ltd"))
    admin = make_account("admin@receiptcapture.com", role=AccountRole.MASTER_ADMIN.value)

    assert require_master_admin(admin) is admin
    with pytest.raises(ForbiddenError):
        require_master_admin(rep)
