import time

import pytest
from fastapi import HTTPException
from jose import jwt

from shared.core.auth import allow_admin, require_org, verify_token
from shared.core.config import settings
from shared.core.schemas import UserToken


def _token(**claims):
    payload = {"user_id": "u-1", "account_type": "organization", "status": "active"}
    payload.update(claims)
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def test_verify_token_decodes_claims():
    user = verify_token(_token(org_id="00000000-0000-0000-0000-0000000000aa"))
    assert user.user_id == "u-1"
    assert str(user.org_id).endswith("aa")


def test_expired_token_is_rejected():
    with pytest.raises(HTTPException) as exc:
        verify_token(_token(exp=int(time.time()) - 60))
    assert exc.value.status_code == 401
    assert exc.value.detail["status_code"] == "301"


def test_garbage_token_is_rejected():
    with pytest.raises(HTTPException) as exc:
        verify_token("not-a-jwt")
    assert exc.value.detail["status_code"] == "300"


def test_allow_admin_requires_organization_account():
    tenant = UserToken(user_id="u-2", account_type="tenant")
    with pytest.raises(HTTPException) as exc:
        allow_admin(tenant)
    assert exc.value.status_code == 403


def test_require_org_rejects_token_without_organization():
    with pytest.raises(HTTPException) as exc:
        require_org(UserToken(user_id="u-3", account_type="organization"))
    assert exc.value.status_code == 403
    assert exc.value.detail["status_code"] == "302"
