from fastapi import Depends, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import ValidationError

from shared.utils.app_status_code import AppStatusCode
from shared.core.config import settings
from shared.helpers.json_response_helper import error_response
from shared.core.schemas import UserToken

security = HTTPBearer()


def verify_token(token: str) -> UserToken:
    """Decode a JWT issued by the auth service."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET,
                             algorithms=[settings.JWT_ALGORITHM])
        return UserToken(**payload)
    except ExpiredSignatureError:
        return error_response(
            message="Invalid or expired token",
            status_code=AppStatusCode.AUTHENTICATION_TOKEN_EXPIRED,
            http_status=status.HTTP_401_UNAUTHORIZED
        )
    except (JWTError, ValidationError):
        return error_response(
            message="Invalid token structure",
            status_code=AppStatusCode.AUTHENTICATION_TOKEN_INVALID,
            http_status=status.HTTP_401_UNAUTHORIZED
        )


def validate_current_token(
    credentials: HTTPAuthorizationCredentials = Depends(security),
):
    user_data = verify_token(credentials.credentials)

    if user_data.status and user_data.status.lower() != "active":
        return error_response(
            message="User is not active. Access denied",
            status_code=AppStatusCode.AUTHENTICATION_FORBIDDEN,
            http_status=403
        )
    return user_data


def require_org(current_user: UserToken = Depends(validate_current_token)):
    if current_user.org_id is None:
        return error_response(
            message="Access forbidden: no organization on token",
            status_code=AppStatusCode.AUTHENTICATION_FORBIDDEN,
            http_status=403
        )
    return current_user


def allow_admin(current_user: UserToken = Depends(require_org)):
    if current_user.account_type.lower() != "organization":
        return error_response(
            message="Access forbidden: Admins only",
            status_code=AppStatusCode.AUTHENTICATION_FORBIDDEN,
            http_status=403
        )

    return current_user
