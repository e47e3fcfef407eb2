from typing import Any, Dict, List, Optional

from shared.utils.app_status_code import AppStatusCode


class LeaseServiceError(Exception):
    """Base class for errors raised by the lease engine."""

    status_code = AppStatusCode.OPERATION_FAILED
    http_status = 400

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class LeaseValidationError(LeaseServiceError):
    """Caller input is malformed; generation does not proceed."""

    status_code = AppStatusCode.LEASE_VALIDATION_FAILED
    http_status = 422

    def __init__(self, issues: List[Dict[str, str]]):
        self.issues = issues
        message = "; ".join(f"{i['field']}: {i['message']}" for i in issues)
        super().__init__(message, details=issues)


class NotFoundError(LeaseServiceError):
    status_code = AppStatusCode.NOT_FOUND
    http_status = 404


class TemplateNotAssociated(LeaseServiceError):
    status_code = AppStatusCode.TEMPLATE_NOT_ASSOCIATED
    http_status = 409


class RenderFailure(LeaseServiceError):
    status_code = AppStatusCode.LEASE_RENDER_FAILED
    http_status = 502


class SignatureStateConflict(LeaseServiceError):
    status_code = AppStatusCode.SIGNATURE_STATE_CONFLICT
    http_status = 409


class LifecycleTransitionError(LeaseServiceError):
    status_code = AppStatusCode.LIFECYCLE_TRANSITION_INVALID
    http_status = 409


class SigningLinkExpired(LeaseServiceError):
    status_code = AppStatusCode.SIGNING_LINK_EXPIRED
    http_status = 410


class SignerNotAuthorized(LeaseServiceError):
    status_code = AppStatusCode.AUTHENTICATION_FORBIDDEN
    http_status = 403
