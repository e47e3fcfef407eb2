class AppStatusCode:
    # Success
    DATA_RETRIEVED_SUCCESSFULLY = "100"
    CREATED_SUCCESSFULLY = "101"
    UPDATED_SUCCESSFULLY = "102"
    DELETED_SUCCESSFULLY = "103"

    # Generic failures
    OPERATION_FAILED = "200"
    INVALID_INPUT = "201"
    NOT_FOUND = "202"

    # Authentication
    AUTHENTICATION_TOKEN_INVALID = "300"
    AUTHENTICATION_TOKEN_EXPIRED = "301"
    AUTHENTICATION_FORBIDDEN = "302"

    # Lease generation & signing
    LEASE_VALIDATION_FAILED = "400"
    TEMPLATE_NOT_ASSOCIATED = "401"
    LEASE_RENDER_FAILED = "402"
    SIGNATURE_STATE_CONFLICT = "403"
    SIGNING_LINK_EXPIRED = "404"
    LIFECYCLE_TRANSITION_INVALID = "405"
