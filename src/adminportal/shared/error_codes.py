# src/adminportal/shared/error_codes.py
# Central mapping for the problem-body contract.
# Keep keys stable: API clients branch on these.
ERROR_CODES = {
    # ─── Validation & Requests ──────────────────────────────────────────────
    "validation_error": {
        "http": 422,
        "message": "Validation failed for one or more fields."
    },
    "bad_request": {
        "http": 400,
        "message": "Bad request."
    },

    # ─── Authentication & Authorization ────────────────────────────────────
    "unauthenticated": {
        "http": 401,
        "message": "Not authenticated"
    },
    "authentication_failed": {
        "http": 401,
        "message": "Authentication failed"
    },
    "invalid_credentials": {
        "http": 401,
        "message": "Invalid credentials"
    },
    "forbidden": {
        "http": 403,
        "message": "Forbidden"
    },

    # ─── External API key ──────────────────────────────────────────────────
    "api_key_required": {
        "http": 401,
        "message": "API key is required. Please provide your API key in the x-api-key header."
    },
    "invalid_api_key": {
        "http": 401,
        "message": "Invalid API key"
    },

    # ─── Resources ─────────────────────────────────────────────────────────
    "not_found": {
        "http": 404,
        "message": "Resource not found."
    },
    "method_not_allowed": {
        "http": 405,
        "message": "Method not allowed."
    },
    "conflict": {
        "http": 409,
        "message": "Resource already exists."
    },

    # ─── Server ────────────────────────────────────────────────────────────
    "transaction_failed": {
        "http": 500,
        "message": "The operation was aborted and no changes were applied."
    },
    "server_configuration_error": {
        "http": 500,
        "message": "Server configuration error"
    },
    "internal_error": {
        "http": 500,
        "message": "Internal server error."
    },
}
