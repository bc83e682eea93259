# src/adminportal/shared/http/public_paths.py
PUBLIC_PATHS = {
    "/health",
    "/docs",
    "/openapi.json",
    "/favicon.ico",
    "/api/auth/login",
}

# machine-to-machine surface, guarded per route by the API key gate
EXTERNAL_API_PREFIX = "/api/external"


def _matches(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix.rstrip("/") + "/")


def is_public_path(path: str) -> bool:
    """Check if a path is public and doesn't require authentication."""
    return any(_matches(path, public_path) for public_path in PUBLIC_PATHS)


def is_external_api_path(path: str) -> bool:
    return _matches(path, EXTERNAL_API_PREFIX)
