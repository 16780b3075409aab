"""
API key authentication for the PDF Render Service.

Clients send the key in the `X-API-KEY` header (name configurable via
`security.api_key_header`). The accepted key is read from the environment
variable named by `security.api_key_env_var` on every request, so rotating
the key only needs a new environment, not a new config file.
"""
import os
import secrets
from typing import Optional

from fastapi import Security
from fastapi.security import APIKeyHeader

from pdf_render_service.core.config import get_config
from pdf_render_service.core.exceptions import AuthenticationError
from pdf_render_service.core.logger import get_logger

logger = get_logger(__name__)

API_KEY_MISSING_MESSAGE = "API Key is missing"
UNAUTHORIZED_MESSAGE = "Unauthorized client"

API_KEY_HEADER_NAME = get_config("security.api_key_header", "X-API-KEY")
API_KEY_ENV_VAR = get_config("security.api_key_env_var", "API_KEY")

# auto_error=False: the 401 bodies are produced by our own exception handler.
api_key_header = APIKeyHeader(name=API_KEY_HEADER_NAME, auto_error=False, description="API Key Authentication")


def get_expected_api_key() -> Optional[str]:
    return os.getenv(API_KEY_ENV_VAR)


def verify_api_key(provided: Optional[str], expected: Optional[str]) -> None:
    """
    Checks a client-supplied key against the configured one.

    Raises:
        AuthenticationError: "API Key is missing" when no key was sent,
            "Unauthorized client" when no key is configured or the keys differ.
    """
    if provided is None:
        raise AuthenticationError(API_KEY_MISSING_MESSAGE)
    if not expected or not secrets.compare_digest(provided.encode("utf-8"), expected.encode("utf-8")):
        raise AuthenticationError(UNAUTHORIZED_MESSAGE)


async def require_api_key(api_key: Optional[str] = Security(api_key_header)) -> str:
    """FastAPI dependency guarding protected routes."""
    try:
        verify_api_key(api_key, get_expected_api_key())
    except AuthenticationError as e:
        logger.warning(f"Rejected request: {e.message}")
        raise
    return api_key
