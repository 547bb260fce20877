import logging
from contextlib import contextmanager
from typing import Type
import httpx
from botocore.exceptions import BotoCoreError, ClientError
from postgrest.exceptions import APIError
from supabase import AuthError
from models.errors import PoiStoreError

logger = logging.getLogger(__name__)

BACKEND_ERRORS = (APIError, httpx.HTTPError, ClientError, BotoCoreError, AuthError)

# PostgREST / Postgres codes that mean "the row you asked for is not there"
NOT_FOUND_CODES = {"PGRST116"}
PERMISSION_CODES = {"42501", "PGRST301", "PGRST302"}


def describe_backend_error(exc: BaseException) -> str:
    """Short classified description of a backend failure, safe to display."""
    if isinstance(exc, APIError):
        if exc.code in PERMISSION_CODES:
            return "permission denied"
        if exc.code and exc.code.startswith("23"):
            return "constraint violation"
        if exc.code in NOT_FOUND_CODES:
            return "no matching row"
        return "database request failed"
    if isinstance(exc, httpx.TimeoutException):
        return "request timed out"
    if isinstance(exc, httpx.HTTPError):
        return "database unreachable"
    if isinstance(exc, ClientError):
        code = exc.response.get("Error", {}).get("Code", "")
        if code in ("AccessDenied", "403", "Unauthorized"):
            return "storage permission denied"
        if code in ("NoSuchKey", "404", "NoSuchBucket"):
            return "storage object missing"
        return "storage request failed"
    if isinstance(exc, BotoCoreError):
        return "storage unreachable"
    if isinstance(exc, AuthError):
        return "authentication rejected"
    return "unexpected backend error"


@contextmanager
def translate_errors(kind: Type[PoiStoreError], action: str):
    """Re-raise backend library errors as `kind`, keeping the original as cause."""
    try:
        yield
    except BACKEND_ERRORS as e:
        detail = describe_backend_error(e)
        logger.warning(f"{action} failed: {detail} ({type(e).__name__}: {e})")
        raise kind(f"{action} failed: {detail}", cause=e) from e
