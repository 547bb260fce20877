from typing import Dict, List


class PoiStoreError(Exception):
    """Base class for every failure surfaced by the cache and coordinator."""

    kind = "error"

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class ValidationFailed(PoiStoreError):
    kind = "validation_failed"

    def __init__(self, errors: Dict[str, str], message: str = "Invalid input"):
        super().__init__(message)
        self.errors = errors


class WriteRejected(PoiStoreError):
    kind = "write_rejected"


class NotFound(PoiStoreError):
    kind = "not_found"


class PartialDeleteFailure(PoiStoreError):
    kind = "partial_delete_failure"

    def __init__(
        self,
        message: str,
        completed: List[str] | None = None,
        orphaned_paths: List[str] | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message, cause=cause)
        self.completed = completed or []
        self.orphaned_paths = orphaned_paths or []


class FetchFailed(PoiStoreError):
    kind = "fetch_failed"


class AuthenticationFailed(PoiStoreError):
    kind = "authentication_failed"
