"""syncappend exception classes."""

from __future__ import annotations

from typing import Optional

# Fixed code reported when the account is already over its storage quota.
QUOTA_EXCEEDED_CODE = 8001

# Code used by the bundled runner when an import fails for an unclassified reason.
UNKNOWN_ERROR_CODE = 99999


class SyncAppendError(Exception):
    """Base exception for all syncappend errors."""

    pass


class QuotaExceededError(SyncAppendError):
    """Raised when an append is refused because storage quota is exhausted."""

    error_code = QUOTA_EXCEEDED_CODE

    def __init__(self, table_name: str) -> None:
        self.table_name = table_name
        super().__init__(f"Storage quota exceeded, '{table_name}' was not appended")


class CatalogError(SyncAppendError):
    """Raised when a table's schema cannot be introspected or altered."""

    def __init__(self, table_name: str, message: str) -> None:
        self.table_name = table_name
        super().__init__(f"Catalog error on '{table_name}': {message}")


class CastError(SyncAppendError):
    """Raised when a column cannot be converted without losing values."""

    def __init__(self, table_name: str, column_name: str, target_type: str, message: str) -> None:
        self.table_name = table_name
        self.column_name = column_name
        self.target_type = target_type
        super().__init__(
            f"Cannot cast '{table_name}.{column_name}' to {target_type}: {message}"
        )


class MoveError(SyncAppendError):
    """Raised when the bulk copy from staging into the destination fails."""

    def __init__(self, destination: str, staging: str, original_error: Exception) -> None:
        self.destination = destination
        self.staging = staging
        self.original_error = original_error
        super().__init__(
            f"Failed to move rows from '{staging}' into '{destination}': {original_error}"
        )


class FinalizationError(SyncAppendError):
    """Raised (and reported, never propagated) when a post-append step fails."""

    def __init__(self, step: str, original_error: Exception) -> None:
        self.step = step
        self.original_error = original_error
        super().__init__(f"Finalization step '{step}' failed: {original_error}")


class AppendError(SyncAppendError):
    """The single public failure signal of an append.

    The underlying exception is chained as ``__cause__`` and kept on ``cause``.
    """

    def __init__(self, table_name: str, cause: Optional[BaseException] = None) -> None:
        self.table_name = table_name
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Append into '{table_name}' failed{detail}")
