"""tablestate exception hierarchy.

All tablestate exceptions inherit from TableStateException. They are only
raised for configuration mistakes made when an engine or controller is
built; user operations on a live engine are ignored instead of raising.
"""

from __future__ import annotations

from typing import Any


class TableStateException(Exception):
    """Base exception for all tablestate errors."""

    def __init__(self, message: str, **context: Any) -> None:
        """Initialize tablestate exception.

        Parameters
        ----------
        message : str
            Human-readable error message.
        **context : Any
            Additional context (column key, page size, etc.).
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """Format exception with context."""
        if self.context:
            ctx = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx})"
        return self.message


class SchemaError(TableStateException):
    """Column schema is invalid.

    Raised for duplicate or empty column keys, and for an initial sort
    state that points at a column which cannot be sorted.
    """

    def __init__(self, message: str, key: str | None = None, **context: Any) -> None:
        """Initialize schema error.

        Parameters
        ----------
        message : str
            Human-readable error message.
        key : str, optional
            The column key that caused the error.
        **context : Any
            Additional context.
        """
        super().__init__(message, key=key, **context)
        self.key = key


class PaginationError(TableStateException):
    """Pagination configuration is invalid.

    Raised when the allowed page sizes are empty or non-positive, or when
    the initial page size is not one of them.
    """

    def __init__(
        self,
        message: str,
        page_size: int | None = None,
        allowed: tuple[int, ...] | None = None,
        **context: Any,
    ) -> None:
        """Initialize pagination error.

        Parameters
        ----------
        message : str
            Human-readable error message.
        page_size : int, optional
            The offending page size.
        allowed : tuple of int, optional
            The allowed page sizes.
        **context : Any
            Additional context.
        """
        super().__init__(message, page_size=page_size, allowed=allowed, **context)
        self.page_size = page_size
        self.allowed = allowed


class OwnershipError(TableStateException):
    """A state slot was configured incorrectly.

    Raised when an externally owned slot has no change callback.
    """

    def __init__(self, message: str, slot: str | None = None, **context: Any) -> None:
        """Initialize ownership error.

        Parameters
        ----------
        message : str
            Human-readable error message.
        slot : str, optional
            Name of the state slice (selection, sort, ...).
        **context : Any
            Additional context.
        """
        super().__init__(message, slot=slot, **context)
        self.slot = slot
