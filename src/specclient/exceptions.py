"""Exception hierarchy for specclient.

All exceptions raised by specclient itself inherit from
:class:`SpecclientError`, which carries an ``exit_code`` attribute mapped to
a constant from :mod:`specclient.exit_codes`. The top-level error handler in
:func:`specclient.app.main` catches ``SpecclientError`` and exits with the
appropriate code, while unexpected exceptions produce a crash log and exit
with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    SpecclientError (exit 1)
    +-- InvalidUsageError            (exit 2)
    +-- ConfigError                  (exit 1)
    +-- DocumentError                (exit 7)
    |   +-- UnsupportedFileError     (exit 2)
    |   +-- ReferenceResolutionError (exit 7)
    +-- MissingOperationIdError      (exit 8)
    +-- OperationNotFoundError       (exit 2, also a KeyError)
    +-- ValidationError              (exit 9)
        +-- QueryValidationError
        +-- ParamsValidationError
        +-- BodyValidationError
            +-- RequestBodyValidationError

Transport failures are *not* wrapped: :data:`TransportError` is
:class:`httpx.TransportError`, re-exported here so callers can catch it
without importing httpx.
"""

from __future__ import annotations

from typing import Iterable

import httpx

from specclient.exit_codes import (
    EXIT_DOCUMENT_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_MISSING_OPERATION_ID,
    EXIT_VALIDATION_ERROR,
)

TransportError = httpx.TransportError


class SpecclientError(Exception):
    """Base exception for all specclient errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`specclient.exit_codes`.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        self.message = message
        if exit_code is not None:
            self.exit_code = exit_code

    def __str__(self) -> str:
        return self.message


class InvalidUsageError(SpecclientError):
    """Raised for invalid CLI arguments (malformed JSON options, bad targets)."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(SpecclientError):
    """Raised for configuration problems (invalid project config JSON)."""

    exit_code = EXIT_GENERIC_FAILURE


class DocumentError(SpecclientError):
    """Raised when the API description cannot be loaded, parsed, or validated."""

    exit_code = EXIT_DOCUMENT_ERROR


class UnsupportedFileError(DocumentError):
    """Raised for input or output files whose extension is not supported."""

    exit_code = EXIT_INVALID_USAGE


class ReferenceResolutionError(DocumentError):
    """Raised by strict resolution when a ``$ref`` target does not exist."""


class MissingOperationIdError(SpecclientError):
    """Raised when an export requires ``operationId`` and some operations lack one.

    Args:
        routes: ``"METHOD /path"`` labels of every operation without an
            identifier.
    """

    exit_code = EXIT_MISSING_OPERATION_ID

    def __init__(self, routes: Iterable[str]):
        self.routes = list(routes)
        super().__init__(
            "operationId is required for export; missing on: "
            + ", ".join(self.routes)
        )


class OperationNotFoundError(SpecclientError, KeyError):
    """Raised when an operation identifier or route is not registered."""

    exit_code = EXIT_INVALID_USAGE


class ValidationError(SpecclientError):
    """Base class for caller-input validation failures.

    Args:
        violations: Messages reported by the validation engine, in the
            order it produced them.
    """

    exit_code = EXIT_VALIDATION_ERROR
    stage = "input"

    def __init__(self, violations: Iterable[str]):
        self.violations = list(violations)
        super().__init__(f"Invalid {self.stage}: " + "; ".join(self.violations))


class QueryValidationError(ValidationError):
    """The caller's ``query`` mapping violates the synthesized query schema."""

    stage = "query"


class ParamsValidationError(ValidationError):
    """The caller's ``params`` mapping violates the synthesized path schema."""

    stage = "params"


class BodyValidationError(ValidationError):
    """The caller's ``body`` violates the schema synthesized from body/formData parameters."""

    stage = "body"


class RequestBodyValidationError(BodyValidationError):
    """The caller's ``body`` violates the ``requestBody`` schema for the selected content type."""

    stage = "request body"
