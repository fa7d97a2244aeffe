"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specclient.exceptions.SpecclientError` subclass.
Shell wrappers and CI jobs can branch on the exit code without parsing
stderr.

Example::

    $ specclient export petstore.json --target stdout
    $ echo $?
    8   # EXIT_MISSING_OPERATION_ID -- some operation has no operationId
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""Invalid arguments, or an input/output file with an unsupported extension."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_DOCUMENT_ERROR = 7
"""The API description could not be loaded, parsed, or validated."""

EXIT_MISSING_OPERATION_ID = 8
"""An export was requested but at least one operation lacks an ``operationId``."""

EXIT_VALIDATION_ERROR = 9
"""Caller-supplied params, query, or body failed schema validation."""
