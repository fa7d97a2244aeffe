"""Built-in CLI commands: ``export``, ``inspect`` and ``call``.

Each command loads the API description itself and converts
:class:`~specclient.exceptions.SpecclientError` (and httpx transport
failures) into an error line on stderr plus the matching exit code.
"""

from __future__ import annotations

import contextlib
from typing import Iterator

import httpx
import typer

from specclient.exceptions import MissingOperationIdError, SpecclientError
from specclient.exit_codes import EXIT_CONNECTION_ERROR
from specclient.output import error, suggest


@contextlib.contextmanager
def cli_errors() -> Iterator[None]:
    """Map library errors raised inside the block to ``typer.Exit``."""
    try:
        yield
    except MissingOperationIdError as exc:
        error(str(exc))
        suggest("Add operationId to each operation, or pass --skip-missing-ids")
        raise typer.Exit(code=exc.exit_code) from None
    except SpecclientError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    except httpx.TransportError as exc:
        error(f"Connection failed: {exc}")
        raise typer.Exit(code=EXIT_CONNECTION_ERROR) from None
