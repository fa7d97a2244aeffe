"""Shared test fixtures for specclient.

Provides the API description fixtures, an isolated config environment,
output-state management, a recording ``httpx.MockTransport``, and the CLI
runner. These fixtures are discovered by pytest automatically.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import httpx
import pytest

from specclient.output import OutputFormat, OutputManager, reset_output, set_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Raw document fixtures (plain dicts loaded from JSON files)
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_30_raw() -> dict[str, Any]:
    """Load the raw OpenAPI 3.0 petstore document."""
    with open(FIXTURES_DIR / "petstore_3.0.json") as f:
        return json.load(f)


@pytest.fixture
def swagger_20_raw() -> dict[str, Any]:
    """Load the raw Swagger 2.0 petstore document."""
    with open(FIXTURES_DIR / "swagger_2.0.json") as f:
        return json.load(f)


@pytest.fixture
def petstore_30_path() -> Path:
    return FIXTURES_DIR / "petstore_3.0.json"


@pytest.fixture
def swagger_20_path() -> Path:
    return FIXTURES_DIR / "swagger_2.0.json"


# ---------------------------------------------------------------------------
# Transport fixtures
# ---------------------------------------------------------------------------


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request and answers with a fixed response."""

    def __init__(self, status_code: int = 200, json_body: Any = None) -> None:
        self.requests: list[httpx.Request] = []
        self._status_code = status_code
        self._json_body = json_body if json_body is not None else {"ok": True}
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self._status_code, json=self._json_body)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_DATA_HOME into tmp_path, clears SPECCLIENT_* environment
    variables and changes the working directory to tmp_path so no
    ``specclient.json`` from the developer's checkout leaks in.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.delenv("SPECCLIENT_BASE_URL", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
