"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent and environment-driven configuration for
specclient:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.specclient/`` on macOS and Windows. Only the data directory is used
  (crash logs); see :func:`get_data_dir`.
* **Project config** -- an optional ``./specclient.json`` holding export
  defaults and client settings, parsed into
  :class:`~specclient.models.ProjectConfig`.
* **Precedence resolution** -- :func:`resolve_client_config` and
  :func:`resolve_export_options` merge explicit arguments, environment
  variables, project config, and values derived from the API document.
* **Atomic writes** -- :func:`write_text_atomic` is used for exported
  client files so an interrupted export never leaves a half-written module.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from specclient.exceptions import ConfigError
from specclient.models import ClientConfig, ExportOptions, ProjectConfig

_APP_NAME = "specclient"
_PROJECT_CONFIG_FILENAME = "specclient.json"

ENV_BASE_URL = "SPECCLIENT_BASE_URL"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/specclient/`` (default
    ``~/.local/share/specclient/``). On macOS/Windows: ``~/.specclient/logs/``.
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_DATA_HOME", (".local", "share"))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def write_text_atomic(path: Path, data: str) -> None:
    """Write *data* to *path* atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed and the original file (if any) is left untouched.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Project-local config ---


def load_project_config(directory: Optional[Path] = None) -> ProjectConfig:
    """Load project-local configuration from ``specclient.json``.

    Args:
        directory: Directory to look in. Defaults to the current working
            directory.

    Returns:
        The parsed :class:`~specclient.models.ProjectConfig`, or a default
        instance when the file does not exist.

    Raises:
        ConfigError: If the file exists but is not valid JSON or does not
            match the expected shape.
    """
    path = (directory or Path.cwd()) / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return ProjectConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return ProjectConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError, PydanticValidationError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc


# --- Precedence resolution ---


def derive_base_url(document: dict[str, Any]) -> Optional[str]:
    """Derive a base URL from the API document itself.

    Swagger 2 documents with a ``host`` yield
    ``{scheme}://{host}{basePath}`` where *scheme* is the first entry of
    ``schemes`` (default ``"http"``). OpenAPI 3 documents fall back to the
    first ``servers[].url``.

    Returns:
        The derived URL, or ``None`` when the document declares neither.
    """
    host = document.get("host")
    if host:
        schemes = document.get("schemes") or ["http"]
        base_path = document.get("basePath") or ""
        return f"{schemes[0]}://{host}{base_path}"

    servers = document.get("servers") or []
    if servers and isinstance(servers[0], dict) and servers[0].get("url"):
        return str(servers[0]["url"])

    return None


def resolve_client_config(
    document: dict[str, Any],
    base_url: Optional[str] = None,
    headers: Optional[dict[str, str]] = None,
    timeout: Optional[float] = None,
    verify_ssl: Optional[bool] = None,
    project: Optional[ProjectConfig] = None,
) -> ClientConfig:
    """Resolve the effective :class:`~specclient.models.ClientConfig`.

    Base URL precedence (high to low):
        1. *base_url* argument
        2. ``SPECCLIENT_BASE_URL`` environment variable
        3. Project config ``base_url``
        4. Document-derived URL (:func:`derive_base_url`)
        5. Empty string (relative URLs)

    Headers from the project config are merged under the *headers* argument.
    """
    project = project or ProjectConfig()

    resolved_url = derive_base_url(document) or ""
    if project.base_url:
        resolved_url = project.base_url
    env_url = os.environ.get(ENV_BASE_URL)
    if env_url:
        resolved_url = env_url
    if base_url is not None:
        resolved_url = base_url

    config = ClientConfig(
        base_url=resolved_url,
        headers={**project.headers, **(headers or {})},
    )
    if timeout is not None:
        config.timeout = timeout
    if verify_ssl is not None:
        config.verify_ssl = verify_ssl
    return config


def resolve_export_options(
    project: Optional[ProjectConfig] = None,
    **overrides: Any,
) -> ExportOptions:
    """Merge explicit export switches over the project defaults.

    ``None`` values in *overrides* mean "not given on the command line" and
    keep the project default.
    """
    base = (project or ProjectConfig()).export
    given = {key: value for key, value in overrides.items() if value is not None}
    return base.model_copy(update=given)
