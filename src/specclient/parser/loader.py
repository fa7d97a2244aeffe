"""Load API descriptions from an inline mapping, a URL, a local file, or stdin.

This module handles all I/O for fetching raw OpenAPI / Swagger documents and
converting them into Python dictionaries. It supports both JSON and YAML
with automatic format detection, and validates that the document declares a
supported version (Swagger 2.x or OpenAPI 3.x) and a ``paths`` mapping.

The two public functions are:

* :func:`load_document` -- Load and parse a document from any supported
  source.
* :func:`validate_document` -- Check the document's shape and return its
  version string.

After loading, the raw dict is passed to
:func:`~specclient.parser.extractor.extract_operations`, which resolves
``$ref`` pointers and builds :class:`~specclient.models.OperationSpec`
objects.
"""

from __future__ import annotations

import copy
import json
import sys
from pathlib import Path
from typing import Any, Union

import httpx
import yaml

from specclient.exceptions import DocumentError, UnsupportedFileError

SUPPORTED_EXTENSIONS = (".json", ".yaml", ".yml")

DocumentSource = Union[str, Path, dict]


def load_document(source: DocumentSource) -> dict[str, Any]:
    """Load an API description from a mapping, URL, file path, or stdin (``'-'``).

    Inline mappings are deep-copied so later resolution never touches the
    caller's object.

    Args:
        source: A dict, an ``http(s)://`` URL, a file path, or ``'-'``.

    Returns:
        The parsed document as a dictionary.

    Raises:
        UnsupportedFileError: If a file path has an extension other than
            ``.json``, ``.yaml`` or ``.yml``.
        DocumentError: If the source cannot be loaded or parsed.
    """
    if isinstance(source, dict):
        try:
            json.dumps(source)
        except (TypeError, ValueError) as exc:
            raise DocumentError(f"Document is not JSON-serialisable: {exc}") from exc
        return copy.deepcopy(source)

    if not isinstance(source, (str, Path)):
        raise DocumentError(
            f"Unsupported document source of type {type(source).__name__}"
        )

    text = str(source)
    if text == "-":
        return _load_from_stdin()
    if text.startswith(("http://", "https://")):
        return _load_from_url(text)
    return _load_from_file(text)


def _load_from_stdin() -> dict[str, Any]:
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise DocumentError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise DocumentError("No input received from stdin")

    return _parse_content(content, hint="stdin")


def _load_from_url(url: str) -> dict[str, Any]:
    """Fetch a document over HTTP. Supports JSON and YAML responses."""
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise DocumentError(
            f"HTTP {exc.response.status_code} fetching document from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise DocumentError(f"Failed to fetch document from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"

    return _parse_content(response.text, hint=hint)


def _load_from_file(path: str) -> dict[str, Any]:
    """Load a document from a local ``.json``, ``.yaml`` or ``.yml`` file."""
    file_path = Path(path)
    suffix = file_path.suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        raise UnsupportedFileError(
            f"Unsupported document extension '{suffix or path}'. "
            f"Expected one of: {', '.join(SUPPORTED_EXTENSIONS)}"
        )

    if not file_path.is_file():
        raise DocumentError(f"Document file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise DocumentError(f"Failed to read document {path}: {exc}") from exc

    if not content.strip():
        raise DocumentError(f"Document file is empty: {path}")

    return _parse_content(content, hint="json" if suffix == ".json" else "yaml")


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse content as JSON or YAML.

    Tries JSON first (unless hinted as YAML), then falls back to YAML.
    Valid JSON is also valid YAML, but JSON parsing is stricter and faster.
    """
    json_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise DocumentError(f"Invalid JSON: {exc}") from exc
            json_error = exc
        else:
            return _require_mapping(result)

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        msg = "Failed to parse document as JSON or YAML"
        if json_error:
            msg += f"\n  JSON error: {json_error}"
        msg += f"\n  YAML error: {exc}"
        raise DocumentError(msg) from exc

    return _require_mapping(result)


def _require_mapping(result: Any) -> dict[str, Any]:
    if not isinstance(result, dict):
        got = type(result).__name__ if result is not None else "empty document"
        raise DocumentError(f"Document must be a JSON/YAML object (got {got})")
    return result


def validate_document(document: dict[str, Any]) -> str:
    """Validate the document's top-level shape and return its version string.

    Accepts Swagger 2.x (``swagger: "2.0"``) and OpenAPI 3.x
    (``openapi: "3.x.y"``) documents whose ``paths`` is a mapping.

    Returns:
        The declared version string (e.g. ``"2.0"``, ``"3.0.3"``).

    Raises:
        DocumentError: If the version is missing or unsupported, or
            ``paths`` is missing or not a mapping.
    """
    if not isinstance(document, dict):
        raise DocumentError("Document must be a mapping")

    if "swagger" in document:
        version = str(document["swagger"])
        if not version.startswith("2."):
            raise DocumentError(f"Unsupported Swagger version: {version}")
    elif "openapi" in document:
        version = str(document["openapi"])
        if not version.startswith("3."):
            raise DocumentError(
                f"Unsupported OpenAPI version: {version}. "
                "Only Swagger 2.x and OpenAPI 3.x are supported."
            )
    else:
        raise DocumentError(
            "Missing 'swagger' or 'openapi' field. Is this an API description?"
        )

    paths = document.get("paths")
    if not isinstance(paths, dict):
        raise DocumentError("Document has no 'paths' mapping")

    return version
