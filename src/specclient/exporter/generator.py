"""Generate a standalone async client module from extracted operations.

The generated module needs neither the parser nor the registry at run
time. It reproduces the live pipeline by embedding:

* each exported operation's method, path, synthesized schemas and declared
  request-body content as literal data (the ``OPERATIONS`` table);
* the source of the request-building helpers from
  :mod:`specclient.runtime`, copied with :func:`inspect.getsource`, so the
  generated client validates, encodes and builds URLs with the very same
  code as :class:`~specclient.client.invoker.Invoker`;
* one ``async`` callable per operation, named after its ``operationId``.

Rendering uses the Jinja2 template ``templates/client.py.j2``.
"""

from __future__ import annotations

import inspect
import keyword
import pprint
import re
from pathlib import Path
from typing import Any, Iterable

from jinja2 import Environment, FileSystemLoader, select_autoescape

from specclient import __version__, runtime
from specclient.exceptions import MissingOperationIdError
from specclient.models import ExportArtifact, ExportOptions, OperationSpec
from specclient.output import debug

TEMPLATE_DIR = Path(__file__).parent / "templates"
"""Path to the Jinja2 template directory (``exporter/templates/``)."""

_INVALID_IDENT_RE = re.compile(r"[^0-9a-zA-Z_]")
_MULTI_UNDERSCORE_RE = re.compile(r"_+")

# Names the generated module or class already binds.
_MODULE_RESERVED = frozenset(
    runtime.EMBEDDED_HELPERS
    + runtime.VALIDATION_HELPERS
    + (
        "OPERATIONS",
        "VALIDATE",
        "DEFAULT_HEADERS",
        "ValidationError",
        "QueryValidationError",
        "ParamsValidationError",
        "BodyValidationError",
        "RequestBodyValidationError",
        "Any",
        "Optional",
        "functools",
        "httpx",
        "json",
        "jsonschema",
        "quote",
        "urlencode",
        "annotations",
        "_send",
    )
)
_CLASS_RESERVED = frozenset({"headers", "aclose", "_client", "_send"})


def export_client(
    operations: Iterable[OperationSpec],
    options: ExportOptions,
    title: str = "API",
) -> ExportArtifact:
    """Render a standalone client for every operation with an ``operationId``.

    Args:
        operations: Extracted operations in document order.
        options: Export switches.
        title: API title used in the generated docstrings.

    Returns:
        The frozen :class:`~specclient.models.ExportArtifact`.

    Raises:
        MissingOperationIdError: If ``options.require_operation_ids`` is set
            and any operation lacks an identifier.
    """
    operations = list(operations)
    missing = [op.label for op in operations if not op.operation_id]
    if missing and options.require_operation_ids:
        raise MissingOperationIdError(missing)
    for label in missing:
        debug(f"Skipping {label}: no operationId")

    # Duplicate identifiers: the later operation wins, as in the registry.
    exported: dict[str, OperationSpec] = {}
    for op in operations:
        if op.operation_id:
            exported[op.operation_id] = op

    reserved = _MODULE_RESERVED if options.module else _CLASS_RESERVED
    names = _callable_names(exported, reserved)

    context = {
        "version": __version__,
        "title": _docstring_text(title) or "API",
        "options": options,
        "requirements": _requirements(exported.values(), options),
        "helpers": _helper_sources(options.validation),
        "operations_literal": _literal(
            {
                operation_id: {
                    "method": op.method.value,
                    "path": op.path,
                    "schemas": op.schemas.model_dump(exclude_none=True),
                    "request_content": (
                        op.request_body.content if op.request_body else None
                    ),
                }
                for operation_id, op in exported.items()
            }
        ),
        "callables": [
            {
                "name": names[operation_id],
                "operation_id": operation_id,
                "label": op.label,
                "summary": _docstring_text(op.summary or op.description or ""),
                "deprecated": op.deprecated,
            }
            for operation_id, op in exported.items()
        ],
    }

    code = _create_jinja_env().get_template("client.py.j2").render(**context)

    return ExportArtifact(
        requirements=tuple(context["requirements"]),
        code=code,
        operation_ids=tuple(exported),
    )


def _create_jinja_env() -> Environment:
    """Jinja2 environment for Python source templates (no escaping)."""
    return Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(disabled_extensions=("py.j2",)),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def _requirements(
    operations: Iterable[OperationSpec], options: ExportOptions
) -> list[str]:
    """Distributions the generated module imports, in a fixed order."""
    requirements = ["httpx"]
    if options.validation:
        requirements.append("jsonschema")
    if any(runtime.is_xml(ct) for op in operations for ct in op.content_types):
        requirements.append("xmltodict")
    return requirements


def _helper_sources(validation: bool) -> list[str]:
    names = runtime.EMBEDDED_HELPERS
    if validation:
        names = names + runtime.VALIDATION_HELPERS
    return [
        inspect.getsource(inspect.unwrap(getattr(runtime, name))).rstrip()
        for name in names
    ]


def _literal(value: Any) -> str:
    return pprint.pformat(value, width=88, sort_dicts=False)


def python_identifier(operation_id: str) -> str:
    """Turn an ``operationId`` into a valid Python identifier.

    Valid identifiers are kept as they are, so ``getPetById`` stays
    ``getPetById``. Otherwise invalid characters become underscores, runs of
    underscores collapse, a leading digit gets an ``op_`` prefix and a
    keyword gets a trailing underscore.

    Examples::

        >>> python_identifier("pets.list-all")
        'pets_list_all'
        >>> python_identifier("2fa")
        'op_2fa'
        >>> python_identifier("import")
        'import_'
    """
    name = operation_id
    if not name.isidentifier():
        name = _INVALID_IDENT_RE.sub("_", name)
        name = _MULTI_UNDERSCORE_RE.sub("_", name).strip("_") or "operation"
        if name[0].isdigit():
            name = f"op_{name}"
    if keyword.iskeyword(name):
        name = f"{name}_"
    return name


def _callable_names(
    operations: dict[str, OperationSpec], reserved: frozenset[str]
) -> dict[str, str]:
    """Map each identifier to a unique callable name."""
    taken: set[str] = set(reserved)
    names: dict[str, str] = {}
    for operation_id in operations:
        base = python_identifier(operation_id)
        if base.startswith("__"):
            base = base.lstrip("_") or "operation"
        name = base
        while name in taken:
            name = f"{name}_"
        taken.add(name)
        names[operation_id] = name
    return names


def _docstring_text(text: str) -> str:
    """First line of *text*, safe inside a triple-quoted docstring."""
    line = text.strip().splitlines()[0] if text.strip() else ""
    return line.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
