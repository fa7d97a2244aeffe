"""API description parser -- load, resolve ``$ref`` pointers, and extract operations.

This sub-package turns a raw Swagger 2 / OpenAPI 3 document (inline mapping,
JSON or YAML file, remote URL, or stdin) into a
:class:`~specclient.models.ParsedDocument` that both the operation registry
and the exporter consume.

Typical usage::

    from specclient.parser import parse_document

    parsed = parse_document("https://petstore3.swagger.io/api/v3/openapi.json")
    for op in parsed.operations:
        print(op.label, op.operation_id)

Sub-modules:

* :mod:`~specclient.parser.loader` -- I/O layer plus format detection and
  version validation.
* :mod:`~specclient.parser.resolver` -- Reference resolution with a
  lenient/strict policy and cycle cutting.
* :mod:`~specclient.parser.extractor` -- Walks the resolved document and
  produces :class:`~specclient.models.OperationSpec` objects with their
  synthesized schemas.
"""

from __future__ import annotations

from specclient.models import ParsedDocument
from specclient.parser.extractor import extract_operations
from specclient.parser.loader import DocumentSource, load_document, validate_document
from specclient.parser.resolver import ResolutionPolicy, resolve_references


def parse_document(
    source: DocumentSource,
    policy: ResolutionPolicy | str = ResolutionPolicy.LENIENT,
) -> ParsedDocument:
    """Load, validate, resolve and extract *source* in one pass.

    Raises:
        DocumentError: If the document cannot be loaded or is not a
            Swagger 2 / OpenAPI 3 description.
        ReferenceResolutionError: Under the strict policy, for dangling
            references.
    """
    raw = load_document(source)
    version = validate_document(raw)
    resolved = resolve_references(raw, policy)
    return ParsedDocument(
        document=resolved,
        version=version,
        operations=extract_operations(resolved),
    )


__all__ = [
    "ResolutionPolicy",
    "extract_operations",
    "load_document",
    "parse_document",
    "resolve_references",
    "validate_document",
]
