"""Canonical Pydantic models shared across all specclient modules.

This is the single source of truth for data shapes in the project. The
models fall into three groups:

**Document models** -- produced by the parser from a resolved API
description and consumed by both the operation registry and the exporter:
    :class:`HTTPMethod`, :class:`ParameterLocation`,
    :class:`ParameterDeclaration`, :class:`RequestBodyDeclaration`,
    :class:`SchemaSet`, and :class:`OperationSpec`.

**Configuration models** -- runtime client settings and export switches:
    :class:`ClientConfig`, :class:`ExportOptions`, and
    :class:`ProjectConfig` (the ``./specclient.json`` file).

**Artifacts** -- :class:`ParsedDocument`, the parser's result, and
:class:`ExportArtifact`, the immutable result of an export.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from specclient.runtime import declared_schema


# --- Document models ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised as operation keys of a path item."""

    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"
    HEAD = "head"
    OPTIONS = "options"
    TRACE = "trace"

    @property
    def carries_payload(self) -> bool:
        """Whether requests with this method validate and encode a request body."""
        return self in PAYLOAD_METHODS


PAYLOAD_METHODS = frozenset({HTTPMethod.POST, HTTPMethod.PUT, HTTPMethod.PATCH})


class ParameterLocation(str, enum.Enum):
    """Where a declared parameter travels.

    Swagger 2 ``formData`` parameters are normalised to :attr:`BODY` by the
    extractor, so only these values ever appear on a declaration.
    """

    PATH = "path"
    QUERY = "query"
    BODY = "body"
    HEADER = "header"
    COOKIE = "cookie"


class ParameterDeclaration(BaseModel):
    """One entry of an operation's ``parameters`` list.

    ``location`` is ``None`` when the document omitted ``in``; such
    declarations are kept for inspection but ignored by the synthesizer.
    """

    name: str
    location: Optional[ParameterLocation] = None
    required: bool = False
    description: Optional[str] = None
    schema_: dict[str, Any] = Field(default_factory=dict, alias="schema")

    model_config = {"populate_by_name": True}


class RequestBodyDeclaration(BaseModel):
    """An operation's ``requestBody``: content type -> schema, in document order."""

    required: bool = False
    description: Optional[str] = None
    content: dict[str, dict[str, Any]] = Field(default_factory=dict)

    @property
    def content_types(self) -> list[str]:
        """Declared content types in document order."""
        return list(self.content)

    def schema_for(self, content_type: str) -> Optional[dict[str, Any]]:
        """Return the schema declared for *content_type*, or ``None``.

        Matching ignores case and media-type parameters, so
        ``"application/json; charset=utf-8"`` finds ``"application/json"``.
        """
        return declared_schema(self.content, content_type)


class SchemaSet(BaseModel):
    """Per-operation validation schemas grouped by parameter location.

    Each present fragment has the shape
    ``{"type": "object", "properties": {...}, "required": [...]}``. A missing
    fragment means no parameter was declared in that location.
    """

    query: Optional[dict[str, Any]] = None
    path: Optional[dict[str, Any]] = None
    body: Optional[dict[str, Any]] = None

    def is_empty(self) -> bool:
        return self.query is None and self.path is None and self.body is None


class OperationSpec(BaseModel):
    """A single operation (one path template + HTTP method pair).

    Produced by :func:`~specclient.parser.extractor.extract_operations`
    with its :class:`SchemaSet` already synthesized, so the registry and the
    exporter consume exactly the same schemas.
    """

    path: str
    method: HTTPMethod
    operation_id: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    deprecated: bool = False
    parameters: list[ParameterDeclaration] = Field(default_factory=list)
    request_body: Optional[RequestBodyDeclaration] = None
    schemas: SchemaSet = Field(default_factory=SchemaSet)

    @property
    def route(self) -> tuple[str, HTTPMethod]:
        return (self.path, self.method)

    @property
    def label(self) -> str:
        """Human-readable ``"GET /pet/{petId}"`` label."""
        return f"{self.method.value.upper()} {self.path}"

    @property
    def content_types(self) -> list[str]:
        if self.request_body is None:
            return []
        return self.request_body.content_types


# --- Configuration models ---


class ClientConfig(BaseModel):
    """Shared, read-only configuration of a built client."""

    base_url: str = Field(default="", description="Prefix for every request URL")
    headers: dict[str, str] = Field(
        default_factory=dict, description="Headers sent with every request"
    )
    timeout: float = Field(default=30.0, description="Transport timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class ExportOptions(BaseModel):
    """Switches controlling the generated client source."""

    validation: bool = Field(
        default=False, description="Embed schemas and validate with jsonschema"
    )
    module: bool = Field(
        default=False,
        description="Emit module-level functions instead of a client class",
    )
    typed: bool = Field(default=False, description="Emit type annotations")
    require_operation_ids: bool = Field(
        default=False,
        description="Fail instead of skipping operations without operationId",
    )
    class_name: str = Field(default="Client", description="Generated class name")


class ProjectConfig(BaseModel):
    """Project-local defaults read from ``./specclient.json``."""

    model_config = ConfigDict(extra="ignore")

    base_url: Optional[str] = None
    headers: dict[str, str] = Field(default_factory=dict)
    export: ExportOptions = Field(default_factory=ExportOptions)


# --- Artifacts ---


class ExportArtifact(BaseModel):
    """Generated client source plus the distributions it imports.

    ``requirements`` is ordered: ``httpx`` first, then ``jsonschema`` and
    ``xmltodict`` when the generated code needs them.
    """

    model_config = ConfigDict(frozen=True)

    requirements: tuple[str, ...]
    code: str
    operation_ids: tuple[str, ...] = ()


class ParsedDocument(BaseModel):
    """A loaded, validated and resolved API description with its operations."""

    document: dict[str, Any]
    version: str
    operations: list[OperationSpec] = Field(default_factory=list)

    @property
    def title(self) -> str:
        return str((self.document.get("info") or {}).get("title") or "API")
