"""Extract operations, parameters, and request bodies from resolved documents.

This module walks a fully reference-resolved Swagger 2 / OpenAPI 3 document
and builds one :class:`~specclient.models.OperationSpec` per path + method
pair, each carrying its synthesized :class:`~specclient.models.SchemaSet`.

The public entry point is :func:`extract_operations`. Version differences
are smoothed over here so the rest of the package sees one shape:

* Swagger 2 ``formData`` parameters become ``body`` declarations, and the
  operation's ``consumes`` list becomes its request-body content types.
* Swagger 2 ``in: body`` parameters become the request-body declaration.
* Swagger 2 parameters carrying their type inline (no ``schema`` key) have
  their JSON-Schema keywords lifted into a schema fragment.

Parameter merging follows the OpenAPI specification: path-level parameters
provide defaults, and operation-level parameters override them when they
share the same ``name`` and ``in`` values.
"""

from __future__ import annotations

from typing import Any, Optional

from specclient.models import (
    HTTPMethod,
    OperationSpec,
    ParameterDeclaration,
    ParameterLocation,
    RequestBodyDeclaration,
)
from specclient.schema import synthesize_schemas

_HTTP_METHODS = {m.value: m for m in HTTPMethod}

# JSON-Schema keywords a Swagger 2 non-body parameter may carry inline.
_INLINE_SCHEMA_KEYS = (
    "type",
    "format",
    "items",
    "enum",
    "default",
    "minimum",
    "maximum",
    "exclusiveMinimum",
    "exclusiveMaximum",
    "minLength",
    "maxLength",
    "pattern",
    "minItems",
    "maxItems",
    "uniqueItems",
    "multipleOf",
)

_LOCATION_ALIASES = {"formData": ParameterLocation.BODY}

_DEFAULT_CONSUMES = ["application/json"]
_DEFAULT_FORM_CONSUMES = ["application/x-www-form-urlencoded"]


def extract_operations(document: dict[str, Any]) -> list[OperationSpec]:
    """Extract every operation from a resolved document's ``paths``.

    Paths and methods are visited in document order. Keys of a path item
    that are not HTTP methods (``parameters``, ``summary``, extensions) are
    skipped.

    Args:
        document: A document already passed through
            :func:`~specclient.parser.resolver.resolve_references`.

    Returns:
        A list of :class:`~specclient.models.OperationSpec` in document
        order.
    """
    paths = document.get("paths") or {}
    global_consumes = document.get("consumes")
    operations: list[OperationSpec] = []

    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue

        path_params = path_item.get("parameters") or []

        for key, operation in path_item.items():
            method = _HTTP_METHODS.get(str(key).lower())
            if method is None or not isinstance(operation, dict):
                continue

            raw_params = _merge_parameters(path_params, operation.get("parameters") or [])
            consumes = operation.get("consumes") or global_consumes

            parameters = _extract_parameters(raw_params)
            request_body = _extract_request_body(
                operation.get("requestBody"), raw_params, consumes
            )

            operations.append(
                OperationSpec(
                    path=path,
                    method=method,
                    operation_id=operation.get("operationId"),
                    summary=operation.get("summary"),
                    description=operation.get("description"),
                    tags=operation.get("tags") or [],
                    deprecated=bool(operation.get("deprecated", False)),
                    parameters=parameters,
                    request_body=request_body,
                    schemas=synthesize_schemas(parameters),
                )
            )

    return operations


def _merge_parameters(
    path_params: list[dict[str, Any]],
    op_params: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Merge path-level and operation-level parameters.

    Operation-level parameters override path-level parameters with the same
    name and location (``in`` field).
    """
    op_keys = {
        (param.get("name", ""), param.get("in", ""))
        for param in op_params
        if isinstance(param, dict)
    }

    merged = [
        param
        for param in path_params
        if isinstance(param, dict)
        and (param.get("name", ""), param.get("in", "")) not in op_keys
    ]
    merged.extend(param for param in op_params if isinstance(param, dict))
    return merged


def _extract_parameters(params_list: list[dict[str, Any]]) -> list[ParameterDeclaration]:
    """Convert raw parameter dicts into :class:`~specclient.models.ParameterDeclaration`.

    Swagger 2 ``in: body`` parameters are left out; they are represented by
    the request-body declaration instead. Unknown ``in`` values produce a
    declaration without a location.
    """
    declarations: list[ParameterDeclaration] = []

    for param in params_list:
        location_str = param.get("in")
        if location_str == "body":
            continue

        declarations.append(
            ParameterDeclaration(
                name=str(param.get("name", "")),
                location=_parse_location(location_str),
                required=bool(param.get("required", False)),
                description=param.get("description"),
                schema=_parameter_schema(param),
            )
        )

    return declarations


def _parse_location(value: Any) -> Optional[ParameterLocation]:
    if value in _LOCATION_ALIASES:
        return _LOCATION_ALIASES[value]
    try:
        return ParameterLocation(value)
    except ValueError:
        return None


def _parameter_schema(param: dict[str, Any]) -> dict[str, Any]:
    """Return the schema fragment of a parameter.

    OpenAPI 3 parameters carry a ``schema``; Swagger 2 non-body parameters
    carry the keywords inline. The Swagger-only ``file`` type becomes a
    binary string so the validation engine understands it.
    """
    schema = param.get("schema")
    if isinstance(schema, dict):
        return dict(schema)

    inline = {key: param[key] for key in _INLINE_SCHEMA_KEYS if key in param}
    if inline.get("type") == "file":
        inline["type"] = "string"
        inline["format"] = "binary"
    return inline


def _extract_request_body(
    body: Optional[dict[str, Any]],
    params_list: list[dict[str, Any]],
    consumes: Optional[list[str]],
) -> Optional[RequestBodyDeclaration]:
    """Build the request-body declaration for either document version.

    OpenAPI 3 ``requestBody.content`` maps each content type to its media
    object's ``schema``. For Swagger 2, an ``in: body`` parameter's schema is
    declared for every ``consumes`` content type (default JSON), and
    ``formData`` parameters declare the ``consumes`` types (default
    URL-encoded form) with an empty schema, since their fields are validated
    through the synthesized ``body`` schema.
    """
    if isinstance(body, dict):
        content = body.get("content") or {}
        return RequestBodyDeclaration(
            required=bool(body.get("required", False)),
            description=body.get("description"),
            content={
                str(content_type): dict((media or {}).get("schema") or {})
                for content_type, media in content.items()
            },
        )

    for param in params_list:
        if param.get("in") == "body":
            schema = dict(param.get("schema") or {})
            return RequestBodyDeclaration(
                required=bool(param.get("required", False)),
                description=param.get("description"),
                content={
                    content_type: schema
                    for content_type in consumes or _DEFAULT_CONSUMES
                },
            )

    if any(param.get("in") == "formData" for param in params_list):
        return RequestBodyDeclaration(
            content={
                content_type: {}
                for content_type in consumes or _DEFAULT_FORM_CONSUMES
            }
        )

    return None
