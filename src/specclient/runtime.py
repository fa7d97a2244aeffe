"""Pure request-building helpers shared by live invokers and exported clients.

Every function here is used twice:

* directly, by :class:`~specclient.client.invoker.Invoker` at call time;
* as *source text*, by :mod:`specclient.exporter`, which copies the
  functions listed in :data:`EMBEDDED_HELPERS` (and, when validation is
  requested, :data:`VALIDATION_HELPERS`) verbatim into the generated module
  with :func:`inspect.getsource`.

Because of the second use the functions must stay self-contained: they may
only reference each other, the standard-library names imported below, the
``jsonschema`` module, lazily imported ``xmltodict``, and the four
validation error classes, which every exported module defines itself.
Anything else would be undefined inside an exported client.
"""

from __future__ import annotations

import functools
import json
from typing import Any, Optional
from urllib.parse import quote, urlencode

import jsonschema

from specclient.exceptions import (
    BodyValidationError,
    ParamsValidationError,
    QueryValidationError,
    RequestBodyValidationError,
)


def find_header(headers: Optional[dict], name: str) -> Optional[str]:
    """Case-insensitive header lookup; returns ``None`` when absent."""
    for key, value in (headers or {}).items():
        if key.lower() == name.lower():
            return value
    return None


def merge_headers(base: dict, overrides: Optional[dict]) -> dict:
    """Merge *overrides* over *base*, matching names case-insensitively."""
    merged = {
        key: value
        for key, value in base.items()
        if find_header(overrides, key) is None
    }
    merged.update(overrides or {})
    return merged


def media_type(content_type: str) -> str:
    return content_type.split(";", 1)[0].strip().lower()


def is_xml(content_type: str) -> bool:
    kind = media_type(content_type)
    return kind in ("application/xml", "text/xml") or kind.endswith("+xml")


def select_content_type(declared: list, requested: Optional[str] = None) -> str:
    """Pick the content type a payload-bearing request is encoded with.

    An explicit caller choice always wins. Otherwise the first declared
    content type (document order) is used, falling back to JSON when the
    operation declares none.
    """
    if requested:
        return requested
    if declared:
        return declared[0]
    return "application/json"


def declared_schema(content: Optional[dict], content_type: str) -> Optional[dict]:
    """Return the request-body schema declared for *content_type*, or ``None``.

    Matching ignores case and media-type parameters.
    """
    wanted = media_type(content_type)
    for declared, schema in (content or {}).items():
        if media_type(declared) == wanted:
            return schema or None
    return None


def _form_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def _form_pairs(mapping: Optional[dict]) -> list:
    pairs = []
    for key, value in (mapping or {}).items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            pairs.extend((key, _form_scalar(item)) for item in value)
        else:
            pairs.append((key, _form_scalar(value)))
    return pairs


def build_url(path: str, params: Optional[dict] = None, query: Optional[dict] = None) -> str:
    """Substitute ``{name}`` placeholders and append the query string.

    Placeholders without a matching entry in *params* are left in place
    verbatim. The query string is appended only when *query* is non-empty.
    """
    url = path
    for name, value in (params or {}).items():
        url = url.replace("{" + str(name) + "}", quote(_form_scalar(value), safe=""))
    query_string = urlencode(_form_pairs(query))
    if query_string:
        url = f"{url}?{query_string}"
    return url


def _xml_root(schema: Optional[dict]) -> Optional[str]:
    xml = (schema or {}).get("xml")
    if isinstance(xml, dict) and xml.get("name"):
        return str(xml["name"])
    return None


def _xml_item(schema: Optional[dict]) -> Optional[str]:
    return _xml_root((schema or {}).get("items"))


def encode_body(
    content_type: str,
    body: Any,
    xml_root: Optional[str] = None,
    xml_item: Optional[str] = None,
) -> dict:
    """Encode *body* for *content_type* as keyword arguments for ``httpx``.

    Returns one of ``{"files": [...]}`` (multipart), ``{"content": ...}``
    (URL-encoded form, XML, raw text/bytes) or ``{"json": ...}``. An XML
    list body becomes one ``xml_item`` element per entry under the root.
    """
    kind = media_type(content_type)

    if kind == "multipart/form-data":
        parts = []
        for key, value in (body or {}).items():
            if isinstance(value, tuple):
                parts.append((key, value))
            elif isinstance(value, (bytes, bytearray)) or hasattr(value, "read"):
                parts.append((key, (key, value)))
            else:
                parts.append((key, (None, _form_scalar(value))))
        return {"files": parts}

    if kind == "application/x-www-form-urlencoded":
        if isinstance(body, (str, bytes)):
            return {"content": body}
        return {"content": urlencode(_form_pairs(body))}

    if is_xml(kind):
        if isinstance(body, (str, bytes)):
            return {"content": body}
        import xmltodict

        if isinstance(body, (list, tuple)):
            body = {xml_item or "item": list(body)}
        return {"content": xmltodict.unparse({xml_root or "root": body})}

    if isinstance(body, (str, bytes, bytearray)):
        return {"content": body}
    return {"json": body}


def prepare_request(
    method: str,
    path: str,
    schemas: dict,
    request_content: Optional[dict] = None,
    default_headers: Optional[dict] = None,
    params: Optional[dict] = None,
    query: Optional[dict] = None,
    body: Any = None,
    options: Optional[dict] = None,
    validate: bool = True,
) -> dict:
    """Run the validate and encode stages and return ``httpx`` request arguments.

    Args:
        method: Lower-case HTTP method.
        path: Path template with ``{name}`` placeholders.
        schemas: Synthesized ``query``/``path``/``body`` schemas; a missing
            or ``None`` entry accepts anything.
        request_content: Declared request-body content type -> schema, in
            document order.
        default_headers: Headers sent with every request.
        params, query, body: The caller's values.
        options: Extra ``httpx`` request arguments. Its ``headers`` entry is
            merged last, over the computed ``content-type``.
        validate: Whether to run the validation stages.

    Raises:
        QueryValidationError, ParamsValidationError, BodyValidationError,
        RequestBodyValidationError: For the first stage that fails.
    """
    params = params or {}
    query = query or {}
    options = dict(options or {})
    caller_headers = dict(options.pop("headers", None) or {})
    payload = body if body is not None else {}

    if validate:
        for error_cls, value, schema in (
            (QueryValidationError, query, schemas.get("query")),
            (ParamsValidationError, params, schemas.get("path")),
            (BodyValidationError, payload, schemas.get("body")),
        ):
            violations = collect_violations(value, schema)
            if violations:
                raise error_cls(violations)

    headers = dict(default_headers or {})
    encoded = {}

    if method.lower() in ("post", "put", "patch"):
        content_type = select_content_type(
            list(request_content or {}), find_header(caller_headers, "content-type")
        )
        body_schema = declared_schema(request_content, content_type)
        if validate:
            violations = collect_violations(payload, body_schema)
            if violations:
                raise RequestBodyValidationError(violations)

        encoded = encode_body(
            content_type, payload, _xml_root(body_schema), _xml_item(body_schema)
        )
        # httpx sets the multipart header itself, boundary included.
        if media_type(content_type) == "multipart/form-data":
            headers = {
                key: value
                for key, value in headers.items()
                if key.lower() != "content-type"
            }
        else:
            headers = merge_headers(headers, {"content-type": content_type})
    else:
        headers = merge_headers(headers, {"content-type": "application/json"})
        if body:
            encoded = encode_body("application/json", body)

    return {
        "method": method.upper(),
        "url": build_url(path, params, query),
        "headers": merge_headers(headers, caller_headers),
        **encoded,
        **options,
    }


def _skip_boolean_required(validator, required, instance, schema):
    # Property-level ``required: true`` flags are informational; only the
    # object-level list is enforced.
    if isinstance(required, bool):
        return
    yield from jsonschema.Draft7Validator.VALIDATORS["required"](
        validator, required, instance, schema
    )


def _is_string_like(checker, instance):
    return (
        isinstance(instance, (str, bytes, bytearray, tuple))
        or hasattr(instance, "read")
    )


@functools.lru_cache(maxsize=None)
def _validator_class():
    return jsonschema.validators.extend(
        jsonschema.Draft7Validator,
        {"required": _skip_boolean_required},
        type_checker=jsonschema.Draft7Validator.TYPE_CHECKER.redefine(
            "string", _is_string_like
        ),
    )


def collect_violations(value: Any, schema: Optional[dict]) -> list:
    """Validate *value* against *schema* and return violation messages.

    An empty list means the value is valid. A missing or empty schema
    accepts everything.
    """
    if not schema:
        return []
    messages = []
    for error in _validator_class()(schema).iter_errors(value):
        location = ".".join(str(part) for part in error.absolute_path)
        messages.append(f"{location}: {error.message}" if location else error.message)
    return messages


EMBEDDED_HELPERS = (
    "find_header",
    "merge_headers",
    "media_type",
    "is_xml",
    "select_content_type",
    "declared_schema",
    "_form_scalar",
    "_form_pairs",
    "build_url",
    "_xml_root",
    "_xml_item",
    "encode_body",
    "prepare_request",
)
"""Helpers copied into every exported client, in definition order."""

VALIDATION_HELPERS = (
    "_skip_boolean_required",
    "_is_string_like",
    "_validator_class",
    "collect_violations",
)
"""Helpers copied into exported clients generated with validation enabled."""
