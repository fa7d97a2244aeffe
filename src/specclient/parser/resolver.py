"""Resolve ``$ref`` pointers in Swagger 2 and OpenAPI 3 documents.

API descriptions use reference nodes (``{"$ref": "#/definitions/Pet"}`` or
``{"$ref": "#/components/schemas/Pet"}``) to avoid repetition. This module
performs a recursive traversal of a deep copy of the document, replacing
every reference node with the member it points to, so downstream code never
sees a ``$ref``.

A pointer names a *collection* and a *member*:

* legacy pointers ``#/<collection>/<member>`` look up a top-level
  collection (``definitions``, ``parameters``, ``responses``);
* modern pointers ``#/components/<collection>/<member>`` look up a
  collection under ``components`` (``schemas``, ``parameters``, ...).

The member is always the final pointer segment.

Two policies govern references that cannot be resolved:

* :attr:`ResolutionPolicy.LENIENT` (default) substitutes an empty schema
  ``{}``. This keeps compatibility with documents in the wild that carry
  dangling pointers, at the cost of silently accepting anything at that
  point.
* :attr:`ResolutionPolicy.STRICT` raises
  :class:`~specclient.exceptions.ReferenceResolutionError`.

Self-referencing schemas are cut at the cycle point: a pointer already on
the current resolution path is replaced by ``{}`` instead of being expanded
again.

The single public function is :func:`resolve_references`.
"""

from __future__ import annotations

import copy
import enum
from typing import Any

from specclient.exceptions import ReferenceResolutionError
from specclient.output import debug

_MISSING = object()


class ResolutionPolicy(str, enum.Enum):
    """What to do with a reference whose target does not exist."""

    LENIENT = "lenient"
    STRICT = "strict"


def resolve_references(
    document: dict[str, Any],
    policy: ResolutionPolicy | str = ResolutionPolicy.LENIENT,
) -> dict[str, Any]:
    """Return a copy of *document* with every reference node inlined.

    Args:
        document: The raw API description, as returned by
            :func:`~specclient.parser.loader.load_document`. Not mutated.
        policy: :class:`ResolutionPolicy` (or its string value) applied to
            dangling references.

    Returns:
        A new dictionary with no remaining reference nodes. Resolving a
        document without references returns an equal document, and resolving
        an already resolved document is a no-op.

    Raises:
        ReferenceResolutionError: Under the strict policy, when a pointer
            is external or its target does not exist.

    Example::

        raw = load_document("petstore.json")
        resolved = resolve_references(raw)
        resolved["paths"]["/pet"]["post"]["requestBody"]["content"]
    """
    policy = ResolutionPolicy(policy)
    root = copy.deepcopy(document)
    return _deep_resolve(root, root, policy, frozenset())


def _lookup(ref: str, root: dict[str, Any]) -> Any:
    """Locate the member a pointer names, or return ``_MISSING``."""
    if not ref.startswith("#/"):
        return _MISSING

    segments = [
        segment.replace("~1", "/").replace("~0", "~")
        for segment in ref[2:].split("/")
    ]
    if len(segments) < 2:
        return _MISSING

    if segments[0] == "components":
        if len(segments) < 3:
            return _MISSING
        collection = (root.get("components") or {}).get(segments[1])
    else:
        collection = root.get(segments[0])

    if not isinstance(collection, dict):
        return _MISSING
    return collection.get(segments[-1], _MISSING)


def _deep_resolve(
    obj: Any,
    root: dict[str, Any],
    policy: ResolutionPolicy,
    seen: frozenset[str],
) -> Any:
    """Recursively resolve all references within *obj*.

    ``seen`` holds the pointers on the current resolution path; each branch
    extends its own copy so sibling references to the same target are each
    expanded.
    """
    if isinstance(obj, dict):
        ref = obj.get("$ref")
        if isinstance(ref, str):
            if ref in seen:
                debug(f"Circular reference {ref} cut at cycle point")
                return {}

            target = _lookup(ref, root)
            if target is _MISSING:
                if policy == ResolutionPolicy.STRICT:
                    raise ReferenceResolutionError(f"Cannot resolve reference '{ref}'")
                debug(f"Unresolved reference {ref} replaced with an empty schema")
                return {}

            return _deep_resolve(target, root, policy, seen | {ref})

        return {key: _deep_resolve(value, root, policy, seen) for key, value in obj.items()}

    if isinstance(obj, list):
        return [_deep_resolve(item, root, policy, seen) for item in obj]

    return obj
