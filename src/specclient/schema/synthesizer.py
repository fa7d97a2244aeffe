"""Group parameter declarations by location into validation schemas.

Each location that has at least one declaration gets an object schema::

    {"type": "object", "properties": {name: {"required": flag, **schema}}, "required": [...]}

Only the ``path``, ``query`` and ``body`` locations are synthesized; those
are the three mappings a caller passes to an invoker (``params``, ``query``,
``body``). Swagger 2 ``formData`` declarations arrive here already
normalised to ``body`` by the extractor.
"""

from __future__ import annotations

from typing import Any, Iterable

from specclient.models import ParameterDeclaration, ParameterLocation, SchemaSet

_SYNTHESIZED = {
    ParameterLocation.PATH: "path",
    ParameterLocation.QUERY: "query",
    ParameterLocation.BODY: "body",
}


def synthesize_schemas(parameters: Iterable[ParameterDeclaration]) -> SchemaSet:
    """Build the :class:`~specclient.models.SchemaSet` for one operation.

    Declarations without a location, or with a location that is not part of
    the call surface (``header``, ``cookie``), are ignored. A name declared
    twice in one location keeps the last declaration's schema and required
    flag.

    Args:
        parameters: The operation's declarations in document order.

    Returns:
        A new :class:`~specclient.models.SchemaSet`; empty when nothing
        qualifies.
    """
    fragments: dict[str, dict[str, Any]] = {}

    for parameter in parameters:
        slot = _SYNTHESIZED.get(parameter.location) if parameter.location else None
        if slot is None:
            continue

        fragment = fragments.setdefault(
            slot, {"type": "object", "properties": {}, "required": []}
        )
        fragment["properties"][parameter.name] = {
            "required": parameter.required,
            **parameter.schema_,
        }
        if parameter.name in fragment["required"]:
            fragment["required"].remove(parameter.name)
        if parameter.required:
            fragment["required"].append(parameter.name)

    return SchemaSet(**fragments)
