"""Tests for specclient.schema.synthesizer."""

from __future__ import annotations

from specclient.models import ParameterDeclaration, ParameterLocation, SchemaSet
from specclient.schema import synthesize_schemas


def _param(name: str, location, required: bool = False, **schema) -> ParameterDeclaration:
    return ParameterDeclaration(
        name=name, location=location, required=required, schema=schema
    )


class TestSynthesizeSchemas:
    def test_empty_input(self) -> None:
        result = synthesize_schemas([])
        assert result == SchemaSet()
        assert result.is_empty()

    def test_groups_by_location(self) -> None:
        result = synthesize_schemas([
            _param("petId", ParameterLocation.PATH, True, type="integer"),
            _param("limit", ParameterLocation.QUERY, type="integer"),
            _param("name", ParameterLocation.BODY, True, type="string"),
        ])

        assert result.path == {
            "type": "object",
            "properties": {"petId": {"required": True, "type": "integer"}},
            "required": ["petId"],
        }
        assert result.query == {
            "type": "object",
            "properties": {"limit": {"required": False, "type": "integer"}},
            "required": [],
        }
        assert result.body["required"] == ["name"]

    def test_merged_property_keeps_schema_keywords(self) -> None:
        result = synthesize_schemas([
            _param(
                "status",
                ParameterLocation.QUERY,
                type="string",
                enum=["available", "pending", "sold"],
                default="available",
            )
        ])
        assert result.query["properties"]["status"] == {
            "required": False,
            "type": "string",
            "enum": ["available", "pending", "sold"],
            "default": "available",
        }

    def test_missing_location_ignored(self) -> None:
        result = synthesize_schemas([_param("orphan", None, True, type="string")])
        assert result.is_empty()

    def test_header_and_cookie_ignored(self) -> None:
        result = synthesize_schemas([
            _param("X-Trace", ParameterLocation.HEADER, True),
            _param("session", ParameterLocation.COOKIE, True),
        ])
        assert result.is_empty()

    def test_duplicate_name_last_wins(self) -> None:
        result = synthesize_schemas([
            _param("id", ParameterLocation.QUERY, True, type="string"),
            _param("id", ParameterLocation.QUERY, True, type="integer"),
        ])
        assert result.query["properties"]["id"]["type"] == "integer"
        assert result.query["required"] == ["id"]

    def test_duplicate_name_last_required_flag_wins(self) -> None:
        result = synthesize_schemas([
            _param("id", ParameterLocation.QUERY, True, type="string"),
            _param("tag", ParameterLocation.QUERY, True, type="string"),
            _param("id", ParameterLocation.QUERY, False, type="integer"),
        ])
        assert result.query["properties"]["id"]["required"] is False
        assert result.query["required"] == ["tag"]

    def test_does_not_share_declaration_schema(self) -> None:
        declaration = _param("q", ParameterLocation.QUERY, type="string")
        result = synthesize_schemas([declaration])
        result.query["properties"]["q"]["type"] = "integer"
        assert declaration.schema_ == {"type": "string"}
