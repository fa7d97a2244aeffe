"""Tests for specclient.exporter -- standalone client generation."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import httpx
import pytest

from specclient.exceptions import MissingOperationIdError
from specclient.exporter import export_client, python_identifier
from specclient.models import (
    ExportArtifact,
    ExportOptions,
    HTTPMethod,
    OperationSpec,
)
from specclient.parser import parse_document


@pytest.fixture
def petstore_ops(petstore_30_raw: dict) -> list[OperationSpec]:
    return parse_document(petstore_30_raw).operations


@pytest.fixture
def swagger_ops(swagger_20_raw: dict) -> list[OperationSpec]:
    return parse_document(swagger_20_raw).operations


def _load(artifact: ExportArtifact) -> dict[str, Any]:
    """Execute generated source and return its namespace."""
    namespace: dict[str, Any] = {}
    exec(compile(artifact.code, "client.py", "exec"), namespace)
    return namespace


class _Recorder:
    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(200, json={"id": 1})

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url="https://petstore.example.com/api/v3",
            transport=httpx.MockTransport(self),
        )


# ---------------------------------------------------------------------------
# Manifest and selection
# ---------------------------------------------------------------------------


class TestRequirements:
    def test_without_validation(self) -> None:
        op = OperationSpec(path="/ping", method=HTTPMethod.GET, operation_id="ping")
        artifact = export_client([op], ExportOptions())
        assert artifact.requirements == ("httpx",)
        assert "import jsonschema" not in artifact.code

    def test_with_validation(self) -> None:
        op = OperationSpec(path="/ping", method=HTTPMethod.GET, operation_id="ping")
        artifact = export_client([op], ExportOptions(validation=True))
        assert artifact.requirements == ("httpx", "jsonschema")
        assert "import jsonschema" in artifact.code

    def test_xml_content_adds_xmltodict(self, petstore_ops: list[OperationSpec]) -> None:
        artifact = export_client(petstore_ops, ExportOptions(validation=True))
        assert artifact.requirements == ("httpx", "jsonschema", "xmltodict")

    def test_requirements_listed_in_module_docstring(
        self, petstore_ops: list[OperationSpec]
    ) -> None:
        artifact = export_client(petstore_ops, ExportOptions(), title="Petstore API")
        assert "Requires: httpx, xmltodict" in artifact.code
        assert artifact.code.startswith('"""Asynchronous client for Petstore API.')


class TestSelection:
    def test_operations_without_id_skipped(self, petstore_ops: list[OperationSpec]) -> None:
        artifact = export_client(petstore_ops, ExportOptions())
        assert artifact.operation_ids == (
            "addPet",
            "updatePet",
            "findPetsByStatus",
            "getPetById",
            "deletePet",
            "uploadFile",
        )
        assert "/store/inventory" not in artifact.code

    def test_missing_ids_rejected_when_required(
        self, swagger_ops: list[OperationSpec]
    ) -> None:
        with pytest.raises(MissingOperationIdError) as exc_info:
            export_client(swagger_ops, ExportOptions(require_operation_ids=True))
        assert exc_info.value.routes == ["DELETE /store/order/{orderId}"]
        assert exc_info.value.exit_code == 8

    def test_duplicate_id_last_wins(self) -> None:
        ops = [
            OperationSpec(path="/a", method=HTTPMethod.GET, operation_id="list"),
            OperationSpec(path="/b", method=HTTPMethod.GET, operation_id="list"),
        ]
        namespace = _load(export_client(ops, ExportOptions()))
        assert namespace["OPERATIONS"]["list"]["path"] == "/b"


# ---------------------------------------------------------------------------
# Generated source
# ---------------------------------------------------------------------------


class TestGeneratedSource:
    @pytest.mark.parametrize("module", [False, True])
    @pytest.mark.parametrize("typed", [False, True])
    @pytest.mark.parametrize("validation", [False, True])
    def test_compiles(
        self,
        petstore_ops: list[OperationSpec],
        module: bool,
        typed: bool,
        validation: bool,
    ) -> None:
        options = ExportOptions(module=module, typed=typed, validation=validation)
        namespace = _load(export_client(petstore_ops, options))

        assert namespace["VALIDATE"] is validation
        assert ("Client" in namespace) is not module
        assert ("collect_violations" in namespace) is validation

    def test_class_name(self, petstore_ops: list[OperationSpec]) -> None:
        artifact = export_client(petstore_ops, ExportOptions(class_name="PetstoreClient"))
        assert "class PetstoreClient:" in artifact.code

    def test_typed_annotations(self, petstore_ops: list[OperationSpec]) -> None:
        typed = export_client(petstore_ops, ExportOptions(typed=True)).code
        untyped = export_client(petstore_ops, ExportOptions()).code
        assert "-> httpx.Response:" in typed
        assert "-> httpx.Response:" not in untyped
        assert "params=None," in untyped

    def test_docstrings(self, petstore_ops: list[OperationSpec]) -> None:
        code = export_client(petstore_ops, ExportOptions()).code
        assert '"""Find pet by ID\n\n        GET /pet/{petId}"""' in code

    def test_deprecated_marker(self) -> None:
        op = OperationSpec(
            path="/old", method=HTTPMethod.GET, operation_id="old", deprecated=True
        )
        code = export_client([op], ExportOptions()).code
        assert '"""GET /old (deprecated)"""' in code

    def test_hostile_summary_is_escaped(self) -> None:
        op = OperationSpec(
            path="/x",
            method=HTTPMethod.GET,
            operation_id="x",
            summary='Ends with """ and a \\',
        )
        namespace = _load(export_client([op], ExportOptions()))
        assert namespace["Client"].x.__doc__.startswith('Ends with """ and a \\')

    def test_reserved_names_avoided(self) -> None:
        ops = [
            OperationSpec(path="/a", method=HTTPMethod.GET, operation_id="build_url"),
            OperationSpec(path="/b", method=HTTPMethod.GET, operation_id="aclose"),
        ]
        module_code = export_client(ops, ExportOptions(module=True)).code
        class_code = export_client(ops, ExportOptions()).code

        assert "async def build_url_(" in module_code
        assert "async def aclose_(" in class_code


# ---------------------------------------------------------------------------
# Behaviour of the generated client
# ---------------------------------------------------------------------------


class TestGeneratedClient:
    def test_class_client_dispatches(self, petstore_ops: list[OperationSpec]) -> None:
        namespace = _load(export_client(petstore_ops, ExportOptions(validation=True)))
        recorder = _Recorder()

        async def run() -> httpx.Response:
            async with namespace["Client"](
                headers={"X-Api-Key": "k"}, client=recorder.client()
            ) as api:
                return await api.getPetById(params={"petId": 12})

        response = asyncio.run(run())

        assert response.status_code == 200
        request = recorder.requests[0]
        assert str(request.url) == "https://petstore.example.com/api/v3/pet/12"
        assert request.headers["x-api-key"] == "k"
        assert request.headers["content-type"] == "application/json"

    def test_module_client_dispatches(self, petstore_ops: list[OperationSpec]) -> None:
        namespace = _load(export_client(petstore_ops, ExportOptions(module=True)))
        recorder = _Recorder()

        async def run() -> None:
            async with recorder.client() as client:
                await namespace["addPet"](
                    client, body={"name": "doggie", "photoUrls": []}
                )

        asyncio.run(run())

        request = recorder.requests[0]
        assert request.method == "POST"
        assert json.loads(request.content) == {"name": "doggie", "photoUrls": []}

    def test_xml_encoding_matches_live_client(
        self, petstore_ops: list[OperationSpec]
    ) -> None:
        namespace = _load(export_client(petstore_ops, ExportOptions()))
        recorder = _Recorder()

        async def run() -> None:
            async with namespace["Client"](client=recorder.client()) as api:
                await api.updatePet(body={"name": "doggie", "photoUrls": []})

        asyncio.run(run())

        request = recorder.requests[0]
        assert request.headers["content-type"] == "application/xml"
        assert b"<pet><name>doggie</name></pet>" in request.content

    def test_validation_errors_raised(self, petstore_ops: list[OperationSpec]) -> None:
        namespace = _load(export_client(petstore_ops, ExportOptions(validation=True)))
        recorder = _Recorder()

        async def run() -> None:
            async with namespace["Client"](client=recorder.client()) as api:
                await api.findPetsByStatus(query={"status": "bogus"})

        with pytest.raises(namespace["QueryValidationError"]) as exc_info:
            asyncio.run(run())

        assert isinstance(exc_info.value, namespace["ValidationError"])
        assert recorder.requests == []

    def test_request_body_errors_are_body_errors(
        self, petstore_ops: list[OperationSpec]
    ) -> None:
        namespace = _load(export_client(petstore_ops, ExportOptions(validation=True)))
        recorder = _Recorder()

        async def run() -> None:
            async with namespace["Client"](client=recorder.client()) as api:
                await api.addPet(body={})

        with pytest.raises(namespace["BodyValidationError"]) as exc_info:
            asyncio.run(run())

        assert isinstance(exc_info.value, namespace["RequestBodyValidationError"])
        assert "'photoUrls' is a required property" in exc_info.value.violations
        assert recorder.requests == []

    def test_no_validation_when_disabled(self, petstore_ops: list[OperationSpec]) -> None:
        namespace = _load(export_client(petstore_ops, ExportOptions()))
        recorder = _Recorder()

        async def run() -> None:
            async with namespace["Client"](client=recorder.client()) as api:
                await api.findPetsByStatus(query={"status": "bogus"})

        asyncio.run(run())
        assert recorder.requests[0].url.params["status"] == "bogus"


class TestPythonIdentifier:
    @pytest.mark.parametrize(
        ("operation_id", "expected"),
        [
            ("getPetById", "getPetById"),
            ("pets.list-all", "pets_list_all"),
            ("2fa", "op_2fa"),
            ("import", "import_"),
            ("--", "operation"),
            ("a  b", "a_b"),
        ],
    )
    def test_conversion(self, operation_id: str, expected: str) -> None:
        assert python_identifier(operation_id) == expected
