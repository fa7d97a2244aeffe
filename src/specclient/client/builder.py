"""Build runnable clients from an API description.

:class:`ClientBuilder` runs the build pass once -- load, validate, resolve,
extract -- and then either produces an :class:`ApiClient` (one bound
:class:`~specclient.client.invoker.Invoker` per operation) or exports an
equivalent standalone module through :mod:`specclient.exporter`.

Example::

    builder = ClientBuilder("petstore.yaml", base_url="http://localhost:8080")

    async with builder.build() as client:
        response = await client.operation("getPetById")(params={"petId": 12})

    artifact = builder.export(ExportOptions(validation=True))
"""

from __future__ import annotations

import contextlib
from typing import Any, AsyncIterator, Iterator, Optional, Union

import httpx

from specclient.client.invoker import Invoker
from specclient.client.registry import OperationRegistry
from specclient.config import resolve_client_config
from specclient.models import (
    ClientConfig,
    ExportArtifact,
    ExportOptions,
    HTTPMethod,
    OperationSpec,
    ProjectConfig,
)
from specclient.parser import DocumentSource, ResolutionPolicy, parse_document


class ApiClient:
    """A built client: an operation registry plus the transport it dispatches on.

    Use as an async context manager to share one :class:`httpx.AsyncClient`
    across calls. Invokers called outside the context open a short-lived
    transport for that call alone.

    Args:
        operations: Operations in document order.
        config: Base URL, default headers and transport settings.
        transport: Optional httpx transport (``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        operations: list[OperationSpec],
        config: ClientConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._registry = OperationRegistry()
        for operation in operations:
            self._registry.register(Invoker(operation, config, self._session))

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def registry(self) -> OperationRegistry:
        return self._registry

    @property
    def operation_ids(self) -> list[str]:
        return list(self._registry.operations)

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> ApiClient:
        self._client = self._new_client()
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=self._config.timeout,
            verify=self._config.verify_ssl,
            transport=self._transport,
        )

    @contextlib.asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with self._new_client() as client:
            yield client

    # ------------------------------------------------------------------ #
    # Lookups
    # ------------------------------------------------------------------ #

    def operation(self, operation_id: str) -> Invoker:
        """Return the invoker registered under *operation_id*.

        Raises:
            OperationNotFoundError: If no operation declares that identifier.
        """
        return self._registry.by_id(operation_id)

    def route(self, path: str, method: Union[str, HTTPMethod]) -> Invoker:
        """Return the invoker for the ``path`` template and HTTP ``method``."""
        return self._registry.by_route(path, method)

    def __getitem__(self, key: Union[str, tuple[str, str]]) -> Invoker:
        return self._registry.lookup(key)

    def __contains__(self, key: object) -> bool:
        return key in self._registry

    def __iter__(self) -> Iterator[Invoker]:
        return iter(self._registry)

    def __len__(self) -> int:
        return len(self._registry)


class ClientBuilder:
    """Parse an API description once and build clients or exports from it.

    Construction performs the whole build pass, so any
    :class:`~specclient.exceptions.DocumentError` surfaces here and no
    partial builder exists.

    Args:
        source: Inline mapping, file path, ``http(s)://`` URL or ``'-'``.
        base_url: Explicit base URL; highest precedence.
        headers: Default headers sent with every request.
        policy: Reference-resolution policy.
        timeout: Transport timeout in seconds.
        verify_ssl: Whether to verify TLS certificates.
        project: Project defaults; ``None`` means built-in defaults.
        transport: Optional httpx transport handed to built clients.
    """

    def __init__(
        self,
        source: DocumentSource,
        base_url: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
        policy: Union[ResolutionPolicy, str] = ResolutionPolicy.LENIENT,
        timeout: Optional[float] = None,
        verify_ssl: Optional[bool] = None,
        project: Optional[ProjectConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._parsed = parse_document(source, policy)
        self._project = project
        self._transport = transport
        self.config = resolve_client_config(
            self._parsed.document,
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            verify_ssl=verify_ssl,
            project=project,
        )

    @property
    def document(self) -> dict[str, Any]:
        """The resolved document."""
        return self._parsed.document

    @property
    def version(self) -> str:
        return self._parsed.version

    @property
    def operations(self) -> list[OperationSpec]:
        return list(self._parsed.operations)

    def build(self) -> ApiClient:
        return ApiClient(self._parsed.operations, self.config, self._transport)

    def export(self, options: Optional[ExportOptions] = None) -> ExportArtifact:
        """Generate a standalone client module for the identified operations.

        Raises:
            MissingOperationIdError: When ``options.require_operation_ids``
                is set and some operation has no ``operationId``.
        """
        from specclient.exporter import export_client

        if options is None:
            options = (self._project or ProjectConfig()).export
        return export_client(
            self._parsed.operations, options, title=self._parsed.title
        )
