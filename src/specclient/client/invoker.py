"""Bound invokers -- the per-operation validate, encode and dispatch pipeline.

An :class:`Invoker` is created once per operation when a client is built and
reused for every call. A call runs these stages in order, each entered fresh:

1. **Validating** -- ``query``, then ``params``, then ``body`` against the
   operation's synthesized :class:`~specclient.models.SchemaSet`, then (for
   ``post``, ``put`` and ``patch`` only) ``body`` against the request-body
   schema of the selected content type. The first failing stage raises its
   typed :class:`~specclient.exceptions.ValidationError` subclass.
2. **Resolving the content type** -- see
   :func:`~specclient.runtime.select_content_type`.
3. **Encoding the body** -- see :func:`~specclient.runtime.encode_body`.
4. **Building the URL** -- see :func:`~specclient.runtime.build_url`.
5. **Dispatching** -- one :meth:`httpx.AsyncClient.request` call.

Stages 1-4 are :func:`~specclient.runtime.prepare_request`, the same
function exported clients embed. The response is returned whatever its
status. Transport failures propagate unchanged; there is no retry.
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Any, Callable, Optional

import httpx

from specclient.models import ClientConfig, OperationSpec
from specclient.output import get_output
from specclient.runtime import prepare_request

SessionFactory = Callable[[], AbstractAsyncContextManager[httpx.AsyncClient]]


class Invoker:
    """Callable implementing one operation's request pipeline.

    Args:
        operation: The operation this invoker is bound to. Its schemas are
            read, never mutated.
        config: Shared client configuration (default headers).
        session: Factory returning an async context manager that yields the
            :class:`httpx.AsyncClient` to dispatch with.

    Example::

        response = await client.operation("getPetById")(params={"petId": 12})
    """

    def __init__(
        self,
        operation: OperationSpec,
        config: ClientConfig,
        session: SessionFactory,
    ) -> None:
        self._operation = operation
        self._config = config
        self._session = session
        self._schemas = operation.schemas.model_dump()
        self._request_content = (
            operation.request_body.content if operation.request_body else None
        )

    @property
    def operation(self) -> OperationSpec:
        return self._operation

    def __repr__(self) -> str:
        return f"<Invoker {self._operation.operation_id or self._operation.label}>"

    async def __call__(
        self,
        params: Optional[dict[str, Any]] = None,
        query: Optional[dict[str, Any]] = None,
        body: Any = None,
        options: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        """Validate, encode and dispatch one request.

        Args:
            params: Values substituted into the path template.
            query: Query-string values. Lists repeat the key.
            body: The request payload.
            options: Extra :meth:`httpx.AsyncClient.request` keyword
                arguments. ``options["headers"]`` is merged last, so a
                caller-supplied ``Content-Type`` overrides the computed one.

        Returns:
            The transport's :class:`httpx.Response`, whatever its status.

        Raises:
            QueryValidationError: ``query`` violates the query schema.
            ParamsValidationError: ``params`` violates the path schema.
            BodyValidationError: ``body`` violates the body/formData schema.
            RequestBodyValidationError: ``body`` violates the request-body
                schema declared for the selected content type.
            httpx.TransportError: On network failure, unchanged.
        """
        request = self.prepare(params, query, body, options)
        get_output().debug(f"{request['method']} {request['url']}")
        async with self._session() as client:
            return await client.request(**request)

    def prepare(
        self,
        params: Optional[dict[str, Any]] = None,
        query: Optional[dict[str, Any]] = None,
        body: Any = None,
        options: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """Run every stage except dispatch and return the request keyword arguments."""
        return prepare_request(
            self._operation.method.value,
            self._operation.path,
            self._schemas,
            self._request_content,
            self._config.headers,
            params=params,
            query=query,
            body=body,
            options=options,
        )
