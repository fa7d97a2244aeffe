"""Operation registry -- explicit lookups from route or identifier to an invoker."""

from __future__ import annotations

from typing import Iterator, Optional, Union

from specclient.client.invoker import Invoker
from specclient.exceptions import OperationNotFoundError
from specclient.models import HTTPMethod
from specclient.output import warning

RouteKey = tuple[str, HTTPMethod]


class OperationRegistry:
    """Index of bound invokers by ``(path, method)`` and by ``operationId``.

    Both indexes point at the same :class:`~specclient.client.invoker.Invoker`
    objects. When two operations share an identifier the later one wins and
    a warning is emitted.
    """

    def __init__(self) -> None:
        self.routes: dict[RouteKey, Invoker] = {}
        self.operations: dict[str, Invoker] = {}

    def register(self, invoker: Invoker) -> None:
        operation = invoker.operation
        self.routes[operation.route] = invoker

        operation_id = operation.operation_id
        if operation_id is None:
            return
        previous = self.operations.get(operation_id)
        if previous is not None:
            warning(
                f"operationId '{operation_id}' is declared by both "
                f"{previous.operation.label} and {operation.label}; "
                f"using {operation.label}"
            )
        self.operations[operation_id] = invoker

    def by_id(self, operation_id: str) -> Invoker:
        try:
            return self.operations[operation_id]
        except KeyError:
            raise OperationNotFoundError(
                f"Unknown operation '{operation_id}'"
            ) from None

    def by_route(self, path: str, method: Union[str, HTTPMethod]) -> Invoker:
        key = (path, _coerce_method(method))
        if key[1] is None or key not in self.routes:
            raise OperationNotFoundError(
                f"No operation for {str(getattr(method, 'value', method)).upper()} {path}"
            )
        return self.routes[key]

    def lookup(self, key: Union[str, tuple[str, str]]) -> Invoker:
        """Resolve an identifier, a ``(path, method)`` pair, or ``"METHOD:/path"``."""
        if isinstance(key, tuple):
            path, method = key
            return self.by_route(path, method)
        if key in self.operations:
            return self.operations[key]
        method, sep, path = key.partition(":")
        if sep and path.startswith("/") and _coerce_method(method) is not None:
            return self.by_route(path, method)
        return self.by_id(key)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, (str, tuple)):
            return False
        try:
            self.lookup(key)
        except (OperationNotFoundError, ValueError):
            return False
        return True

    def __iter__(self) -> Iterator[Invoker]:
        return iter(self.routes.values())

    def __len__(self) -> int:
        return len(self.routes)


def _coerce_method(method: Union[str, HTTPMethod]) -> Optional[HTTPMethod]:
    try:
        return HTTPMethod(str(getattr(method, "value", method)).lower())
    except ValueError:
        return None
