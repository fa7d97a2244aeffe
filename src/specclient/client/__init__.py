"""Runtime client layer -- build, index and invoke operations.

* :mod:`~specclient.client.builder` -- :class:`ClientBuilder` and the
  :class:`ApiClient` it builds.
* :mod:`~specclient.client.registry` -- explicit route / identifier lookups.
* :mod:`~specclient.client.invoker` -- the per-call request pipeline.
* :mod:`~specclient.client.response` -- rendering responses for the CLI.
"""

from specclient.client.builder import ApiClient, ClientBuilder
from specclient.client.invoker import Invoker
from specclient.client.registry import OperationRegistry

__all__ = ["ApiClient", "ClientBuilder", "Invoker", "OperationRegistry"]
