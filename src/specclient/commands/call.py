"""``specclient call`` -- invoke one operation and print the response.

The operation is named by its ``operationId`` or as ``METHOD:/path``.
``--params``, ``--query`` and ``--body`` take JSON; ``--header`` takes
``Name: value`` and may repeat. With ``--dry-run`` the prepared request is
printed to stderr and nothing is sent.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Optional

import httpx
import typer

from specclient.commands import cli_errors
from specclient.exceptions import InvalidUsageError
from specclient.output import get_output


def call_command(
    source: str = typer.Argument(
        ..., help="API description: .json/.yaml/.yml file, URL, or '-' for stdin."
    ),
    operation: str = typer.Argument(
        ..., help="operationId, or METHOD:/path such as get:/pet/{petId}."
    ),
    params: Optional[str] = typer.Option(
        None, "--params", help="Path parameters as a JSON object."
    ),
    query: Optional[str] = typer.Option(
        None, "--query", help="Query parameters as a JSON object."
    ),
    body: Optional[str] = typer.Option(
        None, "--body", help="Request body as JSON (raw text if not JSON)."
    ),
    header: Optional[list[str]] = typer.Option(
        None, "--header", "-H", help="Extra header 'Name: value'. Repeatable."
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Override the document's base URL."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Print the request without sending it."
    ),
) -> None:
    """Validate, encode and send one request, then print the response.

    Example::

        specclient call openapi.json getPetById --params '{"petId": 12}'
        specclient call openapi.json findPetsByStatus --query '{"status": "sold"}'
    """
    from specclient.client import ClientBuilder
    from specclient.client.response import format_api_response
    from specclient.config import load_project_config

    with cli_errors():
        arguments = {
            "params": _parse_json_object(params, "--params"),
            "query": _parse_json_object(query, "--query"),
            "body": _parse_body(body),
            "options": {"headers": _parse_headers(header or [])},
        }
        builder = ClientBuilder(
            source,
            base_url=base_url,
            project=load_project_config(),
            transport=httpx.MockTransport(_dry_run_handler) if dry_run else None,
        )
        invoker = builder.build()[operation]
        response = asyncio.run(invoker(**arguments))

    if dry_run:
        return
    format_api_response(response)
    if response.status_code >= 400:
        raise typer.Exit(code=1)


def _parse_json_object(value: Optional[str], flag: str) -> Optional[dict[str, Any]]:
    if value is None:
        return None
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as exc:
        raise InvalidUsageError(f"{flag} is not valid JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise InvalidUsageError(f"{flag} must be a JSON object")
    return parsed


def _parse_body(value: Optional[str]) -> Any:
    if value is None:
        return None
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


def _parse_headers(values: list[str]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for value in values:
        name, sep, content = value.partition(":")
        if not sep or not name.strip():
            raise InvalidUsageError(f"Header must look like 'Name: value', got '{value}'")
        headers[name.strip()] = content.strip()
    return headers


def _dry_run_handler(request: httpx.Request) -> httpx.Response:
    """Print the prepared request to stderr and answer with an empty 200."""
    output = get_output()
    output.info(f"DRY RUN: {request.method} {request.url}")
    for name, value in request.headers.items():
        output.info(f"  {name}: {value}")
    if request.content:
        output.info(request.content.decode("utf-8", errors="replace"))
    return httpx.Response(200, request=request)
