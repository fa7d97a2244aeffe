"""Render :class:`httpx.Response` objects through the output system.

Used by ``specclient call``: the status line goes to stderr, the decoded
body to stdout.
"""

from __future__ import annotations

import json
from typing import Any

import httpx

from specclient.output import get_output


def format_api_response(response: httpx.Response) -> None:
    """Print the status line to stderr and the body to stdout."""
    output = get_output()
    output.info(f"HTTP {response.status_code} {response.reason_phrase or ''}".rstrip())

    content_type = response.headers.get("content-type", "application/json")
    data = extract_response_data(response)
    if data is not None:
        output.format_response(data, content_type)


def extract_response_data(response: httpx.Response) -> Any:
    """Decode the body as JSON when possible, else return text; ``None`` when empty."""
    if not response.content:
        return None
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return response.text
