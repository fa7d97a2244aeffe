"""``specclient inspect`` -- list the operations a document declares."""

from __future__ import annotations

import typer

from specclient.commands import cli_errors
from specclient.output import get_output, info


def inspect_command(
    source: str = typer.Argument(
        ..., help="API description: .json/.yaml/.yml file, URL, or '-' for stdin."
    ),
) -> None:
    """List every operation with its method, path, identifier and content types.

    Example::

        specclient inspect openapi.yaml
        specclient --json inspect openapi.yaml
    """
    from specclient.parser import parse_document

    with cli_errors():
        parsed = parse_document(source)

    if not parsed.operations:
        info("No operations declared in this document.")
        return

    rows = [
        [
            op.method.value.upper(),
            op.path,
            op.operation_id or "-",
            ", ".join(op.content_types) or "-",
            "Yes" if op.deprecated else "",
        ]
        for op in parsed.operations
    ]
    get_output().print_table(
        ["Method", "Path", "Operation ID", "Content Types", "Deprecated"],
        rows,
        title=f"{parsed.title} {parsed.version} -- Operations ({len(rows)})",
    )
