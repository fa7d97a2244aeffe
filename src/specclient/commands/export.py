"""``specclient export`` -- write a standalone client module.

Export switches follow the precedence *flag > ./specclient.json > default*.
With ``--target file`` the module is written atomically to a ``.py`` path;
with ``--target stdout`` it is printed.
"""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Optional

import typer

from specclient.commands import cli_errors
from specclient.exceptions import InvalidUsageError, UnsupportedFileError
from specclient.output import get_output, info, print_code, success


class ExportTarget(str, enum.Enum):
    FILE = "file"
    STDOUT = "stdout"


def export_command(
    source: str = typer.Argument(
        ..., help="API description: .json/.yaml/.yml file, URL, or '-' for stdin."
    ),
    output_path: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Destination .py file (target 'file')."
    ),
    validation: Optional[bool] = typer.Option(
        None,
        "--validation/--no-validation",
        help="Validate inputs with jsonschema in the generated client.",
    ),
    module: Optional[bool] = typer.Option(
        None,
        "--module/--class",
        help="Emit module-level functions instead of a client class.",
    ),
    typed: Optional[bool] = typer.Option(
        None, "--typed/--untyped", help="Emit type annotations."
    ),
    target: ExportTarget = typer.Option(
        ExportTarget.FILE, "--target", "-t", case_sensitive=False,
        help="Where the generated source goes.",
    ),
    class_name: Optional[str] = typer.Option(
        None, "--class-name", help="Name of the generated client class."
    ),
    skip_missing_ids: bool = typer.Option(
        False, "--skip-missing-ids",
        help="Omit operations without operationId instead of failing.",
    ),
    strict: bool = typer.Option(
        False, "--strict", help="Fail on references that cannot be resolved."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing output file."
    ),
    silent: bool = typer.Option(
        False, "--silent", "-s", help="Suppress informational messages."
    ),
) -> None:
    """Generate a standalone async client from an API description.

    Example::

        specclient export openapi.yaml -o petstore_client.py --validation
        specclient export openapi.json --target stdout --module --typed
    """
    from specclient.client import ClientBuilder
    from specclient.config import (
        load_project_config,
        resolve_export_options,
        write_text_atomic,
    )
    from specclient.parser import ResolutionPolicy

    if silent:
        get_output().set_quiet()

    with cli_errors():
        if target == ExportTarget.FILE:
            output_path = _check_output_path(output_path, force)

        project = load_project_config()
        options = resolve_export_options(
            project,
            validation=validation,
            module=module,
            typed=typed,
            class_name=class_name,
            require_operation_ids=not skip_missing_ids,
        )
        if not options.class_name.isidentifier():
            raise InvalidUsageError(
                f"--class-name must be a Python identifier, got '{options.class_name}'"
            )

        builder = ClientBuilder(
            source,
            policy=ResolutionPolicy.STRICT if strict else ResolutionPolicy.LENIENT,
            project=project,
        )
        artifact = builder.export(options)

        if target == ExportTarget.STDOUT:
            print_code(artifact.code)
        else:
            write_text_atomic(output_path, artifact.code)
            success(
                f"Exported {len(artifact.operation_ids)} operations to {output_path}"
            )

        info(f"Requires: {', '.join(artifact.requirements)}")


def _check_output_path(output_path: Optional[Path], force: bool) -> Path:
    if output_path is None:
        raise InvalidUsageError("--output is required with --target file")
    if output_path.suffix != ".py":
        raise UnsupportedFileError(
            f"Output file must have a .py extension, got '{output_path.name}'"
        )
    if output_path.exists() and not force:
        if not typer.confirm(f"{output_path} exists. Overwrite?"):
            raise typer.Exit(code=1)
    return output_path
