"""specclient -- Runnable async clients from Swagger 2 / OpenAPI 3 documents.

This package turns an API description into a client: every declared
operation becomes an invoker that validates the caller's path parameters,
query and body against the declared schemas, encodes the body for the
selected content type, and dispatches the request with httpx. The same
client can also be exported as a standalone Python module.

Typical usage::

    from specclient.client import ClientBuilder

    builder = ClientBuilder("openapi.yaml")
    async with builder.build() as client:
        response = await client.operation("getPetById")(params={"petId": 12})

    specclient export openapi.yaml -o petstore_client.py --validation

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: XDG paths, project config and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    runtime: Request-building helpers shared with exported clients.
"""

__version__ = "0.1.0"
