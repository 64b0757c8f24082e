"""oasgate -- check Swagger 2.0 / OpenAPI 3.x documents before gateway import.

This package decides, document by document, whether an API gateway can safely
import a Swagger 2.0 or OpenAPI 3.x definition. It classifies the document,
resolves it, reclassifies the resolver's free-text messages into a stable
diagnostic taxonomy, runs the semantic checks the resolver does not perform,
and aggregates everything into per-document verdicts and a batch summary.

Typical workflow::

    oasgate location:./definitions        # full validation (level 2)
    oasgate location:./petstore.yaml 1    # compatibility-mode validation

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes.
    output: stdout/stderr formatting system with Rich support.
    parser: Default OAS-resolution capability (loading, ``$ref``
        resolution, structural validation).
    validation: Classification, family validators, diagnostics and the
        batch orchestrator.
"""

__version__ = "0.3.0"
