"""Exception hierarchy for oasgate.

All exceptions inherit from :class:`OasGateError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`oasgate.exit_codes`.
The top-level error handler in :func:`oasgate.app.main` catches
``OasGateError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Per-document problems (unparsable text, resolver failures) are raised inside
the validation layer and converted to diagnostics there; they never abort a
batch.

Subclass hierarchy::

    OasGateError (exit 1)
    +-- ConfigError           (exit 1)
    +-- DocumentParseError    (exit 1)
    +-- ResolverError         (exit 1)
    |   +-- RemoteReferenceError
    +-- WrongFamilyError      (exit 1)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from oasgate.exit_codes import EXIT_GENERIC_FAILURE

if TYPE_CHECKING:
    from oasgate.models import Diagnostic


class OasGateError(Exception):
    """Base exception for all oasgate errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(OasGateError):
    """Raised for configuration problems (invalid JSON, bad values)."""


class DocumentParseError(OasGateError):
    """Raised when text is neither valid JSON nor valid YAML, or its root is not a mapping."""


class ResolverError(OasGateError):
    """Raised by the strict (lenient-parse) resolution path when a ``$ref`` cannot be resolved."""


class RemoteReferenceError(ResolverError):
    """Raised when a remote ``$ref`` (URL or external file) cannot be loaded."""


class WrongFamilyError(OasGateError):
    """Raised by a family validator when the resolver reports the other family's discriminator.

    The orchestrator catches it and retries once with the other family's
    validator.

    Args:
        diagnostic: The wrong-family diagnostic (``SWAGGER_MISSING`` or
            ``OPENAPI_MISSING``) to keep in the final report.
    """

    def __init__(self, diagnostic: Diagnostic):
        super().__init__(diagnostic.message)
        self.diagnostic = diagnostic
