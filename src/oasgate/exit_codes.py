"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific outcome category and is referenced by
:class:`~oasgate.exceptions.OasGateError` or by the batch command. A clean
run exits 0 and usage mistakes exit 2 (reported by Typer), so CI scripts can
tell a failed batch apart from a usage mistake without parsing the summary.

Example::

    $ oasgate location:./definitions
    $ echo $?
    1   # EXIT_VALIDATION_FAILED -- at least one document was rejected
"""

EXIT_VALIDATION_FAILED = 1
"""At least one document failed validation."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred (for example an invalid config file)."""
