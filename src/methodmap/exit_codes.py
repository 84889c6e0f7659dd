"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~methodmap.exceptions.MethodMapError` subclass.
Build scripts can inspect the exit code to tell a broken input document
from a broken driver without parsing stderr.

Example::

    $ methodmap extract project.json
    $ echo $?
    8   # EXIT_INTEGRITY_VIOLATION -- METHOD_MAP declared no routes
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_TREE_PARSE_ERROR = 7
"""The declaration tree could not be loaded or validated."""

EXIT_INTEGRITY_VIOLATION = 8
"""The built-in driver's method map exists but declares no routes."""
