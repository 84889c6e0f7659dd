"""Exception hierarchy for methodmap.

All exceptions inherit from :class:`MethodMapError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`methodmap.exit_codes`.
The top-level error handler in :func:`methodmap.app.main` catches
``MethodMapError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Missing constructs and malformed map entries are *not* exceptions: the
extraction engine logs them and carries on. Only a structural break in the
built-in driver raises during extraction.

Subclass hierarchy::

    MethodMapError (exit 1)
    +-- InvalidUsageError       (exit 2)
    +-- TreeParseError          (exit 7)
    +-- IntegrityViolationError (exit 8)
    +-- ConfigError             (exit 1)
"""

from methodmap.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INTEGRITY_VIOLATION,
    EXIT_INVALID_USAGE,
    EXIT_TREE_PARSE_ERROR,
)


class MethodMapError(Exception):
    """Base exception for all methodmap errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(MethodMapError):
    """Raised for invalid CLI arguments."""

    exit_code = EXIT_INVALID_USAGE


class TreeParseError(MethodMapError):
    """Raised when a declaration tree cannot be read, parsed, or linked."""

    exit_code = EXIT_TREE_PARSE_ERROR


class IntegrityViolationError(MethodMapError):
    """Raised when the built-in driver's method map yields no routes.

    The built-in driver always exposes a non-empty command surface, so an
    empty ``METHOD_MAP`` means the declaration tree no longer has the shape
    the rest of the extraction relies on. Extraction aborts rather than
    return a partial result.
    """

    exit_code = EXIT_INTEGRITY_VIOLATION


class ConfigError(MethodMapError):
    """Raised for configuration problems (invalid JSON, unknown keys)."""

    exit_code = EXIT_GENERIC_FAILURE
