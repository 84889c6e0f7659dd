"""Leveled, namespaced logger handed to the extraction engine.

The converters never print. Each receives a :class:`PluginLogger` and
reports what it found (or failed to find) at one of four levels:

========== ====================================================
verbose    Progress tracing; shown only with ``--verbose``.
info       Summaries and informational mismatches.
warn       A malformed entry was skipped or a construct is missing.
error      Something the built-in driver should always have is gone.
========== ====================================================

Messages use ``%``-style placeholders and are formatted lazily, so callers
write ``log.warn("No routes in %s", name)``. By default messages go to the
global :class:`~methodmap.output.OutputManager`; pass ``output`` to direct
them elsewhere.
"""

from __future__ import annotations

from typing import Any, Optional

from methodmap.output import OutputManager, get_output


class PluginLogger:
    """Logger with a ``parent:child`` namespace prefix.

    Args:
        namespace: Prefix shown in front of every message.
        output: Destination manager. ``None`` resolves the global manager at
            emit time, so a logger created before the CLI installs its
            manager still honours ``--quiet`` and ``--verbose``.
    """

    def __init__(self, namespace: str = "methodmap", output: Optional[OutputManager] = None) -> None:
        self.namespace = namespace
        self._output = output

    def child(self, name: str) -> PluginLogger:
        """Return a logger whose namespace is ``<namespace>:<name>``."""
        child = type(self).__new__(type(self))
        child.__dict__.update(self.__dict__)
        child.namespace = f"{self.namespace}:{name}"
        return child

    def verbose(self, message: str, *args: Any) -> None:
        self._emit("verbose", message, args)

    def info(self, message: str, *args: Any) -> None:
        self._emit("info", message, args)

    def warn(self, message: str, *args: Any) -> None:
        self._emit("warn", message, args)

    def error(self, message: str, *args: Any) -> None:
        self._emit("error", message, args)

    def _emit(self, level: str, message: str, args: tuple[Any, ...]) -> None:
        text = f"[{self.namespace}] {message % args if args else message}"
        output = self._output or get_output()
        if level == "verbose":
            output.debug(text)
        elif level == "info":
            output.info(text)
        elif level == "warn":
            output.warning(text)
        else:
            output.error(text)
