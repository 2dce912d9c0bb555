"""Canonical tool names.

Tools are keyed by a flat canonical name built from a hierarchical group path
and a method name::

    system/exec.execute   ->  system_exec-execute
    system/exec-execute   ->  system_exec-execute
    system/exec/execute   ->  system_exec-execute

Path separators inside the group become ``_`` and the last ``-`` separates the
method. Parsing is lenient: input that cannot be split is echoed back
unchanged, so callers must treat an unchanged result as "not canonicalized".
"""

from __future__ import annotations

GROUP_SEPARATOR = "/"
CANONICAL_GROUP_SEPARATOR = "_"
METHOD_SEPARATOR = "-"


def canonical(raw: str) -> str:
    """Convert a user-facing tool name into its canonical form.

    Args:
        raw: A name in canonical form, ``group/path.method``,
            ``group/path-method`` or ``group/path/method``.

    Returns:
        The canonical ``group_path-method`` string, or ``raw`` itself when it is
        already canonical or cannot be split.
    """
    if not raw:
        return ""

    if METHOD_SEPARATOR in raw and GROUP_SEPARATOR not in raw and "." not in raw:
        return raw

    if "." in raw:
        service, _, method = raw.rpartition(".")
    elif METHOD_SEPARATOR in raw and GROUP_SEPARATOR in raw:
        # the group itself may contain dashes, only split here when a path is present
        service, _, method = raw.rpartition(METHOD_SEPARATOR)
    elif GROUP_SEPARATOR in raw:
        service, _, method = raw.rpartition(GROUP_SEPARATOR)
    else:
        return raw

    return service.replace(GROUP_SEPARATOR, CANONICAL_GROUP_SEPARATOR) + METHOD_SEPARATOR + method


def new_name(service: str, method: str) -> "ToolName":
    return ToolName(service.replace(GROUP_SEPARATOR, CANONICAL_GROUP_SEPARATOR) + METHOD_SEPARATOR + method)


class ToolName(str):
    """A canonical tool name with accessors for its group and method parts."""

    @classmethod
    def parse(cls, raw: str) -> "ToolName":
        return cls(canonical(raw))

    def service(self) -> str:
        """Return the group path with ``/`` separators restored.

        Without a method separator the whole name is returned.
        """
        head, sep, _ = self.rpartition(METHOD_SEPARATOR)
        if not sep:
            return str(self)
        return head.replace(CANONICAL_GROUP_SEPARATOR, GROUP_SEPARATOR)

    def method(self) -> str:
        """Return the bare method name, or ``""`` without a method separator."""
        _, sep, tail = self.rpartition(METHOD_SEPARATOR)
        if not sep:
            return ""
        return tail

    def tool_name(self) -> str:
        return self.replace(GROUP_SEPARATOR, CANONICAL_GROUP_SEPARATOR)

    def __repr__(self) -> str:
        return f"ToolName({str(self)!r})"
