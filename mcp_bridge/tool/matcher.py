from __future__ import annotations

PREFIX_SUFFIXES = ("/", "_", "-")


def match(pattern: str, name: str) -> bool:
    """Report whether ``name`` satisfies ``pattern``.

    Rules:
    - ``""`` or ``"*"`` matches everything.
    - A pattern ending with ``/``, ``_`` or ``-`` is a prefix; the separator is
      kept so the boundary is significant (``"sys/"`` does not match
      ``"system/exec"``).
    - Any other pattern must equal the full name.

    Callers normalise names (e.g. ``/`` to ``_`` for tool names) themselves.
    """
    if pattern in ("", "*"):
        return True
    if pattern.endswith(PREFIX_SUFFIXES):
        return name.startswith(pattern)
    return name == pattern
