"""Operation groups and the shared tool registry."""

from .builder import build_tool_entries, result_text
from .lock import ReadWriteLock
from .operations import Executable, LocalOperationGroup, OperationGroup, OperationSignature
from .registry import ToolRegistry

__all__ = [
    "Executable",
    "LocalOperationGroup",
    "OperationGroup",
    "OperationSignature",
    "ReadWriteLock",
    "ToolRegistry",
    "build_tool_entries",
    "result_text",
]
