from .matcher import match
from .name import ToolName, canonical, new_name

__all__ = [
    "ToolName",
    "canonical",
    "match",
    "new_name",
]
