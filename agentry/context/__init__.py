"""Context shared between agents."""

from .working_memory import SharedWorkingMemory, deep_merge

__all__ = ["SharedWorkingMemory", "deep_merge"]
