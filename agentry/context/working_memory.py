"""SharedWorkingMemory: a JSON-like dict that several agents read and extend."""

import copy
from typing import Any

Memory = dict[str, Any]


def deep_merge(target: Memory, source: Memory) -> Memory:
    """Merge ``source`` into a copy of ``target``.

    Nested dicts are merged key by key; lists, scalars and None replace
    whatever was there.
    """
    merged = dict(target)
    for key, value in source.items():
        current = merged.get(key)
        if isinstance(value, dict) and isinstance(current, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


class SharedWorkingMemory:
    """Working memory handed to every agent that shares one context.

    Example:
        memory = SharedWorkingMemory({"user": {"name": "Alice"}})
        memory.merge_to_working_memory({"user": {"city": "Lisbon"}})
        memory.get_working_memory()
        # {"user": {"name": "Alice", "city": "Lisbon"}}
    """

    def __init__(self, initial: Memory | None = None):
        self._memory: Memory = copy.deepcopy(initial) if initial else {}

    def get_working_memory(self) -> Memory:
        """Snapshot of the memory; changing it leaves the memory untouched."""
        return copy.deepcopy(self._memory)

    def merge_to_working_memory(self, update: Memory) -> None:
        self._memory = deep_merge(self._memory, copy.deepcopy(update))
