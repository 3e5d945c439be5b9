"""Tool reporting the current date and time."""

from datetime import datetime, timezone
from typing import Any, Callable

from ...errors import Ok, Result
from .base import BaseTool, ToolArgs, ToolDescriptor


class CurrentDateTimeTool(BaseTool):
    """Returns the current date and time.

    The clock is injectable so results are deterministic in tests.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None):
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def descriptor(self) -> ToolDescriptor:
        return ToolDescriptor(
            name="get_current_datetime",
            description="Get the current date and time.",
            parameters={
                "type": "object",
                "properties": {
                    "format_string": {
                        "type": "string",
                        "description": "Optional strftime format for the result.",
                    }
                },
            },
        )

    async def run(self, args: ToolArgs) -> Result[Any]:
        now = self._clock()
        result = {
            "current_datetime": now.isoformat(),
            "timestamp": now.timestamp(),
            "timezone": now.tzname() or "local",
        }
        format_string = args.get("format_string")
        if format_string:
            result["formatted"] = now.strftime(format_string)
        return Ok(result)
