"""LlmAgent: a system prompt, tools and a broker bundled together."""

from ..errors import Result
from ..models import LlmMessage
from .broker import LlmBroker
from .tools import ILlmTool


class LlmAgent:
    """Answers single requests with a fixed behaviour and tool set.

    Wrap it in a ToolWrapper to let another agent delegate to it.
    """

    def __init__(
        self,
        broker: LlmBroker,
        tools: list[ILlmTool] | None = None,
        behaviour: str = "You are a helpful assistant.",
    ):
        self._broker = broker
        self._tools = list(tools or [])
        self._behaviour = behaviour

    @property
    def broker(self) -> LlmBroker:
        return self._broker

    @property
    def tools(self) -> list[ILlmTool]:
        return list(self._tools)

    @property
    def behaviour(self) -> str:
        return self._behaviour

    async def generate(self, input: str, correlation_id: str | None = None) -> Result[str]:
        messages = self.create_initial_messages()
        messages.append(LlmMessage.user(input))
        return await self._broker.generate(
            messages, tools=self._tools or None, correlation_id=correlation_id
        )

    def create_initial_messages(self) -> list[LlmMessage]:
        return [LlmMessage.system(self._behaviour)]
