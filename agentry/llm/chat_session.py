"""ChatSession: multi-turn conversation with a bounded context window."""

import math

from ..config import DEFAULT_MAX_CONTEXT_TOKENS, ESTIMATED_CHARS_PER_TOKEN
from ..errors import Err, Ok, Result
from ..models import CompletionConfig, LlmMessage
from .broker import LlmBroker
from .tools import ILlmTool

DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant."


def estimate_tokens(message: LlmMessage) -> int:
    """Rough token count: characters divided by four, rounded up."""
    return math.ceil(len(message.text) / ESTIMATED_CHARS_PER_TOKEN)


class ChatSession:
    """Keeps conversation history and sends it through a broker.

    The system prompt is always kept. When the estimated token count of the
    history exceeds ``max_context``, the oldest other turns are dropped.
    """

    def __init__(
        self,
        broker: LlmBroker,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        tools: list[ILlmTool] | None = None,
        max_context: int = DEFAULT_MAX_CONTEXT_TOKENS,
        temperature: float = 1.0,
    ):
        self._broker = broker
        self._tools = list(tools) if tools else None
        self._max_context = max_context
        self._temperature = temperature
        self._messages: list[LlmMessage] = []
        self._insert(LlmMessage.system(system_prompt))

    async def send(self, query: str, correlation_id: str | None = None) -> Result[str]:
        """Send a user message and record the assistant's reply."""
        self._insert(LlmMessage.user(query))

        result = await self._broker.generate(
            list(self._messages),
            tools=self._tools,
            config=CompletionConfig(temperature=self._temperature),
            correlation_id=correlation_id,
        )
        if isinstance(result, Err):
            return result

        self._insert(LlmMessage.assistant(result.value))
        return Ok(result.value)

    def get_messages(self) -> list[LlmMessage]:
        return list(self._messages)

    def clear(self) -> None:
        """Drop everything except the system prompt."""
        self._messages = self._messages[:1]

    def _insert(self, message: LlmMessage) -> None:
        self._messages.append(message)
        total = sum(estimate_tokens(m) for m in self._messages)
        while total > self._max_context and len(self._messages) > 1:
            removed = self._messages.pop(1)
            total -= estimate_tokens(removed)
