"""AsyncLlmAgent: base class for agents whose work is an LLM request."""

import json
from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..context import SharedWorkingMemory
from ..errors import Err, Ok, ParseError, Result
from ..llm import ILlmTool, LlmBroker
from ..logging_config import get_logger
from ..models import Event, LlmMessage

logger = get_logger(__name__)


class AsyncLlmAgent(ABC):
    """Asynchronous agent backed by a broker and a behaviour prompt.

    Subclasses implement ``receive_event_async`` and call
    ``generate_response`` with the text to send. When a response model is
    configured (JSON-schema dict or pydantic model class) the response is a
    structured object; otherwise it is text produced with the agent's tools.
    """

    def __init__(
        self,
        broker: LlmBroker,
        behaviour: str,
        response_model: dict[str, Any] | type[BaseModel] | None = None,
        tools: list[ILlmTool] | None = None,
    ):
        self._broker = broker
        self._behaviour = behaviour
        self._response_model = response_model
        self._tools: list[ILlmTool] = list(tools or [])

    @property
    def tools(self) -> list[ILlmTool]:
        return list(self._tools)

    def add_tool(self, tool: ILlmTool) -> None:
        self._tools.append(tool)

    async def generate_response(
        self, content: str, correlation_id: str | None = None
    ) -> Result[Any]:
        messages = [LlmMessage.system(self._behaviour), LlmMessage.user(content)]
        if self._response_model is not None:
            return await self._broker.generate_object(
                messages, self._response_model, correlation_id=correlation_id
            )
        return await self._broker.generate(
            messages, tools=self._tools or None, correlation_id=correlation_id
        )

    @abstractmethod
    async def receive_event_async(self, event: Event) -> Result[list[Event]]:
        ...


MEMORY_PROMPT = (
    "This is what you remember:\n{memory}\n\n"
    "Remember anything new you learn by storing it to your working memory in your response."
)


class AsyncLlmAgentWithMemory(AsyncLlmAgent):
    """AsyncLlmAgent that reads and extends a SharedWorkingMemory.

    Every request carries the behaviour, the current memory and the agent's
    instructions. The response schema gains a ``memory`` object; whatever
    the model puts there is deep-merged into the shared memory and removed
    from the value handed back to the subclass.
    """

    def __init__(
        self,
        broker: LlmBroker,
        memory: SharedWorkingMemory,
        behaviour: str,
        instructions: str,
        response_model: dict[str, Any] | type[BaseModel],
        tools: list[ILlmTool] | None = None,
    ):
        super().__init__(broker, behaviour, response_model=response_model, tools=tools)
        self._memory = memory
        self._instructions = instructions

    @property
    def memory(self) -> SharedWorkingMemory:
        return self._memory

    def create_initial_messages_with_memory(self) -> list[LlmMessage]:
        remembered = json.dumps(self._memory.get_working_memory(), indent=2)
        return [
            LlmMessage.system(self._behaviour),
            LlmMessage.user(MEMORY_PROMPT.format(memory=remembered)),
            LlmMessage.user(self._instructions),
        ]

    async def generate_response_with_memory(
        self, content: str, correlation_id: str | None = None
    ) -> Result[Any]:
        """Ask for a structured response and fold learned facts into memory.

        Returns Ok with the response minus its ``memory`` field (a dict, or
        a model instance when the response model is a pydantic class), or
        the broker's Err. Memory is only updated on success.
        """
        messages = self.create_initial_messages_with_memory()
        messages.append(LlmMessage.user(content))

        result = await self._broker.generate_object(
            messages, self._schema_with_memory(), correlation_id=correlation_id
        )
        if isinstance(result, Err):
            return result

        if not isinstance(result.value, dict):
            return Err(ParseError("Expected a JSON object response"))
        response = dict(result.value)
        learned = response.pop("memory", None)
        if isinstance(learned, dict) and learned:
            self._memory.merge_to_working_memory(learned)
            logger.debug(
                "Merged %s memory keys",
                len(learned),
                extra={"correlation_id": correlation_id},
            )

        if isinstance(self._response_model, type):
            try:
                return Ok(self._response_model.model_validate(response))
            except PydanticValidationError as e:
                return Err(ParseError(f"Failed to parse JSON response: {e}"))
        return Ok(response)

    def _schema_with_memory(self) -> dict[str, Any]:
        if isinstance(self._response_model, type):
            base = self._response_model.model_json_schema()
        else:
            base = self._response_model
        schema = dict(base)
        schema["type"] = "object"
        schema["properties"] = {
            **base.get("properties", {}),
            "memory": {
                "type": "object",
                "description": "Add anything new that you have learned here.",
                "default": self._memory.get_working_memory(),
            },
        }
        schema["required"] = list(base.get("required", []))
        return schema
