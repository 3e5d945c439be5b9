"""Gateway abstraction for LLM providers."""

from typing import AsyncIterator, Protocol

from ..errors import Result
from ..models import CompletionConfig, GatewayResponse, LlmMessage, StreamChunk
from .tools import ToolDescriptor


class ILlmGateway(Protocol):
    """Request/response boundary to an LLM provider.

    Implementations convert provider failures into Err(GatewayError) rather
    than raising.
    """

    async def generate(
        self,
        model: str,
        messages: list[LlmMessage],
        config: CompletionConfig | None = None,
        tools: list[ToolDescriptor] | None = None,
    ) -> Result[GatewayResponse]:
        """Generate a whole completion."""
        ...

    def generate_stream(
        self,
        model: str,
        messages: list[LlmMessage],
        config: CompletionConfig | None = None,
        tools: list[ToolDescriptor] | None = None,
    ) -> AsyncIterator[Result[StreamChunk]]:
        """Stream a completion; the final chunk has done=True.

        Tool calls are delivered whole, on the final chunk. A stream cannot be
        resumed; retrying needs a fresh call.
        """
        ...

    async def list_models(self) -> Result[list[str]]:
        """List the models the provider offers."""
        ...
