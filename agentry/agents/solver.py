"""IterativeProblemSolver: repeated tool-using chat turns until done."""

from ..errors import Err, Result
from ..llm import ChatSession, ILlmTool, LlmBroker
from ..logging_config import get_logger
from ..models import LlmMessage

logger = get_logger(__name__)

DEFAULT_SOLVER_PROMPT = (
    "You are a problem-solving assistant that can solve complex problems step by step. "
    "You analyze problems, break them down into smaller parts, and solve them systematically. "
    "If you cannot solve a problem completely in one step, you make progress and identify "
    "what to do next."
)

STEP_PROMPT = """
Given the user request:
{problem}

Use the tools at your disposal to act on their request. You may wish to create a step-by-step plan for more complicated requests.

If you cannot provide an answer, say only "FAIL".
If you have the answer, say only "DONE".
"""

SUMMARY_PROMPT = (
    "Summarize the final result, and only the final result, "
    "without commenting on the process by which you achieved it."
)


class IterativeProblemSolver:
    """Works on a problem over several chat turns, then summarizes.

    Each step asks the model to act on the request with its tools. A reply
    containing FAIL or DONE (case-insensitive) ends the loop early;
    otherwise it runs for ``max_iterations`` steps.
    """

    def __init__(
        self,
        broker: LlmBroker,
        tools: list[ILlmTool] | None = None,
        max_iterations: int = 3,
        system_prompt: str = DEFAULT_SOLVER_PROMPT,
        temperature: float = 1.0,
    ):
        self._max_iterations = max_iterations
        self._chat = ChatSession(
            broker,
            system_prompt=system_prompt,
            tools=tools,
            temperature=temperature,
        )

    async def solve(self, problem: str, correlation_id: str | None = None) -> Result[str]:
        steps = 0
        while steps < self._max_iterations:
            result = await self._chat.send(
                STEP_PROMPT.format(problem=problem), correlation_id=correlation_id
            )
            if isinstance(result, Err):
                return result

            steps += 1
            reply = result.value.lower()
            if "fail" in reply or "done" in reply:
                break

        logger.debug(
            "Solver finished after %s steps",
            steps,
            extra={"correlation_id": correlation_id},
        )
        return await self._chat.send(SUMMARY_PROMPT, correlation_id=correlation_id)

    def get_messages(self) -> list[LlmMessage]:
        return self._chat.get_messages()

    def clear(self) -> None:
        self._chat.clear()
