"""SimpleRecursiveAgent: goal solving driven by its own solver events."""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable

from ..errors import AgentryError, Err, Ok, Result, TimeoutExceededError
from ..llm import ChatSession, ILlmTool, LlmBroker
from ..logging_config import get_logger
from .solver import DEFAULT_SOLVER_PROMPT, STEP_PROMPT

logger = get_logger(__name__)

DEFAULT_SOLVE_TIMEOUT_SECONDS = 300.0


@dataclass
class GoalState:
    """Progress of one solve() call, shared by every event it emits."""

    goal: str
    max_iterations: int
    iteration: int = 0
    solution: str | None = None
    is_complete: bool = False
    error: AgentryError | None = None


@dataclass
class SolverEvent:
    state: GoalState


@dataclass
class GoalSubmittedEvent(SolverEvent):
    pass


@dataclass
class IterationCompletedEvent(SolverEvent):
    response: str = ""


@dataclass
class GoalAchievedEvent(SolverEvent):
    pass


@dataclass
class GoalFailedEvent(SolverEvent):
    pass


@dataclass
class SolverTimeoutEvent(SolverEvent):
    pass


SolverHandler = Callable[[SolverEvent], Awaitable[None]]


class SolverEventEmitter:
    """In-process pub/sub for solver events, keyed by event class."""

    def __init__(self):
        self._subscribers: dict[type[SolverEvent], list[SolverHandler]] = {}

    def subscribe(
        self, event_type: type[SolverEvent], handler: SolverHandler
    ) -> Callable[[], None]:
        """Register a handler; returns a function that removes it."""
        handlers = self._subscribers.setdefault(event_type, [])
        handlers.append(handler)

        def unsubscribe() -> None:
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    async def emit(self, event: SolverEvent) -> None:
        """Run every handler for the event's class; handler errors are logged."""
        handlers = list(self._subscribers.get(type(event), []))
        if not handlers:
            return
        results = await asyncio.gather(
            *[handler(event) for handler in handlers],
            return_exceptions=True,
        )
        for handler, result in zip(handlers, results):
            if isinstance(result, Exception):
                logger.error(
                    "Error in %s handler %s: %s",
                    type(event).__name__,
                    getattr(handler, "__name__", handler),
                    result,
                )


class SimpleRecursiveAgent:
    """Works towards a goal one chat turn at a time.

    Submitting a goal emits GoalSubmittedEvent; each turn emits
    IterationCompletedEvent, which either schedules the next turn or
    finishes with GoalAchievedEvent / GoalFailedEvent. A reply containing
    FAIL or DONE (case-insensitive) finishes early; otherwise the last reply
    becomes the best solution once ``max_iterations`` turns have run.
    Subscribe to ``emitter`` to observe progress.

    Example:
        agent = SimpleRecursiveAgent(broker, [CurrentDateTimeTool()], max_iterations=5)
        agent.emitter.subscribe(IterationCompletedEvent, log_progress)
        result = await agent.solve("What day is next Friday?")
    """

    def __init__(
        self,
        broker: LlmBroker,
        tools: list[ILlmTool] | None = None,
        max_iterations: int = 5,
        system_prompt: str = DEFAULT_SOLVER_PROMPT,
        timeout: float = DEFAULT_SOLVE_TIMEOUT_SECONDS,
    ):
        self._max_iterations = max_iterations
        self._timeout = timeout
        self._correlation_id: str | None = None
        self._chat = ChatSession(broker, system_prompt=system_prompt, tools=tools)
        self.emitter = SolverEventEmitter()
        self.emitter.subscribe(GoalSubmittedEvent, self._on_goal_submitted)
        self.emitter.subscribe(IterationCompletedEvent, self._on_iteration_completed)

    async def solve(self, goal: str, correlation_id: str | None = None) -> Result[str]:
        """Run turns until the goal is finished.

        Returns:
            Ok with the solution text, the broker's Err if a turn failed, or
            Err(TimeoutExceededError) when ``timeout`` seconds pass first.
        """
        state = GoalState(goal=goal, max_iterations=self._max_iterations)
        finished: asyncio.Future[GoalState] = asyncio.get_running_loop().create_future()

        async def on_finished(event: SolverEvent) -> None:
            if not finished.done():
                finished.set_result(event.state)

        unsubscribers = [
            self.emitter.subscribe(event_type, on_finished)
            for event_type in (GoalAchievedEvent, GoalFailedEvent, SolverTimeoutEvent)
        ]
        self._correlation_id = correlation_id
        run = asyncio.create_task(self.emitter.emit(GoalSubmittedEvent(state)))
        run.add_done_callback(lambda _: finished.done() or finished.set_result(state))
        try:
            await asyncio.wait_for(asyncio.shield(finished), self._timeout)
        except asyncio.TimeoutError:
            run.cancel()
            message = f"Timeout: Could not solve the problem within {self._timeout} seconds."
            state.solution = message
            state.is_complete = True
            await self.emitter.emit(SolverTimeoutEvent(state))
            return Err(TimeoutExceededError(message, timeout=self._timeout))
        finally:
            for unsubscribe in unsubscribers:
                unsubscribe()

        await run
        if state.error is not None:
            return Err(state.error)
        if not state.is_complete:
            return Err(AgentryError(f"Solving stopped after {state.iteration} iterations"))
        return Ok(state.solution or "")

    def clear(self) -> None:
        self._chat.clear()

    async def _on_goal_submitted(self, event: SolverEvent) -> None:
        await self._process_iteration(event.state)

    async def _on_iteration_completed(self, event: SolverEvent) -> None:
        state = event.state
        response = event.response
        reply = response.lower()

        if "fail" in reply:
            state.solution = f"Failed to solve after {state.iteration} iterations:\n{response}"
            state.is_complete = True
            await self.emitter.emit(GoalFailedEvent(state))
        elif "done" in reply:
            state.solution = response
            state.is_complete = True
            await self.emitter.emit(GoalAchievedEvent(state))
        elif state.iteration >= state.max_iterations:
            state.solution = (
                f"Best solution after {state.max_iterations} iterations:\n{response}"
            )
            state.is_complete = True
            await self.emitter.emit(GoalAchievedEvent(state))
        else:
            await self._process_iteration(state)

    async def _process_iteration(self, state: GoalState) -> None:
        state.iteration += 1
        result = await self._chat.send(
            STEP_PROMPT.format(problem=state.goal), correlation_id=self._correlation_id
        )
        if isinstance(result, Err):
            logger.error(
                "Iteration %s failed: %s",
                state.iteration,
                result.error,
                extra={"correlation_id": self._correlation_id},
            )
            state.error = result.error
            state.solution = f"Failed to solve after {state.iteration} iterations:\n{result.error}"
            state.is_complete = True
            await self.emitter.emit(GoalFailedEvent(state))
            return

        logger.debug(
            "Iteration %s of %s complete",
            state.iteration,
            state.max_iterations,
            extra={"correlation_id": self._correlation_id},
        )
        await self.emitter.emit(IterationCompletedEvent(state, response=result.value))
