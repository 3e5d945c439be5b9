"""Event-driven agent runtime."""

from .aggregator import AsyncAggregatorAgent
from .base import AnyAgent, IAgent, IAsyncAgent, agent_name
from .dispatcher import AsyncDispatcher, IDispatcher
from .llm_agent import AsyncLlmAgent, AsyncLlmAgentWithMemory
from .recursive_agent import (
    GoalAchievedEvent,
    GoalFailedEvent,
    GoalState,
    GoalSubmittedEvent,
    IterationCompletedEvent,
    SimpleRecursiveAgent,
    SolverEvent,
    SolverEventEmitter,
    SolverTimeoutEvent,
)
from .router import Router
from .solver import IterativeProblemSolver

__all__ = [
    "AnyAgent",
    "AsyncAggregatorAgent",
    "AsyncDispatcher",
    "AsyncLlmAgent",
    "AsyncLlmAgentWithMemory",
    "GoalAchievedEvent",
    "GoalFailedEvent",
    "GoalState",
    "GoalSubmittedEvent",
    "IAgent",
    "IAsyncAgent",
    "IDispatcher",
    "IterationCompletedEvent",
    "IterativeProblemSolver",
    "Router",
    "SimpleRecursiveAgent",
    "SolverEvent",
    "SolverEventEmitter",
    "SolverTimeoutEvent",
    "agent_name",
]
