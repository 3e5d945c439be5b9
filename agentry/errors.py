"""Error taxonomy and the Result type returned by fallible operations."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")


class ErrorKind(str, Enum):
    """Classification carried by every AgentryError."""

    GATEWAY = "gateway_error"
    TOOL = "tool_error"
    VALIDATION = "validation_error"
    PARSE = "parse_error"
    TIMEOUT = "timeout_error"


class AgentryError(Exception):
    """Base class for all agentry errors."""

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "message": self.message}


class GatewayError(AgentryError):
    """Network or provider API failure."""

    kind = ErrorKind.GATEWAY

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ToolError(AgentryError):
    """Tool execution failure."""

    kind = ErrorKind.TOOL

    def __init__(self, message: str, tool_name: str | None = None):
        super().__init__(message)
        self.tool_name = tool_name


class ToolNotFoundError(ToolError):
    """The model asked for a tool that was not provided."""

    def __init__(self, tool_name: str):
        super().__init__(f"Tool {tool_name} not found", tool_name=tool_name)


class MaxToolIterationsError(ToolError):
    """The tool loop hit its iteration bound without a final answer."""

    def __init__(self, max_iterations: int):
        super().__init__(f"Maximum tool iterations ({max_iterations}) exceeded")
        self.max_iterations = max_iterations


class ValidationError(AgentryError):
    """Invalid input to an operation."""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class MissingCorrelationIdError(ValidationError):
    """An event that needs a correlation id arrived without one."""

    def __init__(self, message: str = "Event missing correlation ID"):
        super().__init__(message, field="correlation_id")


class ParseError(AgentryError):
    """Parsing or serialization failure."""

    kind = ErrorKind.PARSE


class ArgumentParseError(ParseError):
    """Tool call arguments were not a valid JSON object."""

    def __init__(self, message: str, tool_name: str | None = None):
        super().__init__(message)
        self.tool_name = tool_name


class TimeoutExceededError(AgentryError):
    """A bounded wait elapsed."""

    kind = ErrorKind.TIMEOUT

    def __init__(self, message: str = "Operation timed out", timeout: float | None = None):
        super().__init__(message)
        self.timeout = timeout


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """Failed outcome."""

    error: AgentryError

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]


def is_ok(result: "Result[Any]") -> bool:
    """Check if a Result is Ok."""
    return isinstance(result, Ok)


def is_err(result: "Result[Any]") -> bool:
    """Check if a Result is Err."""
    return isinstance(result, Err)


def unwrap(result: "Result[T]") -> T:
    """Return the value of an Ok result, raise the error of an Err."""
    if isinstance(result, Ok):
        return result.value
    raise result.error


def unwrap_or(result: "Result[T]", default: T) -> T:
    """Return the value of an Ok result or the given default."""
    if isinstance(result, Ok):
        return result.value
    return default


def map_result(result: "Result[T]", fn: Callable[[T], U]) -> "Result[U]":
    """Apply fn to the value of an Ok result."""
    if isinstance(result, Ok):
        return Ok(fn(result.value))
    return result


def map_error(
    result: "Result[T]", fn: Callable[[AgentryError], AgentryError]
) -> "Result[T]":
    """Apply fn to the error of an Err result."""
    if isinstance(result, Err):
        return Err(fn(result.error))
    return result
