"""A plugin that records a trace for every request and its response."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, MutableMapping, Optional

from .schemas import BifrostRequest, BifrostResponse, Plugin

TRACE_NAME = "bifrost"


@dataclass(frozen=True)
class _ContextKey:
    name: str


TRACE_ID_KEY = _ContextKey("traceID")


class TraceIDMissingError(LookupError):
    """The request context holds no trace id."""


@dataclass
class Trace:
    """One recorded trace."""

    id: str
    name: Optional[str] = None
    input: Optional[str] = None
    output: Optional[str] = None

    def set_input(self, value: str) -> None:
        self.input = value


@dataclass
class TraceLogger:
    """Keeps traces by id for one logger."""

    logger_id: str
    traces: dict[str, Trace] = field(default_factory=dict)

    def trace(self, trace_id: str, name: Optional[str] = None) -> Trace:
        """Start a trace and return it."""
        record = Trace(id=trace_id, name=name)
        self.traces[trace_id] = record
        return record

    def set_trace_output(self, trace_id: str, output: str) -> None:
        """Record the output of the trace with this id."""
        self.traces.setdefault(trace_id, Trace(id=trace_id)).output = output


def make_trace_id(now: Optional[datetime] = None) -> str:
    """Trace id built from the time: date, underscore, time and a fixed 000."""
    moment = now if now is not None else datetime.now()
    return moment.strftime("%Y%m%d_%H%M%S") + "000"


class TracePlugin(Plugin):
    """Records request input and response output through a TraceLogger."""

    def __init__(self, logger: TraceLogger) -> None:
        self.logger = logger

    def pre_hook(
        self, ctx: Optional[MutableMapping[Any, Any]], req: BifrostRequest
    ) -> BifrostRequest:
        trace_id = make_trace_id()
        trace = self.logger.trace(trace_id, TRACE_NAME)
        trace.set_input(f"New Request Incoming: {req}")
        if ctx is not None:
            ctx[TRACE_ID_KEY] = trace_id
        return req

    def post_hook(
        self, ctx: Optional[MutableMapping[Any, Any]], res: BifrostResponse
    ) -> BifrostResponse:
        if ctx is not None:
            trace_id = ctx.get(TRACE_ID_KEY)
            if not isinstance(trace_id, str):
                raise TraceIDMissingError("traceID not found in context")
            self.logger.set_trace_output(trace_id, f"Response: {res}")
        return res


def create_trace_plugin(
    api_key: str,
    logger_id: str,
    logger_factory: Optional[Callable[[str, str], TraceLogger]] = None,
) -> TracePlugin:
    """Build a TracePlugin; the factory receives the API key and logger id."""
    if not api_key:
        raise ValueError("api_key is not set")
    if not logger_id:
        raise ValueError("logger_id is not set")
    if logger_factory is None:
        logger = TraceLogger(logger_id)
    else:
        logger = logger_factory(api_key, logger_id)
    return TracePlugin(logger)