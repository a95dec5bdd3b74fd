"""Core request, response, logging and plugin types."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, MutableMapping, Optional

DEFAULT_INITIAL_POOL_SIZE = 100


class ModelChatMessageRole(str, Enum):
    """Role of a chat message."""

    ASSISTANT = "assistant"
    USER = "user"
    SYSTEM = "system"
    CHATBOT = "chatbot"
    TOOL = "tool"


class ModelProvider(str, Enum):
    """AI model providers known to the system."""

    OPENAI = "openai"
    AZURE = "azure"
    ANTHROPIC = "anthropic"
    BEDROCK = "bedrock"
    COHERE = "cohere"


class ToolChoiceType(str, Enum):
    """How the model may choose tools; support varies by provider."""

    NONE = "none"
    AUTO = "auto"
    ANY = "any"
    TOOL = "tool"
    REQUIRED = "required"


class LogLevel(str, Enum):
    """Severity of a log message."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class Logger(ABC):
    """Logging sink used throughout the system."""

    @abstractmethod
    def debug(self, msg: str) -> None:
        """Log detailed debugging information."""

    @abstractmethod
    def info(self, msg: str) -> None:
        """Log a general informational message."""

    @abstractmethod
    def warn(self, msg: str) -> None:
        """Log a potentially harmful situation."""

    @abstractmethod
    def error(self, err: BaseException) -> None:
        """Log a serious problem."""


class Plugin(ABC):
    """Intercepts requests before and responses after a provider call.

    Pre-hooks run in registration order, post-hooks in reverse order.
    ``ctx`` is a mutable mapping shared across the hooks of one request, or
    None. Hooks report failure by raising.
    """

    @abstractmethod
    def pre_hook(
        self, ctx: Optional[MutableMapping[Any, Any]], req: "BifrostRequest"
    ) -> "BifrostRequest":
        """Return the (possibly modified) request."""

    @abstractmethod
    def post_hook(
        self, ctx: Optional[MutableMapping[Any, Any]], result: "BifrostResponse"
    ) -> "BifrostResponse":
        """Return the (possibly modified) response."""


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _with_optional(base: dict, **optional: Any) -> dict:
    base.update({key: value for key, value in optional.items() if value is not None})
    return base


def _enum_or_str(enum_cls: type, value: Any) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        return value


@dataclass
class BifrostConfig:
    """Settings used to set up a Bifrost instance."""

    account: Any
    plugins: list[Plugin] = field(default_factory=list)
    logger: Optional[Logger] = None
    initial_pool_size: int = DEFAULT_INITIAL_POOL_SIZE
    drop_excess_requests: bool = False


@dataclass
class Fallback:
    """A provider and model to try when the primary one fails."""

    provider: ModelProvider
    model: str


@dataclass
class FunctionParameters:
    """Parameter schema of a callable function."""

    type: str
    description: Optional[str] = None
    required: list[str] = field(default_factory=list)
    properties: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return _with_optional(
            {"type": self.type},
            description=self.description,
        ) | {"required": list(self.required), "properties": dict(self.properties)}


@dataclass
class Function:
    """A function the model may call."""

    name: str
    description: str
    parameters: FunctionParameters = field(
        default_factory=lambda: FunctionParameters(type="")
    )

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters.to_dict(),
        }


@dataclass
class Tool:
    """A tool offered to the model."""

    type: str
    function: Function
    id: Optional[str] = None

    def to_dict(self) -> dict:
        result = _with_optional({}, id=self.id)
        result["type"] = self.type
        result["function"] = self.function.to_dict()
        return result


@dataclass
class ToolChoiceFunction:
    """Names the function to call."""

    name: str = ""


@dataclass
class ToolChoice:
    """How a tool should be chosen for a request."""

    type: ToolChoiceType
    function: ToolChoiceFunction = field(default_factory=ToolChoiceFunction)

    def to_dict(self) -> dict:
        return {"type": _plain(self.type), "function": {"name": self.function.name}}


@dataclass
class ModelParameters:
    """Standard model parameters, mapped to each provider's own."""

    tool_choice: Optional[ToolChoice] = None
    tools: Optional[list[Tool]] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    top_k: Optional[int] = None
    max_tokens: Optional[int] = None
    stop_sequences: Optional[list[str]] = None
    presence_penalty: Optional[float] = None
    frequency_penalty: Optional[float] = None
    parallel_tool_calls: Optional[bool] = None
    extra_params: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Serialise the standard parameters; extra_params are not included."""
        result = _with_optional(
            {},
            tool_choice=self.tool_choice.to_dict() if self.tool_choice else None,
            tools=[t.to_dict() for t in self.tools] if self.tools is not None else None,
            temperature=self.temperature,
            top_p=self.top_p,
            top_k=self.top_k,
            max_tokens=self.max_tokens,
            stop_sequences=(
                list(self.stop_sequences) if self.stop_sequences is not None else None
            ),
            presence_penalty=self.presence_penalty,
            frequency_penalty=self.frequency_penalty,
        )
        result["parallel_tool_calls"] = self.parallel_tool_calls
        return result


@dataclass
class ImageContent:
    """Image data attached to a message."""

    url: str
    type: Optional[str] = None
    media_type: Optional[str] = None
    detail: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "url": self.url,
            "media_type": self.media_type,
            "detail": self.detail,
        }


@dataclass
class Message:
    """A single message in a chat conversation."""

    role: ModelChatMessageRole
    content: Optional[str] = None
    image_content: Optional[ImageContent] = None
    tool_calls: Optional[list[Tool]] = None

    def to_dict(self) -> dict:
        return _with_optional(
            {"role": _plain(self.role)},
            content=self.content,
            image_content=self.image_content.to_dict() if self.image_content else None,
            tool_calls=(
                [t.to_dict() for t in self.tool_calls]
                if self.tool_calls is not None
                else None
            ),
        )


@dataclass
class RequestInput:
    """Either a text completion prompt or a chat conversation."""

    text_completion_input: Optional[str] = None
    chat_completion_input: Optional[list[Message]] = None


@dataclass
class BifrostRequest:
    """A request for a text or chat completion.

    Fallbacks are tried in order; the first to succeed is returned.
    """

    model: str
    input: RequestInput
    params: Optional[ModelParameters] = None
    fallbacks: list[Fallback] = field(default_factory=list)


# Response types


@dataclass
class TokenDetails:
    """Prompt token breakdown; not every provider supplies it."""

    cached_tokens: int = 0
    audio_tokens: int = 0


@dataclass
class CompletionTokensDetails:
    """Completion token breakdown; not every provider supplies it."""

    reasoning_tokens: int = 0
    audio_tokens: int = 0
    accepted_prediction_tokens: int = 0
    rejected_prediction_tokens: int = 0


@dataclass
class LLMUsage:
    """Token usage of a request."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    token_details: Optional[TokenDetails] = None
    completion_tokens_details: Optional[CompletionTokensDetails] = None

    def to_dict(self) -> dict:
        details = None
        if self.token_details is not None:
            details = _with_optional(
                {},
                cached_tokens=self.token_details.cached_tokens or None,
                audio_tokens=self.token_details.audio_tokens or None,
            )
        completion = None
        if self.completion_tokens_details is not None:
            c = self.completion_tokens_details
            completion = _with_optional(
                {},
                reasoning_tokens=c.reasoning_tokens or None,
                audio_tokens=c.audio_tokens or None,
                accepted_prediction_tokens=c.accepted_prediction_tokens or None,
                rejected_prediction_tokens=c.rejected_prediction_tokens or None,
            )
        return _with_optional(
            {
                "prompt_tokens": self.prompt_tokens,
                "completion_tokens": self.completion_tokens,
                "total_tokens": self.total_tokens,
            },
            prompt_tokens_details=details,
            completion_tokens_details=completion,
        )


@dataclass
class BilledLLMUsage:
    """Billed units of a request."""

    prompt_tokens: Optional[float] = None
    completion_tokens: Optional[float] = None
    search_units: Optional[float] = None
    classifications: Optional[float] = None


@dataclass
class LogProb:
    """Log probability of one token."""

    logprob: float = 0.0
    token: str = ""
    bytes: list[int] = field(default_factory=list)


@dataclass
class ContentLogProb:
    """Log probability information for content."""

    logprob: float = 0.0
    token: str = ""
    bytes: list[int] = field(default_factory=list)
    top_logprobs: list[LogProb] = field(default_factory=list)


@dataclass
class TextCompletionLogProb:
    """Log probability information for a text completion."""

    text_offset: list[int] = field(default_factory=list)
    token_logprobs: list[float] = field(default_factory=list)
    tokens: list[str] = field(default_factory=list)
    top_logprobs: list[dict[str, float]] = field(default_factory=list)


@dataclass
class LogProbs:
    """Log probabilities for the parts of a response."""

    content: list[ContentLogProb] = field(default_factory=list)
    refusal: list[LogProb] = field(default_factory=list)
    text: TextCompletionLogProb = field(default_factory=TextCompletionLogProb)


@dataclass
class FunctionCall:
    """A function call; arguments are JSON text that may not be valid."""

    arguments: str = ""
    name: Optional[str] = None


@dataclass
class ToolCall:
    """A tool call made by the model."""

    function: FunctionCall = field(default_factory=FunctionCall)
    type: Optional[str] = None
    id: Optional[str] = None

    def to_dict(self) -> dict:
        result = _with_optional({}, type=self.type, id=self.id)
        result["function"] = {
            "name": self.function.name,
            "arguments": self.function.arguments,
        }
        return result


@dataclass
class Citation:
    """A citation in a response."""

    start_index: int = 0
    end_index: int = 0
    title: str = ""
    url: Optional[str] = None
    sources: Any = None
    type: Optional[str] = None


@dataclass
class Annotation:
    """An annotation in a response."""

    type: str = ""
    citation: Citation = field(default_factory=Citation)


def _logprob_to_dict(lp: LogProb) -> dict:
    return _with_optional({}, bytes=list(lp.bytes) or None) | {
        "logprob": lp.logprob,
        "token": lp.token,
    }


def _logprobs_to_dict(lps: LogProbs) -> dict:
    text = lps.text
    return _with_optional(
        {},
        content=[
            {
                "bytes": list(c.bytes),
                "logprob": c.logprob,
                "token": c.token,
                "top_logprobs": [_logprob_to_dict(t) for t in c.top_logprobs],
            }
            for c in lps.content
        ]
        or None,
        refusal=[_logprob_to_dict(r) for r in lps.refusal] or None,
    ) | {
        "text": {
            "text_offset": list(text.text_offset),
            "token_logprobs": list(text.token_logprobs),
            "tokens": list(text.tokens),
            "top_logprobs": [dict(t) for t in text.top_logprobs],
        }
    }


def _annotation_to_dict(annotation: Annotation) -> dict:
    c = annotation.citation
    return {
        "type": annotation.type,
        "url_citation": _with_optional(
            {"start_index": c.start_index, "end_index": c.end_index, "title": c.title},
            url=c.url,
            sources=c.sources,
            type=c.type,
        ),
    }


@dataclass
class BifrostResponseChoiceMessage:
    """The message of one completion choice."""

    role: ModelChatMessageRole
    content: Optional[str] = None
    refusal: Optional[str] = None
    annotations: list[Annotation] = field(default_factory=list)
    tool_calls: Optional[list[ToolCall]] = None

    def to_dict(self) -> dict:
        return _with_optional(
            {"role": _plain(self.role)},
            content=self.content,
            refusal=self.refusal,
            annotations=[_annotation_to_dict(a) for a in self.annotations] or None,
            tool_calls=(
                [t.to_dict() for t in self.tool_calls]
                if self.tool_calls is not None
                else None
            ),
        )


@dataclass
class BifrostResponseChoice:
    """One choice of a completion result."""

    index: int
    message: BifrostResponseChoiceMessage
    finish_reason: Optional[str] = None
    stop_string: Optional[str] = None
    log_probs: Optional[LogProbs] = None

    def to_dict(self) -> dict:
        return _with_optional(
            {"index": self.index, "message": self.message.to_dict()},
            finish_reason=self.finish_reason,
            stop=self.stop_string,
            log_probs=_logprobs_to_dict(self.log_probs) if self.log_probs else None,
        )


@dataclass
class BifrostResponseExtraFields:
    """Additional information attached to a response."""

    provider: ModelProvider
    params: ModelParameters = field(default_factory=ModelParameters)
    latency: Optional[float] = None
    chat_history: Optional[list[BifrostResponseChoiceMessage]] = None
    billed_usage: Optional[BilledLLMUsage] = None
    raw_response: Any = None


def _extra_fields_to_dict(extra: BifrostResponseExtraFields) -> dict:
    billed = None
    if extra.billed_usage is not None:
        b = extra.billed_usage
        billed = _with_optional(
            {},
            prompt_tokens=b.prompt_tokens,
            completion_tokens=b.completion_tokens,
            search_units=b.search_units,
            classifications=b.classifications,
        )
    result = _with_optional(
        {"provider": _plain(extra.provider), "model_params": extra.params.to_dict()},
        latency=extra.latency,
        chat_history=(
            [m.to_dict() for m in extra.chat_history]
            if extra.chat_history is not None
            else None
        ),
        billed_usage=billed,
    )
    result["raw_response"] = extra.raw_response
    return result


@dataclass
class BifrostResponse:
    """The complete result of any request."""

    id: str = ""
    object: str = ""
    choices: list[BifrostResponseChoice] = field(default_factory=list)
    model: str = ""
    created: int = 0
    service_tier: Optional[str] = None
    system_fingerprint: Optional[str] = None
    usage: LLMUsage = field(default_factory=LLMUsage)
    extra_fields: BifrostResponseExtraFields = field(
        default_factory=lambda: BifrostResponseExtraFields(provider="")
    )

    def to_dict(self) -> dict:
        result = _with_optional(
            {},
            id=self.id or None,
            object=self.object or None,
            choices=[c.to_dict() for c in self.choices] or None,
            model=self.model or None,
            created=self.created or None,
            service_tier=self.service_tier,
            system_fingerprint=self.system_fingerprint,
        )
        result["usage"] = self.usage.to_dict()
        result["extra_fields"] = _extra_fields_to_dict(self.extra_fields)
        return result

    @classmethod
    def from_dict(cls, data: dict) -> "BifrostResponse":
        """Build a response from its JSON-shaped mapping."""
        return cls(
            id=data.get("id") or "",
            object=data.get("object") or "",
            choices=[_parse_choice(c) for c in data.get("choices") or []],
            model=data.get("model") or "",
            created=data.get("created") or 0,
            service_tier=data.get("service_tier"),
            system_fingerprint=data.get("system_fingerprint"),
            usage=_parse_usage(data.get("usage") or {}),
            extra_fields=_parse_extra_fields(data.get("extra_fields") or {}),
        )


def _parse_function(data: dict) -> Function:
    params = data.get("parameters") or {}
    return Function(
        name=data.get("name") or "",
        description=data.get("description") or "",
        parameters=FunctionParameters(
            type=params.get("type") or "",
            description=params.get("description"),
            required=list(params.get("required") or []),
            properties=dict(params.get("properties") or {}),
        ),
    )


def _parse_tool(data: dict) -> Tool:
    return Tool(
        type=data.get("type") or "",
        function=_parse_function(data.get("function") or {}),
        id=data.get("id"),
    )


def _parse_params(data: dict) -> ModelParameters:
    choice = data.get("tool_choice")
    tools = data.get("tools")
    stops = data.get("stop_sequences")
    return ModelParameters(
        tool_choice=(
            ToolChoice(
                type=_enum_or_str(ToolChoiceType, choice.get("type") or ""),
                function=ToolChoiceFunction(
                    name=(choice.get("function") or {}).get("name") or ""
                ),
            )
            if choice is not None
            else None
        ),
        tools=[_parse_tool(t) for t in tools] if tools is not None else None,
        temperature=data.get("temperature"),
        top_p=data.get("top_p"),
        top_k=data.get("top_k"),
        max_tokens=data.get("max_tokens"),
        stop_sequences=list(stops) if stops is not None else None,
        presence_penalty=data.get("presence_penalty"),
        frequency_penalty=data.get("frequency_penalty"),
        parallel_tool_calls=data.get("parallel_tool_calls"),
    )


def _parse_logprob(data: dict) -> LogProb:
    return LogProb(
        logprob=data.get("logprob") or 0.0,
        token=data.get("token") or "",
        bytes=list(data.get("bytes") or []),
    )


def _parse_logprobs(data: dict) -> LogProbs:
    text = data.get("text") or {}
    return LogProbs(
        content=[
            ContentLogProb(
                logprob=c.get("logprob") or 0.0,
                token=c.get("token") or "",
                bytes=list(c.get("bytes") or []),
                top_logprobs=[_parse_logprob(t) for t in c.get("top_logprobs") or []],
            )
            for c in data.get("content") or []
        ],
        refusal=[_parse_logprob(r) for r in data.get("refusal") or []],
        text=TextCompletionLogProb(
            text_offset=list(text.get("text_offset") or []),
            token_logprobs=list(text.get("token_logprobs") or []),
            tokens=list(text.get("tokens") or []),
            top_logprobs=[dict(t) for t in text.get("top_logprobs") or []],
        ),
    )


def _parse_message(data: dict) -> BifrostResponseChoiceMessage:
    tool_calls = data.get("tool_calls")
    return BifrostResponseChoiceMessage(
        role=_enum_or_str(ModelChatMessageRole, data.get("role") or ""),
        content=data.get("content"),
        refusal=data.get("refusal"),
        annotations=[
            Annotation(
                type=a.get("type") or "",
                citation=Citation(
                    start_index=(a.get("url_citation") or {}).get("start_index") or 0,
                    end_index=(a.get("url_citation") or {}).get("end_index") or 0,
                    title=(a.get("url_citation") or {}).get("title") or "",
                    url=(a.get("url_citation") or {}).get("url"),
                    sources=(a.get("url_citation") or {}).get("sources"),
                    type=(a.get("url_citation") or {}).get("type"),
                ),
            )
            for a in data.get("annotations") or []
        ],
        tool_calls=(
            [
                ToolCall(
                    function=FunctionCall(
                        arguments=(t.get("function") or {}).get("arguments") or "",
                        name=(t.get("function") or {}).get("name"),
                    ),
                    type=t.get("type"),
                    id=t.get("id"),
                )
                for t in tool_calls
            ]
            if tool_calls is not None
            else None
        ),
    )


def _parse_choice(data: dict) -> BifrostResponseChoice:
    log_probs = data.get("log_probs")
    return BifrostResponseChoice(
        index=data.get("index") or 0,
        message=_parse_message(data.get("message") or {}),
        finish_reason=data.get("finish_reason"),
        stop_string=data.get("stop"),
        log_probs=_parse_logprobs(log_probs) if log_probs is not None else None,
    )


def _parse_usage(data: dict) -> LLMUsage:
    details = data.get("prompt_tokens_details")
    completion = data.get("completion_tokens_details")
    return LLMUsage(
        prompt_tokens=data.get("prompt_tokens") or 0,
        completion_tokens=data.get("completion_tokens") or 0,
        total_tokens=data.get("total_tokens") or 0,
        token_details=(
            TokenDetails(
                cached_tokens=details.get("cached_tokens") or 0,
                audio_tokens=details.get("audio_tokens") or 0,
            )
            if details is not None
            else None
        ),
        completion_tokens_details=(
            CompletionTokensDetails(
                reasoning_tokens=completion.get("reasoning_tokens") or 0,
                audio_tokens=completion.get("audio_tokens") or 0,
                accepted_prediction_tokens=completion.get("accepted_prediction_tokens")
                or 0,
                rejected_prediction_tokens=completion.get("rejected_prediction_tokens")
                or 0,
            )
            if completion is not None
            else None
        ),
    )


def _parse_extra_fields(data: dict) -> BifrostResponseExtraFields:
    history = data.get("chat_history")
    billed = data.get("billed_usage")
    return BifrostResponseExtraFields(
        provider=_enum_or_str(ModelProvider, data.get("provider") or ""),
        params=_parse_params(data.get("model_params") or {}),
        latency=data.get("latency"),
        chat_history=[_parse_message(m) for m in history] if history is not None else None,
        billed_usage=(
            BilledLLMUsage(
                prompt_tokens=billed.get("prompt_tokens"),
                completion_tokens=billed.get("completion_tokens"),
                search_units=billed.get("search_units"),
                classifications=billed.get("classifications"),
            )
            if billed is not None
            else None
        ),
        raw_response=data.get("raw_response"),
    )


@dataclass
class ErrorField:
    """Details of an error."""

    message: str
    type: Optional[str] = None
    code: Optional[str] = None
    error: Optional[BaseException] = None
    param: Any = None
    event_id: Optional[str] = None


@dataclass(eq=False)
class BifrostError(Exception):
    """An error reported by the system or by a provider."""

    error: ErrorField
    is_bifrost_error: bool = False
    event_id: Optional[str] = None
    type: Optional[str] = None
    status_code: Optional[int] = None

    def __str__(self) -> str:
        return self.error.message

    def to_dict(self) -> dict:
        e = self.error
        result = _with_optional({}, event_id=self.event_id, type=self.type)
        result["is_bifrost_error"] = self.is_bifrost_error
        _with_optional(result, status_code=self.status_code)
        result["error"] = _with_optional(
            {},
            type=e.type,
            code=e.code,
        ) | {"message": e.message} | _with_optional(
            {},
            error=str(e.error) if e.error is not None else None,
            param=e.param,
            event_id=e.event_id,
        )
        return result