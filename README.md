# bifrost

Provider-neutral building blocks for describing text and chat completion
requests to AI model providers (OpenAI, Azure, Anthropic, Bedrock, Cohere),
their responses, the accounts and settings behind them, and a plugin that
traces each request.

The package has four modules:

- `bifrost.schemas`: the request and response data model (`BifrostRequest`,
  `RequestInput`, `Message`, `ImageContent`, `ModelParameters`, `Tool`,
  `ToolChoice`, `Fallback`, `BifrostResponse`, `LLMUsage`, `BifrostError`, …),
  the `ModelProvider`, `ModelChatMessageRole`, `ToolChoiceType` and `LogLevel`
  enums, the `BifrostConfig` settings record, and the abstract `Logger` and
  `Plugin` interfaces.
- `bifrost.provider`: account and provider configuration (`Key`,
  `NetworkConfig`, `ProviderConfig`, `ProxyConfig`, `ProxyType`,
  `ConcurrencyAndBufferSize`, `MetaConfig`), the default values and the
  standard provider error messages, and the abstract `Account` and `Provider`
  interfaces.
- `bifrost.meta`: provider-specific settings, `AzureMetaConfig` and
  `BedrockMetaConfig`.
- `bifrost.tracing`: a `TracePlugin` that opens a trace for each request and
  records the response when it comes back.

## Installing

```
pip install .
```

For running the test suite:

```
pip install ".[test]"
pytest
```

## Building a request

```python
from bifrost.schemas import (
    BifrostRequest, Fallback, Message, ModelChatMessageRole,
    ModelParameters, ModelProvider, RequestInput,
)

request = BifrostRequest(
    model="gpt-4o-mini",
    input=RequestInput(
        chat_completion_input=[
            Message(role=ModelChatMessageRole.USER, content="Tell me a joke!"),
        ],
    ),
    params=ModelParameters(max_tokens=4096),
    fallbacks=[Fallback(provider=ModelProvider.ANTHROPIC, model="claude-3-5-sonnet-20240620")],
)
```

The data classes with a `to_dict()` method turn themselves into JSON-shaped
dictionaries. `ModelParameters.to_dict()` leaves out every parameter that is
not set, except `parallel_tool_calls`, which is always present (as `None` when
unset); `extra_params` are not included in the result.

`BifrostResponse.from_dict()` builds a response back from such a mapping, so
`BifrostResponse.from_dict(response.to_dict())` gives an equal response.

`BifrostError` is an exception: raise it, and its string form is the message of
its `ErrorField`.

## Describing an account

Subclass `Account` and answer three questions: which providers are configured,
which keys belong to a provider, and how the provider is configured.

```python
from bifrost.meta import BedrockMetaConfig
from bifrost.provider import (
    Account, ConcurrencyAndBufferSize, Key, NetworkConfig, ProviderConfig,
)
from bifrost.schemas import ModelProvider


class MyAccount(Account):
    def configured_providers(self):
        return [ModelProvider.OPENAI, ModelProvider.BEDROCK]

    def keys_for_provider(self, provider_key):
        return [Key(value="placeholder", models=["gpt-4o-mini"], weight=1.0)]

    def config_for_provider(self, provider_key):
        meta = None
        if provider_key == ModelProvider.BEDROCK:
            meta = BedrockMetaConfig(secret_access_key="secret", region="us-east-1")
        return ProviderConfig(
            network_config=NetworkConfig(max_retries=1),
            meta_config=meta,
            concurrency_and_buffer_size=ConcurrencyAndBufferSize(concurrency=3, buffer_size=10),
        )
```

`NetworkConfig` holds its backoff durations as `timedelta`; its `to_dict()`
gives them in nanoseconds. `ProviderConfig.to_dict()` does not include the
logger.

## Tracing requests

`create_trace_plugin(api_key, logger_id, logger_factory=None)` checks its
settings and builds a `TracePlugin`. Leaving out the API key or the logger id
raises `ValueError`. Without a factory the plugin records into an in-memory
`TraceLogger` for that logger id; a factory is called with the API key and the
logger id and must return a `TraceLogger`.

`pre_hook(ctx, req)` starts a trace named `bifrost`, records the request as its
input and, when `ctx` is a mapping, stores the trace id in it. The id comes
from `make_trace_id()`: the date and time as `YYYYMMDD_HHMMSS` followed by a
fixed `000`. `post_hook(ctx, res)` reads the id back and records the response
as the trace's output; if `ctx` holds no id it raises `TraceIDMissingError`
(a `LookupError`). With `ctx` set to `None` nothing is stored or read. Both
hooks return what they were given, unchanged.

```python
from bifrost.tracing import create_trace_plugin

plugin = create_trace_plugin("placeholder", "my-logger")
ctx = {}
plugin.pre_hook(ctx, request)
```

## What the package does not do

The package describes requests, responses and settings; it does not send
anything. It has no engine that queues requests, runs plugins or tries
fallbacks, no concrete `Provider` for any service, no HTTP client and no
server. `TraceLogger` keeps traces in memory only and passes them to no
tracing service.