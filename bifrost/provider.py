"""Provider, account, network and proxy configuration types."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Optional

from .schemas import BifrostResponse, Logger, Message, ModelParameters, ModelProvider

DEFAULT_MAX_RETRIES = 0
DEFAULT_RETRY_BACKOFF_INITIAL = timedelta(milliseconds=500)
DEFAULT_RETRY_BACKOFF_MAX = timedelta(seconds=5)
DEFAULT_REQUEST_TIMEOUT_IN_SECONDS = 30
DEFAULT_BUFFER_SIZE = 100
DEFAULT_CONCURRENCY = 10

ERR_PROVIDER_REQUEST = "failed to make HTTP request to provider API"
ERR_PROVIDER_RESPONSE_UNMARSHAL = "failed to unmarshal response from provider API"
ERR_PROVIDER_JSON_MARSHALING = "failed to marshal request body to JSON"
ERR_PROVIDER_DECODE_STRUCTURED = "failed to decode provider's structured response"
ERR_PROVIDER_DECODE_RAW = "failed to decode provider's raw response"
ERR_PROVIDER_DECOMPRESS = "failed to decompress provider's response"


def _nanoseconds(duration: timedelta) -> int:
    return (duration // timedelta(microseconds=1)) * 1000


@dataclass
class Key:
    """An API key, the models it can access and its load-balancing weight."""

    value: str
    models: list[str] = field(default_factory=list)
    weight: float = 0.0

    def to_dict(self) -> dict:
        return {"value": self.value, "models": list(self.models), "weight": self.weight}


@dataclass
class NetworkConfig:
    """Timeouts and retry behaviour for provider connections."""

    default_request_timeout_in_seconds: int = DEFAULT_REQUEST_TIMEOUT_IN_SECONDS
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_backoff_initial: timedelta = DEFAULT_RETRY_BACKOFF_INITIAL
    retry_backoff_max: timedelta = DEFAULT_RETRY_BACKOFF_MAX

    def to_dict(self) -> dict:
        """Serialise; durations are given in nanoseconds."""
        return {
            "default_request_timeout_in_seconds": self.default_request_timeout_in_seconds,
            "max_retries": self.max_retries,
            "retry_backoff_initial": _nanoseconds(self.retry_backoff_initial),
            "retry_backoff_max": _nanoseconds(self.retry_backoff_max),
        }


class MetaConfig(ABC):
    """Provider-specific settings; attributes a provider does not use are None."""

    secret_access_key: Optional[str] = None
    region: Optional[str] = None
    session_token: Optional[str] = None
    arn: Optional[str] = None
    inference_profiles: Optional[dict[str, str]] = None
    endpoint: Optional[str] = None
    deployments: Optional[dict[str, str]] = None
    api_version: Optional[str] = None

    @abstractmethod
    def to_dict(self) -> dict:
        """Serialise the provider-specific settings."""


@dataclass
class ConcurrencyAndBufferSize:
    """Worker count and queue size for a provider."""

    concurrency: int = DEFAULT_CONCURRENCY
    buffer_size: int = DEFAULT_BUFFER_SIZE


class ProxyType(str, Enum):
    """Kind of proxy used for connections."""

    NONE = "none"
    HTTP = "http"
    SOCKS5 = "socks5"
    ENVIRONMENT = "environment"


@dataclass
class ProxyConfig:
    """Proxy settings."""

    type: ProxyType = ProxyType.NONE
    url: str = ""
    username: str = ""
    password: str = ""


@dataclass
class ProviderConfig:
    """Complete configuration of one provider."""

    network_config: NetworkConfig = field(default_factory=NetworkConfig)
    meta_config: Optional[MetaConfig] = None
    concurrency_and_buffer_size: ConcurrencyAndBufferSize = field(
        default_factory=ConcurrencyAndBufferSize
    )
    logger: Optional[Logger] = None
    proxy_config: Optional[ProxyConfig] = None

    def to_dict(self) -> dict:
        """Serialise the configuration; the logger is not serialised."""
        result = {"network_config": self.network_config.to_dict()}
        if self.meta_config is not None:
            result["meta_config"] = self.meta_config.to_dict()
        result["concurrency_and_buffer_size"] = {
            "concurrency": self.concurrency_and_buffer_size.concurrency,
            "buffer_size": self.concurrency_and_buffer_size.buffer_size,
        }
        if self.proxy_config is not None:
            proxy = self.proxy_config
            result["proxy_config"] = {
                "type": proxy.type.value if isinstance(proxy.type, Enum) else proxy.type,
                "url": proxy.url,
                "username": proxy.username,
                "password": proxy.password,
            }
        return result


class Provider(ABC):
    """An AI model provider. Failures are raised as BifrostError."""

    @property
    @abstractmethod
    def provider_key(self) -> ModelProvider:
        """Identifier of the provider."""

    @abstractmethod
    def text_completion(
        self, model: str, key: str, text: str, params: Optional[ModelParameters]
    ) -> BifrostResponse:
        """Perform a text completion."""

    @abstractmethod
    def chat_completion(
        self,
        model: str,
        key: str,
        messages: list[Message],
        params: Optional[ModelParameters],
    ) -> BifrostResponse:
        """Perform a chat completion."""


class Account(ABC):
    """Source of configured providers, their keys and their settings."""

    @abstractmethod
    def configured_providers(self) -> list[ModelProvider]:
        """Providers available for use."""

    @abstractmethod
    def keys_for_provider(self, provider_key: ModelProvider) -> list[Key]:
        """API keys configured for a provider."""

    @abstractmethod
    def config_for_provider(self, provider_key: ModelProvider) -> ProviderConfig:
        """Configuration of a provider."""