import os
from datetime import timedelta

import pytest

from bifrost.meta import AzureMetaConfig, BedrockMetaConfig
from bifrost.provider import (
    DEFAULT_BUFFER_SIZE,
    DEFAULT_CONCURRENCY,
    Account,
    ConcurrencyAndBufferSize,
    Key,
    NetworkConfig,
    Provider,
    ProviderConfig,
    ProxyConfig,
    ProxyType,
)
from bifrost.schemas import ModelProvider


def _network() -> NetworkConfig:
    return NetworkConfig(
        default_request_timeout_in_seconds=30,
        max_retries=1,
        retry_backoff_initial=timedelta(milliseconds=100),
        retry_backoff_max=timedelta(seconds=2),
    )


def _concurrency() -> ConcurrencyAndBufferSize:
    return ConcurrencyAndBufferSize(concurrency=3, buffer_size=10)


class _BaseAccount(Account):
    def configured_providers(self):
        return [
            ModelProvider.OPENAI,
            ModelProvider.ANTHROPIC,
            ModelProvider.BEDROCK,
            ModelProvider.COHERE,
            ModelProvider.AZURE,
        ]

    def keys_for_provider(self, provider_key):
        table = {
            ModelProvider.OPENAI: ("OPEN_AI_API_KEY", ["gpt-4o-mini", "gpt-4-turbo"]),
            ModelProvider.ANTHROPIC: (
                "ANTHROPIC_API_KEY",
                ["claude-3-7-sonnet-20250219", "claude-3-5-sonnet-20240620", "claude-2.1"],
            ),
            ModelProvider.BEDROCK: (
                "BEDROCK_API_KEY",
                [
                    "anthropic.claude-v2:1",
                    "mistral.mixtral-8x7b-instruct-v0:1",
                    "mistral.mistral-large-2402-v1:0",
                    "anthropic.claude-3-sonnet-20240229-v1:0",
                ],
            ),
            ModelProvider.COHERE: ("COHERE_API_KEY", ["command-a-03-2025"]),
            ModelProvider.AZURE: ("AZURE_API_KEY", ["gpt-4o"]),
        }
        if provider_key not in table:
            raise ValueError(f"unsupported provider: {provider_key}")
        env, models = table[provider_key]
        return [Key(value=os.environ.get(env, ""), models=models, weight=1.0)]

    def config_for_provider(self, provider_key):
        if provider_key == ModelProvider.BEDROCK:
            meta = BedrockMetaConfig(
                secret_access_key=os.environ.get("BEDROCK_ACCESS_KEY", ""),
                region="us-east-1",
            )
        elif provider_key == ModelProvider.AZURE:
            meta = AzureMetaConfig(
                endpoint=os.environ.get("AZURE_ENDPOINT", ""),
                deployments={"gpt-4o": "gpt-4o-aug"},
                api_version="2024-08-01-preview",
            )
        elif provider_key in (
            ModelProvider.OPENAI,
            ModelProvider.ANTHROPIC,
            ModelProvider.COHERE,
        ):
            meta = None
        else:
            raise ValueError(f"unsupported provider: {provider_key}")
        return ProviderConfig(
            network_config=_network(),
            meta_config=meta,
            concurrency_and_buffer_size=_concurrency(),
        )


def test_configured_providers():
    providers = _BaseAccount().configured_providers()
    assert providers == [
        ModelProvider("openai"),
        ModelProvider("anthropic"),
        ModelProvider("bedrock"),
        ModelProvider("cohere"),
        ModelProvider("azure"),
    ]


def test_keys_for_openai(monkeypatch):
    monkeypatch.setenv("OPEN_AI_API_KEY", "placeholder")
    keys = _BaseAccount().keys_for_provider(ModelProvider("openai"))
    expected = Key(value="placeholder", models=["gpt-4o-mini", "gpt-4-turbo"], weight=1.0)
    assert keys == [expected]
    assert [k.to_dict() for k in keys] == [
        {"value": "placeholder", "models": ["gpt-4o-mini", "gpt-4-turbo"], "weight": 1.0}
    ]


def test_keys_for_unsupported_provider():
    with pytest.raises(ValueError):
        ModelProvider("mistral")
    with pytest.raises(ValueError, match="unsupported provider"):
        _BaseAccount().keys_for_provider("mistral")


def test_config_for_unsupported_provider():
    with pytest.raises(ValueError):
        ModelProvider("mistral")
    with pytest.raises(ValueError, match="unsupported provider"):
        _BaseAccount().config_for_provider("mistral")


def test_network_config_durations_in_nanoseconds():
    assert _network().to_dict() == {
        "default_request_timeout_in_seconds": 30,
        "max_retries": 1,
        "retry_backoff_initial": 100_000_000,
        "retry_backoff_max": 2_000_000_000,
    }


def test_network_config_defaults():
    config = NetworkConfig()
    assert config.default_request_timeout_in_seconds == 30
    assert config.max_retries == 0
    assert config.retry_backoff_initial == timedelta(milliseconds=500)
    assert config.retry_backoff_max == timedelta(seconds=5)


def test_concurrency_defaults():
    config = ConcurrencyAndBufferSize()
    assert (config.concurrency, config.buffer_size) == (
        DEFAULT_CONCURRENCY,
        DEFAULT_BUFFER_SIZE,
    )


def test_openai_config_has_no_meta():
    config = _BaseAccount().config_for_provider(ModelProvider("openai"))
    assert config.meta_config is None
    assert config.concurrency_and_buffer_size == ConcurrencyAndBufferSize(
        concurrency=3, buffer_size=10
    )
    data = config.to_dict()
    assert "meta_config" not in data
    assert data["concurrency_and_buffer_size"] == {"concurrency": 3, "buffer_size": 10}


def test_bedrock_config_meta(monkeypatch):
    monkeypatch.setenv("BEDROCK_ACCESS_KEY", "secret")
    config = _BaseAccount().config_for_provider(ModelProvider("bedrock"))
    assert config.meta_config == BedrockMetaConfig(
        secret_access_key="secret", region="us-east-1"
    )
    assert config.to_dict()["meta_config"] == {
        "secret_access_key": "secret",
        "region": "us-east-1",
    }


def test_azure_config_meta(monkeypatch):
    monkeypatch.setenv("AZURE_ENDPOINT", "https://example.com")
    config = _BaseAccount().config_for_provider(ModelProvider("azure"))
    assert config.meta_config == AzureMetaConfig(
        endpoint="https://example.com",
        deployments={"gpt-4o": "gpt-4o-aug"},
        api_version="2024-08-01-preview",
    )
    assert config.to_dict()["meta_config"] == {
        "endpoint": "https://example.com",
        "deployments": {"gpt-4o": "gpt-4o-aug"},
        "api_version": "2024-08-01-preview",
    }


def test_proxy_config_serialised():
    password = "password"
    config = ProviderConfig(
        proxy_config=ProxyConfig(
            type=ProxyType.SOCKS5,
            url="socks5://localhost:1080",
            username="user",
            password=password,
        )
    )
    assert config.to_dict()["proxy_config"] == {
        "type": "socks5",
        "url": "socks5://localhost:1080",
        "username": "user",
        "password": "password",
    }


def test_proxy_type_values():
    assert ProxyType("socks5") is ProxyType.SOCKS5
    assert [p.value for p in ProxyType] == ["none", "http", "socks5", "environment"]
    with pytest.raises(ValueError):
        ProxyType("ftp")


def test_abstract_interfaces_cannot_be_instantiated():
    with pytest.raises(TypeError):
        Account()
    with pytest.raises(TypeError):
        Provider()