from bifrost.meta import AzureMetaConfig, BedrockMetaConfig


def test_azure_values_from_account():
    config = AzureMetaConfig(
        endpoint="https://example.com",
        deployments={"gpt-4o": "gpt-4o-aug"},
        api_version="2024-08-01-preview",
    )
    assert config.endpoint == "https://example.com"
    assert config.deployments == {"gpt-4o": "gpt-4o-aug"}
    assert config.api_version == "2024-08-01-preview"


def test_azure_unused_settings_are_none():
    config = AzureMetaConfig(endpoint="https://example.com")
    assert config.secret_access_key is None
    assert config.region is None
    assert config.session_token is None
    assert config.arn is None
    assert config.inference_profiles is None


def test_azure_to_dict_omits_empty():
    assert AzureMetaConfig(endpoint="https://example.com").to_dict() == {
        "endpoint": "https://example.com"
    }


def test_bedrock_values_from_account():
    config = BedrockMetaConfig(secret_access_key="secret", region="us-east-1")
    assert config.secret_access_key == "secret"
    assert config.region == "us-east-1"
    assert config.session_token is None
    assert config.arn is None


def test_bedrock_unused_settings_are_none():
    config = BedrockMetaConfig(secret_access_key="secret")
    assert config.endpoint is None
    assert config.deployments is None
    assert config.api_version is None


def test_bedrock_to_dict_full():
    config = BedrockMetaConfig(
        secret_access_key="secret",
        region="us-east-1",
        session_token="token",
        arn="arn:aws:bedrock:us-east-1:000000000000:placeholder",
        inference_profiles={"anthropic.claude-v2:1": "profile"},
    )
    assert config.to_dict() == {
        "secret_access_key": "secret",
        "region": "us-east-1",
        "session_token": "token",
        "arn": "arn:aws:bedrock:us-east-1:000000000000:placeholder",
        "inference_profiles": {"anthropic.claude-v2:1": "profile"},
    }


def test_bedrock_to_dict_empty():
    assert BedrockMetaConfig().to_dict() == {}