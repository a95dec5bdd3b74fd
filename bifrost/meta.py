"""Provider-specific settings for Azure and AWS Bedrock."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .provider import MetaConfig


@dataclass
class AzureMetaConfig(MetaConfig):
    """Azure endpoint, model-to-deployment mapping and API version."""

    endpoint: str = ""
    deployments: dict[str, str] = field(default_factory=dict)
    api_version: Optional[str] = None

    def to_dict(self) -> dict:
        result: dict = {"endpoint": self.endpoint}
        if self.deployments:
            result["deployments"] = dict(self.deployments)
        if self.api_version is not None:
            result["api_version"] = self.api_version
        return result


@dataclass
class BedrockMetaConfig(MetaConfig):
    """AWS credentials, region, ARN and inference profiles."""

    secret_access_key: str = ""
    region: Optional[str] = None
    session_token: Optional[str] = None
    arn: Optional[str] = None
    inference_profiles: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        result: dict = {}
        if self.secret_access_key:
            result["secret_access_key"] = self.secret_access_key
        for name in ("region", "session_token", "arn"):
            value = getattr(self, name)
            if value is not None:
                result[name] = value
        if self.inference_profiles:
            result["inference_profiles"] = dict(self.inference_profiles)
        return result