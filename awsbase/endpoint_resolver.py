"""Endpoint overrides used while resolving credentials."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum
from typing import Any

from awsbase.config import Config

_log = logging.getLogger(__name__)

IAM_SERVICE_ID = "IAM"
SSO_SERVICE_ID = "SSO"
STS_SERVICE_ID = "STS"


class EndpointSource(IntEnum):
    """Where an endpoint came from."""

    SERVICE_METADATA = 0
    CUSTOM = 1


@dataclass(frozen=True)
class Endpoint:
    """A resolved service endpoint."""

    url: str = ""
    source: EndpointSource = EndpointSource.SERVICE_METADATA
    signing_region: str = ""


class EndpointNotFoundError(LookupError):
    """No custom endpoint is configured for the service."""

    def __init__(self, message: str = "endpoint not found") -> None:
        super().__init__(message)


EndpointResolver = Callable[..., Endpoint]


def credentials_endpoint_resolver(config: Config) -> EndpointResolver:
    """A resolver for the IAM, SSO and STS endpoints set in the configuration.

    The resolver is called as ``resolver(service_id, region, *options)`` and
    raises EndpointNotFoundError when no override applies. The configuration
    is read on every call.
    """

    def resolve(service: str, region: str, *options: Any) -> Endpoint:
        if service == IAM_SERVICE_ID and config.iam_endpoint:
            _log.info(
                "Credentials resolution: setting custom IAM endpoint",
                extra={"tf_aws.iam_client.endpoint": config.iam_endpoint},
            )
            return Endpoint(config.iam_endpoint, EndpointSource.CUSTOM, region)
        if service == SSO_SERVICE_ID and config.sso_endpoint:
            _log.info(
                "Credentials resolution: setting custom SSO endpoint",
                extra={"tf_aws.sso_client.endpoint": config.sso_endpoint},
            )
            return Endpoint(config.sso_endpoint, EndpointSource.CUSTOM, region)
        if service == STS_SERVICE_ID and config.sts_endpoint:
            fields = {"tf_aws.sts_client.endpoint": config.sts_endpoint}
            if config.sts_region:
                fields["tf_aws.sts_client.signing_region"] = config.sts_region
                region = config.sts_region
            _log.info("Credentials resolution: setting custom STS endpoint", extra=fields)
            return Endpoint(config.sts_endpoint, EndpointSource.CUSTOM, region)
        raise EndpointNotFoundError()

    return resolve