import pytest

from awsbase.config import Config
from awsbase.endpoint_resolver import (
    Endpoint,
    EndpointNotFoundError,
    EndpointSource,
    credentials_endpoint_resolver,
)


def test_iam_custom_endpoint():
    resolve = credentials_endpoint_resolver(Config(iam_endpoint="http://iam.test"))
    assert resolve("IAM", "us-west-2") == Endpoint("http://iam.test", EndpointSource.CUSTOM, "us-west-2")


def test_sso_custom_endpoint():
    resolve = credentials_endpoint_resolver(Config(sso_endpoint="http://sso.test"))
    endpoint = resolve("SSO", "eu-west-1")
    assert endpoint.url == "http://sso.test"
    assert endpoint.source is EndpointSource.CUSTOM
    assert endpoint.signing_region == "eu-west-1"


def test_sts_custom_endpoint_keeps_region_without_sts_region():
    resolve = credentials_endpoint_resolver(Config(sts_endpoint="http://sts.test"))
    assert resolve("STS", "us-east-2").signing_region == "us-east-2"


def test_sts_region_overrides_signing_region():
    config = Config(sts_endpoint="http://sts.test", sts_region="ap-south-1")
    endpoint = credentials_endpoint_resolver(config)("STS", "us-east-2")
    assert endpoint == Endpoint("http://sts.test", EndpointSource.CUSTOM, "ap-south-1")


def test_sts_region_alone_does_not_resolve():
    resolve = credentials_endpoint_resolver(Config(sts_region="ap-south-1"))
    with pytest.raises(EndpointNotFoundError):
        resolve("STS", "us-east-2")


@pytest.mark.parametrize("service", ["IAM", "SSO", "STS"])
def test_no_override_raises(service):
    resolve = credentials_endpoint_resolver(Config())
    with pytest.raises(EndpointNotFoundError, match="endpoint not found"):
        resolve(service, "us-east-1")


def test_other_service_raises_even_with_overrides():
    config = Config(iam_endpoint="http://iam.test", sts_endpoint="http://sts.test")
    with pytest.raises(EndpointNotFoundError):
        credentials_endpoint_resolver(config)("S3", "us-east-1")


def test_configuration_read_on_each_call():
    config = Config()
    resolve = credentials_endpoint_resolver(config)
    with pytest.raises(EndpointNotFoundError):
        resolve("IAM", "us-east-1")
    config.iam_endpoint = "http://iam.test"
    assert resolve("IAM", "us-east-1").url == "http://iam.test"


def test_extra_options_are_accepted():
    resolve = credentials_endpoint_resolver(Config(iam_endpoint="http://iam.test"))
    assert resolve("IAM", "us-east-1", object(), object()).url == "http://iam.test"