"""Resolution of settings from an ordered list of configuration sources.

A source provides a setting by having the matching ``get_*`` method, which
returns the value or None when the source does not set it. The first source
that sets a value wins; exceptions from a source propagate.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import IntEnum
from typing import Any, Optional


class FIPSEndpointState(IntEnum):
    """Whether FIPS endpoints are used."""

    UNSET = 0
    ENABLED = 1
    DISABLED = 2

    def __str__(self) -> str:
        return "FIPSEndpointState" + self.name.capitalize()


class DualStackEndpointState(IntEnum):
    """Whether dual-stack endpoints are used."""

    UNSET = 0
    ENABLED = 1
    DISABLED = 2

    def __str__(self) -> str:
        return "DualStackEndpointState" + self.name.capitalize()


_CLIENT_ENABLE_LABELS = {0: "ClientDefaultEnableState", 1: "ClientDisabled", 2: "ClientEnabled"}


class ClientEnableState(IntEnum):
    """Whether the EC2 instance metadata client is enabled."""

    DEFAULT = 0
    DISABLED = 1
    ENABLED = 2

    def __str__(self) -> str:
        return _CLIENT_ENABLE_LABELS[self.value]


_ENDPOINT_MODE_LABELS = {0: "EndpointModeStateUnset", 1: "EndpointModeStateIPv4", 2: "EndpointModeStateIPv6"}


class EndpointModeState(IntEnum):
    """The IP version used to reach the EC2 instance metadata service."""

    UNSET = 0
    IPV4 = 1
    IPV6 = 2

    def __str__(self) -> str:
        return _ENDPOINT_MODE_LABELS[self.value]


def _resolve(sources: Iterable[Any], method: str) -> Any:
    for source in sources:
        getter = getattr(source, method, None)
        if not callable(getter):
            continue
        value = getter()
        if value is not None:
            return value
    return None


def resolve_use_fips_endpoint(sources: Iterable[Any]) -> Optional[FIPSEndpointState]:
    """The first FIPS endpoint state set by a source, or None."""
    return _resolve(sources, "get_use_fips_endpoint")


def resolve_use_dual_stack_endpoint(sources: Iterable[Any]) -> Optional[DualStackEndpointState]:
    """The first dual-stack endpoint state set by a source, or None."""
    return _resolve(sources, "get_use_dual_stack_endpoint")


def resolve_ec2_imds_client_enable_state(sources: Iterable[Any]) -> Optional[ClientEnableState]:
    """The first EC2 metadata client enable state set by a source, or None."""
    return _resolve(sources, "get_ec2_imds_client_enable_state")


def resolve_ec2_imds_endpoint(sources: Iterable[Any]) -> Optional[str]:
    """The first EC2 metadata endpoint set by a source, or None."""
    return _resolve(sources, "get_ec2_imds_endpoint")


def resolve_ec2_imds_endpoint_mode(sources: Iterable[Any]) -> Optional[EndpointModeState]:
    """The first EC2 metadata endpoint mode set by a source, or None."""
    return _resolve(sources, "get_ec2_imds_endpoint_mode")


def get_retry_max_attempts(sources: Iterable[Any]) -> Optional[int]:
    """The first maximum retry attempt count set by a source, or None."""
    return _resolve(sources, "get_retry_max_attempts")