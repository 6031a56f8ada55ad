"""AWS partitions, their Regions and service endpoints, read from an endpoints document."""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from os import PathLike
from typing import Any, Optional, Union

# The AWS Standard global region.
AWS_GLOBAL_REGION_ID = "aws-global"

_SUPPORTED_VERSION = 3


class EndpointsDocumentError(ValueError):
    """The endpoints document cannot be read or has an unsupported form."""


@dataclass(frozen=True)
class Region:
    """An AWS Region."""

    id: str
    description: str = ""


@dataclass(frozen=True)
class Service:
    """An AWS service endpoint."""

    id: str


class Partition:
    """An AWS partition: a group of Regions sharing a DNS suffix."""

    __slots__ = ("_id", "_name", "_dns_suffix", "_region_regex", "_regions", "_services")

    def __init__(
        self,
        id: str,
        name: str = "",
        dns_suffix: str = "",
        region_regex: Union[str, "re.Pattern[str]"] = "",
        regions: Iterable[Region] = (),
        services: Iterable[Service] = (),
    ) -> None:
        self._id = id
        self._name = name
        self._dns_suffix = dns_suffix
        self._region_regex = (
            region_regex if isinstance(region_regex, re.Pattern) else re.compile(region_regex)
        )
        self._regions = {region.id: region for region in regions}
        self._services = {service.id: service for service in services}

    @property
    def id(self) -> str:
        """The identifier of the partition."""
        return self._id

    @property
    def name(self) -> str:
        """The name of the partition."""
        return self._name

    @property
    def dns_suffix(self) -> str:
        """The base domain name of the partition."""
        return self._dns_suffix

    @property
    def region_regex(self) -> "re.Pattern[str]":
        """The regular expression matching Region IDs of the partition."""
        return self._region_regex

    @property
    def regions(self) -> dict[str, Region]:
        """A copy of the partition's Regions, keyed by ID."""
        return dict(self._regions)

    @property
    def services(self) -> dict[str, Service]:
        """A copy of the partition's services, keyed by ID."""
        return dict(self._services)

    def includes_region(self, region_id: str) -> bool:
        """Whether the Region is listed in the partition or matches its Region pattern."""
        return region_id in self._regions or self._region_regex.search(region_id) is not None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Partition):
            return NotImplemented
        return (
            self._id == other._id
            and self._name == other._name
            and self._dns_suffix == other._dns_suffix
            and self._region_regex.pattern == other._region_regex.pattern
            and self._regions == other._regions
            and self._services == other._services
        )

    def __hash__(self) -> int:
        return hash((self._id, self._name, self._dns_suffix, self._region_regex.pattern))

    def __repr__(self) -> str:
        return f"Partition(id={self._id!r}, name={self._name!r}, dns_suffix={self._dns_suffix!r})"


def _check_version(document: Mapping[str, Any]) -> None:
    version = document.get("version")
    if isinstance(version, bool) or not isinstance(version, (int, float)):
        raise EndpointsDocumentError("can't parse endpoints document version")
    if version != _SUPPORTED_VERSION:
        raise EndpointsDocumentError(f"unsupported endpoints document version: {int(version)}")


def _partition_from_entry(entry: Mapping[str, Any]) -> Partition:
    def text(key: str) -> str:
        value = entry.get(key)
        return value if isinstance(value, str) else ""

    regions: list[Region] = []
    raw_regions = entry.get("regions")
    if isinstance(raw_regions, Mapping):
        for region_id, region in raw_regions.items():
            description = ""
            if isinstance(region, Mapping) and isinstance(region.get("description"), str):
                description = region["description"]
            regions.append(Region(region_id, description))

    services: list[Service] = []
    raw_services = entry.get("services")
    if isinstance(raw_services, Mapping):
        services = [Service(service_id) for service_id in raw_services]

    regex = text("regionRegex")
    try:
        pattern = re.compile(regex)
    except re.error as exc:
        raise EndpointsDocumentError(f"invalid region regex {regex!r}: {exc}") from exc

    return Partition(
        id=text("partition"),
        name=text("partitionName"),
        dns_suffix=text("dnsSuffix"),
        region_regex=pattern,
        regions=sorted(regions, key=lambda r: r.id),
        services=sorted(services, key=lambda s: s.id),
    )


def partitions_from_document(document: Any) -> list[Partition]:
    """Build the partitions, sorted by ID, from a version 3 endpoints document."""
    if not isinstance(document, Mapping):
        raise EndpointsDocumentError("endpoints document is not a JSON object")
    _check_version(document)
    entries = document.get("partitions")
    if not isinstance(entries, list):
        return []
    partitions = [_partition_from_entry(e) for e in entries if isinstance(e, Mapping)]
    return sorted(partitions, key=lambda p: p.id)


def _decode_all(text: str) -> dict[str, Any]:
    """Decode one or more concatenated JSON objects, later keys overriding earlier ones."""
    decoder = json.JSONDecoder()
    merged: dict[str, Any] = {}
    position = 0
    while True:
        while position < len(text) and text[position].isspace():
            position += 1
        if position >= len(text):
            return merged
        try:
            value, position = decoder.raw_decode(text, position)
        except json.JSONDecodeError as exc:
            raise EndpointsDocumentError(f"decoding endpoints document: {exc}") from exc
        if not isinstance(value, dict):
            raise EndpointsDocumentError("endpoints document is not a JSON object")
        merged.update(value)


def load_partitions(path: Union[str, "PathLike[str]"]) -> list[Partition]:
    """Read an endpoints JSON file and build its partitions."""
    try:
        with open(path, encoding="utf-8") as handle:
            text = handle.read()
    except OSError as exc:
        raise EndpointsDocumentError(f"error reading JSON from {path}: {exc}") from exc
    return partitions_from_document(_decode_all(text))


def partition_for_region(partitions: Sequence[Partition], region_id: str) -> Optional[Partition]:
    """The first partition that includes the Region, or None."""
    return next((p for p in partitions if p.includes_region(region_id)), None)