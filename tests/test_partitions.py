import json

import pytest

from awsbase.partitions import (
    EndpointsDocumentError,
    Partition,
    Region,
    Service,
    load_partitions,
    partition_for_region,
    partitions_from_document,
)


def _document():
    return {
        "version": 3,
        "partitions": [
            {
                "partition": "aws-us-gov",
                "partitionName": "AWS GovCloud (US)",
                "dnsSuffix": "amazonaws.com",
                "regionRegex": "^us\\-gov\\-\\w+\\-\\d+$",
                "regions": {
                    "us-gov-west-1": {"description": "AWS GovCloud (US-West)"},
                    "us-gov-east-1": {"description": "AWS GovCloud (US-East)"},
                },
                "services": {"sts": {"endpoints": {}}, "iam": {"endpoints": {}}},
            },
            {
                "partition": "aws",
                "partitionName": "AWS Standard",
                "dnsSuffix": "amazonaws.com",
                "regionRegex": "^(us|eu|ap|sa|ca|me|af|il|mx)\\-\\w+\\-\\d+$",
                "regions": {
                    "us-east-1": {"description": "US East (N. Virginia)"},
                    "af-south-1": {"description": "Africa (Cape Town)"},
                },
                "services": {
                    "access-analyzer": {"endpoints": {"af-south-1": {}}},
                    "sts": {},
                },
            },
        ],
    }


@pytest.fixture
def partitions():
    return partitions_from_document(_document())


def test_default_partitions_not_empty(partitions):
    assert len(partitions) > 0


@pytest.mark.parametrize(
    "region, expected_id",
    [
        ("us-east-1", "aws"),
        ("us-gov-west-1", "aws-us-gov"),
        ("not-found", None),
        ("us-east-17", "aws"),
    ],
)
def test_partition_for_region(partitions, region, expected_id):
    found = partition_for_region(partitions, region)
    if expected_id is None:
        assert found is None
    else:
        assert found.id == expected_id


@pytest.mark.parametrize(
    "region, expected", [("us-east-1", True), ("us-gov-west-1", True), ("not-found", False)]
)
def test_partition_regions(partitions, region, expected):
    found = partition_for_region(partitions, region)
    regions = found.regions if found is not None else {}
    assert (len(regions) > 0) is expected


@pytest.mark.parametrize(
    "region, expected", [("us-east-1", True), ("us-gov-west-1", True), ("not-found", False)]
)
def test_partition_services(partitions, region, expected):
    found = partition_for_region(partitions, region)
    services = found.services if found is not None else {}
    assert (len(services) > 0) is expected


def test_partitions_sorted_by_id(partitions):
    assert [p.id for p in partitions] == ["aws", "aws-us-gov"]


def test_partition_fields(partitions):
    aws = partitions[0]
    assert aws.name == "AWS Standard"
    assert aws.dns_suffix == "amazonaws.com"
    assert list(aws.regions) == ["af-south-1", "us-east-1"]
    assert aws.regions["af-south-1"] == Region("af-south-1", "Africa (Cape Town)")
    assert list(aws.services) == ["access-analyzer", "sts"]
    assert aws.services["sts"] == Service("sts")


def test_regions_returns_a_copy(partitions):
    aws = partitions[0]
    regions = aws.regions
    regions.clear()
    assert len(aws.regions) == 2


def test_region_without_description_object():
    document = {
        "version": 3.0,
        "partitions": [{"partition": "p", "regionRegex": "^x$", "regions": {"r-1": None}}],
    }
    (partition,) = partitions_from_document(document)
    assert partition.regions["r-1"].description == ""
    assert partition.services == {}


def test_listed_region_found_without_regex_match():
    partition = Partition("custom", region_regex="^never$", regions=[Region("odd-region")])
    assert partition_for_region([partition], "odd-region") is partition


def test_unsupported_version():
    with pytest.raises(EndpointsDocumentError, match="unsupported endpoints document version: 2"):
        partitions_from_document({"version": 2, "partitions": []})


def test_missing_version():
    with pytest.raises(EndpointsDocumentError, match="can't parse endpoints document version"):
        partitions_from_document({"partitions": []})


def test_document_not_an_object():
    with pytest.raises(EndpointsDocumentError):
        partitions_from_document([1, 2])


def test_load_partitions_round_trip(tmp_path):
    path = tmp_path / "endpoints.json"
    path.write_text(json.dumps(_document()), encoding="utf-8")
    assert load_partitions(path) == partitions_from_document(_document())


def test_load_partitions_merges_concatenated_documents(tmp_path):
    path = tmp_path / "endpoints.json"
    first = {"partitions": _document()["partitions"]}
    path.write_text(json.dumps(first) + "\n" + json.dumps({"version": 3}), encoding="utf-8")
    loaded = load_partitions(path)
    assert [p.id for p in loaded] == ["aws", "aws-us-gov"]


def test_load_partitions_invalid_json(tmp_path):
    path = tmp_path / "endpoints.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(EndpointsDocumentError):
        load_partitions(path)


def test_load_partitions_missing_file(tmp_path):
    with pytest.raises(EndpointsDocumentError):
        load_partitions(tmp_path / "absent.json")