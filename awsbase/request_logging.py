"""Logging helpers for AWS requests: SDK log routing and per-request attributes."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

_log = logging.getLogger(__name__)

AWS_SDK_KEY = "aws.sdk"
AWS_SDK_GO_V2_VALUE = "aws-sdk-go-v2"

RPC_SYSTEM_KEY = "rpc.system"
RPC_SYSTEM_VALUE = "aws-api"
RPC_SERVICE_KEY = "rpc.service"
RPC_METHOD_KEY = "rpc.method"
AWS_REGION_KEY = "aws.region"

S3_BUCKET_KEY = "aws.s3.bucket"
S3_KEY_KEY = "aws.s3.key"
S3_UPLOAD_ID_KEY = "aws.s3.upload_id"
S3_DELETE_KEY = "aws.s3.delete"
S3_PART_NUMBER_KEY = "aws.s3.part_number"

DYNAMODB_TABLE_NAMES_KEY = "aws.dynamodb.table_names"
SQS_QUEUE_URL_KEY = "aws.queue.url"

DYNAMODB_SERVICE_ID = "DynamoDB"
S3_SERVICE_ID = "S3"
SQS_SERVICE_ID = "SQS"

LOG_ATTRIBUTE_EXTRACTOR_ID = "TF_AWS_LogAttributeExtractor"
REQUEST_RESPONSE_LOGGER_ID = "TF_AWS_RequestResponseLogger"


class Classification(str, Enum):
    """The classification of an SDK log message."""

    WARN = "WARN"
    DEBUG = "DEBUG"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class DebugLogger:
    """Routes SDK log messages to a request's logger.

    Without a logger, messages go to this module's logger marked as
    missing their context.
    """

    logger: Optional[logging.Logger] = None

    def with_logger(self, logger: Optional[logging.Logger]) -> "DebugLogger":
        """A copy of this logger bound to another logger."""
        return DebugLogger(logger)

    def logf(self, classification: Classification, message: str, *args: Any) -> None:
        """Format the message with ``%`` and log it by its classification."""
        text = message % args if args else message
        if self.logger is not None:
            if classification is Classification.DEBUG:
                self.logger.debug(text)
            elif classification is Classification.WARN:
                self.logger.warning(text)
            return
        text = text.replace("\r", "")
        _log.info(
            "[%s] missing_context: %s %s=%s",
            classification,
            text,
            AWS_SDK_KEY,
            AWS_SDK_GO_V2_VALUE,
        )


def _text(params: Mapping[str, Any], key: str) -> str:
    value = params.get(key)
    return "" if value is None else str(value)


def serialize_delete_shorthand(delete: Mapping[str, Any]) -> str:
    """Shorthand form of an S3 Delete request, e.g. ``Objects=[{Key=a}],Quiet=false``."""
    objects = []
    for obj in delete.get("Objects") or ():
        part = f"Key={_text(obj, 'Key')}"
        if obj.get("VersionId") is not None:
            part += f",VersionId={obj['VersionId']}"
        objects.append("{" + part + "}")
    quiet = "true" if delete.get("Quiet") else "false"
    return f"Objects=[{','.join(objects)}],Quiet={quiet}"


_S3_BUCKET_ONLY = frozenset(
    {"CreateBucket", "DeleteBucket", "HeadBucket", "ListObjects", "ListObjectsV2"}
)
_S3_BUCKET_KEY = frozenset(
    {"CreateMultipartUpload", "DeleteObject", "GetObject", "HeadObject", "PutObject"}
)
_S3_BUCKET_KEY_UPLOAD = frozenset({"AbortMultipartUpload", "CompleteMultipartUpload"})


def s3_attributes(operation: str, params: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    """Log attributes describing the parameters of an S3 operation."""
    params = params or {}
    attributes: dict[str, Any] = {}
    if operation in _S3_BUCKET_ONLY:
        attributes[S3_BUCKET_KEY] = _text(params, "Bucket")
    elif operation in _S3_BUCKET_KEY:
        attributes[S3_BUCKET_KEY] = _text(params, "Bucket")
        attributes[S3_KEY_KEY] = _text(params, "Key")
    elif operation in _S3_BUCKET_KEY_UPLOAD:
        attributes[S3_BUCKET_KEY] = _text(params, "Bucket")
        attributes[S3_KEY_KEY] = _text(params, "Key")
        attributes[S3_UPLOAD_ID_KEY] = _text(params, "UploadId")
    elif operation == "DeleteObjects":
        attributes[S3_BUCKET_KEY] = _text(params, "Bucket")
        attributes[S3_DELETE_KEY] = serialize_delete_shorthand(params.get("Delete") or {})
    elif operation == "UploadPart":
        attributes[S3_BUCKET_KEY] = _text(params, "Bucket")
        attributes[S3_KEY_KEY] = _text(params, "Key")
        attributes[S3_PART_NUMBER_KEY] = int(params.get("PartNumber") or 0)
        attributes[S3_UPLOAD_ID_KEY] = _text(params, "UploadId")
    return attributes


def _dynamodb_attributes(operation: str, params: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    params = params or {}
    if params.get("TableName") is not None:
        return {DYNAMODB_TABLE_NAMES_KEY: [str(params["TableName"])]}
    request_items = params.get("RequestItems")
    if isinstance(request_items, Mapping) and request_items:
        return {DYNAMODB_TABLE_NAMES_KEY: [str(name) for name in request_items]}
    return {}


def _sqs_attributes(operation: str, params: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    params = params or {}
    if params.get("QueueUrl") is not None:
        return {SQS_QUEUE_URL_KEY: str(params["QueueUrl"])}
    return {}


_SETTERS = {
    DYNAMODB_SERVICE_ID: _dynamodb_attributes,
    S3_SERVICE_ID: s3_attributes,
    SQS_SERVICE_ID: _sqs_attributes,
}


def log_attributes(
    service_id: str, region: str, operation: str, params: Optional[Mapping[str, Any]] = None
) -> dict[str, Any]:
    """The log fields attached to a request for an operation of a service."""
    attributes: dict[str, Any] = {
        RPC_SYSTEM_KEY: RPC_SYSTEM_VALUE,
        RPC_SERVICE_KEY: service_id,
        AWS_REGION_KEY: region,
        RPC_METHOD_KEY: operation,
        AWS_SDK_KEY: AWS_SDK_GO_V2_VALUE,
    }
    setter = _SETTERS.get(service_id)
    if setter is not None:
        attributes.update(setter(operation, params))
    return attributes


def uses_object_body_logger(service_id: str, operation: str) -> bool:
    """Whether response bodies are logged as S3 objects rather than read in full."""
    return service_id == S3_SERVICE_ID and operation == "GetObject"