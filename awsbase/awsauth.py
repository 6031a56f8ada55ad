"""Discovery of the AWS account ID and partition for a set of credentials.

Clients are duck-typed and answer with mappings shaped like AWS responses:

* the EC2 metadata client has ``get_iam_info()`` returning
  ``{"InstanceProfileArn": ...}``;
* the IAM client has ``get_user()`` returning ``{"User": {"Arn": ...}}`` and
  ``list_roles(MaxItems=...)`` returning ``{"Roles": [{"Arn": ...}, ...]}``;
* the STS client has ``get_caller_identity()`` returning ``{"Arn": ...}``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from functools import partial
from typing import Any, Optional

_log = logging.getLogger(__name__)

# Name of the credentials provider that reads EC2 instance role credentials.
EC2_ROLE_PROVIDER_NAME = "EC2RoleProvider"

_IGNORED_GET_USER_CODES = frozenset({"AccessDenied", "InvalidClientTokenId", "ValidationError"})

AccountInfo = tuple[str, str]


class APIError(Exception):
    """An error reported by an AWS API, identified by its error code."""

    def __init__(self, code: str, message: str = "") -> None:
        super().__init__(f"api error {code}: {message}")
        self.code = code
        self.message = message


class AccountLookupError(Exception):
    """The account ID and partition could not be determined.

    ``errors`` holds the individual failures when several lookups were tried.
    """

    def __init__(self, message: str, errors: Iterable[BaseException] = ()) -> None:
        super().__init__(message)
        self.errors = tuple(errors)


def _format_errors(errors: list[BaseException]) -> str:
    header = "1 error occurred" if len(errors) == 1 else f"{len(errors)} errors occurred"
    points = "\n\t".join(f"* {err}" for err in errors)
    return f"{header}:\n\t{points}\n\n"


def _error_code(exc: Optional[BaseException]) -> Optional[str]:
    """The API error code of an exception or of any exception that caused it."""
    seen: set[int] = set()
    while exc is not None and id(exc) not in seen:
        seen.add(id(exc))
        if isinstance(exc, APIError):
            return exc.code
        response = getattr(exc, "response", None)
        if isinstance(response, Mapping):
            error = response.get("Error")
            if isinstance(error, Mapping) and error.get("Code"):
                return str(error["Code"])
        exc = exc.__cause__ or exc.__context__
    return None


def _field(obj: Any, key: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(key)
    return None


def _parse_arn(arn: str) -> AccountInfo:
    if not arn.startswith("arn:"):
        raise ValueError("arn: invalid prefix")
    sections = arn.split(":", 5)
    if len(sections) != 6:
        raise ValueError("arn: not enough sections")
    return sections[4], sections[1]


def parse_account_id_and_partition_from_arn(arn: str) -> AccountInfo:
    """Return ``(account_id, partition)`` from an ARN; raise ValueError if malformed."""
    try:
        return _parse_arn(arn)
    except ValueError as exc:
        raise ValueError(f"parsing ARN ({arn}): {exc}") from None


def _parse_or_raise(arn: Optional[str], context: str, unable: str) -> AccountInfo:
    try:
        return parse_account_id_and_partition_from_arn(arn or "")
    except ValueError as exc:
        _log.debug("%s: %s", unable, exc)
        raise AccountLookupError(f"{context}: {exc}") from exc


def get_account_id_and_partition_from_ec2_metadata(metadata_client: Any) -> AccountInfo:
    """Look up the account from the EC2 instance profile ARN."""
    _log.debug("Retrieving account information from EC2 Metadata")
    unable = "Unable to retrieve account information from EC2 Metadata"
    try:
        info = metadata_client.get_iam_info()
    except Exception as exc:
        _log.debug("%s: %s", unable, exc)
        raise AccountLookupError(
            f"retrieving account information via EC2 Metadata IAM information: {exc}"
        ) from exc

    result = _parse_or_raise(
        _field(info, "InstanceProfileArn"),
        "retrieving account information from EC2 Metadata",
        unable,
    )
    _log.info("Retrieved account information from EC2 Metadata")
    return result


def get_account_id_and_partition_from_iam_get_user(iam_client: Any) -> Optional[AccountInfo]:
    """Look up the account via iam:GetUser.

    Returns None when the call is denied in a way typical of federated
    credentials; such failures are not errors.
    """
    _log.debug("Retrieving account information via iam:GetUser")
    unable = "Unable to retrieve account information via iam:GetUser"
    try:
        output = iam_client.get_user()
    except Exception as exc:
        if _error_code(exc) in _IGNORED_GET_USER_CODES:
            _log.debug("Retrieving account information via iam:GetUser: ignoring error: %s", exc)
            return None
        _log.debug("%s: %s", unable, exc)
        raise AccountLookupError(f"retrieving account information via iam:GetUser: {exc}") from exc

    user = _field(output, "User")
    if user is None:
        _log.debug("%s: empty response", unable)
        raise AccountLookupError("retrieving account information via iam:GetUser: empty response")

    result = _parse_or_raise(
        _field(user, "Arn"), "retrieving account information via iam:GetUser", unable
    )
    _log.info("Retrieved account information via iam:GetUser")
    return result


def get_account_id_and_partition_from_iam_list_roles(iam_client: Any) -> AccountInfo:
    """Look up the account from the first role returned by iam:ListRoles."""
    _log.debug("Retrieving account information via iam:ListRoles")
    unable = "Unable to retrieve account information via iam:ListRoles"
    try:
        output = iam_client.list_roles(MaxItems=1)
    except Exception as exc:
        _log.debug("%s: %s", unable, exc)
        raise AccountLookupError(f"retrieving account information via iam:ListRoles: {exc}") from exc

    roles = _field(output, "Roles") or []
    if len(roles) < 1:
        _log.debug("%s: empty response", unable)
        raise AccountLookupError("retrieving account information via iam:ListRoles: empty response")

    result = _parse_or_raise(
        _field(roles[0], "Arn"), "retrieving account information via iam:ListRoles", unable
    )
    _log.info("Retrieved account information via iam:ListRoles")
    return result


def get_account_id_and_partition_from_sts_get_caller_identity(sts_client: Any) -> AccountInfo:
    """Look up the account from the STS caller identity."""
    _log.debug("Retrieving caller identity from STS")
    unable = "Unable to retrieve caller identity from STS"
    try:
        output = sts_client.get_caller_identity()
    except Exception as exc:
        _log.debug("%s: %s", unable, exc)
        raise AccountLookupError(f"retrieving caller identity from STS: {exc}") from exc

    arn = _field(output, "Arn")
    if arn is None:
        _log.debug("%s: empty response", unable)
        raise AccountLookupError("retrieving caller identity from STS: empty response")

    result = _parse_or_raise(arn, "retrieving caller identity from STS", unable)
    _log.info("Retrieved caller identity from STS")
    return result


def get_account_id_and_partition(
    iam_client: Any,
    sts_client: Any,
    auth_provider_name: str,
    metadata_client: Any = None,
) -> AccountInfo:
    """Try each lookup in turn and return the first ``(account_id, partition)`` found.

    EC2 instance role credentials are looked up in EC2 metadata first, other
    credentials via iam:GetUser; then sts:GetCallerIdentity and iam:ListRoles
    are tried. Raises AccountLookupError holding every failure if none succeeds.
    """
    if auth_provider_name == EC2_ROLE_PROVIDER_NAME:
        first: Callable[[], Optional[AccountInfo]] = partial(
            get_account_id_and_partition_from_ec2_metadata, metadata_client
        )
    else:
        first = partial(get_account_id_and_partition_from_iam_get_user, iam_client)

    steps = (
        first,
        partial(get_account_id_and_partition_from_sts_get_caller_identity, sts_client),
        partial(get_account_id_and_partition_from_iam_list_roles, iam_client),
    )

    errors: list[BaseException] = []
    for step in steps:
        try:
            result = step()
        except AccountLookupError as exc:
            errors.append(exc)
            continue
        if result is not None and result[0]:
            return result
    raise AccountLookupError(_format_errors(errors), errors)