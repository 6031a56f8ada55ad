import pytest

from awsbase.config import AssumeRole, AssumeRoleWithWebIdentity, Config
from awsbase.diag import Diagnostics, ErrorDiagnostic, Severity
from awsbase.errors import (
    CannotAssumeRoleError,
    CannotAssumeRoleWithWebIdentityError,
    NoValidCredentialSourcesError,
    contains_no_valid_credential_sources_error,
    is_cannot_assume_role_error,
    is_no_valid_credential_sources_error,
)


@pytest.mark.parametrize(
    "diagnostic, expected",
    [
        (None, False),
        (NoValidCredentialSourcesError(), False),
        (CannotAssumeRoleError(), True),
    ],
    ids=["nil error", "Top-level NoValidCredentialSourcesError", "Top-level CannotAssumeRoleError"],
)
def test_is_cannot_assume_role_error(diagnostic, expected):
    assert is_cannot_assume_role_error(diagnostic) is expected


@pytest.mark.parametrize(
    "diagnostic, expected",
    [
        (None, False),
        (CannotAssumeRoleError(), False),
        (NoValidCredentialSourcesError(), True),
    ],
    ids=["nil error", "Top-level CannotAssumeRoleError", "Top-level NoValidCredentialSourcesError"],
)
def test_is_no_valid_credential_sources_error(diagnostic, expected):
    assert is_no_valid_credential_sources_error(diagnostic) is expected


def test_contains_no_valid_credential_sources_error():
    diags = Diagnostics([ErrorDiagnostic("a", "b")])
    assert contains_no_valid_credential_sources_error(diags) is False
    diags.append(NoValidCredentialSourcesError(err=RuntimeError("boom")))
    assert contains_no_valid_credential_sources_error(diags) is True


def test_cannot_assume_role_detail():
    diag = CannotAssumeRoleError(AssumeRole(role_arn="arn:aws:iam::111111111111:role/test"), RuntimeError("denied"))
    assert diag.severity is Severity.ERROR
    assert diag.summary == "Cannot assume IAM Role"
    assert diag.detail == (
        "IAM Role (arn:aws:iam::111111111111:role/test) cannot be assumed.\n\n"
        "There are a number of possible causes of this - the most common are:\n"
        "  * The credentials used in order to assume the role are invalid\n"
        "  * The credentials do not have appropriate permission to assume the role\n"
        "  * The role ARN is not valid\n\n"
        "Error: denied\n"
    )
    assert str(diag.err) == "denied"


def test_no_valid_credential_sources_detail():
    err = RuntimeError("no creds")
    assert NoValidCredentialSourcesError(err=err).detail == "no creds"
    config = Config(caller_documentation_url="https://docs.example.com/auth")
    assert NoValidCredentialSourcesError(config, err).detail == (
        "Please see https://docs.example.com/auth\n"
        "for more information about providing credentials.\n\n"
        "Error: no creds\n"
    )
    assert NoValidCredentialSourcesError(config, err).summary == "No valid credential sources found"


def test_web_identity_error_detail():
    err = RuntimeError("bad token")
    assert CannotAssumeRoleWithWebIdentityError(None, err).detail == (
        "cannot assume role with web identity: bad token"
    )
    config = Config(
        assume_role_with_web_identity=AssumeRoleWithWebIdentity(role_arn="arn:aws:iam::111111111111:role/web")
    )
    diag = CannotAssumeRoleWithWebIdentityError(config, err)
    assert diag.summary == "Cannot assume IAM Role with web identity"
    assert diag.detail.startswith(
        "IAM Role (arn:aws:iam::111111111111:role/web) cannot be assumed with web identity token.\n"
    )
    assert diag.detail.endswith("Error: bad token\n")


def test_equality_by_type_summary_and_detail():
    first = CannotAssumeRoleError(AssumeRole(role_arn="a"), RuntimeError("x"))
    same = CannotAssumeRoleError(AssumeRole(role_arn="a"), RuntimeError("x"))
    other = CannotAssumeRoleError(AssumeRole(role_arn="b"), RuntimeError("x"))
    assert first == same
    assert (first == other) is False
    assert (NoValidCredentialSourcesError() == CannotAssumeRoleWithWebIdentityError()) is False


def test_duplicates_are_not_appended():
    diags = Diagnostics()
    diags.append(CannotAssumeRoleError(AssumeRole(role_arn="a"), RuntimeError("x")))
    diags.append(CannotAssumeRoleError(AssumeRole(role_arn="a"), RuntimeError("x")))
    assert len(diags) == 1
    assert diags.has_error() is True