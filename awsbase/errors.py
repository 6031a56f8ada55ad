"""Diagnostics raised while resolving credentials and assuming roles."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Optional

from awsbase.config import AssumeRole, Config
from awsbase.diag import Diagnostic, Severity


def _err_text(err: Optional[BaseException]) -> str:
    return "<nil>" if err is None else str(err)


class CannotAssumeRoleWithWebIdentityError(Diagnostic):
    """AssumeRoleWithWebIdentity could not complete."""

    def __init__(self, config: Optional[Config] = None, err: Optional[BaseException] = None) -> None:
        self.config = config
        self.err = err

    @property
    def severity(self) -> Severity:
        return Severity.ERROR

    @property
    def summary(self) -> str:
        return "Cannot assume IAM Role with web identity"

    @property
    def detail(self) -> str:
        if self.config is None or self.config.assume_role_with_web_identity is None:
            return f"cannot assume role with web identity: {_err_text(self.err)}"
        role_arn = self.config.assume_role_with_web_identity.role_arn
        return (
            f"IAM Role ({role_arn}) cannot be assumed with web identity token.\n"
            "\n"
            "There are a number of possible causes of this - the most common are:\n"
            "  * The web identity token used in order to assume the role is invalid\n"
            "  * The web identity token does not have appropriate permission to assume the role\n"
            "  * The role ARN is not valid\n"
            "\n"
            f"Error: {_err_text(self.err)}\n"
        )


class NoValidCredentialSourcesError(Diagnostic):
    """Every credential lookup method was exhausted without results."""

    def __init__(self, config: Optional[Config] = None, err: Optional[BaseException] = None) -> None:
        self.config = config
        self.err = err

    @property
    def severity(self) -> Severity:
        return Severity.ERROR

    @property
    def summary(self) -> str:
        return "No valid credential sources found"

    @property
    def detail(self) -> str:
        if self.config is None:
            return "" if self.err is None else str(self.err)
        return (
            f"Please see {self.config.caller_documentation_url}\n"
            "for more information about providing credentials.\n"
            "\n"
            f"Error: {_err_text(self.err)}\n"
        )


class CannotAssumeRoleError(Diagnostic):
    """AssumeRole could not complete."""

    def __init__(self, assume_role: Optional[AssumeRole] = None, err: Optional[BaseException] = None) -> None:
        self.assume_role = assume_role if assume_role is not None else AssumeRole()
        self.err = err

    @property
    def severity(self) -> Severity:
        return Severity.ERROR

    @property
    def summary(self) -> str:
        return "Cannot assume IAM Role"

    @property
    def detail(self) -> str:
        return (
            f"IAM Role ({self.assume_role.role_arn}) cannot be assumed.\n"
            "\n"
            "There are a number of possible causes of this - the most common are:\n"
            "  * The credentials used in order to assume the role are invalid\n"
            "  * The credentials do not have appropriate permission to assume the role\n"
            "  * The role ARN is not valid\n"
            "\n"
            f"Error: {_err_text(self.err)}\n"
        )


def is_cannot_assume_role_error(diagnostic: Optional[Diagnostic]) -> bool:
    """Whether the diagnostic is a CannotAssumeRoleError."""
    return isinstance(diagnostic, CannotAssumeRoleError)


def is_no_valid_credential_sources_error(diagnostic: Optional[Diagnostic]) -> bool:
    """Whether the diagnostic is a NoValidCredentialSourcesError."""
    return isinstance(diagnostic, NoValidCredentialSourcesError)


def contains_no_valid_credential_sources_error(diagnostics: Iterable[Diagnostic]) -> bool:
    """Whether any of the diagnostics is a NoValidCredentialSourcesError."""
    return any(is_no_valid_credential_sources_error(d) for d in diagnostics)