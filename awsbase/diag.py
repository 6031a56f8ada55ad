"""Diagnostics: errors and warnings collected while configuring a client."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator, Sequence
from enum import IntEnum
from typing import Optional, overload


class Severity(IntEnum):
    """The level of feedback for a diagnostic."""

    INVALID = 0
    ERROR = 1
    WARNING = 2

    def __str__(self) -> str:
        if self is Severity.ERROR:
            return "Error"
        if self is Severity.WARNING:
            return "Warning"
        return "Invalid"


class Diagnostic(ABC):
    """A single piece of feedback with a severity, summary and detail.

    Two diagnostics are equal when they are of the same type and have the
    same summary and detail.
    """

    @property
    @abstractmethod
    def severity(self) -> Severity:
        """The level of feedback."""

    @property
    @abstractmethod
    def summary(self) -> str:
        """A short, title-like description."""

    @property
    @abstractmethod
    def detail(self) -> str:
        """A long, human-oriented description."""

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return False
        assert isinstance(other, Diagnostic)
        return other.summary == self.summary and other.detail == self.detail

    def __hash__(self) -> int:
        return hash((type(self), self.summary, self.detail))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(summary={self.summary!r}, detail={self.detail!r})"


class ErrorDiagnostic(Diagnostic):
    """A generic diagnostic with error severity."""

    def __init__(self, summary: str, detail: str) -> None:
        self._summary = summary
        self._detail = detail

    @property
    def severity(self) -> Severity:
        return Severity.ERROR

    @property
    def summary(self) -> str:
        return self._summary

    @property
    def detail(self) -> str:
        return self._detail


class WarningDiagnostic(Diagnostic):
    """A generic diagnostic with warning severity."""

    def __init__(self, summary: str, detail: str) -> None:
        self._summary = summary
        self._detail = detail

    @property
    def severity(self) -> Severity:
        return Severity.WARNING

    @property
    def summary(self) -> str:
        return self._summary

    @property
    def detail(self) -> str:
        return self._detail


class NativeErrorDiagnostic(Diagnostic):
    """An error-severity diagnostic wrapping an exception."""

    def __init__(self, err: BaseException) -> None:
        self.err = err

    @property
    def severity(self) -> Severity:
        return Severity.ERROR

    @property
    def summary(self) -> str:
        return str(self.err)

    @property
    def detail(self) -> str:
        return ""

    def __repr__(self) -> str:
        return f"NativeErrorDiagnostic: err: {self.err}"


class Diagnostics(Sequence[Diagnostic]):
    """An ordered collection of diagnostics without duplicates or ``None``.

    The mutating methods return the collection itself so calls can be chained.
    """

    def __init__(self, diagnostics: Optional[Iterable[Diagnostic]] = None) -> None:
        self._items: list[Diagnostic] = list(diagnostics or ())

    @overload
    def __getitem__(self, index: int) -> Diagnostic: ...

    @overload
    def __getitem__(self, index: slice) -> "Diagnostics": ...

    def __getitem__(self, index):
        if isinstance(index, slice):
            return Diagnostics(self._items[index])
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, (Diagnostics, list, tuple)):
            return NotImplemented
        if len(self) != len(other):
            return False
        return all(mine == theirs for mine, theirs in zip(self, other))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Diagnostics({self._items!r})"

    def add_error(self, summary: str, detail: str) -> "Diagnostics":
        """Add a generic error diagnostic."""
        return self.append(ErrorDiagnostic(summary, detail))

    def add_simple_error(self, err: BaseException) -> "Diagnostics":
        """Add an error diagnostic wrapping an exception."""
        return self.append(NativeErrorDiagnostic(err))

    def add_warning(self, summary: str, detail: str) -> "Diagnostics":
        """Add a generic warning diagnostic."""
        return self.append(WarningDiagnostic(summary, detail))

    def append(self, *args: Optional[Diagnostic]) -> "Diagnostics":
        """Add each diagnostic that is not ``None`` and not already present."""
        for diagnostic in args:
            if diagnostic is None or self.contains(diagnostic):
                continue
            self._items.append(diagnostic)
        return self

    def extend(self, diagnostics: Iterable[Optional[Diagnostic]]) -> "Diagnostics":
        """Append every diagnostic from an iterable."""
        return self.append(*diagnostics)

    def contains(self, diagnostic: Optional[Diagnostic]) -> bool:
        """Whether an equal diagnostic is in the collection."""
        if diagnostic is None:
            return False
        return any(existing == diagnostic for existing in self._items)

    def has_error(self) -> bool:
        """Whether any diagnostic has error severity."""
        return any(d.severity is Severity.ERROR for d in self._items)

    def errors(self) -> "Diagnostics":
        """The error-severity diagnostics, in order."""
        return Diagnostics(d for d in self._items if d.severity is Severity.ERROR)

    def warnings(self) -> "Diagnostics":
        """The warning-severity diagnostics, in order."""
        return Diagnostics(d for d in self._items if d.severity is Severity.WARNING)

    def errors_count(self) -> int:
        """The number of error-severity diagnostics."""
        return len(self.errors())

    def warnings_count(self) -> int:
        """The number of warning-severity diagnostics."""
        return len(self.warnings())