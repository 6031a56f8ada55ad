"""Expansion of environment variables and ``~`` in file paths."""

from __future__ import annotations

import os
import re
from collections.abc import Iterable

_VARIABLE = re.compile(r"\$(?:\{([^}]*)\}|([A-Za-z0-9_]+))")


def _expand_env(path: str) -> str:
    """Replace ``$VAR`` and ``${VAR}``; unset variables become empty."""
    return _VARIABLE.sub(lambda m: os.environ.get(m.group(1) or m.group(2) or "", ""), path)


def _home_dir() -> str:
    home = os.environ.get("HOME") or os.environ.get("USERPROFILE")
    if home:
        return home
    return os.path.expanduser("~")


def _expand_home(path: str) -> str:
    if not path.startswith("~"):
        return path
    if len(path) > 1 and path[1] not in "/\\":
        raise ValueError("cannot expand user-specific home dir")
    rest = path[1:].lstrip("/\\")
    home = _home_dir()
    return os.path.normpath(os.path.join(home, rest)) if rest else home


def file_path(path: str) -> str:
    """Expand environment variables, then a leading ``~``.

    Raises ValueError for a ``~user`` form.
    """
    return _expand_home(_expand_env(path))


def file_paths(paths: Iterable[str]) -> list[str]:
    """Expand every path; raise ValueError naming all that failed."""
    result: list[str] = []
    failures: list[str] = []
    for path in paths:
        try:
            result.append(file_path(path))
        except ValueError as exc:
            failures.append(f"{path}: {exc}")
    if failures:
        raise ValueError(f"{len(failures)} error(s) occurred: " + "; ".join(failures))
    return result