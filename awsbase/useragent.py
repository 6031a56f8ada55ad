"""User-Agent products and APN partner information."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field


@dataclass(frozen=True)
class UserAgentProduct:
    """One product entry in a User-Agent header."""

    name: str = ""
    version: str = ""
    comment: str = ""

    def parts(self) -> Iterator[str]:
        """The space-separated tokens this product contributes."""
        if self.name:
            yield f"{self.name}/{self.version}" if self.version else self.name
        if self.comment:
            yield f"({self.comment})"


def build_user_agent_string(products: Iterable[UserAgentProduct]) -> str:
    """Join the products into a User-Agent string."""
    return " ".join(part for product in products for part in product.parts())


@dataclass(frozen=True)
class APNInfo:
    """AWS Partner Network identification for the User-Agent header."""

    partner_name: str
    products: tuple[UserAgentProduct, ...] | list[UserAgentProduct] = field(default_factory=tuple)

    def build_user_agent_string(self) -> str:
        """The APN User-Agent string, starting with ``APN/1.0``."""
        head = ["APN/1.0", f"{self.partner_name}/1.0"]
        tail = build_user_agent_string(self.products)
        return " ".join(head + ([tail] if tail else []))