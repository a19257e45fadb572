"""Static mapping from entitlement category to Cardano policy id.

Changing a policy id changes who is entitled to which role; announce it to the
community before deploying.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType

from walletroles.domain.model import POLICY_ID_LENGTH


class Category(StrEnum):
    TITS = "tits"
    OTWO = "otwo"
    BOB = "bob"
    MX = "mx"
    TWINS = "twins"
    COINS = "coins"


@dataclass(frozen=True, slots=True)
class PolicyCatalog(Mapping[str, str]):
    """Labeled, read-only ``category -> policy id`` mapping."""

    policies: Mapping[str, str]

    def __post_init__(self) -> None:
        seen: dict[str, str] = {}
        for category, policy_id in self.policies.items():
            if len(policy_id) != POLICY_ID_LENGTH:
                raise ValueError(
                    f"Policy id for {category!r} must be {POLICY_ID_LENGTH} characters"
                )
            if policy_id in seen:
                raise ValueError(
                    f"Policy id {policy_id} is listed under both {seen[policy_id]!r} "
                    f"and {category!r}"
                )
            seen[policy_id] = category
        object.__setattr__(self, "policies", MappingProxyType(dict(self.policies)))

    def __getitem__(self, category: str) -> str:
        return self.policies[category]

    def __iter__(self) -> Iterator[str]:
        return iter(self.policies)

    def __len__(self) -> int:
        return len(self.policies)

    def category_for(self, policy_id: str) -> str | None:
        for category, candidate in self.policies.items():
            if candidate == policy_id:
                return category
        return None


DEFAULT_POLICY_CATALOG = PolicyCatalog(
    {
        Category.TITS: "a4c45615825acae7c4937ee4d45d2ff9a29328084e2dc34bf4af37b2",
        Category.OTWO: "3bcc312ebe7cd9281ab3e3d641bf70f207012e539b0e6e7c3f1560d7",
        Category.BOB: "4552d6234e2a9cf2615220f9dbe1b233c4c2dccbc8d872dcae9a3795",
        Category.MX: "d2d5dc672cd07a17fec693688cfcea3f4afe6564000eb8d73337b8ae",
        Category.TWINS: "4d78dc5ed9ea8cc940f8370e0d539fee3cb42d48b501762ba6acaf34",
        Category.COINS: "13f58336e1e11cea3ee956e0311a4ab81fc53de79400b0e019bff5c5",
    }
)
