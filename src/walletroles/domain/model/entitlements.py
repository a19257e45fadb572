"""Computed holdings and entitlement labels."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class CategoryHoldings:
    count: int = 0
    names: tuple[str, ...] = ()

    def to_payload(self) -> dict[str, object]:
        return {"count": self.count, "names": list(self.names)}


@dataclass(frozen=True, slots=True)
class EntitlementResult:
    """Output of the entitlement engine for one user's merged inventory."""

    holdings: Mapping[str, CategoryHoldings]
    labels: tuple[str, ...]
    tier: str

    def count(self, category: str) -> int:
        holdings = self.holdings.get(category)
        return holdings.count if holdings else 0


@dataclass(frozen=True, slots=True)
class EntitlementSnapshot:
    """Persisted, per-user record of the last computed entitlements.

    The payload shape is ``{"user_id", "assets": {category: {"count", "names"}},
    "labels"}``; it is an output artifact and never read back as an input to
    the engine.
    """

    user_id: str
    holdings: Mapping[str, CategoryHoldings] = field(default_factory=dict[str, CategoryHoldings])
    labels: tuple[str, ...] = ()

    @classmethod
    def from_result(cls, user_id: str, result: EntitlementResult) -> EntitlementSnapshot:
        return cls(user_id=user_id, holdings=dict(result.holdings), labels=result.labels)

    def to_payload(self) -> dict[str, object]:
        return {
            "user_id": self.user_id,
            "assets": {
                category: holdings.to_payload() for category, holdings in self.holdings.items()
            },
            "labels": list(self.labels),
        }
