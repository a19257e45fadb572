"""Pure mapping from a user's merged holdings to entitlement labels.

Labels come from three rule families:

* a tier label chosen from the combined ``otwo + mx`` count via a descending
  threshold table (strictly highest qualifying tier wins, zero is the
  explicit "none" tier which is never granted);
* bonus labels for holding at least one asset of a given category;
* the "Xesserson Rainbow" composite label for owning ``otwo`` assets whose
  stamp colors cover the full rainbow.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from logging import getLogger
from types import MappingProxyType
from typing import TYPE_CHECKING, Final

from walletroles.domain.model import CategoryHoldings, EntitlementResult
from walletroles.domain.policy_catalog import DEFAULT_POLICY_CATALOG, Category, PolicyCatalog

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from walletroles.domain.model import AssetRecord

log = getLogger(__name__)

type AttributeLookup = Mapping[str, Mapping[str, object]]

TIER_CATEGORIES: Final[tuple[str, ...]] = (Category.OTWO, Category.MX)
NONE_TIER: Final[str] = "No Mfer"

TIER_TABLE: Final[tuple[tuple[int, str], ...]] = (
    (250, "God"),
    (125, "42% God"),
    (75, "Part God"),
    (50, "Lord of DN"),
    (25, "Glorious Mfer"),
    (10, "Big Ol’ Bumbum Mfer"),
    (5, "Incredible Mfer"),
    (4, "Fancy Mfer"),
    (3, "Impressive Mfer"),
    (2, "Semi-Impressive Mfer"),
    (1, "Mfer"),
    (0, NONE_TIER),
)

BONUS_LABELS: Final[tuple[tuple[str, str], ...]] = (
    (Category.TITS, "TiTs"),
    (Category.TWINS, "Hoodros Au Revoir"),
    (Category.COINS, "Dedicated Mfer"),
    (Category.BOB, "Back Of Bills"),
    (Category.MX, "Sicario"),
)

RAINBOW_LABEL: Final[str] = "Xesserson Rainbow"
RAINBOW_CATEGORY: Final[str] = Category.OTWO
RAINBOW_ATTRIBUTE: Final[str] = "Stamp Color"
RAINBOW_COLORS: Final[frozenset[str]] = frozenset(
    {"Green", "Blue", "Navy", "Red", "Purple", "Yellow"}
)

# Every label this service grants or revokes; other guild roles are never touched.
MANAGED_LABELS: Final[frozenset[str]] = frozenset(
    [label for _threshold, label in TIER_TABLE if label != NONE_TIER]
    + [label for _category, label in BONUS_LABELS]
    + [RAINBOW_LABEL]
)


def tier_label(count: int) -> str:
    if count < 0:
        raise ValueError(f"Holding count must be non-negative, got {count}")
    for threshold, label in TIER_TABLE:
        if count >= threshold:
            return label
    return NONE_TIER


def find_attributes(attributes: AttributeLookup, asset_name: str) -> Mapping[str, object] | None:
    """Attribute record for ``asset_name``: exact key, else first key ending with it."""

    if not asset_name:
        return None
    exact = attributes.get(asset_name)
    if exact is not None:
        return exact
    for key, record in attributes.items():
        if key.endswith(asset_name):
            return record
    return None


def covers_required_values(
    assets: Iterable[AssetRecord],
    attributes: AttributeLookup,
    *,
    attribute: str = RAINBOW_ATTRIBUTE,
    required: frozenset[str] = RAINBOW_COLORS,
) -> bool:
    missing = set(required)
    for asset in assets:
        record = find_attributes(attributes, asset.asset_name)
        if record is not None:
            value = record.get(attribute)
            if isinstance(value, str):
                missing.discard(value)
        if not missing:
            return True
    log.debug("Missing %s values: %s", attribute, ", ".join(sorted(missing)))
    return False


@dataclass(frozen=True, slots=True)
class EntitlementEngine:
    catalog: PolicyCatalog = DEFAULT_POLICY_CATALOG
    attributes: AttributeLookup = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))

    def partition(self, assets: Iterable[AssetRecord]) -> dict[str, list[AssetRecord]]:
        by_category: dict[str, list[AssetRecord]] = {category: [] for category in self.catalog}
        for asset in assets:
            category = self.catalog.category_for(asset.policy_id)
            if category is not None:
                by_category[category].append(asset)
        return by_category

    def compute(self, assets: Sequence[AssetRecord]) -> EntitlementResult:
        by_category = self.partition(assets)
        holdings = {
            category: CategoryHoldings(
                count=len(records),
                names=tuple(record.asset_name for record in records),
            )
            for category, records in by_category.items()
        }

        tier_count = sum(len(by_category.get(category, ())) for category in TIER_CATEGORIES)
        tier = tier_label(tier_count)

        labels: list[str] = []
        if tier != NONE_TIER:
            labels.append(tier)
        for category, label in BONUS_LABELS:
            if by_category.get(category) and label not in labels:
                labels.append(label)
        if covers_required_values(by_category.get(RAINBOW_CATEGORY, ()), self.attributes):
            labels.append(RAINBOW_LABEL)

        return EntitlementResult(holdings=holdings, labels=tuple(labels), tier=tier)
