from __future__ import annotations

import pytest

from tests.helpers.fakes import make_unit
from walletroles.domain.asset_inspector import asset_records, decode_asset_name
from walletroles.domain.errors import InvalidAddressError
from walletroles.domain.model import AssetRecord, is_valid_address, normalize_address
from walletroles.domain.policy_catalog import DEFAULT_POLICY_CATALOG, Category, PolicyCatalog
from walletroles.domain.ports import AmountLine

VALID = "addr1q" + "9" * 52 + "abcde"


@pytest.mark.parametrize(
    "address",
    [
        VALID,
        f"  {VALID}\n",
        "addr1" + "z" * 53,
    ],
)
def test_valid_addresses(address: str) -> None:
    assert is_valid_address(address)
    assert normalize_address(address) == address.strip()


@pytest.mark.parametrize(
    "address",
    [
        "",
        "addr1" + "z" * 52,
        "stake1" + "u" * 60,
        "addr_test1" + "q" * 60,
        VALID[:-1] + "_",
        VALID[:30] + " " + VALID[30:],
    ],
)
def test_invalid_addresses(address: str) -> None:
    assert not is_valid_address(address)
    with pytest.raises(InvalidAddressError):
        normalize_address(address)


def test_asset_record_splits_unit() -> None:
    unit = make_unit(Category.OTWO, "Otwo123")
    record = AssetRecord(unit=unit, asset_name="Otwo123", quantity=1)

    assert record.policy_id == DEFAULT_POLICY_CATALOG[Category.OTWO]
    assert record.asset_name_hex == "Otwo123".encode().hex()


def test_asset_record_rejects_negative_quantity() -> None:
    with pytest.raises(ValueError, match="non-negative"):
        AssetRecord(unit=make_unit(Category.BOB, "x"), asset_name="x", quantity=-1)


def test_decode_asset_name_handles_binary_names() -> None:
    policy = DEFAULT_POLICY_CATALOG[Category.MX]

    assert decode_asset_name(policy + "4d583432") == "MX42"
    assert decode_asset_name(policy) == ""
    assert decode_asset_name(policy + "000de140ff") == "\x00\r\ufffd@\ufffd"
    assert decode_asset_name(policy + "zz") == "zz"


def test_asset_records_drop_lovelace() -> None:
    unit = make_unit(Category.TITS, "TiT1")
    records = asset_records(
        [AmountLine(unit="lovelace", quantity=2_000_000), AmountLine(unit=unit, quantity=3)]
    )

    assert records == [AssetRecord(unit=unit, asset_name="TiT1", quantity=3)]


def test_policy_catalog_lookup_and_validation() -> None:
    catalog = DEFAULT_POLICY_CATALOG

    assert set(catalog) == {category.value for category in Category}
    assert catalog.category_for(catalog[Category.TWINS]) == Category.TWINS
    assert catalog.category_for("f" * 56) is None

    with pytest.raises(ValueError, match="56 characters"):
        PolicyCatalog({"short": "abc"})
    with pytest.raises(ValueError, match="both"):
        PolicyCatalog({"a": "a" * 56, "b": "a" * 56})
