from __future__ import annotations

import asyncio

from tests.helpers.fakes import (
    FakeChainReader,
    RecordingSleep,
    Script,
    amount_lines,
    chain_error,
    make_unit,
    make_wallet,
)
from walletroles.domain.asset_inspector import AssetInspector
from walletroles.domain.errors import ChainErrorKind
from walletroles.domain.policy_catalog import Category

WALLET = make_wallet(7)


def test_inspect_decodes_assets_and_drops_lovelace() -> None:
    otwo = make_unit(Category.OTWO, "Otwo42")
    tits = make_unit(Category.TITS, "TiT7")
    reader = FakeChainReader(addresses={WALLET: amount_lines(otwo, tits)})

    records = asyncio.run(AssetInspector(reader, sleep=RecordingSleep()).inspect(WALLET))

    assert [(record.unit, record.asset_name) for record in records] == [
        (otwo, "Otwo42"),
        (tits, "TiT7"),
    ]


def test_invalid_address_makes_no_call() -> None:
    reader = FakeChainReader()

    lookup = asyncio.run(AssetInspector(reader).lookup("addr1tooshort"))

    assert lookup.records == ()
    assert lookup.complete
    assert reader.address_calls == []


def test_unknown_address_is_empty_and_complete() -> None:
    reader = FakeChainReader()

    lookup = asyncio.run(AssetInspector(reader, sleep=RecordingSleep()).lookup(WALLET))

    assert lookup.records == ()
    assert lookup.complete


def test_outage_is_reported_as_incomplete() -> None:
    reader = FakeChainReader(addresses={WALLET: chain_error(ChainErrorKind.OTHER)})

    lookup = asyncio.run(AssetInspector(reader, sleep=RecordingSleep()).lookup(WALLET))

    assert not lookup.complete
    assert lookup.failure is ChainErrorKind.OTHER
    assert asyncio.run(AssetInspector(reader).inspect(WALLET)) == []


def test_rate_limited_lookup_is_retried() -> None:
    sleep = RecordingSleep()
    unit = make_unit(Category.BOB, "Bill")
    reader = FakeChainReader(
        addresses={WALLET: Script([chain_error(ChainErrorKind.RATE_LIMITED), amount_lines(unit)])}
    )

    lookup = asyncio.run(AssetInspector(reader, sleep=sleep).lookup(WALLET))

    assert lookup.complete
    assert [record.asset_name for record in lookup.records] == ["Bill"]
    assert sleep.delays == [5.0]


def test_rate_limit_exhaustion_is_incomplete() -> None:
    sleep = RecordingSleep()
    reader = FakeChainReader(addresses={WALLET: chain_error(ChainErrorKind.RATE_LIMITED)})

    lookup = asyncio.run(AssetInspector(reader, sleep=sleep).lookup(WALLET))

    assert lookup.failure is ChainErrorKind.RATE_LIMITED
    assert len(reader.address_calls) == 3
    assert sleep.delays == [5.0, 10.0]
