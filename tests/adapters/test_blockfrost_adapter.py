from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable  # noqa: TC003

import httpx
import pytest

from walletroles.adapters.blockfrost import BlockfrostClient, TransactionUtxosPayload
from walletroles.adapters.blockfrost.translator import translate_transaction
from walletroles.adapters.http_resilience import ResilientClient
from walletroles.config import BlockfrostConfig, ResilienceConfig
from walletroles.config.blockfrost import blockfrost_resilience
from walletroles.config.http_resilience import RetryPolicy
from walletroles.domain.errors import ChainErrorKind, ChainLookupError
from walletroles.domain.ports import AmountLine

BASE_URL = "https://blockfrost.test/api/v0"
WALLET = "addr1q" + "x" * 58
TX = "c" * 64

type Handler = Callable[[httpx.Request], httpx.Response]


def _config(*, retry: RetryPolicy | None = None) -> BlockfrostConfig:
    resilience = blockfrost_resilience("project-123", base_url=BASE_URL)
    if retry is not None:
        resilience = ResilienceConfig(
            name=resilience.name,
            base_url=resilience.base_url,
            retry=retry,
            default_headers=resilience.default_headers,
        )
    return BlockfrostConfig(project_id="project-123", resilience=resilience)


def _client(handler: Handler, *, retry: RetryPolicy | None = None) -> BlockfrostClient:
    def factory(resilience: ResilienceConfig) -> ResilientClient:
        return ResilientClient(resilience, transport=httpx.MockTransport(handler))

    return BlockfrostClient(_config(retry=retry), client_factory=factory)


def _run[T](client: BlockfrostClient, call: Callable[[BlockfrostClient], Awaitable[T]]) -> T:
    async def scenario() -> T:
        async with client:
            return await call(client)

    return asyncio.run(scenario())


def _error(status: int, message: str) -> httpx.Response:
    return httpx.Response(
        status,
        json={"status_code": status, "error": "Error", "message": message},
    )


def test_address_amounts_sends_project_id_and_parses_units() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "address": WALLET,
                "amount": [
                    {"unit": "lovelace", "quantity": "42000000"},
                    {"unit": "ab" * 28 + "4d6665", "quantity": "1"},
                ],
                "stake_address": None,
                "type": "shelley",
            },
        )

    lines = _run(_client(handler), lambda client: client.address_amounts(WALLET))

    assert lines == [
        AmountLine(unit="lovelace", quantity=42_000_000),
        AmountLine(unit="ab" * 28 + "4d6665", quantity=1),
    ]
    assert seen[0].url == httpx.URL(f"{BASE_URL}/addresses/{WALLET}")
    assert seen[0].headers["project_id"] == "project-123"


def test_transaction_participants_collects_addresses() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith(f"/txs/{TX}/utxos")
        return httpx.Response(
            200,
            json={
                "hash": TX,
                "inputs": [
                    {"address": WALLET, "amount": [], "tx_hash": "d" * 64, "output_index": 0},
                ],
                "outputs": [
                    {"address": WALLET, "amount": [{"unit": "lovelace", "quantity": "250123"}]},
                    {"address": "addr1other", "amount": []},
                ],
            },
        )

    participants = _run(_client(handler), lambda client: client.transaction_participants(TX))

    assert participants.tx_hash == TX
    assert participants.inputs == frozenset({WALLET})
    assert participants.outputs == frozenset({WALLET, "addr1other"})
    assert participants.involves(WALLET)


@pytest.mark.parametrize(
    ("status", "kind"),
    [
        (400, ChainErrorKind.MALFORMED_REQUEST),
        (403, ChainErrorKind.UNAUTHORIZED),
        (404, ChainErrorKind.NOT_FOUND),
        (429, ChainErrorKind.RATE_LIMITED),
        (418, ChainErrorKind.OTHER),
    ],
)
def test_error_statuses_are_classified(status: int, kind: ChainErrorKind) -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return _error(status, "Upstream says no")

    with pytest.raises(ChainLookupError) as excinfo:
        _run(_client(handler), lambda client: client.transaction_participants(TX))

    assert excinfo.value.kind is kind
    assert excinfo.value.message == "Upstream says no"
    assert excinfo.value.status_code == status
    assert len(calls) == 1


def test_server_errors_surface_after_transport_retries() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="oops")

    with pytest.raises(ChainLookupError) as excinfo:
        _run(
            _client(handler, retry=RetryPolicy(total=0)),
            lambda client: client.address_amounts(WALLET),
        )

    assert excinfo.value.kind is ChainErrorKind.OTHER
    assert excinfo.value.message == "HTTP 500"


def test_transient_server_error_is_retried_by_transport() -> None:
    responses = iter(
        [
            httpx.Response(503),
            httpx.Response(200, json={"address": WALLET, "amount": []}),
        ]
    )
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return next(responses)

    lines = _run(
        _client(handler, retry=RetryPolicy(total=1, backoff_factor=0.0, backoff_jitter=0.0)),
        lambda client: client.address_amounts(WALLET),
    )

    assert lines == []
    assert len(calls) == 2


def test_network_failure_is_other() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ChainLookupError) as excinfo:
        _run(
            _client(handler, retry=RetryPolicy(total=0)),
            lambda client: client.address_amounts(WALLET),
        )

    assert excinfo.value.kind is ChainErrorKind.OTHER


def test_unexpected_payload_is_other() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"amount": [{"unit": "lovelace"}]})

    with pytest.raises(ChainLookupError) as excinfo:
        _run(_client(handler), lambda client: client.address_amounts(WALLET))

    assert excinfo.value.kind is ChainErrorKind.OTHER
    assert "Unexpected address payload" in excinfo.value.message


def test_non_json_body_is_other() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>maintenance</html>")

    with pytest.raises(ChainLookupError) as excinfo:
        _run(_client(handler), lambda client: client.address_amounts(WALLET))

    assert excinfo.value.kind is ChainErrorKind.OTHER


def test_translate_transaction_deduplicates_addresses() -> None:
    payload = TransactionUtxosPayload.model_validate(
        {
            "hash": TX,
            "inputs": [{"address": WALLET}, {"address": WALLET}],
            "outputs": [],
        }
    )

    participants = translate_transaction(payload)

    assert participants.inputs == frozenset({WALLET})
    assert not participants.outputs
