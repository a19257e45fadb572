"""HTTP client for the Blockfrost Cardano API."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from walletroles.adapters.http_resilience import ResilientClient
from walletroles.domain.errors import ChainErrorKind, ChainLookupError

from .schema import AddressPayload, ErrorPayload, TransactionUtxosPayload
from .translator import translate_address_amounts, translate_transaction

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from walletroles.config import BlockfrostConfig, ResilienceConfig
    from walletroles.domain.ports import AmountLine, ChainStateReader, TransactionParticipants

log = getLogger(__name__)

_STATUS_KINDS: dict[int, ChainErrorKind] = {
    400: ChainErrorKind.MALFORMED_REQUEST,
    401: ChainErrorKind.UNAUTHORIZED,
    403: ChainErrorKind.UNAUTHORIZED,
    404: ChainErrorKind.NOT_FOUND,
    429: ChainErrorKind.RATE_LIMITED,
}


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def classify_error(response: httpx.Response) -> ChainLookupError:
    """Map an error response to a ``ChainLookupError`` keeping Blockfrost's message."""

    kind = _STATUS_KINDS.get(response.status_code, ChainErrorKind.OTHER)
    message = f"HTTP {response.status_code}"
    try:
        error_payload = ErrorPayload.model_validate(response.json())
    except (ValueError, ValidationError):
        error_payload = None
    if error_payload is not None and error_payload.message:
        message = error_payload.message
    return ChainLookupError(kind, message, status_code=response.status_code)


class BlockfrostClient:
    """``ChainStateReader`` backed by the Blockfrost REST API.

    One underlying HTTP client is shared by every lookup so the configured rate
    limit applies across concurrent wallet lookups.
    """

    def __init__(
        self,
        config: BlockfrostConfig,
        *,
        client_factory: Callable[[ResilienceConfig], ResilientClient] = _default_client_factory,
    ) -> None:
        self.config = config
        self._client = client_factory(config.resilience)

    async def __aenter__(self) -> BlockfrostClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def address_amounts(self, address: str) -> list[AmountLine]:
        payload = await self._get_json(f"/addresses/{address}")
        try:
            parsed = AddressPayload.model_validate(payload)
        except ValidationError as exc:
            raise ChainLookupError(
                ChainErrorKind.OTHER, f"Unexpected address payload: {exc.error_count()} errors"
            ) from exc
        return translate_address_amounts(parsed)

    async def transaction_participants(self, tx_hash: str) -> TransactionParticipants:
        payload = await self._get_json(f"/txs/{tx_hash}/utxos")
        try:
            parsed = TransactionUtxosPayload.model_validate(payload)
        except ValidationError as exc:
            raise ChainLookupError(
                ChainErrorKind.OTHER, f"Unexpected transaction payload: {exc.error_count()} errors"
            ) from exc
        return translate_transaction(parsed)

    async def _get_json(self, path: str) -> object:
        try:
            response = await self._client.get(path)
        except httpx.HTTPError as exc:
            log.warning("Blockfrost request %s failed: %s", path, exc)
            raise ChainLookupError(ChainErrorKind.OTHER, f"Request failed: {exc}") from exc

        if response.is_error:
            error = classify_error(response)
            log.debug("Blockfrost %s returned %s (%s)", path, response.status_code, error.kind)
            raise error

        try:
            return response.json()
        except ValueError as exc:
            raise ChainLookupError(
                ChainErrorKind.OTHER, "Blockfrost returned a non-JSON body"
            ) from exc


if TYPE_CHECKING:

    def _reader_check(client: BlockfrostClient) -> ChainStateReader:
        return client
