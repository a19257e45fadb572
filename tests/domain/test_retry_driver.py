from __future__ import annotations

import asyncio

import pytest

from tests.helpers.fakes import RecordingSleep, chain_error
from walletroles.domain.errors import ChainErrorKind, ChainLookupError, RetriesExhaustedError
from walletroles.domain.retry import (
    ASSET_LOOKUP_RETRY_POLICY,
    TRANSACTION_RETRY_POLICY,
    RetryPolicyTable,
    RetryRule,
    call_with_retry,
    fixed,
)


class FlakyOperation:
    def __init__(self, *outcomes: str | ChainLookupError) -> None:
        self._outcomes = list(outcomes)
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, ChainLookupError):
            raise outcome
        return outcome


def test_returns_first_success_without_sleeping() -> None:
    sleep = RecordingSleep()
    operation = FlakyOperation("ok")

    result = asyncio.run(call_with_retry(operation, policy=TRANSACTION_RETRY_POLICY, sleep=sleep))

    assert result == "ok"
    assert operation.calls == 1
    assert sleep.delays == []


def test_rate_limit_backoff_scales_with_attempt() -> None:
    sleep = RecordingSleep()
    operation = FlakyOperation(
        chain_error(ChainErrorKind.RATE_LIMITED),
        chain_error(ChainErrorKind.RATE_LIMITED),
        "ok",
    )

    result = asyncio.run(call_with_retry(operation, policy=TRANSACTION_RETRY_POLICY, sleep=sleep))

    assert result == "ok"
    assert sleep.delays == [5.0, 10.0]


def test_not_found_waits_fixed_delay() -> None:
    sleep = RecordingSleep()
    operation = FlakyOperation(chain_error(ChainErrorKind.NOT_FOUND), "ok")

    asyncio.run(call_with_retry(operation, policy=TRANSACTION_RETRY_POLICY, sleep=sleep))

    assert sleep.delays == [30.0]


@pytest.mark.parametrize(
    "kind",
    [ChainErrorKind.MALFORMED_REQUEST, ChainErrorKind.UNAUTHORIZED, ChainErrorKind.OTHER],
)
def test_non_retryable_errors_propagate_immediately(kind: ChainErrorKind) -> None:
    sleep = RecordingSleep()
    operation = FlakyOperation(chain_error(kind), "never")

    with pytest.raises(ChainLookupError) as excinfo:
        asyncio.run(call_with_retry(operation, policy=TRANSACTION_RETRY_POLICY, sleep=sleep))

    assert excinfo.value.kind is kind
    assert operation.calls == 1
    assert sleep.delays == []


def test_exhaustion_does_not_sleep_after_last_attempt() -> None:
    sleep = RecordingSleep()
    operation = FlakyOperation(*(chain_error(ChainErrorKind.NOT_FOUND) for _ in range(5)))

    with pytest.raises(RetriesExhaustedError) as excinfo:
        asyncio.run(call_with_retry(operation, policy=TRANSACTION_RETRY_POLICY, sleep=sleep))

    assert excinfo.value.attempts == 5
    assert excinfo.value.last_error.kind is ChainErrorKind.NOT_FOUND
    assert operation.calls == 5
    assert sleep.delays == [30.0] * 4


def test_asset_policy_does_not_retry_not_found() -> None:
    sleep = RecordingSleep()
    operation = FlakyOperation(chain_error(ChainErrorKind.NOT_FOUND))

    with pytest.raises(ChainLookupError):
        asyncio.run(call_with_retry(operation, policy=ASSET_LOOKUP_RETRY_POLICY, sleep=sleep))

    assert sleep.delays == []


def test_policy_table_validation_and_defaults() -> None:
    with pytest.raises(ValueError, match="max_attempts"):
        RetryPolicyTable(rules={}, max_attempts=0)

    table = RetryPolicyTable(
        rules={ChainErrorKind.OTHER: RetryRule(retry=True, delay=fixed(1.5))},
        max_attempts=2,
    )
    assert table.rule_for(ChainErrorKind.OTHER).delay(7) == 1.5
    assert table.rule_for(ChainErrorKind.NOT_FOUND).retry is False
