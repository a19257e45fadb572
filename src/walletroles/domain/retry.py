"""Retry policy tables and the generic driver that evaluates them.

A policy maps each ``ChainErrorKind`` to a ``RetryRule``. The driver runs an
operation, consults the rule for the error it raised, sleeps for the rule's
delay and tries again until the attempt ceiling is reached. Kinds missing from
the table are not retried.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from logging import getLogger
from types import MappingProxyType

from walletroles.domain.errors import ChainErrorKind, ChainLookupError, RetriesExhaustedError

log = getLogger(__name__)

type Sleep = Callable[[float], Awaitable[None]]
type DelayStrategy = Callable[[int], float]

RATE_LIMIT_BACKOFF_SECONDS = 5.0
NOT_FOUND_DELAY_SECONDS = 30.0
TRANSACTION_MAX_ATTEMPTS = 5
ASSET_LOOKUP_MAX_ATTEMPTS = 3


def attempt_scaled(base_seconds: float) -> DelayStrategy:
    def delay(attempt: int) -> float:
        return base_seconds * attempt

    return delay


def fixed(seconds: float) -> DelayStrategy:
    def delay(_attempt: int) -> float:
        return seconds

    return delay


@dataclass(frozen=True, slots=True)
class RetryRule:
    retry: bool
    delay: DelayStrategy = field(default=fixed(0.0))


NO_RETRY = RetryRule(retry=False)


@dataclass(frozen=True, slots=True)
class RetryPolicyTable:
    rules: Mapping[ChainErrorKind, RetryRule]
    max_attempts: int

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        object.__setattr__(self, "rules", MappingProxyType(dict(self.rules)))

    def rule_for(self, kind: ChainErrorKind) -> RetryRule:
        return self.rules.get(kind, NO_RETRY)


TRANSACTION_RETRY_POLICY = RetryPolicyTable(
    rules={
        ChainErrorKind.RATE_LIMITED: RetryRule(
            retry=True, delay=attempt_scaled(RATE_LIMIT_BACKOFF_SECONDS)
        ),
        # Freshly submitted transactions take a while to reach the indexer.
        ChainErrorKind.NOT_FOUND: RetryRule(retry=True, delay=fixed(NOT_FOUND_DELAY_SECONDS)),
        ChainErrorKind.MALFORMED_REQUEST: NO_RETRY,
        ChainErrorKind.UNAUTHORIZED: NO_RETRY,
        ChainErrorKind.OTHER: NO_RETRY,
    },
    max_attempts=TRANSACTION_MAX_ATTEMPTS,
)

ASSET_LOOKUP_RETRY_POLICY = RetryPolicyTable(
    rules={
        ChainErrorKind.RATE_LIMITED: RetryRule(
            retry=True, delay=attempt_scaled(RATE_LIMIT_BACKOFF_SECONDS)
        ),
    },
    max_attempts=ASSET_LOOKUP_MAX_ATTEMPTS,
)


async def call_with_retry[T](
    operation: Callable[[], Awaitable[T]],
    *,
    policy: RetryPolicyTable,
    sleep: Sleep = asyncio.sleep,
    description: str = "chain lookup",
) -> T:
    """Run ``operation`` under ``policy``.

    Non-retryable errors propagate unchanged. When the last allowed attempt
    fails with a retryable error, ``RetriesExhaustedError`` is raised without a
    final sleep.
    """

    attempt = 1
    while True:
        try:
            return await operation()
        except ChainLookupError as exc:
            rule = policy.rule_for(exc.kind)
            if not rule.retry:
                raise
            if attempt >= policy.max_attempts:
                log.warning(
                    "%s failed after %s attempts (%s): %s",
                    description,
                    attempt,
                    exc.kind,
                    exc.message,
                )
                raise RetriesExhaustedError(exc, attempts=attempt) from exc
            delay = rule.delay(attempt)
            log.info(
                "%s attempt %s/%s hit %s, retrying in %.1fs",
                description,
                attempt,
                policy.max_attempts,
                exc.kind,
                delay,
            )
            await sleep(delay)
            attempt += 1
