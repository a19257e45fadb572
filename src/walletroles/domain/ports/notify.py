"""Port for follow-up messages about a pending challenge."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from walletroles.domain.model import VerificationChallenge


@runtime_checkable
class ChallengeNotifier(Protocol):
    async def remind(self, challenge: VerificationChallenge) -> None: ...

    async def expired(self, challenge: VerificationChallenge) -> None: ...
