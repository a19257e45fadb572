"""Domain port definitions for adapters."""

from __future__ import annotations

from .chain import AmountLine, ChainStateReader, TransactionParticipants
from .notify import ChallengeNotifier
from .privileges import PrivilegeManager
from .storage import MappingStore

__all__ = [
    "AmountLine",
    "ChainStateReader",
    "ChallengeNotifier",
    "MappingStore",
    "PrivilegeManager",
    "TransactionParticipants",
]
