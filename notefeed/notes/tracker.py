"""
Bookkeeping for mutations against the gateway.

Every create/update/delete gets a `Mutation` record keyed by the note it
targets, so concurrent mutations on different notes carry independent
pending/success/error state.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Collection, Dict, Iterator, List, Optional

LOGGER = logging.getLogger(__name__)


class MutationKind(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class MutationStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class Mutation:
    seq: int
    kind: MutationKind
    key: str
    variables: Dict[str, Any] = field(default_factory=dict)
    status: MutationStatus = MutationStatus.PENDING
    result: Any = None
    error: Optional[BaseException] = None

    @property
    def is_pending(self) -> bool:
        return self.status is MutationStatus.PENDING


class MutationTracker:
    def __init__(self) -> None:
        self._mutations: List[Mutation] = []
        self._seq = itertools.count(1)

    def __iter__(self) -> Iterator[Mutation]:
        return iter(list(self._mutations))

    def __len__(self) -> int:
        return len(self._mutations)

    def start(self, kind: MutationKind, key: str, **variables: Any) -> Mutation:
        m = Mutation(seq=next(self._seq), kind=kind, key=key, variables=variables)
        self._mutations.append(m)
        LOGGER.debug("Mutation #%d started: %s %s", m.seq, kind.value, key)
        return m

    def succeed(self, mutation: Mutation, result: Any = None) -> None:
        mutation.status = MutationStatus.SUCCESS
        mutation.result = result
        LOGGER.debug("Mutation #%d succeeded", mutation.seq)

    def fail(self, mutation: Mutation, error: BaseException) -> None:
        mutation.status = MutationStatus.ERROR
        mutation.error = error
        LOGGER.debug("Mutation #%d failed: %s", mutation.seq, error)

    def pending(self, kind: Optional[MutationKind] = None) -> List[Mutation]:
        return [
            m
            for m in self._mutations
            if m.is_pending and (kind is None or m.kind is kind)
        ]

    def successful_creates(self) -> List[Mutation]:
        return [
            m
            for m in self._mutations
            if m.kind is MutationKind.CREATE and m.status is MutationStatus.SUCCESS
        ]

    def collect(self, live_keys: Collection[str]) -> int:
        """
        Drop settled mutations whose key no longer appears in ``live_keys``.

        Pending mutations are always kept. Returns the number removed.
        """
        live = set(live_keys)
        keep = [m for m in self._mutations if m.is_pending or m.key in live]
        removed = len(self._mutations) - len(keep)
        self._mutations = keep
        if removed:
            LOGGER.debug("Collected %d settled mutations", removed)
        return removed
