"""Order-level packing status.

``none`` (never computed) → ``pending`` (requested, or inputs changed) →
``success`` | ``failed`` → back to ``pending`` when quantities, item
profiles or the box catalog change.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, FrozenSet, Optional

from .errors import InvalidTransitionError
from .models import PackingStatus, PackingSummary

TRANSITIONS: Dict[PackingStatus, FrozenSet[PackingStatus]] = {
    PackingStatus.NONE: frozenset({PackingStatus.PENDING}),
    PackingStatus.PENDING: frozenset(
        {PackingStatus.PENDING, PackingStatus.SUCCESS, PackingStatus.FAILED}
    ),
    PackingStatus.SUCCESS: frozenset({PackingStatus.PENDING}),
    PackingStatus.FAILED: frozenset({PackingStatus.PENDING}),
}


def can_transition(current: PackingStatus, target: PackingStatus) -> bool:
    return target in TRANSITIONS[current]


@dataclass(frozen=True)
class PackingRecord:
    """Packing state stored alongside an order."""

    status: PackingStatus = PackingStatus.NONE
    signature: Optional[tuple] = None
    summary: Optional[PackingSummary] = None

    def _move(self, target: PackingStatus, **changes) -> "PackingRecord":
        if not can_transition(self.status, target):
            raise InvalidTransitionError(
                f"cannot move packing status from {self.status.value} to {target.value}"
            )
        return replace(self, status=target, **changes)

    def request(self, signature: tuple) -> "PackingRecord":
        """Mark a computation as requested for the given inputs."""
        return self._move(PackingStatus.PENDING, signature=signature, summary=None)

    def complete(self, summary: PackingSummary, signature: Optional[tuple] = None) -> "PackingRecord":
        """Store a finished computation.

        A summary computed for other inputs than the pending ones is
        rejected; a provisional summary keeps the record pending.
        """
        if self.status != PackingStatus.PENDING:
            raise InvalidTransitionError(
                f"cannot complete packing from status {self.status.value}"
            )
        if signature is not None and signature != self.signature:
            raise InvalidTransitionError("summary was computed for outdated inputs")
        target = summary.status
        if target not in (PackingStatus.SUCCESS, PackingStatus.FAILED, PackingStatus.PENDING):
            raise InvalidTransitionError(f"summary status {target.value} is not a result")
        return self._move(target, summary=summary)

    def inputs_changed(self, signature: tuple) -> "PackingRecord":
        """Invalidate the stored result when the inputs differ."""
        if self.status != PackingStatus.NONE and signature == self.signature:
            return self
        return self.request(signature)

    @property
    def is_current(self) -> bool:
        return self.status in (PackingStatus.SUCCESS, PackingStatus.FAILED)
