"""Per-session memory of rejected bookings the patient has already been shown.

A rejected booking may only be deleted on the deferred path after it has
appeared in at least one rendered refresh. The SeenSet lives in process
memory and is gone when the session (or the process) ends.
"""

import logging
import time
from collections.abc import Callable, Iterable

from medbook.core.config import settings
from medbook.models import Booking, BookingStatus
from medbook.services import booking_service
from medbook.store.gateway import BOOKINGS, StoreGateway

logger = logging.getLogger(__name__)


class ReconciliationTracker:
    def __init__(self) -> None:
        self._seen: set[int] = set()

    def mark_seen(self, booking_id: int) -> None:
        self._seen.add(booking_id)

    def is_seen(self, booking_id: int) -> bool:
        return booking_id in self._seen

    def forget(self, booking_id: int) -> None:
        self._seen.discard(booking_id)

    @property
    def seen_ids(self) -> frozenset[int]:
        return frozenset(self._seen)

    def observe(self, rendered: Iterable[Booking]) -> list[int]:
        """Phase one: mark every rendered rejected booking as seen."""
        marked = []
        for b in rendered:
            if b.status == BookingStatus.REJECTED.value:
                self.mark_seen(b.id)
                marked.append(b.id)
        return marked

    async def reconcile(self, gateway: StoreGateway) -> list[int]:
        """Phase two: run the deferred delete for everything in the SeenSet.

        Ids whose booking is gone, by this call or any other path, leave the set.
        """
        removed = []
        for booking_id in sorted(self._seen):
            if await booking_service.reconcile_rejected(gateway, booking_id, self):
                removed.append(booking_id)
                self.forget(booking_id)
            elif await gateway.get(BOOKINGS, booking_id) is None:
                self.forget(booking_id)
        return removed


class TrackerRegistry:
    """One tracker per active patient session.

    A session ends on logout (``end_session``) or after ``ttl_seconds`` without
    a refresh; idle trackers are dropped on the next registry access.
    """

    def __init__(
        self,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._trackers: dict[int, ReconciliationTracker] = {}
        self._last_used: dict[int, float] = {}
        self._ttl = ttl_seconds
        self._clock = clock

    @property
    def ttl_seconds(self) -> float:
        if self._ttl is not None:
            return self._ttl
        return settings.patient_session_ttl_minutes * 60

    def _prune(self, now: float) -> None:
        expired = [pid for pid, t in self._last_used.items() if now - t > self.ttl_seconds]
        for pid in expired:
            self.end_session(pid)
            logger.debug("Reconciliation session for patient %s expired", pid)

    def for_patient(self, patient_id: int) -> ReconciliationTracker:
        now = self._clock()
        self._prune(now)
        tracker = self._trackers.get(patient_id)
        if tracker is None:
            tracker = self._trackers[patient_id] = ReconciliationTracker()
            logger.debug("New reconciliation session for patient %s", patient_id)
        self._last_used[patient_id] = now
        return tracker

    def end_session(self, patient_id: int) -> None:
        self._trackers.pop(patient_id, None)
        self._last_used.pop(patient_id, None)

    def active_patients(self) -> frozenset[int]:
        return frozenset(self._trackers)

    def reset(self) -> None:
        self._trackers.clear()
        self._last_used.clear()


trackers = TrackerRegistry()
