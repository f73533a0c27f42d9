"""Thread-safe per-IP aggregation of login events."""

import threading
from typing import Dict, List, Tuple

import structlog

from ssh_stat.models import LoginEvent, OrderBy

logger = structlog.get_logger(__name__)


class Aggregator:
    """Store merging LoginEvents by source IP into failed/accepted buckets.

    The first event seen for an address becomes its record and is placed in
    the bucket matching its status. Every later event from the address bumps
    the cumulative attempt count:

    - same status as the record: absorbed, the record's attempts are updated
    - other status: the event takes the cumulative count and is placed in the
      other bucket, replacing any earlier entry there (last flip wins)

    So an address appears at most once per bucket. Fail, fail, accept from one
    address gives a failed entry with attempts=2 and an accepted entry with
    attempts=3.

    All of merge() runs under one lock, so per-address results are the same
    as some serial order of the merges.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()

        # ip -> first event seen for that ip
        self._records: Dict[str, LoginEvent] = {}
        # ip -> cumulative attempts, failed and accepted together
        self._attempts: Dict[str, int] = {}

        self._failed: Dict[str, LoginEvent] = {}
        self._accepted: Dict[str, LoginEvent] = {}

        self._failed_attempts = 0
        self._accepted_attempts = 0

    def _bucket(self, authenticated: bool) -> Dict[str, LoginEvent]:
        return self._accepted if authenticated else self._failed

    def merge(self, event: LoginEvent) -> None:
        """Merge one event into the store. Safe to call from many threads.

        Args:
            event: Parsed event. Ownership passes to the Aggregator, which
                may change its ``attempts``.
        """
        with self._lock:
            ip = event.ip
            total = self._attempts.get(ip, 0) + 1
            self._attempts[ip] = total

            if event.authenticated:
                self._accepted_attempts += 1
            else:
                self._failed_attempts += 1

            record = self._records.get(ip)
            if record is None:
                event.attempts = total
                self._records[ip] = event
                self._bucket(event.authenticated)[ip] = event
            elif record.authenticated == event.authenticated:
                record.attempts = total
            else:
                event.attempts = total
                self._bucket(event.authenticated)[ip] = event

    def attempts_for(self, ip: str) -> int:
        """Return cumulative attempts merged for an address (0 if unseen)."""
        with self._lock:
            return self._attempts.get(ip, 0)

    @property
    def stats(self) -> Dict[str, int]:
        """Get aggregation statistics.

        Returns:
            Dict with addresses, total/failed/accepted attempts and the
            number of entries in each bucket
        """
        with self._lock:
            return {
                "addresses": len(self._records),
                "total_attempts": self._failed_attempts + self._accepted_attempts,
                "failed_attempts": self._failed_attempts,
                "accepted_attempts": self._accepted_attempts,
                "failed_entries": len(self._failed),
                "accepted_entries": len(self._accepted),
            }

    def finalize(
        self,
        order_by: OrderBy = OrderBy.ATTEMPTS_DESC,
    ) -> Tuple[List[LoginEvent], List[LoginEvent]]:
        """Return the failed and accepted buckets sorted by ``order_by``.

        Entries are copies, so later merges do not change returned results.

        Returns:
            Tuple of (failed, accepted) lists
        """
        with self._lock:
            failed = [e.model_copy() for e in self._failed.values()]
            accepted = [e.model_copy() for e in self._accepted.values()]

        failed = sort_events(failed, order_by)
        accepted = sort_events(accepted, order_by)
        logger.debug(
            "aggregation_finalized",
            order=order_by.value,
            failed=len(failed),
            accepted=len(accepted),
        )
        return failed, accepted


def sort_events(events: List[LoginEvent], order_by: OrderBy) -> List[LoginEvent]:
    """Sort events by one of the four orders.

    Ties are broken by IP so output does not depend on merge interleaving.
    """
    # Stable two-pass sort: tie-break first, then primary key
    result = sorted(events, key=lambda e: e.ip)

    if order_by == OrderBy.ATTEMPTS_ASC:
        result.sort(key=lambda e: e.attempts)
    elif order_by == OrderBy.CHRONO_DESC:
        result.sort(key=lambda e: e.timestamp, reverse=True)
    elif order_by == OrderBy.CHRONO_ASC:
        result.sort(key=lambda e: e.timestamp)
    else:
        result.sort(key=lambda e: e.attempts, reverse=True)
    return result
