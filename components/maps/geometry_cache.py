"""
Route geometry cache.

Resolving road-following geometry is an expensive external call, so each
distinct (start, end) pair is fetched at most once per session. A lookup never
blocks: on a miss the caller immediately gets the straight-line fallback while
a background worker asks the routing provider for the real polyline. When the
polyline arrives the redraw notifier tells the map to replace the fallback.
"""

import dataclasses
import threading
from collections import Counter
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Optional, Set, Tuple, Any
import logging

from .geometry import RouteGeometry, RouteSegment, straight_line

logger = logging.getLogger(__name__)

CacheKey = Tuple[Tuple[float, float], Tuple[float, float]]
RedrawNotifier = Callable[[CacheKey, Tuple[str, ...]], None]


class CacheState(Enum):
    PENDING = 'pending'
    RESOLVED = 'resolved'
    FAILED = 'failed'


@dataclass
class CacheEntry:
    """
    Cached geometry for one (start, end) key.

    `geometry` holds the straight-line fallback until the entry is resolved.
    Failed entries keep the fallback for the rest of the session.
    """
    key: CacheKey
    state: CacheState
    geometry: RouteGeometry
    fallback: RouteGeometry
    route_ids: Set[str] = field(default_factory=set)
    error: Optional[str] = None


@dataclass(frozen=True)
class FetchOutcome:
    """Result of one routing provider call."""
    geometry: Optional[RouteGeometry] = None
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.geometry is not None and len(self.geometry) >= 2


class RouteGeometryCache:
    """
    Single-flight cache of resolved route geometry.

    All reads and writes of the entry table go through one lock. Completions
    carry the generation they were issued under; once the cache is closed the
    generation moves on and late completions are ignored.
    """

    def __init__(self, provider, notifier: Optional[RedrawNotifier] = None,
                 executor: Optional[Executor] = None, max_workers: int = 4):
        """
        Args:
            provider: Routing provider with resolve(start, end) -> RouteGeometry
            notifier: Called with (key, route_ids) when a fallback is replaced
            executor: Executor for background fetches; a thread pool owned by
                the cache is created when omitted
            max_workers: Worker count for the owned thread pool
        """
        self._provider = provider
        self._notifier = notifier
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="route-geometry"
        )
        self._lock = threading.Lock()
        self._entries: Dict[CacheKey, CacheEntry] = {}
        self._counters = Counter()
        self._generation = 0
        self._closed = False

    @staticmethod
    def make_key(segment: RouteSegment) -> CacheKey:
        """Canonical key for a segment; direction is significant."""
        return (segment.start.rounded(), segment.end.rounded())

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def closed(self) -> bool:
        return self._closed

    def set_notifier(self, notifier: Optional[RedrawNotifier]) -> None:
        with self._lock:
            self._notifier = notifier

    def lookup(self, segment: RouteSegment) -> Tuple[RouteGeometry, bool]:
        """
        Get geometry to draw for a segment.

        Args:
            segment: Route segment to draw

        Returns:
            Tuple of (geometry, resolved). Unresolved lookups return the
            straight-line fallback.
        """
        key = self.make_key(segment)

        with self._lock:
            self._counters['lookups'] += 1
            entry = self._entries.get(key)

            if entry is not None:
                entry.route_ids.add(segment.route_id)
                if entry.state is CacheState.RESOLVED:
                    self._counters['hits'] += 1
                    return entry.geometry, True
                return entry.fallback, False

            self._counters['misses'] += 1
            fallback = straight_line(segment)

            if self._closed:
                return fallback, False

            self._entries[key] = CacheEntry(
                key=key,
                state=CacheState.PENDING,
                geometry=fallback,
                fallback=fallback,
                route_ids={segment.route_id}
            )
            self._counters['provider_calls'] += 1
            generation = self._generation

        logger.debug(f"Scheduling route geometry fetch for {segment.route_id} {key}")
        try:
            self._executor.submit(self._fetch, key, segment, generation)
        except RuntimeError as e:
            # Executor already shut down
            self.on_fetch_complete(key, FetchOutcome(error=e), generation)

        return fallback, False

    def _fetch(self, key: CacheKey, segment: RouteSegment, generation: int) -> None:
        """Worker body: call the provider once and report the outcome."""
        try:
            geometry = tuple(self._provider.resolve(segment.start, segment.end))
            if len(geometry) < 2:
                raise ValueError(f"provider returned {len(geometry)} point(s)")
            outcome = FetchOutcome(geometry=geometry)
        except Exception as e:
            outcome = FetchOutcome(error=e)

        self.on_fetch_complete(key, outcome, generation)

    def on_fetch_complete(self, key: CacheKey, outcome: FetchOutcome,
                          generation: Optional[int] = None) -> None:
        """
        Apply a fetch result to its entry.

        Success moves the entry to RESOLVED and notifies the map. Failure moves
        it to FAILED and keeps the fallback; it is logged and never retried.

        Args:
            key: Cache key the fetch was issued for
            outcome: Provider result
            generation: Generation the fetch was issued under; stale
                generations are ignored
        """
        notifier = None
        route_ids: Tuple[str, ...] = ()

        with self._lock:
            if self._closed or (generation is not None and generation != self._generation):
                logger.debug(f"Ignoring stale route geometry completion for {key}")
                return

            entry = self._entries.get(key)
            if entry is None or entry.state is not CacheState.PENDING:
                logger.debug(f"Ignoring completion for {key} in state {entry.state if entry else None}")
                return

            route_ids = tuple(sorted(entry.route_ids))
            if outcome.succeeded:
                entry.state = CacheState.RESOLVED
                entry.geometry = outcome.geometry
                self._counters['resolved'] += 1
                notifier = self._notifier
            else:
                entry.state = CacheState.FAILED
                entry.error = str(outcome.error) if outcome.error else "fewer than two points"
                self._counters['failed'] += 1

        if outcome.succeeded:
            logger.info(f"Resolved route geometry for {', '.join(route_ids)} ({len(outcome.geometry)} points)")
        else:
            logger.warning(f"Route geometry lookup failed for {', '.join(route_ids)}, keeping straight line: {outcome.error or 'fewer than two points'}")

        if notifier is not None:
            try:
                notifier(key, route_ids)
            except Exception:
                logger.exception(f"Redraw notifier failed for {key}")

    def entry(self, segment: RouteSegment) -> Optional[CacheEntry]:
        """Snapshot of the entry for a segment, or None."""
        with self._lock:
            entry = self._entries.get(self.make_key(segment))
            if entry is None:
                return None
            return dataclasses.replace(entry, route_ids=set(entry.route_ids))

    def state_for(self, segment: RouteSegment) -> Optional[CacheState]:
        entry = self.entry(segment)
        return entry.state if entry else None

    def stats(self) -> Dict[str, Any]:
        """Lookup counters and entry counts by state."""
        with self._lock:
            states = Counter(entry.state for entry in self._entries.values())
            return {
                'lookups': self._counters['lookups'],
                'hits': self._counters['hits'],
                'misses': self._counters['misses'],
                'provider_calls': self._counters['provider_calls'],
                'resolved': states[CacheState.RESOLVED],
                'failed': states[CacheState.FAILED],
                'pending': states[CacheState.PENDING],
                'entries': len(self._entries),
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def close(self) -> None:
        """
        Retire the cache. Outstanding fetches are not cancelled mid-call; their
        completions are dropped by the generation check.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._generation += 1

        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)
        logger.debug("Route geometry cache closed")
