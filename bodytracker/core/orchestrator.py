"""
Frame orchestration.

Throttles incoming frames, keeps at most one fusion pass in flight, runs the
pass on a dedicated worker thread and publishes the result to a single
current-pose slot. The orchestrator is the only writer of the history
windows.
"""

import logging
import time
from dataclasses import dataclass
from queue import Queue
from threading import Event, Lock, Thread
from typing import Any, Callable, List, Optional

from bodytracker.config.settings import TrackerConfig
from bodytracker.core.estimator import EstimatorFailure, KeypointEstimator, RawObservation
from bodytracker.core.fusion import FusionResult, PoseFuser
from bodytracker.core.history import HistoryBuffers
from bodytracker.core.types import FusedPose

logger = logging.getLogger(__name__)

PoseListener = Callable[[FusedPose], None]

_STOP = object()


class PoseSlot:
    """
    Single-writer, multi-reader cell holding the current fused pose.

    Readers always see a complete FusedPose (or None); the value is only ever
    replaced as a whole.
    """

    def __init__(self):
        self._lock = Lock()
        self._pose: Optional[FusedPose] = None
        self._version = 0

    def get(self) -> Optional[FusedPose]:
        with self._lock:
            return self._pose

    @property
    def version(self) -> int:
        """Number of publications so far."""
        with self._lock:
            return self._version

    def publish(self, pose: Optional[FusedPose]) -> None:
        with self._lock:
            self._pose = pose
            self._version += 1


@dataclass
class OrchestratorStats:
    """Frame counters."""
    accepted: int = 0
    throttled: int = 0
    dropped_busy: int = 0
    failed: int = 0
    published: int = 0
    withheld: int = 0


class FrameOrchestrator:
    """
    Accepts frames and drives the fusion pipeline.

    Example:
        >>> with FrameOrchestrator(estimator) as tracker:
        ...     tracker.add_listener(lambda pose: print(pose.detection_mode.label))
        ...     tracker.submit(frame)
        ...     pose = tracker.current_pose
    """

    def __init__(
        self,
        estimator: Optional[KeypointEstimator] = None,
        config: Optional[TrackerConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the orchestrator.

        Args:
            estimator: Raw keypoint estimator; optional if every submission
                carries a precomputed RawObservation
            config: Tracker configuration (or use defaults)
            clock: Monotonic clock used for arrival times and timestamps
        """
        self.config = config or TrackerConfig()
        self.estimator = estimator
        self._clock = clock

        self._fuser = PoseFuser(self.config)
        self._history = HistoryBuffers(self.config.smoothing)
        self._slot = PoseSlot()
        self.stats = OrchestratorStats()

        # Acceptance state, guarded by _accept_lock
        self._accept_lock = Lock()
        self._in_flight = False
        self._last_accepted: Optional[float] = None
        self._idle = Event()
        self._idle.set()

        self._listeners: List[PoseListener] = []
        self._listeners_lock = Lock()

        self._queue: Queue = Queue(maxsize=1)
        self._worker: Optional[Thread] = None
        self._closed = False

    # Consumer surface

    @property
    def current_pose(self) -> Optional[FusedPose]:
        """The most recently published fused pose."""
        return self._slot.get()

    @property
    def is_processing(self) -> bool:
        """True while a fusion pass is in flight."""
        with self._accept_lock:
            return self._in_flight

    def add_listener(self, listener: PoseListener) -> None:
        """Call ``listener`` on the worker thread after each publication."""
        with self._listeners_lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: PoseListener) -> None:
        with self._listeners_lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    # Frame intake

    def submit(
        self,
        frame: Any,
        raw: Optional[RawObservation] = None,
        arrival: Optional[float] = None,
    ) -> bool:
        """
        Offer a frame for processing.

        Args:
            frame: Image frame handed to the estimator
            raw: Precomputed estimator output; skips the estimator call
            arrival: Arrival time in seconds (defaults to the clock)

        Returns:
            True if the frame was dispatched to the worker, False if it
            was throttled or dropped because a pass is in flight
        """
        if self._closed:
            raise RuntimeError("FrameOrchestrator is closed")
        if raw is None and self.estimator is None:
            raise ValueError("No estimator configured and no raw observation given")

        arrival = self._clock() if arrival is None else arrival

        if not self._try_accept(arrival):
            return False

        self._ensure_worker()
        self._queue.put((frame, raw, arrival))
        return True

    def process(self, raw: RawObservation, timestamp: Optional[float] = None) -> Optional[FusedPose]:
        """
        Run one fusion pass synchronously on the calling thread.

        No throttling applies, but the pass still honors the single-flight
        rule: it raises RuntimeError if another pass is in flight.
        """
        timestamp = self._clock() if timestamp is None else timestamp

        with self._accept_lock:
            if self._in_flight:
                raise RuntimeError("A fusion pass is already in flight")
            self._in_flight = True
            self._idle.clear()

        try:
            self._fuse_and_publish(raw, timestamp)
        finally:
            self._release()

        return self.current_pose

    def wait_until_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until no pass is in flight. Returns False on timeout."""
        return self._idle.wait(timeout)

    def reset(self) -> None:
        """Forget history and the published pose."""
        self.wait_until_idle()
        with self._accept_lock:
            self._history.clear()
            self._last_accepted = None
        self._slot.publish(None)

    def close(self) -> None:
        """Stop the worker thread and release the estimator."""
        if self._closed:
            return
        self._closed = True

        if self._worker is not None:
            self._queue.put(_STOP)
            self._worker.join(timeout=2.0)
            self._worker = None

        if self.estimator is not None:
            self.estimator.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    # Internals

    def _try_accept(self, arrival: float) -> bool:
        """Throttle and single-flight checks as one critical section."""
        min_interval = self.config.orchestrator.min_interval

        with self._accept_lock:
            if self._last_accepted is not None and arrival - self._last_accepted < min_interval:
                self.stats.throttled += 1
                return False

            if self._in_flight:
                self.stats.dropped_busy += 1
                return False

            self._last_accepted = arrival
            self._in_flight = True
            self._idle.clear()
            self.stats.accepted += 1
            return True

    def _count(self, counter: str) -> None:
        with self._accept_lock:
            setattr(self.stats, counter, getattr(self.stats, counter) + 1)

    def _release(self) -> None:
        with self._accept_lock:
            self._in_flight = False
            self._idle.set()

    def _ensure_worker(self) -> None:
        if self._worker is None:
            self._worker = Thread(target=self._run, name="pose-fusion", daemon=True)
            self._worker.start()

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            if item is _STOP:
                break

            frame, raw, arrival = item
            try:
                if raw is None:
                    raw = self._estimate(frame)
                self._fuse_and_publish(raw, arrival)
            except EstimatorFailure as exc:
                self._count("failed")
                logger.warning("Estimator failed on frame at %.3f: %s", arrival, exc)
            except Exception:
                self._count("failed")
                logger.exception("Fusion pass failed for frame at %.3f", arrival)
            finally:
                self._release()

    def _estimate(self, frame: Any) -> RawObservation:
        try:
            return self.estimator.estimate(frame)
        except EstimatorFailure:
            raise
        except Exception as exc:
            raise EstimatorFailure(str(exc)) from exc

    def _fuse_and_publish(self, raw: RawObservation, timestamp: float) -> None:
        result: FusionResult = self._fuser.fuse(raw, self._history.snapshot(), timestamp)

        if result.pose is None:
            self._count("withheld")
            return

        self._history.apply(result.update)
        self._slot.publish(result.pose)
        self._count("published")

        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(result.pose)
            except Exception:
                # Already published; listener errors do not fail the frame
                logger.exception("Pose listener %r raised", listener)
