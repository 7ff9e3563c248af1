"""
Bounded history windows of fused output.

The orchestrator owns one HistoryBuffers instance and is its only writer.
Every other component receives an immutable HistorySnapshot.
"""

from collections import deque
from dataclasses import dataclass
from typing import Optional, Tuple

from bodytracker.config.settings import SmoothingConfig
from bodytracker.core.types import DetectedFace, DetectedHand, FusedPose, PostureAnalysis


@dataclass(frozen=True)
class HistorySnapshot:
    """Read-only view of the history windows, oldest entry first."""

    poses: Tuple[FusedPose, ...] = ()
    faces: Tuple[Optional[DetectedFace], ...] = ()
    hands: Tuple[Tuple[DetectedHand, ...], ...] = ()
    postures: Tuple[PostureAnalysis, ...] = ()

    @property
    def last_pose(self) -> Optional[FusedPose]:
        return self.poses[-1] if self.poses else None

    @property
    def last_hands(self) -> Tuple[DetectedHand, ...]:
        return self.hands[-1] if self.hands else ()

    @property
    def last_face_entry(self) -> Optional[DetectedFace]:
        """The immediately preceding face entry (None if absent or no history)."""
        return self.faces[-1] if self.faces else None

    def most_recent_face(self) -> Optional[DetectedFace]:
        for face in reversed(self.faces):
            if face is not None:
                return face
        return None


@dataclass(frozen=True)
class HistoryUpdate:
    """What one fusion pass wants appended to the windows."""

    pose: Optional[FusedPose] = None
    face: Optional[DetectedFace] = None
    record_face: bool = False
    hands: Optional[Tuple[DetectedHand, ...]] = None
    posture: Optional[PostureAnalysis] = None


class HistoryBuffers:
    """Four independent FIFO windows: poses, faces, hands, postures."""

    def __init__(self, config: Optional[SmoothingConfig] = None):
        config = config or SmoothingConfig()
        self._poses: deque = deque(maxlen=config.pose_history_size)
        self._faces: deque = deque(maxlen=config.face_history_size)
        self._hands: deque = deque(maxlen=config.hand_history_size)
        self._postures: deque = deque(maxlen=config.posture_history_size)

    def snapshot(self) -> HistorySnapshot:
        return HistorySnapshot(
            poses=tuple(self._poses),
            faces=tuple(self._faces),
            hands=tuple(self._hands),
            postures=tuple(self._postures),
        )

    def apply(self, update: HistoryUpdate) -> None:
        """Append the entries of a fusion pass, trimming to capacity."""
        if update.pose is not None:
            self._poses.append(update.pose)
        if update.record_face:
            self._faces.append(update.face)
        if update.hands is not None:
            self._hands.append(tuple(update.hands))
        if update.posture is not None:
            self._postures.append(update.posture)

    def clear(self) -> None:
        self._poses.clear()
        self._faces.clear()
        self._hands.clear()
        self._postures.clear()

    def __len__(self) -> int:
        return len(self._poses)
