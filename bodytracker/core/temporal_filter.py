"""
Temporal smoothing of fused output.

Each signal has its own strategy:
- Joints: exponential moving average against the previous fused pose
- Face: confidence-based preference between current and previous face
- Hands: confidence-weighted blending with the same-handed previous hand
- Posture: majority vote over a short window of classifications

All methods are pure: they read a HistorySnapshot and return new values.
"""

from typing import Optional, Sequence, Tuple

from bodytracker.config.settings import SmoothingConfig
from bodytracker.core.history import HistorySnapshot
from bodytracker.core.types import (
    DetectedFace,
    DetectedHand,
    FusedPose,
    HandJoint,
    Joint,
    Point,
    Posture,
    PostureAnalysis,
)
from bodytracker.utils.math_utils import lerp


def exponential_smoothing(alpha: float, x: float, x_prev: float) -> float:
    """Apply exponential smoothing."""
    return alpha * x + (1 - alpha) * x_prev


class TemporalSmoother:
    """
    Smooths joints, faces, hands and postures against history.

    Example:
        >>> smoother = TemporalSmoother()
        >>> joints = smoother.smooth_joints(extraction.joints, history.last_pose)
    """

    def __init__(self, config: Optional[SmoothingConfig] = None):
        self.config = config or SmoothingConfig()

    def smooth_joints(
        self,
        joints: Sequence[Joint],
        previous_pose: Optional[FusedPose],
    ) -> Tuple[Joint, ...]:
        """EMA each joint toward its counterpart in the previous fused pose."""
        if previous_pose is None:
            return tuple(joints)

        alpha = self.config.joint_alpha
        previous = previous_pose.joint_map()
        smoothed = []

        for joint in joints:
            last = previous.get(joint.name)
            if last is None:
                smoothed.append(joint)
                continue

            smoothed.append(Joint(
                joint.name,
                Point(
                    exponential_smoothing(alpha, joint.point.x, last.point.x),
                    exponential_smoothing(alpha, joint.point.y, last.point.y),
                ),
                exponential_smoothing(alpha, joint.confidence, last.confidence),
            ))

        return tuple(smoothed)

    def smooth_face(
        self,
        face: Optional[DetectedFace],
        history: HistorySnapshot,
    ) -> Optional[DetectedFace]:
        """Prefer a confident face, otherwise the more confident of current and previous."""
        if face is None:
            return history.most_recent_face()

        if face.confidence > self.config.face_confident:
            return face

        last = history.last_face_entry
        if last is not None and last.confidence > face.confidence:
            return last

        return face

    def smooth_hands(
        self,
        hands: Sequence[DetectedHand],
        history: HistorySnapshot,
    ) -> Tuple[DetectedHand, ...]:
        """Blend uncertain hands with the same-handed hand of the previous entry."""
        cfg = self.config
        hands = tuple(hands)

        if all(hand.confidence > cfg.hand_confident for hand in hands):
            return hands

        last_hands = history.last_hands
        if not last_hands:
            return hands

        blended = []
        for hand in hands:
            match = next((h for h in last_hands if h.chirality is hand.chirality), None)
            if match is None:
                blended.append(hand)
                continue

            joints = []
            for joint in hand.joints:
                last = match.joint(joint.name)
                if last is None:
                    joints.append(joint)
                    continue

                # Low current confidence defers more to history
                weight = joint.confidence
                joints.append(HandJoint(
                    joint.name,
                    Point(
                        lerp(last.point.x, joint.point.x, weight),
                        lerp(last.point.y, joint.point.y, weight),
                    ),
                    max(joint.confidence, last.confidence * cfg.hand_history_decay),
                ))

            blended.append(DetectedHand(
                tuple(joints),
                hand.chirality,
                max(hand.confidence, match.confidence * cfg.hand_history_decay),
            ))

        return tuple(blended)

    def smooth_posture(
        self,
        current: PostureAnalysis,
        history: HistorySnapshot,
    ) -> PostureAnalysis:
        """
        Majority vote over the posture window including ``current``.

        The winner's confidence is the mean over the entries sharing its
        verdict, while the reasoning stays that of ``current``.
        """
        size = self.config.posture_history_size
        window = (tuple(history.postures) + (current,))[-size:]

        if len(window) < 2:
            return current

        standing = [p for p in window if p.posture is Posture.STANDING]
        sitting = [p for p in window if p.posture is Posture.SITTING]

        if len(standing) > len(sitting):
            winners = standing
        elif len(sitting) > len(standing):
            winners = sitting
        else:
            return current

        confidence = sum(p.confidence for p in winners) / len(winners)
        return PostureAnalysis(winners[0].posture, confidence, current.reasoning)
