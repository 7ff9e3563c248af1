"""
Posture classification (sitting vs standing) from body joints.

Five independent geometric indicators each vote for a posture with a fixed
weight. Indicators whose joints are missing are skipped, and the votes are
normalized by the weight of the indicators that were actually computed.
"""

import logging
from dataclasses import dataclass
from typing import List, Mapping, Optional, Sequence, Tuple

from bodytracker.config.settings import PostureConfig
from bodytracker.core.types import Joint, JointName, Posture, PostureAnalysis, index_joints
from bodytracker.utils.math_utils import angle_from_vertical, first_present, joint_angle

logger = logging.getLogger(__name__)

INSUFFICIENT_DATA = "Insufficient joint data"

# Left side first, then right
LEG_SIDES = (
    (JointName.LEFT_HIP, JointName.LEFT_KNEE, JointName.LEFT_ANKLE),
    (JointName.RIGHT_HIP, JointName.RIGHT_KNEE, JointName.RIGHT_ANKLE),
)
TORSO_SIDES = (
    (JointName.LEFT_SHOULDER, JointName.LEFT_HIP),
    (JointName.RIGHT_SHOULDER, JointName.RIGHT_HIP),
)


@dataclass(frozen=True)
class Indicator:
    """One weighted vote."""
    posture: Posture
    weight: float
    reason: str


class PostureClassifier:
    """
    Classifies posture from a single frame's joints.

    Example:
        >>> classifier = PostureClassifier()
        >>> analysis = classifier.classify(pose.joints)
        >>> analysis.posture, analysis.confidence
    """

    def __init__(self, config: Optional[PostureConfig] = None):
        self.config = config or PostureConfig()

    def classify(self, joints: Sequence[Joint]) -> PostureAnalysis:
        """Classify posture from one frame's joints."""
        indicators = self.indicators(index_joints(joints))

        if not indicators:
            return PostureAnalysis(Posture.UNKNOWN, 0.0, (INSUFFICIENT_DATA,))

        return self.vote(indicators)

    def vote(self, indicators: Sequence[Indicator]) -> PostureAnalysis:
        """Combine indicators by weighted voting."""
        cfg = self.config
        sitting, standing = self.normalized_scores(indicators)
        reasoning = tuple(ind.reason for ind in indicators)

        if sitting > standing and sitting > cfg.decision_threshold:
            return PostureAnalysis(Posture.SITTING, min(sitting, cfg.max_confidence), reasoning)
        if standing > sitting and standing > cfg.decision_threshold:
            return PostureAnalysis(Posture.STANDING, min(standing, cfg.max_confidence), reasoning)
        return PostureAnalysis(Posture.UNKNOWN, max(sitting, standing), reasoning)

    @staticmethod
    def normalized_scores(indicators: Sequence[Indicator]) -> Tuple[float, float]:
        """Return (sitting, standing) scores normalized by total weight."""
        total = sum(ind.weight for ind in indicators)
        if total <= 0:
            return 0.0, 0.0
        sitting = sum(ind.weight for ind in indicators if ind.posture is Posture.SITTING)
        standing = sum(ind.weight for ind in indicators if ind.posture is Posture.STANDING)
        return sitting / total, standing / total

    def indicators(self, joints: Mapping[JointName, Joint]) -> List[Indicator]:
        """Compute every indicator whose joints are available, in fixed order."""
        cfg = self.config
        result: List[Indicator] = []

        knee = self.knee_angle(joints)
        if knee is not None:
            if knee < cfg.knee_angle_threshold:
                result.append(Indicator(Posture.SITTING, cfg.knee_sitting_weight,
                                        f"Knee angle: {int(knee)}° (bent)"))
            else:
                result.append(Indicator(Posture.STANDING, cfg.knee_standing_weight,
                                        f"Knee angle: {int(knee)}° (straight)"))

        hip_knee = self.hip_knee_distance(joints)
        if hip_knee is not None:
            if hip_knee < cfg.hip_knee_threshold:
                result.append(Indicator(Posture.SITTING, cfg.hip_knee_sitting_weight,
                                        f"Hip-knee distance: {hip_knee:.2f}"))
            else:
                result.append(Indicator(Posture.STANDING, cfg.hip_knee_standing_weight,
                                        f"Hip-knee distance: {hip_knee:.2f}"))

        torso = self.torso_angle(joints)
        if torso is not None:
            if abs(torso) < cfg.torso_angle_threshold:
                result.append(Indicator(Posture.STANDING, cfg.torso_standing_weight,
                                        f"Torso angle: {int(torso)}°"))
            else:
                result.append(Indicator(Posture.SITTING, cfg.torso_sitting_weight,
                                        f"Torso angle: {int(torso)}°"))

        ratio = self.body_height_ratio(joints)
        if ratio is not None:
            if ratio < cfg.height_ratio_threshold:
                result.append(Indicator(Posture.SITTING, cfg.height_sitting_weight,
                                        f"Body height ratio: {ratio:.2f}"))
            else:
                result.append(Indicator(Posture.STANDING, cfg.height_standing_weight,
                                        f"Body height ratio: {ratio:.2f}"))

        visibility = self.ankle_visibility(joints)
        if visibility is not None:
            if visibility < cfg.ankle_visibility_threshold:
                result.append(Indicator(Posture.SITTING, cfg.ankle_sitting_weight,
                                        "Ankles not visible"))
            else:
                result.append(Indicator(Posture.STANDING, cfg.ankle_standing_weight,
                                        "Ankles visible"))

        logger.debug("Posture indicators: %s", [ind.reason for ind in result])
        return result

    # Indicator measurements

    def _confident(self, joints: Mapping[JointName, Joint], name: JointName) -> Optional[Joint]:
        joint = joints.get(name)
        if joint is not None and joint.confidence > self.config.joint_confidence:
            return joint
        return None

    def _side(
        self,
        joints: Mapping[JointName, Joint],
        names: Tuple[JointName, ...],
    ) -> Optional[Tuple[Joint, ...]]:
        found = tuple(self._confident(joints, name) for name in names)
        if any(joint is None for joint in found):
            return None
        return found

    def knee_angle(self, joints: Mapping[JointName, Joint]) -> Optional[float]:
        """Angle at the knee between hip and ankle, in degrees."""
        leg = first_present(self._side(joints, side) for side in LEG_SIDES)
        if leg is None:
            return None
        hip, knee, ankle = leg
        return joint_angle(hip.point, knee.point, ankle.point)

    def hip_knee_distance(self, joints: Mapping[JointName, Joint]) -> Optional[float]:
        """Vertical hip to knee distance."""
        thigh = first_present(self._side(joints, side[:2]) for side in LEG_SIDES)
        if thigh is None:
            return None
        hip, knee = thigh
        return abs(hip.point.y - knee.point.y)

    def torso_angle(self, joints: Mapping[JointName, Joint]) -> Optional[float]:
        """Angle of the shoulder to hip vector from vertical, in degrees."""
        torso = first_present(self._side(joints, side) for side in TORSO_SIDES)
        if torso is None:
            return None
        shoulder, hip = torso
        return angle_from_vertical(shoulder.point, hip.point)

    def body_height_ratio(self, joints: Mapping[JointName, Joint]) -> Optional[float]:
        """
        Head-to-hip over head-to-ankle vertical extent.

        Each landmark is the first joint present (nose before neck, left
        before right); a weak pick skips the indicator instead of falling
        through to the other side.
        """
        picks = [
            first_present(joints.get(n) for n in names)
            for names in (
                (JointName.NOSE, JointName.NECK),
                (JointName.LEFT_HIP, JointName.RIGHT_HIP),
                (JointName.LEFT_ANKLE, JointName.RIGHT_ANKLE),
            )
        ]
        if any(j is None or j.confidence <= self.config.joint_confidence for j in picks):
            return None
        head, hip, ankle = picks

        head_to_hip = abs(head.point.y - hip.point.y)
        hip_to_ankle = abs(hip.point.y - ankle.point.y)
        if hip_to_ankle <= 0:
            return None
        return head_to_hip / (head_to_hip + hip_to_ankle)

    def ankle_visibility(self, joints: Mapping[JointName, Joint]) -> Optional[float]:
        """Mean confidence of both ankles; a missing ankle counts as 0."""
        left = joints.get(JointName.LEFT_ANKLE)
        right = joints.get(JointName.RIGHT_ANKLE)
        # With no ankle at all this indicator is skipped rather than voting
        # sitting, so a legless body can still report insufficient data
        if left is None and right is None:
            return None
        total = (left.confidence if left else 0.0) + (right.confidence if right else 0.0)
        return total / 2.0


def classify_posture(joints: Sequence[Joint], config: Optional[PostureConfig] = None) -> PostureAnalysis:
    """Convenience wrapper around PostureClassifier.classify."""
    return PostureClassifier(config).classify(joints)
