"""
Detection mode classification.

Decides which tracking regime the current frame supports. This is a pure
function of the frame's joints, face and hands; it never looks at history.
"""

from typing import Optional, Sequence

from bodytracker.config.settings import DetectionModeConfig
from bodytracker.core.types import DetectedFace, DetectedHand, DetectionMode, Joint, JointName

LOWER_BODY_MARKERS = frozenset({
    JointName.LEFT_HIP, JointName.RIGHT_HIP,
    JointName.LEFT_KNEE, JointName.RIGHT_KNEE,
})


def classify_detection_mode(
    joints: Sequence[Joint],
    face: Optional[DetectedFace],
    hands: Sequence[DetectedHand],
    config: Optional[DetectionModeConfig] = None,
) -> DetectionMode:
    """
    Classify the detection mode for one frame.

    With nothing detected at all the result is FACE_AND_HANDS. That default
    carries no signal; consumers should not read meaning into it.
    """
    config = config or DetectionModeConfig()

    confident = [j for j in joints if j.confidence > config.joint_confidence]

    if len(confident) >= config.min_full_body_joints:
        has_lower_body = any(j.name in LOWER_BODY_MARKERS for j in confident)
        return DetectionMode.FULL_BODY if has_lower_body else DetectionMode.UPPER_BODY

    if face is not None or len(hands) > 0:
        return DetectionMode.FACE_AND_HANDS

    return DetectionMode.UPPER_BODY if confident else DetectionMode.FACE_AND_HANDS
