"""
Core data types for the pose fusion pipeline.

All points are normalized to [0, 1] with a top-left origin. Every value here
is immutable: each frame produces new instances instead of mutating old ones.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, NamedTuple, Optional, Tuple


class JointName(Enum):
    """Body joints tracked by the extractor."""
    NOSE = "nose"
    LEFT_EYE = "left_eye"
    RIGHT_EYE = "right_eye"
    LEFT_EAR = "left_ear"
    RIGHT_EAR = "right_ear"
    NECK = "neck"
    LEFT_SHOULDER = "left_shoulder"
    RIGHT_SHOULDER = "right_shoulder"
    LEFT_ELBOW = "left_elbow"
    RIGHT_ELBOW = "right_elbow"
    LEFT_WRIST = "left_wrist"
    RIGHT_WRIST = "right_wrist"
    LEFT_HIP = "left_hip"
    RIGHT_HIP = "right_hip"
    LEFT_KNEE = "left_knee"
    RIGHT_KNEE = "right_knee"
    LEFT_ANKLE = "left_ankle"
    RIGHT_ANKLE = "right_ankle"
    ROOT = "root"


class JointCategory(Enum):
    """Threshold category of a body joint."""
    CRITICAL = "critical"
    STANDARD = "standard"


CRITICAL_JOINTS = frozenset({
    JointName.NOSE,
    JointName.LEFT_EYE, JointName.RIGHT_EYE,
    JointName.LEFT_EAR, JointName.RIGHT_EAR,
    JointName.LEFT_WRIST, JointName.RIGHT_WRIST,
    JointName.NECK,
})

LOWER_BODY_JOINTS = frozenset({
    JointName.LEFT_HIP, JointName.RIGHT_HIP,
    JointName.LEFT_KNEE, JointName.RIGHT_KNEE,
    JointName.LEFT_ANKLE, JointName.RIGHT_ANKLE,
    JointName.ROOT,
})

JOINT_CATEGORY: Dict[JointName, JointCategory] = {
    name: JointCategory.CRITICAL if name in CRITICAL_JOINTS else JointCategory.STANDARD
    for name in JointName
}


class HandJointName(Enum):
    """Hand joints: the wrist plus four joints per finger."""
    WRIST = "wrist"
    THUMB_CMC = "thumb_cmc"
    THUMB_MCP = "thumb_mcp"
    THUMB_IP = "thumb_ip"
    THUMB_TIP = "thumb_tip"
    INDEX_MCP = "index_mcp"
    INDEX_PIP = "index_pip"
    INDEX_DIP = "index_dip"
    INDEX_TIP = "index_tip"
    MIDDLE_MCP = "middle_mcp"
    MIDDLE_PIP = "middle_pip"
    MIDDLE_DIP = "middle_dip"
    MIDDLE_TIP = "middle_tip"
    RING_MCP = "ring_mcp"
    RING_PIP = "ring_pip"
    RING_DIP = "ring_dip"
    RING_TIP = "ring_tip"
    LITTLE_MCP = "little_mcp"
    LITTLE_PIP = "little_pip"
    LITTLE_DIP = "little_dip"
    LITTLE_TIP = "little_tip"


# Joints averaged to locate the palm
PALM_JOINTS = (
    HandJointName.WRIST,
    HandJointName.THUMB_CMC,
    HandJointName.INDEX_MCP,
    HandJointName.MIDDLE_MCP,
    HandJointName.RING_MCP,
    HandJointName.LITTLE_MCP,
)


class Chirality(Enum):
    """Handedness of a detected hand."""
    LEFT = "left"
    RIGHT = "right"


class FaceRegion(Enum):
    """Named landmark regions of a face."""
    LEFT_EYE = "left_eye"
    RIGHT_EYE = "right_eye"
    FACE_CONTOUR = "face_contour"
    NOSE = "nose"
    NOSE_CREST = "nose_crest"
    OUTER_LIPS = "outer_lips"
    INNER_LIPS = "inner_lips"
    LEFT_EYEBROW = "left_eyebrow"
    RIGHT_EYEBROW = "right_eyebrow"


class Posture(Enum):
    """Posture verdicts."""
    STANDING = "Standing"
    SITTING = "Sitting"
    UNKNOWN = "Unknown"


class DetectionMode(Enum):
    """How much of the body is trackable in a frame."""
    FULL_BODY = "full_body"
    UPPER_BODY = "upper_body"
    FACE_AND_HANDS = "face_and_hands"

    @property
    def label(self) -> str:
        return _MODE_LABELS[self]


_MODE_LABELS = {
    DetectionMode.FULL_BODY: "Full Body",
    DetectionMode.UPPER_BODY: "Upper Body",
    DetectionMode.FACE_AND_HANDS: "Face & Hands",
}


class Point(NamedTuple):
    """A normalized 2D point."""
    x: float
    y: float


class Joint(NamedTuple):
    """A single body joint."""
    name: JointName
    point: Point
    confidence: float


class HandJoint(NamedTuple):
    """A single hand joint."""
    name: HandJointName
    point: Point
    confidence: float


class FaceLandmark(NamedTuple):
    """A face landmark, positioned relative to the face bounding box."""
    region: FaceRegion
    index: int
    point: Point
    confidence: float


class BoundingBox(NamedTuple):
    """Normalized image-space box with a top-left origin."""
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class DetectedFace:
    """A face with its landmarks and smile score."""

    landmarks: Tuple[FaceLandmark, ...]
    bounding_box: BoundingBox
    confidence: float
    smile_score: float = 0.0

    def region(self, region: FaceRegion) -> Tuple[Point, ...]:
        """Points of one region in index order."""
        points = sorted(
            (lm for lm in self.landmarks if lm.region is region),
            key=lambda lm: lm.index,
        )
        return tuple(lm.point for lm in points)

    def to_image(self, point: Point) -> Point:
        """Map a face-relative point into image space."""
        box = self.bounding_box
        return Point(box.x + point.x * box.width, box.y + point.y * box.height)


@dataclass(frozen=True)
class DetectedHand:
    """A detected hand (at most two per frame)."""

    joints: Tuple[HandJoint, ...]
    chirality: Chirality
    confidence: float

    def joint(self, name: HandJointName) -> Optional[HandJoint]:
        for joint in self.joints:
            if joint.name is name:
                return joint
        return None

    def palm_center(self) -> Optional[Point]:
        """Average of the wrist and knuckle joints, or None if none survived."""
        points = [j.point for j in self.joints if j.name in PALM_JOINTS]
        if not points:
            return None
        return Point(
            sum(p.x for p in points) / len(points),
            sum(p.y for p in points) / len(points),
        )


@dataclass(frozen=True)
class PostureAnalysis:
    """Result of posture classification."""

    posture: Posture
    confidence: float
    reasoning: Tuple[str, ...] = ()

    @property
    def summary(self) -> str:
        return "; ".join(self.reasoning)


@dataclass(frozen=True)
class FusedPose:
    """
    The smoothed, classified snapshot published for one frame.

    Consumers must treat it as read-only; the orchestrator replaces the whole
    value on every publication.
    """

    joints: Tuple[Joint, ...] = ()
    timestamp: float = 0.0
    segmentation_mask: Optional[Any] = None
    posture: Optional[PostureAnalysis] = None
    face: Optional[DetectedFace] = None
    hands: Tuple[DetectedHand, ...] = ()
    detection_mode: DetectionMode = DetectionMode.FACE_AND_HANDS

    def joint(self, name: JointName) -> Optional[Joint]:
        for joint in self.joints:
            if joint.name is name:
                return joint
        return None

    def joint_map(self) -> Dict[JointName, Joint]:
        return index_joints(self.joints)

    @property
    def has_body(self) -> bool:
        return len(self.joints) > 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary. The mask is only flagged."""
        result: Dict[str, Any] = {
            "timestamp": float(self.timestamp),
            "detection_mode": self.detection_mode.value,
            "has_segmentation_mask": self.segmentation_mask is not None,
            "joints": [_joint_dict(j) for j in self.joints],
            "hands": [
                {
                    "chirality": hand.chirality.value,
                    "confidence": float(hand.confidence),
                    "joints": [_joint_dict(j) for j in hand.joints],
                }
                for hand in self.hands
            ],
            "face": None,
            "posture": None,
        }

        if self.face is not None:
            result["face"] = {
                "confidence": float(self.face.confidence),
                "smile_score": float(self.face.smile_score),
                "bounding_box": list(self.face.bounding_box),
                "num_landmarks": len(self.face.landmarks),
            }

        if self.posture is not None:
            result["posture"] = {
                "posture": self.posture.posture.value,
                "confidence": float(self.posture.confidence),
                "reasoning": list(self.posture.reasoning),
            }

        return result


def _joint_dict(joint) -> Dict[str, Any]:
    return {
        "name": joint.name.value,
        "x": float(joint.point.x),
        "y": float(joint.point.y),
        "confidence": float(joint.confidence),
    }


def index_joints(joints: Iterable[Joint]) -> Dict[JointName, Joint]:
    """Map joints by name; later duplicates win."""
    return {joint.name: joint for joint in joints}
