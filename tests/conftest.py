"""Shared builders for pose fusion tests."""

from typing import Dict, Iterable, Optional, Sequence, Tuple

import pytest

from bodytracker.config.settings import TrackerConfig
from bodytracker.core.estimator import RawBody, RawFace, RawHand, RawKeypoint, RawObservation
from bodytracker.core.history import HistorySnapshot
from bodytracker.core.types import (
    BoundingBox,
    Chirality,
    DetectedFace,
    DetectedHand,
    FaceRegion,
    FusedPose,
    HandJoint,
    HandJointName,
    Joint,
    JointName,
    Point,
)

# A neutral mouth: corners level with the center, narrow, closed
NEUTRAL_OUTER_LIPS = [(0.35, 0.5), (0.5, 0.48), (0.65, 0.5), (0.5, 0.52)]
NEUTRAL_INNER_LIPS = [(0.4, 0.5), (0.6, 0.5), (0.5, 0.51)]


def joint(name: JointName, x: float, y: float, confidence: float = 0.9) -> Joint:
    return Joint(name, Point(x, y), confidence)


def raw_body(points: Dict[JointName, Tuple[float, float, float]]) -> RawBody:
    return RawBody({name: RawKeypoint(x, y, c) for name, (x, y, c) in points.items()})


def raw_hand(
    chirality: Chirality = Chirality.RIGHT,
    confidence: float = 0.9,
    joint_confidence: float = 0.9,
    names: Iterable[HandJointName] = tuple(HandJointName),
) -> RawHand:
    keypoints = {
        name: RawKeypoint(0.5 + 0.01 * i, 0.5, joint_confidence)
        for i, name in enumerate(names)
    }
    return RawHand(keypoints, chirality, confidence)


def raw_face(
    confidence: float = 0.9,
    outer: Optional[Sequence[Tuple[float, float]]] = None,
    inner: Optional[Sequence[Tuple[float, float]]] = None,
    bounding_box: Tuple[float, float, float, float] = (0.3, 0.2, 0.4, 0.4),
) -> RawFace:
    regions = {
        FaceRegion.LEFT_EYE: [(0.3, 0.35), (0.35, 0.33)],
        FaceRegion.RIGHT_EYE: [(0.65, 0.35), (0.7, 0.33)],
        FaceRegion.OUTER_LIPS: list(outer if outer is not None else NEUTRAL_OUTER_LIPS),
    }
    if inner is not None:
        regions[FaceRegion.INNER_LIPS] = list(inner)
    return RawFace(regions, confidence, bounding_box)


def detected_face(confidence: float = 0.9, smile: float = 0.0) -> DetectedFace:
    return DetectedFace(
        landmarks=(),
        bounding_box=BoundingBox(0.3, 0.2, 0.4, 0.4),
        confidence=confidence,
        smile_score=smile,
    )


def detected_hand(
    chirality: Chirality,
    confidence: float,
    joints: Sequence[Tuple[HandJointName, float, float, float]],
) -> DetectedHand:
    return DetectedHand(
        tuple(HandJoint(name, Point(x, y), c) for name, x, y, c in joints),
        chirality,
        confidence,
    )


def standing_points(confidence: float = 0.9) -> Dict[JointName, Tuple[float, float, float]]:
    """An upright body, top-left origin."""
    return {
        JointName.NOSE: (0.5, 0.1, confidence),
        JointName.NECK: (0.5, 0.2, confidence),
        JointName.LEFT_SHOULDER: (0.45, 0.25, confidence),
        JointName.RIGHT_SHOULDER: (0.55, 0.25, confidence),
        JointName.LEFT_ELBOW: (0.42, 0.38, confidence),
        JointName.RIGHT_ELBOW: (0.58, 0.38, confidence),
        JointName.LEFT_WRIST: (0.41, 0.48, confidence),
        JointName.RIGHT_WRIST: (0.59, 0.48, confidence),
        JointName.LEFT_HIP: (0.45, 0.5, confidence),
        JointName.RIGHT_HIP: (0.55, 0.5, confidence),
        JointName.LEFT_KNEE: (0.45, 0.7, confidence),
        JointName.RIGHT_KNEE: (0.55, 0.7, confidence),
        JointName.LEFT_ANKLE: (0.45, 0.9, confidence),
        JointName.RIGHT_ANKLE: (0.55, 0.9, confidence),
    }


def standing_joints(confidence: float = 0.9) -> Tuple[Joint, ...]:
    return tuple(joint(name, x, y, c) for name, (x, y, c) in standing_points(confidence).items())


def pose_with(joints: Sequence[Joint] = (), **kwargs) -> FusedPose:
    return FusedPose(joints=tuple(joints), **kwargs)


@pytest.fixture
def config() -> TrackerConfig:
    return TrackerConfig()


@pytest.fixture
def empty_history() -> HistorySnapshot:
    return HistorySnapshot()


@pytest.fixture
def standing_observation() -> RawObservation:
    return RawObservation(body=raw_body(standing_points()))
