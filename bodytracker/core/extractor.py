"""
Keypoint extraction with confidence gating and history fallback.

Turns one frame's raw estimator candidates into Joint, DetectedFace and
DetectedHand values:
- Body joints are gated by a per-category threshold, fall back to the
  previous fused joint when too weak, and are blended with it when uncertain
- Hand joints use a single lower threshold without fallback
- Face landmarks are kept as reported, and the smile score is computed here
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

from bodytracker.config.settings import ExtractionConfig, SmileConfig
from bodytracker.core.estimator import RawBody, RawFace, RawHand, RawObservation
from bodytracker.core.history import HistorySnapshot
from bodytracker.core.smile import smile_score
from bodytracker.core.types import (
    BoundingBox,
    DetectedFace,
    DetectedHand,
    FaceLandmark,
    FaceRegion,
    FusedPose,
    HandJoint,
    HandJointName,
    Joint,
    JointCategory,
    JointName,
    JOINT_CATEGORY,
    LOWER_BODY_JOINTS,
    Point,
)
from bodytracker.utils.math_utils import CoordinateOrigin, lerp, normalize_box, normalize_point

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Extraction:
    """Gated per-modality output for one frame, before smoothing."""
    joints: Tuple[Joint, ...] = ()
    face: Optional[DetectedFace] = None
    hands: Tuple[DetectedHand, ...] = ()


class KeypointExtractor:
    """
    Converts raw candidates into gated, normalized keypoint records.

    The extractor keeps no state between frames; history arrives as a
    read-only snapshot.
    """

    def __init__(
        self,
        config: Optional[ExtractionConfig] = None,
        smile_config: Optional[SmileConfig] = None,
    ):
        self.config = config or ExtractionConfig()
        self.smile_config = smile_config or SmileConfig()
        self._thresholds: Dict[JointName, float] = {
            name: self._compute_threshold(name) for name in JointName
        }

    def _compute_threshold(self, name: JointName) -> float:
        cfg = self.config
        if JOINT_CATEGORY[name] is JointCategory.CRITICAL:
            threshold = cfg.critical_threshold
        else:
            threshold = cfg.standard_threshold

        # Seated bodies often hide their legs
        if name in LOWER_BODY_JOINTS:
            threshold = max(threshold - cfg.lower_body_reduction, cfg.lower_body_floor)
        return threshold

    def threshold_for(self, name: JointName) -> float:
        """Confidence a raw joint must exceed to count as observed."""
        return self._thresholds[name]

    def extract(self, observation: RawObservation, history: HistorySnapshot) -> Extraction:
        """Extract all modalities of one observation."""
        origin = observation.origin
        return Extraction(
            joints=self.extract_joints(observation.body, origin, history.last_pose),
            face=self.extract_face(observation.face, origin),
            hands=self.extract_hands(observation.hands, origin),
        )

    def extract_joints(
        self,
        body: Optional[RawBody],
        origin: CoordinateOrigin = CoordinateOrigin.TOP_LEFT,
        previous_pose: Optional[FusedPose] = None,
    ) -> Tuple[Joint, ...]:
        """
        Gate body joints against their thresholds.

        Args:
            body: Raw body candidate, or None if no body was detected
            origin: Coordinate origin of the raw points
            previous_pose: The most recent fused pose, used for fallback and blending

        Returns:
            Joints in JointName order; joints with neither a fresh
            observation nor a usable fallback are omitted
        """
        if body is None:
            return ()

        cfg = self.config
        previous = previous_pose.joint_map() if previous_pose is not None else {}
        joints = []

        for name in JointName:
            raw = body.keypoints.get(name)
            last = previous.get(name)

            if raw is None or raw.confidence <= self._thresholds[name]:
                # Keep the last known joint briefly, fading it out
                if last is not None and last.confidence > cfg.fallback_min_confidence:
                    joints.append(Joint(name, last.point, last.confidence * cfg.fallback_decay))
                continue

            x, y = normalize_point(raw.x, raw.y, origin)
            if raw.confidence < cfg.uncertain_confidence and last is not None:
                weight = raw.confidence
                x = lerp(last.point.x, x, weight)
                y = lerp(last.point.y, y, weight)

            joints.append(Joint(name, Point(x, y), float(raw.confidence)))

        return tuple(joints)

    def extract_face(
        self,
        face: Optional[RawFace],
        origin: CoordinateOrigin = CoordinateOrigin.TOP_LEFT,
    ) -> Optional[DetectedFace]:
        """Collect face landmarks by region and score the smile."""
        if face is None:
            return None

        landmarks = []
        normalized: Dict[FaceRegion, Sequence[Tuple[float, float]]] = {}

        for region in FaceRegion:
            points = face.regions.get(region)
            if not points:
                continue
            region_points = [normalize_point(px, py, origin) for px, py in points]
            normalized[region] = region_points
            for index, (px, py) in enumerate(region_points):
                landmarks.append(FaceLandmark(region, index, Point(px, py), float(face.confidence)))

        if not landmarks:
            return None

        score = smile_score(
            normalized.get(FaceRegion.OUTER_LIPS),
            normalized.get(FaceRegion.INNER_LIPS),
            self.smile_config,
        )

        return DetectedFace(
            landmarks=tuple(landmarks),
            bounding_box=BoundingBox(*normalize_box(*face.bounding_box, origin=origin)),
            confidence=float(face.confidence),
            smile_score=score,
        )

    def extract_hands(
        self,
        hands: Sequence[RawHand],
        origin: CoordinateOrigin = CoordinateOrigin.TOP_LEFT,
    ) -> Tuple[DetectedHand, ...]:
        """Gate hand joints; hands with no surviving joints are dropped."""
        cfg = self.config
        detected = []

        for hand in list(hands)[:cfg.max_hands]:
            joints = []
            for name in HandJointName:
                raw = hand.keypoints.get(name)
                if raw is None or raw.confidence <= cfg.hand_threshold:
                    continue
                x, y = normalize_point(raw.x, raw.y, origin)
                joints.append(HandJoint(name, Point(x, y), float(raw.confidence)))

            if joints:
                detected.append(DetectedHand(tuple(joints), hand.chirality, float(hand.confidence)))

        if len(hands) > cfg.max_hands:
            logger.debug("Ignoring %d extra hand candidates", len(hands) - cfg.max_hands)

        return tuple(detected)
