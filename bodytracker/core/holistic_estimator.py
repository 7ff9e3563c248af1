"""
Keypoint estimation using MediaPipe Holistic.

Adapts Holistic's 33 pose landmarks, 468-point face mesh and 21-point hand
landmarks into a RawObservation. Requires the ``mediapipe`` extra.
"""

from typing import Dict, List, Optional, Sequence, Tuple

import cv2
import numpy as np
from mediapipe.python.solutions import holistic as mp_holistic

from bodytracker.config.settings import EstimatorConfig
from bodytracker.core.estimator import (
    EstimatorFailure,
    KeypointEstimator,
    RawBody,
    RawFace,
    RawHand,
    RawKeypoint,
    RawObservation,
)
from bodytracker.core.types import Chirality, FaceRegion, HandJointName, JointName
from bodytracker.utils.math_utils import CoordinateOrigin

# MediaPipe pose landmark indices
POSE_INDICES: Dict[JointName, int] = {
    JointName.NOSE: 0,
    JointName.LEFT_EYE: 2,
    JointName.RIGHT_EYE: 5,
    JointName.LEFT_EAR: 7,
    JointName.RIGHT_EAR: 8,
    JointName.LEFT_SHOULDER: 11,
    JointName.RIGHT_SHOULDER: 12,
    JointName.LEFT_ELBOW: 13,
    JointName.RIGHT_ELBOW: 14,
    JointName.LEFT_WRIST: 15,
    JointName.RIGHT_WRIST: 16,
    JointName.LEFT_HIP: 23,
    JointName.RIGHT_HIP: 24,
    JointName.LEFT_KNEE: 25,
    JointName.RIGHT_KNEE: 26,
    JointName.LEFT_ANKLE: 27,
    JointName.RIGHT_ANKLE: 28,
}

# Joints MediaPipe does not report, synthesized as midpoints
MIDPOINT_JOINTS: Dict[JointName, Tuple[JointName, JointName]] = {
    JointName.NECK: (JointName.LEFT_SHOULDER, JointName.RIGHT_SHOULDER),
    JointName.ROOT: (JointName.LEFT_HIP, JointName.RIGHT_HIP),
}

# Hand landmark order matches HandJointName declaration order
HAND_INDICES: Dict[HandJointName, int] = {name: i for i, name in enumerate(HandJointName)}

# Face mesh contours
FACE_MESH_REGIONS: Dict[FaceRegion, Sequence[int]] = {
    FaceRegion.OUTER_LIPS: (61, 146, 91, 181, 84, 17, 314, 405, 321, 375,
                            291, 409, 270, 269, 267, 0, 37, 39, 40, 185),
    FaceRegion.INNER_LIPS: (78, 95, 88, 178, 87, 14, 317, 402, 318, 324,
                            308, 415, 310, 311, 312, 13, 82, 81, 80, 191),
    FaceRegion.LEFT_EYE: (263, 249, 390, 373, 374, 380, 381, 382,
                          362, 398, 384, 385, 386, 387, 388, 466),
    FaceRegion.RIGHT_EYE: (33, 7, 163, 144, 145, 153, 154, 155,
                           133, 173, 157, 158, 159, 160, 161, 246),
    FaceRegion.LEFT_EYEBROW: (276, 283, 282, 295, 285, 300, 293, 334, 296, 336),
    FaceRegion.RIGHT_EYEBROW: (46, 53, 52, 65, 55, 70, 63, 105, 66, 107),
    FaceRegion.NOSE: (98, 97, 2, 326, 327, 294, 278, 344, 440, 275, 4, 45, 220, 115, 48, 64),
    FaceRegion.NOSE_CREST: (168, 6, 197, 195, 5, 4),
    FaceRegion.FACE_CONTOUR: (10, 338, 297, 332, 284, 251, 389, 356, 454, 323, 361, 288,
                              397, 365, 379, 378, 400, 377, 152, 148, 176, 149, 150, 136,
                              172, 58, 132, 93, 234, 127, 162, 21, 54, 103, 67, 109),
}

# Holistic hands carry no score; detected hands are reported at this confidence
HAND_CONFIDENCE = 0.9


class HolisticEstimator(KeypointEstimator):
    """
    MediaPipe Holistic-based keypoint estimator.

    Attributes:
        config: Model complexity, detection/tracking confidence, segmentation
    """

    def __init__(self, config: Optional[EstimatorConfig] = None):
        self.config = config or EstimatorConfig()
        self._holistic: Optional[mp_holistic.Holistic] = None

    def initialize(self):
        """Initialize the MediaPipe Holistic model."""
        if self._holistic is not None:
            self.close()

        self._holistic = mp_holistic.Holistic(
            static_image_mode=False,
            model_complexity=self.config.model_complexity,
            smooth_landmarks=True,
            enable_segmentation=self.config.enable_segmentation,
            refine_face_landmarks=self.config.refine_face_landmarks,
            min_detection_confidence=self.config.min_detection_confidence,
            min_tracking_confidence=self.config.min_tracking_confidence,
        )

    def close(self):
        """Release resources."""
        if self._holistic is not None:
            self._holistic.close()
            self._holistic = None

    def estimate(self, frame: np.ndarray) -> RawObservation:
        """
        Run Holistic on a BGR frame.

        Raises:
            EstimatorFailure: If the frame is not a usable image
        """
        if frame is None or not isinstance(frame, np.ndarray) or frame.ndim != 3:
            raise EstimatorFailure("Expected a BGR image with shape (H, W, 3)")

        if self._holistic is None:
            self.initialize()

        rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        results = self._holistic.process(rgb_frame)

        hands: List[RawHand] = []
        if results.left_hand_landmarks:
            hands.append(self._convert_hand(results.left_hand_landmarks, Chirality.LEFT))
        if results.right_hand_landmarks:
            hands.append(self._convert_hand(results.right_hand_landmarks, Chirality.RIGHT))

        mask = None
        if self.config.enable_segmentation and results.segmentation_mask is not None:
            mask = results.segmentation_mask.copy()

        return RawObservation(
            body=self._convert_body(results.pose_landmarks),
            face=self._convert_face(results.face_landmarks),
            hands=tuple(hands),
            segmentation_mask=mask,
            origin=CoordinateOrigin.TOP_LEFT,
        )

    @staticmethod
    def _convert_body(landmarks) -> Optional[RawBody]:
        if landmarks is None:
            return None

        points = landmarks.landmark
        keypoints: Dict[JointName, RawKeypoint] = {}
        for name, index in POSE_INDICES.items():
            lm = points[index]
            keypoints[name] = RawKeypoint(lm.x, lm.y, float(getattr(lm, "visibility", 1.0)))

        for name, (a, b) in MIDPOINT_JOINTS.items():
            pa, pb = keypoints[a], keypoints[b]
            keypoints[name] = RawKeypoint(
                (pa.x + pb.x) / 2.0,
                (pa.y + pb.y) / 2.0,
                min(pa.confidence, pb.confidence),
            )

        return RawBody(keypoints)

    @staticmethod
    def _convert_face(landmarks) -> Optional[RawFace]:
        if landmarks is None:
            return None

        mesh = np.array([[lm.x, lm.y] for lm in landmarks.landmark], dtype=np.float64)
        lo = mesh.min(axis=0)
        size = np.maximum(mesh.max(axis=0) - lo, 1e-6)

        # Region points are expressed relative to the face box
        relative = (mesh - lo) / size
        regions = {
            region: [tuple(relative[i]) for i in indices if i < len(relative)]
            for region, indices in FACE_MESH_REGIONS.items()
        }

        return RawFace(
            regions=regions,
            confidence=1.0,
            bounding_box=(float(lo[0]), float(lo[1]), float(size[0]), float(size[1])),
        )

    @staticmethod
    def _convert_hand(landmarks, chirality: Chirality) -> RawHand:
        points = landmarks.landmark
        keypoints = {
            name: RawKeypoint(points[index].x, points[index].y, HAND_CONFIDENCE)
            for name, index in HAND_INDICES.items()
        }
        return RawHand(keypoints, chirality, HAND_CONFIDENCE)
