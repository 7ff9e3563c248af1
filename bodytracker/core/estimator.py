"""
Raw keypoint estimator contract.

The estimator itself is an external collaborator: given an image frame it
returns body, face and hand candidates with confidences plus an optional
segmentation mask. This module only defines the shapes it hands over.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence, Tuple

from bodytracker.core.types import Chirality, FaceRegion, HandJointName, JointName
from bodytracker.utils.math_utils import CoordinateOrigin


class EstimatorFailure(Exception):
    """The estimator could not process a frame."""


@dataclass(frozen=True)
class RawKeypoint:
    """A candidate keypoint in the estimator's normalized coordinates."""
    x: float
    y: float
    confidence: float


@dataclass(frozen=True)
class RawBody:
    """Body pose candidate. Joints the estimator did not report are absent."""
    keypoints: Mapping[JointName, RawKeypoint] = field(default_factory=dict)


@dataclass(frozen=True)
class RawFace:
    """
    Face candidate.

    Region points are normalized to the face bounding box; the box itself is
    normalized to the image.
    """
    regions: Mapping[FaceRegion, Sequence[Tuple[float, float]]] = field(default_factory=dict)
    confidence: float = 0.0
    bounding_box: Tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)


@dataclass(frozen=True)
class RawHand:
    """Hand candidate."""
    keypoints: Mapping[HandJointName, RawKeypoint] = field(default_factory=dict)
    chirality: Chirality = Chirality.RIGHT
    confidence: float = 0.0


@dataclass(frozen=True)
class RawObservation:
    """Everything the estimator produced for one frame."""

    body: Optional[RawBody] = None
    face: Optional[RawFace] = None
    hands: Tuple[RawHand, ...] = ()
    segmentation_mask: Optional[Any] = None
    origin: CoordinateOrigin = CoordinateOrigin.TOP_LEFT


class KeypointEstimator(ABC):
    """
    Estimator adapter interface.

    Implementations take a BGR image (H, W, 3 uint8) and return a
    RawObservation, raising EstimatorFailure when the frame cannot be
    processed.
    """

    @abstractmethod
    def estimate(self, frame: Any) -> RawObservation:
        ...

    def close(self) -> None:
        """Release estimator resources."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
