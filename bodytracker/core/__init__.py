"""
Core pose fusion pipeline.

Contains the per-frame processing chain:
- Keypoint extraction with confidence gating
- Temporal smoothing against bounded history
- Detection mode, posture and smile classification
- Frame orchestration and publication

The MediaPipe adapter lives in bodytracker.core.holistic_estimator and is
imported on demand.
"""

from bodytracker.core.estimator import (
    EstimatorFailure,
    KeypointEstimator,
    RawBody,
    RawFace,
    RawHand,
    RawKeypoint,
    RawObservation,
)
from bodytracker.core.extractor import KeypointExtractor
from bodytracker.core.history import HistoryBuffers, HistorySnapshot
from bodytracker.core.temporal_filter import TemporalSmoother
from bodytracker.core.detection_mode import classify_detection_mode
from bodytracker.core.posture_classifier import PostureClassifier, classify_posture
from bodytracker.core.smile import smile_score
from bodytracker.core.fusion import PoseFuser
from bodytracker.core.orchestrator import FrameOrchestrator, PoseSlot

__all__ = [
    "EstimatorFailure",
    "KeypointEstimator",
    "RawBody",
    "RawFace",
    "RawHand",
    "RawKeypoint",
    "RawObservation",
    "KeypointExtractor",
    "HistoryBuffers",
    "HistorySnapshot",
    "TemporalSmoother",
    "classify_detection_mode",
    "PostureClassifier",
    "classify_posture",
    "smile_score",
    "PoseFuser",
    "FrameOrchestrator",
    "PoseSlot",
]
