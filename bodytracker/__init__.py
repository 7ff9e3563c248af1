"""
BodyTracker - temporally stable pose fusion

Turns noisy per-frame keypoint estimates (body joints, face landmarks, hand
joints, segmentation mask) into a jitter-resistant, classified pose stream
for real-time overlays and gameplay.

Features:
- Confidence gating with short history fallback
- Exponential and confidence-weighted temporal smoothing
- Detection mode classification (full body, upper body, face and hands)
- Sitting / standing posture classification by weighted voting
- Smile score from lip geometry
- Throttled, single-flight frame orchestration

License: MIT
"""

__version__ = "1.0.0"
__author__ = "BodyTracker Contributors"
__license__ = "MIT"

from bodytracker.config.settings import TrackerConfig
from bodytracker.core.orchestrator import FrameOrchestrator
from bodytracker.core.fusion import PoseFuser
from bodytracker.core.types import (
    DetectedFace,
    DetectedHand,
    DetectionMode,
    FusedPose,
    Joint,
    JointName,
    Posture,
    PostureAnalysis,
)

__all__ = [
    "TrackerConfig",
    "FrameOrchestrator",
    "PoseFuser",
    "DetectedFace",
    "DetectedHand",
    "DetectionMode",
    "FusedPose",
    "Joint",
    "JointName",
    "Posture",
    "PostureAnalysis",
]
