"""Configuration module for BodyTracker."""

from bodytracker.config.settings import (
    TrackerConfig,
    ExtractionConfig,
    SmoothingConfig,
    PostureConfig,
    SmileConfig,
    DetectionModeConfig,
    OrchestratorConfig,
    EstimatorConfig,
)

__all__ = [
    "TrackerConfig",
    "ExtractionConfig",
    "SmoothingConfig",
    "PostureConfig",
    "SmileConfig",
    "DetectionModeConfig",
    "OrchestratorConfig",
    "EstimatorConfig",
]
