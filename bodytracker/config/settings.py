"""
Configuration for the pose fusion pipeline.

Every threshold, weight and window size used by the extractor, the smoothing
engine, the classifiers and the orchestrator lives here, with defaults that
match the tuned values of the tracker.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import yaml


@dataclass
class ExtractionConfig:
    """Keypoint gating and single-step history fallback."""

    critical_threshold: float = 0.3
    standard_threshold: float = 0.1
    lower_body_reduction: float = 0.05
    lower_body_floor: float = 0.05

    # Fallback to the previous fused joint
    fallback_min_confidence: float = 0.3
    fallback_decay: float = 0.7

    # Confidence below which a fresh joint is blended with history
    uncertain_confidence: float = 0.5

    hand_threshold: float = 0.2
    max_hands: int = 2


@dataclass
class SmoothingConfig:
    """Temporal smoothing parameters."""

    joint_alpha: float = 0.7

    face_confident: float = 0.7
    hand_confident: float = 0.6
    hand_history_decay: float = 0.8

    # History window sizes
    pose_history_size: int = 5
    face_history_size: int = 3
    hand_history_size: int = 3
    posture_history_size: int = 3


@dataclass
class PostureConfig:
    """Posture indicator thresholds and weights."""

    min_joints: int = 5
    joint_confidence: float = 0.3

    knee_angle_threshold: float = 120.0
    knee_sitting_weight: float = 0.8
    knee_standing_weight: float = 0.7

    hip_knee_threshold: float = 0.15
    hip_knee_sitting_weight: float = 0.7
    hip_knee_standing_weight: float = 0.6

    torso_angle_threshold: float = 15.0
    torso_standing_weight: float = 0.6
    torso_sitting_weight: float = 0.5

    height_ratio_threshold: float = 0.4
    height_sitting_weight: float = 0.6
    height_standing_weight: float = 0.5

    ankle_visibility_threshold: float = 0.3
    ankle_sitting_weight: float = 0.5
    ankle_standing_weight: float = 0.4

    decision_threshold: float = 0.5
    max_confidence: float = 0.95


@dataclass
class SmileConfig:
    """Smile heuristic baselines (face-relative units)."""

    width_baseline: float = 0.40
    width_span: float = 0.25
    corner_lift_span: float = 0.12
    open_baseline: float = 0.22
    open_span: float = 0.10

    width_weight: float = 0.6
    corner_weight: float = 0.5
    open_penalty_weight: float = 0.3


@dataclass
class DetectionModeConfig:
    """Detection mode classification."""

    joint_confidence: float = 0.3
    min_full_body_joints: int = 8


@dataclass
class OrchestratorConfig:
    """Frame acceptance."""

    max_fps: float = 30.0

    @property
    def min_interval(self) -> float:
        return 1.0 / self.max_fps if self.max_fps > 0 else 0.0


@dataclass
class EstimatorConfig:
    """MediaPipe Holistic adapter settings."""

    model_complexity: int = 1  # 0, 1, or 2 (higher = more accurate but slower)
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5
    enable_segmentation: bool = True
    refine_face_landmarks: bool = True


@dataclass
class TrackerConfig:
    """Main tracker configuration."""

    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    smoothing: SmoothingConfig = field(default_factory=SmoothingConfig)
    posture: PostureConfig = field(default_factory=PostureConfig)
    smile: SmileConfig = field(default_factory=SmileConfig)
    detection: DetectionModeConfig = field(default_factory=DetectionModeConfig)
    orchestrator: OrchestratorConfig = field(default_factory=OrchestratorConfig)
    estimator: EstimatorConfig = field(default_factory=EstimatorConfig)

    _SECTIONS = {
        "extraction": ExtractionConfig,
        "smoothing": SmoothingConfig,
        "posture": PostureConfig,
        "smile": SmileConfig,
        "detection": DetectionModeConfig,
        "orchestrator": OrchestratorConfig,
        "estimator": EstimatorConfig,
    }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrackerConfig":
        """Create from a nested dictionary. Missing sections keep defaults."""
        config = cls()
        for name, section_cls in cls._SECTIONS.items():
            if data and name in data and data[name] is not None:
                setattr(config, name, section_cls(**data[name]))
        return config

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a nested dictionary for serialization."""
        def dataclass_to_dict(obj):
            if hasattr(obj, "__dataclass_fields__"):
                return {
                    k: dataclass_to_dict(v) for k, v in obj.__dict__.items()
                }
            elif isinstance(obj, Path):
                return str(obj)
            return obj

        return {name: dataclass_to_dict(getattr(self, name)) for name in self._SECTIONS}

    @classmethod
    def from_yaml(cls, path: Path) -> "TrackerConfig":
        """Load configuration from YAML file."""
        with open(path, "r") as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data or {})

    def to_yaml(self, path: Path) -> None:
        """Save configuration to YAML file."""
        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def validate(self) -> List[str]:
        """Validate configuration and return list of issues."""
        issues = []

        ex = self.extraction
        for name in ("critical_threshold", "standard_threshold", "fallback_min_confidence",
                     "fallback_decay", "uncertain_confidence", "hand_threshold"):
            value = getattr(ex, name)
            if not 0.0 <= value <= 1.0:
                issues.append(f"extraction.{name} must be within [0, 1], got {value}")
        if ex.max_hands < 0:
            issues.append("extraction.max_hands must not be negative")

        sm = self.smoothing
        if not 0.0 < sm.joint_alpha <= 1.0:
            issues.append(f"smoothing.joint_alpha must be within (0, 1], got {sm.joint_alpha}")
        for name in ("pose_history_size", "face_history_size",
                     "hand_history_size", "posture_history_size"):
            if getattr(sm, name) < 1:
                issues.append(f"smoothing.{name} must be at least 1")

        if self.posture.min_joints < 0:
            issues.append("posture.min_joints must not be negative")

        for name in ("width_span", "corner_lift_span", "open_span"):
            if getattr(self.smile, name) <= 0:
                issues.append(f"smile.{name} must be positive")

        if self.orchestrator.max_fps < 0:
            issues.append("orchestrator.max_fps must not be negative")

        if self.estimator.model_complexity not in (0, 1, 2):
            issues.append("estimator.model_complexity must be 0, 1 or 2")

        return issues
