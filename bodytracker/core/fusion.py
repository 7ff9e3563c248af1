"""
Single-frame fusion pass.

Runs extraction, smoothing and classification for one raw observation
against a read-only history snapshot. The result carries both the fused pose
and the history entries the orchestrator should append; nothing here
mutates shared state.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Optional

from bodytracker.config.settings import TrackerConfig
from bodytracker.core.detection_mode import classify_detection_mode
from bodytracker.core.estimator import RawObservation
from bodytracker.core.extractor import KeypointExtractor
from bodytracker.core.history import HistorySnapshot, HistoryUpdate
from bodytracker.core.posture_classifier import PostureClassifier
from bodytracker.core.temporal_filter import TemporalSmoother
from bodytracker.core.types import FusedPose

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FusionResult:
    """Outcome of one fusion pass."""

    pose: Optional[FusedPose] = None
    update: HistoryUpdate = field(default_factory=HistoryUpdate)
    carried_forward: bool = False


class PoseFuser:
    """
    Fuses raw estimator output into a FusedPose.

    Pipeline stages:
    1. Keypoint extraction (gating, fallback)
    2. Temporal smoothing of joints, face and hands
    3. Detection mode classification
    4. Posture classification and majority-vote smoothing
    """

    def __init__(self, config: Optional[TrackerConfig] = None):
        self.config = config or TrackerConfig()
        self.extractor = KeypointExtractor(self.config.extraction, self.config.smile)
        self.smoother = TemporalSmoother(self.config.smoothing)
        self.posture_classifier = PostureClassifier(self.config.posture)

    def fuse(
        self,
        observation: RawObservation,
        history: HistorySnapshot,
        timestamp: float,
    ) -> FusionResult:
        """
        Fuse one observation.

        Args:
            observation: Raw estimator output for the frame
            history: Snapshot of the history windows before this frame
            timestamp: Frame timestamp in seconds

        Returns:
            FusionResult; ``pose`` is None only when nothing was observed
            and there is no pose to carry forward
        """
        extraction = self.extractor.extract(observation, history)

        # Gated-away faces and hands count as absent
        if observation.body is None and extraction.face is None and not extraction.hands:
            return self._carry_forward(observation, history, timestamp)

        joints = self.smoother.smooth_joints(extraction.joints, history.last_pose)
        face = self.smoother.smooth_face(extraction.face, history)
        hands = self.smoother.smooth_hands(extraction.hands, history)

        mode = classify_detection_mode(
            extraction.joints, extraction.face, extraction.hands, self.config.detection
        )

        posture = None
        raw_posture = None
        if len(extraction.joints) >= self.config.posture.min_joints:
            raw_posture = self.posture_classifier.classify(joints)
            posture = self.smoother.smooth_posture(raw_posture, history)

        pose = FusedPose(
            joints=joints,
            timestamp=timestamp,
            segmentation_mask=observation.segmentation_mask,
            posture=posture,
            face=face,
            hands=hands,
            detection_mode=mode,
        )

        # Frames without a face record an absence so carried faces expire
        update = HistoryUpdate(
            pose=pose,
            face=face if extraction.face is not None else None,
            record_face=True,
            hands=hands,
            posture=raw_posture,
        )

        logger.debug(
            "Fused frame at %.3f: %d joints, mode=%s, posture=%s",
            timestamp,
            len(joints),
            mode.value,
            posture.posture.value if posture else None,
        )
        return FusionResult(pose=pose, update=update)

    def _carry_forward(
        self,
        observation: RawObservation,
        history: HistorySnapshot,
        timestamp: float,
    ) -> FusionResult:
        last = history.last_pose
        if last is None:
            logger.debug("Nothing detected and no history; withholding pose")
            return FusionResult()

        pose = replace(
            last,
            timestamp=timestamp,
            segmentation_mask=observation.segmentation_mask,
        )
        return FusionResult(pose=pose, carried_forward=True)
