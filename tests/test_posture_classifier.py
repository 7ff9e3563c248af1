"""Tests for posture classification."""

import pytest

from bodytracker.config.settings import PostureConfig
from bodytracker.core.posture_classifier import (
    INSUFFICIENT_DATA,
    Indicator,
    PostureClassifier,
    classify_posture,
)
from bodytracker.core.types import JointName, Posture, index_joints

from conftest import joint, standing_joints


@pytest.fixture
def classifier():
    return PostureClassifier()


def seated_joints():
    """Side view of a seated person: thigh horizontal, shin vertical, torso leaning."""
    return (
        joint(JointName.NOSE, 0.3, 0.15),
        joint(JointName.LEFT_SHOULDER, 0.3, 0.3),
        joint(JointName.LEFT_HIP, 0.4, 0.55),
        joint(JointName.LEFT_KNEE, 0.6, 0.55),
        joint(JointName.LEFT_ANKLE, 0.6, 0.8),
    )


class TestClassify:
    def test_seated_body_is_sitting(self, classifier):
        analysis = classifier.classify(seated_joints())

        assert analysis.posture is Posture.SITTING
        # knee 0.8 + hip-knee 0.7 + torso 0.5 sitting, height 0.5 + ankles 0.4 standing
        assert analysis.confidence == pytest.approx(2.0 / 2.9)
        assert len(analysis.reasoning) == 5
        assert analysis.reasoning[0].startswith("Knee angle: ")
        assert analysis.reasoning[0].endswith("(bent)")

    def test_upright_body_is_standing(self, classifier):
        analysis = classifier.classify(standing_joints())

        assert analysis.posture is Posture.STANDING
        assert analysis.confidence == pytest.approx(0.95)
        assert "Ankles visible" in analysis.reasoning
        assert analysis.reasoning[0].endswith("(straight)")

    def test_arms_only_is_insufficient(self, classifier):
        arms = [j for j in standing_joints() if "shoulder" in j.name.value or
                "elbow" in j.name.value or "wrist" in j.name.value]

        analysis = classifier.classify(arms)

        assert analysis.posture is Posture.UNKNOWN
        assert analysis.confidence == 0.0
        assert analysis.reasoning == (INSUFFICIENT_DATA,)

    def test_empty_joints_is_insufficient(self, classifier):
        assert classifier.classify(()).reasoning == (INSUFFICIENT_DATA,)

    def test_balanced_votes_are_unknown(self, classifier):
        # Bent knee and close hip/knee vote sitting; the rest vote standing
        joints = (
            joint(JointName.NOSE, 0.5, 0.1),
            joint(JointName.LEFT_SHOULDER, 0.5, 0.25),
            joint(JointName.LEFT_HIP, 0.5, 0.5),
            joint(JointName.LEFT_KNEE, 0.6, 0.55),
            joint(JointName.LEFT_ANKLE, 0.5, 0.7),
        )

        analysis = classifier.classify(joints)

        assert analysis.posture is Posture.UNKNOWN
        assert analysis.confidence == pytest.approx(0.5)

    def test_wrapper_matches_classifier(self):
        assert classify_posture(seated_joints()) == PostureClassifier().classify(seated_joints())


class TestIndicators:
    def test_right_leg_used_when_left_is_weak(self, classifier):
        joints = index_joints((
            joint(JointName.LEFT_HIP, 0.4, 0.5, 0.2),
            joint(JointName.LEFT_KNEE, 0.4, 0.7),
            joint(JointName.LEFT_ANKLE, 0.4, 0.9),
            joint(JointName.RIGHT_HIP, 0.6, 0.5),
            joint(JointName.RIGHT_KNEE, 0.8, 0.5),
            joint(JointName.RIGHT_ANKLE, 0.8, 0.7),
        ))

        assert classifier.knee_angle(joints) == pytest.approx(90.0)
        assert classifier.hip_knee_distance(joints) == pytest.approx(0.0)

    def test_torso_angle_sign_follows_lean(self, classifier):
        joints = index_joints((
            joint(JointName.LEFT_SHOULDER, 0.5, 0.2),
            joint(JointName.LEFT_HIP, 0.6, 0.3),
        ))

        assert classifier.torso_angle(joints) == pytest.approx(45.0)

    def test_body_height_ratio_prefers_nose(self, classifier):
        joints = index_joints((
            joint(JointName.NOSE, 0.5, 0.1),
            joint(JointName.NECK, 0.5, 0.3),
            joint(JointName.RIGHT_HIP, 0.5, 0.5),
            joint(JointName.RIGHT_ANKLE, 0.5, 0.9),
        ))

        assert classifier.body_height_ratio(joints) == pytest.approx(0.5)

    def test_body_height_ratio_needs_leg_extent(self, classifier):
        joints = index_joints((
            joint(JointName.NOSE, 0.5, 0.1),
            joint(JointName.LEFT_HIP, 0.5, 0.5),
            joint(JointName.LEFT_ANKLE, 0.6, 0.5),
        ))

        assert classifier.body_height_ratio(joints) is None

    def test_weak_nose_skips_body_height_ratio(self, classifier):
        joints = index_joints((
            joint(JointName.NOSE, 0.5, 0.1, 0.2),
            joint(JointName.NECK, 0.5, 0.2),
            joint(JointName.LEFT_HIP, 0.5, 0.5),
            joint(JointName.LEFT_ANKLE, 0.5, 0.9),
        ))

        assert classifier.body_height_ratio(joints) is None

    def test_ankle_visibility_counts_missing_ankle_as_zero(self, classifier):
        one = index_joints((joint(JointName.LEFT_ANKLE, 0.4, 0.9, 0.5),))
        none = index_joints((joint(JointName.LEFT_KNEE, 0.4, 0.7),))

        assert classifier.ankle_visibility(one) == pytest.approx(0.25)
        assert classifier.ankle_visibility(none) is None

    def test_hidden_ankles_vote_sitting(self, classifier):
        joints = index_joints((
            joint(JointName.LEFT_ANKLE, 0.4, 0.9, 0.1),
            joint(JointName.RIGHT_ANKLE, 0.6, 0.9, 0.2),
        ))

        indicators = classifier.indicators(joints)

        assert indicators == [Indicator(Posture.SITTING, 0.5, "Ankles not visible")]


class TestScores:
    def test_scores_sum_to_one(self):
        indicators = [
            Indicator(Posture.SITTING, 0.8, "a"),
            Indicator(Posture.STANDING, 0.6, "b"),
            Indicator(Posture.SITTING, 0.5, "c"),
        ]

        sitting, standing = PostureClassifier.normalized_scores(indicators)

        assert sitting + standing == pytest.approx(1.0)
        assert sitting == pytest.approx(1.3 / 1.9)

    def test_no_indicators_score_zero(self):
        assert PostureClassifier.normalized_scores([]) == (0.0, 0.0)

    def test_confidence_is_capped(self):
        classifier = PostureClassifier(PostureConfig(max_confidence=0.9))

        analysis = classifier.vote([Indicator(Posture.SITTING, 0.8, "only")])

        assert analysis.posture is Posture.SITTING
        assert analysis.confidence == pytest.approx(0.9)
