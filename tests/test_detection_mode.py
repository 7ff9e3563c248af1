"""Tests for detection mode classification."""

from bodytracker.core.detection_mode import LOWER_BODY_MARKERS, classify_detection_mode
from bodytracker.core.types import Chirality, DetectionMode, HandJointName

from conftest import detected_face, detected_hand, standing_joints


def upper_body_only(joints):
    return tuple(j for j in joints if j.name not in LOWER_BODY_MARKERS)


def test_confident_body_with_hips_is_full_body():
    joints = standing_joints()

    assert classify_detection_mode(joints, detected_face(), ()) is DetectionMode.FULL_BODY


def test_without_hips_or_knees_is_upper_body():
    joints = upper_body_only(standing_joints())

    assert len(joints) >= 8
    assert classify_detection_mode(joints, None, ()) is DetectionMode.UPPER_BODY


def test_face_only_is_face_and_hands():
    assert classify_detection_mode((), detected_face(), ()) is DetectionMode.FACE_AND_HANDS


def test_hands_without_body_is_face_and_hands():
    hand = detected_hand(Chirality.LEFT, 0.9, [(HandJointName.WRIST, 0.4, 0.5, 0.9)])

    assert classify_detection_mode((), None, (hand,)) is DetectionMode.FACE_AND_HANDS


def test_few_confident_joints_beat_nothing():
    joints = standing_joints()[:3]

    assert classify_detection_mode(joints, None, ()) is DetectionMode.UPPER_BODY
    assert classify_detection_mode(joints, detected_face(), ()) is DetectionMode.FACE_AND_HANDS


def test_low_confidence_joints_do_not_count():
    joints = standing_joints(confidence=0.25)

    assert classify_detection_mode(joints, None, ()) is DetectionMode.FACE_AND_HANDS


def test_nothing_detected_defaults_to_face_and_hands():
    assert classify_detection_mode((), None, ()) is DetectionMode.FACE_AND_HANDS


def test_mode_labels():
    assert DetectionMode.FULL_BODY.label
    assert DetectionMode.UPPER_BODY.label != DetectionMode.FACE_AND_HANDS.label
