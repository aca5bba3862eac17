import numpy as np
import pytest

from conftest import bent_skeleton
from handmeasure.Joints import (
    FINGER_JOINT_NAMES,
    JOINT_PARENTS,
    LEAF_JOINT_NAMES,
    FingerName,
    HandSkeleton,
    Joint,
    JointName,
    SkeletonError,
)
from handmeasure.Transforms import cm, make_transform


def _joint(name, parent, translation=(0.0, 0.0, 0.0), tracked=True):
    m = make_transform(translation=translation)
    return Joint(name=name, parent=parent, local_transform=m, root_transform=m, is_tracked=tracked)


class TestJointTables:
    def test_wrist_is_only_root(self):
        roots = [name for name, parent in JOINT_PARENTS.items() if parent is None]
        assert roots == [JointName.WRIST]

    def test_every_joint_has_a_parent_entry(self):
        assert set(JOINT_PARENTS) == set(JointName)

    def test_leaves_have_no_children(self):
        parents = set(p for p in JOINT_PARENTS.values() if p is not None)
        for leaf in LEAF_JOINT_NAMES:
            assert leaf not in parents

    def test_thumb_has_three_joints_tip_first(self):
        assert FINGER_JOINT_NAMES[FingerName.THUMB] == (
            JointName.THUMB_TIP,
            JointName.THUMB_INTERMEDIATE_TIP,
            JointName.THUMB_INTERMEDIATE_BASE,
        )

    @pytest.mark.parametrize(
        "finger", [f for f in FingerName if f != FingerName.THUMB]
    )
    def test_other_fingers_have_four_joints_knuckle_last(self, finger):
        names = FINGER_JOINT_NAMES[finger]
        assert len(names) == 4
        assert names[0].value.endswith("Tip") and not names[0].value.endswith("IntermediateTip")
        assert names[1].value.endswith("IntermediateTip")
        assert names[2].value.endswith("IntermediateBase")
        assert names[3].value.endswith("Knuckle")
        assert all(n.value.startswith(finger.value) for n in names)


class TestJoint:
    def test_angle_of_unrotated_joint_is_zero(self):
        assert _joint(JointName.WRIST, None).angle == pytest.approx(0.0)

    def test_position_comes_from_root_transform(self):
        joint = Joint(
            name=JointName.INDEX_FINGER_TIP,
            parent=JointName.INDEX_FINGER_INTERMEDIATE_TIP,
            local_transform=make_transform(translation=(9.0, 9.0, 9.0)),
            root_transform=make_transform(translation=(1.0, 2.0, 3.0)),
        )
        assert joint.position.tolist() == [1.0, 2.0, 3.0]

    def test_distance_to(self):
        a = _joint(JointName.WRIST, None, (0.0, 0.0, 0.0))
        b = _joint(JointName.FOREARM_WRIST, JointName.WRIST, (0.0, 0.3, 0.4))
        assert a.distance_to(b) == pytest.approx(0.5)
        assert b.distance_to(a) == pytest.approx(0.5)

    def test_transforms_are_read_only(self):
        joint = _joint(JointName.WRIST, None)
        with pytest.raises(ValueError):
            joint.local_transform[0, 3] = 1.0

    def test_rejects_non_4x4(self):
        with pytest.raises(ValueError):
            Joint(name=JointName.WRIST, parent=None, local_transform=np.eye(3), root_transform=np.eye(4))


class TestHandSkeleton:
    def test_neutral_pose_has_full_vocabulary(self, neutral_skeleton):
        assert len(neutral_skeleton) == len(JointName)
        assert [j.name for j in neutral_skeleton.all_joints] == list(JointName)

    def test_root_joint_is_wrist(self, neutral_skeleton):
        assert neutral_skeleton.root_joint.name == JointName.WRIST

    def test_leaf_joints(self, neutral_skeleton):
        assert {j.name for j in neutral_skeleton.leaf_joints} == set(LEAF_JOINT_NAMES)

    def test_root_transforms_compose_down_the_chain(self, neutral_skeleton):
        tip = neutral_skeleton.joint(JointName.INDEX_FINGER_TIP)
        # metacarpal 1 + knuckle 6 + base 4 + inter tip 2.5 + tip 2
        assert tip.position == pytest.approx([cm(15.5), cm(2.0), 0.0])

    def test_rotated_parent_moves_children(self):
        skeleton = bent_skeleton({JointName.INDEX_FINGER_INTERMEDIATE_TIP: np.pi / 2})
        inter_tip = skeleton.joint(JointName.INDEX_FINGER_INTERMEDIATE_TIP)
        tip = skeleton.joint(JointName.INDEX_FINGER_TIP)
        # the tip bone now points along +y from the intermediate tip
        assert (tip.position - inter_tip.position) == pytest.approx([0.0, cm(2.0), 0.0], abs=1e-9)
        assert inter_tip.angle == pytest.approx(np.pi / 2)
        assert tip.angle == pytest.approx(0.0)

    def test_tracked_flags_are_carried(self):
        skeleton = bent_skeleton(tracked={JointName.THUMB_TIP: False})
        assert not skeleton.joint(JointName.THUMB_TIP).is_tracked
        assert skeleton.joint(JointName.INDEX_FINGER_TIP).is_tracked

    def test_missing_joint_lookup_returns_none(self):
        skeleton = HandSkeleton([_joint(JointName.WRIST, None)])
        assert skeleton.joint(JointName.THUMB_TIP) is None
        assert JointName.THUMB_TIP not in skeleton

    def test_finger_joints_order(self, neutral_skeleton):
        joints = neutral_skeleton.finger_joints(FingerName.MIDDLE_FINGER)
        assert [j.name for j in joints] == list(FINGER_JOINT_NAMES[FingerName.MIDDLE_FINGER])

    def test_finger_with_too_few_joints_fails_loudly(self):
        skeleton = HandSkeleton(
            [
                _joint(JointName.WRIST, None),
                _joint(JointName.INDEX_FINGER_METACARPAL, JointName.WRIST),
                _joint(JointName.INDEX_FINGER_KNUCKLE, JointName.INDEX_FINGER_METACARPAL),
            ]
        )
        with pytest.raises(AssertionError):
            skeleton.finger_joints(FingerName.INDEX_FINGER)

    def test_two_roots_rejected(self):
        with pytest.raises(SkeletonError, match="exactly one root"):
            HandSkeleton([_joint(JointName.WRIST, None), _joint(JointName.FOREARM_ARM, None)])

    def test_no_root_rejected(self):
        with pytest.raises(SkeletonError):
            HandSkeleton(
                [
                    _joint(JointName.FOREARM_WRIST, JointName.FOREARM_ARM),
                    _joint(JointName.FOREARM_ARM, JointName.FOREARM_WRIST),
                ]
            )

    def test_cycle_rejected(self):
        with pytest.raises(SkeletonError, match="Cycle"):
            HandSkeleton(
                [
                    _joint(JointName.WRIST, None),
                    _joint(JointName.FOREARM_WRIST, JointName.FOREARM_ARM),
                    _joint(JointName.FOREARM_ARM, JointName.FOREARM_WRIST),
                ]
            )

    def test_missing_parent_rejected(self):
        with pytest.raises(SkeletonError, match="missing"):
            HandSkeleton([_joint(JointName.WRIST, None), _joint(JointName.THUMB_TIP, JointName.THUMB_INTERMEDIATE_TIP)])

    def test_from_local_transforms_rejects_missing_parent(self):
        with pytest.raises(SkeletonError):
            HandSkeleton.from_local_transforms({JointName.THUMB_TIP: np.eye(4)})
