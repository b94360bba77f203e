import numpy as np

from slamgraph.factor import Factor, FactorType
from slamgraph.handlers_3d import update_obs3d, update_odo3d, update_pos3d
from slamgraph.iso3d import get_isometry
from slamgraph.variable import Variable, VariableType

IDENTITY_POSE = [0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 1.0]
ROTATED_POSE = [1.5, -0.5, 2.0, -0.139007, 0.0806488, 0.14657, 0.976059]


def vehicle(vid, content, start=None):
    fixed_range = None if start is None else range(start, start + 6)
    return Variable(vid, VariableType.VEHICLE_3D, content, fixed_range)


def landmark(vid, content, start=None):
    fixed_range = None if start is None else range(start, start + 3)
    return Variable(vid, VariableType.LANDMARK_3D, content, fixed_range)


def info(dim):
    values = np.arange(1.0, dim + 1.0)
    return np.diag(values)


def system(dim):
    return np.zeros((dim, dim)), np.zeros(dim)


def pose_of(iso):
    return [*iso.translation, *iso.quaternion_xyzw()]


def test_pos3d_identity_gives_information_matrix():
    H, b = system(6)
    omega = info(6)
    update_pos3d(H, b, Factor(FactorType.POSITION_3D, IDENTITY_POSE, omega), vehicle(0, IDENTITY_POSE, 0))
    np.testing.assert_allclose(H, omega, atol=1e-12)
    np.testing.assert_allclose(b, np.zeros(6), atol=1e-12)


def test_pos3d_matching_measurement_has_zero_gradient():
    H, b = system(6)
    update_pos3d(H, b, Factor(FactorType.POSITION_3D, ROTATED_POSE, info(6)), vehicle(0, ROTATED_POSE, 0))
    np.testing.assert_allclose(b, np.zeros(6), atol=1e-12)
    np.testing.assert_allclose(H, H.T, atol=1e-10)
    assert np.linalg.eigvalsh(H).min() > 0


def test_pos3d_fixed_variable_leaves_system_untouched():
    H, b = system(6)
    update_pos3d(H, b, Factor(FactorType.POSITION_3D, ROTATED_POSE, info(6)), vehicle(0, IDENTITY_POSE))
    assert not H.any()
    assert not b.any()


def test_pos3d_translation_error_drives_gradient():
    H, b = system(6)
    pose = [2.0, 0.0, 0.0, 0.0, 0.0, 0.0, 1.0]
    update_pos3d(H, b, Factor(FactorType.POSITION_3D, IDENTITY_POSE, np.eye(6)), vehicle(0, pose, 0))
    np.testing.assert_allclose(b, [2.0, 0.0, 0.0, 0.0, 0.0, 0.0], atol=1e-12)


def test_odo3d_identity_blocks():
    H, b = system(12)
    omega = info(6)
    factor = Factor(FactorType.ODOMETRY_3D, IDENTITY_POSE, omega)
    update_odo3d(H, b, factor, vehicle(0, IDENTITY_POSE, 0), vehicle(1, IDENTITY_POSE, 6))
    np.testing.assert_allclose(H[:6, :6], omega, atol=1e-12)
    np.testing.assert_allclose(H[6:, 6:], omega, atol=1e-12)
    np.testing.assert_allclose(H[:6, 6:], -omega, atol=1e-12)
    np.testing.assert_allclose(H[6:, :6], -omega, atol=1e-12)
    np.testing.assert_allclose(b, np.zeros(12), atol=1e-12)


def test_odo3d_consistent_poses_have_zero_gradient():
    iso_i = get_isometry(ROTATED_POSE)
    constraint = [0.309576, 2.34636, 0.00315914, -0.139007, 0.0806488, 0.14657, 0.976059]
    iso_j = iso_i @ get_isometry(constraint)
    H, b = system(12)
    factor = Factor(FactorType.ODOMETRY_3D, constraint, info(6))
    update_odo3d(H, b, factor, vehicle(0, ROTATED_POSE, 0), vehicle(1, pose_of(iso_j), 6))
    np.testing.assert_allclose(b, np.zeros(12), atol=1e-10)
    np.testing.assert_allclose(H, H.T, atol=1e-9)
    assert np.linalg.eigvalsh(H).min() > -1e-9


def test_odo3d_with_fixed_source_only_fills_target_block():
    H, b = system(6)
    omega = info(6)
    factor = Factor(FactorType.ODOMETRY_3D, IDENTITY_POSE, omega)
    update_odo3d(H, b, factor, vehicle(0, IDENTITY_POSE), vehicle(1, IDENTITY_POSE, 0))
    np.testing.assert_allclose(H, omega, atol=1e-12)


def test_odo3d_gradients_of_both_vehicles_cancel_for_translation():
    H, b = system(12)
    pose_j = [0.5, 1.0, -0.25, 0.0, 0.0, 0.0, 1.0]
    factor = Factor(FactorType.ODOMETRY_3D, IDENTITY_POSE, np.eye(6))
    update_odo3d(H, b, factor, vehicle(0, IDENTITY_POSE, 0), vehicle(1, pose_j, 6))
    np.testing.assert_allclose(b[6:9], pose_j[:3], atol=1e-12)
    np.testing.assert_allclose(b[0:3], -b[6:9], atol=1e-12)


def test_obs3d_identity_pose():
    H, b = system(9)
    omega = info(3)
    position = [1.0, -2.0, 3.0]
    factor = Factor(FactorType.OBSERVATION_3D, [0.0, 0.0, 0.0], omega)
    update_obs3d(H, b, factor, vehicle(0, IDENTITY_POSE, 0), landmark(1, position, 6))
    np.testing.assert_allclose(H[6:, 6:], omega, atol=1e-12)
    np.testing.assert_allclose(H[:3, :3], omega, atol=1e-12)
    np.testing.assert_allclose(H[:3, 6:], -omega, atol=1e-12)
    np.testing.assert_allclose(b[6:], omega @ np.array(position), atol=1e-12)
    np.testing.assert_allclose(b[:3], -b[6:], atol=1e-12)


def test_obs3d_consistent_landmark_has_zero_gradient():
    measurement = [-0.034127, 2.24359, -0.503123]
    world = get_isometry(ROTATED_POSE) @ measurement
    H, b = system(9)
    factor = Factor(FactorType.OBSERVATION_3D, measurement, info(3))
    update_obs3d(H, b, factor, vehicle(0, ROTATED_POSE, 0), landmark(1, list(world), 6))
    np.testing.assert_allclose(b, np.zeros(9), atol=1e-10)
    np.testing.assert_allclose(H, H.T, atol=1e-9)


def test_obs3d_fixed_vehicle_only_fills_landmark_block():
    H, b = system(3)
    omega = info(3)
    factor = Factor(FactorType.OBSERVATION_3D, [0.0, 0.0, 0.0], omega)
    update_obs3d(H, b, factor, vehicle(0, ROTATED_POSE), landmark(1, [1.0, 1.0, 1.0], 0))
    # the landmark block is R^T Omega R for the vehicle's inverse rotation
    rotation = get_isometry(ROTATED_POSE).inverse().rotation_matrix()
    np.testing.assert_allclose(H, rotation.T @ omega @ rotation, atol=1e-12)