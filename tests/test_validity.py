"""
다중 입력 유효성 술어 / 마스크 테스트
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import numpy as np
import pytest

from regsampler.core.image import InputImage, SpatialRegion, bounding_region
from regsampler.core.masking import ImageMask, create_mask_from_image, get_mask_statistics
from regsampler.core.validity import SpatialValidityPredicate


class RecordingMask:
    """호출된 점을 기록하는 마스크 (short-circuit 확인용)"""

    def __init__(self, inside=True):
        self.inside = inside
        self.calls = 0

    def is_inside(self, points):
        pts = np.atleast_2d(points)
        self.calls += pts.shape[0]
        return np.full(pts.shape[0], self.inside)


def _two_images():
    a = InputImage(np.zeros((10, 10)))
    b = InputImage(np.zeros((10, 10)), origin=(5.0, 5.0))
    return a, b


# =============================================================================
#  기하 정보
# =============================================================================

def test_image_region_and_index_transform():
    image = InputImage(np.zeros((10, 20)), origin=(-1.0, 2.0), spacing=(0.5, 2.0))
    region = image.region
    assert region.lower.tolist() == [-1.0, 2.0]
    assert region.upper.tolist() == [3.5, 40.0]
    assert image.physical_extent.tolist() == [4.5, 38.0]

    cindex = np.array([[3.5, 7.25]])
    point = image.transform_continuous_index_to_point(cindex)
    assert np.allclose(point, [[0.75, 16.5]])
    assert np.allclose(image.transform_point_to_continuous_index(point), cindex)


def test_image_validation():
    with pytest.raises(ValueError):
        InputImage(np.zeros((1, 10)))
    with pytest.raises(ValueError):
        InputImage(np.zeros((10, 10)), spacing=(1.0, 0.0))
    with pytest.raises(ValueError):
        InputImage(np.zeros((10, 10)), origin=(0.0, 0.0, 0.0))


def test_region_intersection_and_clip_box():
    a, b = _two_images()
    box = bounding_region([a.region, b.region])
    assert box.lower.tolist() == [5.0, 5.0]
    assert box.upper.tolist() == [9.0, 9.0]
    assert not box.is_empty

    far = SpatialRegion([20.0, 20.0], [30.0, 30.0])
    assert box.intersect(far).is_empty

    clipped = box.clip_box(center=[8.9, 5.1], size=[2.0, 10.0])
    assert np.allclose(clipped.lower, [7.0, 5.0])
    assert np.allclose(clipped.upper, [9.0, 9.0])


# =============================================================================
#  유효성 술어
# =============================================================================

def test_point_must_lie_in_every_image_region():
    predicate = SpatialValidityPredicate(_two_images())
    assert predicate.is_valid([6.0, 6.0])
    assert predicate.is_valid([5.0, 9.0])
    assert not predicate.is_valid([2.0, 2.0])
    assert not predicate.is_valid([12.0, 12.0])
    assert not predicate.is_valid([6.0, 9.5])


def test_short_circuit_skips_later_masks():
    first = RecordingMask(inside=False)
    second = RecordingMask(inside=True)
    predicate = SpatialValidityPredicate(_two_images(), masks=[first, second])

    # 첫 이미지 영역 밖 → 마스크 둘 다 호출 안 됨
    assert not predicate.is_valid([-1.0, -1.0])
    assert first.calls == 0 and second.calls == 0

    # 첫 마스크에서 실패 → 두 번째 마스크 호출 안 됨
    assert not predicate.is_valid([6.0, 6.0])
    assert first.calls == 1 and second.calls == 0


def test_batch_matches_pointwise():
    a, b = _two_images()
    mask_array = np.zeros((10, 10), dtype=np.uint8)
    mask_array[:, :4] = 1
    predicate = SpatialValidityPredicate([a, b], masks=[None, ImageMask.from_image(b, mask_array)])

    rng = np.random.default_rng(0)
    points = rng.uniform(-2.0, 16.0, size=(500, 2))
    batch = predicate.is_valid_many(points)
    pointwise = np.array([predicate.is_valid(p) for p in points])
    assert np.array_equal(batch, pointwise)
    assert batch.any() and not batch.all()


def test_batch_skips_mask_for_points_outside_region():
    a, b = _two_images()
    mask = RecordingMask()
    predicate = SpatialValidityPredicate([a, b], masks=[mask, None])
    points = np.array([[1.0, 1.0], [-3.0, 0.0], [20.0, 1.0]])
    assert predicate.is_valid_many(points).tolist() == [False, False, False]
    assert mask.calls == 1


def test_predicate_argument_checks():
    a, b = _two_images()
    with pytest.raises(ValueError):
        SpatialValidityPredicate([])
    with pytest.raises(ValueError):
        SpatialValidityPredicate([a, b], masks=[None])
    with pytest.raises(ValueError):
        SpatialValidityPredicate([a, InputImage(np.zeros((4, 4, 4)))])
    with pytest.raises(ValueError):
        SpatialValidityPredicate([a], masks=[object()])


# =============================================================================
#  마스크
# =============================================================================

def test_image_mask_rounds_to_nearest_voxel():
    array = np.zeros((5, 5), dtype=np.uint8)
    array[2, 3] = 1
    mask = ImageMask(array, origin=(10.0, 10.0), spacing=(2.0, 2.0))
    # 연속 인덱스 (2.4, 3.4) → voxel (2, 3)
    assert mask.is_inside([14.8, 16.8])
    # (2.6, 3.0) → voxel (3, 3)
    assert not mask.is_inside([15.2, 16.0])
    assert not mask.is_inside([0.0, 0.0])
    result = mask.is_inside(np.array([[14.0, 16.0], [14.0, 18.0], [30.0, 30.0]]))
    assert result.tolist() == [True, False, False]


def test_create_mask_from_image_removes_small_regions():
    data = np.full((40, 40), 10.0)
    data[10:30, 10:30] = 200.0
    data[2:4, 2:4] = 200.0
    image = InputImage(data, spacing=(0.5, 0.5))
    mask = create_mask_from_image(image, threshold=100, min_area=20)

    assert mask.array[20, 20]
    assert not mask.array[2, 2]
    assert not mask.array[0, 39]
    assert np.array_equal(mask.spacing, image.spacing)

    stats = get_mask_statistics(mask)
    assert stats['inside_voxels'] == 400
    assert stats['total_voxels'] == 1600
    assert abs(stats['coverage_ratio'] - 0.25) < 1e-12


def test_create_mask_requires_2d():
    with pytest.raises(ValueError):
        create_mask_from_image(InputImage(np.zeros((4, 4, 4))), threshold=1)


if __name__ == "__main__":
    test_image_region_and_index_transform()
    test_image_validation()
    test_region_intersection_and_clip_box()
    test_point_must_lie_in_every_image_region()
    test_short_circuit_skips_later_masks()
    test_batch_matches_pointwise()
    test_batch_skips_mask_for_points_outside_region()
    test_predicate_argument_checks()
    test_image_mask_rounds_to_nearest_voxel()
    test_create_mask_from_image_removes_small_regions()
    test_create_mask_requires_2d()
    print("✅ 유효성/마스크 테스트 통과")
