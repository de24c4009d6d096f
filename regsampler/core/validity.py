"""
다중 입력 공간 유효성 술어

점 p가 유효하려면 모든 입력 이미지 i에 대해
    (1) p가 이미지 i의 버퍼 영역 안이고
    (2) 이미지 i에 마스크가 있으면 마스크 안이어야 한다.
왼쪽부터 평가하며 처음 실패한 이미지/마스크에서 중단한다.
"""

from typing import List, Optional, Sequence

import numpy as np

from .image import InputImage


class SpatialValidityPredicate:
    """
    Args:
        images: 입력 이미지 목록 (모두 같은 차원)
        masks: 이미지별 마스크 (None 허용, 목록 자체도 None 가능)
    """

    def __init__(self, images: Sequence[InputImage],
                 masks: Optional[Sequence] = None):
        images = list(images)
        if not images:
            raise ValueError("입력 이미지가 하나 이상 필요합니다")
        dimension = images[0].dimension
        for image in images[1:]:
            if image.dimension != dimension:
                raise ValueError(
                    f"입력 이미지 차원 불일치: {dimension}D vs {image.dimension}D")

        if masks is None:
            masks = [None] * len(images)
        masks = list(masks)
        if len(masks) != len(images):
            raise ValueError(f"마스크 수({len(masks)})와 이미지 수({len(images)})가 다릅니다")
        for mask in masks:
            if mask is not None and not hasattr(mask, 'is_inside'):
                raise ValueError(f"마스크는 is_inside(points) 메서드가 필요합니다: {mask!r}")

        self.images: List[InputImage] = images
        self.masks = masks

    @property
    def dimension(self) -> int:
        return self.images[0].dimension

    def is_valid(self, point) -> bool:
        p = np.asarray(point, dtype=np.float64).reshape(1, -1)
        for image, mask in zip(self.images, self.masks):
            if not image.is_inside_buffer(image.transform_point_to_continuous_index(p))[0]:
                return False
            if mask is not None and not bool(np.asarray(mask.is_inside(p)).reshape(-1)[0]):
                return False
        return True

    def is_valid_many(self, points: np.ndarray) -> np.ndarray:
        """
        배치 평가 (N, D) → (N,) bool

        이미지 순서대로 평가하되 이미 실패한 점은 이후 검사에서 제외한다.
        """
        pts = np.atleast_2d(np.asarray(points, dtype=np.float64))
        valid = np.ones(pts.shape[0], dtype=bool)
        for image, mask in zip(self.images, self.masks):
            alive = np.flatnonzero(valid)
            if alive.size == 0:
                break
            subset = pts[alive]
            ok = image.is_inside_buffer(image.transform_point_to_continuous_index(subset))
            if mask is not None:
                checked = np.flatnonzero(ok)
                if checked.size:
                    inside = np.asarray(mask.is_inside(subset[checked]), dtype=bool)
                    ok[checked] = inside.reshape(-1)
            valid[alive] = ok
        return valid

    def __call__(self, point) -> bool:
        return self.is_valid(point)
