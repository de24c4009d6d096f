"""
마스크 모듈 (Mask Provider)

샘플링 가능 영역을 물리 좌표 술어(is_inside)로 제공한다.
is_inside(points) -> bool 배열 메서드만 있으면 어떤 객체든 마스크로 쓸 수 있다.
"""

import numpy as np
import cv2
from typing import Optional, Sequence

from .image import InputImage, _as_vector


class ImageMask:
    """
    이진 마스크 이미지 기반 공간 술어

    연속 인덱스를 가장 가까운 voxel로 반올림하여 값이 0이 아니면 내부.
    버퍼 밖은 항상 외부.
    """

    def __init__(self, array: np.ndarray,
                 origin: Optional[Sequence[float]] = None,
                 spacing: Optional[Sequence[float]] = None):
        data = np.asarray(array)
        if data.ndim < 1:
            raise ValueError("마스크는 1차원 이상이어야 합니다")
        self.array = np.ascontiguousarray(data != 0)
        self.origin = _as_vector(origin, data.ndim, 'origin', 0.0)
        self.spacing = _as_vector(spacing, data.ndim, 'spacing', 1.0)

    @classmethod
    def from_image(cls, image: InputImage, array: np.ndarray) -> 'ImageMask':
        """입력 이미지와 같은 기하 정보를 쓰는 마스크"""
        if np.shape(array) != image.size:
            raise ValueError(f"마스크 크기 불일치: {np.shape(array)} vs {image.size}")
        return cls(array, origin=image.origin, spacing=image.spacing)

    @property
    def dimension(self) -> int:
        return self.array.ndim

    def is_inside(self, points: np.ndarray) -> np.ndarray:
        pts = np.atleast_2d(np.asarray(points, dtype=np.float64))
        idx = np.floor((pts - self.origin) / self.spacing + 0.5).astype(np.int64)
        shape = np.asarray(self.array.shape, dtype=np.int64)
        in_buffer = np.all((idx >= 0) & (idx < shape), axis=1)
        result = np.zeros(pts.shape[0], dtype=bool)
        if np.any(in_buffer):
            valid = idx[in_buffer]
            result[in_buffer] = self.array[tuple(valid.T)]
        if np.ndim(points) == 1:
            return result[0]
        return result


def create_mask_from_image(image: InputImage,
                           threshold: float,
                           min_area: int = 0,
                           morph_size: int = 0) -> ImageMask:
    """
    2D 이미지 강도 기반 포함 마스크

    강도가 threshold 초과인 픽셀을 포함(1)으로 판정한 뒤
    모폴로지로 경계를 정리하고, min_area 미만 영역은 노이즈로 제거.

    Parameters
    ----------
    threshold : float
        이 값 이하 픽셀은 배경으로 판정
    min_area : int
        포함 영역으로 인정할 최소 면적(px)
    morph_size : int
        모폴로지 커널 크기 (0이면 생략)
    """
    if image.dimension != 2:
        raise ValueError(f"create_mask_from_image는 2D 전용입니다: {image.dimension}D")

    mask = np.where(image.array > threshold, 255, 0).astype(np.uint8)

    if morph_size > 0:
        kernel = cv2.getStructuringElement(cv2.MORPH_ELLIPSE,
                                           (morph_size, morph_size))
        # close: 내부 작은 구멍 메움, open: 작은 돌기 제거
        mask = cv2.morphologyEx(mask, cv2.MORPH_CLOSE, kernel)
        mask = cv2.morphologyEx(mask, cv2.MORPH_OPEN, kernel)

    if min_area > 0:
        contours, _ = cv2.findContours(
            mask, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE
        )
        filtered = np.zeros_like(mask)
        for cnt in contours:
            if cv2.contourArea(cnt) >= min_area:
                cv2.drawContours(filtered, [cnt], -1, 255, cv2.FILLED)
        mask = cv2.bitwise_and(mask, filtered)

    return ImageMask.from_image(image, mask)


def get_mask_statistics(mask: ImageMask) -> dict:
    """마스크 통계 정보"""
    total = mask.array.size
    inside = int(np.count_nonzero(mask.array))
    return {
        'total_voxels': total,
        'inside_voxels': inside,
        'outside_voxels': total - inside,
        'coverage_ratio': inside / total if total > 0 else 0
    }
