"""
입력 이미지 기하 정보 (origin, spacing, region)

좌표 규약: 모든 점/인덱스/spacing/origin은 numpy 배열 축 순서를 따른다.
    2D: (y, x),  3D: (z, y, x)

물리 좌표 p와 연속 인덱스 c의 관계 (축 정렬, 방향 행렬 없음):
    p = origin + spacing * c
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

import numpy as np


def _as_vector(values, dimension: int, name: str, fill: float) -> np.ndarray:
    if values is None:
        return np.full(dimension, fill, dtype=np.float64)
    vec = np.atleast_1d(np.asarray(values, dtype=np.float64))
    if vec.size == 1 and dimension > 1:
        vec = np.full(dimension, float(vec[0]))
    if vec.shape != (dimension,):
        raise ValueError(f"{name} 길이가 차원({dimension})과 다릅니다: {vec.shape}")
    return vec


@dataclass(frozen=True)
class SpatialRegion:
    """물리 좌표계의 축 정렬 박스 [lower, upper] (양 끝 포함)"""
    lower: np.ndarray
    upper: np.ndarray

    def __post_init__(self):
        lower = np.asarray(self.lower, dtype=np.float64).reshape(-1)
        upper = np.asarray(self.upper, dtype=np.float64).reshape(-1)
        if lower.shape != upper.shape:
            raise ValueError(f"lower/upper 크기 불일치: {lower.shape} vs {upper.shape}")
        object.__setattr__(self, 'lower', lower)
        object.__setattr__(self, 'upper', upper)

    @property
    def dimension(self) -> int:
        return self.lower.shape[0]

    @property
    def size(self) -> np.ndarray:
        return self.upper - self.lower

    @property
    def center(self) -> np.ndarray:
        return 0.5 * (self.lower + self.upper)

    @property
    def is_empty(self) -> bool:
        return bool(np.any(self.upper < self.lower))

    def contains(self, points: np.ndarray) -> np.ndarray:
        """points (N, D) 또는 (D,) → 박스 내부 여부"""
        pts = np.asarray(points, dtype=np.float64)
        inside = (pts >= self.lower) & (pts <= self.upper)
        return np.all(inside, axis=-1)

    def intersect(self, other: 'SpatialRegion') -> 'SpatialRegion':
        if other.dimension != self.dimension:
            raise ValueError(f"차원 불일치: {self.dimension} vs {other.dimension}")
        return SpatialRegion(np.maximum(self.lower, other.lower),
                             np.minimum(self.upper, other.upper))

    def clip_box(self, center: Sequence[float], size: Sequence[float]) -> 'SpatialRegion':
        """
        중심 center, 크기 size인 박스를 이 영역 안으로 밀어 넣는다.

        박스가 영역보다 큰 축은 영역 전체로 줄인다.
        """
        center = np.asarray(center, dtype=np.float64)
        size = np.minimum(np.asarray(size, dtype=np.float64), self.size)
        lower = center - 0.5 * size
        lower = np.clip(lower, self.lower, self.upper - size)
        return SpatialRegion(lower, lower + size)

    def __repr__(self) -> str:
        return f"SpatialRegion(lower={self.lower.tolist()}, upper={self.upper.tolist()})"


def bounding_region(regions: Iterable[SpatialRegion]) -> SpatialRegion:
    """여러 영역의 교집합 박스"""
    regions = list(regions)
    if not regions:
        raise ValueError("영역이 하나 이상 필요합니다")
    result = regions[0]
    for region in regions[1:]:
        result = result.intersect(region)
    return result


class InputImage:
    """
    강도 버퍼 + 축 정렬 기하 정보

    Args:
        array: D차원 강도 배열 (각 축 2 voxel 이상)
        origin: 인덱스 0의 물리 좌표 (None이면 0)
        spacing: voxel 간격 (None이면 1, 양수)
    """

    def __init__(self, array: np.ndarray,
                 origin: Optional[Sequence[float]] = None,
                 spacing: Optional[Sequence[float]] = None):
        data = np.asarray(array)
        if data.ndim < 1:
            raise ValueError("이미지는 1차원 이상이어야 합니다")
        if min(data.shape) < 2:
            raise ValueError(f"각 축은 2 voxel 이상이어야 합니다: {data.shape}")
        self.array = np.ascontiguousarray(data, dtype=np.float64)
        self.origin = _as_vector(origin, data.ndim, 'origin', 0.0)
        self.spacing = _as_vector(spacing, data.ndim, 'spacing', 1.0)
        if np.any(self.spacing <= 0):
            raise ValueError(f"spacing은 양수여야 합니다: {self.spacing.tolist()}")

    @property
    def dimension(self) -> int:
        return self.array.ndim

    @property
    def size(self) -> tuple:
        return self.array.shape

    @property
    def physical_extent(self) -> np.ndarray:
        """첫 voxel 중심부터 마지막 voxel 중심까지의 물리 길이"""
        return self.spacing * (np.asarray(self.size, dtype=np.float64) - 1.0)

    @property
    def region(self) -> SpatialRegion:
        return SpatialRegion(self.origin.copy(), self.origin + self.physical_extent)

    def transform_point_to_continuous_index(self, points: np.ndarray) -> np.ndarray:
        return (np.asarray(points, dtype=np.float64) - self.origin) / self.spacing

    def transform_continuous_index_to_point(self, cindices: np.ndarray) -> np.ndarray:
        return self.origin + self.spacing * np.asarray(cindices, dtype=np.float64)

    def is_inside_buffer(self, cindices: np.ndarray) -> np.ndarray:
        """연속 인덱스가 [0, size-1] 안인지 (축별 양 끝 포함)"""
        c = np.asarray(cindices, dtype=np.float64)
        upper = np.asarray(self.size, dtype=np.float64) - 1.0
        return np.all((c >= 0.0) & (c <= upper), axis=-1)

    def __repr__(self) -> str:
        return (f"InputImage(size={self.size}, origin={self.origin.tolist()}, "
                f"spacing={self.spacing.tolist()})")
