"""
샘플 데이터 모델

ImageSample 한 개는 (물리 좌표, 연속 인덱스, 보간 강도값, 선택적 gradient).
SampleSequence는 샘플러 1회 호출의 결과로, 내부적으로 배열(N, D)을 보관하고
인덱싱 시 ImageSample을 만들어 돌려준다. 생성 후 수정 불가.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class ImageSample:
    """연속 좌표 샘플 1개"""
    point: Tuple[float, ...]
    continuous_index: Tuple[float, ...]
    value: float
    gradient: Optional[Tuple[float, ...]] = None

    def __str__(self) -> str:
        coords = ", ".join(f"{c:.3f}" for c in self.point)
        return f"({coords}) value: {self.value:.4f}"


def _readonly(array: np.ndarray) -> np.ndarray:
    array = np.array(array, dtype=np.float64, copy=True)
    array.flags.writeable = False
    return array


class SampleSequence(Sequence):
    """
    순서가 있는 샘플 묶음 (읽기 전용)

    Attributes:
        points: 물리 좌표 (N, D)
        continuous_indices: primary 이미지 기준 연속 인덱스 (N, D)
        values: 보간 강도값 (N,)
        gradients: 물리 좌표 기준 gradient (N, D) 또는 None
    """

    def __init__(self,
                 points: np.ndarray,
                 continuous_indices: np.ndarray,
                 values: np.ndarray,
                 gradients: Optional[np.ndarray] = None):
        points = np.asarray(points, dtype=np.float64)
        if points.ndim != 2:
            raise ValueError(f"points는 (N, D) 배열이어야 합니다: {points.shape}")
        n = points.shape[0]
        continuous_indices = np.asarray(continuous_indices, dtype=np.float64)
        values = np.asarray(values, dtype=np.float64)
        if continuous_indices.shape != points.shape or values.shape != (n,):
            raise ValueError(
                f"크기 불일치: points={points.shape}, "
                f"continuous_indices={continuous_indices.shape}, values={values.shape}")
        if gradients is not None:
            gradients = np.asarray(gradients, dtype=np.float64)
            if gradients.shape != points.shape:
                raise ValueError(
                    f"gradients 크기 불일치: {gradients.shape} vs {points.shape}")
            gradients = _readonly(gradients)

        self._points = _readonly(points)
        self._continuous_indices = _readonly(continuous_indices)
        self._values = _readonly(values)
        self._gradients = gradients

    @classmethod
    def empty(cls, dimension: int, with_gradient: bool = False) -> 'SampleSequence':
        zeros = np.empty((0, dimension), dtype=np.float64)
        return cls(zeros, zeros.copy(), np.empty(0, dtype=np.float64),
                   zeros.copy() if with_gradient else None)

    @property
    def points(self) -> np.ndarray:
        return self._points

    @property
    def continuous_indices(self) -> np.ndarray:
        return self._continuous_indices

    @property
    def values(self) -> np.ndarray:
        return self._values

    @property
    def gradients(self) -> Optional[np.ndarray]:
        return self._gradients

    @property
    def dimension(self) -> int:
        return self._points.shape[1]

    @property
    def has_gradients(self) -> bool:
        return self._gradients is not None

    def __len__(self) -> int:
        return self._points.shape[0]

    def __getitem__(self, index):
        if isinstance(index, slice):
            return SampleSequence(
                self._points[index], self._continuous_indices[index],
                self._values[index],
                None if self._gradients is None else self._gradients[index])
        gradient = None
        if self._gradients is not None:
            gradient = tuple(float(g) for g in self._gradients[index])
        return ImageSample(
            point=tuple(float(p) for p in self._points[index]),
            continuous_index=tuple(float(c) for c in self._continuous_indices[index]),
            value=float(self._values[index]),
            gradient=gradient,
        )

    def __repr__(self) -> str:
        return (f"SampleSequence(n={len(self)}, dimension={self.dimension}, "
                f"gradients={self.has_gradients})")


@dataclass
class SamplingStatistics:
    """generate_samples 1회 호출 통계"""
    requested: int
    accepted: int = 0
    attempts: int = 0
    rejected_by_region: int = 0
    rejected_by_interpolation: int = 0
    elapsed: float = 0.0

    @property
    def acceptance_ratio(self) -> float:
        if self.attempts == 0:
            return 0.0
        return self.accepted / self.attempts

    @property
    def success(self) -> bool:
        return self.accepted == self.requested
