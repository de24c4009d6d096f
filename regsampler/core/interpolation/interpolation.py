"""
연속 좌표 보간기

BSplineInterpolator
    임의 차수(0~5) B-spline. 생성 시 spline 계수를 사전 계산(precompute)하여
    이후 보간 호출에서 중복 계산을 제거한다. 평가는 Numba 커널.

LinearInterpolator
    다중선형 직접 평가 (numpy). 1차 B-spline과 일치해야 하는 기준(reference) 구현.

두 보간기의 정의역 밖 좌표 정책은 같다:
    evaluate_many          → 값/gradient NaN, defined=False ("undefined" sentinel)
    evaluate, evaluate_at_continuous_index → InterpolationDomainError
"""

import itertools
from typing import Optional, Tuple

import numpy as np

from ...errors import InterpolationDomainError
from ..image import InputImage
from .bspline_numba import (
    MAX_SPLINE_ORDER,
    prefilter_image,
    evaluate_batch,
    is_inside_batch,
)


def _as_index_array(cindices, dimension: int) -> np.ndarray:
    c = np.asarray(cindices, dtype=np.float64)
    if c.ndim == 1:
        c = c.reshape(1, -1)
    if c.ndim != 2 or c.shape[1] != dimension:
        raise ValueError(f"연속 인덱스는 (N, {dimension}) 배열이어야 합니다: {c.shape}")
    return np.ascontiguousarray(c)


class _InterpolatorBase:
    """공통 API: 단일 좌표 평가는 evaluate_many 위에 구현"""

    order = 1

    def __init__(self, image: InputImage):
        self.image = image

    @property
    def dimension(self) -> int:
        return self.image.dimension

    def evaluate_many(self, cindices, compute_gradient: bool = False):
        raise NotImplementedError

    def is_inside(self, cindices) -> np.ndarray:
        raise NotImplementedError

    def evaluate_at_continuous_index(self, cindex, compute_gradient: bool = False
                                     ) -> Tuple[float, Optional[np.ndarray]]:
        c = _as_index_array(cindex, self.dimension)
        if c.shape[0] != 1:
            raise ValueError(f"단일 좌표만 허용됩니다: {c.shape}")
        values, gradients, defined = self.evaluate_many(c, compute_gradient)
        if not defined[0]:
            raise InterpolationDomainError(c[0], self.order)
        gradient = gradients[0] if compute_gradient else None
        return float(values[0]), gradient

    def evaluate(self, point, compute_gradient: bool = False
                 ) -> Tuple[float, Optional[np.ndarray]]:
        """물리 좌표에서 평가"""
        cindex = self.image.transform_point_to_continuous_index(point)
        return self.evaluate_at_continuous_index(cindex, compute_gradient)

    def __call__(self, cindex) -> float:
        return self.evaluate_at_continuous_index(cindex)[0]


class BSplineInterpolator(_InterpolatorBase):
    """
    B-spline 보간기 (order 0 ~ 5)

    Args:
        image: 입력 이미지
        order: B-spline 차수. 0=최근접, 1=다중선형, 2~5=고차 (support margin 필요)
    """

    def __init__(self, image: InputImage, order: int = 1):
        if isinstance(order, bool) or int(order) != order:
            raise ValueError(f"order must be an integer: {order!r}")
        order = int(order)
        if order < 0 or order > MAX_SPLINE_ORDER:
            raise ValueError(f"order must be in [0, {MAX_SPLINE_ORDER}]: {order}")
        super().__init__(image)
        self.order = order

        self._coeffs = prefilter_image(image.array, order=order)
        self._coeffs_flat = self._coeffs.ravel()
        self._shape = np.asarray(self._coeffs.shape, dtype=np.int64)
        self._strides = (np.asarray(self._coeffs.strides, dtype=np.int64)
                         // self._coeffs.itemsize)
        self._spacing = np.ascontiguousarray(image.spacing, dtype=np.float64)

    @property
    def coefficients(self) -> np.ndarray:
        return self._coeffs

    def is_inside(self, cindices) -> np.ndarray:
        c = _as_index_array(cindices, self.dimension)
        return is_inside_batch(self.order, self._shape, c)

    def evaluate_many(self, cindices, compute_gradient: bool = False):
        """
        다수 연속 인덱스 보간

        Returns:
            values (N,), gradients (N, D) 또는 None, defined (N,)
        """
        c = _as_index_array(cindices, self.dimension)
        values, gradients, defined = evaluate_batch(
            self._coeffs_flat, self._shape, self._strides, self.order,
            c, self._spacing, bool(compute_gradient))
        return values, (gradients if compute_gradient else None), defined

    def __repr__(self) -> str:
        return f"BSplineInterpolator(order={self.order}, image={self.image!r})"


class LinearInterpolator(_InterpolatorBase):
    """
    다중선형 기준 보간기

    2^D 꼭짓점 가중합으로 값과 gradient를 직접 계산한다.
    상단 경계(c = N-1)에서는 이웃을 N-2로 반사 (가중치 0, gradient만 기여).
    """

    order = 1

    def __init__(self, image: InputImage):
        super().__init__(image)
        self._upper = np.asarray(image.size, dtype=np.float64) - 1.0

    def is_inside(self, cindices) -> np.ndarray:
        c = _as_index_array(cindices, self.dimension)
        with np.errstate(invalid='ignore'):
            return np.all((c >= 0.0) & (c <= self._upper), axis=1)

    def evaluate_many(self, cindices, compute_gradient: bool = False):
        c = _as_index_array(cindices, self.dimension)
        n, ndim = c.shape
        defined = self.is_inside(c)

        safe = np.where(defined[:, None], c, 0.0)
        i0 = np.floor(safe).astype(np.int64)
        frac = safe - i0
        size = np.asarray(self.image.size, dtype=np.int64)
        i1 = np.where(i0 + 1 <= size - 1, i0 + 1, i0 - 1)

        data = self.image.array
        values = np.zeros(n, dtype=np.float64)
        gradients = np.zeros((n, ndim), dtype=np.float64)

        for corner in itertools.product((0, 1), repeat=ndim):
            index = tuple(i1[:, d] if bit else i0[:, d]
                          for d, bit in enumerate(corner))
            coef = data[index]
            w_axes = [frac[:, d] if bit else 1.0 - frac[:, d]
                      for d, bit in enumerate(corner)]
            values += np.prod(w_axes, axis=0) * coef

            if compute_gradient:
                for g in range(ndim):
                    dw = np.ones(n, dtype=np.float64) if corner[g] else -np.ones(n)
                    for d in range(ndim):
                        if d != g:
                            dw = dw * w_axes[d]
                    gradients[:, g] += dw * coef

        gradients /= self.image.spacing
        values[~defined] = np.nan
        gradients[~defined] = np.nan
        return values, (gradients if compute_gradient else None), defined

    def __repr__(self) -> str:
        return f"LinearInterpolator(image={self.image!r})"


def create_interpolator(image: InputImage, order: int = 1) -> BSplineInterpolator:
    return BSplineInterpolator(image, order=order)
