"""
보간 일관성 검증 (1차 B-spline vs 다중선형)

1차 B-spline 보간기와 다중선형 기준 보간기는 값과 gradient가
허용 오차(기본 1e-3) 안에서 같아야 한다. 정의역 밖 좌표는
두 보간기 모두 undefined여야 한다.

평가 경로별 비용(값만 / 값+gradient)도 함께 측정한다.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np

from ...errors import InterpolationDomainError
from ..image import InputImage
from .interpolation import BSplineInterpolator, LinearInterpolator

_logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 1.0e-3

# 테스트 좌표 (x 우선 순서로 기록, 사용 시 numpy 축 순서로 뒤집음)
# 내부, 0 근처, 정수 격자점, 경계 밖 좌표를 포함
_TEST_INDICES_XFIRST = {
    2: [
        (0.1, 0.2), (3.4, 5.8), (4.0, 6.0), (2.1, 8.0),
        (-0.1, -0.1), (0.0, 0.0), (1.3, 1.0), (2.0, 5.7),
        (9.5, 9.1), (2.0, -0.1), (-0.1, 2.0), (12.7, 15.3),
    ],
    3: [
        (0.1, 0.2, 0.1), (3.4, 5.8, 4.7), (4.0, 6.0, 5.0), (2.1, 8.0, 3.4),
        (-0.1, -0.1, -0.1), (0.0, 0.0, 0.0), (1.3, 1.0, 1.4), (2.0, 5.7, 7.5),
        (9.5, 9.1, 9.3), (2.0, -0.1, 5.3), (-0.1, 2.0, 4.0), (12.7, 15.3, 14.1),
    ],
}


def default_test_indices(dimension: int) -> np.ndarray:
    """12개 고정 테스트 좌표 (numpy 축 순서, (12, D))"""
    if dimension not in _TEST_INDICES_XFIRST:
        raise ValueError(f"2D/3D만 지원합니다: {dimension}D")
    return np.asarray(_TEST_INDICES_XFIRST[dimension], dtype=np.float64)[:, ::-1].copy()


def make_random_test_image(dimension: int,
                           size: int = 10,
                           rng: Optional[np.random.Generator] = None) -> InputImage:
    """
    무작위 테스트 이미지

    강도 [0, 255], spacing U(0.5, 2.0), origin U(-1, 0)
    """
    if rng is None:
        rng = np.random.default_rng()
    spacing = rng.uniform(0.5, 2.0, size=dimension)
    origin = rng.uniform(-1.0, 0.0, size=dimension)
    array = rng.uniform(0.0, 255.0, size=(size,) * dimension)
    return InputImage(array, origin=origin, spacing=spacing)


@dataclass
class PointComparison:
    """좌표 1개 비교 결과"""
    continuous_index: tuple
    reference_defined: bool
    bspline_defined: bool
    reference_value: Optional[float] = None
    bspline_value: Optional[float] = None
    value_error: float = 0.0
    gradient_error: float = 0.0
    consistent: bool = True

    def __str__(self) -> str:
        c = ", ".join(f"{v:.2f}" for v in self.continuous_index)
        if not (self.reference_defined or self.bspline_defined):
            return f"({c}) undefined"
        mark = "OK" if self.consistent else "MISMATCH"
        return (f"({c}) linear={self.reference_value} bspline={self.bspline_value} "
                f"|dv|={self.value_error:.2e} |dg|={self.gradient_error:.2e} {mark}")


@dataclass
class ConsistencyReport:
    """일관성 검증 결과"""
    dimension: int
    tolerance: float
    comparisons: List[PointComparison] = field(default_factory=list)
    timings: Dict[str, float] = field(default_factory=dict)

    @property
    def passed(self) -> bool:
        return all(c.consistent for c in self.comparisons)

    @property
    def n_points(self) -> int:
        return len(self.comparisons)

    @property
    def n_undefined(self) -> int:
        return sum(1 for c in self.comparisons
                   if not (c.reference_defined or c.bspline_defined))

    @property
    def max_value_error(self) -> float:
        return max((c.value_error for c in self.comparisons), default=0.0)

    @property
    def max_gradient_error(self) -> float:
        return max((c.gradient_error for c in self.comparisons), default=0.0)


def _evaluate_or_none(interpolator, cindex):
    try:
        return interpolator.evaluate_at_continuous_index(cindex, compute_gradient=True)
    except InterpolationDomainError:
        return None


def check_interpolation_consistency(image: InputImage,
                                    indices: Optional[Sequence] = None,
                                    tolerance: float = DEFAULT_TOLERANCE
                                    ) -> ConsistencyReport:
    """
    1차 B-spline vs 다중선형 비교

    Args:
        image: 테스트 이미지
        indices: 연속 인덱스 (N, D). None이면 default_test_indices
        tolerance: 값 / gradient 크기 차이 허용 오차

    Returns:
        ConsistencyReport
    """
    if indices is None:
        indices = default_test_indices(image.dimension)
    indices = np.asarray(indices, dtype=np.float64)

    reference = LinearInterpolator(image)
    bspline = BSplineInterpolator(image, order=1)
    report = ConsistencyReport(dimension=image.dimension, tolerance=tolerance)

    for cindex in indices:
        ref = _evaluate_or_none(reference, cindex)
        bsp = _evaluate_or_none(bspline, cindex)
        comparison = PointComparison(
            continuous_index=tuple(float(v) for v in cindex),
            reference_defined=ref is not None,
            bspline_defined=bsp is not None,
        )
        if ref is not None and bsp is not None:
            comparison.reference_value = ref[0]
            comparison.bspline_value = bsp[0]
            comparison.value_error = abs(ref[0] - bsp[0])
            comparison.gradient_error = float(np.linalg.norm(ref[1] - bsp[1]))
            comparison.consistent = (comparison.value_error <= tolerance
                                     and comparison.gradient_error <= tolerance)
        else:
            # 한쪽만 정의되면 불일치
            comparison.consistent = (ref is None and bsp is None)
        report.comparisons.append(comparison)
        _logger.debug(str(comparison))

    if report.passed:
        _logger.info(f"보간 일관성 통과 ({image.dimension}D): "
                     f"{report.n_points}점, undefined {report.n_undefined}, "
                     f"max |dv|={report.max_value_error:.2e}, "
                     f"max |dg|={report.max_gradient_error:.2e}")
    else:
        n_bad = sum(1 for c in report.comparisons if not c.consistent)
        _logger.warning(f"보간 불일치 ({image.dimension}D): {n_bad}/{report.n_points}점")
    return report


def measure_evaluation_cost(interpolator, cindex, runs: int = 1000) -> Dict[str, float]:
    """
    평가 경로별 호출당 시간(초)

    Returns:
        {'value': 값만, 'value_and_gradient': 값+gradient}
    """
    c = np.asarray(cindex, dtype=np.float64).reshape(1, -1)
    timings = {}
    for key, compute_gradient in (('value', False), ('value_and_gradient', True)):
        interpolator.evaluate_many(c, compute_gradient)
        t0 = time.perf_counter()
        for _ in range(runs):
            interpolator.evaluate_many(c, compute_gradient)
        timings[key] = (time.perf_counter() - t0) / runs
    return timings


def run_consistency_check(dimension: int,
                          seed: Optional[int] = None,
                          runs: int = 1000,
                          tolerance: float = DEFAULT_TOLERANCE) -> ConsistencyReport:
    """무작위 이미지 생성 → 일관성 검증 → 비용 측정"""
    rng = np.random.default_rng(seed)
    image = make_random_test_image(dimension, rng=rng)
    report = check_interpolation_consistency(image, tolerance=tolerance)

    cindex = default_test_indices(dimension)[1]
    for name, interpolator in (('linear', LinearInterpolator(image)),
                               ('bspline', BSplineInterpolator(image, order=1))):
        for key, seconds in measure_evaluation_cost(interpolator, cindex, runs).items():
            report.timings[f"{name}_{key}"] = seconds
            _logger.info(f"{name} ({key}): {seconds * 1e6:.2f} us/call")
    return report
