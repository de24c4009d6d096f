"""
Numba B-spline 보간 모듈 (임의 차수 0~5, 임의 차원)

구현 구조:
    1. Prefilter (spline_filter): scipy 재사용, 이미지당 1회
    2. 보간 평가: Numba nopython, 샘플 후보마다 호출되는 핵심 경로

차수별 동작:
    order 0  최근접 이웃 (1-tap)
    order 1  다중선형 (2-tap), prefilter 불필요
    order≥2  B-spline 계수 (scipy spline_filter, mode='mirror')

정의역:
    order 0, 1  축별 연속 인덱스 [0, N-1] (양 끝 포함)
    order ≥ 2   basis support의 모든 tap이 버퍼 [0, N-1] 안에 있어야 함

gradient는 연속 인덱스 미분을 spacing으로 나눈 물리 좌표 기준 값.

References:
    - Unser, M. (1993). "B-spline signal processing: Part I/II"
      IEEE Trans. Signal Processing.
    - Thévenaz, P., Blu, T., Unser, M. (2000). "Interpolation revisited"
      IEEE Trans. Medical Imaging.
"""

import numpy as np
from numba import jit, float64, int64
from scipy.ndimage import spline_filter

MAX_SPLINE_ORDER = 5


# =============================================================================
#  1. B-spline Basis Functions (1D, centered)
# =============================================================================

@jit(float64(int64, float64), nopython=True, cache=True)
def _bspline_basis(order, x):
    """
    중심 B-spline basis βⁿ(x)

    Support: [-(n+1)/2, (n+1)/2]

    truncated power 표현:
        βⁿ(x) = 1/n! Σ_{k=0}^{n+1} (-1)^k C(n+1, k) (x + (n+1)/2 - k)₊ⁿ

    β⁰는 반열린 구간 [-1/2, 1/2)에서 1 (정수+0.5 경계를 위쪽 voxel로).
    """
    if order == 0:
        if -0.5 <= x < 0.5:
            return 1.0
        return 0.0

    half = 0.5 * (order + 1)
    if abs(x) >= half:
        return 0.0

    total = 0.0
    binom = 1.0
    sign = 1.0
    for k in range(order + 2):
        t = x + half - k
        if t > 0.0:
            total += sign * binom * t ** order
        binom = binom * (order + 1 - k) / (k + 1)
        sign = -sign

    factorial = 1.0
    for i in range(2, order + 1):
        factorial *= i
    return total / factorial


@jit(float64(int64, float64), nopython=True, cache=True)
def _bspline_basis_derivative(order, x):
    """
    dβⁿ/dx = βⁿ⁻¹(x + 1/2) - βⁿ⁻¹(x - 1/2)

    β⁰는 구간별 상수이므로 미분 0.
    """
    if order == 0:
        return 0.0
    return (_bspline_basis(order - 1, x + 0.5)
            - _bspline_basis(order - 1, x - 0.5))


# =============================================================================
#  2. Support 계산 / 경계 인덱스 미러링
# =============================================================================

@jit(int64(int64, float64), nopython=True, cache=True)
def _support_start(order, c):
    """
    basis support 첫 tap 인덱스

        홀수 차수: floor(c) - (n-1)/2
        짝수 차수: floor(c + 1/2) - n/2
    """
    if order % 2 == 1:
        return int64(np.floor(c)) - (order - 1) // 2
    return int64(np.floor(c + 0.5)) - order // 2


@jit(int64(int64, int64), nopython=True, cache=True)
def _mirror_index(idx, n):
    """
    Mirror boundary index (scipy mode='mirror' 호환)

    규칙: index < 0 → -index,  index ≥ N → 2*(N-1) - index
    (주기 2*(N-1)로 반복)
    """
    if n == 1:
        return 0
    period = 2 * (n - 1)
    idx = abs(idx) % period
    if idx >= n:
        idx = period - idx
    return idx


@jit(nopython=True, cache=True)
def _is_inside_domain(order, shape, c):
    """연속 인덱스 c가 보간 정의역 안인지"""
    for d in range(shape.shape[0]):
        # NaN은 두 비교 모두 False → 외부
        if not (c[d] >= 0.0 and c[d] <= shape[d] - 1):
            return False
        if order >= 2:
            start = _support_start(order, c[d])
            if start < 0 or start + order > shape[d] - 1:
                return False
    return True


# =============================================================================
#  3. Prefilter (scipy 위임)
# =============================================================================

def prefilter_image(image, order=1):
    """
    B-spline prefilter 적용 (scipy 위임)

    이미지 → B-spline 계수 변환. 이미지당 1회만 호출.
    order 0, 1은 계수 = 원본 이미지.

    Args:
        image: float64 배열 (임의 차원)
        order: 0 ~ 5

    Returns:
        B-spline 계수 배열 (입력과 동일 shape, C-contiguous)
    """
    if order < 0 or order > MAX_SPLINE_ORDER:
        raise ValueError(f"order must be in [0, {MAX_SPLINE_ORDER}]: {order}")
    data = np.asarray(image, dtype=np.float64)
    if order <= 1:
        return np.array(data, dtype=np.float64, order='C', copy=True)
    return np.ascontiguousarray(spline_filter(data, order=order, mode='mirror'))


# =============================================================================
#  4. 단일 좌표 평가 (N차원, separable basis)
# =============================================================================

@jit(nopython=True, cache=True)
def _evaluate_point(coeffs_flat, shape, strides, order, c, spacing,
                    compute_grad, grad_out):
    """
    단일 연속 인덱스에서 값(및 gradient) 계산

    (n+1)^D 이웃 계수에 대해 축별 1D 가중치를 곱해 누적한다.
    이웃 인덱스는 odometer 방식으로 순회 (차원 수 무관).

    Args:
        coeffs_flat: C-order로 펼친 계수 배열
        shape, strides: 축별 크기 / 원소 단위 stride (int64)
        order: B-spline 차수
        c: 연속 인덱스 (D,)
        spacing: 축별 spacing (D,)
        compute_grad: True면 grad_out에 물리 좌표 gradient 기록
        grad_out: (D,) 출력 버퍼

    Returns:
        보간값
    """
    ndim = shape.shape[0]
    taps = order + 1

    weights = np.empty((ndim, taps), dtype=np.float64)
    dweights = np.empty((ndim, taps), dtype=np.float64)
    offsets = np.empty((ndim, taps), dtype=np.int64)

    for d in range(ndim):
        start = _support_start(order, c[d])
        for j in range(taps):
            idx = start + j
            u = c[d] - idx
            weights[d, j] = _bspline_basis(order, u)
            if compute_grad:
                dweights[d, j] = _bspline_basis_derivative(order, u)
            offsets[d, j] = _mirror_index(idx, shape[d]) * strides[d]

    for g in range(ndim):
        grad_out[g] = 0.0

    counter = np.zeros(ndim, dtype=np.int64)
    value = 0.0
    total = taps ** ndim

    for _ in range(total):
        flat = 0
        w = 1.0
        for d in range(ndim):
            flat += offsets[d, counter[d]]
            w *= weights[d, counter[d]]
        coef = coeffs_flat[flat]
        value += w * coef

        if compute_grad:
            for g in range(ndim):
                dw = 1.0
                for d in range(ndim):
                    if d == g:
                        dw *= dweights[d, counter[d]]
                    else:
                        dw *= weights[d, counter[d]]
                grad_out[g] += dw * coef

        # odometer 증가 (마지막 축이 가장 빠름)
        d = ndim - 1
        while d >= 0:
            counter[d] += 1
            if counter[d] < taps:
                break
            counter[d] = 0
            d -= 1

    if compute_grad:
        for g in range(ndim):
            grad_out[g] /= spacing[g]

    return value


# =============================================================================
#  5. 배치 평가 (다수 좌표)
# =============================================================================

@jit(nopython=True, cache=True)
def evaluate_batch(coeffs_flat, shape, strides, order, cindices, spacing,
                   compute_grad):
    """
    다수 연속 인덱스 보간 (순차)

    정의역 밖 좌표는 값/gradient를 NaN으로 두고 defined=False.

    Args:
        cindices: 연속 인덱스 (N, D)

    Returns:
        (values (N,), gradients (N, D), defined (N,))
    """
    n = cindices.shape[0]
    ndim = shape.shape[0]
    values = np.empty(n, dtype=np.float64)
    gradients = np.empty((n, ndim), dtype=np.float64)
    defined = np.empty(n, dtype=np.bool_)
    grad = np.empty(ndim, dtype=np.float64)

    for i in range(n):
        c = cindices[i]
        if _is_inside_domain(order, shape, c):
            values[i] = _evaluate_point(coeffs_flat, shape, strides, order,
                                        c, spacing, compute_grad, grad)
            defined[i] = True
            for d in range(ndim):
                gradients[i, d] = grad[d] if compute_grad else np.nan
        else:
            values[i] = np.nan
            defined[i] = False
            for d in range(ndim):
                gradients[i, d] = np.nan

    return values, gradients, defined


@jit(nopython=True, cache=True)
def is_inside_batch(order, shape, cindices):
    """배치 정의역 체크 → (N,) bool"""
    n = cindices.shape[0]
    result = np.empty(n, dtype=np.bool_)
    for i in range(n):
        result[i] = _is_inside_domain(order, shape, cindices[i])
    return result


# =============================================================================
#  6. Numba JIT 워밍업
# =============================================================================

def warmup_numba_interp():
    """Numba JIT 컴파일 워밍업 (2D, 3D / order 1, 3)"""
    for shape_tuple in ((8, 8), (6, 6, 6)):
        dummy = np.random.rand(*shape_tuple)
        shape = np.asarray(shape_tuple, dtype=np.int64)
        spacing = np.ones(len(shape_tuple), dtype=np.float64)
        c = np.full((2, len(shape_tuple)), 3.3, dtype=np.float64)
        for order in (1, 3):
            coeffs = prefilter_image(dummy, order=order)
            strides = np.asarray(coeffs.strides, dtype=np.int64) // coeffs.itemsize
            evaluate_batch(coeffs.ravel(), shape, strides, order, c, spacing, True)
            evaluate_batch(coeffs.ravel(), shape, strides, order, c, spacing, False)
            is_inside_batch(order, shape, c)
