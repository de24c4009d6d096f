# regsampler/core/interpolation/__init__.py

from .interpolation import (
    BSplineInterpolator,
    LinearInterpolator,
    create_interpolator,
)
from .bspline_numba import MAX_SPLINE_ORDER, prefilter_image, warmup_numba_interp
from .consistency import (
    ConsistencyReport,
    PointComparison,
    check_interpolation_consistency,
    default_test_indices,
    make_random_test_image,
    measure_evaluation_cost,
    run_consistency_check,
)

__all__ = [
    'BSplineInterpolator',
    'LinearInterpolator',
    'create_interpolator',
    'MAX_SPLINE_ORDER',
    'prefilter_image',
    'warmup_numba_interp',
    # Consistency
    'ConsistencyReport',
    'PointComparison',
    'check_interpolation_consistency',
    'default_test_indices',
    'make_random_test_image',
    'measure_evaluation_cost',
    'run_consistency_check',
]
