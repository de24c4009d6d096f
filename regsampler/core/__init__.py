"""샘플링 핵심 모듈"""

from .image import InputImage, SpatialRegion, bounding_region
from .masking import ImageMask, create_mask_from_image, get_mask_statistics
from .validity import SpatialValidityPredicate
from .interpolation import (
    BSplineInterpolator,
    LinearInterpolator,
    create_interpolator,
    warmup_numba_interp,
    check_interpolation_consistency,
    run_consistency_check,
)
from .sampler import (
    MultiInputRandomCoordinateSampler,
    SamplerSettings,
    SamplerState,
    create_sampler,
    create_sampler_from_parameters,
    register_sampler,
)

__all__ = [
    'InputImage',
    'SpatialRegion',
    'bounding_region',
    'ImageMask',
    'create_mask_from_image',
    'get_mask_statistics',
    'SpatialValidityPredicate',
    'BSplineInterpolator',
    'LinearInterpolator',
    'create_interpolator',
    'warmup_numba_interp',
    'check_interpolation_consistency',
    'run_consistency_check',
    'MultiInputRandomCoordinateSampler',
    'SamplerSettings',
    'SamplerState',
    'create_sampler',
    'create_sampler_from_parameters',
    'register_sampler',
]
