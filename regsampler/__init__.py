"""다중 입력 무작위 연속 좌표 샘플링 패키지"""

from .errors import (
    SamplerError,
    ConfigurationError,
    SamplingExhausted,
    InterpolationDomainError,
)
from .models import ImageSample, SampleSequence, SamplingStatistics
from .config import ParameterMap, ResolutionParameterResolver
from .core import (
    InputImage,
    SpatialRegion,
    ImageMask,
    create_mask_from_image,
    get_mask_statistics,
    SpatialValidityPredicate,
    BSplineInterpolator,
    LinearInterpolator,
    create_interpolator,
    warmup_numba_interp,
    check_interpolation_consistency,
    run_consistency_check,
    MultiInputRandomCoordinateSampler,
    SamplerSettings,
    SamplerState,
    create_sampler,
    create_sampler_from_parameters,
    register_sampler,
)
from .batch import MultiResolutionSamplingDriver, spawn_seeds, seed_samplers, sample_in_parallel
from .utils.logger import setup_logger, set_log_level, logger

__version__ = "0.1.0"

__all__ = [
    # Errors
    'SamplerError',
    'ConfigurationError',
    'SamplingExhausted',
    'InterpolationDomainError',

    # Models
    'ImageSample',
    'SampleSequence',
    'SamplingStatistics',

    # Config
    'ParameterMap',
    'ResolutionParameterResolver',

    # Core
    'InputImage',
    'SpatialRegion',
    'ImageMask',
    'create_mask_from_image',
    'get_mask_statistics',
    'SpatialValidityPredicate',

    # Interpolation
    'BSplineInterpolator',
    'LinearInterpolator',
    'create_interpolator',
    'warmup_numba_interp',
    'check_interpolation_consistency',
    'run_consistency_check',

    # Sampler
    'MultiInputRandomCoordinateSampler',
    'SamplerSettings',
    'SamplerState',
    'create_sampler',
    'create_sampler_from_parameters',
    'register_sampler',

    # Batch
    'MultiResolutionSamplingDriver',
    'spawn_seeds',
    'seed_samplers',
    'sample_in_parallel',

    # Utils
    'setup_logger',
    'set_log_level',
    'logger',
]
