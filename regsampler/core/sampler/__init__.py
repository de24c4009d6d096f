# regsampler/core/sampler/__init__.py

from .registry import (
    ComponentDescriptor,
    IMAGE_SAMPLERS,
    register_sampler,
    available_samplers,
    create_sampler,
    create_sampler_from_parameters,
)
from .settings import (
    SamplerSettings,
    default_sample_region_size,
    PER_RESOLUTION,
    PER_INVOCATION,
    REGION_REFRESH_POLICIES,
)
from .engine import (
    MultiInputRandomCoordinateSampler,
    RandomCoordinateStrategy,
    SamplerState,
)

__all__ = [
    'ComponentDescriptor',
    'IMAGE_SAMPLERS',
    'register_sampler',
    'available_samplers',
    'create_sampler',
    'create_sampler_from_parameters',
    'SamplerSettings',
    'default_sample_region_size',
    'PER_RESOLUTION',
    'PER_INVOCATION',
    'REGION_REFRESH_POLICIES',
    'MultiInputRandomCoordinateSampler',
    'RandomCoordinateStrategy',
    'SamplerState',
]
