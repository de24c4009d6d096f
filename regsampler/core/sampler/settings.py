"""
샘플러 설정 (해상도 레벨 1개분)

한 번에 통째로 교체된다. 일부만 적용되는 경우는 없다.
"""

from dataclasses import dataclass, replace
from typing import Optional, Tuple

import numpy as np

from ...config.resolver import ResolutionParameterResolver
from ...errors import ConfigurationError
from ..image import InputImage
from ..interpolation import MAX_SPLINE_ORDER

PER_RESOLUTION = 'PerResolution'
PER_INVOCATION = 'PerInvocation'
REGION_REFRESH_POLICIES = (PER_RESOLUTION, PER_INVOCATION)


def default_sample_region_size(image: InputImage) -> Tuple[float, ...]:
    """
    기본 국소 창 크기 (물리 단위)

        size[i] = min(extent[i], max_j(extent[j] / 3))
    """
    extent = image.physical_extent
    third = float(np.max(extent / 3.0))
    return tuple(float(min(e, third)) for e in extent)


@dataclass(frozen=True)
class SamplerSettings:
    """Multi-input random coordinate 샘플러 설정"""
    number_of_samples: int = 5000
    interpolation_order: int = 1
    use_random_sample_region: bool = False
    sample_region_size: Optional[Tuple[float, ...]] = None
    max_attempts_factor: int = 10
    region_refresh: str = PER_RESOLUTION
    level: int = 0

    @classmethod
    def from_parameters(cls, resolver: ResolutionParameterResolver,
                        level: int, fixed_image: InputImage) -> 'SamplerSettings':
        """파라미터 맵에서 레벨 level의 설정을 해석"""
        default_size = default_sample_region_size(fixed_image)
        return cls(
            number_of_samples=resolver.resolve_int(
                'NumberOfSpatialSamples', level, 5000),
            interpolation_order=resolver.resolve_int(
                'FixedImageBSplineInterpolationOrder', level, 1),
            use_random_sample_region=resolver.resolve_bool(
                'UseRandomSampleRegion', level, False),
            sample_region_size=resolver.resolve_float_vector(
                'SampleRegionSize', level, fixed_image.dimension, default_size),
            max_attempts_factor=resolver.resolve_int(
                'MaximumNumberOfSamplingAttemptsFactor', level, 10),
            region_refresh=resolver.resolve_string(
                'SampleRegionRefresh', level, PER_RESOLUTION),
            level=level,
        )

    def with_defaults(self, fixed_image: InputImage) -> 'SamplerSettings':
        if self.sample_region_size is not None:
            return self
        return replace(self, sample_region_size=default_sample_region_size(fixed_image))

    def validate(self, dimension: int):
        """잘못된 값이면 ConfigurationError (원인 파라미터 이름 포함)"""
        if isinstance(self.number_of_samples, bool) or int(self.number_of_samples) != self.number_of_samples \
                or self.number_of_samples < 1:
            raise ConfigurationError(
                f"must be a positive integer, got {self.number_of_samples!r}",
                'NumberOfSpatialSamples')
        if isinstance(self.interpolation_order, bool) \
                or int(self.interpolation_order) != self.interpolation_order \
                or not 0 <= self.interpolation_order <= MAX_SPLINE_ORDER:
            raise ConfigurationError(
                f"must be an integer in [0, {MAX_SPLINE_ORDER}], "
                f"got {self.interpolation_order!r}",
                'FixedImageBSplineInterpolationOrder')
        if self.max_attempts_factor < 1:
            raise ConfigurationError(
                f"must be at least 1, got {self.max_attempts_factor!r}",
                'MaximumNumberOfSamplingAttemptsFactor')
        if self.region_refresh not in REGION_REFRESH_POLICIES:
            raise ConfigurationError(
                f"must be one of {REGION_REFRESH_POLICIES}, got {self.region_refresh!r}",
                'SampleRegionRefresh')
        if self.level < 0:
            raise ConfigurationError(f"level must be >= 0, got {self.level}")
        if self.sample_region_size is not None:
            size = tuple(self.sample_region_size)
            if len(size) != dimension:
                raise ConfigurationError(
                    f"expected {dimension} entries, got {len(size)}", 'SampleRegionSize')
            if any(not np.isfinite(s) or s <= 0 for s in size):
                raise ConfigurationError(
                    f"entries must be positive, got {list(size)}", 'SampleRegionSize')
        elif self.use_random_sample_region:
            raise ConfigurationError(
                "required when UseRandomSampleRegion is true", 'SampleRegionSize')
