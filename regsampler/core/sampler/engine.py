"""
Multi-input random coordinate 샘플러

모든 입력 이미지의 영역/마스크를 동시에 만족하는 연속 좌표(서브 voxel)를
무작위로 뽑고, 고정(primary) 이미지를 B-spline으로 보간하여 샘플을 만든다.

알고리즘 (샘플 1개당):
    1. 추출 영역: 전체 교집합 박스, 또는 국소 창(UseRandomSampleRegion)
    2. 축별 독립 균등 분포로 후보 점 추출
    3. 유효성 술어(모든 이미지 영역 + 마스크) 검사, 실패 시 재추출
    4. 총 시도 수가 (계수 × 요청 수)를 넘으면 SamplingExhausted
    5. primary 이미지 보간, 정의역 밖(undefined)이면 재추출
    6. 요청 수를 채울 때까지 반복

상태:
    UNINITIALIZED → CONFIGURED(level) → SAMPLING → CONFIGURED(level+1) → … → FINISHED

한 인스턴스의 상태(설정, 진행 중 샘플)는 스레드 간에 공유하지 않는다.
입력 이미지/마스크는 읽기 전용이라 여러 인스턴스가 공유해도 된다.
"""

import enum
import logging
import time
from typing import Optional, Sequence

import numpy as np

from ...config.parameters import ParameterMap
from ...config.resolver import ResolutionParameterResolver
from ...errors import ConfigurationError, SamplingExhausted
from ...models.samples import SampleSequence, SamplingStatistics
from ..image import InputImage, SpatialRegion, bounding_region
from ..interpolation import BSplineInterpolator
from ..validity import SpatialValidityPredicate
from .registry import ComponentDescriptor, register_sampler
from .settings import PER_INVOCATION, SamplerSettings

_logger = logging.getLogger(__name__)

# 후보 블록 크기 범위 (벡터화 추출 단위)
_MIN_BLOCK = 64
_MAX_BLOCK = 65536

# 이 비율 미만이면 경고 (마스크가 너무 좁음)
_LOW_ACCEPTANCE_RATIO = 0.2


class SamplerState(enum.Enum):
    UNINITIALIZED = 'uninitialized'
    CONFIGURED = 'configured'
    SAMPLING = 'sampling'
    FINISHED = 'finished'


class RandomCoordinateStrategy:
    """
    거부 샘플링 전략 (상태 없음)

    Args:
        predicate: 다중 입력 유효성 술어
        interpolator: primary 이미지 보간기
        primary_image: 보간/연속 인덱스 기준 이미지
    """

    def __init__(self, predicate: SpatialValidityPredicate,
                 interpolator: BSplineInterpolator,
                 primary_image: InputImage):
        self.predicate = predicate
        self.interpolator = interpolator
        self.primary_image = primary_image

    @staticmethod
    def draw_window(rng: np.random.Generator, bounds: SpatialRegion,
                    size: Sequence[float]) -> SpatialRegion:
        """bounds 안에서 중심을 균등 추출한 국소 창 (bounds 밖으로 나가지 않게 이동)"""
        center = rng.uniform(bounds.lower, bounds.upper)
        return bounds.clip_box(center, size)

    def sample(self, rng: np.random.Generator, region: SpatialRegion,
               count: int, max_attempts: int, compute_gradient: bool,
               stats: SamplingStatistics) -> SampleSequence:
        """
        region 안에서 count개 샘플 추출

        후보는 블록 단위로 뽑지만 시도 수는 요청을 채운 후보까지만 센다.
        시도 수가 max_attempts에 닿으면 SamplingExhausted (부분 결과 없음).
        """
        dimension = region.dimension
        if count == 0:
            return SampleSequence.empty(dimension, compute_gradient)

        points = []
        cindices = []
        values = []
        gradients = []
        accepted = 0

        while accepted < count:
            budget = max_attempts - stats.attempts
            if budget <= 0:
                stats.accepted = accepted
                raise SamplingExhausted(count, accepted, stats.attempts)

            need = count - accepted
            block = int(min(max(2 * need, _MIN_BLOCK), _MAX_BLOCK, budget))
            candidates = rng.uniform(region.lower, region.upper,
                                     size=(block, dimension))

            valid = self.predicate.is_valid_many(candidates)
            cidx = self.primary_image.transform_point_to_continuous_index(candidates)

            defined = np.zeros(block, dtype=bool)
            block_values = np.full(block, np.nan)
            block_grads = np.full((block, dimension), np.nan)
            valid_idx = np.flatnonzero(valid)
            if valid_idx.size:
                v, g, d = self.interpolator.evaluate_many(cidx[valid_idx], compute_gradient)
                defined[valid_idx] = d
                block_values[valid_idx] = v
                if compute_gradient:
                    block_grads[valid_idx] = g

            ok_idx = np.flatnonzero(valid & defined)
            if ok_idx.size >= need:
                take = ok_idx[:need]
                used = int(take[-1]) + 1
            else:
                take = ok_idx
                used = block

            stats.attempts += used
            stats.rejected_by_region += int(np.count_nonzero(~valid[:used]))
            stats.rejected_by_interpolation += int(
                np.count_nonzero(valid[:used] & ~defined[:used]))

            points.append(candidates[take])
            cindices.append(cidx[take])
            values.append(block_values[take])
            if compute_gradient:
                gradients.append(block_grads[take])
            accepted += take.size

        stats.accepted = accepted
        return SampleSequence(
            np.concatenate(points),
            np.concatenate(cindices),
            np.concatenate(values),
            np.concatenate(gradients) if compute_gradient else None,
        )


@register_sampler('MultiInputRandomCoordinate')
class MultiInputRandomCoordinateSampler:
    """
    다중 입력 무작위 연속 좌표 샘플러

    Usage:
        sampler = MultiInputRandomCoordinateSampler([fixed, feature], seed=42)
        sampler.before_each_resolution(parameter_map, level=0)
        samples = sampler.generate_samples()

    Args:
        images: 입력 이미지 목록. primary_index 이미지가 보간 대상(고정 이미지)
        masks: 이미지별 마스크 목록 (None 허용)
        primary_index: 보간 대상 이미지 위치
        seed: 난수 시드 (None이면 OS 엔트로피)
    """

    descriptor = ComponentDescriptor(
        'MultiInputRandomCoordinate',
        'Random sub-voxel coordinates inside the regions and masks of all input images')

    def __init__(self, images: Sequence[InputImage],
                 masks: Optional[Sequence] = None,
                 primary_index: int = 0,
                 seed=None):
        self.predicate = SpatialValidityPredicate(images, masks)
        if not 0 <= primary_index < len(self.predicate.images):
            raise ValueError(f"primary_index 범위 밖: {primary_index}")
        self.primary_index = primary_index

        self._bounds = bounding_region(image.region for image in self.predicate.images)
        if self._bounds.is_empty:
            raise ConfigurationError("input image regions do not overlap")

        self._rng = np.random.default_rng(seed)
        self._state = SamplerState.UNINITIALIZED
        self._settings: Optional[SamplerSettings] = None
        self._strategy: Optional[RandomCoordinateStrategy] = None
        self._window: Optional[SpatialRegion] = None
        self.last_statistics: Optional[SamplingStatistics] = None

    # ----- 속성 -----

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def state(self) -> SamplerState:
        return self._state

    @property
    def settings(self) -> Optional[SamplerSettings]:
        return self._settings

    @property
    def fixed_image(self) -> InputImage:
        return self.predicate.images[self.primary_index]

    @property
    def dimension(self) -> int:
        return self.predicate.dimension

    @property
    def bounding_region(self) -> SpatialRegion:
        """모든 입력 이미지 영역의 교집합"""
        return self._bounds

    @property
    def sample_region(self) -> Optional[SpatialRegion]:
        """현재 추출 영역 (국소 창 또는 교집합 전체)"""
        return self._window

    @property
    def interpolator(self) -> Optional[BSplineInterpolator]:
        return None if self._strategy is None else self._strategy.interpolator

    def set_seed(self, seed):
        """난수 시드 재설정 (재현성)"""
        self._rng = np.random.default_rng(seed)

    # ----- 설정 -----

    def before_each_resolution(self, parameter_map: ParameterMap, level: int):
        """해상도 레벨 시작 전 호출: 샘플 수, 보간 차수, 국소 창 설정"""
        resolver = ResolutionParameterResolver(parameter_map)
        settings = SamplerSettings.from_parameters(resolver, level, self.fixed_image)
        self.configure(settings)

    def configure(self, settings: SamplerSettings):
        """
        설정 전체 교체

        새 설정/보간기/창을 모두 만든 뒤에 교체하므로
        ConfigurationError가 나면 이전 설정이 그대로 남는다.
        """
        if self._state is SamplerState.FINISHED:
            raise ConfigurationError("sampler is finished and cannot be reconfigured")
        if self._state is SamplerState.SAMPLING:
            raise ConfigurationError("cannot reconfigure while sampling")

        settings = settings.with_defaults(self.fixed_image)
        settings.validate(self.dimension)

        current = self.interpolator
        if current is not None and current.order == settings.interpolation_order:
            interpolator = current
        else:
            interpolator = BSplineInterpolator(self.fixed_image,
                                               order=settings.interpolation_order)
        strategy = RandomCoordinateStrategy(self.predicate, interpolator, self.fixed_image)

        if settings.use_random_sample_region:
            window = strategy.draw_window(self._rng, self._bounds,
                                          settings.sample_region_size)
        else:
            window = self._bounds

        self._settings = settings
        self._strategy = strategy
        self._window = window
        self._state = SamplerState.CONFIGURED

        _logger.info(
            f"샘플러 설정 (level {settings.level}): samples={settings.number_of_samples}, "
            f"order={settings.interpolation_order}, "
            f"random_region={settings.use_random_sample_region}"
            + (f" size={list(settings.sample_region_size)} ({settings.region_refresh})"
               if settings.use_random_sample_region else ""))

    # ----- 샘플링 -----

    def generate_samples(self, count: Optional[int] = None,
                         compute_gradient: bool = False) -> SampleSequence:
        """
        샘플 추출

        Args:
            count: 요청 샘플 수 (None이면 설정된 NumberOfSpatialSamples)
            compute_gradient: True면 샘플별 물리 좌표 gradient 포함

        Returns:
            SampleSequence (길이 == count)

        Raises:
            ConfigurationError: configure 전 호출, 또는 finish 후 호출
            SamplingExhausted: 시도 한도 내에 count개를 채우지 못함
        """
        if self._state is SamplerState.UNINITIALIZED:
            raise ConfigurationError("generate_samples called before configure")
        if self._state is SamplerState.FINISHED:
            raise ConfigurationError("generate_samples called after finish")
        if self._state is SamplerState.SAMPLING:
            raise ConfigurationError("generate_samples is already running on this sampler")

        settings = self._settings
        if count is None:
            count = settings.number_of_samples
        if isinstance(count, bool) or int(count) != count or count < 0:
            raise ValueError(f"count는 0 이상의 정수여야 합니다: {count!r}")
        count = int(count)

        stats = SamplingStatistics(requested=count)
        self.last_statistics = stats
        self._state = SamplerState.SAMPLING
        t0 = time.perf_counter()
        try:
            if settings.use_random_sample_region and settings.region_refresh == PER_INVOCATION:
                self._window = self._strategy.draw_window(
                    self._rng, self._bounds, settings.sample_region_size)
                _logger.debug(f"국소 창 갱신: {self._window}")

            max_attempts = settings.max_attempts_factor * count
            samples = self._strategy.sample(self._rng, self._window, count,
                                            max_attempts, compute_gradient, stats)
        except SamplingExhausted:
            stats.elapsed = time.perf_counter() - t0
            _logger.error(
                f"샘플 부족 (level {settings.level}): {stats.accepted}/{count}, "
                f"시도 {stats.attempts}회 (한도 {settings.max_attempts_factor}×{count})")
            raise
        finally:
            self._state = SamplerState.CONFIGURED

        stats.elapsed = time.perf_counter() - t0
        _logger.info(f"샘플링 완료 (level {settings.level}): {stats.accepted}개, "
                     f"시도 {stats.attempts}회, 수용률 {stats.acceptance_ratio:.1%}, "
                     f"{stats.elapsed * 1000:.1f}ms")
        if count > 0 and stats.acceptance_ratio < _LOW_ACCEPTANCE_RATIO:
            _logger.warning(f"수용률이 낮습니다 ({stats.acceptance_ratio:.1%}): "
                            f"마스크/영역 교집합이 좁습니다")
        return samples

    def finish(self):
        """레지스트레이션 종료 (이후 설정/샘플링 불가)"""
        self._state = SamplerState.FINISHED

    def __repr__(self) -> str:
        level = None if self._settings is None else self._settings.level
        return (f"MultiInputRandomCoordinateSampler(images={len(self.predicate.images)}, "
                f"state={self._state.value}, level={level})")
