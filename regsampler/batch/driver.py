"""
다해상도 샘플링 드라이버

레벨마다 before_each_resolution으로 샘플러를 재설정하고,
반복(iteration)마다 샘플을 넘겨준다. NewSamplesEveryIteration이 false인
레벨은 첫 반복에서 뽑은 샘플을 레벨 끝까지 재사용한다.
"""

import logging
from typing import Iterator, List, Tuple

from ..config.parameters import ParameterMap
from ..config.resolver import ResolutionParameterResolver
from ..models.samples import SampleSequence

_logger = logging.getLogger(__name__)


class MultiResolutionSamplingDriver:
    """
    Usage:
        driver = MultiResolutionSamplingDriver(sampler, parameter_map)
        for level, iteration, samples in driver.run():
            metric.evaluate(samples)
    """

    def __init__(self, sampler, parameter_map: ParameterMap):
        self.sampler = sampler
        self.parameter_map = parameter_map

    def run(self) -> Iterator[Tuple[int, int, SampleSequence]]:
        resolver = ResolutionParameterResolver(self.parameter_map)
        n_levels = resolver.resolve_int('NumberOfResolutions', 0, 1)
        if n_levels < 1:
            raise ValueError(f"NumberOfResolutions는 1 이상이어야 합니다: {n_levels}")

        for level in range(n_levels):
            self.sampler.before_each_resolution(self.parameter_map, level)
            iterations = resolver.resolve_int('MaximumNumberOfIterations', level, 1)
            new_samples = resolver.resolve_bool('NewSamplesEveryIteration', level, False)
            _logger.info(f"레벨 {level + 1}/{n_levels}: 반복 {iterations}회, "
                         f"매 반복 새 샘플={new_samples}")

            samples = None
            for iteration in range(iterations):
                if samples is None or new_samples:
                    samples = self.sampler.generate_samples()
                yield level, iteration, samples

        self.sampler.finish()

    def run_all(self) -> List[Tuple[int, int, SampleSequence]]:
        return list(self.run())
