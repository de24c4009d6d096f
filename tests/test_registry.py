"""
샘플러 레지스트리 테스트
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import numpy as np
import pytest

from regsampler import (
    ConfigurationError,
    InputImage,
    MultiInputRandomCoordinateSampler,
    ParameterMap,
    create_sampler,
    create_sampler_from_parameters,
    register_sampler,
)
from regsampler.core.sampler import IMAGE_SAMPLERS, available_samplers


def _images():
    rng = np.random.default_rng(0)
    return [InputImage(rng.uniform(0, 255, (10, 10)))]


def test_sampler_registered_by_name():
    assert 'MultiInputRandomCoordinate' in available_samplers()
    sampler = create_sampler('MultiInputRandomCoordinate', _images(), seed=1)
    assert isinstance(sampler, MultiInputRandomCoordinateSampler)
    assert sampler.name == 'MultiInputRandomCoordinate'


def test_unknown_name_is_configuration_error():
    with pytest.raises(ConfigurationError) as exc_info:
        create_sampler('Grid', _images())
    assert exc_info.value.parameter_name == 'ImageSampler'
    assert 'MultiInputRandomCoordinate' in str(exc_info.value)


def test_create_from_parameter_map():
    params = ParameterMap({'NumberOfSpatialSamples': 64})
    sampler = create_sampler_from_parameters(params, _images(), seed=3)
    sampler.before_each_resolution(params, 0)
    assert len(sampler.generate_samples()) == 64

    params.set('ImageSampler', 'Full')
    with pytest.raises(ConfigurationError):
        create_sampler_from_parameters(params, _images())

    params.remove('ImageSampler')
    with pytest.raises(ConfigurationError):
        create_sampler_from_parameters(params, _images())


def test_duplicate_registration_rejected():
    name = 'MultiInputRandomCoordinate'
    # 같은 생성자 재등록은 허용
    register_sampler(name)(MultiInputRandomCoordinateSampler)

    with pytest.raises(ValueError):
        @register_sampler(name)
        class Other:
            pass

    assert IMAGE_SAMPLERS[name] is MultiInputRandomCoordinateSampler


def test_custom_sampler_registration():
    name = 'TestOnlySampler'

    @register_sampler(name)
    def build(images, masks=None, value=0):
        return ('built', len(images), value)

    try:
        assert create_sampler(name, _images(), value=5) == ('built', 1, 5)
    finally:
        IMAGE_SAMPLERS.pop(name)
    assert name not in available_samplers()


if __name__ == "__main__":
    test_sampler_registered_by_name()
    test_unknown_name_is_configuration_error()
    test_create_from_parameter_map()
    test_duplicate_registration_rejected()
    test_custom_sampler_registration()
    print("✅ 레지스트리 테스트 통과")
