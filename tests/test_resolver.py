"""
해상도 레벨별 파라미터 해석 테스트

사용법:
    python -m pytest tests/test_resolver.py -v
"""

import sys
import tempfile
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from regsampler.config import ParameterMap, ResolutionParameterResolver
from regsampler.errors import ConfigurationError


def _resolver(**params):
    return ResolutionParameterResolver(ParameterMap(params))


def test_scalar_region_size_broadcast():
    """SampleRegionSize [50.0] (3D) → 모든 레벨에서 (50, 50, 50)"""
    resolver = _resolver(SampleRegionSize=[50.0])
    for level in range(4):
        assert resolver.resolve_float_vector('SampleRegionSize', level, 3) == (50.0, 50.0, 50.0)


def test_per_level_array_clamped_to_last():
    """NumberOfSpatialSamples [2048, 2048], 레벨 3개 → level 2 = 2048"""
    resolver = _resolver(NumberOfSpatialSamples=[2048, 2048], NumberOfResolutions=3)
    assert resolver.resolve_int('NumberOfSpatialSamples', 2) == 2048

    resolver = _resolver(NumberOfSpatialSamples=[1000, 2000, 4000])
    assert [resolver.resolve_int('NumberOfSpatialSamples', lv) for lv in range(5)] == \
        [1000, 2000, 4000, 4000, 4000]


def test_per_level_per_dimension_array():
    """레벨×차원 배열: 레벨별 구간, 짧으면 마지막 구간"""
    resolver = _resolver(SampleRegionSize=[50.0, 50.0, 50.0, 30.0, 30.0, 30.0])
    assert resolver.resolve_float_vector('SampleRegionSize', 0, 3) == (50.0, 50.0, 50.0)
    assert resolver.resolve_float_vector('SampleRegionSize', 1, 3) == (30.0, 30.0, 30.0)
    assert resolver.resolve_float_vector('SampleRegionSize', 7, 3) == (30.0, 30.0, 30.0)

    # 차원 길이 하나 = 모든 레벨 공통
    resolver = _resolver(SampleRegionSize=[10.0, 20.0])
    assert resolver.resolve_float_vector('SampleRegionSize', 3, 2) == (10.0, 20.0)


def test_per_dimension_length_not_multiple_is_error():
    resolver = _resolver(SampleRegionSize=[50.0, 40.0])
    with pytest.raises(ConfigurationError) as exc_info:
        resolver.resolve_float_vector('SampleRegionSize', 0, 3)
    assert exc_info.value.parameter_name == 'SampleRegionSize'
    assert 'SampleRegionSize' in str(exc_info.value)


def test_missing_parameter_uses_default_or_raises():
    resolver = ResolutionParameterResolver(ParameterMap(use_defaults=False))
    assert resolver.resolve_int('NumberOfSpatialSamples', 0, 5000) == 5000
    assert resolver.resolve_float_vector('SampleRegionSize', 1, 2, (3.0, 4.0)) == (3.0, 4.0)
    with pytest.raises(ConfigurationError) as exc_info:
        resolver.resolve('NumberOfSpatialSamples', 0)
    assert exc_info.value.parameter_name == 'NumberOfSpatialSamples'


def test_bool_parsing():
    resolver = _resolver(UseRandomSampleRegion=["false", "True", True])
    assert resolver.resolve_bool('UseRandomSampleRegion', 0) is False
    assert resolver.resolve_bool('UseRandomSampleRegion', 1) is True
    assert resolver.resolve_bool('UseRandomSampleRegion', 2) is True

    resolver = _resolver(UseRandomSampleRegion=["yes"])
    with pytest.raises(ConfigurationError):
        resolver.resolve_bool('UseRandomSampleRegion', 0)


def test_int_parsing_rejects_fractions():
    resolver = _resolver(NumberOfSpatialSamples=["2048", 3.5])
    assert resolver.resolve_int('NumberOfSpatialSamples', 0) == 2048
    with pytest.raises(ConfigurationError):
        resolver.resolve_int('NumberOfSpatialSamples', 1)


def test_no_caching_across_calls():
    """파라미터 맵을 바꾸면 다음 해석에 바로 반영"""
    parameter_map = ParameterMap({'NumberOfSpatialSamples': [100]})
    resolver = ResolutionParameterResolver(parameter_map)
    assert resolver.resolve_int('NumberOfSpatialSamples', 0) == 100
    parameter_map.set('NumberOfSpatialSamples', [300, 400])
    assert resolver.resolve_int('NumberOfSpatialSamples', 1) == 400


def test_negative_level_rejected():
    resolver = _resolver()
    with pytest.raises(ValueError):
        resolver.resolve('NumberOfSpatialSamples', -1)


def test_parameter_map_defaults_and_json_roundtrip():
    parameter_map = ParameterMap({'NumberOfSpatialSamples': [2048, 4000],
                                  'SampleRegionSize': 25.0})
    assert parameter_map.get('ImageSampler') == 'MultiInputRandomCoordinate'
    assert parameter_map.values('SampleRegionSize') == [25.0]

    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / 'params.json'
        parameter_map.save(path)
        loaded = ParameterMap.load(path)

    assert loaded.values('NumberOfSpatialSamples') == [2048, 4000]
    assert loaded.values('UseRandomSampleRegion') == [False]
    assert loaded.get('FixedImageBSplineInterpolationOrder') == 1


if __name__ == "__main__":
    test_scalar_region_size_broadcast()
    test_per_level_array_clamped_to_last()
    test_per_level_per_dimension_array()
    test_per_dimension_length_not_multiple_is_error()
    test_missing_parameter_uses_default_or_raises()
    test_bool_parsing()
    test_int_parsing_rejects_fractions()
    test_no_caching_across_calls()
    test_negative_level_rejected()
    test_parameter_map_defaults_and_json_roundtrip()
    print("✅ resolver 테스트 통과")
