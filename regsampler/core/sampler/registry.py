"""
이미지 샘플러 레지스트리

이름 문자열 → 생성자 매핑. 모듈 import 시점에 채워지고
설정 단계에서 한 번 조회된다.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List

from ...config.parameters import ParameterMap
from ...errors import ConfigurationError


@dataclass(frozen=True)
class ComponentDescriptor:
    """레지스트리 조회용 컴포넌트 이름/설명"""
    name: str
    description: str = ""


IMAGE_SAMPLERS: Dict[str, Callable] = {}


def register_sampler(name: str):
    """샘플러 클래스를 name으로 등록하는 데코레이터"""
    def decorator(constructor):
        if name in IMAGE_SAMPLERS and IMAGE_SAMPLERS[name] is not constructor:
            raise ValueError(f"이미 등록된 샘플러 이름입니다: {name}")
        IMAGE_SAMPLERS[name] = constructor
        return constructor
    return decorator


def available_samplers() -> List[str]:
    return sorted(IMAGE_SAMPLERS)


def create_sampler(name: str, *args, **kwargs):
    try:
        constructor = IMAGE_SAMPLERS[name]
    except KeyError:
        raise ConfigurationError(
            f"unknown sampler {name!r}, available: {available_samplers()}",
            'ImageSampler') from None
    return constructor(*args, **kwargs)


def create_sampler_from_parameters(parameter_map: ParameterMap, images,
                                   masks=None, **kwargs):
    """파라미터 맵의 ImageSampler 값으로 샘플러 생성"""
    name = parameter_map.get('ImageSampler')
    if not isinstance(name, str):
        raise ConfigurationError(f"expected a sampler name, got {name!r}", 'ImageSampler')
    return create_sampler(name, images, masks=masks, **kwargs)
