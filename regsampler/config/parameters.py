"""
파라미터 맵 저장/불러오기 관리

모든 파라미터는 값 목록으로 보관한다 (스칼라 → 원소 1개 목록).
    NumberOfSpatialSamples: [2048, 2048, 4000]  → 해상도 레벨별
    SampleRegionSize: [50.0, 50.0, 50.0, 30.0, 30.0, 30.0]  → 레벨×차원
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

_logger = logging.getLogger(__name__)


def _as_list(value) -> list:
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


class ParameterMap:
    """샘플러/레지스트레이션 파라미터 관리"""

    DEFAULT_PARAMETERS = {
        'ImageSampler': ['MultiInputRandomCoordinate'],
        'NumberOfResolutions': [1],
        'NumberOfSpatialSamples': [5000],
        'UseRandomSampleRegion': [False],
        'FixedImageBSplineInterpolationOrder': [1],

        # 샘플링 시도 한도 = 계수 × 요청 샘플 수
        'MaximumNumberOfSamplingAttemptsFactor': [10],
        # 국소 샘플링 창 중심 갱신 시점: PerResolution / PerInvocation
        'SampleRegionRefresh': ['PerResolution'],

        # 최적화기 쪽 정책
        'NewSamplesEveryIteration': [False],
        'MaximumNumberOfIterations': [1],
    }

    def __init__(self, parameters: Optional[Dict[str, Any]] = None,
                 use_defaults: bool = True):
        self.parameters: Dict[str, list] = {}
        if use_defaults:
            self.parameters.update(
                {k: list(v) for k, v in self.DEFAULT_PARAMETERS.items()})
        if parameters:
            self.update(parameters)

    @classmethod
    def from_dict(cls, parameters: Dict[str, Any]) -> 'ParameterMap':
        return cls(parameters)

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'ParameterMap':
        """JSON 파라미터 파일 로드"""
        path = Path(path)
        with open(path, 'r', encoding='utf-8') as f:
            saved = json.load(f)
        if not isinstance(saved, dict):
            raise ValueError(f"파라미터 파일 최상위는 객체여야 합니다: {path}")
        _logger.info(f"파라미터 로드: {path}")
        return cls(saved)

    def save(self, path: Union[str, Path]):
        """JSON 파라미터 파일 저장"""
        path = Path(path)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.parameters, f, indent=2, ensure_ascii=False)
        _logger.info(f"파라미터 저장: {path}")

    def has(self, key: str) -> bool:
        return key in self.parameters

    def values(self, key: str) -> Optional[List[Any]]:
        """파라미터 값 목록 (없으면 None)"""
        values = self.parameters.get(key)
        return None if values is None else list(values)

    def get(self, key: str, default=None):
        """첫 번째 값 (없으면 default)"""
        values = self.parameters.get(key)
        if not values:
            return default
        return values[0]

    def set(self, key: str, value):
        self.parameters[key] = _as_list(value)

    def update(self, params: Dict[str, Any]):
        for key, value in params.items():
            self.set(key, value)

    def remove(self, key: str):
        self.parameters.pop(key, None)

    def keys(self) -> Iterable[str]:
        return self.parameters.keys()

    def __contains__(self, key: str) -> bool:
        return key in self.parameters

    def __repr__(self) -> str:
        return f"ParameterMap({self.parameters!r})"
