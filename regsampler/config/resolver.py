"""
해상도 레벨별 파라미터 해석

입력 형태:
    스칼라 [v]                   → 모든 레벨 (차원 파라미터면 모든 차원)에 방송
    레벨 배열 [v0, v1, ...]      → level 인덱스, 배열이 짧으면 마지막 값 반복
    레벨×차원 배열 [a0..aD-1, b0..bD-1, ...] → level 구간, 짧으면 마지막 구간 반복

캐시 없음: 호출할 때마다 현재 파라미터 맵에서 다시 계산한다.
"""

from typing import Any, Optional, Tuple

from ..errors import ConfigurationError
from .parameters import ParameterMap

_TRUE_STRINGS = ('true',)
_FALSE_STRINGS = ('false',)


class ResolutionParameterResolver:

    def __init__(self, parameter_map: ParameterMap):
        self.parameter_map = parameter_map

    @staticmethod
    def _check_level(level: int):
        if level < 0:
            raise ValueError(f"level은 0 이상이어야 합니다: {level}")

    def number_of_levels(self, name: str) -> int:
        values = self.parameter_map.values(name)
        return 0 if not values else len(values)

    def resolve(self, name: str, level: int, default: Any = None) -> Any:
        """레벨별 스칼라 값 (배열이 짧으면 마지막 값)"""
        self._check_level(level)
        values = self.parameter_map.values(name)
        if not values:
            if default is None:
                raise ConfigurationError("parameter is missing", name)
            return default
        return values[min(level, len(values) - 1)]

    def resolve_per_dimension(self, name: str, level: int, dimension: int,
                              default: Optional[Tuple[float, ...]] = None
                              ) -> Tuple[Any, ...]:
        """레벨별 차원 벡터"""
        self._check_level(level)
        if dimension < 1:
            raise ValueError(f"dimension은 1 이상이어야 합니다: {dimension}")
        values = self.parameter_map.values(name)
        if not values:
            if default is None:
                raise ConfigurationError("parameter is missing", name)
            default = tuple(default)
            if len(default) != dimension:
                raise ConfigurationError(
                    f"default has {len(default)} entries, expected {dimension}", name)
            return default

        if len(values) == 1:
            return tuple(values) * dimension
        if len(values) % dimension != 0:
            raise ConfigurationError(
                f"number of entries ({len(values)}) is not a multiple of "
                f"the image dimension ({dimension})", name)
        n_levels = len(values) // dimension
        start = min(level, n_levels - 1) * dimension
        return tuple(values[start:start + dimension])

    def resolve_bool(self, name: str, level: int, default: Optional[bool] = None) -> bool:
        value = self.resolve(name, level, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE_STRINGS:
                return True
            if lowered in _FALSE_STRINGS:
                return False
        raise ConfigurationError(f"expected a boolean, got {value!r}", name)

    def resolve_int(self, name: str, level: int, default: Optional[int] = None) -> int:
        value = self.resolve(name, level, default)
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise ConfigurationError(f"expected an integer, got {value!r}", name) from None
        if isinstance(value, bool) or not number.is_integer():
            raise ConfigurationError(f"expected an integer, got {value!r}", name)
        return int(number)

    def resolve_float(self, name: str, level: int, default: Optional[float] = None) -> float:
        value = self.resolve(name, level, default)
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ConfigurationError(f"expected a number, got {value!r}", name) from None

    def resolve_float_vector(self, name: str, level: int, dimension: int,
                             default: Optional[Tuple[float, ...]] = None
                             ) -> Tuple[float, ...]:
        values = self.resolve_per_dimension(name, level, dimension, default)
        try:
            return tuple(float(v) for v in values)
        except (TypeError, ValueError):
            raise ConfigurationError(f"expected numbers, got {list(values)!r}", name) from None

    def resolve_string(self, name: str, level: int, default: Optional[str] = None) -> str:
        value = self.resolve(name, level, default)
        if not isinstance(value, str):
            raise ConfigurationError(f"expected a string, got {value!r}", name)
        return value
