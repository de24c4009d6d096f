"""
샘플러 예외 정의

    SamplerError
    ├── ConfigurationError        파라미터 배열 오류, 잘못된 상태 전이
    ├── SamplingExhausted         시도 한도 내에 요청 샘플 수 확보 실패
    └── InterpolationDomainError  보간 support 영역 밖 좌표 (샘플러 내부에서 재추출로 처리)
"""

from typing import Optional, Sequence


class SamplerError(Exception):
    """regsampler 예외 최상위 클래스"""


class ConfigurationError(SamplerError, ValueError):
    """잘못된 설정값. 원인 파라미터 이름을 함께 보관한다."""

    def __init__(self, message: str, parameter_name: Optional[str] = None):
        if parameter_name is not None:
            message = f"{parameter_name}: {message}"
        super().__init__(message)
        self.parameter_name = parameter_name


class SamplingExhausted(SamplerError, RuntimeError):
    """마스크/영역 교집합이 너무 좁아 시도 한도 내에 샘플을 다 뽑지 못함"""

    def __init__(self, requested: int, accepted: int, attempts: int):
        super().__init__(
            f"Could not find enough image samples within reasonable time: "
            f"{accepted}/{requested} accepted after {attempts} attempts. "
            f"Probably the mask is too small"
        )
        self.requested = requested
        self.accepted = accepted
        self.attempts = attempts


class InterpolationDomainError(SamplerError, ValueError):
    """연속 인덱스가 보간기의 정의역(support margin) 밖"""

    def __init__(self, continuous_index: Sequence[float], order: int):
        self.continuous_index = tuple(float(c) for c in continuous_index)
        self.order = order
        super().__init__(
            f"continuous index {self.continuous_index} is outside the "
            f"order-{order} interpolation domain"
        )
