"""
샘플러 병렬 실행

샘플러 인스턴스마다 독립 난수 스트림(SeedSequence.spawn)을 주고
ThreadPoolExecutor로 동시에 generate_samples를 호출한다.
입력 이미지/마스크는 읽기 전용으로 공유된다.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import List, Optional, Sequence

import numpy as np

from ..models.samples import SampleSequence

_logger = logging.getLogger(__name__)


def spawn_seeds(seed, n: int) -> List[np.random.SeedSequence]:
    """seed에서 겹치지 않는 n개의 하위 시드 생성"""
    if n < 0:
        raise ValueError(f"n은 0 이상이어야 합니다: {n}")
    return np.random.SeedSequence(seed).spawn(n)


def seed_samplers(samplers: Sequence, seed) -> None:
    """샘플러마다 독립 스트림 할당"""
    for sampler, child in zip(samplers, spawn_seeds(seed, len(samplers))):
        sampler.set_seed(child)


def sample_in_parallel(samplers: Sequence,
                       count: Optional[int] = None,
                       compute_gradient: bool = False,
                       n_workers: Optional[int] = None) -> List[SampleSequence]:
    """
    샘플러별 generate_samples 동시 실행

    Args:
        samplers: 설정 완료된 샘플러 목록 (같은 인스턴스 중복 불가)
        count: 요청 샘플 수 (None이면 각 샘플러 설정값)
        compute_gradient: gradient 포함 여부
        n_workers: 워커 수 (None = CPU 코어 수)

    Returns:
        samplers와 같은 순서의 SampleSequence 목록

    Raises:
        샘플러에서 발생한 첫 예외를 그대로 전파
    """
    samplers = list(samplers)
    if len({id(s) for s in samplers}) != len(samplers):
        raise ValueError("같은 샘플러 인스턴스를 여러 번 넘길 수 없습니다")
    if not samplers:
        return []

    if n_workers is None:
        n_workers = os.cpu_count() or 1
    n_workers = max(1, min(n_workers, len(samplers)))

    results: List[Optional[SampleSequence]] = [None] * len(samplers)
    with ThreadPoolExecutor(max_workers=n_workers) as executor:
        futures = {
            executor.submit(sampler.generate_samples, count, compute_gradient): i
            for i, sampler in enumerate(samplers)
        }
        for future in as_completed(futures):
            results[futures[future]] = future.result()

    _logger.info(f"병렬 샘플링 완료: {len(samplers)}개 샘플러, 워커 {n_workers}")
    return results
