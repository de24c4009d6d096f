"""
다해상도 드라이버 / 병렬 실행 테스트
"""

import sys
import threading
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import numpy as np
import pytest

from regsampler import (
    ImageMask,
    InputImage,
    MultiInputRandomCoordinateSampler,
    MultiResolutionSamplingDriver,
    ParameterMap,
    SamplerState,
    SamplingExhausted,
    sample_in_parallel,
    seed_samplers,
    spawn_seeds,
)


def _image(seed=0, size=(12, 12)):
    rng = np.random.default_rng(seed)
    return InputImage(rng.uniform(0, 255, size))


# =============================================================================
#  1. 다해상도 드라이버
# =============================================================================

def test_driver_levels_and_iterations():
    params = ParameterMap({
        'NumberOfResolutions': 2,
        'NumberOfSpatialSamples': [100, 200],
        'MaximumNumberOfIterations': 3,
        'NewSamplesEveryIteration': ['false', 'true'],
    })
    sampler = MultiInputRandomCoordinateSampler([_image()], seed=5)
    results = MultiResolutionSamplingDriver(sampler, params).run_all()

    assert [(level, it) for level, it, _ in results] == [
        (0, 0), (0, 1), (0, 2), (1, 0), (1, 1), (1, 2)]

    level0 = [s for level, _, s in results if level == 0]
    level1 = [s for level, _, s in results if level == 1]
    assert all(len(s) == 100 for s in level0)
    assert all(len(s) == 200 for s in level1)

    # 레벨 0: 같은 샘플 재사용, 레벨 1: 매 반복 새 샘플
    assert level0[0] is level0[1] is level0[2]
    assert len({id(s) for s in level1}) == 3
    assert not np.array_equal(level1[0].points, level1[1].points)

    assert sampler.state is SamplerState.FINISHED
    assert sampler.settings.level == 1


def test_driver_is_lazy_and_finishes_at_end():
    params = ParameterMap({'NumberOfResolutions': 2, 'NumberOfSpatialSamples': 10})
    sampler = MultiInputRandomCoordinateSampler([_image()], seed=0)
    run = MultiResolutionSamplingDriver(sampler, params).run()

    assert sampler.state is SamplerState.UNINITIALIZED
    level, iteration, samples = next(run)
    assert (level, iteration, len(samples)) == (0, 0, 10)
    assert sampler.state is SamplerState.CONFIGURED

    assert [item[0] for item in run] == [1]
    assert sampler.state is SamplerState.FINISHED


def test_driver_rejects_zero_resolutions():
    params = ParameterMap({'NumberOfResolutions': 0})
    sampler = MultiInputRandomCoordinateSampler([_image()])
    with pytest.raises(ValueError):
        MultiResolutionSamplingDriver(sampler, params).run_all()


def test_driver_propagates_exhaustion():
    image = _image()
    mask_array = np.zeros((12, 12), dtype=np.uint8)
    mask_array[0, 0] = 1
    sampler = MultiInputRandomCoordinateSampler(
        [image], masks=[ImageMask.from_image(image, mask_array)], seed=0)
    params = ParameterMap({'NumberOfSpatialSamples': 500})
    with pytest.raises(SamplingExhausted):
        MultiResolutionSamplingDriver(sampler, params).run_all()
    assert sampler.state is SamplerState.CONFIGURED


# =============================================================================
#  2. 병렬 실행
# =============================================================================

def _configured_samplers(n, params):
    images = [_image(seed=1), _image(seed=2)]
    samplers = [MultiInputRandomCoordinateSampler(images) for _ in range(n)]
    for sampler in samplers:
        sampler.before_each_resolution(params, 0)
    return samplers


def test_spawn_seeds_independent():
    seeds = spawn_seeds(2024, 4)
    assert len(seeds) == 4
    draws = [np.random.default_rng(s).random() for s in seeds]
    assert len(set(draws)) == 4
    again = [np.random.default_rng(s).random() for s in spawn_seeds(2024, 4)]
    assert draws == again
    with pytest.raises(ValueError):
        spawn_seeds(0, -1)


def test_parallel_sampling_reproducible():
    params = ParameterMap({'NumberOfSpatialSamples': 300})

    runs = []
    for _ in range(2):
        samplers = _configured_samplers(4, params)
        seed_samplers(samplers, 77)
        runs.append(sample_in_parallel(samplers, n_workers=4))

    for first, second in zip(*runs):
        assert len(first) == 300
        assert np.array_equal(first.points, second.points)

    # 샘플러마다 다른 스트림
    assert not np.array_equal(runs[0][0].points, runs[0][1].points)


def test_parallel_matches_sequential():
    params = ParameterMap({'NumberOfSpatialSamples': 150})

    samplers = _configured_samplers(3, params)
    seed_samplers(samplers, 9)
    parallel = sample_in_parallel(samplers, compute_gradient=True, n_workers=3)

    samplers = _configured_samplers(3, params)
    seed_samplers(samplers, 9)
    sequential = [s.generate_samples(compute_gradient=True) for s in samplers]

    for p, s in zip(parallel, sequential):
        assert np.array_equal(p.points, s.points)
        assert np.array_equal(p.gradients, s.gradients)


def test_parallel_rejects_shared_instance():
    params = ParameterMap({'NumberOfSpatialSamples': 10})
    sampler = _configured_samplers(1, params)[0]
    with pytest.raises(ValueError):
        sample_in_parallel([sampler, sampler])
    assert sample_in_parallel([]) == []


def test_parallel_propagates_errors():
    params = ParameterMap({'NumberOfSpatialSamples': 10})
    samplers = _configured_samplers(2, params)
    samplers[1].finish()
    with pytest.raises(Exception) as exc_info:
        sample_in_parallel(samplers)
    assert 'finish' in str(exc_info.value)


def test_instances_share_inputs_across_threads():
    """읽기 전용 입력 공유, 샘플러별 스레드 1개"""
    images = [_image(seed=4)]
    params = ParameterMap({'NumberOfSpatialSamples': 200})
    errors = []
    outputs = {}

    def worker(k):
        try:
            sampler = MultiInputRandomCoordinateSampler(images, seed=k)
            sampler.before_each_resolution(params, 0)
            outputs[k] = sampler.generate_samples()
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(k,)) for k in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert not errors
    assert all(len(outputs[k]) == 200 for k in range(4))
    assert images[0].region.contains(outputs[0].points).all()


if __name__ == "__main__":
    test_driver_levels_and_iterations()
    test_driver_is_lazy_and_finishes_at_end()
    test_driver_rejects_zero_resolutions()
    test_driver_propagates_exhaustion()
    test_spawn_seeds_independent()
    test_parallel_sampling_reproducible()
    test_parallel_matches_sequential()
    test_parallel_rejects_shared_instance()
    test_parallel_propagates_errors()
    test_instances_share_inputs_across_threads()
    print("✅ 드라이버/병렬 테스트 통과")
