from .driver import MultiResolutionSamplingDriver
from .parallel import spawn_seeds, seed_samplers, sample_in_parallel

__all__ = [
    'MultiResolutionSamplingDriver',
    'spawn_seeds',
    'seed_samplers',
    'sample_in_parallel',
]
