from .samples import ImageSample, SampleSequence, SamplingStatistics

__all__ = ['ImageSample', 'SampleSequence', 'SamplingStatistics']
