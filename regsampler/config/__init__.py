from .parameters import ParameterMap
from .resolver import ResolutionParameterResolver

__all__ = ['ParameterMap', 'ResolutionParameterResolver']
