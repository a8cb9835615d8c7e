from .basic_io import BasicIO

__all__ = ['BasicIO']
