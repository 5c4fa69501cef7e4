"""
PDF document handling: decoding, rasterizing and writing.
"""
from .codec import DocumentCodec
from .renderer import PageRenderer, RasterPage

__all__ = ['DocumentCodec', 'PageRenderer', 'RasterPage']
