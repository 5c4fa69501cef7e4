"""
User interface components for PixelGuard PDF.
"""
from .widgets import PageCanvas
from .windows import MainWindow

__all__ = ['MainWindow', 'PageCanvas']
