"""
Custom widgets for page display and interaction.
"""
from .page_canvas import PageCanvas

__all__ = ['PageCanvas']
