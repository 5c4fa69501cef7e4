"""
Effect rendering: destructive pixel effects and vector painting.
"""
from .raster import apply_raster_effect, blur, fill, pixelate
from .painter import (
    array_to_qimage,
    paint_vector_annotation,
    paint_vectors_into,
    qimage_to_array,
)

__all__ = [
    'apply_raster_effect',
    'blur',
    'fill',
    'pixelate',
    'array_to_qimage',
    'paint_vector_annotation',
    'paint_vectors_into',
    'qimage_to_array',
]
