"""
PixelGuard PDF: mark regions of PDF pages and burn pixelation, blur,
blackout, shapes and text irreversibly into an exported copy.
"""

__version__ = "1.0.0"
