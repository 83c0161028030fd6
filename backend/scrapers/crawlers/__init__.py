"""Rendering engines for listing and detail pages."""

from .renderer import RenderedPage, Renderer, RendererFactory, RenderingContext
from .stealth import StealthRenderer

__all__ = [
    'RenderedPage',
    'Renderer',
    'RendererFactory',
    'RenderingContext',
    'StealthRenderer',
]
