"""Layered pygame rendering."""

from spiralscope.render.cache import RenderCache
from spiralscope.render.scene import SpiralScene

__all__ = ["RenderCache", "SpiralScene"]
