"""
Animated 3D wave surface rendered into a text terminal.
"""

from .app import App, main
from .renderer import FrameBuffer, Renderer
from .surface import GerstnerSurface, Particle, Point3D, RibbonSurface, make_surface

__version__ = "0.1.0"
