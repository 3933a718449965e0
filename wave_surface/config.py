"""
Fixed tuning constants for the wave surface animation.
"""

import logging
import math
from dataclasses import dataclass, field


# --- Timing ---
FRAME_DELAY = 0.05  # Seconds per tick (~20 FPS)
TIME_STEP = 0.08  # Wave time advanced per tick

# --- Surface ---
SURFACE_VARIANT = "gerstner"  # "gerstner" or "ribbon"

GRID_WIDTH = 80
GRID_DEPTH = 60
PARTICLE_DENSITY = 0.3
PARTICLE_STRIDE = 3  # Only every Nth row/column can spawn foam
PARTICLE_HEIGHT = 0.6  # Fraction of the height range a crest must clear

RIBBON_LAYERS = 12
RIBBON_POINTS = 120
RIBBON_AMPLITUDE = 0.25
RIBBON_FREQUENCY = 1.5
RIBBON_AMPLITUDE2 = 0.12
RIBBON_FREQUENCY2 = 3.0
RIBBON_DEPTH_SCALE = 1.0
RIBBON_HEIGHT_VARIATION = 0.3  # How much height leaks into apparent depth

# --- Projection ---
SCALE_X = 0.95  # Horizontal spread across the screen width
SCALE_Y = 0.7  # Vertical compression of wave height
PERSPECTIVE_Y = 0.4  # How far back rows are pushed up the screen
DEPTH_Z_FACTOR = 0.3  # Weight of height in the depth test
PARTICLE_DEPTH_BIAS = 0.05

# --- Look ---
COLOR_SCHEME = "ocean"  # "ocean" or "mono"

LOG_LEVEL = logging.WARNING


@dataclass
class WaveParams:
    """A single Gerstner wave component. Direction is normalized on creation."""

    amplitude: float
    wavelength: float
    speed: float
    direction: tuple = (1.0, 0.0)
    steepness: float = 0.5

    def __post_init__(self):
        dx, dy = self.direction
        length = math.hypot(dx, dy)
        if length == 0:
            raise ValueError("wave direction must be non-zero")
        self.direction = (dx / length, dy / length)


def default_waves():
    return [
        WaveParams(0.15, 1.5, 0.8, (1.0, 0.3), 0.6),  # Main swell
        WaveParams(0.08, 0.8, 1.2, (0.7, -0.5), 0.4),  # Cross chop
        WaveParams(0.05, 0.4, 1.6, (-0.3, 0.8), 0.3),  # Ripples
    ]


@dataclass
class GerstnerConfig:
    grid_width: int = GRID_WIDTH
    grid_depth: int = GRID_DEPTH
    particle_density: float = PARTICLE_DENSITY
    particle_stride: int = PARTICLE_STRIDE
    particle_height: float = PARTICLE_HEIGHT
    waves: list = field(default_factory=default_waves)


@dataclass
class RibbonConfig:
    num_layers: int = RIBBON_LAYERS
    num_points: int = RIBBON_POINTS
    amplitude: float = RIBBON_AMPLITUDE
    frequency: float = RIBBON_FREQUENCY
    amplitude2: float = RIBBON_AMPLITUDE2
    frequency2: float = RIBBON_FREQUENCY2
    depth_scale: float = RIBBON_DEPTH_SCALE
    height_variation: float = RIBBON_HEIGHT_VARIATION


@dataclass
class AppConfig:
    frame_delay: float = FRAME_DELAY
    time_step: float = TIME_STEP
    variant: str = SURFACE_VARIANT
    color_scheme: str = COLOR_SCHEME
    gerstner: GerstnerConfig = field(default_factory=GerstnerConfig)
    ribbon: RibbonConfig = field(default_factory=RibbonConfig)
