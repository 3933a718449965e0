"""
Procedural wave surfaces.

Each surface owns a (rows, cols, 3) grid of x, y, z samples that is fully
rewritten by update(t). The result depends only on the configuration and t.
"""

import math
from dataclasses import dataclass

import numpy as np

from .config import GerstnerConfig, RibbonConfig


@dataclass(frozen=True)
class Point3D:
    x: float
    y: float
    z: float


@dataclass(frozen=True)
class Particle:
    pos: Point3D
    velocity: float


def _axis(count, start, stop):
    """Evenly spaced sample coordinates; a single sample sits at the start."""
    if count < 1:
        raise ValueError("grid dimensions must be positive")
    if count == 1:
        return np.array([start], dtype=float)
    return np.linspace(start, stop, count)


class Surface:
    """Shared grid storage and height-range tracking."""

    def __init__(self, rows, cols):
        self.points = np.zeros((rows, cols, 3), dtype=float)
        self.particles = []
        self.min_z = 0.0
        self.max_z = 0.0

    def size(self):
        """Returns (rows, cols) of the grid."""
        return self.points.shape[0], self.points.shape[1]

    def point(self, row, col):
        x, y, z = self.points[row, col]
        return Point3D(float(x), float(y), float(z))

    def update(self, t):
        raise NotImplementedError

    def _track_range(self):
        z = self.points[..., 2]
        self.min_z = float(z.min())
        self.max_z = float(z.max())


class GerstnerSurface(Surface):
    """Ocean grid built from a handful of superposed Gerstner waves."""

    def __init__(self, config=None):
        self.config = config or GerstnerConfig()
        cfg = self.config
        super().__init__(cfg.grid_depth, cfg.grid_width)
        self.waves = list(cfg.waves)

        # Rest positions of every sample on the [-1, 1] plane
        x0 = _axis(cfg.grid_width, -1.0, 1.0)
        y0 = _axis(cfg.grid_depth, -1.0, 1.0)
        self._x0, self._y0 = np.meshgrid(x0, y0)

    def update(self, t):
        x = self._x0.copy()
        y = self._y0.copy()
        z = np.zeros_like(x)
        count = len(self.waves)

        for wave in self.waves:
            if wave.amplitude == 0:
                continue
            k = 2.0 * math.pi / wave.wavelength
            q = wave.steepness / (k * wave.amplitude * count)
            dx, dy = wave.direction

            phase = k * (dx * self._x0 + dy * self._y0) - wave.speed * t
            cos_phase = np.cos(phase)

            # Horizontal drift toward crests, vertical swing
            x += q * wave.amplitude * dx * cos_phase
            y += q * wave.amplitude * dy * cos_phase
            z += wave.amplitude * np.sin(phase)

        self.points[..., 0] = x
        self.points[..., 1] = y
        self.points[..., 2] = z
        self._track_range()
        self._spawn_particles()

    def _spawn_particles(self):
        """Foam on the crests, thinned out by a fixed stride and density."""
        cfg = self.config
        self.particles = []
        if cfg.particle_density <= 0:
            return

        period = 1.0 / cfg.particle_density
        threshold = self.min_z + (self.max_z - self.min_z) * cfg.particle_height
        rows, cols = self.size()

        for row in range(0, rows, cfg.particle_stride):
            for col in range(0, cols, cfg.particle_stride):
                if math.fmod(col + row, period) >= 1.0:
                    continue
                p = self.point(row, col)
                if p.z > threshold:
                    self.particles.append(Particle(pos=p, velocity=p.z))


class RibbonSurface(Surface):
    """Stacked ribbons of summed sines, one per depth layer."""

    def __init__(self, config=None):
        self.config = config or RibbonConfig()
        cfg = self.config
        super().__init__(cfg.num_layers, cfg.num_points)
        self._x = _axis(cfg.num_points, -0.5, 0.5)
        self._layer_offset = _axis(cfg.num_layers, 0.0, 1.0)

    def update(self, t):
        cfg = self.config
        x = self._x
        angle = x * 2.0 * math.pi

        z = cfg.amplitude * np.sin(angle * cfg.frequency + t)
        z += cfg.amplitude2 * np.sin(angle * cfg.frequency2 - t * 0.7)
        z += cfg.amplitude * 0.3 * np.sin(angle * cfg.frequency * 1.5 + t * 1.3)

        # Height leaks into depth so crests lean toward the viewer
        offset = self._layer_offset[:, None]
        self.points[..., 0] = x[None, :]
        self.points[..., 1] = (offset - 0.5) * cfg.depth_scale + z[None, :] * cfg.height_variation
        self.points[..., 2] = z[None, :]
        self._track_range()


VARIANTS = {
    "gerstner": GerstnerSurface,
    "ribbon": RibbonSurface,
}


def make_surface(variant, config=None):
    try:
        cls = VARIANTS[variant]
    except KeyError:
        raise ValueError(f"unknown surface variant: {variant!r}") from None
    return cls(config)
