"""
3D to 2D projection and depth-tested character rasterization.
"""

import math
from collections import namedtuple

import numpy as np

from .config import (
    DEPTH_Z_FACTOR,
    PARTICLE_DEPTH_BIAS,
    PERSPECTIVE_Y,
    SCALE_X,
    SCALE_Y,
)
from .palette import (
    LINE_VERTICAL,
    OCEAN_GRADIENT,
    PARTICLE_CHAR,
    PARTICLE_COLOR,
    block_char,
    block_chars,
    gradient_colors,
    layer_factor,
    normalize_z,
    shade_char,
    shade_chars,
)
from .surface import RibbonSurface


Cell = namedtuple("Cell", ["char", "color", "depth", "occupied"])


class FrameBuffer:
    """
    One character, colour and depth per terminal cell.

    The nearest write wins: a cell only accepts a character whose depth is
    greater than the one already stored. Cells live in plain row lists so the
    per-glyph depth test stays cheap; the numpy views are built on demand.
    """

    def __init__(self, width, height):
        self.width = max(1, int(width))
        self.height = max(1, int(height))
        self.clear()

    def clear(self):
        w, h = self.width, self.height
        self._chars = [[" "] * w for _ in range(h)]
        self._colors = [[(0, 0, 0)] * w for _ in range(h)]
        self._depth = [[-math.inf] * w for _ in range(h)]

    @property
    def chars(self):
        return np.array(self._chars, dtype="<U1")

    @property
    def colors(self):
        return np.array(self._colors, dtype=np.uint8)

    @property
    def depth(self):
        return np.array(self._depth, dtype=float)

    @property
    def occupied(self):
        return self.depth > -np.inf

    def set_cell(self, x, y, char, depth, color):
        """Depth-tested write. Returns False if dropped."""
        if x < 0 or x >= self.width or y < 0 or y >= self.height:
            return False
        row = self._depth[y]
        if depth <= row[x]:
            return False
        row[x] = depth
        self._chars[y][x] = char
        self._colors[y][x] = color
        return True

    def line(self, x1, y1, x2, y2, char, depth, color):
        """Bresenham line at a single flat depth."""
        w, h = self.width, self.height
        # Both ends past the same edge: nothing in between is visible either
        if (x1 < 0 and x2 < 0) or (y1 < 0 and y2 < 0) or \
                (x1 >= w and x2 >= w) or (y1 >= h and y2 >= h):
            return

        chars, colors, depths = self._chars, self._colors, self._depth
        dx = abs(x2 - x1)
        dy = abs(y2 - y1)
        sx = -1 if x1 > x2 else 1
        sy = -1 if y1 > y2 else 1
        err = dx - dy

        for _ in range(dx + dy + 1):
            if 0 <= x1 < w and 0 <= y1 < h and depth > depths[y1][x1]:
                depths[y1][x1] = depth
                chars[y1][x1] = char
                colors[y1][x1] = color
            if x1 == x2 and y1 == y2:
                break
            e2 = 2 * err
            if e2 > -dy:
                err -= dy
                x1 += sx
            if e2 < dx:
                err += dx
                y1 += sy

    def vline(self, x, y1, y2, char, depth, color):
        """One column from y1 to y2, both ends included."""
        if x < 0 or x >= self.width:
            return
        top = max(min(y1, y2), 0)
        bottom = min(max(y1, y2), self.height - 1)
        for y in range(top, bottom + 1):
            row = self._depth[y]
            if depth > row[x]:
                row[x] = depth
                self._chars[y][x] = char
                self._colors[y][x] = color

    def cells(self):
        """(x, y, char, color) for every occupied cell, row by row."""
        for y, (chars, colors, depths) in enumerate(zip(self._chars, self._colors, self._depth)):
            for x, d in enumerate(depths):
                if d > -math.inf:
                    yield x, y, chars[x], colors[x]

    def cell(self, x, y):
        depth = self._depth[y][x]
        return Cell(
            self._chars[y][x],
            tuple(int(c) for c in self._colors[y][x]),
            float(depth),
            depth > -math.inf,
        )


class Renderer:
    """Draws a surface into a FrameBuffer and pushes it to a display."""

    def __init__(self, display, gradient=OCEAN_GRADIENT):
        self.display = display
        self.gradient = gradient
        self.resize()

    def resize(self, width=None, height=None):
        """Reallocate the frame buffer. Previous contents are discarded."""
        if width is None or height is None:
            display_w, display_h = self.display.size()
            width = display_w if width is None else width
            height = display_h if height is None else height

        self.buffer = FrameBuffer(width, height)
        self.width = self.buffer.width
        self.height = self.buffer.height
        self.center_x = self.width / 2
        self.center_y = self.height / 2

    def clear(self):
        self.buffer.clear()
        self.display.clear()

    # --- Projection ---

    def project(self, p):
        """Returns (screen_x, screen_y, depth) for one point."""
        scale_x = self.width * SCALE_X
        scale_y = self.height * SCALE_Y

        screen_x = int(self.center_x + p.x * scale_x)
        # Height lifts the point, depth rows push it further up the screen
        screen_y = int(self.center_y - p.z * scale_y - p.y * scale_y * PERSPECTIVE_Y)
        depth = p.y + p.z * DEPTH_Z_FACTOR

        return screen_x, screen_y, depth

    def project_points(self, points):
        """Vectorized project() over an (..., 3) array."""
        scale_x = self.width * SCALE_X
        scale_y = self.height * SCALE_Y
        x = points[..., 0]
        y = points[..., 1]
        z = points[..., 2]

        screen_x = (self.center_x + x * scale_x).astype(int)
        screen_y = (self.center_y - z * scale_y - y * scale_y * PERSPECTIVE_Y).astype(int)
        depth = y + z * DEPTH_Z_FACTOR

        return screen_x, screen_y, depth

    # --- Primitives ---

    def _edge(self, x1, y1, x2, y2, depth, char, color):
        # Steep edges read better as a plain bar than as a shade glyph
        if abs(y2 - y1) > abs(x2 - x1):
            char = LINE_VERTICAL
        self.buffer.line(x1, y1, x2, y2, char, depth, color)

    def draw_line(self, x1, y1, x2, y2, depth, normalized_z, layer, color):
        """Bresenham line at a single flat depth."""
        self._edge(x1, y1, x2, y2, depth, shade_char(normalized_z, layer), color)

    def draw_vertical_fill(self, x, y1, y2, depth, normalized_z, layer, color):
        """Block glyphs down one column between two rows, both ends included."""
        if y1 == y2:
            return
        self.buffer.vline(x, y1, y2, block_char(normalized_z, layer), depth, color)

    # --- Surfaces ---

    def render_surface(self, surface):
        if isinstance(surface, RibbonSurface):
            self._render_ribbon(surface)
        else:
            self._render_grid(surface)

    def _shading(self, surface):
        """Projected points plus per-point normalized height, layer and colour."""
        rows = surface.size()[0]
        sx, sy, depth = self.project_points(surface.points)
        nz = normalize_z(surface.points[..., 2], surface.min_z, surface.max_z)
        layers = np.broadcast_to(
            np.array([layer_factor(r, rows) for r in range(rows)])[:, None], depth.shape)
        colors = gradient_colors(nz, layers, self.gradient)
        return sx, sy, depth, nz, layers, colors

    def _render_grid(self, surface):
        rows, cols = surface.size()
        sx, sy, depth, nz, layers, colors = self._shading(surface)

        # Edge glyphs and depths for every right and down neighbour at once
        right_char = shade_chars((nz[:, :-1] + nz[:, 1:]) / 2, layers[:, :-1]).tolist()
        right_depth = ((depth[:, :-1] + depth[:, 1:]) / 2).tolist()
        down_char = shade_chars((nz[:-1] + nz[1:]) / 2, layers[:-1]).tolist()
        down_depth = ((depth[:-1] + depth[1:]) / 2).tolist()

        if rows > 1 and cols > 1:
            pts = surface.points
            centers = (pts[:-1, :-1] + pts[1:, :-1] + pts[:-1, 1:] + pts[1:, 1:]) / 4
            cx, cy, cd = (a.tolist() for a in self.project_points(centers))
            avg_z = (nz[:-1, :-1] + nz[:-1, 1:] + nz[1:, :-1] + nz[1:, 1:]) / 4
            avg_layer = (layers[:-1, :-1] + layers[1:, :-1]) / 2
            fill_char = block_chars(avg_z, avg_layer).tolist()
            fill_color = gradient_colors(avg_z, avg_layer, self.gradient)

        sx, sy = sx.tolist(), sy.tolist()
        edge = self._edge
        set_cell = self.buffer.set_cell

        for row in range(rows):
            for col in range(cols):
                x1, y1 = sx[row][col], sy[row][col]
                color = colors[row][col]

                if col + 1 < cols:
                    edge(x1, y1, sx[row][col + 1], sy[row][col + 1],
                         right_depth[row][col], right_char[row][col], color)
                if row + 1 < rows:
                    edge(x1, y1, sx[row + 1][col], sy[row + 1][col],
                         down_depth[row][col], down_char[row][col], color)

                if row + 1 < rows and col + 1 < cols:
                    set_cell(cx[row][col], cy[row][col], fill_char[row][col],
                             cd[row][col], fill_color[row][col])

        # Foam goes on last, nudged forward so it survives its own crest
        for particle in surface.particles:
            x, y, d = self.project(particle.pos)
            set_cell(x, y, PARTICLE_CHAR, d + PARTICLE_DEPTH_BIAS, PARTICLE_COLOR)

    def _render_ribbon(self, surface):
        layers, count = surface.size()
        sx, sy, depth, nz, _, colors = self._shading(surface)
        sx, sy, depth = sx.tolist(), sy.tolist(), depth.tolist()
        nz = nz.tolist()

        # Back to front
        for row in range(layers):
            layer = layer_factor(row, layers)
            for i in range(count):
                x1, y1, d1, z1 = sx[row][i], sy[row][i], depth[row][i], nz[row][i]
                color = colors[row][i]

                # Along the wave
                if i + 1 < count:
                    self.draw_line(x1, y1, sx[row][i + 1], sy[row][i + 1],
                                   (d1 + depth[row][i + 1]) / 2,
                                   (z1 + nz[row][i + 1]) / 2, layer, color)

                # Down to the next ribbon
                if row + 1 < layers:
                    self.draw_vertical_fill(x1, y1, sy[row + 1][i],
                                            (d1 + depth[row + 1][i]) / 2, z1, layer, color)

                self.buffer.set_cell(x1, y1, shade_char(z1, layer), d1, color)

    # --- Output ---

    def flush(self):
        """Copy every occupied cell to the display and present it."""
        for x, y, char, rgb in self.buffer.cells():
            self.display.set_content(x, y, char, rgb)
        self.display.show()
