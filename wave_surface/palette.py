"""
Glyph palettes, colour gradients and the shading math that picks from them.
"""

import numpy as np

# ASCII ramp from darkest/furthest to brightest/closest
SHADE_CHARS = " .:-=+*#%@"

# Block density for filled areas
BLOCK_CHARS = "░▒▓█"

LINE_VERTICAL = "|"
PARTICLE_CHAR = "•"
PARTICLE_COLOR = (235, 250, 255)

# (threshold, (r, g, b)) - first stop above the blended value wins.
# The last threshold is a catch-all.
OCEAN_GRADIENT = (
    (0.15, (30, 50, 120)),  # Deep blue
    (0.30, (50, 80, 160)),  # Medium blue
    (0.45, (70, 120, 200)),  # Blue
    (0.60, (100, 160, 220)),  # Light blue
    (0.75, (140, 200, 235)),  # Cyan
    (0.90, (180, 225, 245)),  # Light cyan
    (2.00, (220, 245, 255)),  # Near white
)

MONO_GRADIENT = (
    (0.20, (60, 60, 60)),
    (0.40, (100, 100, 100)),
    (0.60, (145, 145, 145)),
    (0.80, (195, 195, 195)),
    (2.00, (245, 245, 245)),
)

GRADIENTS = {
    "ocean": OCEAN_GRADIENT,
    "mono": MONO_GRADIENT,
}

RESET = "\033[0m"


def ansi_color_fg(r, g, b):
    return f"\033[38;2;{r};{g};{b}m"


def clamp01(value):
    return min(max(value, 0.0), 1.0)


def normalize_z(z, min_z, max_z):
    """Height (scalar or array) rescaled into [0, 1] against this frame's range."""
    z_range = max_z - min_z
    if z_range == 0:
        z_range = 1.0
    nz = np.clip((z - min_z) / z_range, 0.0, 1.0)
    return float(nz) if np.ndim(nz) == 0 else nz


def layer_factor(index, count):
    """0 for the furthest layer, 1 for the nearest."""
    if count < 2:
        return 0.0
    return index / (count - 1)


def map_to_char(value, chars):
    idx = int(clamp01(value) * (len(chars) - 1))
    idx = min(max(idx, 0), len(chars) - 1)
    return chars[idx]


def shade_char(normalized_z, layer):
    # Front layers and peaks are brighter
    return map_to_char(normalized_z * 0.7 + layer * 0.3, SHADE_CHARS)


def block_char(normalized_z, layer):
    return map_to_char(normalized_z * 0.6 + layer * 0.4, BLOCK_CHARS)


def gradient_color(normalized_z, layer, gradient=OCEAN_GRADIENT):
    t = normalized_z * 0.6 + layer * 0.4
    for threshold, rgb in gradient:
        if t < threshold:
            return rgb
    return gradient[-1][1]


# --- Array versions, for shading a whole grid per frame ---


def map_to_chars(values, chars):
    """map_to_char() over an array; returns an array of glyphs."""
    idx = (np.clip(values, 0.0, 1.0) * (len(chars) - 1)).astype(int)
    return np.asarray(list(chars))[np.clip(idx, 0, len(chars) - 1)]


def shade_chars(normalized_z, layer):
    return map_to_chars(normalized_z * 0.7 + layer * 0.3, SHADE_CHARS)


def block_chars(normalized_z, layer):
    return map_to_chars(normalized_z * 0.6 + layer * 0.4, BLOCK_CHARS)


def gradient_colors(normalized_z, layer, gradient=OCEAN_GRADIENT):
    """gradient_color() over an array; returns nested lists of RGB tuples."""
    t = normalized_z * 0.6 + layer * 0.4
    thresholds = np.array([threshold for threshold, _ in gradient])
    idx = np.minimum(np.searchsorted(thresholds, t, side="right"), len(gradient) - 1)
    stops = [rgb for _, rgb in gradient]
    return [[stops[i] for i in row] for row in idx.tolist()]


def get_gradient(name):
    try:
        return GRADIENTS[name]
    except KeyError:
        raise ValueError(f"unknown colour scheme: {name!r}") from None
