# wave_surface test configuration and shared fixtures
import pytest

from wave_surface.config import GerstnerConfig, RibbonConfig, WaveParams


class FakeDisplay:
    """Records what the renderer and app do to the display."""

    def __init__(self, width=80, height=24, events=None):
        self.width = width
        self.height = height
        self.events = list(events or [])
        self.contents = {}
        self.cleared = 0
        self.shown = 0
        self.synced = 0
        self.initialized = False
        self.finished = False
        self.polls = 0

    def init(self):
        self.initialized = True

    def fini(self):
        self.finished = True

    def size(self):
        return self.width, self.height

    def sync(self):
        self.synced += 1

    def clear(self):
        self.cleared += 1
        self.contents = {}

    def set_content(self, x, y, char, rgb):
        self.contents[(x, y)] = (char, rgb)

    def show(self):
        self.shown += 1

    def poll_event(self):
        self.polls += 1
        if self.events:
            return self.events.pop(0)
        return None


@pytest.fixture
def display():
    return FakeDisplay()


@pytest.fixture
def single_wave_config():
    """One flat-steepness wave travelling along +x."""
    return GerstnerConfig(
        grid_width=4,
        grid_depth=4,
        waves=[WaveParams(amplitude=0.1, wavelength=1.0, speed=1.0,
                          direction=(1.0, 0.0), steepness=0.0)],
    )


@pytest.fixture
def small_gerstner_config():
    return GerstnerConfig(grid_width=12, grid_depth=9)


@pytest.fixture
def small_ribbon_config():
    return RibbonConfig(num_layers=4, num_points=20)


@pytest.fixture
def make_display():
    return FakeDisplay
