"""
Animation loop: input, surface update, render, pacing.
"""

import signal
import sys
import time

from .config import LOG_LEVEL, AppConfig
from .log import Log
from .palette import get_gradient
from .renderer import Renderer
from .surface import make_surface
from .terminal import (
    KEY_CTRL_C,
    KEY_ESCAPE,
    EventKind,
    Terminal,
    TerminalError,
)


QUIT_KEYS = frozenset(("q", "Q", KEY_ESCAPE, KEY_CTRL_C))


class App:
    """Owns the display, the surface and the renderer for one run."""

    def __init__(self, config=None, display=None):
        self.config = config or AppConfig()
        self.display = display or Terminal()
        self.renderer = None
        self.surface = None
        self.running = False
        self.quit_reason = None
        self._log = Log.get("wave_surface")

    def start(self):
        """Acquire the display. Raises TerminalError on failure."""
        cfg = self.config
        surface_config = cfg.ribbon if cfg.variant == "ribbon" else cfg.gerstner
        self.surface = make_surface(cfg.variant, surface_config)
        gradient = get_gradient(cfg.color_scheme)

        self.display.init()
        self.renderer = Renderer(self.display, gradient)
        self.running = True
        self._log.debug("started %s surface at %dx%d", cfg.variant,
                        self.renderer.width, self.renderer.height)

    def stop(self, reason="stopped"):
        if self.running:
            self.quit_reason = reason
        self.running = False

    def _on_signal(self, signum, frame):
        self.stop(signal.Signals(signum).name)

    def handle_event(self, event):
        """Returns True if the event asks to quit."""
        if event.kind == EventKind.KEY:
            return event.key in QUIT_KEYS
        if event.kind == EventKind.RESIZE:
            self.display.sync()
            self.renderer.resize()
        return False

    def update(self, t):
        self.surface.update(t)

    def render(self):
        self.renderer.clear()
        self.renderer.render_surface(self.surface)
        self.renderer.flush()

    def run(self):
        cfg = self.config
        previous = signal.signal(signal.SIGTERM, self._on_signal)
        t = 0.0

        try:
            while self.running:
                tick_start = time.monotonic()

                event = self.display.poll_event()
                if event is not None and self.handle_event(event):
                    self.stop(f"key {event.key!r}")
                    break

                self.update(t)
                self.render()
                t += cfg.time_step

                remaining = cfg.frame_delay - (time.monotonic() - tick_start)
                if remaining > 0:
                    time.sleep(remaining)

        except KeyboardInterrupt:
            self.stop("interrupt")
        finally:
            signal.signal(signal.SIGTERM, previous)

        return t


def main():
    Log.enable_color(sys.stderr.isatty())
    Log.set_level(LOG_LEVEL)
    log = Log.get("wave_surface")

    app = App()
    try:
        app.start()
        app.run()
    except TerminalError as err:
        log.error("display initialization failed: %s", err)
        return 1
    except KeyboardInterrupt:
        app.quit_reason = "interrupt"
    finally:
        # No-op unless init() got as far as taking over the terminal
        app.display.fini()

    log.info("exiting: %s", app.quit_reason)
    print("Wave surface ended.")
    return 0
