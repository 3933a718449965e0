"""Unit tests for wave_surface.app."""

import os
import signal

import pytest

import wave_surface.app as app_module
from wave_surface.app import QUIT_KEYS, App, main
from wave_surface.config import AppConfig, GerstnerConfig, RibbonConfig
from wave_surface.surface import GerstnerSurface, RibbonSurface
from wave_surface.terminal import Event, EventKind, TerminalError


def fast_config(**kwargs):
    kwargs.setdefault("frame_delay", 0.0)
    return AppConfig(
        gerstner=GerstnerConfig(grid_width=10, grid_depth=8),
        ribbon=RibbonConfig(num_layers=3, num_points=16),
        **kwargs,
    )


@pytest.fixture
def started(make_display):
    def _start(events=(), **kwargs):
        display = make_display(events=events)
        app = App(fast_config(**kwargs), display)
        app.start()
        return app, display
    return _start


# ─────────────────────────────────────────────────────────────────────────────
# Start-up
# ─────────────────────────────────────────────────────────────────────────────


class TestStart:
    def test_start_builds_pipeline(self, started):
        app, display = started()
        assert display.initialized
        assert app.running
        assert isinstance(app.surface, GerstnerSurface)
        assert (app.renderer.width, app.renderer.height) == display.size()

    def test_ribbon_variant(self, started):
        app, _ = started(variant="ribbon")
        assert isinstance(app.surface, RibbonSurface)
        assert app.surface.size() == (3, 16)

    def test_bad_config_fails_before_display(self, make_display):
        display = make_display()
        app = App(fast_config(color_scheme="neon"), display)
        with pytest.raises(ValueError):
            app.start()
        assert not display.initialized

    def test_display_failure_propagates(self, make_display):
        display = make_display()

        def broken():
            raise TerminalError("no tty")

        display.init = broken
        app = App(fast_config(), display)
        with pytest.raises(TerminalError):
            app.start()
        assert not app.running


# ─────────────────────────────────────────────────────────────────────────────
# Events
# ─────────────────────────────────────────────────────────────────────────────


class TestEvents:
    @pytest.mark.parametrize("key", sorted(QUIT_KEYS))
    def test_quit_keys(self, started, key):
        app, _ = started()
        assert app.handle_event(Event(EventKind.KEY, key))

    @pytest.mark.parametrize("key", ["x", " ", "sequence", "w"])
    def test_other_keys_ignored(self, started, key):
        app, _ = started()
        assert not app.handle_event(Event(EventKind.KEY, key))

    def test_resize_reallocates(self, started):
        app, display = started()
        display.width, display.height = 120, 40
        assert not app.handle_event(Event(EventKind.RESIZE))
        assert display.synced == 1
        assert app.renderer.buffer.chars.shape == (40, 120)


# ─────────────────────────────────────────────────────────────────────────────
# Loop
# ─────────────────────────────────────────────────────────────────────────────


class TestRun:
    def test_quit_key_ends_loop(self, started):
        app, display = started(events=[None, None, Event(EventKind.KEY, "q")])
        t = app.run()
        assert display.shown == 2
        assert t == pytest.approx(2 * app.config.time_step)
        assert not app.running
        assert app.quit_reason == "key 'q'"

    def test_frames_follow_time(self, started):
        app, display = started(events=[None, Event(EventKind.KEY, "escape")])
        app.run()
        # Surface holds the last rendered tick, t = 0
        reference = GerstnerSurface(app.config.gerstner)
        reference.update(0.0)
        assert (app.surface.points == reference.points).all()

    def test_resize_mid_run(self, started):
        app, display = started(events=[Event(EventKind.RESIZE), Event(EventKind.KEY, "Q")])
        display.width, display.height = 30, 10
        app.run()
        assert display.synced == 1
        assert (app.renderer.width, app.renderer.height) == (30, 10)
        assert display.shown == 1

    def test_keyboard_interrupt_is_graceful(self, started):
        app, display = started()

        def interrupt():
            raise KeyboardInterrupt

        display.poll_event = interrupt
        app.run()
        assert app.quit_reason == "interrupt"
        assert not app.running

    @pytest.mark.skipif(os.name == "nt", reason="SIGTERM delivery is POSIX only")
    def test_sigterm_stops_after_tick(self, started):
        app, display = started()
        before = signal.getsignal(signal.SIGTERM)
        polls = []

        def poll():
            polls.append(1)
            if len(polls) == 2:
                os.kill(os.getpid(), signal.SIGTERM)
            return None

        display.poll_event = poll
        app.run()
        assert app.quit_reason == "SIGTERM"
        assert display.shown == 2
        assert signal.getsignal(signal.SIGTERM) == before

    def test_stop(self, started):
        app, _ = started()
        app.stop()
        assert not app.running
        assert app.run() == 0.0


# ─────────────────────────────────────────────────────────────────────────────
# main
# ─────────────────────────────────────────────────────────────────────────────


class TestMain:
    def test_graceful_exit(self, monkeypatch, make_display):
        display = make_display(events=[None, Event(EventKind.KEY, "q")])
        monkeypatch.setattr(app_module, "Terminal", lambda: display)
        monkeypatch.setattr(app_module, "AppConfig", fast_config)
        assert main() == 0
        assert display.finished
        assert display.shown == 1

    def test_init_failure_exits_non_zero(self, monkeypatch, make_display):
        display = make_display()

        def broken():
            raise TerminalError("not a terminal")

        display.init = broken
        monkeypatch.setattr(app_module, "Terminal", lambda: display)
        monkeypatch.setattr(app_module, "AppConfig", fast_config)
        assert main() == 1
        assert display.shown == 0

    def test_interrupt_after_init_restores_display(self, monkeypatch, make_display):
        display = make_display()

        def interrupted(*args):
            raise KeyboardInterrupt

        monkeypatch.setattr(app_module, "Terminal", lambda: display)
        monkeypatch.setattr(app_module, "AppConfig", fast_config)
        monkeypatch.setattr(app_module, "Renderer", interrupted)
        assert main() == 0
        assert display.initialized
        assert display.finished
