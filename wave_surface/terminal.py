"""
ANSI terminal display and keyboard input.

Frames are drawn with 24-bit foreground colours and written in one go.
Keyboard input uses cbreak mode and a non-blocking select() on stdin, or
msvcrt's console key queue on Windows.
"""

import ctypes
import enum
import os
import select
import shutil
import sys
from collections import deque
from dataclasses import dataclass

import numpy as np

from .palette import RESET

WINDOWS = os.name == "nt"

if WINDOWS:
    import msvcrt
else:
    import termios
    import tty


HIDE_CURSOR = "\033[?25l"
SHOW_CURSOR = "\033[?25h"
CLEAR_SCREEN = "\033[2J"
CURSOR_HOME = "\033[1;1H"

KEY_ESCAPE = "escape"
KEY_CTRL_C = "ctrl-c"
KEY_SEQUENCE = "sequence"


class TerminalError(Exception):
    """The terminal could not be acquired or configured."""


class EventKind(enum.Enum):
    KEY = "key"
    RESIZE = "resize"


@dataclass(frozen=True)
class Event:
    kind: EventKind
    key: str = None


# --- Windows ANSI Support ---
def enable_windows_ansi():
    if WINDOWS:
        kernel32 = ctypes.windll.kernel32
        hStdOut = kernel32.GetStdHandle(-11)
        mode = ctypes.c_ulong()
        kernel32.GetConsoleMode(hStdOut, ctypes.byref(mode))
        mode.value |= 4  # ENABLE_VIRTUAL_TERMINAL_PROCESSING
        kernel32.SetConsoleMode(hStdOut, mode)


def get_terminal_size():
    cols, rows = shutil.get_terminal_size()
    # Leave the last row free to avoid scroll jitter at the bottom
    return max(1, cols), max(1, rows - 1)


def decode_key(data):
    if data == "\x1b":
        return KEY_ESCAPE
    if data.startswith("\x1b"):
        return KEY_SEQUENCE
    if data[0] == "\x03":
        return KEY_CTRL_C
    return data[0]


def split_keys(data):
    """
    Break one read of terminal input into keys.

    CSI (ESC [ ... final byte) and SS3 (ESC O x) sequences come back as a
    single KEY_SEQUENCE. An ESC that starts neither is a key of its own.
    """
    keys = []
    i = 0
    while i < len(data):
        if data[i] == "\x1b" and data[i + 1:i + 2] == "[":
            end = i + 2
            while end < len(data) and not "\x40" <= data[end] <= "\x7e":
                end += 1
            keys.append(KEY_SEQUENCE)
            i = end + 1
        elif data[i] == "\x1b" and data[i + 1:i + 2] == "O":
            keys.append(KEY_SEQUENCE)
            i += 3
        else:
            keys.append(decode_key(data[i]))
            i += 1
    return keys


def ansi_fg_grid(rgb):
    """Foreground escape for every cell of an (H, W, 3) colour array."""
    return np.char.add(
        "\033[38;2;",
        np.char.add(
            rgb[..., 0].astype(str),
            np.char.add(
                ";",
                np.char.add(
                    rgb[..., 1].astype(str),
                    np.char.add(";", np.char.add(rgb[..., 2].astype(str), "m")),
                ),
            ),
        ),
    )


class Terminal:
    """Character-grid display backed by the controlling terminal."""

    def __init__(self, stdin=None, stdout=None):
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stdout
        self._old_mode = None
        self._active = False
        self._pending = deque()
        self.width, self.height = 1, 1
        self._alloc()

    def __enter__(self):
        self.init()
        return self

    def __exit__(self, *exc):
        self.fini()
        return False

    def _alloc(self):
        w, h = self.width, self.height
        self._chars = [[" "] * w for _ in range(h)]
        self._colors = [[(0, 0, 0)] * w for _ in range(h)]
        self._set = [[False] * w for _ in range(h)]

    def _write(self, text):
        self._stdout.write(text)
        self._stdout.flush()

    def init(self):
        if self._active:
            return
        if not self._stdout.isatty() or not self._stdin.isatty():
            raise TerminalError("stdin and stdout must be attached to a terminal")

        enable_windows_ansi()
        if not WINDOWS:
            fd = self._stdin.fileno()
            try:
                self._old_mode = termios.tcgetattr(fd)
                tty.setcbreak(fd)
            except termios.error as err:
                raise TerminalError(f"cannot configure terminal: {err}") from err

        self._active = True
        self._pending.clear()
        self.sync()
        self._write(HIDE_CURSOR)

    def fini(self):
        if not self._active:
            return
        self._active = False
        self._write(RESET + CLEAR_SCREEN + CURSOR_HOME + SHOW_CURSOR)
        if self._old_mode is not None:
            termios.tcsetattr(self._stdin.fileno(), termios.TCSADRAIN, self._old_mode)
            self._old_mode = None

    def size(self):
        return self.width, self.height

    def sync(self):
        """Pick up the current terminal size and start from a blank screen."""
        self.width, self.height = get_terminal_size()
        self._alloc()
        self._write(CLEAR_SCREEN)

    def clear(self):
        self._alloc()

    def set_content(self, x, y, char, rgb):
        if x < 0 or x >= self.width or y < 0 or y >= self.height:
            return
        self._chars[y][x] = char
        self._colors[y][x] = rgb
        self._set[y][x] = True

    def show(self):
        colors = np.array(self._colors, dtype=np.uint8)
        codes = np.where(np.array(self._set), ansi_fg_grid(colors), "")
        output_grid = np.char.add(codes, np.array(self._chars, dtype="<U1"))

        lines = ["".join(row) for row in output_grid]
        frame = CURSOR_HOME + (RESET + "\n").join(lines) + RESET

        self._stdout.buffer.write(frame.encode("utf-8"))
        self._stdout.flush()

    def _read_keys(self):
        if WINDOWS:
            if not self._active:
                return []
            keys = []
            while msvcrt.kbhit():
                ch = msvcrt.getwch()
                if ch in ("\x00", "\xe0"):
                    # Arrow and function keys arrive as a prefix plus a code
                    msvcrt.getwch()
                    keys.append(KEY_SEQUENCE)
                else:
                    keys.append(decode_key(ch))
            return keys

        if self._old_mode is None:
            return []
        ready, _, _ = select.select([self._stdin], [], [], 0)
        if not ready:
            return []
        data = os.read(self._stdin.fileno(), 32).decode("utf-8", "replace")
        return split_keys(data)

    def poll_event(self):
        """Resize first, then the oldest pending key. None if idle."""
        if get_terminal_size() != (self.width, self.height):
            return Event(EventKind.RESIZE)
        if not self._pending:
            self._pending.extend(self._read_keys())
        if not self._pending:
            return None
        return Event(EventKind.KEY, self._pending.popleft())
