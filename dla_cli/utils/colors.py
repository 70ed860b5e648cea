"""
Color utilities for terminal output.
"""

import os
import sys
from typing import Dict, Iterable, List

from dla_cli.core.errors import ConfigError


class Colors:
    """ANSI color codes for terminal output."""

    # Regular colors
    RED = '\033[0;31m'
    GREEN = '\033[0;32m'
    YELLOW = '\033[0;33m'
    BLUE = '\033[0;34m'
    MAGENTA = '\033[0;35m'
    CYAN = '\033[0;36m'
    WHITE = '\033[0;37m'

    # High intensity colors
    BRIGHT_RED = '\033[0;91m'
    BRIGHT_GREEN = '\033[0;92m'
    BRIGHT_YELLOW = '\033[0;93m'
    BRIGHT_BLUE = '\033[0;94m'
    BRIGHT_MAGENTA = '\033[0;95m'
    BRIGHT_CYAN = '\033[0;96m'

    # Reset
    RESET = '\033[0m'

    @staticmethod
    def colorize(text: str, color: str) -> str:
        """Apply color to text. An empty color leaves the text untouched."""
        if not color:
            return text
        return f"{color}{text}{Colors.RESET}"

    @staticmethod
    def colorize_bytes(data: bytes, color: str) -> bytes:
        """Apply color to raw bytes without decoding them."""
        if not color:
            return data
        return color.encode('ascii') + data + Colors.RESET.encode('ascii')

    @staticmethod
    def error(text: str) -> str:
        """Format text as error message."""
        return Colors.colorize(text, Colors.RED)

    @staticmethod
    def warning(text: str) -> str:
        """Format text as warning message."""
        return Colors.colorize(text, Colors.YELLOW)


# Names accepted in configuration files, mapped to escape sequences
COLOR_NAMES: Dict[str, str] = {
    'red': Colors.RED,
    'green': Colors.GREEN,
    'yellow': Colors.YELLOW,
    'blue': Colors.BLUE,
    'magenta': Colors.MAGENTA,
    'cyan': Colors.CYAN,
    'white': Colors.WHITE,
    'bright_red': Colors.BRIGHT_RED,
    'bright_green': Colors.BRIGHT_GREEN,
    'bright_yellow': Colors.BRIGHT_YELLOW,
    'bright_blue': Colors.BRIGHT_BLUE,
    'bright_magenta': Colors.BRIGHT_MAGENTA,
    'bright_cyan': Colors.BRIGHT_CYAN,
}

DEFAULT_PALETTE_NAMES: List[str] = [
    'bright_red',
    'bright_green',
    'bright_yellow',
    'bright_blue',
    'bright_magenta',
    'bright_cyan',
    'red',
    'green',
    'yellow',
    'blue',
    'magenta',
    'cyan',
]


def color_code(name: str, enabled: bool = True) -> str:
    """
    Look up the escape sequence for a color name.

    Args:
        name: Color name from COLOR_NAMES
        enabled: When False, return the empty (no-op) color

    Returns:
        Escape sequence, or '' when colors are disabled

    Raises:
        ConfigError: If the name is not a known color
    """
    try:
        code = COLOR_NAMES[name.lower()]
    except KeyError:
        raise ConfigError(
            f"Unknown color '{name}', expected one of: {', '.join(sorted(COLOR_NAMES))}"
        ) from None
    return code if enabled else ''


class Palette:
    """An ordered, non-empty sequence of colors assigned round-robin."""

    def __init__(self, colors: Iterable[str]):
        self._colors = tuple(colors)
        if not self._colors:
            raise ValueError("Palette must contain at least one color")

    @classmethod
    def from_names(cls, names: Iterable[str], enabled: bool = True) -> "Palette":
        """Build a palette from configured color names."""
        return cls(color_code(name, enabled) for name in names)

    def __len__(self) -> int:
        return len(self._colors)

    def __getitem__(self, index: int) -> str:
        return self._colors[index % len(self._colors)]

    def __iter__(self):
        return iter(self._colors)


def colors_enabled(stream=None, no_color: bool = False) -> bool:
    """Decide whether ANSI colors should be written to a stream."""
    if no_color or os.environ.get('NO_COLOR'):
        return False
    stream = stream if stream is not None else sys.stdout
    isatty = getattr(stream, 'isatty', None)
    return bool(isatty and isatty())
