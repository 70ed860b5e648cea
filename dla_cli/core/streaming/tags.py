"""
Tag table construction.

Every source gets a prefix of the same visible width so that log content
lines up in one column. Colors come from the palette in sorted-name order,
which keeps a given set of containers colored identically across runs.
"""

import logging
from collections.abc import Mapping
from typing import Dict, Iterable

from dla_cli.core.errors import UnknownTagError
from dla_cli.utils.colors import Colors, Palette

logger = logging.getLogger(__name__)

DEFAULT_SEPARATOR = " | "


class TagTable(Mapping):
    """Read-only mapping of display name to formatted tag bytes."""

    def __init__(self, tags: Dict[str, bytes], width: int):
        self._tags = dict(tags)
        self.width = width

    def __getitem__(self, name: str) -> bytes:
        try:
            return self._tags[name]
        except KeyError:
            raise UnknownTagError(f"No tag registered for source '{name}'") from None

    def __iter__(self):
        return iter(self._tags)

    def __len__(self) -> int:
        return len(self._tags)

    def __call__(self, name: str) -> bytes:
        return self[name]


def build_tag_table(
    display_names: Iterable[str],
    separator: str = DEFAULT_SEPARATOR,
    palette: Palette = None
) -> TagTable:
    """
    Build the tag for every display name.

    Args:
        display_names: Names of all sources in this run
        separator: Text placed after the padded name
        palette: Colors assigned round-robin over the sorted names

    Returns:
        TagTable keyed by the undecorated display name
    """
    if palette is None:
        palette = Palette([''])

    names = sorted(display_names)
    width = max((len(name) for name in names), default=0)

    tags = {}
    for i, name in enumerate(names):
        formatted = name + " " * (width - len(name)) + separator
        color = palette[i % len(palette)]
        tags[name] = Colors.colorize(formatted, color).encode('utf-8')

    logger.debug(f"Built {len(tags)} tags with width {width}")
    return TagTable(tags, width)
