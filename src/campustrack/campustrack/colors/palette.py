"""Presentation colors (Tailwind class strings).

Changing the palette means bumping PALETTE_VERSION: assignments are stored per
version, so existing entities keep their color within a version.
"""

from __future__ import annotations

from typing import Optional

PALETTE_VERSION = 1

_HUES = (
    "blue",
    "purple",
    "green",
    "yellow",
    "pink",
    "cyan",
    "orange",
    "red",
    "indigo",
    "teal",
    "lime",
    "amber",
)

PALETTE = tuple(f"bg-{hue}-100 border-l-4 border-{hue}-400 text-{hue}-900" for hue in _HUES)

DEFAULT_COLOR = "bg-gray-100 border-l-4 border-gray-400 text-gray-900"


def color_for_index(index: Optional[int]) -> str:
    if index is None or index < 0:
        return DEFAULT_COLOR
    return PALETTE[index % len(PALETTE)]
