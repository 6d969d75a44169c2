"""CSS color and linear-gradient parsing for Pillow drawing."""

from __future__ import annotations

import re

import numpy as np
from PIL import Image, ImageColor

RGBA = tuple[int, int, int, int]

DEFAULT_GRADIENT_STOPS: tuple[str, ...] = ("#0f172a", "#1e293b", "#3b82f6")

_RGB_FUNC_RE = re.compile(
    r"^rgba?\(\s*([\d.]+)\s*,\s*([\d.]+)\s*,\s*([\d.]+)\s*(?:,\s*([\d.]+)(%?)\s*)?\)$",
    re.IGNORECASE,
)
_GRADIENT_RE = re.compile(r"^(?:repeating-)?linear-gradient\((.*)\)$", re.IGNORECASE | re.DOTALL)
# Trailing stop position, e.g. "rgba(...) 50%" or "#fff 120px"
_STOP_POSITION_RE = re.compile(r"\s+-?[\d.]+(?:%|px|em|rem)?$")


def _clamp_channel(value: float) -> int:
    return max(0, min(255, round(value)))


def parse_css_color(value: str) -> RGBA:
    """Parse a CSS color into an RGBA tuple.

    ``rgb()``/``rgba()`` take CSS alpha (0-1 or a percentage), which Pillow's
    ``ImageColor`` does not accept; everything else (hex, names, ``hsl()``) is
    delegated to Pillow.

    Raises:
        ValueError: If *value* is not a color.
    """
    token = value.strip()
    match = _RGB_FUNC_RE.match(token)
    if match:
        red, green, blue, alpha, percent = match.groups()
        if alpha is None:
            alpha_channel = 255
        elif percent:
            alpha_channel = _clamp_channel(float(alpha) * 255 / 100)
        else:
            alpha_channel = _clamp_channel(float(alpha) * 255)
        return (
            _clamp_channel(float(red)),
            _clamp_channel(float(green)),
            _clamp_channel(float(blue)),
            alpha_channel,
        )

    rgb = ImageColor.getrgb(token)
    if len(rgb) == 3:
        return (*rgb, 255)
    return rgb


def _split_top_level(body: str) -> list[str]:
    """Split on commas that are not nested inside parentheses."""
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for char in body:
        if char == "(":
            depth += 1
        elif char == ")":
            depth = max(0, depth - 1)
        if char == "," and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    parts.append("".join(current))
    return [part.strip() for part in parts if part.strip()]


def parse_gradient_stops(value: str) -> list[RGBA]:
    """Extract ordered color stops from a CSS ``linear-gradient()`` string.

    Best effort: stop positions are dropped, direction tokens and anything
    else that is not a color are skipped. Falls back to
    ``DEFAULT_GRADIENT_STOPS`` when nothing usable remains.
    """
    match = _GRADIENT_RE.match(value.strip())
    body = match.group(1) if match else value

    stops: list[RGBA] = []
    for token in _split_top_level(body):
        token = _STOP_POSITION_RE.sub("", token)
        try:
            stops.append(parse_css_color(token))
        except ValueError:
            continue

    if not stops:
        return [parse_css_color(color) for color in DEFAULT_GRADIENT_STOPS]
    return stops


def paint_diagonal_gradient(width: int, height: int, stops: list[RGBA]) -> Image.Image:
    """Paint evenly spaced *stops* along the top-left to bottom-right diagonal."""
    if len(stops) == 1:
        return Image.new("RGBA", (width, height), stops[0])

    y_coords, x_coords = np.mgrid[0:height, 0:width].astype(np.float32)
    # Projection onto the (width, height) vector, normalized to 0..1
    grad_t = (x_coords * width + y_coords * height) / float(width * width + height * height)
    grad_t = np.clip(grad_t, 0.0, 1.0)

    positions = np.linspace(0.0, 1.0, len(stops))
    colors = np.array(stops, dtype=np.float32)

    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    for channel in range(4):
        pixels[:, :, channel] = np.interp(grad_t, positions, colors[:, channel]).round().astype(np.uint8)

    return Image.fromarray(pixels)
