"""Frame renderer: rasterizes one scene into a fixed-size PNG frame.

Layout, top to bottom:

    ┌───────────────────────────┐
    │  background (full canvas) │
    │  ┌─────────────────────┐  │  translucent overlay panel (~55% height)
    │  │ HEADING             │  │
    │  │ narration           │  │
    │  │ supporting detail   │  │
    │  │    [  CTA pill  ]   │  │  only when the scene has a CTA
    │  └─────────────────────┘  │
    └───────────────────────────┘
"""

from __future__ import annotations

import asyncio
import io
from dataclasses import dataclass
from typing import Optional

import structlog
from PIL import Image, ImageDraw, ImageOps
from typing_extensions import assert_never

from story_shorts.config import settings
from story_shorts.errors import ImageLoadError
from story_shorts.models.scene import (
    ColorBackground,
    GradientBackground,
    ImageBackground,
    Scene,
)
from story_shorts.tools.colors import RGBA, paint_diagonal_gradient, parse_css_color, parse_gradient_stops
from story_shorts.tools.fonts import load_font
from story_shorts.tools.images import ImageFetcher, fetch_image

logger = structlog.get_logger()

Box = tuple[float, float, float, float]

_PANEL_INSET = 40


@dataclass(frozen=True)
class RenderOptions:
    width: int = 1080
    height: int = 1920
    font_family: Optional[str] = None

    @classmethod
    def from_settings(cls) -> "RenderOptions":
        return cls(
            width=settings.video_width,
            height=settings.video_height,
            font_family=settings.font_family or None,
        )


@dataclass(frozen=True)
class Palette:
    heading: RGBA
    body: RGBA
    accent: RGBA
    cta_fill: RGBA
    cta_text: RGBA


# "light" scenes sit on bright art, so the panel is dark and the text light.
PALETTES: dict[str, Palette] = {
    "light": Palette(
        heading=parse_css_color("#F8FAFC"),
        body=parse_css_color("#E2E8F0"),
        accent=parse_css_color("rgba(15, 23, 42, 0.55)"),
        cta_fill=parse_css_color("rgba(15, 23, 42, 0.85)"),
        cta_text=parse_css_color("#F8FAFC"),
    ),
    "dark": Palette(
        heading=parse_css_color("#0F172A"),
        body=parse_css_color("#1E293B"),
        accent=parse_css_color("rgba(248, 250, 252, 0.55)"),
        cta_fill=parse_css_color("#F8FAFC"),
        cta_text=parse_css_color("#0F172A"),
    ),
}


@dataclass(frozen=True)
class FontSet:
    heading: object
    narration: object
    supporting: object
    cta: object

    @classmethod
    def for_options(cls, options: RenderOptions) -> "FontSet":
        width = options.width
        family = options.font_family
        return cls(
            heading=load_font(round(width * 0.06), "bold", family),
            narration=load_font(round(width * 0.045), "regular", family),
            supporting=load_font(round(width * 0.035), "regular", family),
            cta=load_font(round(width * 0.04), "bold", family),
        )


@dataclass(frozen=True)
class TextBlock:
    lines: list[str]
    x: float
    y: float
    line_height: int

    @property
    def total_height(self) -> int:
        return len(self.lines) * self.line_height

    @property
    def bottom(self) -> float:
        return self.y + self.total_height


@dataclass(frozen=True)
class FrameLayout:
    panel_box: Box
    heading: TextBlock
    narration: TextBlock
    supporting: TextBlock
    cta_box: Optional[Box] = None


def wrap_text(text: str, font, max_width: float) -> list[str]:
    """Greedy word wrap by measured pixel width.

    Words are appended to the current line while it still fits; the word that
    would overflow starts the next line. A single word wider than
    *max_width* gets a line of its own.
    """
    lines: list[str] = []
    current: Optional[str] = None

    for word in text.split(" "):
        candidate = word if current is None else f"{current} {word}"
        if current is not None and font.getlength(candidate) > max_width:
            lines.append(current)
            current = word
        else:
            current = candidate

    if current:
        lines.append(current)
    return lines


def compute_layout(scene: Scene, options: RenderOptions, fonts: FontSet) -> FrameLayout:
    """Place the panel, the three text blocks and the optional CTA."""
    width, height = options.width, options.height
    padding_x = width * 0.08
    padding_top = height * 0.15
    text_x = padding_x + _PANEL_INSET
    max_text_width = width - padding_x * 2 - _PANEL_INSET * 2

    panel_box = (
        padding_x,
        padding_top - _PANEL_INSET,
        width - padding_x,
        padding_top - _PANEL_INSET + height * 0.55,
    )

    heading = TextBlock(
        lines=wrap_text(scene.title.upper(), fonts.heading, max_text_width),
        x=text_x,
        y=padding_top,
        line_height=round(width * 0.07),
    )
    narration = TextBlock(
        lines=wrap_text(scene.narration, fonts.narration, max_text_width),
        x=text_x,
        y=heading.bottom + height * 0.04,
        line_height=round(width * 0.055),
    )
    supporting = TextBlock(
        lines=wrap_text(scene.supporting_point, fonts.supporting, max_text_width),
        x=text_x,
        y=narration.bottom + height * 0.03,
        line_height=round(width * 0.045),
    )

    cta_box = None
    if scene.cta:
        button_width = width * 0.6
        button_height = round(height * 0.07)
        button_x = width / 2 - button_width / 2
        button_y = supporting.bottom + height * 0.05
        cta_box = (button_x, button_y, button_x + button_width, button_y + button_height)

    return FrameLayout(
        panel_box=panel_box,
        heading=heading,
        narration=narration,
        supporting=supporting,
        cta_box=cta_box,
    )


def _draw_background(
    scene: Scene,
    options: RenderOptions,
    image_bytes: Optional[bytes] = None,
) -> Image.Image:
    """Return an opaque RGB canvas with the scene background painted on it."""
    size = (options.width, options.height)
    background = scene.background

    if isinstance(background, GradientBackground):
        layer = paint_diagonal_gradient(options.width, options.height, parse_gradient_stops(background.value))
    elif isinstance(background, ColorBackground):
        layer = Image.new("RGBA", size, parse_css_color(background.value))
    elif isinstance(background, ImageBackground):
        try:
            with Image.open(io.BytesIO(image_bytes or b"")) as source:
                source.load()
                # Cover: scale so the smaller side matches, center-crop the rest
                layer = ImageOps.fit(
                    source.convert("RGBA"),
                    size,
                    method=Image.Resampling.LANCZOS,
                    centering=(0.5, 0.5),
                )
        except (OSError, Image.DecompressionBombError) as exc:
            raise ImageLoadError(background.value, "could not decode image") from exc
    else:
        assert_never(background)

    canvas = Image.new("RGBA", size, (0, 0, 0, 255))
    canvas.alpha_composite(layer)
    return canvas.convert("RGB")


def _pixel_box(box: Box) -> tuple[int, int, int, int]:
    x0, y0, x1, y1 = box
    return round(x0), round(y0), round(x1), round(y1)


def _draw_block(draw: ImageDraw.ImageDraw, block: TextBlock, font, fill: RGBA) -> None:
    for index, line in enumerate(block.lines):
        draw.text((block.x, block.y + index * block.line_height), line, font=font, fill=fill)


def _rasterize_frame(scene: Scene, options: RenderOptions, image_bytes: Optional[bytes]) -> bytes:
    """Paint, lay out and PNG-encode one frame. Blocking; run it off the event loop."""
    fonts = FontSet.for_options(options)
    palette = PALETTES[scene.overlay]

    frame = _draw_background(scene, options, image_bytes)
    layout = compute_layout(scene, options, fonts)

    # RGBA draw mode blends translucent fills into the RGB canvas
    draw = ImageDraw.Draw(frame, "RGBA")
    draw.rectangle(_pixel_box(layout.panel_box), fill=palette.accent)

    _draw_block(draw, layout.heading, fonts.heading, palette.heading)
    _draw_block(draw, layout.narration, fonts.narration, palette.body)
    _draw_block(draw, layout.supporting, fonts.supporting, palette.heading)

    if layout.cta_box is not None:
        x0, y0, x1, y1 = _pixel_box(layout.cta_box)
        draw.rounded_rectangle((x0, y0, x1, y1), radius=(y1 - y0) // 2, fill=palette.cta_fill)
        draw.text(
            ((x0 + x1) / 2, (y0 + y1) / 2),
            scene.cta,
            font=fonts.cta,
            fill=palette.cta_text,
            anchor="mm",
        )

    buffer = io.BytesIO()
    frame.save(buffer, format="PNG")

    logger.debug(
        "render_frame.done",
        scene_id=scene.id,
        background=scene.background.kind,
        has_cta=layout.cta_box is not None,
        bytes_written=buffer.tell(),
    )
    return buffer.getvalue()


async def render_frame(
    scene: Scene,
    options: Optional[RenderOptions] = None,
    *,
    fetch_image: ImageFetcher = fetch_image,
) -> bytes:
    """Render *scene* to PNG bytes.

    The background image download stays on the event loop; painting and PNG
    encoding run in a worker thread.

    Raises:
        ImageLoadError: If an image background cannot be fetched or decoded.
    """
    options = options or RenderOptions()

    image_bytes = None
    if isinstance(scene.background, ImageBackground):
        image_bytes = await fetch_image(scene.background.value)

    return await asyncio.to_thread(_rasterize_frame, scene, options, image_bytes)
