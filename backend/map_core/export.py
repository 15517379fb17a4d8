"""
Map image export.

Draws the given locations onto a plain projected canvas with Pillow: grid, route
lines in visit order, category-coloured markers with labels, optional title,
stats panel and watermark. Layout is expressed in logical pixels of the chosen
size preset and scaled by the quality preset's DPI.
"""
import io
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Tuple

from PIL import Image, ImageDraw, ImageFont

from map_core.categories import category_info
from map_core.location import Location, short_name
from map_core.stats import count_countries

EXPORT_SIZES: dict[str, tuple[int, int]] = {
    "social": (1200, 630),
    "story": (1080, 1920),
    "post": (1080, 1080),
    "custom": (1920, 1080),
}

# quality -> (dpi, compression)
QUALITY_SETTINGS: dict[str, tuple[int, float]] = {
    "standard": (72, 0.8),
    "high": (150, 0.9),
    "ultra": (300, 1.0),
}

EXPORT_FORMATS = ("png", "jpg")
EXPORT_MAP_STYLES = ("light", "dark", "satellite", "outdoors")
EXPORT_THEMES = ("modern", "vintage", "minimal")

TITLE = "My Travel Memories"
WATERMARK = "Created with Map My Memories"

MARKER_RADIUS = 16
GRID_SIZE = 50
# Fraction of the coordinate span added around the locations.
BOUNDS_PADDING = 0.1
# Used instead when all locations share one latitude or longitude.
MIN_PADDING_DEG = 1.0

_LIGHT = {
    "background": "#f8fafc",
    "map": "#ffffff",
    "grid": "#e2e8f0",
    "route": "#cbd5e1",
    "text": "#1e293b",
    "panel": (255, 255, 255, 230),
    "panel_border": "#e2e8f0",
    "watermark": (30, 41, 59, 153),
}
_DARK = {
    "background": "#0f172a",
    "map": "#1e293b",
    "grid": "#334155",
    "route": "#475569",
    "text": "#f1f5f9",
    "panel": (30, 41, 59, 230),
    "panel_border": "#475569",
    "watermark": (241, 245, 249, 153),
}


@dataclass
class ExportOptions:
    format: str = "png"
    quality: str = "high"
    size: str = "social"
    show_stats: bool = True
    show_title: bool = True
    show_watermark: bool = True
    map_style: str = "light"
    theme: str = "modern"

    def __post_init__(self) -> None:
        if self.format not in EXPORT_FORMATS:
            raise ValueError(f"unknown format '{self.format}'")
        if self.quality not in QUALITY_SETTINGS:
            raise ValueError(f"unknown quality '{self.quality}'")
        if self.size not in EXPORT_SIZES:
            raise ValueError(f"unknown size '{self.size}'")
        if self.map_style not in EXPORT_MAP_STYLES:
            raise ValueError(f"unknown map style '{self.map_style}'")
        if self.theme not in EXPORT_THEMES:
            raise ValueError(f"unknown theme '{self.theme}'")

    @property
    def media_type(self) -> str:
        return "image/png" if self.format == "png" else "image/jpeg"


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    """Convert "#rrggbb" to an (r, g, b) tuple."""
    hex_color = hex_color.lstrip("#")
    return tuple(int(hex_color[i:i + 2], 16) for i in (0, 2, 4))


def _bounds(locations: list[Location]) -> tuple[float, float, float, float]:
    """(north, south, east, west) around the locations, padded."""
    lats = [loc.latitude for loc in locations]
    lngs = [loc.longitude for loc in locations]
    lat_pad = (max(lats) - min(lats)) * BOUNDS_PADDING or MIN_PADDING_DEG
    lng_pad = (max(lngs) - min(lngs)) * BOUNDS_PADDING or MIN_PADDING_DEG
    return max(lats) + lat_pad, min(lats) - lat_pad, max(lngs) + lng_pad, min(lngs) - lng_pad


def _visit_order(locations: list[Location]) -> list[Location]:
    """Oldest visit first; undated locations after the dated ones."""
    return sorted(locations, key=lambda loc: (loc.visited_date is None, loc.visited_date or date.min))


def _dashed_line(draw, start, end, fill, width, dash) -> None:
    (x0, y0), (x1, y1) = start, end
    length = ((x1 - x0) ** 2 + (y1 - y0) ** 2) ** 0.5
    if length == 0:
        return
    dx, dy = (x1 - x0) / length, (y1 - y0) / length
    pos = 0.0
    while pos < length:
        seg_end = min(pos + dash, length)
        draw.line(
            [(x0 + dx * pos, y0 + dy * pos), (x0 + dx * seg_end, y0 + dy * seg_end)],
            fill=fill,
            width=width,
        )
        pos += dash * 2


class _Canvas:
    """Draws in logical pixels onto an image scaled by the DPI factor."""

    def __init__(self, width: int, height: int, scale: float, background: str) -> None:
        self.scale = scale
        self.image = Image.new("RGB", (round(width * scale), round(height * scale)), hex_to_rgb(background))
        self.draw = ImageDraw.Draw(self.image, "RGBA")
        self._fonts: dict[int, ImageFont.ImageFont] = {}

    def px(self, v: float) -> float:
        return v * self.scale

    def font(self, size: int):
        if size not in self._fonts:
            self._fonts[size] = ImageFont.load_default(size=max(1, round(size * self.scale)))
        return self._fonts[size]

    def text(self, x: float, y: float, text: str, size: int, fill, align: str = "left") -> None:
        """Text whose vertical middle sits at y; x is the left, centre or right edge."""
        font = self.font(size)
        width = self.draw.textlength(text, font=font)
        left = self.px(x)
        if align == "center":
            left -= width / 2
        elif align == "right":
            left -= width
        self.draw.text((left, self.px(y) - self.px(size) / 2), text, font=font, fill=fill)


def render_map_image(locations: Iterable[Location], options: ExportOptions, owner_email: str = "") -> bytes:
    """Render locations to PNG or JPEG bytes. Raises ValueError when there is nothing to draw."""
    items = list(locations)
    if not items:
        raise ValueError("No locations to export")

    width, height = EXPORT_SIZES[options.size]
    dpi, compression = QUALITY_SETTINGS[options.quality]
    palette = _DARK if options.map_style == "dark" else _LIGHT
    canvas = _Canvas(width, height, dpi / 72, palette["background"])
    draw, px = canvas.draw, canvas.px

    # Map area leaves room for the title above and the stats panel below.
    map_x = 40
    map_y = 120 if options.show_title else 40
    map_w = width - 80
    map_h = height - (160 if options.show_title else 80) - (120 if options.show_stats else 0)
    draw.rectangle([px(map_x), px(map_y), px(map_x + map_w), px(map_y + map_h)], fill=palette["map"])

    for gx in range(map_x, map_x + map_w + 1, GRID_SIZE):
        draw.line([(px(gx), px(map_y)), (px(gx), px(map_y + map_h))], fill=palette["grid"], width=1)
    for gy in range(map_y, map_y + map_h + 1, GRID_SIZE):
        draw.line([(px(map_x), px(gy)), (px(map_x + map_w), px(gy))], fill=palette["grid"], width=1)

    north, south, east, west = _bounds(items)

    def project(loc: Location) -> tuple[float, float]:
        x = map_x + (loc.longitude - west) / (east - west) * map_w
        y = map_y + (north - loc.latitude) / (north - south) * map_h
        return x, y

    if len(items) > 1 and options.theme != "minimal":
        route = [project(loc) for loc in _visit_order(items)]
        for (x0, y0), (x1, y1) in zip(route, route[1:]):
            _dashed_line(
                draw,
                (px(x0), px(y0)),
                (px(x1), px(y1)),
                fill=palette["route"],
                width=max(1, round(px(2))),
                dash=px(5),
            )

    r = MARKER_RADIUS
    for loc in items:
        x, y = project(loc)
        color = hex_to_rgb(category_info(loc.category).color)
        draw.ellipse([px(x + 2 - r), px(y + 2 - r), px(x + 2 + r), px(y + 2 + r)], fill=(0, 0, 0, 51))
        draw.ellipse(
            [px(x - r), px(y - r), px(x + r), px(y + r)],
            fill=color,
            outline="#ffffff",
            width=max(1, round(px(3))),
        )
        if options.theme != "minimal":
            canvas.text(x, y + 35, short_name(loc.name), 12, palette["text"], align="center")

    if options.show_title:
        canvas.text(width / 2, 60, TITLE, 36, palette["text"], align="center")

    if options.show_stats:
        stats_y = height - 100
        draw.rectangle(
            [px(40), px(stats_y - 20), px(width - 40), px(stats_y + 60)],
            fill=palette["panel"],
            outline=palette["panel_border"],
            width=1,
        )
        entries = [
            f"{len(items)} Locations",
            f"{count_countries(items)} Countries",
            f"{sum(len(loc.photo_urls) for loc in items)} Photos",
        ]
        if owner_email:
            entries.append(f"{owner_email.split('@')[0]}'s Journey")
        stat_width = (width - 120) / len(entries)
        for i, entry in enumerate(entries):
            canvas.text(60 + i * stat_width, stats_y + 10, entry, 18, palette["text"])

    if options.show_watermark:
        canvas.text(width - 20, height - 20, WATERMARK, 12, palette["watermark"], align="right")

    buf = io.BytesIO()
    if options.format == "png":
        canvas.image.save(buf, format="PNG", dpi=(dpi, dpi))
    else:
        canvas.image.save(buf, format="JPEG", quality=round(compression * 100), dpi=(dpi, dpi))
    return buf.getvalue()
