"""Marker, thumbnail and badge icons for the map IconLayers.

deck.gl IconLayer takes per-feature icon definitions ({url, width, height,
anchorY}). Icons are rasterized with Pillow and embedded as PNG data URLs so
the browser never fetches them separately:
- Pins: drawn procedurally unless a marker image is configured
- Thumbnails (3D view): the entity's first photo, square-cropped
- Badge: a rounded "3D" label, always drawn locally
"""

import base64
import logging
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Any

import requests
from PIL import Image, ImageDraw, ImageFont, ImageOps

from heritage_atlas.constants import IconConfig

logger = logging.getLogger(__name__)

RGBA = tuple[int, int, int, int]
IconSource = str | Path | Image.Image


class IconLoadError(Exception):
    """Icon image could not be fetched or decoded."""


@dataclass(frozen=True)
class IconImage:
    """Registered icon: PNG data URL plus its pixel geometry."""

    url: str
    width: int
    height: int
    anchor_y: int

    def to_icon_data(self) -> dict[str, Any]:
        """IconLayer icon definition for one feature."""
        return {"url": self.url, "width": self.width, "height": self.height, "anchorY": self.anchor_y}


def to_data_url(image: Image.Image) -> str:
    """Encode image as a base64 PNG data URL."""
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/png;base64,{encoded}"


def make_icon(image: Image.Image, anchor_bottom: bool = True) -> IconImage:
    """Wrap a rasterized image as an IconImage anchored at its bottom (pins) or center."""
    width, height = image.size
    return IconImage(
        url=to_data_url(image),
        width=width,
        height=height,
        anchor_y=height if anchor_bottom else height // 2,
    )


def draw_marker_icon(color: RGBA, size: int = IconConfig.ICON_SIZE_PX) -> Image.Image:
    """Draw a map pin: round head with white border tapering to a point at the bottom."""
    image = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)
    border = max(2, size // 16)
    radius = size * 0.32
    cx, cy = size / 2, radius + border

    # Tail first, head drawn on top hides the seam
    tail = [(cx - radius * 0.75, cy + radius * 0.55), (cx + radius * 0.75, cy + radius * 0.55), (cx, size - 1)]
    draw.polygon(tail, fill=IconConfig.PIN_BORDER_COLOR)
    inner_tail = [(cx - radius * 0.55, cy + radius * 0.5), (cx + radius * 0.55, cy + radius * 0.5), (cx, size - 1 - border * 1.5)]
    draw.polygon(inner_tail, fill=color)

    draw.ellipse([cx - radius, cy - radius, cx + radius, cy + radius], fill=color, outline=IconConfig.PIN_BORDER_COLOR, width=border)
    dot = radius * 0.35
    draw.ellipse([cx - dot, cy - dot, cx + dot, cy + dot], fill=IconConfig.PIN_BORDER_COLOR)
    return image


def draw_fallback_marker(size: int = IconConfig.ICON_SIZE_PX) -> Image.Image:
    """Neutral pin registered when a configured icon cannot be loaded."""
    return draw_marker_icon(IconConfig.FALLBACK_PIN_COLOR, size=size)


def draw_no_image_icon(size: int = IconConfig.THUMBNAIL_SIZE_PX) -> Image.Image:
    """Placeholder thumbnail for entities without photos."""
    image = Image.new("RGBA", (size, size), (229, 231, 235, 255))
    draw = ImageDraw.Draw(image)
    border = max(2, size // 24)
    draw.rectangle([0, 0, size - 1, size - 1], outline=IconConfig.PIN_BORDER_COLOR, width=border)
    # Simple landscape glyph: sun and mountain
    draw.ellipse([size * 0.62, size * 0.2, size * 0.8, size * 0.38], fill=(156, 163, 175, 255))
    draw.polygon([(size * 0.15, size * 0.8), (size * 0.45, size * 0.38), (size * 0.85, size * 0.8)], fill=(156, 163, 175, 255))
    return image


def draw_badge_icon(label: str = IconConfig.BADGE_LABEL, size: tuple[int, int] = IconConfig.BADGE_SIZE_PX) -> Image.Image:
    """Draw the rounded "3D" badge shown next to entities with captures."""
    width, height = size
    image = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)
    draw.rounded_rectangle(
        [0, 0, width - 1, height - 1],
        radius=height // 2,
        fill=IconConfig.BADGE_FILL_COLOR,
        outline=IconConfig.PIN_BORDER_COLOR,
        width=2,
    )
    font = ImageFont.load_default()
    left, top, right, bottom = draw.textbbox((0, 0), label, font=font)
    text_x = (width - (right - left)) / 2 - left
    text_y = (height - (bottom - top)) / 2 - top
    draw.text((text_x, text_y), label, fill=IconConfig.BADGE_TEXT_COLOR, font=font)
    return image


def load_icon_image(source: IconSource, timeout_s: float = IconConfig.FETCH_TIMEOUT_S) -> Image.Image:
    """Load an image from a Pillow image, data URL, http(s) URL or file path.

    Raises:
        IconLoadError: Fetch failed or the bytes are not a decodable image
    """
    if isinstance(source, Image.Image):
        return source.convert("RGBA")

    text = str(source)
    try:
        if text.startswith("data:"):
            _, _, payload = text.partition(",")
            raw = base64.b64decode(payload)
        elif text.startswith(("http://", "https://")):
            response = requests.get(text, timeout=timeout_s)
            response.raise_for_status()
            raw = response.content
        else:
            raw = Path(text).read_bytes()
        with Image.open(BytesIO(raw)) as image:
            return image.convert("RGBA")
    except (requests.RequestException, OSError, ValueError) as e:
        raise IconLoadError(f"Cannot load icon from {text[:80]}: {e}") from e


def fit_marker(image: Image.Image, size: int = IconConfig.ICON_SIZE_PX) -> Image.Image:
    """Scale a marker image to fit a size x size box, keeping its aspect ratio."""
    return ImageOps.contain(image.convert("RGBA"), (size, size))


def fit_thumbnail(image: Image.Image, size: int = IconConfig.THUMBNAIL_SIZE_PX) -> Image.Image:
    """Square-crop a photo and frame it with a white border."""
    border = max(2, size // 24)
    inner = ImageOps.fit(image.convert("RGBA"), (size - 2 * border, size - 2 * border))
    return ImageOps.expand(inner, border=border, fill=IconConfig.PIN_BORDER_COLOR)
