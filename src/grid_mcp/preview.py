"""Layout preview renderer using Pillow — draws an arrangement onto its grid as a PNG."""

from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Optional

from PIL import Image, ImageDraw, ImageFont

from .geometry import find_overlaps
from .models import GridItem
from .themes import ThemePalette, get_theme


# --- Font handling ---

def _load_font(size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """Load a font, falling back to default if none available."""
    font_paths = [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
        "/usr/share/fonts/truetype/freefont/FreeSans.ttf",
        "/usr/share/fonts/TTF/DejaVuSans.ttf",
    ]
    for fp in font_paths:
        if Path(fp).exists():
            return ImageFont.truetype(fp, size)
    return ImageFont.load_default()


def _load_bold_font(size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """Load a bold font, falling back to regular."""
    font_paths = [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
        "/usr/share/fonts/TTF/DejaVuSans-Bold.ttf",
    ]
    for fp in font_paths:
        if Path(fp).exists():
            return ImageFont.truetype(fp, size)
    return _load_font(size)


# --- Color helpers ---

def _hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    """Convert hex color to RGB tuple. Supports both 3-char and 6-char hex."""
    hex_color = hex_color.lstrip("#")
    if len(hex_color) == 3:
        hex_color = hex_color[0]*2 + hex_color[1]*2 + hex_color[2]*2
    return tuple(int(hex_color[i:i+2], 16) for i in (0, 2, 4))


def _darken(hex_color: str, factor: float = 0.6) -> str:
    """Darken a hex color."""
    r, g, b = _hex_to_rgb(hex_color)
    return f"#{int(r * factor):02x}{int(g * factor):02x}{int(b * factor):02x}"


# --- Main renderer ---

class LayoutPreviewRenderer:
    """Renders an arrangement to a PNG image.

    The image shows every cell of the grid (``columns`` wide, as tall as
    the lowest item), each item as a labelled tile spanning its cells,
    overlapping items outlined in the theme's warning color, and the
    optional ``active_id`` item outlined in the highlight color.
    """

    PADDING = 40
    TITLE_HEIGHT = 44
    CORNER_RADIUS = 10
    BORDER_WIDTH = 3

    def __init__(
        self,
        cell_size: int = 96,
        gap: int = 12,
        scale: float = 1.0,
        theme: str = "dark",
    ):
        self.cell_size = cell_size
        self.gap = gap
        self.scale = scale
        self.theme: ThemePalette = get_theme(theme)
        self.font_label = _load_bold_font(int(16 * scale))
        self.font_small = _load_font(int(12 * scale))
        self.font_title = _load_bold_font(int(20 * scale))

    def _cell_origin(self, column: int, row: int) -> tuple[float, float]:
        step = self.cell_size + self.gap
        x = self.PADDING + (column - 1) * step
        y = self.PADDING + self.TITLE_HEIGHT + (row - 1) * step
        return x * self.scale, y * self.scale

    def _span(self, cells: int) -> float:
        return (cells * self.cell_size + (cells - 1) * self.gap) * self.scale

    def render_image(
        self,
        items: list[GridItem],
        columns: int,
        title: Optional[str] = None,
        active_id: Optional[str] = None,
    ) -> Image.Image:
        rows = max((it.row + it.height - 1 for it in items), default=1)
        grid_width = columns * self.cell_size + (columns - 1) * self.gap
        grid_height = rows * self.cell_size + (rows - 1) * self.gap
        img_width = int((grid_width + 2 * self.PADDING) * self.scale)
        img_height = int((grid_height + 2 * self.PADDING + self.TITLE_HEIGHT) * self.scale)

        img = Image.new("RGB", (img_width, img_height), _hex_to_rgb(self.theme.background))
        draw = ImageDraw.Draw(img)

        draw.text(
            (self.PADDING * self.scale, self.PADDING * self.scale / 2),
            title or f"{columns} columns",
            fill=self.theme.title_color,
            font=self.font_title,
        )

        # Empty cells first, items on top
        cell_px = self._span(1)
        for row in range(1, rows + 1):
            for column in range(1, columns + 1):
                x, y = self._cell_origin(column, row)
                draw.rounded_rectangle(
                    [x, y, x + cell_px, y + cell_px],
                    radius=int(4 * self.scale),
                    fill=self.theme.cell_fill,
                    outline=self.theme.cell_border,
                    width=1,
                )

        overlapping = {item.id for pair in find_overlaps(items) for item in pair}
        for item in items:
            self._draw_item(draw, item, item.id in overlapping, item.id == active_id)

        return img

    def render(
        self,
        items: list[GridItem],
        columns: int,
        output_path: Optional[str] = None,
        title: Optional[str] = None,
        active_id: Optional[str] = None,
    ) -> bytes:
        """Render the arrangement to PNG bytes. Optionally save to file."""
        img = self.render_image(items, columns, title=title, active_id=active_id)

        buf = BytesIO()
        img.save(buf, format="PNG", optimize=True)
        png_bytes = buf.getvalue()

        if output_path:
            Path(output_path).write_bytes(png_bytes)

        return png_bytes

    def _draw_item(self, draw: ImageDraw.ImageDraw, item: GridItem, overlapping: bool, active: bool):
        x, y = self._cell_origin(item.column, item.row)
        w = self._span(item.width)
        h = self._span(item.height)
        s = self.scale

        if overlapping:
            border = self.theme.overlap_border
        elif active:
            border = self.theme.active_border
        else:
            border = self.theme.item_border

        draw.rounded_rectangle(
            [x, y, x + w, y + h],
            radius=int(self.CORNER_RADIUS * s),
            fill=self.theme.item_fill,
            outline=border,
            width=int(self.BORDER_WIDTH * s),
        )
        draw.rectangle([x + 4 * s, y + 4 * s, x + w - 4 * s, y + 8 * s], fill=_darken(border, 0.8))

        draw.text((x + 10 * s, y + 14 * s), item.id, fill=self.theme.item_label, font=self.font_label)
        draw.text(
            (x + 10 * s, y + 36 * s),
            f"{item.column},{item.row}  {item.width}x{item.height}",
            fill=self.theme.muted_text_color,
            font=self.font_small,
        )
