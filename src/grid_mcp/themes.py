"""
Theme definitions for Grid-MCP layout previews.

Each theme defines colors for:
- Preview background and grid cell outlines
- Item tiles (fill, border, label)
- Highlights for overlapping items and the item being manipulated
"""

from __future__ import annotations
from dataclasses import dataclass


@dataclass
class ThemePalette:
    """Color palette for a preview theme."""

    # Background
    background: str

    # Text
    title_color: str
    muted_text_color: str

    # Empty grid cells
    cell_fill: str
    cell_border: str

    # Item tiles
    item_fill: str
    item_border: str
    item_label: str

    # Highlights
    overlap_border: str
    active_border: str


# Catppuccin Mocha (dark theme) - default
DARK_THEME = ThemePalette(
    background="#11111b",
    title_color="#cdd6f4",
    muted_text_color="#6c7086",
    cell_fill="#181825",
    cell_border="#313244",
    item_fill="#1e1e2e",
    item_border="#00BCD4",
    item_label="#cdd6f4",
    overlap_border="#F44336",
    active_border="#FFC107",
)


# Light theme - clean white background with darker accents
LIGHT_THEME = ThemePalette(
    background="#ffffff",
    title_color="#1e1e2e",
    muted_text_color="#6c6f85",
    cell_fill="#e6e9ef",
    cell_border="#bcc0cc",
    item_fill="#eff1f5",
    item_border="#1e66f5",
    item_label="#1e1e2e",
    overlap_border="#d20f39",
    active_border="#df8e1d",
)


# Theme registry
THEMES: dict[str, ThemePalette] = {
    "dark": DARK_THEME,
    "light": LIGHT_THEME,
}


def get_theme(name: str) -> ThemePalette:
    """Get a theme palette by name.

    Raises:
        ValueError: If theme name is not recognized
    """
    if name not in THEMES:
        valid = ", ".join(THEMES.keys())
        raise ValueError(f"Unknown theme '{name}'. Valid themes: {valid}")
    return THEMES[name]
