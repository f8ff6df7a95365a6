"""Dashboard image composer for snapshot previews and PNG export."""

from __future__ import annotations

import base64
from io import BytesIO
from pathlib import Path

from PIL import Image, ImageDraw, ImageFont

from .models import DashboardData, ThemeConfig
from .text import cpu_label, fraction, gpu_label, ram_label, temp_label
from .themes import get_theme, hex_to_rgb


class DashboardRenderer:
    """Draws the four metric cards with progress bars on a gradient background."""

    def __init__(self, width: int = 600, height: int = 400) -> None:
        self.width = width
        self.height = height

    def render_image(self, data: DashboardData, theme_name: str | None = None) -> Image.Image:
        theme = get_theme(theme_name)
        image = Image.new("RGB", (self.width, self.height), theme.background_start)
        draw = ImageDraw.Draw(image)

        self._paint_gradient(image, theme)
        self._draw_header(draw, theme)
        self._draw_cards(draw, theme, data)
        self._draw_footer(draw, theme, data)
        return image

    def save_png(self, data: DashboardData, path: Path, theme_name: str | None = None) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        self.render_image(data, theme_name).save(path, format="PNG")
        return path

    def preview_data_url(self, data: DashboardData, theme_name: str | None = None) -> str:
        image = self.render_image(data, theme_name)
        buf = BytesIO()
        image.save(buf, format="PNG")
        b64 = base64.b64encode(buf.getvalue()).decode("ascii")
        return f"data:image/png;base64,{b64}"

    def _font(self, size: int):
        for name in ("DejaVuSans-Bold.ttf", "Arial.ttf"):
            try:
                return ImageFont.truetype(name, size)
            except Exception:
                continue
        return ImageFont.load_default()

    def _paint_gradient(self, image: Image.Image, theme: ThemeConfig) -> None:
        top = hex_to_rgb(theme.background_start)
        bottom = hex_to_rgb(theme.background_end)
        draw = ImageDraw.Draw(image)
        for y in range(self.height):
            t = y / max(self.height - 1, 1)
            color = tuple(int(top[i] * (1 - t) + bottom[i] * t) for i in range(3))
            draw.line((0, y, self.width, y), fill=color)

    def _draw_header(self, draw: ImageDraw.ImageDraw, theme: ThemeConfig) -> None:
        draw.text((20, 14), "System Monitor", font=self._font(24), fill=theme.text_secondary)

    def _draw_cards(self, draw: ImageDraw.ImageDraw, theme: ThemeConfig, d: DashboardData) -> None:
        card_color = hex_to_rgb(theme.card_bg)
        trough = hex_to_rgb(theme.background_start)
        accent = hex_to_rgb(theme.accent)

        rows = [
            (cpu_label(d), d.cpu_percent),
            (ram_label(d), d.ram_percent),
            (gpu_label(d), d.gpu_percent),
            (temp_label(d), None),
        ]
        top = 56
        gap = 10
        card_h = (self.height - top - 40 - gap * (len(rows) - 1)) // len(rows)
        for idx, (label, percent) in enumerate(rows):
            y0 = top + idx * (card_h + gap)
            y1 = y0 + card_h
            draw.rounded_rectangle((20, y0, self.width - 20, y1), radius=10, fill=card_color)
            draw.text((34, y0 + 8), label, font=self._font(15), fill=theme.text_primary)
            if idx == len(rows) - 1:
                # Temperature has no bar.
                continue
            bar = (34, y1 - 22, self.width - 34, y1 - 10)
            draw.rounded_rectangle(bar, radius=6, fill=trough)
            fill_w = int((bar[2] - bar[0]) * fraction(percent))
            if fill_w > 0:
                draw.rounded_rectangle((bar[0], bar[1], bar[0] + fill_w, bar[3]), radius=6, fill=accent)

    def _draw_footer(self, draw: ImageDraw.ImageDraw, theme: ThemeConfig, d: DashboardData) -> None:
        stamp = d.timestamp.astimezone().strftime("%Y-%m-%d %H:%M:%S")
        draw.text((22, self.height - 28), stamp, font=self._font(12), fill=theme.text_secondary)
