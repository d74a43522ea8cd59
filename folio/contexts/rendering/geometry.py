"""Page geometry in PDF points (1in = 72pt), origin at the top-left corner, y growing down."""

from dataclasses import dataclass
from typing import List, Tuple

POINTS_PER_INCH = 72.0


@dataclass(frozen=True)
class PageGeometry:
    width: float
    height: float
    margin_top: float
    margin_right: float
    margin_bottom: float
    margin_left: float
    column_gap: float = 24.0

    @classmethod
    def letter(cls) -> "PageGeometry":
        """US Letter (8.5in x 11in) with 0.5in margins."""
        return cls.from_inches(8.5, 11.0, margin=0.5)

    @classmethod
    def a4(cls) -> "PageGeometry":
        """A4 (210mm x 297mm) with 0.5in margins."""
        return cls(
            width=595.28,
            height=841.89,
            margin_top=36.0,
            margin_right=36.0,
            margin_bottom=36.0,
            margin_left=36.0,
        )

    @classmethod
    def from_inches(
        cls, width: float, height: float, margin: float = 0.5, column_gap: float = 1 / 3
    ) -> "PageGeometry":
        m = margin * POINTS_PER_INCH
        return cls(
            width=width * POINTS_PER_INCH,
            height=height * POINTS_PER_INCH,
            margin_top=m,
            margin_right=m,
            margin_bottom=m,
            margin_left=m,
            column_gap=column_gap * POINTS_PER_INCH,
        )

    @property
    def content_top(self) -> float:
        return self.margin_top

    @property
    def content_bottom(self) -> float:
        return self.height - self.margin_bottom

    @property
    def content_width(self) -> float:
        return self.width - self.margin_left - self.margin_right

    @property
    def content_height(self) -> float:
        return self.content_bottom - self.content_top

    def column_frames(self, ratios: List[float]) -> List[Tuple[float, float]]:
        """(x, width) of each column for the given width ratios, separated by column_gap."""
        if len(ratios) == 1:
            return [(self.margin_left, self.content_width)]

        usable = self.content_width - self.column_gap * (len(ratios) - 1)
        total = float(sum(ratios))
        frames = []
        x = self.margin_left
        for ratio in ratios:
            width = round(usable * ratio / total, 2)
            frames.append((round(x, 2), width))
            x += width + self.column_gap
        return frames

    def to_dict(self) -> dict:
        return {
            "width": self.width,
            "height": self.height,
            "margin_top": self.margin_top,
            "margin_right": self.margin_right,
            "margin_bottom": self.margin_bottom,
            "margin_left": self.margin_left,
            "column_gap": self.column_gap,
        }
