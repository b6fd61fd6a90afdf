"""Leaderboard images rendered from ``team,placement,kills`` lines."""

from __future__ import annotations

import io
import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, tzinfo

from PIL import Image, ImageDraw, ImageFont

from .errors import ValidationError

log = logging.getLogger(__name__)

WIDTH = 1000
ROW_HEIGHT = 48
HEADER_HEIGHT = 140
HIGHLIGHT_ROWS = 3

BACKGROUND = "#ffffff"
TITLE_COLOR = "#111827"
LABEL_COLOR = "#000000"
TEXT_COLOR = "#111827"
HIGHLIGHT_FILL = "#0f9d58"
HIGHLIGHT_TEXT = "#ffffff"

# x positions for rank, team, placement, kills, total
LABEL_COLUMNS = (28, 120, 620, 760, 880)
VALUE_COLUMNS = (28, 120, 640, 770, 890)
COLUMN_LABELS = ("Rank", "Team", "Placement", "Kills", "Total")

FONT_CANDIDATES = (
    "DejaVuSans.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "Arial.ttf",
)

_LEADING_INT = re.compile(r"[+-]?\d+")
# slash command options are single line, so ";" also ends a row
_ROW_SEPARATOR = re.compile(r"[\r\n;]+")


@dataclass(frozen=True, slots=True)
class ScoreRow:
    team: str
    placement: int
    kills: int

    @property
    def total(self) -> int:
        return self.placement + self.kills


def parse_points(raw: str) -> int:
    """Read the leading integer of ``raw``; anything unparseable scores 0."""
    match = _LEADING_INT.match(raw.strip())
    if match is None:
        return 0
    return int(match.group(0))


def parse_score_lines(text: str) -> list[ScoreRow]:
    rows: list[ScoreRow] = []
    for line in _ROW_SEPARATOR.split(text):
        line = line.strip()
        if not line:
            continue
        parts = [part.strip() for part in line.split(",")]
        if len(parts) < 3:
            continue
        rows.append(
            ScoreRow(
                team=parts[0],
                placement=parse_points(parts[1]),
                kills=parse_points(parts[2]),
            )
        )
    return rows


def rank_rows(rows: Iterable[ScoreRow]) -> list[ScoreRow]:
    # sorted() is stable, so equal totals keep their input order
    return sorted(rows, key=lambda row: row.total, reverse=True)


def format_header(title: str, when: datetime) -> str:
    return f"{title} - {when.strftime('%A, %d %B %Y')}"


def load_font(size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    for candidate in FONT_CANDIDATES:
        try:
            return ImageFont.truetype(candidate, size=size)
        except OSError:
            continue
    log.debug("No TrueType font found; using Pillow default at size %s", size)
    return ImageFont.load_default(size=size)


def render_leaderboard(
    rows: Sequence[ScoreRow],
    header_date: datetime,
    *,
    title: str,
) -> bytes:
    """Draw already-ranked rows and return PNG bytes."""
    height = HEADER_HEIGHT + len(rows) * ROW_HEIGHT
    image = Image.new("RGB", (WIDTH, height), BACKGROUND)
    draw = ImageDraw.Draw(image)

    draw.text(
        (28, 14),
        format_header(title, header_date),
        fill=TITLE_COLOR,
        font=load_font(28),
    )
    label_font = load_font(18)
    for x, label in zip(LABEL_COLUMNS, COLUMN_LABELS):
        draw.text((x, 64), label, fill=LABEL_COLOR, font=label_font)

    row_font = load_font(16)
    y = 120
    for position, row in enumerate(rows, start=1):
        if position <= HIGHLIGHT_ROWS:
            draw.rectangle(
                (20, y - 30, WIDTH - 20, y - 30 + ROW_HEIGHT - 10),
                fill=HIGHLIGHT_FILL,
            )
            color = HIGHLIGHT_TEXT
        else:
            color = TEXT_COLOR
        values = (position, row.team, row.placement, row.kills, row.total)
        for x, value in zip(VALUE_COLUMNS, values):
            draw.text((x, y - 22), str(value), fill=color, font=row_font)
        y += ROW_HEIGHT

    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def build_leaderboard(
    text: str,
    *,
    now: datetime,
    tz: tzinfo,
    title: str,
) -> bytes:
    rows = parse_score_lines(text)
    if not rows:
        raise ValidationError("No valid data lines provided.")
    return render_leaderboard(rank_rows(rows), now.astimezone(tz), title=title)


__all__ = [
    "ScoreRow",
    "build_leaderboard",
    "format_header",
    "parse_points",
    "parse_score_lines",
    "rank_rows",
    "render_leaderboard",
]
