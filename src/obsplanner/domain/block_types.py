"""
Block type taxonomy and legend colours.

Types are inferred from titles when a block is created from a feed event,
and drive the fill colour of every interval on both timelines.
"""

from __future__ import annotations

import re
from enum import Enum


class BlockType(str, Enum):
    PRELIM = "PRELIM"
    FINAL_MEDAL = "FINAL/MEDAL"
    NOT_FOR_BROADCAST = "NOT FOR BROADCAST"
    CEREMONY = "CEREMONY"
    OTHER = "OTHER"
    TRAINING_SESSION = "TRAINING SESSION"
    PRESS_CONFERENCE = "PRESS CONFERENCE"
    BEAUTY_CAMERA = "BEAUTY CAMERA"
    OBS_HIGHLIGHT_SHOW = "OBS HIGHLIGHT SHOW"


BLOCK_TYPE_COLORS: dict[str, str] = {
    BlockType.PRELIM.value: "#fef08a",
    BlockType.FINAL_MEDAL.value: "#fed7aa",
    BlockType.NOT_FOR_BROADCAST.value: "#dc2626",
    BlockType.CEREMONY.value: "#fbcfe8",
    BlockType.OTHER.value: "#ffffff",
    BlockType.TRAINING_SESSION.value: "#e5e7eb",
    BlockType.PRESS_CONFERENCE.value: "#9ca3af",
    BlockType.BEAUTY_CAMERA.value: "#bfdbfe",
    BlockType.OBS_HIGHLIGHT_SHOW.value: "#e9d5ff",
}

# Types dropped from the legend; stored rows still carrying them render red
LEGACY_TYPES_RED = frozenset(
    {
        "PRELIM NOT FOR STREAM",
        "FINAL/MEDAL NOT FOR STREAM",
        "R-C STREAM ONLY",
        "NEW",
    }
)

DEFAULT_BLOCK_COLOR = "#10b981"

_QUAL_PATTERN = re.compile(r"\bQUAL\b|QUAL\.|QUAL-|QUAL:", re.IGNORECASE)


def _contains_any(name: str, needles: tuple[str, ...]) -> bool:
    return any(needle in name for needle in needles)


def infer_block_type(name: str | None) -> BlockType:
    """Best guess at a block's type from its name; OTHER when nothing matches.

    Checks run from most to least specific, so "Medal Ceremony" is a
    ceremony and "Final - not for stream" is not for broadcast.
    """
    if not name:
        return BlockType.OTHER
    upper = name.upper()

    if upper.startswith("BC"):
        return BlockType.BEAUTY_CAMERA
    if _contains_any(upper, ("CEREMONY", "OPENING", "CLOSING")):
        return BlockType.CEREMONY
    if _contains_any(upper, ("PRESS CONFERENCE", "PRESSER", "MEDIA")):
        return BlockType.PRESS_CONFERENCE
    if _contains_any(upper, ("TRAINING", "PRACTICE")):
        return BlockType.TRAINING_SESSION
    if "BEAUTY" in upper:
        return BlockType.BEAUTY_CAMERA
    if "HIGHLIGHT" in upper:
        return BlockType.OBS_HIGHLIGHT_SHOW
    if _contains_any(upper, ("NOT FOR BROADCAST", "NOT FOR STREAM", "NO STREAM")):
        return BlockType.NOT_FOR_BROADCAST
    if _contains_any(upper, ("FINAL", "MEDAL", "GOLD", "SILVER", "BRONZE", "CHAMPIONSHIP")):
        return BlockType.FINAL_MEDAL
    if _contains_any(upper, ("PRELIM", "QUALIFYING", "QUALIFICATION", "HEAT", "ROUND", "QUARTERFINAL", "SEMIFINAL")):
        return BlockType.PRELIM
    if _QUAL_PATTERN.search(upper):
        return BlockType.PRELIM
    return BlockType.OTHER


def infer_obs_event_display_type(title: str | None) -> BlockType:
    """Legend type for a raw feed event. Never NOT FOR BROADCAST; defaults to PRELIM."""
    if not title or not isinstance(title, str):
        return BlockType.PRELIM
    upper = title.strip().upper()

    if upper.startswith("BC"):
        return BlockType.BEAUTY_CAMERA
    if "CEREMONY" in upper:
        return BlockType.CEREMONY
    if "CONFERENCE" in upper or "PRESS" in upper:
        return BlockType.PRESS_CONFERENCE
    if "TRAINING" in upper:
        return BlockType.TRAINING_SESSION
    if "OBS" in upper:
        return BlockType.OBS_HIGHLIGHT_SHOW
    if "MEDAL" in upper:
        return BlockType.FINAL_MEDAL
    if "FINAL" in upper and "SEMI" not in upper:
        return BlockType.FINAL_MEDAL
    return BlockType.PRELIM


def block_type_color(block_type: str | BlockType | None) -> str:
    if not block_type:
        return DEFAULT_BLOCK_COLOR
    value = block_type.value if isinstance(block_type, BlockType) else block_type
    if value in LEGACY_TYPES_RED:
        return BLOCK_TYPE_COLORS[BlockType.NOT_FOR_BROADCAST.value]
    return BLOCK_TYPE_COLORS.get(value, DEFAULT_BLOCK_COLOR)


def darken_color(hex_color: str | None, percent: float = 30) -> str:
    """Scale each RGB channel of ``#rrggbb`` down by `percent`."""
    if not hex_color:
        return "#000000"
    digits = hex_color.lstrip("#")
    factor = 1 - percent / 100
    channels = (int(digits[i : i + 2], 16) for i in (0, 2, 4))
    return "#" + "".join(f"{max(0, int(c * factor)):02x}" for c in channels)
