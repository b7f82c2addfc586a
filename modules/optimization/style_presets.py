"""Visual style, lighting and aspect-ratio presets."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List


class MediaType(str, Enum):
    """Kind of asset requested from the generative endpoints."""

    IMAGE = "IMAGE"
    VIDEO = "VIDEO"

    @property
    def extension(self) -> str:
        return "png" if self is MediaType.IMAGE else "mp4"

    @property
    def label(self) -> str:
        return "image" if self is MediaType.IMAGE else "video"


class LightingGroup(str, Enum):
    """Lighting families; natural lighting gets extra phrasing."""

    NATURAL = "natural"
    STYLIZED = "stylized"


@dataclass(slots=True, frozen=True)
class LightingPreset:
    """Lighting mode offered to the user."""

    name: str
    group: LightingGroup


ASPECT_RATIOS: tuple[str, ...] = ("16:9", "9:16", "1:1", "4:3")

ASPECT_RATIO_LABELS: Dict[str, str] = {
    "16:9": "16:9 Cinema",
    "9:16": "9:16 Vertical",
    "1:1": "1:1 Square",
    "4:3": "4:3 Classic",
}

VISUAL_STYLES: tuple[str, ...] = (
    "Cinematic 8K",
    "Cyberpunk Anime",
    "Hyper-Realistic",
    "Surrealism Art",
    "3D Pixar Style",
    "Epic Oil Painting",
)

LIGHTING_PRESETS: tuple[LightingPreset, ...] = (
    LightingPreset("Natural Sunlight", LightingGroup.NATURAL),
    LightingPreset("Soft Daylighting", LightingGroup.NATURAL),
    LightingPreset("Golden Magic Hour", LightingGroup.NATURAL),
    LightingPreset("Cloudy Overcast", LightingGroup.NATURAL),
    LightingPreset("Morning Window Light", LightingGroup.NATURAL),
    LightingPreset("Dramatic Neon", LightingGroup.STYLIZED),
    LightingPreset("Soft Volumetric", LightingGroup.STYLIZED),
    LightingPreset("Dark & Moody", LightingGroup.STYLIZED),
    LightingPreset("Bright Studio", LightingGroup.STYLIZED),
    LightingPreset("Moonlight Ether", LightingGroup.STYLIZED),
)

DEFAULT_STYLE = VISUAL_STYLES[0]
DEFAULT_LIGHTING = LIGHTING_PRESETS[0].name
DEFAULT_ASPECT_RATIO = ASPECT_RATIOS[0]

_LIGHTING_BY_NAME: Dict[str, LightingPreset] = {preset.name: preset for preset in LIGHTING_PRESETS}


def lighting_names(group: LightingGroup | None = None) -> List[str]:
    """Return lighting names, optionally restricted to one group."""
    return [preset.name for preset in LIGHTING_PRESETS if group is None or preset.group is group]


def is_natural_lighting(name: str) -> bool:
    """Return True when the lighting belongs to the natural group."""
    preset = _LIGHTING_BY_NAME.get(name)
    return preset is not None and preset.group is LightingGroup.NATURAL
