"""Profile customization catalog as closed enums per category."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

from ..core.errors import MafiaValidationError


class Rarity(str, Enum):
    COMMON = "common"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"
    MYTHIC = "mythic"


@dataclass(slots=True, frozen=True)
class CustomizationOption:
    id: str
    name: str
    rarity: Rarity
    cost: int = 0


class _OptionEnum(Enum):
    """Enum whose members carry a :class:`CustomizationOption`."""

    @property
    def option(self) -> CustomizationOption:
        return self.value

    @property
    def id(self) -> str:
        return self.value.id

    @classmethod
    def from_id(cls, option_id: str):
        for member in cls:
            if member.value.id == option_id:
                return member
        raise MafiaValidationError(f"unknown {cls.__name__} id: {option_id!r}")


class AvatarFrame(_OptionEnum):
    CLASSIC = CustomizationOption("classic", "Classic", Rarity.COMMON)
    GOLD = CustomizationOption("gold", "Gold Trim", Rarity.RARE)
    DIAMOND = CustomizationOption("diamond", "Diamond Edge", Rarity.LEGENDARY)
    BLOOD = CustomizationOption("blood", "Blood Pact", Rarity.EPIC)
    BOSS = CustomizationOption("boss", "Boss Status", Rarity.MYTHIC)
    NEON = CustomizationOption("neon", "Neon Pulse", Rarity.EPIC)
    FIRE = CustomizationOption("fire", "Inferno", Rarity.LEGENDARY)
    SHADOW = CustomizationOption("shadow", "Shadow Master", Rarity.MYTHIC, 50_000)
    ELECTRIC = CustomizationOption("electric", "Electric Shock", Rarity.LEGENDARY, 25_000)
    PRESTIGE = CustomizationOption("prestige", "Prestige Elite", Rarity.MYTHIC, 100_000)


class ProfileTheme(_OptionEnum):
    DARK = CustomizationOption("dark", "Classic Noir", Rarity.COMMON)
    BLOOD = CustomizationOption("blood", "Blood Money", Rarity.RARE)
    GOLD = CustomizationOption("gold", "High Roller", Rarity.EPIC)
    ROYAL = CustomizationOption("royal", "Cosa Nostra", Rarity.LEGENDARY)
    GODFATHER = CustomizationOption("godfather", "The Godfather", Rarity.MYTHIC)
    NEON_CRIME = CustomizationOption("neon-crime", "Neon Crime", Rarity.EPIC)
    VINTAGE_MAFIA = CustomizationOption("vintage-mafia", "Vintage Mafia", Rarity.RARE)
    YAKUZA = CustomizationOption("yakuza", "Yakuza", Rarity.LEGENDARY, 50_000)
    MIAMI_VICE = CustomizationOption("miami-vice", "Miami Vice", Rarity.EPIC, 35_000)
    DIGITAL_KINGPIN = CustomizationOption("digital-kingpin", "Digital Kingpin", Rarity.MYTHIC, 75_000)


class NameEffect(_OptionEnum):
    NONE = CustomizationOption("none", "Standard", Rarity.COMMON)
    GRADIENT_RED = CustomizationOption("gradient-red", "Blood Money", Rarity.RARE)
    GRADIENT_GOLD = CustomizationOption("gradient-gold", "Gold Status", Rarity.EPIC)
    NEON = CustomizationOption("neon", "Neon Glow", Rarity.LEGENDARY, 25_000)
    RAINBOW = CustomizationOption("rainbow", "Rainbow Boss", Rarity.MYTHIC, 100_000)
    FIRE_TEXT = CustomizationOption("fire-text", "Burning Words", Rarity.LEGENDARY, 50_000)
    ICE_TEXT = CustomizationOption("ice-text", "Frost Bite", Rarity.EPIC, 30_000)
    TOXIC = CustomizationOption("toxic", "Toxic Boss", Rarity.LEGENDARY, 40_000)
    SHADOW_LORD = CustomizationOption("shadow-lord", "Shadow Lord", Rarity.MYTHIC, 60_000)
    ELECTRIC_SHOCK = CustomizationOption("electric-shock", "Electric Shock", Rarity.LEGENDARY, 45_000)


class BackgroundEffect(_OptionEnum):
    NONE = CustomizationOption("none", "Clean", Rarity.COMMON)
    NOISE = CustomizationOption("noise", "Static Noise", Rarity.RARE)
    RAIN = CustomizationOption("rain", "Crime Noir Rain", Rarity.EPIC)
    MATRIX = CustomizationOption("matrix", "Digital Matrix", Rarity.LEGENDARY, 25_000)
    PARTICLES = CustomizationOption("particles", "Floating Particles", Rarity.EPIC, 20_000)
    SMOKE = CustomizationOption("smoke", "Cigar Smoke", Rarity.LEGENDARY, 35_000)
    MONEY = CustomizationOption("money", "Money Rain", Rarity.MYTHIC, 75_000)
    BLOOD = CustomizationOption("blood", "Blood Splatter", Rarity.LEGENDARY, 50_000)
    SPARKLES = CustomizationOption("sparkles", "Gold Dust", Rarity.EPIC, 30_000)
    POLICE_LIGHTS = CustomizationOption("police-lights", "Police Pursuit", Rarity.EPIC, 25_000)


class CustomizationCategory(str, Enum):
    FRAME = "avatarFrame"
    THEME = "profileTheme"
    NAME_EFFECT = "nameEffect"
    BACKGROUND_EFFECT = "backgroundEffect"


CATEGORY_OPTIONS: Mapping[CustomizationCategory, type[_OptionEnum]] = {
    CustomizationCategory.FRAME: AvatarFrame,
    CustomizationCategory.THEME: ProfileTheme,
    CustomizationCategory.NAME_EFFECT: NameEffect,
    CustomizationCategory.BACKGROUND_EFFECT: BackgroundEffect,
}


@dataclass(slots=True, frozen=True)
class ProfileCustomization:
    frame: AvatarFrame = AvatarFrame.CLASSIC
    theme: ProfileTheme = ProfileTheme.DARK
    name_effect: NameEffect = NameEffect.NONE
    background_effect: BackgroundEffect = BackgroundEffect.NONE

    @classmethod
    def from_payload(cls, payload: Mapping[str, object]) -> "ProfileCustomization":
        """Build from API fields; missing fields fall back to the defaults."""

        chosen = {}
        for category, field_name in _CATEGORY_FIELDS:
            raw = payload.get(category.value)
            if raw is None:
                continue
            chosen[field_name] = CATEGORY_OPTIONS[category].from_id(str(raw))
        return cls(**chosen)

    def to_payload(self) -> dict[str, str]:
        return {
            category.value: getattr(self, field_name).id
            for category, field_name in _CATEGORY_FIELDS
        }

    @property
    def total_cost(self) -> int:
        return sum(getattr(self, field_name).option.cost for _, field_name in _CATEGORY_FIELDS)


_CATEGORY_FIELDS: tuple[tuple[CustomizationCategory, str], ...] = (
    (CustomizationCategory.FRAME, "frame"),
    (CustomizationCategory.THEME, "theme"),
    (CustomizationCategory.NAME_EFFECT, "name_effect"),
    (CustomizationCategory.BACKGROUND_EFFECT, "background_effect"),
)


__all__ = [
    "Rarity",
    "CustomizationOption",
    "AvatarFrame",
    "ProfileTheme",
    "NameEffect",
    "BackgroundEffect",
    "CustomizationCategory",
    "CATEGORY_OPTIONS",
    "ProfileCustomization",
]
