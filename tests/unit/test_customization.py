from __future__ import annotations

import pytest

from mafia_empire_client.core.errors import MafiaValidationError
from mafia_empire_client.game.customization import (
    CATEGORY_OPTIONS,
    AvatarFrame,
    BackgroundEffect,
    CustomizationCategory,
    NameEffect,
    ProfileCustomization,
    ProfileTheme,
    Rarity,
)


def test_every_category_has_a_closed_catalog_with_unique_ids():
    assert set(CATEGORY_OPTIONS) == set(CustomizationCategory)
    for options in CATEGORY_OPTIONS.values():
        ids = [member.id for member in options]
        assert len(ids) == 10
        assert len(set(ids)) == len(ids)


def test_from_id_resolves_members_and_rejects_unknown():
    assert AvatarFrame.from_id("prestige") is AvatarFrame.PRESTIGE
    assert AvatarFrame.PRESTIGE.option.rarity is Rarity.MYTHIC
    with pytest.raises(MafiaValidationError):
        ProfileTheme.from_id("pastel")


def test_default_profile_is_free():
    profile = ProfileCustomization()
    assert profile.total_cost == 0
    assert profile.to_payload() == {
        "avatarFrame": "classic",
        "profileTheme": "dark",
        "nameEffect": "none",
        "backgroundEffect": "none",
    }


def test_profile_round_trips_through_payload_and_sums_costs():
    profile = ProfileCustomization.from_payload(
        {"avatarFrame": "shadow", "nameEffect": "rainbow", "backgroundEffect": "money"}
    )
    assert profile.frame is AvatarFrame.SHADOW
    assert profile.theme is ProfileTheme.DARK
    assert profile.name_effect is NameEffect.RAINBOW
    assert profile.background_effect is BackgroundEffect.MONEY
    assert profile.total_cost == 50_000 + 100_000 + 75_000
    assert ProfileCustomization.from_payload(profile.to_payload()) == profile


def test_profile_rejects_unknown_option_in_payload():
    with pytest.raises(MafiaValidationError, match="NameEffect"):
        ProfileCustomization.from_payload({"nameEffect": "sparkle-pony"})
