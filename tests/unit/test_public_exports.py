from __future__ import annotations

import mafia_empire_client
import mafia_empire_client.game as game
import mafia_empire_client.ui as ui


def test_top_level_package_exports_guards_and_client():
    expected = {
        "AsyncMafiaClient",
        "MafiaClientConfig",
        "AsyncStatus",
        "CountdownTimer",
        "Debouncer",
        "Throttle",
        "ThrottledAsync",
    }
    assert expected == set(mafia_empire_client.__all__)
    assert not hasattr(mafia_empire_client, "LoopScheduler")


def test_game_package_exports_services_and_models():
    expected = {
        "JailService",
        "JailEscapeFlow",
        "DrugLabService",
        "ProductionMonitor",
        "JailStatus",
        "Production",
        "ProfileCustomization",
    }
    assert expected.issubset(set(game.__all__))
    assert "parse_jail_status" not in game.__all__


def test_ui_package_exports_bindings_only():
    assert set(ui.__all__) == {"AsyncActionButton", "ThrottleButton", "ThrottledInput"}
