"""Tests for player query expansion."""

from __future__ import annotations

import pytest

from sportiq.brain.entities.expansion import expand_query


@pytest.mark.unit
class TestExpandQuery:
    def test_short_name_expanded_with_team_league_and_season(self) -> None:
        expansion = expand_query("LeBron stats")
        expected = "LeBron James stats Los Angeles Lakers NBA 2025-26 season"
        assert expansion.expanded_query == expected
        assert expansion.player is not None
        assert expansion.player.team == "Los Angeles Lakers"

    def test_no_season_without_stats_words(self) -> None:
        expansion = expand_query("How is Jokic doing")
        assert expansion.expanded_query == "How is Nikola Jokić doing Denver Nuggets NBA"

    def test_league_already_present(self) -> None:
        expansion = expand_query("LeBron NBA stats")
        assert expansion.expanded_query == "LeBron James NBA stats 2025-26 season"

    def test_full_name_left_alone(self) -> None:
        expansion = expand_query("LeBron James stats")
        assert expansion.expanded_query == "LeBron James stats"
        assert expansion.player is None

    def test_no_player(self) -> None:
        assert expand_query("Lakers schedule").expanded_query == "Lakers schedule"

    def test_custom_season(self) -> None:
        expansion = expand_query("Jokic points", season="2024-25")
        assert expansion.expanded_query.endswith("2024-25 season")
