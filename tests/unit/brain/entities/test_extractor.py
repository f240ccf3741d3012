"""Tests for the rule-based entity extractor."""

from __future__ import annotations

import pytest

from sportiq.brain.entities.catalog import ALIAS_INDEX, lookup, pick_record
from sportiq.brain.entities.extractor import EntityExtractor, detect_sport
from sportiq.shared.types import EntityType, Sport


@pytest.fixture
def extractor() -> EntityExtractor:
    return EntityExtractor()


@pytest.mark.unit
class TestDictionaryMatches:
    def test_player_alias_resolves_full_name(self, extractor: EntityExtractor) -> None:
        entities = extractor.extract("Jokic points")
        assert len(entities) == 1
        assert entities[0].type == EntityType.PLAYER
        assert entities[0].name == "Nikola Jokić"
        assert entities[0].sport == "basketball"
        assert entities[0].league == "NBA"

    def test_accented_input(self, extractor: EntityExtractor) -> None:
        entities = extractor.extract("How is Jokić playing?")
        assert entities[0].name == "Nikola Jokić"

    def test_exact_full_name_scores_higher(self, extractor: EntityExtractor) -> None:
        full = extractor.extract("Nikola Jokic stats")[0]
        alias = extractor.extract("Jokic stats")[0]
        assert full.confidence > alias.confidence

    def test_longest_span_wins(self, extractor: EntityExtractor) -> None:
        entities = extractor.extract("Los Angeles Lakers roster")
        assert [e.name for e in entities] == ["Los Angeles Lakers"]

    def test_shared_alias_uses_sport_keyword(self, extractor: EntityExtractor) -> None:
        entities = extractor.extract("Jets score last night nhl")
        teams = [e for e in entities if e.type == EntityType.TEAM]
        assert teams[0].name == "Winnipeg Jets"

    def test_shared_alias_defaults_to_priority(self, extractor: EntityExtractor) -> None:
        entities = extractor.extract("Jets score last night")
        teams = [e for e in entities if e.type == EntityType.TEAM]
        assert teams[0].name == "New York Jets"

    def test_league(self, extractor: EntityExtractor) -> None:
        entities = extractor.extract("premier league table")
        assert entities[0].type == EntityType.LEAGUE

    def test_empty_text(self, extractor: EntityExtractor) -> None:
        assert extractor.extract("") == []
        assert extractor.extract("   ") == []


@pytest.mark.unit
class TestMatches:
    def test_two_teams_with_separator(self, extractor: EntityExtractor) -> None:
        names = [e.name for e in extractor.extract("Lakers vs Celtics")]
        assert names == [
            "Los Angeles Lakers",
            "Los Angeles Lakers vs Boston Celtics",
            "Boston Celtics",
        ]

    def test_at_separator(self, extractor: EntityExtractor) -> None:
        matches = [e for e in extractor.extract("Knicks at Heat") if e.type == EntityType.MATCH]
        assert matches[0].name == "New York Knicks vs Miami Heat"

    def test_unknown_names_vs_phrase(self, extractor: EntityExtractor) -> None:
        matches = [
            e for e in extractor.extract("Will Dallas vs Chicago be close")
            if e.type == EntityType.MATCH
        ]
        assert matches[0].name == "Dallas vs Chicago"
        assert matches[0].confidence == 0.95


@pytest.mark.unit
class TestUnlistedNames:
    def test_capitalized_run_with_indicator_is_player(self, extractor: EntityExtractor) -> None:
        entities = extractor.extract("Bronny Hartwell stats")
        assert entities[0].type == EntityType.PLAYER
        assert entities[0].name == "Bronny Hartwell"
        assert entities[0].confidence == 0.8

    def test_capitalized_run_without_indicator_is_unknown(self, extractor: EntityExtractor) -> None:
        entities = extractor.extract("Tell me about Bronny Hartwell")
        assert [(e.type, e.name) for e in entities] == [(EntityType.UNKNOWN, "Bronny Hartwell")]

    def test_leading_question_word_dropped(self, extractor: EntityExtractor) -> None:
        assert extractor.extract("Will Bronny Hartwell")[0].name == "Bronny Hartwell"

    def test_single_capitalized_word_ignored(self, extractor: EntityExtractor) -> None:
        assert extractor.extract("Tonight is big") == []


@pytest.mark.unit
class TestDeduplication:
    def test_repeated_mentions_collapse(self, extractor: EntityExtractor) -> None:
        entities = extractor.extract("Jokic or Nikola Jokić, is the joker better?")
        assert [e.name for e in entities] == ["Nikola Jokić"]


@pytest.mark.unit
class TestDetectSport:
    def test_keyword(self) -> None:
        assert detect_sport("who leads the premier league") == Sport.SOCCER

    def test_entity_sport(self, extractor: EntityExtractor) -> None:
        text = "Jets score last night"
        assert detect_sport(text, extractor.extract(text)) == Sport.AMERICAN_FOOTBALL

    def test_generic_football(self) -> None:
        assert detect_sport("football tonight") == Sport.AMERICAN_FOOTBALL

    def test_unknown(self) -> None:
        assert detect_sport("who will win tonight") == Sport.UNKNOWN


@pytest.mark.unit
class TestCatalogIndexes:
    def test_shared_alias_sorted_by_priority(self) -> None:
        records = lookup("Panthers")
        assert records[0].name == "Carolina Panthers"
        assert pick_record(records, frozenset({Sport.HOCKEY})).name == "Florida Panthers"

    def test_index_is_immutable(self) -> None:
        with pytest.raises(TypeError):
            ALIAS_INDEX["new alias"] = ()  # type: ignore[index]
