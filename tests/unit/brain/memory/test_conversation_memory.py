"""Tests for conversation memory and pronoun resolution."""

from __future__ import annotations

import pytest

from sportiq.brain.memory.conversation import (
    ConversationMemoryStore,
    format_history,
    resolve_clarification_reply,
    resolve_prediction_follow_up,
    substitute_references,
)
from sportiq.shared.types import ConversationMemory, EntityType, ExtractedEntity
from tests.fakes import ManualClock


def _player(name: str, sport: str | None = "basketball") -> ExtractedEntity:
    return ExtractedEntity(type=EntityType.PLAYER, name=name, confidence=0.9, sport=sport)


def _team(name: str) -> ExtractedEntity:
    return ExtractedEntity(type=EntityType.TEAM, name=name, confidence=0.9, sport="basketball")


@pytest.mark.unit
class TestSubstituteReferences:
    def test_player_pronoun(self) -> None:
        memory = ConversationMemory(last_player="Nikola Jokić")
        resolution = substitute_references("How many points did he score?", memory)
        assert resolution.resolved_query == "How many points did Nikola Jokić score?"
        assert resolution.used_memory is True

    def test_player_possessive(self) -> None:
        memory = ConversationMemory(last_player="LeBron James")
        resolved = substitute_references("what are his stats", memory).resolved_query
        assert resolved == "what are LeBron James' stats"

    def test_team_pronouns(self) -> None:
        memory = ConversationMemory(last_team="Denver Nuggets")
        resolved = substitute_references("did they win? what is their record", memory)
        assert resolved.resolved_query == "did Denver Nuggets win? what is Denver Nuggets' record"

    def test_match_reference(self) -> None:
        memory = ConversationMemory(last_match="Lakers vs Celtics", last_team="Lakers")
        resolved = substitute_references("who won the game", memory).resolved_query
        assert resolved == "who won Lakers vs Celtics"

    def test_nothing_remembered(self) -> None:
        resolution = substitute_references("how did he play", ConversationMemory())
        assert resolution.resolved_query == "how did he play"
        assert resolution.used_memory is False

    def test_words_containing_pronouns_untouched(self) -> None:
        memory = ConversationMemory(last_player="Luka Dončić", last_team="Mavericks")
        resolution = substitute_references("the theme of the season", memory)
        assert resolution.resolved_query == "the theme of the season"
        assert resolution.used_memory is False

    def test_match_it_reference(self) -> None:
        memory = ConversationMemory(last_match="Los Angeles Lakers vs Boston Celtics")
        resolution = substitute_references("any injuries for it?", memory)
        assert resolution.resolved_query == (
            "any injuries for Los Angeles Lakers vs Boston Celtics?"
        )
        assert resolution.used_memory is True

    def test_bare_it_untouched(self) -> None:
        memory = ConversationMemory(last_match="Los Angeles Lakers vs Boston Celtics")
        resolution = substitute_references("is it raining", memory)
        assert resolution.resolved_query == "is it raining"
        assert resolution.used_memory is False


@pytest.mark.unit
class TestPredictionFollowUp:
    @pytest.mark.parametrize(
        "query",
        ["so who wins?", "your prediction", "what do you think", "ok then, who will win"],
    )
    def test_follow_up_names_last_match(self, query: str) -> None:
        memory = ConversationMemory(
            last_match="Los Angeles Lakers vs Boston Celtics", last_sport="basketball"
        )
        assert resolve_prediction_follow_up(query, memory) == (
            "Who will win Los Angeles Lakers vs Boston Celtics NBA"
        )

    def test_sport_without_league_label(self) -> None:
        memory = ConversationMemory(last_match="Arsenal vs Chelsea", last_sport="soccer")
        assert resolve_prediction_follow_up("so who wins", memory) == (
            "Who will win Arsenal vs Chelsea"
        )

    def test_no_match_remembered(self) -> None:
        memory = ConversationMemory(last_team="Denver Nuggets")
        assert resolve_prediction_follow_up("so who wins", memory) is None

    def test_query_naming_its_own_match(self) -> None:
        memory = ConversationMemory(last_match="Arsenal vs Chelsea")
        assert resolve_prediction_follow_up("who wins Lakers vs Celtics", memory) is None

    def test_long_question_is_not_a_follow_up(self) -> None:
        memory = ConversationMemory(last_match="Arsenal vs Chelsea")
        query = "so who wins the scoring title in the league this year"
        assert resolve_prediction_follow_up(query, memory) is None


@pytest.mark.unit
class TestClarificationReply:
    def test_league_reply_builds_matchup(self) -> None:
        rewritten = resolve_clarification_reply("nba", ["Dallas", "Chicago"])
        assert rewritten == "Who will win Mavericks vs Bulls NBA"

    def test_sport_word_reply(self) -> None:
        assert resolve_clarification_reply("Hockey?", ["Dallas", "Chicago"]) == (
            "Who will win Stars vs Blackhawks NHL"
        )

    def test_single_place(self) -> None:
        assert resolve_clarification_reply("nfl", ["Pittsburgh"]) == "Steelers NFL"

    def test_league_without_team_in_place(self) -> None:
        assert resolve_clarification_reply("nba", ["Pittsburgh"]) is None

    def test_unrelated_reply(self) -> None:
        assert resolve_clarification_reply("what about tomorrow", ["Dallas"]) is None


@pytest.mark.unit
class TestFormatHistory:
    def test_empty(self) -> None:
        assert format_history(None) == ""
        assert format_history(ConversationMemory()) == ""

    async def test_renders_turns_and_entities(self, memory_store: ConversationMemoryStore) -> None:
        await memory_store.add_turn("s1", "user", "How is Jokic?", [_player("Nikola Jokić")])
        memory = await memory_store.add_turn("s1", "assistant", "x" * 250)

        text = format_history(memory)
        assert text.startswith("=== CONVERSATION HISTORY ===\n")
        assert "User: How is Jokic?\n" in text
        assert "Assistant: " + "x" * 200 + "...\n" in text
        assert "- Player: Nikola Jokić\n" in text
        assert "- Team:" not in text

    async def test_only_last_five_turns(self, memory_store: ConversationMemoryStore) -> None:
        memory = None
        for i in range(7):
            memory = await memory_store.add_turn("s1", "user", f"question {i}")
        text = format_history(memory)
        assert "question 1\n" not in text
        assert "question 2\n" in text
        assert "question 6\n" in text


@pytest.mark.unit
class TestConversationMemoryStore:
    async def test_unknown_session(self, memory_store: ConversationMemoryStore) -> None:
        assert await memory_store.get("nobody") is None

    async def test_last_mentioned_slots(self, memory_store: ConversationMemoryStore) -> None:
        await memory_store.add_turn(
            "s1", "user", "Jokic vs Embiid", [_player("Nikola Jokić"), _player("Joel Embiid")]
        )
        await memory_store.add_turn("s1", "user", "Nuggets record", [_team("Denver Nuggets")])

        memory = await memory_store.get("s1")
        assert memory is not None
        assert memory.last_player == "Nikola Jokić"
        assert memory.last_team == "Denver Nuggets"
        assert memory.last_sport == "basketball"
        assert memory.messages[0].entities == {"players": ["Nikola Jokić", "Joel Embiid"]}

    async def test_keeps_last_ten_messages(self, memory_store: ConversationMemoryStore) -> None:
        for i in range(12):
            await memory_store.add_turn("s1", "user", f"q{i}")
        memory = await memory_store.get("s1")
        assert memory is not None
        assert len(memory.messages) == 10
        assert memory.messages[0].content == "q2"

    async def test_expires_after_an_hour(
        self, memory_store: ConversationMemoryStore, clock: ManualClock
    ) -> None:
        await memory_store.add_turn("s1", "user", "hi", [_player("Joel Embiid")])
        clock.advance(3599)
        assert await memory_store.get("s1") is not None
        clock.advance(3600)
        assert await memory_store.get("s1") is None

    async def test_sessions_are_isolated(self, memory_store: ConversationMemoryStore) -> None:
        await memory_store.add_turn("a", "user", "Embiid", [_player("Joel Embiid")])
        resolution = await memory_store.resolve_pronouns("b", "how did he play")
        assert resolution.used_memory is False

    async def test_clear(self, memory_store: ConversationMemoryStore) -> None:
        await memory_store.add_turn("s1", "user", "Embiid", [_player("Joel Embiid")])
        await memory_store.clear("s1")
        assert await memory_store.get("s1") is None

    async def test_resolve_pronouns(self, memory_store: ConversationMemoryStore) -> None:
        await memory_store.add_turn("s1", "user", "Jokic stats", [_player("Nikola Jokić")])
        resolution = await memory_store.resolve_pronouns("s1", "How many points did he score?")
        assert resolution.resolved_query == "How many points did Nikola Jokić score?"
        assert resolution.used_memory is True

    async def test_pending_clarification_answered(
        self, memory_store: ConversationMemoryStore
    ) -> None:
        await memory_store.add_turn("s1", "user", "Dallas vs Chicago tonight")
        await memory_store.add_turn(
            "s1", "assistant", "Which sport?", pending_clarification=["Dallas", "Chicago"]
        )

        resolution = await memory_store.resolve_pronouns("s1", "nba")
        assert resolution.resolved_query == "Who will win Mavericks vs Bulls NBA"

        await memory_store.add_turn("s1", "user", resolution.resolved_query)
        memory = await memory_store.get("s1")
        assert memory is not None
        assert memory.pending_clarification is None
