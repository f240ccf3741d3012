"""Language-model classifier stage.

- Sends the fixed taxonomy plus the raw query through LLMCallPort in
  JSON mode, bounded by a timeout
- A strict pydantic schema validates the reply; anything that fails it
  goes through ``repair_classification``, a pure function supplying a
  safe default for every missing or invalid field
- Transport failure, timeout or an unparsable reply never raises: the
  keyword classifier answers instead, at confidence <= 0.5
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as SchemaError

from sportiq.brain.intent.keywords import KeywordClassifier
from sportiq.ports.llm_call_port import LLMCallPort
from sportiq.shared.errors import MalformedResponseError, PortTimeoutError
from sportiq.shared.logging.error_handler import log_structured_error
from sportiq.shared.types import (
    ClassificationResult,
    EntityType,
    ExtractedEntity,
    QueryIntent,
    Sport,
    clamp_confidence,
    merge_entities,
)

logger = logging.getLogger(__name__)

DEGRADED_MAX_CONFIDENCE = 0.5
LLM_ENTITY_CONFIDENCE = 0.8

SYSTEM_PROMPT = """You are a sports query classifier. Analyze the user's question and return JSON only.

CATEGORIES:
- PLAYER_STATS: player statistics (points, goals, assists, averages)
- TEAM_STATS: team performance, shots, xG, clean sheets, records
- MATCH_PREDICTION: who will win an upcoming match
- MATCH_RESULT: score or result of a past match
- STANDINGS: league table or rankings
- LINEUP: starting XI or roster
- INJURY_NEWS: player availability or injuries
- TRANSFER_NEWS: transfers, rumors, signings
- HEAD_TO_HEAD: historical matchups between teams
- FORM_CHECK: how a team or player is doing recently
- BETTING_ANALYSIS: odds, betting advice, over/under, props
- SCHEDULE: when a game is
- GENERAL_INFO: general questions (rules, who is X)
- OUR_ANALYSIS: asking about our own prediction
- UNCLEAR: cannot determine intent

SPORTS: basketball, american_football, hockey, soccer, euroleague, baseball, unknown

Return exactly:
{
  "category": "CATEGORY",
  "sport": "sport",
  "confidence": 0.0-1.0,
  "entities": [{"type": "PLAYER|TEAM|MATCH|LEAGUE", "name": "full name"}],
  "needs_realtime": true|false,
  "needs_api_data": true|false,
  "is_betting_related": true|false,
  "reasoning": "brief explanation"
}"""

# Category names used by earlier classifier versions
LEGACY_CATEGORIES: Mapping[str, QueryIntent] = {
    "GENERAL": QueryIntent.GENERAL_INFO,
    "STATS": QueryIntent.PLAYER_STATS,
    "PLAYER": QueryIntent.GENERAL_INFO,
    "ROSTER": QueryIntent.LINEUP,
    "FIXTURE": QueryIntent.SCHEDULE,
    "RESULT": QueryIntent.MATCH_RESULT,
    "INJURY": QueryIntent.INJURY_NEWS,
    "TRANSFER": QueryIntent.TRANSFER_NEWS,
    "ODDS": QueryIntent.BETTING_ANALYSIS,
    "PLAYER_PROP": QueryIntent.BETTING_ANALYSIS,
    "BETTING_ADVICE": QueryIntent.BETTING_ANALYSIS,
    "MATCH_ANALYSIS": QueryIntent.MATCH_PREDICTION,
    "COMPARISON": QueryIntent.HEAD_TO_HEAD,
    "FORM": QueryIntent.FORM_CHECK,
    "OUR_PREDICTION": QueryIntent.OUR_ANALYSIS,
}

# Prefixes of provider sport keys ("basketball_nba", "icehockey_nhl", ...)
_SPORT_PREFIXES: tuple[tuple[str, Sport], ...] = (
    ("basketball_euroleague", Sport.EUROLEAGUE),
    ("basketball", Sport.BASKETBALL),
    ("americanfootball", Sport.AMERICAN_FOOTBALL),
    ("icehockey", Sport.HOCKEY),
    ("soccer", Sport.SOCCER),
    ("baseball", Sport.BASEBALL),
)


class LLMEntity(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: EntityType
    name: str = Field(min_length=1)


class LLMClassification(BaseModel):
    """Strict shape of a well-formed classifier reply."""

    model_config = ConfigDict(extra="ignore", strict=True)

    category: QueryIntent
    sport: Sport
    confidence: float = Field(ge=0.0, le=1.0)
    entities: list[LLMEntity] = Field(default_factory=list)
    needs_realtime: bool
    needs_api_data: bool
    is_betting_related: bool
    reasoning: str | None = None

    def to_result(self) -> ClassificationResult:
        return ClassificationResult(
            category=self.category,
            sport=self.sport,
            confidence=self.confidence,
            entities=[
                ExtractedEntity(type=e.type, name=e.name, confidence=LLM_ENTITY_CONFIDENCE)
                for e in self.entities
            ],
            needs_realtime=self.needs_realtime,
            needs_api_data=self.needs_api_data,
            is_betting_related=self.is_betting_related,
            reasoning=self.reasoning,
        )


# -- Repair (pure) --


def _repair_category(value: Any) -> QueryIntent:
    if value is None or (isinstance(value, str) and not value.strip()):
        return QueryIntent.UNCLEAR
    if not isinstance(value, str):
        return QueryIntent.GENERAL_INFO
    key = value.strip().upper()
    if key in QueryIntent.__members__:
        return QueryIntent[key]
    return LEGACY_CATEGORIES.get(key, QueryIntent.GENERAL_INFO)


def _repair_sport(value: Any) -> Sport:
    if not isinstance(value, str):
        return Sport.UNKNOWN
    key = value.strip().lower()
    try:
        return Sport(key)
    except ValueError:
        pass
    for prefix, sport in _SPORT_PREFIXES:
        if key.startswith(prefix):
            return sport
    return Sport.UNKNOWN


def _repair_confidence(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return 0.5
    return clamp_confidence(value, default=0.5)


def _repair_entity_type(value: Any) -> EntityType:
    if isinstance(value, str) and value.strip().upper() in EntityType.__members__:
        return EntityType[value.strip().upper()]
    return EntityType.UNKNOWN


def _repair_entities(value: Any) -> list[ExtractedEntity]:
    entities: list[ExtractedEntity] = []
    if isinstance(value, list):
        for item in value:
            if isinstance(item, Mapping):
                name = item.get("name")
                if isinstance(name, str) and name.strip():
                    entities.append(
                        ExtractedEntity(
                            type=_repair_entity_type(item.get("type")),
                            name=name.strip(),
                            confidence=LLM_ENTITY_CONFIDENCE,
                        )
                    )
            elif isinstance(item, str) and item.strip():
                entities.append(
                    ExtractedEntity(
                        type=EntityType.UNKNOWN, name=item.strip(), confidence=LLM_ENTITY_CONFIDENCE
                    )
                )
    elif isinstance(value, Mapping):
        # {"player_names": [...], "team_names": [...]} shape
        for field_name, entity_type in (
            ("player_names", EntityType.PLAYER),
            ("team_names", EntityType.TEAM),
        ):
            names = value.get(field_name)
            if isinstance(names, list):
                entities.extend(
                    ExtractedEntity(
                        type=entity_type, name=n.strip(), confidence=LLM_ENTITY_CONFIDENCE
                    )
                    for n in names
                    if isinstance(n, str) and n.strip()
                )
    return merge_entities(entities)


def repair_classification(raw: Mapping[str, Any]) -> ClassificationResult:
    """Coerce an arbitrary classifier reply into a valid ClassificationResult.

    Missing category -> UNCLEAR; unrecognized category -> GENERAL_INFO;
    confidence -> 0.5; sport -> unknown; entities -> []; flags -> False.
    """
    reasoning = raw.get("reasoning")
    return ClassificationResult(
        category=_repair_category(raw.get("category")),
        sport=_repair_sport(raw.get("sport")),
        confidence=_repair_confidence(raw.get("confidence")),
        entities=_repair_entities(raw.get("entities")),
        needs_realtime=raw.get("needs_realtime") is True,
        needs_api_data=raw.get("needs_api_data") is True,
        is_betting_related=raw.get("is_betting_related") is True,
        reasoning=reasoning if isinstance(reasoning, str) else None,
    )


def parse_classification(text: str) -> ClassificationResult:
    """Parse a JSON reply; schema-valid replies pass through, others are repaired.

    Raises:
        MalformedResponseError: the reply is not a JSON object at all.
    """
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as exc:
        raise MalformedResponseError("Classifier reply is not valid JSON", raw=text) from exc
    if not isinstance(data, dict):
        raise MalformedResponseError("Classifier reply is not a JSON object", raw=text)

    try:
        return LLMClassification.model_validate_json(text).to_result()
    except SchemaError as exc:
        logger.info("Repairing classifier reply (%d schema errors)", exc.error_count())
        return repair_classification(data)


# -- Adapter --


@dataclass(frozen=True)
class LLMOutcome:
    result: ClassificationResult
    degraded: bool = False


class LLMClassifier:
    """Wraps LLMCallPort with timeout, schema repair and keyword degradation."""

    def __init__(
        self,
        llm: LLMCallPort,
        *,
        model_id: str = "",
        timeout_s: float = 8.0,
        keyword_classifier: KeywordClassifier | None = None,
    ) -> None:
        self._llm = llm
        self._model_id = model_id
        self._timeout_s = timeout_s
        self._keywords = keyword_classifier or KeywordClassifier()

    async def classify(
        self,
        query: str,
        entities: list[ExtractedEntity] | None = None,
        *,
        session_id: str = "",
    ) -> LLMOutcome:
        """Classify ``query``; local ``entities`` are merged with the model's."""
        local = list(entities or [])
        try:
            response = await asyncio.wait_for(
                self._llm.call(
                    prompt=query,
                    model_id=self._model_id,
                    parameters={
                        "system_prompt": SYSTEM_PROMPT,
                        "response_format": {"type": "json_object"},
                        "temperature": 0,
                        "max_tokens": 300,
                    },
                ),
                timeout=self._timeout_s,
            )
            parsed = parse_classification(response.text)
        except TimeoutError:
            error = PortTimeoutError("LLMCallPort", int(self._timeout_s * 1000))
            return self._degrade(query, local, error, session_id)
        except Exception as exc:
            return self._degrade(query, local, exc, session_id)

        return LLMOutcome(result=replace(parsed, entities=merge_entities(local, parsed.entities)))

    def _degrade(
        self,
        query: str,
        entities: list[ExtractedEntity],
        exc: BaseException,
        session_id: str,
    ) -> LLMOutcome:
        log_structured_error(
            logger,
            exc,
            session_id=session_id,
            stage="llm_classify",
            context={"query_length": len(query), "model_id": self._model_id},
        )
        fallback = self._keywords.classify(query, entities)
        if fallback.confidence > DEGRADED_MAX_CONFIDENCE:
            fallback = replace(fallback, confidence=DEGRADED_MAX_CONFIDENCE)
        return LLMOutcome(result=fallback, degraded=True)
