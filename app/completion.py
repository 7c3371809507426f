"""
Completion stage: one chat-completion call per turn, with a synthesized
analysis whenever the call fails or the model answers in prose.
"""
import json
import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Sequence

from openai import OpenAI

from app.config import Settings
from app.prompts import (
    CONDITION_HINTS,
    DEFAULT_REMEDIES,
    DISCLAIMER,
    GENERIC_CONDITION,
    REMEDY_HINTS,
    URGENCY_ACTIONS,
    WHEN_TO_SEE_DOCTOR,
    build_system_prompt,
    fallback_explanation,
)
from app.safety import URGENCY_ORDER, redact_pii_basic, urgency_rank
from app.schemas import (
    AnalysisRecord,
    CompletionReply,
    CompletionResult,
    FreeTextReply,
    SourceRecord,
    StructuredReply,
    UrgencyTier,
)

logger = logging.getLogger(__name__)

TEMPERATURE = 0.3
MAX_TOKENS = 1200
COMPLETION_TIMEOUT = 25.0
MAX_CONDITIONS = 4

ANALYSIS_FIELDS = {
    "possibleConditions", "urgencyLevel", "recommendedAction",
    "homeRemedies", "whenToSeeDoctor", "disclaimer",
}

_JSON_RE = re.compile(r"\{.*\}", re.DOTALL)

_HEDGE_PATTERNS = [
    re.compile(r"could be\s+([^.,;:\n]+)", re.IGNORECASE),
    re.compile(r"might be\s+([^.,;:\n]+)", re.IGNORECASE),
    re.compile(r"such as\s+([^.;:\n]+)", re.IGNORECASE),
]


class NotConfiguredError(RuntimeError):
    pass


def _extract_json(text: str) -> Dict[str, Any]:
    """
    Accepts either pure JSON or a text blob containing a JSON object.
    """
    text = text.strip()
    if not text:
        return {}
    try:
        value = json.loads(text)
    except ValueError:
        m = _JSON_RE.search(text)
        if not m:
            return {}
        try:
            value = json.loads(m.group(0))
        except ValueError:
            return {}
    return value if isinstance(value, dict) else {}


def parse_reply(text: str) -> CompletionReply:
    """Decide once whether the model answered with the JSON shape or in prose."""
    payload = _extract_json(text or "")
    if isinstance(payload.get("analysis"), dict) or ANALYSIS_FIELDS & set(payload):
        return StructuredReply(payload=payload)
    return FreeTextReply(text=(text or "").strip())


def _string_list(value: Any) -> List[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    items = []
    for v in value:
        if isinstance(v, dict):
            v = v.get("name") or v.get("text") or ""
        v = str(v).strip()
        if v and v not in items:
            items.append(v)
    return items


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _symptom_text(user_query: str, symptoms: Iterable[str]) -> str:
    return " ".join([user_query or "", *symptoms]).lower()


def conditions_from_symptoms(user_query: str, symptoms: Iterable[str]) -> List[str]:
    text = _symptom_text(user_query, symptoms)
    found: List[str] = []
    for key, conditions in CONDITION_HINTS.items():
        if key in text:
            found.extend(c for c in conditions if c not in found)
    return found[:MAX_CONDITIONS] or [GENERIC_CONDITION]


def remedies_from_symptoms(user_query: str, symptoms: Iterable[str], urgency: str) -> List[str]:
    if urgency not in ("low", "moderate"):
        return []
    text = _symptom_text(user_query, symptoms)
    found: List[str] = []
    for key, remedies in REMEDY_HINTS.items():
        if key in text:
            found.extend(r for r in remedies if r not in found)
    return found or list(DEFAULT_REMEDIES)


def conditions_from_text(text: str) -> List[str]:
    found: List[str] = []
    for pattern in _HEDGE_PATTERNS:
        for m in pattern.finditer(text):
            for part in re.split(r",|\bor\b|\band\b", m.group(1)):
                cond = re.sub(r"^(a|an|the)\s+", "", part.strip(" \"'()"), flags=re.IGNORECASE)
                if cond and len(cond) > 2 and cond.lower() not in (c.lower() for c in found):
                    found.append(cond[0].upper() + cond[1:])
    return found[:MAX_CONDITIONS]


def synthesize_analysis(user_query: str, symptoms: Iterable[str], urgency: UrgencyTier, conditions: Optional[List[str]] = None) -> AnalysisRecord:
    symptoms = list(symptoms)
    return AnalysisRecord(
        possible_conditions=(conditions or conditions_from_symptoms(user_query, symptoms))[:MAX_CONDITIONS],
        urgency=urgency,
        recommended_action=URGENCY_ACTIONS[urgency],
        home_remedies=remedies_from_symptoms(user_query, symptoms, urgency),
        when_to_see_doctor=list(WHEN_TO_SEE_DOCTOR),
        disclaimer=DISCLAIMER,
    )


def _context(symptoms: Iterable[str], urgency: str) -> str:
    return f"User reported symptoms: {', '.join(sorted(symptoms)) or 'none identified'}. Urgency assessed as {urgency}."


def source_digest(sources: Sequence[SourceRecord]) -> str:
    return "\n\n".join(
        f"Source: {s.title} ({s.category})\nDescription: {s.description}\nURL: {s.url}"
        for s in sources
    )


class CompletionClient:
    def __init__(self, settings: Settings, client: Optional[Any] = None):
        self.settings = settings
        self._client = client

    def _openai_client(self) -> Any:
        if self._client is not None:
            return self._client
        if not self.settings.completion_configured:
            raise NotConfiguredError("Completion API key is not set.")
        self._client = OpenAI(
            api_key=self.settings.completion_api_key,
            base_url=self.settings.completion_base_url,
            timeout=COMPLETION_TIMEOUT,
            max_retries=0,
        )
        return self._client

    def _call_llm(self, messages: List[Dict[str, str]]) -> str:
        if not self.settings.completion_configured:
            raise NotConfiguredError("Completion API key is not set.")
        client = self._openai_client()
        completion = client.chat.completions.create(
            model=self.settings.model_name,
            messages=messages,
            temperature=TEMPERATURE,
            max_tokens=MAX_TOKENS,
            stream=False,
        )
        return completion.choices[0].message.content or ""

    def complete(
        self,
        user_query: str,
        symptoms: Iterable[str],
        sources: Sequence[SourceRecord],
        urgency: UrgencyTier,
        history: Sequence[Dict[str, str]] = (),
    ) -> CompletionResult:
        symptoms = sorted(set(symptoms))
        safe_query = redact_pii_basic(user_query)
        safe_history = [{"role": m["role"], "content": redact_pii_basic(m["content"])} for m in history]
        system_prompt = build_system_prompt(
            query=safe_query,
            symptoms=symptoms,
            urgency=urgency,
            source_digest=source_digest(sources),
            history=safe_history,
        )
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": safe_query},
        ]

        try:
            raw = self._call_llm(messages)
        except NotConfiguredError:
            logger.info("Completion API key not configured; synthesizing analysis")
            return self._fallback(user_query, symptoms, urgency)
        except Exception as e:
            logger.warning("Completion call failed, synthesizing analysis: %s", e)
            return self._fallback(user_query, symptoms, urgency)

        if not raw.strip():
            logger.warning("Completion API returned an empty reply")
            return self._fallback(user_query, symptoms, urgency)

        reply = parse_reply(raw)
        if isinstance(reply, StructuredReply):
            return self._from_structured(reply.payload, user_query, symptoms, urgency)
        return self._from_free_text(reply.text, user_query, symptoms, urgency)

    def _fallback(self, user_query: str, symptoms: List[str], urgency: UrgencyTier) -> CompletionResult:
        return CompletionResult(
            analysis=synthesize_analysis(user_query, symptoms, urgency),
            detailed_explanation=fallback_explanation(urgency),
            conversation_context=_context(symptoms, urgency),
        )

    def _from_free_text(self, text: str, user_query: str, symptoms: List[str], urgency: UrgencyTier) -> CompletionResult:
        conditions = conditions_from_text(text)
        return CompletionResult(
            analysis=synthesize_analysis(user_query, symptoms, urgency, conditions=conditions),
            detailed_explanation=text,
            conversation_context=_context(symptoms, urgency),
        )

    def _from_structured(self, payload: Dict[str, Any], user_query: str, symptoms: List[str], urgency: UrgencyTier) -> CompletionResult:
        raw = payload.get("analysis") if isinstance(payload.get("analysis"), dict) else payload
        base = synthesize_analysis(user_query, symptoms, urgency)

        # The keyword screen is a floor: the model may raise the tier, never lower it.
        model_tier = _text(raw.get("urgencyLevel")).lower()
        if urgency_rank(model_tier) > urgency_rank(urgency):
            urgency = URGENCY_ORDER[urgency_rank(model_tier)]

        remedies = _string_list(raw.get("homeRemedies")) if "homeRemedies" in raw else base.home_remedies
        if urgency not in ("low", "moderate"):
            remedies = []

        analysis = AnalysisRecord(
            possible_conditions=(_string_list(raw.get("possibleConditions")) or base.possible_conditions)[:MAX_CONDITIONS],
            urgency=urgency,
            recommended_action=_text(raw.get("recommendedAction")) or URGENCY_ACTIONS[urgency],
            home_remedies=remedies,
            when_to_see_doctor=_string_list(raw.get("whenToSeeDoctor")) or base.when_to_see_doctor,
            disclaimer=_text(raw.get("disclaimer")) or DISCLAIMER,
        )
        return CompletionResult(
            analysis=analysis,
            detailed_explanation=_text(payload.get("detailedExplanation")) or fallback_explanation(urgency),
            conversation_context=_text(payload.get("conversationContext")) or _context(symptoms, urgency),
        )
