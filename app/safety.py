import re
from typing import List

from app.schemas import UrgencyTier

# NOTE: keyword screen only. The lists are disjoint and checked in priority order.
EMERGENCY_KEYWORDS = [
    "chest pain", "difficulty breathing", "severe headache", "loss of consciousness",
    "severe bleeding", "stroke", "heart attack", "suicide", "overdose",
    "severe allergic reaction", "anaphylaxis", "severe burns", "choking",
    "blood in vomit", "blood in stool", "vomiting blood", "severe dizziness",
]
HIGH_KEYWORDS = [
    "high fever", "severe pain", "persistent vomiting", "severe diarrhea",
    "difficulty swallowing", "severe abdominal pain", "vision problems",
    "blurry vision", "blurred vision", "numbness", "seizure", "fainting",
    "blood", "bleeding",
]
MODERATE_KEYWORDS = [
    "fever", "persistent cough", "headache", "nausea", "vomiting",
    "diarrhea", "fatigue", "body aches", "sore throat",
]

URGENCY_ORDER: List[UrgencyTier] = ["low", "moderate", "high", "emergency"]


def urgency_rank(tier: str) -> int:
    """Ordinal of a tier; unknown values rank below ``low``."""
    try:
        return URGENCY_ORDER.index(tier)  # type: ignore[arg-type]
    except ValueError:
        return -1


def classify_urgency(text: str) -> UrgencyTier:
    """
    First keyword hit wins: emergency, then high, then moderate. Otherwise low.
    """
    if not text:
        return "low"
    t = text.lower()

    if any(k in t for k in EMERGENCY_KEYWORDS):
        return "emergency"
    if any(k in t for k in HIGH_KEYWORDS):
        return "high"
    if any(k in t for k in MODERATE_KEYWORDS):
        return "moderate"
    return "low"


# Extremely naive PII redaction, applied to text leaving the service.
_EMAIL_RE = re.compile(r"[\w\.-]+@[\w\.-]+\.\w+")
_PHONE_RE = re.compile(r"\b(\+?\d[\d\s\-]{7,}\d)\b")
_ADDRESS_RE = re.compile(r"\b(\d{1,5}\s+\w+(\s+\w+){1,5}\s+(st|street|rd|road|ave|avenue|blvd|boulevard|dr|drive|ln|lane|ct|court)\b)", re.IGNORECASE)


def redact_pii_basic(text: str) -> str:
    if not text:
        return text
    text = _EMAIL_RE.sub("[REDACTED_EMAIL]", text)
    text = _PHONE_RE.sub("[REDACTED_PHONE]", text)
    text = _ADDRESS_RE.sub("[REDACTED_ADDRESS]", text)
    return text


_DOSE_RE = re.compile(r"\b(\d+\s?(mg|ml|mcg|g))\b", re.IGNORECASE)
_DOSING_RE = re.compile(r"\b(dos(e|age)|every\s+\d+\s+(hours|hrs|h))\b", re.IGNORECASE)


def strip_dosing(text: str) -> str:
    """Drop lines that give medication amounts or schedules."""
    if not isinstance(text, str):
        return text
    safe_lines = []
    for ln in text.splitlines():
        if _DOSE_RE.search(ln) or _DOSING_RE.search(ln):
            continue
        safe_lines.append(ln)
    return "\n".join(safe_lines).strip()
