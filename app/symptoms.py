import re
from typing import List, Set

# Order matters only for readability; every pattern is applied.
SYMPTOM_PATTERNS: List[re.Pattern] = [
    re.compile(r"(?:i have|i'm having|experiencing|feeling|suffering from)\s+[^.!?]+"),
    re.compile(r"(?:pain|ache|hurt|sore|tender)\s+(?:in|on|at)\s+[^.!?]+"),
    re.compile(r"\b(?:headache|fever|cough|nausea|vomiting|diarrhea|fatigue|dizziness)"),
    re.compile(r"\bchest pain\b"),
    re.compile(r"(?:can't|cannot|unable to)\s+[^.!?]+"),
    re.compile(r"\b(?:swollen|inflamed|red|itchy|burning)\s+[^.!?]+"),
]


def extract_symptoms(text: str) -> Set[str]:
    """
    Candidate symptom phrases found in free text.

    Every pattern runs against the lower-cased input; whole matches are
    trimmed and collected into a set, so ordering is not preserved.
    """
    if not text:
        return set()
    lowered = text.lower()

    found: Set[str] = set()
    for pattern in SYMPTOM_PATTERNS:
        for m in pattern.finditer(lowered):
            phrase = m.group(0).strip()
            if phrase:
                found.add(phrase)
    return found
