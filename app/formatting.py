from typing import Iterable, List, Sequence

from app.prompts import DISCLAIMER, URGENCY_ACTIONS
from app.safety import strip_dosing
from app.schemas import AnalysisRecord, CompletionResult, QueryResult, SearchResult, SourceRecord

MAX_SOURCES = 5
MAX_DISPLAYED_SOURCES = 3

CATEGORY_TAGS = {
    "government_health": "Government",
    "medical_journal": "Journal",
    "health_website": "Health site",
    "medical_blog": "Blog",
    "general": "Web",
}


def _guarded(analysis: AnalysisRecord) -> AnalysisRecord:
    """Dosing lines removed and a disclaimer guaranteed."""
    remedies = [r for r in (strip_dosing(x) for x in analysis.home_remedies) if r]
    return analysis.model_copy(update={
        "recommended_action": strip_dosing(analysis.recommended_action) or URGENCY_ACTIONS[analysis.urgency],
        "home_remedies": remedies,
        "disclaimer": analysis.disclaimer.strip() or DISCLAIMER,
    })


def assemble_result(completion: CompletionResult, search: SearchResult, symptoms: Iterable[str] = ()) -> QueryResult:
    analysis = _guarded(completion.analysis)
    result = QueryResult(
        analysis=analysis,
        detailed_explanation=completion.detailed_explanation,
        sources=list(search.results[:MAX_SOURCES]),
        related_topics=list(search.related_topics),
        conversation_context=completion.conversation_context,
        symptoms=sorted(symptoms),
    )
    return result.model_copy(update={"formatted_text": format_response(result)})


def _bullets(items: Sequence[str]) -> List[str]:
    return [f"- {item}" for item in items]


def _source_line(index: int, source: SourceRecord) -> str:
    return f"{index}. [{CATEGORY_TAGS[source.category]}] [{source.title}]({source.url})"


def format_response(result: QueryResult) -> str:
    analysis = result.analysis
    parts = ["## Medical Information Analysis", ""]

    if analysis.urgency in ("emergency", "high"):
        parts += [f"**URGENT**: {analysis.recommended_action}", ""]

    parts += ["**Detailed Analysis:**", result.detailed_explanation, ""]

    if analysis.possible_conditions:
        parts += ["**Possible Conditions to Consider:**", *_bullets(analysis.possible_conditions), ""]

    parts += ["**Recommended Action:**", analysis.recommended_action, ""]

    if analysis.home_remedies:
        parts += ["**Home Care Suggestions:**", *_bullets(analysis.home_remedies), ""]

    if analysis.when_to_see_doctor:
        parts += ["**When to Seek Medical Attention:**", *_bullets(analysis.when_to_see_doctor), ""]

    if result.sources:
        parts.append("**Medical Sources:**")
        parts += [_source_line(i, s) for i, s in enumerate(result.sources[:MAX_DISPLAYED_SOURCES], 1)]
        parts.append("")

    parts += ["**Important Disclaimer:**", analysis.disclaimer]
    return "\n".join(parts)


def format_sources(sources: Sequence[SourceRecord]) -> str:
    if not sources:
        return "No medical sources available."
    return "\n".join(_source_line(i, s) for i, s in enumerate(sources, 1))
