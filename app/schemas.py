import time
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

UrgencyTier = Literal["low", "moderate", "high", "emergency"]

SourceCategory = Literal[
    "government_health",
    "medical_journal",
    "health_website",
    "medical_blog",
    "general",
]


class SourceRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    position: int
    url: str
    title: str
    description: str
    category: SourceCategory = "general"


class AnalysisRecord(BaseModel):
    """Display schema shared by the completion reply and the UI panels."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    possible_conditions: List[str] = Field(default_factory=list, alias="possibleConditions", max_length=4)
    urgency: UrgencyTier = Field("low", alias="urgencyLevel")
    recommended_action: str = Field("", alias="recommendedAction")
    home_remedies: List[str] = Field(default_factory=list, alias="homeRemedies")
    when_to_see_doctor: List[str] = Field(default_factory=list, alias="whenToSeeDoctor")
    disclaimer: str = ""


class QueryResult(BaseModel):
    analysis: AnalysisRecord
    detailed_explanation: str = ""
    sources: List[SourceRecord] = Field(default_factory=list, max_length=5)
    related_topics: List[str] = Field(default_factory=list)
    conversation_context: str = ""
    formatted_text: str = ""
    symptoms: List[str] = Field(default_factory=list)


class ConversationTurn(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    content: str
    timestamp: float = Field(default_factory=time.time)
    symptoms: Optional[List[str]] = None
    sources: Optional[List[SourceRecord]] = None


class SearchResult(BaseModel):
    results: List[SourceRecord] = Field(default_factory=list)
    related_topics: List[str] = Field(default_factory=list)
    from_fallback: bool = False


class CompletionResult(BaseModel):
    analysis: AnalysisRecord
    detailed_explanation: str
    conversation_context: str


# Completion replies: one parse attempt decides which branch we are on.
class StructuredReply(BaseModel):
    kind: Literal["structured"] = "structured"
    payload: Dict[str, Any]


class FreeTextReply(BaseModel):
    kind: Literal["free_text"] = "free_text"
    text: str


CompletionReply = Union[StructuredReply, FreeTextReply]


# ---------
# HTTP
# ---------
class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1, description="Raw user text.")
    session_id: Optional[str] = Field(None, description="Existing session; a new one is created if omitted.")


class ChatResponse(BaseModel):
    session_id: str
    reply: str
    small_talk: bool
    result: Optional[QueryResult] = None


class SessionResponse(BaseModel):
    session_id: str
    turns: List[ConversationTurn]
