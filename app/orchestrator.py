"""
Turn orchestration: small-talk short-circuit, then
extract -> classify -> search -> complete -> assemble.
"""
import logging
import re
import threading
from collections import OrderedDict
from typing import List, Optional, Sequence, Tuple
from uuid import uuid4

from app import prompts
from app.completion import CompletionClient
from app.config import Settings
from app.formatting import assemble_result, format_response
from app.safety import classify_urgency
from app.schemas import AnalysisRecord, ConversationTurn, QueryResult
from app.search import SourceSearchClient
from app.symptoms import extract_symptoms

logger = logging.getLogger(__name__)

_HELLO_RE = re.compile(r"^(hello|hi|hey)\b(\s+(there|doctor|doc))?[\s!.,]*$", re.IGNORECASE)
_GOOD_TIME_RE = re.compile(r"^good (morning|afternoon|evening)\b[\s!.,]*$", re.IGNORECASE)
_HOW_ARE_YOU_RE = re.compile(r"^(how are you( doing| today)?|what's up)[\s!.,?]*$", re.IGNORECASE)
_THANKS_RE = re.compile(r"^(thank you|thanks)(\s+(so much|very much|a lot|again))?(\s+(doctor|doc))?[\s!.,]*$", re.IGNORECASE)
_BYE_RE = re.compile(r"^(bye|goodbye|see you)(\s+(later|soon))?[\s!.,]*$", re.IGNORECASE)
_CAPABILITIES_RE = re.compile(r"^(what can you (help( me)? with|help|do)|what do you do)[\s!.,?]*$", re.IGNORECASE)

SMALL_TALK_PATTERNS = [_HELLO_RE, _GOOD_TIME_RE, _HOW_ARE_YOU_RE, _THANKS_RE, _BYE_RE, _CAPABILITIES_RE]


def is_small_talk(text: str) -> bool:
    t = (text or "").strip()
    return any(p.search(t) for p in SMALL_TALK_PATTERNS)


def small_talk_reply(text: str) -> str:
    t = (text or "").strip()
    if _HELLO_RE.search(t) or _GOOD_TIME_RE.search(t):
        return prompts.REPLY_HELLO
    if _HOW_ARE_YOU_RE.search(t):
        return prompts.REPLY_HOW_ARE_YOU
    if _THANKS_RE.search(t):
        return prompts.REPLY_THANKS
    if _BYE_RE.search(t):
        return prompts.REPLY_BYE
    if _CAPABILITIES_RE.search(t):
        return prompts.REPLY_CAPABILITIES
    return prompts.REPLY_DEFAULT


def greeting() -> str:
    return prompts.GREETING


def technical_difficulty_result() -> QueryResult:
    result = QueryResult(
        analysis=AnalysisRecord(
            possible_conditions=[prompts.TECHNICAL_DIFFICULTY_CONDITION],
            urgency="moderate",
            recommended_action=prompts.TECHNICAL_DIFFICULTY_ACTION,
            home_remedies=[],
            when_to_see_doctor=[prompts.TECHNICAL_DIFFICULTY_DOCTOR],
            disclaimer=prompts.TECHNICAL_DIFFICULTY_DISCLAIMER,
        ),
        detailed_explanation=prompts.TECHNICAL_DIFFICULTY_EXPLANATION,
        sources=[],
        related_topics=[],
        conversation_context="Technical error occurred during processing.",
    )
    return result.model_copy(update={"formatted_text": format_response(result)})


class ConversationOrchestrator:
    def __init__(
        self,
        settings: Settings,
        search_client: Optional[SourceSearchClient] = None,
        completion_client: Optional[CompletionClient] = None,
    ):
        self.settings = settings
        self.search_client = search_client or SourceSearchClient(settings)
        self.completion_client = completion_client or CompletionClient(settings)

    def handle_turn(self, user_query: str, history: Sequence[ConversationTurn] = ()) -> QueryResult:
        try:
            symptoms = extract_symptoms(user_query)
            urgency = classify_urgency(user_query)
            logger.info("Turn: %d symptom phrase(s), urgency=%s", len(symptoms), urgency)
            if self.settings.allow_logging:
                # NOTE: logging PHI is dangerous; keep off by default
                logger.info("Turn text: %r symptoms=%s", user_query, sorted(symptoms))

            search = self.search_client.search(symptoms, user_query)
            completion = self.completion_client.complete(
                user_query,
                symptoms,
                search.results,
                urgency,
                history=[{"role": t.role, "content": t.content} for t in history],
            )
            return assemble_result(completion, search, symptoms)
        except Exception as e:
            logger.error("Turn pipeline failed: %s", e, exc_info=True)
            return technical_difficulty_result()


class ChatSession:
    """Append-only history for one conversation; one turn in flight at a time."""

    def __init__(self, orchestrator: ConversationOrchestrator, session_id: Optional[str] = None):
        self.session_id = session_id or str(uuid4())
        self.orchestrator = orchestrator
        self.turns: List[ConversationTurn] = [ConversationTurn(role="assistant", content=greeting())]
        self._lock = threading.Lock()

    def send(self, text: str) -> Tuple[ConversationTurn, Optional[QueryResult]]:
        """Returns ``(assistant_turn, result)``; ``result`` is None for small talk."""
        with self._lock:
            history = list(self.turns)
            self.turns.append(ConversationTurn(role="user", content=text))

            if is_small_talk(text):
                reply = ConversationTurn(role="assistant", content=small_talk_reply(text))
                self.turns.append(reply)
                return reply, None

            result = self.orchestrator.handle_turn(text, history)
            reply = ConversationTurn(
                role="assistant",
                content=result.formatted_text or result.detailed_explanation,
                symptoms=result.symptoms,
                sources=result.sources,
            )
            self.turns.append(reply)
            return reply, result


class SessionStore:
    """In-memory sessions; nothing outlives the process. Least recently used go first past the cap."""

    def __init__(self, orchestrator: ConversationOrchestrator, max_sessions: int = 1000):
        self.orchestrator = orchestrator
        self.max_sessions = max(1, max_sessions)
        self._sessions: "OrderedDict[str, ChatSession]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def create(self) -> ChatSession:
        session = ChatSession(self.orchestrator)
        with self._lock:
            self._sessions[session.session_id] = session
            while len(self._sessions) > self.max_sessions:
                evicted, _ = self._sessions.popitem(last=False)
                logger.info("Session store full; evicted session %s", evicted)
        return session

    def get(self, session_id: str) -> Optional[ChatSession]:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                self._sessions.move_to_end(session_id)
            return session

    def remove(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None
