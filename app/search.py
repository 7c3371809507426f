"""
Medical source search through the RapidAPI web-search endpoint.

One GET per turn at most, spaced by a cooldown. Whenever the call cannot or
should not be made (no key, cooldown, network or payload error) the caller
gets the same static list of reputable sources instead.
"""
import logging
import threading
import time
from typing import Any, Callable, Dict, Iterable, List, Optional

import requests

from app.config import Settings
from app.schemas import SearchResult, SourceCategory, SourceRecord

logger = logging.getLogger(__name__)

MAX_RESULTS = 5
MAX_RELATED_TOPICS = 5
MAX_QUERY_CHARS = 100
SEARCH_TIMEOUT = 8.0

GOVERNMENT_DOMAINS = ["nih.gov", "cdc.gov", "who.int", "nhs.uk", "medlineplus.gov"]
JOURNAL_DOMAINS = ["pubmed", "ncbi", "nejm", "bmj", "thelancet", "jamanetwork"]
TRUSTED_HEALTH_SITES = [
    "mayoclinic.org", "webmd.com", "healthline.com", "medicalnewstoday.com",
    "clevelandclinic.org", "medscape.com", "hopkinsmedicine.org",
]
BLOG_MARKERS = ["blog", "wordpress", "medium"]

SOURCE_RELIABILITY: Dict[str, int] = {
    "government_health": 5,
    "medical_journal": 4,
    "health_website": 3,
    "medical_blog": 2,
    "general": 1,
}

FALLBACK_SOURCES: List[SourceRecord] = [
    SourceRecord(
        position=1,
        url="https://medlineplus.gov/",
        title="MedlinePlus - Health Information from the National Library of Medicine",
        description="Trusted information about diseases, conditions, symptoms and wellness.",
        category="government_health",
    ),
    SourceRecord(
        position=2,
        url="https://www.cdc.gov/",
        title="Centers for Disease Control and Prevention",
        description="Public health guidance on diseases, prevention and when to seek care.",
        category="government_health",
    ),
    SourceRecord(
        position=3,
        url="https://www.who.int/health-topics",
        title="World Health Organization - Health Topics",
        description="Global fact sheets on common and serious health conditions.",
        category="government_health",
    ),
    SourceRecord(
        position=4,
        url="https://www.nhs.uk/conditions/",
        title="NHS - Health A to Z",
        description="Symptoms, causes and treatments for common conditions.",
        category="government_health",
    ),
    SourceRecord(
        position=5,
        url="https://www.mayoclinic.org/diseases-conditions",
        title="Mayo Clinic - Diseases & Conditions",
        description="Clinician-reviewed overviews of symptoms, causes and care.",
        category="health_website",
    ),
]


def classify_source(url: str) -> SourceCategory:
    domain = (url or "").lower()
    if any(d in domain for d in GOVERNMENT_DOMAINS):
        return "government_health"
    if any(d in domain for d in JOURNAL_DOMAINS):
        return "medical_journal"
    if any(d in domain for d in TRUSTED_HEALTH_SITES):
        return "health_website"
    if any(d in domain for d in BLOG_MARKERS):
        return "medical_blog"
    return "general"


def fallback_result() -> SearchResult:
    return SearchResult(results=list(FALLBACK_SOURCES), related_topics=[], from_fallback=True)


def _to_source(raw: Dict[str, Any], index: int) -> SourceRecord:
    url = raw.get("url") or raw.get("link") or "#"
    position = raw.get("position")
    return SourceRecord(
        position=position if isinstance(position, int) else index + 1,
        url=str(url),
        title=str(raw.get("title") or "No title"),
        description=str(raw.get("description") or raw.get("snippet") or "No description available"),
        category=classify_source(str(url)),
    )


def rank_sources(sources: Iterable[SourceRecord], limit: int = MAX_RESULTS) -> List[SourceRecord]:
    """Most reliable first, duplicate URLs dropped (first wins), capped."""
    ordered = sorted(sources, key=lambda s: SOURCE_RELIABILITY[s.category], reverse=True)
    seen = set()
    unique: List[SourceRecord] = []
    for s in ordered:
        if s.url in seen:
            continue
        seen.add(s.url)
        unique.append(s)
    return unique[:limit]


def _related_topics(raw: Any) -> List[str]:
    if not isinstance(raw, list):
        return []
    topics: List[str] = []
    for item in raw:
        if isinstance(item, str):
            topic = item
        elif isinstance(item, dict):
            topic = item.get("keyword") or item.get("text") or ""
        else:
            topic = ""
        topic = str(topic).strip()
        if topic and topic not in topics:
            topics.append(topic)
    return topics[:MAX_RELATED_TOPICS]


class SourceSearchClient:
    def __init__(
        self,
        settings: Settings,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.settings = settings
        self.session = session or requests.Session()
        self.clock = clock
        self.last_search_at: Optional[float] = None
        self._lock = threading.Lock()

    def _acquire_slot(self) -> bool:
        """Claim the next call if the cooldown has elapsed; records the attempt time."""
        with self._lock:
            now = self.clock()
            if self.last_search_at is not None and now - self.last_search_at < self.settings.search_cooldown_seconds:
                return False
            self.last_search_at = now
            return True

    def search(self, symptoms: Iterable[str], user_query: str) -> SearchResult:
        if not self.settings.search_configured:
            logger.info("Search API key not configured; using static sources")
            return fallback_result()
        if not self._acquire_slot():
            logger.info("Search cooldown active; using static sources")
            return fallback_result()

        try:
            return self._search(symptoms, user_query)
        except Exception as e:
            logger.warning("Medical search failed, using static sources: %s", e)
            return fallback_result()

    def _search(self, symptoms: Iterable[str], user_query: str) -> SearchResult:
        subject = (user_query or "").strip() or " ".join(sorted(symptoms))
        query = f"{subject} symptoms causes treatment".strip()[:MAX_QUERY_CHARS]
        resp = self.session.get(
            self.settings.search_url,
            params={
                "query": query,
                "limit": str(MAX_RESULTS),
                "related_keywords": "true",
            },
            headers={
                "x-rapidapi-key": self.settings.search_api_key,
                "x-rapidapi-host": self.settings.search_host,
            },
            timeout=SEARCH_TIMEOUT,
        )
        resp.raise_for_status()
        data = resp.json()
        if not isinstance(data, dict):
            raise ValueError("search payload is not an object")

        hits = data.get("results")
        if not isinstance(hits, list):
            raise ValueError("search payload has no results list")

        sources = [_to_source(h, i) for i, h in enumerate(hits) if isinstance(h, dict)]
        ranked = rank_sources(sources)
        if not ranked:
            logger.info("Search returned no usable hits; using static sources")
            return fallback_result()

        logger.info("Search returned %d sources (%d raw hits)", len(ranked), len(hits))
        return SearchResult(
            results=ranked,
            related_topics=_related_topics(data.get("related_keywords")),
        )
