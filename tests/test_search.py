from unittest.mock import MagicMock

import requests

from app.search import FALLBACK_SOURCES, MAX_QUERY_CHARS, SourceSearchClient, classify_source, rank_sources
from app.schemas import SourceRecord


def _failing_session():
    session = MagicMock()
    session.get.side_effect = requests.ConnectionError("network down")
    return session


def test_classify_source_priority():
    assert classify_source("https://www.cdc.gov/flu/") == "government_health"
    assert classify_source("https://www.bmj.com/content/1") == "medical_journal"
    assert classify_source("https://www.mayoclinic.org/x") == "health_website"
    assert classify_source("https://healthy.wordpress.com/post") == "medical_blog"
    assert classify_source("https://example.com") == "general"
    assert classify_source("") == "general"


def test_unconfigured_returns_fallback_without_network(unconfigured_settings):
    session = MagicMock()
    client = SourceSearchClient(unconfigured_settings, session=session)

    result = client.search({"headache"}, "I have a headache")

    assert result.results == FALLBACK_SOURCES
    assert result.from_fallback
    session.get.assert_not_called()


def test_network_error_returns_fallback(settings, clock):
    client = SourceSearchClient(settings, session=_failing_session(), clock=clock)

    result = client.search({"fever"}, "fever for two days")

    assert len(result.results) == 5
    assert result.results == FALLBACK_SOURCES


def test_second_call_within_cooldown_skips_network(settings, clock):
    session = _failing_session()
    client = SourceSearchClient(settings, session=session, clock=clock)

    first = client.search({"cough"}, "cough")
    clock.advance(1.0)
    second = client.search({"cough"}, "cough again")

    assert first.results == FALLBACK_SOURCES
    assert second.results == FALLBACK_SOURCES
    assert session.get.call_count == 1


def test_call_allowed_after_cooldown(settings, clock, search_session):
    session = search_session({"results": []})
    client = SourceSearchClient(settings, session=session, clock=clock)

    client.search(set(), "rash")
    clock.advance(settings.search_cooldown_seconds)
    client.search(set(), "rash on arm")

    assert session.get.call_count == 2


def test_malformed_payload_returns_fallback(settings, clock, search_session):
    client = SourceSearchClient(settings, session=search_session(["not", "an", "object"]), clock=clock)
    assert client.search(set(), "nausea").results == FALLBACK_SOURCES


def test_results_sorted_deduplicated_and_capped(settings, clock, search_session):
    payload = {
        "results": [
            {"position": 1, "url": "https://healthy.wordpress.com/headache", "title": "Blog post", "snippet": "tips"},
            {"position": 2, "link": "https://www.cdc.gov/headache", "title": "CDC"},
            {"position": 3, "url": "https://www.cdc.gov/headache", "title": "CDC duplicate"},
            {"position": 4, "url": "https://www.bmj.com/headache", "title": "BMJ"},
            {"position": 5, "url": "https://example.com/a", "title": "Example A"},
            {"position": 6, "url": "https://example.com/b", "title": "Example B"},
            {"position": 7, "url": "https://www.webmd.com/headache", "title": "WebMD"},
        ],
        "related_keywords": ["migraine relief", {"keyword": "tension headache"}, "migraine relief", {"text": ""}],
    }
    client = SourceSearchClient(settings, session=search_session(payload), clock=clock)

    result = client.search({"headache"}, "I have a headache")

    assert [s.url for s in result.results] == [
        "https://www.cdc.gov/headache",
        "https://www.bmj.com/headache",
        "https://www.webmd.com/headache",
        "https://healthy.wordpress.com/headache",
        "https://example.com/a",
    ]
    assert result.results[0].title == "CDC"
    assert result.results[3].description == "tips"
    assert result.related_topics == ["migraine relief", "tension headache"]
    assert not result.from_fallback


def test_request_shape(settings, clock, search_session):
    session = search_session({"results": [{"url": "https://www.nhs.uk/x", "title": "NHS"}]})
    client = SourceSearchClient(settings, session=session, clock=clock)

    client.search({"fatigue"}, "tired " * 60)

    _, kwargs = session.get.call_args
    assert len(kwargs["params"]["query"]) <= MAX_QUERY_CHARS
    assert kwargs["params"]["related_keywords"] == "true"
    assert kwargs["headers"]["x-rapidapi-key"] == "test-search-key"
    assert kwargs["timeout"] == 8.0


def test_missing_fields_get_placeholders(settings, clock, search_session):
    client = SourceSearchClient(settings, session=search_session({"results": [{}]}), clock=clock)

    source = client.search(set(), "cough").results[0]

    assert source.url == "#"
    assert source.title == "No title"
    assert source.description == "No description available"
    assert source.position == 1


def test_rank_sources_keeps_first_duplicate():
    a = SourceRecord(position=1, url="https://x.org", title="first", description="", category="general")
    b = SourceRecord(position=2, url="https://x.org", title="second", description="", category="general")
    assert rank_sources([a, b]) == [a]
