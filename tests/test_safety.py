import pytest

from app.safety import classify_urgency, redact_pii_basic, strip_dosing, urgency_rank


@pytest.mark.parametrize("text", [
    "",
    "My knee feels a bit stiff after running",
    "Just wondering about vitamins",
])
def test_no_keyword_is_low(text):
    assert classify_urgency(text) == "low"


@pytest.mark.parametrize("text", [
    "Chest pain and a mild fever",
    "severe headache, nausea and bleeding",
    "I think it's a heart attack, high fever too",
])
def test_emergency_wins_over_lower_tiers(text):
    assert classify_urgency(text) == "emergency"


def test_high_beats_moderate():
    assert classify_urgency("High fever and nausea since Monday") == "high"


def test_moderate():
    assert classify_urgency("I have a sore throat") == "moderate"


def test_urgency_rank_order():
    assert urgency_rank("low") < urgency_rank("moderate") < urgency_rank("high") < urgency_rank("emergency")
    assert urgency_rank("urgent") == -1


def test_redact_pii_basic():
    text = "Email me at jane.doe@example.com or call +61 400 123 456"
    redacted = redact_pii_basic(text)
    assert "jane.doe@example.com" not in redacted
    assert "[REDACTED_EMAIL]" in redacted
    assert "[REDACTED_PHONE]" in redacted


def test_strip_dosing_drops_dose_lines():
    text = "Rest and fluids\nTake 400 mg ibuprofen every 6 hours\nUse a humidifier"
    assert strip_dosing(text) == "Rest and fluids\nUse a humidifier"
