from app.symptoms import extract_symptoms


def test_no_pattern_gives_empty_set():
    assert extract_symptoms("The weather is nice today") == set()


def test_empty_input():
    assert extract_symptoms("") == set()


def test_clause_and_literal_tokens():
    found = extract_symptoms("I have a headache and I'm having chest pain")
    assert "i have a headache and i'm having chest pain" in found
    assert "headache" in found
    assert "chest pain" in found


def test_phrase_stops_at_sentence_end():
    found = extract_symptoms("There is pain in my lower back. It started yesterday!")
    assert "pain in my lower back" in found


def test_cannot_and_swollen_patterns():
    found = extract_symptoms("My ankle is swollen and tender. I can't walk properly")
    assert "can't walk properly" in found
    assert "swollen and tender" in found


def test_duplicates_collapse():
    found = extract_symptoms("Cough. Cough. COUGH!")
    assert found == {"cough"}


def test_plural_symptom_words_yield_token():
    found = extract_symptoms("Constant headaches and coughs at night")
    assert "headache" in found
    assert "cough" in found
