from terminal_ai.api.services.query_extraction import (
    PHRASE_WEIGHTS,
    WeightedPhrase,
    combine_queries,
    extract_search_queries,
    extract_weighted_phrases,
)

# --- Empty extraction ---


def test_extract_no_dictionary_phrases_returns_empty():
    assert extract_search_queries("purple elephant sandwich") == ()


def test_extract_empty_text_returns_empty():
    assert extract_search_queries("") == ()
    assert extract_search_queries("   ") == ()


# --- Ranking ---


def test_extract_orders_by_weight_and_keeps_three():
    # === Arrange ===
    text = "прошу надати судову практику щодо спадщини"

    # === Act ===
    queries = extract_search_queries(text)

    # === Assert ===
    assert queries == ("спадщини", "надати судову практику", "прошу надати")


def test_extract_ties_keep_first_occurrence():
    queries = extract_search_queries("номера справ житло тцк суд закон")

    assert queries == ("номера справ", "житло", "тцк")


def test_extract_never_more_than_three_and_weights_descend():
    text = "власник житла не платить комунальні послуги виселення суд закон тцк"

    queries = extract_search_queries(text)
    weights = [PHRASE_WEIGHTS[q] for q in queries]

    assert len(queries) <= 3
    assert weights == sorted(weights, reverse=True)


# --- Windows and overlaps ---


def test_overlapping_windows_are_separate_candidates():
    # === Act ===
    phrases = extract_weighted_phrases("власник житла не платить")

    # === Assert ===
    assert phrases == [
        WeightedPhrase("власник житла", 10),
        WeightedPhrase("власник", 8),
        WeightedPhrase("не платить", 8),
        WeightedPhrase("платить", 5),
    ]
    assert extract_search_queries("власник житла не платить") == (
        "власник житла",
        "власник",
        "не платить",
    )


def test_extract_dedupes_repeated_phrases():
    assert extract_search_queries("суд суд суд") == ("суд",)


def test_extract_is_case_insensitive():
    assert extract_search_queries("СПАДЩИНА") == ("спадщина",)


def test_three_word_phrase_matches_exactly():
    queries = extract_search_queries("як зареєструвати місце проживання")

    assert queries[0] == "зареєструвати місце проживання"


# --- Combination ---


def test_combine_queries_joins_with_and():
    assert combine_queries(("спадщина", "суд")) == "спадщина AND суд"
    assert combine_queries(("суд",)) == "суд"
    assert combine_queries(()) == ""
