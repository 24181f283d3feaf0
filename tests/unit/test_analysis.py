from doc_agent.documents.analysis import (
    AnalyzeType,
    analyze_document,
    extract_entities,
    normalized_words,
    rank_topics,
    summarize,
)


def test_topics_rank_by_frequency() -> None:
    result = analyze_document("gamma delta delta delta gamma", AnalyzeType.TOPICS_ONLY)

    assert result["topics"] == ["delta", "gamma"]
    assert set(result) == {"word_count", "topics"}


def test_topic_ties_keep_first_seen_order() -> None:
    result = analyze_document("zeta alpha zeta alpha beta", "topics_only")

    assert result["topics"] == ["zeta", "alpha", "beta"]


def test_topics_skip_stopwords_short_words_and_cap_at_ten() -> None:
    words = [f"word{chr(ord('a') + i)}" for i in range(12)]
    content = " ".join(["would", "could", "cat", "dog"] * 5 + words)

    topics = rank_topics(normalized_words(content))

    assert topics == words[:10]


def test_summary_uses_first_middle_and_last_fragments() -> None:
    content = (
        "First sentence here is long. Second sentence is also long! "
        "Third sentence is long too? Fourth one is long enough."
    )

    assert summarize(content) == (
        "First sentence here is long. Third sentence is long too. Fourth one is long enough."
    )


def test_summary_ignores_short_fragments() -> None:
    content = "Hi. Ok. This fragment is long enough."

    assert summarize(content) == (
        "This fragment is long enough. This fragment is long enough. This fragment is long enough."
    )
    assert summarize("Tiny. Bits.") == "."


def test_entities_collect_names_emails_phones_and_urls() -> None:
    content = (
        "Alice emailed bob@example.com from https://example.com/page "
        "and called 14155552671. Alice replied."
    )

    assert extract_entities(content) == [
        "Alice",
        "bob@example.com",
        "14155552671",
        "https://example.com/page",
    ]


def test_capitalized_entities_are_capped_at_twenty() -> None:
    names = [f"Name{chr(ord('a') + i)}" for i in range(25)]
    content = " ".join(name.capitalize() for name in names)

    entities = extract_entities(content)

    assert len(entities) == 20
    assert entities[0] == "Namea"


def test_full_analysis_counts_words_after_stripping_punctuation() -> None:
    result = analyze_document("Hello, world! It's fine.")

    assert result["word_count"] == 4
    assert set(result) == {"word_count", "summary", "entities", "topics"}
    assert result["entities"] == ["Hello", "It"]


def test_summary_only_mode() -> None:
    result = analyze_document("A reasonably long sentence appears here.", AnalyzeType.SUMMARY_ONLY)

    assert set(result) == {"word_count", "summary"}


def test_capitalized_words_use_ascii_word_boundaries() -> None:
    assert extract_entities("éAbc") == ["Abc"]
