"""Tests for candidate generation strategies."""
from shelfwise.schemas.library import BookStatus
from shelfwise.schemas.recommendation import RecommendationStrategy
from shelfwise.services.candidate_generator import (
    CandidateGenerator,
    authors_to_search,
    title_keywords,
)
from shelfwise.services.preference_analyzer import analyze_preferences
from factories import FakeSearchProvider, make_library_book, make_search_result


def test_dune_example_excludes_book_already_in_library():
    prefs = analyze_preferences([make_library_book("Dune", "Frank Herbert", rating=5)])
    provider = FakeSearchProvider({
        "Frank Herbert": [
            make_search_result("messiah", "Dune Messiah", ["Frank Herbert"]),
            make_search_result("dune", "Dune", ["Frank Herbert"], description="A science fiction novel"),
        ],
    })

    candidates = CandidateGenerator(provider).generate(prefs, limit=20)

    assert [c.book.id for c in candidates] == ["messiah"]
    assert candidates[0].strategy == RecommendationStrategy.AUTHOR
    assert candidates[0].reason == "Another book by Frank Herbert"


def test_library_match_ignores_case_and_extra_whitespace():
    prefs = analyze_preferences([make_library_book("The  Left Hand of Darkness", "Ursula K. Le Guin", rating=5)])
    provider = FakeSearchProvider({
        "Ursula K. Le Guin": [
            make_search_result("lh", "the left hand of  darkness ", ["Ursula K. Le Guin"]),
            make_search_result("ed", "A Wizard of Earthsea", ["Ursula K. Le Guin"]),
        ],
    })

    candidates = CandidateGenerator(provider).generate(prefs)

    assert [c.book.id for c in candidates] == ["ed"]


def test_author_strategy_keeps_only_fuzzy_author_matches():
    prefs = analyze_preferences([make_library_book("Emma", "Austen", rating=4)])
    provider = FakeSearchProvider({
        "Austen": [
            make_search_result("pp", "Pride and Prejudice", ["Jane Austen"]),
            make_search_result("other", "Travel Guide to Austin", ["Travel Writers"]),
            make_search_result("ss", "Sense and Sensibility", ["JANE AUSTEN", "Editor"]),
        ],
    })

    candidates = CandidateGenerator(provider).generate(prefs)

    assert [c.book.id for c in candidates] == ["pp", "ss"]


def test_author_query_requests_ten_results_and_caps_authors_at_five():
    library = [make_library_book(f"Book Number {i}", f"Author {i}", rating=5) for i in range(7)]
    prefs = analyze_preferences(library)
    provider = FakeSearchProvider()

    CandidateGenerator(provider).generate(prefs)

    author_calls = [call for call in provider.calls if call[0].startswith("Author ")]
    assert author_calls == [(f"Author {i}", 10) for i in range(5)]


def test_authors_to_search_order_highly_rated_then_recent_then_favorites():
    library = [
        make_library_book("Rated High", "Rated Author", rating=5, days_ago=10),
        make_library_book("Just Added", "Recent Author", status=BookStatus.WANT_TO_READ, days_ago=0),
        make_library_book("Read Twice One", "Frequent Author", rating=2, days_ago=30),
        make_library_book("Read Twice Two", "Frequent Author", rating=2, days_ago=31),
    ]
    prefs = analyze_preferences(library)

    assert authors_to_search(prefs) == ["Rated Author", "Recent Author", "Frequent Author"]


def test_title_keywords_use_first_two_long_words():
    assert title_keywords("The Name of the Wind") == ["Name", "Wind"]
    assert title_keywords("It") == []
    assert title_keywords("A Tale of Two Cities Revisited") == ["Tale", "Cities"]


def test_similar_title_strategy_queries_keywords_plus_author_and_skips_seed():
    prefs = analyze_preferences([make_library_book("The Name of the Wind", "Patrick Rothfuss", rating=5)])
    provider = FakeSearchProvider({
        "Name Wind Patrick Rothfuss": [
            make_search_result("seed", "THE NAME OF THE WIND", ["Someone Else"]),
            make_search_result("wmf", "The Wise Man's Fear", ["Patrick Rothfuss"]),
        ],
    })

    candidates = CandidateGenerator(provider).generate(prefs)

    assert ("Name Wind Patrick Rothfuss", 5) in provider.calls
    similar = [c for c in candidates if c.strategy == RecommendationStrategy.SIMILAR_BOOK]
    assert [c.book.id for c in similar] == ["wmf"]
    assert similar[0].reason == "Similar to 'The Name of the Wind'"


def test_similar_author_strategy_uses_unsearched_top_rated_authors():
    library = [make_library_book(f"Good Book {name}", f"Author {name}", rating=4) for name in "ABCDE"]
    library.append(make_library_book("Best Book Ever", "Author F", rating=5))
    prefs = analyze_preferences(library)
    provider = FakeSearchProvider({
        "Author F": [make_search_result("f2", "Another Great Story", ["Author F"])],
    })

    candidates = CandidateGenerator(provider).generate(prefs)

    assert ("Author F", 5) in provider.calls
    # Author A is second by rating but was already searched by the author strategy
    assert provider.queries.count("Author A") == 1
    assert [(c.book.id, c.strategy, c.reason) for c in candidates] == [
        ("f2", RecommendationStrategy.SIMILAR_AUTHOR, "Author similar to ones you like"),
    ]


def test_similar_author_strategy_needs_two_favorite_authors():
    library = [make_library_book(f"Book Part {i}", "Only Author", rating=5) for i in range(3)]
    prefs = analyze_preferences(library)
    provider = FakeSearchProvider()

    CandidateGenerator(provider).generate(prefs)

    assert provider.queries.count("Only Author") == 1


def test_failed_query_does_not_abort_other_strategies():
    library = [
        make_library_book("Kindred Spirits", "Octavia Butler", rating=5),
        make_library_book("Beloved Classic", "Toni Morrison", rating=5),
    ]
    prefs = analyze_preferences(library)
    provider = FakeSearchProvider(
        {
            "Toni Morrison": [make_search_result("sula", "Sula Stories Collected", ["Toni Morrison"])],
            "Kindred Spirits Octavia Butler": [make_search_result("dawn", "Dawn of Xenogenesis", ["Octavia Butler"])],
        },
        failing=["Octavia Butler"],
    )

    candidates = CandidateGenerator(provider).generate(prefs)

    assert [c.book.id for c in candidates] == ["sula", "dawn"]


def test_non_books_are_filtered_out():
    prefs = analyze_preferences([make_library_book("Walden", "Thoreau", rating=5)])
    provider = FakeSearchProvider({
        "Thoreau": [
            make_search_result("thesis", "A Thesis on Thoreau", ["Thoreau Scholar"]),
            make_search_result("cd", "Civil Disobedience", ["Henry David Thoreau"]),
        ],
    })

    candidates = CandidateGenerator(provider).generate(prefs)

    assert [c.book.id for c in candidates] == ["cd"]


def test_duplicates_across_strategies_are_kept_for_orchestration():
    prefs = analyze_preferences([make_library_book("Foundation Trilogy", "Isaac Asimov", rating=5)])
    robots = make_search_result("robots", "I, Robot Stories", ["Isaac Asimov"])
    provider = FakeSearchProvider({
        "Isaac Asimov": [robots],
        "Foundation Trilogy Isaac Asimov": [robots],
    })

    candidates = CandidateGenerator(provider).generate(prefs)

    assert [(c.book.id, c.strategy) for c in candidates] == [
        ("robots", RecommendationStrategy.AUTHOR),
        ("robots", RecommendationStrategy.SIMILAR_BOOK),
    ]


def test_empty_library_uses_popular_fallback():
    provider = FakeSearchProvider({
        "best seller": [
            make_search_result("p1", "The Midnight Library", ["Matt Haig"]),
            make_search_result("p2", "Where the Crawdads Sing", ["Delia Owens"]),
        ],
        "classic literature": [
            make_search_result("p2", "Where the Crawdads Sing", ["Delia Owens"]),
            make_search_result("p3", "Pride and Prejudice", ["Jane Austen"]),
        ],
    })

    candidates = CandidateGenerator(provider).generate(analyze_preferences([]), limit=10)

    assert [c.book.id for c in candidates] == ["p1", "p2", "p3"]
    assert all(c.strategy == RecommendationStrategy.POPULAR for c in candidates)
    assert all(c.reason == "Popular and well-rated book" for c in candidates)
    assert provider.queries == ["best seller", "classic literature", "popular fiction", "award winning"]
    assert provider.calls[0][1] == 10


def test_popular_fallback_stops_once_enough_books_found():
    provider = FakeSearchProvider({
        "best seller": [make_search_result(f"b{i}", f"Bestseller Title {i}", ["Author"]) for i in range(5)],
    })

    candidates = CandidateGenerator(provider).popular_candidates(limit=4)

    assert len(candidates) == 5
    assert provider.queries == ["best seller"]


def test_crashing_strategy_does_not_abort_the_others(monkeypatch):
    prefs = analyze_preferences([make_library_book("Kindred Spirits", "Octavia Butler", rating=5)])
    provider = FakeSearchProvider({
        "Octavia Butler": [make_search_result("dawn", "Dawn of Xenogenesis", ["Octavia Butler"])],
    })
    generator = CandidateGenerator(provider)

    def boom(*args, **kwargs):
        raise ValueError("unexpected payload")

    monkeypatch.setattr(generator, "by_similar_title", boom)

    candidates = generator.generate(prefs)

    assert [c.book.id for c in candidates] == ["dawn"]


def test_similar_author_skip_uses_exact_author_names():
    # Five highly rated authors fill the author strategy; the lowercase variant
    # is a different author to the analyzer and is not searched there.
    library = [
        make_library_book(f"Good Book {name}", name, rating=4)
        for name in ["Frank Herbert", "Author B", "Author C", "Author D", "Author E"]
    ]
    library.append(make_library_book("Best Book Ever", "frank herbert", rating=5))
    prefs = analyze_preferences(library)
    provider = FakeSearchProvider()

    CandidateGenerator(provider).generate(prefs)

    assert authors_to_search(prefs) == ["Frank Herbert", "Author B", "Author C", "Author D", "Author E"]
    assert ("Frank Herbert", 10) in provider.calls
    assert ("frank herbert", 5) in provider.calls
    assert provider.queries.count("Frank Herbert") == 1
