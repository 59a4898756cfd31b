"""
Tests for cheapest/fastest badge assignment.
"""
from shipquote.services.badge_service import BadgeService, assign_badges


def test_empty_list():
    assert assign_badges([]) == []


def test_single_quote_gets_both_badges(make_quote):
    quotes = assign_badges([make_quote()])
    assert quotes[0].is_cheapest is True
    assert quotes[0].is_fastest is True


def test_cheapest_and_fastest_on_different_quotes(make_quote):
    quotes = assign_badges([
        make_quote("a", price=85, min_days=3, max_days=4),
        make_quote("b", price=90, min_days=2, max_days=3),
        make_quote("c", price=120, min_days=5, max_days=5),
    ])

    assert [q.is_cheapest for q in quotes] == [True, False, False]
    assert [q.is_fastest for q in quotes] == [False, True, False]


def test_ties_mark_every_entry(make_quote):
    quotes = assign_badges([
        make_quote("a", price=50, min_days=2, max_days=3),
        make_quote("b", price=50, min_days=3, max_days=3),
        make_quote("c", price=70, min_days=2, max_days=4),
    ])

    assert [q.is_cheapest for q in quotes] == [True, True, False]
    # estimated days: 3, 3, 3
    assert all(q.is_fastest for q in quotes)


def test_fastest_uses_estimated_days(make_quote):
    quotes = assign_badges([
        make_quote("a", price=10, min_days=1, max_days=4),  # 2.5 -> 3
        make_quote("b", price=20, min_days=2, max_days=2),  # 2
    ])

    assert [q.is_fastest for q in quotes] == [False, True]


def test_idempotent_and_overwrites_stale_flags(make_quote):
    quotes = [
        make_quote("a", price=100, is_cheapest=True, is_fastest=True),
        make_quote("b", price=50, min_days=1, max_days=1),
    ]

    first = [(q.is_cheapest, q.is_fastest) for q in assign_badges(quotes)]
    second = [(q.is_cheapest, q.is_fastest) for q in assign_badges(quotes)]

    assert first == second == [(False, False), (True, True)]


def test_only_badges_change(make_quote):
    quotes = [make_quote("a", price=100), make_quote("b", price=80)]
    before = [(q.provider_id, q.price, q.min_days, q.max_days) for q in quotes]

    BadgeService().assign_badges(quotes)

    assert [(q.provider_id, q.price, q.min_days, q.max_days) for q in quotes] == before
