import random

import pytest

from moodspot.domain.models import Coordinate, Place
from moodspot.places import filter_sort


def _place(pid, *, rating=4.0, tier=2, distance=1.0):
    return Place(
        id=pid,
        name=f"Place {pid}",
        address="Address not available",
        rating=rating,
        review_count=100,
        price_tier=tier,
        distance_km=distance,
        is_open_now=True,
        location=Coordinate(lat=40.0, lng=-75.0),
        category="cafe",
    )


def _random_places(n=40, seed=3):
    rng = random.Random(seed)
    return [
        _place(
            str(i),
            rating=round(3.5 + rng.random() * 1.5, 1),
            tier=rng.randint(1, 4),
            distance=round(rng.random() * 5, 3),
        )
        for i in range(n)
    ]


def test_defaults_keep_everything_sorted_by_distance():
    places = [_place("a", distance=3), _place("b", distance=1), _place("c", distance=2)]
    out = filter_sort.apply(places)
    assert [p.id for p in out] == ["b", "c", "a"]


@pytest.mark.parametrize(
    "tiers,min_rating",
    [
        ({1, 2, 3, 4}, 0.0),
        ({1}, 0.0),
        ({2, 3}, 4.0),
        ({4}, 4.5),
        (set(), 0.0),
        ({1, 2, 3, 4}, 5.0),
    ],
)
def test_filter_is_sound_and_complete(tiers, min_rating):
    places = _random_places()
    out = filter_sort.apply(places, price_tiers=tiers, min_rating=min_rating, sort_key="none")

    assert all(p.price_tier in tiers and p.rating >= min_rating for p in out)
    expected = [p for p in places if p.price_tier in tiers and p.rating >= min_rating]
    assert out == expected


def test_min_rating_is_inclusive():
    out = filter_sort.apply([_place("a", rating=4.0), _place("b", rating=3.9)], min_rating=4.0)
    assert [p.id for p in out] == ["a"]


def test_rating_sort_is_descending_and_stable():
    places = [
        _place("a", rating=4.0),
        _place("b", rating=4.5),
        _place("c", rating=4.0),
        _place("d", rating=4.5),
        _place("e", rating=3.8),
    ]
    out = filter_sort.apply(places, sort_key="rating")
    assert [p.id for p in out] == ["b", "d", "a", "c", "e"]


def test_rating_sort_is_non_increasing_on_random_input():
    out = filter_sort.apply(_random_places(), sort_key="rating")
    for a, b in zip(out, out[1:]):
        assert a.rating >= b.rating
        if a.rating == b.rating:
            assert int(a.id) < int(b.id)


def test_price_sorts_are_stable_both_ways():
    places = [_place("a", tier=2), _place("b", tier=1), _place("c", tier=2), _place("d", tier=4)]
    assert [p.id for p in filter_sort.apply(places, sort_key="price_low")] == ["b", "a", "c", "d"]
    assert [p.id for p in filter_sort.apply(places, sort_key="price_high")] == ["d", "a", "c", "b"]


@pytest.mark.parametrize("sort_key", ["alphabetical", "", None])
def test_unknown_sort_key_keeps_order(sort_key):
    places = [_place("a", distance=3), _place("b", distance=1), _place("c", distance=2)]
    assert [p.id for p in filter_sort.apply(places, sort_key=sort_key)] == ["a", "b", "c"]


def test_apply_does_not_mutate_input():
    places = [_place("a", distance=3), _place("b", distance=1)]
    filter_sort.apply(places, sort_key="distance")
    assert [p.id for p in places] == ["a", "b"]
