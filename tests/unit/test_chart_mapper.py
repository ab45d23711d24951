"""Tests for chart coordinate mapping."""
import pytest

from litlens.analysis.models import DialogueTurn, ReadabilityPoint
from litlens.charts import (
    Viewport,
    map_power_balance,
    map_readability,
    map_series,
    power_balance_x_labels,
    readability_x_labels,
)
from litlens.charts.mapper import readability_domain


def turns(*scores, names=None):
    names = names or ["Alice", "Bob"]
    return [
        DialogueTurn(speaker_name=names[i % len(names)], power_score=score)
        for i, score in enumerate(scores)
    ]


class TestMapSeries:
    """Index to x, value to inverted y, plus ticks."""

    def test_power_balance_example(self):
        geometry = map_power_balance(turns(2, -1, 3), Viewport(600, 300, 50))

        assert [p.x for p in geometry.points] == [50, 300, 550]
        assert [p.y for p in geometry.points] == pytest.approx([110, 170, 90])

        xs = [p.x for p in geometry.points]
        assert xs == sorted(xs)
        # Higher score sits higher on screen
        by_score = sorted(geometry.points, key=lambda p: p.value)
        assert [p.y for p in by_score] == sorted([p.y for p in by_score], reverse=True)

        assert geometry.draws_line
        assert geometry.svg_path() == "M 50,110 L 300,170 L 550,90"

    def test_single_point(self):
        geometry = map_power_balance(turns(4))

        assert len(geometry.points) == 1
        assert geometry.points[0].x == 50
        assert not geometry.draws_line
        assert geometry.svg_path() == ""

    def test_empty_series(self):
        geometry = map_series([], 0, 10)

        assert geometry.points == ()
        assert geometry.nearest_index(100) is None
        assert len(geometry.ticks) == 11

    def test_values_are_clamped(self):
        geometry = map_series([9, -12], -5, 5)

        assert [p.value for p in geometry.points] == [5, -5]
        assert [p.y for p in geometry.points] == [50, 250]

    def test_datum_is_kept(self):
        series = turns(1, 2)
        geometry = map_power_balance(series)

        assert [p.datum for p in geometry.points] == series
        assert [p.index for p in geometry.points] == [0, 1]

    def test_power_ticks(self):
        geometry = map_power_balance(turns(0))

        assert [t.label for t in geometry.ticks] == [str(v) for v in range(-5, 6)]
        assert [t.value for t in geometry.ticks if t.is_baseline] == [0]
        assert geometry.baseline_value == 0
        assert geometry.baseline_y == 150
        assert geometry.ticks[0].position == 250
        assert geometry.ticks[-1].position == 50

    def test_baseline_outside_domain_uses_midpoint(self):
        geometry = map_series([3], 2, 6, tick_step=2)

        assert geometry.baseline_value == 4
        assert [t.is_baseline for t in geometry.ticks] == [False, True, False]

    def test_invalid_domain(self):
        with pytest.raises(ValueError):
            map_series([1], 5, 5)
        with pytest.raises(ValueError):
            map_series([1], 5, -5)

    def test_deterministic(self):
        series = turns(1, -3, 5)
        assert map_power_balance(series) == map_power_balance(series)

    def test_custom_viewport(self):
        geometry = map_series([0, 10], 0, 10, Viewport(200, 120, 10))

        assert [(p.x, p.y) for p in geometry.points] == [(10, 110), (190, 10)]

    def test_viewport_without_room(self):
        with pytest.raises(ValueError):
            Viewport(100, 300, 50)


class TestReadability:
    """Readability domain grows to fit outliers; five tick intervals."""

    def test_default_domain(self):
        points = [ReadabilityPoint(paragraph_index=0, score=55.0)]
        geometry = map_readability(points)

        assert geometry.domain == (0, 100)
        assert [t.label for t in geometry.ticks] == ["0", "20", "40", "60", "80", "100"]
        assert geometry.ticks[0].is_baseline

    def test_domain_widens(self):
        points = [
            ReadabilityPoint(paragraph_index=0, score=-10.0),
            ReadabilityPoint(paragraph_index=1, score=120.0),
        ]

        assert readability_domain(points) == (-10.0, 120.0)
        geometry = map_readability(points)
        assert geometry.points[0].y == 250
        assert geometry.points[1].y == 50


class TestXLabels:
    """Category labels along the x axis."""

    def test_speaker_labels(self):
        geometry = map_power_balance(turns(1, 2, names=["Alexandrina", "Bo"]))

        labels = power_balance_x_labels(geometry)

        assert [t.label for t in labels] == ["Alexandrin (1)", "Bo (2)"]
        assert [t.position for t in labels] == [50, 550]

    def test_long_exchange_drops_odd_ordinals(self):
        geometry = map_power_balance(turns(*([0] * 12)))

        labels = [t.label for t in power_balance_x_labels(geometry)]

        assert labels[0] == "Alice (1)"
        assert labels[1] == "Bob"
        assert labels[2] == "Alice (3)"
        assert labels[11] == "Bob"

    def test_readability_labels_thinned(self):
        points = [ReadabilityPoint(paragraph_index=i, score=50.0) for i in range(25)]
        labels = readability_x_labels(map_readability(points))

        assert [t.label for t in labels] == [str(i) for i in range(1, 26, 2)]

    def test_readability_labels_short(self):
        points = [ReadabilityPoint(paragraph_index=i, score=50.0) for i in range(4)]

        assert [t.label for t in readability_x_labels(map_readability(points))] == ["1", "2", "3", "4"]
        assert readability_x_labels(map_readability(points[:1])) == ()


class TestNearestIndex:
    """Pointer x snaps to the nearest plotted point."""

    @pytest.mark.parametrize("pixel_x,expected", [
        (50, 0),
        (170, 0),
        (180, 1),
        (300, 1),
        (550, 2),
        (-100, None),
        (700, None),
    ])
    def test_snapping(self, pixel_x, expected):
        geometry = map_power_balance(turns(2, -1, 3))
        assert geometry.nearest_index(pixel_x) == expected

    @pytest.mark.parametrize("pixel_x,expected", [
        (50, 0),
        (300, 0),
        (550, 0),
        (49, None),
        (551, None),
        (-1000, None),
        (5000, None),
    ])
    def test_single_point_only_within_plot(self, pixel_x, expected):
        geometry = map_power_balance(turns(1))
        assert geometry.nearest_index(pixel_x) == expected
