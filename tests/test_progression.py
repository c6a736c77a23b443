"""Tests for vitality, mood, levels and absence decay."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from gitbuddy.progression import (
    LEVEL_THRESHOLDS,
    Mood,
    apply_decay,
    decay_points,
    level_for,
    level_progress,
    level_title,
    leveled_up,
    mood_for,
    vitality_from_score,
    xp_for_next_level,
    xp_reward,
)

NOW = datetime(2026, 3, 18, 12, 0, tzinfo=timezone.utc)


# ─── Mood ─────────────────────────────────────────────────────────────


class TestMood:
    @pytest.mark.parametrize(
        "vitality,expected",
        [
            (100, Mood.EXCITED),
            (90, Mood.EXCITED),
            (89, Mood.HAPPY),
            (70, Mood.HAPPY),
            (69, Mood.NEUTRAL),
            (50, Mood.NEUTRAL),
            (49, Mood.SAD),
            (25, Mood.SAD),
            (24, Mood.SICK),
            (0, Mood.SICK),
        ],
    )
    def test_vitality_bands(self, vitality, expected):
        assert mood_for(vitality, idle_seconds=0) == expected

    def test_idle_overrides_health(self):
        assert mood_for(100, idle_seconds=61) == Mood.SLEEPING
        assert mood_for(5, idle_seconds=61) == Mood.SLEEPING

    def test_idle_threshold_is_inclusive(self):
        assert mood_for(80, idle_seconds=60) == Mood.SLEEPING
        assert mood_for(80, idle_seconds=59.9) == Mood.HAPPY

    def test_custom_threshold(self):
        assert mood_for(80, idle_seconds=10, idle_threshold=5) == Mood.SLEEPING

    def test_mood_values_are_strings(self):
        assert Mood.SLEEPING == "sleeping"


class TestVitality:
    def test_clamped(self):
        assert vitality_from_score(150) == 100
        assert vitality_from_score(-5) == 0
        assert vitality_from_score(73) == 73


# ─── Levels ───────────────────────────────────────────────────────────


class TestLevels:
    @pytest.mark.parametrize(
        "xp,level",
        [(0, 1), (99, 1), (100, 2), (299, 2), (300, 3), (600, 4), (999, 4), (1000, 5), (5000, 5)],
    )
    def test_thresholds(self, xp, level):
        assert level_for(xp) == level

    def test_monotonic(self):
        levels = [level_for(xp) for xp in range(0, 1200, 7)]
        assert levels == sorted(levels)
        assert min(levels) == 1
        assert max(levels) == 5

    def test_leveled_up_edge(self):
        assert leveled_up(99, 100)
        assert not leveled_up(100, 150)
        assert not leveled_up(50, 50)

    def test_leveled_up_multiple_plateaus_is_one_event(self):
        assert leveled_up(0, 1000) is True

    def test_titles(self):
        assert level_title(1) == "Puppy"
        assert level_title(5) == "Legendary Doge"
        assert level_title(9) == "Legendary Doge"

    def test_xp_for_next_level(self):
        assert xp_for_next_level(1) == 100
        assert xp_for_next_level(4) == 1000
        assert xp_for_next_level(5) is None

    def test_level_progress(self):
        assert level_progress(150) == (50, 200, 25.0)
        current, span, pct = level_progress(1200)
        assert current == 200
        assert pct == 100.0

    def test_thresholds_strictly_increasing(self):
        assert list(LEVEL_THRESHOLDS) == sorted(set(LEVEL_THRESHOLDS))


# ─── Rewards ──────────────────────────────────────────────────────────


class TestRewards:
    def test_known_actions(self):
        assert xp_reward("scan") == 2
        assert xp_reward("commit") == 10

    def test_multiplier(self):
        assert xp_reward("feed", 3) == 15

    def test_unknown_action_is_worthless(self):
        assert xp_reward("nap") == 0


# ─── Decay ────────────────────────────────────────────────────────────


class TestDecay:
    def test_grace_period(self):
        assert decay_points(NOW - timedelta(hours=23), NOW) == 0
        assert apply_decay(60, NOW - timedelta(hours=23), NOW) == 60

    def test_two_days_away(self):
        assert decay_points(NOW - timedelta(hours=48), NOW) == 5
        assert apply_decay(50, NOW - timedelta(hours=48), NOW) == 45

    def test_capped(self):
        assert decay_points(NOW - timedelta(days=30), NOW) == 30
        assert apply_decay(80, NOW - timedelta(days=30), NOW) == 50

    def test_floor(self):
        assert apply_decay(12, NOW - timedelta(days=30), NOW) == 10

    def test_below_floor_is_not_raised_without_decay(self):
        assert apply_decay(5, NOW - timedelta(hours=2), NOW) == 5

    def test_below_floor_is_raised_by_decay(self):
        assert apply_decay(5, NOW - timedelta(days=3), NOW) == 10

    def test_visit_in_future_is_no_decay(self):
        assert decay_points(NOW + timedelta(hours=5), NOW) == 0
