"""Tests for progression state persistence."""

from __future__ import annotations

import json
from datetime import datetime, timezone

from gitbuddy import config
from gitbuddy.state import ProgressionState, StateStore


# ─── Load / Save ──────────────────────────────────────────────────────


class TestLoadSave:
    def test_missing_file(self):
        store = StateStore()
        assert store.load() is None
        assert store.load_or_default().vitality == 50

    def test_default_path_follows_config(self, isolated_home):
        assert StateStore().path == isolated_home / "state.json"
        assert config.STATE_FILE == isolated_home / "state.json"

    def test_roundtrip(self, tmp_path):
        store = StateStore(tmp_path / "state.json")
        visit = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)
        state = ProgressionState(
            name="Rex", experience=320, vitality=77, last_visit=visit,
            total_scans=4, longest_streak=6, achievements=["streak_3"],
        )
        assert store.save(state)
        loaded = store.load()
        assert loaded.name == "Rex"
        assert loaded.level == 3
        assert loaded.last_visit == visit
        assert loaded.achievements == ["streak_3"]

    def test_atomic_write_leaves_no_temp_files(self, tmp_path):
        store = StateStore(tmp_path / "state.json")
        store.save(ProgressionState(name="Rex"))
        assert [p.name for p in tmp_path.iterdir()] == ["state.json"]

    def test_save_failure_returns_false(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a dir")
        store = StateStore(blocker / "state.json")
        assert store.save(ProgressionState()) is False


class TestDecoding:
    def write(self, tmp_path, payload) -> StateStore:
        path = tmp_path / "state.json"
        path.write_text(payload if isinstance(payload, str) else json.dumps(payload))
        return StateStore(path)

    def test_stored_level_is_ignored(self, tmp_path):
        store = self.write(tmp_path, {"name": "Rex", "experience": 10, "level": 5})
        assert store.load().level == 1

    def test_out_of_range_values_clamped(self, tmp_path):
        store = self.write(tmp_path, {"experience": -40, "vitality": 400, "total_scans": "many"})
        state = store.load()
        assert state.experience == 0
        assert state.vitality == 100
        assert state.total_scans == 0

    def test_zulu_timestamps(self, tmp_path):
        store = self.write(tmp_path, {"last_visit": "2026-03-01T09:30:00Z"})
        assert store.load().last_visit == datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)

    def test_naive_timestamps_read_as_utc(self, tmp_path):
        store = self.write(tmp_path, {"last_visit": "2026-03-01T09:30:00"})
        assert store.load().last_visit.tzinfo is not None

    def test_non_finite_numbers_fall_back_to_defaults(self, tmp_path):
        store = self.write(
            tmp_path,
            '{"name": "Rex", "experience": Infinity, "vitality": NaN, "total_scans": -Infinity}',
        )
        state = store.load_or_default()
        assert state.name == "Rex"
        assert state.experience == 0
        assert state.vitality == 50
        assert state.total_scans == 0

    def test_non_finite_numbers_do_not_break_updates(self, tmp_path):
        store = self.write(tmp_path, '{"experience": Infinity}')
        assert store.award_xp(5).state.experience == 5

    def test_corrupted_file(self, tmp_path):
        store = self.write(tmp_path, "{not json")
        assert store.load() is None
        assert store.load_or_default().experience == 0

    def test_non_object_json(self, tmp_path):
        assert self.write(tmp_path, "[1, 2]").load() is None


# ─── Mutations ────────────────────────────────────────────────────────


class TestMutations:
    def test_award_xp(self):
        store = StateStore()
        store.create("Rex")
        award = store.award_xp(10)
        assert award.gained == 10
        assert award.state.experience == 10
        assert not award.leveled_up

    def test_award_crossing_several_levels_is_one_event(self):
        store = StateStore()
        store.create("Rex")
        award = store.award_xp(650)
        assert award.leveled_up
        assert award.state.level == 4

    def test_negative_award_ignored(self):
        store = StateStore()
        store.create("Rex")
        store.award_xp(30)
        award = store.award_xp(-100)
        assert award.gained == 0
        assert award.state.experience == 30

    def test_update_merges_latest_file(self, tmp_path):
        path = tmp_path / "state.json"
        first, second = StateStore(path), StateStore(path)
        first.create("Rex")
        first.patch(total_feeds=3)
        second.award_xp(20)
        state = first.load()
        assert state.total_feeds == 3
        assert state.experience == 20

    def test_create_clamps_vitality(self):
        assert StateStore().create("Rex", vitality=140).vitality == 100

    def test_reset(self):
        store = StateStore()
        store.create("Rex")
        assert store.reset()
        assert not store.exists()
        assert store.reset()
