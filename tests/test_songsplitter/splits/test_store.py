# this_file: tests/test_songsplitter/splits/test_store.py
"""Unit tests for SplitStore."""

from __future__ import annotations

import random
from pathlib import Path

import pytest


def make_store(*intervals: tuple[float, float], total: float = 120.0):
    from songsplitter.splits.models import Split, default_name
    from songsplitter.splits.store import SplitStore

    splits = [Split(default_name(i + 1), start, end) for i, (start, end) in enumerate(intervals)]
    return SplitStore(total, splits)


def assert_valid(store) -> None:
    splits = store.all()
    for split in splits:
        assert 0 <= split.start_time < split.end_time <= store.total_duration
    for a, b in zip(splits, splits[1:]):
        assert a.end_time <= b.start_time
    assert len({s.id for s in splits}) == len(splits)


class TestSplitStoreReplace:
    """Tests for construction and replace_all."""

    def test_replace_all_when_valid_then_contents_replaced(self) -> None:
        from songsplitter.splits.models import Split

        store = make_store((0, 60))
        new = [Split("X", 10, 20), Split("Y", 30, 40)]

        store.replace_all(new)

        assert [s.name for s in store] == ["X", "Y"]

    def test_replace_all_when_overlapping_then_invariant_violation(self) -> None:
        from songsplitter.exceptions import InvariantViolation
        from songsplitter.splits.models import Split

        store = make_store((0, 60))

        with pytest.raises(InvariantViolation):
            store.replace_all([Split("X", 0, 30), Split("Y", 20, 40)])
        assert [(s.start_time, s.end_time) for s in store] == [(0, 60)]

    def test_replace_all_when_unsorted_then_invariant_violation(self) -> None:
        from songsplitter.exceptions import InvariantViolation
        from songsplitter.splits.models import Split

        store = make_store()

        with pytest.raises(InvariantViolation):
            store.replace_all([Split("Y", 30, 40), Split("X", 0, 10)])

    def test_replace_all_when_duplicate_ids_then_invariant_violation(self) -> None:
        from songsplitter.exceptions import InvariantViolation
        from songsplitter.splits.models import Split

        store = make_store()

        with pytest.raises(InvariantViolation, match="Duplicate"):
            store.replace_all([Split("X", 0, 10, id="a"), Split("Y", 20, 30, id="a")])

    def test_replace_all_when_out_of_bounds_then_invariant_violation(self) -> None:
        from songsplitter.exceptions import InvariantViolation
        from songsplitter.splits.models import Split

        store = make_store(total=100.0)

        with pytest.raises(InvariantViolation):
            store.replace_all([Split("X", 50, 101)])


class TestSplitStoreAdd:
    """Tests for SplitStore.add."""

    def test_add_when_overlapping_two_splits_then_rejected_and_unchanged(self) -> None:
        from songsplitter.exceptions import RejectedEdit

        store = make_store((0, 60), (60, 120))
        before = store.all()

        with pytest.raises(RejectedEdit, match="Song 1, Song 2"):
            store.add(50, 70)

        assert store.all() == before

    @pytest.mark.parametrize(("start", "end"), [(-1, 10), (110, 121), (30, 30), (40, 20)])
    def test_add_when_out_of_bounds_or_empty_then_rejected(self, start: float, end: float) -> None:
        from songsplitter.exceptions import RejectedEdit

        store = make_store()

        with pytest.raises(RejectedEdit) as excinfo:
            store.add(start, end)

        assert excinfo.value.reason
        assert len(store) == 0

    def test_add_when_gap_then_inserted_in_order(self) -> None:
        store = make_store((0, 30), (60, 90))

        split = store.add(30, 60)

        assert [s.id for s in store].index(split.id) == 1
        assert_valid(store)

    def test_add_when_no_name_then_default_from_count(self) -> None:
        store = make_store((0, 30), (60, 90))

        assert store.add(95, 100).name == "Song 3"
        assert store.add(100, 110, name="Encore").name == "Encore"

    def test_add_when_touching_neighbours_then_accepted(self) -> None:
        store = make_store((0, 30), (40, 60))

        store.add(30, 40)

        assert len(store) == 3


class TestSplitStoreEdit:
    """Tests for remove and rename."""

    def test_remove_when_present_then_others_untouched(self) -> None:
        store = make_store((0, 30), (40, 60), (70, 90))
        ids = [s.id for s in store]

        removed = store.remove(ids[1])

        assert removed.id == ids[1]
        assert [s.id for s in store] == [ids[0], ids[2]]
        assert [s.name for s in store] == ["Song 1", "Song 3"]

    def test_remove_when_unknown_id_then_split_not_found(self) -> None:
        from songsplitter.exceptions import SplitNotFound

        store = make_store((0, 30))

        with pytest.raises(SplitNotFound, match="No split with id"):
            store.remove("missing")

    def test_rename_when_present_then_only_name_changes(self) -> None:
        store = make_store((0, 30), (40, 60))
        target = store.all()[1]

        renamed = store.rename(target.id, "Ballad")

        assert renamed.name == "Ballad"
        assert (renamed.id, renamed.start_time, renamed.end_time) == (target.id, 40, 60)
        assert store.get(target.id).name == "Ballad"

    def test_rename_when_unknown_id_then_key_error(self) -> None:
        store = make_store((0, 30))

        with pytest.raises(KeyError):
            store.rename("missing", "x")


class TestSplitStoreResize:
    """Tests for SplitStore.resize_edge."""

    def test_resize_edge_when_end_overlaps_next_then_next_dropped(self) -> None:
        store = make_store((0, 60), (60, 120))
        split_a, split_b = store.all()

        resized = store.resize_edge(split_a.id, "end", 90)

        assert resized.end_time == 90
        assert resized.id == split_a.id
        assert split_b.id not in store
        assert len(store) == 1

    def test_resize_edge_when_start_overlaps_previous_then_previous_dropped(self) -> None:
        from songsplitter.splits.models import Edge

        store = make_store((0, 40), (50, 100))
        first, second = store.all()

        store.resize_edge(second.id, Edge.START, 10)

        assert [s.id for s in store] == [second.id]
        assert store.get(second.id).start_time == 10

    def test_resize_edge_when_start_past_end_then_clamped_to_minimum(self) -> None:
        store = make_store((10, 20))
        split = store.all()[0]

        resized = store.resize_edge(split.id, "start", 50)

        assert (resized.start_time, resized.end_time) == (19.0, 20)

    def test_resize_edge_when_end_before_start_then_clamped_to_minimum(self) -> None:
        store = make_store((10, 20))
        split = store.all()[0]

        resized = store.resize_edge(split.id, "end", 0)

        assert (resized.start_time, resized.end_time) == (10, 11.0)

    def test_resize_edge_when_beyond_bounds_then_clamped(self) -> None:
        store = make_store((10, 20), total=100.0)
        split = store.all()[0]

        store.resize_edge(split.id, "start", -5)
        resized = store.resize_edge(split.id, "end", 500)

        assert (resized.start_time, resized.end_time) == (0.0, 100.0)

    def test_resize_edge_when_covering_many_then_all_dropped(self) -> None:
        store = make_store((0, 10), (20, 30), (40, 50), (60, 70))
        first = store.all()[0]

        store.resize_edge(first.id, "end", 65)

        assert [(s.start_time, s.end_time) for s in store] == [(0, 65)]

    def test_resize_edge_when_touching_then_neighbour_kept(self) -> None:
        store = make_store((0, 30), (40, 60))
        first = store.all()[0]

        store.resize_edge(first.id, "end", 40)

        assert len(store) == 2
        assert_valid(store)

    def test_resize_edge_when_split_ends_near_recording_end_then_kept(self) -> None:
        store = make_store((99.5, 100.0), total=100.0)
        split = store.all()[0]

        result = store.resize_edge(split.id, "end", 100.0)

        assert (result.start_time, result.end_time) == (99.5, 100.0)
        assert store.all() == (result,)

    def test_resize_edge_when_split_starts_near_recording_start_then_kept(self) -> None:
        store = make_store((0.0, 0.4), (10, 20), total=100.0)
        split = store.all()[0]

        result = store.resize_edge(split.id, "start", 0.3)

        assert (result.start_time, result.end_time) == (0.0, 0.4)
        assert len(store) == 2

    def test_resize_edge_when_unknown_id_then_split_not_found(self) -> None:
        from songsplitter.exceptions import SplitNotFound

        store = make_store((0, 30))

        with pytest.raises(SplitNotFound):
            store.resize_edge("missing", "end", 40)

    def test_resize_edge_when_bad_edge_then_value_error(self) -> None:
        store = make_store((0, 30))

        with pytest.raises(ValueError):
            store.resize_edge(store.all()[0].id, "middle", 10)


class TestSplitStoreQueries:
    """Tests for read-only access."""

    def test_query_when_range_then_intersecting_splits(self) -> None:
        store = make_store((0, 30), (40, 60), (70, 90))

        assert [s.name for s in store.query(25, 45)] == ["Song 1", "Song 2"]
        assert store.query(30, 40) == ()

    def test_split_at_when_inside_or_gap_then_found_or_none(self) -> None:
        store = make_store((0, 30), (40, 60))

        assert store.split_at(0).name == "Song 1"
        assert store.split_at(45).name == "Song 2"
        assert store.split_at(35) is None
        assert store.split_at(60) is None

    def test_all_when_returned_then_caller_cannot_mutate_store(self) -> None:
        store = make_store((0, 30))

        snapshot = store.all()
        store.remove(snapshot[0].id)

        assert len(snapshot) == 1
        assert len(store) == 0


class TestSplitStoreInvariants:
    """Random edit sequences keep the store valid."""

    @pytest.mark.parametrize("seed", range(5))
    def test_random_edits_when_applied_then_store_always_valid(self, seed: int) -> None:
        from songsplitter.exceptions import RejectedEdit

        rng = random.Random(seed)
        store = make_store((0, 100), (150, 300), (400, 600), total=1000.0)

        for _ in range(300):
            operation = rng.choice(["add", "remove", "resize", "rename"])
            splits = store.all()
            if operation == "add":
                start = rng.uniform(-50, 1000)
                try:
                    store.add(start, start + rng.uniform(-10, 200))
                except RejectedEdit:
                    pass
            elif splits and operation == "remove":
                store.remove(rng.choice(splits).id)
            elif splits and operation == "resize":
                store.resize_edge(rng.choice(splits).id, rng.choice(["start", "end"]), rng.uniform(-100, 1100))
            elif splits:
                store.rename(rng.choice(splits).id, f"name {rng.random()}")
            assert_valid(store)


class TestSplitStorePersistence:
    """Tests for save and load."""

    def test_save_when_loaded_then_same_splits(self, tmp_path: Path) -> None:
        from songsplitter.splits.store import SplitStore

        store = make_store((0, 30), (40, 60), total=75.0)
        path = tmp_path / "splits.json"

        store.save(path)
        loaded = SplitStore.load(path)

        assert loaded.total_duration == 75.0
        assert loaded.all() == store.all()

    def test_load_when_invalid_file_then_invariant_violation(self, tmp_path: Path) -> None:
        from songsplitter.exceptions import InvariantViolation
        from songsplitter.splits.store import SplitStore

        path = tmp_path / "splits.json"
        path.write_text(
            '{"total_duration": 50, "splits": ['
            '{"name": "A", "start_time": 0, "end_time": 30},'
            '{"name": "B", "start_time": 20, "end_time": 40}]}'
        )

        with pytest.raises(InvariantViolation):
            SplitStore.load(path)
