"""Tests for RecordStore – CRUD, snapshots, persistence contract, change events."""

from pathlib import Path

import pytest
from pydantic import Field

from record_store import (
    ChangeOperation,
    InMemoryAdapter,
    JsonFileAdapter,
    NotFoundError,
    PersistenceError,
    Record,
    RecordStore,
    ValidationError,
)
from record_store.codec import encode_records


# ---------------------------------------------------------------------------
# Typed test records
# ---------------------------------------------------------------------------

class Item(Record):
    record_type = "item"
    search_fields = ("title", "notes")

    title: str = Field(min_length=1)
    category: str = "misc"
    notes: str = ""


def _make_store(adapter=None, clock=None, **kwargs) -> RecordStore[Item]:
    adapter = adapter if adapter is not None else InMemoryAdapter()
    if clock is not None:
        kwargs["clock"] = clock
    return RecordStore(Item, adapter, **kwargs)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

class TestLoad:
    def test_no_data_starts_empty(self):
        store = _make_store()
        assert store.all() == []
        assert store.load_error is None

    def test_malformed_data_starts_empty(self):
        store = _make_store(InMemoryAdapter(b"{not json"))
        assert store.all() == []
        assert store.load_error is not None

    def test_wrong_shape_starts_empty(self):
        store = _make_store(InMemoryAdapter(b'{"title": "x"}'))
        assert len(store) == 0
        assert store.load_error is not None

    def test_loads_existing_records(self):
        data = encode_records([Item(id="a", title="first"), Item(id="b", title="second")])
        store = _make_store(InMemoryAdapter(data))
        assert [r.id for r in store.all()] == ["a", "b"]

    def test_unreadable_file_starts_empty(self, tmp_path):
        slot = tmp_path / "item.json"
        slot.mkdir()  # a directory where the file should be
        store = _make_store(JsonFileAdapter(slot))
        assert store.all() == []
        assert isinstance(store.load_error, PersistenceError)


# ---------------------------------------------------------------------------
# add
# ---------------------------------------------------------------------------

class TestAdd:
    def test_assigns_id_and_created_at(self, clock):
        store = _make_store(clock=clock)
        first = store.add(Item(title="a"))
        second = store.add(Item(title="b"))
        assert first.id and second.id
        assert first.id != second.id
        assert first.created_at < second.created_at
        assert first.updated_at is None

    def test_caller_supplied_id_is_replaced(self):
        store = _make_store()
        added = store.add(Item(id="mine", title="a"))
        assert added.id != "mine"

    def test_accepts_dict(self):
        store = _make_store()
        added = store.add({"title": "from-dict", "category": "x"})
        assert added.title == "from-dict"
        assert store.get(added.id).category == "x"

    def test_all_contains_exactly_added_records(self):
        store = _make_store()
        added = [store.add(Item(title=f"t{i}")) for i in range(5)]
        assert [r.id for r in store.all()] == [r.id for r in added]
        assert len({r.id for r in store.all()}) == 5

    def test_invalid_input_raises_and_stores_nothing(self):
        adapter = InMemoryAdapter()
        store = _make_store(adapter)
        with pytest.raises(ValidationError) as info:
            store.add({"title": "   "})
        assert info.value.errors[0]["field"] == "title"
        assert len(store) == 0
        assert adapter.save_count == 0

    def test_wrong_record_class_raises_type_error(self):
        class Other(Record):
            name: str = ""

        store = _make_store()
        with pytest.raises(TypeError):
            store.add(Other(name="x"))

    def test_returned_record_is_a_copy(self):
        store = _make_store()
        added = store.add(Item(title="original"))
        added.title = "mutated"
        assert store.get(added.id).title == "original"


# ---------------------------------------------------------------------------
# update
# ---------------------------------------------------------------------------

class TestUpdate:
    def test_replaces_fields_and_keeps_created_at(self, clock):
        store = _make_store(clock=clock)
        added = store.add(Item(title="before", notes="n"))
        edited = added.model_copy(update={"title": "after"})
        updated = store.update(edited)
        assert updated.title == "after"
        assert updated.created_at == added.created_at
        assert updated.updated_at > added.created_at
        assert store.all()[0].title == "after"

    def test_full_replace_not_patch(self):
        store = _make_store()
        added = store.add(Item(title="t", notes="keep me?"))
        store.update({"id": added.id, "title": "t2"})
        assert store.get(added.id).notes == ""

    def test_ignores_caller_created_at(self, clock):
        store = _make_store(clock=clock)
        added = store.add(Item(title="t"))
        forged = added.model_copy(update={"created_at": None})
        assert store.update(forged).created_at == added.created_at

    def test_preserves_position(self):
        store = _make_store()
        a = store.add(Item(title="a"))
        b = store.add(Item(title="b"))
        store.update(a.model_copy(update={"title": "a2"}))
        assert [r.id for r in store.all()] == [a.id, b.id]

    def test_unknown_id_is_noop_by_default(self):
        adapter = InMemoryAdapter()
        store = _make_store(adapter)
        store.add(Item(title="a"))
        writes = adapter.save_count
        assert store.update(Item(id="ghost", title="x")) is None
        assert adapter.save_count == writes
        assert len(store) == 1

    def test_unknown_id_raises_when_strict(self):
        store = _make_store(raise_on_missing=True)
        with pytest.raises(NotFoundError, match="ghost"):
            store.update(Item(id="ghost", title="x"))

    def test_invalid_update_leaves_record_untouched(self):
        store = _make_store()
        added = store.add(Item(title="ok"))
        with pytest.raises(ValidationError):
            store.update({"id": added.id, "title": ""})
        assert store.get(added.id).title == "ok"

    def test_update_many_single_write(self):
        adapter = InMemoryAdapter()
        store = _make_store(adapter)
        a = store.add(Item(title="a"))
        b = store.add(Item(title="b"))
        writes = adapter.save_count
        updated = store.update_many([
            a.model_copy(update={"category": "x"}),
            b.model_copy(update={"category": "x"}),
            Item(id="ghost", title="skip"),
        ])
        assert [r.id for r in updated] == [a.id, b.id]
        assert adapter.save_count == writes + 1
        assert {r.category for r in store.all()} == {"x"}

    def test_update_many_strict_checks_before_mutating(self):
        store = _make_store(raise_on_missing=True)
        a = store.add(Item(title="a"))
        with pytest.raises(NotFoundError):
            store.update_many([a.model_copy(update={"title": "changed"}), Item(id="ghost", title="x")])
        assert store.get(a.id).title == "a"


# ---------------------------------------------------------------------------
# delete
# ---------------------------------------------------------------------------

class TestDelete:
    def test_delete(self):
        store = _make_store()
        added = store.add(Item(title="a"))
        assert store.delete(added.id) is True
        assert len(store) == 0
        assert store.get(added.id) is None

    def test_delete_is_idempotent(self):
        adapter = InMemoryAdapter()
        store = _make_store(adapter)
        added = store.add(Item(title="a"))
        assert store.delete(added.id) is True
        writes = adapter.save_count
        assert store.delete(added.id) is False
        assert adapter.save_count == writes

    def test_delete_unknown_never_raises_even_when_strict(self):
        store = _make_store(raise_on_missing=True)
        assert store.delete("ghost") is False

    def test_delete_many(self):
        adapter = InMemoryAdapter()
        store = _make_store(adapter)
        ids = [store.add(Item(title=t)).id for t in "abc"]
        writes = adapter.save_count
        removed = store.delete_many([ids[0], ids[2], "ghost"])
        assert [r.id for r in removed] == [ids[0], ids[2]]
        assert [r.id for r in store.all()] == [ids[1]]
        assert adapter.save_count == writes + 1


# ---------------------------------------------------------------------------
# Snapshots and collection access
# ---------------------------------------------------------------------------

class TestSnapshots:
    def test_all_is_a_copy(self):
        store = _make_store()
        store.add(Item(title="a"))
        snapshot = store.all()
        snapshot.clear()
        assert len(store) == 1

    def test_snapshot_records_are_detached(self):
        store = _make_store()
        store.add(Item(title="a"))
        store.all()[0].title = "changed"
        assert store.all()[0].title == "a"

    def test_snapshot_not_live_across_mutations(self):
        store = _make_store()
        store.add(Item(title="a"))
        snapshot = store.all()
        store.add(Item(title="b"))
        assert len(snapshot) == 1

    def test_contains_and_iter(self):
        store = _make_store()
        added = store.add(Item(title="a"))
        assert added.id in store
        assert "ghost" not in store
        assert [r.id for r in store] == [added.id]

    def test_query_uses_default_search_fields(self):
        store = _make_store()
        store.add(Item(title="Paris Trip", notes="loved the Louvre"))
        store.add(Item(title="Rome"))
        assert [r.title for r in store.query(text="louvre")] == ["Paris Trip"]
        assert store.query(text="tokyo") == []


# ---------------------------------------------------------------------------
# Persistence contract
# ---------------------------------------------------------------------------

class TestPersistence:
    def test_every_mutation_writes_whole_collection(self):
        adapter = InMemoryAdapter()
        store = _make_store(adapter)
        a = store.add(Item(title="a"))
        store.add(Item(title="b"))
        store.update(a.model_copy(update={"title": "a2"}))
        store.delete(a.id)
        assert adapter.save_count == 4
        reloaded = _make_store(InMemoryAdapter(adapter.data))
        assert [r.title for r in reloaded.all()] == ["b"]

    @pytest.mark.parametrize("count", [0, 1, 7])
    def test_round_trip_through_file(self, tmp_path, count):
        path = tmp_path / "item.json"
        store = _make_store(JsonFileAdapter(path))
        for i in range(count):
            store.add(Item(title=f"t{i}", category="c" if i % 2 else "d"))
        if count == 0:
            store.delete("nothing")  # no write for a no-op
            assert not path.exists()
            return
        reloaded = _make_store(JsonFileAdapter(path))
        assert [r.model_dump() for r in reloaded.all()] == [r.model_dump() for r in store.all()]

    def test_failed_save_keeps_change_and_raises(self):
        adapter = InMemoryAdapter(fail_saves=True)
        store = _make_store(adapter)
        with pytest.raises(PersistenceError) as info:
            store.add(Item(title="unsaved"))
        assert info.value.record.title == "unsaved"
        assert [r.title for r in store.all()] == ["unsaved"]

    def test_failed_save_does_not_corrupt_previous_file(self, tmp_path):
        path = tmp_path / "item.json"
        store = _make_store(JsonFileAdapter(path))
        store.add(Item(title="durable"))
        before = path.read_bytes()

        class BrokenAdapter(JsonFileAdapter):
            def save(self, data: bytes) -> None:
                raise PersistenceError("disk full")

        store.adapter = BrokenAdapter(path)
        with pytest.raises(PersistenceError):
            store.add(Item(title="lost"))
        assert path.read_bytes() == before
        assert len(store) == 2

    def test_os_error_from_adapter_becomes_persistence_error(self):
        class RawAdapter(InMemoryAdapter):
            def save(self, data: bytes) -> None:
                raise OSError("read-only file system")

        store = _make_store(RawAdapter())
        with pytest.raises(PersistenceError, match="read-only"):
            store.add(Item(title="x"))
        assert len(store) == 1

    def test_reload_picks_up_external_changes(self):
        adapter = InMemoryAdapter()
        store = _make_store(adapter)
        store.add(Item(title="a"))
        adapter.data = encode_records([])
        assert store.load() == []
        assert len(store) == 0


# ---------------------------------------------------------------------------
# Change notification
# ---------------------------------------------------------------------------

class TestSubscribe:
    def test_listener_receives_each_mutation(self):
        store = _make_store()
        events = []
        store.subscribe(events.append)
        a = store.add(Item(title="a"))
        store.update(a.model_copy(update={"title": "b"}))
        store.delete(a.id)
        assert [e.operation for e in events] == [
            ChangeOperation.CREATE,
            ChangeOperation.UPDATE,
            ChangeOperation.DELETE,
        ]
        assert all(e.ids == (a.id,) for e in events)
        assert events[1].records[0].title == "b"
        assert all(e.record_type == "item" for e in events)

    def test_noops_do_not_notify(self):
        store = _make_store()
        events = []
        store.subscribe(events.append)
        store.delete("ghost")
        store.update(Item(id="ghost", title="x"))
        assert events == []

    def test_unsubscribe(self):
        store = _make_store()
        events = []
        unsubscribe = store.subscribe(events.append)
        unsubscribe()
        unsubscribe()  # second call is harmless
        store.add(Item(title="a"))
        assert events == []

    def test_failing_listener_does_not_break_mutation(self):
        store = _make_store()
        seen = []

        def broken(event):
            raise RuntimeError("boom")

        store.subscribe(broken)
        store.subscribe(seen.append)
        store.add(Item(title="a"))
        assert len(store) == 1
        assert len(seen) == 1

    def test_event_flags_unpersisted_change(self):
        store = _make_store(InMemoryAdapter(fail_saves=True))
        events = []
        store.subscribe(events.append)
        with pytest.raises(PersistenceError):
            store.add(Item(title="a"))
        assert events[0].persisted is False

    def test_reload_notifies_with_fresh_contents(self):
        adapter = InMemoryAdapter()
        store = _make_store(adapter)
        events = []
        store.subscribe(events.append)
        adapter.save(encode_records([Item(id="x", title="from elsewhere")]))
        store.load()
        assert events[-1].operation == ChangeOperation.RELOAD
        assert events[-1].ids == ("x",)
        assert "x" in store
        assert [r.title for r in store] == ["from elsewhere"]

    def test_events_arrive_in_mutation_order(self):
        store = _make_store()
        seen = []

        def follow_up(event):
            if event.operation == ChangeOperation.CREATE and event.records[0].title == "first":
                store.add(Item(title="second"))

        store.subscribe(follow_up)
        store.subscribe(lambda event: seen.append(event.records[0].title))
        store.add(Item(title="first"))
        assert seen == ["first", "second"]

    def test_listener_can_read_store(self):
        store = _make_store()
        sizes = []
        store.subscribe(lambda event: sizes.append(len(store.all())))
        store.add(Item(title="a"))
        store.add(Item(title="b"))
        assert sizes == [1, 2]
