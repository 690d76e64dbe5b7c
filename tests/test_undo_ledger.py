from smartplan.agent.undo_ledger import UndoLedger
from smartplan.models import Task


def test_snapshot_is_a_copy_not_an_alias():
    ledger = UndoLedger()
    tasks = [Task(id=1, title="A")]
    ledger.record("m1", 0, tasks)
    tasks[0].title = "changed"
    tasks.append(Task(id=2, title="B"))
    restored = ledger.undo("m1", 0)
    assert [task.title for task in restored] == ["A"]


def test_undo_consumes_entry():
    ledger = UndoLedger()
    ledger.record("m1", 0, [Task(id=1, title="A")])
    assert ledger.has("m1", 0)
    assert ledger.undo("m1", 0) is not None
    assert ledger.undo("m1", 0) is None
    assert len(ledger) == 0


def test_unknown_key_is_a_no_op():
    assert UndoLedger().undo("missing", 3) is None


def test_entries_are_keyed_by_message_and_index():
    ledger = UndoLedger()
    ledger.record("m1", 0, [Task(id=1, title="A")])
    ledger.record("m2", 0, [Task(id=2, title="B")])
    assert ledger.undo("m2", 0)[0].title == "B"
    assert ledger.undo("m1", 0)[0].title == "A"


def test_clear_drops_every_entry():
    ledger = UndoLedger()
    ledger.record("m1", 0, [])
    ledger.record("m1", 1, [])
    ledger.record("m2", 0, [])
    assert len(ledger) == 3
    ledger.clear()
    assert len(ledger) == 0
    assert not ledger.has("m1", 0)
