from siftlib.entries import parse_filename
from siftlib.plan import Operation, ExecutionSummary, execute_plan, rename_action, delete_action


def _op(kind, result, calls, name, planned=1):
    def action():
        calls.append(name)
        return result
    return Operation(kind=kind, title="Game", entries=(parse_filename(name),), description=name,
                     planned=planned, action=action)


def test_dry_run_reports_without_running_actions():
    calls, reported = [], []
    ops = [_op("rename", True, calls, "a.bin"), _op("delete", 2, calls, "b.bin", planned=2)]
    summary = execute_plan(ops, dry_run=True,
                           report=lambda i, n, op, dry: reported.append((i, n, op.description, dry)))
    assert calls == []
    assert reported == [(1, 2, "a.bin", True), (2, 2, "b.bin", True)]
    assert summary == ExecutionSummary(total_planned=3, total_applied=0, dry_run=True)
    assert summary.failed == 0


def test_live_run_executes_in_order_and_sums_results():
    calls = []
    ops = [
        _op("rename", True, calls, "a.bin"),
        _op("rename", False, calls, "b.bin"),
        _op("delete", 2, calls, "c.bin", planned=3),
    ]
    summary = execute_plan(ops)
    assert calls == ["a.bin", "b.bin", "c.bin"]
    assert summary.total_planned == 5
    assert summary.total_applied == 3
    assert summary.failed == 2


def test_action_raising_oserror_does_not_stop_the_run():
    calls = []

    def boom():
        raise PermissionError("denied")

    ops = [
        Operation(kind="rename", title="Game", entries=(), description="boom", planned=1, action=boom),
        _op("rename", True, calls, "after.bin"),
    ]
    summary = execute_plan(ops)
    assert calls == ["after.bin"]
    assert summary.total_applied == 1


def test_empty_plan():
    summary = execute_plan([])
    assert summary.total_planned == 0
    assert summary.total_applied == 0


def test_rename_and_delete_actions_log(caplog):
    import logging
    logger = logging.getLogger("test_plan_actions")
    done = []

    with caplog.at_level(logging.INFO, logger="test_plan_actions"):
        assert rename_action(lambda old, new: done.append((old, new)), "a (USA).bin", "a.bin", logger=logger)() is True
        assert delete_action(lambda name: done.append(name), ["x.bin", "y.bin"], logger=logger)() == 2

    assert done == [("a (USA).bin", "a.bin"), "x.bin", "y.bin"]
    assert "Renamed a (USA).bin to a.bin" in caplog.text
    assert "Deleted y.bin" in caplog.text
