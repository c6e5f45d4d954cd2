from pathlib import Path

import pytest

import logkeep.retention as retention
from logkeep.enumerator import LogFileRef
from logkeep.retention import (
    RetentionConfig,
    RetentionEnforcer,
    order_by_mtime,
    prune,
    select_excess,
)


class RecordingRotator:
    def __init__(self, on_roll=None):
        self.calls = 0
        self.on_roll = on_roll

    def roll_over(self):
        self.calls += 1
        if self.on_roll:
            self.on_roll()


class FailingRotator:
    def roll_over(self):
        raise OSError("rename failed")


def _remaining(directory: Path):
    return sorted(p.name for p in directory.iterdir())


@pytest.fixture
def four_files(make_log):
    live = make_log("app.log", 4000)
    make_log("app.log.2024-01-01", 1000)
    make_log("app.log.2024-01-02", 2000)
    make_log("app.log.2024-01-03", 3000)
    return live


def test_oldest_deleted_when_over_quota(four_files, diag_logger):
    enforcer = RetentionEnforcer(
        RecordingRotator(), four_files, RetentionConfig(2), diagnostics=diag_logger
    )

    report = enforcer.roll_over()

    assert [p.name for p in report.deleted] == ["app.log.2024-01-01"]
    assert _remaining(four_files.parent) == [
        "app.log",
        "app.log.2024-01-02",
        "app.log.2024-01-03",
    ]
    assert report.ok


def test_zero_backups_leaves_only_live_file(four_files, diag_logger):
    report = prune(four_files, 0, diagnostics=diag_logger)

    assert len(report.deleted) == 3
    assert _remaining(four_files.parent) == ["app.log"]
    assert report.retained == [four_files]


def test_within_quota_deletes_nothing(four_files, diag_logger):
    report = prune(four_files, 3, diagnostics=diag_logger)

    assert report.deleted == []
    assert len(_remaining(four_files.parent)) == 4


def test_second_pass_is_noop(four_files, diag_logger):
    enforcer = RetentionEnforcer(
        RecordingRotator(), four_files, RetentionConfig(1), diagnostics=diag_logger
    )

    first = enforcer.enforce()
    second = enforcer.enforce()

    assert len(first.deleted) == 2
    assert second.deleted == []
    assert _remaining(four_files.parent) == ["app.log", "app.log.2024-01-03"]


def test_retained_files_are_never_older_than_deleted(make_log, diag_logger):
    live = make_log("app.log", 50)
    for i, mtime in enumerate([30, 10, 45, 20, 40, 5]):
        make_log(f"app.log.{i}", mtime)

    report = prune(live, 2, diagnostics=diag_logger)

    by_name = {r.path: r.mtime for r in report.candidates}
    deleted = [by_name[p] for p in report.deleted]
    retained = [by_name[p] for p in report.retained]
    assert len(retained) == 3
    assert min(retained) >= max(deleted)


def test_deletion_is_oldest_first(make_log, diag_logger):
    live = make_log("app.log", 100)
    make_log("app.log.b", 30)
    make_log("app.log.a", 20)
    make_log("app.log.c", 10)

    report = prune(live, 0, diagnostics=diag_logger)

    assert [p.name for p in report.deleted] == ["app.log.c", "app.log.a", "app.log.b"]


def test_rollover_failure_propagates_without_cleanup(four_files, diag_logger):
    enforcer = RetentionEnforcer(
        FailingRotator(), four_files, RetentionConfig(0), diagnostics=diag_logger
    )

    with pytest.raises(OSError, match="rename failed"):
        enforcer.roll_over()

    assert len(_remaining(four_files.parent)) == 4


def test_rollover_runs_before_enumeration(make_log, diag_logger):
    live = make_log("app.log", 100)
    make_log("app.log.old", 50)

    def _roll():
        # base rollover produced another backup
        make_log("app.log.new", 75)

    rotator = RecordingRotator(on_roll=_roll)
    enforcer = RetentionEnforcer(
        rotator, live, RetentionConfig(1), diagnostics=diag_logger
    )

    report = enforcer.roll_over()

    assert rotator.calls == 1
    assert [p.name for p in report.deleted] == ["app.log.old"]
    assert _remaining(live.parent) == ["app.log", "app.log.new"]


def test_deletion_failure_does_not_stop_the_pass(
    four_files, monkeypatch, caplog, diag_logger
):
    real_unlink = Path.unlink

    def _flaky_unlink(self, *args, **kwargs):
        if self.name == "app.log.2024-01-01":
            raise PermissionError(13, "Permission denied", str(self))
        return real_unlink(self, *args, **kwargs)

    monkeypatch.setattr(Path, "unlink", _flaky_unlink)

    with caplog.at_level("WARNING", logger=diag_logger.name):
        report = prune(four_files, 0, diagnostics=diag_logger)

    assert not report.ok
    assert [f.path.name for f in report.failures] == ["app.log.2024-01-01"]
    assert [p.name for p in report.deleted] == [
        "app.log.2024-01-02",
        "app.log.2024-01-03",
    ]
    assert "Could not delete old log file" in caplog.text


def test_vanished_file_counts_as_satisfied(four_files, monkeypatch, diag_logger):
    real_enumerate = retention.enumerate_log_files

    def _racing(*args, **kwargs):
        refs = real_enumerate(*args, **kwargs)
        (four_files.parent / "app.log.2024-01-01").unlink()
        return refs

    monkeypatch.setattr(retention, "enumerate_log_files", _racing)

    report = prune(four_files, 2, diagnostics=diag_logger)

    assert report.ok
    assert [p.name for p in report.vanished] == ["app.log.2024-01-01"]
    assert report.deleted == []


def test_missing_directory_is_not_an_error(tmp_path, diag_logger):
    report = prune(tmp_path / "gone" / "app.log", 0, diagnostics=diag_logger)

    assert report.candidates == []
    assert report.deleted == []
    assert report.ok


def test_dry_run_reports_without_deleting(four_files, diag_logger):
    report = prune(four_files, 1, dry_run=True, diagnostics=diag_logger)

    assert report.dry_run
    assert [p.name for p in report.deleted] == [
        "app.log.2024-01-01",
        "app.log.2024-01-02",
    ]
    assert len(_remaining(four_files.parent)) == 4


def test_ties_are_ordered_deterministically(tmp_path):
    live = tmp_path / "app.log"
    refs = [
        LogFileRef(live, 10.0),
        LogFileRef(tmp_path / "app.log.b", 10.0),
        LogFileRef(tmp_path / "app.log.a", 10.0),
        LogFileRef(tmp_path / "app.log.old", 5.0),
    ]

    for candidates in (refs, list(reversed(refs))):
        ordered = order_by_mtime(candidates, live)
        assert [r.name for r in ordered] == [
            "app.log.old",
            "app.log.a",
            "app.log.b",
            "app.log",
        ]


@pytest.mark.parametrize(
    "count, keep, expected",
    [(0, 1, 0), (1, 0, 0), (2, 1, 0), (3, 1, 1), (4, 0, 3), (5, 2, 2)],
)
def test_select_excess_boundary(tmp_path, count, keep, expected):
    ordered = [LogFileRef(tmp_path / f"f{i}", float(i)) for i in range(count)]

    victims = select_excess(ordered, keep)

    assert victims == ordered[:expected]


def test_config_rejects_negative_backup_index():
    with pytest.raises(ValueError):
        RetentionConfig(max_backup_index=-1)


def test_config_rejects_unknown_match():
    with pytest.raises(ValueError):
        RetentionConfig(match="regex")
