import logging

from rigger.logging.log import init_logging


def test_run_log_written_and_tagged(tmp_path):
    logger, run_id, log_path = init_logging(base_dir=tmp_path)
    logger.info("hello from the test")
    for h in logger.handlers:
        h.flush()

    text = log_path.read_text()
    assert log_path.parent == tmp_path
    assert run_id in log_path.name
    assert "hello from the test" in text
    assert run_id[:8] in text
    assert logging.getLogger("paramiko").level == logging.WARNING


def test_old_run_logs_are_pruned(tmp_path):
    for i in range(5):
        (tmp_path / f"rigger-20260101-00000{i}-old.log").write_text("x")
    _, _, log_path = init_logging(base_dir=tmp_path, keep=3)
    remaining = sorted(p.name for p in tmp_path.glob("rigger-*.log"))
    assert len(remaining) == 3
    assert log_path.name in remaining
