import logging
from datetime import datetime

import pytest

from torii.logging_utils import configure_logging, generate_run_id, perf, perf_span


def _flush_and_read(log_path):
    for handler in logging.getLogger().handlers:
        handler.flush()
    return log_path.read_text(encoding="utf-8")


@pytest.fixture(autouse=True)
def _reset_root_handlers():
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        handler.close()
        root.removeHandler(handler)


def test_configure_logging_creates_run_scoped_file(app_config):
    log_path = configure_logging(app_config, run_id="run id/7", include_console=False)

    assert log_path.name == "torii-run-id-7.log"
    assert log_path.parent == app_config.log_directory

    logging.getLogger("torii.tests").info("bootstrapped riseup")

    contents = _flush_and_read(log_path)
    assert "bootstrapped riseup" in contents
    assert "[run=run id/7]" in contents


def test_generate_run_id_uses_utc_timestamp_format():
    datetime.strptime(generate_run_id(), "%Y%m%dT%H%M%SZ")


def test_perf_decorator_logs_success(app_config):
    log_path = configure_logging(app_config, run_id="perf-ok", include_console=False)

    @perf("render", tags={"provider": "riseup"})
    def render(n: int) -> int:
        return n * 2

    assert render(2) == 4

    contents = _flush_and_read(log_path)
    assert "event=perf name=render" in contents
    assert "success=true" in contents
    assert "provider='riseup'" in contents


def test_perf_decorator_logs_failure_and_reraises(app_config):
    log_path = configure_logging(app_config, run_id="perf-fail", include_console=False)

    @perf("explode")
    def boom():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        boom()

    contents = _flush_and_read(log_path)
    assert "event=perf name=explode" in contents
    assert "success=false" in contents


def test_perf_span_logs_block_and_does_not_swallow(app_config):
    log_path = configure_logging(app_config, run_id="perf-span", include_console=False)

    with perf_span("block", tags={"cc": "de"}):
        pass
    with pytest.raises(ValueError):
        with perf_span("failing-block"):
            raise ValueError("nope")

    contents = _flush_and_read(log_path)
    assert "event=perf name=block" in contents
    assert "cc='de'" in contents
    assert "name=failing-block" in contents and "success=false" in contents
