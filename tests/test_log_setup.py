import logging
from logging.handlers import RotatingFileHandler

from log_setup import has_sensitive_keys, safe_json, setup_logging


def test_file_handler_is_added(tmp_path):
    logger = setup_logging(log_dir=str(tmp_path / "logs"), name="vtimes-test-file")

    assert any(isinstance(h, RotatingFileHandler) for h in logger.handlers)
    assert (tmp_path / "logs" / "mcp_server.log").exists()


def test_unwritable_log_dir_falls_back_to_stderr(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x")

    logger = setup_logging(log_dir=str(blocker / "logs"), name="vtimes-test-unwritable")

    assert [type(h) for h in logger.handlers] == [logging.StreamHandler]
    assert logger.level == logging.INFO


def test_configured_once(tmp_path):
    first = setup_logging(log_dir="", name="vtimes-test-once")
    second = setup_logging(log_dir="", name="vtimes-test-once", debug=True)

    assert first is second
    assert len(second.handlers) == 1
    assert second.level == logging.INFO


def test_helpers():
    assert has_sensitive_keys({"Token": "x"}) is True
    assert has_sensitive_keys({"input": []}) is False
    assert safe_json({"b": 1, "a": "é"}) == '{"a": "é", "b": 1}'
