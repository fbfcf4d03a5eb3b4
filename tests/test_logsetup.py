import io
import json
import logging
import re

import pytest

from canyon.logsetup import LineFormatter, setup_logging

TIMESTAMP = r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}"


@pytest.fixture
def restore_root():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _record(level, msg, attrs=None):
    record = logging.LogRecord("test", level, __file__, 1, msg, None, None)
    if attrs is not None:
        record.attrs = attrs
    return record


def test_info_line_has_timestamp_level_and_message():
    line = LineFormatter().format(_record(logging.INFO, "shown"))
    assert line[20:] == "INFO shown"
    assert len(re.findall(TIMESTAMP, line[:19])) == 1


def test_warning_uses_short_level_name():
    line = LineFormatter().format(_record(logging.WARNING, "careful"))
    assert line.split(" ")[2] == "WARN"


def test_critical_is_offset_from_error():
    line = LineFormatter().format(_record(logging.CRITICAL, "boom"))
    assert line.split(" ")[2] == "ERROR+4"


def test_levels_keep_their_order_in_names():
    formatter = LineFormatter()
    names = [
        formatter.format(_record(level, "m")).split(" ")[2]
        for level in (logging.DEBUG, logging.INFO, logging.ERROR)
    ]
    assert names[0].startswith("DEBUG")
    assert names[1].startswith("INFO")
    assert names[2].startswith("ERROR")


def test_groups_are_listed_before_message():
    line = LineFormatter(["rpc", "mcp"]).format(_record(logging.INFO, "hello"))
    assert line.endswith(" [rpc,mcp] hello")


def test_one_trailing_newline_is_removed_from_message():
    line = LineFormatter().format(_record(logging.INFO, "hello\n"))
    assert line.endswith("hello")
    assert "\n" not in line


def test_attrs_are_appended_as_quoted_and_json_values():
    attrs = {"method": "tools/list", "id": 3, "data": {"a": [1]}}
    line = LineFormatter().format(_record(logging.INFO, "msg", attrs))
    method_part, rest = line.split(" method=", 1)[1].split(" id=", 1)
    id_part, data_part = rest.split(" data=", 1)
    assert json.loads(method_part) == "tools/list"
    assert json.loads(id_part) == "3"
    assert json.loads(data_part) == {"a": [1]}


def test_setup_logging_hides_debug_by_default(restore_root):
    stream = io.StringIO()
    setup_logging(False, stream)
    logger = logging.getLogger("canyon.test")
    logger.debug("hidden")
    logger.info("shown")
    out = stream.getvalue()
    assert "hidden" not in out
    assert re.fullmatch(TIMESTAMP + r" INFO shown\n", out)


def test_setup_logging_debug_shows_debug(restore_root):
    stream = io.StringIO()
    setup_logging(True, stream)
    logging.getLogger("canyon.test").debug("visible")
    out = stream.getvalue()
    assert out.rstrip("\n").endswith("visible")
    assert out.count("\n") == 1