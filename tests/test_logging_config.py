import json
import logging

from mysticwriter.utils.logging_config import JSONFormatter, UserAdapter, get_logger


def _record(**extra):
    record = logging.LogRecord("mysticwriter.test", logging.WARNING, __file__, 1, "hello %s", ("world",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:

    def test_single_line_json_with_extras(self):
        line = JSONFormatter().format(_record(user_id="u1", stage="uploading", ignored="x"))
        entry = json.loads(line)
        assert "\n" not in line
        assert entry["message"] == "hello world"
        assert entry["level"] == "WARNING"
        assert entry["user_id"] == "u1"
        assert entry["stage"] == "uploading"
        assert "ignored" not in entry


class TestLoggers:

    def test_names_are_namespaced(self):
        assert get_logger("analytics").name == "mysticwriter.analytics"
        assert get_logger("mysticwriter.avatar").name == "mysticwriter.avatar"

    def test_user_adapter_injects_user_id(self):
        adapter = UserAdapter(get_logger("test"), user_id="u42")
        _, kwargs = adapter.process("msg", {"extra": {"stage": "x"}})
        assert kwargs["extra"] == {"stage": "x", "user_id": "u42"}


class TestContextFields:

    def test_only_known_context_is_emitted(self):
        entry = json.loads(JSONFormatter().format(_record(character="Aria", duration_ms=12, action="x")))
        assert entry["character"] == "Aria"
        assert entry["duration_ms"] == 12
        assert "action" not in entry
        assert entry["src"].endswith(":1")

    def test_user_adapter_without_caller_extra(self):
        adapter = UserAdapter(get_logger("test"), user_id="u7")
        _, kwargs = adapter.process("msg", {})
        assert kwargs["extra"] == {"user_id": "u7"}
