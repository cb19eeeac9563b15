"""Tests for extracting JSON objects from LLM replies."""

from mysticwriter.utils.json_extractor import extract_json_object


class TestExtractJsonObject:

    def test_plain_object(self):
        assert extract_json_object('{"name": "Kael"}') == {"name": "Kael"}

    def test_fenced_block(self):
        text = 'Here you go:\n```json\n{"name": "Kael"}\n```\nEnjoy!'
        assert extract_json_object(text) == {"name": "Kael"}

    def test_bare_fence(self):
        assert extract_json_object('```\n{"tone": "dark"}\n```') == {"tone": "dark"}

    def test_brace_scan_with_prose(self):
        text = 'Sure! {"name": "Kael", "description": "uses {braces} in text"} Hope it helps.'
        assert extract_json_object(text)["description"] == "uses {braces} in text"

    def test_escaped_quotes(self):
        text = 'x {"name": "The \\"Fox\\""} y'
        assert extract_json_object(text) == {"name": 'The "Fox"'}

    def test_non_object_rejected(self):
        assert extract_json_object("[1, 2, 3]") is None

    def test_required_keys(self):
        assert extract_json_object('{"other": 1}', required_keys=("name", "description")) is None
        assert extract_json_object('{"name": "a"}', required_keys=("name", "description")) == {"name": "a"}

    def test_empty_and_garbage(self):
        assert extract_json_object("") is None
        assert extract_json_object("no json here {") is None
