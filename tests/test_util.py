import json
from importlib import metadata
from unittest import mock

import pytest

from canyon.util import coalesce, module_name, module_version, pretty_json


def test_pretty_json_indents_with_two_spaces_and_newline():
    assert pretty_json({"a": 1}) == '{\n  "a": 1\n}\n'


def test_pretty_json_round_trips_nested_values():
    value = {"orgs": {"my-org": "administrator"}, "items": [1, "two", None, True]}
    assert json.loads(pretty_json(value)) == value


def test_pretty_json_keeps_insertion_order():
    text = pretty_json({"key": "k", "description": "d"})
    assert text.index('"key"') < text.index('"description"')


def test_pretty_json_escapes_html_characters():
    value = "<a&b>"
    text = pretty_json(value)
    assert "<" not in text and ">" not in text and "&" not in text
    assert json.loads(text) == value


def test_pretty_json_uses_to_dict_of_objects():
    class Thing:
        def to_dict(self):
            return {"name": "thing"}

    assert json.loads(pretty_json([Thing()])) == [{"name": "thing"}]


def test_pretty_json_returns_empty_string_for_unencodable_value():
    assert pretty_json({"x": object()}) == ""


def test_pretty_json_rejects_nan():
    assert pretty_json(float("nan")) == ""


def test_coalesce_returns_first_non_zero_value():
    assert coalesce(0, "", None, "first", "second") == "first"


def test_coalesce_returns_single_value():
    assert coalesce(7) == 7


def test_coalesce_raises_without_non_zero_values():
    with pytest.raises(ValueError):
        coalesce(0, "", None)


def test_coalesce_raises_without_arguments():
    with pytest.raises(ValueError):
        coalesce()


def test_module_name():
    assert module_name() == "canyon"


def test_module_version_reports_installed_version():
    with mock.patch("importlib.metadata.version", return_value="1.2.3"):
        assert module_version() == "1.2.3"


def test_module_version_falls_back_when_not_installed():
    with mock.patch(
        "importlib.metadata.version", side_effect=metadata.PackageNotFoundError
    ):
        assert module_version() == "(devel)"