"""Tests for loading field definitions from YAML files."""

import textwrap
from pathlib import Path

import pytest
import yaml

from formcheck.loader import FieldFileIssue, load_field_specs, validate_field_file
from formcheck.registry import RuleRegistry
from formcheck.rules import register_builtin_rules
from formcheck.services import Validator
from formcheck.sources import MappingValueSource
from formcheck.types import FieldSpec, InvalidFieldSpecError


@pytest.fixture(autouse=True)
def setup_registry():
    RuleRegistry.clear()
    register_builtin_rules()
    yield
    RuleRegistry.clear()


def write_yaml(tmp_path: Path, content: str, name: str = "fields.yaml") -> Path:
    path = tmp_path / name
    path.write_text(textwrap.dedent(content))
    return path


SIGNUP = """\
    fields:
      - name: email
        label: Email address
        rules: [required, email]
      - name: zip
        rules: "custom[/^[0-9]{5}$/]"
        message: "The %s field must be a 5 digit ZIP code."
      - value: 42
        rules: integer
"""


class TestLoadFieldSpecs:

    def test_loads_specs(self, tmp_path):
        specs = load_field_specs(write_yaml(tmp_path, SIGNUP))
        assert specs == [
            FieldSpec(name="email", rules=("required", "email"), label="Email address"),
            FieldSpec(
                name="zip",
                rules=("custom[/^[0-9]{5}$/]",),
                message="The %s field must be a 5 digit ZIP code.",
            ),
            FieldSpec(value=42, rules=("integer",)),
        ]

    def test_loaded_specs_validate(self, tmp_path):
        specs = load_field_specs(write_yaml(tmp_path, SIGNUP))
        source = MappingValueSource({"email": "someone@example.com", "zip": "1234"})

        errors = Validator(specs, value_source=source).validate()

        assert len(errors) == 1
        assert errors[0].message == "The zip field must be a 5 digit ZIP code."

    def test_issues_raise(self, tmp_path):
        path = write_yaml(tmp_path, "fields: []\n")
        with pytest.raises(InvalidFieldSpecError, match="1 issue"):
            load_field_specs(path)


class TestValidateFieldFile:

    def test_valid_file(self, tmp_path):
        assert validate_field_file(write_yaml(tmp_path, SIGNUP)) == []

    def test_empty_file(self, tmp_path):
        issues = validate_field_file(write_yaml(tmp_path, ""))
        assert len(issues) == 1
        assert "empty" in issues[0].message

    def test_yaml_syntax_error(self, tmp_path):
        issues = validate_field_file(write_yaml(tmp_path, "fields: [\n"))
        assert len(issues) == 1
        assert issues[0].message.startswith("YAML parse error")

    def test_missing_rules(self, tmp_path):
        path = write_yaml(
            tmp_path,
            """\
            fields:
              - name: email
            """,
        )
        issues = validate_field_file(path)
        assert len(issues) == 1
        assert issues[0].path == "fields[0]"
        assert "'rules' is a required property" in issues[0].message

    def test_missing_name_and_value(self, tmp_path):
        path = write_yaml(
            tmp_path,
            """\
            fields:
              - rules: required
            """,
        )
        issues = validate_field_file(path)
        assert [issue.path for issue in issues] == ["fields[0]"]

    def test_unknown_property(self, tmp_path):
        path = write_yaml(
            tmp_path,
            """\
            fields:
              - name: email
                rules: required
                severity: error
            """,
        )
        issues = validate_field_file(path)
        assert len(issues) == 1
        assert "severity" in issues[0].message

    def test_unknown_rule(self, tmp_path):
        path = write_yaml(
            tmp_path,
            """\
            fields:
              - name: email
                rules: [required, postcode]
            """,
        )
        issues = validate_field_file(path)
        assert len(issues) == 1
        assert issues[0].path == "fields[0]/rules"
        assert "'postcode' is not registered" in issues[0].message

    def test_malformed_rule(self, tmp_path):
        path = write_yaml(
            tmp_path,
            """\
            fields:
              - name: email
                rules: "minLength[2"
            """,
        )
        issues = validate_field_file(path)
        assert len(issues) == 1
        assert "Unbalanced brackets" in issues[0].message

    def test_issue_string(self, tmp_path):
        issue = FieldFileIssue(file=Path("f.yaml"), message="bad", path="fields[0]")
        assert str(issue) == "f.yaml at fields[0]: bad"

    def test_file_is_read_once(self, tmp_path, monkeypatch):
        path = write_yaml(tmp_path, SIGNUP)
        calls = []
        safe_load = yaml.safe_load

        def counting_safe_load(stream):
            calls.append(stream)
            return safe_load(stream)

        monkeypatch.setattr(yaml, "safe_load", counting_safe_load)

        assert len(load_field_specs(path)) == 3
        assert len(calls) == 1
