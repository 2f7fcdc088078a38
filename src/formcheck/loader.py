"""
Load field definitions from YAML files.

A field file holds a ``fields`` list in the same shape the Validator accepts
inline:

    fields:
      - name: email
        label: Email address
        rules: [required, email]
      - name: zip
        rules: "custom[/^[0-9]{5}$/]"
        message: "The %s field must be a 5 digit ZIP code."

Files are checked against a JSON Schema and every rule token is parsed and
looked up before any FieldSpec is built.

Usage:
    from formcheck.loader import load_field_specs

    specs = load_field_specs(Path("signup.yaml"))
    errors = Validator(specs, value_source=form).validate()
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError as SchemaError

from formcheck.parser import parse_rule
from formcheck.registry import RuleRegistry
from formcheck.rules import register_builtin_rules
from formcheck.types import ConfigurationError, FieldSpec, InvalidFieldSpecError

logger = logging.getLogger(__name__)

_SCHEMA_PATH = Path(__file__).parent / "schemas" / "fields.schema.json"


@dataclass
class FieldFileIssue:
    """A single problem found in a field definition file."""

    file: Path
    message: str
    path: str = ""          # location within the document, e.g. "fields[0]/rules"

    def __str__(self) -> str:
        loc = f" at {self.path}" if self.path else ""
        return f"{self.file}{loc}: {self.message}"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def _load_schema() -> dict[str, Any]:
    with _SCHEMA_PATH.open() as fh:
        return json.load(fh)


def _json_path(error: SchemaError) -> str:
    """Convert a jsonschema error path to a readable string."""
    parts = []
    for p in error.absolute_path:
        if isinstance(p, int):
            parts.append(f"[{p}]")
        else:
            parts.append(str(p))
    return "/".join(parts).replace("/[", "[")


def _read_yaml(yaml_path: Path) -> tuple[Any, list[FieldFileIssue]]:
    try:
        with yaml_path.open() as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        return None, [FieldFileIssue(file=yaml_path, message=f"YAML parse error: {exc}")]

    if raw is None:
        return None, [
            FieldFileIssue(file=yaml_path, message="File is empty or contains only whitespace")
        ]
    return raw, []


def _rule_issues(yaml_path: Path, doc: dict[str, Any]) -> list[FieldFileIssue]:
    """Parse and look up every rule token in a schema-valid document."""
    register_builtin_rules()
    issues = []
    for index, item in enumerate(doc["fields"]):
        tokens = item["rules"]
        if isinstance(tokens, str):
            tokens = [tokens]
        for token in tokens:
            try:
                RuleRegistry.get(parse_rule(token).name)
            except ConfigurationError as exc:
                issues.append(
                    FieldFileIssue(file=yaml_path, message=str(exc), path=f"fields[{index}]/rules")
                )
    return issues


def _check_document(yaml_path: Path) -> tuple[Any, list[FieldFileIssue]]:
    """Read a field file once and return the document with its issues."""
    raw, issues = _read_yaml(yaml_path)
    if issues:
        return None, issues

    validator = Draft202012Validator(_load_schema())
    for error in sorted(validator.iter_errors(raw), key=_json_path):
        issues.append(
            FieldFileIssue(file=yaml_path, message=error.message, path=_json_path(error))
        )
    if issues:
        return raw, issues

    return raw, _rule_issues(yaml_path, raw)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_field_file(yaml_path: Path) -> list[FieldFileIssue]:
    """
    Check a field definition file without building FieldSpecs.

    Returns:
        A list of :class:`FieldFileIssue` objects (empty on success).
    """
    _, issues = _check_document(yaml_path)
    return issues


def load_field_specs(yaml_path: Path) -> list[FieldSpec]:
    """
    Load the field definitions of a YAML file.

    Raises:
        InvalidFieldSpecError: If the file has any issue; the message lists them all
    """
    doc, issues = _check_document(yaml_path)
    if issues:
        for issue in issues:
            logger.debug("Field file issue: %s", issue)
        raise InvalidFieldSpecError(
            f"{len(issues)} issue(s) in {yaml_path}:\n" + "\n".join(str(i) for i in issues)
        )

    return [FieldSpec.from_dict(item) for item in doc["fields"]]
