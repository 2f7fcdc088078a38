"""Core types for the formcheck validation engine.

This module defines the foundational types shared by the parser, the rule
registry and the validation services:
- ParsedRule: a rule token broken into name and parameters
- FieldSpec: a caller-supplied field definition
- ValidationError: a single failed field
- ResolvedField / RuleContext: what the engine knows about a field at runtime
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Mapping


class ConfigurationError(Exception):
    """Base class for errors in how validation was set up.

    These abort a validation pass. They are never collected into the
    returned error list.
    """


class InvalidFieldSpecError(ConfigurationError):
    """A field definition cannot be validated as given."""


@dataclass(frozen=True)
class ParsedRule:
    """A rule token parsed into its parts.

    Attributes:
        name: Rule identifier (e.g., "minLength")
        params: Ordered, trimmed parameters (empty for bare rules)
        raw_params: Everything between the brackets, verbatim
        pattern: Compiled regex for the ``custom`` rule, None otherwise
    """

    name: str
    params: tuple[str, ...] = ()
    raw_params: str = ""
    pattern: re.Pattern | None = None


@dataclass(frozen=True)
class FieldSpec:
    """Definition of one field to validate.

    Attributes:
        name: Field name used to resolve the value (optional for literal values)
        rules: Rule tokens, evaluated in order
        value: Literal value; when set, no value source is consulted
        label: Display label substituted into messages
        message: Message template overriding the rule's default
    """

    name: str | None = None
    rules: tuple[str, ...] = ()
    value: Any = None
    label: str | None = None
    message: str | None = None

    def __post_init__(self) -> None:
        if self.name is None and self.value is None:
            raise InvalidFieldSpecError("A field needs either a name or a value")
        if isinstance(self.rules, str):
            object.__setattr__(self, "rules", (self.rules,))
        elif isinstance(self.rules, (list, tuple)) and all(
            isinstance(token, str) for token in self.rules
        ):
            object.__setattr__(self, "rules", tuple(self.rules))
        else:
            raise InvalidFieldSpecError(
                f"Field '{self.name or self.value}' rules must be a rule token "
                f"or a list of rule tokens, got {self.rules!r}"
            )
        if not self.rules:
            raise InvalidFieldSpecError(
                f"Field '{self.name or self.value}' does not declare any rules"
            )

    @property
    def has_literal_value(self) -> bool:
        return self.value is not None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FieldSpec":
        """Create FieldSpec from a plain mapping (YAML/JSON or inline dict)."""
        return cls(
            name=data.get("name"),
            rules=data.get("rules", ()),
            value=data.get("value"),
            label=data.get("label"),
            message=data.get("message"),
        )


@dataclass(frozen=True)
class ValidationError:
    """A single failed field.

    Attributes:
        id: Identity of the bound element (the field name for plain values)
        name: Field name
        class_name: Class attribute of the bound element
        message: Human-readable message with the label substituted
        label: Label used in the message
        rule: Name of the rule that failed
    """

    id: str
    name: str
    class_name: str
    message: str
    label: str
    rule: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "class": self.class_name,
            "message": self.message,
            "label": self.label,
            "rule": self.rule,
        }


@dataclass(frozen=True)
class ResolvedField:
    """Current state of a field as reported by a value source.

    Checkbox and radio groups report ``"checked"`` or ``""``.
    """

    value: str
    id: str = ""
    class_name: str = ""
    label: str | None = None


@dataclass
class RuleContext:
    """Context passed to rule predicates.

    Attributes:
        resolve: Returns the current value of another field by name
    """

    resolve: Callable[[str], str]
