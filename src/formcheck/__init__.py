"""formcheck: rule-based field validation.

Fields declare their rules as short tokens (``required``, ``minLength[2]``,
``custom[/^[0-9]{5}$/m]``). A Validator resolves each field's current value,
runs its rules in order and returns one error per failing field.

Usage:
    from formcheck import Validator, MappingValueSource

    validator = Validator(
        [
            {"name": "email", "rules": ["required", "email"]},
            {"name": "age", "rules": ["integer", "greaterThan[17]"], "label": "Age"},
        ],
        value_source=MappingValueSource({"email": "a@b.co", "age": "16"}),
    )
    errors = validator.validate()
"""

from formcheck.config import ValidatorConfig
from formcheck.loader import FieldFileIssue, load_field_specs, validate_field_file
from formcheck.parser import RuleParser, RuleSyntaxError, parse_rule
from formcheck.registry import RuleDefinition, RuleRegistry, UnknownRuleError
from formcheck.rules import register_builtin_rules
from formcheck.services import (
    FieldValidator,
    MessageInterpolator,
    Validator,
    normalize_fields,
)
from formcheck.sources import (
    ErrorPresenter,
    FieldNotFoundError,
    Form,
    FormElement,
    LoggingErrorPresenter,
    MappingValueSource,
    SelectOption,
    ValueSource,
)
from formcheck.types import (
    ConfigurationError,
    FieldSpec,
    InvalidFieldSpecError,
    ParsedRule,
    ResolvedField,
    RuleContext,
    ValidationError,
)

__all__ = [
    # Types
    "ConfigurationError",
    "FieldSpec",
    "InvalidFieldSpecError",
    "ParsedRule",
    "ResolvedField",
    "RuleContext",
    "ValidationError",
    # Parser
    "RuleParser",
    "RuleSyntaxError",
    "parse_rule",
    # Registry
    "RuleDefinition",
    "RuleRegistry",
    "UnknownRuleError",
    "register_builtin_rules",
    # Services
    "FieldValidator",
    "MessageInterpolator",
    "Validator",
    "normalize_fields",
    # Sources
    "ErrorPresenter",
    "FieldNotFoundError",
    "Form",
    "FormElement",
    "LoggingErrorPresenter",
    "MappingValueSource",
    "SelectOption",
    "ValueSource",
    # Config and files
    "FieldFileIssue",
    "ValidatorConfig",
    "load_field_specs",
    "validate_field_file",
]
