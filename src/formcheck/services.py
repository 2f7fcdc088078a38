"""Validation services for formcheck.

This module provides the services that run a validation pass:
1. MessageInterpolator: Substitutes the field label into message templates
2. FieldValidator: Runs one field's rules in order, stopping at the first failure
3. Validator: Resolves values for a list of fields, collects errors and
   optionally hands them to a presenter
"""

import logging
from typing import Any, Mapping, Sequence

from formcheck.config import ValidatorConfig
from formcheck.parser import RuleSyntaxError, parse_rule
from formcheck.registry import RuleDefinition, RuleRegistry
from formcheck.rules import register_builtin_rules
from formcheck.sources import (
    ErrorPresenter,
    LoggingErrorPresenter,
    ValueSource,
    coerce_value,
)
from formcheck.types import (
    FieldSpec,
    InvalidFieldSpecError,
    ParsedRule,
    ResolvedField,
    RuleContext,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Label for literal-value fields that have neither a name nor a label
ANONYMOUS_LABEL = "value"

FieldInput = FieldSpec | Mapping[str, Any]


# =============================================================================
# Message Interpolation
# =============================================================================


class MessageInterpolator:
    """Interpolates the field label into error messages.

    Templates use a single ``%s`` placeholder:
        "The %s field is required." -> "The Email field is required."
    """

    PLACEHOLDER = "%s"

    def interpolate(self, template: str, label: str) -> str:
        return template.replace(self.PLACEHOLDER, label)


# =============================================================================
# Field Validator
# =============================================================================


class FieldValidator:
    """Validates a single field against its rule tokens.

    Rules run in declared order and evaluation stops at the first failing
    rule, so a field produces at most one error.
    """

    def __init__(self, interpolator: MessageInterpolator | None = None):
        self.interpolator = interpolator or MessageInterpolator()

    def compile(self, spec: FieldSpec) -> list[tuple[ParsedRule, RuleDefinition]]:
        """Parse and look up every rule of a field.

        Raises:
            RuleSyntaxError: If a token is malformed or has the wrong parameter count
            UnknownRuleError: If a token names an unregistered rule
        """
        compiled = []
        for token in spec.rules:
            rule = parse_rule(token)
            definition = RuleRegistry.get(rule.name)
            if len(rule.params) != definition.arity:
                raise RuleSyntaxError(
                    f"Expected {definition.arity} parameter(s), got {len(rule.params)}",
                    token,
                )
            compiled.append((rule, definition))
        return compiled

    def evaluate(
        self,
        spec: FieldSpec,
        resolved: ResolvedField,
        ctx: RuleContext,
    ) -> ValidationError | None:
        """Validate the resolved value of a field.

        Returns:
            The error for the first failing rule, or None if every rule passes
        """
        for rule, definition in self.compile(spec):
            if definition.check(resolved.value, rule, ctx):
                continue

            label = self.resolve_label(spec, resolved)
            template = spec.message or definition.message
            return ValidationError(
                id=resolved.id,
                name=spec.name or "",
                class_name=resolved.class_name,
                message=self.interpolator.interpolate(template, label),
                label=label,
                rule=rule.name,
            )

        return None

    def resolve_label(self, spec: FieldSpec, resolved: ResolvedField) -> str:
        """Label precedence: field spec, value source, field name."""
        return spec.label or resolved.label or spec.name or ANONYMOUS_LABEL


# =============================================================================
# Validator
# =============================================================================


def normalize_fields(fields: FieldInput | Sequence[FieldInput]) -> list[FieldSpec]:
    """Turn one field or a sequence of fields into a list of FieldSpec."""
    if isinstance(fields, (FieldSpec, Mapping)):
        fields = [fields]

    specs = []
    for item in fields:
        if isinstance(item, FieldSpec):
            specs.append(item)
        elif isinstance(item, Mapping):
            specs.append(FieldSpec.from_dict(item))
        else:
            raise InvalidFieldSpecError(
                f"Expected a field mapping or FieldSpec, got {type(item).__name__}"
            )
    return specs


class Validator:
    """Validates a set of fields in one pass.

    Example:
        validator = Validator(
            [
                {"name": "email", "rules": ["required", "email"]},
                {"name": "password", "rules": "minLength[8]", "label": "Password"},
            ],
            value_source=form,
            presenter=form,
        )
        validator.show_validation_errors = True
        errors = validator.validate()
    """

    def __init__(
        self,
        fields: FieldInput | Sequence[FieldInput],
        value_source: ValueSource | None = None,
        presenter: ErrorPresenter | None = None,
        config: ValidatorConfig | None = None,
    ):
        register_builtin_rules()
        self.config = config or ValidatorConfig()
        self.fields = normalize_fields(fields)
        self.value_source = value_source
        self.presenter = presenter
        self.show_validation_errors = self.config.show_validation_errors
        self.field_validator = FieldValidator()

    def validate(self) -> list[ValidationError]:
        """Validate every field and return the errors in field order.

        Configuration problems (unknown rules, malformed tokens, fields that
        cannot be resolved) raise before any error is presented.
        """
        ctx = RuleContext(resolve=self._lookup_value)
        errors: list[ValidationError] = []

        for spec in self.fields:
            resolved = self._resolve(spec)
            error = self.field_validator.evaluate(spec, resolved, ctx)
            if error is None:
                continue
            logger.debug("Field %r failed rule %s", error.name, error.rule)
            errors.append(error)

        logger.debug("Validated %d field(s), %d error(s)", len(self.fields), len(errors))

        if self.show_validation_errors and errors:
            presenter = self.presenter or LoggingErrorPresenter()
            for error in errors:
                presenter.show_error(error)

        return errors

    def get_rule(self, name: str) -> RuleDefinition:
        """Return the registered definition of a rule."""
        return RuleRegistry.get(name)

    def _resolve(self, spec: FieldSpec) -> ResolvedField:
        if spec.has_literal_value:
            return ResolvedField(value=coerce_value(spec.value), id=spec.name or "")

        if self.value_source is None:
            raise InvalidFieldSpecError(
                f"Field '{spec.name}' has no value and no value source was given"
            )
        return self.value_source.resolve(spec.name)

    def _lookup_value(self, name: str) -> str:
        """Current value of another field, for cross-field rules."""
        for spec in self.fields:
            if spec.name == name and spec.has_literal_value:
                return coerce_value(spec.value)

        if self.value_source is None:
            raise InvalidFieldSpecError(
                f"Cannot read field '{name}' without a value source"
            )
        return self.value_source.resolve(name).value
