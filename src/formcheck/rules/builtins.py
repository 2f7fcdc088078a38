"""Built-in rules for formcheck.

This module registers all built-in rules with the RuleRegistry.
Call ``register_builtin_rules`` at application startup; the Validator
does this on construction.

Categories:
- Presence: required, matches, equals
- Format: url, email, emails, ip, base64, phone, cvc, creditCard
- Length: minLength, maxLength, exactLength
- Number: greaterThan, lessThan, numeric, integer, decimal
- Character classes: alpha, alphaNumeric, alphaDash, hasNumber, hasUpper, hasLower
- Pattern: custom
"""

import ipaddress
import re

from formcheck.parser import RuleSyntaxError
from formcheck.registry import RuleDefinition, RuleRegistry
from formcheck.types import ParsedRule, RuleContext


# =============================================================================
# Patterns
# =============================================================================

# Patterns anchor with \Z since $ also matches before a trailing newline

# Email: Basic RFC 5322 compliant pattern
EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}\Z"
)

# URL: Absolute http(s) URL
URL_PATTERN = re.compile(
    r"^https?://[^\s/$.?#].[^\s]*\Z",
    re.IGNORECASE
)

# Phone: Flexible pattern supporting international formats
PHONE_PATTERN = re.compile(
    r"^[\+]?[(]?[0-9]{1,3}[)]?[-\s\.]?[(]?[0-9]{1,4}[)]?[-\s\.]?[0-9]{1,4}[-\s\.]?[0-9]{1,9}\Z"
)

NUMERIC_PATTERN = re.compile(r"^[-+]?[0-9]+(\.[0-9]+)?\Z")
INTEGER_PATTERN = re.compile(r"^[-+]?[0-9]+\Z")
DECIMAL_PATTERN = re.compile(r"^[-+]?[0-9]*\.?[0-9]+\Z")

ALPHA_PATTERN = re.compile(r"^[a-zA-Z]+\Z")
ALPHA_NUMERIC_PATTERN = re.compile(r"^[a-zA-Z0-9]+\Z")
ALPHA_DASH_PATTERN = re.compile(r"^[a-zA-Z0-9_\-]+\Z")

BASE64_PATTERN = re.compile(
    r"^(?:[A-Za-z0-9+/]{4})*(?:[A-Za-z0-9+/]{2}==|[A-Za-z0-9+/]{3}=)?\Z"
)

CVC_PATTERN = re.compile(r"^[0-9]{3,4}\Z")

DIGIT_PATTERN = re.compile(r"[0-9]")

# Digit groups separated by single spaces or dashes
CREDIT_CARD_PATTERN = re.compile(r"^[0-9]+(?:[ \-][0-9]+)*\Z")


def register_builtin_rules() -> None:
    """Register all built-in rules with the RuleRegistry."""
    _register_presence_rules()
    _register_format_rules()
    _register_length_rules()
    _register_number_rules()
    _register_character_rules()
    _register_pattern_rules()


# -----------------------------------------------------------------------------
# Parameter helpers
# -----------------------------------------------------------------------------


def _token(rule: ParsedRule) -> str:
    return f"{rule.name}[{rule.raw_params}]" if rule.raw_params else rule.name


def _int_param(rule: ParsedRule) -> int:
    """Return the first parameter as a non-negative integer."""
    if not INTEGER_PATTERN.match(rule.params[0]):
        raise RuleSyntaxError(
            f"Expected an integer parameter, got '{rule.params[0]}'", _token(rule)
        )
    number = int(rule.params[0])
    if number < 0:
        raise RuleSyntaxError("Length parameter must not be negative", _token(rule))
    return number


def _number_param(rule: ParsedRule) -> float:
    """Return the first parameter as a number."""
    number = _to_number(rule.params[0])
    if number is None:
        raise RuleSyntaxError(
            f"Expected a numeric parameter, got '{rule.params[0]}'", _token(rule)
        )
    return number


def _to_number(value: str) -> float | None:
    """Parse a field value as a number, None if it isn't one."""
    if not DECIMAL_PATTERN.match(value):
        return None
    return float(value)


# -----------------------------------------------------------------------------
# Presence Rules
# -----------------------------------------------------------------------------


def _required(value: str, rule: ParsedRule, ctx: RuleContext) -> bool:
    return len(value) > 0


def _matches(value: str, rule: ParsedRule, ctx: RuleContext) -> bool:
    return value == ctx.resolve(rule.params[0])


def _equals(value: str, rule: ParsedRule, ctx: RuleContext) -> bool:
    return value == rule.params[0]


def _register_presence_rules() -> None:
    RuleRegistry.register(
        RuleDefinition(
            name="required",
            message="The %s field is required.",
            description="must not be empty",
            predicate=_required,
        )
    )

    RuleRegistry.register(
        RuleDefinition(
            name="matches",
            message="The %s field does not match the required field.",
            description="must match another field",
            predicate=_matches,
            arity=1,
        )
    )

    RuleRegistry.register(
        RuleDefinition(
            name="equals",
            message="The %s field does not equal the required value.",
            description="must equal the given value",
            predicate=_equals,
            arity=1,
        )
    )


# -----------------------------------------------------------------------------
# Format Rules
# -----------------------------------------------------------------------------


def _url(value: str, rule: ParsedRule, ctx: RuleContext) -> bool:
    return bool(URL_PATTERN.match(value))


def _email(value: str, rule: ParsedRule, ctx: RuleContext) -> bool:
    return bool(EMAIL_PATTERN.match(value))


def _emails(value: str, rule: ParsedRule, ctx: RuleContext) -> bool:
    return all(EMAIL_PATTERN.match(item.strip(" ")) for item in value.split(","))


def _ip(value: str, rule: ParsedRule, ctx: RuleContext) -> bool:
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


def _base64(value: str, rule: ParsedRule, ctx: RuleContext) -> bool:
    return bool(BASE64_PATTERN.match(value))


def _phone(value: str, rule: ParsedRule, ctx: RuleContext) -> bool:
    return bool(PHONE_PATTERN.match(value))


def _cvc(value: str, rule: ParsedRule, ctx: RuleContext) -> bool:
    return bool(CVC_PATTERN.match(value))


def _credit_card(value: str, rule: ParsedRule, ctx: RuleContext) -> bool:
    if not CREDIT_CARD_PATTERN.match(value):
        return False

    digits = [int(d) for d in re.sub(r"[^0-9]", "", value)]
    if not 13 <= len(digits) <= 19:
        return False

    # Luhn checksum: double every second digit from the right
    total = 0
    for index, digit in enumerate(reversed(digits)):
        if index % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


def _register_format_rules() -> None:
    RuleRegistry.register(
        RuleDefinition(
            name="url",
            message="The %s field must contain a valid URL.",
            description="must be a valid URL",
            predicate=_url,
        )
    )

    RuleRegistry.register(
        RuleDefinition(
            name="email",
            message="The %s field must contain a valid email address.",
            description="must be a valid email address",
            predicate=_email,
        )
    )

    RuleRegistry.register(
        RuleDefinition(
            name="emails",
            message="The %s field must contain all valid email addresses.",
            description="must be a comma separated list of valid email addresses",
            predicate=_emails,
        )
    )

    RuleRegistry.register(
        RuleDefinition(
            name="ip",
            message="The %s field must contain a valid IP.",
            description="must be a valid IPv4 or IPv6 address",
            predicate=_ip,
        )
    )

    RuleRegistry.register(
        RuleDefinition(
            name="base64",
            message="The %s field must contain a base64 string.",
            description="must be a base64 encoded string",
            predicate=_base64,
        )
    )

    RuleRegistry.register(
        RuleDefinition(
            name="phone",
            message="The %s field must contain a valid phone number.",
            description="must be a valid phone number",
            predicate=_phone,
        )
    )

    RuleRegistry.register(
        RuleDefinition(
            name="cvc",
            message="The %s field must contain a valid CVC number.",
            description="must be a 3 or 4 digit card verification code",
            predicate=_cvc,
        )
    )

    RuleRegistry.register(
        RuleDefinition(
            name="creditCard",
            message="The %s field must contain a valid credit card number.",
            description="must be a valid credit card number",
            predicate=_credit_card,
        )
    )


# -----------------------------------------------------------------------------
# Length Rules
# -----------------------------------------------------------------------------


def _min_length(value: str, rule: ParsedRule, ctx: RuleContext) -> bool:
    return len(value) >= _int_param(rule)


def _max_length(value: str, rule: ParsedRule, ctx: RuleContext) -> bool:
    return len(value) <= _int_param(rule)


def _exact_length(value: str, rule: ParsedRule, ctx: RuleContext) -> bool:
    return len(value) == _int_param(rule)


def _register_length_rules() -> None:
    RuleRegistry.register(
        RuleDefinition(
            name="minLength",
            message="The %s field does not meet the minimum length.",
            description="must be at least the given number of characters",
            predicate=_min_length,
            arity=1,
        )
    )

    RuleRegistry.register(
        RuleDefinition(
            name="maxLength",
            message="The %s field exceeds the maximum length.",
            description="must be at most the given number of characters",
            predicate=_max_length,
            arity=1,
        )
    )

    RuleRegistry.register(
        RuleDefinition(
            name="exactLength",
            message="The %s field is not the required length.",
            description="must be exactly the given number of characters",
            predicate=_exact_length,
            arity=1,
        )
    )


# -----------------------------------------------------------------------------
# Number Rules
# -----------------------------------------------------------------------------


def _greater_than(value: str, rule: ParsedRule, ctx: RuleContext) -> bool:
    limit = _number_param(rule)
    number = _to_number(value)
    return number is not None and number > limit


def _less_than(value: str, rule: ParsedRule, ctx: RuleContext) -> bool:
    limit = _number_param(rule)
    number = _to_number(value)
    return number is not None and number < limit


def _numeric(value: str, rule: ParsedRule, ctx: RuleContext) -> bool:
    return bool(NUMERIC_PATTERN.match(value))


def _integer(value: str, rule: ParsedRule, ctx: RuleContext) -> bool:
    return bool(INTEGER_PATTERN.match(value))


def _decimal(value: str, rule: ParsedRule, ctx: RuleContext) -> bool:
    return bool(DECIMAL_PATTERN.match(value))


def _register_number_rules() -> None:
    RuleRegistry.register(
        RuleDefinition(
            name="greaterThan",
            message="The %s field must contain a number greater than the minimum.",
            description="must be a number greater than the given value",
            predicate=_greater_than,
            arity=1,
        )
    )

    RuleRegistry.register(
        RuleDefinition(
            name="lessThan",
            message="The %s field must contain a number less than the maximum.",
            description="must be a number less than the given value",
            predicate=_less_than,
            arity=1,
        )
    )

    RuleRegistry.register(
        RuleDefinition(
            name="numeric",
            message="The %s field must contain only numbers.",
            description="must be a number",
            predicate=_numeric,
        )
    )

    RuleRegistry.register(
        RuleDefinition(
            name="integer",
            message="The %s field must contain an integer.",
            description="must be a whole number",
            predicate=_integer,
        )
    )

    RuleRegistry.register(
        RuleDefinition(
            name="decimal",
            message="The %s field must contain a decimal number.",
            description="must be a decimal number",
            predicate=_decimal,
        )
    )


# -----------------------------------------------------------------------------
# Character Class Rules
# -----------------------------------------------------------------------------


def _alpha(value: str, rule: ParsedRule, ctx: RuleContext) -> bool:
    return bool(ALPHA_PATTERN.match(value))


def _alpha_numeric(value: str, rule: ParsedRule, ctx: RuleContext) -> bool:
    return bool(ALPHA_NUMERIC_PATTERN.match(value))


def _alpha_dash(value: str, rule: ParsedRule, ctx: RuleContext) -> bool:
    return bool(ALPHA_DASH_PATTERN.match(value))


def _has_number(value: str, rule: ParsedRule, ctx: RuleContext) -> bool:
    return DIGIT_PATTERN.search(value) is not None


def _has_upper(value: str, rule: ParsedRule, ctx: RuleContext) -> bool:
    return any(char.isupper() for char in value)


def _has_lower(value: str, rule: ParsedRule, ctx: RuleContext) -> bool:
    return any(char.islower() for char in value)


def _register_character_rules() -> None:
    RuleRegistry.register(
        RuleDefinition(
            name="alpha",
            message="The %s field must only contain alphabetical characters.",
            description="must contain only letters",
            predicate=_alpha,
        )
    )

    RuleRegistry.register(
        RuleDefinition(
            name="alphaNumeric",
            message="The %s field must only contain alpha-numeric characters.",
            description="must contain only letters and digits",
            predicate=_alpha_numeric,
        )
    )

    RuleRegistry.register(
        RuleDefinition(
            name="alphaDash",
            message=(
                "The %s field must only contain alpha-numeric characters, "
                "underscores, and dashes."
            ),
            description="must contain only letters, digits, underscores and dashes",
            predicate=_alpha_dash,
        )
    )

    RuleRegistry.register(
        RuleDefinition(
            name="hasNumber",
            message="The %s field must contain at least one number.",
            description="must contain a digit",
            predicate=_has_number,
        )
    )

    RuleRegistry.register(
        RuleDefinition(
            name="hasUpper",
            message="The %s field must contain at least one uppercase letter.",
            description="must contain an uppercase letter",
            predicate=_has_upper,
        )
    )

    RuleRegistry.register(
        RuleDefinition(
            name="hasLower",
            message="The %s field must contain at least one lowercase letter.",
            description="must contain a lowercase letter",
            predicate=_has_lower,
        )
    )


# -----------------------------------------------------------------------------
# Pattern Rules
# -----------------------------------------------------------------------------


def _custom(value: str, rule: ParsedRule, ctx: RuleContext) -> bool:
    if rule.pattern is None:
        raise RuleSyntaxError("Missing regular expression", _token(rule))
    return rule.pattern.search(value) is not None


def _register_pattern_rules() -> None:
    RuleRegistry.register(
        RuleDefinition(
            name="custom",
            message="The %s field does not match the required format.",
            description="must match the given regular expression",
            predicate=_custom,
            arity=1,
        )
    )
