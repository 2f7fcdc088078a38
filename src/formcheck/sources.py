"""Value sources and error presenters.

The engine never touches a user interface directly. It reads field values
through a ValueSource and reports errors through an ErrorPresenter. This
module defines both protocols and ships in-memory implementations:

- MappingValueSource: a plain name -> value map
- Form: a headless form model with text, checkbox, radio and select elements
  that acts as both value source and presenter
- LoggingErrorPresenter: writes each error to the log
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol

from formcheck.config import ValidatorConfig
from formcheck.types import ConfigurationError, ResolvedField, ValidationError

logger = logging.getLogger(__name__)

CHECKED = "checked"

CHECKABLE_TYPES = ("checkbox", "radio")


class FieldNotFoundError(ConfigurationError):
    """A value source has no field with the requested name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No field named '{name}'")


class ValueSource(Protocol):
    """Protocol for reading the current value of a field by name."""

    def resolve(self, name: str) -> ResolvedField:
        """Return the field's current state.

        Raises:
            FieldNotFoundError: If no field has that name
        """
        ...


class ErrorPresenter(Protocol):
    """Protocol for marking a field invalid in a user interface."""

    def show_error(self, error: ValidationError) -> None:
        """Present a single validation error."""
        ...


def coerce_value(value: Any) -> str:
    """Reduce a raw value to the string form rules operate on."""
    if value is None or value is False:
        return ""
    if value is True:
        return CHECKED
    return str(value)


class MappingValueSource:
    """Value source backed by a plain mapping.

    Booleans follow checkbox semantics: True reads as checked, False as empty.
    """

    def __init__(self, values: Mapping[str, Any]):
        self.values = values

    def resolve(self, name: str) -> ResolvedField:
        if name not in self.values:
            raise FieldNotFoundError(name)
        return ResolvedField(value=coerce_value(self.values[name]), id=name)


# =============================================================================
# Headless Form
# =============================================================================


@dataclass
class SelectOption:
    """An option of a select element."""

    value: str
    text: str = ""
    selected: bool = False


@dataclass
class FormElement:
    """A single input-like element.

    Attributes:
        name: Name shared by all elements of a checkbox/radio group
        type: "text", "checkbox", "radio", "select", or any other text-like type
        id: Element id (defaults to the name)
        value: Current value for text-like elements
        checked: Checked state for checkbox and radio elements
        class_name: Class attribute
        label: Text of the element's label
        options: Options of a select element
        error: Message shown when the element has been marked invalid
        error_class: Class of the error marker
    """

    name: str
    type: str = "text"
    id: str = ""
    value: str = ""
    checked: bool = False
    class_name: str = ""
    label: str | None = None
    options: list[SelectOption] = field(default_factory=list)
    error: str | None = None
    error_class: str | None = None

    @property
    def element_id(self) -> str:
        return self.id or self.name

    @property
    def is_checkable(self) -> bool:
        return self.type in CHECKABLE_TYPES

    def select(self, value: str) -> None:
        """Select the option with the given value, deselecting the rest."""
        if not any(option.value == value for option in self.options):
            raise ValueError(f"Select '{self.name}' has no option '{value}'")
        for option in self.options:
            option.selected = option.value == value

    def current_value(self) -> str:
        if self.type == "select":
            for option in self.options:
                if option.selected:
                    return option.value
            # Browsers select the first option by default
            return self.options[0].value if self.options else ""
        return self.value


class Form:
    """In-memory form acting as value source and error presenter.

    A radio or checkbox group is every element sharing a name; the group reads
    as checked when any member is. Errors mark the group's first element.

    Usage:
        form = Form([
            FormElement(name="email", value="someone@example.com"),
            FormElement(name="terms", type="checkbox"),
        ])
        Validator(fields, value_source=form, presenter=form).validate()
    """

    def __init__(
        self,
        elements: list[FormElement] | None = None,
        error_class: str | None = None,
    ):
        self.elements: list[FormElement] = list(elements or [])
        # Falls back to FORMCHECK_ERROR_CLASS or the default marker class
        self.error_class = error_class or ValidatorConfig.from_env().error_class

    def add(self, element: FormElement) -> FormElement:
        self.elements.append(element)
        return element

    def find(self, name: str) -> list[FormElement]:
        """Return every element with the given name, in document order."""
        return [element for element in self.elements if element.name == name]

    def get(self, name: str) -> FormElement:
        """Return the first element with the given name."""
        matches = self.find(name)
        if not matches:
            raise FieldNotFoundError(name)
        return matches[0]

    def resolve(self, name: str) -> ResolvedField:
        matches = self.find(name)
        if not matches:
            raise FieldNotFoundError(name)

        first = matches[0]
        if first.is_checkable:
            checked = any(element.checked for element in matches if element.is_checkable)
            value = CHECKED if checked else ""
        else:
            value = first.current_value()

        return ResolvedField(
            value=value,
            id=first.element_id,
            class_name=first.class_name,
            label=first.label,
        )

    def show_error(self, error: ValidationError) -> None:
        """Mark the first element of the failing field invalid."""
        matches = self.find(error.name)
        if not matches:
            logger.debug("No element to mark for field %r", error.name)
            return
        matches[0].error = error.message
        matches[0].error_class = self.error_class

    def error_labels(self) -> list[FormElement]:
        """Return the elements currently marked invalid."""
        return [element for element in self.elements if element.error is not None]

    def clear_errors(self) -> None:
        for element in self.elements:
            element.error = None
            element.error_class = None


class LoggingErrorPresenter:
    """Presenter that writes each error to the log."""

    def __init__(self, log: logging.Logger | None = None):
        self.log = log or logger

    def show_error(self, error: ValidationError) -> None:
        self.log.warning("%s (%s failed on %s)", error.message, error.rule, error.name)
