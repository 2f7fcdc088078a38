"""Validator configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_ERROR_CLASS = "validation-error error"

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class ValidatorConfig:
    """Settings shared by every validation pass.

    Attributes:
        show_validation_errors: Hand each error to the presenter after a pass
        error_class: Class given to error markers by presenters that draw them
    """

    show_validation_errors: bool = False
    error_class: str = DEFAULT_ERROR_CLASS

    @classmethod
    def from_env(cls) -> ValidatorConfig:
        """Create config from environment variables.

        FORMCHECK_SHOW_ERRORS: "1", "true", "yes" or "on" enables presentation
        FORMCHECK_ERROR_CLASS: overrides the error marker class
        """
        show = os.environ.get("FORMCHECK_SHOW_ERRORS", "")
        return cls(
            show_validation_errors=show.strip().lower() in _TRUE_VALUES,
            error_class=os.environ.get("FORMCHECK_ERROR_CLASS") or DEFAULT_ERROR_CLASS,
        )
