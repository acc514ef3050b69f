"""Conversion of pydantic validation failures into codedeploy-trigger errors."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from codedeploy_trigger.lib.errors import ValidationError
from codedeploy_trigger.lib.logging_config import get_logger

logger = get_logger(__name__)

# Model-level errors have no location
MODEL_FIELD = "options"
VALUE_ERROR_PREFIX = "Value error, "


def _field_name(error: Any) -> str:
    loc = error.get("loc", ())
    return ".".join(str(item) for item in loc) if loc else MODEL_FIELD


def _message(error: Any) -> str:
    message = str(error.get("msg", "Unknown error"))
    if message.startswith(VALUE_ERROR_PREFIX):
        message = message[len(VALUE_ERROR_PREFIX) :]
    return message


def to_validation_error(exc: PydanticValidationError) -> ValidationError:
    """Convert a pydantic failure into a single ValidationError.

    The first failing field is reported; when several fields failed the
    message notes how many others did, and each one is logged at debug level.
    """
    errors = exc.errors()
    if not errors:
        return ValidationError(field=MODEL_FIELD, message="validation failed")

    for error in errors:
        logger.debug(f"Invalid value for '{_field_name(error)}': {_message(error)}")

    first = errors[0]
    message = _message(first)
    if len(errors) > 1:
        others = len(errors) - 1
        suffix = "s" if others > 1 else ""
        message = f"{message} (and {others} other invalid option{suffix})"

    actual = repr(first.get("input")) if first.get("loc") else None
    return ValidationError(field=_field_name(first), message=message, actual=actual)
