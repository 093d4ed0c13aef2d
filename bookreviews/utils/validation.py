"""
Input Validation Helpers

Services accept plain arguments so they can be called outside of an HTTP
request (scripts, tests). They still validate with the same Pydantic
schemas the routers use, and translate Pydantic's error list into the
field-level messages of bookreviews.exceptions.ValidationError.
"""

from typing import Any, TypeVar

import pydantic
from pydantic import BaseModel

from bookreviews.exceptions import ValidationError

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def field_errors(exc: pydantic.ValidationError) -> list[dict[str, str]]:
    """
    Flatten a Pydantic error into {"field", "message"} entries.

    Example:
        [{"field": "rating", "message": "Input should be less than or equal to 5"}]
    """
    errors = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "__root__"
        message = error["msg"]
        # Pydantic prefixes messages from custom validators
        message = message.removeprefix("Value error, ")
        errors.append({"field": field, "message": message})
    return errors


def validate_input(schema: type[SchemaT], **data: Any) -> SchemaT:
    """
    Validate keyword arguments against a schema.

    Args:
        schema: Pydantic model class to validate with
        **data: Field values

    Returns:
        The validated schema instance

    Raises:
        ValidationError: With one entry per invalid field
    """
    try:
        return schema(**data)
    except pydantic.ValidationError as exc:
        raise ValidationError(field_errors(exc)) from exc
