"""Readable messages from pydantic validation errors."""

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def first_error_message(errors: list[dict[str, Any]]) -> str:
    """First error as a sentence the web client can show as-is."""
    if not errors:
        return "Invalid request"
    first = errors[0]
    message = str(first.get("msg", "Invalid request"))
    if message.startswith("Value error, "):
        return message[len("Value error, "):]
    field = next(
        (str(part) for part in reversed(first.get("loc", ())) if isinstance(part, str)),
        None,
    )
    if field and field != "body":
        return f"{field}: {message}"
    return message


def parse_payload(model: type[ModelT], payload: Any) -> ModelT:
    """
    Validate a raw JSON body against `model`.

    Raises ValueError carrying the readable message. A missing body is
    treated as an empty object.
    """
    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(payload if payload is not None else {})
    except ValidationError as e:
        raise ValueError(first_error_message(e.errors())) from e
