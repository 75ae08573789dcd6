"""Turn pydantic validation failures into readable config messages."""

from pydantic import ValidationError as PydanticValidationError


def flatten_pydantic_errors(exc: PydanticValidationError) -> list[str]:
    """Flatten a pydantic ValidationError into one message per bad field.

    Field locations are rendered in dotted form matching the YAML layout,
    e.g. ``search.fuzzy_threshold``.

    Args:
        exc: Pydantic ValidationError exception

    Returns:
        List of messages, never empty
    """
    messages: list[str] = []

    for error in exc.errors():
        loc = error.get("loc", ())
        field_path = ".".join(str(part) for part in loc) if loc else "<root>"
        msg = error.get("msg", "Unknown error")

        if "input" in error and error.get("type") != "missing":
            messages.append(
                f"Field '{field_path}': {msg} (received: {error['input']!r})"
            )
        else:
            messages.append(f"Field '{field_path}': {msg}")

    return messages or ["Validation failed with unknown error"]
