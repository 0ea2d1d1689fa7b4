from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class APIModel(BaseModel):
    """Response base: snake_case attributes, camelCase keys on the wire."""

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


def strip_text(value):
    # Non-strings fall through so pydantic reports the type error itself
    if isinstance(value, str):
        return value.strip()
    return value


def check_length(value, label, max_length, min_length=1):
    if len(value) < min_length:
        raise ValueError(f"{label} is required")
    if len(value) > max_length:
        raise ValueError(f"{label} must be {max_length} characters or less")
    return value
