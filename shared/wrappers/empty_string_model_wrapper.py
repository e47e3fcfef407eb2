import re
from typing import Any, Union, get_args, get_origin
from uuid import UUID
from pydantic import BaseModel, model_validator

INVISIBLE_CHARS_PATTERN = re.compile(
    r'[\u200e\u200f\u202a-\u202e\u2066-\u2069\ufeff]')


def deep_clean(value: Any):
    """Recursively convert blank strings to None and drop invisible characters."""
    if isinstance(value, dict):
        return {k: deep_clean(v) for k, v in value.items()}

    if isinstance(value, list):
        return [deep_clean(v) for v in value]

    if isinstance(value, str):
        cleaned = INVISIBLE_CHARS_PATTERN.sub("", value).strip()
        return None if cleaned == "" else cleaned

    return value


class EmptyStringModel(BaseModel):
    model_config = {
        "populate_by_name": True,
        "from_attributes": True,
    }

    @model_validator(mode="before")
    @classmethod
    def clean_input(cls, values):
        if isinstance(values, dict):
            return deep_clean(values)
        return values

    @model_validator(mode="after")
    def finalize_nulls(self):
        """Strings and UUIDs left empty go out as "" so the UI never sees null."""
        for field_name, field in type(self).model_fields.items():
            if getattr(self, field_name) is not None:
                continue
            annotation = field.annotation
            args = get_args(annotation) if get_origin(annotation) is Union else (annotation,)
            if str in args or UUID in args:
                object.__setattr__(self, field_name, "")
        return self
