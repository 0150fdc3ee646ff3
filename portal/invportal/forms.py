# portal/invportal/forms.py
"""
Form parsing shared by every page.

HTML forms submit strings only. `FormSchema` subclasses coerce them into
the JSON payloads the backend expects (ids to int, blanks to None) and
report problems in the same `{field: [message, ...]}` shape the backend
uses for HTTP 422, so templates render both the same way.
"""

from __future__ import annotations

from typing import Any, ClassVar, Dict, FrozenSet, Iterable, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError, ValidationInfo, field_validator
from starlette.datastructures import FormData

Errors = Dict[str, List[str]]

REQUIRED_MESSAGE = "This field is required."

S = TypeVar("S", bound="FormSchema")


class FormSchema(BaseModel):
    """Base for submitted forms; blank inputs arrive as None."""

    # Fields sent exactly as typed (passwords); only "" counts as blank.
    verbatim_fields: ClassVar[FrozenSet[str]] = frozenset()

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any, info: ValidationInfo) -> Any:
        if not isinstance(value, str):
            return value
        if info.field_name in cls.verbatim_fields:
            return value or None
        return value.strip() or None

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


def _message_for(error: Dict[str, Any]) -> str:
    kind = error.get("type")
    if kind == "missing" or (kind != "value_error" and error.get("input", "") is None):
        return REQUIRED_MESSAGE
    message = str(error.get("msg", "Invalid value."))
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return message


def errors_from_validation(exc: ValidationError) -> Errors:
    errors: Errors = {}
    for error in exc.errors():
        loc = error.get("loc") or ("__all__",)
        field = str(loc[0])
        errors.setdefault(field, []).append(_message_for(error))
    return errors


def parse_form(
    schema: Type[S],
    values: Dict[str, Any],
    *,
    context: Optional[Dict[str, Any]] = None,
) -> Tuple[Optional[S], Errors]:
    """Validate submitted values; returns (model, {}) or (None, errors)."""
    try:
        return schema.model_validate(values, context=context or {}), {}
    except ValidationError as exc:
        return None, errors_from_validation(exc)


def form_values(form: FormData, multi: Iterable[str] = ()) -> Dict[str, Any]:
    """Flatten submitted form data; names in `multi` keep every value."""
    multi = set(multi)
    values: Dict[str, Any] = {}
    for key in form.keys():
        if key in multi:
            values[key] = [str(v) for v in form.getlist(key)]
        else:
            value = form.get(key)
            values[key] = value if isinstance(value, str) else ""
    for key in multi:
        values.setdefault(key, [])
    return values


def first_errors(errors: Errors) -> Dict[str, str]:
    """Templates show one message per field."""
    return {field: messages[0] for field, messages in errors.items() if messages}
