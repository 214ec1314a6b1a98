"""
Form field -> events column translation.

Each editable form field has an explicit apply rule for partial updates:

  PROVIDED    applied whenever the client sent the key, even "" or null
  NOT_NULL    applied when the client sent any non-null value; an empty
              list clears the column, null leaves it untouched
  NON_EMPTY   applied only when the client sent a truthy value; "", 0
              and null leave the column untouched

The split between the rules matches what the web client has always relied on
(clearing the description is an edit, clearing the title is not). Change a
rule here only after product has agreed to it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from eventhub.schemas.event import UpdateEventForm


class Apply(str, Enum):
    PROVIDED = "provided"
    NOT_NULL = "not_null"
    NON_EMPTY = "non_empty"


def split_attractions(raw: str | None) -> list[str]:
    """'DJ, Live Band ,Photography' -> ['DJ', 'Live Band', 'Photography']"""
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


def _same(value: Any) -> Any:
    return value


@dataclass(frozen=True)
class FieldRule:
    column: str
    apply: Apply
    transform: Callable[[Any], Any] = _same


UPDATE_RULES: dict[str, FieldRule] = {
    "event_name": FieldRule("title", Apply.NON_EMPTY),
    "description": FieldRule("description", Apply.PROVIDED),
    "event_date": FieldRule("event_date", Apply.NON_EMPTY),
    "event_time": FieldRule("event_time", Apply.NON_EMPTY),
    "location": FieldRule("location", Apply.NON_EMPTY),
    "estimated_guests": FieldRule("capacity", Apply.NON_EMPTY),
    "budget": FieldRule("price", Apply.PROVIDED),
    "organizer_specification": FieldRule("organizer_specification", Apply.PROVIDED),
    "attractions": FieldRule("attractions", Apply.NON_EMPTY, split_attractions),
    "features": FieldRule("features", Apply.NOT_NULL, list),
    "is_livestream": FieldRule("is_livestream", Apply.PROVIDED),
    "livestream_link": FieldRule("livestream_url", Apply.NON_EMPTY),
}


def build_update_values(form: UpdateEventForm) -> dict[str, Any]:
    """Column values for the fields the client actually sent."""
    values: dict[str, Any] = {}
    for field in form.model_fields_set:
        rule = UPDATE_RULES.get(field)
        if rule is None:
            continue
        value = getattr(form, field)
        if rule.apply is Apply.NON_EMPTY and not value:
            continue
        if rule.apply is Apply.NOT_NULL and value is None:
            continue
        values[rule.column] = rule.transform(value)
    return values
