"""Query filters and update documents for the MongoDB store."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Callable, Iterable, Mapping

from bson import ObjectId

from opemstore.commons import NIL_OBJECT_ID


class DocumentNotFoundError(LookupError):
    """Raised when a lookup that must find a document finds none."""


class UnsetMode(IntEnum):
    """What an update does with a field whose value is empty."""

    UNSPECIFIED = 0
    KEEP_CURRENT = 1
    UNSET_DATA = 2
    SET_DATA_TO_DEFAULT = 3


class UpdateOperator(str, Enum):
    SET = "$set"
    UNSET = "$unset"
    INC = "$inc"
    CURRENT_DATE = "$currentDate"
    ADD_TO_SET = "$addToSet"
    PULL = "$pull"


def to_bson_value(value: Any) -> Any:
    """Turn entities, enums and containers into plain BSON-ready values."""
    if hasattr(value, "to_document"):
        return value.to_document()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [to_bson_value(item) for item in value]
    if isinstance(value, Mapping):
        return {key: to_bson_value(item) for key, item in value.items()}
    return value


def _is_blank(value: Any) -> bool:
    """Tell whether a value counts as missing for an equality criterion."""
    if value is None or value == "":
        return True
    return isinstance(value, ObjectId) and value == NIL_OBJECT_ID


def _is_empty(value: Any) -> bool:
    """Tell whether a value counts as empty for a set-or-unset decision."""
    if value is None:
        return True
    if isinstance(value, ObjectId):
        return value == NIL_OBJECT_ID
    is_zero = getattr(value, "is_zero", None)
    if callable(is_zero):
        return bool(is_zero())
    if isinstance(value, (str, bool, list, tuple, dict)):
        return not value
    return False


class Criteria(list):
    """Conditions joined by 'and', held as (field, value) pairs."""

    def and_eq(self, field: str, value: Any) -> Criteria:
        if _is_blank(value):
            return self
        self.append((field, value))
        return self

    def and_in(self, field: str, values: Iterable[Any] | None) -> Criteria:
        values = list(values or [])
        if not values:
            return self
        self.append((field, {"$in": values}))
        return self

    def and_is_null_or_unset(self, field: str) -> Criteria:
        self.append((field, None))
        return self

    def and_ne(self, field: str, value: Any) -> Criteria:
        if _is_blank(value):
            return self
        self.append((field, {"$ne": value}))
        return self

    def build(self) -> dict[str, Any]:
        return {key: to_bson_value(value) for key, value in self}


class Filter:
    """A filter made of groups of criteria joined by 'or'."""

    criteria_class: type[Criteria] = Criteria

    def __init__(self) -> None:
        self.criteria: list[Criteria] = []

    def or_(self) -> Criteria:
        """Start a new group of criteria and return it."""
        group = self.criteria_class()
        self.criteria.append(group)
        return group

    def build(self) -> dict[str, Any]:
        docs = [group.build() for group in self.criteria]
        if not docs:
            return {}
        if len(docs) == 1:
            return docs[0]
        return {"$or": docs}


@dataclass
class Updates:
    """The (field, value) updates collected under one operator."""

    operator: UpdateOperator
    updates: list[tuple[str, Any]] = field(default_factory=list)

    def add(self, update: tuple[str, Any]) -> None:
        self.updates.append(update)


UpdateOption = Callable[["UpdateDocument"], None]


class UpdateDocument:
    """Builds an update document operator by operator."""

    def __init__(self) -> None:
        self.ops: dict[UpdateOperator, Updates] = {}

    def op(self, operator: UpdateOperator | str) -> Updates:
        operator = UpdateOperator(operator)
        if operator not in self.ops:
            self.ops[operator] = Updates(operator)
        return self.ops[operator]

    def set(self) -> Updates:
        return self.op(UpdateOperator.SET)

    def unset(self) -> Updates:
        return self.op(UpdateOperator.UNSET)

    def inc(self) -> Updates:
        return self.op(UpdateOperator.INC)

    def current_date(self) -> Updates:
        return self.op(UpdateOperator.CURRENT_DATE)

    def add_to_set(self) -> Updates:
        return self.op(UpdateOperator.ADD_TO_SET)

    def pull(self) -> Updates:
        return self.op(UpdateOperator.PULL)

    def add(self, operator: UpdateOperator | str, update: tuple[str, Any]) -> None:
        self.op(operator).add(update)

    def set_field(self, field: str, value: Any) -> UpdateDocument:
        self.set().add((field, value))
        return self

    def unset_field(self, field: str) -> UpdateDocument:
        self.unset().add((field, ""))
        return self

    def set_or_unset(self, field: str, value: Any, mode: UnsetMode) -> UpdateDocument:
        """Set a non-empty value; otherwise unset the field if the mode asks for it."""
        if not _is_empty(value):
            self.set_field(field, value)
        elif mode in (UnsetMode.UNSET_DATA, UnsetMode.SET_DATA_TO_DEFAULT):
            self.unset_field(field)
        return self

    def build(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for operator, updates in self.ops.items():
            doc = {key: to_bson_value(value) for key, value in updates.updates if key}
            if doc:
                result[operator.value] = doc
        return result


def resolve_unset_modes(
    fields: Iterable[str],
    default_mode: UnsetMode,
    field_modes: Mapping[str, UnsetMode],
) -> dict[str, UnsetMode]:
    """Give every field its unset mode, falling back to the default one."""
    fields = tuple(fields)
    unknown = set(field_modes) - set(fields)
    if unknown:
        raise TypeError(f"unknown fields: {', '.join(sorted(unknown))}")
    default_mode = UnsetMode(default_mode)
    resolved = {}
    for name in fields:
        mode = UnsetMode(field_modes.get(name, UnsetMode.UNSPECIFIED))
        resolved[name] = default_mode if mode == UnsetMode.UNSPECIFIED else mode
    return resolved


def update_with(field: str, value: Any) -> UpdateOption:
    """Return an option that sets the field, or unsets it when the value is empty."""

    def apply(ud: UpdateDocument) -> None:
        if _is_empty(value):
            ud.unset_field(field)
        else:
            ud.set_field(field, value)

    return apply


def get_update_document_from_options(*args: UpdateOption) -> UpdateDocument:
    """Build an update document from single field options."""
    ud = UpdateDocument()
    for option in args:
        option(ud)
    return ud