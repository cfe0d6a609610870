"""User cards: the model, its filter and its update documents."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from bson import ObjectId

from opemstore.commons import NIL_OBJECT_ID, SysInfo
from opemstore.query import Criteria, Filter, UnsetMode, UpdateDocument, resolve_unset_modes

OID = "_id"
USERID = "userId"
OBJTYPE = "objType"
SYSINFO = "sysinfo"

_UPDATE_FIELDS = ("oid", "user_id", "obj_type", "sysinfo")


@dataclass
class UserCard:
    oid: ObjectId | None = None
    user_id: str = ""
    obj_type: str = ""
    sysinfo: SysInfo = field(default_factory=SysInfo)

    def is_zero(self) -> bool:
        return (
            (self.oid is None or self.oid == NIL_OBJECT_ID)
            and self.user_id == ""
            and self.obj_type == ""
            and self.sysinfo.is_zero()
        )

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {}
        if self.oid is not None and self.oid != NIL_OBJECT_ID:
            doc[OID] = self.oid
        if self.user_id:
            doc[USERID] = self.user_id
        if self.obj_type:
            doc[OBJTYPE] = self.obj_type
        if not self.sysinfo.is_zero():
            doc[SYSINFO] = self.sysinfo.to_document()
        return doc

    @classmethod
    def from_document(cls, doc: Mapping[str, Any] | None) -> UserCard:
        doc = doc or {}
        return cls(
            oid=doc.get(OID),
            user_id=doc.get(USERID, ""),
            obj_type=doc.get(OBJTYPE, ""),
            sysinfo=SysInfo.from_document(doc.get(SYSINFO)),
        )


class UserCardCriteria(Criteria):
    def and_oid_eq_to(self, oid: ObjectId | None) -> UserCardCriteria:
        return self.and_eq(OID, oid)

    def and_oid_in(self, oids: Iterable[ObjectId] | None) -> UserCardCriteria:
        return self.and_in(OID, oids)

    def and_user_id_eq_to(self, value: str) -> UserCardCriteria:
        return self.and_eq(USERID, value)

    def and_user_id_is_null_or_unset(self) -> UserCardCriteria:
        return self.and_is_null_or_unset(USERID)

    def and_user_id_in(self, values: Iterable[str] | None) -> UserCardCriteria:
        return self.and_in(USERID, values)

    def and_obj_type_eq_to(self, value: str) -> UserCardCriteria:
        return self.and_eq(OBJTYPE, value)

    def and_obj_type_is_null_or_unset(self) -> UserCardCriteria:
        return self.and_is_null_or_unset(OBJTYPE)

    def and_obj_type_in(self, values: Iterable[str] | None) -> UserCardCriteria:
        return self.and_in(OBJTYPE, values)


class UserCardFilter(Filter):
    criteria_class = UserCardCriteria


def get_update_document(
    obj: UserCard, *, default_mode: UnsetMode = UnsetMode.KEEP_CURRENT, **kwargs: UnsetMode
) -> UpdateDocument:
    """Build an update from the card's top fields; empty ones follow their unset mode."""
    modes = resolve_unset_modes(_UPDATE_FIELDS, default_mode, kwargs)
    ud = UpdateDocument()
    ud.set_or_unset(USERID, obj.user_id, modes["user_id"])
    ud.set_or_unset(OBJTYPE, obj.obj_type, modes["obj_type"])
    ud.set_or_unset(SYSINFO, obj.sysinfo, modes["sysinfo"])
    return ud