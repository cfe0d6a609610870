"""Domains: the model, its members, its filter and its update documents."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from bson import ObjectId

from opemstore.commons import NIL_OBJECT_ID, App, AppObjType, SysInfo
from opemstore.query import Criteria, Filter, UnsetMode, UpdateDocument, resolve_unset_modes

OID_FIELD = "_id"
CODE_FIELD = "code"
OBJ_TYPE_FIELD = "objType"
NAME_FIELD = "name"
DESCRIPTION_FIELD = "description"
LANGS_FIELD = "langs"
MEMBERS_FIELD = "members"
MEMBERS_I_FIELD = "members.%d"
APPS_FIELD = "apps"
APPS_I_FIELD = "apps.%d"
SYS_INFO_FIELD = "sysInfo"
SYS_INFO_STATUS_FIELD = "sysInfo.status"
SYS_INFO_CREATEDAT_FIELD = "sysInfo.createdat"
SYS_INFO_MODIFIEDAT_FIELD = "sysInfo.modifiedat"

_UPDATE_FIELDS = (
    "oid",
    "code",
    "obj_type",
    "name",
    "description",
    "langs",
    "members",
    "apps",
    "sys_info",
)


def _has_oid(oid: ObjectId | None) -> bool:
    return oid is not None and oid != NIL_OBJECT_ID


@dataclass
class Member:
    """A member of a domain, identified by code and object type."""

    code: str = ""
    obj_type: str = ""

    def is_zero(self) -> bool:
        return self.code == "" and self.obj_type == ""

    def to_document(self) -> dict[str, Any]:
        pairs = (("code", self.code), ("objType", self.obj_type))
        return {key: value for key, value in pairs if value}

    @classmethod
    def from_document(cls, doc: Mapping[str, Any] | None) -> Member:
        doc = doc or {}
        return cls(code=doc.get("code", ""), obj_type=doc.get("objType", ""))


@dataclass
class Domain:
    oid: ObjectId | None = None
    code: str = ""
    obj_type: str = ""
    name: str = ""
    description: str = ""
    langs: str = ""
    members: list[Member] = field(default_factory=list)
    apps: list[App] = field(default_factory=list)
    sys_info: SysInfo = field(default_factory=SysInfo)

    def is_zero(self) -> bool:
        return (
            not _has_oid(self.oid)
            and self.code == ""
            and self.obj_type == ""
            and self.name == ""
            and self.description == ""
            and self.langs == ""
            and not self.members
            and not self.apps
            and self.sys_info.is_zero()
        )

    def get_app_by_obj_type_and_id(
        self, obj_type: AppObjType | str, app_id: str
    ) -> tuple[App, bool]:
        """Find the app with this id and object type.

        Without an exact match, return the last app with the same id (or an
        app holding only the id) together with False.
        """
        wanted_type = obj_type.value if isinstance(obj_type, AppObjType) else obj_type
        app = App(id=app_id)
        for candidate in self.apps:
            if candidate.id == app_id:
                app = candidate
                if candidate.obj_type == wanted_type:
                    return candidate, True
        return app, False

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {}
        if _has_oid(self.oid):
            doc[OID_FIELD] = self.oid
        for key, value in (
            (CODE_FIELD, self.code),
            (OBJ_TYPE_FIELD, self.obj_type),
            (NAME_FIELD, self.name),
            (DESCRIPTION_FIELD, self.description),
            (LANGS_FIELD, self.langs),
        ):
            if value:
                doc[key] = value
        if self.members:
            doc[MEMBERS_FIELD] = [member.to_document() for member in self.members]
        if self.apps:
            doc[APPS_FIELD] = [app.to_document() for app in self.apps]
        if not self.sys_info.is_zero():
            doc[SYS_INFO_FIELD] = self.sys_info.to_document()
        return doc

    @classmethod
    def from_document(cls, doc: Mapping[str, Any] | None) -> Domain:
        doc = doc or {}
        return cls(
            oid=doc.get(OID_FIELD),
            code=doc.get(CODE_FIELD, ""),
            obj_type=doc.get(OBJ_TYPE_FIELD, ""),
            name=doc.get(NAME_FIELD, ""),
            description=doc.get(DESCRIPTION_FIELD, ""),
            langs=doc.get(LANGS_FIELD, ""),
            members=[Member.from_document(m) for m in doc.get(MEMBERS_FIELD) or []],
            apps=[App.from_document(a) for a in doc.get(APPS_FIELD) or []],
            sys_info=SysInfo.from_document(doc.get(SYS_INFO_FIELD)),
        )


@dataclass
class QueryResult:
    """Domains found by a query, with the total count when it was asked for."""

    records: int = 0
    data: list[Domain] = field(default_factory=list)


class DomainCriteria(Criteria):
    def and_oid_eq_to(self, oid: ObjectId | None) -> DomainCriteria:
        return self.and_eq(OID_FIELD, oid)

    def and_oid_in(self, oids: Iterable[ObjectId] | None) -> DomainCriteria:
        return self.and_in(OID_FIELD, oids)

    def and_code_eq_to(self, value: str) -> DomainCriteria:
        return self.and_eq(CODE_FIELD, value)

    def and_code_is_null_or_unset(self) -> DomainCriteria:
        return self.and_is_null_or_unset(CODE_FIELD)

    def and_code_in(self, values: Iterable[str] | None) -> DomainCriteria:
        return self.and_in(CODE_FIELD, values)

    def and_code_not_eq_to(self, value: str) -> DomainCriteria:
        return self.and_ne(CODE_FIELD, value)


class DomainFilter(Filter):
    criteria_class = DomainCriteria


def get_update_document(
    obj: Domain, *, default_mode: UnsetMode = UnsetMode.KEEP_CURRENT, **kwargs: UnsetMode
) -> UpdateDocument:
    """Build an update from the domain's top fields; empty ones follow their unset mode."""
    modes = resolve_unset_modes(_UPDATE_FIELDS, default_mode, kwargs)
    ud = UpdateDocument()
    ud.set_or_unset(CODE_FIELD, obj.code, modes["code"])
    ud.set_or_unset(OBJ_TYPE_FIELD, obj.obj_type, modes["obj_type"])
    ud.set_or_unset(NAME_FIELD, obj.name, modes["name"])
    ud.set_or_unset(DESCRIPTION_FIELD, obj.description, modes["description"])
    ud.set_or_unset(LANGS_FIELD, obj.langs, modes["langs"])
    ud.set_or_unset(MEMBERS_FIELD, obj.members, modes["members"])
    ud.set_or_unset(APPS_FIELD, obj.apps, modes["apps"])
    ud.set_or_unset(SYS_INFO_FIELD, obj.sys_info, modes["sys_info"])
    return ud