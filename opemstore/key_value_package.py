"""Key-value packages: scoped sets of properties, with their filter."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from bson import ObjectId

from opemstore.commons import NIL_OBJECT_ID, ROOT_DOMAIN, SITE_WILDCARD, SysInfo
from opemstore.query import Criteria, Filter

OID_FIELD = "_id"
NAME_FIELD = "name"
SCOPE_FIELD = "scope"
OBJ_TYPE_FIELD = "objType"
CATEGORY_FIELD = "category"
ISSYSTEM_FIELD = "issystem"
DESCRIPTION_FIELD = "description"
INHERITED_FIELD = "inherited"
PROPERTIES_FIELD = "properties"
PROPERTIES_I_FIELD = "properties.%d"
SYS_INFO_FIELD = "sysInfo"
SYS_INFO_STATUS_FIELD = "sysInfo.status"
SYS_INFO_CREATEDAT_FIELD = "sysInfo.createdat"
SYS_INFO_MODIFIEDAT_FIELD = "sysInfo.modifiedat"

ROOT_SCOPE = "root-scope"
DOMAIN_SCOPE = "domain-scope"
SITE_SCOPE = "site-scope"


def _has_oid(oid: ObjectId | None) -> bool:
    return oid is not None and oid != NIL_OBJECT_ID


@dataclass
class KeyValue:
    key: str = ""
    value: str = ""
    order: int = 0
    kind: str = ""

    def is_zero(self) -> bool:
        return self.key == "" and self.value == "" and self.order == 0 and self.kind == ""

    def to_document(self) -> dict[str, Any]:
        pairs = (("key", self.key), ("value", self.value), ("order", self.order), ("kind", self.kind))
        return {name: value for name, value in pairs if value}

    @classmethod
    def from_document(cls, doc: Mapping[str, Any] | None) -> KeyValue:
        doc = doc or {}
        return cls(
            key=doc.get("key", ""),
            value=doc.get("value", ""),
            order=int(doc.get("order", 0)),
            kind=doc.get("kind", ""),
        )


def scope_type_from(scope: str) -> str:
    """Return the kind of a scope path; raise ValueError if missing or malformed."""
    if scope == "":
        raise ValueError("scope cannot be resolved since is missing")
    if scope == ROOT_DOMAIN:
        return ROOT_SCOPE
    separators = scope.count("/")
    if separators == 1:
        return DOMAIN_SCOPE
    if separators == 2:
        return SITE_SCOPE
    raise ValueError("malformed scope")


def scope_type_and_path_from_domain_site(domain: str, site: str) -> tuple[str, str]:
    """Return the scope kind and path for a domain and site."""
    if domain == ROOT_DOMAIN:
        return ROOT_SCOPE, ROOT_DOMAIN
    if site == SITE_WILDCARD:
        return DOMAIN_SCOPE, "/".join((ROOT_DOMAIN, domain))
    return SITE_SCOPE, "/".join((ROOT_DOMAIN, domain, site))


def scope_is_more_specific_than(scope: str, another: str) -> bool:
    """Tell whether scope lies within another; raise ValueError if they are unrelated."""
    if scope == "":
        return False
    if another == "":
        return True
    if scope.startswith(another):
        return True
    if not another.startswith(scope):
        raise ValueError(f"incompatible paths compared: {scope} against {another}")
    return False


@dataclass
class KeyValuePackage:
    oid: ObjectId | None = None
    name: str = ""
    scope: str = ""
    obj_type: str = ""
    category: str = ""
    issystem: bool = False
    description: str = ""
    inherited: bool = False
    properties: list[KeyValue] = field(default_factory=list)
    sys_info: SysInfo = field(default_factory=SysInfo)

    def is_zero(self) -> bool:
        return (
            not _has_oid(self.oid)
            and self.name == ""
            and self.scope == ""
            and self.obj_type == ""
            and self.category == ""
            and not self.issystem
            and self.description == ""
            and not self.inherited
            and not self.properties
            and self.sys_info.is_zero()
        )

    def scope_type(self) -> str:
        return scope_type_from(self.scope)

    def is_more_specific_than(self, another: KeyValuePackage) -> bool:
        return scope_is_more_specific_than(self.scope, another.scope)

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {}
        if _has_oid(self.oid):
            doc[OID_FIELD] = self.oid
        for key, value in (
            (NAME_FIELD, self.name),
            (SCOPE_FIELD, self.scope),
            (OBJ_TYPE_FIELD, self.obj_type),
            (CATEGORY_FIELD, self.category),
            (ISSYSTEM_FIELD, self.issystem),
            (DESCRIPTION_FIELD, self.description),
            (INHERITED_FIELD, self.inherited),
        ):
            if value:
                doc[key] = value
        if self.properties:
            doc[PROPERTIES_FIELD] = [prop.to_document() for prop in self.properties]
        if not self.sys_info.is_zero():
            doc[SYS_INFO_FIELD] = self.sys_info.to_document()
        return doc

    @classmethod
    def from_document(cls, doc: Mapping[str, Any] | None) -> KeyValuePackage:
        doc = doc or {}
        return cls(
            oid=doc.get(OID_FIELD),
            name=doc.get(NAME_FIELD, ""),
            scope=doc.get(SCOPE_FIELD, ""),
            obj_type=doc.get(OBJ_TYPE_FIELD, ""),
            category=doc.get(CATEGORY_FIELD, ""),
            issystem=bool(doc.get(ISSYSTEM_FIELD, False)),
            description=doc.get(DESCRIPTION_FIELD, ""),
            inherited=bool(doc.get(INHERITED_FIELD, False)),
            properties=[KeyValue.from_document(p) for p in doc.get(PROPERTIES_FIELD) or []],
            sys_info=SysInfo.from_document(doc.get(SYS_INFO_FIELD)),
        )


class KeyValuePackageCriteria(Criteria):
    def and_oid_eq_to(self, oid: ObjectId | None) -> KeyValuePackageCriteria:
        return self.and_eq(OID_FIELD, oid)

    def and_oid_in(self, oids: Iterable[ObjectId] | None) -> KeyValuePackageCriteria:
        return self.and_in(OID_FIELD, oids)

    def and_name_eq_to(self, value: str) -> KeyValuePackageCriteria:
        return self.and_eq(NAME_FIELD, value)

    def and_name_is_null_or_unset(self) -> KeyValuePackageCriteria:
        return self.and_is_null_or_unset(NAME_FIELD)

    def and_name_in(self, values: Iterable[str] | None) -> KeyValuePackageCriteria:
        return self.and_in(NAME_FIELD, values)

    def and_scope_eq_to(self, value: str) -> KeyValuePackageCriteria:
        return self.and_eq(SCOPE_FIELD, value)

    def and_scope_is_null_or_unset(self) -> KeyValuePackageCriteria:
        return self.and_is_null_or_unset(SCOPE_FIELD)

    def and_scope_in(self, values: Iterable[str] | None) -> KeyValuePackageCriteria:
        return self.and_in(SCOPE_FIELD, values)

    def and_category_eq_to(self, value: str) -> KeyValuePackageCriteria:
        return self.and_eq(CATEGORY_FIELD, value)

    def and_category_is_null_or_unset(self) -> KeyValuePackageCriteria:
        return self.and_is_null_or_unset(CATEGORY_FIELD)

    def and_category_in(self, values: Iterable[str] | None) -> KeyValuePackageCriteria:
        return self.and_in(CATEGORY_FIELD, values)


class KeyValuePackageFilter(Filter):
    criteria_class = KeyValuePackageCriteria