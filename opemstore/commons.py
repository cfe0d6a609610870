"""Value types shared by the store entities: system info, apps and file variants."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Iterable, Mapping

from bson import ObjectId

ROOT_DOMAIN = "root"
SITE_WILDCARD = "*"

SYSINFO = "sysinfo"
SYSINFO_STATUS = "sysinfo.status"
SYSINFO_CREATEDAT = "sysinfo.createdat"
SYSINFO_MODIFIEDAT = "sysinfo.modifiedat"
APPS = "apps"
APPS_I = "apps.%d"
APPS_I_ID = "apps.%d.id"
APPS_ID = "apps.id"
APPS_I_OBJTYPE = "apps.%d.objType"
APPS_OBJTYPE = "apps.objType"
APPS_I_NAME = "apps.%d.name"
APPS_NAME = "apps.name"
APPS_I_DESCRIPTION = "apps.%d.description"
APPS_DESCRIPTION = "apps.description"
APPS_I_PATH = "apps.%d.path"
APPS_PATH = "apps.path"
APPS_I_ROLEREQUIRED = "apps.%d.roleRequired"
APPS_ROLEREQUIRED = "apps.roleRequired"
ROLES = "roles"
ROLES_I = "roles.%d"
ROLES_I_DOMAIN = "roles.%d.domain"
ROLES_DOMAIN = "roles.domain"
ROLES_I_SITE = "roles.%d.site"
ROLES_SITE = "roles.site"
ROLES_I_APPS = "roles.%d.apps"
ROLES_APPS = "roles.apps"

NIL_OBJECT_ID = ObjectId(b"\x00" * 12)


def _is_empty(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    if isinstance(value, ObjectId):
        return value == NIL_OBJECT_ID
    return False


def _omit_empty(pairs: Iterable[tuple[str, Any]]) -> dict[str, Any]:
    """Build a document, leaving out keys whose value is empty."""
    return {key: value for key, value in pairs if not _is_empty(value)}


@dataclass
class SysInfo:
    """Status and timestamps of a stored record."""

    status: str = ""
    createdat: datetime | None = None
    modifiedat: datetime | None = None

    def is_zero(self) -> bool:
        return self.status == "" and self.createdat is None and self.modifiedat is None

    def to_document(self) -> dict[str, Any]:
        return _omit_empty(
            [
                ("status", self.status),
                ("createdat", self.createdat),
                ("modifiedat", self.modifiedat),
            ]
        )

    @classmethod
    def from_document(cls, doc: Mapping[str, Any] | None) -> SysInfo:
        doc = doc or {}
        return cls(
            status=doc.get("status", ""),
            createdat=doc.get("createdat"),
            modifiedat=doc.get("modifiedat"),
        )


class AppObjType(str, Enum):
    WWW = "app-www"
    CONSOLE = "app-admin"


class AppId(str, Enum):
    """Ids of the available apps; the apps themselves are configured in the database."""

    HOME = "app-home"
    SYS = "app-sys"


APP_IDS_WORLD: tuple[AppId, ...] = (AppId.HOME, AppId.SYS)


def is_app_id_in_catalog(name: str) -> bool:
    """Tell whether the name is one of the known app ids."""
    return any(app_id.value == name for app_id in APP_IDS_WORLD)


@dataclass
class App:
    id: str = ""
    obj_type: str = ""
    name: str = ""
    description: str = ""
    path: str = ""
    role_required: bool = False

    def is_zero(self) -> bool:
        return (
            self.id == ""
            and self.obj_type == ""
            and self.name == ""
            and self.description == ""
            and self.path == ""
            and not self.role_required
        )

    def to_document(self) -> dict[str, Any]:
        return _omit_empty(
            [
                ("id", self.id),
                ("objType", self.obj_type),
                ("name", self.name),
                ("description", self.description),
                ("path", self.path),
                ("roleRequired", self.role_required),
            ]
        )

    @classmethod
    def from_document(cls, doc: Mapping[str, Any] | None) -> App:
        doc = doc or {}
        return cls(
            id=doc.get("id", ""),
            obj_type=doc.get("objType", ""),
            name=doc.get("name", ""),
            description=doc.get("description", ""),
            path=doc.get("path", ""),
            role_required=bool(doc.get("roleRequired", False)),
        )


@dataclass
class FileVariant:
    ct: str = ""
    wd: int = 0
    ht: int = 0
    lks: str = ""
    bln: str = ""
    cnt: str = ""
    url: str = ""
    role: str = ""

    def is_zero(self) -> bool:
        return (
            self.ct == ""
            and self.wd == 0
            and self.ht == 0
            and self.lks == ""
            and self.bln == ""
            and self.cnt == ""
            and self.url == ""
            and self.role == ""
        )

    def to_document(self) -> dict[str, Any]:
        return _omit_empty(
            [
                ("ct", self.ct),
                ("wd", self.wd),
                ("ht", self.ht),
                ("lks", self.lks),
                ("bln", self.bln),
                ("cnt", self.cnt),
                ("url", self.url),
                ("role", self.role),
            ]
        )

    @classmethod
    def from_document(cls, doc: Mapping[str, Any] | None) -> FileVariant:
        doc = doc or {}
        return cls(
            ct=doc.get("ct", ""),
            wd=int(doc.get("wd", 0)),
            ht=int(doc.get("ht", 0)),
            lks=doc.get("lks", ""),
            bln=doc.get("bln", ""),
            cnt=doc.get("cnt", ""),
            url=doc.get("url", ""),
            role=doc.get("role", ""),
        )


@dataclass
class FileReference:
    oid: ObjectId | None = None
    src_set: list[FileVariant] = field(default_factory=list)

    def is_zero(self) -> bool:
        return (self.oid is None or self.oid == NIL_OBJECT_ID) and not self.src_set

    def to_document(self) -> dict[str, Any]:
        return _omit_empty(
            [
                ("_id", self.oid),
                ("srcSet", [variant.to_document() for variant in self.src_set]),
            ]
        )

    @classmethod
    def from_document(cls, doc: Mapping[str, Any] | None) -> FileReference:
        doc = doc or {}
        return cls(
            oid=doc.get("_id"),
            src_set=[FileVariant.from_document(v) for v in doc.get("srcSet") or []],
        )