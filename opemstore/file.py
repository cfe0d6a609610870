"""Stored files: the model, its filter and its update documents."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from bson import ObjectId
from bson.errors import InvalidId

from opemstore.commons import NIL_OBJECT_ID, FileReference, FileVariant, SysInfo
from opemstore.query import Criteria, Filter, UnsetMode, UpdateDocument, resolve_unset_modes

logger = logging.getLogger(__name__)

OID_FIELD = "_id"
FN_FIELD = "fn"
DESCR_FIELD = "descr"
ROLE_FIELD = "role"
ENT_REFS_FIELD = "entRefs"
ENT_REFS_I_FIELD = "entRefs.%d"
METADATA_FIELD = "metadata"
VRNTS_FIELD = "vrnts"
VRNTS_I_FIELD = "vrnts.%d"
SYS_INFO_FIELD = "sysInfo"
SYS_INFO_STATUS_FIELD = "sysInfo.status"
SYS_INFO_CREATEDAT_FIELD = "sysInfo.createdat"
SYS_INFO_MODIFIEDAT_FIELD = "sysInfo.modifiedat"

_UPDATE_FIELDS = ("oid", "fn", "descr", "role", "ent_refs", "metadata", "vrnts", "sys_info")


def _has_oid(oid: ObjectId | None) -> bool:
    return oid is not None and oid != NIL_OBJECT_ID


@dataclass
class EntRefStruct:
    """A reference from a file to the entity it belongs to."""

    dom: str = ""
    ns: str = ""
    ent_type: str = ""
    ent_id: str = ""

    def is_zero(self) -> bool:
        return self.dom == "" and self.ns == "" and self.ent_type == "" and self.ent_id == ""

    def to_document(self) -> dict[str, Any]:
        pairs = (
            ("dom", self.dom),
            ("ns", self.ns),
            ("entType", self.ent_type),
            ("entId", self.ent_id),
        )
        return {key: value for key, value in pairs if value}

    @classmethod
    def from_document(cls, doc: Mapping[str, Any] | None) -> EntRefStruct:
        doc = doc or {}
        return cls(
            dom=doc.get("dom", ""),
            ns=doc.get("ns", ""),
            ent_type=doc.get("entType", ""),
            ent_id=doc.get("entId", ""),
        )


@dataclass
class File:
    oid: ObjectId | None = None
    fn: str = ""
    descr: str = ""
    role: str = ""
    ent_refs: list[EntRefStruct] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    vrnts: list[FileVariant] = field(default_factory=list)
    sys_info: SysInfo = field(default_factory=SysInfo)

    def is_zero(self) -> bool:
        return (
            not _has_oid(self.oid)
            and self.fn == ""
            and self.descr == ""
            and self.role == ""
            and not self.ent_refs
            and not self.metadata
            and not self.vrnts
            and self.sys_info.is_zero()
        )

    def file_reference(self) -> FileReference:
        """Return a reference to this file with a trimmed copy of its variants."""
        return FileReference(
            oid=self.oid,
            src_set=[
                FileVariant(ct=v.ct, wd=v.wd, ht=v.ht, bln=v.bln, url=v.url, role=v.role)
                for v in self.vrnts
            ],
        )

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {}
        if _has_oid(self.oid):
            doc[OID_FIELD] = self.oid
        for key, value in ((FN_FIELD, self.fn), (DESCR_FIELD, self.descr), (ROLE_FIELD, self.role)):
            if value:
                doc[key] = value
        if self.ent_refs:
            doc[ENT_REFS_FIELD] = [ref.to_document() for ref in self.ent_refs]
        if self.metadata:
            doc[METADATA_FIELD] = dict(self.metadata)
        if self.vrnts:
            doc[VRNTS_FIELD] = [variant.to_document() for variant in self.vrnts]
        if not self.sys_info.is_zero():
            doc[SYS_INFO_FIELD] = self.sys_info.to_document()
        return doc

    @classmethod
    def from_document(cls, doc: Mapping[str, Any] | None) -> File:
        doc = doc or {}
        return cls(
            oid=doc.get(OID_FIELD),
            fn=doc.get(FN_FIELD, ""),
            descr=doc.get(DESCR_FIELD, ""),
            role=doc.get(ROLE_FIELD, ""),
            ent_refs=[EntRefStruct.from_document(r) for r in doc.get(ENT_REFS_FIELD) or []],
            metadata=dict(doc.get(METADATA_FIELD) or {}),
            vrnts=[FileVariant.from_document(v) for v in doc.get(VRNTS_FIELD) or []],
            sys_info=SysInfo.from_document(doc.get(SYS_INFO_FIELD)),
        )


class FileCriteria(Criteria):
    def and_oid_eq_to(self, oid: ObjectId | None) -> FileCriteria:
        return self.and_eq(OID_FIELD, oid)

    def and_oid_in(self, oids: Iterable[ObjectId] | None) -> FileCriteria:
        return self.and_in(OID_FIELD, oids)

    def and_hex_oid_eq_to(self, hex_oid: str) -> FileCriteria:
        """Add an id condition from its hex form; a malformed id is logged and ignored."""
        if not hex_oid:
            return self
        try:
            oid = ObjectId(hex_oid)
        except (InvalidId, TypeError):
            logger.exception("mongo-file::and-hex-oid-eq-to")
            return self
        self.append((OID_FIELD, oid))
        return self


class FileFilter(Filter):
    criteria_class = FileCriteria


class FileUpdateDocument(UpdateDocument):
    def add_to_ent_refs_set(self, ref: EntRefStruct) -> FileUpdateDocument:
        self.add_to_set().add((ENT_REFS_FIELD, ref))
        return self

    def pull_from_ent_refs_set(self, ref: EntRefStruct) -> FileUpdateDocument:
        self.pull().add((ENT_REFS_FIELD, ref))
        return self


def get_update_document(
    obj: File, *, default_mode: UnsetMode = UnsetMode.KEEP_CURRENT, **kwargs: UnsetMode
) -> FileUpdateDocument:
    """Build an update from the file's top fields; empty ones follow their unset mode."""
    modes = resolve_unset_modes(_UPDATE_FIELDS, default_mode, kwargs)
    ud = FileUpdateDocument()
    ud.set_or_unset(FN_FIELD, obj.fn, modes["fn"])
    ud.set_or_unset(DESCR_FIELD, obj.descr, modes["descr"])
    ud.set_or_unset(ROLE_FIELD, obj.role, modes["role"])
    ud.set_or_unset(ENT_REFS_FIELD, obj.ent_refs, modes["ent_refs"])
    ud.set_or_unset(METADATA_FIELD, obj.metadata, modes["metadata"])
    ud.set_or_unset(VRNTS_FIELD, obj.vrnts, modes["vrnts"])
    ud.set_or_unset(SYS_INFO_FIELD, obj.sys_info, modes["sys_info"])
    return ud