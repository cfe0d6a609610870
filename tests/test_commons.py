from datetime import datetime

import pytest
from bson import ObjectId

from opemstore.commons import (
    NIL_OBJECT_ID,
    App,
    AppId,
    AppObjType,
    FileReference,
    FileVariant,
    SysInfo,
    is_app_id_in_catalog,
)


def test_sysinfo_zero_and_empty_document():
    info = SysInfo()
    assert info.is_zero()
    assert info.to_document() == {}


def test_sysinfo_round_trip():
    created = datetime(2024, 1, 2, 3, 4, 5)
    info = SysInfo(status="active", createdat=created)
    assert not info.is_zero()
    doc = info.to_document()
    assert "modifiedat" not in doc
    assert doc["createdat"] == created
    assert SysInfo.from_document(doc) == info


def test_sysinfo_from_none():
    assert SysInfo.from_document(None).is_zero()


def test_app_document_keys():
    app = App(id="app-home", obj_type="app-www", role_required=True)
    doc = app.to_document()
    assert set(doc) == {"id", "objType", "roleRequired"}
    assert doc["objType"] == "app-www"
    assert App.from_document(doc) == app


def test_app_zero():
    assert App().is_zero()
    assert not App(role_required=True).is_zero()
    assert not App(path="/x").is_zero()


def test_app_enum_values_in_documents_and_catalog():
    www = App(id=AppId.HOME.value, obj_type=AppObjType.WWW.value).to_document()
    console = App(id=AppId.SYS.value, obj_type=AppObjType.CONSOLE.value).to_document()
    assert www == {"id": "app-home", "objType": "app-www"}
    assert console == {"id": "app-sys", "objType": "app-admin"}
    assert all(is_app_id_in_catalog(app_id.value) for app_id in AppId)


@pytest.mark.parametrize(
    "name,expected",
    [("app-home", True), ("app-sys", True), ("app-other", False), ("", False)],
)
def test_is_app_id_in_catalog(name, expected):
    assert is_app_id_in_catalog(name) is expected


def test_file_variant_round_trip_and_omission():
    variant = FileVariant(ct="image/png", wd=100, ht=50, url="/img.png")
    doc = variant.to_document()
    assert set(doc) == {"ct", "wd", "ht", "url"}
    assert FileVariant.from_document(doc) == variant
    assert FileVariant().is_zero()
    assert not variant.is_zero()


def test_file_reference_round_trip():
    oid = ObjectId()
    ref = FileReference(oid=oid, src_set=[FileVariant(ct="a"), FileVariant(role="thumb")])
    doc = ref.to_document()
    assert doc["_id"] == oid
    assert len(doc["srcSet"]) == 2
    assert FileReference.from_document(doc) == ref


def test_file_reference_zero_with_nil_oid():
    assert FileReference().is_zero()
    assert FileReference(oid=NIL_OBJECT_ID).is_zero()
    assert FileReference(oid=NIL_OBJECT_ID).to_document() == {}
    assert not FileReference(src_set=[FileVariant(ct="a")]).is_zero()