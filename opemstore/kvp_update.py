"""Update documents for key-value packages."""

from __future__ import annotations

from opemstore.key_value_package import (
    CATEGORY_FIELD,
    DESCRIPTION_FIELD,
    INHERITED_FIELD,
    ISSYSTEM_FIELD,
    NAME_FIELD,
    OBJ_TYPE_FIELD,
    PROPERTIES_FIELD,
    SCOPE_FIELD,
    SYS_INFO_FIELD,
    KeyValuePackage,
)
from opemstore.query import UnsetMode, UpdateDocument, resolve_unset_modes

_UPDATE_FIELDS = (
    "oid",
    "name",
    "scope",
    "obj_type",
    "category",
    "issystem",
    "description",
    "inherited",
    "properties",
    "sys_info",
)


def get_update_document(
    obj: KeyValuePackage,
    *,
    default_mode: UnsetMode = UnsetMode.KEEP_CURRENT,
    **kwargs: UnsetMode,
) -> UpdateDocument:
    """Build an update from the package's top fields; empty ones follow their unset mode."""
    modes = resolve_unset_modes(_UPDATE_FIELDS, default_mode, kwargs)
    ud = UpdateDocument()
    ud.set_or_unset(NAME_FIELD, obj.name, modes["name"])
    ud.set_or_unset(SCOPE_FIELD, obj.scope, modes["scope"])
    ud.set_or_unset(OBJ_TYPE_FIELD, obj.obj_type, modes["obj_type"])
    ud.set_or_unset(CATEGORY_FIELD, obj.category, modes["category"])
    ud.set_or_unset(ISSYSTEM_FIELD, obj.issystem, modes["issystem"])
    ud.set_or_unset(DESCRIPTION_FIELD, obj.description, modes["description"])
    ud.set_or_unset(INHERITED_FIELD, obj.inherited, modes["inherited"])
    ud.set_or_unset(PROPERTIES_FIELD, obj.properties, modes["properties"])
    ud.set_or_unset(SYS_INFO_FIELD, obj.sys_info, modes["sys_info"])
    return ud