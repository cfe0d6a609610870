# opemstore

Data models and MongoDB query helpers for a multi-domain application store:
domains and their apps, CMS files, user cards, user roles and scoped
key/value packages.

## Installation

```
pip install .
```

The tests need the `test` extra:

```
pip install ".[test]"
pytest
```

## Modules

- `opemstore.commons`: shared value types (`SysInfo`, `App`, `FileVariant`,
  `FileReference`), the `AppObjType` and `AppId` enums, the check
  `is_app_id_in_catalog`, and the constants `ROOT_DOMAIN` (`"root"`) and
  `SITE_WILDCARD` (`"*"`).
- `opemstore.user_role`: `UserRole`, `UserRoleList` and the
  `app-id:app-type:role` grammar (`AppRoleDefinition`,
  `AppRoleDefinitionSet`, `MatchType`). `UserRoleList.with_role` and
  `UserRoleList.without_role` return a new list and leave the original
  untouched. `UserRole.parse_apps` raises `ValueError` on a definition with
  more than three parts.
- `opemstore.query`: the building blocks for documents. `Filter` holds
  groups of `Criteria` joined by `$or`; each group joins its conditions by
  "and". `UpdateDocument` collects `$set`, `$unset`, `$inc`, `$currentDate`,
  `$addToSet` and `$pull` updates. `UnsetMode` decides what happens to empty
  fields: `KEEP_CURRENT` leaves them out, `UNSET_DATA` and
  `SET_DATA_TO_DEFAULT` unset them. `update_with` and
  `get_update_document_from_options` build an update from single fields.
  `DocumentNotFoundError` is raised by lookups that must find a document.
- `opemstore.domain`, `opemstore.file`, `opemstore.usercard`,
  `opemstore.key_value_package`: entity models (`Domain`, `Member`, `File`,
  `EntRefStruct`, `UserCard`, `KeyValuePackage`, `KeyValue`) with
  `to_document` / `from_document`, typed criteria (`DomainCriteria`,
  `FileCriteria`, `UserCardCriteria`, `KeyValuePackageCriteria`) and their
  filters. `domain`, `file` and `usercard` each have a `get_update_document`;
  for key/value packages it lives in `opemstore.kvp_update`.
  `FileUpdateDocument` adds `add_to_ent_refs_set` and
  `pull_from_ent_refs_set`.
- `opemstore.key_value_package` also has the scope helpers
  `scope_type_from`, `scope_type_and_path_from_domain_site` and
  `scope_is_more_specific_than`; the first and last raise `ValueError` for a
  missing, malformed or unrelated scope.
- `opemstore.domain_store`: `find` and `find_by_code` for domains in a
  collection, and an expiring in-process cache (`ExpiringCache`,
  `new_cache`, `new_cache_resolver`, `get_from_cache`). `new_cache` must be
  called before `get_from_cache`, which returns `None` when the resolver
  fails.
- `opemstore.kvp_ops`: `find_by_domain_site_name` and
  `find_by_domain_site_category_list` resolve key/value packages across the
  `root`, `root/<domain>` and `root/<domain>/<site>` scopes, keeping the most
  specific one and marking those from a wider scope as inherited.

The lookup functions take any collection object with pymongo's `find`,
`find_one` and `count_documents` methods.

## Examples

Building a filter:

```python
from opemstore.domain import DomainFilter

flt = DomainFilter()
flt.or_().and_code_eq_to("cvf")
flt.build()          # {"code": "cvf"}
```

Building an update from an object, unsetting empty fields:

```python
from opemstore.domain import Domain, get_update_document
from opemstore.query import UnsetMode

doc = get_update_document(Domain(code="cvf", name="Example"),
                          default_mode=UnsetMode.UNSET_DATA)
doc.build()
```

Granting a role:

```python
from opemstore.user_role import UserRoleList

roles = UserRoleList().with_role("cvf", "*", "app-home", "admin", "editor")
str(roles[0].parse_apps())   # "app-home:admin:editor"
```

Comparing scopes:

```python
from opemstore.key_value_package import scope_is_more_specific_than

scope_is_more_specific_than("cvf/mySite", "cvf")   # True
```

## What it does not do

The package has no command-line program and no server. It does not open
database connections or create collections: the caller passes in a
collection it has set up. Only domains have a cache; there is no cache for
other entities.