"""User roles and the per-app role definitions they carry."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Any, Iterable, Mapping

logger = logging.getLogger(__name__)

WILDCARD = "*"


class MatchType(IntEnum):
    NONE = 0
    APP_ID = 1
    APP_TYPE = 2
    ROLE = 3


@dataclass(frozen=True)
class AppRoleDefinition:
    app_id: str
    app_type: str = WILDCARD
    app_roles: str = WILDCARD

    def match_type(self, app_id: str, app_type: str, role: str) -> MatchType:
        """Return how deep the definition matches the given app, type and role."""
        if self.app_id != WILDCARD and app_id != self.app_id:
            return MatchType.NONE
        if self.app_type != WILDCARD and app_type != self.app_type:
            return MatchType.APP_ID
        if self.app_roles != WILDCARD and role != self.app_roles:
            return MatchType.APP_TYPE
        return MatchType.ROLE

    def __str__(self) -> str:
        return f"{self.app_id}:{self.app_type}:{self.app_roles}"


class AppRoleDefinitionSet(list):
    """An ordered list of app role definitions, written as 'id:type:role;...'."""

    def is_zero(self) -> bool:
        return len(self) == 0

    def __str__(self) -> str:
        return ";".join(str(definition) for definition in self)

    def match_type_and_index(self, app_id: str, app_type: str, role: str) -> tuple[MatchType, int]:
        """Return the best match and the index of the first definition reaching it."""
        best, best_index = MatchType.NONE, -1
        for index, definition in enumerate(self):
            match = definition.match_type(app_id, app_type, role)
            if match > best:
                best, best_index = match, index
        return best, best_index

    def without(self, index: int) -> AppRoleDefinitionSet:
        """Return the set with the definition at index removed.

        An index outside the set leaves it as it is. When the index is the
        second to last, the last definition is dropped along with it.
        """
        if index < 0 or index >= len(self):
            return self
        if len(self) == 1:
            return AppRoleDefinitionSet()
        sliced = AppRoleDefinitionSet(self[:index])
        if index < len(self) - 2:
            sliced.extend(self[index + 1 :])
        return sliced

    def match_role(self, app_id: str, app_type: str, role: str) -> bool:
        match, _ = self.match_type_and_index(app_id, app_type, role)
        return match == MatchType.ROLE or (match == MatchType.APP_TYPE and role == "any")


@dataclass(frozen=True)
class UserRole:
    domain: str = ""
    site: str = ""
    apps: str = ""

    def is_zero(self) -> bool:
        return self.domain == "" and self.site == "" and self.apps == ""

    def match_domain_and_site(self, domain: str, site: str) -> bool:
        if self.domain != WILDCARD and domain != self.domain:
            return False
        if self.site != WILDCARD and site != self.site:
            return False
        return True

    def parse_apps(self) -> AppRoleDefinitionSet:
        """Parse the apps string; raise ValueError on a malformed definition."""
        result = AppRoleDefinitionSet()
        if self.apps == "":
            return result
        for app in self.apps.split(";"):
            parts = app.split(":")
            if len(parts) > 3:
                raise ValueError(f"invalid app definition: {app}")
            result.append(AppRoleDefinition(*parts))
        return result

    def to_document(self) -> dict[str, Any]:
        pairs = (("domain", self.domain), ("site", self.site), ("apps", self.apps))
        return {key: value for key, value in pairs if value}

    @classmethod
    def from_document(cls, doc: Mapping[str, Any] | None) -> UserRole:
        doc = doc or {}
        return cls(domain=doc.get("domain", ""), site=doc.get("site", ""), apps=doc.get("apps", ""))


def _safe_parse(role: UserRole, context: str) -> AppRoleDefinitionSet:
    try:
        return role.parse_apps()
    except ValueError:
        logger.exception(context)
        return AppRoleDefinitionSet()


class UserRoleList(list):
    """The roles of a user; changes return a new list and leave this one alone."""

    def __init__(self, roles: Iterable[UserRole] = ()) -> None:
        super().__init__(roles)

    def _find(self, domain: str, site: str) -> int:
        return next(
            (i for i, role in enumerate(self) if role.match_domain_and_site(domain, site)), -1
        )

    def with_role(
        self, domain: str, site: str, app_id: str, app_type: str, app_role: str
    ) -> UserRoleList:
        """Return a copy granting the app role in the given domain and site."""
        new_list = UserRoleList(self)
        new_role = UserRole(domain=domain, site=site, apps=f"{app_id}:{app_type}:{app_role}")

        found = new_list._find(domain, site)
        if found < 0:
            new_list.append(new_role)
            return new_list

        app_roles = _safe_parse(new_list[found], "user::set-role")
        if app_roles.is_zero():
            new_list.append(new_role)
            return new_list

        match, index = app_roles.match_type_and_index(app_id, app_type, app_role)
        if match == MatchType.NONE:
            app_roles.append(AppRoleDefinition(app_id, app_type, app_role))
        elif match == MatchType.APP_ID:
            app_roles[index] = replace(app_roles[index], app_type=WILDCARD, app_roles=app_role)
        elif match == MatchType.APP_TYPE:
            app_roles[index] = replace(app_roles[index], app_roles=app_role)

        new_list[found] = replace(new_list[found], apps=str(app_roles))
        return new_list

    def without_role(
        self, domain: str, site: str, app_id: str, app_type: str, app_role: str
    ) -> UserRoleList:
        """Return a copy with the matching app role removed."""
        context = "user::del-role"
        new_list = UserRoleList(self)

        def not_found() -> UserRoleList:
            logger.warning(
                "%s - roles not found: domain=%s site=%s app-id=%s app-type=%s app-role=%s",
                context, domain, site, app_id, app_type, app_role,
            )
            return new_list

        found = new_list._find(domain, site)
        if found < 0:
            return not_found()

        app_roles = _safe_parse(new_list[found], context)
        if app_roles.is_zero():
            return not_found()

        match, index = app_roles.match_type_and_index(app_id, app_type, app_role)
        if match != MatchType.ROLE:
            return not_found()

        remaining = app_roles.without(index)
        if remaining:
            new_list[found] = replace(new_list[found], apps=str(remaining))
        return new_list