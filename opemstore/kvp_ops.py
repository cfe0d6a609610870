"""Lookups of key-value packages by domain, site, name and category."""

from __future__ import annotations

from typing import Any, Iterable

from opemstore.commons import ROOT_DOMAIN, SITE_WILDCARD
from opemstore.key_value_package import (
    NAME_FIELD,
    KeyValuePackage,
    KeyValuePackageFilter,
    scope_type_and_path_from_domain_site,
)


def _filter_by_domain_site_name_categories(
    domain: str, site: str, pkg_name: str, categories: Iterable[str] | None
) -> KeyValuePackageFilter:
    flt = KeyValuePackageFilter()
    criteria = flt.or_().and_name_eq_to(pkg_name).and_category_in(categories)
    if domain == ROOT_DOMAIN:
        criteria.and_scope_eq_to(ROOT_DOMAIN)
    elif site == SITE_WILDCARD:
        criteria.and_scope_in([ROOT_DOMAIN, f"{ROOT_DOMAIN}/{domain}"])
    else:
        criteria.and_scope_in(
            [ROOT_DOMAIN, f"{ROOT_DOMAIN}/{domain}", f"{ROOT_DOMAIN}/{domain}/{site}"]
        )
    return flt


def _scope_type_or_blank(pkg: KeyValuePackage) -> str:
    try:
        return pkg.scope_type()
    except ValueError:
        return ""


def _mark_inherited(pkg: KeyValuePackage, requested_scope_type: str) -> None:
    if _scope_type_or_blank(pkg) != requested_scope_type:
        pkg.inherited = True


def find_by_domain_site_name(
    collection: Any, domain: str, site: str, pkg_name: str
) -> tuple[KeyValuePackage, bool]:
    """Find the most specific package with this name visible from the domain and site.

    Return the package and whether one was found. A package from a wider
    scope than the one asked for is marked as inherited. Raise ValueError
    when two packages have unrelated scopes.
    """
    flt = _filter_by_domain_site_name_categories(domain, site, pkg_name, None)
    best = KeyValuePackage()
    for doc in collection.find(flt.build()):
        candidate = KeyValuePackage.from_document(doc)
        if candidate.is_more_specific_than(best):
            best = candidate

    if best.is_zero():
        return best, False
    requested, _ = scope_type_and_path_from_domain_site(domain, site)
    _mark_inherited(best, requested)
    return best, True


def find_by_domain_site_category_list(
    collection: Any, domain: str, site: str, categories: Iterable[str] | None
) -> list[KeyValuePackage]:
    """List the most specific package of each name in the categories.

    Packages come in descending name order; those from a wider scope than
    the one asked for are marked as inherited.
    """
    requested, _ = scope_type_and_path_from_domain_site(domain, site)
    flt = _filter_by_domain_site_name_categories(domain, site, "", categories)

    result: list[KeyValuePackage] = []
    current = KeyValuePackage()
    for doc in collection.find(flt.build(), sort=[(NAME_FIELD, -1)]):
        candidate = KeyValuePackage.from_document(doc)
        if candidate.name != current.name:
            if not current.is_zero():
                _mark_inherited(current, requested)
                result.append(current)
            current = candidate
        elif candidate.is_more_specific_than(current):
            current = candidate

    if not current.is_zero():
        _mark_inherited(current, requested)
        result.append(current)
    return result