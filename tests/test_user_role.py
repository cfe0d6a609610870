import pytest

from opemstore.user_role import (
    AppRoleDefinition,
    AppRoleDefinitionSet,
    MatchType,
    UserRole,
    UserRoleList,
)


def test_parse_apps_fills_wildcards():
    role = UserRole(domain="cvf", site="*", apps="app-home;app-sys:admin;app-x:www:editor")
    parsed = role.parse_apps()
    assert list(parsed) == [
        AppRoleDefinition("app-home", "*", "*"),
        AppRoleDefinition("app-sys", "admin", "*"),
        AppRoleDefinition("app-x", "www", "editor"),
    ]
    assert str(parsed) == "app-home:*:*;app-sys:admin:*;app-x:www:editor"


def test_parse_apps_empty_and_invalid():
    assert UserRole(apps="").parse_apps().is_zero()
    with pytest.raises(ValueError, match="invalid app definition"):
        UserRole(apps="a:b:c:d").parse_apps()


def test_match_type_levels():
    definition = AppRoleDefinition("app-home", "admin", "editor")
    assert definition.match_type("app-sys", "admin", "editor") is MatchType.NONE
    assert definition.match_type("app-home", "www", "editor") is MatchType.APP_ID
    assert definition.match_type("app-home", "admin", "viewer") is MatchType.APP_TYPE
    assert definition.match_type("app-home", "admin", "editor") is MatchType.ROLE
    assert AppRoleDefinition("*").match_type("x", "y", "z") is MatchType.ROLE


def test_match_type_and_index_prefers_first_best():
    roles = UserRole(apps="app-sys:a:b;app-home:admin:x;app-home:admin:editor").parse_apps()
    assert roles.match_type_and_index("app-home", "admin", "editor") == (MatchType.ROLE, 2)
    assert roles.match_type_and_index("app-home", "admin", "other") == (MatchType.APP_TYPE, 1)
    assert roles.match_type_and_index("nope", "a", "b") == (MatchType.NONE, -1)


def test_match_role_any():
    roles = UserRole(apps="app-home:admin:editor").parse_apps()
    assert roles.match_role("app-home", "admin", "editor")
    assert roles.match_role("app-home", "admin", "any")
    assert not roles.match_role("app-home", "admin", "viewer")
    assert not roles.match_role("app-home", "www", "any")


def test_without_index_bounds_and_single():
    roles = UserRole(apps="a:b:c;d:e:f;g:h:i").parse_apps()
    assert roles.without(-1) == roles
    assert roles.without(3) == roles
    assert roles.without(0) == roles[1:]
    assert AppRoleDefinitionSet([AppRoleDefinition("a")]).without(0).is_zero()


def test_match_domain_and_site():
    role = UserRole(domain="cvf", site="*")
    assert role.match_domain_and_site("cvf", "anything")
    assert not role.match_domain_and_site("other", "anything")
    assert UserRole(domain="*", site="s1").match_domain_and_site("x", "s1")


def test_user_role_document_round_trip():
    role = UserRole(domain="cvf", apps="app-home:*:*")
    doc = role.to_document()
    assert set(doc) == {"domain", "apps"}
    assert UserRole.from_document(doc) == role
    assert UserRole().is_zero()


def test_with_role_on_empty_list():
    roles = UserRoleList()
    result = roles.with_role("cvf", "s1", "app-home", "admin", "editor")
    assert result == [UserRole("cvf", "s1", "app-home:admin:editor")]
    assert roles == []


@pytest.mark.parametrize(
    "existing,expected",
    [
        ("app-home:*:*", "app-home:*:*"),
        ("app-home:www:viewer", "app-home:*:editor"),
        ("app-home:admin:viewer", "app-home:admin:editor"),
        ("app-sys:admin:viewer", "app-sys:admin:viewer;app-home:admin:editor"),
    ],
)
def test_with_role_merges(existing, expected):
    original = UserRoleList([UserRole("cvf", "*", existing)])
    result = original.with_role("cvf", "s1", "app-home", "admin", "editor")
    assert result == [UserRole("cvf", "*", expected)]
    assert original[0].apps == existing


def test_with_role_on_empty_apps_appends():
    original = UserRoleList([UserRole("cvf", "*", "")])
    result = original.with_role("cvf", "s1", "app-home", "admin", "editor")
    assert len(result) == 2
    assert result[1] == UserRole("cvf", "s1", "app-home:admin:editor")


def test_with_role_on_malformed_apps_appends():
    original = UserRoleList([UserRole("cvf", "*", "a:b:c:d")])
    result = original.with_role("cvf", "s1", "app-home", "admin", "editor")
    assert result[0] == original[0]
    assert result[1].apps == "app-home:admin:editor"


def test_without_role_removes_match():
    original = UserRoleList([UserRole("cvf", "*", "app-home:admin:editor;app-sys:a:b;app-x:c:d")])
    result = original.without_role("cvf", "s1", "app-home", "admin", "editor")
    assert result[0].apps == "app-sys:a:b;app-x:c:d"
    assert original[0].apps == "app-home:admin:editor;app-sys:a:b;app-x:c:d"


def test_without_role_keeps_last_remaining_entry():
    original = UserRoleList([UserRole("cvf", "*", "app-home:admin:editor")])
    result = original.without_role("cvf", "s1", "app-home", "admin", "editor")
    assert result == original


@pytest.mark.parametrize(
    "domain,app_id,app_type,app_role",
    [
        ("other", "app-home", "admin", "editor"),
        ("cvf", "app-sys", "admin", "editor"),
        ("cvf", "app-home", "www", "editor"),
        ("cvf", "app-home", "admin", "viewer"),
    ],
)
def test_without_role_not_found_returns_copy(domain, app_id, app_type, app_role):
    original = UserRoleList([UserRole("cvf", "*", "app-home:admin:editor;app-sys:a:b")])
    result = original.without_role(domain, "s1", app_id, app_type, app_role)
    assert result == original
    assert result is not original