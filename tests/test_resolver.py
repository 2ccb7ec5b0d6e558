import pytest

from filebox.models.permission import Action, PermissionRecord, Verdict


def resolve(box, target, roles, action=Action.READ):
    return box.resolver.resolve(target, roles, action)


@pytest.mark.parametrize("roles", [set(), {"guest"}, {"admin", "guest"}])
@pytest.mark.parametrize("path", ["/report.pdf", "/a/b/c.txt", "/missing/file"])
def test_no_records_means_allow(box, path, roles):
    assert resolve(box, box.access_file(path, roles), roles) is Verdict.ALLOW


def test_directory_without_record_allows(box):
    assert resolve(box, box.access_dir("/anything"), {"guest"}) is Verdict.ALLOW
    assert resolve(box, box.access_dir("/"), set()) is Verdict.ALLOW


def test_own_record_is_authoritative_over_parent(box):
    box.access_dir("/docs").set_permission(PermissionRecord().allow(Action.READ, "guest"))
    box.access_file("/docs/secret.pdf").set_permission(PermissionRecord().allow(Action.READ, "admin"))

    file = box.access_file("/docs/secret.pdf", {"guest"})
    assert resolve(box, file, file.roles) is Verdict.DENY


def test_own_allow_wins_over_parent_deny(box):
    box.access_dir("/private").set_permission(PermissionRecord().deny(Action.READ, "guest"))
    box.access_file("/private/shared.txt").set_permission(PermissionRecord().allow(Action.READ, "guest"))

    file = box.access_file("/private/shared.txt", {"guest"})
    assert resolve(box, file, file.roles) is Verdict.ALLOW


def test_file_without_record_delegates_to_its_directory(box):
    box.access_dir("/private").set_permission(
        PermissionRecord().allow(Action.READ, "staff").deny(Action.WRITE, "staff")
    )

    for roles in ({"guest"}, {"staff"}, set()):
        for action in (Action.READ, Action.WRITE):
            file = box.access_file("/private/file.txt", roles)
            assert resolve(box, file, roles, action) is resolve(box, file.dir, roles, action)


def test_only_the_immediate_parent_is_consulted(box):
    box.access_dir("/outer").set_permission(PermissionRecord().deny(Action.READ, "guest"))

    file = box.access_file("/outer/inner/file.txt", {"guest"})
    assert resolve(box, file, file.roles) is Verdict.ALLOW


def test_corrupt_file_record_denies(box, base_dir):
    (base_dir / "x.txt.meta").write_text("{broken")
    file = box.access_file("/x.txt", {"admin"})
    assert resolve(box, file, file.roles) is Verdict.DENY


def test_corrupt_dir_record_denies_files_without_own_record(box, base_dir):
    (base_dir / "sub").mkdir()
    (base_dir / "sub" / ".meta").write_text("not json")

    assert resolve(box, box.access_file("/sub/a.txt"), {"admin"}) is Verdict.DENY
    assert resolve(box, box.access_dir("/sub"), {"admin"}) is Verdict.DENY


def test_corrupt_dir_record_is_not_reached_when_file_has_one(box, base_dir):
    (base_dir / "sub").mkdir()
    (base_dir / "sub" / ".meta").write_text("not json")
    box.access_file("/sub/a.txt").set_permission(PermissionRecord().allow(Action.READ, "admin"))

    assert resolve(box, box.access_file("/sub/a.txt"), {"admin"}) is Verdict.ALLOW


def test_new_record_takes_effect_on_next_resolution(box):
    file = box.access_file("/live.txt", {"guest"})
    assert resolve(box, file, file.roles) is Verdict.ALLOW

    file.set_permission(PermissionRecord().allow(Action.READ, "admin"))

    assert resolve(box, file, file.roles) is Verdict.DENY


def test_explicit_deny_all_record(box):
    box.access_file("/locked.txt").set_permission(PermissionRecord().deny(Action.CRUD, "*"))
    assert resolve(box, box.access_file("/locked.txt"), {"admin"}) is Verdict.DENY


@pytest.mark.parametrize(
    "content",
    [
        '{"AllowedRoles": ["admin"]}',
        '{"AllowedRoles": {"read": 5}}',
        '{"AllowedRoles": {"read": "admin"}}',
    ],
)
def test_malformed_legacy_record_denies(box, base_dir, content):
    (base_dir / "x.txt.meta").write_text(content)

    for roles in ({"admin"}, {"a"}, set()):
        assert resolve(box, box.access_file("/x.txt"), roles) is Verdict.DENY


def test_well_formed_legacy_record_is_honoured(box, base_dir):
    (base_dir / "x.txt.meta").write_text('{"AllowedRoles": {"read": ["admin"]}, "DeniedRoles": null}')

    assert resolve(box, box.access_file("/x.txt"), {"admin"}) is Verdict.ALLOW
    assert resolve(box, box.access_file("/x.txt"), {"a"}) is Verdict.DENY


def test_empty_own_record_admits_anonymous_callers(box, base_dir):
    # An empty record is authoritative (the parent is not consulted) and,
    # having no allow lists, denies nobody.
    box.access_dir("/team").set_permission(PermissionRecord().allow(Action.READ, "staff"))
    (base_dir / "team" / "open.txt.meta").write_text("{}")

    assert resolve(box, box.access_file("/team/open.txt"), set()) is Verdict.ALLOW
    assert resolve(box, box.access_file("/team/other.txt"), set()) is Verdict.DENY
