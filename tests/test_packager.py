from __future__ import annotations

import shutil
import sys
from dataclasses import replace
from pathlib import Path

import pytest

from conftest import DEFAULT, commit_all, git
from git_packager.core.errors import BehindTarget, NoChanges, OutputConflict, SourceUnavailable
from git_packager.packaging import PackageOptions, Packager, purge_folder

FOO = f"{DEFAULT}/classes/Foo.cls"
ACCOUNT = f"{DEFAULT}/objects/Account"


def _feature_with_change_and_deletion(repo: Path) -> None:
    (repo / FOO).write_text("public class Foo { Integer y; }\n", encoding="utf-8")
    (repo / f"{DEFAULT}/classes/Bar.cls").unlink()
    (repo / f"{DEFAULT}/classes/Bar.cls-meta.xml").unlink()
    commit_all(repo, "feature work")


def test_package_changes_and_destructive_changes(feature_branch, config, tmp_path):
    _feature_with_change_and_deletion(feature_branch)
    out = tmp_path / "deploy"

    result = Packager(config).run(PackageOptions(output_dir=str(out), target="master", source="feature"))

    assert result.output_dir == out
    package_xml = (out / "package.xml").read_text(encoding="utf-8")
    assert f"<member>{FOO}</member>" in package_xml
    assert f"<member>{FOO}-meta.xml</member>" in package_xml
    assert "Bar.cls" not in package_xml
    assert "Foo { Integer y; }" in (out / FOO).read_text(encoding="utf-8")

    destructive = (out / "destructiveChanges.xml").read_text(encoding="utf-8")
    assert f"<member>{DEFAULT}/classes/Bar.cls</member>" in destructive
    assert result.destructive_changes == out / "destructiveChanges.xml"
    assert result.to_dict()["removed"] == [f"{DEFAULT}/classes/Bar.cls", f"{DEFAULT}/classes/Bar.cls-meta.xml"]


def test_relative_output_dir_is_under_project_root(feature_branch, config):
    _feature_with_change_and_deletion(feature_branch)

    result = Packager(config).run(PackageOptions(output_dir="deployments/x", source="feature"))

    assert result.output_dir == config.project.root / "deployments" / "x"
    assert (result.output_dir / "package.xml").is_file()


def test_staging_trees_are_cleaned_up(feature_branch, config, tmp_path):
    _feature_with_change_and_deletion(feature_branch)

    result = Packager(config).run(PackageOptions(output_dir=str(tmp_path / "out"), source="feature"))

    assert result.staging
    assert all(not s.root.exists() for s in result.staging)


def test_nodelete_skips_destructive_changes(feature_branch, config, tmp_path):
    _feature_with_change_and_deletion(feature_branch)
    out = tmp_path / "deploy"

    result = Packager(config).run(PackageOptions(output_dir=str(out), source="feature", no_delete=True))

    assert result.destructive_changes is None
    assert not (out / "destructiveChanges.xml").exists()
    assert (out / "package.xml").is_file()


def test_only_deletions_write_destructive_changes_only(feature_branch, config, tmp_path):
    shutil.rmtree(feature_branch / ACCOUNT)
    commit_all(feature_branch, "drop Account")
    out = tmp_path / "deploy"

    result = Packager(config).run(PackageOptions(output_dir=str(out), source="feature"))

    assert result.change_set.changed == frozenset()
    assert (out / "destructiveChanges.xml").is_file()
    assert not (out / "package.xml").exists()


def test_nothing_under_source_roots_is_no_changes(feature_branch, config, tmp_path):
    (feature_branch / "docs/notes.md").write_text("edited\n", encoding="utf-8")
    commit_all(feature_branch, "docs only")

    with pytest.raises(NoChanges):
        Packager(config).run(PackageOptions(output_dir=str(tmp_path / "out"), source="feature"))
    assert not (tmp_path / "out").exists()


def test_only_deletions_with_nodelete_is_no_changes(feature_branch, config, tmp_path):
    (feature_branch / f"{DEFAULT}/classes/Bar.cls").unlink()
    commit_all(feature_branch, "drop Bar")

    with pytest.raises(NoChanges):
        Packager(config).run(PackageOptions(output_dir=str(tmp_path / "out"), source="feature", no_delete=True))


def test_behind_target_is_fatal_unless_forced(feature_branch, config, tmp_path):
    _feature_with_change_and_deletion(feature_branch)
    git(feature_branch, "checkout", "master")
    (feature_branch / "docs/notes.md").write_text("master moved on\n", encoding="utf-8")
    commit_all(feature_branch, "master commit")

    packager = Packager(config)
    with pytest.raises(BehindTarget) as exc:
        packager.run(PackageOptions(output_dir=str(tmp_path / "out"), source="feature"))
    assert exc.value.behind == 1

    result = packager.run(PackageOptions(output_dir=str(tmp_path / "out"), source="feature", force=True))
    assert result.behind == 1
    assert (tmp_path / "out" / "package.xml").is_file()


def test_working_copy_is_packaged_when_no_source(sfdx_repo, config, make_change, tmp_path):
    make_change(FOO, "public class Foo { /* wip */ }\n")

    result = Packager(config).run(PackageOptions(output_dir=str(tmp_path / "out")))

    assert "wip" in (tmp_path / "out" / FOO).read_text(encoding="utf-8")
    assert result.destructive_changes is None


@pytest.mark.parametrize("choice", ["exit", "", "nope"])
def test_existing_output_dir_exit(feature_branch, config, tmp_path, choice):
    _feature_with_change_and_deletion(feature_branch)
    out = tmp_path / "out"
    out.mkdir()

    with pytest.raises(OutputConflict):
        Packager(config).run(PackageOptions(output_dir=str(out), source="feature"), on_conflict=lambda _p: choice)


def test_existing_output_dir_without_resolver_is_a_conflict(feature_branch, config, tmp_path):
    _feature_with_change_and_deletion(feature_branch)
    out = tmp_path / "out"
    out.mkdir()

    with pytest.raises(OutputConflict):
        Packager(config).run(PackageOptions(output_dir=str(out), source="feature"))


def test_existing_output_dir_merge_and_purge(feature_branch, config, tmp_path):
    _feature_with_change_and_deletion(feature_branch)
    out = tmp_path / "out"
    out.mkdir()
    (out / "old.txt").write_text("old\n", encoding="utf-8")
    packager = Packager(config)
    options = PackageOptions(output_dir=str(out), source="feature")

    packager.run(options, on_conflict=lambda _p: "MERGE")
    assert (out / "old.txt").exists()

    packager.run(options, on_conflict=lambda _p: " purge ")
    assert not (out / "old.txt").exists()
    assert (out / "package.xml").is_file()


def test_purge_flag_skips_the_question(feature_branch, config, tmp_path):
    _feature_with_change_and_deletion(feature_branch)
    out = tmp_path / "out"
    (out / "nested").mkdir(parents=True)
    (out / "nested" / "old.txt").write_text("old\n", encoding="utf-8")

    def _never(_p):
        raise AssertionError("should not ask")

    Packager(config).run(PackageOptions(output_dir=str(out), source="feature", purge=True), on_conflict=_never)

    assert not (out / "nested").exists()


def test_output_path_that_is_a_file(feature_branch, config, tmp_path):
    _feature_with_change_and_deletion(feature_branch)
    out = tmp_path / "out"
    out.write_text("x", encoding="utf-8")

    with pytest.raises(OutputConflict):
        Packager(config).run(PackageOptions(output_dir=str(out), source="feature", purge=True))


def test_failed_purge_is_an_output_conflict(feature_branch, config, tmp_path, monkeypatch):
    _feature_with_change_and_deletion(feature_branch)
    out = tmp_path / "out"
    out.mkdir()

    import git_packager.packaging.packager as packager_mod

    def _boom(_folder):
        raise PermissionError("denied")

    monkeypatch.setattr(packager_mod, "purge_folder", _boom)

    with pytest.raises(OutputConflict, match="Failed to purge"):
        Packager(config).run(PackageOptions(output_dir=str(out), source="feature", purge=True))


def test_converter_failure_is_fatal(feature_branch, config, tmp_path):
    _feature_with_change_and_deletion(feature_branch)
    failing = replace(config, converter_command=(sys.executable, "-c", "import sys; sys.exit(3)"))

    with pytest.raises(SourceUnavailable, match="exit 3"):
        Packager(failing).run(PackageOptions(output_dir=str(tmp_path / "out"), source="feature"))


def test_purge_folder_keeps_the_folder(tmp_path):
    (tmp_path / "a" / "b").mkdir(parents=True)
    (tmp_path / "a" / "b" / "c.txt").write_text("c", encoding="utf-8")
    (tmp_path / "d.txt").write_text("d", encoding="utf-8")

    purge_folder(tmp_path)

    assert tmp_path.is_dir()
    assert list(tmp_path.iterdir()) == []
