from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path

import pytest

from git_packager.core.config import PackagerConfig, load_config
from git_packager.core.git_runner import SafeGitRunner

DEFAULT = "force-app/main/default"

# Stand-in for `sfdx force:source:convert`: copies the staged tree into `-d <dir>`
# and writes a package.xml listing every staged file.
FAKE_CONVERTER_SCRIPT = r"""
import os, shutil, sys
dest = sys.argv[sys.argv.index('-d') + 1]
os.makedirs(dest, exist_ok=True)
files = []
for base, _dirs, names in os.walk('.'):
    for name in names:
        rel = os.path.relpath(os.path.join(base, name), '.').replace(os.sep, '/')
        if rel == 'sfdx-project.json':
            continue
        files.append(rel)
        target = os.path.join(dest, rel)
        os.makedirs(os.path.dirname(target), exist_ok=True)
        shutil.copyfile(os.path.join(base, name), target)
with open(os.path.join(dest, 'package.xml'), 'w') as fh:
    fh.write('<Package>\n')
    for rel in sorted(files):
        fh.write('<member>%s</member>\n' % rel)
    fh.write('</Package>\n')
"""
FAKE_CONVERTER = (sys.executable, "-c", FAKE_CONVERTER_SCRIPT)

INITIAL_FILES = {
    "sfdx-project.json": json.dumps({"packageDirectories": [{"path": "force-app", "default": True}]}),
    ".forceignore": "**/jsconfig.json\n# comment\n**/*.dup\n",
    "docs/notes.md": "outside every source root\n",
    f"{DEFAULT}/classes/Foo.cls": "public class Foo {\n    Integer x = 1;\n}\n",
    f"{DEFAULT}/classes/Foo.cls-meta.xml": "<ApexClass><apiVersion>58.0</apiVersion></ApexClass>\n",
    f"{DEFAULT}/classes/Bar.cls": "public class Bar {}\n",
    f"{DEFAULT}/classes/Bar.cls-meta.xml": "<ApexClass><apiVersion>58.0</apiVersion></ApexClass>\n",
    f"{DEFAULT}/objects/Account/Account.object-meta.xml": "<CustomObject/>\n",
    f"{DEFAULT}/objects/Account/fields/X__c.field-meta.xml": "<CustomField><fullName>X__c</fullName></CustomField>\n",
    f"{DEFAULT}/objects/Account/fields/Y__c.field-meta.xml": "<CustomField><fullName>Y__c</fullName></CustomField>\n",
    f"{DEFAULT}/lwc/widget/widget.js": "export default class Widget {}\n",
    f"{DEFAULT}/lwc/widget/widget.html": "<template></template>\n",
    f"{DEFAULT}/lwc/widget/widget.js-meta.xml": "<LightningComponentBundle/>\n",
    f"{DEFAULT}/lwc/widget/jsconfig.json": "{}\n",
    f"{DEFAULT}/staticresources/lib/lib.js": "var lib = 1;\n",
    f"{DEFAULT}/staticresources/lib.resource-meta.xml": "<StaticResource/>\n",
}


def _run(cmd: list[str], cwd: Path) -> str:
    out = subprocess.check_output(
        cmd,
        cwd=str(cwd),
        stderr=subprocess.STDOUT,
        text=True,
        encoding="utf-8",
        errors="replace",
    )
    return out.strip()


def git(repo: Path, *args: str) -> str:
    return _run(["git", *args], repo)


def commit_all(repo: Path, msg: str) -> str:
    git(repo, "add", "-A")
    git(repo, "commit", "-m", msg)
    return git(repo, "rev-parse", "HEAD")


@pytest.fixture()
def sfdx_repo(tmp_path: Path) -> Path:
    """
    A small SFDX project in a fresh git repo, committed on `master`:
      - flat classes with -meta.xml companions
      - a decomposed Account object, an lwc bundle and a folder static resource
      - a .forceignore and a file outside the package directories
    """
    repo = tmp_path / "repo"
    repo.mkdir()

    _run(["git", "init"], repo)
    git(repo, "symbolic-ref", "HEAD", "refs/heads/master")
    git(repo, "config", "user.email", "ci@example.com")
    git(repo, "config", "user.name", "CI")
    git(repo, "config", "core.autocrlf", "false")

    for rel, text in INITIAL_FILES.items():
        p = repo / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(text, encoding="utf-8")

    commit_all(repo, "initial")
    return repo


@pytest.fixture()
def feature_branch(sfdx_repo: Path):
    """
    Helper: switch to a new `feature` branch; changes made afterwards are
    committed on it with commit_all().
    """
    git(sfdx_repo, "checkout", "-b", "feature")
    return sfdx_repo


@pytest.fixture()
def make_change(sfdx_repo: Path):
    """
    Helper: write a file in the working tree.
    """
    def _maker(relpath: str, text: str = "changed\n") -> Path:
        p = sfdx_repo / relpath
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(text, encoding="utf-8")
        return p
    return _maker


@pytest.fixture()
def remove_file(sfdx_repo: Path):
    def _remove(relpath: str) -> None:
        (sfdx_repo / relpath).unlink()
    return _remove


@pytest.fixture()
def config(sfdx_repo: Path) -> PackagerConfig:
    return load_config(sfdx_repo, converter_command=FAKE_CONVERTER)


@pytest.fixture()
def runner(sfdx_repo: Path) -> SafeGitRunner:
    return SafeGitRunner(sfdx_repo)
