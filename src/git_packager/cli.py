"""
Command-line entrypoint.

    git-packager -s my-feature -t master -d deployments/my-feature
    git-packager -d deployments/my-working-copy
    git-packager -s HEAD -d deployments/my-working-copy
"""

from __future__ import annotations

import logging
import shlex
from pathlib import Path
from typing import Optional

import typer

from git_packager.core.config import DEFAULT_TARGET_REF, DescriptorPolicy, load_config
from git_packager.core.errors import BehindTarget, NoChanges, PackagerError
from git_packager.core.logging import configure_logging, get_logger
from git_packager.core.logging_tags import CLI
from git_packager.packaging import PackageOptions, Packager

app = typer.Typer(help="Build a deployable package from the git diff of an SFDX project.")
logger = get_logger(__name__)


def _prompt_on_conflict(out: Path) -> str:
    return typer.prompt(
        f"The output path {out} already exists.  How would you like to continue? (purge | merge | exit)"
    )


@app.command()
def package(
    outputdir: str = typer.Option(
        ...,
        "--outputdir",
        "-d",
        help="Directory the deployable package is written to.",
    ),
    sourceref: Optional[str] = typer.Option(
        None,
        "--sourceref",
        "-s",
        help="Revision to package. Defaults to the working tree.",
    ),
    targetref: str = typer.Option(
        DEFAULT_TARGET_REF,
        "--targetref",
        "-t",
        help="Baseline revision the package is diffed against.",
    ),
    ignorewhitespace: bool = typer.Option(
        False,
        "--ignorewhitespace",
        "-w",
        help="Skip files whose changes are whitespace only.",
    ),
    purge: bool = typer.Option(False, "--purge", help="Empty an existing output directory without asking."),
    nodelete: bool = typer.Option(False, "--nodelete", help="Do not generate destructiveChanges.xml."),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Generate the package even if the source is behind the target.",
    ),
    project: Path = typer.Option(Path("."), "--project", help="SFDX project root."),
    converter: str = typer.Option(
        "sfdx force:source:convert",
        "--converter",
        help="Command converting a staged source tree; '-d <dir>' is appended.",
    ),
    descriptor_policy: DescriptorPolicy = typer.Option(
        DescriptorPolicy.ALWAYS,
        "--descriptor-policy",
        help="Count a directory component's descriptor always, or only if it exists.",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds before a git or converter call is killed. Unlimited by default.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
) -> None:
    """
    Diff TARGETREF against SOURCEREF (or the working tree), stage every affected
    metadata component and convert it into OUTPUTDIR.
    """
    configure_logging(level=logging.DEBUG if verbose else logging.INFO)

    try:
        config = load_config(
            project,
            descriptor_policy=descriptor_policy,
            converter_command=tuple(shlex.split(converter)),
            timeout_s=timeout,
        )
        options = PackageOptions(
            output_dir=outputdir,
            target=targetref,
            source=sourceref,
            ignore_whitespace=ignorewhitespace,
            purge=purge,
            no_delete=nodelete,
            force=force,
        )
        result = Packager(config).run(options, on_conflict=_prompt_on_conflict)
    except NoChanges as e:
        logger.warning(f"{CLI} {e}")
        raise typer.Exit(code=1)
    except BehindTarget as e:
        logger.warning(f"{CLI} {e} Use -f to generate package anyways.")
        raise typer.Exit(code=1)
    except PackagerError as e:
        logger.error(f"{CLI} {e}")
        raise typer.Exit(code=1)

    typer.echo(
        f"Packaged {len(result.change_set.changed)} changed and "
        f"{len(result.change_set.removed)} removed path(s) into {result.output_dir}"
    )


def main() -> None:
    app()


if __name__ == "__main__":
    main()
