from __future__ import annotations

from mcp.server.fastmcp import FastMCP

from git_packager.core.logging import configure_logging
from git_packager.tools import classify_changes, package

mcp = FastMCP("git-packager")


@mcp.tool()
def classify_changes_tool(
    root: str = ".",
    target: str = "master",
    source: str | None = None,
    ignore_whitespace: bool = False,
    descriptor_policy: str = "always",
) -> dict:
    return classify_changes(
        root=root,
        target=target,
        source=source,
        ignore_whitespace=ignore_whitespace,
        descriptor_policy=descriptor_policy,
    )


@mcp.tool()
def package_tool(
    output_dir: str,
    root: str = ".",
    target: str = "master",
    source: str | None = None,
    ignore_whitespace: bool = False,
    purge: bool = False,
    no_delete: bool = False,
    force: bool = False,
) -> dict:
    return package(
        output_dir=output_dir,
        root=root,
        target=target,
        source=source,
        ignore_whitespace=ignore_whitespace,
        purge=purge,
        no_delete=no_delete,
        force=force,
    )


def main() -> None:
    configure_logging()
    mcp.run()


if __name__ == "__main__":
    main()
