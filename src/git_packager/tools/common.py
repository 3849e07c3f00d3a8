from __future__ import annotations

from ..core.config import DEFAULT_CONVERTER_COMMAND, DescriptorPolicy, load_config
from ..packaging import Packager


def make_packager(
    root: str = ".",
    *,
    descriptor_policy: str = DescriptorPolicy.ALWAYS.value,
    converter_command: list[str] | None = None,
    timeout_s: float | None = None,
) -> Packager:
    config = load_config(
        root,
        descriptor_policy=DescriptorPolicy(descriptor_policy),
        converter_command=tuple(converter_command or DEFAULT_CONVERTER_COMMAND),
        timeout_s=timeout_s,
    )
    return Packager(config)
