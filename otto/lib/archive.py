from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Mapping

from ..errors import ConfigError, ExtractionLayoutError
from .command import run_cmd

logger = logging.getLogger(__name__)


# Every supported format maps to its own entry so a new format can use
# different tar flags.
TAR_FLAGS_BY_FORMAT: Dict[str, List[str]] = {
    "tar.gz": ["xf"],
    "tar.xz": ["xf"],
}


def tar_flags_for_format(fmt: str) -> List[str]:
    flags = TAR_FLAGS_BY_FORMAT.get(fmt)
    if flags is None:
        raise ConfigError(f"tar flags: unknown format {fmt}")
    return list(flags)


def extract_archive(archive: Path, fmt: str, dest: Path, *, env: Mapping[str, str]) -> None:
    """Unpack ``archive`` into ``dest`` with the external ``tar``."""

    run_cmd(["tar", *tar_flags_for_format(fmt), str(archive), "-C", str(dest)], env=env)


def locate_source_root(pkg_src_dir: Path) -> Path:
    """Return the single top-level directory an archive extracted to.

    Plain files (the downloaded archive itself) are ignored. Zero or several
    directories is an :class:`ExtractionLayoutError`.
    """

    try:
        dirs = sorted(c for c in pkg_src_dir.iterdir() if c.is_dir())
    except OSError as e:
        raise ExtractionLayoutError(f"While listing {pkg_src_dir}: {e}") from e

    if not dirs:
        raise ExtractionLayoutError(f"No top-level directory found in {pkg_src_dir} after extraction")
    if len(dirs) > 1:
        names = ", ".join(d.name for d in dirs)
        raise ExtractionLayoutError(
            f"Expected exactly one top-level directory in {pkg_src_dir}, found: {names}"
        )

    logger.info("Source root: %s", dirs[0])
    return dirs[0]
