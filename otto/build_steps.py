from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from .compose import compose_configure_args, compose_env, infer_format
from .config import Package, Profile
from .errors import FilesystemError, OttoError
from .lib.archive import extract_archive, locate_source_root
from .lib.command import run_cmd
from .lib.net import fetch_archive

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunOptions:
    out_dir: Path
    profile: Optional[str] = None
    resume: Optional[str] = None
    concurrency: int = 2
    inherit_env: bool = False

    @property
    def make_concurrency_flag(self) -> str:
        return f"-j{self.concurrency}"


@dataclass(frozen=True)
class ProfileCtx:
    options: RunOptions
    profile: Profile

    @property
    def src_dir(self) -> Path:
        return self.options.out_dir / "src" / self.profile.name

    @property
    def prefix(self) -> Path:
        return self.options.out_dir / self.profile.name


@dataclass(frozen=True)
class PackageCtx:
    profile_ctx: ProfileCtx
    package: Package

    @property
    def options(self) -> RunOptions:
        return self.profile_ctx.options

    @property
    def profile(self) -> Profile:
        return self.profile_ctx.profile

    @property
    def prefix(self) -> Path:
        return self.profile_ctx.prefix

    @property
    def pkg_src_dir(self) -> Path:
        return self.profile_ctx.src_dir / self.package.name

    @property
    def label(self) -> str:
        return f"{self.profile.name}/{self.package.name}"


@dataclass
class PackageState:
    """What each step hands to the next one."""

    stage: Optional[str] = None
    env: Dict[str, str] = field(default_factory=dict)
    archive_format: Optional[str] = None
    archive_path: Optional[Path] = None
    source_root: Optional[Path] = None


def _require(value, what: str):
    if value is None:
        raise RuntimeError(f"{what} missing; run the earlier steps first")
    return value


def make_dirs(path: Path, *, what: str) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(f"While creating {what} {path}: {e}") from e


def step_00_prepare(*, ctx: PackageCtx, state: PackageState) -> None:
    logger.info("Preparing %s", ctx.package.name)
    make_dirs(ctx.pkg_src_dir, what="package source directory")
    base = os.environ if ctx.options.inherit_env else None
    state.env = compose_env(ctx.profile, str(ctx.prefix), base=base)


def step_01_download(*, ctx: PackageCtx, state: PackageState) -> None:
    logger.info("Downloading from %s", ctx.package.sources)
    fmt = infer_format(ctx.package)
    archive = ctx.pkg_src_dir / f"{ctx.package.name}.{fmt}"
    fetch_archive(ctx.package.sources, archive)
    state.archive_format = fmt
    state.archive_path = archive


def step_02_extract(*, ctx: PackageCtx, state: PackageState) -> None:
    logger.info("Extracting...")
    extract_archive(
        _require(state.archive_path, "archive path"),
        _require(state.archive_format, "archive format"),
        ctx.pkg_src_dir,
        env=state.env,
    )


def step_03_locate(*, ctx: PackageCtx, state: PackageState) -> None:
    state.source_root = locate_source_root(ctx.pkg_src_dir)


def step_04_configure(*, ctx: PackageCtx, state: PackageState) -> None:
    logger.info("Configuring...")
    args = compose_configure_args(ctx.profile, ctx.package, str(ctx.prefix))
    src = _require(state.source_root, "source root")
    run_cmd(["./configure", *args], env=state.env, cwd=str(src))


def step_05_build(*, ctx: PackageCtx, state: PackageState) -> None:
    logger.info("Building...")
    src = _require(state.source_root, "source root")
    run_cmd(["make", ctx.options.make_concurrency_flag], env=state.env, cwd=str(src))


def step_06_install(*, ctx: PackageCtx, state: PackageState) -> None:
    logger.info("Installing...")
    src = _require(state.source_root, "source root")
    run_cmd(["make", "install"], env=state.env, cwd=str(src))


Step = Callable[..., None]

ALL_STEPS: List[Tuple[str, Step]] = [
    ("00_prepare", step_00_prepare),
    ("01_download", step_01_download),
    ("02_extract", step_02_extract),
    ("03_locate", step_03_locate),
    ("04_configure", step_04_configure),
    ("05_build", step_05_build),
    ("06_install", step_06_install),
]


def build_package(ctx: PackageCtx) -> PackageState:
    """Run every step for one package; the first error aborts and propagates."""

    state = PackageState()
    for step_id, fn in ALL_STEPS:
        state.stage = step_id
        try:
            fn(ctx=ctx, state=state)
        except OttoError:
            logger.error("[%s] failed during %s", ctx.label, step_id)
            raise
    state.stage = "done"
    logger.info("[%s] done", ctx.label)
    return state
