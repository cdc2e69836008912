from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from .build_steps import PackageCtx, ProfileCtx, RunOptions, build_package, make_dirs
from .config import Config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunResult:
    built: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    skipped_profiles: List[str] = field(default_factory=list)


def run_build(*, config: Config, options: RunOptions) -> RunResult:
    """Build every package under every selected profile, in declared order.

    A profile filter skips whole profiles. A resume name skips each
    profile's packages up to (not including) the named package. Any error
    aborts the run.
    """

    result = RunResult()

    for profile in config.profiles:
        if options.profile and options.profile != profile.name:
            logger.info("Skipping profile %s", profile.name)
            result.skipped_profiles.append(profile.name)
            continue

        logger.info("Dealing with profile %s", profile.name)
        pctx = ProfileCtx(options=options, profile=profile)
        make_dirs(pctx.src_dir, what="source directory")
        make_dirs(pctx.prefix, what="prefix directory")

        skipping = bool(options.resume)

        for package in config.packages:
            ctx = PackageCtx(profile_ctx=pctx, package=package)

            if skipping and package.name == options.resume:
                logger.info("Resuming at %s", package.name)
                skipping = False

            if skipping:
                logger.info("Skipping %s", package.name)
                result.skipped.append(ctx.label)
                continue

            build_package(ctx)
            result.built.append(ctx.label)

        if skipping:
            logger.warning(
                "Resume point %s not found in packages; nothing built for profile %s",
                options.resume,
                profile.name,
            )

    logger.info("All done!")
    return result
