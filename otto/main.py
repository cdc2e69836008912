from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
from typing import Optional

from .build_steps import RunOptions
from .config import load_config
from .engine import RunResult, run_build
from .errors import OttoError
from .logging_utils import LOG_FILE_NAME, configure_logging

logger = logging.getLogger(__name__)


DEFAULT_CONCURRENCY = 2


def run(
    *,
    config_path: str,
    out_dir: str,
    profile: Optional[str] = None,
    resume: Optional[str] = None,
    concurrency: int = DEFAULT_CONCURRENCY,
    log_path: Optional[str] = None,
    inherit_env: bool = False,
) -> RunResult:
    """Load the config and build every selected profile into ``out_dir``."""

    out = Path(os.path.abspath(out_dir))
    configure_logging(log_path=log_path or str(out / LOG_FILE_NAME))

    cfg = load_config(config_path)
    logger.info(
        "Loaded profiles [%s] and packages [%s] from %s",
        ", ".join(cfg.profile_names()),
        ", ".join(cfg.package_names()),
        config_path,
    )

    options = RunOptions(
        out_dir=out,
        profile=profile or None,
        resume=resume or None,
        concurrency=concurrency,
        inherit_env=inherit_env,
    )
    return run_build(config=cfg, options=options)


def _concurrency(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid concurrency level: {value!r}")
    if n < 1:
        raise argparse.ArgumentTypeError("concurrency level must be at least 1")
    return n


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="otto", description="An autotools hater")
    p.add_argument("config", help="Path to JSON config file")
    p.add_argument("outdir", help="Output dir")
    p.add_argument("--profile", default=None, help="Profile to build")
    p.add_argument("--resume", default=None, help="Which package to resume the build at")
    p.add_argument(
        "-j",
        "--concurrency",
        type=_concurrency,
        default=DEFAULT_CONCURRENCY,
        help="The N in -jN to pass to make",
    )
    p.add_argument("--log", default=None, help=f"Path to build log (default: OUTDIR/{LOG_FILE_NAME})")
    p.add_argument(
        "--inherit-env",
        action="store_true",
        help="Pass this process's environment through to build commands",
    )

    args = p.parse_args(argv)

    try:
        run(
            config_path=args.config,
            out_dir=args.outdir,
            profile=args.profile,
            resume=args.resume,
            concurrency=args.concurrency,
            log_path=args.log,
            inherit_env=bool(args.inherit_env),
        )
    except OttoError as e:
        logger.error("Build failed: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
