from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass
from typing import Mapping, Sequence

from ..errors import SubprocessError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int


def _fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def _fmt_env(env: Mapping[str, str]) -> str:
    return " ".join(f"{k}={v}" for k, v in env.items())


def run_cmd(
    argv: Sequence[str],
    *,
    env: Mapping[str, str],
    cwd: str | None = None,
    check: bool = True,
) -> CmdResult:
    """Run a command with consistent logging.

    - The child sees exactly ``env``; nothing is inherited implicitly.
    - stdout/stderr are not captured, so tool output streams live.
    - Success is judged by exit status only.
    """

    argv_list = list(argv)
    logger.info("> %s", _fmt_argv(argv_list))
    logger.info("> env: %s", _fmt_env(env))
    if cwd:
        logger.debug("> cwd: %s", cwd)

    try:
        p = subprocess.run(argv_list, cwd=cwd, env=dict(env))
    except OSError as e:
        raise SubprocessError(
            f"Could not start {_fmt_argv(argv_list)}: {e}", argv=argv_list, returncode=-1
        ) from e

    if check and p.returncode != 0:
        raise SubprocessError(
            f"Command failed ({p.returncode}): {_fmt_argv(argv_list)}",
            argv=argv_list,
            returncode=p.returncode,
        )

    return CmdResult(argv=argv_list, returncode=p.returncode)
