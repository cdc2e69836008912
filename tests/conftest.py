from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import pytest

import otto.build_steps as build_steps
import otto.lib.archive as archive
from otto.errors import SubprocessError
from otto.lib.command import CmdResult


@dataclass
class Call:
    argv: List[str]
    env: Dict[str, str]
    cwd: Optional[str]


class FakeRunner:
    """Records commands instead of running them.

    ``tar`` is simulated by creating ``top_dirs`` (default: ``<package>-1.0``)
    under the ``-C`` destination.
    """

    def __init__(self) -> None:
        self.calls: List[Call] = []
        self.top_dirs: Optional[List[str]] = None
        self.fail_on: Optional[str] = None

    def __call__(self, argv, *, env, cwd=None, check=True) -> CmdResult:
        argv = list(argv)
        self.calls.append(Call(argv=argv, env=dict(env), cwd=cwd))

        if self.fail_on is not None and argv[0] == self.fail_on:
            raise SubprocessError(f"Command failed (2): {argv[0]}", argv=argv, returncode=2)

        if argv[0] == "tar":
            dest = Path(argv[argv.index("-C") + 1])
            names = self.top_dirs if self.top_dirs is not None else [f"{dest.name}-1.0"]
            for name in names:
                (dest / name).mkdir(exist_ok=True)

        return CmdResult(argv=argv, returncode=0)

    def programs(self) -> List[str]:
        return [c.argv[0] for c in self.calls]

    def calls_for(self, program: str) -> List[Call]:
        return [c for c in self.calls if c.argv[0] == program]


class FakeFetcher:
    def __init__(self) -> None:
        self.fetched: List[tuple] = []

    def __call__(self, url: str, dest: Path, *, timeout=None) -> int:
        self.fetched.append((url, dest))
        dest.write_bytes(b"not really a tarball")
        return 20


@dataclass
class Fakes:
    runner: FakeRunner
    fetcher: FakeFetcher


@pytest.fixture
def fakes(monkeypatch: pytest.MonkeyPatch) -> Fakes:
    runner = FakeRunner()
    fetcher = FakeFetcher()
    monkeypatch.setattr(build_steps, "run_cmd", runner)
    monkeypatch.setattr(archive, "run_cmd", runner)
    monkeypatch.setattr(build_steps, "fetch_archive", fetcher)
    return Fakes(runner=runner, fetcher=fetcher)
