"""Environment and ``./configure`` argument composition.

These are pure functions of a profile, a package and an install prefix; the
build steps call them and pass the results to the process runner.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional

from .config import Package, Profile
from .errors import FormatInferenceError

# Substring checks run in this order.
FORMAT_MARKERS = (
    (".tar.xz", "tar.xz"),
    (".tar.gz", "tar.gz"),
)


def compose_env(
    profile: Profile,
    prefix: str,
    *,
    base: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """Return the environment for every command run for ``profile``.

    ``PREFIX`` is written last so it always reflects the install prefix,
    even when the profile declares its own ``PREFIX``.
    """

    env: Dict[str, str] = dict(base or {})
    env.update(profile.env)
    env.pop("PREFIX", None)
    env["PREFIX"] = prefix
    return env


def compose_configure_args(profile: Profile, package: Package, prefix: str) -> List[str]:
    """``--prefix``, then profile args not blacklisted by the package, then package args."""

    blacklist = package.blacklist
    args = ["--prefix=" + prefix]
    args += [a for a in profile.configure if not blacklist.has(a)]
    args += list(package.configure)
    return args


def infer_format(package: Package) -> str:
    if package.format:
        return package.format
    for marker, fmt in FORMAT_MARKERS:
        if marker in package.sources:
            return fmt
    raise FormatInferenceError(
        f"Could not figure out format of {package.sources}, please specify Format explicitly"
    )
