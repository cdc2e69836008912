from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)


ARCHIVE_FORMATS = ("tar.gz", "tar.xz")


@dataclass(frozen=True)
class Blacklist:
    prefixes: Tuple[str, ...] = ()

    def has(self, arg: str) -> bool:
        return any(arg.startswith(p) for p in self.prefixes)


@dataclass(frozen=True)
class Profile:
    name: str
    env: Mapping[str, str] = field(default_factory=dict)
    configure: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Package:
    name: str
    sources: str
    format: Optional[str] = None
    configure: Tuple[str, ...] = ()
    configure_blacklist: Tuple[str, ...] = ()

    @property
    def blacklist(self) -> Blacklist:
        return Blacklist(prefixes=self.configure_blacklist)


@dataclass(frozen=True)
class Config:
    profiles: Tuple[Profile, ...] = ()
    packages: Tuple[Package, ...] = ()

    def profile_names(self) -> List[str]:
        return [p.name for p in self.profiles]

    def package_names(self) -> List[str]:
        return [p.name for p in self.packages]


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext in {"yaml", "yml"}:
        return "yaml"
    return "json"


def _get(raw: Mapping[str, Any], key: str) -> Any:
    """Look up ``key`` ignoring case; "ConfigureBlacklist" matches "configureblacklist"."""
    if key in raw:
        return raw[key]
    wanted = key.lower()
    for k, v in raw.items():
        if isinstance(k, str) and k.lower() == wanted:
            return v
    return None


def _str_list(value: Any, *, what: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{what} must be a list of strings")
    return tuple(value)


# Names become path components under the output directory.
RESERVED_PROFILE_NAMES = {"src"}


def _name(raw: Mapping[str, Any], *, kind: str, index: int) -> str:
    name = _get(raw, "Name")
    if not isinstance(name, str) or not name.strip():
        raise ConfigError(f"{kind} #{index} has no Name")
    if name in {".", ".."} or "/" in name or os.sep in name:
        raise ConfigError(f"{kind} name {name!r} is not usable as a directory name")
    if kind == "Profile" and name in RESERVED_PROFILE_NAMES:
        raise ConfigError(f"Profile name {name!r} is reserved for the source tree")
    return name


def _items(raw: Mapping[str, Any], key: str) -> List[Mapping[str, Any]]:
    items = _get(raw, key)
    if items is None:
        return []
    if not isinstance(items, list):
        raise ConfigError(f"{key} must be a list")
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            raise ConfigError(f"{key} #{i} must be a mapping/object")
    return items


def _check_unique(names: List[str], *, kind: str) -> None:
    seen = set()
    for n in names:
        if n in seen:
            raise ConfigError(f"Duplicate {kind} name: {n}")
        seen.add(n)


def parse_profile(raw: Mapping[str, Any], *, index: int = 0) -> Profile:
    name = _name(raw, kind="Profile", index=index)

    env_raw = _get(raw, "Env")
    if env_raw is None:
        env_raw = {}
    if not isinstance(env_raw, dict):
        raise ConfigError(f"Profile {name}: Env must be a mapping/object")
    env: Dict[str, str] = {str(k): "" if v is None else str(v) for k, v in env_raw.items()}

    return Profile(
        name=name,
        env=MappingProxyType(env),
        configure=_str_list(_get(raw, "Configure"), what=f"Profile {name}: Configure"),
    )


def parse_package(raw: Mapping[str, Any], *, index: int = 0) -> Package:
    name = _name(raw, kind="Package", index=index)

    sources = _get(raw, "Sources")
    if not isinstance(sources, str) or not sources.strip():
        raise ConfigError(f"Package {name}: Sources is required")

    fmt = _get(raw, "Format") or None
    if fmt is not None and fmt not in ARCHIVE_FORMATS:
        raise ConfigError(
            f"Package {name}: unsupported Format {fmt!r} (expected one of {', '.join(ARCHIVE_FORMATS)})"
        )

    return Package(
        name=name,
        sources=sources,
        format=fmt,
        configure=_str_list(_get(raw, "Configure"), what=f"Package {name}: Configure"),
        configure_blacklist=_str_list(
            _get(raw, "ConfigureBlacklist"), what=f"Package {name}: ConfigureBlacklist"
        ),
    )


def parse_config(raw: Any) -> Config:
    if not isinstance(raw, dict):
        raise ConfigError("Config must contain a mapping/object")

    profiles = tuple(parse_profile(p, index=i) for i, p in enumerate(_items(raw, "Profiles")))
    packages = tuple(parse_package(p, index=i) for i, p in enumerate(_items(raw, "Packages")))

    cfg = Config(profiles=profiles, packages=packages)
    _check_unique(cfg.profile_names(), kind="profile")
    _check_unique(cfg.package_names(), kind="package")
    return cfg


def load_config(path: str) -> Config:
    """Read a JSON (or YAML, by suffix) config file into a :class:`Config`."""

    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"While reading config {path}: {e}") from e

    if _detect_format(p) == "yaml":
        try:
            raw = yaml.safe_load(text) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"While parsing config {path}: {e}") from e
    else:
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise ConfigError(f"While parsing config {path}: {e}") from e

    cfg = parse_config(raw)
    logger.debug("Config: %r", cfg)
    return cfg
