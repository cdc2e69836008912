from __future__ import annotations

from typing import Sequence


class OttoError(RuntimeError):
    """Base class for every error that aborts a build run."""


class ConfigError(OttoError):
    pass


class FormatInferenceError(ConfigError):
    pass


class FilesystemError(OttoError):
    pass


class TransferError(OttoError):
    pass


class ExtractionLayoutError(OttoError):
    pass


class SubprocessError(OttoError):
    def __init__(self, message: str, *, argv: Sequence[str], returncode: int) -> None:
        super().__init__(message)
        self.argv = list(argv)
        self.returncode = returncode
