"""
Working Directory Guard
=======================

Refuses working directories inside restricted system locations and
directories that do not exist.

This module provides:
- PlatformProfile: Restricted roots and path semantics for one OS family
- UNIX_PROFILE / WINDOWS_PROFILE: Built-in profiles
- detect_platform(): Profile for the host operating system
- PathGuard: Working-directory validation against a profile

The restricted check compares both the absolute path and its symlink-resolved
form, so a symlink into /etc is refused like /etc itself. A raw path
containing ".." is checked with a plain prefix comparison instead of a
boundary-aware one, which errs towards refusal.
"""

from __future__ import annotations

import logging
import ntpath
import os
import platform as platform_module
import posixpath
import stat
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Iterable

from .models import SeverityLevel, ValidationResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlatformProfile:
    """
    OS family the gateway runs on.

    Attributes:
        name: "unix" or "windows"
        restricted_paths: System roots agents may never work in
        pathmod: posixpath or ntpath, used for all path arithmetic
        case_sensitive: Whether path comparison is case-sensitive
    """

    name: str
    restricted_paths: tuple[str, ...]
    pathmod: ModuleType
    case_sensitive: bool = True

    @property
    def is_windows(self) -> bool:
        return self.name == "windows"

    def normalize(self, path: str) -> str:
        """Absolute, normalized form (case-folded where case-insensitive)."""
        normalized = self.pathmod.normpath(path)
        return normalized if self.case_sensitive else normalized.lower()


UNIX_PROFILE = PlatformProfile(
    name="unix",
    restricted_paths=(
        "/etc",
        "/boot",
        "/sbin",
        "/usr/sbin",
        "/proc",
        "/sys",
        "/dev",
        "/root",
        "/var/log",
        "/var/run",
    ),
    pathmod=posixpath,
)

WINDOWS_PROFILE = PlatformProfile(
    name="windows",
    restricted_paths=(
        "C:\\Windows\\System32",
        "C:\\Windows\\SysWOW64",
        "C:\\Program Files",
        "C:\\ProgramData",
    ),
    pathmod=ntpath,
    case_sensitive=False,
)


def detect_platform(system: str | None = None) -> PlatformProfile:
    """
    Pick the profile for an OS name.

    Args:
        system: platform.system() style name (host OS when None)

    Returns:
        WINDOWS_PROFILE for Windows, UNIX_PROFILE otherwise
    """
    system = system or platform_module.system()
    return WINDOWS_PROFILE if system.lower() == "windows" else UNIX_PROFILE


class PathGuard:
    """
    Validates working directories requested by agents.

    Args:
        profile: Platform profile (host platform when None)
        extra_restricted: Additional restricted roots from configuration

    Example:
        guard = PathGuard()
        result = guard.validate("/etc/nginx")
        assert not result.allowed
    """

    def __init__(
        self,
        profile: PlatformProfile | None = None,
        extra_restricted: Iterable[str] = (),
    ) -> None:
        self.profile = profile or detect_platform()
        self.restricted_paths = tuple(self.profile.restricted_paths) + tuple(extra_restricted)
        self._restricted = [self.profile.normalize(p) for p in self.restricted_paths]

    def _candidates(self, directory: str) -> list[str]:
        pathmod = self.profile.pathmod
        candidates = [pathmod.abspath(directory)]
        # Only resolve symlinks for paths native to the host
        if pathmod is os.path:
            try:
                resolved = os.path.realpath(directory)
            except (OSError, ValueError):
                resolved = None
            if resolved is not None and resolved not in candidates:
                candidates.append(resolved)
        return [self.profile.normalize(c) for c in candidates]

    def restricted_root(self, directory: str) -> str | None:
        """
        Find the restricted root that contains ``directory``.

        Returns:
            The configured restricted path, or None if unrestricted
        """
        sep = self.profile.pathmod.sep
        has_traversal = ".." in directory

        for candidate in self._candidates(directory):
            for original, root in zip(self.restricted_paths, self._restricted):
                if has_traversal:
                    if candidate.startswith(root):
                        return original
                elif candidate == root or candidate.startswith(root.rstrip(sep) + sep):
                    return original
        return None

    def validate(self, directory: str) -> ValidationResult:
        """
        Validate a working directory.

        Args:
            directory: Requested working directory

        Returns:
            HIGH refusal for a restricted location, LOW refusal when the
            path is not an existing, accessible directory, else allowed
        """
        if "\0" in directory:
            logger.warning("Working directory contains a NUL byte, refusing")
            return ValidationResult.block(
                reason="Working directory does not exist or is not accessible",
                severity=SeverityLevel.LOW,
            )

        root = self.restricted_root(directory)
        if root is not None:
            logger.warning(f"Working directory {directory} is inside restricted path {root}")
            return ValidationResult.block(
                reason=f"Access to restricted system directory: {root}",
                severity=SeverityLevel.HIGH,
            )

        try:
            mode = Path(directory).stat().st_mode
        except (OSError, ValueError):
            return ValidationResult.block(
                reason="Working directory does not exist or is not accessible",
                severity=SeverityLevel.LOW,
            )

        if not stat.S_ISDIR(mode):
            return ValidationResult.block(
                reason="Working directory is not a directory",
                severity=SeverityLevel.LOW,
            )

        return ValidationResult.allow()
