"""Build version information."""

from __future__ import annotations

import platform
import sys
from dataclasses import dataclass

import semver

_OS_NAMES = {"win32": "windows", "cygwin": "windows"}
_ARCH_NAMES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
}


def _runtime_os() -> str:
    name = sys.platform
    if name.startswith("linux"):
        return "linux"
    if name.startswith("freebsd"):
        return "freebsd"
    return _OS_NAMES.get(name, name)


def _runtime_arch() -> str:
    machine = platform.machine().lower()
    return _ARCH_NAMES.get(machine, machine or "unknown")


@dataclass(frozen=True)
class BuildInfo:
    """Version and source-tree state recorded at build time."""

    version: str = ""
    git_sha: str = ""
    git_tree_state: str = ""
    release_status: str = "unreleased"

    def semantic_version(self) -> semver.Version:
        """The version without its leading character; 0.0.0 when unparsable."""
        if not self.version:
            raise ValueError("no version recorded")
        try:
            return semver.Version.parse(self.version[1:])
        except ValueError:
            return semver.Version(0, 0, 0)

    def full_version(self) -> str:
        """The version, with build information appended when unreleased."""
        if not self.version:
            return "UNKNOWN"
        if self.release_status == "released":
            return self.version
        if not self.git_sha:
            return f"{self.version}-unknown"
        if self.git_tree_state == "dirty":
            return f"{self.version}-{self.git_sha}.dirty"
        return f"{self.version}-{self.git_sha}"

    def full_version_with_runtime_info(self) -> str:
        """The full version followed by the running OS and architecture."""
        return f"{self.full_version()} {_runtime_os()}/{_runtime_arch()}"