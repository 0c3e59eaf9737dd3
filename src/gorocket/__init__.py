# gorocket/src/gorocket/__init__.py
"""
This package builds a Go module for a matrix of platforms, packages each
binary as a release archive, renders a Homebrew formula and publishes the
result as a GitHub release.
"""

from .models import (
    ArchiveResult,
    BuildInfo,
    BuildResult,
    ConcreteTarget,
    Config,
    RemoteRepository,
    Target,
)
from .packaging.orchestrator import BuildOrchestrator

__all__ = [
    "ArchiveResult",
    "BuildInfo",
    "BuildOrchestrator",
    "BuildResult",
    "ConcreteTarget",
    "Config",
    "RemoteRepository",
    "Target",
]
