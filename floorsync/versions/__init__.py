"""Version review lifecycle."""

from floorsync.versions.lifecycle import AutoMergeOutcome, VersionLifecycle

__all__ = ["AutoMergeOutcome", "VersionLifecycle"]
