"""Diff previews shown to the user before a mutation is confirmed."""

from .diff import DiffPreviewer, PreviewOptions

__all__ = ["DiffPreviewer", "PreviewOptions"]
