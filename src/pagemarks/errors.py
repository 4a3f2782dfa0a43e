"""Exception types raised by pagemarks.

Capture and resolution failures are *not* exceptions: they are reported
as ``None`` results.  Exceptions are reserved for tree mutations the tree
rejects and for persistence failures that callers must surface.
"""

from __future__ import annotations


class PagemarksError(Exception):
    """Base class for all pagemarks errors."""


class TreeMutationError(PagemarksError):
    """The document tree rejected a structural mutation."""


class AnnotationStoreError(PagemarksError):
    """An annotation store could not read or persist its records."""
