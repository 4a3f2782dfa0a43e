"""Restoration: re-attach a page's stored annotations after it loads.

One await fetches the page's annotations; after that, every annotation is
resolved and rendered synchronously, one at a time, against the live
tree.  Each annotation is independent: an orphaned anchor or a rejected
wrap is recorded in the report and the loop moves on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from pagemarks.anchoring.resolve import DEFAULT_SCAN_LIMIT, resolve_anchor
from pagemarks.render.renderer import SegmentFailure
from pagemarks.render.styles import style_for
from pagemarks.store.models import normalize_url

if TYPE_CHECKING:
    from pagemarks.anchoring.resolve import MatchTier
    from pagemarks.render.renderer import HighlightRenderer
    from pagemarks.store.models import Annotation
    from pagemarks.store.protocol import AnnotationStoreProtocol
    from pagemarks.tree.nodes import Document

logger = logging.getLogger(__name__)


@dataclass
class RestorationReport:
    """What happened to each annotation of one page.

    Attributes:
        page_id: Normalised page identity that was restored.
        restored: Annotation id -> tier that resolved it.
        orphaned: Ids whose anchor text no longer occurs on the page.
        render_failed: Id -> segments the tree refused to wrap.
        skipped: Ids that were already rendered before this pass.
    """

    page_id: str
    restored: dict[str, MatchTier] = field(default_factory=dict)
    orphaned: list[str] = field(default_factory=list)
    render_failed: dict[str, tuple[SegmentFailure, ...]] = field(
        default_factory=dict
    )
    skipped: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return (
            len(self.restored)
            + len(self.orphaned)
            + len(self.render_failed)
            + len(self.skipped)
        )


def restore_annotation(
    document: Document,
    renderer: HighlightRenderer,
    annotation: Annotation,
    report: RestorationReport,
    *,
    scan_limit: int = DEFAULT_SCAN_LIMIT,
) -> None:
    """Resolve and render one annotation, recording the outcome in *report*."""
    if renderer.is_rendered(annotation.id):
        report.skipped.append(annotation.id)
        return

    resolution = resolve_anchor(document, annotation.position, scan_limit=scan_limit)
    if resolution is None:
        report.orphaned.append(annotation.id)
        return

    result = renderer.wrap(resolution.span, annotation.id, style_for(annotation.color))
    if not result.ok:
        report.render_failed[annotation.id] = result.failures
        return

    report.restored[annotation.id] = resolution.tier


async def restore_page(
    document: Document,
    renderer: HighlightRenderer,
    store: AnnotationStoreProtocol,
    page_url: str,
    *,
    scan_limit: int = DEFAULT_SCAN_LIMIT,
) -> RestorationReport:
    """Restore every stored annotation of *page_url* into *document*.

    Returns:
        A report with one entry per annotation.  Store errors propagate;
        per-annotation failures never do.
    """
    page_id = normalize_url(page_url)
    annotations = await store.get_annotations_for_url(page_id)
    report = RestorationReport(page_id=page_id)

    for annotation in annotations:
        try:
            restore_annotation(
                document, renderer, annotation, report, scan_limit=scan_limit
            )
        except Exception as exc:
            logger.exception("Failed to restore annotation %s", annotation.id)
            report.render_failed[annotation.id] = (
                SegmentFailure(text=annotation.highlight_text, reason=str(exc)),
            )

    logger.info(
        "Restored %d/%d annotation(s) for %s (%d orphaned, %d failed)",
        len(report.restored),
        len(annotations),
        page_id,
        len(report.orphaned),
        len(report.render_failed),
    )
    return report
