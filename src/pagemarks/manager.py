"""AnnotationManager - highlight creation, removal, and restoration for a page.

Ties the capturer, resolver, renderer and an annotation store together
for one loaded document.  The store is the only persistent state; the
render registry and click listeners live as long as the manager.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pagemarks.anchoring.capture import capture_selection
from pagemarks.config import get_settings
from pagemarks.render.events import HighlightClickDispatcher
from pagemarks.render.renderer import HighlightRenderer
from pagemarks.render.styles import DEFAULT_COLOR, style_for
from pagemarks.restore import restore_page
from pagemarks.store.models import Annotation, normalize_url
from pagemarks.tree.html_tree import parse_html

if TYPE_CHECKING:
    from collections.abc import Callable

    from pagemarks.config import Settings
    from pagemarks.render.styles import AnnotationColor
    from pagemarks.restore import RestorationReport
    from pagemarks.store.models import AnnotationAIResult
    from pagemarks.store.protocol import AnnotationStoreProtocol
    from pagemarks.tree.nodes import Document, ElementNode, Node
    from pagemarks.tree.range import Span

logger = logging.getLogger(__name__)


class AnnotationManager:
    """Creates, updates, deletes and restores highlights on one document.

    Attributes:
        document: The live tree being annotated.
        store: Where annotation records are persisted.
        page_id: Normalised URL identifying the page in the store.
        renderer: Marker insertion/removal and the render registry.
    """

    def __init__(
        self,
        document: Document,
        store: AnnotationStoreProtocol,
        *,
        page_url: str,
        page_title: str = "",
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.document = document
        self.store = store
        self.page_id = normalize_url(page_url)
        self.page_title = page_title
        self.renderer = HighlightRenderer(
            document,
            marker_tag=self.settings.render.marker_tag,
            marker_class=self.settings.render.marker_class,
        )
        self._clicks = HighlightClickDispatcher(self.renderer.registry)

    @classmethod
    def for_html(
        cls,
        html: str,
        store: AnnotationStoreProtocol,
        *,
        page_url: str,
        page_title: str = "",
        settings: Settings | None = None,
    ) -> AnnotationManager:
        """Parse *html* and build a manager over the resulting document."""
        settings = settings or get_settings()
        document = parse_html(html, marker_attribute=settings.render.id_attribute)
        return cls(
            document,
            store,
            page_url=page_url,
            page_title=page_title,
            settings=settings,
        )

    # -- clicks ------------------------------------------------------------

    def on_highlight_click(
        self, listener: Callable[[str, ElementNode], None]
    ) -> Callable[[], None]:
        """Subscribe to marker clicks; returns an unsubscribe callable."""
        return self._clicks.subscribe(listener)

    def handle_click(self, target: Node) -> bool:
        """Feed a click on *target* to the delegated root listener."""
        return self._clicks.dispatch(target)

    # -- lifecycle ---------------------------------------------------------

    async def create_annotation(
        self,
        selection: Span,
        color: AnnotationColor = DEFAULT_COLOR,
        note: str | None = None,
        ai_result: AnnotationAIResult | None = None,
    ) -> Annotation | None:
        """Highlight *selection* and persist it.

        Capture and wrapping happen synchronously before the save.  If the
        save fails, the new markers are removed and the error propagates.

        Returns:
            The new annotation, or None when the selection cannot be
            anchored (the caller should ask the user to reselect).
        """
        anchor = capture_selection(
            self.document,
            selection,
            context_length=self.settings.anchoring.context_length,
        )
        if anchor is None:
            return None

        annotation = Annotation(
            url=self.page_id,
            page_title=self.page_title,
            position=anchor,
            highlight_text=anchor.text,
            note=note,
            color=color,
            ai_result=ai_result,
        )

        result = self.renderer.wrap(selection, annotation.id, style_for(color))
        if not result.ok:
            logger.warning(
                "Annotation %s could not be rendered: %s",
                annotation.id,
                "; ".join(f.reason for f in result.failures),
            )

        try:
            await self.store.save_annotation(annotation)
        except Exception:
            self.renderer.unwrap(annotation.id)
            raise

        logger.info("Created annotation %s on %s", annotation.id, self.page_id)
        return annotation

    async def update_annotation(
        self,
        annotation_id: str,
        *,
        note: str | None = None,
        color: AnnotationColor | None = None,
        ai_result: AnnotationAIResult | None = None,
    ) -> Annotation | None:
        """Update note, colour or AI result; a new colour restyles markers."""
        updated = await self.store.update_annotation(
            annotation_id, note=note, color=color, ai_result=ai_result
        )
        if updated is not None and color is not None:
            self.renderer.restyle(annotation_id, style_for(color))
        return updated

    async def delete_annotation(self, annotation_id: str) -> bool:
        """Delete from the store and remove every marker of the annotation."""
        deleted = await self.store.delete_annotation(annotation_id)
        if deleted:
            self.renderer.unwrap(annotation_id)
            logger.info("Deleted annotation %s", annotation_id)
        return deleted

    async def restore_highlights(self) -> RestorationReport:
        """Render every stored annotation of this page that still resolves."""
        return await restore_page(
            self.document,
            self.renderer,
            self.store,
            self.page_id,
            scan_limit=self.settings.anchoring.global_scan_limit,
        )

    async def get_page_annotations(self) -> list[Annotation]:
        """All stored annotations for this page, rendered or not."""
        return await self.store.get_annotations_for_url(self.page_id)

    def get_annotation_marker(self, annotation_id: str) -> ElementNode | None:
        """First marker of a rendered annotation, or None."""
        markers = self.renderer.markers_for(annotation_id)
        return markers[0] if markers else None
