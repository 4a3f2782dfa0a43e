"""Process-local registry of rendered markers, keyed by annotation id."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from pagemarks.tree.nodes import ElementNode


class RenderRegistry:
    """Maps annotation ids to the markers inserted for them, and back.

    An id is present only after a successful wrap.  ``pop`` removes an id
    and its reverse entries in one step, so an unwrap in progress cannot
    be observed half-done.
    """

    def __init__(self) -> None:
        self._markers: dict[str, tuple[ElementNode, ...]] = {}
        self._owners: dict[ElementNode, str] = {}

    def __contains__(self, annotation_id: object) -> bool:
        return annotation_id in self._markers

    def __len__(self) -> int:
        return len(self._markers)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._markers))

    def record(self, annotation_id: str, markers: Sequence[ElementNode]) -> None:
        if annotation_id in self._markers:
            msg = f"annotation {annotation_id!r} is already rendered"
            raise ValueError(msg)
        self._markers[annotation_id] = tuple(markers)
        for marker in markers:
            self._owners[marker] = annotation_id

    def get(self, annotation_id: str) -> tuple[ElementNode, ...]:
        return self._markers.get(annotation_id, ())

    def pop(self, annotation_id: str) -> tuple[ElementNode, ...]:
        markers = self._markers.pop(annotation_id, ())
        for marker in markers:
            self._owners.pop(marker, None)
        return markers

    def owner_of(self, marker: ElementNode) -> str | None:
        return self._owners.get(marker)
