"""Tests for the three-tier position resolver."""

from __future__ import annotations

from pagemarks.anchoring.capture import capture_selection
from pagemarks.anchoring.models import AnchorDescriptor
from pagemarks.anchoring.resolve import (
    MatchTier,
    best_occurrence,
    context_score,
    find_occurrences,
    resolve_anchor,
)
from pagemarks.tree.text_map import span_text
from tests.helpers.documents import build_document, el, select


def _anchor(
    text: str,
    *,
    path: tuple[int, ...] = (0, 1, 9),
    start: int = 0,
    before: str = "",
    after: str = "",
) -> AnchorDescriptor:
    return AnchorDescriptor(
        structural_path=path,
        start_offset=start,
        end_offset=start + len(text),
        text=text,
        context_before=before,
        context_after=after,
    )


class TestContextScore:
    """Character-level context similarity."""

    def test_counts_matching_suffix_and_prefix(self) -> None:
        haystack = "say hello world now"
        # "hello" at 4..9; before "say ", after " world now"
        assert context_score(haystack, 4, 9, "xay ", " wor") == 3 + 4

    def test_stops_at_first_mismatch(self) -> None:
        assert context_score("abXdef", 2, 3, "zb", "dq") == 1 + 1

    def test_clipped_by_haystack_edges(self) -> None:
        assert context_score("abc", 0, 3, "long before", "long after") == 0

    def test_empty_context_scores_zero(self) -> None:
        assert context_score("a b a", 0, 1, "", "") == 0


class TestFindOccurrences:
    """Occurrence search."""

    def test_overlapping_hits(self) -> None:
        assert find_occurrences("aaaa", "aa") == [0, 1, 2]

    def test_no_hits(self) -> None:
        assert find_occurrences("abc", "z") == []

    def test_limit_excludes_hits_ending_past_it(self) -> None:
        assert find_occurrences("ab ab ab", "ab", limit=5) == [0, 3]

    def test_empty_needle(self) -> None:
        assert find_occurrences("abc", "") == []


class TestBestOccurrence:
    """Context-scored selection among repeated text."""

    def test_equal_scores_pick_earliest(self) -> None:
        assert best_occurrence("foo bar foo bar", _anchor("foo")) == (0, 0)

    def test_context_picks_later_occurrence(self) -> None:
        anchor = _anchor("foo", before="bar ")
        assert best_occurrence("foo bar foo bar", anchor) == (8, 4)

    def test_missing_text(self) -> None:
        assert best_occurrence("abc", _anchor("zzz")) is None


class TestResolveAnchor:
    """Tier selection against live documents."""

    def test_exact_replay_on_unchanged_page(self) -> None:
        doc = build_document(el("p", "Hello ", el("b", "world"), ", foo"))
        anchor = capture_selection(doc, select(doc, "lo wor"))
        assert anchor is not None

        resolution = resolve_anchor(doc, anchor)

        assert resolution is not None
        assert resolution.tier is MatchTier.EXACT
        assert resolution.score is None
        assert span_text(resolution.span) == "lo wor"

    def test_prefix_insert_escalates_to_local_search(self) -> None:
        original = build_document(el("p", "Please click here to continue"))
        anchor = capture_selection(original, select(original, "click here"))
        assert anchor is not None

        reloaded = build_document(el("p", "NEW: Please click here to continue"))
        resolution = resolve_anchor(reloaded, anchor)

        assert resolution is not None
        assert resolution.tier is MatchTier.LOCAL
        assert (resolution.start, resolution.end) == (12, 22)
        assert span_text(resolution.span) == "click here"

    def test_missing_path_uses_global_search(self) -> None:
        doc = build_document(el("p", "intro"), el("div", "the target text"))

        resolution = resolve_anchor(doc, _anchor("target", path=(0, 1, 7, 2)))

        assert resolution is not None
        assert resolution.tier is MatchTier.GLOBAL
        assert span_text(resolution.span) == "target"

    def test_container_without_text_escalates_to_global(self) -> None:
        doc = build_document(el("p", "nothing here"), el("p", "moved sentence"))

        resolution = resolve_anchor(doc, _anchor("moved", path=(0, 1, 0), start=0))

        assert resolution is not None
        assert resolution.tier is MatchTier.GLOBAL
        assert resolution.container is doc.search_root
        assert span_text(resolution.span) == "moved"

    def test_global_tie_break_is_earliest(self) -> None:
        doc = build_document(el("p", "foo bar"), el("p", "foo bar"))

        resolution = resolve_anchor(doc, _anchor("foo"))

        assert resolution is not None
        assert resolution.start == 0

    def test_global_context_beats_order(self) -> None:
        doc = build_document(el("p", "alpha foo"), el("p", "beta foo"))

        resolution = resolve_anchor(doc, _anchor("foo", before="beta "))

        assert resolution is not None
        assert resolution.start == len("alpha foobeta ")

    def test_vanished_text_is_orphaned(self) -> None:
        doc = build_document(el("p", "completely different"))
        assert resolve_anchor(doc, _anchor("gone", path=(0, 1, 0))) is None

    def test_scan_limit_bounds_global_search(self) -> None:
        doc = build_document(el("p", "x" * 100 + "needle"))
        anchor = _anchor("needle")

        assert resolve_anchor(doc, anchor, scan_limit=50) is None
        found = resolve_anchor(doc, anchor, scan_limit=200)
        assert found is not None
        assert found.start == 100

    def test_resolves_through_existing_markers(self) -> None:
        doc = build_document(
            el(
                "p",
                "Hello ",
                el("mark", "world", data_annotation_id="ann_1"),
                ", foo",
            )
        )

        resolution = resolve_anchor(doc, _anchor("world, f", path=(0, 1, 0), start=6))

        assert resolution is not None
        assert resolution.tier is MatchTier.EXACT
        assert span_text(resolution.span) == "world, f"
