"""Group nearby fragments into paragraph/section segments and bound their size.

Segment sizes are measured in the configured unit (characters, words or
bytes). Oversized clusters split at fragment edges; with ``preserve_sentences``
a single fragment that is still too long is cut at sentence ends.
"""
import re
from dataclasses import replace
from typing import List, Sequence

from graph_rag.config import ClusteringConfig, ListConfig, ParsingConfig, SegmentBounds
from graph_rag.layout import effective_line_height, on_same_line, row_members, vertical_gap
from graph_rag.rules.base import ParseRule
from pdf_reader.models import BoundingBox, ElementType, ParsedElement
from pdf_reader.text_utils import list_marker_style
from utils.custom_logger import get_logger

logger = get_logger(__name__)

Cluster = List[ParsedElement]

SENTENCE_END = re.compile(r'[.!?]+\s+')


def measure(text: str, unit: str = "characters") -> int:
    if unit == "words":
        return len(text.split())
    if unit == "bytes":
        return len(text.encode('utf-8'))
    return len(text)


def joined_length(members: Sequence[ParsedElement], unit: str = "characters") -> int:
    """Size of the members' text joined with single spaces."""
    texts = [m.text.strip() for m in members if m.text.strip()]
    return measure(' '.join(texts), unit)


def cluster_to_element(members: Sequence[ParsedElement]) -> ParsedElement:
    """A cluster is a Section when any member is one; otherwise a Paragraph."""
    sections = [m for m in members if m.element_type == ElementType.SECTION]
    if sections:
        return ParsedElement.combine(list(members), ElementType.SECTION,
                                     min(m.level for m in sections),
                                     header_tier=sections[0].header_tier)
    return ParsedElement.combine(list(members), ElementType.PARAGRAPH, members[0].level,
                                 header_tier=members[0].header_tier)


def starts_list_item(element: ParsedElement, settings: ListConfig) -> bool:
    if not settings.enabled or element.element_type != ElementType.PARAGRAPH:
        return False
    return list_marker_style(element.text, settings.bullet_markers, settings.numbered_patterns) is not None


def sentence_pieces(member: ParsedElement, max_size: int, unit: str = "characters") -> List[ParsedElement]:
    """Cut a single-fragment element at sentence ends into pieces of at most ``max_size``.

    Pieces keep the element's type and level and get a vertical slice of the
    fragment box proportional to their text offsets. A sentence longer than
    the limit stays whole; elements made of several fragments are returned as is.
    """
    if len(member.fragments) != 1:
        return [member]
    fragment = member.first_fragment
    text = fragment.text
    ends = [m.end() for m in SENTENCE_END.finditer(text)]
    spans = [(start, end) for start, end in zip([0] + ends, ends + [len(text)]) if text[start:end].strip()]

    chunks = []
    for start, end in spans:
        if chunks and measure(text[chunks[-1][0]:end].strip(), unit) <= max_size:
            chunks[-1] = (chunks[-1][0], end)
        else:
            chunks.append((start, end))
    if len(chunks) < 2:
        return [member]

    box = fragment.bbox
    pieces = []
    for start, end in chunks:
        piece_box = BoundingBox(
            left=box.left,
            top=box.top + box.height * start / len(text),
            right=box.right,
            bottom=box.top + box.height * end / len(text),
        )
        piece = replace(fragment, text=text[start:end].strip(), bbox=piece_box)
        pieces.append(replace(member, fragments=(piece,), text=piece.text, bbox=piece_box))
    return pieces


def split_by_size(members: Cluster, max_size: int, unit: str = "characters",
                  preserve_sentences: bool = False) -> List[Cluster]:
    """Split greedily at the latest member boundary that keeps each chunk within ``max_size``.

    A single member larger than ``max_size`` becomes a chunk of its own, or
    is first cut at sentence ends when ``preserve_sentences`` is set.
    """
    if preserve_sentences:
        members = [
            piece
            for member in members
            for piece in (sentence_pieces(member, max_size, unit)
                          if measure(member.text.strip(), unit) > max_size else [member])
        ]
    separator = 0 if unit == "words" else 1
    chunks = []
    current: Cluster = []
    length = 0
    for member in members:
        size = measure(member.text.strip(), unit)
        if not size:
            current.append(member)
            continue
        added = size + (separator if length else 0)
        if length and length + added > max_size:
            chunks.append(current)
            current = [member]
            length = size
        else:
            current.append(member)
            length += added
    if current:
        chunks.append(current)
    return chunks


class SpatialClusteringRule(ParseRule):
    name = "SpatialClustering"

    def _joins(self, cluster: Cluster, candidate: ParsedElement, config: ParsingConfig) -> bool:
        settings = config.spatial_clustering
        last = cluster[-1]
        if candidate.element_type != last.element_type or candidate.level != last.level:
            return False

        a = last.last_fragment
        b = candidate.first_fragment
        if a.page != b.page:
            return False

        line_height = effective_line_height(a, b, settings.min_line_height)

        # Same line: fragments continue left to right with a small gap
        if on_same_line(a, b, line_height, settings.line_grouping_tolerance):
            gap = b.bbox.left - a.bbox.right
            return -line_height <= gap <= settings.horizontal_alignment_tolerance

        # Next line: close below and left-aligned with the cluster, unless a new list item starts
        if starts_list_item(candidate, config.list_detection):
            return False
        cluster_left = BoundingBox.union_all(m.bbox for m in cluster).left
        return (
            vertical_gap(a, b) < settings.vertical_gap_threshold_multiplier * line_height
            and abs(cluster_left - b.bbox.left) <= settings.horizontal_alignment_tolerance
        )

    def _bounds(self, members: Cluster, settings: ClusteringConfig) -> SegmentBounds:
        if any(m.element_type == ElementType.SECTION for m in members):
            return settings.sections
        return settings.paragraphs

    def _proximity_clusters(self, elements: Sequence[ParsedElement], config: ParsingConfig) -> List[Cluster]:
        clusters: List[Cluster] = []
        for element in elements:
            if clusters and self._joins(clusters[-1], element, config):
                clusters[-1].append(element)
            else:
                clusters.append([element])
        return clusters

    def _merge_undersized(self, clusters: List[Cluster], config: ParsingConfig) -> List[Cluster]:
        """Carry undersized clusters forward into the next cluster of the same type and level.

        Column cells sharing a row and list items are kept apart.
        """
        settings = config.spatial_clustering
        heads = [cluster_to_element(c) for c in clusters]
        rows = row_members(heads, settings.min_line_height, settings.line_grouping_tolerance)
        items = [starts_list_item(h, config.list_detection) for h in heads]
        merged: List[Cluster] = []
        pending = None
        for index, cluster in enumerate(clusters):
            if pending is not None:
                head = cluster_to_element(pending)
                nxt = cluster_to_element(cluster)
                compatible = head.element_type == nxt.element_type and head.level == nxt.level
                if compatible and not rows[index] and not items[index]:
                    cluster = pending + cluster
                else:
                    merged.append(pending)
                pending = None

            bounds = self._bounds(cluster, settings)
            is_last = index == len(clusters) - 1
            undersized = joined_length(cluster, settings.size_unit) < bounds.min_segment_size
            if undersized and not rows[index] and not items[index] and not is_last:
                pending = cluster
            else:
                merged.append(cluster)

        if pending is not None:
            merged.append(pending)
        return merged

    def apply(self, elements: Sequence[ParsedElement], config: ParsingConfig) -> List[ParsedElement]:
        settings = config.spatial_clustering
        ordered = sorted(elements, key=lambda e: e.reading_key)

        clusters = self._proximity_clusters(ordered, config)
        clusters = self._merge_undersized(clusters, config)

        result = []
        splits = 0
        for cluster in clusters:
            chunks = split_by_size(cluster, self._bounds(cluster, settings).max_segment_size,
                                   settings.size_unit, settings.preserve_sentences)
            splits += len(chunks) - 1
            result.extend(cluster_to_element(chunk) for chunk in chunks)

        logger.info("SpatialClustering: %d elements -> %d segments (%d size splits)",
                    len(elements), len(result), splits)
        return result
