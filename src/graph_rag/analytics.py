import math
from collections import Counter
from typing import Any, Dict, List, Sequence

import numpy as np

from graph_rag.graph import DocumentGraph

TARGET_BINS = 10


def estimate_tokens(text: str) -> int:
    """Rough token count: one token per four bytes of UTF-8."""
    return len(text.encode('utf-8')) // 4


def token_histogram(token_counts: Sequence[int]) -> Dict[str, Any]:
    """Equal-width histogram of token counts with summary statistics.

    The bin width adapts to the range so there are about ten bins; each bin
    carries its node count and token total. The mode is the start of the
    fullest bin.
    """
    counts = np.array(token_counts, dtype=int)
    if not counts.size:
        return {'bins': [], 'mean': 0.0, 'median': 0.0, 'mode': 0, 'variance': 0.0,
                'total_count': 0, 'total_tokens': 0}

    low, high = int(counts.min()), int(counts.max())
    if low >= high:
        edges = [low, low + 1]
    else:
        width = max(math.ceil((high - low) / TARGET_BINS), 1)
        edges = list(range(low, high + 1, width)) + [high + 1]

    bins: List[Dict[str, int]] = []
    for start, end in zip(edges, edges[1:]):
        in_bin = counts[(counts >= start) & (counts < end)]
        bins.append({
            'range_start': start,
            'range_end': end,
            'count': int(in_bin.size),
            'token_sum': int(in_bin.sum()),
        })

    fullest = max(bins, key=lambda b: b['count'])
    return {
        'bins': bins,
        'mean': round(float(counts.mean()), 2),
        'median': round(float(np.median(counts)), 2),
        'mode': fullest['range_start'],
        'variance': round(float(counts.var(ddof=1)), 2) if counts.size > 1 else 0.0,
        'total_count': int(counts.size),
        'total_tokens': int(counts.sum()),
    }


def structural_health(token_variance: float, mean_depth: float, type_count: int) -> Dict[str, str]:
    """Coarse labels for token spread, nesting depth and node type variety."""
    if token_variance < 1000:
        variance_label = "low"
    elif token_variance < 10000:
        variance_label = "medium"
    else:
        variance_label = "high"

    if mean_depth < 2:
        depth_label = "shallow"
    elif mean_depth > 5:
        depth_label = "deep"
    else:
        depth_label = "balanced"

    if type_count <= 2:
        richness = "sparse"
    elif type_count <= 5:
        richness = "rich"
    else:
        richness = "unbalanced"

    return {'token_variance': variance_label, 'depth_balance': depth_label, 'node_type_richness': richness}


def compute_structural_profile(graph: DocumentGraph) -> Dict[str, Any]:
    """Summarise the shape of a document graph.

    Args:
        graph: Assembled document graph

    Returns:
        Node type counts and shares, depth distribution, text length and token
        statistics and structural health labels over non-root nodes
    """
    nodes = []
    depths = []
    for node, ancestors in graph.root.walk():
        if node is graph.root:
            continue
        nodes.append(node)
        depths.append(len(ancestors))

    total = len(nodes)
    type_counts = Counter(node.type.value for node in nodes)
    depth_counts = Counter(depths)
    mean_depth = round(float(np.mean(depths)), 2) if depths else 0.0

    lengths = np.array([len(node.text) for node in nodes if node.text], dtype=float)
    if lengths.size:
        text_stats = {
            'count': int(lengths.size),
            'total_chars': int(lengths.sum()),
            'mean': round(float(lengths.mean()), 2),
            'median': round(float(np.median(lengths)), 2),
            'std': round(float(lengths.std()), 2),
            'max': int(lengths.max()),
        }
    else:
        text_stats = {'count': 0, 'total_chars': 0, 'mean': 0.0, 'median': 0.0, 'std': 0.0, 'max': 0}

    tokens_by_type: Dict[str, List[int]] = {}
    for node in nodes:
        if node.text:
            tokens_by_type.setdefault(node.type.value, []).append(estimate_tokens(node.text))
    overall = token_histogram([t for counts in tokens_by_type.values() for t in counts])

    return {
        'total_nodes': total,
        'node_types': {
            name: {'count': count, 'share': round(count / total, 4)}
            for name, count in sorted(type_counts.items())
        },
        'depth': {
            'max': max(depths, default=0),
            'mean': mean_depth,
            'distribution': {str(depth): count for depth, count in sorted(depth_counts.items())},
        },
        'text_length': text_stats,
        'tokens': {
            'overall': overall,
            'by_node_type': {name: token_histogram(counts) for name, counts in sorted(tokens_by_type.items())},
        },
        'structural_health': structural_health(overall['variance'], mean_depth, len(type_counts)),
    }
