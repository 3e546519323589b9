"""
srlkit/io/pajek.py

Pajek snapshots of a graph annotated with predictions.

The inside colour of a vertex encodes its predicted class, fading towards
grey as the prediction becomes less confident; the border colour encodes its
true class. Consecutive snapshots appended to one stream form a Pajek time
network.
"""

from __future__ import annotations

import math
from typing import Hashable, Optional, TextIO

import networkx as nx

from srlkit.classifiers.classification import UNKNOWN, Classification
from srlkit.classifiers.estimate import Estimate

# One row per class, from confident to unsure. Pajek needs these spellings.
PAJEK_COLORS = (
    ("Blue", "NavyBlue", "CornflowerBlue", "LightCyan", "LSkyBlue", "Gray10"),
    ("BrickRed", "Bittersweet", "Red", "RedOrange", "LightOrange", "Gray10"),
    ("OliveGreen", "PineGreen", "Green", "LightGreen", "LFadedGreen", "Gray10"),
    ("Purple", "Orchid", "Thistle", "LightPurple", "LightPurple", "Gray10"),
    ("GoldenRod", "Yellow", "Canary", "LightYellow", "LightYellow", "Gray10"),
    ("Orange", "YellowOrange", "Dandelion", "Apricot", "LightOrange", "Gray10"),
    ("Brown", "RawSienna", "Tan", "Apricot", "Apricot", "Gray10"),
    ("RedViolet", "Mulberry", "VioletRed", "CarnationPink", "Pink", "Gray10"),
    ("Gray", "Gray45", "Gray40", "Gray30", "Gray20", "Gray10"),
)


def truth_color(node: Hashable, truth: Optional[Classification]) -> Optional[str]:
    """Border colour of the node's true class, or None when not known."""
    if truth is None:
        return None
    label = truth.get(node)
    if label == UNKNOWN:
        return None
    return PAJEK_COLORS[label % len(PAJEK_COLORS)][0]


def prediction_color(node: Hashable, estimate: Optional[Estimate]) -> str:
    """Inside colour of the node's predicted class, scaled by confidence."""
    if estimate is None:
        return "White"
    p = estimate.get(node)
    if p is None:
        return "White"
    idx = estimate.classification_of(node)
    row = PAJEK_COLORS[idx % len(PAJEK_COLORS)]

    # distance from certainty towards "don't know" (uniform scores)
    length = 1.0 - 1.0 / len(p)
    confidence = (1.0 - float(p[idx])) / length if length > 0 else 0.0
    scale = 1.0 / (1.0 + math.exp(-(4.0 * confidence) + 1.75)) * (len(p) + 1)
    return row[min(int(scale), len(row) - 1)]


def annotate_graph(
    graph: nx.Graph,
    truth: Optional[Classification] = None,
    estimate: Optional[Estimate] = None,
) -> nx.Graph:
    """
    Copy of the graph topology carrying Pajek colour and weight attributes.

    Edge weights are rescaled to 1 + log(weight).
    """
    annotated = nx.DiGraph() if graph.is_directed() else nx.Graph()
    annotated.name = graph.name or "PajekGraph"
    for node in graph.nodes:
        attrs = {}
        inside = prediction_color(node, estimate) if estimate is not None else truth_color(node, truth)
        if inside is not None:
            attrs["ic"] = inside
        if estimate is not None:
            border = truth_color(node, truth)
            if border is not None:
                attrs["bc"] = border
        annotated.add_node(node, **attrs)
    for u, v, data in graph.edges(data=True):
        weight = float(data.get("weight", 1.0))
        annotated.add_edge(u, v, weight=1.0 + math.log(weight) if weight > 0 else 1.0)
    return annotated


def write_pajek_snapshot(
    graph: nx.Graph,
    stream: TextIO,
    truth: Optional[Classification] = None,
    estimate: Optional[Estimate] = None,
) -> None:
    """Append one Pajek network for the graph to an open text stream."""
    for line in nx.generate_pajek(annotate_graph(graph, truth, estimate)):
        stream.write(line)
        stream.write("\n")
