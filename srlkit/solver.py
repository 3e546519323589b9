"""
srlkit/solver.py

High-level interface: collective classification of a partially labeled graph.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Hashable, Optional, Sequence, Tuple, Union

import networkx as nx

from srlkit.classifiers.attribute import LabelAttribute
from srlkit.classifiers.classification import Classification
from srlkit.classifiers.estimate import Estimate
from srlkit.classifiers.wvrn import WeightedVoteRelationalNeighbor
from srlkit.core.vector_math import RandomSource
from srlkit.inference.base import ConfigLike, InferenceMethod
from srlkit.inference.registry import InferenceStrategy, create_inference


@dataclass
class CollectiveResult:
    """Result from a collective inference run."""
    estimate: Estimate
    classification: Classification
    unknown: Tuple[Hashable, ...]
    iterations: int
    method: InferenceMethod
    accuracy: Optional[float] = None


def class_prior_estimate(known: Classification, nodes: Sequence[Hashable]) -> Estimate:
    """Initial prior giving every node the class distribution of the known labels."""
    prior = Estimate(known.attribute, known.graph)
    distribution = known.class_distribution()
    for node in nodes:
        prior.set(node, distribution)
    return prior


def run_collective_inference(
    graph: nx.Graph,
    attribute: LabelAttribute,
    *,
    method: Union[str, InferenceStrategy] = "relaxation",
    config: ConfigLike = None,
    classifier_config: ConfigLike = None,
    truth: Optional[Classification] = None,
    seed: RandomSource = None,
) -> CollectiveResult:
    """
    Label the unlabeled nodes of a graph with wvRN and collective inference.

    Args:
        graph: Graph whose node data holds the label token under
            `attribute.name` for known nodes
        attribute: Label attribute
        method: Inference strategy name
        config: Options for the inference method
        classifier_config: Options for the wvRN classifier
        truth: Optional ground truth for accuracy reporting
        seed: Seed or Generator for stochastic strategies

    Returns:
        CollectiveResult with the final estimate and its arg-max labels

    Example:
        >>> g = nx.path_graph(3)
        >>> g.nodes[0]["label"] = "a"
        >>> result = run_collective_inference(g, LabelAttribute("label", ("a", "b")))
        >>> result.classification.get(2)
        0
    """
    known = Classification.from_graph(graph, attribute)
    unknown = [node for node in graph.nodes if known.is_unknown(node)]

    classifier = WeightedVoteRelationalNeighbor(graph, known, classifier_config)
    inference = create_inference(method, config, rng=seed)
    inference.initial_prior = class_prior_estimate(known, unknown)
    inference.set_truth(truth)

    estimate = inference.run(classifier, unknown)
    return CollectiveResult(
        estimate=estimate,
        classification=estimate.as_classification(),
        unknown=inference.unknown,
        iterations=inference.iterations_run,
        method=inference,
        accuracy=inference.current_accuracy() if truth is not None else None,
    )
