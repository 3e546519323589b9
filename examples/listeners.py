"""
Example: Watching relaxation labeling converge.

A listener records the belief of one node after every sweep.
"""

import networkx as nx
from srlkit import (
    Classification,
    InferenceListener,
    LabelAttribute,
    RelaxationLabeling,
    WeightedVoteRelationalNeighbor,
)
from srlkit.solver import class_prior_estimate


class Trace(InferenceListener):
    def __init__(self, node):
        self.node = node
        self.history = []

    def estimate(self, estimate, unknown):
        self.history.append(estimate.get(self.node).copy())


def main():
    attribute = LabelAttribute("label", ("pos", "neg"))
    graph = nx.path_graph(6)
    graph.nodes[0]["label"] = "pos"
    graph.nodes[5]["label"] = "neg"

    known = Classification.from_graph(graph, attribute)
    unknown = [n for n in graph.nodes if known.is_unknown(n)]

    rl = RelaxationLabeling("numit=20,beta=0.5,decay=0.9")
    rl.initial_prior = class_prior_estimate(known, unknown)
    trace = Trace(2)
    rl.add_listener(trace)
    rl.run(WeightedVoteRelationalNeighbor(graph, known), unknown)

    for i, vec in enumerate(trace.history):
        print(f"sweep {i + 1:2d}: P(2) = [{vec[0]:.4f}, {vec[1]:.4f}]")


if __name__ == "__main__":
    main()
