#!/usr/bin/env python3
"""
SRLKit: Statistical Relational Learning Toolkit

Collective classification of partially labeled graphs.

Usage:
    # Label the unknown nodes of a graph stored as JSON
    python main.py run --input problem.json --method gibbs --config "numit=500" --seed 7

    # Write per-iteration predictions and a Pajek time network
    python main.py run --input problem.json --predictions out/run --pajek out/run.net

    # Run demos
    python main.py demo --method all

    # Run tests
    python main.py test
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional, Tuple

import networkx as nx
import numpy as np

# Handle imports whether running as package or directly
try:
    from srlkit import (
        Classification,
        CollectiveResult,
        LabelAttribute,
        SRLKitError,
        run_collective_inference,
        __version__,
    )
    from srlkit.classifiers.wvrn import WeightedVoteRelationalNeighbor
    from srlkit.inference.registry import InferenceStrategy, create_inference
    from srlkit.io.predictions import PredictionWriter
    from srlkit.solver import class_prior_estimate
except ImportError:
    sys.path.insert(0, str(Path(__file__).parent))
    from srlkit import (
        Classification,
        CollectiveResult,
        LabelAttribute,
        SRLKitError,
        run_collective_inference,
        __version__,
    )
    from srlkit.classifiers.wvrn import WeightedVoteRelationalNeighbor
    from srlkit.inference.registry import InferenceStrategy, create_inference
    from srlkit.io.predictions import PredictionWriter
    from srlkit.solver import class_prior_estimate


def load_problem_from_json(filepath: str) -> Tuple[nx.Graph, LabelAttribute, Optional[Classification]]:
    """
    Load a partially labeled graph from a JSON file.

    Expected format:
    {
        "attribute": "label",
        "classes": ["a", "b"],
        "directed": false,
        "nodes": {"n1": "a", "n2": null, "n3": "b"},
        "edges": [["n1", "n2"], ["n2", "n3", 2.0]],
        "truth": {"n2": "a"}
    }
    """
    with open(filepath, 'r') as f:
        data = json.load(f)

    attribute = LabelAttribute(data.get("attribute", "label"), tuple(data["classes"]))
    graph = nx.DiGraph() if data.get("directed", False) else nx.Graph()

    for node, label in data["nodes"].items():
        graph.add_node(str(node), **{attribute.name: label})

    for edge in data.get("edges", []):
        u, v = str(edge[0]), str(edge[1])
        weight = float(edge[2]) if len(edge) > 2 else 1.0
        graph.add_edge(u, v, weight=weight)

    truth = None
    if "truth" in data:
        truth = Classification(attribute, graph)
        for node, label in data["truth"].items():
            truth.set(str(node), attribute.index(label))
        # known labels are part of the truth as well
        for node, label in data["nodes"].items():
            if label is not None and truth.is_unknown(str(node)):
                truth.set(str(node), attribute.index(label))

    return graph, attribute, truth


def save_result_to_json(filepath: str, result: Any) -> None:
    """Save inference result to JSON file."""
    attribute = result.estimate.attribute
    output = {
        "method": result.method.name,
        "iterations": result.iterations,
        "accuracy": result.accuracy,
        "estimates": {
            str(node): {
                attribute.token(c): float(score)
                for c, score in enumerate(result.estimate.get(node))
            }
            for node in result.unknown if result.estimate.get(node) is not None
        },
        "labels": {
            str(node): attribute.token(result.classification.get(node))
            for node in result.unknown if not result.classification.is_unknown(node)
        },
    }

    with open(filepath, 'w') as f:
        json.dump(output, f, indent=2)


def cmd_run(args):
    """Execute the run command."""
    print(f"Loading problem from: {args.input}")
    graph, attribute, truth = load_problem_from_json(args.input)
    known = Classification.from_graph(graph, attribute)
    unknown = [node for node in graph.nodes if known.is_unknown(node)]

    print("\nProblem specification:")
    print(f"  Nodes: {graph.number_of_nodes()} ({len(known)} labeled, {len(unknown)} unknown)")
    print(f"  Edges: {graph.number_of_edges()}")
    print(f"  Classes: {', '.join(attribute.tokens)}")

    try:
        classifier = WeightedVoteRelationalNeighbor(graph, known, args.classifier_config)
        inference = create_inference(args.method, args.config, rng=args.seed)
    except SRLKitError as e:
        print(f"Error: {e}")
        return 1

    inference.initial_prior = class_prior_estimate(known, unknown)
    inference.set_truth(truth)
    inference.show_iteration_accuracies = args.show_accuracy and truth is not None
    if args.predictions:
        inference.save_predictions(args.predictions, PredictionWriter(fmt=args.format))
    if args.pajek:
        inference.save_predictions_in_pajek(args.pajek)

    print(f"\nRunning {inference.name} ({inference.num_iterations} iterations max)...")
    estimate = inference.run(classifier, unknown)
    print(f"  Sweeps performed: {inference.iterations_run}")

    writer = PredictionWriter(sys.stdout, args.format)
    print("\nEstimates:")
    for node in inference.unknown:
        writer.println(node, estimate, truth)

    accuracy = None
    if truth is not None:
        accuracy = inference.current_accuracy()
        print(f"\nAccuracy on unknown nodes: {accuracy:.4f}")

    if args.output:
        result = CollectiveResult(
            estimate=estimate,
            classification=estimate.as_classification(),
            unknown=inference.unknown,
            iterations=inference.iterations_run,
            method=inference,
            accuracy=accuracy,
        )
        save_result_to_json(args.output, result)
        print(f"\nResults saved to: {args.output}")

    return 0


def two_communities(size: int = 5) -> Tuple[nx.Graph, LabelAttribute, Classification]:
    """Two cliques joined by one bridge edge, two labeled nodes per clique."""
    attribute = LabelAttribute("label", ("left", "right"))
    graph = nx.Graph()
    truth = Classification(attribute, graph)
    for side, cls in (("L", 0), ("R", 1)):
        members = [f"{side}{i}" for i in range(size)]
        for node in members:
            graph.add_node(node, label=None)
            truth.set(node, cls)
        for i, u in enumerate(members):
            for v in members[i + 1:]:
                graph.add_edge(u, v, weight=1.0)
        for node in members[-2:]:
            graph.nodes[node]["label"] = attribute.token(cls)
    graph.add_edge("L0", "R0", weight=1.0)
    return graph, attribute, truth


def demo_method(method: str, seed: int = 7) -> bool:
    """Demo: one strategy on the two-community graph"""
    print("=" * 60)
    print(f"Demo: {method} on two communities")
    print("=" * 60)

    graph, attribute, truth = two_communities()
    config = {"burnin": 20, "numit": 200, "numchains": 2} if method == "gibbs" else None
    result = run_collective_inference(
        graph, attribute, method=method, config=config, truth=truth, seed=seed,
    )

    print(f"\nSweeps performed: {result.iterations}")
    print("Estimates:")
    for node in result.unknown:
        probs = ', '.join(f'{p:.4f}' for p in result.estimate.get(node))
        print(f"  P({node}) = [{probs}] -> {attribute.token(result.classification.get(node))}")

    print(f"\nAccuracy: {result.accuracy:.4f}")
    passed = result.accuracy is not None and result.accuracy >= 0.75
    return passed


def cmd_demo(args):
    """Execute the demo command."""
    methods = [s.value for s in InferenceStrategy]

    if args.method == "all":
        results = []
        for name in methods:
            try:
                passed = demo_method(name, args.seed)
                results.append((name, passed))
            except SRLKitError as e:
                print(f"Error in {name}: {e}")
                results.append((name, False))
            print()

        print("=" * 60)
        print("Summary")
        print("=" * 60)
        all_passed = True
        for name, passed in results:
            status = "PASS" if passed else "FAIL"
            print(f"  {name}: {status}")
            if not passed:
                all_passed = False

        return 0 if all_passed else 1

    try:
        passed = demo_method(args.method, args.seed)
        return 0 if passed else 1
    except SRLKitError as e:
        print(f"Error: {e}")
        return 1


def cmd_test(args):
    """Execute the test command."""
    import subprocess

    test_dir = Path(__file__).parent / "tests"
    if not test_dir.exists():
        print(f"Test directory not found: {test_dir}")
        return 1

    cmd = [sys.executable, "-m", "pytest", str(test_dir)]
    if args.verbose:
        cmd.append("-v")
    if args.coverage:
        cmd.extend(["--cov=srlkit", "--cov-report=term-missing"])

    print(f"Running: {' '.join(cmd)}")
    result = subprocess.run(cmd, cwd=Path(__file__).parent)
    return result.returncode


def cmd_info(args):
    """Display system information."""
    print(f"SRLKit v{__version__}")
    print("Statistical Relational Learning Toolkit")
    print()
    print("Inference methods:")
    print("  null       - single estimate per node from the initial prior")
    print("  iterative  - iterative classification (ICA), stops when labels settle")
    print("  relaxation - damped synchronous relaxation labeling")
    print("  gibbs      - Gibbs sampling with burn-in and multiple chains")
    print()
    print("Python:", sys.version.split()[0])
    print("NumPy:", np.__version__)
    print("NetworkX:", nx.__version__)
    return 0


def main():
    parser = argparse.ArgumentParser(
        prog="srlkit",
        description="SRLKit: Statistical Relational Learning Toolkit",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Label a graph with relaxation labeling
  srlkit run --input problem.json --method relaxation --config "beta=0.8,decay=0.95"

  # Gibbs sampling with a fixed seed
  srlkit run --input problem.json --method gibbs --config "burnin=50,numit=500" --seed 1

  # Run demos
  srlkit demo --method all

  # Run tests
  srlkit test -v
"""
    )

    parser.add_argument(
        "--version", "-V",
        action="version",
        version=f"SRLKit {__version__}"
    )
    parser.add_argument("--verbose", "-v", dest="verbosity", action="count", default=0, help="More logging (-vv for debug)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Run command
    run_parser = subparsers.add_parser("run", help="Label the unknown nodes of a graph")
    run_parser.add_argument("--input", "-i", type=str, required=True, help="Input JSON file")
    run_parser.add_argument("--output", "-o", type=str, help="Output JSON file")
    run_parser.add_argument(
        "--method", "-m",
        default="relaxation",
        help="Inference method: null, iterative, relaxation, gibbs (default: relaxation)"
    )
    run_parser.add_argument("--config", "-c", type=str, default=None, help="Method options: 'numit=10,beta=0.5'")
    run_parser.add_argument("--classifier-config", type=str, default=None, help="wvRN options: 'laplace=smoothed'")
    run_parser.add_argument("--seed", type=int, default=None, help="Random seed")
    run_parser.add_argument("--format", "-f", type=str, default=None, help="Prediction line format, e.g. '%%ID %%prediction'")
    run_parser.add_argument("--predictions", type=str, help="Prefix for per-iteration prediction files")
    run_parser.add_argument("--pajek", type=str, help="Pajek time network output file")
    run_parser.add_argument("--show-accuracy", action="store_true", help="Log accuracy after every iteration")

    # Demo command
    demo_parser = subparsers.add_parser("demo", help="Run demonstration examples")
    demo_parser.add_argument(
        "--method", "-m",
        choices=[s.value for s in InferenceStrategy] + ["all"],
        default="all",
        help="Which method to demonstrate (default: all)"
    )
    demo_parser.add_argument("--seed", type=int, default=7, help="Random seed (default: 7)")

    # Test command
    test_parser = subparsers.add_parser("test", help="Run test suite")
    test_parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    test_parser.add_argument("--coverage", action="store_true", help="With coverage")

    # Info command
    subparsers.add_parser("info", help="Show system information")

    args = parser.parse_args()

    level = logging.WARNING
    if args.verbosity == 1:
        level = logging.INFO
    elif args.verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "run":
        return cmd_run(args)
    elif args.command == "demo":
        return cmd_demo(args)
    elif args.command == "test":
        return cmd_test(args)
    elif args.command == "info":
        return cmd_info(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
