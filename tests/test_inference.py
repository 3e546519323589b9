"""
Tests for the inference driver and the four strategies.
"""

import logging

import networkx as nx
import numpy as np
import pytest

from srlkit.classifiers import Classification, Estimate, LabelAttribute, NetworkClassifierBase, WeightedVoteRelationalNeighbor
from srlkit.exceptions import ConfigurationError, IllegalStateError
from srlkit.inference import (
    DoubleBuffer,
    GibbsSampling,
    InferenceListener,
    InferenceState,
    IterativeClassification,
    NullInference,
    RelaxationLabeling,
)
from srlkit.solver import class_prior_estimate

ATTR = LabelAttribute("label", ("a", "b"))
NODES = ["u1", "u2", "u3"]


class ConstantClassifier(NetworkClassifierBase):
    """Predicts the same vector for every node, except those in `fail`."""

    def __init__(self, vector, fail=()):
        super().__init__(ATTR)
        self.vector = np.asarray(vector, dtype=np.float64)
        self.fail = set(fail)
        self.runs = 0
        self.contexts = []

    def initialize_run(self, prior, unknown):
        self.runs += 1

    def _estimate(self, node, prior, out):
        self.contexts.append(prior)
        if node in self.fail:
            return False
        out[:] = self.vector
        return True


class ExplodingClassifier(NetworkClassifierBase):
    def __init__(self):
        super().__init__(ATTR)

    def _estimate(self, node, prior, out):
        raise RuntimeError("boom")


class SweepRecorder(NetworkClassifierBase):
    """
    Constant predictor that records, for every visit, the sweep number and
    the context's vector for `watch`. Nodes in `decline` fail from sweep
    `decline_from` onwards.
    """

    def __init__(self, vector, watch=None, decline=(), decline_from=1):
        super().__init__(ATTR)
        self.vector = np.asarray(vector, dtype=np.float64)
        self.watch = watch
        self.decline = set(decline)
        self.decline_from = decline_from
        self.sweep = 0
        self.visits = []

    def initialize_run(self, prior, unknown):
        self.sweep += 1

    def _estimate(self, node, prior, out):
        seen = None if self.watch is None else prior.get(self.watch)
        self.visits.append((self.sweep, node, None if seen is None else seen.copy()))
        if node in self.decline and self.sweep >= self.decline_from:
            return False
        out[:] = self.vector
        return True


class RecordingListener(InferenceListener):
    def __init__(self, name, log):
        self.name = name
        self.log = log

    def estimate(self, estimate, unknown):
        self.log.append((self.name, "estimate", tuple(unknown)))

    def classify(self, classification, unknown):
        self.log.append((self.name, "classify", tuple(unknown)))

    def iterate(self, graph, unknown):
        self.log.append((self.name, "iterate", tuple(unknown)))


def uniform_prior(vector=(0.5, 0.5)):
    return Estimate(ATTR, estimates={n: np.array(vector) for n in NODES})


def two_communities(size=5):
    graph = nx.Graph()
    truth = Classification(ATTR, graph)
    for prefix, cls in (("L", 0), ("R", 1)):
        members = [f"{prefix}{i}" for i in range(size)]
        graph.add_nodes_from(members)
        for i, u in enumerate(members):
            truth.set(u, cls)
            for v in members[i + 1:]:
                graph.add_edge(u, v)
        for node in members[-2:]:
            graph.nodes[node]["label"] = ATTR.token(cls)
    graph.add_edge("L0", "R0")
    known = Classification.from_graph(graph, ATTR)
    unknown = [n for n in graph.nodes if known.is_unknown(n)]
    return graph, known, unknown, truth


class TestLifecycle:
    def test_states(self):
        method = NullInference()
        assert method.state is InferenceState.UNCONFIGURED
        method.configure()
        assert method.state is InferenceState.CONFIGURED
        method.initial_prior = uniform_prior()
        method.reset(NODES)
        assert method.state is InferenceState.RUNNING
        method.run(ConstantClassifier([1.0, 0.0]), NODES)
        assert method.state is InferenceState.TERMINAL

    def test_reset_without_prior(self):
        method = RelaxationLabeling("numit=3")
        with pytest.raises(IllegalStateError):
            method.reset(NODES)
        with pytest.raises(IllegalStateError):
            method.run(ConstantClassifier([1.0, 0.0]), NODES)

    def test_iterate_before_reset(self):
        method = IterativeClassification()
        with pytest.raises(IllegalStateError):
            method.iterate(ConstantClassifier([1.0, 0.0]))

    def test_run_configures_defaults(self):
        method = IterativeClassification()
        method.initial_prior = uniform_prior()
        method.run(ConstantClassifier([0.7, 0.3]), NODES)
        assert method.num_iterations == IterativeClassification.DEFAULT_ITERATIONS

    def test_malformed_numit(self):
        with pytest.raises(ConfigurationError):
            RelaxationLabeling("numit=abc")

    def test_copy_invariant(self):
        prior = uniform_prior()
        prior.set("u2", [0.9, 0.1])
        method = RelaxationLabeling("numit=5")
        method.initial_prior = prior
        method.reset(NODES)
        for node in NODES:
            assert np.array_equal(method.current_estimate().get(node), prior.get(node))
            assert method.current_estimate().get(node) is not prior.get(node)

    def test_initial_prior_not_mutated(self):
        graph, known, unknown, truth = two_communities()
        prior = class_prior_estimate(known, unknown)
        before = {n: prior.get(n).copy() for n in unknown}
        for method in (NullInference(), IterativeClassification(), RelaxationLabeling("numit=5"),
                       GibbsSampling("burnin=2,numit=3,numchains=1", rng=0)):
            method.initial_prior = prior
            method.run(WeightedVoteRelationalNeighbor(graph, known), unknown)
            for n in unknown:
                assert np.array_equal(prior.get(n), before[n])

    def test_unknowns_consumed_once(self):
        method = NullInference()
        method.initial_prior = uniform_prior()
        method.run(ConstantClassifier([1.0, 0.0]), iter(NODES))
        assert method.unknown == tuple(NODES)

    def test_classifier_exception_aborts_run(self):
        method = RelaxationLabeling("numit=3")
        method.initial_prior = uniform_prior()
        with pytest.raises(RuntimeError):
            method.run(ExplodingClassifier(), NODES)
        assert method.state is InferenceState.TERMINAL

    def test_initialize_run_called_per_sweep(self):
        method = RelaxationLabeling("numit=4")
        method.initial_prior = uniform_prior()
        classifier = ConstantClassifier([1.0, 0.0])
        method.run(classifier, NODES)
        assert classifier.runs == 4

    def test_converged_log(self, caplog):
        method = IterativeClassification("numit=10")
        method.initial_prior = uniform_prior()
        with caplog.at_level(logging.INFO, logger="srlkit.inference"):
            method.run(ConstantClassifier([0.7, 0.3]), NODES)
        assert "converged after 2 iterations (max=10)" in caplog.text


class TestNullInference:
    def test_single_shot(self):
        method = NullInference()
        method.initial_prior = uniform_prior()
        method.reset(NODES)
        classifier = ConstantClassifier([0.2, 0.8])
        assert method.iterate(classifier) is True
        assert method.iterate(classifier) is False

    def test_estimates_from_initial_prior(self):
        prior = uniform_prior()
        method = NullInference("numit=5")
        method.initial_prior = prior
        classifier = ConstantClassifier([0.2, 0.8], fail={"u3"})
        result = method.run(classifier, NODES)
        assert method.iterations_run == 2
        assert np.allclose(result.get("u1"), [0.2, 0.8])
        # failed node keeps its prior
        assert np.allclose(result.get("u3"), [0.5, 0.5])
        assert all(ctx is prior for ctx in classifier.contexts)


class TestIterativeClassification:
    def test_quiescence(self):
        method = IterativeClassification("numit=10")
        method.initial_prior = uniform_prior()
        method.reset(NODES)
        classifier = ConstantClassifier([0.7, 0.3])
        assert method.iterate(classifier) is True
        assert method.iterate(classifier) is False

    def test_run_stops_after_two_sweeps(self):
        method = IterativeClassification("numit=10")
        method.initial_prior = uniform_prior()
        result = method.run(ConstantClassifier([0.7, 0.3]), NODES)
        assert method.iterations_run == 2
        for node in NODES:
            assert np.allclose(result.get(node), [0.7, 0.3])

    def test_scratch_holds_hard_labels(self):
        method = IterativeClassification("numit=1")
        method.initial_prior = uniform_prior()
        method.run(ConstantClassifier([0.7, 0.3]), NODES)
        assert np.array_equal(method.scratch.get("u1"), [1.0, 0.0])

    def test_failures_do_not_count_as_change(self):
        method = IterativeClassification("numit=10")
        method.initial_prior = uniform_prior()
        result = method.run(ConstantClassifier([0.7, 0.3], fail=set(NODES)), NODES)
        assert method.iterations_run == 1
        assert np.allclose(result.get("u1"), [0.5, 0.5])

    def test_update_visible_within_sweep(self):
        method = IterativeClassification("numit=1")
        method.initial_prior = uniform_prior()
        classifier = SweepRecorder([0.7, 0.3], watch="u1")
        method.run(classifier, NODES)
        seen = {node: vec for sweep, node, vec in classifier.visits if sweep == 1}
        assert seen["u1"] is None
        assert np.array_equal(seen["u2"], [1.0, 0.0])
        assert np.array_equal(seen["u3"], [1.0, 0.0])

    def test_declined_label_stays_visible(self):
        method = IterativeClassification("numit=3")
        method.initial_prior = uniform_prior()
        classifier = SweepRecorder([0.7, 0.3], watch="u1", decline={"u1"}, decline_from=2)
        method.run(classifier, NODES)
        seen_by_u2 = [(sweep, vec is not None) for sweep, node, vec in classifier.visits if node == "u2"]
        assert seen_by_u2 == [(1, True), (2, True), (3, True)]
        assert np.array_equal(method.scratch.get("u1"), [1.0, 0.0])
        # a labeled node that declines still counts as a change
        assert method.iterations_run == 3

    def test_recovers_communities(self):
        graph, known, unknown, truth = two_communities()
        method = IterativeClassification()
        method.initial_prior = class_prior_estimate(known, unknown)
        method.set_truth(truth)
        method.run(WeightedVoteRelationalNeighbor(graph, known), unknown)
        assert method.current_accuracy() == pytest.approx(1.0)
        assert method.iterations_run < method.num_iterations


class TestRelaxationLabeling:
    def test_merge_law(self):
        method = RelaxationLabeling("numit=1,beta=0.4")
        method.initial_prior = uniform_prior((0.6, 0.4))
        result = method.run(ConstantClassifier([0.2, 0.8]), NODES)
        for node in NODES:
            assert np.allclose(result.get(node), [0.44, 0.56])
            assert np.isclose(np.sum(result.get(node)), 1.0)

    def test_beta_one_replaces(self):
        method = RelaxationLabeling("numit=1")
        method.initial_prior = uniform_prior((0.6, 0.4))
        result = method.run(ConstantClassifier([0.2, 0.8]), NODES)
        assert np.allclose(result.get("u1"), [0.2, 0.8])

    def test_full_budget(self):
        method = RelaxationLabeling("numit=7")
        method.initial_prior = uniform_prior()
        method.run(ConstantClassifier([0.7, 0.3]), NODES)
        assert method.iterations_run == 7
        assert method.buffers.swaps == 7

    def test_beta_decays(self):
        method = RelaxationLabeling("numit=3,beta=0.8,decay=0.5")
        method.initial_prior = uniform_prior()
        method.run(ConstantClassifier([0.7, 0.3]), NODES)
        assert method.beta == pytest.approx(0.8 * 0.5 ** 3)
        assert method.beta0 == pytest.approx(0.8)

    @pytest.mark.parametrize("options,beta,decay", [
        ("beta=1.5", 1.0, 0.99),
        ("beta=-2", 0.0, 0.99),
        ("beta=nan", 1.0, 0.99),
        ("beta=inf,decay=0.5", 1.0, 0.5),
        ("beta=0.3,decay=1.5", 0.3, 0.3),
        ("beta=0.3,decay=-0.1", 0.3, 0.3),
    ])
    def test_clamping(self, options, beta, decay):
        method = RelaxationLabeling(options)
        assert method.beta0 == pytest.approx(beta)
        assert method.decay == pytest.approx(decay)

    def test_synchronous_reads(self):
        method = RelaxationLabeling("numit=1")
        method.initial_prior = uniform_prior()
        method.reset(NODES)
        current = method.buffers.current
        classifier = ConstantClassifier([1.0, 0.0])
        method.iterate(classifier)
        assert all(ctx is current for ctx in classifier.contexts)
        assert method.current_estimate() is not current

    def test_failure_keeps_old(self):
        method = RelaxationLabeling("numit=3")
        method.initial_prior = uniform_prior((0.6, 0.4))
        result = method.run(ConstantClassifier([0.2, 0.8], fail={"u2"}), NODES)
        assert np.allclose(result.get("u2"), [0.6, 0.4])
        assert np.allclose(result.get("u1"), [0.2, 0.8])

    def test_default_configuration(self):
        cfg = RelaxationLabeling.default_configuration()
        assert cfg.get_int("numit", 0) == 99
        assert cfg.get_float("beta", 0.0) == 1.0
        assert cfg.get_float("decay", 0.0) == 0.99


class TestGibbsSampling:
    def test_budget_defaulting(self):
        method = GibbsSampling("burnin=0,numit=0,numchains=0")
        assert method.burnin == 200
        assert method.sampling_iterations == 2000
        assert method.num_chains == 10
        assert method.num_iterations == 2200

    def test_budget(self):
        method = GibbsSampling("burnin=3,numit=4,numchains=2")
        assert method.num_iterations == 7

    def test_deterministic_marginal(self):
        method = GibbsSampling("numchains=1,burnin=0,numit=5", rng=0)
        method.initial_prior = uniform_prior()
        result = method.run(ConstantClassifier([1.0, 0.0]), NODES)
        assert method.iterations_run == method.num_iterations
        for node in NODES:
            assert np.array_equal(result.get(node), [1.0, 0.0])

    def test_counts_only_after_burnin(self):
        method = GibbsSampling("burnin=4,numit=3,numchains=2", rng=0)
        method.initial_prior = uniform_prior()
        method.run(ConstantClassifier([0.0, 1.0]), NODES)
        assert method.samples_counted == 3
        assert np.array_equal(method.counts[:, 1], [6.0, 6.0, 6.0])

    def test_estimate_before_counting_is_prior(self):
        method = GibbsSampling("burnin=5,numit=5", rng=0)
        method.initial_prior = uniform_prior((0.6, 0.4))
        method.reset(NODES)
        method.iterate(ConstantClassifier([1.0, 0.0]))
        assert np.allclose(method.current_estimate().get("u1"), [0.6, 0.4])

    def test_draws_in_proportion(self):
        method = GibbsSampling("burnin=1,numit=400,numchains=1", rng=0)
        method.initial_prior = uniform_prior()
        result = method.run(ConstantClassifier([0.5, 0.5]), NODES)
        assert np.all(method.counts > 0)
        for node in NODES:
            assert result.get(node)[0] == pytest.approx(0.5, abs=0.1)

    def test_chains_visited_in_permutation_order(self):
        method = GibbsSampling("burnin=1,numit=1,numchains=2", rng=4)
        method.initial_prior = uniform_prior()
        classifier = SweepRecorder([0.5, 0.5])
        method.run(classifier, NODES)
        per_sweep = [NODES[i] for chain in method.chains for i in chain]
        assert [node for _, node, _ in classifier.visits] == per_sweep * 2

    def test_unsampled_node_keeps_prior(self):
        prior = uniform_prior()
        prior.set("u3", [0.0, 1.0])
        method = GibbsSampling("burnin=2,numit=3,numchains=1", rng=0)
        method.initial_prior = prior
        result = method.run(ConstantClassifier([1.0, 0.0], fail={"u3"}), NODES)
        assert np.array_equal(result.get("u1"), [1.0, 0.0])
        assert np.array_equal(result.get("u3"), [0.0, 1.0])
        assert result.classification_of("u3") == 1

    def test_chains_are_permutations(self):
        method = GibbsSampling("numchains=3", rng=1)
        method.initial_prior = uniform_prior()
        method.reset(NODES)
        assert len(method.chains) == 3
        for chain in method.chains:
            assert sorted(chain.tolist()) == [0, 1, 2]

    def test_marginals_are_normalized(self):
        graph, known, unknown, truth = two_communities()
        method = GibbsSampling("burnin=10,numit=50,numchains=2", rng=5)
        method.initial_prior = class_prior_estimate(known, unknown)
        result = method.run(WeightedVoteRelationalNeighbor(graph, known), unknown)
        for node in unknown:
            assert np.isclose(np.sum(result.get(node)), 1.0)

    def test_seed_reproducibility(self):
        graph, known, unknown, truth = two_communities()
        results = []
        for _ in range(2):
            method = GibbsSampling("burnin=5,numit=30,numchains=2")
            method.initial_prior = class_prior_estimate(known, unknown)
            estimate = method.run(WeightedVoteRelationalNeighbor(graph, known), unknown, rng=42)
            results.append({n: estimate.get(n).copy() for n in unknown})
        for node in unknown:
            assert np.array_equal(results[0][node], results[1][node])


class TestDoubleBuffer:
    def test_swap(self):
        first, second = Estimate(ATTR), Estimate(ATTR)
        buffers = DoubleBuffer(first, second)
        assert buffers.swap() is second
        assert buffers.next is first
        assert buffers.swap() is first
        assert buffers.swaps == 2

    def test_same_buffer(self):
        e = Estimate(ATTR)
        with pytest.raises(ValueError):
            DoubleBuffer(e, e)


class TestListeners:
    def test_sweep_order(self):
        log = []
        method = RelaxationLabeling("numit=2")
        method.initial_prior = uniform_prior()
        method.add_listener(RecordingListener("x", log))
        method.add_listener(RecordingListener("y", log))
        method.run(ConstantClassifier([1.0, 0.0]), NODES)
        sweep = [
            ("x", "iterate", tuple(NODES)),
            ("y", "iterate", tuple(NODES)),
            ("x", "estimate", tuple(NODES)),
            ("y", "estimate", tuple(NODES)),
        ]
        assert log == sweep * 2

    def test_classify_notifies(self):
        log = []
        method = NullInference()
        method.initial_prior = uniform_prior()
        method.add_listener(RecordingListener("x", log))
        labels = method.classify(ConstantClassifier([0.2, 0.8]), NODES)
        assert labels.get("u1") == 1
        assert log[-1] == ("x", "classify", tuple(NODES))

    def test_no_duplicates_and_removal(self):
        log = []
        listener = RecordingListener("x", log)
        method = NullInference()
        method.add_listener(listener)
        method.add_listener(listener)
        assert len(method.listeners) == 1
        method.remove_listener(listener)
        assert method.listeners == []

    def test_notification_switch(self):
        log = []
        method = NullInference()
        method.initial_prior = uniform_prior()
        method.add_listener(RecordingListener("x", log))
        method.notify_listeners = False
        method.classify(ConstantClassifier([0.2, 0.8]), NODES)
        assert log == []

    def test_listener_exception_propagates(self):
        class Failing(InferenceListener):
            def estimate(self, estimate, unknown):
                raise KeyError("listener")

        method = RelaxationLabeling("numit=3")
        method.initial_prior = uniform_prior()
        method.add_listener(Failing())
        with pytest.raises(KeyError):
            method.run(ConstantClassifier([1.0, 0.0]), NODES)
        assert method.iterations_run == 1
        assert method.state is InferenceState.TERMINAL


class TestResults:
    def test_estimate_into(self):
        method = NullInference()
        method.initial_prior = uniform_prior()
        target = Estimate(ATTR)
        result = method.estimate_into(ConstantClassifier([0.2, 0.8]), NODES, target)
        assert result is target
        assert np.allclose(target.get("u2"), [0.2, 0.8])

    def test_classify_into(self):
        method = NullInference()
        method.initial_prior = uniform_prior()
        target = Classification(ATTR, labels={"other": 0})
        result = method.classify(ConstantClassifier([0.2, 0.8]), NODES, target)
        assert result is target
        assert target.get("u3") == 1
        assert target.get("other") == 0

    def test_accuracy(self):
        method = NullInference()
        method.initial_prior = uniform_prior()
        method.set_truth(Classification(ATTR, labels={"u1": 1, "u2": 1, "u3": 0}))
        method.run(ConstantClassifier([0.2, 0.8]), NODES)
        assert method.current_accuracy() == pytest.approx(2.0 / 3.0)

    def test_accuracy_without_truth(self):
        method = NullInference()
        method.initial_prior = uniform_prior()
        method.run(ConstantClassifier([0.2, 0.8]), NODES)
        assert method.current_accuracy() == 0.0

    def test_training_loo_accuracy(self):
        graph, known, unknown, truth = two_communities()
        method = RelaxationLabeling("numit=5")
        method.initial_prior = class_prior_estimate(known, unknown)
        method.set_truth(truth)
        classifier = WeightedVoteRelationalNeighbor(graph, known)
        method.run(classifier, unknown)
        assert method.current_training_loo_accuracy(classifier) == pytest.approx(1.0)

    def test_iteration_accuracies_logged(self, caplog):
        method = NullInference()
        method.initial_prior = uniform_prior()
        method.set_truth(Classification(ATTR, labels={"u1": 1}))
        method.show_iteration_accuracies = True
        with caplog.at_level(logging.INFO, logger="srlkit.inference"):
            method.run(ConstantClassifier([0.2, 0.8]), NODES)
        assert "iteration--1 accuracy" in caplog.text
        assert "iteration-0 accuracy" in caplog.text
