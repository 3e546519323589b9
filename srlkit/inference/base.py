"""
srlkit/inference/base.py

Shared driver for collective inference methods.

A method moves through four states:

    UNCONFIGURED --configure--> CONFIGURED --reset--> RUNNING --run ends--> TERMINAL

`reset` copies the initial prior of every unknown node into a working
estimate; `run` then calls the strategy's `iterate` once per sweep until the
iteration budget is spent or a sweep reports that nothing changed. Strategies
only supply `configure`, `reset` and the per-sweep `_iterate`.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Hashable, Iterable, List, Mapping, Optional, Sequence, TextIO, Tuple, Union

import numpy as np

from srlkit.classifiers.classification import UNKNOWN, Classification
from srlkit.classifiers.estimate import Estimate
from srlkit.classifiers.network import NetworkClassifier
from srlkit.core.config import Configuration
from srlkit.core.vector_math import RandomSource, make_rng, one_hot_table
from srlkit.exceptions import IllegalStateError
from srlkit.inference.listener import InferenceListener
from srlkit.io.pajek import write_pajek_snapshot
from srlkit.io.predictions import PredictionWriter

logger = logging.getLogger(__name__)

ConfigLike = Union[Configuration, Mapping[str, object], str, None]


class InferenceState(Enum):
    UNCONFIGURED = "unconfigured"
    CONFIGURED = "configured"
    RUNNING = "running"
    TERMINAL = "terminal"


class InferenceMethod(ABC):
    """
    Base class of the collective inference strategies.

    Attributes:
        initial_prior: Caller-owned starting estimate; never mutated
        curr_prior: Working estimate over the unknown nodes
        unknown: Nodes being inferred, fixed at reset
        num_iterations: Sweep budget
        truth: Optional ground truth used only for accuracy reporting
        rng: Random generator used by stochastic strategies
    """

    name = "InferenceMethod"
    short_name = "Inference"
    description = ""
    DEFAULT_ITERATIONS = 100

    def __init__(self, config: ConfigLike = None, *, rng: RandomSource = None):
        self.initial_prior: Optional[Estimate] = None
        self.curr_prior: Optional[Estimate] = None
        self.unknown: Tuple[Hashable, ...] = ()
        self.tmp_predict: Optional[np.ndarray] = None
        self.id_matrix: Optional[np.ndarray] = None
        self.num_iterations = 0
        self.iterations_run = 0
        self.rng = make_rng(rng)
        self.state = InferenceState.UNCONFIGURED

        self.truth: Optional[Classification] = None
        self.show_iteration_accuracies = False
        self._out_predict: Optional[str] = None
        self._prediction_writer: Optional[PredictionWriter] = None
        self._append = False
        self._eval_nodes: Optional[Tuple[Hashable, ...]] = None
        self._header: Optional[str] = None
        self._pajek_file: Optional[str] = None
        self._pajek_stream: Optional[TextIO] = None

        self.listeners: List[InferenceListener] = []
        self.notify_listeners = True

        if config is not None:
            self.configure(config)

    # ------------------------------------------------------------------
    # Configuration and lifecycle
    # ------------------------------------------------------------------

    @classmethod
    def default_configuration(cls) -> Configuration:
        return Configuration({"numit": cls.DEFAULT_ITERATIONS})

    def configure(self, config: ConfigLike = None) -> None:
        """
        Read options; malformed numbers raise ConfigurationError.

        Args:
            config: Configuration, mapping, "key=value,..." string or None
                for defaults
        """
        cfg = Configuration.coerce(config)
        self.num_iterations = cfg.get_int("numit", self.DEFAULT_ITERATIONS)
        self.state = InferenceState.CONFIGURED
        logger.debug("%s configure: numit=%d", self.name, self.num_iterations)

    def reset(self, unknowns: Iterable[Hashable], rng: RandomSource = None) -> None:
        """
        Prepare the working state for a new run.

        Args:
            unknowns: Nodes to infer; consumed once, order is kept
            rng: Optional seed or Generator replacing the method's generator
        """
        if self.initial_prior is None:
            raise IllegalStateError("No initial priors defined!")
        if rng is not None:
            self.rng = make_rng(rng)

        num_classes = self.initial_prior.num_classes
        self.tmp_predict = np.zeros(num_classes, dtype=np.float64)
        self.id_matrix = one_hot_table(num_classes)
        self.unknown = tuple(unknowns)
        self.iterations_run = 0

        self.curr_prior = Estimate(self.initial_prior.attribute, self.initial_prior.graph)
        for node in self.unknown:
            self.curr_prior.set(node, self.initial_prior.get(node))
        self.state = InferenceState.RUNNING

    def iterate(self, classifier: NetworkClassifier) -> bool:
        """
        Run one sweep over the unknown nodes.

        Returns:
            False when the strategy detected that nothing changed
        """
        if self.state is not InferenceState.RUNNING:
            raise IllegalStateError(f"{self.name}.iterate called before reset (state={self.state.value})")
        return self._iterate(classifier)

    @abstractmethod
    def _iterate(self, classifier: NetworkClassifier) -> bool:
        ...

    # ------------------------------------------------------------------
    # Running
    # ------------------------------------------------------------------

    def run(
        self,
        classifier: NetworkClassifier,
        unknowns: Iterable[Hashable],
        *,
        rng: RandomSource = None,
    ) -> Estimate:
        """
        Reset and sweep until the budget is spent or nothing changes.

        Classifier exceptions are not caught: they abort the run.

        Returns:
            The final working estimate
        """
        if self.state is InferenceState.UNCONFIGURED:
            self.configure()
        self.reset(unknowns, rng=rng)
        classifier.begin_run(self.unknown)
        logger.debug("%s initial accuracy=%s", self.name, self.current_accuracy())
        try:
            self._report(-1, classifier)
            for i in range(self.num_iterations):
                classifier.initialize_run(self.curr_prior, self.unknown)
                changed = self.iterate(classifier)
                self.iterations_run = i + 1
                self._report(i, classifier)
                self._notify_sweep()
                if not changed:
                    logger.info(
                        "%s converged after %d iterations (max=%d)",
                        self.name, self.iterations_run, self.num_iterations,
                    )
                    break
        finally:
            self._close_pajek()
            self.state = InferenceState.TERMINAL
        return self.current_estimate()

    def estimate_into(
        self,
        classifier: NetworkClassifier,
        unknowns: Iterable[Hashable],
        result: Estimate,
        *,
        rng: RandomSource = None,
    ) -> Estimate:
        """Run and copy every inferred vector into a caller-owned estimate."""
        estimate = self.run(classifier, unknowns, rng=rng)
        for node in self.unknown:
            result.set(node, estimate.get(node))
        return result

    def classify(
        self,
        classifier: NetworkClassifier,
        unknowns: Iterable[Hashable],
        result: Optional[Classification] = None,
        *,
        rng: RandomSource = None,
    ) -> Classification:
        """
        Run and return the arg-max label of every unknown node.

        When `result` is given the labels are written into it and it is
        returned instead of a new Classification.
        """
        classification = self.run(classifier, unknowns, rng=rng).as_classification()
        if result is not None:
            for node in self.unknown:
                result.set(node, classification.get(node))
            classification = result
        if self.notify_listeners:
            for listener in self.listeners:
                listener.classify(classification, self.unknown)
        return classification

    def current_estimate(self) -> Estimate:
        if self.curr_prior is None:
            raise IllegalStateError(f"{self.name} has not been reset")
        return self.curr_prior

    # ------------------------------------------------------------------
    # Accuracy diagnostics
    # ------------------------------------------------------------------

    def current_accuracy(self) -> float:
        """Fraction of unknown nodes whose arg-max matches the truth."""
        if not self.unknown or self.truth is None:
            return 0.0
        estimate = self.current_estimate()
        correct = 0
        for node in self.unknown:
            label = self.truth.get(node)
            if label != UNKNOWN and label == estimate.classification_of(node):
                correct += 1
        return correct / len(self.unknown)

    def current_training_loo_accuracy(self, classifier: NetworkClassifier) -> float:
        """
        Leave-one-out accuracy over the labeled nodes that are not being
        inferred, keeping the current beliefs for the unknown ones.
        """
        if not self.unknown or self.truth is None:
            return 0.0
        unknown = set(self.unknown)
        known = [node for node in self.truth if node not in unknown]
        if not known:
            return 0.0
        correct = sum(
            1 for node in known
            if classifier.classify(node, self.curr_prior, False) == self.truth.get(node)
        )
        return correct / len(known)

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def set_truth(self, truth: Optional[Classification]) -> None:
        self.truth = truth

    def save_predictions(
        self,
        prefix: str,
        writer: Optional[PredictionWriter] = None,
        append: bool = False,
        eval_nodes: Optional[Sequence[Hashable]] = None,
        header: Optional[str] = None,
    ) -> None:
        """
        Write `<prefix>.<n>.predict` before the first sweep (n=0) and after
        every sweep n. `eval_nodes` defaults to the unknown nodes.
        """
        self._out_predict = prefix
        self._prediction_writer = writer if writer is not None else PredictionWriter()
        self._append = append
        self._eval_nodes = None if eval_nodes is None else tuple(eval_nodes)
        self._header = header

    def save_predictions_in_pajek(self, path: str) -> None:
        """Append a Pajek snapshot of the graph after every sweep."""
        self._pajek_file = path
        logger.info("%s will save inferences to Pajek time network %s", self.name, path)

    def _report(self, iteration: int, classifier: NetworkClassifier) -> None:
        if self.show_iteration_accuracies and (self.num_iterations < 250 or (iteration + 1) % 10 == 0):
            logger.info(
                "%s iteration-%d accuracy=%s trainingLOO=%s",
                self.name, iteration, self.current_accuracy(),
                self.current_training_loo_accuracy(classifier),
            )
        if self._out_predict is not None:
            logger.info("%s iteration-%d accuracy=%s", self.name, iteration, self.current_accuracy())
            self._write_predictions(iteration)
        if self._pajek_file is not None:
            self._write_pajek()

    def _write_predictions(self, iteration: int) -> None:
        path = f"{self._out_predict}.{iteration + 1}.predict"
        estimate = self.current_estimate()
        nodes = self.unknown if self._eval_nodes is None else self._eval_nodes
        writer = self._prediction_writer
        try:
            with open(path, "a" if self._append else "w", encoding="utf-8") as fh:
                if self._header is not None:
                    fh.write(self._header + "\n")
                writer.output = fh
                for node in nodes:
                    writer.println(node, estimate, self.truth)
        except OSError:
            logger.warning("Error writing to '%s'", path, exc_info=True)
        finally:
            writer.output = None

    def _write_pajek(self) -> None:
        estimate = self.current_estimate()
        if estimate.graph is None:
            logger.warning("%s cannot write Pajek snapshots: estimate has no graph", self.name)
            self._pajek_file = None
            return
        try:
            if self._pajek_stream is None:
                self._pajek_stream = open(self._pajek_file, "w", encoding="utf-8")
            write_pajek_snapshot(estimate.graph, self._pajek_stream, self.truth, estimate)
        except OSError:
            logger.warning("Error writing Pajek snapshot to '%s'", self._pajek_file, exc_info=True)
            self._close_pajek()
            self._pajek_file = None

    def _close_pajek(self) -> None:
        if self._pajek_stream is None:
            return
        try:
            self._pajek_stream.write("\n")
            self._pajek_stream.close()
        except OSError:
            logger.warning("Error closing Pajek file '%s'", self._pajek_file, exc_info=True)
        self._pajek_stream = None

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: InferenceListener) -> None:
        if listener not in self.listeners:
            self.listeners.append(listener)

    def remove_listener(self, listener: InferenceListener) -> None:
        if listener in self.listeners:
            self.listeners.remove(listener)

    def clear_listeners(self) -> None:
        self.listeners.clear()

    def _notify_sweep(self) -> None:
        if not self.notify_listeners or not self.listeners:
            return
        estimate = self.current_estimate()
        for listener in self.listeners:
            listener.iterate(estimate.graph, self.unknown)
        for listener in self.listeners:
            listener.estimate(estimate, self.unknown)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(numit={self.num_iterations}, state={self.state.value})"
