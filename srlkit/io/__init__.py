"""
IO module: prediction and graph snapshot writers.
"""

from srlkit.io.pajek import annotate_graph, prediction_color, truth_color, write_pajek_snapshot
from srlkit.io.predictions import PredictionWriter

__all__ = [
    "PredictionWriter",
    "annotate_graph",
    "prediction_color",
    "truth_color",
    "write_pajek_snapshot",
]
