"""
COVID-19 Outbreak Simulator
Day-stepped, single-timeline epidemic progression model over a per-country dataset.
"""

from .etl.data_loader import DataLoadError, Dataset, load_dataset
from .engines.simulation_engine import SimulationEngine

__all__ = ["DataLoadError", "Dataset", "load_dataset", "SimulationEngine"]
