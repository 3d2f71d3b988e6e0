"""Persistence for user-submitted experiments."""

from torii.store.experiments import ExperimentNotFoundError, ExperimentStore

__all__ = ["ExperimentNotFoundError", "ExperimentStore"]
