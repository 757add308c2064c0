"""Batch simulation of seeded combats."""

from .batch import BatchSummary, simulate_batch, combat_seed

__all__ = ["BatchSummary", "simulate_batch", "combat_seed"]
