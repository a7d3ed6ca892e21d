"""Finalization of completed competitions and its administrative inverses."""

from .engine import FinalizationEngine, FinalizationPlan, apply_annual_delta
from .saga import RESET_DRAFT, RESET_FINALIZATION, ResetSaga, SagaReport, SagaStep, run_reset

__all__ = [
    "FinalizationEngine",
    "FinalizationPlan",
    "RESET_DRAFT",
    "RESET_FINALIZATION",
    "ResetSaga",
    "SagaReport",
    "SagaStep",
    "apply_annual_delta",
    "run_reset",
]
