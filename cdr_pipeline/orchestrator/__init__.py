"""Workflow orchestration for cleaning, reporting, and storing CDR batches."""

from .service import BatchOrchestrator, BatchResult, RunSummary

__all__ = ["BatchOrchestrator", "BatchResult", "RunSummary"]
