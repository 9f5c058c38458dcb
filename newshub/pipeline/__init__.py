"""Pipeline orchestration."""

from .orchestrator import PipelineOrchestrator, PipelineStage, SummarisationOrchestrator

__all__ = ["PipelineOrchestrator", "PipelineStage", "SummarisationOrchestrator"]
