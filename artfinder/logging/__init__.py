"""Structured, run-scoped logging for ART Finder pipelines."""
from artfinder.logging.models import LogLevel, LogComponent, LogEntry
from artfinder.logging.pipeline_logger import (
    PipelineLogger, init_logger, get_logger, current_logger,
)
from artfinder.logging.pipeline_run_logger import PipelineRunLogger, StageRecord

__all__ = [
    "LogLevel", "LogComponent", "LogEntry",
    "PipelineLogger", "init_logger", "get_logger", "current_logger",
    "PipelineRunLogger", "StageRecord",
]
