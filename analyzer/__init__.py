# Analyzer package - Lighthouse page audit engine
from .lighthouse import (
    DebuggingPortError,
    LighthouseCLI,
    PageAuditEngine,
    normalize_score,
    scores_from_report,
)

__all__ = [
    "DebuggingPortError",
    "LighthouseCLI",
    "PageAuditEngine",
    "normalize_score",
    "scores_from_report",
]
