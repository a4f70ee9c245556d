"""Analysis orchestration."""

from .analysis_service import FoundationAnalyzer

__all__ = ["FoundationAnalyzer"]
