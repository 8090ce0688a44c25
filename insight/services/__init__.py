"""
Services module - business logic layer.

Contains all services and the ServiceFactory for dependency injection.
"""

from insight.services.factory import ServiceFactory
from insight.services.orchestrator import AnalysisOrchestrator

__all__ = ["ServiceFactory", "AnalysisOrchestrator"]
