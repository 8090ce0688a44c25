"""Portfolio risk engine."""

from insight.services.risk.service import (
    PortfolioRiskEngine,
    RiskThresholds,
    TokenMetrics,
)

__all__ = ["PortfolioRiskEngine", "RiskThresholds", "TokenMetrics"]
