"""
Portfolio risk engine.

Turns wallet holdings plus per-token market metrics into concentration,
risk and diversity scores, per-token insights and ordered recommendations.
This is the "brain" of the wallet analysis; it performs no I/O.

Key formulas:
- concentration_i = value_i / total_value (0 for every token if total is 0)
- risk_score = min(1, Σ concentration_i * volatility_i)
- diversity_score = 1 - Σ concentration_i² (1.0 for an empty/zero wallet)

Risk level matrix (concentration x volatility):
- concentration < 10%            -> Low
- 10% ≤ concentration ≤ 20%      -> Medium (vol < 0.5) | High (vol ≥ 0.5)
- concentration > 20%            -> High (vol < 0.5) | VeryHigh (vol ≥ 0.5)

Suggested action (first match wins):
- ReduceExposure:   High/VeryHigh and concentration > 20%
- IncreasePosition: Low, concentration < 5% and rising price
- Sell:             VeryHigh and strongly falling price
- Buy:              Low and strongly rising price
- Hold:             otherwise
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from insight.core.exceptions import InternalError
from insight.core.models import (
    PortfolioMetrics,
    RiskLevel,
    SuggestedAction,
    TokenBalance,
    TokenInsight,
    WalletAnalysis,
)

logger = logging.getLogger(__name__)

# Relative tolerance for Σ concentration == 1
CONCENTRATION_TOLERANCE = 1e-6

DIVERSIFY_RECOMMENDATION = "Consider diversifying your portfolio across more assets"
REBALANCE_RECOMMENDATION = "Portfolio is highly concentrated. Consider rebalancing."


def reduce_exposure_recommendation(token_address: str) -> str:
    return f"Consider reducing exposure to token {token_address}"


@dataclass(frozen=True)
class RiskThresholds:
    """
    Threshold values for risk classification.

    Frozen dataclass ensures immutability.
    Can be loaded from config in the future.
    """

    # Concentration bands for the risk level matrix
    low_concentration: float = 0.10
    high_concentration: float = 0.20

    # Normalized volatility at or above which a position counts as volatile
    high_volatility: float = 0.5

    # Suggested action rules
    reduce_exposure_concentration: float = 0.20
    increase_position_concentration: float = 0.05
    strong_trend: float = 0.5

    # Recommendation rules
    min_distinct_tokens: int = 5
    min_diversity_score: float = 0.5


@dataclass(frozen=True)
class TokenMetrics:
    """
    Market metrics of one token, derived from its price history.

    volatility: normalized stdev of returns in [0, 1]
    price_trend: EMA price trend in (-1, 1), positive = rising
    """

    volatility: float
    price_trend: float = 0.0


class PortfolioRiskEngine:
    """
    Service for wallet-level risk, diversity and recommendations.

    Usage:
        engine = PortfolioRiskEngine()
        analysis = engine.analyze(wallet.tokens, metrics_by_address)
    """

    def __init__(self, thresholds: RiskThresholds | None = None):
        """
        Initialize with optional custom thresholds.

        Args:
            thresholds: Custom risk thresholds (uses defaults if None)
        """
        self._thresholds = thresholds or RiskThresholds()

    def analyze(
        self,
        holdings: Iterable[TokenBalance],
        metrics: Mapping[str, TokenMetrics],
    ) -> WalletAnalysis:
        """
        Full wallet analysis.

        Order of evaluation:
        1. Concentrations (holdings merged by address)
        2. Per-token insights
        3. Risk and diversity scores
        4. Recommendations

        Args:
            holdings: Wallet token balances
            metrics: Metrics for every address in ``holdings``

        Returns:
            WalletAnalysis

        Raises:
            InternalError: Missing metrics or broken concentration invariant
        """
        concentrations = self.concentrations(holdings)
        insights = self.build_insights(concentrations, metrics)
        risk_score = self.calculate_risk_score(concentrations, metrics)
        diversity_score = self.calculate_diversity_score(concentrations)
        recommendations = self.generate_recommendations(
            concentrations, insights, diversity_score
        )

        logger.info(
            f"Wallet scored: {len(concentrations)} tokens, "
            f"risk={risk_score:.2f}, diversity={diversity_score:.2f}, "
            f"{len(recommendations)} recommendations"
        )

        return WalletAnalysis(
            risk_score=risk_score,
            diversity_score=diversity_score,
            recommendations=recommendations,
            token_insights=insights,
        )

    def concentrations(self, holdings: Iterable[TokenBalance]) -> dict[str, float]:
        """
        Fraction of total value held in each distinct token.

        Repeated addresses are merged. A zero-value wallet yields 0 for
        every token instead of dividing by zero.

        Raises:
            InternalError: If the weights of a non-empty wallet do not sum to 1
        """
        values: dict[str, float] = {}
        for balance in holdings:
            values[balance.token_address] = (
                values.get(balance.token_address, 0.0) + balance.value_usd
            )

        largest = max(values.values(), default=0.0)
        if largest <= 0:
            return {address: 0.0 for address in values}

        # Scaled by the largest holding so the total stays finite
        scaled = {address: value / largest for address, value in values.items()}
        total = sum(scaled.values())
        weights = {address: value / total for address, value in scaled.items()}

        weight_sum = sum(weights.values())
        if abs(weight_sum - 1.0) > CONCENTRATION_TOLERANCE:
            raise InternalError(
                technical_message=(
                    f"Concentrations sum to {weight_sum!r}, expected 1.0"
                ),
            )
        return weights

    def calculate_risk_score(
        self,
        concentrations: Mapping[str, float],
        metrics: Mapping[str, TokenMetrics],
    ) -> float:
        """risk = min(1, Σ concentration * volatility)."""
        score = sum(
            weight * self._metrics_for(address, metrics).volatility
            for address, weight in concentrations.items()
        )
        return min(1.0, score)

    def calculate_diversity_score(self, concentrations: Mapping[str, float]) -> float:
        """
        Complement of the Herfindahl index.

        With no value held (all weights 0) the wallet has no concentration
        and scores a neutral 1.0.
        """
        if not any(concentrations.values()):
            return 1.0

        herfindahl_index = sum(weight * weight for weight in concentrations.values())
        return max(0.0, min(1.0, 1.0 - herfindahl_index))

    def determine_risk_level(self, concentration: float, volatility: float) -> RiskLevel:
        """Classify a position by concentration and volatility."""
        t = self._thresholds
        volatile = volatility >= t.high_volatility

        if concentration < t.low_concentration:
            return RiskLevel.LOW
        if concentration <= t.high_concentration:
            return RiskLevel.HIGH if volatile else RiskLevel.MEDIUM
        return RiskLevel.VERY_HIGH if volatile else RiskLevel.HIGH

    def suggest_action(
        self,
        risk_level: RiskLevel,
        concentration: float,
        price_trend: float,
    ) -> SuggestedAction:
        """Pick the action for a position; the first matching rule wins."""
        t = self._thresholds

        if (
            risk_level in (RiskLevel.HIGH, RiskLevel.VERY_HIGH)
            and concentration > t.reduce_exposure_concentration
        ):
            return SuggestedAction.REDUCE_EXPOSURE

        if (
            risk_level == RiskLevel.LOW
            and concentration < t.increase_position_concentration
            and price_trend > 0
        ):
            return SuggestedAction.INCREASE_POSITION

        if risk_level == RiskLevel.VERY_HIGH and price_trend < -t.strong_trend:
            return SuggestedAction.SELL

        if risk_level == RiskLevel.LOW and price_trend > t.strong_trend:
            return SuggestedAction.BUY

        return SuggestedAction.HOLD

    def build_insights(
        self,
        concentrations: Mapping[str, float],
        metrics: Mapping[str, TokenMetrics],
    ) -> dict[str, TokenInsight]:
        """Per-token insights, keyed and ordered by ascending address."""
        insights: dict[str, TokenInsight] = {}
        for address in sorted(concentrations):
            concentration = concentrations[address]
            token_metrics = self._metrics_for(address, metrics)

            risk_level = self.determine_risk_level(
                concentration, token_metrics.volatility
            )
            action = self.suggest_action(
                risk_level, concentration, token_metrics.price_trend
            )
            logger.debug(
                f"Token {address[:8]}: concentration={concentration:.2%}, "
                f"volatility={token_metrics.volatility:.2f}, "
                f"trend={token_metrics.price_trend:+.2f} -> "
                f"{risk_level.value}/{action.value}"
            )

            insights[address] = TokenInsight(
                risk_level=risk_level,
                concentration=concentration,
                suggested_action=action,
            )
        return insights

    def generate_recommendations(
        self,
        concentrations: Mapping[str, float],
        insights: Mapping[str, TokenInsight],
        diversity_score: float,
    ) -> list[str]:
        """
        Ordered, reproducible recommendations.

        1. Fewer than 5 distinct tokens -> diversify
        2. One "reduce exposure" line per risky, concentrated token,
           ascending by address
        3. Diversity below 0.5 -> rebalance
        """
        t = self._thresholds
        recommendations: list[str] = []

        if len(concentrations) < t.min_distinct_tokens:
            recommendations.append(DIVERSIFY_RECOMMENDATION)

        for address in sorted(insights):
            insight = insights[address]
            if (
                insight.risk_level in (RiskLevel.HIGH, RiskLevel.VERY_HIGH)
                and insight.concentration > t.reduce_exposure_concentration
            ):
                recommendations.append(reduce_exposure_recommendation(address))

        if diversity_score < t.min_diversity_score:
            recommendations.append(REBALANCE_RECOMMENDATION)

        return recommendations

    def calculate_metrics(
        self,
        holdings: Iterable[TokenBalance],
        metrics: Mapping[str, TokenMetrics],
        daily_changes: Mapping[str, float],
    ) -> PortfolioMetrics:
        """
        Headline wallet numbers.

        Args:
            holdings: Wallet token balances
            metrics: Metrics for every address in ``holdings``
            daily_changes: 24h price change in percent per address

        Returns:
            PortfolioMetrics with value-weighted daily change
        """
        holdings = list(holdings)
        concentrations = self.concentrations(holdings)

        total_value = sum(balance.value_usd for balance in holdings)
        daily_change = sum(
            weight * daily_changes.get(address, 0.0)
            for address, weight in concentrations.items()
        )

        return PortfolioMetrics(
            total_value_usd=total_value,
            daily_change_percent=daily_change,
            risk_level=self.calculate_risk_score(concentrations, metrics),
        )

    def _metrics_for(
        self, address: str, metrics: Mapping[str, TokenMetrics]
    ) -> TokenMetrics:
        try:
            return metrics[address]
        except KeyError:
            raise InternalError(
                technical_message=f"No market metrics for token {address}",
            ) from None
