"""
Tests for PortfolioRiskEngine.

Tests cover:
- Concentration, risk and diversity scores
- Zero-value and empty wallets
- Risk level matrix at its boundaries
- Suggested action rules and their precedence
- Recommendation content and order
- Portfolio metrics
"""

import pytest

from insight.core.exceptions import InternalError
from insight.core.models import RiskLevel, SuggestedAction, TokenBalance
from insight.services.risk.service import (
    DIVERSIFY_RECOMMENDATION,
    REBALANCE_RECOMMENDATION,
    PortfolioRiskEngine,
    RiskThresholds,
    TokenMetrics,
    reduce_exposure_recommendation,
)
from tests.factories import make_address


def holding(address: str, value_usd: float, amount: float = 1.0) -> TokenBalance:
    return TokenBalance(token_address=address, amount=amount, value_usd=value_usd)


class TestScores:
    """Risk and diversity scores."""

    def test_two_equal_holdings(
        self, risk_engine: PortfolioRiskEngine, addr_a: str, addr_b: str
    ) -> None:
        """$500/$500 with volatilities 0.2/0.8 -> risk 0.5, diversity 0.5."""
        analysis = risk_engine.analyze(
            [holding(addr_a, 500), holding(addr_b, 500)],
            {addr_a: TokenMetrics(volatility=0.2), addr_b: TokenMetrics(volatility=0.8)},
        )

        assert analysis.risk_score == pytest.approx(0.5)
        assert analysis.diversity_score == pytest.approx(0.5)
        assert analysis.token_insights[addr_a].concentration == pytest.approx(0.5)
        assert analysis.token_insights[addr_b].concentration == pytest.approx(0.5)

    def test_zero_value_wallet(
        self, risk_engine: PortfolioRiskEngine, addr_a: str, addr_b: str
    ) -> None:
        analysis = risk_engine.analyze(
            [holding(addr_a, 0), holding(addr_b, 0)],
            {addr_a: TokenMetrics(volatility=0.9), addr_b: TokenMetrics(volatility=0.9)},
        )

        assert analysis.risk_score == 0.0
        assert analysis.diversity_score == 1.0
        assert all(i.concentration == 0.0 for i in analysis.token_insights.values())
        assert all(
            i.risk_level == RiskLevel.LOW for i in analysis.token_insights.values()
        )

    def test_empty_wallet(self, risk_engine: PortfolioRiskEngine) -> None:
        analysis = risk_engine.analyze([], {})

        assert analysis.risk_score == 0.0
        assert analysis.diversity_score == 1.0
        assert analysis.token_insights == {}
        assert analysis.recommendations == [DIVERSIFY_RECOMMENDATION]

    def test_single_token(self, risk_engine: PortfolioRiskEngine, addr_a: str) -> None:
        analysis = risk_engine.analyze(
            [holding(addr_a, 1234.5)], {addr_a: TokenMetrics(volatility=0.3)}
        )

        assert analysis.risk_score == pytest.approx(0.3)
        assert analysis.diversity_score == pytest.approx(0.0)
        assert analysis.token_insights[addr_a].concentration == pytest.approx(1.0)

    def test_risk_capped_at_one(
        self, risk_engine: PortfolioRiskEngine, addr_a: str
    ) -> None:
        score = risk_engine.calculate_risk_score(
            {addr_a: 1.0}, {addr_a: TokenMetrics(volatility=1.0)}
        )
        assert score == 1.0

    def test_duplicate_holdings_merged(
        self, risk_engine: PortfolioRiskEngine, addr_a: str, addr_b: str
    ) -> None:
        concentrations = risk_engine.concentrations(
            [holding(addr_a, 250), holding(addr_b, 500), holding(addr_a, 250)]
        )
        assert concentrations == {
            addr_a: pytest.approx(0.5),
            addr_b: pytest.approx(0.5),
        }

    def test_holdings_summing_past_float_max(
        self, risk_engine: PortfolioRiskEngine, addr_a: str, addr_b: str
    ) -> None:
        """Huge but finite values still give normalized scores."""
        analysis = risk_engine.analyze(
            [holding(addr_a, 1e308), holding(addr_b, 1e308)],
            {addr_a: TokenMetrics(volatility=0.2), addr_b: TokenMetrics(volatility=0.8)},
        )

        assert analysis.risk_score == pytest.approx(0.5)
        assert analysis.diversity_score == pytest.approx(0.5)
        assert analysis.token_insights[addr_a].concentration == pytest.approx(0.5)

    def test_concentrations_sum_to_one(self, risk_engine: PortfolioRiskEngine) -> None:
        holdings = [holding(make_address(i), 1.0 / (i + 3)) for i in range(1, 30)]
        concentrations = risk_engine.concentrations(holdings)
        assert sum(concentrations.values()) == pytest.approx(1.0)

    def test_missing_metrics_is_internal_error(
        self, risk_engine: PortfolioRiskEngine, addr_a: str, addr_b: str
    ) -> None:
        with pytest.raises(InternalError):
            risk_engine.analyze(
                [holding(addr_a, 10), holding(addr_b, 10)],
                {addr_a: TokenMetrics(volatility=0.1)},
            )


class TestRiskLevel:
    """Risk level matrix."""

    @pytest.mark.parametrize(
        "concentration, volatility, expected",
        [
            (0.0, 1.0, RiskLevel.LOW),
            (0.0999, 0.9, RiskLevel.LOW),
            (0.10, 0.49, RiskLevel.MEDIUM),
            (0.10, 0.50, RiskLevel.HIGH),
            (0.20, 0.20, RiskLevel.MEDIUM),
            (0.20, 0.50, RiskLevel.HIGH),
            (0.2001, 0.20, RiskLevel.HIGH),
            (0.50, 0.50, RiskLevel.VERY_HIGH),
            (1.0, 1.0, RiskLevel.VERY_HIGH),
        ],
    )
    def test_matrix(
        self,
        risk_engine: PortfolioRiskEngine,
        concentration: float,
        volatility: float,
        expected: RiskLevel,
    ) -> None:
        assert risk_engine.determine_risk_level(concentration, volatility) == expected


class TestSuggestedAction:
    """Action rules; the first match wins."""

    @pytest.mark.parametrize(
        "level, concentration, trend, expected",
        [
            (RiskLevel.HIGH, 0.30, 0.0, SuggestedAction.REDUCE_EXPOSURE),
            (RiskLevel.VERY_HIGH, 0.30, -0.9, SuggestedAction.REDUCE_EXPOSURE),
            (RiskLevel.HIGH, 0.20, 0.0, SuggestedAction.HOLD),
            (RiskLevel.LOW, 0.04, 0.1, SuggestedAction.INCREASE_POSITION),
            (RiskLevel.LOW, 0.04, 0.9, SuggestedAction.INCREASE_POSITION),
            (RiskLevel.LOW, 0.04, 0.0, SuggestedAction.HOLD),
            (RiskLevel.LOW, 0.08, 0.6, SuggestedAction.BUY),
            (RiskLevel.LOW, 0.08, 0.5, SuggestedAction.HOLD),
            (RiskLevel.MEDIUM, 0.15, -0.9, SuggestedAction.HOLD),
            (RiskLevel.MEDIUM, 0.15, 0.9, SuggestedAction.HOLD),
        ],
    )
    def test_rules(
        self,
        risk_engine: PortfolioRiskEngine,
        level: RiskLevel,
        concentration: float,
        trend: float,
        expected: SuggestedAction,
    ) -> None:
        assert risk_engine.suggest_action(level, concentration, trend) == expected

    def test_sell_with_relaxed_exposure_rule(self) -> None:
        """Sell is reachable once ReduceExposure no longer matches first."""
        engine = PortfolioRiskEngine(RiskThresholds(reduce_exposure_concentration=0.9))
        action = engine.suggest_action(RiskLevel.VERY_HIGH, 0.5, -0.8)
        assert action == SuggestedAction.SELL

    def test_weak_downtrend_is_hold(self) -> None:
        engine = PortfolioRiskEngine(RiskThresholds(reduce_exposure_concentration=0.9))
        action = engine.suggest_action(RiskLevel.VERY_HIGH, 0.5, -0.3)
        assert action == SuggestedAction.HOLD


class TestRecommendations:
    """Recommendation content and order."""

    def test_two_risky_tokens(
        self, risk_engine: PortfolioRiskEngine, addr_a: str, addr_b: str
    ) -> None:
        analysis = risk_engine.analyze(
            [holding(addr_b, 500), holding(addr_a, 500)],
            {addr_a: TokenMetrics(volatility=0.2), addr_b: TokenMetrics(volatility=0.8)},
        )

        first, second = sorted([addr_a, addr_b])
        assert analysis.recommendations == [
            DIVERSIFY_RECOMMENDATION,
            reduce_exposure_recommendation(first),
            reduce_exposure_recommendation(second),
        ]
        assert (
            analysis.token_insights[addr_a].suggested_action
            == SuggestedAction.REDUCE_EXPOSURE
        )
        assert analysis.token_insights[addr_b].risk_level == RiskLevel.VERY_HIGH

    def test_reduce_lines_sorted_by_address(
        self, risk_engine: PortfolioRiskEngine
    ) -> None:
        addresses = [make_address(i) for i in (9, 3, 7)]
        analysis = risk_engine.analyze(
            [holding(a, 100) for a in addresses],
            {a: TokenMetrics(volatility=0.9) for a in addresses},
        )

        assert analysis.recommendations[0] == DIVERSIFY_RECOMMENDATION
        assert analysis.recommendations[1:] == [
            reduce_exposure_recommendation(a) for a in sorted(addresses)
        ]
        assert list(analysis.token_insights) == sorted(addresses)

    def test_concentrated_wallet_rebalance_last(
        self, risk_engine: PortfolioRiskEngine, addr_a: str, addr_b: str
    ) -> None:
        analysis = risk_engine.analyze(
            [holding(addr_a, 900), holding(addr_b, 100)],
            {addr_a: TokenMetrics(volatility=0.1), addr_b: TokenMetrics(volatility=0.1)},
        )

        assert analysis.diversity_score == pytest.approx(0.18)
        assert analysis.recommendations == [
            DIVERSIFY_RECOMMENDATION,
            reduce_exposure_recommendation(addr_a),
            REBALANCE_RECOMMENDATION,
        ]

    def test_well_diversified_wallet(self, risk_engine: PortfolioRiskEngine) -> None:
        addresses = [make_address(i) for i in range(10, 15)]
        analysis = risk_engine.analyze(
            [holding(a, 200) for a in addresses],
            {a: TokenMetrics(volatility=0.9) for a in addresses},
        )

        assert analysis.diversity_score == pytest.approx(0.8)
        assert analysis.recommendations == []

    def test_deterministic(
        self, risk_engine: PortfolioRiskEngine, addr_a: str, addr_b: str
    ) -> None:
        holdings = [holding(addr_a, 700), holding(addr_b, 300)]
        metrics = {
            addr_a: TokenMetrics(volatility=0.4, price_trend=0.2),
            addr_b: TokenMetrics(volatility=0.7, price_trend=-0.6),
        }

        first = risk_engine.analyze(holdings, metrics)
        second = risk_engine.analyze(list(reversed(holdings)), metrics)

        assert first.model_dump() == second.model_dump()


class TestPortfolioMetrics:
    """Tests for calculate_metrics()."""

    def test_value_weighted_daily_change(
        self, risk_engine: PortfolioRiskEngine, addr_a: str, addr_b: str
    ) -> None:
        metrics = risk_engine.calculate_metrics(
            [holding(addr_a, 750), holding(addr_b, 250)],
            {addr_a: TokenMetrics(volatility=0.4), addr_b: TokenMetrics(volatility=0.8)},
            {addr_a: 10.0, addr_b: -4.0},
        )

        assert metrics.total_value_usd == pytest.approx(1000.0)
        assert metrics.daily_change_percent == pytest.approx(6.5)
        assert metrics.risk_level == pytest.approx(0.5)

    def test_zero_wallet(self, risk_engine: PortfolioRiskEngine, addr_a: str) -> None:
        metrics = risk_engine.calculate_metrics(
            [holding(addr_a, 0)], {addr_a: TokenMetrics(volatility=1.0)}, {addr_a: 5.0}
        )

        assert metrics.total_value_usd == 0.0
        assert metrics.daily_change_percent == 0.0
        assert metrics.risk_level == 0.0
