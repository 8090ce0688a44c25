"""
Output formatters for the command line.

Converts analysis results into short human-readable reports.
"""

from insight.core.models import (
    PortfolioMetrics,
    RiskLevel,
    TokenAnalysis,
    WalletAnalysis,
)

# Text markers for risk levels
RISK_MARKER = {
    RiskLevel.LOW: "[ ]",
    RiskLevel.MEDIUM: "[~]",
    RiskLevel.HIGH: "[!]",
    RiskLevel.VERY_HIGH: "[!!]",
}


def format_usd(amount: float) -> str:
    return f"${amount:,.2f}"


def format_wallet_analysis(analysis: WalletAnalysis) -> str:
    """
    Format a wallet analysis as a plain-text report.

    Creates a structured message with:
    - Risk and diversity scores
    - One line per token insight (ascending address)
    - Numbered recommendations

    Args:
        analysis: Result of analyze_wallet

    Returns:
        Multi-line report
    """
    lines = [
        f"Risk score:      {analysis.risk_score:.2f}",
        f"Diversity score: {analysis.diversity_score:.2f}",
        "",
        "Tokens:",
    ]
    for address in sorted(analysis.token_insights):
        insight = analysis.token_insights[address]
        lines.append(
            f"  {RISK_MARKER[insight.risk_level]} {address} "
            f"{insight.concentration:.1%} {insight.risk_level.value} "
            f"-> {insight.suggested_action.value}"
        )

    if analysis.recommendations:
        lines.append("")
        lines.append("Recommendations:")
        lines.extend(
            f"  {i}. {text}" for i, text in enumerate(analysis.recommendations, 1)
        )

    if analysis.stale_tokens:
        lines.append("")
        lines.append(f"Stale market data: {', '.join(analysis.stale_tokens)}")

    return "\n".join(lines)


def format_token_analysis(analysis: TokenAnalysis) -> str:
    """Format a token analysis as a plain-text report."""
    prediction = analysis.price_prediction
    market = analysis.market_sentiment
    indicators = analysis.technical_indicators

    lines = [
        f"Sentiment:  {analysis.sentiment_score:.2f} "
        f"(social {market.social_sentiment:.2f}, news {market.news_sentiment:.2f}, "
        f"volume {market.trading_volume_sentiment:.2f})",
        f"Forecast:   24h {format_usd(prediction.price_24h)}, "
        f"7d {format_usd(prediction.price_7d)}, "
        f"30d {format_usd(prediction.price_30d)} "
        f"(confidence {prediction.confidence:.0%})",
        f"RSI:        {indicators.rsi:.1f}",
        f"MACD:       {indicators.macd.value:.6g} / signal {indicators.macd.signal:.6g}",
        f"MA 20/50/200: {indicators.moving_averages.ma_20:.6g} / "
        f"{indicators.moving_averages.ma_50:.6g} / "
        f"{indicators.moving_averages.ma_200:.6g}",
    ]
    if market.degraded_sources:
        lines.append(f"Unavailable feeds: {', '.join(market.degraded_sources)}")
    if analysis.stale_data:
        lines.append("Market data is stale")
    return "\n".join(lines)


def format_portfolio_metrics(metrics: PortfolioMetrics) -> str:
    return (
        f"Total value: {format_usd(metrics.total_value_usd)} | "
        f"24h: {metrics.daily_change_percent:+.2f}% | "
        f"risk: {metrics.risk_level:.2f}"
    )
