"""Price forecasting."""

from insight.services.forecast.service import ForecastParams, PriceForecaster

__all__ = ["ForecastParams", "PriceForecaster"]
