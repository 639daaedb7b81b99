"""
Configuration settings for the MoneyTrend pipeline.
"""

from pathlib import Path
from typing import Dict, Any, List, Tuple
from dataclasses import dataclass, field, asdict
from datetime import datetime
import json
import logging
import os

from dotenv import load_dotenv

# FRED identifiers of the monthly, seasonally adjusted money stock measures
DEFAULT_SERIES = {
    "M2": "M2SL",
    "M1": "M1SL",
    "C": "CURRSL",
}

API_KEY_PLACEHOLDER = "YOUR_FRED_API_KEY_HERE"


def get_fred_api_key() -> str:
    """
    Get FRED API key from environment (a .env file is loaded first).

    Returns:
        str: FRED API key

    Raises:
        ValueError: If API key is not found or is the placeholder
    """
    load_dotenv()
    fred_api_key = os.getenv('FRED_API_KEY')
    if not fred_api_key:
        raise ValueError(
            "FRED_API_KEY environment variable is required. "
            "Please set it in your .env file. "
            "You can get a free API key from: https://fred.stlouisfed.org/docs/api/api_key.html"
        )

    if fred_api_key == API_KEY_PLACEHOLDER:
        raise ValueError("Please replace the placeholder FRED API key with your actual key")

    if len(fred_api_key) != 32:
        logging.warning(f"FRED API key format may be incorrect (got {len(fred_api_key)} characters, expected 32)")

    return fred_api_key


@dataclass
class PipelineConfig:
    """
    Configuration for one money supply pipeline run.

    Attributes:
        start_date: First observation date requested from the data source
        end_date: Last observation date requested from the data source
        series: Column name -> FRED series id, broadest measure first
        zscore_thresholds: Thresholds k counted as z > k
        anomaly_window: Inclusive date range counted separately (default 2020)
        count_absolute: Count |z| > k instead of z > k
        assume_zero_mean: Center z-scores on the analytic OLS residual mean of 0
        summary_start: Start snapshot date for growth ratios
        summary_end: End snapshot date for growth ratios
        run_diagnostics: Compute Durbin-Watson / Ljung-Box per regression
        ljung_box_lags: Ljung-Box lag
        output_dir: Directory for saved results and data
    """

    # Data Settings
    start_date: str = "1959-01-01"
    end_date: str = "2021-12-31"
    series: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_SERIES))

    # Outlier Scoring
    zscore_thresholds: List[float] = field(default_factory=lambda: [3.0, 5.0])
    anomaly_window: Tuple[str, str] = ("2020-01-01", "2020-12-31")
    count_absolute: bool = False
    assume_zero_mean: bool = False

    # Summary Statistics
    summary_start: str = "2020-01-01"
    summary_end: str = "2020-12-01"

    # Diagnostics
    run_diagnostics: bool = True
    ljung_box_lags: int = 12

    # Output Settings
    output_dir: str = "results"

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        config_dict = asdict(self)
        config_dict["anomaly_window"] = list(self.anomaly_window) if self.anomaly_window else None
        return config_dict

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'PipelineConfig':
        """Create configuration from dictionary."""
        config_dict = dict(config_dict)
        if config_dict.get("anomaly_window") is not None:
            config_dict["anomaly_window"] = tuple(config_dict["anomaly_window"])
        return cls(**config_dict)

    def validate(self) -> List[str]:
        """
        Validate configuration parameters.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        dates = {
            "start_date": self.start_date,
            "end_date": self.end_date,
            "summary_start": self.summary_start,
            "summary_end": self.summary_end,
        }
        if self.anomaly_window:
            if len(self.anomaly_window) != 2:
                errors.append(f"anomaly_window must have exactly two dates, got {self.anomaly_window}")
            else:
                dates["anomaly_window start"] = self.anomaly_window[0]
                dates["anomaly_window end"] = self.anomaly_window[1]

        parsed = {}
        for label, value in dates.items():
            try:
                parsed[label] = datetime.strptime(value, "%Y-%m-%d")
            except (TypeError, ValueError):
                errors.append(f"Invalid {label} format: {value}")

        if "start_date" in parsed and "end_date" in parsed and parsed["start_date"] >= parsed["end_date"]:
            errors.append(f"start_date must be before end_date ({self.start_date} >= {self.end_date})")

        if "summary_start" in parsed and "summary_end" in parsed and parsed["summary_start"] > parsed["summary_end"]:
            errors.append(f"summary_start must not be after summary_end")

        if not self.series:
            errors.append("At least one series is required")

        if not self.zscore_thresholds or any(k <= 0 for k in self.zscore_thresholds):
            errors.append(f"zscore_thresholds must be positive, got {self.zscore_thresholds}")

        if self.ljung_box_lags < 1:
            errors.append(f"ljung_box_lags must be at least 1, got {self.ljung_box_lags}")

        return errors


def load_config_from_file(config_path: str) -> PipelineConfig:
    """Load pipeline configuration from a JSON file."""
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, 'r') as f:
        config_dict = json.load(f)

    return PipelineConfig.from_dict(config_dict)


def save_config_to_file(config_obj: PipelineConfig, config_path: str) -> None:
    """Save pipeline configuration to a JSON file."""
    config_path = Path(config_path)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, 'w') as f:
        json.dump(config_obj.to_dict(), f, indent=2)
