"""Client for the KSense patient risk assessment API."""

from .api import ApiClient, ApiError, ClientError, MaxRetriesError
from .assessment import build_results, run_assessment, submit_assessment
from .config import ConfigError, Settings, load_settings
from .patients import fetch_all_patients, should_continue
from .scoring import Classification, calculate_score

__version__ = "0.2.0"

__all__ = [
    "ApiClient",
    "ApiError",
    "ClientError",
    "MaxRetriesError",
    "Classification",
    "ConfigError",
    "Settings",
    "build_results",
    "calculate_score",
    "fetch_all_patients",
    "load_settings",
    "run_assessment",
    "should_continue",
    "submit_assessment",
]
