"""
Core utilities and configuration for the pull request import.

This package provides foundational components used throughout the pipeline:

Modules:
    config: Environment settings and the immutable PipelineConfig
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration

Usage:
    from core.config import settings, build_pipeline_config
    from core.exceptions import NetworkError, LoadJobError
    from core.logging import setup_logging

Example:
    setup_logging()
    config = build_pipeline_config(settings)
"""

__all__ = [
    "settings",
    "Settings",
    "PipelineConfig",
    "build_pipeline_config",
    "setup_logging",
    # Exceptions
    "IngestionException",
    "ExtractionError",
    "APIExtractionError",
    "NetworkError",
    "RateLimitError",
    "GraphQLQueryError",
    "AuthenticationError",
    "ResponseValidationError",
    "WindowFetchError",
    "LoadError",
    "WarehouseError",
    "LoadJobError",
    "RetryableError",
    "NonRetryableError",
]
