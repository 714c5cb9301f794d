"""Font metrics lookup and fallback face synthesis."""

from fontlocal.metrics.engine import (
    BUILTIN_METRICS,
    FontMetrics,
    FontMetricsEngine,
    MetricsEngine,
    fallback_name,
    normalize_family,
)

__all__ = [
    "BUILTIN_METRICS",
    "FontMetrics",
    "FontMetricsEngine",
    "MetricsEngine",
    "fallback_name",
    "normalize_family",
]
