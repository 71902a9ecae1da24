# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - supabase_client.py: Typed Supabase wrapper for database operations
# - log_context.py: Logging setup and correlation IDs
# - metrics.py: Prometheus metrics collector
# - sentry.py: Error tracking wrapper
# - utils.py: Shared utilities (UUIDs, timestamps, pagination)
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.metrics import MetricsCollector, get_metrics_collector, normalize_route
from lib.utils import normalize_uuid, utc_now_iso

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    # Metrics
    "MetricsCollector",
    "get_metrics_collector",
    "normalize_route",
    # Utils
    "normalize_uuid",
    "utc_now_iso",
]
