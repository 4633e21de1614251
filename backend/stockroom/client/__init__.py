# Overview: Client data layer package.
# Re-exports the API client and the pure view/dashboard helpers.

from .api_client import ApiError, InventoryClient
from .views import View, ViewParams, derive_view, matches, sort_records
from .dashboard import DashboardFilters, DashboardSummary, filter_records, summarize_dashboard

__all__ = [
    'ApiError', 'InventoryClient',
    'View', 'ViewParams', 'derive_view', 'matches', 'sort_records',
    'DashboardFilters', 'DashboardSummary', 'filter_records', 'summarize_dashboard',
]
