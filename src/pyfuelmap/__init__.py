"""pyfuelmap - Async Python client core for crowd-sourced fuel price maps."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyfuelmap")
except PackageNotFoundError:
    __version__ = "0+local"
from pyfuelmap.calculator import TripEstimate, estimate_trip
from pyfuelmap.client import DetailStatus, FuelMapClient, StationDetailView
from pyfuelmap.config import FuelMapConfig
from pyfuelmap.exceptions import (
    FuelMapApiError,
    FuelMapAuthenticationError,
    FuelMapCapacityError,
    FuelMapConfigError,
    FuelMapEligibilityError,
    FuelMapError,
    FuelMapStaleRecordError,
    FuelMapTransportError,
    FuelMapUniqueViolationError,
    FuelMapValidationError,
)
from pyfuelmap.filtering import FilterCriteria, SortOrder, apply_filters, effective_subtype, haversine_km, resolve_price
from pyfuelmap.models import (
    BoundingBox,
    BrandConfig,
    Contributor,
    ContributorVoteResult,
    ContributorVoteType,
    ForecastProduct,
    FuelCategory,
    FuelSubtype,
    GeoPoint,
    LocationReportRequest,
    Municipality,
    PendingReport,
    PriceForecast,
    ReportDraft,
    ReportState,
    StationRecord,
    UserProfile,
    ViewportRegion,
    VoteOutcome,
)
from pyfuelmap.session import Session

__all__ = [
    "__version__",
    "BoundingBox",
    "BrandConfig",
    "Contributor",
    "ContributorVoteResult",
    "ContributorVoteType",
    "DetailStatus",
    "FilterCriteria",
    "ForecastProduct",
    "FuelCategory",
    "FuelMapApiError",
    "FuelMapAuthenticationError",
    "FuelMapCapacityError",
    "FuelMapClient",
    "FuelMapConfig",
    "FuelMapConfigError",
    "FuelMapEligibilityError",
    "FuelMapError",
    "FuelMapStaleRecordError",
    "FuelMapTransportError",
    "FuelMapUniqueViolationError",
    "FuelMapValidationError",
    "FuelSubtype",
    "GeoPoint",
    "LocationReportRequest",
    "Municipality",
    "PendingReport",
    "PriceForecast",
    "ReportDraft",
    "ReportState",
    "Session",
    "SortOrder",
    "StationDetailView",
    "StationRecord",
    "TripEstimate",
    "UserProfile",
    "ViewportRegion",
    "VoteOutcome",
    "apply_filters",
    "effective_subtype",
    "estimate_trip",
    "haversine_km",
    "resolve_price",
]
