"""Data models for data-service rows and client requests."""

from pyfuelmap.models._base import FuelMapBaseModel
from pyfuelmap.models.catalog import BrandConfig, Municipality
from pyfuelmap.models.contributor import (
    Contributor,
    ContributorVoteResult,
    ContributorVoteType,
    mask_display_name,
)
from pyfuelmap.models.forecast import ForecastProduct, PriceForecast
from pyfuelmap.models.profile import UserProfile
from pyfuelmap.models.region import BoundingBox, ViewportRegion
from pyfuelmap.models.report import (
    LocationReportRequest,
    PendingReport,
    ReportDraft,
    ReportState,
    VoteOutcome,
)
from pyfuelmap.models.station import (
    ALL_SUBTYPES,
    FuelCategory,
    FuelSubtype,
    GeoPoint,
    StationRecord,
    build_price_report,
)

__all__ = [
    "ALL_SUBTYPES",
    "BoundingBox",
    "BrandConfig",
    "Contributor",
    "ContributorVoteResult",
    "ContributorVoteType",
    "ForecastProduct",
    "FuelCategory",
    "FuelMapBaseModel",
    "FuelSubtype",
    "GeoPoint",
    "LocationReportRequest",
    "Municipality",
    "PendingReport",
    "PriceForecast",
    "ReportDraft",
    "ReportState",
    "StationRecord",
    "UserProfile",
    "ViewportRegion",
    "VoteOutcome",
    "build_price_report",
    "mask_display_name",
]
