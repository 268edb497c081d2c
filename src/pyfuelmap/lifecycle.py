"""Pending station report lifecycle.

A user-submitted location moves ``draft -> pending`` on submission and
leaves the pending set as ``promoted`` or ``denied`` according to the
verdict returned by the data service, or as ``withdrawn`` when its
reporter deletes it. Vote quorum is owned by the service; this module
only relays the verdict.
"""

from __future__ import annotations

import logging

from pyfuelmap._api import reports as _reports_api
from pyfuelmap._constants import INCORRECT_REPORT_THRESHOLD
from pyfuelmap._transport import Transport
from pyfuelmap.exceptions import (
    FuelMapEligibilityError,
    FuelMapError,
    FuelMapStaleRecordError,
    FuelMapUniqueViolationError,
    FuelMapValidationError,
)
from pyfuelmap.models.profile import UserProfile
from pyfuelmap.models.report import (
    LocationReportRequest,
    PendingReport,
    ReportDraft,
    ReportState,
    VoteOutcome,
)
from pyfuelmap.models.station import FuelSubtype
from pyfuelmap.state.catalog import BrandCatalog

_logger = logging.getLogger(__name__)

MISSING_BRAND_OR_CITY = "Please provide both the Brand and the Municipality/City."
NO_FUEL_SELECTED = "Please toggle at least one fuel type that is available at this station."
MISSING_MARKETING_NAMES = "Please provide a marketing name for the fuel types you enabled."
NOT_SIGNED_IN = "Please log in to report stations."
HAS_PENDING_REPORT = "You have a pending report. Please wait for it to be confirmed before adding another."


class PendingReportLifecycle:
    """Submission, voting and withdrawal of pending station reports.

    Every mutating operation is a single remote call. When it fails the
    local pending set is left as it was and the error propagates.
    """

    def __init__(
        self,
        transport: Transport,
        catalog: BrandCatalog,
        *,
        incorrect_report_threshold: int = INCORRECT_REPORT_THRESHOLD,
    ) -> None:
        self._transport = transport
        self._catalog = catalog
        self._threshold = incorrect_report_threshold
        self._reports: dict[str, PendingReport] = {}
        self._states: dict[str, ReportState] = {}

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def refresh(self) -> list[PendingReport]:
        """Replace the local pending set with the remote one."""
        reports = await _reports_api.fetch_pending_reports(self._transport)
        self._reports = {report.id: report for report in reports}
        for report_id in self._reports:
            self._states[report_id] = ReportState.PENDING
        _logger.debug("Pending reports refreshed: %d", len(self._reports))
        return list(self._reports.values())

    def reports(self) -> list[PendingReport]:
        return list(self._reports.values())

    def get(self, report_id: str) -> PendingReport | None:
        return self._reports.get(report_id)

    def state_of(self, report_id: str) -> ReportState | None:
        """Last known state of *report_id*, or ``None`` if never seen."""
        return self._states.get(report_id)

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def prepare(self, draft: ReportDraft, reporter_id: str) -> LocationReportRequest:
        """Validate *draft* into a submittable request.

        A brand already in the catalog takes its offered subtypes from the
        catalog and sends no marketing names. A new brand needs at least
        one offered subtype, each with a marketing name.

        Raises
        ------
        FuelMapValidationError
            With a user-facing message.
        """
        brand = draft.brand.strip()
        municipality = draft.municipality.strip()
        if not brand or not municipality:
            raise FuelMapValidationError(MISSING_BRAND_OR_CITY)

        config = self._catalog.find(brand)
        if config is not None:
            return LocationReportRequest(
                reporter_id=reporter_id,
                latitude=draft.latitude,
                longitude=draft.longitude,
                brand=config.brand_name,
                municipality=municipality,
                is_existing_brand=True,
                offered=frozenset(config.labels),
                marketing_names=dict.fromkeys(FuelSubtype),
            )

        offered = frozenset(subtype for subtype, enabled in draft.offered.items() if enabled)
        if not offered:
            raise FuelMapValidationError(NO_FUEL_SELECTED)
        names: dict[FuelSubtype, str | None] = {}
        for subtype in FuelSubtype:
            name = (draft.marketing_names.get(subtype) or "").strip()
            if subtype in offered and not name:
                raise FuelMapValidationError(MISSING_MARKETING_NAMES)
            names[subtype] = name if subtype in offered else None
        return LocationReportRequest(
            reporter_id=reporter_id,
            latitude=draft.latitude,
            longitude=draft.longitude,
            brand=brand,
            municipality=municipality,
            is_existing_brand=False,
            offered=offered,
            marketing_names=names,
        )

    async def check_eligibility(self, reporter_id: str | None, profile: UserProfile | None) -> None:
        """Raise :class:`FuelMapEligibilityError` if *reporter_id* may not submit now."""
        if not reporter_id:
            raise FuelMapEligibilityError(NOT_SIGNED_IN)
        if profile is not None and profile.no_incorrect_location_report >= self._threshold:
            raise FuelMapEligibilityError(
                f"You cannot add markers because you reached {self._threshold} incorrect reports."
            )
        if any(report.reporter_id == reporter_id for report in self._reports.values()):
            raise FuelMapEligibilityError(HAS_PENDING_REPORT)
        outstanding = await _reports_api.count_pending_by_reporter(self._transport, reporter_id)
        if outstanding > 0:
            raise FuelMapEligibilityError(HAS_PENDING_REPORT)

    async def submit(
        self,
        reporter_id: str | None,
        profile: UserProfile | None,
        draft: ReportDraft,
    ) -> LocationReportRequest:
        """Validate, gate and submit *draft* as a new pending report.

        The draft is checked before the eligibility gates, so an
        incomplete draft never reaches the data service.
        """
        if not reporter_id:
            raise FuelMapEligibilityError(NOT_SIGNED_IN)
        request = self.prepare(draft, reporter_id)
        await self.check_eligibility(reporter_id, profile)
        await _reports_api.submit_location_report(self._transport, request)
        _logger.info("Location report submitted for brand=%s city=%s", request.brand, request.municipality)
        try:
            await self.refresh()
        except FuelMapError:
            _logger.warning("Pending report refresh after submission failed", exc_info=True)
        return request

    # ------------------------------------------------------------------
    # Voting and withdrawal
    # ------------------------------------------------------------------

    def _require(self, report_id: str) -> PendingReport:
        report = self._reports.get(report_id)
        if report is None:
            raise FuelMapStaleRecordError(f"Pending report {report_id} no longer exists", code="not_pending")
        return report

    async def vote(self, report_id: str, voter_id: str, is_confirm: bool) -> VoteOutcome:
        """Confirm or deny a pending report and apply the service's verdict."""
        report = self._require(report_id)
        if voter_id == report.reporter_id:
            raise FuelMapValidationError("You cannot verify or deny your own report.")
        if report.has_voted(voter_id):
            return VoteOutcome.ALREADY_VOTED

        try:
            outcome = await _reports_api.verify_or_deny_report(
                self._transport,
                report_id=report_id,
                user_id=voter_id,
                is_confirm=is_confirm,
            )
        except FuelMapUniqueViolationError:
            _logger.debug("Duplicate vote on report=%s by %s", report_id, voter_id)
            return VoteOutcome.ALREADY_VOTED

        if outcome in (VoteOutcome.VERIFICATION_ADDED, VoteOutcome.DENIAL_ADDED):
            self._reports[report_id] = report.with_vote(voter_id, is_confirm=outcome is VoteOutcome.VERIFICATION_ADDED)
        elif outcome is VoteOutcome.STATION_PROMOTED:
            self._reports.pop(report_id, None)
            self._states[report_id] = ReportState.PROMOTED
        elif outcome is VoteOutcome.REPORT_DELETED_BY_DENIALS:
            self._reports.pop(report_id, None)
            self._states[report_id] = ReportState.DENIED
        _logger.debug("Vote on report=%s -> %s", report_id, outcome)
        return outcome

    async def withdraw(self, report_id: str, requester_id: str, *, confirmed: bool) -> bool:
        """Delete the requester's own pending report.

        Returns ``False`` without any remote call when not *confirmed*.
        """
        report = self._require(report_id)
        if requester_id != report.reporter_id:
            raise FuelMapValidationError("Only the reporter can withdraw this report.")
        if not confirmed:
            return False
        await _reports_api.delete_report(self._transport, report_id)
        self._reports.pop(report_id, None)
        self._states[report_id] = ReportState.WITHDRAWN
        return True

    def clear(self) -> None:
        self._reports.clear()
        self._states.clear()
