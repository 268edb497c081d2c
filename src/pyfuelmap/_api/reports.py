"""Pending location report endpoints.

Endpoints:
  - GET    /user_reported_locations
  - HEAD   /user_reported_locations (exact count per reporter)
  - DELETE /user_reported_locations (withdraw)
  - POST   /rpc/submit_location_report
  - POST   /rpc/verify_or_deny_report
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from pyfuelmap._api._common import RETURN_MINIMAL, as_rows, call_rpc, count_rows, eq, request_json
from pyfuelmap._constants import PENDING_TABLE, RPC_SUBMIT_LOCATION_REPORT, RPC_VERIFY_OR_DENY_REPORT
from pyfuelmap._transport import Transport
from pyfuelmap.models.report import LocationReportRequest, PendingReport, VoteOutcome

_logger = logging.getLogger(__name__)


async def fetch_pending_reports(transport: Transport) -> list[PendingReport]:
    path = f"/{PENDING_TABLE}"
    decoded = await request_json(transport, "GET", path, params=[("select", "*")])
    reports: list[PendingReport] = []
    for row in as_rows(decoded):
        try:
            reports.append(PendingReport.model_validate(row))
        except ValidationError:
            _logger.warning("Skipping inconsistent pending report id=%s", row.get("id"), exc_info=True)
    return reports


async def count_pending_by_reporter(transport: Transport, reporter_id: str) -> int:
    return await count_rows(transport, PENDING_TABLE, [eq("reporter_id", reporter_id)])


async def submit_location_report(transport: Transport, request: LocationReportRequest) -> None:
    await call_rpc(transport, RPC_SUBMIT_LOCATION_REPORT, request.to_rpc_params())
    _logger.debug(
        "Location report submitted reporter=%s brand=%s existing=%s",
        request.reporter_id,
        request.brand,
        request.is_existing_brand,
    )


async def verify_or_deny_report(
    transport: Transport,
    *,
    report_id: str,
    user_id: str,
    is_confirm: bool,
) -> VoteOutcome:
    """Cast a confirm/deny vote and return the service's verdict tag."""
    decoded = await call_rpc(
        transport,
        RPC_VERIFY_OR_DENY_REPORT,
        {"report_id": report_id, "current_user_id": user_id, "is_confirm": is_confirm},
    )
    outcome = VoteOutcome(decoded) if isinstance(decoded, str) else VoteOutcome.UNKNOWN
    if outcome is VoteOutcome.UNKNOWN:
        _logger.warning("Unrecognized vote outcome for report=%s: %r", report_id, decoded)
    return outcome


async def delete_report(transport: Transport, report_id: str) -> None:
    await request_json(
        transport,
        "DELETE",
        f"/{PENDING_TABLE}",
        params=[eq("id", report_id)],
        headers=RETURN_MINIMAL,
    )
