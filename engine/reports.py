"""Community report submissions.

Reports are validated by their request schemas, logged, and acknowledged with
a receipt.  Nothing is stored.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from pydantic import BaseModel

from schemas.request import FakeNewsReport, ScamReport, VotingAnomalyReport
from schemas.response import ReportKind, ReportReceipt

logger = logging.getLogger("proofchain.engine.reports")

_ACKNOWLEDGEMENTS: dict[ReportKind, tuple[str, str]] = {
    ReportKind.SCAM: (
        "Report Submitted Successfully",
        "Thank you for your help in making the community safer.",
    ),
    ReportKind.FAKE_NEWS: (
        "Report Submitted",
        "Thank you for helping keep the community informed.",
    ),
    ReportKind.VOTING_ANOMALY: (
        "Anomaly Report Submitted",
        "Your report has been received and will be reviewed. Thank you.",
    ),
}

_KINDS: dict[type[BaseModel], ReportKind] = {
    ScamReport: ReportKind.SCAM,
    FakeNewsReport: ReportKind.FAKE_NEWS,
    VotingAnomalyReport: ReportKind.VOTING_ANOMALY,
}


def _summary(report: BaseModel) -> dict:
    data = report.model_dump(mode="json", by_alias=True)
    if isinstance(report, ScamReport):
        names = [a.filename for a in report.attachments or []]
        # anonymous reports log only the attachment count
        data["attachments"] = len(names) if report.is_anonymous else names
    return data


def submit_report(report: ScamReport | FakeNewsReport | VotingAnomalyReport) -> ReportReceipt:
    """Log *report* and return the acknowledgement shown to the reporter."""
    kind = _KINDS[type(report)]
    title, message = _ACKNOWLEDGEMENTS[kind]
    receipt = ReportReceipt(
        report_id=uuid.uuid4().hex,
        kind=kind,
        received_at=datetime.now(timezone.utc),
        title=title,
        message=message,
    )
    logger.info("%s report %s: %s", kind.value, receipt.report_id, _summary(report))
    return receipt
