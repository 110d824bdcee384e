# complyark/core/catalogue.py
"""Fixed request status catalogue and reference seed data"""
from typing import List

from complyark.core.records import Industry, RequestStatus

SUBMITTED_STATUS_ID = 1
CLOSED_STATUS_ID = 6

DEFAULT_SLA_DAYS = 7

UNASSIGNED_NAME = "Organization Admin"

DEFAULT_STATUSES: List[RequestStatus] = [
    RequestStatus(id=1, name="Submitted", sla_days=7),
    RequestStatus(id=2, name="InProgress", sla_days=5),
    RequestStatus(id=3, name="AwaitingInfo", sla_days=3),
    RequestStatus(id=4, name="Reassigned", sla_days=5),
    RequestStatus(id=5, name="Escalated", sla_days=2),
    RequestStatus(id=6, name="Closed", sla_days=0, is_terminal=True),
]

DEFAULT_INDUSTRIES: List[Industry] = [
    Industry(id=1, name="E-commerce"),
    Industry(id=2, name="Healthcare"),
    Industry(id=3, name="Online Gaming"),
    Industry(id=4, name="Social Media"),
    Industry(id=5, name="Educational Institution"),
]


def status_catalogue() -> List[RequestStatus]:
    """Fresh copies of the default statuses"""
    return [status.model_copy() for status in DEFAULT_STATUSES]


def industry_catalogue() -> List[Industry]:
    return [industry.model_copy() for industry in DEFAULT_INDUSTRIES]
