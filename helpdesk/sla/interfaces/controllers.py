"""
SLA Controllers (API Routes)
=============================

Operator endpoint to run a breach scan outside the schedule.
"""

from fastapi import APIRouter, Request

from helpdesk.sla.application import SLAMonitor
from helpdesk.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/sla", tags=["SLA Monitoring"])


@router.post(
    "/scan",
    summary="Run an SLA breach scan now",
    responses={
        200: {
            "description": "Scan report",
            "content": {
                "application/json": {
                    "example": {
                        "started_at": "2024-01-15T10:00:00+00:00",
                        "tickets_found": 3,
                        "notified": 2,
                        "skipped_unassigned": 1,
                        "skipped_no_email": 0,
                        "not_delivered": 0,
                        "failed": 0,
                        "aborted": False,
                        "failed_ticket_ids": []
                    }
                }
            }
        }
    }
)
async def run_scan(request: Request) -> dict:
    """Same scan the scheduler runs; overdue tickets are notified again."""
    monitor: SLAMonitor = request.app.state.sla_monitor
    logger.info("Manual SLA scan requested")
    report = await monitor.scan()
    return report.to_dict()
