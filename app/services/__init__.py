"""
app/services package marker.
"""

from app.services.aggregation_service import TimesheetAggregationService
from app.services.business_days import business_days
from app.services.entry_reconciler import EntryReconciler
from app.services.metric_service import TimesheetMetricService
from app.services.report_composer import ReportComposer, get_report_composer
from app.services.timesheet_ingestion_service import (
    TimesheetIngestionService,
    get_timesheet_ingestion_service,
)

__all__ = [
    "EntryReconciler",
    "ReportComposer",
    "TimesheetAggregationService",
    "TimesheetIngestionService",
    "TimesheetMetricService",
    "business_days",
    "get_report_composer",
    "get_timesheet_ingestion_service",
]
