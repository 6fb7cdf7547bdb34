"""Report generation for hearing schedules."""

from .docket_report import DocketReportGenerator

__all__ = ['DocketReportGenerator']
