from .report_manager import ReportManager  # noqa: F401
