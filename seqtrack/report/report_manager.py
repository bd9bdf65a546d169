# report_manager.py
import importlib
import pkgutil

import seqtrack.report.reports as reports_pkg
from seqtrack.report.reports.base_report import ReportBase
from seqtrack.utils.logger import Logger


class ReportManager:
    def __init__(self, document: dict, logger: Logger):
        self.document = document
        self.logger = logger

    def _load_report_class(self, name: str):
        module = importlib.import_module(f"seqtrack.report.reports.{name}")
        for attr in dir(module):
            obj = getattr(module, attr)
            if (
                isinstance(obj, type)
                and issubclass(obj, ReportBase)
                and obj != ReportBase
            ):
                return obj
        raise ImportError(f"No valid report class found in {name}")

    def _resolve_report_module(self, identifier: str) -> str:
        # 1) Already a module name
        if identifier.startswith("report_"):
            return identifier

        # 2) Otherwise, match by report_class.name
        for _, mod_name, _ in pkgutil.iter_modules(reports_pkg.__path__):
            if mod_name.startswith("report_"):
                cls = self._load_report_class(mod_name)
                if cls.name == identifier:
                    return mod_name

        raise ValueError(f"Report not found: {identifier}")

    # ----------------------------------
    # LIST ALL REPORTS
    # ----------------------------------
    def list_reports(self):
        """
        Lists all available reports.

        Returns:
            List[Dict]: report metadata with name and description.
        """
        reports = []
        for _, name, _ in pkgutil.iter_modules(reports_pkg.__path__):
            if name.startswith("report_"):
                report_class = self._load_report_class(name)
                reports.append(
                    {
                        "name": report_class.name,
                        "description": getattr(report_class, "description", ""),
                    }
                )
        return sorted(reports, key=lambda r: r["name"])

    # ----------------------------------
    # RUN ONE REPORT
    # ----------------------------------
    def run_report(self, name: str, **kwargs):
        module_name = self._resolve_report_module(name)
        report_class = self._load_report_class(module_name)

        self.logger.log(f"📄 Running report '{report_class.name}'", "DEBUG")
        report = report_class(document=self.document, logger=self.logger, **kwargs)
        return report.run()

    def explain(self, name: str) -> str:
        report_class = self._load_report_class(self._resolve_report_module(name))
        return report_class.explain()
