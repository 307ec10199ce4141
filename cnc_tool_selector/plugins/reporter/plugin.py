"""Reporter plugin assembling JSON, Excel, PDF and plain-text exporters."""
from __future__ import annotations

from typing import Any, Optional

from cnc_tool_selector.core.plugin_api import PluginInfo, ReportExporterPlugin
from cnc_tool_selector.core.models import MillingEvaluation
from cnc_tool_selector.plugins.reporter.json_exporter import JsonExporter
from cnc_tool_selector.plugins.reporter.excel_generator import ExcelGenerator
from cnc_tool_selector.plugins.reporter.pdf_generator import PdfGenerator
from cnc_tool_selector.plugins.reporter.text_report import TextReport

FORMATS = ("json", "excel", "pdf", "text")


class ReporterPlugin(ReportExporterPlugin):
    def __init__(self):
        self._json_exporter: Optional[JsonExporter] = None
        self._excel_generator: Optional[ExcelGenerator] = None
        self._pdf_generator: Optional[PdfGenerator] = None
        self._text_report: Optional[TextReport] = None
        self._event_bus = None
        self._default_dir = "."

    def get_info(self) -> PluginInfo:
        return PluginInfo(
            name="reporter", version="1.0.0",
            description="Report generator supporting JSON, Excel, PDF and text formats",
            author="CncToolSelector", dependencies=[],
        )

    def activate(self, context: Any) -> None:
        ctx = context if isinstance(context, dict) else {}
        config = ctx.get("config")
        self._event_bus = ctx.get("event_bus")
        currency = config.get("app.currency", "EUR") if config else "EUR"
        self._default_dir = config.get("reports.dir", ".") if config else "."
        self._json_exporter = JsonExporter()
        self._excel_generator = ExcelGenerator()
        self._pdf_generator = PdfGenerator(currency=currency)
        self._text_report = TextReport(currency=currency)

    def deactivate(self) -> None:
        self._json_exporter = None
        self._excel_generator = None
        self._pdf_generator = None
        self._text_report = None

    @property
    def text_report(self) -> TextReport:
        return self._text_report

    def _done(self, fmt: str, path: str) -> str:
        if self._event_bus:
            self._event_bus.emit("report.exported", {"format": fmt, "path": path})
        return path

    def export_json(self, evaluation: Optional[MillingEvaluation] = None, comparison=None,
                    output_dir: Optional[str] = None) -> str:
        path = self._json_exporter.export(evaluation, comparison, output_dir or self._default_dir)
        return self._done("json", path)

    def export_excel(self, evaluation: Optional[MillingEvaluation] = None, comparison=None,
                     output_dir: Optional[str] = None) -> str:
        path = self._excel_generator.export(evaluation, comparison, output_dir or self._default_dir)
        return self._done("excel", path)

    def export_pdf(self, evaluation: Optional[MillingEvaluation] = None, comparison=None,
                   output_dir: Optional[str] = None) -> str:
        path = self._pdf_generator.export(evaluation, comparison, output_dir or self._default_dir)
        return self._done("pdf", path)

    def export_text(self, evaluation: Optional[MillingEvaluation] = None, comparison=None,
                    output_dir: Optional[str] = None) -> str:
        path = self._text_report.export(evaluation, comparison, output_dir or self._default_dir)
        return self._done("text", path)

    def supported_formats(self) -> list:
        return list(FORMATS)

    def export(self, fmt: str, evaluation: Optional[MillingEvaluation] = None, comparison=None,
               output_dir: Optional[str] = None) -> str:
        if fmt not in FORMATS:
            raise ValueError("Unknown report format '%s'" % fmt)
        return getattr(self, "export_" + fmt)(evaluation, comparison, output_dir)

