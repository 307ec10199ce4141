"""PDF report generator using reportlab platypus."""
from __future__ import annotations

from datetime import datetime
from typing import Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import HRFlowable, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from cnc_tool_selector.core.models import MillingEvaluation
from cnc_tool_selector.plugins.reporter.formatting import (
    COST_ROWS, OEE_ROWS, STANDARD_REFERENCE, TECHNICAL_ROWS,
    capitalize, check_subject, enum_label, format_currency, report_id, report_path,
)

_HEADER_BG = colors.HexColor("#4472C4")
_BEST_BG = colors.HexColor("#D5F5E3")


def _make_table(data: list, header: bool = False, col_widths=None,
                extra_cmds: Optional[list] = None) -> Table:
    t = Table(data, colWidths=col_widths)
    cmds = [
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
        ("TOPPADDING", (0, 0), (-1, -1), 4),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
    ]
    if header:
        cmds.extend([
            ("BACKGROUND", (0, 0), (-1, 0), _HEADER_BG),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ])
    cmds.extend(extra_cmds or [])
    t.setStyle(TableStyle(cmds))
    return t


class PdfGenerator:
    def __init__(self, currency: str = "EUR"):
        self.currency = currency
        styles = getSampleStyleSheet()
        self._title = ParagraphStyle("ReportTitle", parent=styles["Title"], fontSize=20, spaceAfter=14)
        self._heading = ParagraphStyle("SectionHead", parent=styles["Heading2"], fontSize=14, spaceAfter=8)
        self._normal = styles["Normal"]

    def _money(self, value: float) -> str:
        return format_currency(value, self.currency)

    def export(self, evaluation: Optional[MillingEvaluation] = None, comparison=None,
               output_dir: str = ".") -> str:
        check_subject(evaluation, comparison)
        path = report_path(output_dir, report_id(evaluation), "pdf")
        doc = SimpleDocTemplate(
            path, pagesize=A4,
            leftMargin=20 * mm, rightMargin=20 * mm,
            topMargin=15 * mm, bottomMargin=15 * mm,
            title="CNC Tool Selection Report",
        )

        elements = [
            Paragraph("CNC Tool Selection Report", self._title),
            Paragraph("Generated: %s" % datetime.now().strftime("%Y-%m-%d %H:%M:%S"), self._normal),
            Paragraph("Based on: %s" % STANDARD_REFERENCE, self._normal),
            Spacer(1, 6 * mm),
        ]
        if evaluation is not None:
            elements.extend(self._evaluation_sections(evaluation))
        if comparison is not None and not comparison.is_empty():
            elements.extend(self._comparison_section(comparison))

        elements.append(Spacer(1, 8 * mm))
        elements.append(HRFlowable(width="100%", thickness=1, color=colors.grey))
        elements.append(Paragraph(
            "Generated by CNC Tool Selection Calculator",
            ParagraphStyle("Footer", parent=self._normal, fontSize=8, textColor=colors.grey)))

        doc.build(elements)
        return path

    def _key_value_table(self, rows: list) -> Table:
        data = [[label, str(value)] for label, value in rows if value not in ("", None)]
        return _make_table(data, col_widths=[60 * mm, 100 * mm])

    def _evaluation_sections(self, ev: MillingEvaluation) -> list:
        out = []
        if not ev.project.is_empty():
            p = ev.project
            out.append(Paragraph("Project Information", self._heading))
            out.append(self._key_value_table([
                ("Client", p.client_name), ("Project", p.project_name),
                ("Part/Detail", p.part_name), ("Machine", p.machine_name),
                ("Application Type", p.application_type), ("Contact", p.customer_contact),
            ]))

        ident, cutting = ev.identity, ev.cutting
        out.append(Paragraph("Tool Information", self._heading))
        out.append(self._key_value_table([
            ("Brand", capitalize(ident.brand)), ("Type", ident.tool_type),
            ("Name/Model", ident.name_model), ("Product Code", ident.product_code),
            ("Diameter", "%s mm" % cutting.tool_diameter_mm),
            ("Number of Teeth", cutting.number_of_teeth),
            ("Tool Material", enum_label(cutting.tool_material)),
            ("Coating", enum_label(cutting.tool_coating)),
            ("Tool Cost", self._money(ev.cost_inputs.tool_cost)),
        ]))

        out.append(Paragraph("Cost Analysis", self._heading))
        out.append(self._key_value_table(
            [(label, self._money(getattr(ev.cost, attr))) for attr, label in COST_ROWS]))

        out.append(Paragraph("Tool Life &amp; Performance", self._heading))
        life_source = "override" if ev.tool_life_overridden else "estimated"
        out.append(self._key_value_table([
            ("Tool Life", "%s minutes (%s)" % (ev.tool_life_min, life_source)),
            ("Parts per Tool Life", "%d parts" % ev.cost.parts_per_tool_life),
            ("Cost Score", ev.scores.get("cost", "")),
            ("Tool Life Score", ev.scores.get("tool_life", "")),
        ]))

        out.append(Paragraph("Technical Data", self._heading))
        tech = [["Parameter", "Value", "Unit"]]
        for attr, label, unit, fmt in TECHNICAL_ROWS:
            tech.append([label, fmt % getattr(ev.technical, attr), unit])
        out.append(_make_table(tech, header=True, col_widths=[70 * mm, 50 * mm, 40 * mm]))

        out.append(Paragraph("OEE", self._heading))
        oee = [["Metric", "Value (%)", "Loss (%)"]]
        for attr, label in OEE_ROWS:
            oee.append([label, "%.2f" % getattr(ev.oee, attr), "%.2f" % getattr(ev.oee, attr + "_loss")])
        out.append(_make_table(oee, header=True, col_widths=[70 * mm, 45 * mm, 45 * mm]))

        out.append(Paragraph("Recommendations", self._heading))
        if ev.recommendations:
            for rec in ev.recommendations:
                out.append(Paragraph("• %s" % escape(rec.message), self._normal))
        else:
            out.append(Paragraph("No recommendations: parameters look balanced.", self._normal))
        return out

    def _comparison_section(self, comparison) -> list:
        entries = comparison.entries()
        best = comparison.best_by("total_cost_per_part")
        data = [["Tool", "Brand", "Cost/Part", "Tool Life", "MRR (mm3/min)"]]
        highlight = []
        for i, e in enumerate(entries, 1):
            data.append([e.name, e.identity.display_brand or "N/A",
                         self._money(e.total_cost_per_part),
                         "%s min" % e.tool_life_min, "%.1f" % e.mrr_mm3_min])
            if e.id == best.id:
                highlight.append(("BACKGROUND", (0, i), (-1, i), _BEST_BG))
        out = [Paragraph("Tool Comparison", self._heading),
               _make_table(data, header=True, extra_cmds=highlight)]

        savings = comparison.savings()
        if savings is not None:
            rows = [
                ("Best Tool (Lowest Cost)", savings.best.name),
                ("Most Expensive Tool", savings.worst.name),
                ("Savings per Part", "%s (%.1f%% reduction)"
                 % (self._money(savings.cost_difference), savings.savings_percent)),
                ("Per 100 Parts", self._money(savings.savings_per_100_parts)),
            ]
            if savings.batch_size > 1:
                rows.append(("Per Batch (%d parts)" % savings.batch_size,
                             self._money(savings.savings_per_batch)))
            if savings.annual_savings is not None:
                rows.append(("Estimated Annual Savings", "%s (%d parts/year)"
                             % (self._money(savings.annual_savings), savings.annual_parts_estimate)))
            out.append(Spacer(1, 4 * mm))
            out.append(Paragraph("Potential Savings", self._heading))
            out.append(self._key_value_table(rows))
        return out
