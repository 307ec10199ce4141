"""Excel report generator using openpyxl."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side

from cnc_tool_selector.core.models import MillingEvaluation
from cnc_tool_selector.plugins.reporter.formatting import (
    COST_ROWS, OEE_ROWS, STANDARD_REFERENCE, TECHNICAL_ROWS,
    capitalize, check_subject, enum_label, report_id, report_path,
)


_HEADER_FONT = Font(bold=True, size=11)
_TITLE_FONT = Font(bold=True, size=14)
_HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
_HEADER_FONT_WHITE = Font(bold=True, size=11, color="FFFFFF")
_BEST_FONT = Font(bold=True, color="008000")
_THIN_BORDER = Border(
    left=Side(style="thin"), right=Side(style="thin"),
    top=Side(style="thin"), bottom=Side(style="thin"),
)

# header, entry attribute, True when lower is better
_COMPARISON_COLUMNS = [
    ("Cost/Part", "total_cost_per_part", True),
    ("Tool Life (min)", "tool_life_min", False),
    ("MRR (mm3/min)", "mrr_mm3_min", False),
]


def _write_header_row(ws, row: int, headers: list) -> None:
    for col, h in enumerate(headers, 1):
        cell = ws.cell(row=row, column=col, value=h)
        cell.font = _HEADER_FONT_WHITE
        cell.fill = _HEADER_FILL
        cell.alignment = Alignment(horizontal="center")
        cell.border = _THIN_BORDER


class ExcelGenerator:
    def export(self, evaluation: Optional[MillingEvaluation] = None, comparison=None,
               output_dir: str = ".") -> str:
        check_subject(evaluation, comparison)
        wb = Workbook()

        self._write_summary_sheet(wb.active, evaluation, comparison)
        if evaluation is not None:
            self._write_parameters_sheet(wb.create_sheet("Parameters"), evaluation)
            self._write_cost_sheet(wb.create_sheet("Cost"), evaluation)
            self._write_oee_sheet(wb.create_sheet("OEE"), evaluation)
            self._write_recommendations_sheet(wb.create_sheet("Recommendations"), evaluation)
        if comparison is not None and not comparison.is_empty():
            self._write_comparison_sheet(wb.create_sheet("Comparison"), comparison)

        path = report_path(output_dir, report_id(evaluation), "xlsx")
        wb.save(path)
        return path

    def _write_summary_sheet(self, ws, evaluation, comparison):
        ws.title = "Summary"
        ws["A1"] = "CNC Tool Selection Report"
        ws["A1"].font = _TITLE_FONT
        ws.merge_cells("A1:D1")
        ws["A2"] = STANDARD_REFERENCE

        rows = [("Generated", datetime.now().strftime("%Y-%m-%d %H:%M:%S"))]
        if evaluation is not None:
            project = evaluation.project
            identity = evaluation.identity
            cutting = evaluation.cutting
            rows += [
                ("Evaluation ID", evaluation.evaluation_id),
                ("Client", project.client_name),
                ("Project", project.project_name),
                ("Part", project.part_name),
                ("Machine", project.machine_name),
                ("Brand", capitalize(identity.brand)),
                ("Name/Model", identity.name_model),
                ("Product Code", identity.product_code),
                ("Workpiece Material", enum_label(cutting.workpiece_material)),
                ("Tool Material", enum_label(cutting.tool_material)),
                ("Coating", enum_label(cutting.tool_coating)),
                ("Tool Life (min)", evaluation.tool_life_min),
                ("Tool Life Source", "override" if evaluation.tool_life_overridden else "estimated"),
                ("Total Cost per Part", round(evaluation.cost.total_cost_per_part, 4)),
                ("OEE (%)", round(evaluation.oee.oee, 2)),
                ("Cost Score", evaluation.scores.get("cost", "")),
                ("Tool Life Score", evaluation.scores.get("tool_life", "")),
            ]
        if comparison is not None and not comparison.is_empty():
            rows.append(("Tools Compared", len(comparison)))

        row = 4
        for label, value in rows:
            if value in ("", None):
                continue
            ws.cell(row=row, column=1, value=label).font = _HEADER_FONT
            ws.cell(row=row, column=2, value=value)
            row += 1

        ws.column_dimensions["A"].width = 25
        ws.column_dimensions["B"].width = 30

    def _write_parameters_sheet(self, ws, evaluation):
        _write_header_row(ws, 1, ["Parameter", "Value", "Unit"])
        cutting = evaluation.cutting
        inputs = [
            ("Cutting Speed (Vc)", cutting.cutting_speed_m_min, "m/min"),
            ("Feed per Tooth (fz)", cutting.feed_per_tooth_mm, "mm/tooth"),
            ("Axial Depth of Cut (ap)", cutting.depth_of_cut_mm, "mm"),
            ("Radial Width of Cut (ae)", cutting.width_of_cut_mm, "mm"),
            ("Tool Diameter", cutting.tool_diameter_mm, "mm"),
            ("Number of Teeth", cutting.number_of_teeth, ""),
            ("Material Hardness", cutting.material_hardness_hrc, "HRC"),
        ]
        technical = evaluation.technical
        for attr, label, unit, _ in TECHNICAL_ROWS:
            inputs.append((label, getattr(technical, attr), unit))
        if technical.helix_angle_deg is not None:
            inputs.append(("Helix Angle", technical.helix_angle_deg, "deg"))
        if technical.rake_angle_deg is not None:
            inputs.append(("Rake Angle", technical.rake_angle_deg, "deg"))

        row = 2
        for label, value, unit in inputs:
            ws.cell(row=row, column=1, value=label)
            ws.cell(row=row, column=2, value=value)
            ws.cell(row=row, column=3, value=unit)
            for col in range(1, 4):
                ws.cell(row=row, column=col).border = _THIN_BORDER
            row += 1

        for col_letter in ["A", "B", "C"]:
            ws.column_dimensions[col_letter].width = 26

    def _write_cost_sheet(self, ws, evaluation):
        _write_header_row(ws, 1, ["Cost Item", "Value"])
        cost = evaluation.cost
        row = 2
        for attr, label in COST_ROWS:
            ws.cell(row=row, column=1, value=label)
            ws.cell(row=row, column=2, value=getattr(cost, attr))
            row += 1
        for label, value in [("Parts per Tool Life", cost.parts_per_tool_life),
                             ("Tool Changes per Tool Life", cost.tool_changes_per_tool_life),
                             ("Time per Part (min)", cost.time_per_part_min),
                             ("Batch Size", cost.batch_size)]:
            ws.cell(row=row, column=1, value=label)
            ws.cell(row=row, column=2, value=value)
            row += 1
        ws.cell(row=2, column=1).font = _HEADER_FONT

        row += 1
        ws.cell(row=row, column=1, value="Cost Breakdown").font = _HEADER_FONT
        row += 1
        for label, value in evaluation.cost_breakdown:
            ws.cell(row=row, column=1, value=label)
            ws.cell(row=row, column=2, value=value)
            row += 1

        ws.column_dimensions["A"].width = 32
        ws.column_dimensions["B"].width = 18

    def _write_oee_sheet(self, ws, evaluation):
        oee = evaluation.oee
        _write_header_row(ws, 1, ["Metric", "Value (%)", "Loss (%)"])
        row = 2
        for attr, label in OEE_ROWS:
            ws.cell(row=row, column=1, value=label)
            ws.cell(row=row, column=2, value=getattr(oee, attr))
            ws.cell(row=row, column=3, value=getattr(oee, attr + "_loss"))
            row += 1

        row += 1
        details = [
            ("Ideal Cycle Time (min)", oee.ideal_cycle_time_min),
            ("Actual Cycle Time (min)", oee.actual_cycle_time_min),
            ("Downtime per Part (min)", oee.downtime_per_part_min),
            ("Tool Changes per Year", oee.tool_change_impact.tool_changes_per_year),
            ("Tool Change Annual Cost", oee.tool_change_impact.annual_cost),
            ("Speed Loss Annual Cost", oee.speed_impact.annual_cost),
            ("Tools per Year", oee.tool_life_impact.tools_per_year),
            ("Annual Tool Cost", oee.tool_life_impact.annual_tool_cost),
            ("Tool Life Utilization (%)", oee.tool_life_impact.tool_life_utilization_percent),
        ]
        for label, value in details:
            ws.cell(row=row, column=1, value=label)
            ws.cell(row=row, column=2, value=value)
            row += 1

        ws.column_dimensions["A"].width = 28
        ws.column_dimensions["B"].width = 16
        ws.column_dimensions["C"].width = 16

    def _write_recommendations_sheet(self, ws, evaluation):
        ws["A1"] = "Recommendations"
        ws["A1"].font = _TITLE_FONT
        row = 3
        if not evaluation.recommendations:
            ws.cell(row=row, column=1, value="No recommendations: parameters look balanced.")
        for rec in evaluation.recommendations:
            ws.cell(row=row, column=1, value=rec.type).font = _HEADER_FONT
            ws.cell(row=row, column=2, value=rec.message)
            row += 1
        ws.column_dimensions["A"].width = 18
        ws.column_dimensions["B"].width = 100

    def _write_comparison_sheet(self, ws, comparison):
        entries = comparison.entries()
        headers = ["Tool", "Brand"] + [h for h, _, _ in _COMPARISON_COLUMNS]
        _write_header_row(ws, 1, headers)

        best_values = {}
        for _, attr, lower_better in _COMPARISON_COLUMNS:
            values = [getattr(e, attr) for e in entries]
            best_values[attr] = min(values) if lower_better else max(values)

        row = 2
        for entry in entries:
            ws.cell(row=row, column=1, value=entry.name)
            ws.cell(row=row, column=2, value=entry.identity.display_brand or "N/A")
            for offset, (_, attr, _) in enumerate(_COMPARISON_COLUMNS):
                value = getattr(entry, attr)
                cell = ws.cell(row=row, column=3 + offset, value=value)
                if value == best_values[attr]:
                    cell.font = _BEST_FONT
            for col in range(1, len(headers) + 1):
                ws.cell(row=row, column=col).border = _THIN_BORDER
            row += 1

        savings = comparison.savings()
        if savings is not None:
            row += 1
            ws.cell(row=row, column=1, value="Savings").font = _TITLE_FONT
            row += 1
            lines = [
                ("Best Tool (Lowest Cost)", savings.best.name),
                ("Most Expensive Tool", savings.worst.name),
                ("Savings per Part", savings.cost_difference),
                ("Savings (%)", savings.savings_percent),
                ("Savings per 100 Parts", savings.savings_per_100_parts),
            ]
            if savings.batch_size > 1:
                lines.append(("Savings per Batch (%d parts)" % savings.batch_size,
                              savings.savings_per_batch))
            if savings.annual_savings is not None:
                lines.append(("Estimated Annual Savings (%d parts)" % savings.annual_parts_estimate,
                              savings.annual_savings))
            for label, value in lines:
                ws.cell(row=row, column=1, value=label).font = _HEADER_FONT
                ws.cell(row=row, column=2, value=value)
                row += 1

        ws.column_dimensions["A"].width = 36
        for col_letter in ["B", "C", "D", "E"]:
            ws.column_dimensions[col_letter].width = 18
