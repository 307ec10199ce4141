"""JSON report exporter."""
from __future__ import annotations

import json
from datetime import datetime
from typing import Optional

from cnc_tool_selector.core.models import MillingEvaluation
from cnc_tool_selector.plugins.reporter.formatting import (
    check_subject, comparison_payload, report_id, report_path,
)


class JsonExporter:
    def export(self, evaluation: Optional[MillingEvaluation] = None, comparison=None,
               output_dir: str = ".") -> str:
        check_subject(evaluation, comparison)
        report = {
            "report_format": "json",
            "generated_at": datetime.now().isoformat(),
            "evaluation": evaluation.to_dict() if evaluation else None,
            "comparison": comparison_payload(comparison),
        }

        path = report_path(output_dir, report_id(evaluation), "json")
        with open(path, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2, ensure_ascii=False, default=str)
        return path
