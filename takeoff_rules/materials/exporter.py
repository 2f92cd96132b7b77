"""
Material List Exporter - write consolidated material lists to files.

Outputs (under <output_dir>/<job_id>/):
- materials.csv
- materials.json (line items, warnings, summary)
- materials_summary.md
- materials.xlsx
"""

import csv
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List

import pandas as pd

from ..models import EngineResult, MaterialLineItem

logger = logging.getLogger(__name__)

COLUMNS = [
    "SKU",
    "Description",
    "Quantity",
    "UOM",
    "Unit Price",
    "Total Price",
    "Rule",
    "Source Features",
]


def _row(item: MaterialLineItem) -> Dict:
    return {
        "SKU": item.sku,
        "Description": item.description or "",
        "Quantity": round(item.qty, 4),
        "UOM": item.uom,
        "Unit Price": item.pricing.unit_price if item.pricing else "",
        "Total Price": item.pricing.total_price if item.pricing else "",
        "Rule": item.source_rule_id,
        "Source Features": ", ".join(item.source_feature_ids),
    }


class MaterialListExporter:
    """Export engine results to files."""

    def export_all(
        self,
        job_id: str,
        result: EngineResult,
        output_dir: Path,
    ) -> Dict[str, Path]:
        """Export all material list outputs."""
        job_dir = Path(output_dir) / job_id
        job_dir.mkdir(parents=True, exist_ok=True)

        paths = {}

        csv_path = job_dir / "materials.csv"
        self.export_csv(result.line_items, csv_path)
        paths["materials_csv"] = csv_path

        json_path = job_dir / "materials.json"
        self.export_json(job_id, result, json_path)
        paths["materials_json"] = json_path

        md_path = job_dir / "materials_summary.md"
        self.export_markdown(job_id, result, md_path)
        paths["materials_md"] = md_path

        xlsx_path = job_dir / "materials.xlsx"
        self.export_excel(result.line_items, xlsx_path)
        paths["materials_xlsx"] = xlsx_path

        logger.info(f"Material list for {job_id} exported to {job_dir}")
        return paths

    def export_csv(self, items: List[MaterialLineItem], output_path: Path) -> None:
        with open(output_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=COLUMNS)
            writer.writeheader()
            for item in items:
                writer.writerow(_row(item))

    def export_json(self, job_id: str, result: EngineResult, output_path: Path) -> None:
        data = {
            "job_id": job_id,
            "generated": datetime.now().isoformat(),
            "summary": {
                "material_lines": len(result.line_items),
                "warnings": len(result.warnings),
                "total_value": result.total_value,
            },
            **result.to_dict(),
        }
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    def export_markdown(self, job_id: str, result: EngineResult, output_path: Path) -> None:
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(f"# Material List: {job_id}\n\n")
            f.write(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}\n\n")

            f.write("## Summary\n\n")
            f.write(f"- **Material Lines**: {len(result.line_items)}\n")
            f.write(f"- **Skipped Templates**: {len(result.warnings)}\n")
            if result.total_value:
                f.write(f"- **Priced Value**: {result.total_value:,.2f}\n")
            f.write("\n")

            f.write("## Materials\n\n")
            f.write("| SKU | Description | Quantity | UOM | Features |\n")
            f.write("|-----|-------------|----------|-----|----------|\n")
            for item in result.line_items:
                f.write(
                    f"| {item.sku} | {item.description or ''} | {item.qty:,.2f} | {item.uom} "
                    f"| {len(item.source_feature_ids)} |\n"
                )
            f.write("\n")

            if result.warnings:
                f.write("## Warnings\n\n")
                for w in result.warnings:
                    f.write(f"- `{w.sku}` on feature `{w.feature_id}`: {w.detail} (`{w.expression}`)\n")
                f.write("\n")

    def export_excel(self, items: List[MaterialLineItem], output_path: Path) -> None:
        df = pd.DataFrame([_row(i) for i in items], columns=COLUMNS)

        with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name="Materials", index=False)

            # Auto-adjust column widths
            worksheet = writer.sheets["Materials"]
            for idx, col in enumerate(df.columns):
                longest = df[col].astype(str).map(len).max() if not df.empty else 0
                worksheet.column_dimensions[chr(65 + idx)].width = min(max(longest, len(col)) + 2, 50)
