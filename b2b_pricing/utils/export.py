"""Export functionality for price breakdowns and cart lines."""

from __future__ import annotations

import csv
from datetime import datetime
from pathlib import Path
from typing import Any

import pandas as pd

from b2b_pricing.core.models import CalculatedPrice, CartLogisticsSummary


class Exporter:
    """Exports pricing results to various formats."""

    @staticmethod
    def prices_to_dict(prices: list[CalculatedPrice]) -> list[dict[str, Any]]:
        """Convert calculated prices to dictionaries for export."""
        rows = []
        for p in prices:
            row = {
                "Product ID": p.product_id,
                "Factory Cost": float(p.factory_cost),
                "Margin %": float(p.margin_percent),
                "Margin Value": float(p.margin_value),
                "Subtotal With Margin": float(p.subtotal_with_margin),
                "Route": p.logistics.route_name if p.logistics else "",
                "Logistics Cost": float(p.logistics_cost),
                "Category Fees": float(p.category_fees),
                "Final B2B Price": float(p.final_b2b_price),
                "Suggested PVP": float(p.suggested_pvp),
                "PVP Source": p.pvp_source.value,
                "Profit": float(p.profit_amount),
                "ROI %": float(p.roi_percent),
                "Days Min": p.estimated_days.min,
                "Days Max": p.estimated_days.max,
            }
            rows.append(row)

        return rows

    @staticmethod
    def cart_to_dict(summary: CartLogisticsSummary) -> list[dict[str, Any]]:
        """Convert cart lines to dictionaries for export."""
        rows = []
        for line in summary.items_logistics.values():
            rows.append(
                {
                    "Item ID": line.item_id,
                    "Product ID": line.product_id,
                    "Quantity": line.quantity,
                    "Factory Cost": float(line.factory_cost),
                    "Margin %": float(line.margin_percent),
                    "Margin Value": float(line.margin_value),
                    "Logistics Cost": float(line.logistics_cost),
                    "Category Fees": float(line.category_fees),
                    "Unit Price": float(line.final_unit_price),
                    "Line Total": float(line.final_total_price),
                    "Route": line.route_name,
                    "Days": str(line.estimated_days),
                }
            )
        return rows

    @classmethod
    def export_prices_to_csv(cls, prices: list[CalculatedPrice], file_path: str | Path) -> None:
        """Export calculated prices to CSV."""
        cls._write_csv(cls.prices_to_dict(prices), file_path)

    @classmethod
    def export_cart_to_csv(cls, summary: CartLogisticsSummary, file_path: str | Path) -> None:
        """Export cart lines to CSV."""
        cls._write_csv(cls.cart_to_dict(summary), file_path)

    @classmethod
    def export_prices_to_xlsx(cls, prices: list[CalculatedPrice], file_path: str | Path) -> None:
        """Export calculated prices to Excel."""
        cls._write_xlsx(cls.prices_to_dict(prices), file_path, "Prices")

    @classmethod
    def export_cart_to_xlsx(cls, summary: CartLogisticsSummary, file_path: str | Path) -> None:
        """Export cart lines to Excel, with a totals sheet."""
        rows = cls.cart_to_dict(summary)
        if not rows:
            return

        totals = pd.DataFrame(
            [
                {
                    "Total Factory Cost": float(summary.total_factory_cost),
                    "Total Margin": float(summary.total_margin_value),
                    "Total Logistics": float(summary.total_logistics_cost),
                    "Total Category Fees": float(summary.total_category_fees),
                    "Total Final Price": float(summary.total_final_price),
                    "Total Quantity": summary.total_quantity,
                    "Delivery": str(summary.estimated_delivery_days),
                    "Route": summary.route_name,
                }
            ]
        )

        path = Path(file_path)
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            pd.DataFrame(rows).to_excel(writer, index=False, sheet_name="Cart")
            totals.to_excel(writer, index=False, sheet_name="Totals")

    @staticmethod
    def _write_csv(rows: list[dict[str, Any]], file_path: str | Path) -> None:
        if not rows:
            return

        path = Path(file_path)
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=rows[0].keys())
            writer.writeheader()
            writer.writerows(rows)

    @staticmethod
    def _write_xlsx(rows: list[dict[str, Any]], file_path: str | Path, sheet_name: str) -> None:
        if not rows:
            return

        df = pd.DataFrame(rows)
        path = Path(file_path)
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name=sheet_name)

            # Auto-adjust column widths
            worksheet = writer.sheets[sheet_name]
            for i, col in enumerate(df.columns):
                max_length = max(df[col].astype(str).apply(len).max(), len(col))
                worksheet.column_dimensions[chr(65 + i)].width = min(max_length + 2, 50)

    @classmethod
    def generate_filename(cls, prefix: str, extension: str) -> str:
        """Generate a timestamped filename for export."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return f"{prefix.lower()}_{timestamp}.{extension}"
