"""
Report generator module for formatting budget period data.

This module turns engine results (active periods, ledger history, budget
statuses) into pandas DataFrames and renders them as text tables for the
command line.
"""

import logging
from typing import Any, Dict, List, Optional

import pandas as pd
from tabulate import tabulate

from models import ActivePeriod, ClosedPeriod, Period, Person
from spending import BudgetStatus

logger = logging.getLogger(__name__)


class ReportGenerator:
    """
    Generate formatted text reports from budget engine results.
    """

    def format_currency(self, amount: float) -> str:
        """
        Format amount as currency string.

        Args:
            amount: Amount to format

        Returns:
            Formatted currency string
        """
        return f"€{amount:,.2f}"

    def format_percentage(self, percentage: float) -> str:
        """Format percentage string."""
        return f"{percentage:.1f}%"

    def budget_status_frame(self, statuses: List[BudgetStatus]) -> pd.DataFrame:
        """
        Build a DataFrame of budget statuses.

        Args:
            statuses: Budget statuses for one window

        Returns:
            DataFrame with one row per budget, most used first
        """
        columns = ["Budget", "Description", "Allocated", "Spent", "Remaining", "Used %"]
        if not statuses:
            return pd.DataFrame(columns=columns)

        df = pd.DataFrame([
            {
                "Budget": s.budget_id,
                "Description": s.description,
                "Allocated": s.allocated,
                "Spent": s.spent,
                "Remaining": s.remaining,
                "Used %": s.percentage_used,
            }
            for s in statuses
        ], columns=columns)
        return df.sort_values("Used %", ascending=False).reset_index(drop=True)

    def period_history_frame(self, periods: List[Period]) -> pd.DataFrame:
        """Build a DataFrame of ledger periods in the given order."""
        rows = [
            {
                "Start": p.start_date.isoformat(),
                "End": p.end_date.isoformat() if isinstance(p, ClosedPeriod) else "",
                "Status": "completed" if p.is_completed else "open",
                "Days": (p.end_date - p.start_date).days + 1 if isinstance(p, ClosedPeriod) else None,
            }
            for p in periods
        ]
        return pd.DataFrame(rows, columns=["Start", "End", "Status", "Days"])

    def render_table(self, df: pd.DataFrame, empty_message: str = "No data") -> str:
        """
        Render a DataFrame with tabulate.

        Monetary columns are formatted as currency and percentage columns
        with one decimal.
        """
        if df.empty:
            return empty_message

        display_df = df.copy()
        for column in ("Allocated", "Spent", "Remaining"):
            if column in display_df.columns:
                display_df[column] = display_df[column].map(self.format_currency)
        if "Used %" in display_df.columns:
            display_df["Used %"] = display_df["Used %"].map(self.format_percentage)
        if "Days" in display_df.columns:
            display_df["Days"] = display_df["Days"].map(lambda d: "" if pd.isna(d) else str(int(d)))

        return tabulate(
            display_df.values.tolist(),
            headers=display_df.columns.tolist(),
            tablefmt="grid",
            showindex=False
        )

    def format_active_period(self, person: Person, active: ActivePeriod) -> str:
        """
        Describe the active period of a person.

        Args:
            person: Person the period belongs to
            active: Resolved active period

        Returns:
            Multi-line text block
        """
        days = (active.end - active.start).days + 1
        lines = [
            "=" * 60,
            f"BUDGET PERIOD: {person.name or person.id}",
            "=" * 60,
            f"Start:   {active.start.isoformat()}",
            f"End:     {active.end.isoformat()}",
            f"Length:  {days} days",
        ]
        if active.is_exception and active.exception is not None:
            lines.append(f"Exception: {active.exception.id} (triggered {active.exception.trigger_date.isoformat()})")
            if active.exception.reason:
                lines.append(f"Reason:  {active.exception.reason}")
        else:
            lines.append("Exception: none")
        lines.append("=" * 60)
        return "\n".join(lines)

    def format_period_totals(self, totals: Dict[str, Any], title: Optional[str] = None) -> str:
        """Render the output of ``spending.period_totals`` as text."""
        lines = [
            "-" * 60,
            title or "PERIOD TOTALS",
            "-" * 60,
            f"Total Budget:  {self.format_currency(totals['total_budget']):>20}",
            f"Total Spent:   {self.format_currency(totals['total_spent']):>20}",
            f"Total Saved:   {self.format_currency(totals['total_saved']):>20}",
        ]
        for category, amount in sorted(totals["category_spending"].items(), key=lambda item: -item[1]):
            lines.append(f"  {category:<25} {self.format_currency(amount):>15}")
        return "\n".join(lines)
