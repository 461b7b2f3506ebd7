"""Tabular views of the projection for display collaborators"""
import pandas as pd


def projection_frame(projection) -> pd.DataFrame:
    """
    One row per year, nested sections flattened to dotted columns
    (revenue.total, costs.staff, debt_service.interest, ...).

    Years without funding inflows or debt service get NaN in those columns.
    """
    rows = []
    for year in projection:
        row = dict(year)
        row["funding_sources"] = year["funding_sources"] or {}
        row["debt_service"] = year["debt_service"] or {}
        row["overridden"] = ", ".join(year.get("overridden", []))
        rows.append(row)

    frame = pd.json_normalize(rows)
    if frame.empty:
        return frame
    return frame.set_index("year")


def summary_frame(summary: dict) -> pd.DataFrame:
    """Two-column Metric/Value table, funding structure flattened"""
    values = pd.json_normalize(summary).iloc[0]
    return values.rename_axis("Metric").reset_index(name="Value")
