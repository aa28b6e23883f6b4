"""Aggregate business reports computed from a Local Store snapshot."""
from datetime import date, timedelta

import pandas as pd


def _bills_frame(bills):
    return pd.DataFrame(
        [{"date": b.date[:10], "final": float(b.final_amount)} for b in bills],
        columns=["date", "final"],
    )


def daily_sales(bills, today=None, days=7):
    """Final amounts per day for the ``days`` days ending ``today`` (oldest first)."""
    today = today or date.today()
    labels = [(today - timedelta(days=i)).isoformat() for i in reversed(range(days))]
    frame = _bills_frame(bills)
    per_day = frame.groupby("date")["final"].sum().reindex(labels, fill_value=0.0)
    return [{"date": day[5:], "sales": float(total)} for day, total in per_day.items()]


def monthly_stats(bills):
    frame = _bills_frame(bills)
    frame["month"] = frame["date"].str[:7]
    grouped = frame.groupby("month").agg(revenue=("final", "sum"), bills=("final", "count"))

    months = list(grouped.index)
    revenue = [float(v) for v in grouped["revenue"]]
    counts = [int(v) for v in grouped["bills"]]
    return {
        "months": months,
        "current_month_revenue": revenue,
        "previous_month_revenue": [0.0] + revenue[:-1],
        "current_month_bills": counts,
        "previous_month_bills": [0] + counts[:-1],
    }


def top_products(bills, limit=5):
    """Units sold per product name across all bill lines, best sellers first."""
    lines = pd.DataFrame(
        [{"name": item.product_name, "sold": item.quantity} for b in bills for item in b.items],
        columns=["name", "sold"],
    )
    ranked = lines.groupby("name")["sold"].sum().sort_values(ascending=False).head(limit)
    return {
        "top_product_names": list(ranked.index),
        "top_product_sales": [int(v) for v in ranked],
    }


def low_stock(products, variations, threshold=10):
    names = {p.id: p.name for p in products}
    return [
        {
            "variationId": v.id,
            "name": f"{names.get(v.product_id, 'Unknown')} - {v.name}",
            "stock": v.stock,
        }
        for v in variations
        if v.stock < threshold
    ]


def build_report(snapshot, today=None, low_stock_threshold=10):
    bills, purchases = snapshot.bills, snapshot.purchases
    return {
        "total_sales": float(sum(b.final_amount for b in bills)),
        "total_purchases": float(sum(p.total_amount for p in purchases)),
        "pending_from_customers": float(sum(b.amount_pending for b in bills)),
        "pending_to_suppliers": float(sum(p.amount_pending for p in purchases)),
        "total_bills": len(bills),
        "sales_last_7_days": daily_sales(bills, today=today),
        "low_stock": low_stock(snapshot.products, snapshot.variations, low_stock_threshold),
        "recent_bills": list(reversed(bills[-5:])),
        **monthly_stats(bills),
        **top_products(bills),
    }
