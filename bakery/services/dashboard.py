from __future__ import annotations

from bakery.gateway import operation


@operation
def get_dashboard_stats(db) -> dict:
    row = db.query_single(
        """
        SELECT
          (SELECT COUNT(*) FROM store_deliveries)
            + (SELECT COUNT(*) FROM individual_deliveries) AS total_deliveries,
          (SELECT COALESCE(SUM(total_amount), 0) FROM store_deliveries WHERE status = 'completed')
            + (SELECT COALESCE(SUM(total_amount), 0) FROM individual_deliveries WHERE status = 'completed') AS total_revenue,
          (SELECT COUNT(*) FROM store_deliveries WHERE status = 'pending')
            + (SELECT COUNT(*) FROM individual_deliveries WHERE status = 'pending') AS pending_deliveries,
          (SELECT COUNT(*) FROM store_deliveries WHERE status = 'completed')
            + (SELECT COUNT(*) FROM individual_deliveries WHERE status = 'completed') AS completed_deliveries,
          (SELECT COUNT(*) FROM returns) AS total_returns,
          (SELECT COUNT(*) FROM products WHERE stock <= minimum_stock AND stock > 0) AS low_stock_products
        """
    )
    return dict(row or {})


@operation
def get_table_counts(db) -> list[dict]:
    """Row count per table actually present; a restored backup may lack newer tables."""
    tables = db.query(
        "SELECT name FROM sqlite_master WHERE type = 'table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
    )
    return [
        {"table_name": t["name"], "n": db.query_single(f'SELECT COUNT(*) AS n FROM "{t["name"]}"')["n"]}
        for t in tables
    ]
