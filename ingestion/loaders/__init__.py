"""
Warehouse loaders.

Modules:
    warehouse: BigQuery table operations (exists, delete, drop, load)
    bigquery_loader: Idempotent delete-then-load of a window or a whole table
"""

__all__ = ["BigQueryWarehouse", "LoadResult", "IdempotentLoader"]
