"""
Transformers from upstream nodes to warehouse rows.
"""

__all__ = ["RecordSerializer", "to_json_lines"]
