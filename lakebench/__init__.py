"""
Lakebench

YCSB-style benchmark adapter for SQL-queryable lakehouse tables, with
bounded retries and per-operation latency sampling.
"""

__version__ = "0.1.0"
