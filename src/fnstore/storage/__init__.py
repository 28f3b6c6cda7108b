from .schema import BASELINE_TABLES, init_database

__all__ = ["BASELINE_TABLES", "init_database"]
