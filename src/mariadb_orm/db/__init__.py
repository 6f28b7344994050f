from .engine import create_db_engine, connect

__all__ = ["create_db_engine", "connect"]
