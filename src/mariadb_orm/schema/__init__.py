from .ddl import constraint_name, ddl_of_create_table, ddl_of_create_tables

__all__ = ["ddl_of_create_table", "ddl_of_create_tables", "constraint_name"]
