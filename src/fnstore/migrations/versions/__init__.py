"""
Migration versions package.

Each module defines one Migration class inheriting from MigrationBase and is
discovered by MigrationRegistry.discover().

Naming convention: vXXX_description.py (e.g., v007_add_route_cpus.py)
"""
