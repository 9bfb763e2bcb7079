from .matpower import MatpowerData, build_system_from_matpower, parse_matpower
from .table_data import PowerSystemTableData, build_system_from_table_data

__all__ = (
    "MatpowerData",
    "PowerSystemTableData",
    "build_system_from_matpower",
    "build_system_from_table_data",
    "parse_matpower",
)
