from .spec import (
    ColumnSpec,
    DecimalColumn,
    build_column_spec,
    decimal,
    detect_decimal_columns,
)

__all__ = [
    "ColumnSpec",
    "DecimalColumn",
    "build_column_spec",
    "decimal",
    "detect_decimal_columns",
]
