"""
Column types shared by the models.
"""
from sqlalchemy import JSON, Enum as SQLEnum
from sqlalchemy.dialects.postgresql import JSONB

from routesync.services.records import RouteSide

# JSONB on Postgres, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def route_side_column_type() -> SQLEnum:
    return SQLEnum(
        RouteSide,
        native_enum=False,
        values_callable=lambda enum_cls: [member.value for member in enum_cls],
        validate_strings=True,
    )
