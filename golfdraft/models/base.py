"""Declarative base and the column types shared by every table."""

from sqlalchemy import BigInteger, Integer, Numeric
from sqlalchemy.orm import DeclarativeBase

from golfdraft.db.metadata import metadata_obj

# SQLite only autoincrements INTEGER primary keys
ID_TYPE = BigInteger().with_variant(Integer, "sqlite")

# whole cents; amounts are quantized with golfdraft.db.utils.to_money first
MONEY = Numeric(10, 2)


class Base(DeclarativeBase):
    metadata = metadata_obj
