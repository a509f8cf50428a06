from __future__ import annotations
from decimal import Decimal
from typing import Optional
from sqlalchemy import BigInteger, Column, DateTime, Numeric, func
from sqlmodel import SQLModel, Field
from datetime import datetime

class QuoteRecord(SQLModel, table=True):
    __tablename__ = "quotes"
    # AUTOINCREMENT: ids nunca são reaproveitados, a ordem de inserção é a ordem dos ids
    __table_args__ = {"sqlite_autoincrement": True}
    id: Optional[int] = Field(default=None, primary_key=True)
    bid: Decimal = Field(sa_column=Column(Numeric(10, 4), nullable=False))
    timestamp: int = Field(sa_column=Column(BigInteger, nullable=False))
    create_date: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime, nullable=False, server_default=func.current_timestamp()),
    )
