"""
Employee Model - Kiosk employee directory
"""
from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from atams.db import Base


class Employee(Base):
    """Employee model for kiosk schema - Table: kiosk.employees"""
    __tablename__ = "employees"
    __table_args__ = {"schema": "kiosk"}

    em_id = Column(String(50), primary_key=True, index=True)
    em_name = Column(String(255), nullable=False)
    em_created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    em_updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)
