from datetime import datetime
from sqlalchemy import Column, Integer, String, Numeric, DateTime

from product_importer.database.connection import Base


class BackupSnapshot(Base):
    __tablename__ = "backup_snapshots"

    id = Column(Integer, primary_key=True, index=True)
    # one row per product, overwritten on every run
    product_external_id = Column(String, unique=True, index=True, nullable=False)
    name_snapshot = Column(String, nullable=False)
    price_snapshot = Column(Numeric(12, 2), nullable=False)
    captured_at = Column(DateTime, default=datetime.utcnow, index=True)
