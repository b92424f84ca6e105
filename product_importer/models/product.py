from sqlalchemy import Column, String, Integer, Numeric, Boolean, DateTime
from datetime import datetime
from product_importer.database.connection import Base

class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    # catalog product_id, upsert key
    external_id = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    active_price = Column(Numeric(12, 2), nullable=False)

    # flipped by whoever owns activation; backups only read active products
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

