from sqlalchemy import BigInteger, Column, ForeignKey, String, Text
from .database import Base # Import the Base class from our database setup

# Defines the ORM model for a restaurant table.
class TableRecord(Base):
    __tablename__ = "tables"

    table_id = Column(BigInteger, primary_key=True, autoincrement=False)


# Defines the ORM model for an order placed at a table.
class OrderRecord(Base):
    __tablename__ = "orders"

    order_id = Column(String(36), primary_key=True) # Canonical hyphenated UUID text.
    menu_item = Column(Text, nullable=False)
    cooking_time = Column(Text, nullable=False) # e.g. "10 minutes"
    table_id = Column(BigInteger, ForeignKey("tables.table_id"), nullable=False, index=True)
