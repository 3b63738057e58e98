"""SQLAlchemy ORM model backing the key-value store"""

from sqlalchemy import Column, DateTime, Integer, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class KVBlob(Base):
    """One serialized collection per key (user, vehicles, transactions...)"""

    __tablename__ = "kv_blob"

    key = Column(Text, primary_key=True)
    value = Column(Text, nullable=False)
    version = Column(Integer, nullable=False, default=1)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
