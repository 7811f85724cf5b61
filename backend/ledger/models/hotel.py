from sqlalchemy import Boolean, Column, Integer, String, Text
from sqlalchemy.orm import relationship

from ledger.core.database import Base


class Hotel(Base):
    __tablename__ = "hotels"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    code = Column(String, nullable=False, unique=True, index=True)
    contact_person = Column(String)
    phone = Column(String)
    email = Column(String)
    address = Column(Text)
    is_active = Column(Boolean, nullable=False, default=True)

    sales = relationship("Sale", back_populates="hotel")
