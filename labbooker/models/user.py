from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from labbooker.db import Base
from labbooker.utils.timewindow import utcnow

ROLE_USER = "USER"
ROLE_ADMIN = "ADMIN"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, nullable=True)
    hashed_password = Column(String, nullable=False)
    role = Column(String(20), nullable=False, default=ROLE_USER)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    reservations = relationship("Reservation", back_populates="user", cascade="all, delete-orphan")
