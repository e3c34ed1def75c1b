from sqlalchemy import Column, Integer, String, Boolean, DateTime, JSON
from sqlalchemy.orm import relationship
from labbooker.db import Base
from labbooker.utils.timewindow import utcnow

STATUS_ONLINE = "online"
STATUS_OFFLINE = "offline"
STATUS_MAINTENANCE = "maintenance"
RESOURCE_STATUSES = (STATUS_ONLINE, STATUS_OFFLINE, STATUS_MAINTENANCE)

RESOURCE_TYPES = ("SSH", "RDP", "WEB_URL", "VPN", "API_KEY")


class LabResource(Base):
    __tablename__ = "lab_resources"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, index=True, nullable=False)
    description = Column(String, nullable=True)
    resource_type = Column(String(20), nullable=False, default="SSH")
    is_active = Column(Boolean, nullable=False, default=True)
    status = Column(String(20), nullable=False, default=STATUS_ONLINE)
    connection_metadata = Column(JSON, nullable=True)
    # bumped by every reservation write on this resource
    booking_version = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    booking_types = relationship(
        "BookingTypeResource", back_populates="resource", cascade="all, delete-orphan"
    )
    reservations = relationship("Reservation", back_populates="resource")
