from sqlalchemy import (
    Column,
    Integer,
    String,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from labbooker.db import Base
from labbooker.utils.timewindow import utcnow


class BookingType(Base):
    __tablename__ = "booking_types"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, index=True, nullable=False)
    description = Column(String, nullable=True)
    max_duration_hours = Column(Float, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    # bumped by every reservation write when bookings are exclusive per type
    booking_version = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    resources = relationship(
        "BookingTypeResource",
        back_populates="booking_type",
        cascade="all, delete-orphan",
        order_by="BookingTypeResource.id",
    )
    reservations = relationship("Reservation", back_populates="booking_type")

    @property
    def resource_ids(self):
        return [link.resource_id for link in self.resources]


class BookingTypeResource(Base):
    """Maps a resource into a booking type. The row id fixes allocation order."""

    __tablename__ = "booking_type_resources"

    id = Column(Integer, primary_key=True, index=True)
    booking_type_id = Column(Integer, ForeignKey("booking_types.id"), nullable=False)
    resource_id = Column(Integer, ForeignKey("lab_resources.id"), nullable=False)

    booking_type = relationship("BookingType", back_populates="resources")
    resource = relationship("LabResource", back_populates="booking_types")

    __table_args__ = (
        UniqueConstraint("booking_type_id", "resource_id", name="uq_booking_type_resource"),
    )
