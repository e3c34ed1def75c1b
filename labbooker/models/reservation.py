from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    ForeignKey,
    JSON,
    CheckConstraint,
)
from sqlalchemy.orm import relationship
from labbooker.db import Base
from labbooker.utils.timewindow import TimeWindow, utcnow

STATUS_SCHEDULED = "scheduled"
STATUS_ACTIVE = "active"
STATUS_EXPIRED = "expired"
STATUS_COMPLETED = "completed"
STATUS_CANCELLED = "cancelled"

NON_TERMINAL_STATUSES = (STATUS_SCHEDULED, STATUS_ACTIVE)
TERMINAL_STATUSES = (STATUS_EXPIRED, STATUS_COMPLETED, STATUS_CANCELLED)
RESERVATION_STATUSES = NON_TERMINAL_STATUSES + TERMINAL_STATUSES


class Reservation(Base):
    __tablename__ = "reservations"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    booking_type_id = Column(Integer, ForeignKey("booking_types.id"), nullable=False, index=True)
    resource_id = Column(Integer, ForeignKey("lab_resources.id"), nullable=True, index=True)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    status = Column(String(20), nullable=False, default=STATUS_SCHEDULED)
    access_code = Column(String(32), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="reservations")
    booking_type = relationship("BookingType", back_populates="reservations")
    resource = relationship("LabResource", back_populates="reservations")
    connection_info = relationship(
        "ConnectionInfo",
        back_populates="reservation",
        uselist=False,
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="check_reservation_window"),
        CheckConstraint(
            "status IN ('scheduled', 'active', 'expired', 'completed', 'cancelled')",
            name="check_reservation_status",
        ),
    )

    @property
    def window(self) -> TimeWindow:
        return TimeWindow(self.start_time, self.end_time)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def __repr__(self) -> str:
        return (
            f"<Reservation(id={self.id}, resource={self.resource_id}, "
            f"{self.start_time}-{self.end_time}, status={self.status})>"
        )


class ConnectionInfo(Base):
    __tablename__ = "connection_info"

    id = Column(Integer, primary_key=True, index=True)
    reservation_id = Column(Integer, ForeignKey("reservations.id"), unique=True, nullable=False)
    values = Column(JSON, nullable=False, default=dict)

    reservation = relationship("Reservation", back_populates="connection_info")
