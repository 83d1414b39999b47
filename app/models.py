import enum
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .database import Base
from .shared.clock import utcnow


class DocumentType(str, enum.Enum):
    """Identity documents accepted at booking time"""

    CC = "CC"  # Cédula de ciudadanía (citizen ID)
    TI = "TI"  # Tarjeta de identidad (minor ID)
    CE = "CE"  # Cédula de extranjería (foreign ID)
    RC = "RC"  # Registro civil (civil registry)


class AppointmentStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class HolidayType(str, enum.Enum):
    NATIONAL = "NATIONAL"
    LOCAL = "LOCAL"
    COMPANY = "COMPANY"


class NotificationType(str, enum.Enum):
    EMAIL = "EMAIL"
    WHATSAPP = "WHATSAPP"
    IN_APP = "IN_APP"


class NotificationStatus(str, enum.Enum):
    PENDING = "PENDING"
    SENT = "SENT"
    FAILED = "FAILED"


# ============================================================================
# STAFF, ROLES AND PERMISSIONS
# ============================================================================


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String(100), unique=True, index=True, nullable=False)
    full_name = Column(String(200), nullable=True)
    password_hash = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, nullable=True)

    roles = relationship("UserRol", back_populates="user", cascade="all, delete-orphan")
    assignments = relationship("UserAssignment", back_populates="user", cascade="all, delete-orphan")
    notifications = relationship("Notification", back_populates="user")


class Rol(Base):
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(50), unique=True, nullable=False)
    name = Column(String(100), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    users = relationship("UserRol", back_populates="rol", cascade="all, delete-orphan")
    form_permissions = relationship("RolFormPermission", back_populates="rol", cascade="all, delete-orphan")


class UserRol(Base):
    __tablename__ = "user_roles"
    __table_args__ = (UniqueConstraint("user_id", "rol_id", name="uq_user_rol"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    rol_id = Column(Integer, ForeignKey("roles.id"), nullable=False, index=True)

    user = relationship("User", back_populates="roles")
    rol = relationship("Rol", back_populates="users")


class Form(Base):
    """A protected screen or resource, identified by a stable code (e.g. APPOINTMENTS)"""

    __tablename__ = "forms"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(50), unique=True, nullable=False)
    name = Column(String(100), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)


class RolFormPermission(Base):
    __tablename__ = "rol_form_permissions"
    __table_args__ = (UniqueConstraint("rol_id", "form_id", name="uq_rol_form"),)

    id = Column(Integer, primary_key=True, index=True)
    rol_id = Column(Integer, ForeignKey("roles.id"), nullable=False, index=True)
    form_id = Column(Integer, ForeignKey("forms.id"), nullable=False, index=True)
    # Bit set of Capability flags (see domain/permissions/capabilities.py)
    capabilities = Column(Integer, default=0, nullable=False)
    updated_at = Column(DateTime, nullable=True)

    rol = relationship("Rol", back_populates="form_permissions")
    form = relationship("Form")


# ============================================================================
# CATALOGS
# ============================================================================


class Branch(Base):
    __tablename__ = "branches"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    code = Column(String(20), unique=True, nullable=False)
    address = Column(String(200), nullable=True)
    phone = Column(String(20), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    is_main = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class AppointmentType(Base):
    __tablename__ = "appointment_types"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    assignments = relationship("UserAssignment", back_populates="appointment_type")


class UserAssignment(Base):
    """Staff user responsible for appointments of a given type"""

    __tablename__ = "user_assignments"
    __table_args__ = (UniqueConstraint("user_id", "appointment_type_id", name="uq_user_assignment"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    appointment_type_id = Column(Integer, ForeignKey("appointment_types.id"), nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)

    user = relationship("User", back_populates="assignments")
    appointment_type = relationship("AppointmentType", back_populates="assignments")


class Holiday(Base):
    __tablename__ = "holidays"

    id = Column(Integer, primary_key=True, index=True)
    holiday_date = Column(Date, nullable=False, index=True)
    holiday_name = Column(String(200), nullable=False)
    holiday_type = Column(String(20), nullable=False, default=HolidayType.NATIONAL.value)
    # NULL means the holiday applies to every branch
    branch_id = Column(Integer, ForeignKey("branches.id"), nullable=True, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    branch = relationship("Branch")


# ============================================================================
# CLIENTS AND APPOINTMENTS
# ============================================================================


class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    client_number = Column(String(30), unique=True, index=True, nullable=False)
    document_type = Column(String(10), nullable=False, default=DocumentType.CC.value)
    document_number = Column(String(20), unique=True, index=True, nullable=False)
    full_name = Column(String(200), nullable=False)
    email = Column(String(100), nullable=True)
    phone = Column(String(20), nullable=True)
    mobile = Column(String(20), nullable=True)
    address = Column(String(500), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, nullable=True)

    appointments = relationship("Appointment", back_populates="client")


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)
    appointment_number = Column(String(30), unique=True, index=True, nullable=False)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    branch_id = Column(Integer, ForeignKey("branches.id"), nullable=False, index=True)
    appointment_type_id = Column(Integer, ForeignKey("appointment_types.id"), nullable=False, index=True)
    appointment_date = Column(Date, nullable=False, index=True)
    appointment_time = Column(String(5), nullable=True)  # "HH:mm", not normalized
    status = Column(String(20), nullable=False, default=AppointmentStatus.PENDING.value, index=True)
    notes = Column(Text, nullable=True)
    cancellation_reason = Column(String(500), nullable=True)
    completed_at = Column(DateTime, nullable=True)
    is_enabled = Column(Boolean, default=True, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, nullable=True)

    client = relationship("Client", back_populates="appointments")
    branch = relationship("Branch")
    appointment_type = relationship("AppointmentType")


# ============================================================================
# NOTIFICATION LEDGER
# ============================================================================


class Notification(Base):
    """
    Record of a single delivery attempt (or an in-app message).

    Exactly one of user_id / client_id is set: staff notifications target a
    user, client notifications target a client.
    """

    __tablename__ = "notifications"
    __table_args__ = (
        CheckConstraint(
            "(user_id IS NULL) <> (client_id IS NULL)",
            name="ck_notification_single_recipient",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String(20), nullable=False)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default=NotificationStatus.PENDING.value)
    error_message = Column(Text, nullable=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=True, index=True)
    appointment_id = Column(Integer, ForeignKey("appointments.id"), nullable=True, index=True)
    is_read = Column(Boolean, default=False, nullable=False)
    read_at = Column(DateTime, nullable=True)
    sent_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="notifications")
    client = relationship("Client")
    appointment = relationship("Appointment")

    @classmethod
    def create(
        cls,
        type: NotificationType,
        title: str,
        message: str,
        user_id: Optional[int] = None,
        client_id: Optional[int] = None,
        appointment_id: Optional[int] = None,
    ) -> "Notification":
        """Build a PENDING notification, enforcing the single-recipient rule"""
        if not title or not title.strip():
            raise ValueError("Notification title is required")
        if not message or not message.strip():
            raise ValueError("Notification message is required")
        if (user_id is None) == (client_id is None):
            raise ValueError("Notification must target exactly one of user_id or client_id")
        recipient = user_id if user_id is not None else client_id
        if recipient <= 0:
            raise ValueError("Notification recipient id must be positive")

        return cls(
            type=NotificationType(type).value,
            title=title,
            message=message,
            status=NotificationStatus.PENDING.value,
            user_id=user_id,
            client_id=client_id,
            appointment_id=appointment_id,
            is_read=False,
            created_at=utcnow(),
        )

    def mark_as_sent(self) -> None:
        self.status = NotificationStatus.SENT.value
        self.sent_at = utcnow()
        self.error_message = None

    def mark_as_failed(self, error_message: str) -> None:
        if not error_message:
            raise ValueError("A failed notification needs an error message")
        self.status = NotificationStatus.FAILED.value
        self.error_message = error_message

    def mark_as_read(self) -> None:
        if self.is_read:
            return
        self.is_read = True
        self.read_at = utcnow()
