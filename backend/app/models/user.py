from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String, func
from sqlalchemy.orm import relationship

from backend.app.db.base_class import Base

ROLE_STUDENT = "student"
ROLE_TUTOR = "tutor"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    full_name = Column(String, nullable=True)
    hashed_password = Column(String, nullable=True)
    role = Column(String(20), nullable=False, default=ROLE_STUDENT)
    # Chat contact (WhatsApp number in E.164 form)
    whatsapp_to = Column(String(50), nullable=True)
    subjects = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    requests = relationship("TutoringRequest", back_populates="student", cascade="all, delete-orphan")
    availabilities = relationship("TutorAvailability", back_populates="tutor", cascade="all, delete-orphan")

    @property
    def first_name(self) -> str | None:
        if not self.full_name:
            return None
        return self.full_name.split(" ")[0]
