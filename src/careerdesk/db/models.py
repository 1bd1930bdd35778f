from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from careerdesk.db.base import Base, TimestampMixin, utcnow

EMPLOYER_STATUSES = ("PENDING", "ACCEPTED", "DECLINED", "ARCHIVED")
ADMIN_OWNER_KEY = "admin"


class AdminAccount(TimestampMixin, Base):
    __tablename__ = "admin_accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)


class AlumniAccount(TimestampMixin, Base):
    __tablename__ = "alumni_accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), default="", nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), default="", nullable=False)
    personal_email: Mapped[str] = mapped_column(String(150), default="", nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)


class Employer(TimestampMixin, Base):
    __tablename__ = "employers"
    # ids are never reused, so a stale session cannot resolve to a newer account
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    employer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    business_name: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    business_address: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    company_website: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    status: Mapped[str] = mapped_column(String(50), default="PENDING", nullable=False)
    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    company_email: Mapped[str] = mapped_column(String(150), default="", nullable=False)
    landline_no: Mapped[str] = mapped_column(String(50), default="", nullable=False)
    mobile_no: Mapped[str] = mapped_column(String(50), default="", nullable=False)
    company_logo: Mapped[str] = mapped_column(String(500), default="", nullable=False)
    profile_confirmed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    pending_company_email: Mapped[str | None] = mapped_column(String(150), nullable=True)
    pending_landline_no: Mapped[str | None] = mapped_column(String(50), nullable=True)
    pending_mobile_no: Mapped[str | None] = mapped_column(String(50), nullable=True)
    pending_company_logo: Mapped[str | None] = mapped_column(String(500), nullable=True)

    @property
    def display_name(self) -> str:
        return self.business_name or self.employer_name


class Career(TimestampMixin, Base):
    __tablename__ = "careers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    link: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    owner_key: Mapped[str] = mapped_column(String(100), index=True, nullable=False)
    date_posted: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)


class Application(TimestampMixin, Base):
    __tablename__ = "applications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    career_id: Mapped[int] = mapped_column(ForeignKey("careers.id", ondelete="CASCADE"), index=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone_no: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(150), nullable=False)
    user_name: Mapped[str] = mapped_column(String(100), default="", index=True, nullable=False)
    resume_path: Mapped[str] = mapped_column(String(500), nullable=False)
    date_submitted: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)


class ApplicantRecord(Base):
    """Append-only snapshot of an application, written with the live row."""

    __tablename__ = "applicants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    original_app_id: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)
    career_id: Mapped[int] = mapped_column(Integer, nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone_no: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(150), nullable=False)
    user_name: Mapped[str] = mapped_column(String(100), default="", index=True, nullable=False)
    resume_path: Mapped[str] = mapped_column(String(500), nullable=False)
    career_title: Mapped[str] = mapped_column(String(255), nullable=False)
    company_name: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    employer_id: Mapped[str] = mapped_column(String(100), index=True, nullable=False)
    date_submitted: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    archived_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)


class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    link: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    message: Mapped[str] = mapped_column(Text, default="", nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True, nullable=False)
