# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""ORM models for the tables read by the report pipeline.

Only the columns the enrollment report joins are mapped. The rest of the
schema (imports, scheduler locks, auth users) is owned by other services.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for all TrainingDesk models."""


class TimestampMixin:
    """Creation and update timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class User(Base):
    """A student or staff member."""

    __tablename__ = "users"

    id_user: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    first_surname: Mapped[str | None] = mapped_column(Text)
    second_surname: Mapped[str | None] = mapped_column(Text)
    dni: Mapped[str | None] = mapped_column(Text, unique=True)
    email: Mapped[str | None] = mapped_column(Text)
    phone: Mapped[str | None] = mapped_column(Text)


class Company(TimestampMixin, Base):
    """A client company whose employees attend courses."""

    __tablename__ = "companies"

    id_company: Mapped[int] = mapped_column(Integer, primary_key=True)
    company_name: Mapped[str] = mapped_column(Text, nullable=False)
    corporate_name: Mapped[str | None] = mapped_column(Text)
    cif: Mapped[str | None] = mapped_column(Text, unique=True)


class Center(TimestampMixin, Base):
    """A work center belonging to a company."""

    __tablename__ = "centers"

    id_center: Mapped[int] = mapped_column(Integer, primary_key=True)
    id_company: Mapped[int] = mapped_column(ForeignKey("companies.id_company"), nullable=False)
    center_name: Mapped[str] = mapped_column(Text, nullable=False)
    employer_number: Mapped[str | None] = mapped_column(Text)


class Course(TimestampMixin, Base):
    """A training course, mirrored from the LMS."""

    __tablename__ = "courses"

    id_course: Mapped[int] = mapped_column(Integer, primary_key=True)
    moodle_id: Mapped[int | None] = mapped_column(Integer)
    course_name: Mapped[str] = mapped_column(Text, nullable=False)
    short_name: Mapped[str | None] = mapped_column(Text)
    modality: Mapped[str | None] = mapped_column(Text)
    hours: Mapped[int | None] = mapped_column(Integer)
    contents: Mapped[str | None] = mapped_column(Text)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class Group(TimestampMixin, Base):
    """A dated edition of a course."""

    __tablename__ = "groups"

    id_group: Mapped[int] = mapped_column(Integer, primary_key=True)
    moodle_id: Mapped[int | None] = mapped_column(Integer)
    group_name: Mapped[str] = mapped_column(Text, nullable=False)
    id_course: Mapped[int] = mapped_column(ForeignKey("courses.id_course"), nullable=False)
    start_date: Mapped[date | None] = mapped_column(Date)
    end_date: Mapped[date | None] = mapped_column(Date)


class UserRole(Base):
    """Role a user holds inside a group (student, teacher...)."""

    __tablename__ = "user_roles"

    id_role: Mapped[int] = mapped_column(Integer, primary_key=True)
    role_shortname: Mapped[str] = mapped_column(Text, nullable=False)
    role_description: Mapped[str | None] = mapped_column(Text)


class UserGroup(Base):
    """Enrollment of a user in a group, with LMS progress."""

    __tablename__ = "user_group"

    id_user_group: Mapped[int] = mapped_column(Integer, primary_key=True)
    id_user: Mapped[int] = mapped_column(ForeignKey("users.id_user"), nullable=False)
    id_group: Mapped[int] = mapped_column(ForeignKey("groups.id_group"), nullable=False)
    id_role: Mapped[int | None] = mapped_column(ForeignKey("user_roles.id_role"))
    id_center: Mapped[int | None] = mapped_column(ForeignKey("centers.id_center"))
    join_date: Mapped[date | None] = mapped_column(Date)
    completion_percentage: Mapped[Decimal | None] = mapped_column(Numeric(5, 2))
    time_spent: Mapped[int | None] = mapped_column(Integer)
    last_access: Mapped[datetime | None] = mapped_column(DateTime)


class UserCourse(Base):
    """Course-level progress, used when the group row has none."""

    __tablename__ = "user_course"

    id_user: Mapped[int] = mapped_column(ForeignKey("users.id_user"), primary_key=True)
    id_course: Mapped[int] = mapped_column(ForeignKey("courses.id_course"), primary_key=True)
    id_moodle_user: Mapped[int | None] = mapped_column(Integer)
    enrollment_date: Mapped[date | None] = mapped_column(Date)
    completion_percentage: Mapped[Decimal | None] = mapped_column(Numeric(5, 2))
    time_spent: Mapped[int | None] = mapped_column(Integer)


class UserCenter(Base):
    """Membership of a user in a work center."""

    __tablename__ = "user_center"

    id_user: Mapped[int] = mapped_column(ForeignKey("users.id_user"), primary_key=True)
    id_center: Mapped[int] = mapped_column(ForeignKey("centers.id_center"), primary_key=True)
    is_main_center: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    start_date: Mapped[date | None] = mapped_column(Date)
    end_date: Mapped[date | None] = mapped_column(Date)


class MoodleUser(TimestampMixin, Base):
    """LMS account linked to a user."""

    __tablename__ = "moodle_users"

    id_moodle_user: Mapped[int] = mapped_column(Integer, primary_key=True)
    id_user: Mapped[int] = mapped_column(ForeignKey("users.id_user"), nullable=False)
    moodle_id: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)
    moodle_username: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    moodle_password: Mapped[str | None] = mapped_column(Text)


class OrganizationSettings(Base):
    """Organization-wide settings, branding assets and plugin flags."""

    __tablename__ = "organization_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    center_id: Mapped[int] = mapped_column(Integer, nullable=False)
    settings: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False, default=dict)
    logo_path: Mapped[str | None] = mapped_column(Text)
    signature_path: Mapped[str | None] = mapped_column(Text)
    version: Mapped[int] = mapped_column(Integer, default=1)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
