"""SQLAlchemy ORM models."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import DeclarativeBase, relationship

from workspace_members.config import WorkspaceRole
from workspace_members.identifiers import EXTERNAL_ID_LENGTH, generate_external_id


class Base(DeclarativeBase):
    pass


def _utcnow() -> datetime:
    return datetime.now(UTC)


# ---------------------------------------------------------------------------
# Companies and users
# ---------------------------------------------------------------------------


class CompanyModel(Base):
    __tablename__ = "companies"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    administrators = relationship(
        "CompanyAdministratorModel", back_populates="company", cascade="all, delete-orphan"
    )
    lawyers = relationship(
        "CompanyLawyerModel", back_populates="company", cascade="all, delete-orphan"
    )


class UserModel(Base):
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # Stored lowercased; lookups compare on lower(email).
    email = Column(Text, unique=True, nullable=False)
    password_hash = Column(Text, nullable=True)
    invited_by_id = Column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    invitation_created_at = Column(DateTime(timezone=True), nullable=True)
    invitation_accepted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)


# ---------------------------------------------------------------------------
# Role tables
# ---------------------------------------------------------------------------


class CompanyAdministratorModel(Base):
    __tablename__ = "company_administrators"
    __table_args__ = (
        UniqueConstraint("company_id", "user_id", name="uq_company_administrators_company_user"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    external_id = Column(
        String(EXTERNAL_ID_LENGTH), unique=True, nullable=False, default=lambda: generate_external_id()
    )
    company_id = Column(
        UUID(as_uuid=True), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False
    )
    user_id = Column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    company = relationship("CompanyModel", back_populates="administrators")
    user = relationship("UserModel")


class CompanyLawyerModel(Base):
    __tablename__ = "company_lawyers"
    __table_args__ = (
        UniqueConstraint("company_id", "user_id", name="uq_company_lawyers_company_user"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    external_id = Column(
        String(EXTERNAL_ID_LENGTH), unique=True, nullable=False, default=lambda: generate_external_id()
    )
    company_id = Column(
        UUID(as_uuid=True), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False
    )
    user_id = Column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    company = relationship("CompanyModel", back_populates="lawyers")
    user = relationship("UserModel")


ROLE_MODELS: dict[WorkspaceRole, type[CompanyAdministratorModel] | type[CompanyLawyerModel]] = {
    WorkspaceRole.ADMIN: CompanyAdministratorModel,
    WorkspaceRole.LAWYER: CompanyLawyerModel,
}

MEMBER_TYPE_MODELS = {
    "CompanyAdministrator": CompanyAdministratorModel,
    "CompanyLawyer": CompanyLawyerModel,
}
