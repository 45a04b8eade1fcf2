from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    JSON, Boolean, DateTime, ForeignKey, Index, Integer,
    String, Text, UniqueConstraint
)
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import relationship, Mapped, mapped_column

from showcase.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Text[] on PostgreSQL, JSON elsewhere (SQLite in tests)
FeatureList = ARRAY(Text).with_variant(JSON(), "sqlite")


class Account(Base):
    __tablename__ = "accounts"

    # Issued by the OAuth provider
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), unique=True, nullable=True)
    first_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    profile_image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Relationships
    projects: Mapped[List["Project"]] = relationship("Project", back_populates="author")


class Project(Base):
    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    full_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    github_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    project_file_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    additional_image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    features: Mapped[List[str]] = mapped_column(FeatureList, default=list, nullable=False)
    installation_steps: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    author_id: Mapped[str] = mapped_column(String(64), ForeignKey("accounts.id"), nullable=False)

    # Denormalized counters
    views: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)
    likes: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)

    is_published: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("idx_projects_category", "category"),
        Index("idx_projects_published_created", "is_published", "created_at"),
    )

    # Relationships
    author: Mapped["Account"] = relationship("Account", back_populates="projects")


class ProjectLike(Base):
    """One account liking one project."""

    __tablename__ = "project_likes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    )
    account_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    __table_args__ = (
        UniqueConstraint("project_id", "account_id", name="uq_project_like"),
    )
