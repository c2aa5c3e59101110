import uuid

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Text, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from formstudio.db.database import Base


def _new_primary_id() -> str:
    return str(uuid.uuid4())


class Form(Base):
    __tablename__ = "forms"
    __table_args__ = (
        Index("ix_forms_published", "published"),
    )

    primary_id = Column(String(36), primary_key=True, default=_new_primary_id)
    name = Column(String(255), nullable=False)
    config = Column(Text, nullable=False)  # FormDocument as camelCase JSON
    published = Column(Boolean, default=False, nullable=False)
    submissions = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    last_modified = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    entries = relationship(
        "FormSubmission",
        back_populates="form",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class FormSubmission(Base):
    __tablename__ = "form_submissions"

    id = Column(Integer, primary_key=True, index=True)
    form_id = Column(String(36), ForeignKey("forms.primary_id", ondelete="CASCADE"), nullable=False, index=True)
    data = Column(Text, nullable=False)  # submitted values as JSON
    submitted_at = Column(DateTime(timezone=True), server_default=func.now())

    form = relationship("Form", back_populates="entries")


class Theme(Base):
    __tablename__ = "themes"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), unique=True, index=True, nullable=False)
    category = Column(String(100))
    payload = Column(Text, nullable=False)  # CustomTheme as camelCase JSON
    is_favorite = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
