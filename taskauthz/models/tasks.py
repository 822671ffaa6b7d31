from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from taskauthz.db.base import Base


class Task(Base):
    __tablename__ = "tasks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)

    # ProjectTask | AssignedTask | RoutineTask
    type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    organization_id: Mapped[int] = mapped_column(ForeignKey("organizations.id"), nullable=False, index=True)
    department_id: Mapped[int] = mapped_column(ForeignKey("departments.id"), nullable=False, index=True)
    created_by: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)

    # Lists of user ids.
    assignees: Mapped[list[int]] = mapped_column(JSON, default=list, nullable=False)
    watchers: Mapped[list[int]] = mapped_column(JSON, default=list, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    def to_target(self) -> dict[str, object]:
        return {
            "id": self.id,
            "type": self.type,
            "organization": self.organization_id,
            "department": self.department_id,
            "createdBy": self.created_by,
            "assignees": list(self.assignees or []),
            "watchers": list(self.watchers or []),
        }


class Attachment(Base):
    __tablename__ = "attachments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_url: Mapped[str] = mapped_column(String(500), nullable=False)

    # Polymorphic parent: only "Task" rows exist in this service.
    parent_model: Mapped[str] = mapped_column(String(20), nullable=False)
    parent_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    organization_id: Mapped[int] = mapped_column(ForeignKey("organizations.id"), nullable=False, index=True)
    department_id: Mapped[int] = mapped_column(ForeignKey("departments.id"), nullable=False, index=True)
    uploaded_by: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    def to_target(self) -> dict[str, object]:
        return {
            "id": self.id,
            "organization": self.organization_id,
            "department": self.department_id,
            "uploadedBy": self.uploaded_by,
        }
