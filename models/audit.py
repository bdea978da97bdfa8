from sqlalchemy import Boolean, Column, DateTime, String, false, func


class AuditMixin:
    """Audit and soft-delete columns shared by customers and loans."""

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    created_by = Column(String(128), nullable=False)
    updated_by = Column(String(128), nullable=False)
    deleted = Column(Boolean, nullable=False, default=False, server_default=false(), index=True)
    deleted_at = Column(DateTime(timezone=True), nullable=True)
