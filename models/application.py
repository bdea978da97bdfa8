from sqlalchemy import Boolean, Column, Enum, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from database import Base
from models.audit import AuditMixin


class LoanApplication(AuditMixin, Base):
    __tablename__ = "loans"

    id = Column(String(36), primary_key=True)
    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=False, index=True)
    # DRAFT / SUBMITTED / CANCELLED (services.lifecycle.ApplicationStatus values)
    loan_status = Column(String(16), nullable=False, index=True)
    # Proposed loan and collateral are written once at creation
    tenure = Column(Integer, nullable=False)
    # No fixed scale: the amount is read back exactly as accepted
    amount = Column(Numeric(asdecimal=True), nullable=False)
    collateral_category = Column(Enum("CAR", "MOTORCYCLE", name="collateral_categories"), nullable=False)
    collateral_brand = Column(String(100), nullable=False)
    collateral_variant = Column(String(100), nullable=False)
    collateral_manufacturing_year = Column(Integer, nullable=False)
    collateral_is_document_complete = Column(Boolean, nullable=False)

    customer = relationship("Customer", lazy="raise")
