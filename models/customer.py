from sqlalchemy import Column, Date, Index, String, Text, text

from database import Base
from models.audit import AuditMixin


class Customer(AuditMixin, Base):
    __tablename__ = "customers"
    # id_number is unique among live (not soft-deleted) applicants only
    __table_args__ = (
        Index(
            "uq_customers_id_number_active",
            "id_number",
            unique=True,
            sqlite_where=text("deleted = false"),
            postgresql_where=text("deleted = false"),
        ),
    )

    id = Column(String(36), primary_key=True)
    full_name = Column(String(100), nullable=False)
    date_of_birth = Column(Date, nullable=False)
    id_number = Column(String(25), nullable=False)
    email = Column(Text, nullable=True)
    phone = Column(String(30), nullable=False)
    address_street = Column(String(200), nullable=False)
    address_city = Column(String(100), nullable=False)
    address_zipcode = Column(String(10), nullable=False)
