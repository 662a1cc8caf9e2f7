from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from database import Base


# GST slab (e.g. "GST 18%"); rate is a decimal string
class TaxCategory(Base):
    __tablename__ = "tax_categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    rate = Column(String, nullable=False)
    hsn_code_range = Column(String, nullable=True)
    description = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    hsn_codes = relationship("HsnCode", back_populates="tax_category")


# HSN master entry with its CGST / SGST / IGST / cess split
class HsnCode(Base):
    __tablename__ = "hsn_codes"

    id = Column(Integer, primary_key=True, index=True)
    hsn_code = Column(String, unique=True, nullable=False, index=True)
    description = Column(String, nullable=False)
    tax_category_id = Column(Integer, ForeignKey("tax_categories.id"), nullable=True)
    cgst_rate = Column(String, nullable=False, default="0")
    sgst_rate = Column(String, nullable=False, default="0")
    igst_rate = Column(String, nullable=False, default="0")
    cess_rate = Column(String, nullable=False, default="0")
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    tax_category = relationship("TaxCategory", back_populates="hsn_codes")


# Global tax configuration (single row)
class TaxSettings(Base):
    __tablename__ = "tax_settings"

    id = Column(Integer, primary_key=True, index=True)
    tax_calculation_method = Column(String, nullable=False, default="exclusive")
    prices_include_tax = Column(Boolean, nullable=False, default=False)
    enable_multiple_tax_rates = Column(Boolean, nullable=False, default=True)
    company_gstin = Column(String, nullable=True)
    company_state = Column(String, nullable=True)
    company_state_code = Column(String, nullable=True)
    default_tax_category_id = Column(Integer, ForeignKey("tax_categories.id"), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
