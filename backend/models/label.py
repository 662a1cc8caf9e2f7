from sqlalchemy import Column, Integer, String, Float, Boolean, ForeignKey, DateTime, JSON, func
from sqlalchemy.orm import relationship
from database import Base


# Layout definition for product labels (sizes in millimetres)
class LabelTemplate(Base):
    __tablename__ = "label_templates"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)
    description = Column(String, nullable=True)
    width = Column(Float, nullable=False)
    height = Column(Float, nullable=False)
    font_size = Column(Integer, nullable=False, default=12)

    include_barcode = Column(Boolean, nullable=False, default=True)
    include_price = Column(Boolean, nullable=False, default=True)
    include_description = Column(Boolean, nullable=False, default=False)
    include_mrp = Column(Boolean, nullable=False, default=True)
    include_weight = Column(Boolean, nullable=False, default=False)
    include_hsn = Column(Boolean, nullable=False, default=False)

    barcode_type = Column(String, nullable=False, default="CODE128")
    barcode_position = Column(String, nullable=False, default="bottom")
    text_alignment = Column(String, nullable=False, default="center")
    border_style = Column(String, nullable=False, default="solid")
    border_width = Column(Integer, nullable=False, default=1)
    background_color = Column(String, nullable=False, default="#ffffff")
    text_color = Column(String, nullable=False, default="#000000")
    custom_css = Column(String, nullable=True)

    is_default = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


# Label / receipt printer configuration
class Printer(Base):
    __tablename__ = "printers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    printer_type = Column(String, nullable=False, default="thermal")
    connection = Column(String, nullable=False, default="usb")
    ip_address = Column(String, nullable=True)
    port = Column(Integer, nullable=True)
    paper_width = Column(Float, nullable=True)
    paper_height = Column(Float, nullable=True)
    is_default = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


# A rendered label sheet
class PrintJob(Base):
    __tablename__ = "print_jobs"

    id = Column(Integer, primary_key=True, index=True)
    template_id = Column(Integer, ForeignKey("label_templates.id"), nullable=False)
    printer_id = Column(Integer, ForeignKey("printers.id"), nullable=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    product_ids = Column(JSON, nullable=False)
    copies = Column(Integer, nullable=False, default=1)
    labels_per_row = Column(Integer, nullable=False, default=2)
    paper_size = Column(String, nullable=False, default="A4")
    orientation = Column(String, nullable=False, default="portrait")
    status = Column(String, nullable=False, default="completed")
    total_labels = Column(Integer, nullable=False)
    custom_text = Column(String, nullable=True)
    file_path = Column(String, nullable=True)
    error_message = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    template = relationship("LabelTemplate")
    printer = relationship("Printer")
