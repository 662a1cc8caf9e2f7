# schemas/label.py
import re
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")

BarcodeType = Literal["CODE128", "EAN13"]
BarcodePosition = Literal["top", "bottom"]
Alignment = Literal["left", "center", "right"]
BorderStyle = Literal["none", "solid", "dashed"]


def _upper(v):
    return v.upper() if isinstance(v, str) else v


def _color(v):
    if v is not None and not _COLOR.match(v):
        raise ValueError("colour must be #RRGGBB")
    return v


class TemplateFields(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    width: Optional[float] = Field(None, gt=0, le=300)
    height: Optional[float] = Field(None, gt=0, le=300)
    font_size: Optional[int] = Field(None, ge=4, le=72)
    include_barcode: Optional[bool] = None
    include_price: Optional[bool] = None
    include_description: Optional[bool] = None
    include_mrp: Optional[bool] = None
    include_weight: Optional[bool] = None
    include_hsn: Optional[bool] = None
    barcode_type: Optional[BarcodeType] = None
    barcode_position: Optional[BarcodePosition] = None
    text_alignment: Optional[Alignment] = None
    border_style: Optional[BorderStyle] = None
    border_width: Optional[int] = Field(None, ge=0, le=10)
    background_color: Optional[str] = None
    text_color: Optional[str] = None
    custom_css: Optional[str] = None
    is_default: Optional[bool] = None
    is_active: Optional[bool] = None

    upper_barcode = field_validator("barcode_type", mode="before")(_upper)
    check_colors = field_validator("background_color", "text_color")(_color)


class LabelTemplateCreate(TemplateFields):
    name: str = Field(min_length=1)
    width: float = Field(gt=0, le=300)
    height: float = Field(gt=0, le=300)
    font_size: int = Field(12, ge=4, le=72)
    include_barcode: bool = True
    include_price: bool = True
    include_description: bool = False
    include_mrp: bool = True
    include_weight: bool = False
    include_hsn: bool = False
    barcode_type: BarcodeType = "CODE128"
    barcode_position: BarcodePosition = "bottom"
    text_alignment: Alignment = "center"
    border_style: BorderStyle = "solid"
    border_width: int = Field(1, ge=0, le=10)
    background_color: str = "#ffffff"
    text_color: str = "#000000"
    is_default: bool = False
    is_active: bool = True


class LabelTemplateUpdate(TemplateFields):
    pass


class LabelTemplateOut(LabelTemplateCreate):
    id: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# Portable template document used by export / import
class TemplateExport(BaseModel):
    version: int = 1
    exported_at: datetime
    template: Dict[str, Any]


class TemplateImport(BaseModel):
    template: LabelTemplateCreate
    overwrite: bool = False


class PreviewRequest(BaseModel):
    product_ids: List[int] = Field(min_length=1)
    copies: int = Field(1, ge=1, le=100)
    labels_per_row: int = Field(2, ge=1, le=10)
    custom_text: Optional[str] = None


# Printer schemas
class PrinterBase(BaseModel):
    name: str = Field(min_length=1)
    printer_type: Literal["thermal", "laser", "inkjet", "label"] = "thermal"
    connection: Literal["usb", "network", "bluetooth"] = "usb"
    ip_address: Optional[str] = None
    port: Optional[int] = Field(None, ge=1, le=65535)
    paper_width: Optional[float] = Field(None, gt=0)
    paper_height: Optional[float] = Field(None, gt=0)
    is_default: bool = False
    is_active: bool = True


class PrinterCreate(PrinterBase):
    @model_validator(mode="after")
    def check_network(self):
        if self.connection == "network" and not self.ip_address:
            raise ValueError("ip_address is required for network printers")
        return self


class PrinterUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    printer_type: Optional[Literal["thermal", "laser", "inkjet", "label"]] = None
    connection: Optional[Literal["usb", "network", "bluetooth"]] = None
    ip_address: Optional[str] = None
    port: Optional[int] = Field(None, ge=1, le=65535)
    paper_width: Optional[float] = Field(None, gt=0)
    paper_height: Optional[float] = Field(None, gt=0)
    is_default: Optional[bool] = None
    is_active: Optional[bool] = None


class PrinterOut(PrinterBase):
    id: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PrinterTestResult(BaseModel):
    printer_id: int
    ok: bool
    status: str
    issues: List[str] = []


# Print job schemas
class PrintLabelsRequest(BaseModel):
    template_id: int
    product_ids: List[int] = Field(min_length=1)
    copies: int = Field(1, ge=1, le=100)
    labels_per_row: int = Field(2, ge=1, le=10)
    paper_size: Literal["A4", "LETTER"] = "A4"
    orientation: Literal["portrait", "landscape"] = "portrait"
    custom_text: Optional[str] = None
    printer_id: Optional[int] = None

    upper_paper = field_validator("paper_size", mode="before")(_upper)


class PrintJobOut(BaseModel):
    id: int
    template_id: int
    printer_id: Optional[int] = None
    user_id: int
    product_ids: List[int]
    copies: int
    labels_per_row: int
    paper_size: str
    orientation: str
    status: str
    total_labels: int
    custom_text: Optional[str] = None
    error_message: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class BarcodeRequest(BaseModel):
    value: str = Field(min_length=1)
    barcode_type: BarcodeType = "CODE128"

    upper_barcode = field_validator("barcode_type", mode="before")(_upper)


class BarcodeResponse(BaseModel):
    value: str
    barcode_type: str
    data_url: str
