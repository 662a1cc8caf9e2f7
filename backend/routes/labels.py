# backend/routes/labels.py
import logging
from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from models.label import LabelTemplate, Printer, PrintJob
from models.product import Product
from models.users import User
from utils.tokenJWT import get_current_user, manager_or_admin
from utils.audit import write_log, client_ip
from utils.labels import preview_layout, render_label_sheet, barcode_svg_data_url
from utils.pdf import get_label_sheet_path
import schemas.label as label_schemas

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Labels"])


def get_template_or_404(db: Session, template_id: int) -> LabelTemplate:
    template = db.query(LabelTemplate).filter(LabelTemplate.id == template_id).first()
    if not template:
        raise HTTPException(status_code=404, detail="Label template not found")
    return template


def get_printer_or_404(db: Session, printer_id: int) -> Printer:
    printer = db.query(Printer).filter(Printer.id == printer_id).first()
    if not printer:
        raise HTTPException(status_code=404, detail="Printer not found")
    return printer


def _products_in_order(db: Session, product_ids: List[int]) -> List[Product]:
    found = {p.id: p for p in db.query(Product).filter(Product.id.in_(set(product_ids))).all()}
    missing = sorted(set(product_ids) - set(found))
    if missing:
        raise HTTPException(status_code=404, detail=f"Products not found: {missing}")
    return [found[pid] for pid in product_ids]


def _clear_default(db: Session, model, keep_id: Optional[int] = None) -> None:
    # Only one default template / printer
    q = db.query(model).filter(model.is_default.is_(True))
    if keep_id is not None:
        q = q.filter(model.id != keep_id)
    for row in q.all():
        row.is_default = False


def _check_template_name(db: Session, name: str, template_id: Optional[int] = None) -> None:
    q = db.query(LabelTemplate.id).filter(LabelTemplate.name == name)
    if template_id is not None:
        q = q.filter(LabelTemplate.id != template_id)
    if q.first():
        raise HTTPException(status_code=409, detail=f"Label template '{name}' already exists")


# =========================
# TEMPLATES
# =========================
@router.get("/label-templates", response_model=List[label_schemas.LabelTemplateOut])
def list_templates(
    active: Optional[bool] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(LabelTemplate)
    if active is not None:
        query = query.filter(LabelTemplate.is_active == active)
    return query.order_by(LabelTemplate.is_default.desc(), LabelTemplate.name.asc()).all()


@router.get("/label-templates/{template_id}", response_model=label_schemas.LabelTemplateOut)
def get_template(template_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return get_template_or_404(db, template_id)


@router.post("/label-templates", response_model=label_schemas.LabelTemplateOut, status_code=status.HTTP_201_CREATED)
def create_template(
    payload: label_schemas.LabelTemplateCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    _check_template_name(db, payload.name)
    if payload.is_default:
        _clear_default(db, LabelTemplate)
    template = LabelTemplate(**payload.model_dump())
    db.add(template)
    db.commit()
    db.refresh(template)
    write_log(db, user_id=current_user.id, action="LABEL_TEMPLATE_CREATE", resource="labels",
              status="SUCCESS", ip=client_ip(request), meta={"id": template.id, "name": template.name})
    return template


@router.put("/label-templates/{template_id}", response_model=label_schemas.LabelTemplateOut)
def update_template(
    template_id: int,
    payload: label_schemas.LabelTemplateUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    template = get_template_or_404(db, template_id)
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("name"):
        _check_template_name(db, changes["name"], template_id)
    if changes.get("is_default"):
        _clear_default(db, LabelTemplate, keep_id=template_id)
    for key, value in changes.items():
        setattr(template, key, value)
    db.commit()
    db.refresh(template)
    write_log(db, user_id=current_user.id, action="LABEL_TEMPLATE_UPDATE", resource="labels",
              status="SUCCESS", ip=client_ip(request), meta={"id": template.id, "fields": sorted(changes)})
    return template


@router.delete("/label-templates/{template_id}")
def delete_template(
    template_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    template = get_template_or_404(db, template_id)
    if db.query(PrintJob.id).filter(PrintJob.template_id == template_id).first():
        raise HTTPException(status_code=409, detail="Template has print jobs; deactivate it instead")
    db.delete(template)
    db.commit()
    write_log(db, user_id=current_user.id, action="LABEL_TEMPLATE_DELETE", resource="labels",
              status="SUCCESS", ip=client_ip(request), meta={"id": template_id})
    return {"message": "Label template deleted"}


@router.get("/label-templates/{template_id}/export", response_model=label_schemas.TemplateExport)
def export_template(template_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    template = get_template_or_404(db, template_id)
    data = label_schemas.LabelTemplateCreate.model_validate(template, from_attributes=True).model_dump()
    # An imported copy never takes over the default flag
    data["is_default"] = False
    return {"version": 1, "exported_at": datetime.now(), "template": data}


@router.post("/label-templates/import", response_model=label_schemas.LabelTemplateOut, status_code=status.HTTP_201_CREATED)
def import_template(
    payload: label_schemas.TemplateImport,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    data = payload.template.model_dump()
    existing = db.query(LabelTemplate).filter(LabelTemplate.name == data["name"]).first()
    if existing and not payload.overwrite:
        raise HTTPException(status_code=409, detail=f"Label template '{data['name']}' already exists")

    if data.get("is_default"):
        _clear_default(db, LabelTemplate, keep_id=existing.id if existing else None)
    if existing:
        for key, value in data.items():
            setattr(existing, key, value)
        template = existing
    else:
        template = LabelTemplate(**data)
        db.add(template)
    db.commit()
    db.refresh(template)
    write_log(db, user_id=current_user.id, action="LABEL_TEMPLATE_IMPORT", resource="labels",
              status="SUCCESS", ip=client_ip(request), meta={"id": template.id, "overwrite": bool(existing)})
    return template


@router.post("/label-templates/{template_id}/preview")
def preview_template(
    template_id: int,
    payload: label_schemas.PreviewRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    template = get_template_or_404(db, template_id)
    products = _products_in_order(db, payload.product_ids)
    layout = preview_layout(template, products, payload.copies, payload.labels_per_row, payload.custom_text)
    layout["template_id"] = template.id
    return layout


# =========================
# PRINTERS
# =========================
@router.get("/printers", response_model=List[label_schemas.PrinterOut])
def list_printers(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return db.query(Printer).order_by(Printer.is_default.desc(), Printer.name.asc()).all()


@router.get("/printers/{printer_id}", response_model=label_schemas.PrinterOut)
def get_printer(printer_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return get_printer_or_404(db, printer_id)


@router.post("/printers", response_model=label_schemas.PrinterOut, status_code=status.HTTP_201_CREATED)
def create_printer(
    payload: label_schemas.PrinterCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    if payload.is_default:
        _clear_default(db, Printer)
    printer = Printer(**payload.model_dump())
    db.add(printer)
    db.commit()
    db.refresh(printer)
    write_log(db, user_id=current_user.id, action="PRINTER_CREATE", resource="printers",
              status="SUCCESS", ip=client_ip(request), meta={"id": printer.id, "name": printer.name})
    return printer


@router.put("/printers/{printer_id}", response_model=label_schemas.PrinterOut)
def update_printer(
    printer_id: int,
    payload: label_schemas.PrinterUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    printer = get_printer_or_404(db, printer_id)
    changes = payload.model_dump(exclude_unset=True)
    connection = changes.get("connection", printer.connection)
    ip_address = changes.get("ip_address", printer.ip_address)
    if connection == "network" and not ip_address:
        raise HTTPException(status_code=422, detail="ip_address is required for network printers")
    if changes.get("is_default"):
        _clear_default(db, Printer, keep_id=printer_id)
    for key, value in changes.items():
        setattr(printer, key, value)
    db.commit()
    db.refresh(printer)
    write_log(db, user_id=current_user.id, action="PRINTER_UPDATE", resource="printers",
              status="SUCCESS", ip=client_ip(request), meta={"id": printer.id, "fields": sorted(changes)})
    return printer


@router.delete("/printers/{printer_id}")
def delete_printer(
    printer_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    printer = get_printer_or_404(db, printer_id)
    # Keep job history, drop the link
    db.query(PrintJob).filter(PrintJob.printer_id == printer_id).update({PrintJob.printer_id: None})
    db.delete(printer)
    db.commit()
    write_log(db, user_id=current_user.id, action="PRINTER_DELETE", resource="printers",
              status="SUCCESS", ip=client_ip(request), meta={"id": printer_id})
    return {"message": "Printer deleted"}


# Configuration check only; no device is contacted
@router.post("/printers/{printer_id}/test", response_model=label_schemas.PrinterTestResult)
def test_printer(printer_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    printer = get_printer_or_404(db, printer_id)
    issues = []
    if not printer.is_active:
        issues.append("Printer is inactive")
    if printer.connection == "network":
        if not printer.ip_address:
            issues.append("Network printer has no IP address")
        if not printer.port:
            issues.append("Network printer has no port; 9100 will be assumed")
    if printer.printer_type == "label" and not (printer.paper_width and printer.paper_height):
        issues.append("Label printer has no paper size")

    blocking = [i for i in issues if "assumed" not in i]
    return {
        "printer_id": printer.id,
        "ok": not blocking,
        "status": "ready" if not blocking else "misconfigured",
        "issues": issues,
    }


# =========================
# PRINT JOBS
# =========================
@router.post("/print-labels", response_model=label_schemas.PrintJobOut, status_code=status.HTTP_201_CREATED)
def print_labels(
    payload: label_schemas.PrintLabelsRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    template = get_template_or_404(db, payload.template_id)
    if not template.is_active:
        raise HTTPException(status_code=400, detail="Label template is inactive")
    if payload.printer_id is not None:
        printer = get_printer_or_404(db, payload.printer_id)
        if not printer.is_active:
            raise HTTPException(status_code=400, detail="Printer is inactive")
    products = _products_in_order(db, payload.product_ids)

    job = PrintJob(
        template_id=template.id,
        printer_id=payload.printer_id,
        user_id=current_user.id,
        product_ids=list(payload.product_ids),
        copies=payload.copies,
        labels_per_row=payload.labels_per_row,
        paper_size=payload.paper_size,
        orientation=payload.orientation,
        custom_text=payload.custom_text,
        total_labels=len(products) * payload.copies,
        status="pending",
    )
    db.add(job)
    db.commit()
    db.refresh(job)

    out_path = get_label_sheet_path(job.id)
    try:
        render_label_sheet(template, products, out_path, copies=payload.copies,
                           labels_per_row=payload.labels_per_row, paper_size=payload.paper_size,
                           orientation=payload.orientation, custom_text=payload.custom_text,
                           currency=settings.CURRENCY_SYMBOL)
        job.status = "completed"
        job.file_path = str(out_path)
    except Exception as e:
        logger.exception("Label sheet rendering failed for job %s", job.id)
        job.status = "failed"
        job.error_message = str(e)
    db.commit()
    db.refresh(job)

    write_log(db, user_id=current_user.id, action="PRINT_LABELS", resource="labels",
              status="SUCCESS" if job.status == "completed" else "FAIL", ip=client_ip(request),
              meta={"job_id": job.id, "total_labels": job.total_labels})
    return job


@router.get("/print-jobs", response_model=List[label_schemas.PrintJobOut])
def list_print_jobs(
    limit: int = 50,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return db.query(PrintJob).order_by(PrintJob.id.desc()).limit(max(min(limit, 500), 1)).all()


@router.get("/print-jobs/{job_id}/pdf")
def download_print_job(job_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    job = db.query(PrintJob).filter(PrintJob.id == job_id).first()
    if not job:
        raise HTTPException(status_code=404, detail="Print job not found")
    if job.status != "completed" or not job.file_path:
        raise HTTPException(status_code=409, detail=f"Print job is {job.status}")
    return FileResponse(path=job.file_path, media_type="application/pdf", filename=f"Labels_{job.id}.pdf")


@router.post("/generate-barcode", response_model=label_schemas.BarcodeResponse)
def generate_barcode(payload: label_schemas.BarcodeRequest, current_user: User = Depends(get_current_user)):
    try:
        data_url = barcode_svg_data_url(payload.value, payload.barcode_type)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"value": payload.value, "barcode_type": payload.barcode_type, "data_url": data_url}
