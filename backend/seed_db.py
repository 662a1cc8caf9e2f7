"""
Seeds reference data: admin account, GST slabs, common HSN codes,
label templates, payroll and tax settings. Safe to run repeatedly.

    python backend/seed_db.py
"""
import os
import sys

# Add 'backend' folder to Python path
sys.path.append(os.path.abspath(os.path.dirname(__file__)))

from config import settings
from database import SessionLocal, init_db
from models.users import User
from models.tax import TaxCategory, HsnCode, TaxSettings
from models.label import LabelTemplate
from models.payroll import PayrollSettings
from utils.hashing import get_password_hash
from utils.gst import SUGGESTED_RATES, split_rate, normalize_rate

# Configuration
GST_SLABS = [0, 5, 12, 18, 28, 40]

LABEL_TEMPLATES = [
    {"name": "Standard 50x25", "description": "Shelf label with barcode and price",
     "width": 50, "height": 25, "font_size": 9, "is_default": True},
    {"name": "Small 38x25", "description": "Price tag without MRP",
     "width": 38, "height": 25, "font_size": 8, "include_mrp": False},
    {"name": "Large 100x50", "description": "Product label with weight and HSN",
     "width": 100, "height": 50, "font_size": 12, "include_description": True,
     "include_weight": True, "include_hsn": True},
]
# End Configuration


def seed_admin(session):
    email = settings.ADMIN_EMAIL.strip().lower()
    if session.query(User).filter(User.email == email).first():
        return 0
    session.add(User(email=email, password_hash=get_password_hash(settings.ADMIN_PASSWORD),
                     name="Administrator", role="admin", active=True))
    return 1


def seed_tax_categories(session):
    existing = {c.rate for c in session.query(TaxCategory).all()}
    added = 0
    for slab in GST_SLABS:
        rate = normalize_rate(slab)
        if rate in existing:
            continue
        session.add(TaxCategory(name=f"GST {slab}%", rate=rate, description=f"Goods taxed at {slab}% GST"))
        added += 1
    return added


def seed_hsn_codes(session):
    categories = {c.rate: c.id for c in session.query(TaxCategory).all()}
    existing = {h.hsn_code for h in session.query(HsnCode).all()}
    added = 0
    for code, (description, rate) in SUGGESTED_RATES.items():
        if code in existing:
            continue
        session.add(HsnCode(hsn_code=code, description=description,
                            tax_category_id=categories.get(normalize_rate(rate)), **split_rate(rate)))
        added += 1
    return added


def seed_label_templates(session):
    existing = {t.name for t in session.query(LabelTemplate).all()}
    added = 0
    for data in LABEL_TEMPLATES:
        if data["name"] in existing:
            continue
        session.add(LabelTemplate(**data))
        added += 1
    return added


def seed_single_rows(session):
    added = 0
    if not session.query(PayrollSettings).first():
        session.add(PayrollSettings())
        added += 1
    if not session.query(TaxSettings).first():
        session.add(TaxSettings())
        added += 1
    return added


def seed_all():
    init_db()
    session = SessionLocal()
    try:
        counts = {}
        for name, step in (
            ("admin", seed_admin),
            ("tax categories", seed_tax_categories),
            ("hsn codes", seed_hsn_codes),
            ("label templates", seed_label_templates),
            ("settings", seed_single_rows),
        ):
            counts[name] = step(session)
            # HSN codes look up the categories added just before
            session.flush()
        session.commit()
        return counts
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


if __name__ == "__main__":
    for name, count in seed_all().items():
        print(f"{name}: {count} added")
