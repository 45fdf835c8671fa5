from datetime import datetime
from flask_login import UserMixin
from . import db, login_manager
from passlib.hash import bcrypt

class Organization(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

class User(db.Model, UserMixin):
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(160), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    organization_id = db.Column(db.Integer, db.ForeignKey("organization.id"), index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def set_password(self, password: str):
        self.password_hash = bcrypt.hash(password)

    def check_password(self, password: str) -> bool:
        return bcrypt.verify(password, self.password_hash)

@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))

class AdReceipt(db.Model):
    """One accepted payment slip. Created once per upload, never updated by ingestion."""

    __table_args__ = (
        db.UniqueConstraint("organization_id", "file_hash", name="uq_ad_receipt_org_file_hash"),
        db.UniqueConstraint("organization_id", "qr_hash", name="uq_ad_receipt_org_qr_hash"),
    )

    id = db.Column(db.Integer, primary_key=True)
    organization_id = db.Column(db.Integer, db.ForeignKey("organization.id"), index=True, nullable=False)
    campaign_id = db.Column(db.String(64), index=True)
    receipt_number = db.Column(db.String(40), unique=True, nullable=False)
    platform = db.Column(db.String(32), nullable=False, default="META_ADS")
    payment_method = db.Column(db.String(32), nullable=False, default="QR_CODE")
    amount = db.Column(db.Numeric(12, 2))  # null until detected or corrected by hand
    currency = db.Column(db.String(8), default="THB")
    amount_detected = db.Column(db.Boolean, nullable=False, default=False)
    detect_method = db.Column(db.String(24), nullable=False, default="NONE")
    detect_reason = db.Column(db.String(255))
    receipt_url = db.Column(db.String(255), nullable=False)
    original_filename = db.Column(db.String(255))
    mime = db.Column(db.String(64))
    size = db.Column(db.Integer)
    qr_code_data = db.Column(db.Text)
    file_hash = db.Column(db.String(64), index=True)
    qr_hash = db.Column(db.String(64), index=True)
    is_processed = db.Column(db.Boolean, nullable=False, default=False)
    paid_at = db.Column(db.DateTime, default=datetime.utcnow)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
