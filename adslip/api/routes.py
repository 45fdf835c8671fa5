import logging

from flask import Blueprint, request, jsonify, current_app, send_from_directory
from flask_login import login_required, current_user
from .. import db
from ..errors import DuplicateReceipt, MalformedImage
from ..ingest import ReceiptUpload, ingest_receipt
from ..models import AdReceipt
from ..schemas import DuplicateRejection, ReceiptRead

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)

def _allowed(filename):
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    return ext in current_app.config.get("ALLOWED_EXTENSIONS", set())


def _success(data=None, message=None, status=200):
    payload = {"success": True}
    if data is not None:
        payload["data"] = data
    if message:
        payload["message"] = message
    return jsonify(payload), status


def _error(message, status=400, errors=None):
    payload = {"success": False, "message": message}
    if errors:
        payload["errors"] = errors
    return jsonify(payload), status


def _receipt_to_dict(r: AdReceipt):
    return ReceiptRead.model_validate(r).model_dump(mode="json")


def _organization_id():
    return getattr(current_user, "organization_id", None)


@api_bp.post("/receipts/upload")
@login_required
def receipts_upload():
    org_id = _organization_id()
    if not org_id:
        return _error("organization not found for this user", status=404)

    f = request.files.get("receipt")
    if not f:
        return _error("no file uploaded")
    if not (f.mimetype or "").startswith("image/"):
        return _error("invalid file type", errors={"receipt": ["not an image"]})
    if f.filename and "." in f.filename and not _allowed(f.filename):
        return _error("file type not allowed", errors={"receipt": ["extension"]})

    data = f.read()
    logger.info("upload start", extra={"upload_name": f.filename, "mime": f.mimetype, "size": len(data)})
    upload = ReceiptUpload(
        data=data,
        mime=f.mimetype,
        organization_id=org_id,
        filename=f.filename,
        campaign_id=request.form.get("campaign_id") or None,
        platform=request.form.get("platform") or None,
    )
    try:
        outcome = ingest_receipt(upload)
    except DuplicateReceipt as exc:
        rejection = DuplicateRejection(kind=exc.kind.value, existing_receipt_id=exc.existing_receipt_id)
        return _error("receipt already uploaded", status=409, errors=rejection.model_dump())
    except MalformedImage as exc:
        return _error("malformed image", errors={"receipt": [str(exc)]})
    except Exception:
        logger.exception("upload failed")
        db.session.rollback()
        return _error("upload failed", status=500)
    return _success(outcome.to_response(), status=201)


@api_bp.get("/receipts")
@login_required
def receipts_list():
    items = (
        AdReceipt.query.filter_by(organization_id=_organization_id())
        .order_by(AdReceipt.created_at.desc(), AdReceipt.id.desc())
        .all()
    )
    total = sum(float(r.amount) for r in items if r.amount is not None)
    return _success({"receipts": [_receipt_to_dict(r) for r in items], "total_amount": total})


@api_bp.get("/receipts/<int:id>")
@login_required
def receipts_get(id):
    r = AdReceipt.query.filter_by(id=id, organization_id=_organization_id()).first_or_404()
    return _success(_receipt_to_dict(r))


@api_bp.get("/uploads/<path:filename>")
@login_required
def uploads(filename):
    owned = AdReceipt.query.filter_by(
        organization_id=_organization_id(), receipt_url=f"/api/uploads/{filename}"
    ).first()
    if owned is None:
        return _error("not found", status=404)
    return send_from_directory(current_app.config["UPLOAD_FOLDER"], filename)
