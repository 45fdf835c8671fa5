from flask import Blueprint, request, jsonify
from flask_login import login_user, logout_user, login_required, current_user
from .. import db, login_manager
from ..models import Organization, User

auth_bp = Blueprint("auth", __name__)


def _form():
    return request.get_json(silent=True) or request.form


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({"success": False, "message": "unauthorized"}), 401


@auth_bp.post("/login")
def login_post():
    data = _form()
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""
    user = User.query.filter_by(email=email).first()
    if not user or not user.check_password(password):
        return jsonify({"success": False, "message": "invalid credentials"}), 401
    login_user(user)
    return jsonify({"success": True, "data": {"id": user.id, "organization_id": user.organization_id}})

@auth_bp.post("/register")
def register_post():
    data = _form()
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""
    org_name = (data.get("organization") or "").strip() or email
    if not email or not password:
        return jsonify({"success": False, "message": "email and password required"}), 400
    if User.query.filter_by(email=email).first():
        return jsonify({"success": False, "message": "email already registered"}), 409
    org = Organization(name=org_name)
    db.session.add(org); db.session.flush()
    u = User(email=email, organization_id=org.id); u.set_password(password)
    db.session.add(u); db.session.commit()
    login_user(u)
    return jsonify({"success": True, "data": {"id": u.id, "organization_id": u.organization_id}}), 201

@auth_bp.post("/logout")
@login_required
def logout():
    logout_user()
    return jsonify({"success": True})

@auth_bp.get("/me")
@login_required
def me():
    return jsonify({"success": True, "data": {"id": current_user.id, "email": current_user.email,
                                              "organization_id": current_user.organization_id}})
