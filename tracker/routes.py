from flask import Blueprint, jsonify, request, send_from_directory

from . import applications as store
from .auth import (
    admin_required,
    authenticate,
    check_admin_key,
    current_identity,
    login_required,
    register_user,
)
from .db import db_state
from .errors import AuthError, ValidationError
from .models import ROLE_ADMIN, ROLE_REGULAR
from .notifications import record_app_open
from .schemas import (
    AdminApplicationsQuery,
    AdminSignupRequest,
    ApplicationCreate,
    ApplicationUpdate,
    LoginRequest,
    SignupRequest,
    parse,
)
from .uploads import save_upload, upload_dir

bp = Blueprint("api", __name__)


def _body():
    return request.get_json(silent=True)


def _login(required_role=None):
    try:
        data = parse(LoginRequest, _body())
    except ValidationError:
        raise AuthError("Invalid credentials")
    return jsonify({"token": authenticate(data.email, data.password, required_role)})


# ----- Health -----
@bp.route("/health", methods=["GET"])
def health():
    return jsonify({"ok": True})


@bp.route("/db-health", methods=["GET"])
def database_health():
    return jsonify({"state": db_state()})


# ----- Auth -----
@bp.route("/auth/signup", methods=["POST"])
def signup():
    data = parse(SignupRequest, _body())
    user = register_user(data.email, data.username, data.password, data.phone_e164, role=ROLE_REGULAR)
    return jsonify({"ok": True, "userId": user.id})


@bp.route("/auth/login", methods=["POST"])
def login():
    return _login()


@bp.route("/auth/admin/signup", methods=["POST"])
def admin_signup():
    body = _body()
    check_admin_key(body.get("adminKey") if isinstance(body, dict) else None)

    data = parse(AdminSignupRequest, body)
    user = register_user(data.email, data.username, data.password, data.phone_e164, role=ROLE_ADMIN)
    return jsonify({"ok": True, "userId": user.id})


@bp.route("/auth/admin/login", methods=["POST"])
def admin_login():
    return _login(required_role=ROLE_ADMIN)


# ----- Uploads -----
@bp.route("/upload", methods=["POST"])
@login_required
def upload():
    return jsonify({"url": save_upload(request.files.get("file"))})


@bp.route("/uploads/<path:filename>", methods=["GET"])
def uploaded_file(filename: str):
    return send_from_directory(upload_dir(), filename)


# ----- Applications -----
@bp.route("/applications", methods=["GET"])
@login_required
def list_applications():
    rows = store.list_applications(current_identity().user_id, request.args.get("status"))
    return jsonify([row.to_dict() for row in rows])


@bp.route("/applications", methods=["POST"])
@login_required
def create_application():
    data = parse(ApplicationCreate, _body())
    row = store.create_application(current_identity().user_id, data)
    return jsonify(row.to_dict())


@bp.route("/applications/<int:app_id>", methods=["PUT"])
@login_required
def update_application(app_id: int):
    data = parse(ApplicationUpdate, _body())
    row = store.update_application(current_identity().user_id, app_id, data)
    return jsonify(row.to_dict())


@bp.route("/applications/<int:app_id>", methods=["DELETE"])
@login_required
def delete_application(app_id: int):
    store.delete_application(current_identity().user_id, app_id)
    return jsonify({"ok": True})


@bp.route("/applications/<int:app_id>/mark-applied", methods=["POST"])
@login_required
def mark_applied(app_id: int):
    return jsonify(store.mark_applied(current_identity().user_id, app_id).to_dict())


@bp.route("/applications/<int:app_id>/mark-remaining", methods=["POST"])
@login_required
def mark_remaining(app_id: int):
    return jsonify(store.mark_remaining(current_identity().user_id, app_id).to_dict())


# ----- Admin -----
@bp.route("/admin/users", methods=["GET"])
@admin_required
def admin_users():
    return jsonify([user.to_dict() for user in store.admin_list_users()])


@bp.route("/admin/applications", methods=["GET"])
@admin_required
def admin_applications():
    query = parse(AdminApplicationsQuery, request.args.to_dict())
    rows = store.admin_list_applications(query.user_id, query.status)
    return jsonify([row.to_dict() for row in rows])


# ----- Events -----
@bp.route("/events/app-open", methods=["POST"])
@login_required
def app_open():
    sent = record_app_open(current_identity().user_id)
    return jsonify({"ok": True, "sent": sent})
