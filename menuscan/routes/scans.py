from flask import Blueprint, current_app, jsonify, request

from ..utils.helpers import get_user_id

scans_bp = Blueprint('scans', __name__)

MAX_LIMIT = 100


@scans_bp.get("/scans")
def list_scans():
    """The caller's menu scans, newest first"""
    try:
        limit = int(request.args.get("limit", 20))
    except ValueError:
        limit = 20
    limit = max(1, min(MAX_LIMIT, limit))

    service = current_app.extensions["menu_analysis"]
    scans = service.list_scans(get_user_id(), limit=limit)
    return jsonify({"items": [s.model_dump() for s in scans]}), 200
