from flask import Blueprint, current_app, jsonify, request

from ..errors import NotImplementedYetError, UnauthenticatedError
from ..utils.helpers import get_user_id

analysis_bp = Blueprint('analysis', __name__)


@analysis_bp.post("/analyze-menu")
def analyze_menu():
    """Analyze an uploaded menu photo: { imageUrl, userPrefs? } -> { dishes, model, processingMs }"""
    body = request.get_json(silent=True)
    service = current_app.extensions["menu_analysis"]
    data = service.analyze(body, user_id=get_user_id())
    return jsonify(data), 200


@analysis_bp.post("/feedback-correction")
def feedback_correction():
    """Dish correction feedback from users (planned)."""
    if not get_user_id():
        raise UnauthenticatedError("User must be authenticated")
    raise NotImplementedYetError("Feedback correction not yet implemented")
