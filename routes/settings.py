from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from models import db
from services.errors import ServiceError
from services.settings_service import get_settings, update_settings
import logging

logger = logging.getLogger(__name__)

bp = Blueprint('settings', __name__, url_prefix='/api/settings')


@bp.route('', methods=['GET'])
@login_required
def read_settings():
    """
    Get the user's scheduling preferences.

    Returns:
        JSON object with daily_problems, skip_weekends, email_time, ai_encouragement
    """
    try:
        return jsonify(get_settings(current_user.id)), 200

    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logger.exception(f'Error reading settings for user {current_user.email}: {str(e)}')
        return jsonify({
            'success': False,
            'error': 'internal_error',
            'message': 'Failed to load settings. Please try again.'
        }), 500


@bp.route('', methods=['PUT'])
@login_required
def write_settings():
    """
    Update the user's scheduling preferences.

    Request Body (any subset):
        {
            "daily_problems": int (1-5),
            "skip_weekends": bool,
            "email_time": "HH:MM",
            "ai_encouragement": bool
        }

    Returns:
        200: The stored settings
        400: Validation error (e.g. daily_problems outside 1-5)
    """
    try:
        settings = update_settings(current_user.id, request.get_json(silent=True))
        return jsonify(settings), 200

    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        db.session.rollback()
        logger.exception(f'Error updating settings for user {current_user.email}: {str(e)}')
        return jsonify({
            'success': False,
            'error': 'internal_error',
            'message': 'Failed to update settings. Please try again.'
        }), 500
