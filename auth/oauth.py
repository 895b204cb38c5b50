from flask import Blueprint, current_app, request, jsonify
from flask_login import login_user, logout_user, login_required
from google.oauth2 import id_token
from google.auth.transport import requests
import logging

from auth.utils import get_or_create_user, get_current_user

# Set up logging
logger = logging.getLogger(__name__)

bp = Blueprint('auth', __name__, url_prefix='/auth')


def serialize_user(user):
    return {
        'id': user.id,
        'email': user.email,
        'name': user.name,
        'daily_problems': user.daily_problems,
        'skip_weekends': user.skip_weekends
    }


@bp.route('/google', methods=['POST'])
def google_signin():
    """
    Handle Google Identity Services (GIS) sign-in.
    Receives a credential token from the frontend and verifies it.
    """
    try:
        data = request.get_json(silent=True) or {}
        credential = data.get('credential')

        if not credential:
            return jsonify({
                'success': False,
                'error': 'No credential provided'
            }), 400

        client_id = current_app.config.get('GOOGLE_CLIENT_ID')
        if not client_id:
            logger.warning('GOOGLE_CLIENT_ID is not configured; rejecting sign-in')
            return jsonify({
                'success': False,
                'error': 'Sign-in is not configured'
            }), 503

        # Verify the credential token with Google
        try:
            idinfo = id_token.verify_oauth2_token(
                credential,
                requests.Request(),
                client_id
            )
        except ValueError as e:
            logger.error(f'Invalid Google token: {str(e)}')
            return jsonify({
                'success': False,
                'error': 'Invalid credential token'
            }), 401

        google_id = idinfo.get('sub')
        email = idinfo.get('email')
        name = idinfo.get('name', '')

        if not google_id or not email:
            logger.error('Incomplete user info from Google token')
            return jsonify({
                'success': False,
                'error': 'Incomplete user information'
            }), 400

        user = get_or_create_user(google_id, email, name)

        if not user:
            logger.error(f'Failed to create/retrieve user for google_id: {google_id}')
            return jsonify({
                'success': False,
                'error': 'Failed to create user account'
            }), 500

        login_user(user, remember=True)
        logger.info(f'User {email} logged in successfully via GIS')

        return jsonify({
            'success': True,
            'user': serialize_user(user)
        }), 200

    except Exception as e:
        logger.exception(f'Exception during Google sign-in: {str(e)}')
        return jsonify({
            'success': False,
            'error': 'An unexpected error occurred'
        }), 500


@bp.route('/me', methods=['GET'])
def me():
    """Return the signed-in user, or 401"""
    user = get_current_user()
    if not user:
        return jsonify({'success': False, 'error': 'unauthorized'}), 401
    return jsonify({'success': True, 'user': serialize_user(user)}), 200


@bp.route('/logout', methods=['POST'])
@login_required
def logout():
    """Log out the current user"""
    logout_user()
    return jsonify({'success': True}), 200
