"""
Integration tests for Google Identity Services sign-in.

Tests:
- Credential verification and user creation with default settings
- Returning users are reused
- Invalid and missing credentials
- /auth/me and logout
"""

import sys
import os
import pytest
from unittest.mock import patch

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import create_app
from models import db
from models.user import User

GOOGLE_IDINFO = {
    'sub': 'google-123',
    'email': 'learner@example.com',
    'name': 'DSA Learner'
}


@pytest.fixture(scope='function')
def client():
    """Create a test client with fresh database for each test"""
    app = create_app('testing')
    app.config['SQLALCHEMY_DATABASE_URI'] = 'sqlite:///:memory:'
    app.config['TESTING'] = True
    app.config['GOOGLE_CLIENT_ID'] = 'test-client-id'
    app.config['DEFAULT_DAILY_PROBLEMS'] = 4

    with app.app_context():
        db.create_all()

        with app.test_client() as client:
            yield client

        db.session.remove()
        db.drop_all()


class TestGoogleSignIn:
    """Tests for POST /auth/google"""

    @patch('auth.oauth.id_token.verify_oauth2_token', return_value=GOOGLE_IDINFO)
    def test_creates_user_with_default_settings(self, mock_verify, client):
        response = client.post('/auth/google', json={'credential': 'token'})

        assert response.status_code == 200
        data = response.get_json()
        assert data['success'] is True
        assert data['user']['email'] == 'learner@example.com'
        assert data['user']['daily_problems'] == 4

        user = User.query.filter_by(google_id='google-123').one()
        assert user.skip_weekends is False
        assert mock_verify.call_args[0][2] == 'test-client-id'

    @patch('auth.oauth.id_token.verify_oauth2_token', return_value=GOOGLE_IDINFO)
    def test_returning_user_is_reused(self, mock_verify, client):
        client.post('/auth/google', json={'credential': 'token'})
        client.post('/auth/google', json={'credential': 'token'})

        assert User.query.count() == 1

    @patch('auth.oauth.id_token.verify_oauth2_token', side_effect=ValueError('bad token'))
    def test_invalid_credential_is_401(self, mock_verify, client):
        response = client.post('/auth/google', json={'credential': 'forged'})

        assert response.status_code == 401
        assert User.query.count() == 0

    def test_missing_credential_is_400(self, client):
        response = client.post('/auth/google', json={})
        assert response.status_code == 400

    @patch('auth.oauth.id_token.verify_oauth2_token', return_value=GOOGLE_IDINFO)
    def test_session_login_reaches_api(self, mock_verify, client):
        client.post('/auth/google', json={'credential': 'token'})

        me = client.get('/auth/me')
        assert me.status_code == 200
        assert me.get_json()['user']['email'] == 'learner@example.com'

        assert client.get('/api/problems/today').status_code == 200

        assert client.post('/auth/logout').status_code == 200
        assert client.get('/auth/me').status_code == 401


class TestHealth:
    """Tests for GET /health"""

    def test_health_check(self, client):
        response = client.get('/health')

        assert response.status_code == 200
        assert response.get_json()['database'] == 'connected'
