"""
Integration tests for problem routes.

Tests the complete revisit flow over HTTP including:
- GET /api/problems/today with summary
- POST /api/problems/<id>/revisit (201, then 409 the same day)
- POST /api/problems/<id>/archive
- Problem CRUD, detail and weights endpoints
- Authentication and owner scoping
"""

import sys
import os
import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import create_app
from models import db
from models.user import User
from models.problem import Problem

# A Wednesday
START = datetime(2026, 10, 14, 9, 0, tzinfo=timezone.utc)


@pytest.fixture(scope='function')
def clock():
    """Mutable clock injected into the app"""
    return {'now': START}


@pytest.fixture(scope='function')
def client(clock):
    """Create a test client with fresh database for each test"""
    app = create_app('testing')
    app.config['SQLALCHEMY_DATABASE_URI'] = 'sqlite:///:memory:'
    app.config['TESTING'] = True
    app.config['CLOCK'] = lambda: clock['now']

    with app.app_context():
        db.create_all()

        with app.test_client() as client:
            yield client

        db.session.remove()
        db.drop_all()


@pytest.fixture
def authenticated_user(client):
    """Create a test user and authenticate every request as them"""
    user = User(
        google_id='routes_user',
        email='routes@example.com',
        name='Routes User',
        daily_problems=3
    )
    db.session.add(user)
    db.session.commit()

    with patch('flask_login.utils._get_user', return_value=user):
        yield user


def add_problem(client, title, **extra):
    body = {'title': title, 'link': f'https://leetcode.com/problems/{title.lower().replace(" ", "-")}/'}
    body.update(extra)
    response = client.post('/api/problems', json=body)
    assert response.status_code == 201
    return response.get_json()


class TestAuthentication:
    """Unauthenticated requests are rejected"""

    def test_today_requires_login(self, client):
        response = client.get('/api/problems/today')

        assert response.status_code == 401
        assert response.get_json()['error'] == 'unauthorized'

    def test_revisit_requires_login(self, client):
        response = client.post('/api/problems/abc/revisit')
        assert response.status_code == 401


class TestExampleScenarios:
    """The add -> revisit -> repeat -> rank -> retire walk-through"""

    def test_new_problem_is_todays_focus(self, client, authenticated_user):
        created = add_problem(client, 'Two Sum')

        response = client.get('/api/problems/today')
        data = response.get_json()

        assert response.status_code == 200
        assert data['date'] == '2026-10-14'
        assert data['rest_day'] is False
        assert len(data['problems']) == 1
        item = data['problems'][0]
        assert item['problem']['id'] == created['id']
        assert item['revisited_today'] is False
        assert item['weight']['is_eligible'] is True
        assert data['summary'] == {'total_focus': 1, 'completed': 0, 'remaining': 1}

    def test_revisit_then_focus_shows_completed(self, client, authenticated_user, clock):
        created = add_problem(client, 'Two Sum')

        response = client.post(f"/api/problems/{created['id']}/revisit", json={'notes': 'hash map'})
        assert response.status_code == 201
        body = response.get_json()
        assert body['status'] == 'revisited'
        assert body['problem']['times_revisited'] == 1
        assert body['revisit']['notes'] == 'hash map'

        clock['now'] = START + timedelta(hours=2)
        data = client.get('/api/problems/today').get_json()

        assert [item['problem']['id'] for item in data['problems']] == [created['id']]
        assert data['problems'][0]['revisited_today'] is True
        assert data['summary'] == {'total_focus': 1, 'completed': 1, 'remaining': 0}

    def test_repeat_revisit_same_day_conflicts(self, client, authenticated_user):
        created = add_problem(client, 'Two Sum')
        client.post(f"/api/problems/{created['id']}/revisit")

        response = client.post(f"/api/problems/{created['id']}/revisit")

        assert response.status_code == 409
        assert response.get_json()['error'] == 'already_revisited_today'
        detail = client.get(f"/api/problems/{created['id']}").get_json()
        assert detail['times_revisited'] == 1
        assert len(detail['revisit_history']) == 1

    def test_top_three_then_retire_promotes_fourth(self, client, authenticated_user, clock):
        ages = {'Forty': 40, 'Twenty': 20, 'Ten': 10, 'Five': 5, 'Two': 2}
        ids = {}
        for title, days in ages.items():
            clock['now'] = START - timedelta(days=days)
            ids[title] = add_problem(client, title)['id']
        clock['now'] = START

        data = client.get('/api/problems/today').get_json()
        assert [item['problem']['title'] for item in data['problems']] == ['Forty', 'Twenty', 'Ten']

        response = client.post(f"/api/problems/{ids['Twenty']}/archive")
        assert response.status_code == 200
        assert response.get_json() == {'status': 'retired'}

        data = client.get('/api/problems/today').get_json()
        assert [item['problem']['title'] for item in data['problems']] == ['Forty', 'Ten', 'Five']

    def test_next_day_revisit_allowed_after_cooldown(self, client, authenticated_user, clock):
        created = add_problem(client, 'Two Sum')
        client.post(f"/api/problems/{created['id']}/revisit")

        clock['now'] = START + timedelta(days=1)
        data = client.get('/api/problems/today').get_json()
        assert data['problems'] == []

        clock['now'] = START + timedelta(days=2)
        data = client.get('/api/problems/today').get_json()
        assert [item['problem']['id'] for item in data['problems']] == [created['id']]


class TestRevisitErrors:
    """Tests for POST /api/problems/<id>/revisit failures"""

    def test_unknown_problem_is_404(self, client, authenticated_user):
        response = client.post('/api/problems/does-not-exist/revisit')
        assert response.status_code == 404

    def test_other_users_problem_is_404(self, client, authenticated_user):
        other = User(google_id='other', email='other@example.com', name='Other')
        db.session.add(other)
        db.session.flush()
        problem = Problem(user_id=other.id, title='Secret', link='https://example.com/secret')
        db.session.add(problem)
        db.session.commit()

        response = client.post(f'/api/problems/{problem.id}/revisit')

        assert response.status_code == 404
        assert response.get_json()['error'] == 'not_found'

    def test_retired_problem_is_404(self, client, authenticated_user):
        created = add_problem(client, 'Old')
        client.post(f"/api/problems/{created['id']}/archive")

        response = client.post(f"/api/problems/{created['id']}/revisit")
        assert response.status_code == 404

    def test_invalid_notes_is_400(self, client, authenticated_user):
        created = add_problem(client, 'Two Sum')

        response = client.post(f"/api/problems/{created['id']}/revisit", json={'notes': 42})
        assert response.status_code == 400


class TestProblemCrud:
    """Tests for list, create, detail, update, delete and weights"""

    def test_create_validation_error(self, client, authenticated_user):
        response = client.post('/api/problems', json={'title': ''})

        assert response.status_code == 400
        assert response.get_json()['error'] == 'validation_error'

    def test_list_by_status(self, client, authenticated_user):
        active = add_problem(client, 'Active')
        retired = add_problem(client, 'Retired')
        client.post(f"/api/problems/{retired['id']}/archive")

        assert [p['id'] for p in client.get('/api/problems?status=active').get_json()] == [active['id']]
        assert [p['id'] for p in client.get('/api/problems?status=retired').get_json()] == [retired['id']]
        assert client.get('/api/problems?status=bogus').status_code == 400

    def test_detail_includes_history_and_weight(self, client, authenticated_user):
        created = add_problem(client, 'Two Sum', difficulty='easy', tags=['arrays'])
        client.post(f"/api/problems/{created['id']}/revisit", json={'notes': 'first pass'})

        detail = client.get(f"/api/problems/{created['id']}").get_json()

        assert detail['difficulty'] == 'easy'
        assert detail['tags'] == ['arrays']
        assert detail['revisited_today'] is True
        assert detail['revisit_history'][0]['notes'] == 'first pass'
        assert detail['weight_info']['is_eligible'] is False
        assert detail['weight_info']['days_since_last_revisit'] == 0

    def test_update_problem(self, client, authenticated_user):
        created = add_problem(client, 'Two Sum')

        response = client.put(f"/api/problems/{created['id']}", json={'title': 'Two Sum II', 'source': 'NeetCode'})

        assert response.status_code == 200
        assert response.get_json()['problem']['title'] == 'Two Sum II'
        assert response.get_json()['problem']['source'] == 'NeetCode'

    def test_delete_problem(self, client, authenticated_user):
        created = add_problem(client, 'Two Sum')

        assert client.delete(f"/api/problems/{created['id']}").status_code == 200
        assert client.get(f"/api/problems/{created['id']}").status_code == 404

    def test_weights_sorted_descending(self, client, authenticated_user, clock):
        for days in (3, 30, 10):
            clock['now'] = START - timedelta(days=days)
            add_problem(client, f'Age {days}')
        clock['now'] = START

        data = client.get('/api/problems/weights').get_json()

        assert [row['problem']['title'] for row in data] == ['Age 30', 'Age 10', 'Age 3']
        assert data[0]['weight']['priority'] == 'high'

    def test_single_weight(self, client, authenticated_user):
        created = add_problem(client, 'Two Sum')

        data = client.get(f"/api/problems/{created['id']}/weight").get_json()

        assert data['problem_id'] == created['id']
        assert data['days_since_last_revisit'] is None
