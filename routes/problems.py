"""
Problem Routes - Endpoints for problems, today's focus and revisits.

This module provides API endpoints for:
- GET /api/problems - List problems (optionally by status)
- POST /api/problems - Add a problem
- GET /api/problems/today - Today's focus with completion summary
- GET /api/problems/weights - All active problems with scheduling weights
- GET /api/problems/<id> - Problem detail with revisit history and weight
- GET /api/problems/<id>/weight - Scheduling weight of one problem
- PUT /api/problems/<id> - Edit a problem
- DELETE /api/problems/<id> - Delete a problem and its history
- POST /api/problems/<id>/revisit - Mark a problem revisited today
- POST /api/problems/<id>/archive - Retire a problem
"""

import logging

from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user

from models import db
from services import problem_service
from services.clock import calendar_day, get_now, get_timezone
from services.daily_selector import select_today
from services.errors import ServiceError
from services.revisit_service import parse_revisit_request, record_revisit
from services.weight_engine import score

logger = logging.getLogger(__name__)

bp = Blueprint('problems', __name__, url_prefix='/api/problems')


def _isoformat(moment):
    if moment is None:
        return None
    return moment.isoformat() + 'Z' if moment.tzinfo is None else moment.isoformat()


def serialize_problem(problem):
    return {
        'id': problem.id,
        'title': problem.title,
        'link': problem.link,
        'difficulty': problem.difficulty,
        'source': problem.source,
        'topic': problem.topic,
        'notes': problem.notes,
        'tags': problem.tags or [],
        'status': problem.status,
        'date_added': _isoformat(problem.created_at),
        'times_revisited': problem.times_revisited,
        'last_revisited_at': _isoformat(problem.last_revisited_at)
    }


def serialize_revisit(entry):
    return {
        'id': entry.id,
        'problem_id': entry.problem_id,
        'revisited_at': _isoformat(entry.revisited_at),
        'notes': entry.notes
    }


def _error_response(error: ServiceError):
    return jsonify(error.to_dict()), error.status_code


def _server_error(message: str):
    db.session.rollback()
    logger.exception(message)
    return jsonify({
        'success': False,
        'error': 'internal_error',
        'message': 'An unexpected error occurred'
    }), 500


@bp.route('', methods=['GET'])
@login_required
def list_problems():
    """
    List the current user's problems, newest first.

    Query Parameters:
        status (str, optional): 'active' or 'retired'

    Returns:
        200: JSON array of problems
        400: Unknown status filter
    """
    try:
        status = request.args.get('status', None, type=str)
        problems = problem_service.list_problems(current_user.id, status=status)
        return jsonify([serialize_problem(p) for p in problems]), 200

    except ServiceError as e:
        return _error_response(e)
    except Exception:
        return _server_error(f'Error listing problems for user_id={current_user.id}')


@bp.route('', methods=['POST'])
@login_required
def create_problem():
    """
    Add a problem for the current user.

    Request Body:
        {
            "title": "Two Sum",
            "link": "https://leetcode.com/problems/two-sum/",
            "difficulty": "easy" (optional),
            "source": "LeetCode" (optional),
            "tags": ["arrays"] (optional)
        }

    Returns:
        201: The created problem
        400: Validation error
    """
    try:
        problem = problem_service.create_problem(current_user.id, request.get_json(silent=True), get_now())
        return jsonify(serialize_problem(problem)), 201

    except ServiceError as e:
        return _error_response(e)
    except Exception:
        return _server_error(f'Error creating problem for user_id={current_user.id}')


@bp.route('/today', methods=['GET'])
@login_required
def get_today():
    """
    Get today's focus.

    Returns:
        200: {
            "date": "2026-10-18",
            "rest_day": false,
            "problems": [
                {"problem": {...}, "weight": {...}, "revisited_today": false}
            ],
            "summary": {"total_focus": 3, "completed": 1, "remaining": 2}
        }
    """
    try:
        focus = select_today(current_user.id, get_now(), get_timezone())

        return jsonify({
            'date': focus.day.isoformat(),
            'rest_day': focus.rest_day,
            'problems': [{
                'problem': serialize_problem(item.problem),
                'weight': item.weight.to_dict(),
                'revisited_today': item.revisited_today
            } for item in focus.items],
            'summary': focus.summary()
        }), 200

    except ServiceError as e:
        return _error_response(e)
    except Exception:
        return _server_error(f"Error building today's focus for user_id={current_user.id}")


@bp.route('/weights', methods=['GET'])
@login_required
def get_all_weights():
    """
    Get every active problem with its scheduling weight, highest first.

    Returns:
        200: [{"problem": {...}, "weight": {...}}]
    """
    try:
        now = get_now()
        tz = get_timezone()
        results = [(problem, score(problem, now, tz))
                   for problem in problem_service.get_active_problems(current_user.id)]
        results.sort(key=lambda pair: (-pair[1].weight, pair[0].created_at, pair[0].id))

        return jsonify([{
            'problem': serialize_problem(problem),
            'weight': info.to_dict()
        } for problem, info in results]), 200

    except ServiceError as e:
        return _error_response(e)
    except Exception:
        return _server_error(f'Error computing weights for user_id={current_user.id}')


@bp.route('/<problem_id>', methods=['GET'])
@login_required
def get_problem(problem_id):
    """
    Get a problem with its revisit history (newest first), whether it was
    revisited today, and its current weight.

    Returns:
        200: Problem detail
        404: Problem not found
    """
    try:
        problem = problem_service.get_problem(problem_id, current_user.id)
        now = get_now()
        tz = get_timezone()

        detail = serialize_problem(problem)
        detail['revisited_today'] = problem_service.revisited_on(problem.id, calendar_day(now, tz))
        detail['revisit_history'] = [serialize_revisit(entry)
                                     for entry in problem_service.get_revisit_history(problem.id)]
        detail['weight_info'] = score(problem, now, tz).to_dict()

        return jsonify(detail), 200

    except ServiceError as e:
        return _error_response(e)
    except Exception:
        return _server_error(f'Error fetching problem_id={problem_id}')


@bp.route('/<problem_id>/weight', methods=['GET'])
@login_required
def get_problem_weight(problem_id):
    """Get the scheduling weight of a single problem"""
    try:
        problem = problem_service.get_problem(problem_id, current_user.id)
        return jsonify(score(problem, get_now(), get_timezone()).to_dict()), 200

    except ServiceError as e:
        return _error_response(e)
    except Exception:
        return _server_error(f'Error computing weight for problem_id={problem_id}')


@bp.route('/<problem_id>', methods=['PUT'])
@login_required
def update_problem(problem_id):
    """
    Edit title, link, difficulty, source, topic, notes or tags.

    Returns:
        200: {"status": "updated", "problem": {...}}
        400: Validation error
        404: Problem not found
    """
    try:
        problem = problem_service.update_problem(problem_id, current_user.id, request.get_json(silent=True))
        return jsonify({'status': 'updated', 'problem': serialize_problem(problem)}), 200

    except ServiceError as e:
        return _error_response(e)
    except Exception:
        return _server_error(f'Error updating problem_id={problem_id}')


@bp.route('/<problem_id>', methods=['DELETE'])
@login_required
def delete_problem(problem_id):
    """Permanently delete a problem and its revisit history"""
    try:
        problem_service.delete_problem(problem_id, current_user.id)
        return jsonify({'status': 'deleted'}), 200

    except ServiceError as e:
        return _error_response(e)
    except Exception:
        return _server_error(f'Error deleting problem_id={problem_id}')


@bp.route('/<problem_id>/revisit', methods=['POST'])
@login_required
def mark_revisited(problem_id):
    """
    Record that the problem was revisited today.

    Request Body (optional):
        {
            "notes": "Remembered the two-pointer trick"
        }

    Returns:
        201: {"status": "revisited", "revisit": {...}, "problem": {...}}
        404: Problem not found or retired
        409: {"error": "already_revisited_today", "message": "..."}
    """
    try:
        notes = parse_revisit_request(request.get_json(silent=True))
        result = record_revisit(
            problem_id,
            current_user.id,
            get_now(),
            notes=notes,
            tz=get_timezone()
        )

        return jsonify({
            'status': 'revisited',
            'revisit': serialize_revisit(result['entry']),
            'problem': serialize_problem(result['problem'])
        }), 201

    except ServiceError as e:
        return _error_response(e)
    except Exception:
        return _server_error(f'Error recording revisit for problem_id={problem_id}')


@bp.route('/<problem_id>/archive', methods=['POST'])
@login_required
def archive_problem(problem_id):
    """
    Retire a problem. It keeps its history but is never scheduled again.

    Returns:
        200: {"status": "retired"}
        404: Problem not found
    """
    try:
        problem_service.retire_problem(problem_id, current_user.id)
        return jsonify({'status': 'retired'}), 200

    except ServiceError as e:
        return _error_response(e)
    except Exception:
        return _server_error(f'Error retiring problem_id={problem_id}')
