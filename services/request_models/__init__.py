"""
Request Pydantic Models

Validated shapes of incoming JSON bodies:
- Problem models (ProblemCreate, ProblemUpdate)
- Revisit models (RevisitRequest)
- Settings models (SettingsUpdate)
"""

from .problem_models import ProblemCreate, ProblemUpdate, RevisitRequest
from .settings_models import SettingsUpdate

__all__ = [
    'ProblemCreate',
    'ProblemUpdate',
    'RevisitRequest',
    'SettingsUpdate'
]
