"""
Settings Pydantic Models

Validated user preferences. daily_problems must be 1-5 and is checked here,
at write time, so the daily selector can trust whatever is stored.
"""

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt
from typing import Optional


class SettingsUpdate(BaseModel):
    """
    Body of PUT /api/settings; omitted fields keep their stored value.

    Example:
    {
        "daily_problems": 3,
        "skip_weekends": true,
        "email_time": "09:00"
    }
    """
    model_config = ConfigDict(extra='ignore')

    daily_problems: Optional[StrictInt] = Field(
        default=None, ge=1, le=5,
        description="Target size of the daily focus set (1-5)"
    )
    skip_weekends: Optional[StrictBool] = Field(
        default=None,
        description="Suppress new nominations on Saturday and Sunday"
    )
    email_time: Optional[str] = Field(
        default=None,
        pattern=r'^([01]\d|2[0-3]):[0-5]\d$',
        description="Reminder time as HH:MM (24h)"
    )
    ai_encouragement: Optional[StrictBool] = None
