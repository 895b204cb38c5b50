"""
Problem Pydantic Models

Request bodies for creating and editing problems and for recording a revisit.
Counters, status and timestamps are not part of any of these models: they are
written only by the revisit recorder and the lifecycle functions.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Literal, Optional

Difficulty = Literal['easy', 'medium', 'hard']


def _normalize_tags(tags: Optional[List[str]]) -> Optional[List[str]]:
    if tags is None:
        return None
    normalized = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in normalized:
            normalized.append(tag)
    return normalized


def _empty_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class ProblemCreate(BaseModel):
    """
    Body of POST /api/problems.

    Example:
    {
        "title": "Two Sum",
        "link": "https://leetcode.com/problems/two-sum/",
        "difficulty": "easy",
        "tags": ["arrays", "hashing"]
    }
    """
    model_config = ConfigDict(extra='ignore', str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=500, description="Problem title")
    link: str = Field(min_length=1, max_length=2000, description="URL of the problem statement")
    difficulty: Optional[Difficulty] = Field(default=None, description="easy, medium or hard")
    source: Optional[str] = Field(default=None, description="Where the problem comes from, e.g. LeetCode")
    topic: Optional[str] = None
    notes: Optional[str] = None
    tags: Optional[List[str]] = None

    @field_validator('source', 'topic', 'notes', mode='before')
    @classmethod
    def blank_is_missing(cls, value):
        return _empty_to_none(value)

    @field_validator('difficulty', mode='before')
    @classmethod
    def lowercase_difficulty(cls, value):
        value = _empty_to_none(value)
        return value.lower() if isinstance(value, str) else value

    @field_validator('tags')
    @classmethod
    def dedupe_tags(cls, tags):
        return _normalize_tags(tags)


class ProblemUpdate(BaseModel):
    """Body of PUT /api/problems/<id>; only provided fields are changed"""
    model_config = ConfigDict(extra='ignore', str_strip_whitespace=True)

    title: Optional[str] = Field(default=None, min_length=1, max_length=500)
    link: Optional[str] = Field(default=None, min_length=1, max_length=2000)
    difficulty: Optional[Difficulty] = None
    source: Optional[str] = None
    topic: Optional[str] = None
    notes: Optional[str] = None
    tags: Optional[List[str]] = None

    @field_validator('difficulty', mode='before')
    @classmethod
    def lowercase_difficulty(cls, value):
        value = _empty_to_none(value)
        return value.lower() if isinstance(value, str) else value

    @field_validator('tags')
    @classmethod
    def dedupe_tags(cls, tags):
        return _normalize_tags(tags)


class RevisitRequest(BaseModel):
    """Optional body of POST /api/problems/<id>/revisit"""
    model_config = ConfigDict(extra='ignore', str_strip_whitespace=True)

    notes: Optional[str] = Field(default=None, max_length=5000)

    @field_validator('notes', mode='before')
    @classmethod
    def blank_is_missing(cls, value):
        return _empty_to_none(value)
