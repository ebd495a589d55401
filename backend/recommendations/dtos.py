"""
Data Transfer Objects (DTOs) for survey submissions.
"""
from dataclasses import dataclass
from typing import List


@dataclass
class SurveyAnswerDTO:
    question_id: str
    answer: str


@dataclass
class SurveySubmissionDTO:
    """
    A validated survey submission: the answers plus the preference cluster
    the client computed from them.
    """
    answers: List[SurveyAnswerDTO]
    cluster_id: int
