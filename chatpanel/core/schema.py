from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class QuizSubmission(BaseModel):
    quiz_id: Any = Field(default=None, alias="quizId")
    answer: Any = None

    @property
    def is_complete(self) -> bool:
        return bool(self.quiz_id) and bool(self.answer)


class SurveySubmission(BaseModel):
    q1: Any = None
    q2: Any = None
    q3: Any = None
    q4: Any = None
    q5: Any = None
    q6: Any = None
    q7: Any = None
    q8: Any = None

    @property
    def is_complete(self) -> bool:
        return bool(self.q1) and bool(self.q2) and bool(self.q3)


class SessionRequest(BaseModel):
    workflow: dict[str, str]
    chatkit_configuration: dict[str, Any] = Field(
        default_factory=lambda: {"file_upload": {"enabled": True}}
    )

    @classmethod
    def for_workflow(cls, workflow_id: str) -> "SessionRequest":
        return cls(workflow={"id": workflow_id})
