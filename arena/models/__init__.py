"""
데이터 모델 모듈

SQLModel(SQLAlchemy) ORM 모델들을 정의합니다.
데이터베이스 테이블 구조를 정의합니다.
"""
from arena.models.user import User, UserPrivilege
from arena.models.file import FileContent
from arena.models.problem import Problem, ProblemFile
from arena.models.contest import Contest, ContestFile, ContestProblem, Participation
from arena.models.submission import Submission, SubmissionFile
from arena.models.evaluation import Evaluation, EvaluationEvent, EvaluationStatus

__all__ = [
    "User",
    "UserPrivilege",
    "FileContent",
    "Problem",
    "ProblemFile",
    "Contest",
    "ContestFile",
    "ContestProblem",
    "Participation",
    "Submission",
    "SubmissionFile",
    "Evaluation",
    "EvaluationEvent",
    "EvaluationStatus",
]
