"""
도메인 예외 정의

서비스 계층에서 발생시키고, main.py 의 예외 핸들러가 HTTP 응답으로 변환합니다.
"""
from fastapi import status


class ArenaError(Exception):
    """모든 도메인 예외의 기본 클래스"""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ArenaError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(ArenaError):
    status_code = status.HTTP_409_CONFLICT


class SubmissionRejectedError(ArenaError):
    """제출 조건(대회 진행 중, 참가 여부, 필드 구성)을 만족하지 않음"""

    status_code = 422  # Unprocessable Entity


class EvaluationClosedError(ArenaError):
    """이미 끝난 채점에 이벤트를 추가하려고 함"""

    status_code = status.HTTP_409_CONFLICT


class InvalidEventError(ArenaError):
    """채점기 이벤트 형식이 올바르지 않음"""

    status_code = status.HTTP_400_BAD_REQUEST


class GradingBackendError(ArenaError):
    """채점기 실행 실패"""

    status_code = status.HTTP_502_BAD_GATEWAY


class InvalidContestError(ArenaError):
    """가져오려는 대회 디렉토리 / 설정 파일이 올바르지 않음"""

    status_code = status.HTTP_400_BAD_REQUEST
