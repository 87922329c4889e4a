"""
Main.py works as a main function for the application
Api app starts from here
"""

from contextlib import asynccontextmanager
from logging import getLogger
from logging.config import dictConfig

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from arena.core.config import settings
from arena.core.exceptions import ArenaError
from arena.database import init_db
from arena.grading.dispatcher import get_evaluation_dispatcher
from arena.routers import (contest_router, evaluation_router, file_router,
                           main_view_router, submission_router, user_router)
from arena.utils.logger import sample_logger


# ----------------------------------------------------------------------
# Lifespan: 앱 시작 시 DB 초기화, 종료 시 채점 태스크 정리
# ----------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    # DB 초기화
    await init_db()
    logger.info(f"TuringArena 서버 시작 (phase={settings.DEPLOY_PHASE})")

    yield

    # 앱 종료 시 실행 중인 채점 취소
    logger.info("채점 태스크 종료 중...")
    await get_evaluation_dispatcher().shutdown()
    logger.info("채점 태스크 정리 완료")


logger = getLogger(__name__)

# ----------------------------------------------------------------------
# FastAPI 애플리케이션 생성
# ----------------------------------------------------------------------
app = FastAPI(
    title="TuringArena",
    description="FastAPI 기반 프로그래밍 대회 서버 API",
    version="1.0.0",
    docs_url=(
        "/turingarena/api/docs"
        if settings.DEPLOY_PHASE in ("dev", "local")
        else None
    ),
    lifespan=lifespan,
)

# ----------------------------------------------------------------------
# 로거 설정
# ----------------------------------------------------------------------
dictConfig(sample_logger)

# ----------------------------------------------------------------------
# 예외 핸들러
# ----------------------------------------------------------------------


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    error_messages = []

    for error in errors:
        field = error.get("loc", [])[-1] if error.get("loc") else "unknown"
        msg = error.get("msg", "")

        if "missing" in msg.lower():
            error_messages.append(f"{field}는 필수 입력 항목입니다.")
        else:
            error_messages.append(f"{field}: {msg}")

    # 로그 출력
    for message in error_messages:
        logger.warning(message)

    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_errors(errors)}
    )


@app.exception_handler(ArenaError)
async def arena_exception_handler(request: Request, exc: ArenaError):
    logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "detail": type(exc).__name__},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"처리되지 않은 예외: {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "detail": None},
    )


def jsonable_errors(errors):
    """검증 오류의 ctx 에 들어 있는 예외 객체를 문자열로 변환"""
    result = []
    for error in errors:
        error = dict(error)
        if "ctx" in error:
            error["ctx"] = {k: str(v) for k, v in error["ctx"].items()}
        result.append(error)
    return result


# ----------------------------------------------------------------------
# CORS 설정
# ----------------------------------------------------------------------
origins = [
    "http://localhost:4200",
    "http://127.0.0.1:4200",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ----------------------------------------------------------------------
# 라우터 등록
# ----------------------------------------------------------------------
app.include_router(main_view_router)  # 메인 뷰 / 서버 시각
app.include_router(contest_router)  # 대회 / 문제 뷰 / 제출
app.include_router(submission_router)  # 제출 상세 / 재채점
app.include_router(evaluation_router)  # 외부 채점기 이벤트
app.include_router(user_router)  # 사용자 관리
app.include_router(file_router)  # 파일 내용


def run():
    """uvicorn 으로 서버 실행 (turingarena-server 명령)"""
    import uvicorn

    uvicorn.run("arena.main:app", host=settings.HOST, port=settings.PORT, log_config=sample_logger)


if __name__ == "__main__":
    run()
