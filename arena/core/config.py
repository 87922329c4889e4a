# arena/core/config.py
import json
import logging
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv
from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "turingarena.config.json"


class Settings(BaseSettings):

    model_config = SettingsConfigDict(extra="ignore")

    DEPLOY_PHASE: str = "local"
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent

    DATABASE_URL: str = "sqlite+aiosqlite:///./turingarena.db"
    HOST: str = "localhost"
    PORT: int = 3000

    # 채점기 (task-maker) 실행 명령
    TASK_MAKER_COMMAND: str = "task-maker-rust"

    # 클라이언트 폴링 주기 힌트 (채점 중인 제출이 있을 때 / 없을 때)
    POLL_INTERVAL_PENDING_MS: int = 1000
    POLL_INTERVAL_IDLE_MS: int = 10000

    DEFAULT_TITLE: str = "TuringArena"


def load_settings(path: Optional[Union[str, Path]] = None) -> Settings:
    """
    설정 로드
    - path 가 없으면 환경 변수 / .env 기반 기본 설정
    - path 가 있으면 JSON 설정 파일을 읽어 덮어씀 (읽기 실패 시 기본 설정으로 대체)
    """
    if path is None:
        return Settings()

    try:
        with open(path, "r", encoding="utf-8") as f:
            overrides = json.load(f)
        return Settings(**overrides)
    except (OSError, ValueError, ValidationError) as e:
        logger.warning(f"설정 파일을 읽을 수 없어 기본 설정을 사용합니다 ({path}): {e}")
        return Settings()


settings = Settings()
