"""
채점기 실행

- GradingBackend: 채점기 인터페이스 (이벤트 dict 를 순서대로 내보내는 비동기 제너레이터)
- TaskMakerBackend: task-maker 를 하위 프로세스로 실행하고 JSON UI 출력을 한 줄씩 읽음
"""
from __future__ import annotations

import asyncio
import json
import logging
import shlex
from contextlib import suppress
from pathlib import Path
from typing import AsyncGenerator, List, Optional, Protocol

from arena.core.config import settings
from arena.core.exceptions import GradingBackendError

logger = logging.getLogger(__name__)


class GradingBackend(Protocol):
    def evaluate(self, problem_dir: Path, submission_dir: Path) -> AsyncGenerator[dict, None]: ...


class TaskMakerBackend:
    """
    task-maker 채점기

    problem_dir 에는 문제 패키지 파일이, submission_dir 에는 {field_id}/{file_name}
    구조로 제출 파일이 풀려 있어야 합니다.
    """

    def __init__(self, command: Optional[str] = None):
        self.command = shlex.split(command or settings.TASK_MAKER_COMMAND)

    def build_args(self, problem_dir: Path, submission_dir: Path) -> List[str]:
        solutions = sorted(str(p) for p in submission_dir.rglob("*") if p.is_file())
        return [
            *self.command,
            "--ui", "json",
            "--no-statement",
            "--task-dir", str(problem_dir),
            *solutions,
        ]

    async def evaluate(self, problem_dir: Path, submission_dir: Path) -> AsyncGenerator[dict, None]:
        args = self.build_args(problem_dir, submission_dir)
        logger.info(f"채점기 실행: {' '.join(args)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise GradingBackendError(f"채점기를 실행할 수 없습니다: {e}") from e

        # stderr 가 파이프를 가득 채워 멈추지 않도록 따로 읽음
        stderr_task = asyncio.create_task(process.stderr.read())

        try:
            async for line in process.stdout:
                line = line.strip()
                if not line:
                    continue
                try:
                    data = json.loads(line)
                except json.JSONDecodeError:
                    logger.debug(f"JSON 이 아닌 채점기 출력 무시: {line[:200]!r}")
                    continue
                yield data

            return_code = await process.wait()
            stderr = (await stderr_task).decode("utf-8", errors="replace").strip()
        finally:
            # 취소 / 중단 시점과 관계없이 남은 프로세스 정리
            if process.returncode is None:
                logger.warning(f"채점기 프로세스 종료 (pid={process.pid})")
                with suppress(ProcessLookupError):
                    process.kill()
            if not stderr_task.done():
                stderr_task.cancel()

        if return_code != 0:
            raise GradingBackendError(
                f"채점기가 비정상 종료되었습니다 (exit code {return_code}): {stderr[-2000:]}"
            )
