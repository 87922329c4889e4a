import asyncio
import os
import shlex
import sys
from pathlib import Path

import pytest

from arena.core.exceptions import GradingBackendError
from arena.grading.backend import TaskMakerBackend


def script_command(tmp_path, source):
    """source 를 실행하는 파이썬 스크립트를 채점기 명령으로 사용"""
    script = tmp_path / "fake_task_maker.py"
    script.write_text(source)
    return f"{shlex.quote(sys.executable)} {shlex.quote(str(script))}"


@pytest.fixture
def dirs(tmp_path):
    problem = tmp_path / "problem"
    submission = tmp_path / "submission"
    (submission / "solution").mkdir(parents=True)
    (submission / "solution" / "sol.cpp").write_text("int main() {}")
    problem.mkdir()
    return problem, submission


def test_build_args(dirs):
    problem, submission = dirs
    backend = TaskMakerBackend(command="task-maker-rust --cache none")

    args = backend.build_args(problem, submission)

    assert args[:3] == ["task-maker-rust", "--cache", "none"]
    assert args[3:8] == ["--ui", "json", "--no-statement", "--task-dir", str(problem)]
    assert args[8:] == [str(submission / "solution" / "sol.cpp")]


async def test_evaluate_streams_json_lines(tmp_path, dirs):
    command = script_command(tmp_path, "\n".join([
        "import json, sys",
        "print('[debug] starting')",
        "print(json.dumps({'Compilation': {'file': 'sol.cpp', 'status': 'Pending'}}))",
        "print()",
        "print(json.dumps({'IOISubtaskScore': {'subtask': 0, 'normalized_score': 1.0, 'score': 10.0}}))",
        "print('warning', file=sys.stderr)",
    ]))

    events = [event async for event in TaskMakerBackend(command=command).evaluate(*dirs)]

    assert [next(iter(e)) for e in events] == ["Compilation", "IOISubtaskScore"]
    assert events[1]["IOISubtaskScore"]["score"] == 10.0


async def test_evaluate_non_zero_exit(tmp_path, dirs):
    command = script_command(tmp_path, "import sys\nprint('task directory not found', file=sys.stderr)\nsys.exit(2)\n")

    with pytest.raises(GradingBackendError) as exc_info:
        async for _ in TaskMakerBackend(command=command).evaluate(*dirs):
            pass

    assert "exit code 2" in exc_info.value.message
    assert "task directory not found" in exc_info.value.message


async def test_evaluate_missing_command(tmp_path, dirs):
    backend = TaskMakerBackend(command=str(Path(tmp_path) / "no-such-task-maker"))

    with pytest.raises(GradingBackendError):
        async for _ in backend.evaluate(*dirs):
            pass


async def test_cancel_while_waiting_for_exit_kills_process(tmp_path, dirs):
    pid_file = tmp_path / "task_maker.pid"
    command = script_command(tmp_path, "\n".join([
        "import json, os, time",
        f"with open({str(pid_file)!r}, 'w') as f:",
        "    f.write(str(os.getpid()))",
        "print(json.dumps({'Compilation': {'file': 'sol.cpp', 'status': 'Pending'}}), flush=True)",
        "os.close(1)",
        "time.sleep(60)",
    ]))
    received = []

    async def consume():
        async for event in TaskMakerBackend(command=command).evaluate(*dirs):
            received.append(event)

    task = asyncio.create_task(consume())
    for _ in range(200):
        if received and pid_file.exists():
            break
        await asyncio.sleep(0.05)
    # stdout 이 닫힌 뒤 종료 대기 중인 상태에서 취소
    await asyncio.sleep(0.3)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    pid = int(pid_file.read_text())
    for _ in range(200):
        try:
            os.kill(pid, 0)
        except ProcessLookupError:
            break
        await asyncio.sleep(0.05)
    else:
        pytest.fail(f"task-maker process {pid} is still running")
