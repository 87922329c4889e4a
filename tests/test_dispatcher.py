import asyncio

from arena.core.exceptions import GradingBackendError
from arena.models.evaluation import EvaluationStatus
from arena.repositories.evaluation import EvaluationRepository
from arena.repositories.file import FileRepository
from arena.repositories.submission import SubmissionRepository
from factories import full_run, subtask_score


async def make_submission(db, seeded):
    content = await FileRepository().get_or_create(db, b"int main() {}", "text/x-c")
    return await SubmissionRepository().create(
        db,
        contest_id=seeded["contest"].contest_id,
        problem_id=seeded["problem"].problem_id,
        user_id=seeded["alice"].user_id,
        files=[("solution", "solution.cpp", content.content_id)],
    )


async def test_submit_records_events_and_succeeds(db, seeded, backend, dispatcher, session_factory):
    backend.events = full_run()
    submission = await make_submission(db, seeded)

    evaluation = await dispatcher.submit(db, submission.submission_id)
    assert evaluation.status == EvaluationStatus.PENDING

    await dispatcher.join()

    async with session_factory() as session:
        repo = EvaluationRepository()
        finished = await repo.get_by_id(session, evaluation.evaluation_id)
        events = await repo.list_events(session, evaluation.evaluation_id)

    assert finished.status == EvaluationStatus.SUCCESS
    assert finished.completed_at is not None
    assert [e.data for e in events] == full_run()
    assert dispatcher.running == 0


async def test_backend_receives_extracted_files(db, seeded, backend, dispatcher):
    submission = await make_submission(db, seeded)

    await dispatcher.submit(db, submission.submission_id)
    await dispatcher.join()

    call = backend.calls[0]
    assert call["problem"] == ["statement.md"]
    assert call["submission"] == {"solution/solution.cpp": b"int main() {}"}


async def test_backend_failure_marks_error(db, seeded, backend, dispatcher, session_factory):
    backend.events = [subtask_score(0, 40.0, 1.0)]
    backend.error = GradingBackendError("task-maker exited with code 2")
    submission = await make_submission(db, seeded)

    evaluation = await dispatcher.submit(db, submission.submission_id)
    await dispatcher.join()

    async with session_factory() as session:
        repo = EvaluationRepository()
        finished = await repo.get_by_id(session, evaluation.evaluation_id)
        events = await repo.list_events(session, evaluation.evaluation_id)

    assert finished.status == EvaluationStatus.ERROR
    assert finished.error == "task-maker exited with code 2"
    assert len(events) == 1


async def test_invalid_backend_events_are_skipped(db, seeded, backend, dispatcher, session_factory):
    backend.events = [{"IOISubtaskScore": {"subtask": 0}}, subtask_score(0, 40.0, 1.0)]
    submission = await make_submission(db, seeded)

    evaluation = await dispatcher.submit(db, submission.submission_id)
    await dispatcher.join()

    async with session_factory() as session:
        events = await EvaluationRepository().list_events(session, evaluation.evaluation_id)

    assert [e.data for e in events] == [subtask_score(0, 40.0, 1.0)]


async def test_reevaluate_creates_new_official_evaluation(db, seeded, dispatcher, session_factory):
    submission = await make_submission(db, seeded)

    first = await dispatcher.submit(db, submission.submission_id)
    await dispatcher.join()
    second = await dispatcher.reevaluate(db, submission.submission_id)
    await dispatcher.join()

    async with session_factory() as session:
        repo = EvaluationRepository()
        official = await repo.get_official(session, submission.submission_id)
        evaluations = await repo.list_by_submission(session, submission.submission_id)

    assert official.evaluation_id == second.evaluation_id
    assert [e.evaluation_id for e in evaluations] == [first.evaluation_id, second.evaluation_id]


async def test_shutdown_cancels_running_evaluations(db, seeded, session_factory):
    from arena.grading.dispatcher import EvaluationDispatcher

    started = asyncio.Event()

    class BlockingBackend:
        async def evaluate(self, problem_dir, submission_dir):
            started.set()
            await asyncio.sleep(3600)
            yield {}

    dispatcher = EvaluationDispatcher(backend=BlockingBackend(), session_factory=session_factory)
    submission = await make_submission(db, seeded)

    await dispatcher.submit(db, submission.submission_id)
    await asyncio.wait_for(started.wait(), timeout=5)
    assert dispatcher.running == 1

    await dispatcher.shutdown()

    assert dispatcher.running == 0


async def test_external_close_stops_recording(db, seeded, session_factory):
    from arena.grading.dispatcher import EvaluationDispatcher

    first_stored = asyncio.Event()
    release = asyncio.Event()

    class GatedBackend:
        async def evaluate(self, problem_dir, submission_dir):
            yield subtask_score(0, 40.0, 1.0)
            # 첫 이벤트가 저장된 뒤에 다음 이벤트를 요청함
            first_stored.set()
            await release.wait()
            yield subtask_score(1, 30.0, 0.5)

    dispatcher = EvaluationDispatcher(backend=GatedBackend(), session_factory=session_factory)
    submission = await make_submission(db, seeded)
    evaluation = await dispatcher.submit(db, submission.submission_id)

    await asyncio.wait_for(first_stored.wait(), timeout=5)
    async with session_factory() as session:
        await EvaluationRepository().mark_finished(
            session, evaluation.evaluation_id, EvaluationStatus.ERROR, error="external fail"
        )
    release.set()
    await dispatcher.join()

    async with session_factory() as session:
        repo = EvaluationRepository()
        finished = await repo.get_by_id(session, evaluation.evaluation_id)
        events = await repo.list_events(session, evaluation.evaluation_id)

    assert finished.status == EvaluationStatus.ERROR
    assert finished.error == "external fail"
    assert [e.data for e in events] == [subtask_score(0, 40.0, 1.0)]
