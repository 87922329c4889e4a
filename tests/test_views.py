from datetime import timedelta

from arena.core.config import settings
from arena.grading.awards import Valence
from arena.models.evaluation import EvaluationStatus
from arena.repositories.contest import ContestRepository
from arena.repositories.evaluation import EvaluationRepository
from arena.repositories.file import FileRepository
from arena.repositories.submission import SubmissionRepository
from arena.schemas import ContestStatus
from arena.services.contest_service import contest_status
from arena.services.view_service import ViewService, poll_interval_ms
from arena.utils.datetime import utc_now
from factories import full_run


async def graded_submission(db, seeded, events, status=EvaluationStatus.SUCCESS, user="alice"):
    """이벤트가 기록된 채점이 있는 제출 생성 (status=None 이면 채점 없음)"""
    content = await FileRepository().get_or_create(db, b"int main() {}", "text/x-c")
    submission = await SubmissionRepository().create(
        db,
        contest_id=seeded["contest"].contest_id,
        problem_id=seeded["problem"].problem_id,
        user_id=seeded[user].user_id,
        files=[("solution", "solution.cpp", content.content_id)],
    )
    if status is None:
        return submission

    repo = EvaluationRepository()
    evaluation = await repo.create(db, submission.submission_id)
    for data in events:
        await repo.append_event(db, evaluation.evaluation_id, data)
    if status != EvaluationStatus.PENDING:
        await repo.mark_finished(db, evaluation.evaluation_id, status)
    return submission


def test_contest_status_boundaries(seeded):
    contest = seeded["contest"]

    assert contest_status(contest) == ContestStatus.RUNNING
    assert contest_status(contest, contest.start_time - timedelta(seconds=1)) == ContestStatus.NOT_STARTED
    assert contest_status(contest, contest.end_time) == ContestStatus.ENDED


def test_poll_interval():
    assert poll_interval_ms(0) == settings.POLL_INTERVAL_IDLE_MS
    assert poll_interval_ms(2) == settings.POLL_INTERVAL_PENDING_MS


async def test_main_view_anonymous(db, seeded):
    view = await ViewService().main_view(db, seeded["contest"], None)

    assert view.user is None
    assert view.title == "Demo Contest"
    assert view.pending_submissions == []
    assert view.poll_interval_ms == settings.POLL_INTERVAL_IDLE_MS
    problem_view = view.contest_view.problem_set.problems[0]
    assert problem_view.tackling is None
    assert problem_view.total_score is None
    assert [a.grade for a in problem_view.awards] == [None, None, None]
    assert [f.path for f in view.contest_view.files] == ["rules.txt"]


async def test_main_view_without_contest(db):
    view = await ViewService().main_view(db, None, None)

    assert view.title == settings.DEFAULT_TITLE
    assert view.contest_view is None


async def test_main_view_pending_submissions(db, seeded):
    pending = await graded_submission(db, seeded, [], status=EvaluationStatus.PENDING)
    not_evaluated = await graded_submission(db, seeded, [], status=None)
    await graded_submission(db, seeded, full_run())

    view = await ViewService().main_view(db, seeded["contest"], seeded["alice"])

    assert view.user.username == "alice"
    assert sorted(p.submission_id for p in view.pending_submissions) == sorted(
        [pending.submission_id, not_evaluated.submission_id]
    )
    assert all(p.problem == "sum" for p in view.pending_submissions)
    assert view.poll_interval_ms == settings.POLL_INTERVAL_PENDING_MS


async def test_problem_tackling_best_results(db, seeded):
    first = await graded_submission(db, seeded, full_run(scores=(40.0, 0.0, 0.0), normalized=(1.0, 0.0, 0.0)))
    second = await graded_submission(db, seeded, full_run(scores=(10.0, 30.0, 1.0), normalized=(0.25, 0.5, 1.0)))

    view = await ViewService().problem_view(db, seeded["contest"], seeded["problem"], seeded["alice"])
    tackling = view.tackling

    assert [s.submission_id for s in tackling.submissions] == [second.submission_id, first.submission_id]
    assert tackling.best_awards[0].score == 40.0
    assert tackling.best_awards[0].submission_id == first.submission_id
    assert tackling.best_awards[1].score == 30.0
    assert tackling.best_awards[2].badge is True
    assert tackling.best_awards[2].submission_id == second.submission_id
    assert tackling.total_score.score == 70.0
    assert tackling.total_score.valence == Valence.PARTIAL
    assert tackling.can_submit

    assert view.total_score.score == 70.0
    assert view.total_score_range.max == 100
    assert [a.grade.valence for a in view.awards] == [Valence.SUCCESS, Valence.PARTIAL, Valence.SUCCESS]
    assert [c.title for c in view.submission_list_columns] == ["Subtask 1", "Subtask 2", "Bonus", "Total"]
    assert [f.path for f in view.files] == ["statement.md"]

    row = tackling.submissions[0].summary
    assert [f.score for f in row.fields if f.type == "score"] == [10.0, 30.0, 40.0]


async def test_latest_evaluation_is_official(db, seeded):
    submission = await graded_submission(db, seeded, full_run(scores=(40.0, 60.0, 0.0), normalized=(1.0, 1.0, 0.0)))
    await EvaluationRepository().create(db, submission.submission_id)

    view = await ViewService().problem_view(db, seeded["contest"], seeded["problem"], seeded["alice"])
    summary = view.tackling.submissions[0]

    assert summary.pending
    assert summary.evaluation_status == "PENDING"
    assert summary.summary.fields[-1].score is None
    assert view.tackling.total_score.score is None


async def test_tackling_without_submissions(db, seeded):
    view = await ViewService().problem_view(db, seeded["contest"], seeded["problem"], seeded["alice"])

    assert view.tackling.submissions == []
    assert view.tackling.total_score.score is None
    assert view.tackling.total_score.range.max == 100


async def test_non_participant_cannot_submit(db, seeded):
    view = await ViewService().problem_view(db, seeded["contest"], seeded["problem"], seeded["bob"])

    assert not view.tackling.can_submit


async def test_ended_contest_cannot_submit(db, seeded):
    now = utc_now()
    view = await ViewService().problem_view(
        db, seeded["contest"], seeded["problem"], seeded["alice"], now=now + timedelta(hours=2)
    )

    assert not view.tackling.can_submit


async def test_problem_set_hidden_before_start(db, seeded):
    contest = await ContestRepository().create(
        db, name="future", title="Future", start_time=utc_now() + timedelta(days=1)
    )
    await db.commit()

    view = await ViewService().contest_view(db, contest, seeded["alice"])

    assert view.contest.status == ContestStatus.NOT_STARTED
    assert view.problem_set is None


async def test_problem_set_total(db, seeded):
    await graded_submission(db, seeded, full_run(scores=(40.0, 30.0, 0.0), normalized=(1.0, 0.5, 0.0)))

    view = await ViewService().contest_view(db, seeded["contest"], seeded["alice"])

    assert view.contest.status == ContestStatus.RUNNING
    assert view.problem_set.total_score_range.max == 100
    assert view.problem_set.total_score.score == 70.0
