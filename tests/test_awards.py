import pytest

from arena.grading.aggregator import summarize
from arena.grading.awards import (
    AwardKind,
    BestBadgeAward,
    FulfillmentField,
    MaxScoreAward,
    ScoreField,
    ScoreRange,
    Valence,
    award_outcome,
    parse_awards,
    problem_score_range,
    score_valence,
)
from arena.grading.feedback import (
    FEEDBACK_COLUMNS,
    best_awards,
    best_grade_fields,
    feedback_table,
    submission_list_columns,
    summary_row,
    total_best_score,
)
from factories import AWARDS, compilation, done, evaluation, full_run, subtask_score, testcase_score


@pytest.fixture
def awards():
    return parse_awards(AWARDS)


def test_parse_awards_defaults(awards):
    assert [a.kind for a in awards] == [AwardKind.SCORE, AwardKind.SCORE, AwardKind.BADGE]
    assert awards[0].precision == 0
    assert awards[0].allow_partial is True
    assert awards[2].display_title == "Bonus"


def test_score_range_total():
    total = ScoreRange.total([
        ScoreRange(precision=0, max=40, allow_partial=False),
        ScoreRange(precision=2, max=60, allow_partial=True),
    ])

    assert total.max == 100
    assert total.precision == 2
    assert total.allow_partial is True


def test_score_range_total_of_nothing():
    total = ScoreRange.total([])

    assert total.max == 0
    assert total.precision == 0
    assert total.allow_partial is False


def test_problem_score_range_ignores_badges(awards):
    assert problem_score_range(awards).max == 100


@pytest.mark.parametrize(
    "score, score_range, valence",
    [
        (None, ScoreRange(max=10), None),
        (10, ScoreRange(max=10), Valence.SUCCESS),
        (12, ScoreRange(max=10), Valence.SUCCESS),
        (0, ScoreRange(max=10), Valence.FAILURE),
        (5, ScoreRange(max=10), Valence.PARTIAL),
        (5, ScoreRange(max=10, allow_partial=False), Valence.FAILURE),
        (0, ScoreRange(max=0), Valence.NOMINAL),
    ],
)
def test_score_valence(score, score_range, valence):
    assert score_valence(score, score_range) == valence


def test_score_field_rounds_to_precision():
    field = ScoreField.of(33.3333, ScoreRange(precision=1, max=100))

    assert field.score == 33.3
    assert field.valence == Valence.PARTIAL


def test_fulfillment_field():
    assert FulfillmentField.of(True).valence == Valence.SUCCESS
    assert FulfillmentField.of(False).valence == Valence.FAILURE
    assert FulfillmentField.of(None).valence is None


def test_award_outcome(awards):
    summary = summarize(full_run(scores=(40.0, 30.0, 7.0), normalized=(1.0, 0.5, 1.0)))

    assert award_outcome(awards[0], summary, 0) == 40.0
    assert award_outcome(awards[1], summary, 1) == 30.0
    assert award_outcome(awards[2], summary, 2) is True


def test_award_outcome_not_yet_scored(awards):
    summary = summarize([subtask_score(0, 40.0, 1.0)])

    assert award_outcome(awards[1], summary, 1) is None
    assert award_outcome(awards[2], summary, 2) is None


def test_submission_list_columns(awards):
    titles = [c.title for c in submission_list_columns(awards)]

    assert titles == ["Subtask 1", "Subtask 2", "Bonus", "Total"]


def test_summary_row(awards):
    row = summary_row(awards, summarize(full_run(scores=(40.0, 30.0, 0.0), normalized=(1.0, 0.5, 0.0))))

    first, second, bonus, total = row.fields
    assert first.score == 40.0 and first.valence == Valence.SUCCESS
    assert second.score == 30.0 and second.valence == Valence.PARTIAL
    assert bonus.fulfilled is False and bonus.valence == Valence.FAILURE
    assert total.score == 70.0
    assert total.range.max == 100


def test_summary_row_without_evaluation(awards):
    row = summary_row(awards, None)

    assert len(row.fields) == 4
    assert row.fields[0].score is None
    assert row.fields[2].fulfilled is None
    assert row.fields[3].score is None


def test_feedback_table_rows():
    table = feedback_table(summarize([
        compilation(done()),
        evaluation(0, 0, done(cpu_time=0.3, memory=512)),
        testcase_score(0, 0, 1.0, "Output is correct"),
        evaluation(0, 1, done(status="TimeLimitExceeded", cpu_time=1.0)),
        testcase_score(0, 1, 0.0, ""),
    ]))

    assert [c.title for c in table.columns] == list(FEEDBACK_COLUMNS)
    assert not table.compilation_failed
    first, second = table.rows
    assert (first.subtask, first.testcase, first.time, first.memory) == (0, 0, 0.3, 512)
    assert first.message == "Output is correct"
    assert first.valence == Valence.SUCCESS
    assert second.message == "Time limit exceeded"
    assert second.valence == Valence.FAILURE


def test_feedback_table_when_compilation_failed():
    table = feedback_table(summarize([
        compilation(done(status={"ReturnCode": 1})),
        evaluation(0, 0, "Skipped"),
    ]))

    assert table.compilation_failed
    assert table.compilation_message == "Exited with code 1"
    assert table.rows == []


def test_best_awards_picks_maximum_and_first_badge(awards):
    graded = [
        (1, summarize(full_run(scores=(40.0, 0.0, 0.0), normalized=(1.0, 0.0, 0.0)))),
        (2, summarize(full_run(scores=(20.0, 60.0, 5.0), normalized=(0.5, 1.0, 1.0)))),
        (3, summarize(full_run(scores=(40.0, 60.0, 5.0), normalized=(1.0, 1.0, 1.0)))),
    ]

    best = best_awards(awards, graded)

    assert best[0] == MaxScoreAward(award_name="subtask1", score=40.0, submission_id=1)
    assert best[1] == MaxScoreAward(award_name="subtask2", score=60.0, submission_id=2)
    assert best[2] == BestBadgeAward(award_name="bonus", badge=True, submission_id=2)
    assert total_best_score(best) == 100.0


def test_best_awards_without_graded_submissions(awards):
    best = best_awards(awards, [])

    assert all(b.submission_id is None for b in best)
    assert total_best_score(best) == 0
    fields = best_grade_fields(awards, best)
    assert fields[0].score is None
    assert fields[2].fulfilled is None


def test_best_badge_not_fulfilled(awards):
    graded = [(5, summarize(full_run(scores=(0.0, 0.0, 0.0), normalized=(0.0, 0.0, 0.5))))]

    best = best_awards(awards, graded)

    assert best[2] == BestBadgeAward(award_name="bonus", badge=False, submission_id=5)
    assert best_grade_fields(awards, best)[2].fulfilled is False
