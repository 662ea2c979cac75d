import pytest

from app.interview.models import InterviewPhase, InterviewRole, Recommendation
from app.interview.scoring.scoring_report_service import ScoringReportService
from tests.factories import ai_turn, candidate_turn, evaluation, make_state


@pytest.fixture
def service():
    return ScoringReportService()


def _interview_with_two_answers():
    return make_state(
        role=InterviewRole.TECHNICAL,
        phase=InterviewPhase.TECHNICAL,
        turns=[
            ai_turn("Tell me about yourself.", "intro-1"),
            candidate_turn("I build payment systems.",
                           evaluation(8, competency_ids=["communication"], feedback="Clear and concrete.")),
            ai_turn("Describe a hard bug.", "tech-1"),
            candidate_turn("It was hard.",
                           evaluation(4, competency_ids=["communication", "technical_depth"],
                                      red_flags=["No specific example given"], feedback="Lacked detail.")),
        ],
        ended_at="2026-01-05T10:45:00+00:00",
    )


def test_build_report_aggregates_scores(service):
    report = service.build_report(_interview_with_two_answers())

    assert report.overall_score == 12
    assert report.max_score == 20
    assert report.recommendation == Recommendation.HIRE
    assert report.ended_at == "2026-01-05T10:45:00+00:00"
    assert report.summary == (
        "The candidate answered 2 questions with an overall score of 12/20 (60%). Recommendation: hire."
    )


def test_competencies_roll_up(service):
    report = service.build_report(_interview_with_two_answers())
    by_id = {c.competency_id: c for c in report.competencies}

    assert list(by_id) == ["communication", "technical_depth"]
    assert by_id["communication"].score == pytest.approx(12)
    assert by_id["communication"].max_score == 20
    assert by_id["communication"].evidence == ["Clear and concrete.", "Lacked detail."]
    assert by_id["technical_depth"].name == "technical depth"
    assert by_id["technical_depth"].max_score == 10


def test_strengths_improvements_and_red_flags(service):
    report = service.build_report(_interview_with_two_answers())

    assert report.strengths == ["Clear and concrete."]
    assert report.improvements == ["Lacked detail."]
    assert report.red_flags == ["No specific example given"]


def test_question_answer_summary_pairs_answers_with_questions(service):
    report = service.build_report(_interview_with_two_answers())

    assert report.question_answer_summary == [
        {"question": "Tell me about yourself.", "answer": "I build payment systems.", "score": pytest.approx(8)},
        {"question": "Describe a hard bug.", "answer": "It was hard.", "score": pytest.approx(4)},
    ]


def test_answer_without_preceding_question_uses_placeholder(service):
    state = make_state(turns=[candidate_turn("Hi", evaluation(5))])

    report = service.build_report(state)

    assert report.question_answer_summary[0]["question"] == "Question"


def test_evidence_and_lists_are_capped(service):
    turns = []
    for i in range(7):
        turns.append(ai_turn(f"Q{i}"))
        turns.append(candidate_turn(f"A{i}", evaluation(9, feedback=f"Strong {i}")))
    report = service.build_report(make_state(turns=turns))

    assert len(report.strengths) == 5
    assert len(report.competencies[0].evidence) == 3


def test_missing_feedback_uses_default_labels(service):
    state = make_state(turns=[
        ai_turn("Q1"), candidate_turn("A1", evaluation(9)),
        ai_turn("Q2"), candidate_turn("A2", evaluation(1)),
    ])

    report = service.build_report(state)

    assert report.strengths == ["Strong answer"]
    assert report.improvements == ["Needs improvement"]


def test_duplicate_red_flags_are_counted_once(service):
    flags = ["Vague", "Vague", "Contradiction"]
    state = make_state(turns=[
        ai_turn("Q1"), candidate_turn("A1", evaluation(9, red_flags=flags[:2])),
        ai_turn("Q2"), candidate_turn("A2", evaluation(9, red_flags=flags[2:])),
    ])

    report = service.build_report(state)

    assert report.red_flags == ["Vague", "Contradiction"]
    assert report.recommendation == Recommendation.STRONG_HIRE


@pytest.mark.parametrize("overall, max_score, flags, expected", [
    (9, 10, ["a", "b", "c"], Recommendation.NO_HIRE),
    (8, 10, [], Recommendation.STRONG_HIRE),
    (6, 10, ["a", "b"], Recommendation.HIRE),
    (4, 10, [], Recommendation.BORDERLINE),
    (3.9, 10, [], Recommendation.NO_HIRE),
    (0, 0, [], Recommendation.NO_HIRE),
])
def test_recommend(overall, max_score, flags, expected):
    assert ScoringReportService.recommend(overall, max_score, flags) == expected


def test_empty_interview_report(service):
    report = service.build_report(make_state())

    assert report.overall_score == 0
    assert report.max_score == 0
    assert report.recommendation == Recommendation.NO_HIRE
    assert report.summary == (
        "The candidate answered 0 questions with an overall score of 0/0 (0%). Recommendation: no_hire."
    )
    assert report.ended_at
