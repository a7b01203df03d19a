import pytest
from rest_framework.exceptions import NotFound

from assessments.services import (
    AnswerService,
    ExamSessionService,
    get_exam_session_detail,
    get_exam_session_result,
)
from cores.exceptions import InvalidState
from exams.models import ExamQuestion, Question


@pytest.fixture
def session(ready_exam, taker):
    session, _ = ExamSessionService.start_session(user_id=taker.id, exam_id=ready_exam.exam.id)
    for question, options, pick in zip(ready_exam.questions, ready_exam.options, [2, 3, 1]):
        AnswerService.save_answer(
            user_id=taker.id, session_id=session.id, question_id=question.id,
            selected_option_id=options[pick - 1].id,
        )
    return session


@pytest.mark.django_db
class TestSessionDetail:

    def test_questions_in_configured_order(self, session, ready_exam, taker):
        # Swap the first and last positions
        ExamQuestion.objects.filter(question=ready_exam.questions[0]).update(order_no=10)

        detail = get_exam_session_detail(user_id=taker.id, exam_id=ready_exam.exam.id, session_id=session.id)

        ids = [q["question_id"] for q in detail["questions"]]
        assert ids == [ready_exam.questions[1].id, ready_exam.questions[2].id, ready_exam.questions[0].id]
        assert detail["status"] == "IN_PROGRESS"
        assert detail["time_limit"] == 1800

    def test_shows_selection_and_hides_correctness(self, session, ready_exam, taker):
        detail = get_exam_session_detail(user_id=taker.id, exam_id=ready_exam.exam.id, session_id=session.id)

        first = detail["questions"][0]
        assert first["selected_option_id"] == ready_exam.options[0][1].id
        assert first["answered_at"] is not None
        assert [o["id"] for o in first["options"]] == [o.id for o in ready_exam.options[0]]
        assert all("is_correct" not in o for o in first["options"])

    def test_inactive_questions_are_left_out(self, session, ready_exam, taker):
        Question.objects.filter(pk=ready_exam.questions[1].pk).update(status=Question.Status.INACTIVE)

        detail = get_exam_session_detail(user_id=taker.id, exam_id=ready_exam.exam.id, session_id=session.id)

        assert len(detail["questions"]) == 2

    def test_wrong_exam_or_owner(self, session, ready_exam, build_exam, make_user, grant, taker):
        other_exam = build_exam().exam
        with pytest.raises(NotFound):
            get_exam_session_detail(user_id=taker.id, exam_id=other_exam.id, session_id=session.id)

        stranger = make_user()
        grant(stranger, ready_exam.exam)
        with pytest.raises(NotFound):
            get_exam_session_detail(user_id=stranger.id, exam_id=ready_exam.exam.id, session_id=session.id)


@pytest.mark.django_db
class TestSessionResult:

    def test_not_available_before_submission(self, session, ready_exam, taker):
        with pytest.raises(InvalidState, match="must be submitted"):
            get_exam_session_result(user_id=taker.id, exam_id=ready_exam.exam.id, session_id=session.id)

    def test_after_submission(self, session, ready_exam, taker):
        ExamSessionService.submit_exam(user_id=taker.id, exam_id=ready_exam.exam.id)

        result = get_exam_session_result(user_id=taker.id, exam_id=ready_exam.exam.id, session_id=session.id)

        assert result["status"] == "SUBMITTED"
        assert (result["total_correct"], result["total_wrong"], result["total_unanswered"]) == (2, 1, 0)
        assert [q["is_correct"] for q in result["questions"]] == [True, False, True]
        assert [q["correct_option_id"] for q in result["questions"]] == [
            ready_exam.options[0][1].id,
            ready_exam.options[1][1].id,
            ready_exam.options[2][0].id,
        ]
        assert [q["order"] for q in result["questions"]] == [1, 2, 3]

    def test_uses_snapshot_not_live_bank(self, session, ready_exam, taker):
        ExamSessionService.submit_exam(user_id=taker.id, exam_id=ready_exam.exam.id)
        Question.objects.filter(pk=ready_exam.questions[0].pk).update(content_html="<p>Rewritten</p>")

        result = get_exam_session_result(user_id=taker.id, exam_id=ready_exam.exam.id, session_id=session.id)

        assert result["questions"][0]["content_html"] == "<p>Question 1</p>"
        assert result["questions"][0]["options"][1] == {
            "id": ready_exam.options[0][1].id,
            "content_html": "<p>Q1 option 2</p>",
            "is_correct": True,
        }

    def test_foreign_session(self, session, ready_exam, make_user):
        ExamSessionService.submit_exam(user_id=session.user_id, exam_id=ready_exam.exam.id)
        stranger = make_user()

        with pytest.raises(NotFound):
            get_exam_session_result(user_id=stranger.id, exam_id=ready_exam.exam.id, session_id=session.id)
