import pytest

from cores.models import AuditLog
from exams.models import Exam, ExamAccess, ExamQuestion, Question


@pytest.mark.django_db
class TestExamAuthoringApi:

    def test_editor_creates_draft(self, api_client, editor):
        api_client.force_authenticate(user=editor)

        response = api_client.post(
            "/api/exams/", {"title": "JLPT N5", "description": "Mock", "time_limit": 1200}, format="json",
        )

        assert response.status_code == 201
        exam = Exam.objects.get(pk=response.data["id"])
        assert exam.status == Exam.Status.DRAFT
        assert exam.created_by == editor
        assert AuditLog.objects.filter(action=AuditLog.Action.CREATE, target_object_id=str(exam.id)).exists()

    def test_taker_cannot_create(self, api_client, taker):
        api_client.force_authenticate(user=taker)

        assert api_client.post("/api/exams/", {"title": "Nope"}, format="json").status_code == 403

    def test_only_admin_publishes(self, api_client, editor, exam_admin, build_exam):
        exam = build_exam(status=Exam.Status.DRAFT).exam

        api_client.force_authenticate(user=editor)
        assert api_client.post(f"/api/exams/{exam.id}/publish/").status_code == 403

        api_client.force_authenticate(user=exam_admin)
        response = api_client.post(f"/api/exams/{exam.id}/publish/")
        assert response.status_code == 200
        exam.refresh_from_db()
        assert exam.status == Exam.Status.PUBLISHED

    def test_publish_missing_exam(self, api_client, exam_admin):
        api_client.force_authenticate(user=exam_admin)

        assert api_client.post("/api/exams/777/publish/").status_code == 404

    def test_approve_access_upserts(self, api_client, exam_admin, taker, build_exam, grant):
        exam = build_exam().exam
        grant(taker, exam, status=ExamAccess.Status.PENDING)
        api_client.force_authenticate(user=exam_admin)

        response = api_client.post(f"/api/exams/{exam.id}/access/approve/", {"user_id": taker.id}, format="json")

        assert response.status_code == 200
        access = ExamAccess.objects.get(user=taker, exam=exam)
        assert access.status == ExamAccess.Status.APPROVED
        assert ExamAccess.objects.count() == 1

    def test_approve_access_unknown_user(self, api_client, exam_admin, build_exam):
        exam = build_exam().exam
        api_client.force_authenticate(user=exam_admin)

        response = api_client.post(f"/api/exams/{exam.id}/access/approve/", {"user_id": 4040}, format="json")

        assert response.status_code == 404

    def test_assign_questions_to_draft(self, api_client, editor, build_exam):
        source = build_exam()
        draft = build_exam(correct_positions=(), status=Exam.Status.DRAFT).exam
        api_client.force_authenticate(user=editor)
        ids = [q.id for q in reversed(source.questions)]

        response = api_client.post(f"/api/exams/{draft.id}/questions/", {"question_ids": ids}, format="json")

        assert response.status_code == 201
        links = ExamQuestion.objects.filter(exam=draft).order_by("order_no")
        assert [link.question_id for link in links] == ids
        assert [link.order_no for link in links] == [1, 2, 3]

        again = api_client.post(f"/api/exams/{draft.id}/questions/", {"question_ids": ids[:1]}, format="json")
        assert again.data["linked"] == 0

    def test_published_exam_is_immutable(self, api_client, editor, build_exam):
        built = build_exam()
        extra = build_exam(status=Exam.Status.DRAFT).questions[0]
        api_client.force_authenticate(user=editor)

        response = api_client.post(
            f"/api/exams/{built.exam.id}/questions/", {"question_ids": [extra.id]}, format="json",
        )

        assert response.status_code == 400
        assert ExamQuestion.objects.filter(exam=built.exam).count() == 3

    def test_assign_unknown_question(self, api_client, editor, build_exam):
        draft = build_exam(correct_positions=(), status=Exam.Status.DRAFT).exam
        api_client.force_authenticate(user=editor)

        response = api_client.post(f"/api/exams/{draft.id}/questions/", {"question_ids": [9999]}, format="json")

        assert response.status_code == 404


@pytest.mark.django_db
class TestExamReadApi:

    def test_published_exam_is_public(self, api_client, build_exam):
        exam = build_exam().exam

        response = api_client.get(f"/api/exams/{exam.id}/")

        assert response.status_code == 200
        assert response.data["title"] == "English Test"

    def test_stale_token_does_not_block_public_exam(self, api_client, build_exam):
        exam = build_exam().exam
        api_client.cookies["access_token"] = "expired-or-garbage"

        assert api_client.get(f"/api/exams/{exam.id}/").status_code == 200

        api_client.cookies.clear()
        api_client.credentials(HTTP_AUTHORIZATION="Bearer garbage")
        assert api_client.get(f"/api/exams/{exam.id}/").status_code == 200

    def test_stale_token_still_rejected_on_list(self, api_client):
        api_client.cookies["access_token"] = "expired-or-garbage"

        assert api_client.get("/api/exams/").status_code == 401

    def test_draft_exam_is_hidden(self, api_client, build_exam):
        exam = build_exam(status=Exam.Status.DRAFT).exam

        assert api_client.get(f"/api/exams/{exam.id}/").status_code == 404

    def test_taker_lists_only_approved_published(self, api_client, taker, build_exam, grant):
        visible = build_exam().exam
        not_granted = build_exam().exam
        draft = build_exam(status=Exam.Status.DRAFT).exam
        grant(taker, visible)
        grant(taker, draft)
        api_client.force_authenticate(user=taker)

        response = api_client.get("/api/exams/")

        assert response.status_code == 200
        assert [e["id"] for e in response.data] == [visible.id]
        assert not_granted.id not in [e["id"] for e in response.data]


@pytest.mark.django_db
class TestQuestionBankApi:

    def test_create_with_options(self, api_client, editor):
        api_client.force_authenticate(user=editor)

        response = api_client.post("/api/questions/", {
            "content_html": "<p>2 + 2?</p>",
            "section_type": "GRAMMAR",
            "options": [
                {"content_html": "3", "is_correct": False},
                {"content_html": "4", "is_correct": True},
            ],
        }, format="json")

        assert response.status_code == 201
        question = Question.objects.get(pk=response.data["id"])
        assert question.created_by == editor
        assert [o.order_no for o in question.options.all()] == [1, 2]
        assert question.correct_option().content_html == "4"

    def test_delete_is_soft(self, api_client, editor, build_exam):
        question = build_exam(status=Exam.Status.DRAFT).questions[0]
        api_client.force_authenticate(user=editor)

        assert api_client.delete(f"/api/questions/{question.id}/").status_code == 204

        question.refresh_from_db()
        assert question.deleted_at is not None
        assert question.status == Question.Status.INACTIVE

    def test_cannot_replace_options_of_published_question(self, api_client, editor, build_exam):
        question = build_exam().questions[0]
        api_client.force_authenticate(user=editor)

        response = api_client.patch(
            f"/api/questions/{question.id}/",
            {"options": [{"content_html": "x", "is_correct": True}]},
            format="json",
        )

        assert response.status_code == 400
        assert question.options.count() == 3

    def test_takers_have_no_bank_access(self, api_client, taker):
        api_client.force_authenticate(user=taker)

        assert api_client.get("/api/questions/").status_code == 403


@pytest.mark.django_db
def test_audit_log_is_admin_only(api_client, exam_admin, editor):
    api_client.force_authenticate(user=editor)
    api_client.post("/api/exams/", {"title": "Logged"}, format="json")
    assert api_client.get("/api/audit-logs/").status_code == 403

    api_client.force_authenticate(user=exam_admin)
    response = api_client.get("/api/audit-logs/", {"action": "CREATE"})

    assert response.status_code == 200
    assert response.data[0]["actor_email"] == editor.email
