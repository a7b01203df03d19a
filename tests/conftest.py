from types import SimpleNamespace

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient

from exams.models import Exam, ExamAccess, ExamQuestion, Question, QuestionOption

User = get_user_model()


@pytest.fixture(autouse=True)
def _clear_throttle_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role=User.Role.USER, email=None, password="password123"):
        counter["n"] += 1
        email = email or f"{role}{counter['n']}@example.com"
        return User.objects.create_user(username=email, email=email, password=password, role=role)

    return _make


@pytest.fixture
def taker(make_user):
    return make_user(User.Role.USER)


@pytest.fixture
def editor(make_user):
    return make_user(User.Role.EDITOR)


@pytest.fixture
def exam_admin(make_user):
    return make_user(User.Role.ADMIN)


@pytest.fixture
def build_exam(db, editor):
    """
    Builds an exam whose question i has three options, the correct one at
    ``correct_positions[i]`` (1-based). ``None`` leaves a question without
    any correct option.
    """

    def _build(correct_positions=(2, 2, 1), status=Exam.Status.PUBLISHED, time_limit=1800):
        exam = Exam.objects.create(
            title="English Test",
            description="Basic English Test",
            time_limit=time_limit,
            status=status,
            created_by=editor,
        )
        questions, options = [], []
        for order_no, correct in enumerate(correct_positions, start=1):
            question = Question.objects.create(
                content_html=f"<p>Question {order_no}</p>",
                section_type=Question.SectionType.READING,
                created_by=editor,
            )
            opts = [
                QuestionOption.objects.create(
                    question=question,
                    content_html=f"<p>Q{order_no} option {pos}</p>",
                    is_correct=(pos == correct),
                    order_no=pos,
                )
                for pos in (1, 2, 3)
            ]
            ExamQuestion.objects.create(
                exam=exam, question=question, order_no=order_no, section_type=question.section_type,
            )
            questions.append(question)
            options.append(opts)

        return SimpleNamespace(exam=exam, questions=questions, options=options)

    return _build


@pytest.fixture
def grant(db):
    def _grant(user, exam, status=ExamAccess.Status.APPROVED):
        access, _ = ExamAccess.objects.update_or_create(
            user=user, exam=exam, defaults={"status": status, "deleted_at": None},
        )
        return access

    return _grant


@pytest.fixture
def ready_exam(build_exam, grant, taker):
    """Published three-question exam the ``taker`` is approved for."""
    built = build_exam()
    grant(taker, built.exam)
    return built
