from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from exams.models import Exam, ExamAccess, ExamQuestion, Question, QuestionOption

User = get_user_model()

DEMO_QUESTIONS = [
    (Question.SectionType.SCRIPT_VOCABULARY, "<p>What is 2 + 2?</p>", ["<p>3</p>", "<p>4</p>", "<p>5</p>"], 1),
    (Question.SectionType.READING, "<p>What is the capital of France?</p>", ["<p>London</p>", "<p>Paris</p>", "<p>Berlin</p>"], 1),
    (Question.SectionType.CONVERSATION_EXPRESSION, '<p>How do you say "Hello" in Japanese?</p>', ["<p>Konnichiwa</p>", "<p>Annyeong</p>", "<p>Ni Hao</p>"], 0),
]


class Command(BaseCommand):
    help = 'Creates a demo taker and a published three-question exam they are approved for'

    def add_arguments(self, parser):
        parser.add_argument('--email', default='testuser2@example.com', help='Demo taker email')
        parser.add_argument('--password', default='password123', help='Demo taker password')

    @transaction.atomic
    def handle(self, *args, **options):
        email = options['email']
        user, _ = User.objects.get_or_create(
            email=email,
            defaults={'username': email, 'role': User.Role.USER},
        )
        user.set_password(options['password'])
        user.save()
        self.stdout.write(f"Test user: {user.email} ({user.id})")

        exam = Exam.objects.create(
            title='Demo Exam',
            description='Sample exam with 3 questions',
            time_limit=1800,
            status=Exam.Status.PUBLISHED,
            created_by=user,
        )
        self.stdout.write(f"Created exam: {exam.id}")

        for order_no, (section, content, choices, correct_index) in enumerate(DEMO_QUESTIONS, start=1):
            question = Question.objects.create(content_html=content, section_type=section, created_by=user)
            QuestionOption.objects.bulk_create([
                QuestionOption(question=question, content_html=text, is_correct=(i == correct_index), order_no=i + 1)
                for i, text in enumerate(choices)
            ])
            ExamQuestion.objects.create(exam=exam, question=question, order_no=order_no, section_type=section)

            self.stdout.write(f"Question {order_no} ID: {question.id}")
            for option in question.options.all():
                marker = " (correct)" if option.is_correct else ""
                self.stdout.write(f"  - Option {option.order_no}: {option.id} {option.content_html}{marker}")

        ExamAccess.objects.update_or_create(
            user=user, exam=exam,
            defaults={'status': ExamAccess.Status.APPROVED, 'deleted_at': None},
        )

        self.stdout.write(self.style.SUCCESS(f"Seed completed. Start with POST /api/exams/{exam.id}/sessions/"))
