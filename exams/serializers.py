# exams/serializers.py
from django.db import transaction
from rest_framework import serializers
from cores.exceptions import InvalidState
from .models import Exam, ExamAccess, ExamQuestion, Question, QuestionOption

# --- Helper Serializers ---

class OptionSerializer(serializers.ModelSerializer):
    class Meta:
        model = QuestionOption
        fields = ['id', 'content_html', 'is_correct', 'order_no']
        read_only_fields = ['id']

# --- Question Serializers ---

class QuestionSerializer(serializers.ModelSerializer):
    options = OptionSerializer(many=True, required=False)

    class Meta:
        model = Question
        fields = [
            'id', 'content_html', 'section_type', 'status',
            'created_by', 'created_at', 'updated_at', 'options',
        ]
        read_only_fields = ['id', 'created_by', 'created_at', 'updated_at']

    def _write_options(self, question, options_data):
        for index, opt in enumerate(options_data, start=1):
            QuestionOption.objects.create(
                question=question,
                content_html=opt['content_html'],
                is_correct=opt.get('is_correct', False),
                order_no=opt.get('order_no') or index,
            )

    @transaction.atomic
    def create(self, validated_data):
        options_data = validated_data.pop('options', [])
        question = Question.objects.create(**validated_data)
        self._write_options(question, options_data)
        return question

    @transaction.atomic
    def update(self, instance, validated_data):
        options_data = validated_data.pop('options', None)
        instance = super().update(instance, validated_data)
        # Sending options replaces the whole set
        if options_data is not None:
            # Running sessions reference these rows
            if instance.exam_links.filter(exam__status=Exam.Status.PUBLISHED).exists():
                raise InvalidState("Options of a question used by a published exam cannot be replaced")
            instance.options.all().delete()
            self._write_options(instance, options_data)
        return instance

# --- Exam Serializers ---

class ExamSerializer(serializers.ModelSerializer):
    # Read-only counts
    total_questions = serializers.IntegerField(source='exam_questions.count', read_only=True)

    class Meta:
        model = Exam
        fields = [
            'id', 'title', 'description', 'time_limit', 'status',
            'created_by', 'created_at', 'total_questions',
        ]
        read_only_fields = ['id', 'status', 'created_by', 'created_at']


class ExamListSerializer(serializers.ModelSerializer):
    class Meta:
        model = Exam
        fields = ['id', 'title', 'description', 'time_limit', 'status']


class ExamQuestionSerializer(serializers.ModelSerializer):
    class Meta:
        model = ExamQuestion
        fields = ['id', 'exam', 'question', 'order_no', 'section_type']


class ExamAccessSerializer(serializers.ModelSerializer):
    class Meta:
        model = ExamAccess
        fields = ['id', 'user', 'exam', 'status', 'created_at', 'updated_at']


class ApproveAccessSerializer(serializers.Serializer):
    user_id = serializers.IntegerField(min_value=1)


class AssignQuestionsSerializer(serializers.Serializer):
    question_ids = serializers.ListField(child=serializers.IntegerField(min_value=1), allow_empty=False)
