from rest_framework import serializers
from .models import ExamSession, ExamSessionAnswer


class ExamSessionAnswerSerializer(serializers.ModelSerializer):
    question_id = serializers.IntegerField(read_only=True)
    selected_option_id = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = ExamSessionAnswer
        fields = ['id', 'session', 'question_id', 'selected_option_id', 'answered_at']
        read_only_fields = fields


class ExamSessionSerializer(serializers.ModelSerializer):
    exam_id = serializers.IntegerField(read_only=True)
    user_id = serializers.IntegerField(read_only=True)
    answers = ExamSessionAnswerSerializer(many=True, read_only=True)

    class Meta:
        model = ExamSession
        fields = [
            'id', 'user_id', 'exam_id', 'status', 'start_time', 'time_limit',
            'submitted_at', 'total_correct', 'total_wrong', 'total_unanswered',
            'created_at', 'answers',
        ]
        read_only_fields = fields


class SaveAnswerSerializer(serializers.Serializer):
    question_id = serializers.IntegerField(min_value=1)
    # null clears a previously saved pick
    selected_option_id = serializers.IntegerField(min_value=1, allow_null=True)
