from django.contrib import admin

# Register your models here.
from .models import Exam, ExamAccess, ExamQuestion, Question, QuestionOption


class QuestionOptionInline(admin.TabularInline):
    model = QuestionOption
    extra = 0


class ExamQuestionInline(admin.TabularInline):
    model = ExamQuestion
    extra = 0


@admin.register(Question)
class QuestionAdmin(admin.ModelAdmin):
    list_display = ['id', 'section_type', 'status', 'created_at']
    list_filter = ['section_type', 'status']
    inlines = [QuestionOptionInline]


@admin.register(Exam)
class ExamAdmin(admin.ModelAdmin):
    list_display = ['id', 'title', 'status', 'time_limit', 'created_at']
    list_filter = ['status']
    inlines = [ExamQuestionInline]


admin.site.register(ExamAccess)
