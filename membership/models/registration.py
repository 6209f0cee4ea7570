from django.db import models

from .choices import QuestionType, SystemField
from .member import generate_id


def generate_question_id():
    return generate_id("q")


class RegistrationQuestion(models.Model):
    """Admin-defined field of the self-registration form."""

    id = models.CharField(max_length=64, primary_key=True, default=generate_question_id)
    label = models.CharField(max_length=255)
    field_type = models.CharField(
        max_length=32, choices=QuestionType.choices, default=QuestionType.TEXT
    )
    options = models.JSONField(default=list, blank=True)
    parent = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name="dependants",
        help_text="Question whose answer selects this dropdown's options",
    )
    dependent_options = models.JSONField(
        default=dict, blank=True, help_text="Parent answer -> option list"
    )
    order = models.PositiveIntegerField(default=0)
    required = models.BooleanField(default=False)
    system_mapping = models.CharField(
        max_length=32,
        choices=SystemField.choices,
        blank=True,
        null=True,
        unique=True,
        help_text="Member field this answer is copied into",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "registration_questions"
        ordering = ["order", "created_at"]

    def __str__(self):
        return f"{self.label} ({self.field_type})"
