"""
Registration form engine.

Pure functions over the ordered list of RegistrationQuestion records: option
resolution for dependent dropdowns, cascade clearing of dependant answers,
required-field checks and resolution of the free-form answers into the fixed
member identity fields.
"""

from membership.models import (
    CORE_IDENTITY_FIELDS,
    OPTIONAL_IDENTITY_FIELDS,
    Emirate,
    QuestionType,
    SystemField,
)

# field -> (label fragments that match, label fragments that veto a match)
LABEL_RULES = {
    SystemField.FULL_NAME: (
        ("name",),
        ("nominee", "mandalam", "emirate", "kmcc", "pratheeksha", "recommend"),
    ),
    SystemField.MOBILE: (("mobile",), ("whatsapp",)),
    SystemField.NATIONAL_ID: (("emirates id",), ()),
    SystemField.EMAIL: (("email",), ()),
    SystemField.MANDALAM: (("mandalam",), ()),
    SystemField.EMIRATE: (("emirate",), ("emirates id",)),
    SystemField.WHATSAPP: (("whatsapp",), ()),
    SystemField.ADDRESS_UAE: (("uae address", "address uae", "address (uae)"), ()),
    SystemField.ADDRESS_INDIA: (("india address", "address india", "address (india)"), ()),
    SystemField.NOMINEE: (("nominee",), ("relation",)),
    SystemField.RELATION: (("relation",), ()),
}

PLACEHOLDER_NAME = "Unknown"
PLACEHOLDER_NATIONAL_ID = "000000000000000"


class RegistrationError(ValueError):
    """Raised when registration answers cannot become a member record."""

    def __init__(self, message: str, errors: dict = None):
        super().__init__(message)
        self.errors = errors or {}


def ordered(questions):
    return sorted(questions, key=lambda q: (q.order, str(q.id)))


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def options_for(question, answers: dict) -> list:
    """
    Options a dropdown offers given the answers so far.

    A dependent dropdown has no options until its parent has an answer.
    """
    if question.field_type == QuestionType.DEPENDENT_DROPDOWN:
        if not question.parent_id:
            return []
        parent_value = answers.get(question.parent_id)
        if _is_blank(parent_value):
            return []
        return list((question.dependent_options or {}).get(str(parent_value), []))
    return list(question.options or [])


def dependants(questions, question_id) -> list:
    """Ids of every question below `question_id` in the parent chain."""
    children = {}
    for question in questions:
        if question.parent_id:
            children.setdefault(question.parent_id, []).append(question.id)

    found = []
    pending = list(children.get(question_id, []))
    while pending:
        child_id = pending.pop(0)
        if child_id in found or child_id == question_id:
            continue
        found.append(child_id)
        pending.extend(children.get(child_id, []))
    return found


def apply_answer(questions, answers: dict, question_id, value) -> dict:
    """Set one answer; a changed answer clears every dependant answer."""
    updated = dict(answers)
    previous = updated.get(question_id)
    updated[question_id] = value
    if previous != value:
        for child_id in dependants(questions, question_id):
            updated.pop(child_id, None)
    return updated


def _depth(question, by_id) -> int:
    depth = 0
    seen = {question.id}
    parent_id = question.parent_id
    while parent_id and parent_id in by_id and parent_id not in seen:
        seen.add(parent_id)
        depth += 1
        parent_id = by_id[parent_id].parent_id
    return depth


def merge_answers(questions, previous: dict, changes: dict) -> dict:
    """
    Apply a submitted set of answers on top of the stored ones.

    Parents are applied before their dependants, so a submission that changes
    a parent and picks a new child value keeps the new child value, while a
    child that was not resubmitted is cleared. Answers to unknown questions
    are dropped.
    """
    by_id = {question.id: question for question in questions}
    answers = {key: value for key, value in (previous or {}).items() if key in by_id}
    for question in sorted(ordered(questions), key=lambda q: _depth(q, by_id)):
        if question.id in changes:
            answers = apply_answer(questions, answers, question.id, changes[question.id])
    return answers


def missing_required(questions, answers: dict) -> list:
    return [
        question.id
        for question in ordered(questions)
        if question.required and _is_blank(answers.get(question.id))
    ]


def find_question(questions, field):
    """
    Question that feeds member field `field`.

    An explicit system mapping always wins; otherwise the first unmapped
    question whose label matches the field's label rule is used.
    """
    questions = ordered(questions)
    for question in questions:
        if question.system_mapping == field:
            return question

    includes, excludes = LABEL_RULES[field]
    for question in questions:
        if question.system_mapping:
            continue
        label = (question.label or "").lower()
        if any(token in label for token in includes) and not any(
            token in label for token in excludes
        ):
            return question
    return None


def normalize_emirate(value: str):
    candidate = value.strip().upper().replace(" ", "_").replace("-", "_")
    return candidate if candidate in Emirate.values else None


def schema_coverage(questions) -> dict:
    """Which core identity fields have an explicit question mapping."""
    mapped = {}
    for question in questions:
        if question.system_mapping:
            mapped[question.system_mapping] = question.id
    return {
        "mapped": mapped,
        "missing": [field.value for field in CORE_IDENTITY_FIELDS if field not in mapped],
    }


def resolve_identity(questions, answers: dict, strict: bool = True, mandalams=None) -> dict:
    """
    Resolve registration answers into the fixed member identity fields.

    In strict mode a core field that no question feeds, or that was left
    blank, is a RegistrationError. Otherwise placeholder values are used, the
    way early registration forms behaved.

    Email is the one core field that may legitimately be blank; it resolves
    to None.
    """
    mandalams = list(mandalams or [])
    resolved = {}
    errors = {}

    for field in CORE_IDENTITY_FIELDS:
        question = find_question(questions, field)
        raw = answers.get(question.id) if question else None
        value = "" if _is_blank(raw) else str(raw).strip()

        if field == SystemField.EMIRATE and value:
            value = normalize_emirate(value) or value

        if question is None and strict:
            errors[field.value] = "No registration question provides this field."
        elif not value and field != SystemField.EMAIL and strict:
            errors[field.value] = "This field is required."
        resolved[field.value] = value

    if errors:
        raise RegistrationError("Registration is missing identity fields", errors)

    for field in OPTIONAL_IDENTITY_FIELDS:
        question = find_question(questions, field)
        raw = answers.get(question.id) if question else None
        resolved[field.value] = "" if _is_blank(raw) else str(raw).strip()

    resolved["email"] = resolved["email"] or None
    if not strict:
        resolved["full_name"] = resolved["full_name"] or PLACEHOLDER_NAME
        resolved["national_id"] = resolved["national_id"] or PLACEHOLDER_NATIONAL_ID
        resolved["mandalam"] = resolved["mandalam"] or (mandalams[0] if mandalams else "")
        resolved["emirate"] = resolved["emirate"] or Emirate.values[0]
    return resolved
