import logging

from membership.models import CardConfig, Member, RegistrationQuestion

logger = logging.getLogger(__name__)

DEFAULT_CARD_ID = "default"

# Member attributes that can be printed on the card
CARD_MEMBER_FIELDS = (
    "full_name",
    "membership_no",
    "mobile",
    "whatsapp",
    "national_id",
    "email",
    "mandalam",
    "emirate",
    "registration_year",
    "registration_date",
    "photo_url",
    "nominee",
    "relation",
    "address_uae",
    "address_india",
)


def get_card_config() -> CardConfig:
    config, _ = CardConfig.objects.get_or_create(pk=DEFAULT_CARD_ID)
    return config


def invalid_card_fields(fields: list, question_ids: set) -> list:
    """
    Keys in a card layout that point at nothing.

    Each field is a dict with a 'key' naming a member attribute or a
    registration question id, plus free-form position data.
    """
    invalid = []
    for field in fields or []:
        key = field.get("key") if isinstance(field, dict) else None
        if not key or (key not in CARD_MEMBER_FIELDS and key not in question_ids):
            invalid.append(key or str(field))
    return invalid


def update_card_config(actor: Member, data: dict) -> dict:
    if not actor.is_master_admin:
        return {
            "success": False,
            "message": "Only the master admin can change the card layout",
            "code": "forbidden",
        }

    question_ids = set(RegistrationQuestion.objects.values_list("pk", flat=True))
    invalid = invalid_card_fields(data.get("front_fields"), question_ids) + invalid_card_fields(
        data.get("back_fields"), question_ids
    )
    if invalid:
        return {
            "success": False,
            "message": f"Unknown card fields: {', '.join(invalid)}",
            "code": "invalid",
        }

    config = get_card_config()
    for attribute in ("front_template_url", "back_template_url", "front_fields", "back_fields"):
        if data.get(attribute) is not None:
            setattr(config, attribute, data[attribute])
    config.save()
    logger.info(f"{actor.full_name} updated the card layout")
    return {"success": True, "message": "Card layout saved", "card": config}
