from rest_framework import serializers

from membership.models import (
    BenefitRecord,
    BenefitType,
    CardConfig,
    Emirate,
    Member,
    Message,
    News,
    Notification,
    QuestionType,
    RegistrationQuestion,
    Sponsor,
    SystemField,
    YearConfig,
)
from membership.services.year_service import is_in_renewal, is_renewal_due


class MemberSerializer(serializers.ModelSerializer):
    """
    Serializer for Member model.

    Renewal flags are computed against the `active_year` passed in the
    serializer context. The password hash is never exposed.
    """

    fullName = serializers.CharField(source="full_name", read_only=True)
    emiratesId = serializers.CharField(source="national_id", read_only=True)
    paymentStatus = serializers.CharField(source="payment_status", read_only=True)
    paymentRemarks = serializers.CharField(source="payment_remarks", read_only=True)
    paymentProof = serializers.CharField(source="payment_proof", read_only=True)
    membershipNo = serializers.CharField(source="membership_no", read_only=True)
    registrationYear = serializers.IntegerField(source="registration_year", read_only=True)
    registrationDate = serializers.DateField(source="registration_date", read_only=True)
    approvedBy = serializers.CharField(source="approved_by", read_only=True)
    approvedAt = serializers.DateTimeField(source="approved_at", read_only=True)
    assignedMandalams = serializers.JSONField(source="assigned_mandalams", read_only=True)
    isImported = serializers.BooleanField(source="is_imported", read_only=True)
    profileCompletionRequired = serializers.BooleanField(source="is_imported", read_only=True)
    customData = serializers.JSONField(source="custom_data", read_only=True)
    photoUrl = serializers.CharField(source="photo_url", read_only=True)
    addressUAE = serializers.CharField(source="address_uae", read_only=True)
    addressIndia = serializers.CharField(source="address_india", read_only=True)
    isKMCCMember = serializers.BooleanField(source="is_kmcc_member", read_only=True)
    kmccNo = serializers.CharField(source="kmcc_no", read_only=True)
    isPratheekshaMember = serializers.BooleanField(source="is_pratheeksha_member", read_only=True)
    pratheekshaNo = serializers.CharField(source="pratheeksha_no", read_only=True)
    recommendedBy = serializers.CharField(source="recommended_by", read_only=True)
    inRenewal = serializers.SerializerMethodField()
    renewalDue = serializers.SerializerMethodField()

    class Meta:
        model = Member
        fields = [
            "id",
            "fullName",
            "email",
            "mobile",
            "whatsapp",
            "emiratesId",
            "mandalam",
            "emirate",
            "status",
            "paymentStatus",
            "paymentRemarks",
            "paymentProof",
            "membershipNo",
            "registrationYear",
            "registrationDate",
            "approvedBy",
            "approvedAt",
            "role",
            "permissions",
            "assignedMandalams",
            "isImported",
            "profileCompletionRequired",
            "customData",
            "photoUrl",
            "addressUAE",
            "addressIndia",
            "nominee",
            "relation",
            "isKMCCMember",
            "kmccNo",
            "isPratheekshaMember",
            "pratheekshaNo",
            "recommendedBy",
            "version",
            "inRenewal",
            "renewalDue",
        ]
        read_only_fields = fields

    def get_inRenewal(self, obj):
        year = self.context.get("active_year")
        return is_in_renewal(obj, year) if year else False

    def get_renewalDue(self, obj):
        year = self.context.get("active_year")
        return is_renewal_due(obj, year) if year else False


class CardMemberSerializer(serializers.ModelSerializer):
    """Public subset shown when a membership card is scanned."""

    fullName = serializers.CharField(source="full_name")
    membershipNo = serializers.CharField(source="membership_no")
    registrationYear = serializers.IntegerField(source="registration_year")
    photoUrl = serializers.CharField(source="photo_url")
    paymentStatus = serializers.CharField(source="payment_status")

    class Meta:
        model = Member
        fields = [
            "id",
            "fullName",
            "membershipNo",
            "mandalam",
            "emirate",
            "registrationYear",
            "photoUrl",
            "status",
            "paymentStatus",
        ]


class MemberInputSerializer(serializers.Serializer):
    """Admin add / edit payload. Field names map onto member attributes."""

    fullName = serializers.CharField(source="full_name", required=False)
    email = serializers.EmailField(required=False, allow_blank=True, allow_null=True)
    mobile = serializers.CharField(required=False)
    whatsapp = serializers.CharField(required=False, allow_blank=True)
    emiratesId = serializers.CharField(source="national_id", required=False)
    mandalam = serializers.CharField(required=False)
    emirate = serializers.ChoiceField(choices=Emirate.choices, required=False)
    addressUAE = serializers.CharField(source="address_uae", required=False, allow_blank=True)
    addressIndia = serializers.CharField(source="address_india", required=False, allow_blank=True)
    nominee = serializers.CharField(required=False, allow_blank=True)
    relation = serializers.CharField(required=False, allow_blank=True)
    photoUrl = serializers.CharField(source="photo_url", required=False, allow_blank=True)
    isKMCCMember = serializers.BooleanField(source="is_kmcc_member", required=False)
    kmccNo = serializers.CharField(source="kmcc_no", required=False, allow_blank=True)
    isPratheekshaMember = serializers.BooleanField(source="is_pratheeksha_member", required=False)
    pratheekshaNo = serializers.CharField(source="pratheeksha_no", required=False, allow_blank=True)
    recommendedBy = serializers.CharField(source="recommended_by", required=False, allow_blank=True)
    password = serializers.CharField(
        required=False, allow_blank=True, write_only=True, trim_whitespace=False
    )


class LoginSerializer(serializers.Serializer):
    identifier = serializers.CharField()
    password = serializers.CharField(trim_whitespace=False)


class RegisterSerializer(serializers.Serializer):
    answers = serializers.DictField()
    password = serializers.CharField(allow_blank=True, trim_whitespace=False)
    confirmPassword = serializers.CharField(
        source="confirm_password", trim_whitespace=False, required=False, allow_blank=True
    )


class CompleteProfileSerializer(serializers.Serializer):
    email = serializers.CharField(allow_blank=True)
    password = serializers.CharField(allow_blank=True, trim_whitespace=False)
    confirmPassword = serializers.CharField(
        source="confirm_password", trim_whitespace=False, required=False, allow_blank=True
    )
    addressUAE = serializers.CharField(source="address_uae", required=False, allow_blank=True)
    addressIndia = serializers.CharField(source="address_india", required=False, allow_blank=True)
    nominee = serializers.CharField(required=False, allow_blank=True)
    relation = serializers.CharField(required=False, allow_blank=True)


class ChangePasswordSerializer(serializers.Serializer):
    currentPassword = serializers.CharField(
        source="current_password", trim_whitespace=False, allow_blank=True
    )
    newPassword = serializers.CharField(
        source="new_password", trim_whitespace=False, allow_blank=True
    )
    confirmPassword = serializers.CharField(
        source="confirm_password", trim_whitespace=False, required=False, allow_blank=True
    )


class PaymentSubmitSerializer(serializers.Serializer):
    remarks = serializers.CharField(required=False, allow_blank=True, default="")
    proof = serializers.CharField(required=False, allow_blank=True, default="")


class ConfirmSerializer(serializers.Serializer):
    confirm = serializers.BooleanField(required=False, default=False)


class RoleAssignmentSerializer(serializers.Serializer):
    role = serializers.CharField()
    permissions = serializers.ListField(child=serializers.CharField(), required=False)
    assignedMandalams = serializers.ListField(
        source="assigned_mandalams", child=serializers.CharField(), required=False
    )


class RegistrationQuestionSerializer(serializers.ModelSerializer):
    """Serializer for RegistrationQuestion model."""

    type = serializers.ChoiceField(source="field_type", choices=QuestionType.choices)
    parentQuestionId = serializers.PrimaryKeyRelatedField(
        source="parent",
        queryset=RegistrationQuestion.objects.all(),
        required=False,
        allow_null=True,
    )
    dependentOptions = serializers.JSONField(source="dependent_options", required=False)
    systemMapping = serializers.CharField(
        source="system_mapping", required=False, allow_null=True, allow_blank=True
    )

    class Meta:
        model = RegistrationQuestion
        fields = [
            "id",
            "label",
            "type",
            "options",
            "parentQuestionId",
            "dependentOptions",
            "order",
            "required",
            "systemMapping",
        ]
        read_only_fields = ["id"]

    def validate_systemMapping(self, value):
        if value in (None, "", "NONE"):
            return None
        if value not in SystemField.values:
            raise serializers.ValidationError(f"Unknown member field {value}")
        claimed = RegistrationQuestion.objects.filter(system_mapping=value)
        if self.instance is not None:
            claimed = claimed.exclude(pk=self.instance.pk)
        if claimed.exists():
            raise serializers.ValidationError(f"Another question is already mapped to {value}")
        return value


class BenefitSerializer(serializers.ModelSerializer):
    """Serializer for BenefitRecord model."""

    userId = serializers.CharField(source="member_id")
    type = serializers.ChoiceField(source="benefit_type", choices=BenefitType.choices)
    userName = serializers.CharField(source="member_name", read_only=True)
    regNo = serializers.CharField(source="membership_no", read_only=True)
    recordedBy = serializers.CharField(source="recorded_by", read_only=True)

    class Meta:
        model = BenefitRecord
        fields = ["id", "userId", "userName", "regNo", "type", "amount", "date", "remarks",
                  "recordedBy"]
        read_only_fields = ["id"]


class NotificationSerializer(serializers.ModelSerializer):
    """Serializer for Notification model."""

    type = serializers.CharField(source="notification_type", read_only=True)
    targetAudience = serializers.CharField(source="target_audience", read_only=True)
    recipients = serializers.JSONField(read_only=True)
    sentBy = serializers.CharField(source="sent_by", read_only=True)

    class Meta:
        model = Notification
        fields = ["id", "title", "message", "date", "read", "type", "targetAudience",
                  "recipients", "sentBy"]


class SendNotificationSerializer(serializers.Serializer):
    title = serializers.CharField(allow_blank=True)
    message = serializers.CharField(allow_blank=True)
    audience = serializers.CharField(required=False, default="ALL")
    recipients = serializers.ListField(child=serializers.CharField(), required=False)


class MessageSerializer(serializers.ModelSerializer):
    """Serializer for Message model."""

    userId = serializers.CharField(source="sender_id", read_only=True)
    userName = serializers.CharField(source="sender_name", read_only=True)
    membershipNo = serializers.CharField(source="sender_membership_no", read_only=True)
    mandalam = serializers.CharField(source="sender_mandalam", read_only=True)
    content = serializers.CharField(source="body")
    repliedBy = serializers.CharField(source="replied_by", read_only=True)
    repliedAt = serializers.DateTimeField(source="replied_at", read_only=True)

    class Meta:
        model = Message
        fields = ["id", "userId", "userName", "membershipNo", "mandalam", "subject", "content",
                  "date", "status", "reply", "repliedBy", "repliedAt"]
        read_only_fields = ["id", "date", "status", "reply"]


class ReplySerializer(serializers.Serializer):
    reply = serializers.CharField(allow_blank=True)


class YearConfigSerializer(serializers.ModelSerializer):
    """Serializer for YearConfig model."""

    startedBy = serializers.CharField(source="started_by", read_only=True)
    rolloverCompletedAt = serializers.DateTimeField(source="rollover_completed_at", read_only=True)

    class Meta:
        model = YearConfig
        fields = ["id", "year", "status", "count", "startedBy", "rolloverCompletedAt"]
        read_only_fields = fields


class StartYearSerializer(serializers.Serializer):
    year = serializers.IntegerField(required=False, min_value=2000, max_value=9999)
    confirm = serializers.BooleanField(required=False, default=False)


class NewsSerializer(serializers.ModelSerializer):
    imageUrl = serializers.CharField(source="image_url", required=False, allow_blank=True)
    isPublished = serializers.BooleanField(source="is_published", required=False)
    publishedAt = serializers.DateTimeField(source="published_at", read_only=True)

    class Meta:
        model = News
        fields = ["id", "title", "body", "imageUrl", "isPublished", "publishedAt"]
        read_only_fields = ["id"]


class SponsorSerializer(serializers.ModelSerializer):
    logoUrl = serializers.CharField(source="logo_url", required=False, allow_blank=True)
    displayOrder = serializers.IntegerField(source="display_order", required=False, min_value=0)
    isActive = serializers.BooleanField(source="is_active", required=False)

    class Meta:
        model = Sponsor
        fields = ["id", "name", "logoUrl", "website", "tier", "displayOrder", "isActive"]
        read_only_fields = ["id"]


class CardConfigSerializer(serializers.ModelSerializer):
    frontTemplateUrl = serializers.CharField(
        source="front_template_url", required=False, allow_blank=True
    )
    backTemplateUrl = serializers.CharField(
        source="back_template_url", required=False, allow_blank=True
    )
    frontFields = serializers.ListField(
        source="front_fields", child=serializers.DictField(), required=False
    )
    backFields = serializers.ListField(
        source="back_fields", child=serializers.DictField(), required=False
    )

    class Meta:
        model = CardConfig
        fields = ["id", "frontTemplateUrl", "backTemplateUrl", "frontFields", "backFields"]
        read_only_fields = ["id"]
