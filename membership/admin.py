from django.contrib import admin

from membership.models import (
    BenefitRecord,
    CardConfig,
    Member,
    MembershipSequence,
    Message,
    News,
    Notification,
    RegistrationQuestion,
    Sponsor,
    YearConfig,
)


@admin.register(Member)
class MemberAdmin(admin.ModelAdmin):
    list_display = (
        "membership_no",
        "full_name",
        "mandalam",
        "role",
        "status",
        "payment_status",
        "registration_year",
    )
    list_filter = ("role", "status", "payment_status", "mandalam", "emirate", "registration_year")
    search_fields = ("membership_no", "full_name", "email", "mobile", "national_id")
    readonly_fields = ("password", "version", "created_at", "updated_at")
    fieldsets = (
        (
            "Identity",
            {"fields": ("full_name", "email", "mobile", "whatsapp", "national_id", "password")},
        ),
        ("Region", {"fields": ("mandalam", "emirate")}),
        (
            "Membership",
            {
                "fields": (
                    "membership_no",
                    "registration_year",
                    "registration_date",
                    "status",
                    "approved_by",
                    "approved_at",
                    "is_imported",
                )
            },
        ),
        (
            "Payment",
            {
                "fields": (
                    "payment_status",
                    "payment_remarks",
                    "payment_proof",
                    "payment_submitted_at",
                    "payment_reset_year",
                )
            },
        ),
        ("Access", {"fields": ("role", "permissions", "assigned_mandalams")}),
        (
            "Additional Information",
            {
                "fields": (
                    "address_uae",
                    "address_india",
                    "nominee",
                    "relation",
                    "photo_url",
                    "custom_data",
                ),
                "classes": ("collapse",),
            },
        ),
        ("Audit", {"fields": ("version", "created_at", "updated_at"), "classes": ("collapse",)}),
    )


@admin.register(RegistrationQuestion)
class RegistrationQuestionAdmin(admin.ModelAdmin):
    list_display = ("label", "field_type", "order", "required", "system_mapping", "parent")
    list_filter = ("field_type", "required")
    search_fields = ("label",)
    ordering = ("order",)


@admin.register(YearConfig)
class YearConfigAdmin(admin.ModelAdmin):
    list_display = ("year", "status", "count", "started_by", "rollover_completed_at")
    list_filter = ("status",)
    readonly_fields = ("created_at",)


@admin.register(MembershipSequence)
class MembershipSequenceAdmin(admin.ModelAdmin):
    list_display = ("year", "last_value", "updated_at")


@admin.register(BenefitRecord)
class BenefitRecordAdmin(admin.ModelAdmin):
    list_display = ("member_name", "membership_no", "benefit_type", "amount", "date")
    list_filter = ("benefit_type", "date")
    search_fields = ("member_name", "membership_no", "member_id")


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("title", "notification_type", "target_audience", "date", "sent_by")
    list_filter = ("notification_type",)
    search_fields = ("title", "message")


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ("subject", "sender_name", "sender_mandalam", "status", "date")
    list_filter = ("status", "sender_mandalam")
    search_fields = ("subject", "sender_name", "sender_membership_no")


admin.site.register(News)
admin.site.register(Sponsor)
admin.site.register(CardConfig)
