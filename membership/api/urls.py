from django.urls import path

from membership.api.views import (
    AnswersView,
    BenefitDetailView,
    BenefitListView,
    CardConfigView,
    ChangePasswordView,
    CompleteProfileView,
    InboxReadView,
    InboxView,
    LoginView,
    LogoutView,
    MemberDetailView,
    MemberExportView,
    MemberImportView,
    MemberListView,
    MemberRoleView,
    MemberWorkflowView,
    MessageListView,
    MessageReadView,
    MessageReplyView,
    MyBenefitsView,
    NewsDetailView,
    NewsListView,
    NotificationDetailView,
    NotificationListView,
    ProfileView,
    QuestionDetailView,
    QuestionListView,
    QuestionReorderView,
    RegisterView,
    SchemaCoverageView,
    SessionView,
    SponsorDetailView,
    SponsorListView,
    StatsView,
    SubmitPaymentView,
    VerifyCardView,
    YearListView,
)

urlpatterns = [
    # Session
    path("auth/login/", LoginView.as_view(), name="auth-login"),
    path("auth/logout/", LogoutView.as_view(), name="auth-logout"),
    path("auth/session/", SessionView.as_view(), name="auth-session"),
    path("auth/register/", RegisterView.as_view(), name="auth-register"),
    # Registration form
    path("registration/questions/", QuestionListView.as_view(), name="question-list"),
    path(
        "registration/questions/reorder/",
        QuestionReorderView.as_view(),
        name="question-reorder",
    ),
    path(
        "registration/questions/<str:question_id>/",
        QuestionDetailView.as_view(),
        name="question-detail",
    ),
    path("registration/coverage/", SchemaCoverageView.as_view(), name="schema-coverage"),
    # Member self-service
    path("me/", ProfileView.as_view(), name="me"),
    path("me/complete-profile/", CompleteProfileView.as_view(), name="me-complete-profile"),
    path("me/password/", ChangePasswordView.as_view(), name="me-password"),
    path("me/answers/", AnswersView.as_view(), name="me-answers"),
    path("me/payment/", SubmitPaymentView.as_view(), name="me-payment"),
    path("me/benefits/", MyBenefitsView.as_view(), name="me-benefits"),
    path("me/notifications/", InboxView.as_view(), name="me-notifications"),
    path(
        "me/notifications/<str:notification_id>/read/",
        InboxReadView.as_view(),
        name="me-notification-read",
    ),
    # Member administration
    path("members/", MemberListView.as_view(), name="member-list"),
    path("members/import/", MemberImportView.as_view(), name="member-import"),
    path("members/export/", MemberExportView.as_view(), name="member-export"),
    path("members/<str:member_id>/", MemberDetailView.as_view(), name="member-detail"),
    path("members/<str:member_id>/role/", MemberRoleView.as_view(), name="member-role"),
    path(
        "members/<str:member_id>/<str:action>/",
        MemberWorkflowView.as_view(),
        name="member-workflow",
    ),
    path("stats/", StatsView.as_view(), name="stats"),
    path("years/", YearListView.as_view(), name="year-list"),
    # Benefits and communications
    path("benefits/", BenefitListView.as_view(), name="benefit-list"),
    path("benefits/<str:benefit_id>/", BenefitDetailView.as_view(), name="benefit-detail"),
    path("notifications/", NotificationListView.as_view(), name="notification-list"),
    path(
        "notifications/<str:notification_id>/",
        NotificationDetailView.as_view(),
        name="notification-detail",
    ),
    path("messages/", MessageListView.as_view(), name="message-list"),
    path("messages/<str:message_id>/read/", MessageReadView.as_view(), name="message-read"),
    path("messages/<str:message_id>/reply/", MessageReplyView.as_view(), name="message-reply"),
    # Content
    path("card-config/", CardConfigView.as_view(), name="card-config"),
    path("news/", NewsListView.as_view(), name="news-list"),
    path("news/<str:entry_id>/", NewsDetailView.as_view(), name="news-detail"),
    path("sponsors/", SponsorListView.as_view(), name="sponsor-list"),
    path("sponsors/<str:entry_id>/", SponsorDetailView.as_view(), name="sponsor-detail"),
    # Public card verification
    path("verify/<str:member_id>/", VerifyCardView.as_view(), name="verify-card"),
]
