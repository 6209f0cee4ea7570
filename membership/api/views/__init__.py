from membership.api.views.auth import LoginView, LogoutView, RegisterView, SessionView
from membership.api.views.communications import (
    BenefitDetailView,
    BenefitListView,
    MessageListView,
    MessageReadView,
    MessageReplyView,
    NotificationDetailView,
    NotificationListView,
)
from membership.api.views.content import (
    CardConfigView,
    NewsDetailView,
    NewsListView,
    SponsorDetailView,
    SponsorListView,
)
from membership.api.views.members import (
    MemberDetailView,
    MemberExportView,
    MemberImportView,
    MemberListView,
    MemberRoleView,
    MemberWorkflowView,
    StatsView,
    VerifyCardView,
)
from membership.api.views.profile import (
    AnswersView,
    ChangePasswordView,
    CompleteProfileView,
    InboxReadView,
    InboxView,
    MyBenefitsView,
    ProfileView,
    SubmitPaymentView,
)
from membership.api.views.registration import (
    QuestionDetailView,
    QuestionListView,
    QuestionReorderView,
    SchemaCoverageView,
)
from membership.api.views.years import YearListView

__all__ = [
    "AnswersView",
    "BenefitDetailView",
    "BenefitListView",
    "CardConfigView",
    "ChangePasswordView",
    "CompleteProfileView",
    "InboxReadView",
    "InboxView",
    "LoginView",
    "LogoutView",
    "MemberDetailView",
    "MemberExportView",
    "MemberImportView",
    "MemberListView",
    "MemberRoleView",
    "MemberWorkflowView",
    "MessageListView",
    "MessageReadView",
    "MessageReplyView",
    "MyBenefitsView",
    "NewsDetailView",
    "NewsListView",
    "NotificationDetailView",
    "NotificationListView",
    "ProfileView",
    "QuestionDetailView",
    "QuestionListView",
    "QuestionReorderView",
    "RegisterView",
    "SchemaCoverageView",
    "SessionView",
    "SponsorDetailView",
    "SponsorListView",
    "StatsView",
    "SubmitPaymentView",
    "VerifyCardView",
    "YearListView",
]
