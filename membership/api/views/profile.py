"""Member self-service endpoints under /api/v1/me/."""

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from membership.api.serializers import (
    BenefitSerializer,
    ChangePasswordSerializer,
    CompleteProfileSerializer,
    MemberInputSerializer,
    MemberSerializer,
    NotificationSerializer,
    PaymentSubmitSerializer,
)
from membership.api.views.base import error_response, member_context
from membership.services.benefit_service import BenefitService
from membership.services.communications_service import NotificationService
from membership.services.member_service import MemberService
from membership.services.workflow_service import WorkflowService


def member_response(result: dict, http_status=status.HTTP_200_OK) -> Response:
    if not result["success"]:
        return error_response(result)
    return Response(
        {
            "message": result["message"],
            "member": MemberSerializer(result["member"], context=member_context()).data,
        },
        status=http_status,
    )


class ProfileView(APIView):
    """
    GET   /api/v1/me/   own member record
    PATCH /api/v1/me/   edit optional profile fields
    """

    def get(self, request):
        return Response(
            MemberSerializer(request.user, context=member_context()).data,
            status=status.HTTP_200_OK,
        )

    def patch(self, request):
        serializer = MemberInputSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        return member_response(
            MemberService().update_profile(request.user, serializer.validated_data)
        )


class CompleteProfileView(APIView):
    """
    Imported members set their email and password on first login.

    POST /api/v1/me/complete-profile/
    """

    def post(self, request):
        serializer = CompleteProfileSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        return member_response(
            MemberService().complete_profile(request.user, serializer.validated_data)
        )


class ChangePasswordView(APIView):
    """POST /api/v1/me/password/"""

    def post(self, request):
        serializer = ChangePasswordSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        data = serializer.validated_data
        result = MemberService().change_password(
            request.user,
            data["current_password"],
            data["new_password"],
            data.get("confirm_password"),
        )
        if not result["success"]:
            return error_response(result)
        return Response({"message": result["message"]}, status=status.HTTP_200_OK)


class AnswersView(APIView):
    """
    PATCH /api/v1/me/answers/

    Request body: {"answers": {"<question id>": "<value>", ...}}
    """

    def patch(self, request):
        answers = request.data.get("answers")
        if not isinstance(answers, dict):
            return Response(
                {"message": "answers must be an object"}, status=status.HTTP_400_BAD_REQUEST
            )
        return member_response(MemberService().update_answers(request.user, answers))


class SubmitPaymentView(APIView):
    """
    API endpoint for a member to report a membership payment.

    POST /api/v1/me/payment/

    Request body:
    {
        "remarks": "TXN123",
        "proof": "data:image/png;base64,..."
    }
    """

    def post(self, request):
        serializer = PaymentSubmitSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        data = serializer.validated_data
        return member_response(
            WorkflowService().submit_payment(request.user, data["remarks"], data["proof"])
        )


class MyBenefitsView(APIView):
    """GET /api/v1/me/benefits/"""

    def get(self, request):
        service = BenefitService()
        benefits = service.list_for_member(request.user)
        return Response(
            {
                "benefits": BenefitSerializer(benefits, many=True).data,
                "total": service.total_for(request.user),
            },
            status=status.HTTP_200_OK,
        )


class InboxView(APIView):
    """GET /api/v1/me/notifications/"""

    def get(self, request):
        notifications = NotificationService().inbox_for(request.user)
        return Response(
            NotificationSerializer(notifications, many=True).data, status=status.HTTP_200_OK
        )


class InboxReadView(APIView):
    """POST /api/v1/me/notifications/{notification_id}/read/"""

    def post(self, request, notification_id):
        result = NotificationService().mark_read(notification_id, request.user)
        if not result["success"]:
            return error_response(result)
        return Response(
            NotificationSerializer(result["notification"]).data, status=status.HTTP_200_OK
        )
