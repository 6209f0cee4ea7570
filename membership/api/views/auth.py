import logging

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from membership.api.authentication import login_member, logout_member
from membership.api.serializers import LoginSerializer, MemberSerializer, RegisterSerializer
from membership.api.views.base import error_response, member_context
from membership.models import Member
from membership.services.access_service import can_switch_view, view_mode, visible_tabs
from membership.services.member_service import authenticate
from membership.services.registration_service import RegistrationService

logger = logging.getLogger(__name__)


def session_payload(member: Member) -> dict:
    return {
        "member": MemberSerializer(member, context=member_context()).data,
        "viewMode": view_mode(member),
        "tabs": visible_tabs(member),
        "canSwitchView": can_switch_view(member),
        "profileCompletionRequired": member.is_imported,
    }


class LoginView(APIView):
    """
    API endpoint to log in with email or mobile number.

    POST /api/v1/auth/login/

    Request body:
    {
        "identifier": "member@example.com",
        "password": "secret123"
    }
    """

    permission_classes = [AllowAny]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        member = authenticate(
            serializer.validated_data["identifier"], serializer.validated_data["password"]
        )
        if member is None:
            logger.info("Rejected login attempt")
            return Response(
                {"message": "Invalid credentials."}, status=status.HTTP_401_UNAUTHORIZED
            )

        login_member(request, member)
        logger.info(f"Member {member.pk} logged in")
        return Response(session_payload(member), status=status.HTTP_200_OK)


class LogoutView(APIView):
    """POST /api/v1/auth/logout/"""

    permission_classes = [AllowAny]

    def post(self, request):
        logout_member(request)
        return Response({"message": "Logged out"}, status=status.HTTP_200_OK)


class SessionView(APIView):
    """
    Restore the logged-in member after a page reload.

    GET /api/v1/auth/session/
    """

    def get(self, request):
        return Response(session_payload(request.user), status=status.HTTP_200_OK)


class RegisterView(APIView):
    """
    API endpoint for self-registration through the dynamic form.

    POST /api/v1/auth/register/

    Request body:
    {
        "answers": {"q-name": "Ahmed", "q-mobile": "0501234567", ...},
        "password": "secret123",
        "confirmPassword": "secret123"
    }

    The new member is logged in straight away.
    """

    permission_classes = [AllowAny]

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        result = RegistrationService().register(
            data["answers"], data["password"], data.get("confirm_password")
        )
        if not result["success"]:
            return error_response(result)

        member = result["member"]
        login_member(request, member)
        payload = session_payload(member)
        payload["message"] = result["message"]
        return Response(payload, status=status.HTTP_201_CREATED)
