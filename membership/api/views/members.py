import logging

from django.db.models import Q
from django.http import HttpResponse
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from membership.api.permissions import HasTabAccess, IsMasterAdmin
from membership.api.serializers import (
    CardMemberSerializer,
    ConfirmSerializer,
    MemberInputSerializer,
    MemberSerializer,
    RoleAssignmentSerializer,
)
from membership.api.views.base import error_response, member_context
from membership.api.views.profile import member_response
from membership.models import PaymentStatus
from membership.services import access_service
from membership.services.import_service import ImportService
from membership.services.member_service import MemberService
from membership.services.registration_service import RegistrationService
from membership.services.stats_service import dashboard_stats, export_members_csv
from membership.services.workflow_service import WorkflowService

logger = logging.getLogger(__name__)

MEMBER_LIST_TABS = (
    access_service.TAB_USER_APPROVALS,
    access_service.TAB_USERS_OVERVIEW,
    access_service.TAB_USERS_DATA,
    access_service.TAB_PAYMENT_MGMT,
    access_service.TAB_PAYMENT_SUBS,
    access_service.TAB_BENEFITS,
    access_service.TAB_NOTIFICATIONS,
)
APPROVAL_TABS = (access_service.TAB_USER_APPROVALS, access_service.TAB_USERS_OVERVIEW)
PAYMENT_TABS = (access_service.TAB_PAYMENT_MGMT, access_service.TAB_PAYMENT_SUBS)

# URL action -> (WorkflowService method, tabs allowed to run it)
WORKFLOW_ACTIONS = {
    "approve": ("approve", APPROVAL_TABS),
    "reject": ("reject", APPROVAL_TABS),
    "approve-payment": ("approve_payment", PAYMENT_TABS),
    "reject-payment": ("reject_payment", PAYMENT_TABS),
    "revoke-payment": ("revoke_payment", PAYMENT_TABS),
}


class MemberListView(APIView):
    """
    API endpoint to list members visible to the admin, or add one manually.

    GET /api/v1/members/

    Query filters: status, paymentStatus, mandalam, search, renewal=due

    POST /api/v1/members/

    Request body:
    {
        "fullName": "Ahmed",
        "mobile": "0501234567",
        "emiratesId": "784199012345678",
        "mandalam": "Vatakara",
        "emirate": "DUBAI"
    }
    """

    permission_classes = [HasTabAccess]
    required_tabs = MEMBER_LIST_TABS
    required_tabs_by_method = {"POST": (access_service.TAB_USERS_DATA,)}

    def get(self, request):
        members = access_service.visible_members(request.user)
        params = request.query_params
        if params.get("status"):
            members = members.filter(status=params["status"])
        if params.get("paymentStatus"):
            members = members.filter(payment_status=params["paymentStatus"])
        if params.get("mandalam"):
            members = members.filter(mandalam=params["mandalam"])
        if params.get("search"):
            term = params["search"].strip()
            members = members.filter(
                Q(full_name__icontains=term)
                | Q(membership_no__icontains=term)
                | Q(mobile__icontains=term)
                | Q(national_id__icontains=term)
                | Q(email__icontains=term)
            )

        context = member_context()
        if params.get("renewal") == "due":
            members = members.filter(registration_year__lt=context["active_year"]).exclude(
                payment_status=PaymentStatus.PAID
            )

        members = members.order_by("-created_at")
        return Response(
            MemberSerializer(members, many=True, context=context).data, status=status.HTTP_200_OK
        )

    def post(self, request):
        serializer = MemberInputSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        regions = access_service.scoped_mandalams(request.user)
        if regions is not None and data.get("mandalam") not in regions:
            return Response(
                {"message": "You can only add members to your own mandalams"},
                status=status.HTTP_403_FORBIDDEN,
            )
        result = RegistrationService().admin_add(data, request.user)
        return member_response(result, http_status=status.HTTP_201_CREATED)


class MemberDetailView(APIView):
    """
    GET    /api/v1/members/{member_id}/
    PATCH  /api/v1/members/{member_id}/
    DELETE /api/v1/members/{member_id}/   body: {"confirm": true}
    """

    permission_classes = [HasTabAccess]
    required_tabs = MEMBER_LIST_TABS
    required_tabs_by_method = {
        "PATCH": (access_service.TAB_USERS_DATA, access_service.TAB_USERS_OVERVIEW),
        "DELETE": (access_service.TAB_USERS_DATA, access_service.TAB_USERS_OVERVIEW),
    }

    def get(self, request, member_id):
        member = access_service.visible_members(request.user).filter(pk=member_id).first()
        if not member:
            return Response({"message": "Member not found"}, status=status.HTTP_404_NOT_FOUND)
        return Response(
            MemberSerializer(member, context=member_context()).data, status=status.HTTP_200_OK
        )

    def patch(self, request, member_id):
        serializer = MemberInputSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        return member_response(
            MemberService().admin_update(member_id, request.user, serializer.validated_data)
        )

    def delete(self, request, member_id):
        confirm = ConfirmSerializer(data=request.data)
        confirm.is_valid(raise_exception=True)
        result = MemberService().delete(
            member_id, request.user, confirm=confirm.validated_data["confirm"]
        )
        if not result["success"]:
            return error_response(result)
        return Response({"message": result["message"]}, status=status.HTTP_200_OK)


class MemberWorkflowView(APIView):
    """
    API endpoint for approval and payment decisions.

    POST /api/v1/members/{member_id}/{action}/

    action: approve, reject, approve-payment, reject-payment, revoke-payment

    Request body:
    {
        "confirm": true
    }

    Without "confirm": true the request is rejected and nothing changes.
    """

    permission_classes = [HasTabAccess]

    def initial(self, request, *args, **kwargs):
        action = WORKFLOW_ACTIONS.get(kwargs.get("action"))
        self.required_tabs = action[1] if action else ()
        super().initial(request, *args, **kwargs)

    def post(self, request, member_id, action):
        if action not in WORKFLOW_ACTIONS:
            return Response(
                {"message": f"Unknown action {action}"}, status=status.HTTP_404_NOT_FOUND
            )

        confirm = ConfirmSerializer(data=request.data)
        confirm.is_valid(raise_exception=True)

        method_name, _ = WORKFLOW_ACTIONS[action]
        transition = getattr(WorkflowService(), method_name)
        result = transition(member_id, request.user, confirm=confirm.validated_data["confirm"])
        return member_response(result)


class MemberRoleView(APIView):
    """
    API endpoint to grant or withdraw admin access.

    POST /api/v1/members/{member_id}/role/

    Request body:
    {
        "role": "CUSTOM_ADMIN",
        "permissions": ["User Approvals", "Payment Mgmt"],
        "assignedMandalams": ["Vatakara"]
    }
    """

    permission_classes = [IsMasterAdmin]

    def post(self, request, member_id):
        serializer = RoleAssignmentSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        data = serializer.validated_data
        result = MemberService().assign_role(
            member_id,
            request.user,
            data["role"],
            permissions=data.get("permissions"),
            assigned_mandalams=data.get("assigned_mandalams"),
        )
        return member_response(result)


class MemberImportView(APIView):
    """
    API endpoint to bulk import members from CSV.

    POST /api/v1/members/import/

    Either a multipart upload with a "file" part, or JSON {"csv": "<text>"}.
    """

    permission_classes = [IsMasterAdmin]

    def post(self, request):
        upload = request.FILES.get("file")
        content = upload.read() if upload else request.data.get("csv")
        if not content:
            return Response({"message": "No CSV data provided"}, status=status.HTTP_400_BAD_REQUEST)

        result = ImportService().import_csv(content, actor=request.user)
        if not result["success"]:
            return error_response(result)
        return Response(
            {
                "message": result["message"],
                "created": result["created"],
                "skipped": result["skipped"],
                "progress": result["progress"],
            },
            status=status.HTTP_201_CREATED,
        )


class MemberExportView(APIView):
    """GET /api/v1/members/export/  CSV download of every visible member."""

    permission_classes = [IsMasterAdmin]

    def get(self, request):
        response = HttpResponse(export_members_csv(request.user), content_type="text/csv")
        response["Content-Disposition"] = 'attachment; filename="members.csv"'
        return response


class StatsView(APIView):
    """GET /api/v1/stats/  dashboard counts for the admin's members."""

    permission_classes = [HasTabAccess]

    def get(self, request):
        stats = dashboard_stats(request.user)
        return Response(
            {
                "year": stats["year"],
                "total": stats["total"],
                "new": stats["new"],
                "reReg": stats["re_reg"],
                "pending": stats["pending"],
                "approved": stats["approved"],
                "rejected": stats["rejected"],
                "paid": stats["paid"],
                "admins": stats["admins"],
                "collected": stats["collected"],
            },
            status=status.HTTP_200_OK,
        )


class VerifyCardView(APIView):
    """
    Public check of a scanned membership card.

    GET /api/v1/verify/{member_id}/
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request, member_id):
        result = MemberService().verify_card(member_id)
        if not result["success"]:
            return Response(
                {"verified": False, "message": result["message"]},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(
            {
                "verified": result["verified"],
                "message": result["message"],
                "member": CardMemberSerializer(result["member"]).data,
            },
            status=status.HTTP_200_OK,
        )
