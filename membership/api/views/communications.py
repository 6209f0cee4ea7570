from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from membership.api.permissions import HasTabAccess, IsMember
from membership.api.serializers import (
    BenefitSerializer,
    MessageSerializer,
    NotificationSerializer,
    ReplySerializer,
    SendNotificationSerializer,
)
from membership.api.views.base import error_response
from membership.services.access_service import TAB_BENEFITS, TAB_MESSAGES, TAB_NOTIFICATIONS
from membership.services.benefit_service import BenefitService
from membership.services.communications_service import MessageService, NotificationService


class BenefitListView(APIView):
    """
    API endpoint for benefit payouts.

    GET  /api/v1/benefits/
    POST /api/v1/benefits/

    Request body:
    {
        "userId": "user-1f0c...",
        "type": "HOSPITAL",
        "amount": "1500.00",
        "date": "2025-03-01",
        "remarks": "Surgery support"
    }
    """

    permission_classes = [HasTabAccess]
    required_tabs = (TAB_BENEFITS,)

    def get(self, request):
        benefits = BenefitService().list_for(request.user)
        return Response(BenefitSerializer(benefits, many=True).data, status=status.HTTP_200_OK)

    def post(self, request):
        serializer = BenefitSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        result = BenefitService().add(request.user, data["member_id"], data)
        if not result["success"]:
            return error_response(result)
        return Response(BenefitSerializer(result["benefit"]).data, status=status.HTTP_201_CREATED)


class BenefitDetailView(APIView):
    """DELETE /api/v1/benefits/{benefit_id}/"""

    permission_classes = [HasTabAccess]
    required_tabs = (TAB_BENEFITS,)

    def delete(self, request, benefit_id):
        result = BenefitService().delete(benefit_id, request.user)
        if not result["success"]:
            return error_response(result)
        return Response({"message": result["message"]}, status=status.HTTP_200_OK)


class NotificationListView(APIView):
    """
    API endpoint for sending notifications.

    GET  /api/v1/notifications/
    POST /api/v1/notifications/

    Request body:
    {
        "title": "Renewal open",
        "message": "Please renew before March",
        "audience": "ALL",            // or a mandalam, or "INDIVIDUAL"
        "recipients": ["user-..."]    // INDIVIDUAL only
    }
    """

    permission_classes = [HasTabAccess]
    required_tabs = (TAB_NOTIFICATIONS,)

    def get(self, request):
        notifications = NotificationService().list_sent()
        return Response(
            NotificationSerializer(notifications, many=True).data, status=status.HTTP_200_OK
        )

    def post(self, request):
        serializer = SendNotificationSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        result = NotificationService().send(
            request.user,
            data["title"],
            data["message"],
            audience=data["audience"],
            recipients=data.get("recipients"),
        )
        if not result["success"]:
            return error_response(result)
        return Response(
            NotificationSerializer(result["notification"]).data, status=status.HTTP_201_CREATED
        )


class NotificationDetailView(APIView):
    """DELETE /api/v1/notifications/{notification_id}/"""

    permission_classes = [HasTabAccess]
    required_tabs = (TAB_NOTIFICATIONS,)

    def delete(self, request, notification_id):
        result = NotificationService().delete(notification_id)
        if not result["success"]:
            return error_response(result)
        return Response({"message": result["message"]}, status=status.HTTP_200_OK)


class MessageListView(APIView):
    """
    API endpoint for support messages.

    GET  /api/v1/messages/   own messages, or every message in scope for admins
    POST /api/v1/messages/   member opens a message

    Request body:
    {
        "subject": "Card not received",
        "content": "I paid last week but ..."
    }
    """

    permission_classes = [IsMember]
    required_tabs = (TAB_MESSAGES,)

    def get(self, request):
        if request.user.is_admin and not HasTabAccess().has_permission(request, self):
            return Response({"message": HasTabAccess.message}, status=status.HTTP_403_FORBIDDEN)
        messages = MessageService().list_for(request.user)
        return Response(MessageSerializer(messages, many=True).data, status=status.HTTP_200_OK)

    def post(self, request):
        serializer = MessageSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        result = MessageService().open(request.user, data["subject"], data["body"])
        if not result["success"]:
            return error_response(result)
        return Response(MessageSerializer(result["ticket"]).data, status=status.HTTP_201_CREATED)


class MessageReadView(APIView):
    """POST /api/v1/messages/{message_id}/read/"""

    permission_classes = [HasTabAccess]
    required_tabs = (TAB_MESSAGES,)

    def post(self, request, message_id):
        result = MessageService().mark_read(message_id, request.user)
        if not result["success"]:
            return error_response(result)
        return Response(MessageSerializer(result["ticket"]).data, status=status.HTTP_200_OK)


class MessageReplyView(APIView):
    """
    POST /api/v1/messages/{message_id}/reply/

    Request body: {"reply": "Your card is ready"}

    A second reply replaces the first.
    """

    permission_classes = [HasTabAccess]
    required_tabs = (TAB_MESSAGES,)

    def post(self, request, message_id):
        serializer = ReplySerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        result = MessageService().reply(
            message_id, request.user, serializer.validated_data["reply"]
        )
        if not result["success"]:
            return error_response(result)
        return Response(MessageSerializer(result["ticket"]).data, status=status.HTTP_200_OK)
