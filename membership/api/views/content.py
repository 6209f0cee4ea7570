import logging

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from membership.api.permissions import IsMasterAdmin, IsMember
from membership.api.serializers import CardConfigSerializer, NewsSerializer, SponsorSerializer
from membership.api.views.base import error_response
from membership.models import Member, News, Sponsor
from membership.services.content_service import get_card_config, update_card_config

logger = logging.getLogger(__name__)


class ContentListView(APIView):
    """
    Public listing plus master admin creation for a content collection.

    Anonymous visitors and members only see published or active entries.
    """

    model = None
    serializer_class = None
    visible_filter = {}

    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        return [IsMasterAdmin()]

    def get(self, request):
        entries = self.model.objects.all()
        if not (isinstance(request.user, Member) and request.user.is_master_admin):
            entries = entries.filter(**self.visible_filter)
        return Response(self.serializer_class(entries, many=True).data, status=status.HTTP_200_OK)

    def post(self, request):
        serializer = self.serializer_class(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        entry = serializer.save()
        logger.info(f"{request.user.full_name} created {self.model.__name__} {entry.pk}")
        return Response(self.serializer_class(entry).data, status=status.HTTP_201_CREATED)


class ContentDetailView(APIView):
    """Master admin edits or removes one content entry."""

    model = None
    serializer_class = None
    permission_classes = [IsMasterAdmin]

    def patch(self, request, entry_id):
        entry = self.model.objects.filter(pk=entry_id).first()
        if not entry:
            return Response({"message": "Not found"}, status=status.HTTP_404_NOT_FOUND)
        serializer = self.serializer_class(entry, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        entry = serializer.save()
        return Response(self.serializer_class(entry).data, status=status.HTTP_200_OK)

    def delete(self, request, entry_id):
        deleted, _ = self.model.objects.filter(pk=entry_id).delete()
        if not deleted:
            return Response({"message": "Not found"}, status=status.HTTP_404_NOT_FOUND)
        return Response({"message": "Deleted"}, status=status.HTTP_200_OK)


class NewsListView(ContentListView):
    """GET/POST /api/v1/news/"""

    model = News
    serializer_class = NewsSerializer
    visible_filter = {"is_published": True}


class NewsDetailView(ContentDetailView):
    """PATCH/DELETE /api/v1/news/{entry_id}/"""

    model = News
    serializer_class = NewsSerializer


class SponsorListView(ContentListView):
    """GET/POST /api/v1/sponsors/"""

    model = Sponsor
    serializer_class = SponsorSerializer
    visible_filter = {"is_active": True}


class SponsorDetailView(ContentDetailView):
    """PATCH/DELETE /api/v1/sponsors/{entry_id}/"""

    model = Sponsor
    serializer_class = SponsorSerializer


class CardConfigView(APIView):
    """
    Layout of the digital membership card.

    GET /api/v1/card-config/   any member
    PUT /api/v1/card-config/   master admin

    Request body:
    {
        "frontTemplateUrl": "https://.../front.png",
        "frontFields": [{"key": "full_name", "x": 40, "y": 120}],
        "backFields": [{"key": "q-blood-group", "x": 40, "y": 60}]
    }

    Field keys must be member attributes or registration question ids.
    """

    def get_permissions(self):
        if self.request.method == "GET":
            return [IsMember()]
        return [IsMasterAdmin()]

    def get(self, request):
        return Response(CardConfigSerializer(get_card_config()).data, status=status.HTTP_200_OK)

    def put(self, request):
        serializer = CardConfigSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        result = update_card_config(request.user, serializer.validated_data)
        if not result["success"]:
            return error_response(result)
        return Response(CardConfigSerializer(result["card"]).data, status=status.HTTP_200_OK)
