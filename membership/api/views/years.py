from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from membership.api.permissions import HasTabAccess
from membership.api.serializers import StartYearSerializer, YearConfigSerializer
from membership.api.views.base import error_response
from membership.services.access_service import TAB_NEW_YEAR
from membership.services.year_service import YearService, active_year


class YearListView(APIView):
    """
    API endpoint for registration years.

    GET  /api/v1/years/   all years, newest first, plus the active year
    POST /api/v1/years/   start a new year (master admin)

    Request body:
    {
        "year": 2026,
        "confirm": true
    }

    Starting a year archives every other year and resets every member's
    payment status to UNPAID.
    """

    permission_classes = [HasTabAccess]
    required_tabs_by_method = {"POST": (TAB_NEW_YEAR,)}

    def get(self, request):
        years = YearService().list_years()
        return Response(
            {"activeYear": active_year(), "years": YearConfigSerializer(years, many=True).data},
            status=status.HTTP_200_OK,
        )

    def post(self, request):
        serializer = StartYearSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        result = YearService().start_new_year(
            request.user, year=data.get("year"), confirm=data["confirm"]
        )
        if not result["success"]:
            return error_response(result)
        return Response(
            {
                "message": result["message"],
                "year": YearConfigSerializer(result["year"]).data,
                "reset": result["reset"],
            },
            status=status.HTTP_201_CREATED,
        )
