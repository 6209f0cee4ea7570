import logging

from django.db import transaction
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from membership.api.permissions import IsMasterAdmin
from membership.api.serializers import RegistrationQuestionSerializer
from membership.models import RegistrationQuestion
from membership.services.registration_service import RegistrationSchemaService

logger = logging.getLogger(__name__)


class QuestionListView(APIView):
    """
    API endpoint for the registration form definition.

    GET  /api/v1/registration/questions/   public, drives the sign-up form
    POST /api/v1/registration/questions/   master admin adds a question

    Request body:
    {
        "label": "Mandalam",
        "type": "DROPDOWN",
        "options": ["Vatakara", "Nadapuram"],
        "required": true,
        "systemMapping": "mandalam"
    }
    """

    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        return [IsMasterAdmin()]

    def get(self, request):
        questions = RegistrationQuestion.objects.all()
        return Response(
            RegistrationQuestionSerializer(questions, many=True).data, status=status.HTTP_200_OK
        )

    def post(self, request):
        serializer = RegistrationQuestionSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        errors = RegistrationSchemaService().validate(serializer.validated_data)
        if errors:
            return Response(errors, status=status.HTTP_400_BAD_REQUEST)

        question = serializer.save()
        logger.info(f"{request.user.full_name} added registration question {question.pk}")
        return Response(
            RegistrationQuestionSerializer(question).data, status=status.HTTP_201_CREATED
        )


class QuestionDetailView(APIView):
    """
    PUT    /api/v1/registration/questions/{question_id}/
    PATCH  /api/v1/registration/questions/{question_id}/
    DELETE /api/v1/registration/questions/{question_id}/
    """

    permission_classes = [IsMasterAdmin]

    def _update(self, request, question_id, partial):
        question = RegistrationQuestion.objects.filter(pk=question_id).first()
        if not question:
            return Response({"message": "Question not found"}, status=status.HTTP_404_NOT_FOUND)

        serializer = RegistrationQuestionSerializer(question, data=request.data, partial=partial)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        errors = RegistrationSchemaService().validate(serializer.validated_data, instance=question)
        if errors:
            return Response(errors, status=status.HTTP_400_BAD_REQUEST)

        question = serializer.save()
        return Response(RegistrationQuestionSerializer(question).data, status=status.HTTP_200_OK)

    def put(self, request, question_id):
        return self._update(request, question_id, partial=False)

    def patch(self, request, question_id):
        return self._update(request, question_id, partial=True)

    def delete(self, request, question_id):
        with transaction.atomic():
            deleted, _ = RegistrationQuestion.objects.filter(pk=question_id).delete()
        if not deleted:
            return Response({"message": "Question not found"}, status=status.HTTP_404_NOT_FOUND)
        logger.info(f"{request.user.full_name} deleted registration question {question_id}")
        return Response({"message": "Question deleted"}, status=status.HTTP_200_OK)


class QuestionReorderView(APIView):
    """
    POST /api/v1/registration/questions/reorder/

    Request body: {"order": ["q-1", "q-3", "q-2"]}
    """

    permission_classes = [IsMasterAdmin]

    def post(self, request):
        order = request.data.get("order")
        if not isinstance(order, list) or not order:
            return Response(
                {"message": "order must be a list of question ids"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        result = RegistrationSchemaService().reorder([str(item) for item in order])
        status_code = status.HTTP_200_OK if result["success"] else status.HTTP_400_BAD_REQUEST
        return Response({"message": result["message"]}, status=status_code)


class SchemaCoverageView(APIView):
    """
    Which member identity fields the current form explicitly maps.

    GET /api/v1/registration/coverage/
    """

    permission_classes = [IsMasterAdmin]

    def get(self, request):
        return Response(RegistrationSchemaService().coverage(), status=status.HTTP_200_OK)
