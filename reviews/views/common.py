import logging

from rest_framework import status
from rest_framework.response import Response

from ..exceptions import ServiceError, error_body, validation_error_body

logger = logging.getLogger(__name__)


def validation_error_response(serializer) -> Response:
    return Response(validation_error_body(serializer.errors), status=status.HTTP_400_BAD_REQUEST)


def service_error_response(error: ServiceError) -> Response:
    return Response(error.as_response_data(), status=error.status_code)


def server_error_response(operation: str) -> Response:
    # Детали инфраструктурной ошибки наружу не отдаем
    logger.exception('%s failed', operation)
    return Response(
        error_body('SERVER_ERROR', 'Internal server error'),
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
