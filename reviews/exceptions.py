from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.views import exception_handler


class ServiceError(APIException):
    """
    Доменная ошибка сервиса со стабильным машиночитаемым кодом
    """
    status_code = status.HTTP_409_CONFLICT
    default_code = 'SERVICE_ERROR'
    default_detail = 'domain rule violated'

    @property
    def code(self) -> str:
        return self.detail.code

    @property
    def message(self) -> str:
        return str(self.detail)

    def as_response_data(self) -> dict:
        return error_body(self.code, self.message)


class TeamExists(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = 'TEAM_EXISTS'
    default_detail = 'team_name already exists'


class UserExists(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = 'USER_EXISTS'
    default_detail = 'user_id already belongs to another team'


class PullRequestExists(ServiceError):
    default_code = 'PR_EXISTS'
    default_detail = 'PR id already exists'


class PullRequestMerged(ServiceError):
    default_code = 'PR_MERGED'
    default_detail = 'cannot reassign on merged PR'


class NotAssigned(ServiceError):
    default_code = 'NOT_ASSIGNED'
    default_detail = 'reviewer is not assigned to this PR'


class NoCandidate(ServiceError):
    default_code = 'NO_CANDIDATE'
    default_detail = 'no active replacement candidate in team'


class ResourceNotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = 'NOT_FOUND'
    default_detail = 'resource not found'


def error_body(code: str, message: str, **extra) -> dict:
    return {'error': {'code': code, 'message': message, **extra}}


def validation_error_body(errors) -> dict:
    return error_body('VALIDATION_ERROR', 'request validation failed', fields=errors)


def api_exception_handler(exc, context):
    """
    Приводит ошибки уровня DRF (невалидный JSON, неверный метод и т.п.)
    к общему формату {"error": {"code", "message"}}
    """
    if isinstance(exc, ServiceError):
        response = exception_handler(exc, context)
        response.data = exc.as_response_data()
        return response

    response = exception_handler(exc, context)
    if response is None:
        # Непредвиденная ошибка: пусть её обработает Django (500)
        return None

    if isinstance(exc, ValidationError):
        response.data = validation_error_body(exc.detail)
    else:
        codes = exc.get_codes()
        code = codes.upper() if isinstance(codes, str) else 'ERROR'
        response.data = error_body(code, str(exc.detail))
    return response
