from rest_framework.decorators import api_view
from rest_framework.response import Response

from ..exceptions import ServiceError
from ..serializers import (
    PullRequestShortSerializer,
    SetIsActiveRequestSerializer,
    UserIdRequestSerializer,
    UserSerializer,
)
from ..services import UserService
from .common import server_error_response, service_error_response, validation_error_response


@api_view(['POST'])
def user_set_active(request):
    """POST /users/setIsActive - Установить флаг активности пользователя"""
    payload = SetIsActiveRequestSerializer(data=request.data)
    if not payload.is_valid():
        return validation_error_response(payload)

    try:
        user = UserService.set_user_active_status(
            payload.validated_data['user_id'],
            payload.validated_data['is_active'],
        )
        serializer = UserSerializer(user)

        return Response({
            'user': serializer.data
        })

    except ServiceError as e:
        return service_error_response(e)
    except Exception:
        return server_error_response('user_set_active')


@api_view(['GET'])
def users_get_review(request):
    """GET /users/getReview - Получить PR'ы, где пользователь назначен ревьювером"""
    payload = UserIdRequestSerializer(data=request.query_params)
    if not payload.is_valid():
        return validation_error_response(payload)

    user_id = payload.validated_data['user_id']
    try:
        assigned_prs = UserService.get_user_review_assignments(user_id)
        serializer = PullRequestShortSerializer(assigned_prs, many=True)

        return Response({
            'user_id': user_id,
            'pull_requests': serializer.data
        })

    except Exception:
        return server_error_response('users_get_review')
