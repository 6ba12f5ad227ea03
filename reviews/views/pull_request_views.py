from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from ..exceptions import ServiceError
from ..serializers import (
    PullRequestCreateRequestSerializer,
    PullRequestMergeRequestSerializer,
    PullRequestReassignRequestSerializer,
    PullRequestSerializer,
)
from ..services import PullRequestService
from .common import server_error_response, service_error_response, validation_error_response


@api_view(['POST'])
def pullrequest_create(request):
    """POST /pullRequest/create - Создать PR"""
    payload = PullRequestCreateRequestSerializer(data=request.data)
    if not payload.is_valid():
        return validation_error_response(payload)

    try:
        pr = PullRequestService.create_pull_request(
            payload.validated_data['pull_request_id'],
            payload.validated_data['pull_request_name'],
            payload.validated_data['author_id'],
        )
        serializer = PullRequestSerializer(pr)

        return Response({
            'pr': serializer.data
        }, status=status.HTTP_201_CREATED)

    except ServiceError as e:
        return service_error_response(e)
    except Exception:
        return server_error_response('pullrequest_create')


@api_view(['POST'])
def pullrequest_merge(request):
    """POST /pullRequest/merge - Пометить PR как MERGED"""
    payload = PullRequestMergeRequestSerializer(data=request.data)
    if not payload.is_valid():
        return validation_error_response(payload)

    try:
        pr = PullRequestService.merge_pull_request(payload.validated_data['pull_request_id'])
        serializer = PullRequestSerializer(pr)

        return Response({
            'pr': serializer.data
        })

    except ServiceError as e:
        return service_error_response(e)
    except Exception:
        return server_error_response('pullrequest_merge')


@api_view(['POST'])
def pullrequest_reassign(request):
    """POST /pullRequest/reassign - Переназначить ревьювера"""
    payload = PullRequestReassignRequestSerializer(data=request.data)
    if not payload.is_valid():
        return validation_error_response(payload)

    try:
        pr, new_reviewer = PullRequestService.reassign_reviewer(
            payload.validated_data['pull_request_id'],
            payload.validated_data['old_user_id'],
        )
        serializer = PullRequestSerializer(pr)

        return Response({
            'pr': serializer.data,
            'replaced_by': new_reviewer.id
        })

    except ServiceError as e:
        return service_error_response(e)
    except Exception:
        return server_error_response('pullrequest_reassign')
