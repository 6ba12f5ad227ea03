from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from ..exceptions import ServiceError
from ..serializers import TeamAddRequestSerializer, TeamNameRequestSerializer, TeamSerializer
from ..services import TeamService
from .common import server_error_response, service_error_response, validation_error_response


@api_view(['POST'])
def team_add(request):
    """POST /team/add - Создать команду с участниками"""
    payload = TeamAddRequestSerializer(data=request.data)
    if not payload.is_valid():
        return validation_error_response(payload)

    try:
        team = TeamService.create_team_with_members(
            payload.validated_data['team_name'],
            payload.validated_data['members'],
        )
        serializer = TeamSerializer(team)

        return Response({
            'team': serializer.data
        }, status=status.HTTP_201_CREATED)

    except ServiceError as e:
        return service_error_response(e)
    except Exception:
        return server_error_response('team_add')


@api_view(['GET'])
def team_get(request):
    """GET /team/get - Получить команду с участниками"""
    payload = TeamNameRequestSerializer(data=request.query_params)
    if not payload.is_valid():
        return validation_error_response(payload)

    try:
        team = TeamService.get_team_with_members(payload.validated_data['team_name'])
        serializer = TeamSerializer(team)

        return Response(serializer.data)

    except ServiceError as e:
        return service_error_response(e)
    except Exception:
        return server_error_response('team_get')


@api_view(['POST'])
def team_deactivate_members(request):
    """POST /team/deactivateMembers - Деактивировать всех участников команды"""
    payload = TeamNameRequestSerializer(data=request.data)
    if not payload.is_valid():
        return validation_error_response(payload)

    try:
        team = TeamService.deactivate_team_members(payload.validated_data['team_name'])
        serializer = TeamSerializer(team)

        return Response({
            'team': serializer.data
        })

    except ServiceError as e:
        return service_error_response(e)
    except Exception:
        return server_error_response('team_deactivate_members')
