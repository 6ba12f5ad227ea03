from rest_framework.decorators import api_view
from rest_framework.response import Response

from ..serializers import AssignmentStatsSerializer
from ..services import StatsService
from .common import server_error_response


@api_view(['GET'])
def stats_assignments(request):
    """
    GET /stats/assignments - Количество назначений по пользователям и PR
    """
    try:
        stats = StatsService.get_assignment_stats()
        serializer = AssignmentStatsSerializer(stats)
        return Response(serializer.data)

    except Exception:
        return server_error_response('stats_assignments')
