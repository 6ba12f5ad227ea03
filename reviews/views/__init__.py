from .team_views import team_add, team_get, team_deactivate_members
from .user_views import user_set_active, users_get_review
from .pull_request_views import pullrequest_create, pullrequest_merge, pullrequest_reassign
from .health_views import health_check
from .statistic_view import stats_assignments

__all__ = [
    'team_add', 'team_get', 'team_deactivate_members',
    'user_set_active', 'users_get_review',
    'pullrequest_create', 'pullrequest_merge', 'pullrequest_reassign',
    'health_check', 'stats_assignments',
]
