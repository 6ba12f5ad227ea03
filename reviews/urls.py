from django.urls import path
from .views import team_views, user_views, health_views, pull_request_views, statistic_view

app_name = 'reviews'

urlpatterns = [
    path('team/add', team_views.team_add, name='team-add'),
    path('team/get', team_views.team_get, name='team-get'),
    path('team/deactivateMembers', team_views.team_deactivate_members, name='team-deactivate-members'),
    path('users/setIsActive', user_views.user_set_active, name='user-set-active'),
    path('users/getReview', user_views.users_get_review, name='user-get-review'),
    path('pullRequest/create', pull_request_views.pullrequest_create, name='pr-create'),
    path('pullRequest/merge', pull_request_views.pullrequest_merge, name='pr-merge'),
    path('pullRequest/reassign', pull_request_views.pullrequest_reassign, name='pr-reassign'),
    path('stats/assignments', statistic_view.stats_assignments, name='stats-assignments'),
    path('health', health_views.health_check, name='health-check'),
]
