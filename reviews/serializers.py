from rest_framework import serializers

from .models import PullRequest, Team, User


class TeamMemberSerializer(serializers.ModelSerializer):
    user_id = serializers.CharField(source='id', max_length=50)
    username = serializers.CharField(max_length=100)
    is_active = serializers.BooleanField()

    class Meta:
        model = User
        fields = ['user_id', 'username', 'is_active']


class TeamSerializer(serializers.ModelSerializer):
    team_name = serializers.CharField(source='name')
    members = TeamMemberSerializer(many=True, source='members.all')

    class Meta:
        model = Team
        fields = ['team_name', 'members']


class UserSerializer(serializers.ModelSerializer):
    user_id = serializers.CharField(source='id')
    username = serializers.CharField()
    team_name = serializers.CharField(source='team_id')
    is_active = serializers.BooleanField()

    class Meta:
        model = User
        fields = ['user_id', 'username', 'team_name', 'is_active']


class PullRequestSerializer(serializers.ModelSerializer):
    pull_request_id = serializers.CharField(source='id')
    pull_request_name = serializers.CharField(source='name')
    author_id = serializers.CharField()
    status = serializers.CharField()
    assigned_reviewers = serializers.ListField(source='reviewer_ids', child=serializers.CharField())
    createdAt = serializers.DateTimeField(source='created_at', format='%Y-%m-%dT%H:%M:%SZ')
    mergedAt = serializers.DateTimeField(source='merged_at', format='%Y-%m-%dT%H:%M:%SZ', allow_null=True)

    class Meta:
        model = PullRequest
        fields = [
            'pull_request_id', 'pull_request_name', 'author_id',
            'status', 'assigned_reviewers', 'createdAt', 'mergedAt'
        ]


class PullRequestShortSerializer(serializers.ModelSerializer):
    pull_request_id = serializers.CharField(source='id')
    pull_request_name = serializers.CharField(source='name')
    author_id = serializers.CharField()
    status = serializers.CharField()

    class Meta:
        model = PullRequest
        fields = ['pull_request_id', 'pull_request_name', 'author_id', 'status']


class UserAssignmentStatsSerializer(serializers.Serializer):
    user_id = serializers.CharField()
    assignments = serializers.IntegerField()
    open_assignments = serializers.IntegerField()
    merged_assignments = serializers.IntegerField()


class PullRequestAssignmentStatsSerializer(serializers.Serializer):
    pull_request_id = serializers.CharField()
    status = serializers.CharField()
    assignments = serializers.IntegerField()


class AssignmentStatsSerializer(serializers.Serializer):
    by_user = UserAssignmentStatsSerializer(many=True)
    by_pr = PullRequestAssignmentStatsSerializer(many=True)


# Входящие запросы

class TeamMemberRequestSerializer(serializers.Serializer):
    user_id = serializers.CharField(max_length=50)
    username = serializers.CharField(max_length=100)
    is_active = serializers.BooleanField()


class TeamAddRequestSerializer(serializers.Serializer):
    team_name = serializers.CharField(max_length=100)
    members = TeamMemberRequestSerializer(many=True)

    def validate_members(self, members):
        seen = set()
        for member in members:
            if member['user_id'] in seen:
                raise serializers.ValidationError(f"duplicate user_id '{member['user_id']}'")
            seen.add(member['user_id'])
        return members


class TeamNameRequestSerializer(serializers.Serializer):
    team_name = serializers.CharField(max_length=100)


class SetIsActiveRequestSerializer(serializers.Serializer):
    user_id = serializers.CharField(max_length=50)
    is_active = serializers.BooleanField()


class UserIdRequestSerializer(serializers.Serializer):
    user_id = serializers.CharField(max_length=50)


class PullRequestCreateRequestSerializer(serializers.Serializer):
    pull_request_id = serializers.CharField(max_length=100)
    pull_request_name = serializers.CharField(max_length=200)
    author_id = serializers.CharField(max_length=50)


class PullRequestMergeRequestSerializer(serializers.Serializer):
    pull_request_id = serializers.CharField(max_length=100)


class PullRequestReassignRequestSerializer(serializers.Serializer):
    pull_request_id = serializers.CharField(max_length=100)
    old_user_id = serializers.CharField(max_length=50)
