from django.db import models


MAX_REVIEWERS = 2


class Team(models.Model):
    name = models.CharField(max_length=100, primary_key=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'teams'


class User(models.Model):
    id = models.CharField(max_length=50, primary_key=True)
    username = models.CharField(max_length=100)
    team = models.ForeignKey(Team, on_delete=models.PROTECT, related_name='members', db_column='team_name')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.username} ({self.id})"

    class Meta:
        db_table = 'users'
        ordering = ['id']
        indexes = [
            models.Index(fields=['team', 'is_active'], name='users_team_active_idx'),
        ]


class PullRequest(models.Model):
    class Status(models.TextChoices):
        OPEN = 'OPEN', 'Open'
        MERGED = 'MERGED', 'Merged'

    id = models.CharField(max_length=100, primary_key=True)
    name = models.CharField(max_length=200)
    author = models.ForeignKey(User, on_delete=models.PROTECT, related_name='authored_prs')
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.OPEN)
    reviewers = models.ManyToManyField(
        User,
        through='ReviewerAssignment',
        related_name='assigned_prs',
        blank=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    merged_at = models.DateTimeField(null=True, blank=True)

    @property
    def is_merged(self) -> bool:
        return self.status == self.Status.MERGED

    @property
    def reviewer_ids(self) -> list:
        """Ревьюверы в порядке назначения (по позиции)"""
        return [assignment.reviewer_id for assignment in self.assignments.all()]

    def __str__(self):
        return f"{self.name} ({self.id})"

    class Meta:
        db_table = 'pull_requests'
        ordering = ['id']


class ReviewerAssignment(models.Model):
    """
    Назначение ревьювера на PR.

    Позиция задает порядок ревьюверов и ограничивает их количество:
    на один PR допустимы только позиции 0 и 1.
    """
    pull_request = models.ForeignKey(PullRequest, on_delete=models.CASCADE, related_name='assignments')
    reviewer = models.ForeignKey(User, on_delete=models.PROTECT, related_name='review_assignments')
    position = models.PositiveSmallIntegerField()

    def __str__(self):
        return f"{self.pull_request_id} -> {self.reviewer_id} [{self.position}]"

    class Meta:
        db_table = 'pr_reviewers'
        ordering = ['position']
        constraints = [
            models.UniqueConstraint(fields=['pull_request', 'reviewer'], name='pr_reviewers_unique_reviewer'),
            models.UniqueConstraint(fields=['pull_request', 'position'], name='pr_reviewers_unique_position'),
            models.CheckConstraint(condition=models.Q(position__lt=MAX_REVIEWERS), name='pr_reviewers_max_two'),
        ]
