import logging
import random

from django.db import IntegrityError, transaction
from django.db.models import Count, F, Q
from django.utils import timezone

from .exceptions import (
    NoCandidate,
    NotAssigned,
    PullRequestExists,
    PullRequestMerged,
    ResourceNotFound,
    TeamExists,
    UserExists,
)
from .models import MAX_REVIEWERS, PullRequest, ReviewerAssignment, Team, User

logger = logging.getLogger(__name__)


class TeamService:
    """
    Сервис для управления командами и пользователями
    """

    @classmethod
    @transaction.atomic
    def create_team_with_members(cls, team_name: str, members_data: list) -> Team:
        """
        Создает команду с пользователями

        Args:
            team_name: Название команды
            members_data: Список данных пользователей (user_id, username, is_active)

        Returns:
            Team: Созданная команда

        Raises:
            TeamExists: Если команда уже существует
            UserExists: Если пользователь уже состоит в другой команде
        """
        if Team.objects.filter(name=team_name).exists():
            raise TeamExists()

        # Команда новая, значит любой уже существующий user_id принадлежит чужой команде
        member_ids = [member['user_id'] for member in members_data]
        taken = list(User.objects.filter(id__in=member_ids).values_list('id', flat=True))
        if taken:
            raise UserExists(f"user_id '{sorted(taken)[0]}' already belongs to another team")

        try:
            with transaction.atomic():
                team = Team.objects.create(name=team_name)
        except IntegrityError:
            raise TeamExists()

        for member_data in members_data:
            cls._create_member(team, member_data)

        logger.info("Team '%s' created with %d members", team_name, len(members_data))
        return team

    @classmethod
    def _create_member(cls, team: Team, member_data: dict) -> User:
        try:
            with transaction.atomic():
                return User.objects.create(
                    id=member_data['user_id'],
                    username=member_data['username'],
                    team=team,
                    is_active=member_data['is_active'],
                )
        except IntegrityError:
            # Пользователя создали параллельно в другой команде
            raise UserExists(f"user_id '{member_data['user_id']}' already belongs to another team")

    @classmethod
    def get_team_with_members(cls, team_name: str) -> Team:
        team = Team.objects.prefetch_related('members').filter(name=team_name).first()
        if team is None:
            raise ResourceNotFound('team not found')
        return team

    @classmethod
    @transaction.atomic
    def deactivate_team_members(cls, team_name: str) -> Team:
        """
        Деактивирует всех участников команды и снимает их с открытых PR.

        Смена флага и очистка ревьюверов выполняются в одной транзакции,
        чтобы между ними не проскочило создание PR с уже неактивным ревьювером.
        Замена снятым ревьюверам не подбирается.

        Raises:
            ResourceNotFound: Если команда не найдена
        """
        team = Team.objects.filter(name=team_name).first()
        if team is None:
            raise ResourceNotFound('team not found')

        member_ids = list(
            User.objects.select_for_update()
            .filter(team=team)
            .order_by('id')
            .values_list('id', flat=True)
        )

        if member_ids:
            User.objects.filter(id__in=member_ids).update(is_active=False)
            removed = PullRequestService.detach_reviewers(member_ids)
        else:
            removed = 0

        logger.info(
            "Team '%s' deactivated: %d members, %d open review assignments removed",
            team_name, len(member_ids), removed,
        )
        return team


class UserService:
    """
    Сервис для управления пользователями
    """

    @classmethod
    @transaction.atomic
    def set_user_active_status(cls, user_id: str, is_active: bool) -> User:
        """
        Устанавливает флаг активности пользователя

        При деактивации пользователь снимается с ревью всех незамерженных PR.
        Повторная активация только меняет флаг, прежние назначения не возвращаются.

        Args:
            user_id: ID пользователя
            is_active: Статус активности

        Returns:
            User: Обновленный пользователь

        Raises:
            ResourceNotFound: Если пользователь не найден
        """
        user = User.objects.select_for_update().filter(id=user_id).first()
        if user is None:
            raise ResourceNotFound('user not found')

        user.is_active = is_active
        user.save(update_fields=['is_active'])

        if not is_active:
            removed = PullRequestService.detach_reviewers([user.id])
            logger.info("User '%s' deactivated, %d open review assignments removed", user_id, removed)
        else:
            logger.info("User '%s' activated", user_id)

        return user

    @classmethod
    def get_user_review_assignments(cls, user_id: str) -> list:
        """
        Получает PR'ы, где пользователь назначен ревьювером.
        Для неизвестного пользователя возвращается пустой список.
        """
        assigned_prs = (
            PullRequest.objects
            .filter(assignments__reviewer_id=user_id)
            .order_by('id')
        )
        return list(assigned_prs)


class PullRequestService:
    """
    Сервис для управления Pull Request'ами
    """

    @classmethod
    @transaction.atomic
    def create_pull_request(cls, pr_id: str, pr_name: str, author_id: str) -> PullRequest:
        """
        Создает PR и назначает до 2 ревьюверов из команды автора

        Args:
            pr_id: ID PR
            pr_name: Название PR
            author_id: ID автора

        Returns:
            PullRequest: Созданный PR

        Raises:
            PullRequestExists: Если PR уже существует
            ResourceNotFound: Если автор не найден
        """
        if PullRequest.objects.filter(id=pr_id).exists():
            raise PullRequestExists()

        author = User.objects.filter(id=author_id).first()
        if author is None:
            raise ResourceNotFound('author or team not found')

        reviewers = cls._assign_reviewers(author)

        # Параллельное создание с тем же id ловим на первичном ключе
        try:
            with transaction.atomic():
                pr = PullRequest.objects.create(id=pr_id, name=pr_name, author=author)
        except IntegrityError:
            raise PullRequestExists()

        ReviewerAssignment.objects.bulk_create([
            ReviewerAssignment(pull_request=pr, reviewer=reviewer, position=position)
            for position, reviewer in enumerate(reviewers)
        ])

        logger.info(
            "PR '%s' created by '%s', reviewers: %s",
            pr_id, author_id, [reviewer.id for reviewer in reviewers],
        )
        return pr

    @classmethod
    def _assign_reviewers(cls, author: User) -> list:
        """
        Первые по user_id активные участники команды автора, не считая самого автора
        """
        available_reviewers = (
            User.objects
            .filter(team_id=author.team_id, is_active=True)
            .exclude(id=author.id)
            .order_by('id')
        )
        return list(available_reviewers[:MAX_REVIEWERS])

    @classmethod
    @transaction.atomic
    def merge_pull_request(cls, pr_id: str) -> PullRequest:
        """
        Помечает PR как MERGED. Повторный вызов не меняет merged_at.

        Raises:
            ResourceNotFound: Если PR не найден
        """
        pr = PullRequest.objects.select_for_update().filter(id=pr_id).first()
        if pr is None:
            raise ResourceNotFound('pull request not found')

        if not pr.is_merged:
            pr.status = PullRequest.Status.MERGED
            pr.merged_at = timezone.now()
            pr.save(update_fields=['status', 'merged_at'])
            logger.info("PR '%s' merged", pr_id)

        return pr

    @classmethod
    @transaction.atomic
    def reassign_reviewer(cls, pr_id: str, old_user_id: str) -> tuple:
        """
        Переназначает ревьювера на случайного активного участника его команды

        Строка PR блокируется до конца транзакции, поэтому параллельные
        переназначения и мерж одного и того же PR выполняются по очереди.

        Args:
            pr_id: ID PR
            old_user_id: ID старого ревьювера

        Returns:
            tuple: (PullRequest, новый ревьювер)

        Raises:
            ResourceNotFound: Если PR или пользователь не найден
            PullRequestMerged: Если PR уже замержен
            NotAssigned: Если пользователь не назначен на PR
            NoCandidate: Если в команде нет подходящей замены
        """
        pr = PullRequest.objects.select_for_update().filter(id=pr_id).first()
        if pr is None:
            raise ResourceNotFound('pull request not found')

        if pr.is_merged:
            raise PullRequestMerged()

        assignments = list(pr.assignments.all())
        old_assignment = next((a for a in assignments if a.reviewer_id == old_user_id), None)
        if old_assignment is None:
            raise NotAssigned()

        old_reviewer = User.objects.filter(id=old_user_id).first()
        if old_reviewer is None:
            raise ResourceNotFound('user not found')

        # Исключаем автора и всех уже назначенных, включая старого ревьювера
        current_reviewer_ids = [assignment.reviewer_id for assignment in assignments]
        available_candidates = list(
            User.objects
            .filter(team_id=old_reviewer.team_id, is_active=True)
            .exclude(id=pr.author_id)
            .exclude(id__in=current_reviewer_ids)
            .order_by('id')
        )

        if not available_candidates:
            raise NoCandidate()

        new_reviewer = random.choice(available_candidates)

        # Замена на той же позиции, второй ревьювер остается на месте
        old_assignment.reviewer = new_reviewer
        old_assignment.save(update_fields=['reviewer'])

        logger.info("PR '%s': reviewer '%s' replaced by '%s'", pr_id, old_user_id, new_reviewer.id)
        return pr, new_reviewer

    @classmethod
    def detach_reviewers(cls, user_ids: list) -> int:
        """
        Снимает пользователей с ревью всех незамерженных PR одним запросом.
        Замерженные PR не трогаются: история не переписывается.

        Returns:
            int: Количество удаленных назначений
        """
        deleted, _ = (
            ReviewerAssignment.objects
            .filter(reviewer_id__in=user_ids)
            .exclude(pull_request__status=PullRequest.Status.MERGED)
            .delete()
        )
        return deleted


class StatsService:
    """
    Сервис для сбора статистики
    """

    @classmethod
    def get_assignment_stats(cls) -> dict:
        """
        Returns:
            dict: Количество назначений по пользователям и по PR
        """
        by_user = (
            ReviewerAssignment.objects
            .values(user_id=F('reviewer_id'))
            .annotate(
                assignments=Count('id'),
                open_assignments=Count('id', filter=Q(pull_request__status=PullRequest.Status.OPEN)),
                merged_assignments=Count('id', filter=Q(pull_request__status=PullRequest.Status.MERGED)),
            )
            .order_by('user_id')
        )

        # Имя assignments занято обратной связью, поэтому считаем под другим алиасом
        by_pr = (
            PullRequest.objects
            .annotate(reviewer_count=Count('assignments'))
            .values('id', 'status', 'reviewer_count')
            .order_by('id')
        )

        return {
            'by_user': list(by_user),
            'by_pr': [
                {
                    'pull_request_id': row['id'],
                    'status': row['status'],
                    'assignments': row['reviewer_count'],
                }
                for row in by_pr
            ],
        }
