from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase


class FullWorkflowE2ETest(APITestCase):
    """
    End-to-end
    """

    def _create_team(self, team_name, member_ids, active=True):
        team_data = {
            "team_name": team_name,
            "members": [
                {"user_id": user_id, "username": f"Developer {user_id}", "is_active": active}
                for user_id in member_ids
            ]
        }
        response = self.client.post(reverse('reviews:team-add'), team_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        return response

    def _create_pr(self, pr_id, author_id):
        pr_data = {
            "pull_request_id": pr_id,
            "pull_request_name": f"PR {pr_id}",
            "author_id": author_id
        }
        response = self.client.post(reverse('reviews:pr-create'), pr_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        return response.data['pr']

    def _reviews_of(self, user_id):
        response = self.client.get(reverse('reviews:user-get-review'), {"user_id": user_id})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        return response.data['pull_requests']

    def test_complete_pr_workflow(self):
        """
        E2E тест: полный workflow создания команды, PR, переназначения и мержа
        """
        response = self._create_team("backend-team", ["dev1", "dev2", "dev3", "dev4"])
        self.assertEqual(response.data['team']['team_name'], 'backend-team')
        self.assertEqual(len(response.data['team']['members']), 4)

        # Проверяем что команда создана через GET API
        response = self.client.get(reverse('reviews:team-get'), {"team_name": "backend-team"})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['team_name'], 'backend-team')
        self.assertEqual([m['user_id'] for m in response.data['members']], ["dev1", "dev2", "dev3", "dev4"])

        pr = self._create_pr("feature-auth", "dev1")
        self.assertEqual(pr['pull_request_id'], 'feature-auth')
        self.assertEqual(pr['author_id'], 'dev1')
        self.assertEqual(pr['status'], 'OPEN')
        self.assertEqual(pr['assigned_reviewers'], ["dev2", "dev3"])
        self.assertIsNotNone(pr['createdAt'])
        self.assertIsNone(pr['mergedAt'])

        reviews = self._reviews_of("dev2")
        self.assertEqual(len(reviews), 1)
        self.assertEqual(reviews[0]['pull_request_id'], 'feature-auth')

        # dev4 - единственный подходящий кандидат
        reassign_data = {
            "pull_request_id": "feature-auth",
            "old_user_id": "dev2"
        }
        response = self.client.post(reverse('reviews:pr-reassign'), reassign_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['replaced_by'], 'dev4')
        self.assertEqual(response.data['pr']['assigned_reviewers'], ["dev4", "dev3"])

        self.assertEqual(len(self._reviews_of("dev2")), 0)
        self.assertEqual(len(self._reviews_of("dev4")), 1)

        merge_data = {"pull_request_id": "feature-auth"}
        response = self.client.post(reverse('reviews:pr-merge'), merge_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['pr']['status'], 'MERGED')
        merged_at = response.data['pr']['mergedAt']
        self.assertIsNotNone(merged_at)

        # Переназначение после мержа запрещено
        reassign_data = {"pull_request_id": "feature-auth", "old_user_id": "dev4"}
        response = self.client.post(reverse('reviews:pr-reassign'), reassign_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error']['code'], 'PR_MERGED')

        # Идемпотентность мержа
        response = self.client.post(reverse('reviews:pr-merge'), merge_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['pr']['status'], 'MERGED')
        self.assertEqual(response.data['pr']['mergedAt'], merged_at)

    def test_user_activation_workflow(self):
        """
        E2E тест: workflow с деактивацией пользователя
        """
        self._create_team("qa-team", ["qa1", "qa2", "qa3", "qa4"])
        pr = self._create_pr("test-fix", "qa1")
        self.assertEqual(pr['assigned_reviewers'], ["qa2", "qa3"])

        deactivate_data = {"user_id": "qa2", "is_active": False}
        response = self.client.post(reverse('reviews:user-set-active'), deactivate_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user'], {
            "user_id": "qa2", "username": "Developer qa2", "team_name": "qa-team", "is_active": False,
        })

        # qa2 снят с открытого PR, замена не подбирается
        self.assertEqual(self._reviews_of("qa2"), [])

        # Новый PR не получает неактивного ревьювера
        pr = self._create_pr("new-feature", "qa3")
        self.assertEqual(pr['assigned_reviewers'], ["qa1", "qa4"])

        # Активация не возвращает прежние назначения
        activate_data = {"user_id": "qa2", "is_active": True}
        response = self.client.post(reverse('reviews:user-set-active'), activate_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['user']['is_active'])
        self.assertEqual(self._reviews_of("qa2"), [])

    def test_team_deactivation_workflow(self):
        """
        E2E тест: деактивация всей команды
        """
        self._create_team("T", ["u1", "u2", "u3", "u4"])
        self._create_pr("p-merged", "u1")
        self.client.post(reverse('reviews:pr-merge'), {"pull_request_id": "p-merged"}, format='json')
        self._create_pr("p-open", "u1")

        response = self.client.post(
            reverse('reviews:team-deactivate-members'), {"team_name": "T"}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['team']['team_name'], 'T')
        self.assertTrue(all(not m['is_active'] for m in response.data['team']['members']))

        # В u2 остается только история замерженного PR
        reviews = self._reviews_of("u2")
        self.assertEqual([pr['pull_request_id'] for pr in reviews], ["p-merged"])
        self.assertEqual(reviews[0]['status'], 'MERGED')

    def test_error_scenarios_workflow(self):
        """
        E2E тест: различные сценарии ошибок
        """
        self._create_team("mobile-team", ["m1", "m2"])

        # PR с несуществующим автором
        pr_data = {
            "pull_request_id": "invalid-pr",
            "pull_request_name": "Invalid PR",
            "author_id": "nonexistent-user"
        }
        response = self.client.post(reverse('reviews:pr-create'), pr_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error']['code'], 'NOT_FOUND')

        self._create_pr("valid-pr", "m1")

        # PR с тем же ID
        valid_pr_data = {
            "pull_request_id": "valid-pr",
            "pull_request_name": "Valid PR",
            "author_id": "m1"
        }
        response = self.client.post(reverse('reviews:pr-create'), valid_pr_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error']['code'], 'PR_EXISTS')

        # Переназначение не назначенного ревьювера
        reassign_data = {"pull_request_id": "valid-pr", "old_user_id": "m1"}
        response = self.client.post(reverse('reviews:pr-reassign'), reassign_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error']['code'], 'NOT_ASSIGNED')

        # В команде из двух человек замены нет
        reassign_data = {"pull_request_id": "valid-pr", "old_user_id": "m2"}
        response = self.client.post(reverse('reviews:pr-reassign'), reassign_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error']['code'], 'NO_CANDIDATE')

        # Участник чужой команды
        team_data = {
            "team_name": "web-team",
            "members": [{"user_id": "m2", "username": "Mobile Dev 2", "is_active": True}]
        }
        response = self.client.post(reverse('reviews:team-add'), team_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['code'], 'USER_EXISTS')

    def test_edge_cases_workflow(self):
        """
        E2E тест: граничные случаи
        """
        self._create_team("small-team", ["s1"])

        # Только автор в команде - ревьюверов нет
        pr = self._create_pr("solo-pr", "s1")
        self.assertEqual(pr['assigned_reviewers'], [])

        team_data_inactive = {
            "team_name": "inactive-team",
            "members": [
                {"user_id": "i1", "username": "Inactive 1", "is_active": False},
                {"user_id": "i2", "username": "Inactive 2", "is_active": False},
                {"user_id": "i3", "username": "Active User", "is_active": True},
            ]
        }
        response = self.client.post(reverse('reviews:team-add'), team_data_inactive, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        # Единственный активный - автор, ревьюверов быть не должно
        pr = self._create_pr("inactive-team-pr", "i3")
        self.assertEqual(pr['assigned_reviewers'], [])


class StatsE2ETest(APITestCase):
    """
    E2E тест статистики назначений
    """

    def test_stats_assignments(self):
        """
        E2E тест: статистика после создания нескольких PR
        """
        team_data = {
            "team_name": "stats-team",
            "members": [
                {"user_id": f"u{i}", "username": f"User {i}", "is_active": True}
                for i in range(1, 4)
            ]
        }
        self.client.post(reverse('reviews:team-add'), team_data, format='json')
        for pr_id, author_id in [("p1", "u1"), ("p2", "u2")]:
            pr_data = {"pull_request_id": pr_id, "pull_request_name": pr_id, "author_id": author_id}
            self.client.post(reverse('reviews:pr-create'), pr_data, format='json')

        response = self.client.get(reverse('reviews:stats-assignments'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        by_user = {item['user_id']: item['assignments'] for item in response.data['by_user']}
        self.assertEqual(by_user, {"u1": 1, "u2": 1, "u3": 2})
        self.assertEqual(
            [(item['pull_request_id'], item['assignments']) for item in response.data['by_pr']],
            [("p1", 2), ("p2", 2)],
        )
