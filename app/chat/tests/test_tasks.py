"""
Tests for chat Celery tasks.

Tasks are called directly; the broker is not involved.
"""

from authentication.tests.factories import UserFactory
from chat.tasks import reset_online_flags


class TestResetOnlineFlags:
    def test_clears_every_online_flag(self, db):
        online = UserFactory.create_batch(2, is_online=True)
        offline = UserFactory(is_online=False)

        cleared = reset_online_flags()

        assert cleared == 2
        for user in [*online, offline]:
            user.refresh_from_db()
            assert user.is_online is False

    def test_nothing_to_clear(self, db):
        UserFactory(is_online=False)

        assert reset_online_flags() == 0

    def test_logs_count(self, db, mocker):
        logger = mocker.patch("chat.tasks.logger")
        UserFactory(is_online=True)

        reset_online_flags()

        logger.info.assert_called_once_with("reset_online_flags cleared 1 users")
