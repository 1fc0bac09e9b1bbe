from app.config import TokenRefreshConfig
from app.exceptions import TokenRefreshError
from app.models.account import Account
from app.services.token_refresh_service import TokenRefreshService
from app.services.token_refresher import TokenRefresher
from tests.fakes import FakeAccountRepo


class StubRefresher(TokenRefresher):
    def __init__(self, due=(), failing=()):
        self.due = set(due)
        self.failing = set(failing)
        self.windows = []

    def can_refresh(self, account):
        return account.platform == "antigravity"

    def needs_refresh(self, account, refresh_window):
        self.windows.append(refresh_window)
        return account.id in self.due

    def refresh(self, account):
        if account.id in self.failing:
            raise TokenRefreshError("invalid_grant")
        return {**account.credentials, "access_token": f"new-{account.id}"}


def make_account(account_id, platform="antigravity"):
    return Account(
        id=account_id,
        name=f"acc-{account_id}",
        platform=platform,
        type="oauth",
        credentials={"access_token": "old", "project_id": "p"},
        extra={},
    )


def make_service(accounts, refresher, **repo_kwargs):
    repo = FakeAccountRepo(accounts, **repo_kwargs)
    config = TokenRefreshConfig(enabled=True, check_interval_minutes=5, refresh_before_expiry_hours=2)
    return TokenRefreshService(repo, [refresher], config=config), repo


def test_due_accounts_get_new_credentials():
    accounts = [make_account(1), make_account(2), make_account(3, platform="anthropic")]
    refresher = StubRefresher(due={1, 3})
    service, repo = make_service(accounts, refresher)

    stats = service.process_refresh()

    assert stats == {"total": 1, "refreshed": 1, "failed": 0}
    assert repo.updated == [1]
    assert accounts[0].credentials == {"access_token": "new-1", "project_id": "p"}
    assert accounts[1].credentials["access_token"] == "old"
    assert refresher.windows[0].total_seconds() == 7200


def test_failed_refresh_keeps_old_credentials():
    accounts = [make_account(1), make_account(2)]
    service, repo = make_service(accounts, StubRefresher(due={1, 2}, failing={1}))

    stats = service.process_refresh()

    assert stats == {"total": 2, "refreshed": 1, "failed": 1}
    assert repo.updated == [2]
    assert accounts[0].credentials["access_token"] == "old"


def test_save_failure_is_counted():
    service, _ = make_service([make_account(1)], StubRefresher(due={1}), update_error=RuntimeError("db"))

    assert service.process_refresh()["failed"] == 1


def test_list_failure_aborts_cycle():
    service, _ = make_service([make_account(1)], StubRefresher(due={1}), list_error=RuntimeError("db"))

    assert service.process_refresh() == {"total": 0, "refreshed": 0, "failed": 0}
