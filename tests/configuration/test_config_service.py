import pytest

from src.gym_system.gym_system.configuration.service import ConfigService
from src.gym_system.gym_system.core.enums import AdminRole, OperatingMode
from src.gym_system.gym_system.core.exceptions import AuthorizationError, ValidationError


class Store:
    def __init__(self, document=None):
        self.document = document
        self.saves = 0

    def get_document(self):
        return None if self.document is None else dict(self.document)

    def save_document(self, document):
        self.document = dict(document)
        self.saves += 1


def test_get_effective_never_writes():
    store = Store()

    config = ConfigService(store).get_effective()

    assert config.name
    assert store.saves == 0


def test_get_or_seed_writes_defaults_once():
    store = Store()
    service = ConfigService(store)

    service.get_or_seed()
    service.get_or_seed()

    assert store.saves == 1
    assert store.document["operatingMode"] == "sessions"


def test_update_merges_top_level_keys():
    store = Store()

    config = ConfigService(store).update({"operatingMode": "24hours", "name": "Night Owls"}, current_role=AdminRole.OWNER)

    assert config.operating_mode == OperatingMode.TWENTY_FOUR_HOURS
    assert config.name == "Night Owls"
    assert store.document["plans"]


@pytest.mark.parametrize(
    "changes",
    [
        {"unknownKey": 1},
        {"operatingMode": "sometimes"},
        {"closingTime": "9pm"},
        {"sessions": {"morning": {"start": "05:00", "end": "25:00"}, "evening": {"start": "16:00", "end": "21:30"}}},
        {"attendance": {"maxSessionsPerDay": 0, "autoExitEnabled": True}},
        {"plans": [{"id": "a", "name": "A", "duration": 30, "price": -1}]},
        {"plans": [{"id": "a", "name": "A", "duration": 1.5, "price": 10}]},
        {"plans": [{"id": "a", "name": "A", "duration": 10_000_000, "price": 10}]},
        {"plans": [{"id": "a", "name": "A" * 101, "duration": 30, "price": 10}]},
        {"plans": [{"id": "a", "name": "A", "duration": 30, "price": 1}, {"id": "a", "name": "B", "duration": 30, "price": 1}]},
        {"timezone": "Mars/Olympus_Mons"},
    ],
)
def test_update_rejects_invalid_changes(changes):
    store = Store()

    with pytest.raises(ValidationError):
        ConfigService(store).update(changes, current_role=AdminRole.OWNER)

    assert store.saves == 0


@pytest.mark.parametrize("role", [AdminRole.TRAINER, AdminRole.STAFF])
def test_only_owner_may_update(role):
    store = Store()

    with pytest.raises(AuthorizationError):
        ConfigService(store).update({"name": "Night Owls"}, current_role=role)

    assert store.saves == 0
