import pytest

from meetrelay import config, registry as registry_module
from meetrelay.errors import DuplicateRoomId, RoomIdExhausted
from meetrelay.models import Participant
from meetrelay.registry import ROOM_ID_ALPHABET, RoomRegistry, generate_room_id


def test_create_and_get(registry):
    room = registry.create("ABC123", "Alice", 5)

    assert registry.get("ABC123") is room
    assert "ABC123" in registry
    assert len(registry) == 1
    assert room.owner_name == "Alice"
    assert room.max_capacity == 5
    assert room.participants == []
    assert not room.is_locked
    assert not room.has_password


def test_create_rejects_duplicate_id(registry):
    registry.create("ABC123", "Alice", 5)
    with pytest.raises(DuplicateRoomId):
        registry.create("ABC123", "Bob", 2)
    assert registry.get("ABC123").owner_name == "Alice"


@pytest.mark.parametrize("capacity", [0, -1, "3", True])
def test_create_rejects_bad_capacity(registry, capacity):
    with pytest.raises(ValueError):
        registry.create("ABC123", "Alice", capacity)
    assert len(registry) == 0


def test_password_is_stored_hashed(registry):
    room = registry.create("ABC123", "Alice", 5, password="s3cret")
    assert room.has_password
    assert room.password_hash != "s3cret"


def test_empty_password_means_no_password(registry):
    room = registry.create("ABC123", "Alice", 5, password="")
    assert not room.has_password


def test_get_unknown_room(registry):
    assert registry.get("NOPE") is None


def test_remove_if_empty_only_removes_empty_rooms(registry):
    room = registry.create("ABC123", "Alice", 5)
    room.participants.append(Participant("sid-1", "Alice", is_host=True))

    assert registry.remove_if_empty("ABC123") is False
    assert "ABC123" in registry

    room.participants.clear()
    assert registry.remove_if_empty("ABC123") is True
    assert "ABC123" not in registry
    assert registry.remove_if_empty("ABC123") is False


def test_generate_room_id_shape():
    room_id = generate_room_id()
    assert len(room_id) == config.ROOM_ID_LENGTH
    assert all(c in ROOM_ID_ALPHABET for c in room_id)
    assert room_id == room_id.upper()


def test_create_room_retries_on_collision(registry, monkeypatch):
    registry.create("TAKEN1", "Alice", 5)
    codes = iter(["TAKEN1", "TAKEN1", "FRESH1"])
    monkeypatch.setattr(registry_module, "generate_room_id", lambda: next(codes))

    room = registry.create_room("Bob", 4)

    assert room.id == "FRESH1"
    assert len(registry) == 2


def test_create_room_gives_up(registry, monkeypatch):
    registry.create("TAKEN1", "Alice", 5)
    monkeypatch.setattr(registry_module, "generate_room_id", lambda: "TAKEN1")
    monkeypatch.setattr(config, "ROOM_ID_MAX_ATTEMPTS", 3)

    with pytest.raises(RoomIdExhausted):
        registry.create_room("Bob", 4)


def test_registries_are_independent():
    first, second = RoomRegistry(), RoomRegistry()
    first.create("ABC123", "Alice", 5)
    assert second.get("ABC123") is None
