import threading

import pytest

from huroof.game import service
from huroof.game.errors import NotAuthorized, RoomNotFound


def make_room(room_id="4821", guests=("Sara", "Omar")):
    service.create_room(room_id, "Host")
    for name in guests:
        service.join_room(room_id, name)
    return room_id


def test_first_buzz_locks():
    room_id = make_room()
    result = service.buzz(room_id, "Sara")
    assert result.won is True
    assert result.winner_name == "Sara"
    buzzer = service.get_room(room_id).buzzer
    assert buzzer.active is True
    assert buzzer.winner_name == "Sara"
    assert buzzer.locked_at_ms == result.locked_at_ms > 0


def test_late_buzz_is_a_stale_no_op():
    room_id = make_room()
    first = service.buzz(room_id, "Sara")
    version = service.get_room(room_id).version

    late = service.buzz(room_id, "Omar")
    assert late.won is False
    assert late.winner_name == "Sara"
    assert late.locked_at_ms == first.locked_at_ms
    assert service.get_room(room_id).version == version


def test_concurrent_buzzes_have_one_winner():
    names = [f"p{i}" for i in range(16)]
    room_id = make_room("7070", guests=names)
    barrier = threading.Barrier(len(names))
    results = {}

    def attempt(name):
        barrier.wait()
        results[name] = service.buzz(room_id, name)

    threads = [threading.Thread(target=attempt, args=(n,)) for n in names]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    winners = [name for name, r in results.items() if r.won]
    assert len(winners) == 1
    # Every observer agrees on the same winner.
    assert {r.winner_name for r in results.values()} == {winners[0]}
    assert service.get_room(room_id).buzzer.winner_name == winners[0]


def test_winner_name_set_iff_active():
    room_id = make_room()
    room = service.get_room(room_id)
    assert (room.buzzer.winner_name is not None) == room.buzzer.active
    service.buzz(room_id, "Omar")
    assert (room.buzzer.winner_name is not None) == room.buzzer.active
    service.reset_buzzer(room_id, "Host")
    assert (room.buzzer.winner_name is not None) == room.buzzer.active


def test_reset_is_host_only():
    room_id = make_room()
    service.buzz(room_id, "Sara")
    with pytest.raises(NotAuthorized):
        service.reset_buzzer(room_id, "Omar")
    assert service.get_room(room_id).buzzer.active is True


def test_reset_twice_stays_armed():
    room_id = make_room()
    service.buzz(room_id, "Sara")
    assert service.reset_buzzer(room_id, "Host").armed
    assert service.reset_buzzer(room_id, "Host").armed
    buzzer = service.get_room(room_id).buzzer
    assert buzzer.active is False
    assert buzzer.winner_name is None
    assert buzzer.locked_at_ms == 0


def test_outsiders_and_host_cannot_buzz():
    room_id = make_room()
    with pytest.raises(NotAuthorized):
        service.buzz(room_id, "Stranger")
    with pytest.raises(NotAuthorized):
        service.buzz(room_id, "Host")
    with pytest.raises(RoomNotFound):
        service.buzz("0000", "Sara")


def test_auto_reset_after_timeout():
    room_id = make_room()
    locked = service.buzz(room_id, "Sara").locked_at_ms

    assert service.auto_reset_buzzer_if_due(room_id, now=locked + 4_000, after_sec=0) is False
    assert service.auto_reset_buzzer_if_due(room_id, now=locked + 3_999, after_sec=4) is False
    assert service.get_room(room_id).buzzer.active is True
    assert service.auto_reset_buzzer_if_due(room_id, now=locked + 4_000, after_sec=4) is True
    assert service.get_room(room_id).buzzer.armed
    assert service.auto_reset_buzzer_if_due(room_id, now=locked + 9_000, after_sec=4) is False


def test_end_to_end_round():
    service.create_room("4821", "Host")
    service.join_room("4821", "Sara")
    service.join_room("4821", "Omar")

    barrier = threading.Barrier(2)
    results = {}

    def attempt(name):
        barrier.wait()
        results[name] = service.buzz("4821", name)

    threads = [threading.Thread(target=attempt, args=(n,)) for n in ("Sara", "Omar")]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    winner = service.get_room("4821").buzzer.winner_name
    assert winner in ("Sara", "Omar")
    assert [n for n, r in results.items() if r.won] == [winner]

    service.reset_buzzer("4821", "Host")
    assert service.get_room("4821").buzzer.armed

    loser = "Omar" if winner == "Sara" else "Sara"
    third = service.buzz("4821", loser)
    assert third.won is True
    assert service.get_room("4821").buzzer.winner_name == loser
