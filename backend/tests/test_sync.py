from huroof.realtime.sync import SnapshotFeed, buzzer_lock_edge


ARMED = {"active": False, "winnerName": None, "lockedAt": 0}


def locked(name, at):
    return {"active": True, "winnerName": name, "lockedAt": at}


def snap(version, buzzer=ARMED):
    return {"version": version, "buzzer": buzzer}


def test_lock_edge():
    assert buzzer_lock_edge(ARMED, locked("Sara", 5)) == "Sara"
    assert buzzer_lock_edge(None, locked("Sara", 5)) == "Sara"
    assert buzzer_lock_edge(locked("Sara", 5), locked("Sara", 5)) is None
    assert buzzer_lock_edge(locked("Sara", 5), ARMED) is None
    assert buzzer_lock_edge(ARMED, ARMED) is None
    # Reset and relock collapsed into one delivery.
    assert buzzer_lock_edge(locked("Sara", 5), locked("Omar", 9)) == "Omar"


def test_feed_drops_stale_snapshots():
    feed = SnapshotFeed("Sara")
    assert feed.accept(snap(3)) is True
    assert feed.accept(snap(2)) is False
    assert feed.accept(snap(3)) is False
    assert feed.version == 3
    assert feed.accept(snap(4)) is True
    assert feed.version == 4


def test_feed_reports_each_lock_once():
    calls = []
    feed = SnapshotFeed("Sara", on_lock=lambda winner, who: calls.append((winner, who)))

    feed.accept(snap(1))
    feed.accept(snap(2, locked("Sara", 100)))
    feed.accept(snap(3, locked("Sara", 100)))
    # Redelivery of an old snapshot is ignored.
    feed.accept(snap(2, locked("Sara", 100)))
    feed.accept(snap(4))
    feed.accept(snap(5, locked("Omar", 200)))

    assert calls == [("Sara", "self"), ("Omar", "other")]


def test_feed_follows_a_room_recreated_under_the_same_id():
    calls = []
    feed = SnapshotFeed("Sara", on_lock=lambda winner, who: calls.append((winner, who)))

    feed.accept({"createdAt": 1000, "version": 9, "buzzer": locked("Sara", 1500)})
    # The old room expired; the new one starts counting from 1 again.
    assert feed.accept({"createdAt": 9000, "version": 1, "buzzer": ARMED}) is True
    assert feed.version == 1
    # Late deliveries from the old room are stale.
    assert feed.accept({"createdAt": 1000, "version": 10, "buzzer": ARMED}) is False

    feed.accept({"createdAt": 9000, "version": 2, "buzzer": locked("Omar", 9100)})
    assert calls == [("Sara", "self"), ("Omar", "other")]


def test_lock_in_first_snapshot_of_a_recreated_room_is_reported():
    calls = []
    feed = SnapshotFeed("Sara", on_lock=lambda winner, who: calls.append((winner, who)))

    feed.accept({"createdAt": 1000, "version": 4, "buzzer": locked("Omar", 1200)})
    feed.accept({"createdAt": 2000, "version": 3, "buzzer": locked("Omar", 1200)})
    assert calls == [("Omar", "other"), ("Omar", "other")]
