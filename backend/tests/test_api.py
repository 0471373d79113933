from huroof.game import service
from huroof.game.models import CellState


def test_health(client):
    res = client.get('/api/health')
    assert res.status_code == 200
    assert res.get_json()['ok'] is True


def test_room_snapshot(client):
    service.create_room('4821', 'Host')
    res = client.get('/api/rooms/4821')
    assert res.status_code == 200
    data = res.get_json()
    assert data['id'] == '4821'
    assert data['hostName'] == 'Host'
    assert len(data['grid']) == 25


def test_room_snapshot_missing(client):
    res = client.get('/api/rooms/0000')
    assert res.status_code == 404
    assert res.get_json() == {'error': 'room_not_found'}


def test_winner_query(client):
    service.create_room('4821', 'Host')
    for col in range(5):
        service.set_cell_state('4821', 'Host', f'{col},1', CellState.ORANGE)
    res = client.get('/api/rooms/4821/winner')
    assert res.status_code == 200
    assert res.get_json() == {'orange': True, 'green': False}

    assert client.get('/api/rooms/0000/winner').status_code == 404
