from datetime import datetime, timezone

import pytest


@pytest.fixture
def stored(db):
    def store(doc_id, **data):
        data.setdefault('createdAt', datetime(2025, 1, 1, tzinfo=timezone.utc))
        db.collection('notifications').document(doc_id).set(data)
    return store


def test_manual_notification_to_users(client, db):
    response = client.post('/notifications/manual', json={
        'type': 'promo', 'title': 'Promo', 'description': '2x1', 'userIds': ['u1', 'u2', 'u3']
    })

    assert response.status_code == 200
    assert response.get_json() == {'success': True, 'count': 3}
    assert len(db.notifications(manual=True)) == 3


def test_manual_notification_to_admins(client):
    response = client.post('/notifications/manual', json={
        'type': 'system', 'title': 'Aviso', 'description': 'd', 'isAdminNotification': True
    })
    assert response.get_json() == {'success': True, 'type': 'admin'}


@pytest.mark.parametrize("body", [
    {'type': 'promo', 'title': 'Promo', 'description': 'd'},
    {'title': 'Promo', 'description': 'd', 'userIds': ['u1']},
    {'type': 'promo', 'title': 'Promo', 'description': 'd', 'userIds': []},
])
def test_manual_notification_bad_request(client, db, body):
    response = client.post('/notifications/manual', json=body)
    assert response.status_code == 400
    assert 'error' in response.get_json()
    assert db.notifications() == []


def test_manual_notification_batch_failure(client, db):
    db.fail_batch_at = 1
    response = client.post('/notifications/manual', json={
        'type': 'promo', 'title': 'Promo', 'description': 'd', 'userIds': ['u1', 'u2']
    })
    assert response.status_code == 500
    assert response.get_json() == {'error': 'Internal server error'}
    assert db.notifications() == []


def test_list_notifications_newest_first(client, stored, signed_in):
    stored('n1', userId='u1', title='old', createdAt=datetime(2025, 1, 1, tzinfo=timezone.utc))
    stored('n2', userId='u1', title='new', createdAt=datetime(2025, 2, 1, tzinfo=timezone.utc))
    stored('n3', userId='u2', title='other')

    response = client.get('/notifications', headers=signed_in('u1'))

    assert response.status_code == 200
    assert [n['title'] for n in response.get_json()] == ['new', 'old']
    assert response.get_json()[0]['id'] == 'n2'


def test_list_notifications_requires_token(client):
    response = client.get('/notifications')
    assert response.status_code == 401


def test_mark_as_read_and_delete(client, db, stored, signed_in):
    stored('n1', userId='u1', title='t', isRead=False)
    headers = signed_in('u1')

    assert client.put('/notifications/n1/read', headers=headers).status_code == 200
    assert db.docs('notifications')['n1']['isRead'] is True

    assert client.delete('/notifications/n1', headers=headers).status_code == 200
    assert 'n1' not in db.docs('notifications')


def test_cannot_touch_someone_elses_notification(client, stored, signed_in):
    stored('n1', userId='u2', title='t')
    headers = signed_in('u1')

    assert client.put('/notifications/n1/read', headers=headers).status_code == 403
    assert client.delete('/notifications/missing', headers=headers).status_code == 404


def test_admin_feed_requires_admin_role(client, db, stored, signed_in):
    stored('n1', isAdminNotification=True, title='Nuevo Pago Pendiente')
    stored('n2', userId='u1', isAdminNotification=False, title='Pago aprobado')
    db.collection('users').document('admin1').set({'role': 'admin'})
    db.collection('users').document('u1').set({'role': 'user'})

    response = client.get('/notifications/admin', headers=signed_in('admin1'))
    assert response.status_code == 200
    assert [n['title'] for n in response.get_json()] == ['Nuevo Pago Pendiente']

    assert client.get('/notifications/admin', headers=signed_in('u1')).status_code == 403
    assert client.get('/notifications/admin', headers=signed_in('ghost')).status_code == 404


def test_list_notifications_limit_keeps_newest(client, stored, signed_in):
    for day in range(25):
        stored(f"n{day}", userId='u1', title=f"n{day}",
               createdAt=datetime(2025, 1, day + 1, tzinfo=timezone.utc))

    response = client.get('/notifications?limit=20', headers=signed_in('u1'))

    titles = [n['title'] for n in response.get_json()]
    assert len(titles) == 20
    assert titles[:3] == ['n24', 'n23', 'n22']
    assert titles[-1] == 'n5'


def test_admin_feed_limit_keeps_newest(client, db, stored, signed_in):
    db.collection('users').document('admin1').set({'role': 'admin'})
    for day in range(5):
        stored(f"a{day}", isAdminNotification=True, title=f"a{day}",
               createdAt=datetime(2025, 1, day + 1, tzinfo=timezone.utc))

    response = client.get('/notifications/admin?limit=2', headers=signed_in('admin1'))

    assert [n['title'] for n in response.get_json()] == ['a4', 'a3']


def test_manual_notification_accepts_truthy_admin_flag(client, db):
    response = client.post('/notifications/manual', json={
        'type': 'system', 'title': 'Aviso', 'description': 'd', 'isAdminNotification': 1
    })
    assert response.get_json() == {'success': True, 'type': 'admin'}
    assert len(db.notifications(isAdminNotification=True)) == 1
