import pytest

from models.Notification import Notification


def test_admin_notification_has_no_user():
    data = Notification.for_admin('referral', 'Nueva Referencia', 'desc', {'username': 'ana'},
                                  {'referralId': 'r1'}).to_dict()
    assert data['isAdminNotification'] is True
    assert 'userId' not in data
    assert data['userInfo'] == {'username': 'ana'}
    assert data['referralId'] == 'r1'
    assert data['isRead'] is False


def test_user_notification_is_targeted():
    data = Notification.for_user('u1', 'mention', 'Te han mencionado', 'desc',
                                 from_user_id='u2').to_dict()
    assert data['userId'] == 'u1'
    assert data['isAdminNotification'] is False
    assert data['fromUserId'] == 'u2'


@pytest.mark.parametrize("user_id,is_admin", [(None, False), ('u1', True), ('', False)])
def test_addressing_mode_must_be_exactly_one(user_id, is_admin):
    with pytest.raises(ValueError):
        Notification('x', 't', 'd', user_id=user_id, is_admin_notification=is_admin)


def test_extra_fields_cannot_override_addressing():
    data = Notification.for_user('u1', 'payment_status', 't', 'd',
                                 extra={'isAdminNotification': True, 'type': 'other'}).to_dict()
    assert data['isAdminNotification'] is False
    assert data['type'] == 'payment_status'
