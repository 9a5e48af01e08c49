import logging

from flask import Blueprint, current_app, jsonify, request
from firebase_admin import firestore

from utils.decorators import admin_required, firebase_token_required
from utils.exceptions import HotspotError, ValidationError

logger = logging.getLogger(__name__)

notification_bp = Blueprint('notifications', __name__)


def _db():
    return current_app.extensions['firestore']


def _serialize(notif):
    notif_data = notif.to_dict()
    for field in ('createdAt', 'readAt'):
        value = notif_data.get(field)
        if hasattr(value, 'isoformat'):
            notif_data[field] = value.isoformat()
    notif_data['id'] = notif.id
    return notif_data


def _newest_first(notifications, limit):
    notifications.sort(key=lambda x: x.get('createdAt') or '', reverse=True)
    return notifications[:limit]


def _limit():
    try:
        return max(1, min(int(request.args.get('limit', 20)), 100))
    except ValueError:
        raise ValidationError("limit must be a number")


@notification_bp.route('/manual', methods=['POST'])
def create_manual_notification_route():
    service = current_app.extensions['notification_service']
    try:
        result = service.create_manual_notification(request.get_json(silent=True))
    except ValidationError as e:
        return jsonify({"error": e.message}), 400
    except HotspotError as e:
        logger.error("Error creating manual notification: %s", e.message)
        return jsonify({"error": "Internal server error"}), 500
    return jsonify(result), 200


@notification_bp.route('', methods=['GET'])
@firebase_token_required
def get_notifications():
    limit = _limit()
    notifications = _db().collection('notifications') \
        .where('userId', '==', request.user['uid']) \
        .stream()

    # Ordenar y recortar en Python para no requerir un índice compuesto
    return jsonify(_newest_first([_serialize(n) for n in notifications], limit)), 200


@notification_bp.route('/admin', methods=['GET'])
@admin_required
def get_admin_notifications():
    limit = _limit()
    notifications = _db().collection('notifications') \
        .where('isAdminNotification', '==', True) \
        .stream()

    return jsonify(_newest_first([_serialize(n) for n in notifications], limit)), 200


def _owned_notification(notification_id):
    notification_ref = _db().collection('notifications').document(notification_id)
    notification = notification_ref.get()

    if not notification.exists:
        return None, (jsonify({"error": "Notificación no encontrada"}), 404)

    if notification.to_dict().get('userId') != request.user['uid']:
        return None, (jsonify({"error": "No autorizado"}), 403)

    return notification_ref, None


@notification_bp.route('/<notification_id>/read', methods=['PUT'])
@firebase_token_required
def mark_notification_as_read(notification_id):
    notification_ref, error = _owned_notification(notification_id)
    if error:
        return error

    notification_ref.update({
        "isRead": True,
        "readAt": firestore.SERVER_TIMESTAMP
    })

    return jsonify({"message": "Notificación marcada como leída"}), 200


@notification_bp.route('/<notification_id>', methods=['DELETE'])
@firebase_token_required
def delete_notification(notification_id):
    notification_ref, error = _owned_notification(notification_id)
    if error:
        return error

    notification_ref.delete()

    return jsonify({"message": "Notificación eliminada"}), 200
