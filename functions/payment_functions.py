import logging
import time

from firebase_admin import firestore
from werkzeug.utils import secure_filename

from utils.exceptions import ForbiddenError, IOFailure, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def _number(value, field, cast):
    try:
        number = cast(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a number")
    if number <= 0:
        raise ValidationError(f"{field} must be positive")
    return number


def upload_receipt(bucket, user_id, receipt, now_ms=None):
    """Upload the receipt image and return its public URL."""
    if bucket is None:
        raise IOFailure("Receipt storage is not configured")
    now_ms = now_ms or int(time.time() * 1000)
    filename = secure_filename(receipt.filename or 'receipt') or 'receipt'
    blob = bucket.blob(f"receipts/{user_id}/{now_ms}-{filename}")
    try:
        blob.upload_from_file(receipt.stream, content_type=receipt.mimetype)
    except Exception as e:
        logger.error("Error uploading receipt for %s: %s", user_id, e)
        raise IOFailure(f"Could not upload receipt: {e}")
    return blob.public_url


def submit_payment(db, bucket, user, form, receipt):
    """Register a pending SINPE payment for the authenticated user."""
    sinpe_id = (form.get('sinpeId') or '').strip()
    package_name = (form.get('packageName') or '').strip()

    if not sinpe_id:
        raise ValidationError("El número de comprobante SINPE es obligatorio")
    if receipt is None or not receipt.filename:
        raise ValidationError("La captura del comprobante es obligatoria")
    if not (receipt.mimetype or '').startswith('image/'):
        raise ValidationError("El comprobante debe ser una imagen")
    if not package_name:
        raise ValidationError("Debe seleccionar un paquete")

    price = _number(form.get('price'), 'price', float)
    duration_minutes = _number(form.get('durationMinutes'), 'durationMinutes', int)

    receipt_url = upload_receipt(bucket, user['uid'], receipt)

    profile = {'createdAt': firestore.SERVER_TIMESTAMP}
    if user.get('email'):
        profile['email'] = user['email']
    user_ref = db.collection('users').document(user['uid'])
    if not user_ref.get().exists:
        user_ref.set(profile, merge=True)

    _, payment_ref = db.collection('payments').add({
        'userId': user['uid'],
        'sinpeId': sinpe_id,
        'receiptImageUrl': receipt_url,
        'status': 'pending',
        'packageName': package_name,
        'price': price,
        'durationMinutes': duration_minutes,
        'createdAt': firestore.SERVER_TIMESTAMP
    })
    logger.info("Payment %s submitted by %s", payment_ref.id, user['uid'])
    return payment_ref.id


def get_payment_status(db, user_id, payment_id):
    payment = db.collection('payments').document(payment_id).get()
    if not payment.exists:
        raise NotFoundError("Pago no encontrado")

    data = payment.to_dict()
    if data.get('userId') != user_id:
        raise ForbiddenError("No autorizado")

    return {
        'id': payment_id,
        'status': data.get('status'),
        'packageName': data.get('packageName'),
        'token': data.get('token'),
        'adminReply': data.get('adminReply')
    }


def watch_payment(db, payment_id, callback):
    """Call ``callback(data)`` every time the payment document changes."""
    def on_snapshot(doc_snapshots, changes, read_time):
        for doc in doc_snapshots:
            if doc.exists:
                callback(doc.to_dict())

    return db.collection('payments').document(payment_id).on_snapshot(on_snapshot)
