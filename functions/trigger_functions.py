import logging
import re
from functools import wraps

from firebase_admin import firestore

from services.notification_service import display_name
from utils.exceptions import HotspotError

logger = logging.getLogger(__name__)

MENTION_PATTERN = re.compile(r'@([A-Za-z0-9_]+)')

SUPPORT_STATUS_LABELS = {
    'in_progress': 'en progreso',
    'resolved': 'resuelto',
    'closed': 'cerrado'
}

PAYMENT_STATUS_LABELS = {
    'approved': 'aprobado',
    'rejected': 'rechazado'
}


def _isolated(name):
    """Log and swallow failures so one trigger never breaks the others."""
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except HotspotError as e:
                logger.error("Error in %s: %s", name, e.message)
            except Exception:
                logger.exception("Unexpected error in %s", name)
        return wrapper
    return decorator


def extract_mentions(content):
    """Unique ``@username`` tokens in order of appearance, without ``all``."""
    mentions = []
    for username in MENTION_PATTERN.findall(content or ''):
        if username != 'all' and username not in mentions:
            mentions.append(username)
    return mentions


@_isolated('on_payment_submitted')
def on_payment_submitted(service, payment_id, payment):
    if payment.get('status') != 'pending':
        return
    user_info = service.get_user_info(payment.get('userId'))
    service.notify_admin(
        'payment_submission',
        'Nuevo Pago Pendiente',
        f"Usuario {display_name(user_info, payment.get('userId'))} ha enviado un pago de "
        f"₡{payment.get('price')} por {payment.get('packageName')}",
        user_info,
        {
            'paymentId': payment_id,
            'amount': payment.get('price'),
            'packageName': payment.get('packageName'),
            'sinpeId': payment.get('sinpeId')
        }
    )


@_isolated('on_support_ticket_created')
def on_support_ticket_created(service, ticket_id, ticket):
    user_info = service.get_user_info(ticket.get('userId'))
    service.notify_admin(
        'support_ticket',
        'Nuevo Ticket de Soporte',
        f"Usuario {display_name(user_info, ticket.get('userId'))} ha creado un ticket: {ticket.get('subject')}",
        user_info,
        {
            'ticketId': ticket_id,
            'category': ticket.get('category'),
            'priority': ticket.get('priority'),
            'subject': ticket.get('subject')
        }
    )


@_isolated('bulletin admin notification')
def _notify_admin_of_post(service, post_id, post, user_info):
    service.notify_admin(
        'bulletin_post',
        'Nuevo Post en el Mural',
        f"Usuario {display_name(user_info, post.get('authorId'))} ha publicado: {post.get('title')}",
        user_info,
        {
            'postId': post_id,
            'title': post.get('title'),
            'category': post.get('category'),
            'priority': post.get('priority')
        }
    )


@_isolated('bulletin @all announcement')
def _announce_to_all(service, post_id, post, user_info):
    service.notify_all(
        'bulletin_announcement',
        'Anuncio del Mural',
        f"{display_name(user_info, 'Usuario')} ha publicado un anuncio para todos: {post.get('title')}",
        post.get('authorId'),
        {
            'postId': post_id,
            'title': post.get('title'),
            'category': post.get('category')
        }
    )


@_isolated('bulletin mention')
def _notify_mention(service, username, post_id, post, user_info):
    match = service.find_user_by_username(username)
    if match is None:
        return
    mentioned_user_id, _ = match
    if mentioned_user_id == post.get('authorId'):
        return
    service.notify_user(
        mentioned_user_id,
        'mention',
        'Te han mencionado',
        f"{display_name(user_info, 'Usuario')} te mencionó en el mural: {post.get('title')}",
        {
            'postId': post_id,
            'fromUserId': post.get('authorId'),
            'fromUsername': display_name(user_info, None),
            'category': post.get('category')
        }
    )


def on_bulletin_post_created(service, post_id, post):
    user_info = service.get_user_info(post.get('authorId'))
    content = post.get('content')
    if not isinstance(content, str):
        content = ''

    _notify_admin_of_post(service, post_id, post, user_info)

    if '@all' in content:
        _announce_to_all(service, post_id, post, user_info)

    for username in extract_mentions(content):
        _notify_mention(service, username, post_id, post, user_info)


@_isolated('on_referral_created')
def on_referral_created(service, referral_id, referral):
    referrer_info = service.get_user_info(referral.get('referrerId'))
    service.notify_admin(
        'referral',
        'Nueva Referencia',
        f"Usuario {display_name(referrer_info, referral.get('referrerId'))} ha referido a "
        f"{referral.get('referredEmail')}",
        referrer_info,
        {
            'referralId': referral_id,
            'referredEmail': referral.get('referredEmail'),
            'relationship': referral.get('relationship')
        }
    )


@_isolated('on_payment_status_changed')
def on_payment_status_changed(service, payment_id, before, after):
    status = after.get('status')
    if before.get('status') == status or status not in PAYMENT_STATUS_LABELS:
        return
    status_text = PAYMENT_STATUS_LABELS[status]
    service.notify_user(
        after.get('userId'),
        'payment_status',
        f"Pago {status_text}",
        f"Tu pago de ₡{after.get('price')} por {after.get('packageName')} ha sido {status_text}",
        {
            'paymentId': payment_id,
            'status': status,
            'amount': after.get('price'),
            'packageName': after.get('packageName')
        }
    )


@_isolated('on_payment_approved')
def on_payment_approved(service, mailer, payment_id, before, after):
    """E-mail the user once a pending payment is approved."""
    if not (before.get('status') == 'pending' and after.get('status') == 'approved'):
        return
    user_id = after.get('userId')
    user_info = service.get_user_info(user_id)
    if user_info is None:
        logger.info("User document %s does not exist.", user_id)
        return
    user_email = user_info.get('email') or after.get('userEmail')
    if not user_email:
        logger.info("User %s does not have an email.", user_id)
        return
    sent = mailer.send(
        user_email,
        '¡Tu pago ha sido aprobado!',
        f"¡Hola! Tu pago para el paquete \"{after.get('packageName')}\" ha sido aprobado. "
        "Tus créditos han sido añadidos a tu cuenta. ¡Gracias!"
    )
    if sent:
        logger.info("Approval email sent to %s for payment %s", user_email, payment_id)


@_isolated('support status change')
def _notify_support_status(service, ticket_id, before, after):
    status = after.get('status')
    if before.get('status') == status:
        return
    status_text = SUPPORT_STATUS_LABELS.get(status, status)
    service.notify_user(
        after.get('userId'),
        'support_status',
        f"Ticket {status_text}",
        f"Tu ticket \"{after.get('subject')}\" ha sido marcado como {status_text}",
        {
            'ticketId': ticket_id,
            'status': status,
            'subject': after.get('subject')
        }
    )


@_isolated('support admin reply')
def _notify_admin_reply(service, ticket_id, before, after):
    if before.get('adminReply') or not after.get('adminReply'):
        return
    reply = after['adminReply']
    service.notify_user(
        after.get('userId'),
        'admin_reply',
        'Respuesta del Administrador',
        f"El administrador ha respondido a tu ticket \"{after.get('subject')}\"",
        {
            'ticketId': ticket_id,
            'subject': after.get('subject'),
            'adminReply': reply.get('text') if isinstance(reply, dict) else reply
        }
    )


def on_support_ticket_updated(service, ticket_id, before, after):
    _notify_support_status(service, ticket_id, before, after)
    _notify_admin_reply(service, ticket_id, before, after)


REFERRAL_REWARD_MINUTES = 60


def _referral_name(user):
    email = user.get('email') or ''
    return user.get('username') or f"{email.split('@')[0]}_temp"


def _first(query):
    for doc in query.limit(1).stream():
        return doc
    return None


@_isolated('on_user_created')
def on_user_created(service, user_id, user):
    """Reward the referrer when a new user signs up with a referral code."""
    db = service.db
    referral_code = user.get('referralCode')
    if not referral_code:
        return
    email = user.get('email')
    referrals = db.collection('referrals')

    used = referrals.where('referredEmail', '==', email) \
        .where('referralCode', '==', referral_code) \
        .where('status', '==', 'successful')
    if _first(used) is not None:
        logger.info("Referral code %s already used by %s", referral_code, email)
        return

    referrer = _first(db.collection('users').where('referralCode', '==', referral_code))
    if referrer is None:
        logger.info("Referrer not found for code %s", referral_code)
        return
    if referrer.id == user_id:
        logger.info("User %s cannot refer themselves", user_id)
        return

    new_username = _referral_name(user)
    reward = {
        'status': 'successful',
        'updatedAt': firestore.SERVER_TIMESTAMP,
        'creditReward': REFERRAL_REWARD_MINUTES,
        'creditAwardedAt': firestore.SERVER_TIMESTAMP,
        'newUserId': user_id,
        'newUserEmail': email,
        'newUsername': new_username
    }

    pending = _first(referrals.where('referrerId', '==', referrer.id)
                     .where('referredEmail', '==', email)
                     .where('status', '==', 'pending'))
    if pending is not None:
        referral_id = pending.id
        referrals.document(referral_id).update(reward)
    else:
        referrer_data = referrer.to_dict() or {}
        reward.update({
            'referrerId': referrer.id,
            'referrerEmail': referrer_data.get('email'),
            'referrerName': referrer_data.get('username') or referrer_data.get('email'),
            'referredEmail': email,
            'referredName': new_username,
            'referralCode': referral_code,
            'createdAt': firestore.SERVER_TIMESTAMP,
            'relationship': 'automatic',
            'notes': 'Referencia automática al registrarse'
        })
        _, referral_ref = referrals.add(reward)
        referral_id = referral_ref.id

    db.collection('users').document(referrer.id).update({
        'creditsMinutes': firestore.Increment(REFERRAL_REWARD_MINUTES)
    })
    logger.info("Referral %s successful: %s referred %s", referral_id, referrer.id, email)

    service.notify_user(
        referrer.id,
        'referral_successful',
        '¡Referencia Exitosa!',
        f"Tu referencia {new_username} se registró exitosamente. "
        f"Has recibido {REFERRAL_REWARD_MINUTES} créditos de WiFi.",
        {
            'referralId': referral_id,
            'fromUserId': user_id,
            'fromUsername': new_username
        }
    )
