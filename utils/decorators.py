from functools import wraps
from flask import current_app, request
from firebase_admin import auth
from utils.exceptions import UnauthorizedError, ForbiddenError, NotFoundError


def _verify_bearer_token():
    auth_header = request.headers.get('Authorization')
    if not auth_header or not auth_header.startswith('Bearer '):
        raise UnauthorizedError("Authentication token required")

    token = auth_header.split('Bearer ')[1]
    try:
        return auth.verify_id_token(token)
    except auth.ExpiredIdTokenError:
        raise UnauthorizedError("Token expired")
    except auth.InvalidIdTokenError:
        raise UnauthorizedError("Invalid token")
    except Exception as e:
        raise UnauthorizedError(f"Authentication error: {str(e)}")


def firebase_token_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        decoded_token = _verify_bearer_token()
        request.user = {
            'uid': decoded_token['uid'],
            'email': decoded_token.get('email', '')
        }
        return f(*args, **kwargs)
    return decorated_function


def admin_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        decoded_token = _verify_bearer_token()
        request.user = decoded_token

        # Verificar rol de admin
        db = current_app.extensions['firestore']
        user_doc = db.collection('users').document(decoded_token['uid']).get()
        if not user_doc.exists:
            raise NotFoundError("Usuario no encontrado")

        if user_doc.to_dict().get('role') != 'admin':
            raise ForbiddenError("Se requieren privilegios de administrador")

        return f(*args, **kwargs)
    return decorated_function
