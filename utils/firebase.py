import logging
import os
from pathlib import Path

import firebase_admin
from firebase_admin import credentials, firestore, storage

logger = logging.getLogger(__name__)

# firebase_admin solo admite una app por nombre
_firebase_app = None
_db = None


def _load_credentials(cred_path):
    # Opción 1: Usar archivo JSON
    if cred_path and Path(cred_path).exists():
        return credentials.Certificate(cred_path)

    # Opción 2: Variables de entorno
    private_key = os.environ.get("FIREBASE_PRIVATE_KEY")
    if not private_key:
        raise ValueError("FIREBASE_PRIVATE_KEY no encontrada")

    firebase_config = {
        "type": os.environ.get("FIREBASE_TYPE", "service_account"),
        "project_id": os.environ.get("FIREBASE_PROJECT_ID"),
        "private_key_id": os.environ.get("FIREBASE_PRIVATE_KEY_ID"),
        "private_key": private_key.replace('\\n', '\n'),
        "client_email": os.environ.get("FIREBASE_CLIENT_EMAIL"),
        "client_id": os.environ.get("FIREBASE_CLIENT_ID"),
        "auth_uri": os.environ.get("FIREBASE_AUTH_URI"),
        "token_uri": os.environ.get("FIREBASE_TOKEN_URI"),
        "auth_provider_x509_cert_url": os.environ.get("FIREBASE_AUTH_PROVIDER_CERT_URL"),
        "client_x509_cert_url": os.environ.get("FIREBASE_CLIENT_CERT_URL")
    }
    return credentials.Certificate(firebase_config)


def initialize_firebase(config):
    """Create (once) the Firebase app and return ``(app, firestore_client)``."""
    global _firebase_app, _db
    try:
        if _firebase_app is None:
            cred = _load_credentials(config.firebase_credentials_path)
            options = {}
            if config.firebase_storage_bucket:
                options['storageBucket'] = config.firebase_storage_bucket
            _firebase_app = firebase_admin.initialize_app(cred, options)
            _db = firestore.client(_firebase_app)
        return _firebase_app, _db
    except Exception:
        logger.exception("Error inicializando Firebase")
        raise


def get_receipt_bucket(config):
    """Storage bucket where payment receipts are uploaded."""
    app, _ = initialize_firebase(config)
    return storage.bucket(config.firebase_storage_bucket, app=app)
