import json
import logging
import os
from datetime import datetime, timezone

from wallet.models import Barcode, BarcodeFormat, Generic, Pass

from models.Card import CARD_KINDS, WalletCard, iso_timestamp
from utils.credits import format_credits, parse_credits, status_tier
from utils.exceptions import IOFailure, SigningError, ValidationError

logger = logging.getLogger(__name__)

PASS_IMAGES = ('icon.png', 'icon@2x.png', 'logo.png', 'logo@2x.png', 'strip.png', 'strip@2x.png')


def build_card(kind, user_id, user_email, credits, now=None):
    """Build the JSON card for Google Pay, Samsung Pay or a generic wallet."""
    if kind not in CARD_KINDS:
        raise ValidationError(f"Unknown wallet kind: {kind}")
    if not user_id:
        raise ValidationError("userId is required")
    return WalletCard(kind, user_id, user_email, credits, issued_at=now)


def _millis(moment):
    return int(moment.timestamp() * 1000)


def pass_filename(user_id, now=None):
    now = now or datetime.now(timezone.utc)
    return f"wifi-card-{user_id}-{_millis(now)}.pkpass"


def _pass_information(user_email, hours, minutes):
    info = Generic()
    info.addPrimaryField('credits', format_credits(hours, minutes), 'Available Credits')
    info.addSecondaryField('status', status_tier(hours, minutes), 'Status')
    info.addSecondaryField('email', user_email or 'User Account', 'Account')
    info.addAuxiliaryField('type', 'VIRTUAL', 'Card Type')
    info.addAuxiliaryField('access', 'WiFi + High Speed', 'Access')
    return info


def _add_model_images(pass_file, model_dir):
    if not model_dir or not os.path.isdir(model_dir):
        return
    for name in PASS_IMAGES:
        path = os.path.join(model_dir, name)
        if os.path.exists(path):
            with open(path, 'rb') as image:
                pass_file.addFile(name, image)


def generate_apple_pass(user_id, user_email, credits, certificates, now=None):
    """Sign an Apple Wallet pass and return ``(buffer, filename)``.

    Raises SigningError when the certificate bundle cannot sign the pass.
    """
    if not user_id:
        raise ValidationError("userId is required")
    now = now or datetime.now(timezone.utc)
    hours, minutes = parse_credits(credits)
    millis = _millis(now)

    pass_file = Pass(
        _pass_information(user_email, hours, minutes),
        passTypeIdentifier=certificates.pass_type_identifier,
        organizationName=certificates.organization_name,
        teamIdentifier=certificates.team_identifier
    )
    pass_file.serialNumber = f"{user_id}-{millis}"
    pass_file.description = 'WiFi Credits'
    barcode = Barcode(
        message=json.dumps({
            'uid': user_id,
            'email': user_email,
            'credits': credits,
            'timestamp': iso_timestamp(now)
        }),
        format=BarcodeFormat.QR
    )
    barcode.messageEncoding = 'iso-8859-1'
    pass_file.barcode = barcode
    _add_model_images(pass_file, certificates.model_dir)

    try:
        buffer = pass_file.create(
            certificates.certificate,
            certificates.key,
            certificates.wwdr_certificate,
            certificates.password
        )
    except Exception as e:
        logger.error("Error signing Apple Wallet pass for %s: %s", user_id, e)
        raise SigningError(f"Could not sign pass: {e}")

    return buffer.getvalue(), pass_filename(user_id, now)


def save_pass(buffer, filename, passes_dir):
    try:
        os.makedirs(passes_dir, exist_ok=True)
        path = os.path.join(passes_dir, filename)
        with open(path, 'wb') as f:
            f.write(buffer)
        return path
    except OSError as e:
        logger.error("Error writing pass %s: %s", filename, e)
        raise IOFailure(f"Could not write pass file: {e}")


def pass_url(base_url, filename):
    return f"{base_url.rstrip('/')}/{filename}"
