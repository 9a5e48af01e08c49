import logging
import os

from flask import Blueprint, current_app, jsonify, request, send_from_directory

from functions.wallet_functions import build_card, generate_apple_pass, pass_filename, pass_url, save_pass
from models.Card import CARD_KINDS
from models.PassCertificates import PassCertificates
from utils.exceptions import HotspotError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

wallet_bp = Blueprint('wallet', __name__)
passes_bp = Blueprint('passes', __name__)

PKPASS_MIMETYPE = 'application/vnd.apple.pkpass'


def _pass_request():
    data = request.get_json(silent=True) or {}
    user_id = data.get('userId')
    if not user_id or not isinstance(user_id, str):
        raise ValidationError("userId is required")
    credits = data.get('credits')
    if credits is not None and not isinstance(credits, dict):
        raise ValidationError("credits must be an object with hours and minutes")
    return user_id, data.get('userEmail'), credits or {}


@wallet_bp.route('/apple-pass', methods=['POST'])
def apple_pass_route():
    user_id, user_email, credits = _pass_request()
    config = current_app.extensions['hotspot_config']
    if config.pass_mock_signing:
        filename = pass_filename(user_id)
        return jsonify({
            'success': True,
            'message': 'Apple Wallet pass generated successfully (Mock)',
            'passUrl': pass_url(config.pass_base_url, filename),
            'filename': filename
        }), 200

    try:
        buffer, filename = generate_apple_pass(
            user_id, user_email, credits, PassCertificates.from_config(config)
        )
        save_pass(buffer, filename, config.passes_dir)
    except HotspotError as e:
        logger.error("Error generating Apple Wallet pass: %s", e.message)
        return jsonify({
            'success': False,
            'error': e.message,
            'message': 'Failed to generate Apple Wallet pass'
        }), 500

    return jsonify({
        'success': True,
        'message': 'Apple Wallet pass generated successfully',
        'passUrl': pass_url(config.pass_base_url, filename),
        'filename': filename
    }), 200


def _card_route(kind):
    def route():
        user_id, user_email, credits = _pass_request()
        try:
            card = build_card(kind, user_id, user_email, credits)
        except ValidationError:
            raise
        except Exception as e:
            logger.exception("Error generating %s wallet pass", kind)
            return jsonify({'success': False, 'error': str(e)}), 500

        return jsonify({
            'success': True,
            'message': CARD_KINDS[kind]['message'],
            'data': card.to_dict(),
            'instructions': CARD_KINDS[kind]['instructions']
        }), 200
    route.__name__ = f"{kind}_pass_route"
    return route


wallet_bp.add_url_rule('/google-pay', view_func=_card_route('google'), methods=['POST'])
wallet_bp.add_url_rule('/samsung-pay', view_func=_card_route('samsung'), methods=['POST'])
wallet_bp.add_url_rule('/generic-pass', view_func=_card_route('generic'), methods=['POST'])


@passes_bp.route('/<path:filename>', methods=['GET'])
def download_pass(filename):
    if not filename.endswith('.pkpass'):
        raise NotFoundError("Pass not found")
    passes_dir = os.path.abspath(current_app.extensions['hotspot_config'].passes_dir)
    return send_from_directory(
        passes_dir, filename, mimetype=PKPASS_MIMETYPE, as_attachment=True
    )
