from flask import Blueprint, current_app, jsonify, request

from functions.payment_functions import get_payment_status, submit_payment
from utils.decorators import firebase_token_required

payment_bp = Blueprint('payments', __name__)


@payment_bp.route('', methods=['POST'])
@firebase_token_required
def submit_payment_route():
    payment_id = submit_payment(
        current_app.extensions['firestore'],
        current_app.extensions['receipt_bucket'],
        request.user,
        request.form,
        request.files.get('receipt')
    )
    return jsonify({
        "success": True,
        "message": "Pago enviado, pendiente de aprobación",
        "paymentId": payment_id,
        "status": "pending"
    }), 201


@payment_bp.route('/<payment_id>', methods=['GET'])
@firebase_token_required
def get_payment_route(payment_id):
    status = get_payment_status(current_app.extensions['firestore'], request.user['uid'], payment_id)
    return jsonify(status), 200
