import logging
from datetime import datetime, timezone

from dotenv import load_dotenv
from flask import Flask, jsonify, make_response
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from models.Card import iso_timestamp
from routes.notification_routes import notification_bp
from routes.payment_routes import payment_bp
from routes.wallet_routes import passes_bp, wallet_bp
from services.notification_service import NotificationService
from utils.config import Config
from utils.exceptions import HotspotError, handle_error
from utils.firebase import get_receipt_bucket, initialize_firebase

logger = logging.getLogger("wifi_admin")


def create_app(config=None, db=None, receipt_bucket=None):
    config = config or Config()

    if db is None:
        _, db = initialize_firebase(config)
    if receipt_bucket is None and config.firebase_storage_bucket:
        receipt_bucket = get_receipt_bucket(config)

    app = Flask(__name__)
    app.extensions['hotspot_config'] = config
    app.extensions['firestore'] = db
    app.extensions['receipt_bucket'] = receipt_bucket
    app.extensions['notification_service'] = NotificationService(db)

    CORS(
        app,
        resources={
            r"/*": {
                "origins": config.allowed_origins,
                "allow_headers": ["Content-Type", "Authorization"],
                "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
                "expose_headers": ["Content-Disposition"]  # Descarga de .pkpass
            }
        }
    )

    # Register blueprints
    app.register_blueprint(wallet_bp, url_prefix='/api/wallet')
    app.register_blueprint(passes_bp, url_prefix='/passes')
    app.register_blueprint(payment_bp, url_prefix='/payments')
    app.register_blueprint(notification_bp, url_prefix='/notifications')

    @app.route('/health', methods=['GET'])
    def health():
        return jsonify({
            'status': 'OK',
            'message': 'Wallet Pass Generation Server is running',
            'timestamp': iso_timestamp(datetime.now(timezone.utc))
        }), 200

    @app.errorhandler(HotspotError)
    def handle_hotspot_error(e):
        return make_response(handle_error(e))

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        if isinstance(e, HTTPException):
            return e
        logger.exception("Unhandled error")
        return make_response(handle_error(e))

    return app


if __name__ == '__main__':
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    config = Config()
    app = create_app(config)
    logger.info("🚀 Wallet Pass Generation Server running on port %s", config.port)
    logger.info("📱 Apple Wallet endpoint: http://localhost:%s/api/wallet/apple-pass", config.port)
    logger.info("🏥 Health check: http://localhost:%s/health", config.port)
    app.run(host='0.0.0.0', port=config.port, debug=False)
