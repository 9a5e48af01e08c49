import os


def _split(value):
    return [item.strip() for item in value.split(',') if item.strip()]


class Config:
    """Settings read from the environment (after load_dotenv)."""

    def __init__(self, **overrides):
        self.port = int(os.getenv('PORT', 3001))
        self.allowed_origins = _split(os.getenv(
            'ALLOWED_ORIGINS', 'http://localhost:3000,http://localhost:5173'
        ))

        # Apple Wallet
        self.passes_dir = os.getenv('PASSES_DIR', 'passes')
        self.pass_base_url = os.getenv(
            'PASS_BASE_URL', f"http://localhost:{self.port}/passes"
        )
        self.pass_model_dir = os.getenv('PASS_MODEL_DIR', 'pass_model/Generic.pass')
        self.pass_certificate = os.getenv('PASS_CERTIFICATE', 'certs/certificate.pem')
        self.pass_key = os.getenv('PASS_KEY', 'certs/key.pem')
        self.pass_wwdr_certificate = os.getenv('PASS_WWDR_CERTIFICATE', 'certs/wwdr.pem')
        self.pass_cert_password = os.getenv('PASS_CERT_PASSWORD', 'password')
        self.pass_type_identifier = os.getenv('PASS_TYPE_IDENTIFIER', 'pass.com.wificostarica.credits')
        self.pass_team_identifier = os.getenv('PASS_TEAM_IDENTIFIER', 'TEAMID0000')
        self.pass_organization_name = os.getenv('PASS_ORGANIZATION_NAME', 'WiFi Costa Rica')
        # Escritorio: devuelve la respuesta sin firmar ni escribir el .pkpass
        self.pass_mock_signing = os.getenv('PASS_MOCK_SIGNING', 'false').lower() in ('1', 'true', 'yes')

        # Firebase
        self.firebase_credentials_path = os.getenv('FIREBASE_CREDENTIALS_PATH', 'serviceAccountKey.json')
        self.firebase_storage_bucket = os.getenv('FIREBASE_STORAGE_BUCKET')

        # Correo
        self.sendgrid_api_key = os.getenv('SENDGRID_API_KEY')
        self.email_sender = os.getenv('EMAIL_SENDER', 'no-reply@wifi-costarica.com')

        for key, value in overrides.items():
            if not hasattr(self, key):
                raise AttributeError(f"Unknown config key: {key}")
            setattr(self, key, value)
