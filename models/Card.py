from datetime import datetime, timedelta, timezone

from utils.credits import format_credits, parse_credits, status_tier

ISSUER = 'WiFi Costa Rica'
CARD_NAME = 'WiFi Credits'

_WALLET_STEPS = [
    '3. Select "Loyalty card"',
    '4. Scan the QR code from the virtual card',
    '5. Or manually enter the card details'
]

# Google/Samsung/genérico solo difieren en la etiqueta y las instrucciones
CARD_KINDS = {
    'google': {
        'type': 'LOYALTY_CARD',
        'message': 'Google Pay pass generated successfully',
        'instructions': [
            '1. Open Google Pay on your phone',
            '2. Tap "Cards" → "+"',
        ] + _WALLET_STEPS
    },
    'samsung': {
        'type': 'LOYALTY_CARD',
        'message': 'Samsung Pay pass generated successfully',
        'instructions': [
            '1. Open Samsung Pay on your phone',
            '2. Tap "Cards" → "+"',
        ] + _WALLET_STEPS
    },
    'generic': {
        'type': 'GENERIC_PASS',
        'message': 'Generic wallet pass generated successfully',
        'instructions': [
            '1. Open your preferred wallet app',
            '2. Look for "Add card" or "Import" option',
            '3. Scan the QR code from the virtual card',
            '4. Or manually enter the card details',
            '5. Confirm and add to your wallet'
        ]
    }
}


def iso_timestamp(moment):
    return moment.astimezone(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


class WalletCard:
    def __init__(self, kind, user_id, user_email, credits, issued_at=None):
        self.kind = kind
        self.card_type = CARD_KINDS[kind]['type']
        self.user_id = user_id
        self.user_email = user_email
        self.credits = credits
        self.hours, self.minutes = parse_credits(credits)
        self.issued_at = issued_at or datetime.now(timezone.utc)

    @property
    def card_number(self):
        return self.user_id[-8:]

    @property
    def expiry_date(self):
        return (self.issued_at + timedelta(days=365)).date().isoformat()

    def to_dict(self):
        return {
            "type": self.card_type,
            "issuer": ISSUER,
            "cardName": CARD_NAME,
            "accountId": self.user_id,
            "accountEmail": self.user_email,
            "credits": self.credits,
            "balance": format_credits(self.hours, self.minutes),
            "status": status_tier(self.hours, self.minutes),
            "cardNumber": self.card_number,
            "expiryDate": self.expiry_date,
            "timestamp": iso_timestamp(self.issued_at)
        }
