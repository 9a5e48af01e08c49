from flask import jsonify

class HotspotError(Exception):
    """Base exception class for the hotspot backend"""
    def __init__(self, message, status_code=400, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['success'] = False
        rv['error'] = self.message
        return rv

class NotFoundError(HotspotError):
    """Raised when a resource is not found"""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)

class UnauthorizedError(HotspotError):
    """Raised when a user is not authorized"""
    def __init__(self, message="Unauthorized", payload=None):
        super().__init__(message, 401, payload)

class ForbiddenError(HotspotError):
    """Raised when a user doesn't have permission"""
    def __init__(self, message="Forbidden", payload=None):
        super().__init__(message, 403, payload)

class ValidationError(HotspotError):
    """Raised when input validation fails"""
    def __init__(self, message="Validation error", payload=None):
        super().__init__(message, 400, payload)

class InvalidRequest(ValidationError):
    """Raised when a manual notification body has no usable target"""
    def __init__(self, message="Invalid notification target", payload=None):
        super().__init__(message, payload)

class LookupFailure(HotspotError):
    """Raised when a referenced user document could not be read"""
    def __init__(self, message="User lookup failed", payload=None):
        super().__init__(message, 500, payload)

class SigningError(HotspotError):
    """Raised when the pass could not be signed with the certificate bundle"""
    def __init__(self, message="Pass signing failed", payload=None):
        super().__init__(message, 500, payload)

class IOFailure(HotspotError):
    """Raised when a file or object could not be written"""
    def __init__(self, message="Write failed", payload=None):
        super().__init__(message, 500, payload)

class NotificationWriteError(HotspotError):
    """Raised when a single notification could not be stored"""
    def __init__(self, message="Notification write failed", payload=None):
        super().__init__(message, 500, payload)

class BatchWriteFailure(HotspotError):
    """Raised when a batch of notifications could not be committed"""
    def __init__(self, message="Batch write failed", payload=None):
        super().__init__(message, 500, payload)

def handle_error(e):
    """Convert exceptions to JSON responses"""
    if isinstance(e, HotspotError):
        response = jsonify(e.to_dict())
        response.status_code = e.status_code
        return response
    response = jsonify({
        'success': False,
        'message': 'An unexpected error occurred',
        'error': str(e)
    })
    response.status_code = 500
    return response
