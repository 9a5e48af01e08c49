from .exceptions import (
    handle_error, HotspotError, NotFoundError, UnauthorizedError, ForbiddenError,
    ValidationError, InvalidRequest, LookupFailure, SigningError, IOFailure,
    NotificationWriteError, BatchWriteFailure
)

__all__ = [
    'handle_error',
    'HotspotError',
    'NotFoundError',
    'UnauthorizedError',
    'ForbiddenError',
    'ValidationError',
    'InvalidRequest',
    'LookupFailure',
    'SigningError',
    'IOFailure',
    'NotificationWriteError',
    'BatchWriteFailure'
]
