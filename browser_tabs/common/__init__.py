# Common utilities and constants shared across packages
from .constants import *
from .errors import ErrorCode, SslProblem, SslError, BookmarksError

__all__ = [
    'MAX_TABS', 'EMPTY_URL',
    'SUPPRESSED_ERROR_CODES',
    'FILE_ERROR_TITLE', 'NETWORK_ERROR_TITLE',
    'PICTURE_FILE_SUFFIX',
    'SQLITE_MAX_LIKE_PATTERN_LENGTH',
    'IO_MAX_WORKERS', 'PICTURE_IO_MAX_WORKERS', 'TRACE_MAX_EVENTS',
    'ErrorCode', 'SslProblem', 'SslError', 'BookmarksError',
]
