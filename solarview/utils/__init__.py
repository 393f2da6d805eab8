from .error_reporter import ErrorReporter, get_error_reporter, resolve_reporter

__all__ = [
    'ErrorReporter',
    'get_error_reporter',
    'resolve_reporter',
]
