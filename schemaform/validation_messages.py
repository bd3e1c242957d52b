"""
Validation message catalog.

All validation messages come from here so callers and tests can match exact text.
"""

REQUIRED = 'Field is required'
NUMBER_REQUIRED = 'Must be a number'
OBJECT_REQUIRED = 'Must be an object'


def MIN_LENGTH(length: int) -> str:
    return f'Must be at least {length} characters'


def MAX_LENGTH(length: int) -> str:
    return f'Must be no more than {length} characters'


def MIN_NUMBER(minimum) -> str:
    return f'Must be at least {minimum}'


def MAX_NUMBER(maximum) -> str:
    return f'Must be no more than {maximum}'


def MAX_DEPTH_EXCEEDED(depth: int) -> str:
    return f'Maximum validation depth ({depth}) exceeded'


def CIRCULAR_REFERENCE(path: str) -> str:
    return f'Circular reference detected at path: {path}'
