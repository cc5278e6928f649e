"""
Core — Shared Constants

@file core/constants.py
"""

DEFAULT_PAGE_SIZE = 25
MAX_PAGE_SIZE = 200

# Validation error codes, carried on django.core.exceptions.ValidationError.code
MISSING_REQUIRED_FIELD = 'missing_required_field'
SCOPED_UNIQUENESS_VIOLATION = 'scoped_uniqueness_violation'
HIERARCHY_MISMATCH = 'hierarchy_mismatch'
DUPLICATE_IDENTITY = 'duplicate_identity'
