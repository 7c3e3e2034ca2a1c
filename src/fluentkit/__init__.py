"""FLUENTKIT

Small, chainable helpers for everyday application code: locale-aware number
and date formatting, string cleanup, ordered array manipulation, barcode
images, phone numbers and directory cleanup.
"""

import logging as _logging

__all__ = ["__version__"]
__version__ = "0.1.0"

_logging.getLogger(__name__).addHandler(_logging.NullHandler())
