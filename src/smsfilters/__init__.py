"""
SMS Filters.

Rule-based classification of incoming text messages into discount,
promotional, OTP, banking and ISP categories.
"""

__version__ = "0.1.0"
