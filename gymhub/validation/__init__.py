"""
Module 'validation': point d'entrée public des règles de saisie.
"""

from .forms import (
    FormValidationError,
    format_phone_number,
    clean_phone_number,
    validate_zip_code,
    validate_address,
    require_contact,
    validate_member_form,
    add_interval,
    validate_billing_period,
    to_minor_units,
    is_zero_decimal,
)

__all__ = [
    "FormValidationError",
    "format_phone_number",
    "clean_phone_number",
    "validate_zip_code",
    "validate_address",
    "require_contact",
    "validate_member_form",
    "add_interval",
    "validate_billing_period",
    "to_minor_units",
    "is_zero_decimal",
]
