"""
String normalizers shared by the settings validators, query parsing and the person layer.

Emails are compared case-insensitively everywhere, so every path that stores or looks one
up goes through `normalize_email`.
"""


def to_uppercase(value: str | None) -> str | None:
    """' desc ' -> 'DESC'. None (an omitted setting or query parameter) passes through."""
    return None if value is None else value.strip().upper()


def to_lowercase(value: str | None) -> str | None:
    return None if value is None else value.strip().lower()


def normalize_email(email: str) -> str:
    return email.strip().lower()
