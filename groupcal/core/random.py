"""
Generate random tokens
"""

import secrets


def session_token():
    return secrets.token_urlsafe(48)
