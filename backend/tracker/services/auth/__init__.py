"""Authentication services: users and opaque session tokens.

Credential storage lives in the ``users`` table; ``SessionResolver`` maps
the token carried in the session cookie back to its owner.
"""

from .sessions import SessionResolver, create_user, find_user_by_username

__all__ = ['SessionResolver', 'create_user', 'find_user_by_username']
