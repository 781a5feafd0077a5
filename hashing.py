"""
Password digests and session tokens

Digests are unsalted SHA-256 hex strings so that stored digests stay
compatible with the accounts already persisted by the storefront client.
"""
import hashlib
import hmac
import secrets

DEFAULT_IMPORT_PASSWORD = 'ChangeMe2025!'

# Demo accounts seeded on first run:
#   admin@kobysthreads.com / SecureAdmin2025!
#   john@example.com, sarah@example.com / SecureUser2025!
DEMO_CREDENTIALS = {
    'ADMIN_EMAIL': 'admin@kobysthreads.com',
    'ADMIN_PASSWORD_HASH': '310d38607aae5ad9db72c393f80300b2462ae44a0d0e24561fc1a7bec6756466',
    'USER_EMAIL': 'john@example.com',
    'USER_PASSWORD_HASH': '055d5d79ac617fd2d7f532b58a772f9c5ca56c09e2c75cb44f4b9e97705ba64e',
    'USER2_EMAIL': 'sarah@example.com',
    'USER2_PASSWORD_HASH': '055d5d79ac617fd2d7f532b58a772f9c5ca56c09e2c75cb44f4b9e97705ba64e',
}


def hash_password(password: str) -> str:
    return hashlib.sha256(password.encode('utf-8')).hexdigest()


def verify_password(password: str, password_hash: str) -> bool:
    return hmac.compare_digest(hash_password(password), password_hash)


def generate_secure_token() -> str:
    return secrets.token_hex(32)
