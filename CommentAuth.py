import bcrypt

# bcrypt only reads the first 72 bytes; newer releases reject longer input
BCRYPT_MAX_BYTES = 72


def _password_bytes(password):
    return bytes(password, encoding="utf-8")[:BCRYPT_MAX_BYTES]


def verify_password(plain_password, hashed_password):
    return bcrypt.checkpw(
        _password_bytes(plain_password),
        bytes(hashed_password, encoding="utf-8"),
    )


def get_password_hash(password):
    # Stored as text so it fits any key-value backend
    return bcrypt.hashpw(
        _password_bytes(password),
        bcrypt.gensalt(),
    ).decode("utf-8")
