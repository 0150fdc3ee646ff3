import secrets


def generate_session_id(prefix: str = "PS") -> str:
    """
    Generate an unguessable session ID like 'PS-3f9c0a...'.

    Used by SQLAlchemy as a column default, so it must work when called
    with zero positional arguments.
    """
    block = secrets.token_hex(16)
    if prefix:
        return f"{prefix}-{block}"
    return block
