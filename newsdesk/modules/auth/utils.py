MIN_PASSWORD_LENGTH = 6


def validate_password_strength(password):
    """Validate password meets security requirements"""
    return len(password or '') >= MIN_PASSWORD_LENGTH
