PASSWORD_MIN_LENGTH = 6
HABIT_NAME_MAX_LENGTH = 60


class ValidationError(ValueError):
    pass


def clean_habit_name(raw_value) -> str:
    name = " ".join(str(raw_value or "").split()).strip()
    if not name:
        raise ValidationError("Habit name cannot be empty.")
    return name[:HABIT_NAME_MAX_LENGTH]


def check_new_password(password, confirmation) -> str:
    if not password or len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters.")
    if password != confirmation:
        raise ValidationError("Passwords do not match.")
    return password


def check_signup(email, password, username) -> tuple[str, str, str]:
    clean_username = str(username or "").strip()
    if not clean_username:
        raise ValidationError("Please choose a username.")
    clean_email = str(email or "").strip().lower()
    if not clean_email:
        raise ValidationError("Email is required.")
    if not password or len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters.")
    return clean_email, password, clean_username


def check_reset_email(email) -> str:
    clean_email = str(email or "").strip().lower()
    if not clean_email:
        raise ValidationError("Enter your email first, then click 'Forgot password'.")
    return clean_email
