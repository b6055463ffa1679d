"""Random password generation for new vault entries."""
import secrets
import string

SYMBOLS = "!@#$%^&*()-_=+[]{};:,.?"


def generate_password(length: int = 20, symbols: bool = True) -> str:
    """Return a random password with at least one char of each enabled class."""
    classes = [string.ascii_lowercase, string.ascii_uppercase, string.digits]
    if symbols:
        classes.append(SYMBOLS)
    if length < len(classes):
        raise ValueError(f"length must be at least {len(classes)}")

    alphabet = "".join(classes)
    chars = [secrets.choice(c) for c in classes]
    chars += [secrets.choice(alphabet) for _ in range(length - len(classes))]
    # shuffle so the required classes are not always at the front
    for i in range(len(chars) - 1, 0, -1):
        j = secrets.randbelow(i + 1)
        chars[i], chars[j] = chars[j], chars[i]
    return "".join(chars)
