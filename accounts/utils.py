import string
import secrets
from datetime import datetime


def generate_reference():
    characters = string.ascii_letters + string.digits
    random_string = "".join(secrets.choice(characters) for _ in range(12))
    return random_string.upper()


def generate_member_number():
    year = datetime.now().year % 100  # Last two digits of year
    random_number = "".join(secrets.choice(string.digits) for _ in range(6))
    return f"MBR{year}{random_number}"
