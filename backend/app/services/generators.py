"""
Random account data generators for the junior/teamlead tools pages
"""
import random
import re
from datetime import datetime
from typing import Dict, List, Optional

# UK mobile operator prefixes, duplicates kept so shared ranges come up more often
UK_MOBILE_PREFIXES = [
    # O2
    "070", "071", "075", "078",
    # Vodafone
    "074", "077", "078", "079",
    # EE
    "074", "075", "079",
    # Three
    "073", "075", "076", "079",
    # Lycamobile
    "074", "075", "076",
    # Tesco Mobile
    "075", "077",
    # Giffgaff
    "071", "074", "075",
    # Manx Telecom
    "076",
    # Virgin Mobile
    "073", "074",
]

UK_EMAIL_DOMAINS = [
    "gmail.com", "yahoo.co.uk", "hotmail.co.uk", "outlook.com",
    "btinternet.com", "sky.com", "virgin.net", "talk21.com",
]

FIRST_NAMES = [
    "james", "john", "robert", "michael", "william", "david", "richard", "joseph",
    "thomas", "christopher", "charles", "daniel", "matthew", "anthony", "mark",
    "mary", "patricia", "jennifer", "linda", "elizabeth", "barbara", "susan",
    "jessica", "sarah", "karen", "nancy", "lisa", "betty", "helen", "sandra",
]

LAST_NAMES = [
    "smith", "johnson", "williams", "brown", "jones", "garcia", "miller", "davis",
    "rodriguez", "martinez", "hernandez", "lopez", "gonzalez", "wilson", "anderson",
    "thomas", "taylor", "moore", "jackson", "martin", "lee", "perez", "thompson",
    "white", "harris", "sanchez", "clark", "ramirez", "lewis", "robinson",
]

LOWERCASE = "abcdefghijklmnopqrstuvwxyz"
UPPERCASE = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
DIGITS = "0123456789"
SYMBOLS = "!@#$%^&*"

PASSWORD_MIN_LENGTH = 10
PASSWORD_MAX_LENGTH = 14
MAX_ACCOUNTS = 1000

TSV_HEADER = ["Username", "Password", "Email", "Phone Number", "Generation Date"]

# quick generators
PERSON_FIRST_NAMES = ["John", "Jane", "Michael", "Sarah", "David", "Emma", "Chris", "Lisa", "Mark", "Anna"]
PERSON_LAST_NAMES = ["Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis", "Rodriguez", "Martinez"]
STREETS = ["Main St", "Oak Ave", "Park Rd", "First St", "Second Ave", "Elm St", "Maple Ave", "Cedar Rd"]
CITIES = [
    ("New York", "NY"), ("Los Angeles", "CA"), ("Chicago", "IL"), ("Houston", "TX"),
    ("Phoenix", "AZ"), ("Philadelphia", "PA"), ("San Antonio", "TX"), ("San Diego", "CA"),
]
SIMPLE_EMAIL_NAMES = ["user", "test", "demo", "sample", "example", "john", "jane", "admin"]
SIMPLE_EMAIL_DOMAINS = ["gmail.com", "yahoo.com", "hotmail.com", "outlook.com", "test.com"]

FORMAT_MODES = ("lowercase", "clean", "table")


def _rng(rng: Optional[random.Random]) -> random.Random:
    return rng if rng is not None else random.Random()


def clean_name(name: str) -> str:
    """Lowercase a custom name and keep only latin letters"""
    return re.sub(r"[^a-z]", "", name.lower())


def generate_username(custom_name: Optional[str] = None, rng: Optional[random.Random] = None) -> str:
    """
    Username from a custom name or a random first+last name pair.

    Custom names get a 1-999 suffix half of the time, random names 60% of the time.
    """
    rng = _rng(rng)
    if custom_name:
        suffix = str(rng.randint(1, 999)) if rng.random() < 0.5 else ""
        return clean_name(custom_name) + suffix

    first = rng.choice(FIRST_NAMES)
    last = rng.choice(LAST_NAMES)
    suffix = str(rng.randint(1, 999)) if rng.random() < 0.6 else ""
    return first + last + suffix


def generate_password(rng: Optional[random.Random] = None) -> str:
    """
    Password of 10-14 characters with at least one lowercase, uppercase,
    digit and symbol. The first character is always a lowercase letter.
    """
    rng = _rng(rng)
    length = rng.randint(PASSWORD_MIN_LENGTH, PASSWORD_MAX_LENGTH)

    first = rng.choice(LOWERCASE)
    rest = [rng.choice(UPPERCASE), rng.choice(DIGITS), rng.choice(SYMBOLS)]
    pool = LOWERCASE + UPPERCASE + DIGITS + SYMBOLS
    while len(rest) + 1 < length:
        rest.append(rng.choice(pool))

    rng.shuffle(rest)
    return first + "".join(rest)


def generate_email(username: str, rng: Optional[random.Random] = None) -> str:
    return f"{username}@{_rng(rng).choice(UK_EMAIL_DOMAINS)}"


def generate_uk_phone_number(rng: Optional[random.Random] = None) -> str:
    """11-digit UK mobile number: operator prefix (07x) followed by 8 digits"""
    rng = _rng(rng)
    prefix = rng.choice(UK_MOBILE_PREFIXES)
    return prefix + "".join(rng.choice(DIGITS) for _ in range(8))


def parse_custom_names(raw: Optional[str]) -> List[str]:
    """One name per line, blank lines dropped"""
    if not raw:
        return []
    return [line.strip() for line in raw.splitlines() if line.strip()]


def generate_accounts(
    count: int,
    custom_names: Optional[List[str]] = None,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> List[Dict[str, str]]:
    """Generate a batch of accounts; custom names are used cyclically"""
    rng = _rng(rng)
    count = max(1, min(int(count), MAX_ACCOUNTS))
    names = custom_names or []
    generation_date = (now or datetime.now()).strftime("%d.%m.%Y, %H:%M:%S")

    accounts = []
    for i in range(count):
        custom = names[i % len(names)] if names else None
        username = generate_username(custom, rng)
        accounts.append({
            "username": username,
            "password": generate_password(rng),
            "email": generate_email(username, rng),
            "phone_number": generate_uk_phone_number(rng),
            "generation_date": generation_date,
        })
    return accounts


def accounts_to_tsv(accounts: List[Dict[str, str]]) -> str:
    """Tab separated table ready to paste into a spreadsheet"""
    lines = ["\t".join(TSV_HEADER)]
    for account in accounts:
        lines.append("\t".join([
            account["username"],
            account["password"],
            account["email"],
            account["phone_number"],
            account["generation_date"],
        ]))
    return "\n".join(lines)


def generate_person(rng: Optional[random.Random] = None) -> str:
    rng = _rng(rng)
    return f"{rng.choice(PERSON_FIRST_NAMES)} {rng.choice(PERSON_LAST_NAMES)}"


def generate_address(rng: Optional[random.Random] = None) -> str:
    rng = _rng(rng)
    number = rng.randint(1, 9999)
    street = rng.choice(STREETS)
    city, state = rng.choice(CITIES)
    zip_code = rng.randint(10000, 99999)
    return f"{number} {street}, {city}, {state} {zip_code}"


def generate_us_phone(rng: Optional[random.Random] = None) -> str:
    rng = _rng(rng)
    area = rng.randint(200, 999)
    exchange = rng.randint(200, 999)
    number = rng.randint(1000, 9999)
    return f"({area}) {exchange}-{number}"


def generate_simple_email(rng: Optional[random.Random] = None) -> str:
    rng = _rng(rng)
    name = rng.choice(SIMPLE_EMAIL_NAMES)
    return f"{name}{rng.randint(1, 999)}@{rng.choice(SIMPLE_EMAIL_DOMAINS)}"


QUICK_GENERATORS = {
    "person": generate_person,
    "address": generate_address,
    "phone": generate_us_phone,
    "email": generate_simple_email,
}


def format_text(text: str, mode: str) -> str:
    """
    Reformat pasted text.

    lowercase: lowercase everything
    clean: collapse whitespace and drop characters outside word/punctuation
    table: split every line on whitespace and join the cells with tabs
    """
    if mode == "lowercase":
        return text.lower()
    if mode == "clean":
        collapsed = re.sub(r"\s+", " ", text)
        return re.sub(r"[^\w\s.,!?-]", "", collapsed).strip()
    if mode == "table":
        return "\n".join("\t".join(line.split()) for line in text.split("\n"))
    raise ValueError(f"Unknown format mode: {mode}")
