import re
import secrets
import string

from utils.exceptions import ValidationError

# Firestore auto-id format: 20 characters from [A-Za-z0-9]
ID_LENGTH = 20
ID_ALPHABET = string.ascii_letters + string.digits
_ID_PATTERN = re.compile(r'^[A-Za-z0-9]{%d}$' % ID_LENGTH)


def new_record_id():
    return ''.join(secrets.choice(ID_ALPHABET) for _ in range(ID_LENGTH))


class RecordId:
    """A validated store identifier.

    Loose foreign keys such as ``UserChallenge.challengeId`` are stored as
    plain strings; they go through ``RecordId.parse`` (or ``is_valid``)
    before being used to address a document.
    """

    __slots__ = ('value',)

    def __init__(self, value):
        if not self.is_valid(value):
            raise ValueError(f"Not a record id: {value!r}")
        self.value = value

    @staticmethod
    def is_valid(value):
        return isinstance(value, str) and bool(_ID_PATTERN.match(value))

    @classmethod
    def parse(cls, value, message="Invalid ID"):
        if not cls.is_valid(value):
            raise ValidationError(message)
        return cls(value)

    def __str__(self):
        return self.value

    def __repr__(self):
        return f"RecordId({self.value!r})"

    def __eq__(self, other):
        if isinstance(other, RecordId):
            return self.value == other.value
        return NotImplemented

    def __hash__(self):
        return hash(self.value)
