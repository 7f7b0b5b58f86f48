from utils.exceptions import ValidationError
from utils.validators import parse_datetime, parse_int_or_default, utcnow


class Event:
    def __init__(self, title, date, location, description="", organizer="", max_participants=0):
        self.title = title
        self.description = description
        self.date = date
        self.location = location
        self.organizer = organizer
        self.max_participants = max_participants
        # Not maintained by any operation yet; there is no event registration flow
        self.current_participants = 0
        self.created_at = utcnow()

    @classmethod
    def from_payload(cls, data):
        if not all([data.get('title'), data.get('date'), data.get('location')]):
            raise ValidationError("title, date and location are required")
        return cls(
            title=data['title'],
            date=parse_datetime(data['date'], 'date'),
            location=data['location'],
            description=data.get('description') or "",
            organizer=data.get('organizer') or "",
            max_participants=parse_int_or_default(data.get('maxParticipants'), 0, minimum=0),
        )

    def to_dict(self):
        return {
            "title": self.title,
            "description": self.description,
            "date": self.date,
            "location": self.location,
            "organizer": self.organizer,
            "maxParticipants": self.max_participants,
            "currentParticipants": self.current_participants,
            "createdAt": self.created_at
        }
