from utils.validators import require_fields, parse_int, parse_datetime, utcnow

REQUIRED_FIELDS = [
    "title",
    "category",
    "description",
    "duration",
    "impactMetric",
    "startDate",
    "endDate",
]

DEFAULT_CREATED_BY = "admin@ecotrack.com"


class Challenge:
    def __init__(self, title, category, description, duration, impact_metric,
                 start_date, end_date, target="", created_by=DEFAULT_CREATED_BY,
                 image_url="", estimated_impact_value=None, id=None):
        self.id = id
        self.title = title
        self.category = category
        self.description = description
        self.duration = duration
        self.target = target
        # The counter belongs to the participation layer; new challenges start empty
        self.participants = 0
        self.impact_metric = impact_metric
        self.created_by = created_by
        self.start_date = start_date
        self.end_date = end_date
        self.image_url = image_url
        self.estimated_impact_value = estimated_impact_value
        self.created_at = utcnow()
        self.updated_at = self.created_at

    @classmethod
    def from_payload(cls, data):
        """Validate a create request body and build the challenge"""
        require_fields(data, REQUIRED_FIELDS)
        duration = parse_int(data["duration"], "duration")
        start_date = parse_datetime(data["startDate"], "startDate")
        end_date = parse_datetime(data["endDate"], "endDate")

        impact_value = data.get("estimatedImpactValue")
        if impact_value is not None and (isinstance(impact_value, bool) or not isinstance(impact_value, (int, float))):
            impact_value = None

        return cls(
            title=data["title"],
            category=data["category"],
            description=data["description"],
            duration=duration,
            impact_metric=data["impactMetric"],
            start_date=start_date,
            end_date=end_date,
            target=data.get("target") or "",
            created_by=data.get("createdBy") or DEFAULT_CREATED_BY,
            image_url=data.get("imageUrl") or "",
            estimated_impact_value=impact_value,
        )

    def to_dict(self):
        data = {
            "title": self.title,
            "category": self.category,
            "description": self.description,
            "duration": self.duration,
            "target": self.target,
            "participants": self.participants,
            "impactMetric": self.impact_metric,
            "createdBy": self.created_by,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "imageUrl": self.image_url,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at
        }
        if self.estimated_impact_value is not None:
            data["estimatedImpactValue"] = self.estimated_impact_value
        if self.id:
            data['id'] = self.id
        return data
