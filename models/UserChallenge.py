from utils.validators import utcnow

STATUS_NOT_STARTED = "Not Started"

# Fields a progress update may not rewrite
PROTECTED_FIELDS = ("id", "userId", "challengeId", "joinDate")


class UserChallenge:
    def __init__(self, user_id, challenge_id):
        self.user_id = user_id
        self.challenge_id = challenge_id
        self.status = STATUS_NOT_STARTED
        self.progress = 0
        self.join_date = utcnow()
        self.updated_at = self.join_date

    def to_dict(self):
        return {
            "userId": self.user_id,
            "challengeId": self.challenge_id,
            "status": self.status,
            "progress": self.progress,
            "joinDate": self.join_date,
            "updatedAt": self.updated_at
        }


def resolved_view(record, challenge):
    """Project a membership record joined with its challenge document"""
    return {
        "id": record.get("id"),
        "userId": record.get("userId"),
        "challengeId": record.get("challengeId"),
        "status": record.get("status"),
        "progress": record.get("progress"),
        "joinDate": record.get("joinDate"),
        "challengeDetails": challenge,
    }
