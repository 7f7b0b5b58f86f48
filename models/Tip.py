from utils.exceptions import ValidationError
from utils.validators import parse_int_or_default, utcnow


class Tip:
    def __init__(self, title, content, author, category=None, author_name=None, upvotes=0):
        self.title = title
        self.content = content
        self.category = category or "General"
        self.author = author
        self.author_name = author_name or author
        self.upvotes = upvotes
        self.created_at = utcnow()

    @classmethod
    def from_payload(cls, data):
        if not all([data.get('title'), data.get('content'), data.get('author')]):
            raise ValidationError("title, content and author are required")
        return cls(
            title=data['title'],
            content=data['content'],
            author=data['author'],
            category=data.get('category'),
            author_name=data.get('authorName'),
            upvotes=parse_int_or_default(data.get('upvotes'), 0, minimum=0),
        )

    def to_dict(self):
        return {
            "title": self.title,
            "content": self.content,
            "category": self.category,
            "author": self.author,
            "authorName": self.author_name,
            "upvotes": self.upvotes,
            "createdAt": self.created_at
        }
