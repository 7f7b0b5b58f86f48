from datetime import datetime

DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 20

# sortBy value -> (field, descending)
SORT_OPTIONS = {
    "participants": ("participants", True),
    "startDate": ("startDate", False),
}
DEFAULT_SORT = ("createdAt", True)
# Values of any other type sort with the missing ones
SORT_TYPES = {
    "participants": (int, float),
    "startDate": datetime,
    "createdAt": datetime,
}

SEARCH_FIELDS = ("title", "description", "category")


class ChallengeQuery:
    """Filter, sort and page window for listing challenges.

    Every constraint left as ``None`` is ignored. ``unsatisfiable`` marks a
    query built from a malformed bound (bad date or number); it matches
    nothing instead of raising.
    """

    def __init__(self, categories=None, start_from=None, start_to=None,
                 min_participants=None, max_participants=None, search=None,
                 page=DEFAULT_PAGE, per_page=DEFAULT_PER_PAGE, sort_by=None,
                 unsatisfiable=False):
        self.categories = categories
        self.start_from = start_from
        self.start_to = start_to
        self.min_participants = min_participants
        self.max_participants = max_participants
        self.search = search
        self.page = page
        self.per_page = per_page
        self.sort_field, self.descending = SORT_OPTIONS.get(sort_by, DEFAULT_SORT)
        self.unsatisfiable = unsatisfiable

    @property
    def skip(self):
        return (self.page - 1) * self.per_page

    def matches(self, doc):
        if self.unsatisfiable:
            return False
        if self.categories is not None and doc.get("category") not in self.categories:
            return False
        if not _in_range(doc.get("startDate"), self.start_from, self.start_to):
            return False
        if not _in_range(doc.get("participants"), self.min_participants, self.max_participants):
            return False
        if self.search:
            needle = self.search.casefold()
            if not any(needle in str(doc.get(field) or "").casefold() for field in SEARCH_FIELDS):
                return False
        return True

    def sort(self, docs):
        field = self.sort_field
        expected = SORT_TYPES.get(field, object)

        def key(doc, missing_rank):
            # Missing or mistyped values share one rank so they never get compared
            value = doc.get(field)
            if value is None or isinstance(value, bool) or not isinstance(value, expected):
                return (missing_rank, None)
            return (1 - missing_rank, value)

        if self.descending:
            # reverse=True keeps store order among ties; missing values go last
            return sorted(docs, key=lambda d: key(d, 0), reverse=True)
        return sorted(docs, key=lambda d: key(d, 1))

    def apply(self, docs):
        """Filter, sort and slice an iterable of documents; returns (total, page)"""
        matched = self.sort([doc for doc in docs if self.matches(doc)])
        return len(matched), matched[self.skip:self.skip + self.per_page]


def _in_range(value, lower, upper):
    if lower is None and upper is None:
        return True
    if value is None:
        return False
    try:
        if lower is not None and value < lower:
            return False
        if upper is not None and value > upper:
            return False
    except TypeError:
        return False
    return True
