"""Demo data for the CLI and local API runs."""

from pressroom.core.types import Entity
from pressroom.persistence.adapter import EntityRepository

DEMO_AUTHORS = [
    {"id": 1, "submissionId": 101, "givenName": "Ada", "familyName": "Okafor", "email": "ada@example.org", "affiliation": "University of Lagos"},
    {"id": 2, "submissionId": 101, "givenName": "Lin", "familyName": "Chen", "email": "lin@example.org", "affiliation": "Tsinghua University"},
    {"id": 3, "submissionId": 102, "givenName": "Maria", "familyName": "Souza", "email": "maria@example.org", "affiliation": "USP"},
    {"id": 4, "submissionId": 103, "givenName": "Jonas", "familyName": "Berg", "email": "jonas@example.org", "affiliation": "Uppsala University"},
]

DEMO_SUBMISSIONS = [
    {"id": 101, "contextId": 1, "title": "Open Peer Review at Scale", "abstract": "A study of review workloads.", "status": "queued", "dateSubmitted": "2024-02-11", "submissionProgress": 0, "authorIds": [1, 2], "keywords": ["peer review"]},
    {"id": 102, "contextId": 1, "title": "Metadata Quality in Journals", "abstract": "Measuring metadata completeness.", "status": "published", "dateSubmitted": "2023-11-02", "submissionProgress": 0, "authorIds": [3], "keywords": ["metadata"]},
    {"id": 103, "contextId": 1, "title": "Preprint Adoption Trends", "abstract": "Preprints across disciplines.", "status": "queued", "dateSubmitted": "2024-03-20", "submissionProgress": 0, "authorIds": [4], "keywords": []},
    {"id": 104, "contextId": 1, "title": "Draft: Editorial Workflows", "abstract": None, "status": "queued", "dateSubmitted": None, "submissionProgress": 2, "authorIds": [], "keywords": []},
    {"id": 105, "contextId": 2, "title": "Citation Practices in History", "abstract": "Footnotes and their discontents.", "status": "declined", "dateSubmitted": "2024-01-05", "submissionProgress": 0, "authorIds": [], "keywords": []},
    {"id": 106, "contextId": 1, "title": "Withdrawn Manuscript", "abstract": "Removed by the author.", "status": "queued", "dateSubmitted": "2024-01-15", "submissionProgress": 0, "authorIds": [], "keywords": [], "dateDeleted": "2024-02-01"},
]

DEMO_ASSIGNMENTS = [
    {"id": 1, "submissionId": 101, "userId": 17},
    {"id": 2, "submissionId": 103, "userId": 17},
    {"id": 3, "submissionId": 102, "userId": 21},
]


def _entity(entity_type: str, record: dict) -> Entity:
    attributes = dict(record)
    entity_id = attributes.pop("id")
    return Entity(entity_type, entity_id, attributes)


def seed_demo(repository: EntityRepository) -> None:
    """Load the demo authors, submissions and stage assignments."""
    for record in DEMO_AUTHORS:
        repository.add(_entity("Author", record))
    for record in DEMO_SUBMISSIONS:
        repository.add(_entity("Submission", record))
    for record in DEMO_ASSIGNMENTS:
        repository.add(_entity("StageAssignment", record))
