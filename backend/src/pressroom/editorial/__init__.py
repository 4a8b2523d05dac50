"""Illustrative editorial domain: submissions, authors, stage assignments."""

from pressroom.editorial.seed import seed_demo
from pressroom.editorial.services import (
    AuthorService,
    SubmissionService,
    SubmissionStatus,
    register_editorial_services,
)
from pressroom.editorial.tables import EDITORIAL_TABLES

__all__ = [
    "EDITORIAL_TABLES",
    "AuthorService",
    "SubmissionService",
    "SubmissionStatus",
    "register_editorial_services",
    "seed_demo",
]
