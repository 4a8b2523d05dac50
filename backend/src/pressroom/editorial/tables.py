"""SQL tables for the editorial entities."""

import sqlalchemy as sa

from pressroom.persistence.sql import TableMapping

metadata = sa.MetaData()

submissions = sa.Table(
    "submission",
    metadata,
    sa.Column("id", sa.Integer, primary_key=True),
    sa.Column("contextId", sa.Integer, nullable=False, index=True),
    sa.Column("title", sa.String),
    sa.Column("abstract", sa.Text),
    sa.Column("status", sa.String, nullable=False),
    sa.Column("dateSubmitted", sa.String),  # ISO date
    sa.Column("submissionProgress", sa.Integer, nullable=False, default=0),
    sa.Column("authorIds", sa.JSON),
    sa.Column("keywords", sa.JSON),
    sa.Column("dateDeleted", sa.String),
)

authors = sa.Table(
    "author",
    metadata,
    sa.Column("id", sa.Integer, primary_key=True),
    sa.Column("submissionId", sa.Integer, index=True),
    sa.Column("givenName", sa.String),
    sa.Column("familyName", sa.String),
    sa.Column("email", sa.String),
    sa.Column("affiliation", sa.String),
)

stage_assignments = sa.Table(
    "stage_assignment",
    metadata,
    sa.Column("id", sa.Integer, primary_key=True),
    sa.Column("submissionId", sa.Integer, nullable=False, index=True),
    sa.Column("userId", sa.Integer, nullable=False, index=True),
)

EDITORIAL_TABLES = [
    TableMapping("Submission", submissions),
    TableMapping("Author", authors),
    TableMapping("StageAssignment", stage_assignments),
]
