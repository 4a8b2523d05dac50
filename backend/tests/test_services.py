"""Tests for the service registry, EntityService and the editorial services."""

from datetime import date

import pytest

from pressroom.bootstrap import create_registry
from pressroom.core.config import Settings
from pressroom.core.errors import UnknownServiceError, UnrecognizedFilterError
from pressroom.core.types import Entity
from pressroom.editorial import AuthorService, SubmissionService, register_editorial_services, seed_demo
from pressroom.hooks import HookName, HookPoint, HookRegistry
from pressroom.persistence import InMemoryRepository
from pressroom.query import Condition, QuerySpec
from pressroom.serialization import SUMMARY_AND_FULL, PropertySchema, attribute, related
from pressroom.services import EntityService, ListResult, ServiceRegistry


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def repository():
    repository = InMemoryRepository()
    seed_demo(repository)
    return repository


@pytest.fixture
def registry(repository):
    registry = ServiceRegistry(repository)
    register_editorial_services(registry)
    return registry


@pytest.fixture
def submissions(registry):
    return registry.get("Submission")


def _workload_repository():
    """Context 5: 12 queued submissions assigned to user 17, plus 3 that miss a filter."""
    repository = InMemoryRepository()
    for i in range(1, 13):
        repository.add(
            Entity("Submission", i, {"contextId": 5, "status": "queued", "submissionProgress": 0})
        )
        repository.add(Entity("StageAssignment", i, {"submissionId": i, "userId": 17}))

    # Wrong status, wrong assignee, wrong context
    repository.add(Entity("Submission", 13, {"contextId": 5, "status": "published", "submissionProgress": 0}))
    repository.add(Entity("StageAssignment", 13, {"submissionId": 13, "userId": 17}))
    repository.add(Entity("Submission", 14, {"contextId": 5, "status": "queued", "submissionProgress": 0}))
    repository.add(Entity("StageAssignment", 14, {"submissionId": 14, "userId": 99}))
    repository.add(Entity("Submission", 15, {"contextId": 6, "status": "queued", "submissionProgress": 0}))
    repository.add(Entity("StageAssignment", 15, {"submissionId": 15, "userId": 17}))
    return repository


class IssueService(EntityService):
    entity_type = "Issue"

    @classmethod
    def build_schema(cls):
        return PropertySchema(
            cls.entity_type,
            [
                attribute("id"),
                related("submissions", "Submission", source="submissionIds", many=True, tiers=SUMMARY_AND_FULL),
            ],
        )


# =============================================================================
# ServiceRegistry tests
# =============================================================================


class TestServiceRegistry:
    def test_get_creates_once(self, registry):
        assert registry.get("Submission") is registry.get("Submission")

    def test_factory_is_lazy(self, repository):
        created = []
        registry = ServiceRegistry(repository)
        registry.register("Counter", lambda r: created.append(r) or object())
        assert created == []
        registry.get("Counter")
        registry.get("Counter")
        assert len(created) == 1
        assert created[0] is registry

    def test_unknown_service(self, registry):
        with pytest.raises(UnknownServiceError) as exc_info:
            registry.get("Review")
        assert exc_info.value.status == 404

    def test_replace_factory_drops_instance(self, registry):
        original = registry.get("Author")

        class QuietAuthorService(AuthorService):
            pass

        registry.register_entity(QuietAuthorService)
        replacement = registry.get("Author")
        assert replacement is not original
        assert isinstance(replacement, QuietAuthorService)

    def test_reset(self, registry):
        original = registry.get("Author")
        registry.reset()
        assert registry.get("Author") is not original

    def test_collections(self, registry):
        assert registry.collections() == {"authors": "Author", "submissions": "Submission"}
        assert isinstance(registry.for_collection("submissions"), SubmissionService)
        with pytest.raises(UnknownServiceError):
            registry.for_collection("reviews")

    def test_names_and_has(self, registry):
        assert registry.names() == ["Author", "Submission"]
        assert registry.has("Author")
        assert not registry.has("Review")

    def test_context_is_bound(self, registry):
        context = registry.context(user_id=3, locale="en", source="test")
        assert context.services is registry
        assert context.extra == {"source": "test"}

    def test_service_without_entity_type(self, registry):
        class Nameless(EntityService):
            pass

        with pytest.raises(ValueError, match="entity_type"):
            Nameless(registry)


# =============================================================================
# EntityService.list tests
# =============================================================================


class TestList:
    def test_filtered_page_and_total(self):
        registry = ServiceRegistry(_workload_repository())
        register_editorial_services(registry)
        spec = QuerySpec.from_params({"status": "queued", "assignedTo": 17, "count": 10})

        result = registry.get("Submission").list(5, spec)

        assert isinstance(result, ListResult)
        assert len(result.items) == 10
        assert result.total == 12
        assert [e.id for e in result.items] == list(range(1, 11))

    def test_total_independent_of_offset(self):
        registry = ServiceRegistry(_workload_repository())
        register_editorial_services(registry)
        service = registry.get("Submission")
        for offset in (0, 5, 10, 20):
            spec = QuerySpec.from_params({"status": "queued", "assignedTo": 17, "offset": offset, "count": 10})
            assert service.list(5, spec).total == 12
        assert len(service.list(5, QuerySpec.from_params({"status": "queued", "offset": 10, "count": 10})).items) == 3

    def test_scope_restricts(self, submissions):
        items, total = submissions.list(2)
        assert [e.id for e in items] == [105]
        assert total == 1

    def test_soft_deleted_excluded(self, submissions):
        items, total = submissions.list(1)
        assert 106 not in [e.id for e in items]
        assert total == 4

    def test_get_hides_soft_deleted(self, submissions):
        assert submissions.get(101).id == 101
        assert submissions.get(106) is None

    def test_get_many_hides_soft_deleted_and_keeps_slots(self, submissions):
        entities = submissions.get_many([101, 106, 999, 102])
        assert [e.id if e else None for e in entities] == [101, None, None, 102]

    def test_relation_to_soft_deleted_is_null(self, registry, repository):
        repository.add(Entity("Issue", 1, {"submissionIds": [106, 102]}))
        registry.register_entity(IssueService)

        issue = registry.get("Issue").get_summary(repository.get("Issue", 1))
        assert issue["submissions"][0] is None
        assert issue["submissions"][1]["title"] == "Metadata Quality in Journals"

    def test_date_values_and_string_scope(self, repository, submissions):
        repository.add(
            Entity("Submission", 107, {"contextId": 3, "status": "queued", "dateSubmitted": date(2024, 5, 1)})
        )
        items, total = submissions.list("3", QuerySpec.from_params({"dateSubmittedAfter": "2024-01-01"}))
        assert [e.id for e in items] == [107]
        assert total == 1

    def test_date_range(self, submissions):
        spec = QuerySpec.from_params({"dateSubmittedAfter": "2024-01-01", "dateSubmittedBefore": "2024-02-28"})
        assert [e.id for e in submissions.list(None, spec).items] == [101, 105]

    def test_incomplete_flag(self, submissions):
        incomplete = submissions.list(1, QuerySpec.from_params({"isIncomplete": "true"}))
        assert [e.id for e in incomplete.items] == [104]
        complete = submissions.list(1, QuerySpec.from_params({"isIncomplete": "false"}))
        assert [e.id for e in complete.items] == [101, 102, 103]

    def test_search_phrase(self, submissions):
        spec = QuerySpec.from_params({"searchPhrase": "review workloads"})
        assert [e.id for e in submissions.list(1, spec).items] == [101]

    def test_order(self, submissions):
        spec = QuerySpec.from_params({"orderBy": "dateSubmitted", "orderDirection": "desc"})
        assert [e.id for e in submissions.list(1, spec).items] == [103, 101, 102, 104]

    def test_base_filters(self, submissions):
        items, _ = submissions.list(1, base_filters=[Condition("status", "eq", "published")])
        assert [e.id for e in items] == [102]

    def test_invalid_status_value(self, submissions):
        from pressroom.core.errors import InvalidFilterValueError

        with pytest.raises(InvalidFilterValueError):
            submissions.list(1, QuerySpec.from_params({"status": "lost"}))

    def test_strict_settings(self, repository):
        registry = ServiceRegistry(repository, settings=Settings(strict_filters=True))
        register_editorial_services(registry)
        with pytest.raises(UnrecognizedFilterError):
            registry.get("Submission").list(1, QuerySpec.from_params({"colour": "blue"}))

    def test_query_hook_restricts_list(self, repository):
        hooks = HookRegistry()

        @hooks.listener(HookName("Submission", HookPoint.QUERY_BUILDER))
        def published_only(payload):
            payload.query = payload.query.where(Condition("status", "eq", "published"))

        registry = ServiceRegistry(repository, hooks=hooks)
        register_editorial_services(registry)
        assert [e.id for e in registry.get("Submission").list(1).items] == [102]

    def test_authors_by_submission(self, registry):
        authors = registry.get("Author")
        items, total = authors.list(spec=QuerySpec.from_params({"submissionIds": "101,103"}))
        assert [e.id for e in items] == [1, 2, 4]
        assert total == 3


# =============================================================================
# Payload tests
# =============================================================================


class TestPayloads:
    def test_describe_list(self, submissions):
        payload = submissions.describe_list(1, QuerySpec.from_params({"status": "queued", "count": 2}))
        assert payload["itemsMax"] == 3
        assert [item["id"] for item in payload["items"]] == [101, 103]
        assert payload["_constants"]["STATUS_QUEUED"] == "queued"
        assert payload["_constants"]["STATUS_DECLINED"] == "declined"
        assert all("_constants" not in item for item in payload["items"])

    def test_describe_list_items_are_summaries(self, submissions):
        item = submissions.describe_list(1)["items"][0]
        assert "abstract" not in item
        assert "authors" not in item

    def test_describe_full(self, submissions):
        payload = submissions.describe(101)
        assert payload["abstract"] == "A study of review workloads."
        assert [a["familyName"] for a in payload["authors"]] == ["Okafor", "Chen"]
        assert "STATUS_PUBLISHED" in payload["_constants"]

    def test_describe_missing(self, submissions):
        assert submissions.describe(999) is None

    def test_describe_soft_deleted(self, submissions):
        assert submissions.describe(106) is None

    def test_author_payload_has_empty_constants(self, registry):
        payload = registry.get("Author").describe(1)
        assert payload["_constants"] == {}
        assert payload["email"] == "ada@example.org"
        assert payload["fullName"] == "Ada Okafor"

    def test_summarize_many(self, registry, repository):
        authors = registry.get("Author")
        summaries = authors.summarize_many(repository.get_many("Author", [2, 1]))
        assert [s["id"] for s in summaries] == [2, 1]


# =============================================================================
# Bootstrap tests
# =============================================================================


class TestBootstrap:
    def test_default_registry_is_seeded_memory(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.delenv("PRESSROOM_DB_PATH", raising=False)
        monkeypatch.delenv("PRESSROOM_SEED_DEMO", raising=False)
        registry = create_registry(settings=Settings())
        assert registry.get("Submission").list(1).total == 4

    def test_seed_disabled(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.delenv("PRESSROOM_DB_PATH", raising=False)
        monkeypatch.setenv("PRESSROOM_SEED_DEMO", "false")
        registry = create_registry(settings=Settings())
        assert registry.get("Submission").list(1).total == 0

    def test_sqlite_registry(self, tmp_path, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.setenv("PRESSROOM_DB_PATH", str(tmp_path / "press.db"))
        registry = create_registry(settings=Settings(), seed=True)
        payload = registry.get("Submission").describe(101)
        assert [a["id"] for a in payload["authors"]] == [1, 2]
        registry.repository.close()

    def test_explicit_repository_not_seeded(self):
        registry = create_registry(settings=Settings(), repository=InMemoryRepository())
        assert registry.get("Author").list().total == 0

    def test_schema_path_overrides_builtin_schema(self, tmp_path, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.delenv("PRESSROOM_DB_PATH", raising=False)
        (tmp_path / "author.yaml").write_text(
            "schema:\n  entity: Author\n  properties:\n    - name: id\n    - name: surname\n      source: familyName\n"
        )
        (tmp_path / "stage.yaml").write_text(
            "schema:\n  entity: StageAssignment\n  properties:\n    - name: id\n    - name: userId\n"
        )
        registry = create_registry(settings=Settings(schema_path=str(tmp_path)), seed=True)

        assert registry.schemas.list_registered() == ["Author", "StageAssignment", "Submission"]
        assert registry.get("Author").describe(1) == {"id": 1, "surname": "Okafor", "_constants": {}}

    def test_missing_schema_path_loads_nothing(self, tmp_path):
        registry = create_registry(
            settings=Settings(schema_path=str(tmp_path / "absent")), repository=InMemoryRepository()
        )
        assert registry.schemas.list_registered() == ["Author", "Submission"]
