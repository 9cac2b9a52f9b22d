from __future__ import annotations

import pytest

from notion_importer.application.dto.import_dto import ReconciliationContext
from notion_importer.application.use_cases.reconciliation_use_cases import (
    ReconciliationUseCase,
    resolve_key_fields,
)
from notion_importer.domain.entities.mapping import PropertyOverride
from notion_importer.domain.entities.property_types import DuplicatePolicy, PropertyType
from notion_importer.shared.exceptions.domain import (
    DestinationReadError,
    SchemaSyncError,
    ValidationException,
)

HEADERS = ["name", "email"]
ALICE_BOB = [
    {"name": "Alice", "email": "a@x.com"},
    {"name": "Bob", "email": "a@x.com"},
]


def _context(policy=DuplicatePolicy.SKIP, key_fields=("email",), **kwargs) -> ReconciliationContext:
    return ReconciliationContext(
        database_id="db",
        title_field=kwargs.pop("title_field", "name"),
        policy=policy,
        key_fields=list(key_fields),
        **kwargs,
    )


def test_alice_bob_created_then_skipped(destination) -> None:
    use_case = ReconciliationUseCase(destination)

    first = use_case.run(ALICE_BOB, HEADERS, _context())

    assert (first.created, first.updated, first.skipped, first.failed) == (2, 0, 0, 0)
    assert destination.page_titles() == ["Alice", "Bob"]
    assert first.new_properties == frozenset({"name", "email"})

    second = use_case.run(ALICE_BOB, HEADERS, _context())

    assert (second.created, second.updated, second.skipped, second.failed) == (0, 0, 2, 0)
    assert len(destination.pages) == 2
    assert second.total == 2

def test_alice_bob_into_database_with_default_title(make_destination) -> None:
    dest = make_destination({"Name": "title"})
    use_case = ReconciliationUseCase(dest)

    first = use_case.run(ALICE_BOB, HEADERS, _context())

    assert (first.created, first.skipped, first.failed) == (2, 0, 0)
    assert dest.page_titles() == ["Alice", "Bob"]
    assert dest.schema_updates == [{"email": {"rich_text": {}}}]
    assert dest.schema == {"Name": "title", "email": "rich_text"}

    second = use_case.run(ALICE_BOB, HEADERS, _context())

    assert (second.created, second.skipped) == (0, 2)


def test_unknown_existing_type_is_left_untouched(make_destination) -> None:
    dest = make_destination({"name": "title", "ID": "unique_id"})

    result = ReconciliationUseCase(dest).run(
        [{"name": "A", "ID": "7"}], ["name", "ID"], _context(policy=DuplicatePolicy.NONE, key_fields=())
    )

    assert result.created == 1
    assert dest.schema_updates == []
    assert list(dest.create_calls[0]["properties"]) == ["name"]


def test_skip_run_is_idempotent(destination) -> None:
    records = [{"name": "Alice", "email": "a@x.com"}, {"name": "Carol", "email": "c@x.com"}]
    use_case = ReconciliationUseCase(destination)

    use_case.run(records, HEADERS, _context())
    calls_after_first = len(destination.create_calls)
    use_case.run(records, HEADERS, _context())

    assert len(destination.pages) == 2
    assert len(destination.create_calls) == calls_after_first
    assert destination.update_calls == []


def test_policy_none_creates_everything_without_reading_records(destination) -> None:
    use_case = ReconciliationUseCase(destination)

    result = use_case.run(ALICE_BOB, HEADERS, _context(policy=DuplicatePolicy.NONE, key_fields=()))
    again = use_case.run(ALICE_BOB, HEADERS, _context(policy=DuplicatePolicy.NONE, key_fields=()))

    assert result.created == 2 and again.created == 2
    assert len(destination.pages) == 4
    assert destination.query_calls == 0


def test_unknown_key_fields_fall_back_to_no_detection(destination) -> None:
    use_case = ReconciliationUseCase(destination)
    use_case.run(ALICE_BOB, HEADERS, _context())

    result = use_case.run(ALICE_BOB, HEADERS, _context(key_fields=("dni",)))

    assert result.created == 2
    assert len(destination.pages) == 4


def test_resolve_key_fields() -> None:
    assert resolve_key_fields(["email", "dni"], HEADERS, DuplicatePolicy.SKIP) == (
        ["email"],
        DuplicatePolicy.SKIP,
    )
    assert resolve_key_fields(["dni"], HEADERS, DuplicatePolicy.SKIP) == ([], DuplicatePolicy.NONE)
    assert resolve_key_fields(["email"], HEADERS, DuplicatePolicy.NONE) == ([], DuplicatePolicy.NONE)


def test_update_new_only_writes_only_new_properties(make_destination) -> None:
    dest = make_destination({"name": "title", "email": "rich_text"})
    alice_id = dest.add_page(
        {
            "name": {"title": [{"text": {"content": "Alice"}}]},
            "email": {"rich_text": [{"text": {"content": "a@x.com"}}]},
        }
    )
    headers = ["name", "email", "phone"]
    records = [
        {"name": "Alice", "email": "a@x.com", "phone": "555"},
        {"name": "Alice 2", "email": "a@x.com"},
        {"name": "Carol", "email": "c@x.com", "phone": "777"},
    ]

    result = ReconciliationUseCase(dest).run(
        records, headers, _context(policy=DuplicatePolicy.UPDATE_NEW_ONLY)
    )

    assert (result.created, result.updated, result.skipped, result.failed) == (1, 1, 1, 0)
    assert result.new_properties == frozenset({"phone"})
    assert dest.update_calls == [(alice_id, {"phone": {"rich_text": [{"text": {"content": "555"}}]}})]
    assert dest.page_titles() == ["Alice", "Carol"]


def test_update_new_only_without_new_properties_writes_nothing(make_destination) -> None:
    dest = make_destination({"name": "title", "email": "rich_text"})
    dest.add_page(
        {
            "name": {"title": [{"text": {"content": "Alice"}}]},
            "email": {"rich_text": [{"text": {"content": "a@x.com"}}]},
        }
    )

    result = ReconciliationUseCase(dest).run(
        ALICE_BOB, HEADERS, _context(policy=DuplicatePolicy.UPDATE_NEW_ONLY)
    )

    assert (result.created, result.updated, result.skipped) == (0, 0, 2)
    assert dest.update_calls == []
    assert dest.create_calls == []


def test_files_field_adds_image_block(destination) -> None:
    context = _context(
        policy=DuplicatePolicy.NONE,
        key_fields=(),
        customize=True,
        overrides={"foto": PropertyOverride(type=PropertyType.FILES)},
    )

    ReconciliationUseCase(destination).run([{"name": "Alice", "foto": "http://x/y.png"}], ["name", "foto"], context)

    page = destination.pages[0]
    assert page["properties"]["foto"]["files"][0]["external"]["url"] == "http://x/y.png"
    assert len(page["children"]) == 1
    assert page["children"][0]["image"]["external"]["url"] == "http://x/y.png"


def test_transient_create_failure_is_retried(destination) -> None:
    destination.create_errors["Bob"] = 1

    result = ReconciliationUseCase(destination).run(ALICE_BOB, HEADERS, _context())

    assert (result.created, result.failed) == (2, 0)


def test_double_create_failure_is_counted_and_run_completes(destination) -> None:
    destination.create_errors["Bob"] = 2
    records = ALICE_BOB + [{"name": "Carol", "email": "c@x.com"}]

    result = ReconciliationUseCase(destination).run(records, HEADERS, _context())

    assert (result.created, result.failed) == (2, 1)
    assert result.failed_records[0].error.details["record"] == "Bob"
    assert destination.page_titles() == ["Alice", "Carol"]


def test_renamed_key_field_matches_existing_pages(make_destination) -> None:
    dest = make_destination({"name": "title", "Correo": "email"})
    dest.add_page({"name": {"title": [{"text": {"content": "Alice"}}]}, "Correo": {"email": "a@x.com"}})
    context = _context(
        customize=True,
        overrides={"email": PropertyOverride(name="Correo", type=PropertyType.EMAIL)},
    )

    result = ReconciliationUseCase(dest).run(ALICE_BOB, HEADERS, context)

    assert (result.created, result.skipped) == (0, 2)


def test_progress_callback_is_forwarded(destination) -> None:
    calls = []
    use_case = ReconciliationUseCase(destination, progress_callback=lambda *args: calls.append(args))
    records = [{"name": str(i), "email": f"{i}@x.com"} for i in range(4)]

    use_case.run(records, HEADERS, _context(progress_every=2))

    assert calls == [("agregados", 2, 4), ("agregados", 4, 4)]


class TestFatalErrors:
    def test_invalid_title_field(self, destination) -> None:
        with pytest.raises(ValidationException):
            ReconciliationUseCase(destination).run(ALICE_BOB, HEADERS, _context(title_field="dni"))
        assert destination.create_calls == []

    def test_schema_rejected_aborts_before_writes(self, destination) -> None:
        destination.fail_schema_update = True
        with pytest.raises(SchemaSyncError):
            ReconciliationUseCase(destination).run(ALICE_BOB, HEADERS, _context())
        assert destination.create_calls == []

    def test_destination_read_failure(self, destination) -> None:
        destination.fail_query = True
        with pytest.raises(DestinationReadError) as exc:
            ReconciliationUseCase(destination).run(ALICE_BOB, HEADERS, _context())
        assert isinstance(exc.value.__cause__, RuntimeError)
        assert destination.create_calls == []
