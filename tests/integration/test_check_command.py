import json
import sys
import types

import pytest

from aipcheck.analysis import UnknownRuleError
from aipcheck.analysis.rules import BaseRule
from aipcheck.app.runners import UnknownFormatError
from aipcheck.needle import L, catalog
from aipcheck.spec import Severity
from aipcheck.test_utils import SpyBus, WorkspaceFactory, create_test_app

WRITE_BOOK = """
syntax = "proto3";
package acme.library.v1;

import "google/longrunning/operations.proto";

service Library {
  // Writes a book.
  rpc WriteBook(WriteBookRequest) returns (google.longrunning.Operation);
}

message WriteBookRequest {
  string parent = 1;
}
"""

BOOK_WITHOUT_CREATE_TIME = """
syntax = "proto3";
package acme.library.v1;

import "google/api/field_behavior.proto";

message Book {
  string name = 1;
  string revision_id = 2 [(google.api.field_behavior) = OUTPUT_ONLY];
}
"""

DELETE_BOOK_REVISION = """
syntax = "proto3";
package acme.library.v1;

import "google/api/field_behavior.proto";
import "google/protobuf/timestamp.proto";

service Library {
  rpc DeleteBookRevision(DeleteBookRevisionRequest) returns (Book);
}

message Book {
  string name = 1;
  string revision_id = 2 [(google.api.field_behavior) = OUTPUT_ONLY];
  google.protobuf.Timestamp revision_create_time = 3 [
    (google.api.field_behavior) = OUTPUT_ONLY
  ];
}

message DeleteBookRevisionRequest {
  // The name of the book revision to delete.
  string name = 1;
}
"""

CLEAN = """
syntax = "proto3";
package acme.library.v1;

message Shelf {
  string name = 1;
}
"""


def _run(monkeypatch, root, **kwargs):
    app = create_test_app(root_path=root)
    spy_bus = SpyBus()
    with spy_bus.patch(monkeypatch):
        outcome = app.run_check(**kwargs)
    return outcome, spy_bus


def test_write_book_without_operation_info(tmp_path, monkeypatch):
    root = WorkspaceFactory(tmp_path).with_proto("library.proto", WRITE_BOOK).build()

    outcome, spy_bus = _run(monkeypatch, root)

    assert outcome.success is False
    findings = outcome.result.findings
    assert len(findings) == 1
    assert findings[0].rule_id == "LRO-RESPONSE-TYPE"
    assert findings[0].severity == Severity.ERROR
    assert findings[0].location.file == "library.proto"
    assert outcome.output.startswith("error: library.proto:9: LRO-RESPONSE-TYPE: ")
    spy_bus.assert_id_called(L.check.run.fail, level="error")


def test_book_missing_revision_create_time(tmp_path, monkeypatch):
    root = (
        WorkspaceFactory(tmp_path)
        .with_proto("book.proto", BOOK_WITHOUT_CREATE_TIME)
        .build()
    )

    outcome, _ = _run(monkeypatch, root)

    assert outcome.success is False
    assert [(f.rule_id, f.severity) for f in outcome.result.findings] == [
        ("REVISION-FIELDS-PRESENT", Severity.ERROR)
    ]
    assert "revision_create_time" in outcome.result.findings[0].message


def test_delete_revision_warning_does_not_fail(tmp_path, monkeypatch):
    root = (
        WorkspaceFactory(tmp_path)
        .with_proto("library.proto", DELETE_BOOK_REVISION)
        .build()
    )

    outcome, spy_bus = _run(monkeypatch, root)

    assert outcome.success is True
    findings = outcome.result.findings
    assert [(f.rule_id, f.severity) for f in findings] == [
        ("REVISION-DELETE-REQUIRES-ID", Severity.WARNING)
    ]
    spy_bus.assert_id_called(L.check.run.success_with_warnings, level="success")


def test_clean_tree_passes(tmp_path, monkeypatch):
    root = WorkspaceFactory(tmp_path).with_proto("shelf.proto", CLEAN).build()

    outcome, spy_bus = _run(monkeypatch, root)

    assert outcome.success is True
    assert outcome.output == ""
    assert outcome.result.files_checked == 1
    spy_bus.assert_id_called(L.check.run.success, level="success")


def test_unparsable_file_is_reported_and_others_still_checked(tmp_path, monkeypatch):
    root = (
        WorkspaceFactory(tmp_path)
        .with_proto("a_broken.proto", "message Book {\n  string name = ;\n}\n")
        .with_proto("library.proto", WRITE_BOOK)
        .build()
    )

    outcome, spy_bus = _run(monkeypatch, root)

    assert outcome.success is False
    findings = outcome.result.findings
    assert [(f.rule_id, f.location.file, f.location.line) for f in findings] == [
        ("PARSE-ERROR", "a_broken.proto", 2),
        ("LRO-RESPONSE-TYPE", "library.proto", 9),
    ]
    assert outcome.result.files_checked == 2
    spy_bus.assert_id_called(L.check.file.parse_error, level="error")


def test_empty_directory_warns_and_passes(tmp_path, monkeypatch):
    outcome, spy_bus = _run(monkeypatch, tmp_path)

    assert outcome.success is True
    assert outcome.result.files_checked == 0
    spy_bus.assert_id_called(L.check.file.none_found, level="warning")


def test_json_output(tmp_path, monkeypatch):
    root = (
        WorkspaceFactory(tmp_path)
        .with_proto("library.proto", WRITE_BOOK)
        .with_proto("book.proto", BOOK_WITHOUT_CREATE_TIME)
        .build()
    )

    outcome, _ = _run(monkeypatch, root, fmt="json")

    payload = json.loads(outcome.output)
    assert [(item["file"], item["rule"]) for item in payload] == [
        ("book.proto", "REVISION-FIELDS-PRESENT"),
        ("library.proto", "LRO-RESPONSE-TYPE"),
    ]
    assert payload[1]["symbol"] == "Library.WriteBook"


def test_rule_selection(tmp_path, monkeypatch):
    root = (
        WorkspaceFactory(tmp_path)
        .with_proto("library.proto", WRITE_BOOK)
        .with_proto("book.proto", BOOK_WITHOUT_CREATE_TIME)
        .build()
    )

    outcome, _ = _run(monkeypatch, root, rules=["revisions"])

    assert {f.rule_id for f in outcome.result.findings} == {"REVISION-FIELDS-PRESENT"}


def test_invalid_selection_fails_before_reading_files(tmp_path, monkeypatch, mocker):
    root = WorkspaceFactory(tmp_path).with_proto("library.proto", WRITE_BOOK).build()
    app = create_test_app(root_path=root)
    discover = mocker.patch("aipcheck.app.runners.check.runner.discover_proto_files")

    with pytest.raises(UnknownRuleError):
        app.run_check(rules=["NO-SUCH-RULE"])
    with pytest.raises(UnknownFormatError):
        app.run_check(fmt="xml")
    discover.assert_not_called()


def test_config_controls_rules_severity_and_exclude(tmp_path, monkeypatch):
    root = (
        WorkspaceFactory(tmp_path)
        .with_config(
            {
                "severity": {"LRO-RESPONSE-TYPE": "warning"},
                "disable": ["revisions"],
                "exclude": ["vendor/*"],
                "format": "json",
            }
        )
        .with_proto("library.proto", WRITE_BOOK)
        .with_proto("book.proto", BOOK_WITHOUT_CREATE_TIME)
        .with_proto("vendor/other.proto", WRITE_BOOK)
        .build()
    )

    outcome, _ = _run(monkeypatch, root)

    assert outcome.success is True
    payload = json.loads(outcome.output)
    assert [(item["file"], item["rule"], item["severity"]) for item in payload] == [
        ("library.proto", "LRO-RESPONSE-TYPE", "warning")
    ]


def test_baseline_round_trip(tmp_path, monkeypatch):
    root = WorkspaceFactory(tmp_path).with_proto("library.proto", WRITE_BOOK).build()
    app = create_test_app(root_path=root)
    spy_bus = SpyBus()

    with spy_bus.patch(monkeypatch):
        baseline = app.run_baseline()
        outcome = app.run_check(baseline=baseline)

    assert baseline == root / "aipcheck-baseline.yaml"
    assert outcome.success is True
    assert outcome.result.findings == []
    assert [f.rule_id for f in outcome.result.suppressed] == ["LRO-RESPONSE-TYPE"]
    spy_bus.assert_id_called(L.baseline.run.saved, level="success")
    spy_bus.assert_id_called(L.check.baseline.suppressed, level="info")


def test_baseline_from_config(tmp_path, monkeypatch):
    root = (
        WorkspaceFactory(tmp_path)
        .with_config({"baseline": "lint/baseline.yaml"})
        .with_proto("protos/library.proto", WRITE_BOOK)
        .build()
    )
    app = create_test_app(root_path=root)
    spy_bus = SpyBus()

    with spy_bus.patch(monkeypatch):
        written = app.run_baseline(target=root / "protos")
        outcome = app.run_check(target=root / "protos")

    assert written == root.resolve() / "lint" / "baseline.yaml"
    assert outcome.success is True


class NamingRule(BaseRule):
    id = "ACME-NAMING"
    group = "acme"
    severity = Severity.ERROR
    summary = "Services must end in 'Service'."

    def check(self, schema):
        return [
            self.finding(
                s.location, s.full_name, "Service {name} is misnamed.", name=s.name
            )
            for s in schema.services
            if not s.name.endswith("Service")
        ]


def test_plugin_rules_are_discovered_from_entry_points(tmp_path, monkeypatch):
    module = types.ModuleType("acme_lint_rules")
    module.naming = NamingRule()
    monkeypatch.setitem(sys.modules, "acme_lint_rules", module)
    root = (
        WorkspaceFactory(tmp_path)
        .with_project_name("acme-lint")
        .with_entry_points("aipcheck.rules", {"naming": "acme_lint_rules:naming"})
        .with_config({"rules": ["acme"]})
        .with_proto("library.proto", WRITE_BOOK)
        .build()
    )

    outcome, _ = _run(monkeypatch, root)

    assert [f.rule_id for f in outcome.result.findings] == ["ACME-NAMING"]
    assert outcome.success is False


def test_broken_plugin_is_reported(tmp_path, monkeypatch):
    root = (
        WorkspaceFactory(tmp_path)
        .with_entry_points("aipcheck.rules", {"broken": "no_such_module_xyz:rules"})
        .with_proto("shelf.proto", CLEAN)
        .build()
    )
    spy_bus = SpyBus()

    with spy_bus.patch(monkeypatch):
        app = create_test_app(root_path=root)
        outcome = app.run_check()

    spy_bus.assert_id_called(L.error.plugin.load, level="error")
    assert outcome.success is True


@pytest.mark.parametrize("fmt", ["text", "json"])
def test_repeated_runs_are_byte_identical(tmp_path, monkeypatch, fmt):
    root = (
        WorkspaceFactory(tmp_path)
        .with_proto("library.proto", WRITE_BOOK)
        .with_proto("book.proto", BOOK_WITHOUT_CREATE_TIME)
        .with_proto("delete.proto", DELETE_BOOK_REVISION.replace("Book", "Novel"))
        .build()
    )

    first, _ = _run(monkeypatch, root, fmt=fmt)
    second, _ = _run(monkeypatch, root, fmt=fmt, jobs=4)

    assert first.output == second.output
    assert first.output != ""


def test_message_overrides_do_not_leak_between_projects(tmp_path, monkeypatch):
    first = (
        WorkspaceFactory(tmp_path / "first")
        .with_config({})
        .with_source(
            ".aipcheck/needle/en/check.json",
            json.dumps({"check.run.success": "First project is clean"}),
        )
        .with_proto("shelf.proto", CLEAN)
        .build()
    )
    second = (
        WorkspaceFactory(tmp_path / "second")
        .with_config({})
        .with_proto("shelf.proto", CLEAN)
        .build()
    )
    monkeypatch.delenv("AIPCHECK_LANG", raising=False)

    create_test_app(root_path=first)
    assert catalog.get(L.check.run.success) == "First project is clean"

    create_test_app(root_path=second)
    assert catalog.get(L.check.run.success) != "First project is clean"
