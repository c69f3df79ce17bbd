from typer.testing import CliRunner

from aipcheck.cli.main import app

runner = CliRunner()

LRO_PROTO = """
syntax = "proto3";
package acme.library.v1;

service Library {
  rpc WriteBook(WriteBookRequest) returns (google.longrunning.Operation);
  rpc DeleteBookRevision(DeleteBookRevisionRequest) returns (Book);
}

message Book {
  string name = 1;
  string revision_id = 2 [(google.api.field_behavior) = OUTPUT_ONLY];
  google.protobuf.Timestamp revision_create_time = 3 [
    (google.api.field_behavior) = OUTPUT_ONLY
  ];
}

message WriteBookRequest {}

message DeleteBookRevisionRequest {
  // The revision to delete.
  string name = 1;
}
"""

WARNING_ONLY_PROTO = LRO_PROTO.replace(
    "rpc WriteBook(WriteBookRequest) returns (google.longrunning.Operation);", ""
)


def test_check_exits_one_on_errors(workspace_factory):
    root = workspace_factory.with_proto("library.proto", LRO_PROTO).build()

    result = runner.invoke(app, ["check", str(root)])

    assert result.exit_code == 1
    assert "error: library.proto:6: LRO-RESPONSE-TYPE:" in result.output
    assert "warning: library.proto:7: REVISION-DELETE-REQUIRES-ID:" in result.output


def test_check_exits_zero_with_only_warnings(workspace_factory):
    root = workspace_factory.with_proto("library.proto", WARNING_ONLY_PROTO).build()

    result = runner.invoke(app, ["check", str(root)])

    assert result.exit_code == 0, result.output
    assert "REVISION-DELETE-REQUIRES-ID" in result.output
    assert "LRO-RESPONSE-TYPE" not in result.output


def test_check_json_format_and_rule_selection(workspace_factory):
    root = workspace_factory.with_proto("library.proto", LRO_PROTO).build()

    result = runner.invoke(
        app, ["check", str(root), "--format", "json", "--rules", "revisions"]
    )

    assert result.exit_code == 0, result.output
    assert '"rule": "REVISION-DELETE-REQUIRES-ID"' in result.output
    assert '"severity": "warning"' in result.output
    assert "LRO-RESPONSE-TYPE" not in result.output


def test_check_usage_errors_exit_two(workspace_factory):
    root = workspace_factory.with_proto("library.proto", LRO_PROTO).build()

    unknown_rule = runner.invoke(app, ["check", str(root), "--rules", "NOPE"])
    assert unknown_rule.exit_code == 2
    assert "Unknown rule or group: NOPE" in unknown_rule.output

    unknown_format = runner.invoke(app, ["check", str(root), "--format", "xml"])
    assert unknown_format.exit_code == 2
    assert "Unknown output format: xml" in unknown_format.output

    missing_path = runner.invoke(app, ["check", str(root / "missing")])
    assert missing_path.exit_code == 2


def test_invalid_config_exits_two(workspace_factory):
    root = (
        workspace_factory
        .with_config({"jobs": 0})
        .with_proto("library.proto", LRO_PROTO)
        .build()
    )

    result = runner.invoke(app, ["check", str(root)])

    assert result.exit_code == 2
    assert "Invalid [tool.aipcheck] configuration" in result.output


def test_baseline_then_check_passes(workspace_factory):
    root = workspace_factory.with_proto("library.proto", LRO_PROTO).build()
    baseline_file = root / "accepted.yaml"

    saved = runner.invoke(app, ["baseline", str(root), "-o", str(baseline_file)])
    assert saved.exit_code == 0, saved.output
    assert baseline_file.is_file()

    result = runner.invoke(
        app, ["check", str(root), "--baseline", str(baseline_file), "-j", "2"]
    )
    assert result.exit_code == 0, result.output
    assert "LRO-RESPONSE-TYPE" not in result.output
    assert "Suppressed 2 finding(s)" in result.output


def test_rules_command_lists_builtin_rules(workspace_factory):
    root = workspace_factory.build()

    result = runner.invoke(app, ["rules", str(root)])

    assert result.exit_code == 0
    lines = result.output.splitlines()
    ids = [line.split()[0] for line in lines]
    assert ids == sorted(ids)
    assert "LRO-RESPONSE-TYPE" in ids
    assert "REVISION-DELETE-REQUIRES-ID" in ids
    assert any(line.split()[1:3] == ["lro", "error"] for line in lines)
