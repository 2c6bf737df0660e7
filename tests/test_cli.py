import json
import shutil
from pathlib import Path
from unittest.mock import patch, MagicMock

import yaml
from click.testing import CliRunner

from es_request_runner.cli import main
from es_request_runner.executor.result import Err, Ok

FIXTURES = Path(__file__).parent / "fixtures"


def _copy_fixture(tmp_path: Path) -> Path:
    doc = tmp_path / "requests.es"
    shutil.copy(FIXTURES / "requests.es", doc)
    shutil.copy(FIXTURES / "docs.ndjson", tmp_path / "docs.ndjson")
    return doc


class TestCliRegions:
    def test_text_listing_marks_selection(self):
        runner = CliRunner()
        result = runner.invoke(main, ["regions", str(FIXTURES / "requests.es"), "--line", "6"])

        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[1].startswith("*")
        assert "POST /books/_doc" in lines[1]
        assert "has_body" in lines[1]
        assert "Found 5 requests." in result.output

    def test_json_output(self):
        runner = CliRunner()
        result = runner.invoke(main, ["regions", str(FIXTURES / "requests.es"), "--format", "json"])

        assert result.exit_code == 0
        rows = json.loads(result.output)
        assert len(rows) == 5
        assert rows[2]["is_bulk"] is True
        assert rows[4]["file_ref"] == "docs.ndjson"
        assert not any(row["selected"] for row in rows)

    def test_yaml_output(self):
        runner = CliRunner()
        result = runner.invoke(main, ["regions", str(FIXTURES / "requests.es"), "--format", "yaml", "--line", "2"])

        assert result.exit_code == 0
        rows = yaml.safe_load(result.output)
        assert rows[0]["selected"] is True
        assert rows[0]["line"] == 2

    def test_non_utf8_document(self, tmp_path):
        doc = tmp_path / "q.es"
        doc.write_bytes(b"GET /caf\xe9\n")

        runner = CliRunner()
        result = runner.invoke(main, ["regions", str(doc)])

        assert result.exit_code == 1
        assert "Could not read" in result.output
        assert not isinstance(result.exception, UnicodeDecodeError)


class TestCliRun:
    @patch("es_request_runner.cli.RequestExecutor")
    def test_run_at_line(self, MockExecutor, tmp_path):
        executor = MagicMock()
        executor.execute.return_value = Ok(status=200, body={"status": "green"}, elapsed_ms=5)
        executor.notices = []
        MockExecutor.return_value = executor
        doc = _copy_fixture(tmp_path)

        runner = CliRunner()
        result = runner.invoke(main, ["run", str(doc), "--line", "2", "--host", "es:9200"])

        assert result.exit_code == 0
        assert "Elasticsearch Results[5ms]" in result.output
        assert '"status": "green"' in result.output
        settings = MockExecutor.call_args[0][0]
        assert settings.host == "es:9200"
        region = executor.execute.call_args[0][0]
        assert region.label == "GET /_cluster/health"

    @patch("es_request_runner.cli.RequestExecutor")
    def test_run_uses_workspace_settings(self, MockExecutor, tmp_path):
        executor = MagicMock()
        executor.execute.return_value = Ok(status=200, body={})
        executor.notices = ["Certificate at path \"x\" is not valid"]
        MockExecutor.return_value = executor
        doc = _copy_fixture(tmp_path)
        (tmp_path / ".esrunner.yaml").write_text("elasticsearch:\n  host: workspace:9200\n  indentTabSize: 4\n")

        runner = CliRunner()
        result = runner.invoke(main, ["run", str(doc), "--index", "3"])

        assert result.exit_code == 0
        settings = MockExecutor.call_args[0][0]
        assert settings.host == "workspace:9200"
        assert settings.indent_tab_size == 4
        assert "Warning: Certificate" in result.output
        assert executor.execute.call_args[0][0].is_bulk is True

    @patch("es_request_runner.cli.RequestExecutor")
    def test_run_as_document(self, MockExecutor, tmp_path):
        executor = MagicMock()
        executor.execute.return_value = Ok(status=200, body={"a": 1})
        executor.notices = []
        MockExecutor.return_value = executor
        doc = _copy_fixture(tmp_path)
        (tmp_path / ".esrunner.yaml").write_text("{}\n")

        runner = CliRunner()
        result = runner.invoke(main, ["run", str(doc), "--line", "2", "--as-document"])

        assert result.exit_code == 0
        assert json.loads((tmp_path / "result.json").read_text()) == {"a": 1}

    @patch("es_request_runner.cli.RequestExecutor")
    def test_run_error_exit_code(self, MockExecutor, tmp_path):
        executor = MagicMock()
        executor.execute.return_value = Err(kind="connection", message="Connection refused")
        executor.notices = []
        MockExecutor.return_value = executor

        runner = CliRunner()
        result = runner.invoke(main, ["run", str(_copy_fixture(tmp_path)), "--line", "2"])

        assert result.exit_code == 1
        assert "Connection refused" in result.output

    def test_run_no_request_at_line(self, tmp_path):
        runner = CliRunner()
        result = runner.invoke(main, ["run", str(_copy_fixture(tmp_path)), "--line", "3"])

        assert result.exit_code != 0
        assert "No request at line 3" in result.output

    def test_run_needs_line_or_index(self, tmp_path):
        runner = CliRunner()
        result = runner.invoke(main, ["run", str(_copy_fixture(tmp_path))])

        assert result.exit_code == 2


class TestCliFmt:
    def test_fmt_rewrites_file(self, tmp_path):
        doc = tmp_path / "q.es"
        doc.write_text('POST /a/_doc\n{"a":1,\n"b":2}\n')

        runner = CliRunner()
        result = runner.invoke(main, ["fmt", str(doc), "--indent", "4"])

        assert result.exit_code == 0
        assert "Reformatted 1 bodies" in result.output
        assert doc.read_text() == 'POST /a/_doc\n{\n    "a": 1,\n    "b": 2\n}\n'

    def test_fmt_check(self, tmp_path):
        doc = tmp_path / "q.es"
        original = 'POST /a/_doc\n{"a":1,\n"b":2}\n'
        doc.write_text(original)

        runner = CliRunner()
        result = runner.invoke(main, ["fmt", str(doc), "--check"])

        assert result.exit_code == 1
        assert doc.read_text() == original

    def test_fmt_keeps_crlf(self, tmp_path):
        doc = tmp_path / "q.es"
        doc.write_bytes(b'POST /a/_doc\r\n{"a":1}\r\n')

        runner = CliRunner()
        result = runner.invoke(main, ["fmt", str(doc)])

        assert result.exit_code == 0
        assert doc.read_bytes() == b'POST /a/_doc\r\n{\r\n  "a": 1\r\n}\r\n'

    def test_fmt_non_utf8_document(self, tmp_path):
        doc = tmp_path / "q.es"
        doc.write_bytes(b"POST /caf\xe9\n")

        runner = CliRunner()
        result = runner.invoke(main, ["fmt", str(doc)])

        assert result.exit_code == 1
        assert "Could not read" in result.output
        assert not isinstance(result.exception, UnicodeDecodeError)


class TestCliOpen:
    @patch("es_request_runner.cli.click.launch")
    def test_open_launches_file(self, mock_launch, tmp_path):
        doc = _copy_fixture(tmp_path)

        runner = CliRunner()
        result = runner.invoke(main, ["open", str(doc), "--line", "19"])

        assert result.exit_code == 0
        mock_launch.assert_called_once_with(str((tmp_path / "docs.ndjson").resolve()))

    def test_open_without_reference(self, tmp_path):
        runner = CliRunner()
        result = runner.invoke(main, ["open", str(_copy_fixture(tmp_path)), "--line", "2", "--print-only"])

        assert result.exit_code == 1
        assert "has no file reference" in result.output
