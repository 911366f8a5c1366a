"""
Tests for the sorter host, configuration and CLI

Run with: pytest tests/ -v
"""

import pytest
from pathlib import Path
import sys

from click.testing import CliRunner
from loguru import logger

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from errors import ConfigError, DocumentReadError
from settings import LEFT_ARROW, SorterConfig, load_config
from sorter import (
    ConnectionSorter,
    UNREADABLE_MESSAGE,
    WRONG_TYPE_MESSAGE,
    read_document,
)
from review import Decision
from main import main


GOOD_CSV = 'First Name,Last Name,Company\nAlice,Smith,Acme\nBob,Jones,X\nCarol,White,"Y, Inc"\n'


def write_csv(directory, name="contacts.csv", content=GOOD_CSV):
    path = directory / name
    path.write_text(content, encoding="utf-8")
    return path


class TestConnectionSorter:
    """Tests for loading, atomic replacement and reset."""

    def setup_method(self):
        self.sorter = ConnectionSorter()

    def test_starts_empty(self):
        assert not self.sorter.has_document
        assert self.sorter.error is None
        assert self.sorter.records == []

    def test_load_text_starts_session(self):
        assert self.sorter.load_text(GOOD_CSV)

        assert self.sorter.has_document
        assert len(self.sorter.records) == 3
        assert self.sorter.session.cursor == 0
        assert self.sorter.error is None

    def test_rejected_document_keeps_previous_session(self):
        self.sorter.load_text(GOOD_CSV)
        self.sorter.handle_action("know")
        session = self.sorter.session

        assert not self.sorter.load_text("Name,Email\nA,b")

        assert self.sorter.session is session
        assert self.sorter.session.cursor == 1
        assert self.sorter.error == "Could not find required columns: First Name, Last Name, and Company"

    def test_new_document_replaces_session(self):
        self.sorter.load_text(GOOD_CSV)
        self.sorter.handle_action("skip")

        assert self.sorter.load_text("First Name,Last Name,Company\nDan,Brown,Z")

        assert self.sorter.session.cursor == 0
        assert [r.first_name for r in self.sorter.records] == ["Dan"]

    def test_reset(self):
        self.sorter.load_text(GOOD_CSV)
        self.sorter.handle_action("know")
        self.sorter.reset()

        assert not self.sorter.has_document
        assert self.sorter.session.log == []
        assert self.sorter.source_name is None

    def test_handle_action(self):
        self.sorter.load_text(GOOD_CSV)

        assert self.sorter.handle_action("know")
        assert self.sorter.handle_action("dont_know")
        assert self.sorter.handle_action("undo")
        assert self.sorter.handle_action("skip")
        assert not self.sorter.handle_action("bogus")

        assert [e.decision for e in self.sorter.session.log] == [Decision.KNOWN]
        assert self.sorter.session.skipped_count == 1

    def test_export_known(self):
        self.sorter.load_text(GOOD_CSV)
        self.sorter.handle_action("dont_know")
        self.sorter.handle_action("know")

        assert self.sorter.export_known() == 'First Name,Last Name,Company\n"Bob","Jones","X"'

    def test_load_file(self, tmp_path):
        assert self.sorter.load_file(write_csv(tmp_path))
        assert self.sorter.source_name == "contacts.csv"

    def test_load_file_with_bom(self, tmp_path):
        path = tmp_path / "bom.csv"
        path.write_bytes(GOOD_CSV.encode("utf-8-sig"))

        assert self.sorter.load_file(path)
        assert self.sorter.records[0].first_name == "Alice"

    def test_wrong_extension(self, tmp_path):
        path = write_csv(tmp_path, name="contacts.txt")

        assert not self.sorter.load_file(path)
        assert self.sorter.error == WRONG_TYPE_MESSAGE

    def test_undecodable_file(self, tmp_path):
        path = tmp_path / "broken.csv"
        path.write_bytes(b"\xff\xfe\xfa\x00")

        assert not self.sorter.load_file(path)
        assert self.sorter.error == UNREADABLE_MESSAGE

    def test_accept_error_keeps_session(self):
        self.sorter.load_text(GOOD_CSV)
        session = self.sorter.session

        assert not self.sorter.accept_error(RuntimeError("read aborted"))
        assert self.sorter.error == UNREADABLE_MESSAGE
        assert self.sorter.session is session

    def test_read_document_raises(self, tmp_path):
        with pytest.raises(DocumentReadError):
            read_document(tmp_path / "missing.csv")


class TestSettings:
    """Tests for configuration loading."""

    def test_default_bindings(self):
        config = SorterConfig()

        assert config.action_for_key("1") == "know"
        assert config.action_for_key("2") == "dont_know"
        assert config.action_for_key("3") == "skip"
        assert config.action_for_key(LEFT_ARROW) == "undo"
        assert config.action_for_key("x") is None
        assert config.key_label("undo") == "u"

    def test_load_overrides(self, tmp_path):
        path = tmp_path / "sorter.yaml"
        path.write_text("keys:\n  know: k\n  skip: [s, ' ']\nexport_filename: mine.csv\n", encoding="utf-8")

        config = load_config(path)

        assert config.action_for_key("k") == "know"
        assert config.action_for_key("1") is None
        assert config.action_for_key(" ") == "skip"
        assert config.action_for_key("2") == "dont_know"
        assert config.export_filename == "mine.csv"

    def test_bundled_config(self):
        config = load_config(Path(__file__).parent.parent / "config" / "sorter.yaml")

        assert config.action_for_key(LEFT_ARROW) == "undo"
        assert config.accepted_extensions == [".csv"]

    def test_scalar_key_binding(self, tmp_path):
        path = tmp_path / "sorter.yaml"
        path.write_text("keys:\n  know: 7\n  skip: [0, s]\n", encoding="utf-8")

        config = load_config(path)

        assert config.keys["know"] == ["7"]
        assert config.action_for_key("7") == "know"
        assert config.action_for_key("0") == "skip"

    def test_log_level_is_normalized(self):
        assert SorterConfig.from_dict({"log_level": "debug"}).log_level == "DEBUG"

    def test_unknown_log_level(self):
        with pytest.raises(ConfigError, match="Unknown log level: VERBOSE"):
            SorterConfig.from_dict({"log_level": "verbose"})

    def test_unknown_action(self):
        with pytest.raises(ConfigError):
            SorterConfig.from_dict({"keys": {"explode": ["x"]}})

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("keys: [\n", encoding="utf-8")

        with pytest.raises(ConfigError):
            load_config(path)

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ConfigError):
            load_config(path)


class TestCLI:
    """End-to-end runs of the interactive command."""

    def setup_method(self):
        self.runner = CliRunner()

    def teardown_method(self):
        # Drop sinks bound to the runner's streams
        logger.remove()

    def test_sort_and_export(self, tmp_path):
        source = write_csv(tmp_path)
        output = tmp_path / "known.csv"

        result = self.runner.invoke(main, ["-i", str(source), "-o", str(output)], input="132n\n")

        assert result.exit_code == 0, result.output
        assert "Sorting Complete!" in result.output
        assert "1 contacts were skipped" in result.output
        assert output.read_text(encoding="utf-8") == 'First Name,Last Name,Company\n"Alice","Smith","Acme"'

    def test_undo_then_redecide(self, tmp_path):
        source = write_csv(tmp_path)
        output = tmp_path / "known.csv"

        result = self.runner.invoke(main, ["-i", str(source), "-o", str(output)], input="1u211n\n")

        assert result.exit_code == 0, result.output
        assert output.read_text(encoding="utf-8") == (
            'First Name,Last Name,Company\n"Bob","Jones","X"\n"Carol","White","Y, Inc"'
        )

    def test_nothing_known_writes_nothing(self, tmp_path):
        source = write_csv(tmp_path)
        output = tmp_path / "known.csv"

        result = self.runner.invoke(main, ["-i", str(source), "-o", str(output)], input="223n\n")

        assert result.exit_code == 0, result.output
        assert "No known contacts to export" in result.output
        assert not output.exists()

    def test_quit(self, tmp_path):
        source = write_csv(tmp_path)
        output = tmp_path / "known.csv"

        result = self.runner.invoke(main, ["-i", str(source), "-o", str(output)], input="1q")

        assert result.exit_code == 0, result.output
        assert "nothing exported" in result.output
        assert not output.exists()

    def test_start_over_with_another_file(self, tmp_path):
        source = write_csv(tmp_path)
        second = write_csv(tmp_path, name="second.csv", content="First Name,Last Name,Company\nDan,Brown,Z\n")
        output = tmp_path / "known.csv"

        result = self.runner.invoke(
            main,
            ["-i", str(source), "-o", str(output)],
            input=f"133y\n{second}\n1n\n",
        )

        assert result.exit_code == 0, result.output
        assert output.read_text(encoding="utf-8") == 'First Name,Last Name,Company\n"Alice","Smith","Acme"'
        assert (tmp_path / "known_2.csv").read_text(encoding="utf-8") == (
            'First Name,Last Name,Company\n"Dan","Brown","Z"'
        )

    def test_output_to_new_directory(self, tmp_path):
        source = write_csv(tmp_path)
        out_dir = tmp_path / "out"

        result = self.runner.invoke(
            main,
            ["-i", str(source), "-o", str(out_dir) + "/"],
            input="133n\n",
        )

        assert result.exit_code == 0, result.output
        assert out_dir.is_dir()
        assert (out_dir / "known_contacts.csv").read_text(encoding="utf-8") == (
            'First Name,Last Name,Company\n"Alice","Smith","Acme"'
        )

    def test_unknown_log_level_in_config(self, tmp_path):
        source = write_csv(tmp_path)
        config = tmp_path / "sorter.yaml"
        config.write_text("log_level: verbose\n", encoding="utf-8")

        result = self.runner.invoke(main, ["-i", str(source), "-c", str(config)])

        assert result.exit_code == 1
        assert "Unknown log level: VERBOSE" in result.output

    def test_config_loading_is_logged(self, tmp_path):
        source = write_csv(tmp_path)
        config = tmp_path / "sorter.yaml"
        config.write_text("export_filename: mine.csv\n", encoding="utf-8")

        result = self.runner.invoke(main, ["-i", str(source), "-c", str(config)], input="q")

        assert result.exit_code == 0, result.output
        assert "Loading configuration from" in result.output

    def test_rejected_document(self, tmp_path):
        source = write_csv(tmp_path, content="Name,Email\nAlice,a@example.com\n")

        result = self.runner.invoke(main, ["-i", str(source)])

        assert result.exit_code == 1
        assert "Could not find required columns" in result.output

    def test_bad_config(self, tmp_path):
        source = write_csv(tmp_path)
        config = tmp_path / "bad.yaml"
        config.write_text("keys: [\n", encoding="utf-8")

        result = self.runner.invoke(main, ["-i", str(source), "-c", str(config)])

        assert result.exit_code == 1


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
