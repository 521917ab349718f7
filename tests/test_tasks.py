"""Tests for the update, build, export and import operations."""

import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from localeforge.config import LocalesConfig, LocalesOptions, TaskTarget
from localeforge.errors import LocalesConfigError
from localeforge.store import StoreFormatError
from localeforge.tasks import LocalesTask, expand_sources

type WriteFile = Callable[[str, str], Path]
type ReadJson = Callable[[Path], Any]


def make_task(options: LocalesOptions | None = None, **targets: TaskTarget) -> LocalesTask:
    return LocalesTask(LocalesConfig(options=options or LocalesOptions(), targets=targets))


def write_store(write_file: WriteFile, relative: str, data: dict[str, Any]) -> Path:
    return write_file(relative, json.dumps(data))


class TestExpandSources:
    """Test expand_sources."""

    def test_globs_sorted_and_deduplicated(self, tmp_path: Path, write_file: WriteFile) -> None:
        b = write_file("app/b.js", "")
        a = write_file("app/sub/a.js", "")
        found = expand_sources([str(tmp_path / "app/**/*.js"), str(b)])
        assert found == sorted([str(a), str(b)])

    def test_missing_plain_path_warns(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        missing = str(tmp_path / "missing.js")
        with caplog.at_level(logging.WARNING):
            assert expand_sources([missing]) == []
        assert f"Source file {missing} not found." in caplog.text

    def test_directories_skipped(self, tmp_path: Path, write_file: WriteFile) -> None:
        write_file("app/dir.js/x.txt", "")
        assert expand_sources([str(tmp_path / "app/*.js")]) == []


class TestUpdate:
    """Test the update operation."""

    @pytest.fixture
    def sources(self, write_file: WriteFile) -> tuple[Path, Path]:
        html = write_file("app/index.html", "<p localize>Hello</p>")
        script = write_file("app/js/app.js", "localize('Save {n}');")
        return html, script

    @pytest.fixture
    def target(self, tmp_path: Path) -> TaskTarget:
        return TaskTarget(
            src=(str(tmp_path / "app/**/*.html"), str(tmp_path / "app/**/*.js")),
            dest=str(tmp_path / "locale/{locale}/i18n.json"),
        )

    def test_creates_store_per_locale(
        self,
        tmp_path: Path,
        sources: tuple[Path, Path],
        target: TaskTarget,
        read_json: ReadJson,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Every locale gets a store with all extracted keys."""
        html, script = sources
        options = LocalesOptions(locales=("en_US", "de_DE"))
        with caplog.at_level(logging.INFO):
            make_task(options, update=target).run("update")
        for locale in ("en_US", "de_DE"):
            data = read_json(tmp_path / f"locale/{locale}/i18n.json")
            assert data == {
                "Hello": {"value": "Hello", "files": [str(html)]},
                "Save {n}": {"value": "Save {n}", "files": [str(script)]},
            }
        assert "Created locale file" in caplog.text

    def test_keeps_translations_and_purges_stale_keys(
        self,
        tmp_path: Path,
        sources: tuple[Path, Path],
        target: TaskTarget,
        write_file: WriteFile,
        read_json: ReadJson,
    ) -> None:
        """A full run keeps values and drops keys no longer in the sources."""
        html, _ = sources
        store = write_store(
            write_file,
            "locale/en_US/i18n.json",
            {"Hello": {"value": "Hi there", "files": []}, "Stale": "Old"},
        )
        make_task(update=target).run("update")
        data = read_json(store)
        assert list(data) == ["Hello", "Save {n}"]
        assert data["Hello"] == {"value": "Hi there", "files": [str(html)]}

    def test_subset_run_does_not_purge(
        self,
        sources: tuple[Path, Path],
        target: TaskTarget,
        write_file: WriteFile,
        read_json: ReadJson,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Explicit files scan only part of the sources, so nothing is dropped."""
        html, _ = sources
        store = write_store(write_file, "locale/en_US/i18n.json", {"Stale": "Old"})
        with caplog.at_level(logging.INFO):
            make_task(update=target).run("update", [str(html)])
        assert list(read_json(store)) == ["Hello", "Stale"]
        assert "Not purging locales" in caplog.text

    def test_broken_source_disables_purge(
        self,
        sources: tuple[Path, Path],
        target: TaskTarget,
        write_file: WriteFile,
        read_json: ReadJson,
    ) -> None:
        """A source that fails to parse counts as not scanned."""
        write_file("app/js/broken.js", "localize('x'); (")
        store = write_store(write_file, "locale/en_US/i18n.json", {"Stale": "Old"})
        make_task(update=target).run("update")
        assert "Stale" in read_json(store)

    def test_rejected_html_does_not_abort_update(
        self,
        tmp_path: Path,
        sources: tuple[Path, Path],
        target: TaskTarget,
        write_file: WriteFile,
        read_json: ReadJson,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """An HTML file the tokenizer rejects is logged; the others still count."""
        odd = write_file("app/odd.html", "<p localize>Odd</p><![foo[ bar")
        with caplog.at_level(logging.ERROR):
            make_task(update=target).run("update")
        data = read_json(tmp_path / "locale/en_US/i18n.json")
        assert list(data) == ["Hello", "Save {n}"]
        assert str(odd) in caplog.text

    def test_purge_disabled(
        self,
        sources: tuple[Path, Path],
        target: TaskTarget,
        write_file: WriteFile,
        read_json: ReadJson,
    ) -> None:
        store = write_store(write_file, "locale/en_US/i18n.json", {"Stale": "Old"})
        make_task(LocalesOptions(purge_locales=False), update=target).run("update")
        assert list(read_json(store)) == ["Hello", "Save {n}", "Stale"]

    def test_flat_format(
        self,
        tmp_path: Path,
        sources: tuple[Path, Path],
        target: TaskTarget,
        write_file: WriteFile,
        read_json: ReadJson,
    ) -> None:
        """Flat stores hold bare values."""
        write_store(write_file, "locale/en_US/i18n.json", {"Hello": "Hi there"})
        make_task(LocalesOptions(json_flat_format=True), update=target).run("update")
        assert read_json(tmp_path / "locale/en_US/i18n.json") == {
            "Hello": "Hi there",
            "Save {n}": "Save {n}",
        }

    def test_seed_messages(
        self,
        tmp_path: Path,
        sources: tuple[Path, Path],
        target: TaskTarget,
        write_file: WriteFile,
        read_json: ReadJson,
    ) -> None:
        """Seed stores contribute keys that survive purging."""
        seed = write_store(write_file, "seed/defaults.json", {"Cancel": "Cancel"})
        options = LocalesOptions(default_messages_source=(str(seed),))
        make_task(options, update=target).run("update")
        data = read_json(tmp_path / "locale/en_US/i18n.json")
        assert data["Cancel"] == {"value": "Cancel", "files": []}

    def test_missing_destination(self, sources: tuple[Path, Path], target: TaskTarget) -> None:
        task = make_task(update=TaskTarget(src=target.src))
        with pytest.raises(LocalesConfigError, match="Missing destination file path."):
            task.run("update")

    def test_corrupt_store_is_fatal(
        self, sources: tuple[Path, Path], target: TaskTarget, write_file: WriteFile
    ) -> None:
        write_file("locale/en_US/i18n.json", "{not json")
        with pytest.raises(StoreFormatError):
            make_task(update=target).run("update")


class TestBuild:
    """Test the build operation."""

    @pytest.fixture
    def target(self, tmp_path: Path) -> TaskTarget:
        return TaskTarget(
            src=(str(tmp_path / "locale/*/i18n.json"),),
            dest=str(tmp_path / "locale/{locale}/i18n.js"),
        )

    def test_writes_module_per_store(
        self, tmp_path: Path, target: TaskTarget, write_file: WriteFile
    ) -> None:
        write_store(
            write_file,
            "locale/de_DE/i18n.json",
            {"Save": {"value": "Speichern", "files": []}, "Hi {name}": "Hallo {name}"},
        )
        write_store(write_file, "locale/en_US/i18n.json", {"Save": "Save"})
        make_task(build=target).run("build")

        german = (tmp_path / "locale/de_DE/i18n.js").read_text(encoding="utf-8")
        assert "root.i18n['de_DE'] = {" in german
        assert '"Save": "Speichern"' in german
        assert '"Hi {name}": function(d){return "Hallo "+MessageFormat.v(d,"name");}' in german
        assert 'MessageFormat.locale["de_DE"]=' in german

        english = (tmp_path / "locale/en_US/i18n.js").read_text(encoding="utf-8")
        assert "root.i18n['en_US'] = {};" in english

    def test_custom_locale_name(
        self, tmp_path: Path, target: TaskTarget, write_file: WriteFile
    ) -> None:
        write_store(write_file, "locale/de_DE/i18n.json", {})
        make_task(LocalesOptions(locale_name="translations"), build=target).run("build")
        module = (tmp_path / "locale/de_DE/i18n.js").read_text(encoding="utf-8")
        assert "root.translations['de_DE']" in module

    def test_corrupt_store_skipped(
        self,
        tmp_path: Path,
        target: TaskTarget,
        write_file: WriteFile,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """A corrupt store is reported; the other stores are built."""
        write_file("locale/de_DE/i18n.json", "[1, 2]")
        write_store(write_file, "locale/fr_FR/i18n.json", {"Save": "Enregistrer"})
        with caplog.at_level(logging.ERROR):
            make_task(build=target).run("build")
        assert not (tmp_path / "locale/de_DE/i18n.js").exists()
        assert (tmp_path / "locale/fr_FR/i18n.js").exists()
        assert "must be a JSON object" in caplog.text

    def test_locale_not_found_in_path(self, tmp_path: Path, write_file: WriteFile) -> None:
        write_store(write_file, "stores/main.json", {})
        options = LocalesOptions(locale_pattern=r"[a-z]{2}_[A-Z]{2}")
        target = TaskTarget(
            src=(str(tmp_path / "stores/*.json"),), dest=str(tmp_path / "out/{locale}.js")
        )
        with pytest.raises(LocalesConfigError, match="failed to match locale"):
            make_task(options, build=target).run("build")


class TestExportImport:
    """Test the export and import operations."""

    def test_export(self, tmp_path: Path, write_file: WriteFile) -> None:
        write_store(
            write_file,
            "locale/de_DE/i18n.json",
            {"Save": {"value": "Speichern", "files": ["a.js", "b.html"]}},
        )
        target = TaskTarget(
            src=(str(tmp_path / "locale/*/i18n.json"),),
            dest=str(tmp_path / "csv/{locale}.csv"),
        )
        make_task(export=target).run("export")
        assert (tmp_path / "csv/de_DE.csv").read_bytes().decode("utf-8") == (
            '"ID","de_DE","files"\r\n"Save","Speichern","a.js,b.html"\r\n'
        )

    def test_import_updates_known_keys(
        self, tmp_path: Path, write_file: WriteFile, read_json: ReadJson
    ) -> None:
        """Translations replace values; unknown keys are not created."""
        store = write_store(
            write_file,
            "locale/de_DE/i18n.json",
            {"Save": {"value": "Speichern", "files": ["a.js"]}},
        )
        write_file("csv/de.csv", "ID,de_DE\r\nSave,Sichern\r\nUnknown,Unbekannt\r\n")
        target = TaskTarget(
            src=(str(tmp_path / "csv/*.csv"),),
            dest=str(tmp_path / "locale/{locale}/i18n.json"),
        )
        make_task(LocalesOptions(locales=("de_DE",)), **{"import": target}).run("import")
        assert read_json(store) == {"Save": {"value": "Sichern", "files": ["a.js"]}}

    def test_import_missing_store_warns(
        self, tmp_path: Path, write_file: WriteFile, caplog: pytest.LogCaptureFixture
    ) -> None:
        write_file("csv/de.csv", "ID,de_DE\r\nSave,Sichern\r\n")
        target = TaskTarget(
            src=(str(tmp_path / "csv/*.csv"),),
            dest=str(tmp_path / "locale/{locale}/i18n.json"),
        )
        with caplog.at_level(logging.WARNING):
            make_task(LocalesOptions(locales=("de_DE",)), **{"import": target}).run("import")
        assert "Import target file" in caplog.text
        assert not (tmp_path / "locale/de_DE/i18n.json").exists()

    def test_import_without_sources_warns(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        target = TaskTarget(
            src=(str(tmp_path / "csv/*.csv"),),
            dest=str(tmp_path / "locale/{locale}/i18n.json"),
        )
        with caplog.at_level(logging.WARNING):
            make_task(**{"import": target}).run("import")
        assert "No import source file found." in caplog.text

    def test_import_missing_destination(self) -> None:
        with pytest.raises(LocalesConfigError, match="Missing destination file path."):
            make_task().run("import")


class TestRun:
    """Test operation dispatch."""

    def test_unknown_operation(self) -> None:
        with pytest.raises(LocalesConfigError, match="Unknown operation 'deploy'"):
            make_task().run("deploy")
