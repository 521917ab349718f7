"""Tests for CSV export and import."""

import logging

import pytest
from hypothesis import given
from hypothesis import strategies as st

from localeforge.config import LocalesOptions
from localeforge.errors import SourceSyntaxError
from localeforge.escaping import sanitize, text_content
from localeforge.messageformat import MessageFormat
from localeforge.store import MessageEntry, MessageStore
from localeforge.tabular import export_csv, import_messages, read_csv


@pytest.fixture(scope="module")
def engines() -> dict[str, MessageFormat]:
    return {"de_DE": MessageFormat("de_DE")}


# Pieces of cell text, including CSV and HTML specials and a no-break space.
CELL_PIECES = st.one_of(
    st.text(
        st.characters(
            codec="utf-8",
            exclude_categories=("Cc", "Cf", "Cs", "Zs", "Zl", "Zp"),
            exclude_characters="<>{}",
        ),
        min_size=1,
        max_size=4,
    ),
    st.sampled_from(['"', ",", "'", "&", "&amp;", "<b>x</b>", "ü", " ", "\u00a0", "\r\n", "{n}"]),
)


def is_canonical(value: str, engine: MessageFormat, options: LocalesOptions) -> bool:
    """True if importing value as a cell gives value back.

    That holds when sanitizing leaves it alone (or only escapes plain text)
    and it parses as a message.
    """
    try:
        content = sanitize(value, value, options).content
        engine.parse(value)
    except SourceSyntaxError:
        return False
    return value in (content, text_content(content))


class TestExportCsv:
    """Test export_csv."""

    def test_header_and_rows(self, options: LocalesOptions) -> None:
        store = MessageStore(
            {
                "b": MessageEntry("B", ["x.js"]),
                "a": MessageEntry("A", ["x.js", "y.html"]),
            }
        )
        assert export_csv(store, "de_DE", options) == (
            '"ID","de_DE","files"\r\n"a","A","x.js,y.html"\r\n"b","B","x.js"\r\n'
        )

    def test_quotes_doubled(self, options: LocalesOptions) -> None:
        store = MessageStore({'Say "hi"': MessageEntry('Sag "hallo"')})
        assert export_csv(store, "de_DE", options).splitlines()[1] == (
            '"Say ""hi""","Sag ""hallo""",""'
        )

    def test_custom_dialect_and_fields(self) -> None:
        options = LocalesOptions(
            csv_delimiter=";",
            csv_line_end="\n",
            csv_key_label="Key",
            csv_extra_fields=("files", "note"),
        )
        store = MessageStore({"a": MessageEntry("A", extra={"note": "n"})})
        assert export_csv(store, "fr", options) == '"Key";"fr";"files";"note"\n"a";"A";"";"n"\n'

    def test_custom_escape(self) -> None:
        options = LocalesOptions(csv_escape=str.upper)
        store = MessageStore({"a": MessageEntry("b")})
        assert export_csv(store, "de", options).splitlines()[1] == '"A","B",""'


class TestReadCsv:
    """Test read_csv."""

    def test_reads_locale_column(
        self, engines: dict[str, MessageFormat], options: LocalesOptions
    ) -> None:
        text = '"ID","de_DE","fr_FR"\r\n"Save","Speichern","Enregistrer"\r\n'
        assert read_csv(text, engines, options) == {
            "de_DE": {"Save": MessageEntry("Speichern")}
        }

    def test_empty_cells_and_keys_skipped(
        self, engines: dict[str, MessageFormat], options: LocalesOptions
    ) -> None:
        text = "ID,de_DE\r\nSave,\r\n,Waise\r\nOpen,Öffnen\r\n"
        assert read_csv(text, engines, options) == {"de_DE": {"Open": MessageEntry("Öffnen")}}

    def test_multiline_cells(
        self, engines: dict[str, MessageFormat], options: LocalesOptions
    ) -> None:
        """Quoted cells may span lines; whitespace is collapsed by the minifier."""
        text = 'ID,de_DE\r\n"Two\nlines","Zwei\r\nZeilen"\r\n'
        assert read_csv(text, engines, options) == {
            "de_DE": {"Two\nlines": MessageEntry("Zwei Zeilen")}
        }

    def test_plain_text_kept_unescaped(
        self, engines: dict[str, MessageFormat], options: LocalesOptions
    ) -> None:
        """Sanitizing does not turn a bare ampersand into an entity."""
        text = "ID,de_DE\r\nA & B,A & B\r\n"
        assert read_csv(text, engines, options)["de_DE"]["A & B"].value == "A & B"

    def test_unsafe_markup_removed(
        self, engines: dict[str, MessageFormat], options: LocalesOptions
    ) -> None:
        text = 'ID,de_DE\r\nHi,"<b onclick=""x()"">Hallo</b>"\r\n'
        assert read_csv(text, engines, options)["de_DE"]["Hi"].value == "<b>Hallo</b>"

    def test_invalid_message_logged(
        self,
        engines: dict[str, MessageFormat],
        options: LocalesOptions,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """A cell that does not parse is reported and skipped."""
        text = 'ID,de_DE\r\n"{n}","{n, plural, few {x} other {y}}"\r\nSave,Sichern\r\n'
        with caplog.at_level(logging.WARNING):
            result = read_csv(text, engines, options, file="de.csv")
        assert result == {"de_DE": {"Save": MessageEntry("Sichern")}}
        assert "MessageFormatSyntaxError" in caplog.text
        assert "File:   de.csv" in caplog.text

    def test_no_break_space_kept(
        self, engines: dict[str, MessageFormat], options: LocalesOptions
    ) -> None:
        """Only HTML whitespace collapses; a no-break space is imported as is."""
        text = '"ID","de_DE"\r\n"Hello!","Hallo\u00a0!"\r\n'
        assert read_csv(text, engines, options) == {
            "de_DE": {"Hello!": MessageEntry("Hallo\u00a0!")}
        }

    def test_rejected_markup_logged(
        self,
        engines: dict[str, MessageFormat],
        options: LocalesOptions,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Markup the tokenizer rejects is reported for that cell only."""
        text = 'ID,de_DE\r\nOdd,"a <![foo[ bar"\r\nSave,Sichern\r\n'
        with caplog.at_level(logging.WARNING):
            result = read_csv(text, engines, options, file="de.csv")
        assert result == {"de_DE": {"Save": MessageEntry("Sichern")}}
        assert "HtmlSyntaxError" in caplog.text


class TestImportMessages:
    """Test import_messages."""

    def test_update_only(self) -> None:
        """Known keys get new values and keep their files; others are ignored."""
        store = MessageStore({"Save": MessageEntry("Speichern", ["a.js"])})
        import_messages(
            store, {"Save": MessageEntry("Sichern"), "New": MessageEntry("Neu")}
        )
        assert dict(store) == {"Save": MessageEntry("Sichern", ["a.js"])}

    @given(
        st.dictionaries(
            st.text(alphabet="ab \"',&", min_size=1, max_size=8).map(str.strip).filter(bool),
            st.lists(CELL_PIECES, min_size=1, max_size=6).map("".join),
            max_size=8,
        )
    )
    def test_export_then_import_restores_values(
        self, engines: dict[str, MessageFormat], values: dict[str, str]
    ) -> None:
        """Property: importing an exported store leaves canonical values unchanged."""
        options = LocalesOptions()
        engine = engines["de_DE"]
        values = {k: v for k, v in values.items() if is_canonical(v, engine, options)}
        store = MessageStore({k: MessageEntry(v, ["a.js"]) for k, v in values.items()})
        imported = read_csv(export_csv(store, "de_DE", options), engines, options)
        target = MessageStore({k: MessageEntry("", ["a.js"]) for k in values})
        import_messages(target, imported.get("de_DE", {}))
        assert dict(target) == dict(store)
