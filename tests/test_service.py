from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from lxml import etree
import pytest

from step_osis.adapters.osis2mod import CompilerResult
from step_osis.api.service import ConversionService
from step_osis.core.config import ConversionRequest
from step_osis.core.exceptions import ConfigurationError, MergeError, SubprocessError


OSIS = "{http://www.bibletechnologies.net/2003/OSIS/namespace}"


def _write_biblica(
    directory: Path, code: str, heading: str, text: str, *, name: str | None = None
) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{name or code}.xml"
    path.write_text(
        f"""<?xml version="1.0" encoding="UTF-8"?>
<biblicaDocument>
  <metadata>
    <title>Test Bible</title>
    <abbreviation>TST</abbreviation>
  </metadata>
  <scripture>
    <book id="{code}">
      <chapter number="1">
        <heading>{heading}</heading>
        <p>
          <verse number="1">{text}</verse>
        </p>
      </chapter>
    </book>
  </scripture>
</biblicaDocument>
""",
        encoding="utf-8",
    )
    return path


class RecordingEmitter:
    debug_enabled = False

    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []
        self.warnings: list[str] = []

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        self.warnings.append(message)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        return

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        self.events.append((name, dict(payload)))


class StubCompiler:
    def __init__(self, returncode: int = 0) -> None:
        self.returncode = returncode
        self.calls: list[tuple[Path, Path, str | None]] = []

    def compile(
        self,
        module_dir: Path,
        osis_file: Path,
        key: str | None = None,
        *,
        on_line: Callable[[str], None] | None = None,
    ) -> CompilerResult:
        self.calls.append((module_dir, osis_file, key))
        if on_line is not None:
            on_line("You are running osis2mod")
        if self.returncode:
            raise SubprocessError(f"osis2mod failed with exit code {self.returncode}",
                                  returncode=self.returncode)
        return CompilerResult(command=["osis2mod"], returncode=0, output=["You are running osis2mod"])


def _request(tmp_path: Path, **overrides: Any) -> ConversionRequest:
    values: dict[str, Any] = {
        "ot_path": tmp_path / "src",
        "output_path": tmp_path / "bible.osis.xml",
        "dialect": "biblica",
    }
    values.update(overrides)
    return ConversionRequest(**values)


def test_end_to_end_biblica_conversion(tmp_path: Path) -> None:
    source = tmp_path / "src"
    _write_biblica(source, "EXO", "Israel in Egypt", "These are the names")
    _write_biblica(source, "GEN", "The Beginning", "In the beginning")
    emitter = RecordingEmitter()

    result = ConversionService().convert(_request(tmp_path), emitter=emitter)

    assert [path.name for path in result.sources] == ["EXO.xml", "GEN.xml"]
    assert result.moved_nodes == 2
    assert result.orphaned_nodes == 0
    assert result.compiler is None

    root = etree.parse(str(result.output_path)).getroot()
    verses = root.findall(f".//{OSIS}verse")
    assert [verse.get("osisID") for verse in verses] == ["Exod.1.1", "Gen.1.1"]
    for verse, heading in zip(verses, ["Israel in Egypt", "The Beginning"], strict=True):
        previous = verse.getprevious()
        assert previous is not None
        assert previous.tag == f"{OSIS}title"
        assert previous.text == heading
        assert "step" not in previous.attrib

    stages = [payload["stage"] for name, payload in emitter.events if name == "stage_completed"]
    assert stages == ["discover", "merge", "transform", "reposition", "write"]
    assert set(result.timings) == set(stages)


def test_new_testament_directory_is_merged_after_sorting(tmp_path: Path) -> None:
    _write_biblica(tmp_path / "nt", "MAT", "Genealogy", "A record", name="40-MAT")
    _write_biblica(tmp_path / "src", "GEN", "The Beginning", "In the beginning", name="01-GEN")

    result = ConversionService().convert(_request(tmp_path, nt_path=tmp_path / "nt"))

    root = etree.parse(str(result.output_path)).getroot()
    books = root.findall(f".//{OSIS}div[@type='book']")
    assert [book.get("osisID") for book in books] == ["Gen", "Matt"]


def test_missing_anchor_leaves_no_output(tmp_path: Path) -> None:
    _write_biblica(tmp_path / "src", "GEN", "The Beginning", "In the beginning")
    (tmp_path / "src" / "EXO.xml").write_text("<biblicaDocument/>", encoding="utf-8")
    request = _request(tmp_path)

    with pytest.raises(MergeError):
        ConversionService().convert(request)

    assert not request.output_path.exists()


def test_empty_source_directory_fails(tmp_path: Path) -> None:
    (tmp_path / "src").mkdir()
    with pytest.raises(MergeError, match="No .xml source documents"):
        ConversionService().convert(_request(tmp_path))


def test_orphaned_pre_verse_nodes_are_reported(tmp_path: Path) -> None:
    source = tmp_path / "src"
    source.mkdir()
    (source / "GEN.xml").write_text(
        "<biblicaDocument><scripture><book id='GEN'><chapter number='1'>"
        "<heading>Lonely</heading></chapter></book></scripture></biblicaDocument>",
        encoding="utf-8",
    )
    emitter = RecordingEmitter()

    result = ConversionService().convert(_request(tmp_path), emitter=emitter)

    assert result.orphaned_nodes == 1
    assert emitter.warnings
    title = etree.parse(str(result.output_path)).getroot().find(f".//{OSIS}chapter/{OSIS}title")
    assert title is not None and title.get("step") == "pre-verse"


def test_compile_step_is_disabled_by_default(tmp_path: Path) -> None:
    _write_biblica(tmp_path / "src", "GEN", "The Beginning", "In the beginning")
    compiler = StubCompiler()

    result = ConversionService().convert(_request(tmp_path), compiler=compiler)

    assert compiler.calls == []
    assert result.compiler is None


def test_compile_step_passes_key_and_masks_it(tmp_path: Path) -> None:
    _write_biblica(tmp_path / "src", "GEN", "The Beginning", "In the beginning")
    compiler = StubCompiler()
    emitter = RecordingEmitter()
    request = _request(
        tmp_path,
        compile_module=True,
        module_dir=tmp_path / "module",
        encryption_key="aaaaaaaa",
        obfuscation_key="bbbbbbbb",
    )

    result = ConversionService().convert(request, compiler=compiler, emitter=emitter)

    assert compiler.calls == [
        (tmp_path / "module", request.output_path.resolve(), "aaaaaaaa"),
    ]
    assert result.compiler is not None and result.compiler.returncode == 0
    assert result.obfuscated_key
    assert ("module_key", {"value": result.obfuscated_key}) in emitter.events
    assert ("compiler_output", {"line": "You are running osis2mod"}) in emitter.events


def test_failing_compiler_does_not_report_success(tmp_path: Path) -> None:
    _write_biblica(tmp_path / "src", "GEN", "The Beginning", "In the beginning")
    request = _request(tmp_path, compile_module=True)

    with pytest.raises(SubprocessError):
        ConversionService().convert(request, compiler=StubCompiler(returncode=2))


def test_compile_without_executable_is_a_configuration_error(tmp_path: Path) -> None:
    _write_biblica(tmp_path / "src", "GEN", "The Beginning", "In the beginning")
    with pytest.raises(ConfigurationError, match="osis2mod"):
        ConversionService().convert(_request(tmp_path, compile_module=True))


def test_compiler_factory_receives_configured_executable(tmp_path: Path) -> None:
    _write_biblica(tmp_path / "src", "GEN", "The Beginning", "In the beginning")
    created: list[Path] = []
    stub = StubCompiler()

    def factory(executable: Path) -> StubCompiler:
        created.append(executable)
        return stub

    service = ConversionService(compiler_factory=factory)
    service.convert(_request(tmp_path, compile_module=True, osis2mod=tmp_path / "osis2mod"))

    assert created == [tmp_path / "osis2mod"]
    assert stub.calls and stub.calls[0][0] == tmp_path


def test_end_to_end_usx_conversion(tmp_path: Path) -> None:
    source = tmp_path / "src"
    source.mkdir()
    for code, heading in (("GEN", "Creation"), ("EXO", "Oppression")):
        (source / f"{code}.usx").write_text(
            f"""<usx version="3.0">
  <book code="{code}" style="id"/>
  <chapter number="1" style="c" sid="{code} 1"/>
  <para style="s1">{heading}</para>
  <para style="p"><verse number="1" style="v" sid="{code} 1:1"/>Text<verse eid="{code} 1:1"/></para>
  <chapter eid="{code} 1"/>
</usx>
""",
            encoding="utf-8",
        )

    result = ConversionService().convert(_request(tmp_path, dialect="usx"))

    root = etree.parse(str(result.output_path)).getroot()
    starts = [verse for verse in root.iter(f"{OSIS}verse") if verse.get("sID")]
    assert [verse.get("sID") for verse in starts] == ["Exod.1.1", "Gen.1.1"]
    for verse in starts:
        previous = verse.getprevious()
        assert previous is not None and previous.tag == f"{OSIS}title"
        assert "step" not in previous.attrib


def test_usx_conversion_keeps_space_between_inline_elements(tmp_path: Path) -> None:
    source = tmp_path / "src"
    source.mkdir()
    (source / "MAT.usx").write_text(
        """<usx version="3.0">
  <book code="MAT" style="id"/>
  <chapter number="4" style="c" sid="MAT 4"/>
  <para style="p">
    <verse number="19" style="v" sid="MAT 4:19"/><char style="wj">Follow</char> <char style="add">me</char><verse eid="MAT 4:19"/>
  </para>
  <chapter eid="MAT 4"/>
</usx>
""",
        encoding="utf-8",
    )

    result = ConversionService().convert(_request(tmp_path, dialect="usx"))

    paragraph = etree.parse(str(result.output_path)).getroot().find(f".//{OSIS}p")
    assert paragraph is not None
    assert "Follow me" in "".join(paragraph.itertext())
