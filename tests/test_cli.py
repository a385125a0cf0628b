# tests/test_cli.py
import sys
import pytest
from pathlib import Path
from unittest.mock import patch

from css_classnames.cli import main


def run_cli(args):
    """Runs main() with the given arguments; returns the exit code (0 when it returns)."""
    with patch.object(sys, "argv", ["css-classnames", *args]):
        try:
            main()
        except SystemExit as e:
            return e.code
    return 0


@pytest.fixture
def module_css(tmp_path):
    css = tmp_path / "button.module.css"
    css.write_text(
        ".primary { color: red; }\n"
        ".button { padding: 0; }\n"
        ".button:hover .icon { opacity: .5; }\n"
        ":global(.is-disabled) .primary { color: gray; }\n",
        encoding="utf-8",
    )
    return css


# --- Test 1: Successful runs ---

def test_end_to_end_run(module_css, tmp_path, capsys):
    output_file = tmp_path / "button.txt"

    assert run_cli([str(module_css), str(output_file)]) == 0

    assert output_file.read_text(encoding="utf-8") == "button,icon,is-disabled,primary"
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == ""


def test_output_has_no_trailing_newline(module_css, tmp_path):
    output_file = tmp_path / "out.txt"
    run_cli([str(module_css), str(output_file)])

    assert not output_file.read_bytes().endswith(b"\n")


def test_running_twice_is_byte_identical(module_css, tmp_path):
    output_file = tmp_path / "out.txt"

    run_cli([str(module_css), str(output_file)])
    first = output_file.read_bytes()
    run_cli([str(module_css), str(output_file)])

    assert output_file.read_bytes() == first


def test_overwrites_existing_output(module_css, tmp_path):
    output_file = tmp_path / "out.txt"
    output_file.write_text("stale,content,that,is,longer,than,the,result", encoding="utf-8")

    run_cli([str(module_css), str(output_file)])

    assert output_file.read_text(encoding="utf-8") == "button,icon,is-disabled,primary"


def test_empty_input_gives_empty_file(tmp_path):
    css = tmp_path / "empty.css"
    css.write_text("/* nothing here */\nbody { margin: 0; }\n", encoding="utf-8")
    output_file = tmp_path / "out.txt"

    assert run_cli([str(css), str(output_file)]) == 0
    assert output_file.exists()
    assert output_file.stat().st_size == 0


def test_imports_are_merged(tmp_path):
    (tmp_path / "base.css").write_text(".shared {} .base {}", encoding="utf-8")
    css = tmp_path / "main.scss"
    css.write_text('@import "./base.css";\n.shared { color: blue; }\n.main {}\n', encoding="utf-8")
    output_file = tmp_path / "out.txt"

    assert run_cli([str(css), str(output_file)]) == 0
    assert output_file.read_text(encoding="utf-8") == "base,main,shared"


def test_no_globals_flag(module_css, tmp_path):
    output_file = tmp_path / "out.txt"

    assert run_cli(["--no-globals", str(module_css), str(output_file)]) == 0
    assert output_file.read_text(encoding="utf-8") == "button,icon,primary"


def test_load_path_flag(tmp_path):
    shared = tmp_path / "shared"
    shared.mkdir()
    (shared / "_tokens.scss").write_text(".token {}", encoding="utf-8")
    src = tmp_path / "src"
    src.mkdir()
    css = src / "card.scss"
    css.write_text('@import "tokens";\n.card {}', encoding="utf-8")
    output_file = tmp_path / "out.txt"

    assert run_cli(["-I", str(shared), str(css), str(output_file)]) == 0
    assert output_file.read_text(encoding="utf-8") == "card,token"


def test_verbose_reports_on_stderr(module_css, tmp_path, capsys):
    output_file = tmp_path / "out.txt"

    run_cli(["-v", str(module_css), str(output_file)])

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "button.module.css" in captured.err
    assert "Wrote 4 class names" in captured.err


# --- Test 2: Failures ---

@pytest.mark.parametrize("args", [[], ["only-input.css"]])
def test_missing_arguments(args, tmp_path, capsys, monkeypatch):
    monkeypatch.chdir(tmp_path)

    assert run_cli(args) == 1

    captured = capsys.readouterr()
    assert "usage:" in captured.err
    assert list(tmp_path.iterdir()) == []


def test_malformed_css_leaves_output_untouched(tmp_path, capsys):
    css = tmp_path / "broken.css"
    css.write_text(".ok {}\n.broken {\n  color: red;\n", encoding="utf-8")
    output_file = tmp_path / "out.txt"
    output_file.write_text("previous", encoding="utf-8")

    assert run_cli([str(css), str(output_file)]) == 1

    err = capsys.readouterr().err
    assert err.startswith("Error processing CSS:")
    assert "Unclosed block" in err
    assert "broken.css:2:1" in err
    assert output_file.read_text(encoding="utf-8") == "previous"


def test_malformed_css_does_not_create_output(tmp_path):
    css = tmp_path / "broken.css"
    css.write_text(".a { } }", encoding="utf-8")
    output_file = tmp_path / "out.txt"

    assert run_cli([str(css), str(output_file)]) == 1
    assert not output_file.exists()


def test_missing_input_file(tmp_path, capsys):
    output_file = tmp_path / "out.txt"

    assert run_cli([str(tmp_path / "nope.css"), str(output_file)]) == 1

    assert "Cannot read" in capsys.readouterr().err
    assert not output_file.exists()


def test_cyclic_import_is_reported(tmp_path, capsys):
    (tmp_path / "a.css").write_text('@import "b.css";\n.a {}', encoding="utf-8")
    (tmp_path / "b.css").write_text('@import "a.css";\n.b {}', encoding="utf-8")
    output_file = tmp_path / "out.txt"

    assert run_cli([str(tmp_path / "a.css"), str(output_file)]) == 1

    err = capsys.readouterr().err
    assert "Cyclic @import" in err
    assert not output_file.exists()


def test_unwritable_output(module_css, tmp_path, capsys):
    output_dir = tmp_path / "is-a-directory"
    output_dir.mkdir()

    assert run_cli([str(module_css), str(output_dir)]) == 1
    assert "Error processing CSS" in capsys.readouterr().err


# --- Test 3: Input encoding and argument order ---

def test_bom_only_input_gives_empty_file(tmp_path):
    css = tmp_path / "empty.css"
    css.write_bytes(b"\xef\xbb\xbf")
    output_file = tmp_path / "out.txt"

    assert run_cli([str(css), str(output_file)]) == 0
    assert output_file.read_bytes() == b""


def test_bom_before_import(tmp_path):
    (tmp_path / "base.css").write_bytes(b"\xef\xbb\xbf.base {}")
    css = tmp_path / "main.css"
    css.write_bytes(b'\xef\xbb\xbf@import "base.css";\n.main {}')
    output_file = tmp_path / "out.txt"

    assert run_cli([str(css), str(output_file)]) == 0
    assert output_file.read_text(encoding="utf-8") == "base,main"


def test_option_between_paths(module_css, tmp_path):
    output_file = tmp_path / "out.txt"

    assert run_cli([str(module_css), "--no-globals", str(output_file)]) == 0
    assert output_file.read_text(encoding="utf-8") == "button,icon,primary"
