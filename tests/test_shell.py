import io

from minios.shell import BANNER, PROMPT, main, run_shell


class Recorder:
    def __init__(self, result=0):
        self.calls = []
        self.result = result

    def __call__(self, argv):
        self.calls.append(argv)
        return self.result


def test_banner_only_without_input():
    out = io.StringIO()
    assert run_shell([], {}, out) == []
    assert out.getvalue() == BANNER


def test_banner_text_is_fixed():
    out = io.StringIO()
    run_shell([], {}, out)
    assert out.getvalue() == "DanOS v1.0.0\n"


def test_prompt_and_newline_per_line():
    out = io.StringIO()
    run_shell(["", ""], {}, out)
    assert out.getvalue() == BANNER + (PROMPT + "\n") * 2


def test_dispatches_arguments_to_program():
    recorder = Recorder(result=7)
    out = io.StringIO()
    results = run_shell(["echo.elf a b\n"], {"echo.elf": recorder}, out)
    assert recorder.calls == [["echo.elf", "a", "b"]]
    assert results == [7]


def test_program_names_match_without_case():
    recorder = Recorder()
    run_shell(["ECHO.ELF x"], {"echo.elf": recorder}, io.StringIO())
    assert recorder.calls == [["ECHO.ELF", "x"]]


def test_unknown_program_and_empty_line_are_ignored():
    recorder = Recorder()
    out = io.StringIO()
    results = run_shell(["missing.elf", "   ", "echo.elf"], {"echo.elf": recorder}, out)
    assert results == [0]
    assert recorder.calls == [["echo.elf"]]
    assert out.getvalue() == BANNER + (PROMPT + "\n") * 3


def test_backspace_removes_previous_character():
    recorder = Recorder()
    run_shell(["echo.elf ab\x08c"], {"echo.elf": recorder}, io.StringIO())
    assert recorder.calls == [["echo.elf", "ac"]]


def test_multiple_spaces_separate_arguments():
    recorder = Recorder()
    run_shell(["echo.elf   one    two"], {"echo.elf": recorder}, io.StringIO())
    assert recorder.calls == [["echo.elf", "one", "two"]]


def test_main_runs_keyboard_program(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("keyboard.elf layout\n"))
    assert main() == 0
    text = capsys.readouterr().out
    assert text.startswith(BANNER)
    assert "Active keyboard layout: de_DE\n" in text


def test_main_keyboard_layout_persists_between_commands(monkeypatch, capsys):
    monkeypatch.setattr(
        "sys.stdin",
        io.StringIO("keyboard.elf layout set en_US\nkeyboard.elf layout\n"),
    )
    main()
    text = capsys.readouterr().out
    assert "Set layout to en_US\n" in text
    assert "Active keyboard layout: en_US\n" in text