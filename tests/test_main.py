"""
Thin shell: reading blocks from a stream and printing outcomes.
"""

import io

import main
from TextCalc.MathEngine import Evaluator


def test_read_blocks_split_on_empty_lines():
    stream = io.StringIO("A = 1\nB = 2\n\n? A\n")
    assert list(main.read_blocks(stream)) == [(["A = 1", "B = 2"], False), (["? A"], False)]


def test_read_blocks_close_needs_a_whole_word():
    stream = io.StringIO("A = 1\n? enclose\nB = Aclose\n\n")
    assert list(main.read_blocks(stream)) == [(["A = 1", "? enclose", "B = Aclose"], False)]

    stream = io.StringIO("A = 1 CLOSE\n")
    assert list(main.read_blocks(stream)) == [(["A = 1"], True)]


def test_read_blocks_close_command():
    stream = io.StringIO("A = 1\nB = A close\nC = 3\n")
    assert list(main.read_blocks(stream)) == [(["A = 1", "B = A"], True)]

    stream = io.StringIO("A = 1\n\nclose\nB = 2\n")
    assert list(main.read_blocks(stream)) == [(["A = 1"], False), ([], True)]


def test_main_prints_block_results():
    out = io.StringIO()
    main.main(io.StringIO("A = 2\nB = A+3\nB =>_2\n\nclose\n"), out)
    printed = out.getvalue().splitlines()
    assert printed[1:4] == ["A = 2", "B = 5", "Result in base 2: 101"]
    assert "Variables are reset." in printed
    assert printed[-1] == "The program has finished running."


def test_main_resets_variables_between_blocks():
    out = io.StringIO()
    main.main(io.StringIO("A = 2\n\n? A\n"), out)
    assert "Variable 'A' is not defined" in out.getvalue()


def test_run_block_prints_unresolved_error():
    out = io.StringIO()
    main.run_block(Evaluator({}), ["A = 1", "B = C"], out, {})
    assert out.getvalue().splitlines() == ["A = 1", "Error 3140: Unresolved instructions: B = C"]


def test_run_block_copies_last_value(monkeypatch):
    copied = []
    monkeypatch.setattr(main.pyperclip, "copy", copied.append)
    settings = {"copy_result_to_clipboard": True}

    main.run_block(Evaluator({}), ["A = 2", "A + 1 =", "A => _2"], io.StringIO(), settings)
    assert copied == ["10"]


def test_run_block_does_not_copy_by_default(monkeypatch):
    copied = []
    monkeypatch.setattr(main.pyperclip, "copy", copied.append)
    main.run_block(Evaluator({}), ["A = 2"], io.StringIO(), {})
    assert copied == []
