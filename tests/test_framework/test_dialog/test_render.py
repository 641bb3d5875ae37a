import random
from vnframework.components.text import FontStyle, FontWeight, RandomMinMaxStyle, TextRun
from vnframework.dialog.markup import parse_markup
from vnframework.dialog.render import (
    RevealSnapshot,
    layout_run,
    layout_runs,
    run_style,
    visible_prefix,
)

def test_visible_prefix_counts_code_points():
    run = TextRun(text="메세지!", color="red")

    prefix = visible_prefix(run, 2)

    assert prefix.text == "메세"
    assert prefix.color == "red"
    assert visible_prefix(run, 0).text == ""
    assert visible_prefix(run, 10).text == "메세지!"
    # Source run untouched
    assert run.text == "메세지!"

def test_run_style_declarations():
    run = TextRun(color="red", size=1.5, font_weight=FontWeight.BOLD, font_style=FontStyle.oblique(5))
    assert run_style(run) == (
        "font-style: oblique 5deg;"
        "font-size: 1.5rem;"
        'font-family: "hancom-malang";'
        "color: red;"
        "font-weight: bold;"
    )

def test_plain_run_layout_splits_lines():
    rendered = layout_run(TextRun(text="one\ntwo", class_name="fade"))

    assert rendered.class_name == "fade"
    assert [[span.text for span in line] for line in rendered.lines] == [["one"], ["two"]]
    assert rendered.text == "one\ntwo"

def test_plain_run_appends_resolved_style():
    run = parse_markup("{{style:min_max2(1, 2)}}X")[0]
    rendered = layout_run(run)
    assert rendered.style.endswith("--min:1.0000rem;--max:2.0000rem")

def test_split_run_gives_one_span_per_character():
    run = TextRun(text="ab\nc", is_split=True, class_name="wave")
    rendered = layout_run(run)

    assert rendered.class_name == ""
    assert [[span.text for span in line] for line in rendered.lines] == [["a", "b"], ["c"]]
    assert all(span.class_name == "wave" for line in rendered.lines for span in line)

def test_split_run_resamples_style_per_character():
    run = TextRun(text="abcdef", is_split=True, style=RandomMinMaxStyle((0.0, 1.0), (1.0, 2.0)))
    rendered = layout_run(run, random.Random(5))

    styles = {span.style for span in rendered.lines[0]}
    assert len(styles) > 1

def test_layout_runs_keeps_order():
    runs = parse_markup("{{}}A{{color:red}}B")
    assert [r.text for r in layout_runs(runs)] == ["A", "B"]

def test_snapshot_runs_and_text():
    title = (TextRun(text="Alice"),)
    revealed = (TextRun(text="Hello "),)
    snapshot = RevealSnapshot(title=title, revealed=revealed, current=TextRun(text="wo"))

    assert snapshot.runs == (TextRun(text="Hello "), TextRun(text="wo"))
    assert snapshot.plain_text() == "Hello wo"
    assert RevealSnapshot(revealed=revealed).runs == revealed
