import pytest

import kathakar
from conftest import image_response, text_response


@pytest.fixture(autouse=True)
def no_waiting(monkeypatch):
    monkeypatch.setattr(kathakar.time, "sleep", lambda seconds: None)


def test_images_command_writes_pngs_and_prompt_log(make_gaic, tmp_path, capsys):
    g = make_gaic(image_response(), image_response())
    out = tmp_path / "run"
    code = kathakar.main(["images", "a monsoon street", "--count", "2", "--style", "Watercolor", "--out", str(out)], g=g)
    assert code == 0
    assert sorted(p.name for p in out.iterdir()) == ["image-001.png", "image-002.png", "prompts_used.txt"]
    assert (out / "image-001.png").read_bytes().startswith(b"\x89PNG")
    assert "a monsoon street" in (out / "prompts_used.txt").read_text(encoding="utf-8")
    assert ">> Done." in capsys.readouterr().out


def test_images_command_reports_partial_batch(make_gaic, tmp_path, capsys):
    g = make_gaic(image_response(), RuntimeError("boom"))
    code = kathakar.main(["images", "x", "--count", "2", "--out", str(tmp_path)], g=g)
    assert code == 0
    assert "Only 1 of 2 images" in capsys.readouterr().out


def test_images_command_fails_when_nothing_generated(make_gaic, tmp_path, capsys):
    g = make_gaic(text_response("no", finish_reason="SAFETY"))
    code = kathakar.main(["images", "x", "--out", str(tmp_path)], g=g)
    assert code == 1
    assert "Content blocked by safety filters" in capsys.readouterr().err
    assert not list(tmp_path.glob("*.png"))


def test_translate_command(make_gaic, capsys):
    g = make_gaic(text_response("বৃষ্টি"))
    assert kathakar.main(["translate", "rain"], g=g) == 0
    assert "বৃষ্টি" in capsys.readouterr().out


def test_expand_command_reads_files(make_gaic, tmp_path, capsys):
    chapter = tmp_path / "ch1.txt"
    chapter.write_text("The boat drifted.", encoding="utf-8")
    context = tmp_path / "ctx.txt"
    context.write_text("Title: Nodi", encoding="utf-8")
    g = make_gaic(text_response("Then the rain came."))
    assert kathakar.main(["expand", str(chapter), "--context-file", str(context)], g=g) == 0
    sent = g.client.models.calls[0]["contents"]
    assert "Title: Nodi" in sent and "The boat drifted." in sent
    assert "Then the rain came." in capsys.readouterr().out


def test_unknown_genre_is_rejected(make_gaic):
    with pytest.raises(SystemExit):
        kathakar.main(["idea", "--genre", "Western"], g=make_gaic())
