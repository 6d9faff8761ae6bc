from __future__ import annotations

import json

from PIL import Image

from kscml.main import main
from tests._utils.builders import anim, anim_frame, build, clip, dxt5_block, element, frame, quad, texture


def _write_pair(tmp_path, symbol_hash: int = 0x1):
    build_path = tmp_path / "build.bin"
    anim_path = tmp_path / "anim.bin"
    build_path.write_bytes(build(
        [(0x1, [frame(0, triangles=quad(0.0, 0.0, 1.0, 1.0))])],
        names=[(0x1, "body")],
    ))
    anim_path.write_bytes(anim(
        [clip("idle", [anim_frame([element(symbol_hash, 0, 0x100)])])],
        names=[(0x1, "body"), (0x100, "torso"), (0xBA4C, "hero")],
    ))
    return anim_path, build_path


def test_tex2png(tmp_path) -> None:
    source = tmp_path / "atlas-0.tex"
    source.write_bytes(texture([(4, 4, dxt5_block(255, 255, [0] * 16, 0xF800, 0, [0] * 16))]))
    assert main(["tex2png", str(source)]) == 0
    with Image.open(tmp_path / "atlas-0.png") as image:
        assert image.size == (4, 4)
        assert image.convert("RGBA").getpixel((0, 0)) == (255, 0, 0, 255)


def test_dump_detects_container(tmp_path) -> None:
    _, build_path = _write_pair(tmp_path)
    output = tmp_path / "out.json"
    assert main(["dump", str(build_path), "-o", str(output)]) == 0
    snapshot = json.loads(output.read_text())
    assert snapshot["build_name"] == "test_build"
    assert snapshot["symbols"][0]["name"] == "body"


def test_scml_export(tmp_path, capsys) -> None:
    anim_path, build_path = _write_pair(tmp_path)
    assert main(["scml", str(anim_path), str(build_path)]) == 0
    text = (tmp_path / "anim.scml").read_text(encoding="utf-8")
    assert '<entity id="0" name="hero">' in text
    assert "Missing Symbols:" not in capsys.readouterr().out


def test_scml_placeholders(tmp_path, capsys) -> None:
    anim_path, build_path = _write_pair(tmp_path, symbol_hash=0x2)
    placeholders = tmp_path / "placeholders"
    assert main(["scml", str(anim_path), str(build_path), "--placeholders", str(placeholders)]) == 0
    assert "Missing Symbols:" in capsys.readouterr().out
    with Image.open(placeholders / "2" / "2-0.png") as image:
        assert image.size == (1, 1)
        assert image.mode == "RGBA"


def test_bad_container_returns_error(tmp_path, capsys) -> None:
    bogus = tmp_path / "bogus.bin"
    bogus.write_bytes(b"NOPE" + b"\x00" * 12)
    assert main(["dump", str(bogus)]) == 1
    assert "Unknown container magic" in capsys.readouterr().err

    truncated = tmp_path / "short.tex"
    truncated.write_bytes(b"KTEX\x00")
    assert main(["tex2png", str(truncated)]) == 1
