from __future__ import annotations

from random import Random

from threat_music.util.naming import is_ogg_name, region_file_base, sanitize_name, strip_ogg_suffix


def test_sanitize_rule_order() -> None:
    # dots are removed, not replaced, so the extension fuses into the name
    assert sanitize_name("Cave Ambience.ogg") == "cave_ambienceogg"
    assert sanitize_name("My Theme 01.ogg") == "my_theme_01ogg"
    assert sanitize_name("  Boss   Fight!! ") == "boss_fight"
    assert sanitize_name("a.b。c．d｡e") == "abcde"
    assert sanitize_name("keep-dash_and_underscore") == "keep-dash_and_underscore"
    assert sanitize_name("__x__y__") == "x_y"
    assert sanitize_name("Tab\tand\nnewline") == "tab_and_newline"


def test_sanitize_degenerate_input() -> None:
    assert sanitize_name("") == ""
    assert sanitize_name("...") == ""
    assert sanitize_name("!!! ???") == ""
    assert sanitize_name(None) == ""
    assert region_file_base("...") == "region"
    assert region_file_base("Region 0") == "region_0"


def test_sanitize_is_idempotent() -> None:
    rng = Random(1234)
    alphabet = "aZ09 _-.。．｡!?/\\\tÉé漢字"
    samples = ["", "Region 0", "Forest Loop.ogg", "  ._. "]
    for _ in range(500):
        samples.append("".join(rng.choice(alphabet) for _ in range(rng.randint(0, 16))))
    for s in samples:
        once = sanitize_name(s)
        assert sanitize_name(once) == once


def test_ogg_suffix_helpers() -> None:
    assert strip_ogg_suffix("Alert 1.OGG") == "Alert 1"
    assert strip_ogg_suffix("loop.ogg.ogg") == "loop.ogg"
    assert strip_ogg_suffix("song.wav") == "song.wav"
    # only a suffix at the very end counts
    assert strip_ogg_suffix("song.ogg\n") == "song.ogg\n"
    assert sanitize_name(strip_ogg_suffix("song.ogg\n")) == "songogg"
    assert is_ogg_name("x.Ogg")
    assert not is_ogg_name("x.ogg.wav")
