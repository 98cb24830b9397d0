"""
Tests for subtitle synthesis from plain-text transcripts.
"""

import math

import pytest

from captionburn.subtitles import escape_filter_path, format_srt_timestamp, render_srt, synthesize_cues, write_srt

PANGRAM = "the quick brown fox jumps over the lazy dog"


class TestSynthesizeCues:
    """Test cue splitting and timing."""

    @pytest.mark.parametrize("word_count", [1, 4, 5, 6, 10, 11, 23])
    @pytest.mark.parametrize("words_per_cue", [1, 3, 5])
    def test_cue_count(self, word_count, words_per_cue):
        transcript = " ".join(f"w{i}" for i in range(word_count))
        cues = synthesize_cues(transcript, words_per_cue=words_per_cue)
        assert len(cues) == math.ceil(word_count / words_per_cue)

    @pytest.mark.parametrize("transcript", ["", "   ", "\n\t  \n"])
    def test_blank_transcript_yields_no_cues(self, transcript):
        assert synthesize_cues(transcript) == []

    def test_none_transcript_yields_no_cues(self):
        assert synthesize_cues(None) == []

    def test_pangram_scenario(self):
        cues = synthesize_cues(PANGRAM, words_per_cue=5)

        assert len(cues) == 2
        assert cues[0].index == 1
        assert cues[0].text == "the quick brown fox jumps"
        assert (cues[0].start_seconds, cues[0].end_seconds) == (0, 3)
        assert cues[1].index == 2
        assert cues[1].text == "over the lazy dog"
        assert (cues[1].start_seconds, cues[1].end_seconds) == (3, 6)

    def test_cues_are_contiguous(self):
        cues = synthesize_cues(" ".join(["word"] * 37), words_per_cue=4, seconds_per_cue=2)

        assert cues[0].start_seconds == 0
        for previous, following in zip(cues, cues[1:]):
            assert previous.end_seconds == following.start_seconds
        assert all(cue.end_seconds > cue.start_seconds for cue in cues)

    def test_indices_are_sequential(self):
        cues = synthesize_cues(" ".join(["word"] * 12), words_per_cue=5)
        assert [cue.index for cue in cues] == [1, 2, 3]

    def test_every_word_appears_once_in_order(self):
        transcript = "  one\ttwo\n\nthree   four five\r\nsix seven  "
        cues = synthesize_cues(transcript, words_per_cue=3)

        assert [cue.text for cue in cues] == ["one two three", "four five six", "seven"]
        assert " ".join(cue.text for cue in cues).split() == transcript.split()

    def test_last_single_word_cue_is_kept(self):
        cues = synthesize_cues("a b c d e f", words_per_cue=5)
        assert cues[-1].text == "f"

    def test_duration_is_fixed_regardless_of_word_count(self):
        cues = synthesize_cues("a b c d e f", words_per_cue=5, seconds_per_cue=4)
        assert [(cue.start_seconds, cue.end_seconds) for cue in cues] == [(0, 4), (4, 8)]

    @pytest.mark.parametrize("words_per_cue, seconds_per_cue", [(0, 3), (-1, 3), (5, 0), (5, -2)])
    def test_invalid_tunables_raise(self, words_per_cue, seconds_per_cue):
        with pytest.raises(ValueError):
            synthesize_cues(PANGRAM, words_per_cue=words_per_cue, seconds_per_cue=seconds_per_cue)


class TestTimestampFormat:
    """Test SRT timestamp formatting."""

    def test_zero(self):
        assert format_srt_timestamp(0) == "00:00:00,000"

    def test_seconds(self):
        assert format_srt_timestamp(3) == "00:00:03,000"

    def test_minutes_and_hours(self):
        assert format_srt_timestamp(3723) == "01:02:03,000"

    def test_milliseconds(self):
        assert format_srt_timestamp(1.5) == "00:00:01,500"

    def test_negative_clamps_to_zero(self):
        assert format_srt_timestamp(-4) == "00:00:00,000"

    def test_beyond_a_day(self):
        assert format_srt_timestamp(90000) == "25:00:00,000"


class TestRenderAndWrite:
    """Test SRT rendering and file output."""

    def test_render_first_cue(self):
        srt = render_srt(synthesize_cues(PANGRAM))
        assert srt.startswith("1\n00:00:00,000 --> 00:00:03,000\nthe quick brown fox jumps\n\n")

    def test_render_full_track(self):
        expected = (
            "1\n00:00:00,000 --> 00:00:03,000\nthe quick brown fox jumps\n\n"
            "2\n00:00:03,000 --> 00:00:06,000\nover the lazy dog\n\n"
        )
        assert render_srt(synthesize_cues(PANGRAM)) == expected

    def test_write_empty_track_creates_empty_file(self, tmp_path):
        output = write_srt([], tmp_path / "empty.srt")
        assert output.exists()
        assert output.read_text(encoding="utf-8") == ""

    def test_write_utf8(self, tmp_path):
        output = write_srt(synthesize_cues("héllo wörld ñ"), tmp_path / "utf8.srt")
        assert "héllo wörld ñ" in output.read_text(encoding="utf-8")


def unescape_once(value):
    """One level of ffmpeg unescaping: backslash escapes and single-quoted spans."""
    out = []
    quoted = False
    chars = iter(value)
    for ch in chars:
        if quoted:
            if ch == "'":
                quoted = False
            else:
                out.append(ch)
        elif ch == "\\":
            out.append(next(chars, ""))
        elif ch == "'":
            quoted = True
        else:
            out.append(ch)
    return "".join(out)


class TestEscapeFilterPath:
    """Paths must survive both the filtergraph and the filter option parser."""

    def test_colon_and_quote(self):
        assert escape_filter_path("/up:loads/it's.srt") == r"/up\\:loads/it\\\'s.srt"

    def test_graph_separators_are_escaped(self):
        escaped = escape_filter_path("/a,b;c[d].srt")
        assert escaped == r"/a\,b\;c\[d\].srt"

    @pytest.mark.parametrize(
        "path",
        [
            "/plain/clip.mp4.srt",
            "C:\\videos\\clip.srt",
            "/up:loads/it's.srt",
            "/a,b;c[d]/x.srt",
            "/back\\slash's:all,[of];them.srt",
        ],
    )
    def test_two_unescapes_restore_path(self, path):
        assert unescape_once(unescape_once(escape_filter_path(path))) == path
