"""Tests for the speaker registry and speaker statistics."""

import pytest

from livescribe.errors import UnknownSpeakerError
from livescribe.speakers import PALETTE, SpeakerStats, compute_speaker_stats, speaker_color, speaker_stats_table
from livescribe.transcript import TranscriptAggregator, WordTag


class TestSpeakerRegistry:
    """Tests for SpeakerRegistry."""

    def test_ensure_creates_defaults(self, registry):
        profile = registry.ensure(0)
        assert profile.display_name == "Person 1"
        assert profile.role == "Participant"
        assert profile.color == PALETTE[0]
        assert registry.known_speakers() == (0,)

    def test_ensure_is_idempotent(self, registry):
        first = registry.ensure(3)
        registry.update(3, "Ala", "Coach")
        again = registry.ensure(3)
        assert again.display_name == "Ala"
        assert again.color == first.color
        assert len(registry) == 1

    def test_known_speakers_ascending(self, registry):
        for speaker_id in (5, 0, 2):
            registry.ensure(speaker_id)
        assert registry.known_speakers() == (0, 2, 5)
        assert [p.id for p in registry.profiles()] == [0, 2, 5]

    def test_update_unknown_speaker_fails(self, registry):
        with pytest.raises(UnknownSpeakerError) as exc_info:
            registry.update(7, "Nobody", "Guest")
        assert exc_info.value.speaker_id == 7
        assert 7 not in registry

    def test_update_keeps_color_and_blank_fields(self, registry):
        registry.ensure(1)
        profile = registry.update(1, "Marta", "")
        assert profile.display_name == "Marta"
        assert profile.role == "Participant"
        assert profile.color == speaker_color(1)
        profile = registry.update(1, "  ", "Client")
        assert profile.display_name == "Marta"
        assert profile.role == "Client"

    def test_negative_id_rejected(self, registry):
        with pytest.raises(ValueError):
            registry.ensure(-1)

    def test_reset_clears_everything(self, registry):
        registry.ensure(0)
        registry.ensure(4)
        registry.reset()
        assert registry.known_speakers() == ()
        with pytest.raises(UnknownSpeakerError):
            registry.profile(0)

    def test_observers_see_new_and_edited_profiles(self, registry):
        seen = []
        registry.subscribe(seen.append)
        registry.ensure(0)
        registry.ensure(0)
        registry.update(0, "Jan", "Manager")
        assert [(p.id, p.display_name) for p in seen] == [(0, "Person 1"), (0, "Jan")]


class TestSpeakerColor:
    """Tests for the id -> color mapping."""

    def test_color_depends_only_on_id(self):
        assert speaker_color(2) == speaker_color(2)
        assert speaker_color(0) != speaker_color(1)

    def test_palette_reused_cyclically(self):
        assert speaker_color(len(PALETTE)) == speaker_color(0)
        assert speaker_color(len(PALETTE) + 3) == speaker_color(3)


class TestSpeakerStats:
    """Tests for per-speaker statistics."""

    def test_empty_log(self):
        assert compute_speaker_stats([], 0) == SpeakerStats(0, 0, 0.0)
        assert compute_speaker_stats((), 42) == SpeakerStats(0, 0, 0.0)

    def test_two_speaker_scenario(self, aggregator):
        aggregator.on_final("hello world", 0.9, speaker_ids=[0])
        aggregator.on_final("hi there friend", 0.8, speaker_ids=[1])
        log = aggregator.segments
        assert compute_speaker_stats(log, 0) == SpeakerStats(1, 2, 0.9)
        stats_1 = compute_speaker_stats(log, 1)
        assert stats_1.utterance_count == 1
        assert stats_1.word_count == 3
        assert stats_1.average_confidence == pytest.approx(0.8)

    def test_average_confidence(self, aggregator):
        aggregator.on_final("a", 0.5)
        aggregator.on_final("b", 1.0)
        assert compute_speaker_stats(aggregator.segments, 0).average_confidence == pytest.approx(0.75)

    def test_word_tags_take_precedence(self, aggregator):
        words = [WordTag("hi", 0), WordTag("there", 1), WordTag("friend", 1)]
        aggregator.on_final("hi there friend", 0.7, words=words)
        log = aggregator.segments
        assert compute_speaker_stats(log, 0).word_count == 1
        assert compute_speaker_stats(log, 1).word_count == 2

    def test_untagged_segment_uses_whitespace_approximation(self, aggregator):
        aggregator.on_final("  several   words\tseparated \n oddly ", 0.7, speaker_ids=[0, 1])
        log = aggregator.segments
        # Both speakers get the whole-segment approximation
        assert compute_speaker_stats(log, 0).word_count == 4
        assert compute_speaker_stats(log, 1).word_count == 4

    def test_recomputes_as_log_grows(self, aggregator):
        aggregator.on_final("one two", 0.6)
        before = compute_speaker_stats(aggregator.segments, 0)
        aggregator.on_final("three", 1.0)
        after = compute_speaker_stats(aggregator.segments, 0)
        assert before == SpeakerStats(1, 2, 0.6)
        assert after.utterance_count == 2
        assert after.word_count == 3
        assert after.average_confidence == pytest.approx(0.8)

    def test_stats_table(self, registry):
        aggregator = TranscriptAggregator(registry)
        aggregator.on_final("a b", 0.9, speaker_ids=[0])
        aggregator.on_final("c", 0.5, speaker_ids=[2])
        table = speaker_stats_table(aggregator.segments, registry.known_speakers())
        assert set(table) == {0, 2}
        assert table[2] == SpeakerStats(1, 1, 0.5)
