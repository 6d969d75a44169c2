"""Tests for story_shorts.nodes.storyboard and brief normalization."""

import random

import pytest

from story_shorts.models.brief import DEFAULT_BRIEF, StoryBrief, VideoLength, VideoTone, normalize_brief
from story_shorts.models.scene import GradientBackground
from story_shorts.nodes.storyboard import (
    CLOSING_TITLE,
    MISSING_CTA_PROMPT,
    MOMENTUM_TITLE,
    OPENING_TITLE_FALLBACK,
    PAYOFF_TITLE,
    STORYBOARD_GRADIENTS,
    TONE_PROFILES,
    SystemRandomSource,
    generate_storyboard,
)


class FixedRandom:
    """Always picks the first item and hands out a fixed token."""

    def __init__(self, token: str = "deadbeef"):
        self._token = token
        self.choices = 0

    def choice(self, items):
        self.choices += 1
        return items[0]

    def token(self) -> str:
        return self._token


def _brief(**overrides) -> StoryBrief:
    fields = {
        "idea": "Launch week teaser",
        "audience": "indie founders",
        "tone": VideoTone.PLAYFUL,
        "call_to_action": "Join the waitlist",
        "length": VideoLength.MEDIUM,
    }
    fields.update(overrides)
    return StoryBrief(**fields)


class TestSceneCountAndTiming:
    @pytest.mark.parametrize(
        ("length", "durations"),
        [
            (VideoLength.SHORT, [4, 4, 5]),
            (VideoLength.MEDIUM, [4, 5, 6, 5]),
            (VideoLength.LONG, [4, 5, 6, 4, 6]),
        ],
    )
    def test_durations_follow_length_template(self, length, durations):
        scenes = generate_storyboard(_brief(length=length), FixedRandom())

        assert [scene.duration for scene in scenes] == durations

    def test_long_video_totals_25_seconds(self):
        scenes = generate_storyboard(_brief(length=VideoLength.LONG))

        assert sum(scene.duration for scene in scenes) == 25


class TestSceneContent:
    def test_ids_share_token_and_carry_index(self):
        scenes = generate_storyboard(_brief(), FixedRandom("cafe1234"))

        assert [scene.id for scene in scenes] == [f"cafe1234-{i}" for i in range(4)]

    def test_first_scene_title_is_the_idea(self):
        scenes = generate_storyboard(_brief(idea="Ship faster"), FixedRandom())

        assert scenes[0].title == "Ship faster"

    def test_blank_idea_uses_fallback_title(self):
        scenes = generate_storyboard(_brief(idea="   "), FixedRandom())

        assert scenes[0].title == OPENING_TITLE_FALLBACK

    def test_middle_and_closing_titles(self):
        scenes = generate_storyboard(_brief(length=VideoLength.LONG), FixedRandom())

        assert [scene.title for scene in scenes[1:]] == [
            PAYOFF_TITLE,
            MOMENTUM_TITLE,
            MOMENTUM_TITLE,
            CLOSING_TITLE,
        ]

    def test_last_scene_carries_cta(self):
        scenes = generate_storyboard(_brief(call_to_action="Join the waitlist"), FixedRandom())

        assert scenes[-1].cta == "Join the waitlist"
        assert scenes[-1].supporting_point == "Next step: Join the waitlist"
        assert all(scene.cta is None for scene in scenes[:-1])

    def test_blank_cta_leaves_prompt_and_no_button(self):
        scenes = generate_storyboard(_brief(call_to_action=""), FixedRandom())

        assert scenes[-1].cta is None
        assert scenes[-1].supporting_point == MISSING_CTA_PROMPT

    def test_overlay_follows_tone(self):
        for tone in VideoTone:
            scenes = generate_storyboard(_brief(tone=tone), FixedRandom())
            assert {scene.overlay for scene in scenes} == {TONE_PROFILES[tone].overlay}

    def test_narration_comes_from_tone_pools(self):
        profile = TONE_PROFILES[VideoTone.EDUCATIONAL]
        scenes = generate_storyboard(_brief(tone=VideoTone.EDUCATIONAL))

        assert scenes[0].narration in profile.hook
        assert all(scene.narration in profile.support for scene in scenes[1:-1])
        assert scenes[-1].narration in profile.close

    def test_backgrounds_are_catalogue_gradients(self):
        values = {gradient.value for gradient in STORYBOARD_GRADIENTS}
        scenes = generate_storyboard(_brief(length=VideoLength.LONG))

        for scene in scenes:
            assert isinstance(scene.background, GradientBackground)
            assert scene.background.value in values

    def test_supporting_detail_mentions_audience(self):
        scenes = generate_storyboard(_brief(audience="indie founders"), FixedRandom())

        assert "indie founders" in scenes[0].supporting_point

    def test_two_picks_per_scene(self):
        rng = FixedRandom()
        generate_storyboard(_brief(length=VideoLength.SHORT), rng)

        assert rng.choices == 6


class TestRandomness:
    def test_seeded_sources_are_reproducible(self):
        first = generate_storyboard(_brief(), SystemRandomSource(random.Random(7)))
        second = generate_storyboard(_brief(), SystemRandomSource(random.Random(7)))

        assert [s.narration for s in first] == [s.narration for s in second]
        assert [s.background.value for s in first] == [s.background.value for s in second]

    def test_token_is_first_uuid_segment(self):
        token = SystemRandomSource().token()

        assert len(token) == 8
        int(token, 16)

    def test_brief_is_not_mutated(self):
        brief = _brief()
        snapshot = brief.model_dump()

        generate_storyboard(brief)

        assert brief.model_dump() == snapshot


class TestNormalizeBrief:
    def test_trims_free_text(self):
        brief = normalize_brief(_brief(idea="  Ship faster  ", audience=" devs ", call_to_action=" Go "))

        assert (brief.idea, brief.audience, brief.call_to_action) == ("Ship faster", "devs", "Go")

    def test_blank_fields_fall_back_to_defaults(self):
        brief = normalize_brief(StoryBrief(idea=" ", audience="", call_to_action="\t"))

        assert brief.idea == DEFAULT_BRIEF.idea
        assert brief.audience == DEFAULT_BRIEF.audience
        assert brief.call_to_action == DEFAULT_BRIEF.call_to_action

    def test_keeps_tone_and_length(self):
        brief = normalize_brief(_brief(tone=VideoTone.EDUCATIONAL, length=VideoLength.SHORT))

        assert brief.tone is VideoTone.EDUCATIONAL
        assert brief.length is VideoLength.SHORT

    def test_accepts_camel_case_payload(self):
        brief = StoryBrief.model_validate({"idea": "x", "callToAction": "Buy now", "tone": "direct"})

        assert brief.call_to_action == "Buy now"
