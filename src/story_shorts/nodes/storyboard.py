"""Storyboard generator: expands a brief into an ordered list of timed scenes."""

from __future__ import annotations

import random
import uuid
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence, TypeVar

import structlog

from story_shorts.models.brief import StoryBrief, VideoLength, VideoTone
from story_shorts.models.scene import GradientBackground, Overlay, Scene

logger = structlog.get_logger()

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Copy and style pools
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NamedGradient:
    name: str
    value: str


STORYBOARD_GRADIENTS: tuple[NamedGradient, ...] = (
    NamedGradient(
        "Aurora",
        "linear-gradient(135deg, rgba(17,24,39,1) 0%, rgba(59,130,246,1) 50%, rgba(236,72,153,1) 100%)",
    ),
    NamedGradient(
        "Sunrise",
        "linear-gradient(135deg, rgba(248,113,113,1) 0%, rgba(253,186,116,1) 52%, rgba(163,230,53,1) 100%)",
    ),
    NamedGradient(
        "Neon Night",
        "linear-gradient(135deg, rgba(124,58,237,1) 0%, rgba(56,189,248,1) 45%, rgba(34,197,94,1) 100%)",
    ),
    NamedGradient(
        "Sunkissed",
        "linear-gradient(135deg, rgba(251,146,60,1) 0%, rgba(249,115,22,1) 45%, rgba(244,63,94,1) 100%)",
    ),
    NamedGradient(
        "Slate",
        "linear-gradient(135deg, rgba(15,23,42,1) 0%, rgba(71,85,105,1) 52%, rgba(148,163,184,1) 100%)",
    ),
)


@dataclass(frozen=True)
class ToneProfile:
    hook: tuple[str, ...]
    support: tuple[str, ...]
    close: tuple[str, ...]
    overlay: Overlay


TONE_PROFILES: dict[VideoTone, ToneProfile] = {
    VideoTone.INSPIRATIONAL: ToneProfile(
        hook=(
            "Imagine what happens when creativity meets automation.",
            "This is your sign to share your next big vision.",
            "Turn ideas into impact with the right momentum.",
        ),
        support=(
            "Show up consistently with content that energizes your audience.",
            "Pair your message with visuals that spark emotion.",
            "Deliver storytelling that keeps people watching to the very end.",
        ),
        close=(
            "Ready to go from idea to post in minutes?",
            "Let your brand speak with clarity every time you publish.",
            "It is your turn to lead the conversation on your niche.",
        ),
        overlay="light",
    ),
    VideoTone.EDUCATIONAL: ToneProfile(
        hook=(
            "Here is how to simplify your content workflow.",
            "Let's break down a smarter way to plan your videos.",
            "Stop guessing what to post. Follow this framework.",
        ),
        support=(
            "Structure your message with concise talking points and visuals.",
            "Automated editing keeps your video polished and on-brand.",
            "Optimize watch time with pacing tuned per segment.",
        ),
        close=(
            "Put this playbook to work on your next post.",
            "Level-up your consistency without burning out.",
            "Teach, inspire, and convert with videos that land.",
        ),
        overlay="dark",
    ),
    VideoTone.PLAYFUL: ToneProfile(
        hook=(
            "Let's turn your bold ideas into scroll-stopping reels.",
            "Bring the fun back into posting with effortless automation.",
            "Your audience is ready, so let's surprise them today.",
        ),
        support=(
            "Auto-generated scenes keep the energy upbeat.",
            "Switch between hooks, payoffs, and CTAs seamlessly.",
            "Dynamic backgrounds do the heavy lifting for you.",
        ),
        close=(
            "It is time to drop your next viral moment.",
            "Press publish and own the spotlight.",
            "Stay playful, stay consistent, stay memorable.",
        ),
        overlay="light",
    ),
    VideoTone.DIRECT: ToneProfile(
        hook=(
            "Stop losing time editing videos from scratch.",
            "Here is the automation stack your Instagram needs.",
            "Hit publish with confidence on every campaign.",
        ),
        support=(
            "AI-assisted scripts map directly to compelling visuals.",
            "Batch-create videos, then auto-schedule them on Instagram.",
            "Analytics-ready chapters let you track what resonates.",
        ),
        close=(
            "Plug this system into your workflow today.",
            "Scale your posting cadence without sacrificing quality.",
            "Own your niche with consistent, high-impact content.",
        ),
        overlay="dark",
    ),
}

DURATIONS_BY_LENGTH: dict[VideoLength, tuple[float, ...]] = {
    VideoLength.SHORT: (4, 4, 5),
    VideoLength.MEDIUM: (4, 5, 6, 5),
    VideoLength.LONG: (4, 5, 6, 4, 6),
}

SUPPORTING_DETAILS: tuple[Callable[[StoryBrief], str], ...] = (
    lambda brief: (
        f"Built specifically for {brief.audience or 'modern creators'}, "
        f"every scene focuses on {brief.call_to_action or 'your CTA'}."
    ),
    lambda brief: (
        "Optimized pacing keeps watch-time high even on "
        f"{'snackable' if brief.length == VideoLength.SHORT else 'longer'} clips."
    ),
    lambda _brief: "Smart overlays auto-balance contrast so captions always stay readable.",
    lambda _brief: "Export-ready for Instagram Reels, Stories, and carousel covers.",
    lambda brief: f"Fine-tuned tone to match a {brief.tone.value} voice without extra revisions.",
)

OPENING_TITLE_FALLBACK = "Idea Launchpad"
PAYOFF_TITLE = "Show The Payoff"
MOMENTUM_TITLE = "Keep The Energy"
CLOSING_TITLE = "Close & Convert"
MISSING_CTA_PROMPT = "Drop your CTA here before publishing."


# ---------------------------------------------------------------------------
# Randomness
# ---------------------------------------------------------------------------


class RandomSource(Protocol):
    """Source of the copy/style picks and the per-batch id token."""

    def choice(self, items: Sequence[T]) -> T: ...

    def token(self) -> str: ...


class SystemRandomSource:
    """Unseeded picks backed by :mod:`random`, ids backed by :mod:`uuid`."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()

    def choice(self, items: Sequence[T]) -> T:
        return self._rng.choice(items)

    def token(self) -> str:
        return str(uuid.uuid4()).split("-")[0]


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


def _supporting_detail(brief: StoryBrief, index: int) -> str:
    return SUPPORTING_DETAILS[index % len(SUPPORTING_DETAILS)](brief)


def generate_storyboard(brief: StoryBrief, rng: Optional[RandomSource] = None) -> list[Scene]:
    """Build the scene sequence for *brief*.

    The scene count and durations come from the length template; the first
    scene hooks, the middle scenes support and the last one closes with the
    brief's call to action. Narration lines and gradients are picked from
    *rng*, so two calls with the same brief differ unless *rng* is fixed.
    """
    rng = rng or SystemRandomSource()
    profile = TONE_PROFILES[brief.tone]
    durations = DURATIONS_BY_LENGTH[brief.length]
    base_id = rng.token()
    last_index = len(durations) - 1

    scenes: list[Scene] = []
    for index, duration in enumerate(durations):
        background = GradientBackground(value=rng.choice(STORYBOARD_GRADIENTS).value)
        scene_id = f"{base_id}-{index}"

        if index == 0:
            scene = Scene(
                id=scene_id,
                title=brief.idea if brief.idea.strip() else OPENING_TITLE_FALLBACK,
                narration=rng.choice(profile.hook),
                supporting_point=_supporting_detail(brief, index),
                duration=duration,
                background=background,
                overlay=profile.overlay,
            )
        elif index == last_index:
            cta = brief.call_to_action if brief.call_to_action.strip() else None
            scene = Scene(
                id=scene_id,
                title=CLOSING_TITLE,
                narration=rng.choice(profile.close),
                supporting_point=f"Next step: {cta}" if cta else MISSING_CTA_PROMPT,
                duration=duration,
                background=background,
                overlay=profile.overlay,
                cta=cta,
            )
        else:
            scene = Scene(
                id=scene_id,
                title=PAYOFF_TITLE if index == 1 else MOMENTUM_TITLE,
                narration=rng.choice(profile.support),
                supporting_point=_supporting_detail(brief, index),
                duration=duration,
                background=background,
                overlay=profile.overlay,
            )
        scenes.append(scene)

    logger.info(
        "storyboard.generated",
        tone=brief.tone.value,
        length=brief.length.value,
        scene_count=len(scenes),
        total_duration=sum(scene.duration for scene in scenes),
    )
    return scenes
