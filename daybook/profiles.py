from dataclasses import dataclass
from typing import Iterable, Tuple

from daybook.domain import Category

DEFAULT_STYLE = ("•", "#9E9E9E")


@dataclass(frozen=True)
class Profile:
    name: str
    title: str
    categories: Tuple[Category, ...]
    measurements: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()


MOOD = Profile(
    name="mood",
    title="Mood tracker",
    categories=(
        Category("joy", "Joy", "😄", "#FFC107", 1.0),
        Category("success", "Success", "🏆", "#4CAF50", 0.9),
        Category("calm", "Calm", "😌", "#03A9F4", 0.7),
        Category("bored", "Bored", "😐", "#9E9E9E", 0.4),
        Category("tired", "Tired", "😴", "#795548", 0.3),
        Category("angry", "Angry", "😠", "#F44336", 0.1),
    ),
    tags=("work", "family", "sport", "sleep", "friends"),
)

PLANTS = Profile(
    name="plants",
    title="Plant growth log",
    categories=(
        Category("measurement", "Measurement", "📏", "#4CAF50"),
        Category("care", "Care", "💧", "#2196F3"),
        Category("observation", "Observation", "🔍", "#8BC34A"),
    ),
    measurements=("height", "leaves"),
    tags=("watering", "spraying", "fertilizing", "repotting"),
)

IDEAS = Profile(
    name="ideas",
    title="Content planner",
    categories=(
        Category("idea", "Idea", "💡", "#FFEB3B"),
        Category("draft", "Draft", "📝", "#FF9800"),
        Category("published", "Published", "🚀", "#673AB7"),
    ),
    tags=("video", "post", "story", "reel"),
)

GRATITUDE = Profile(
    name="gratitude",
    title="Gratitude journal",
    categories=(
        Category("gratitude", "Gratitude", "🙏", "#E91E63"),
        Category("intention", "Intention", "🎯", "#3F51B5"),
        Category("reflection", "Reflection", "🌙", "#607D8B"),
    ),
    tags=("morning", "evening", "people", "health"),
)

WEATHER = Profile(
    name="weather",
    title="Weather diary",
    categories=(
        Category("sunny", "Sunny", "☀️", "#FFC107"),
        Category("cloudy", "Cloudy", "☁️", "#90A4AE"),
        Category("rainy", "Rainy", "🌧", "#2196F3"),
        Category("snowy", "Snowy", "❄️", "#B3E5FC"),
        Category("stormy", "Stormy", "⛈", "#455A64"),
    ),
    measurements=("temperature",),
)

PROFILES = {p.name: p for p in (MOOD, PLANTS, IDEAS, GRATITUDE, WEATHER)}


def get_profile(name: str) -> Profile:
    try:
        return PROFILES[name]
    except KeyError:
        raise KeyError(f"Unknown profile {name!r}, expected one of {', '.join(sorted(PROFILES))}")


def style_for(categories: Iterable[Category], cat_id: str) -> Tuple[str, str]:
    """(icon, color) for a category id, with a neutral fallback."""
    for c in categories:
        if c.id == cat_id:
            return c.icon or DEFAULT_STYLE[0], c.color or DEFAULT_STYLE[1]
    return DEFAULT_STYLE
