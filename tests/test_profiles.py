import pytest

from daybook.domain import Category
from daybook.functional import validate_category
from daybook.profiles import DEFAULT_STYLE, MOOD, PLANTS, PROFILES, get_profile, style_for


def test_every_profile_has_valid_unique_categories():
    for profile in PROFILES.values():
        ids = [c.id for c in profile.categories]
        assert len(ids) == len(set(ids)), profile.name
        for c in profile.categories:
            others = tuple(o for o in profile.categories if o.id != c.id)
            assert validate_category(c, others).is_right()


def test_mood_scores_are_ranked():
    scores = [c.score for c in MOOD.categories]
    assert scores == sorted(scores, reverse=True)
    assert all(0 <= s <= 1 for s in scores)


def test_plants_measurements():
    assert PLANTS.measurements == ("height", "leaves")
    assert "watering" in PLANTS.tags


def test_get_profile():
    assert get_profile("mood") is MOOD
    with pytest.raises(KeyError, match="Unknown profile"):
        get_profile("finance")


def test_style_for_known_category():
    assert style_for(MOOD.categories, "joy") == ("😄", "#FFC107")


def test_style_for_fallbacks():
    assert style_for(MOOD.categories, "missing") == DEFAULT_STYLE
    bare = (Category("plain", "Plain"),)
    assert style_for(bare, "plain") == DEFAULT_STYLE
