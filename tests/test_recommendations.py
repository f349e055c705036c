import pytest

from config import IMAGE_CATALOG, RECOMMENDATIONS, ColorBucket, HairLength, PersonalStyle
from recommendations import (
    MAX_REPORT_IMAGES,
    HairProfile,
    color_bucket,
    images_for,
    recommendation_key,
    report_images,
    resolve,
)

ALL_KEYS = [f"{length.value}-{style.value}" for length in HairLength for style in PersonalStyle]


def test_tables_cover_every_length_and_style():
    assert sorted(RECOMMENDATIONS) == sorted(ALL_KEYS)
    for bucket in ColorBucket:
        assert sorted(IMAGE_CATALOG[bucket]) == sorted(ALL_KEYS)


def test_medium_trendy_blonde():
    rec = resolve(HairProfile("Blonde", "Medium", "Trendy"))

    assert rec.title == "Medium Hair Trendy"
    assert rec.maintenance_schedule[0] == "Money piece with Balayage: every 12 weeks"
    assert len(rec.image_paths) == 5
    assert rec.image_paths[0] == "/blonde/medium_hair/trendy/mbt1.jpg"


def test_extra_long_minimal_brunette():
    rec = resolve(HairProfile("Brunette", "Extra-long", "Minimal"))

    assert len(rec.maintenance_schedule) == 5
    assert rec.maintenance_schedule[-1].startswith("Trim")
    assert rec.image_paths[0] == "/brunette/extralong_hair/minimal/aelm1.jpg"


def test_resolve_is_deterministic():
    profile = HairProfile("Brunette", "Long", "Elegant")
    assert resolve(profile) == resolve(HairProfile("Brunette", "Long", "Elegant"))


@pytest.mark.parametrize("length, style", [
    ("", "Classic"),
    ("Short", ""),
    ("Shoulder", "Classic"),
    ("Short", "Boho"),
    ("short", "classic"),
])
def test_unknown_combination_has_no_recommendation(length, style):
    assert recommendation_key(length, style) is None
    assert resolve(HairProfile("Blonde", length, style)) is None


def test_unknown_color_keeps_text_but_has_no_images():
    rec = resolve(HairProfile("Purple", "Short", "Classic"))
    assert rec is not None
    assert rec.image_paths == ()


@pytest.mark.parametrize("color, bucket", [
    ("Blonde", ColorBucket.BLONDE),
    ("Natural Blonde", ColorBucket.BLONDE),
    ("Brunette", ColorBucket.BRUNETTE),
    ("Brown", ColorBucket.BRUNETTE),
    ("Black", ColorBucket.BRUNETTE),
    ("Red", ColorBucket.BRUNETTE),
    ("Green", None),
])
def test_color_aliases(color, bucket):
    assert color_bucket(color) == bucket


def test_black_and_brunette_share_photos():
    assert images_for(HairProfile("Black", "Short", "Trendy")) == images_for(HairProfile("Brunette", "Short", "Trendy"))


def test_text_does_not_depend_on_color():
    blonde = resolve(HairProfile("Blonde", "Long", "Classic"))
    brunette = resolve(HairProfile("Brunette", "Long", "Classic"))
    assert blonde.description == brunette.description
    assert blonde.image_paths != brunette.image_paths


def test_report_images_are_capped():
    profile = HairProfile("Blonde", "Long", "Trendy")
    assert len(images_for(profile)) == 7
    assert report_images(profile) == images_for(profile)[:MAX_REPORT_IMAGES]


def test_paths_follow_folder_layout():
    for path in images_for(HairProfile("Blonde", "Extra-long", "Classic")):
        assert path.startswith("/blonde/extralong_hair/classic/")
