from functools import lru_cache
from typing import List, NamedTuple, Optional, Tuple

from config import (
    HAIR_COLOR_BUCKETS,
    IMAGE_CATALOG,
    LENGTH_FOLDERS,
    RECOMMENDATIONS,
    STYLE_FOLDERS,
    ColorBucket,
    HairLength,
    PersonalStyle,
)

# Renderers never show more than this many style photos
MAX_REPORT_IMAGES = 4


class HairProfile(NamedTuple):
    hair_color: str
    hair_length: str
    personal_style: str


class Recommendation(NamedTuple):
    title: str
    description: str
    care_instructions: str
    maintenance_schedule: Tuple[str, ...]
    image_paths: Tuple[str, ...]


def color_bucket(hair_color: str) -> Optional[ColorBucket]:
    """Map a raw hair color answer onto its image bucket."""
    return HAIR_COLOR_BUCKETS.get(hair_color)


def _parse(hair_length: str, personal_style: str) -> Optional[Tuple[HairLength, PersonalStyle]]:
    if not hair_length or not personal_style:
        return None
    try:
        return HairLength(hair_length), PersonalStyle(personal_style)
    except ValueError:
        return None


def recommendation_key(hair_length: str, personal_style: str) -> Optional[str]:
    """Return "{length}-{style}" when both values are known, else None."""
    parsed = _parse(hair_length, personal_style)
    if parsed is None:
        return None
    length, style = parsed
    return f"{length.value}-{style.value}"


def image_path(bucket: ColorBucket, hair_length: HairLength, personal_style: PersonalStyle, filename: str) -> str:
    return f"/{bucket.value}/{LENGTH_FOLDERS[hair_length]}_hair/{STYLE_FOLDERS[personal_style]}/{filename}"


def images_for(profile: HairProfile) -> List[str]:
    """
    Ordered asset paths for the profile.
    Unknown colors or combinations give an empty list.
    """
    parsed = _parse(profile.hair_length, profile.personal_style)
    bucket = color_bucket(profile.hair_color)
    if parsed is None or bucket is None:
        return []
    length, style = parsed
    key = f"{length.value}-{style.value}"
    return [image_path(bucket, length, style, name) for name in IMAGE_CATALOG[bucket].get(key, ())]


@lru_cache(maxsize=None)
def resolve(profile: HairProfile) -> Optional[Recommendation]:
    """
    Look up the canned recommendation for a profile.

    Text depends on length and style only; hair color just picks the photo set.
    Returns None when length or style is not one of the known values.
    """
    key = recommendation_key(profile.hair_length, profile.personal_style)
    record = RECOMMENDATIONS.get(key) if key else None
    if record is None:
        return None
    return Recommendation(
        title=record.title,
        description=record.description,
        care_instructions=record.care_instructions,
        maintenance_schedule=record.maintenance_schedule,
        image_paths=tuple(images_for(profile)),
    )


def report_images(profile: HairProfile) -> List[str]:
    """The capped image list handed to the PDF and email renderers."""
    return images_for(profile)[:MAX_REPORT_IMAGES]
