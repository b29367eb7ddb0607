from typing import Dict
from urllib.parse import quote, urlencode

from pydantic import BaseModel


SHARE_PLATFORMS = ("twitter", "facebook", "linkedin", "whatsapp")


class ShareLinks(BaseModel):
    public_url: str
    platforms: Dict[str, str]


def public_trip_url(base_url: str, trip_id: str) -> str:
    return f"{base_url.rstrip('/')}/public/{quote(trip_id)}"


def platform_share_url(platform: str, text: str, url: str) -> str:
    """
    Build the share URL of one social platform.

    Raises:
        ValueError: If the platform is not supported.
    """
    if platform == "twitter":
        return "https://twitter.com/intent/tweet?" + urlencode({"text": text, "url": url})
    if platform == "facebook":
        return "https://www.facebook.com/sharer/sharer.php?" + urlencode({"u": url})
    if platform == "linkedin":
        return "https://www.linkedin.com/sharing/share-offsite/?" + urlencode({"url": url})
    if platform == "whatsapp":
        return "https://wa.me/?" + urlencode({"text": f"{text} {url}"})
    raise ValueError(f"Unsupported share platform: {platform}")


def build_share_links(base_url: str, trip_id: str, trip_name: str) -> ShareLinks:
    url = public_trip_url(base_url, trip_id)
    text = f"Check out this amazing trip: {trip_name}"
    return ShareLinks(
        public_url=url,
        platforms={platform: platform_share_url(platform, text, url) for platform in SHARE_PLATFORMS},
    )
