"""
User-Agent Device Classification
"""

from typing import Optional

from bio_storefront.database.models import DeviceType

TABLET_MARKERS = ("ipad", "tablet")
MOBILE_MARKERS = ("mobile", "android", "iphone", "ipod", "blackberry", "windows phone")


def classify_device(user_agent: Optional[str]) -> DeviceType:
    """
    Coarse device class from a user agent string.

    Tablet markers win over mobile ones, so an Android tablet reporting
    "Android ... Tablet" counts as a tablet.
    """
    if not user_agent:
        return DeviceType.UNKNOWN

    ua = user_agent.lower()
    if any(marker in ua for marker in TABLET_MARKERS):
        return DeviceType.TABLET
    if any(marker in ua for marker in MOBILE_MARKERS):
        return DeviceType.MOBILE
    return DeviceType.DESKTOP
