import re
from typing import List, Optional

FEATURE_INDICATORS = ("features", "functionality", "capabilities", "what it does")
MAX_FEATURES = 10

_BULLET_RE = re.compile(r"^\s*[-*+]\s+(.+)")
_NUMBERED_RE = re.compile(r"^\s*\d+\.\s+(.+)")


def _has_indicator(lowered_line: str) -> bool:
    return any(indicator in lowered_line for indicator in FEATURE_INDICATORS)


def extract_features(readme: Optional[str]) -> List[str]:
    """
    Pulls bullet and numbered items out of the README's feature section.

    A section starts at a `#` or `**` line naming one of FEATURE_INDICATORS and
    ends at the next `#` heading that names none of them. At most MAX_FEATURES
    items are returned, in document order.
    """
    if not readme:
        return []

    features: List[str] = []
    in_section = False

    for line in readme.splitlines():
        lowered = line.lower()

        if _has_indicator(lowered) and ("#" in line or "**" in line):
            in_section = True
            continue

        if in_section and line.startswith("#"):
            # Any heading reaching here names no indicator.
            in_section = False
            continue

        if not in_section:
            continue

        match = _BULLET_RE.match(line) or _NUMBERED_RE.match(line)
        if match:
            features.append(match.group(1).strip())
            if len(features) >= MAX_FEATURES:
                break

    return features
