"""URL pattern matching and resource classification."""

import re

from news_curator.models.content import Platform, ResourceIdentity, ResourceKind

_YOUTUBE = r"^(?:https?://)?(?:www\.|m\.|music\.)?youtube\.com"
_VIDEO_ID = r"([a-zA-Z0-9_-]{11})"
_X = r"^(?:https?://)?(?:www\.|mobile\.)?(?:x|twitter)\.com"
_THREADS = r"^(?:https?://)?(?:www\.)?threads\.(?:net|com)"

# Within a family the first match wins, so order runs most to least specific
VIDEO_PATTERNS: tuple[tuple[re.Pattern, ResourceKind], ...] = (
    (re.compile(_YOUTUBE + r"/shorts/" + _VIDEO_ID), ResourceKind.SHORTS),
    (re.compile(_YOUTUBE + r"/watch\?(?:[^#]*&)?v=" + _VIDEO_ID), ResourceKind.VIDEO),
    (re.compile(r"^(?:https?://)?(?:www\.)?youtu\.be/" + _VIDEO_ID), ResourceKind.VIDEO),
    (re.compile(_YOUTUBE + r"/(?:embed|v|live)/" + _VIDEO_ID), ResourceKind.VIDEO),
    (re.compile(_YOUTUBE + r"/(@[\w.-]+)"), ResourceKind.CHANNEL),
    (re.compile(_YOUTUBE + r"/channel/([\w-]+)"), ResourceKind.CHANNEL),
    # Legacy custom URLs keep their path prefix: ("c/name",) or ("user/name",)
    (re.compile(_YOUTUBE + r"/((?:c|user)/[\w-]+)"), ResourceKind.CHANNEL),
    (re.compile(r"^" + _VIDEO_ID + r"$"), ResourceKind.VIDEO),
)

MICROBLOG_PATTERNS: tuple[tuple[re.Pattern, ResourceKind], ...] = (
    (re.compile(_X + r"/([A-Za-z0-9_]{1,15})/status(?:es)?/(\d+)"), ResourceKind.POST),
    (
        re.compile(_X + r"/([A-Za-z0-9_]{1,15})(?:/(?:with_replies|media|likes|highlights))?/?(?:[?#]|$)"),
        ResourceKind.PROFILE,
    ),
)

FEDERATED_PATTERNS: tuple[tuple[re.Pattern, ResourceKind], ...] = (
    (re.compile(_THREADS + r"/@([\w.]+)/post/([\w-]+)"), ResourceKind.POST),
    (re.compile(_THREADS + r"/@([\w.]+)(?:[/?#]|$)"), ResourceKind.PROFILE),
)

# Reserved X path segments that look like a bare handle
RESERVED_MICROBLOG_PATHS = frozenset(
    {
        "home",
        "explore",
        "notifications",
        "messages",
        "search",
        "settings",
        "i",
        "compose",
        "login",
        "logout",
        "signup",
        "tos",
        "privacy",
        "intent",
        "share",
        "hashtag",
    }
)

# Families in priority order
_FAMILIES: tuple[tuple[Platform, tuple[tuple[re.Pattern, ResourceKind], ...]], ...] = (
    (Platform.VIDEO, VIDEO_PATTERNS),
    (Platform.MICROBLOG, MICROBLOG_PATTERNS),
    (Platform.FEDERATED_MICROBLOG, FEDERATED_PATTERNS),
)


def _match_family(
    url: str, platform: Platform, patterns: tuple[tuple[re.Pattern, ResourceKind], ...]
) -> ResourceIdentity | None:
    for pattern, kind in patterns:
        match = pattern.search(url)
        if not match:
            continue
        identifiers = match.groups()
        if (
            platform == Platform.MICROBLOG
            and kind == ResourceKind.PROFILE
            and identifiers[0].lower() in RESERVED_MICROBLOG_PATHS
        ):
            return None
        return ResourceIdentity(platform=platform, resource_kind=kind, identifiers=identifiers)
    return None


def classify(url: str, hint: Platform | None = None) -> ResourceIdentity | None:
    """Classify a URL into platform, resource kind and identifiers.

    Families are tried in fixed priority order (video, microblog,
    federated microblog). A hint restricts matching to one family; the
    generic hint always yields None. Returns None when nothing matches so
    the caller falls back to the generic extractor.
    """
    url = url.strip()
    if hint == Platform.GENERIC:
        return None
    for platform, patterns in _FAMILIES:
        if hint is not None and hint != platform:
            continue
        identity = _match_family(url, platform, patterns)
        if identity is not None:
            return identity
    return None
