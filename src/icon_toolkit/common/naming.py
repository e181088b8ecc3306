"""Name heuristics shared by classification, clustering and consolidation.

Icon layers are named inconsistently ("home-icon", "home_icon2",
"HomeIcon", "lucide/home"). Everything that interprets a layer name lives
here: vocabularies, library-prefix parsing, normalization for grouping,
frame-context labels and smart renaming.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional, Tuple

from icon_toolkit.core.models.nodes import BoundingBox

# ─────────────────────────────────────────────────────────────────────────────
# Vocabularies
# ─────────────────────────────────────────────────────────────────────────────

ICON_KEYWORDS: Tuple[str, ...] = (
    # Explicit icon terms
    "icon", "ico", "symbol", "glyph", "pictogram", "sign", "mark", "badge",
    # UI elements that are typically icons
    "arrow", "chevron", "star", "heart", "home", "user", "menu", "burger",
    "search", "close", "check", "plus", "minus", "edit", "delete", "trash",
    "settings", "info", "warning", "error", "success", "lock", "unlock",
    "eye", "bell", "mail", "phone", "calendar", "clock", "location", "pin",
    # Actions
    "share", "download", "upload", "save", "print", "copy", "paste",
    "undo", "redo", "refresh", "reload", "sync", "play", "pause", "stop",
    # Navigation and layout
    "back", "forward", "next", "prev", "up", "down", "left", "right",
    "expand", "collapse", "zoom", "filter", "sort", "grid", "list",
    # File and data
    "file", "folder", "document", "image", "video", "audio", "chart", "graph",
    "avatar", "profile", "account", "contact", "person", "people", "team",
    "notification", "alert", "message", "chat", "comment", "feedback",
    "dashboard", "analytics", "stats", "report", "data", "database",
    "cloud", "server", "network", "wifi", "bluetooth", "mobile", "desktop",
    "tablet", "device", "hardware", "software", "app", "application",
    "website", "web", "link", "url", "external", "internal", "anchor",
    "bookmark", "favorite", "like", "love", "thumbs", "rating",
    "cart", "shopping", "store", "shop", "buy", "sell", "payment", "credit",
    "card", "money", "dollar", "price", "cost", "invoice", "receipt",
    # Shapes
    "circle", "square", "triangle", "diamond", "polygon", "shape",
    "dot", "bullet", "marker", "pointer", "cursor", "target", "crosshair",
    # Social media and brands
    "facebook", "twitter", "instagram", "linkedin", "youtube", "tiktok",
    "github", "gitlab", "slack", "discord", "telegram", "whatsapp",
    # Services and platforms
    "google", "microsoft", "apple", "amazon", "aws", "azure", "meta",
    "dropbox", "spotify", "netflix", "adobe", "figma", "sketch", "canva",
    "teams", "skype", "webex", "notion", "confluence", "jira",
    "trello", "asana", "monday", "clickup", "basecamp", "linear",
    "salesforce", "hubspot", "mailchimp", "constant", "sendinblue",
    "stripe", "paypal", "shopify", "woocommerce", "magento",
    "wordpress", "drupal", "squarespace", "wix", "webflow",
    # Browsers and platforms
    "chrome", "firefox", "safari", "edge", "opera", "brave", "vivaldi",
    "android", "ios", "windows", "macos", "linux", "ubuntu",
    # Development tools
    "vscode", "atom", "sublime", "intellij", "pycharm", "eclipse",
    "docker", "kubernetes", "jenkins", "travis", "circleci", "gitlab-ci",
    "npm", "yarn", "pip", "composer", "maven", "gradle",
    # Communication and scheduling
    "intercom", "zendesk", "freshworks", "helpscout", "crisp",
    "calendly", "acuity", "booking", "doodle", "when2meet",
    # Analytics and tracking
    "mixpanel", "amplitude", "hotjar", "fullstory",
    "segment", "optimizely", "ab-test", "firebase", "supabase",
    # States
    "loading", "spinner", "progress", "complete", "done", "finished",
    "pending", "waiting", "active", "inactive", "disabled", "enabled",
    "online", "offline", "connected", "disconnected", "synced",
    # Icon library prefixes
    "lucide", "heroicons", "feather", "material", "fontawesome", "bootstrap",
    "tabler", "phosphor", "remix", "ant", "carbon", "fluent", "eva",
)

# Cheap substring markers checked before the keyword list
ICON_NAME_MARKERS: Tuple[str, ...] = (
    "icon", "/", "lucide", "feather", "heroicon", "material", "fa-", "fi-",
)

# Names that identify a master as a UI component rather than an icon
COMPONENT_UI_WORDS: Tuple[str, ...] = (
    "button", "input", "card", "modal", "dialog", "form", "banner",
    "navbar", "header", "footer", "sidebar",
)

# Instances are judged against a wider list
INSTANCE_UI_WORDS: Tuple[str, ...] = COMPONENT_UI_WORDS + (
    "dropdown", "select", "checkbox", "radio", "toggle", "switch", "slider",
    "menu", "tab", "badge", "chip", "avatar", "field", "alert", "notification",
)

ARCHIVE_PAGE_MARKERS: Tuple[str, ...] = ("archive", "archived", "old", "backup", "🗄️")

LIBRARY_DISPLAY_NAMES = {
    "lucide": "Lucide Library",
    "heroicons": "Heroicons Library",
    "feather": "Feather Icons",
    "material": "Material Icons",
    "fontawesome": "Font Awesome",
    "bootstrap": "Bootstrap Icons",
    "tabler": "Tabler Icons",
    "phosphor": "Phosphor Icons",
    "remix": "Remix Icon",
    "ant": "Ant Design Icons",
    "carbon": "Carbon Design System",
    "fluent": "Fluent UI Icons",
}

FRAME_CONTEXT_PATTERNS: Tuple[Tuple[str, str], ...] = (
    ("button", "Button"),
    ("card", "Card"),
    ("header", "Header"),
    ("nav", "Navigation"),
    ("toolbar", "Toolbar"),
    ("modal", "Modal"),
    ("dialog", "Dialog"),
    ("sidebar", "Sidebar"),
    ("menu", "Menu"),
    ("tab", "Tab"),
    ("badge", "Badge"),
    ("chip", "Chip"),
    ("input", "Input"),
    ("form", "Form"),
    ("dropdown", "Dropdown"),
    ("accordion", "Accordion"),
)

LIBRARY_NAME_RE = re.compile(r"^([a-zA-Z0-9\-_]+)/(.+)$")
NAMING_CONVENTION_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9]*([_-][a-zA-Z0-9]+)*$")

_SEPARATORS_RE = re.compile(r"[-_\s.]")
_DIGITS_RE = re.compile(r"\d+")
_NOISE_WORDS_RE = re.compile(r"(icon|svg|vector|graphic|outline|filled|solid)")
_NON_ALPHA_RE = re.compile(r"[^a-z]")
_TRAILING_COPY_RE = re.compile(r"\s*copy\s*\d*\s*$", re.IGNORECASE)


# ─────────────────────────────────────────────────────────────────────────────
# Predicates
# ─────────────────────────────────────────────────────────────────────────────

def contains_any(name: str, words: Iterable[str]) -> bool:
    """Case-insensitive substring test against a vocabulary."""
    lowered = name.lower()
    return any(word in lowered for word in words)


def has_icon_keyword(name: str) -> bool:
    return contains_any(name, ICON_KEYWORDS)


def has_icon_name(name: str) -> bool:
    """
    True if the name carries any icon signal.

    Example:
        >>> has_icon_name("Icon/arrow")
        True
        >>> has_icon_name("Container")
        False
    """
    return contains_any(name, ICON_NAME_MARKERS) or has_icon_keyword(name)


def is_icon_library_name(name: str) -> bool:
    """Names created by our own library tooling start with ``icon/``."""
    return name.lower().startswith("icon/")


def is_archive_page(page_name: str) -> bool:
    return contains_any(page_name, ARCHIVE_PAGE_MARKERS)


def follows_naming_convention(name: str) -> bool:
    """Identifier-shaped names: ``home``, ``arrow-left``, ``icon_24``."""
    return NAMING_CONVENTION_RE.match(name) is not None


# ─────────────────────────────────────────────────────────────────────────────
# Library-prefixed names
# ─────────────────────────────────────────────────────────────────────────────

def split_library_name(name: str) -> Optional[Tuple[str, str]]:
    """
    Split ``"lucide/home"`` into ``("lucide", "home")``.

    Returns:
        (library, icon_name) or None when the name has no library prefix
    """
    match = LIBRARY_NAME_RE.match(name)
    if not match:
        return None
    return match.group(1), match.group(2)


def parse_icon_source(name: str, document_name: str = "") -> str:
    """
    Infer where an icon came from.

    Library-prefixed names map to a display name, otherwise icon-ish names
    are attributed to a generic icon library and everything else to the
    document itself.

    Example:
        >>> parse_icon_source("lucide/home")
        'Lucide Library'
        >>> parse_icon_source("acme/home")
        'Acme Library'
    """
    parts = split_library_name(name)
    if parts:
        library = parts[0].lower()
        return LIBRARY_DISPLAY_NAMES.get(library, f"{library.capitalize()} Library")
    if "icon" in name.lower():
        return "Icon Library"
    return document_name or "Unknown"


# ─────────────────────────────────────────────────────────────────────────────
# Normalization
# ─────────────────────────────────────────────────────────────────────────────

def normalize_icon_token(name: str) -> str:
    """
    Reduce a name to its letters, minus separators, digits and noise words.

    Example:
        >>> normalize_icon_token("Home_Icon-2")
        'home'
    """
    token = _SEPARATORS_RE.sub("", name.lower())
    token = _DIGITS_RE.sub("", token)
    token = _NOISE_WORDS_RE.sub("", token)
    return _NON_ALPHA_RE.sub("", token)


def normalize_library_token(name: str) -> str:
    """Lighter normalization used for suffixes of library names."""
    return _DIGITS_RE.sub("", _SEPARATORS_RE.sub("", name.lower()))


def grouping_name(name: str) -> str:
    """
    Normalized name used in exact clustering keys (library-aware).

    Example:
        >>> grouping_name("Lucide/Arrow-Right 2")
        'lucide/arrowright'
        >>> grouping_name("home_icon2")
        'home'
    """
    parts = split_library_name(name)
    if parts:
        library, icon_name = parts
        return f"{library.lower()}/{normalize_icon_token(icon_name)}"
    return normalize_icon_token(name)


def library_grouping_name(name: str) -> str:
    """Normalized name for library-page de-duplication (keeps noise words)."""
    parts = split_library_name(name)
    if parts:
        library, icon_name = parts
        suffix = _TRAILING_COPY_RE.sub("", normalize_library_token(icon_name)).strip()
        return f"{library.lower()}/{suffix}"
    return _TRAILING_COPY_RE.sub("", normalize_library_token(name)).strip()


def consistency_pattern(name: str) -> str:
    """
    Name pattern used by consistency analysis for duplicate detection.

    Separators become spaces, digits and a trailing "copy" are removed.

    Example:
        >>> consistency_pattern("Arrow_Left 3 copy 2")
        'arrow left'
    """
    pattern = name.lower().replace("-", " ").replace("_", " ")
    pattern = _DIGITS_RE.sub("", pattern)
    pattern = _TRAILING_COPY_RE.sub("", pattern)
    return " ".join(pattern.split())


def frame_context(parent_name: str) -> str:
    """Map a parent frame name to a semantic context label."""
    lowered = parent_name.lower()
    for needle, label in FRAME_CONTEXT_PATTERNS:
        if needle in lowered:
            return label
    return parent_name


# ─────────────────────────────────────────────────────────────────────────────
# Smart naming
# ─────────────────────────────────────────────────────────────────────────────

_PREFIX_RE = re.compile(r"^(icon|ico|symbol|glyph)[-_\s]*", re.IGNORECASE)
_SUFFIX_RE = re.compile(r"[-_\s]*(icon|ico|symbol|glyph)$", re.IGNORECASE)
_SHAPE_PREFIX_RE = re.compile(r"^(vector|graphic|shape|element)[-_\s]*", re.IGNORECASE)
_SHAPE_SUFFIX_RE = re.compile(r"[-_\s]*(vector|graphic|shape|element)$", re.IGNORECASE)
_GENERIC_NAMES = {"icon", "element", "shape", "graphic"}


def generate_smart_name(
    name: str,
    bounding_box: Optional[BoundingBox] = None,
    fallback_suffix: str = "",
) -> str:
    """
    Produce a clean display name for a new master.

    Library names keep their prefix and get hyphenated; other names lose
    generic icon/vector affixes and are title-cased. Names that end up too
    short are replaced with a shape description derived from the bounds.

    Args:
        name: Original layer name
        bounding_box: Bounds used for the shape-based fallback
        fallback_suffix: Appended to "Icon" when nothing usable remains

    Example:
        >>> generate_smart_name("lucide/arrow_right  small")
        'lucide/arrow-right-small'
        >>> generate_smart_name("icon-user_profile")
        'User Profile'
        >>> generate_smart_name("Vector", BoundingBox(12, 12))
        'Square Icon Small'
    """
    parts = split_library_name(name)
    if parts:
        library, icon_name = parts
        icon_name = re.sub(r"[-_]+", "-", icon_name.strip())
        icon_name = re.sub(r"\s+", "-", icon_name)
        icon_name = re.sub(r"-+", "-", icon_name)
        return f"{library}/{icon_name}"

    smart = _PREFIX_RE.sub("", name)
    smart = _SUFFIX_RE.sub("", smart)
    smart = _SHAPE_PREFIX_RE.sub("", smart)
    smart = _SHAPE_SUFFIX_RE.sub("", smart)
    smart = " ".join(re.sub(r"[-_\s]+", " ", smart).split())

    if (len(smart) < 3 or smart.lower() in _GENERIC_NAMES) and bounding_box is not None:
        smart = _shape_name(bounding_box)

    smart = " ".join(word[:1].upper() + word[1:].lower() for word in smart.split(" "))
    smart = re.sub(r"^[^a-zA-Z]+", "", smart)
    smart = re.sub(r"[^a-zA-Z0-9\s\-_/]", "", smart)

    if len(smart) < 2:
        smart = f"Icon {fallback_suffix}".strip()
    return smart


def _shape_name(box: BoundingBox) -> str:
    ratio = box.aspect_ratio or 1.0
    if ratio > 1.5:
        label = "Wide Icon"
    elif ratio < 0.67:
        label = "Tall Icon"
    else:
        label = "Square Icon"
    if box.max_side <= 16:
        label += " Small"
    elif box.max_side >= 64:
        label += " Large"
    return label
