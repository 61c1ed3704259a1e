"""Heuristic classifier deciding whether a string is user-facing UI text.

Exclusion rules always win over inclusion rules, and inclusion rules win
over the default rule. The vocabularies are plain frozensets so they can be
inspected and extended without touching the precedence logic.
"""

import re

MIN_LENGTH = 2
MAX_LENGTH = 100
MAX_DEFAULT_WORDS = 10

# Framework, markup and general technical terms that are never UI copy on
# their own (matched case-insensitively against the whole string).
TECHNICAL_TERMS: frozenset[str] = frozenset(
    {
        "true", "false", "null", "undefined", "nan", "json", "api", "url",
        "id", "uuid", "html", "css", "js", "npm", "pnpm", "yarn", "vue",
        "ref", "computed", "reactive", "emit", "props", "slots", "router",
        "store", "dev", "prod", "build", "test", "src", "dist", "public",
        "assets", "components", "pages", "views", "utils", "helpers",
        "plugins", "middleware", "layouts", "types", "interfaces", "enums",
        "constants", "config", "env", "local", "session", "storage", "cache",
        "token", "auth", "login", "logout", "admin", "user", "profile",
        "settings", "theme", "dark", "light", "auto", "modal", "dropdown",
        "tooltip", "button", "input", "textarea", "select", "checkbox",
        "radio", "switch", "slider", "progress", "loading", "spinner", "icon",
        "image", "avatar", "badge", "chip", "card", "table", "list", "grid",
        "row", "col", "header", "footer", "sidebar", "navbar", "menu", "tab",
        "accordion", "carousel", "dialog", "alert", "snackbar",
        "notification", "breadcrumb", "pagination", "search", "filter",
        "sort", "create", "read", "update", "delete", "crud", "get", "post",
        "put", "patch", "fetch", "axios", "http", "ws", "socket",
    }
)

# Layout and positioning keywords (matched case-insensitively).
CSS_KEYWORDS: frozenset[str] = frozenset(
    {
        "flex", "grid", "block", "inline", "absolute", "relative", "fixed",
        "sticky", "hidden", "visible", "auto", "none", "center", "left",
        "right", "top", "bottom", "start", "end", "between", "around",
        "evenly", "stretch", "baseline", "nowrap", "wrap", "column", "row",
        "reverse",
    }
)

# Responsive breakpoint shorthands (case-sensitive).
CSS_BREAKPOINTS: frozenset[str] = frozenset({"sm", "md", "lg", "xl", "2xl", "xs"})

# Spacing utility prefixes, e.g. ``mt-4`` or ``px-2``.
CSS_SPACING_PREFIXES: frozenset[str] = frozenset(
    {"mt", "mb", "ml", "mr", "mx", "my", "pt", "pb", "pl", "pr", "px", "py", "m", "p"}
)

# Sizing utility prefixes, e.g. ``w-full`` or ``max-h-screen``.
CSS_SIZING_PREFIXES: frozenset[str] = frozenset(
    {"w", "h", "min-w", "min-h", "max-w", "max-h"}
)

# Color-scale and decoration utility prefixes, e.g. ``bg-red-500``.
CSS_COLOR_PREFIXES: frozenset[str] = frozenset({"bg", "text", "border", "shadow", "ring"})

CSS_UNITS: frozenset[str] = frozenset(
    {"px", "rem", "em", "vh", "vw", "vmin", "vmax", "deg", "rad", "turn", "s", "ms", "Hz", "kHz"}
)

# Common UI actions and nouns; a whole-word hit marks the text as UI copy.
UI_ACTION_WORDS: frozenset[str] = frozenset(
    {
        "Add", "Create", "Delete", "Remove", "Save", "Cancel", "OK", "Yes",
        "No", "Confirm", "Submit", "Reset", "Clear", "Close", "Open", "Edit",
        "Update", "Refresh", "Reload", "Login", "Logout", "Sign in",
        "Sign up", "Register", "Search", "Filter", "Sort", "Upload",
        "Download", "Import", "Export", "Settings", "Options", "Preferences",
        "Help", "About", "Contact", "Home", "Back", "Next", "Previous",
        "Continue", "Finish", "Done", "Complete", "Error", "Success",
        "Warning", "Info", "Loading", "Please", "Select", "Choose", "Enter",
        "Input", "Required", "Optional", "Invalid", "Valid", "Failed",
        "Retry", "Try again", "Welcome", "Hello", "Goodbye", "Thank you",
        "Sorry", "Excuse me", "Name", "Email", "Password", "Username",
        "Phone", "Address", "Install", "Installed", "Available", "Version",
        "Latest", "New", "Old", "Recent", "Popular", "Featured",
        "Recommended", "Trending", "Hot", "Best", "Top", "All", "None", "Any",
        "Some", "Many", "Few", "Several", "First", "Last", "More", "Less",
        "Show", "Hide", "View", "Preview", "Play", "Pause", "Stop", "Start",
        "Run", "Launch", "Execute", "Copy", "Paste", "Cut", "Undo", "Redo",
        "Move", "Rename", "Duplicate", "Share", "Like", "Favorite",
        "Bookmark", "Subscribe", "Follow", "Unfollow", "Block", "Report",
        "Flag", "Pin", "Archive", "Trash", "Restore",
    }
)

# Status, state and layout nouns typical of interface messages.
UI_STATUS_WORDS: frozenset[str] = frozenset(
    {
        "loading", "error", "success", "warning", "info", "notice", "alert",
        "message", "notification", "toast", "modal", "dialog", "popup",
        "tooltip", "hint", "tip", "guide", "tutorial", "wizard", "step",
        "progress", "status", "state", "condition", "result", "outcome",
        "response", "feedback", "comment", "review", "rating", "score",
        "point", "level", "rank", "grade", "category", "type", "kind", "sort",
        "group", "class", "tag", "label", "mark", "flag", "badge", "icon",
        "symbol", "sign", "indicator", "marker", "pointer", "cursor", "arrow",
        "direction", "position", "location", "place", "area", "region",
        "zone", "section", "part", "piece", "item", "element", "component",
        "widget", "control", "field", "input", "output", "data", "content",
        "text", "title", "header", "footer", "sidebar", "navbar", "menu",
        "tab", "page", "screen", "view", "panel", "pane", "window", "frame",
        "border", "edge", "corner", "center", "middle", "side", "top",
        "bottom", "left", "right", "up", "down", "in", "out", "over", "under",
        "above", "below", "before", "after", "front", "back", "inside",
        "outside", "within", "without", "around", "between", "among",
        "through", "across", "along", "beside", "next", "near", "far",
        "close", "open", "wide", "narrow", "big", "small", "large", "tiny",
        "huge", "mini", "short", "long", "tall", "high", "low", "deep",
        "shallow", "thick", "thin", "heavy", "light", "fast", "slow", "quick",
        "rapid", "instant", "immediate", "soon", "late", "early", "now",
        "then", "today", "tomorrow", "yesterday", "morning", "afternoon",
        "evening", "night", "day", "week", "month", "year", "hour", "minute",
        "second", "time", "date", "schedule", "calendar", "timer", "clock",
        "watch", "alarm", "reminder",
    }
)

CJK_PATTERN = re.compile(r"[\u4e00-\u9fff]")


def _alternation(words: frozenset[str]) -> str:
    # Longest first so multi-word entries like "Sign in" win over "Sign".
    return "|".join(re.escape(w) for w in sorted(words, key=lambda w: (-len(w), w)))


def _exact(words: frozenset[str], flags: int = 0) -> re.Pattern[str]:
    return re.compile(rf"^(?:{_alternation(words)})$", flags)


EXCLUSION_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^https?://"),
    re.compile(r"^[/.]"),
    re.compile(r"^[a-z-]+$"),
    re.compile(r"^<[^>]+>$"),
    re.compile(r"^[a-z][a-zA-Z0-9_]*$"),
    re.compile(r"^\d+$"),
    re.compile(r"^[^a-zA-Z0-9\u4e00-\u9fff]+$"),
    re.compile(r"^.$", re.DOTALL),
    _exact(TECHNICAL_TERMS, re.IGNORECASE),
    re.compile(r"^#[0-9a-f]{3,6}$", re.IGNORECASE),
    re.compile(r"^v?\d+\.\d+"),
    re.compile(r"^\{\s*\w+\s*\}$"),
    re.compile(r"^\{\{.*\}\}$", re.DOTALL),
    re.compile(r"^\s+$"),
    _exact(CSS_KEYWORDS, re.IGNORECASE),
    _exact(CSS_BREAKPOINTS),
    re.compile(rf"^(?:{_alternation(CSS_SPACING_PREFIXES)})-\d+$"),
    re.compile(rf"^(?:{_alternation(CSS_SIZING_PREFIXES)})-"),
    re.compile(rf"^(?:{_alternation(CSS_COLOR_PREFIXES)})-.+$"),
    _exact(CSS_UNITS),
)

INCLUSION_PATTERNS: tuple[re.Pattern[str], ...] = (
    CJK_PATTERN,
    re.compile(r"\b[A-Za-z]+\s+[A-Za-z]+\b"),
    re.compile(rf"\b(?:{_alternation(UI_ACTION_WORDS)})\b", re.IGNORECASE),
    re.compile(rf"\b(?:{_alternation(UI_STATUS_WORDS)})\b", re.IGNORECASE),
)

_HAS_LETTER = re.compile(r"[a-zA-Z]")
_CAMEL_CASE = re.compile(r"^[a-z]+(?:[A-Z][a-z]*)*$")


def is_excluded(text: str) -> bool:
    """Return True if any exclusion pattern matches."""
    return any(pattern.search(text) for pattern in EXCLUSION_PATTERNS)


def is_included(text: str) -> bool:
    """Return True if any inclusion pattern matches."""
    return any(pattern.search(text) for pattern in INCLUSION_PATTERNS)


def _default_accept(text: str) -> bool:
    return (
        _HAS_LETTER.search(text) is not None
        and _CAMEL_CASE.match(text) is None
        and len(text.split(" ")) <= MAX_DEFAULT_WORDS
    )


def classify(text: str) -> bool:
    """Decide whether ``text`` is user-facing copy worth translating.

    Args:
        text: Candidate string; surrounding whitespace is ignored.

    Returns:
        True if the string should be translated.
    """
    text = text.strip()
    if len(text) < MIN_LENGTH or len(text) > MAX_LENGTH:
        return False

    if is_excluded(text):
        return False

    if is_included(text):
        return True

    return _default_accept(text)
