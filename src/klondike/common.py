# common.py - shared settings, drawing helpers and the base Scene for Klondike
import json
import logging
import os

import pygame

from klondike.cards import Card, Color, Suit

logger = logging.getLogger(__name__)

# --- Settings ---

# Defaults (may be overridden by persisted settings)
_DEFAULT_SETTINGS = {
    "card_size": "Medium",   # Small | Medium | Large
    "draw_count": 1,          # 1 | 3
}

CARD_SIZES = ("Small", "Medium", "Large")

_CURRENT_SETTINGS = dict(_DEFAULT_SETTINGS)


def _settings_dir() -> str:
    # Prefer %APPDATA% on Windows, else ~/.klondike_solitaire
    base = os.environ.get("APPDATA")
    if base:
        return os.path.join(base, "KlondikeSolitaire")
    return os.path.join(os.path.expanduser("~"), ".klondike_solitaire")


def _settings_path() -> str:
    return os.path.join(_settings_dir(), "settings.json")


def _clean_card_size(value) -> str:
    name = str(value or "").strip().capitalize()
    return name if name in CARD_SIZES else _DEFAULT_SETTINGS["card_size"]


def _clean_draw_count(value) -> int:
    try:
        n = int(value)
    except (TypeError, ValueError):
        return _DEFAULT_SETTINGS["draw_count"]
    return n if n in (1, 3) else _DEFAULT_SETTINGS["draw_count"]


def get_current_settings():
    return dict(_CURRENT_SETTINGS)


def load_settings():
    try:
        with open(_settings_path(), "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return get_current_settings()
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", _settings_path(), exc)
        return get_current_settings()
    if isinstance(data, dict):
        _CURRENT_SETTINGS.update({
            "card_size": _clean_card_size(data.get("card_size", _CURRENT_SETTINGS["card_size"])),
            "draw_count": _clean_draw_count(data.get("draw_count", _CURRENT_SETTINGS["draw_count"])),
        })
    return get_current_settings()


def save_settings(new_values: dict):
    # Merge and write to disk
    if "card_size" in new_values:
        _CURRENT_SETTINGS["card_size"] = _clean_card_size(new_values["card_size"])
    if "draw_count" in new_values:
        _CURRENT_SETTINGS["draw_count"] = _clean_draw_count(new_values["draw_count"])
    try:
        os.makedirs(_settings_dir(), exist_ok=True)
        with open(_settings_path(), "w", encoding="utf-8") as f:
            json.dump(_CURRENT_SETTINGS, f, indent=2)
    except OSError as exc:
        logger.warning("Could not save settings to %s: %s", _settings_path(), exc)


def _size_to_dims(size_name: str):
    size_name = (size_name or "Medium").capitalize()
    if size_name == "Small":
        return 75, 105
    if size_name == "Large":
        return 150, 210
    return 100, 140


def invalidate_card_caches():
    global _card_face_cache, _card_back_cache
    _card_face_cache = {}
    _card_back_cache = None


def apply_card_settings(size_name: str = None):
    # Update globals for gameplay rendering
    global CARD_W, CARD_H, FAN_Y_UP, FAN_Y_DOWN
    if size_name is not None:
        CARD_W, CARD_H = _size_to_dims(size_name)
        FAN_Y_UP = CARD_H // 5
        FAN_Y_DOWN = CARD_H // 10
    invalidate_card_caches()


# Load any persisted settings and apply now
load_settings()


# ---------- Configuration ----------
SCREEN_W, SCREEN_H = 1280, 800
GREEN_TABLE = (2, 100, 40)
TABLE_BG = GREEN_TABLE

CARD_W, CARD_H = _size_to_dims(_CURRENT_SETTINGS.get("card_size", "Medium"))
CARD_RADIUS = 10
CARD_GAP_X = 18
CARD_GAP_Y = 26
# vertical fan of face-up / face-down tableau cards
FAN_Y_UP = CARD_H // 5
FAN_Y_DOWN = CARD_H // 10

# Fonts are initialized via setup_fonts() AFTER pygame.init() in __main__.py
FONT_NAME = None
FONT_SMALL = None
FONT_UI = None
FONT_TITLE = None
FONT_CORNER_RANK = None
FONT_CORNER_SUIT = None


def setup_fonts():
    global FONT_NAME, FONT_SMALL, FONT_UI, FONT_TITLE, FONT_CORNER_RANK, FONT_CORNER_SUIT
    FONT_NAME = pygame.font.get_default_font()
    FONT_SMALL = pygame.font.SysFont(FONT_NAME, 20, bold=True)
    FONT_UI = pygame.font.SysFont(FONT_NAME, 26, bold=True)
    FONT_TITLE = pygame.font.SysFont(FONT_NAME, 44, bold=True)
    FONT_CORNER_RANK = pygame.font.SysFont(FONT_NAME, 28, bold=True)
    # Suit glyphs need a Unicode-capable font
    FONT_CORNER_SUIT = pygame.font.SysFont("Segoe UI Symbol,DejaVu Sans", 26, bold=True)


# UI bar heights
TOP_BAR_H = 60
STATUS_BAR_H = 36

# Colors
BLACK = (20, 20, 20)
WHITE = (245, 245, 245)
RED = (200, 20, 20)
BLUE = (34, 96, 200)
GOLD = (230, 190, 80)
CYAN = (80, 210, 230)
LIGHT = (220, 220, 220)


def card_color(card: Card):
    return RED if card.color is Color.RED else BLACK


# ---------- Card drawing ----------
_card_face_cache = {}
_card_back_cache = None


def draw_suit_shape(surface, center, suit, color, size=42):
    x, y = center
    if suit is Suit.DIAMONDS:
        half = size//2
        points = [(x, y - half), (x + half, y), (x, y + half), (x - half, y)]
        pygame.draw.polygon(surface, color, points)
    elif suit is Suit.HEARTS:
        r = size//3
        pygame.draw.circle(surface, color, (x - r, y - r), r)
        pygame.draw.circle(surface, color, (x + r, y - r), r)
        tri = [(x - 2*r, y - r), (x + 2*r, y - r), (x, y + 2*r)]
        pygame.draw.polygon(surface, color, tri)
    elif suit is Suit.SPADES:
        r = size//3
        pygame.draw.circle(surface, color, (x - r, y), r)
        pygame.draw.circle(surface, color, (x + r, y), r)
        tri = [(x - 2*r, y), (x + 2*r, y), (x, y - 2*r)]
        pygame.draw.polygon(surface, color, tri)
        stem_w = max(6, size//6)
        pygame.draw.rect(surface, color, (x - stem_w//2, y + r, stem_w, size//2))
    else:  # clubs
        r = size//3
        pygame.draw.circle(surface, color, (x, y - r), r)
        pygame.draw.circle(surface, color, (x - r, y + r//3), r)
        pygame.draw.circle(surface, color, (x + r, y + r//3), r)
        stem_w = max(6, size//6)
        pygame.draw.rect(surface, color, (x - stem_w//2, y + r, stem_w, size//2))


def get_card_surface(card: Card):
    if not card.face_up:
        return get_back_surface()
    key = (card.suit, card.rank)
    if key in _card_face_cache:
        return _card_face_cache[key]
    surf = pygame.Surface((CARD_W, CARD_H), pygame.SRCALPHA)
    pygame.draw.rect(surf, WHITE, (0, 0, CARD_W, CARD_H), border_radius=CARD_RADIUS)
    pygame.draw.rect(surf, BLACK, (0, 0, CARD_W, CARD_H), width=3, border_radius=CARD_RADIUS)
    color = card_color(card)
    margin = 10
    # Ten reads better as "10" on a card face than the "X" of the notation
    rank_text = "10" if card.rank == 10 else card.rank.symbol
    rtxt = FONT_CORNER_RANK.render(rank_text, True, color)
    stxt = FONT_CORNER_SUIT.render(card.suit.glyph, True, color)
    surf.blit(rtxt, (margin, margin))
    surf.blit(stxt, (margin, margin + rtxt.get_height() - 2))
    r180 = pygame.transform.rotate(rtxt, 180)
    s180 = pygame.transform.rotate(stxt, 180)
    surf.blit(r180, (CARD_W - margin - r180.get_width(), CARD_H - margin - r180.get_height() - s180.get_height() + 2))
    surf.blit(s180, (CARD_W - margin - s180.get_width(), CARD_H - margin - s180.get_height()))
    draw_suit_shape(surf, (CARD_W//2, CARD_H//2), card.suit, color, size=CARD_W // 2)
    _card_face_cache[key] = surf
    return surf


def get_back_surface():
    global _card_back_cache
    if _card_back_cache is not None:
        return _card_back_cache
    surf = pygame.Surface((CARD_W, CARD_H), pygame.SRCALPHA)
    pygame.draw.rect(surf, WHITE, (0, 0, CARD_W, CARD_H), border_radius=CARD_RADIUS)
    pygame.draw.rect(surf, BLACK, (0, 0, CARD_W, CARD_H), width=3, border_radius=CARD_RADIUS)
    inset = 8
    inner_rect = pygame.Rect(inset, inset, CARD_W-2*inset, CARD_H-2*inset)
    pygame.draw.rect(surf, BLUE, inner_rect, border_radius=8)
    for i in range(-CARD_H, CARD_W, 12):
        pygame.draw.line(surf, LIGHT, (i, 8), (i+CARD_H, CARD_H-8), 1)
        pygame.draw.line(surf, LIGHT, (i+6, 8), (i+CARD_H+6, CARD_H-8), 1)
    _card_back_cache = surf
    return surf


def draw_empty_slot(screen, rect):
    pygame.draw.rect(screen, (255, 255, 255, 40), rect, border_radius=CARD_RADIUS, width=2)


# ---------- Base Scene ----------
class Scene:
    def __init__(self, app):
        self.app = app
        self.next_scene = None
        self.quit_requested = False
    def handle_event(self, e): pass
    def update(self, dt): pass
    def draw(self, screen): pass
    def draw_top_bar(self, screen, title, extra=""):
        pygame.draw.rect(screen, (0, 0, 0, 70), (0, 0, SCREEN_W, TOP_BAR_H))
        t = FONT_TITLE.render(title, True, WHITE)
        screen.blit(t, (20, 10))
        if extra:
            s = FONT_UI.render(extra, True, WHITE)
            screen.blit(s, (SCREEN_W - s.get_width() - 20, TOP_BAR_H - s.get_height() - 6))
