# scene.py - pygame table for a Klondike session: layout, hit testing, highlights
import logging

import pygame

from klondike import common as C
from klondike import controls
from klondike import ui_state as U
from klondike.game_state import (
    FOUNDATION_REFS,
    NUM_TABLEAU,
    STOCK,
    TABLEAU_REFS,
    TALON,
    PileRef,
    WonState,
    get_stack,
)
from klondike.session import KlondikeSession

logger = logging.getLogger(__name__)

# talon shows this many of its top cards fanned to the right
TALON_VISIBLE = 3


class KlondikeScene(C.Scene):
    def __init__(self, app, session: KlondikeSession = None):
        super().__init__(app)
        self.session = session if session is not None else KlondikeSession()
        self.compute_layout()

    # ---------- Layout ----------
    def compute_layout(self):
        row_w = NUM_TABLEAU * C.CARD_W + (NUM_TABLEAU - 1) * C.CARD_GAP_X
        self.left = max(20, (C.SCREEN_W - row_w) // 2)
        self.top_y = C.TOP_BAR_H + 20
        self.tableau_y = self.top_y + C.CARD_H + C.CARD_GAP_Y
        self.talon_fan_x = C.CARD_W // 4

    def column_x(self, col):
        return self.left + col * (C.CARD_W + C.CARD_GAP_X)

    def slot_rect(self, pile: PileRef):
        if pile.is_stock:
            return pygame.Rect(self.column_x(0), self.top_y, C.CARD_W, C.CARD_H)
        if pile.is_talon:
            return pygame.Rect(self.column_x(1), self.top_y, C.CARD_W, C.CARD_H)
        if pile.is_foundation:
            return pygame.Rect(self.column_x(U.FOUNDATION_COLUMN_OFFSET + pile.index), self.top_y, C.CARD_W, C.CARD_H)
        return pygame.Rect(self.column_x(pile.index), self.tableau_y, C.CARD_W, C.CARD_H)

    def card_rects(self, pile: PileRef, cards):
        """Rects of the drawn cards of ``pile``, paired with their index in the pile."""
        base = self.slot_rect(pile)
        if not cards:
            return []
        if pile.is_tableau:
            out = []
            y = base.y
            for i, c in enumerate(cards):
                out.append((i, pygame.Rect(base.x, y, C.CARD_W, C.CARD_H)))
                y += C.FAN_Y_UP if c.face_up else C.FAN_Y_DOWN
            return out
        if pile.is_talon:
            first = max(0, len(cards) - TALON_VISIBLE)
            return [
                (i, pygame.Rect(base.x + (i - first) * self.talon_fan_x, base.y, C.CARD_W, C.CARD_H))
                for i in range(first, len(cards))
            ]
        # stock and foundations only show their top card
        return [(len(cards) - 1, base)]

    def visible_piles(self):
        state = self.session.state
        for pile in (STOCK, TALON) + FOUNDATION_REFS + TABLEAU_REFS:
            cards = get_stack(state, pile)
            if cards is not None:
                yield pile, cards

    # ---------- Hit testing ----------
    def locate(self, pos):
        """The card (or empty pile) under ``pos``, or ``None``."""
        for pile, cards in self.visible_piles():
            for i, rect in reversed(self.card_rects(pile, cards)):
                if rect.collidepoint(pos):
                    return U.CardLocation(pile, len(cards) - 1 - i)
            if not cards and self.slot_rect(pile).collidepoint(pos):
                return U.CardLocation(pile, None)
        return None

    # ---------- Events ----------
    def handle_event(self, e):
        if controls.is_quit(e):
            self.quit_requested = True
            return
        if controls.is_reset(e):
            self.session.reset()
            return
        event = controls.translate(e, self.locate)
        if event is not None:
            self.session.handle(event)

    def update(self, dt):
        self.session.tick(int(dt))

    # ---------- Drawing ----------
    def _run_rect(self, pile, take_n):
        cards = get_stack(self.session.state, pile)
        rects = [r for _, r in self.card_rects(pile, cards or ())]
        if not rects:
            return self.slot_rect(pile)
        run = rects[-max(1, take_n):]
        return run[0].unionall(run[1:])

    def _outline(self, screen, rect, color, width=4):
        pygame.draw.rect(screen, color, rect.inflate(8, 8), width=width, border_radius=C.CARD_RADIUS + 2)

    def draw_highlights(self, screen):
        hl = U.highlight(self.session.ui_state)
        if hl.hovered is not None and hl.selected is None:
            self._outline(screen, self._run_rect(hl.hovered, 1), C.WHITE, width=3)
        if hl.selected is not None:
            self._outline(screen, self._run_rect(hl.selected, hl.take_n), C.GOLD)
        if hl.target is not None:
            self._outline(screen, self._run_rect(hl.target, 1), C.CYAN)

    def draw(self, screen):
        screen.fill(C.TABLE_BG)
        session = self.session
        self.draw_top_bar(screen, "Klondike", f"Draw {session.draw_count}")

        for pile, cards in self.visible_piles():
            if not cards:
                C.draw_empty_slot(screen, self.slot_rect(pile))
                continue
            for i, rect in self.card_rects(pile, cards):
                screen.blit(C.get_card_surface(cards[i]), rect.topleft)

        self.draw_highlights(screen)

        hint = C.FONT_SMALL.render(session.status_hint(), True, C.WHITE)
        screen.blit(hint, (20, C.SCREEN_H - C.STATUS_BAR_H + (C.STATUS_BAR_H - hint.get_height()) // 2))

        if isinstance(session.state, WonState):
            msg = C.FONT_TITLE.render("You won! Press R for a new game.", True, (255, 255, 180))
            screen.blit(msg, (C.SCREEN_W // 2 - msg.get_width() // 2, C.SCREEN_H // 2 - msg.get_height() // 2))
