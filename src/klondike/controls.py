# controls.py - pygame key/mouse events -> table input events
from typing import Callable, Optional, Tuple

import pygame

from klondike import ui_state as U

Locate = Callable[[Tuple[int, int]], Optional[U.CardLocation]]

DIRECTION_KEYS = {
    pygame.K_UP: U.Direction.UP,
    pygame.K_w: U.Direction.UP,
    pygame.K_DOWN: U.Direction.DOWN,
    pygame.K_s: U.Direction.DOWN,
    pygame.K_LEFT: U.Direction.LEFT,
    pygame.K_a: U.Direction.LEFT,
    pygame.K_RIGHT: U.Direction.RIGHT,
    pygame.K_d: U.Direction.RIGHT,
}

INTERACT_KEYS = (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE)
CANCEL_KEYS = (pygame.K_c, pygame.K_BACKSPACE)
RESET_KEYS = (pygame.K_r,)
QUIT_KEYS = (pygame.K_ESCAPE, pygame.K_q)

DIGIT_KEYS = {getattr(pygame, f"K_{n}"): n for n in range(1, 10)}
DIGIT_KEYS.update({getattr(pygame, f"K_KP{n}"): n for n in range(1, 10)})


def modifiers_from(mod: int) -> U.Modifiers:
    return U.Modifiers(
        shift=bool(mod & pygame.KMOD_SHIFT),
        ctrl=bool(mod & pygame.KMOD_CTRL),
        alt=bool(mod & pygame.KMOD_ALT),
    )


def translate(e, locate: Locate) -> Optional[U.Event]:
    """Map a pygame event to a table input event, or ``None`` if it means nothing here.

    ``locate`` turns a mouse position into the card under it.
    """
    if e.type == pygame.KEYDOWN:
        key = getattr(e, "key", None)
        if key in DIRECTION_KEYS:
            return U.DirectionEvent(DIRECTION_KEYS[key], modifiers_from(getattr(e, "mod", 0)))
        if key in INTERACT_KEYS:
            return U.Interact()
        if key in DIGIT_KEYS:
            return U.Goto(DIGIT_KEYS[key])
        if key in CANCEL_KEYS:
            return U.Cancel()
        return None
    if e.type == pygame.MOUSEBUTTONDOWN and getattr(e, "button", None) == 1:
        return U.Click(locate(e.pos))
    return None


def is_reset(e) -> bool:
    return e.type == pygame.KEYDOWN and getattr(e, "key", None) in RESET_KEYS


def is_quit(e) -> bool:
    if e.type == pygame.QUIT:
        return True
    return e.type == pygame.KEYDOWN and getattr(e, "key", None) in QUIT_KEYS
