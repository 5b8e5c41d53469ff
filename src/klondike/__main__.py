# __main__.py - entry point
import argparse
import logging
import os

import pygame

from klondike import common as C
from klondike.cards import make_rng
from klondike.scene import KlondikeScene
from klondike.session import DRAW_COUNTS, KlondikeSession

logger = logging.getLogger(__name__)


def _initial_window_size():
    info = pygame.display.Info()
    # Keep a safety margin so the window never hides under taskbar
    margin_w, margin_h = 120, 140
    w = min(C.SCREEN_W, max(640, info.current_w - margin_w))
    h = min(C.SCREEN_H, max(480, info.current_h - margin_h))
    return w, h


def _parse_seed(text):
    if text is None:
        return None
    text = str(text).strip()
    if not text:
        return None
    return int(text) if text.lstrip("-").isdigit() else text


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="klondike", description="Klondike solitaire.")
    parser.add_argument("--seed", type=str, default=None, help="Seed for a reproducible deal.")
    parser.add_argument("--draw", type=int, choices=DRAW_COUNTS, default=None, help="Cards drawn from stock at a time.")
    parser.add_argument("--card-size", choices=C.CARD_SIZES, default=None, help="Card size.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging.")
    return parser.parse_args(argv)


def resolve_options(args: argparse.Namespace):
    """Command line beats environment beats saved settings. Returns (seed, draw_count, card_size)."""
    settings = C.load_settings()

    seed = _parse_seed(args.seed if args.seed is not None else os.environ.get("KLONDIKE_SEED"))

    draw_count = settings["draw_count"]
    env_draw = os.environ.get("KLONDIKE_DRAW", "").strip()
    if env_draw in ("1", "3"):
        draw_count = int(env_draw)
    elif env_draw:
        logger.warning("Ignoring KLONDIKE_DRAW=%r, expected 1 or 3", env_draw)

    card_size = settings["card_size"]
    env_size = os.environ.get("KLONDIKE_CARD_SIZE", "").strip().capitalize()
    if env_size in C.CARD_SIZES:
        card_size = env_size

    persist = {}
    if args.draw is not None:
        draw_count = persist["draw_count"] = args.draw
    if args.card_size is not None:
        card_size = persist["card_size"] = args.card_size
    if persist:
        C.save_settings(persist)
    return seed, draw_count, card_size


# Build a filter set of system/media keys to ignore
def _system_keys_set():
    names = [
        # Brightness / keyboard illumination
        "K_BRIGHTNESSUP", "K_BRIGHTNESSDOWN", "K_KBDILLUMUP", "K_KBDILLUMDOWN", "K_KBDILLUMTOGGLE",
        # Volume / media
        "K_VOLUMEUP", "K_VOLUMEDOWN", "K_MUTE", "K_AUDIOMUTE",
        "K_AUDIOPLAY", "K_AUDIOSTOP", "K_AUDIONEXT", "K_AUDIOPREV",
        "K_MEDIASELECT",
    ]
    out = set()
    for n in names:
        v = getattr(pygame, n, None)
        if isinstance(v, int):
            out.add(v)
    for i in range(1, 13):
        v = getattr(pygame, f"K_F{i}", None)
        if isinstance(v, int):
            out.add(v)
    return out


def main(argv=None):
    args = parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.INFO)

    seed, draw_count, card_size = resolve_options(args)
    C.apply_card_settings(size_name=card_size)

    # Center window and init
    os.environ.setdefault("SDL_VIDEO_CENTERED", "1")
    pygame.init()

    w, h = _initial_window_size()
    C.SCREEN_W, C.SCREEN_H = w, h
    screen = pygame.display.set_mode((w, h), pygame.RESIZABLE)
    pygame.display.set_caption("Klondike")
    C.setup_fonts()
    clock = pygame.time.Clock()

    session = KlondikeSession(rng=make_rng(seed), seed=seed, draw_count=draw_count)
    scene = KlondikeScene(app=None, session=session)
    system_keys = _system_keys_set()

    running = True
    while running:
        dt = clock.tick(60)
        for e in pygame.event.get():
            if e.type == pygame.VIDEORESIZE:
                # Apply new size and relayout
                C.SCREEN_W, C.SCREEN_H = e.size
                screen = pygame.display.set_mode((C.SCREEN_W, C.SCREEN_H), pygame.RESIZABLE)
                scene.compute_layout()
                continue
            if e.type == pygame.KEYDOWN and getattr(e, "key", None) in system_keys:
                continue
            scene.handle_event(e)
        if scene.quit_requested:
            running = False
            continue
        scene.update(dt)
        if scene.next_scene is not None:
            scene = scene.next_scene
        scene.draw(screen)
        pygame.display.flip()
    pygame.quit()


if __name__ == "__main__":
    main()
