import importlib
import types

import pytest


@pytest.mark.parametrize("draw", ["1", "3"])
def test_application_flow(monkeypatch, tmp_path, draw):
    monkeypatch.setenv("SDL_VIDEODRIVER", "dummy")
    monkeypatch.setenv("SDL_AUDIODRIVER", "dummy")
    monkeypatch.setenv("APPDATA", str(tmp_path))
    monkeypatch.setenv("KLONDIKE_SEED", "42")
    monkeypatch.setenv("KLONDIKE_DRAW", draw)
    monkeypatch.delenv("KLONDIKE_CARD_SIZE", raising=False)

    pygame = importlib.import_module("pygame")

    class DummyFont:
        def __init__(self, size):
            self._size = max(1, int(size) if size else 1)

        def render(self, text, *_, **__):
            width = max(1, len(str(text)) * max(self._size // 2, 1))
            height = max(1, self._size)
            return pygame.Surface((width, height), pygame.SRCALPHA)

        def size(self, text):
            width = max(1, len(str(text)) * max(self._size // 2, 1))
            return width, max(1, self._size)

        def get_height(self):
            return max(1, self._size)

    def _make_font(size):
        return DummyFont(size or 24)

    monkeypatch.setattr(
        pygame.font,
        "SysFont",
        lambda *args, size=None, **kwargs: _make_font(size if size is not None else (args[1] if len(args) > 1 else None)),
        raising=False,
    )
    monkeypatch.setattr(
        pygame.font,
        "Font",
        lambda *args, size=None, **kwargs: _make_font(size if size is not None else (args[1] if len(args) > 1 else None)),
        raising=False,
    )
    monkeypatch.setattr(pygame.font, "get_default_font", lambda: "dummy", raising=False)

    entry = importlib.import_module("klondike.__main__")
    ui_state = importlib.import_module("klondike.ui_state")
    game_state = importlib.import_module("klondike.game_state")

    captured = {}

    class DummyClock:
        def tick(self, _fps):
            return 16

    monkeypatch.setattr(pygame.time, "Clock", lambda: DummyClock())
    monkeypatch.setattr(pygame.display, "Info", lambda: types.SimpleNamespace(current_w=1600, current_h=900))
    monkeypatch.setattr(pygame.display, "set_mode", lambda size, flags=0: pygame.Surface(size))
    monkeypatch.setattr(pygame.display, "flip", lambda: None)
    monkeypatch.setattr(pygame.display, "set_caption", lambda _title: None)

    target_size = (1024, 768)
    monkeypatch.setattr(entry, "_initial_window_size", lambda: target_size)

    orig_scene_cls = entry.KlondikeScene

    class LoggedScene(orig_scene_cls):
        def __init__(self, app, session=None):
            super().__init__(app, session)
            captured["scene"] = self

        def compute_layout(self):
            super().compute_layout()
            captured["layouts"] = captured.get("layouts", 0) + 1

    monkeypatch.setattr(entry, "KlondikeScene", LoggedScene)

    def _key(key):
        return [pygame.event.Event(pygame.KEYDOWN, {"key": key, "mod": 0})]

    def _click_stock():
        scene = captured["scene"]
        assert isinstance(scene.session.state, game_state.PlayingState), "deal should be skipped"
        scene.session.ui_state = ui_state.Hovering(game_state.STOCK)
        pos = scene.slot_rect(game_state.STOCK).center
        assert scene.locate(pos) == ui_state.CardLocation(game_state.STOCK, 0)
        return [pygame.event.Event(pygame.MOUSEBUTTONDOWN, {"pos": pos, "button": 1})]

    def _resize():
        session = captured["scene"].session
        captured["talon"] = len(session.state.talon)
        captured["stock"] = len(session.state.stock)
        return [pygame.event.Event(pygame.VIDEORESIZE, {"size": (900, 700), "w": 900, "h": 700})]

    event_steps = [
        lambda: _key(pygame.K_SPACE),
        _click_stock,
        _resize,
        lambda: _key(pygame.K_r),
        lambda: _key(pygame.K_ESCAPE),
    ]

    index = {"value": 0}

    def scripted_events():
        step = index["value"]
        if step >= len(event_steps):
            return []
        events = event_steps[step]()
        assert events, f"No events returned for step {step}"
        index["value"] += 1
        return events

    monkeypatch.setattr(pygame.event, "get", scripted_events)

    quit_calls = []
    real_quit = pygame.quit

    def tracked_quit():
        quit_calls.append(True)
        real_quit()

    monkeypatch.setattr(pygame, "quit", tracked_quit)

    entry.main([])

    assert quit_calls, "pygame.quit() should be called"
    assert index["value"] == len(event_steps)

    scene = captured["scene"]
    assert scene.session.seed == 42
    assert scene.session.draw_count == int(draw)
    assert captured["talon"] == int(draw)
    assert captured["stock"] == 24 - int(draw)
    assert captured["layouts"] == 2

    # R dealt a fresh game and the frame after it started dealing again
    assert isinstance(scene.session.state, game_state.DealingState)
    assert isinstance(scene.session.ui_state, ui_state.DealingUI)
