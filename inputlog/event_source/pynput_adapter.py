from collections.abc import Callable

from pynput import keyboard, mouse

from inputlog.event_source.base import BaseEventSource
from inputlog.event_source.exceptions import HookRegistrationError
from inputlog.event_source.models import SpecialKey
from inputlog.logging.logger import Log

# Keyed by Key member name; members missing on a platform are simply never seen.
_MODIFIERS = {
    "ctrl": "ctrl",
    "ctrl_l": "ctrl",
    "ctrl_r": "ctrl",
    "alt": "alt",
    "alt_l": "alt",
    "alt_r": "alt",
    "alt_gr": "alt",
    "shift": "shift",
    "shift_l": "shift",
    "shift_r": "shift",
}

_SPECIAL_NAMES = {
    "enter": "enter",
    "tab": "tab",
    "backspace": "backspace",
    "delete": "delete",
    "left": "arrow_left",
    "right": "arrow_right",
    "up": "arrow_up",
    "down": "arrow_down",
    "home": "home",
    "end": "end",
    "page_up": "pageup",
    "page_down": "pagedown",
    "insert": "insert",
    "esc": "escape",
}


def _special_name(key_name: str) -> str | None:
    if key_name in _SPECIAL_NAMES:
        return _SPECIAL_NAMES[key_name]
    if key_name[:1] == "f" and key_name[1:].isdigit():
        return key_name
    return None


def _start_listener(listener: keyboard.Listener | mouse.Listener, kind: str) -> None:
    try:
        listener.start()
        listener.wait()
    except Exception as exc:
        raise HookRegistrationError(f"Failed to register {kind} hook: {exc}") from exc
    if not listener.is_alive():
        raise HookRegistrationError(f"{kind} hook exited during registration")


class PynputKeyboardSource(BaseEventSource):
    """Global keyboard hook delivering typed characters and special keys.

    Printable characters and space arrive as text. Editing, navigation and
    function keys arrive as a SpecialKey, and so does any key pressed while
    Ctrl or Alt is held (``ctrl+c``, ``ctrl+alt+shift+t``). Modifiers on their
    own deliver nothing.
    """

    def __init__(self) -> None:
        self._listener: keyboard.Listener | None = None
        self._handler: Callable[..., None] | None = None
        self._held: set[str] = set()

    def start(self, handler: Callable[..., None]) -> None:
        self._handler = handler
        listener = keyboard.Listener(on_press=self._on_press, on_release=self._on_release)
        _start_listener(listener, "keyboard")
        self._listener = listener
        Log.info("Keyboard hook registered")

    def stop(self) -> None:
        if self._listener is None:
            return
        self._listener.stop()
        self._listener = None
        self._held.clear()
        Log.info("Keyboard hook released")

    @property
    def _modifiers(self) -> set[str]:
        return {_MODIFIERS[name] for name in self._held}

    def _on_press(self, key: keyboard.Key | keyboard.KeyCode | None) -> None:
        if key is None:
            return
        if isinstance(key, keyboard.Key) and key.name in _MODIFIERS:
            self._held.add(key.name)
            return
        if self._handler is None:
            return
        event = self._to_event(key)
        if event is None:
            return
        try:
            self._handler(event)
        except Exception as exc:
            Log.error(f"Keyboard handler failed: {exc}")

    def _on_release(self, key: keyboard.Key | keyboard.KeyCode | None) -> None:
        if isinstance(key, keyboard.Key):
            self._held.discard(key.name)

    def _to_event(self, key: keyboard.Key | keyboard.KeyCode) -> str | SpecialKey | None:
        modifiers = self._modifiers
        if modifiers & {"ctrl", "alt"}:
            parts = [name for name in ("ctrl", "alt", "shift") if name in modifiers]
            parts.append(self._combo_key_name(key))
            return SpecialKey("+".join(parts))
        if isinstance(key, keyboard.KeyCode):
            return key.char or None
        if key.name == "space":
            return " "
        special = _special_name(key.name)
        return SpecialKey(special) if special is not None else None

    @staticmethod
    def _combo_key_name(key: keyboard.Key | keyboard.KeyCode) -> str:
        if isinstance(key, keyboard.Key):
            return _special_name(key.name) or key.name
        # Under Ctrl the reported char is often a control code; the virtual key is not.
        vk = key.vk
        if vk is not None and (0x30 <= vk <= 0x39 or 0x41 <= vk <= 0x5A):
            return chr(vk).lower()
        if key.char and key.char.isprintable():
            return key.char.lower()
        return f"vk{vk}"


class PynputMouseSource(BaseEventSource):
    """Global mouse hook delivering one event per button press."""

    def __init__(self) -> None:
        self._listener: mouse.Listener | None = None
        self._handler: Callable[[], None] | None = None

    def start(self, handler: Callable[..., None]) -> None:
        self._handler = handler
        listener = mouse.Listener(on_click=self._on_click)
        _start_listener(listener, "mouse")
        self._listener = listener
        Log.info("Mouse hook registered")

    def stop(self) -> None:
        if self._listener is None:
            return
        self._listener.stop()
        self._listener = None
        Log.info("Mouse hook released")

    def _on_click(self, x: int, y: int, button: mouse.Button, pressed: bool) -> None:
        _ = x, y, button
        if not pressed or self._handler is None:
            return
        try:
            self._handler()
        except Exception as exc:
            Log.error(f"Mouse handler failed: {exc}")
