"""Key map: translates Textual key names into Session mutations."""

from dashy.session import Session

QUIT_KEYS = frozenset({"q", "Q", "escape"})
NEXT_KEYS = frozenset({"down", "j"})
PREV_KEYS = frozenset({"up", "k"})
TOGGLE_KEYS = frozenset({"tab", "left", "right", "h", "l"})
CANCEL_KEYS = frozenset({"escape", "n"})


def dispatch(session: Session, key: str) -> int | None:
    """
    Apply a key press to the session.

    Returns the pid to terminate when the key confirmed a kill, else None.
    Unbound keys are ignored.
    """
    if key == "ctrl+c":
        session.force_quit()
        return None

    if session.is_dialog_open():
        if key in TOGGLE_KEYS:
            session.toggle_confirm()
        elif key == "enter":
            return session.confirm()
        elif key in CANCEL_KEYS:
            session.cancel()
        elif key == "y":
            return session.quick_confirm()
        return None

    if key in QUIT_KEYS:
        session.force_quit()
    elif key in NEXT_KEYS:
        session.select_next()
    elif key in PREV_KEYS:
        session.select_prev()
    elif key == "enter":
        session.request_kill()
    return None
