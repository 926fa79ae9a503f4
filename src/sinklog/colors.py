"""
ANSI styling by color name.

Names follow the terminal palette used in the level taxonomy: plain colors
(red, green, grey, ...), bright variants, background colors, text styles
(bold, underline, ...) and the two character-cycling styles rainbow and
zebra. Several names may be combined with spaces ("bold red").
Unknown names leave the text unchanged.
"""

from __future__ import annotations

RESET = "\033[0m"

STYLES: dict[str, tuple[int, int]] = {
    # styles
    "reset": (0, 0),
    "bold": (1, 22),
    "dim": (2, 22),
    "italic": (3, 23),
    "underline": (4, 24),
    "inverse": (7, 27),
    "hidden": (8, 28),
    "strikethrough": (9, 29),
    # foreground
    "black": (30, 39),
    "red": (31, 39),
    "green": (32, 39),
    "yellow": (33, 39),
    "blue": (34, 39),
    "magenta": (35, 39),
    "cyan": (36, 39),
    "white": (37, 39),
    "gray": (90, 39),
    "grey": (90, 39),
    "brightRed": (91, 39),
    "brightGreen": (92, 39),
    "brightYellow": (93, 39),
    "brightBlue": (94, 39),
    "brightMagenta": (95, 39),
    "brightCyan": (96, 39),
    "brightWhite": (97, 39),
    # background
    "bgBlack": (40, 49),
    "bgRed": (41, 49),
    "bgGreen": (42, 49),
    "bgYellow": (43, 49),
    "bgBlue": (44, 49),
    "bgMagenta": (45, 49),
    "bgCyan": (46, 49),
    "bgWhite": (47, 49),
}

RAINBOW_CYCLE = ("red", "yellow", "green", "blue", "magenta")
ZEBRA_CYCLE = ("inverse", "reset")


def _wrap(text: str, name: str) -> str:
    opening, closing = STYLES[name]
    return f"\033[{opening}m{text}\033[{closing}m"


def _cycle(text: str, palette: tuple[str, ...]) -> str:
    """Color each non-space character with the next entry of the palette."""
    out = []
    i = 0
    for ch in text:
        if ch.isspace():
            out.append(ch)
            continue
        out.append(_wrap(ch, palette[i % len(palette)]))
        i += 1
    return "".join(out)


def colorize(text: str, color: str | None) -> str:
    """Apply a (possibly space-separated) color name to text."""
    if not text or not color:
        return text
    for name in reversed(color.split()):
        if name == "rainbow":
            text = _cycle(text, RAINBOW_CYCLE)
        elif name == "zebra":
            text = _cycle(text, ZEBRA_CYCLE)
        elif name in STYLES:
            text = _wrap(text, name)
    return text


def is_known(color: str) -> bool:
    names = color.split()
    return bool(names) and all(
        n in STYLES or n in ("rainbow", "zebra") for n in names
    )
