"""Theme definitions for the TUI.

This module hides the design decisions about:
- Color palettes and visual appearance
- Theme variables (borders, scrollbars, etc.)

To add a new theme, define it here and register in the app.
"""

from textual.theme import Theme

# Slate palette with a teal accent, echoing the web client's dark mode
DOCCHAT_DARK = Theme(
    name="docchat-dark",
    primary="#2dd4bf",      # Teal - main accent
    secondary="#818cf8",    # Indigo - assistant messages
    accent="#fbbf24",       # Amber - highlights
    foreground="#e2e8f0",   # Slate 200
    background="#0f172a",   # Slate 900
    success="#4ade80",      # Green - user messages, confirm
    warning="#fb923c",      # Orange - warnings
    error="#f87171",        # Red - errors, retry row
    surface="#1e293b",      # Slate 800
    panel="#111827",        # Gray 900
    dark=True,
    variables={
        "block-cursor-foreground": "#0f172a",
        "block-cursor-background": "#2dd4bf",
        "block-cursor-text-style": "bold",
        "block-hover-background": "#334155 20%",

        "input-cursor-background": "#e2e8f0",
        "input-cursor-foreground": "#0f172a",
        "input-selection-background": "#2dd4bf 30%",

        "border": "#334155",
        "border-blurred": "#1e293b",

        "scrollbar": "#1e293b",
        "scrollbar-hover": "#334155",
        "scrollbar-active": "#2dd4bf",
        "scrollbar-background": "#111827",

        "footer-foreground": "#cbd5e1",
        "footer-background": "#0f172a",
        "footer-key-foreground": "#fbbf24",
        "footer-key-background": "#1e293b",

        "text-muted": "#64748b",
        "text-disabled": "#334155",

        "button-foreground": "#e2e8f0",
        "button-color-foreground": "#0f172a",
        "button-focus-text-style": "bold reverse",
    },
)
