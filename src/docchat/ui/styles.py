"""CSS styles for the TUI.

Hides layout and styling decisions from the application logic.
Uses Textual CSS features: nesting, pseudo-classes, variables.
"""

APP_CSS = """
/* ============================================
   Main Screen Layout - chat left, log right
   ============================================ */
Screen {
    layout: grid;
    grid-size: 2 2;
    grid-columns: 1fr auto;
    grid-rows: 1fr auto;
    background: $background;
}

/* ============================================
   Chat History Panel
   ============================================ */
#chat-history {
    height: 100%;
    background: $panel;
    border: round $primary 60%;
    border-title-color: $primary;
    border-title-style: bold;
    border-title-align: left;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    scrollbar-gutter: stable;

    &:focus-within {
        border: round $primary;
    }

    &.-maximized {
        column-span: 2;
    }
}

/* ============================================
   Log Panel
   ============================================ */
#debug-panel {
    width: 60;
    height: 100%;
    background: $panel;
    border: round $warning 60%;
    border-title-color: $warning;
    border-title-style: bold;
    border-title-align: left;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    overflow-y: scroll;
    overflow-x: auto;
    scrollbar-gutter: stable;

    &:focus {
        border: round $warning;
    }
}

/* ============================================
   Bottom Bar - error row, attachment, input
   ============================================ */
#bottom-bar {
    column-span: 2;
    height: auto;
    padding: 0 1;
    background: $panel;
    border-top: solid $border;
}

/* Inline error row with retry */
ErrorBar {
    height: auto;
    display: none;
    padding: 0 1;
    margin-bottom: 1;
    background: $error 15%;
    border-left: tall $error;

    &.-visible {
        display: block;
    }

    #error-text {
        width: 1fr;
        height: 3;
        content-align: left middle;
        color: $error;
    }

    Button {
        margin: 0 0 0 1;
    }
}

#attachment-label {
    height: 1;
    padding: 0 1;
    color: $accent;
}

ChatInputBar {
    height: 5;
    border: round $primary 60%;
    background: $panel;

    &:focus-within {
        border: round $primary;
    }

    &.-busy {
        border: round $warning;
    }
}

#chat-input {
    width: 1fr;
    height: 100%;
    border: none;
    padding: 0 1;
    background: transparent;
}

#attach-btn {
    width: 10;
    height: 100%;
    margin: 0 0 0 1;
}

#send-btn {
    width: 10;
    height: 100%;
    margin: 0 0 0 1;
    text-style: bold;
}

/* ============================================
   Chat Messages
   ============================================ */
.chat-message {
    width: 100%;
    height: auto;
    margin: 0 0 1 0;
    padding: 1 2;
    background: transparent;
}

.user-message {
    border-left: tall $success;
    background: $success 8%;

    & .message-header {
        color: $success;
        text-style: bold;
    }
}

.assistant-message {
    border-left: tall $secondary;
    background: $secondary 8%;

    & .message-header {
        color: $secondary;
        text-style: bold;
    }
}

.message-header {
    height: auto;
}

.message-content {
    height: auto;
    color: $foreground;
}

.attachment-badge {
    height: 1;
    color: $accent;
    text-style: italic;
}

.artifact-summary {
    height: 1;
    color: $text-muted;
}

/* Action row under each assistant reply */
.message-actions {
    height: auto;
    margin-top: 1;

    Button {
        min-width: 8;
        height: 1;
        border: none;
        margin: 0 1 0 0;
        padding: 0 1;
        background: $surface;

        &:hover {
            background: $primary 25%;
        }
    }
}

/* ============================================
   Notifications
   ============================================ */
Toast {
    background: $surface;
    border: tall $border;
    padding: 0 1;

    &.-information {
        border: tall $primary;
    }

    &.-error {
        border: tall $error;
    }

    &.-warning {
        border: tall $warning;
    }
}

Header {
    background: $panel;
    color: $foreground;
    dock: top;
    height: 1;
}

Footer {
    background: $panel;
    height: auto;
}

Markdown {
    margin: 0;
    padding: 0;
}

MarkdownFence {
    background: $panel;
    border: round $border;
    margin: 1 0;
}

DataTable {
    background: $surface;
    border: tall $border;
}

DataTable > .datatable--header {
    background: $panel;
    color: $primary;
    text-style: bold;
}
"""
