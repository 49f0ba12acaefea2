import logging
import tkinter as tk
from tkinter import font

import wordHandle
from clock import Clock, TimerHandle
from game import GameEngine, GameSnapshot, Message, MessageKind, format_time

logger = logging.getLogger(__name__)

# --- Configuration & Colors ---
COLOR_BG_MAIN = "#E3C08D"
COLOR_BTN_BG = "#E7AB56"
COLOR_BTN_FG = "#FFFFFF"
COLOR_BOX_EMPTY_BG = "#FCE8CC"
COLOR_BOX_EMPTY_FG = "#605C56"
COLOR_BOX_ABSENT = "#605C56"
COLOR_BOX_PRESENT = "#E8E53F"
COLOR_BOX_CORRECT = "#5A9C36"
COLOR_ERROR_TEXT = "#CB2A2A"
COLOR_INFO_TEXT = "#605C56"

CODE_COLORS = {
    wordHandle.CORRECT: COLOR_BOX_CORRECT,
    wordHandle.PRESENT: COLOR_BOX_PRESENT,
    wordHandle.ABSENT: COLOR_BOX_ABSENT,
}

INLINE_BUTTONS = [
    ("btn_enable_timed", "Enable timed mode"),
    ("btn_pause", "Pause"),
    ("btn_resume", "Resume"),
    ("btn_share", "Share"),
]

KEYBOARD_LAYOUT = [
    "QWERTYUIOP",
    "ASDFGHJKL",
    "ZXCVBNM"
]
KEY_W = 40
KEY_H = 40
KEY_GAP = 5


def key_colors(code: int):
    """(background, foreground) for an on-screen key with the given feedback code."""
    if code == wordHandle.EMPTY:
        return COLOR_BOX_EMPTY_BG, COLOR_BOX_EMPTY_FG
    return CODE_COLORS[code], "#FFFFFF"


def clicked_tag(canvas, x, y):
    """Tag of the topmost tagged item under the point, or None on empty space."""
    for item in reversed(canvas.find_overlapping(x, y, x, y)):
        tags = canvas.gettags(item)
        if tags:
            return tags[0]
    return None


# Rows of the board shown even when a custom config asks for fewer attempts
BOARD_ROWS = 6


class TkClock(Clock):
    """Periodic callbacks via Tk's after(), on the UI thread."""

    def __init__(self, root: tk.Misc) -> None:
        self.root = root

    def schedule_periodic(self, interval: float, callback) -> TimerHandle:
        handle = _TkTimer(self.root)
        delay = max(1, int(interval * 1000))

        def fire() -> None:
            if not handle.active:
                return
            handle.after_id = self.root.after(delay, fire)
            callback()

        handle.after_id = self.root.after(delay, fire)
        return handle


class _TkTimer(TimerHandle):
    def __init__(self, root: tk.Misc) -> None:
        super().__init__()
        self.root = root
        self.after_id = None

    def cancel(self) -> None:
        if self.active and self.after_id is not None:
            try:
                self.root.after_cancel(self.after_id)
            except tk.TclError:
                pass
        super().cancel()


class ClipboardShare:
    """Share target that puts the text on the system clipboard."""

    def __init__(self, root: tk.Misc) -> None:
        self.root = root

    def __call__(self, text: str) -> None:
        self.root.clipboard_clear()
        self.root.clipboard_append(text)
        logger.info("Copied score to clipboard: %s", text)


class WordGuessUI:
    def __init__(self, root: tk.Tk, engine: GameEngine):
        self.root = root
        self.root.title("Word Guess")
        self.root.geometry("620x860")
        self.root.configure(bg=COLOR_BG_MAIN)
        self.root.resizable(False, False)

        self.engine = engine

        # Setup Fonts
        self.font_box = font.Font(family="Helvetica", size=24, weight="bold")
        self.font_btn = font.Font(family="Helvetica", size=12, weight="bold")
        self.font_msg = font.Font(family="Helvetica", size=12, weight="normal")
        self.font_timer = font.Font(family="Helvetica", size=16, weight="bold")

        self._build_menu()

        # Main Canvas
        self.canvas = tk.Canvas(root, width=620, height=860, bg=COLOR_BG_MAIN, highlightthickness=0)
        self.canvas.pack(fill="both", expand=True)

        self.entry = tk.Entry(root, font=self.font_box, width=8, justify="center")
        self.entry.bind("<Return>", lambda _e: self.submit_action())

        # Bind Inputs
        self.canvas.bind("<Button-1>", self.handle_click)
        self.root.bind("<Unmap>", self.handle_unmap)
        self.root.protocol("WM_DELETE_WINDOW", self.handle_close)

        self.engine.add_message_listener(self.on_message)
        self.engine.subscribe(self.UI_update)

    def _build_menu(self) -> None:
        menubar = tk.Menu(self.root)
        game_menu = tk.Menu(menubar, tearoff=0)
        game_menu.add_command(label="New Game", command=lambda: self.engine.new_game(timed=False))
        game_menu.add_command(
            label=f"New Timed Game ({format_time(self.engine.config.timed_seconds)})",
            command=lambda: self.engine.new_game(timed=True),
        )
        game_menu.add_command(label="Pause", command=self.engine.pause)
        game_menu.add_command(label="Resume", command=self.engine.resume)
        game_menu.add_separator()
        game_menu.add_command(label="Clear saved state", command=self.engine.clear_saved)
        menubar.add_cascade(label="Game", menu=game_menu)
        menubar.add_command(label="Share score", command=self.engine.share_score)
        self.root.config(menu=menubar)

    def draw_rounded_rect(self, x1, y1, x2, y2, radius, **kwargs):
        points = [
            x1 + radius, y1,
            x2 - radius, y1,
            x2, y1,
            x2, y1 + radius,
            x2, y2 - radius,
            x2, y2,
            x2 - radius, y2,
            x1 + radius, y2,
            x1, y2,
            x1, y2 - radius,
            x1, y1 + radius,
            x1, y1
        ]
        return self.canvas.create_polygon(points, **kwargs, smooth=True)

    def draw_button(self, x, y, w, h, text, tag, radius=20):
        self.draw_rounded_rect(x, y, x + w, y + h, radius, fill=COLOR_BTN_BG, tags=tag)
        self.canvas.create_text(x + w / 2, y + h / 2, text=text, fill=COLOR_BTN_FG, font=self.font_btn, tags=tag)

    def UI_update(self, data: GameSnapshot = None):
        data = data or self.engine.snapshot()
        self.canvas.delete("all")

        # 1. Timer line
        if data.timed_mode:
            self.canvas.create_text(60, 30, anchor="w", text=f"Time left: {format_time(data.remaining_secs)}",
                                    fill=COLOR_BOX_EMPTY_FG, font=self.font_timer)
            self.canvas.create_text(560, 30, anchor="e", text="Paused" if data.paused else "Running",
                                    fill=COLOR_BOX_EMPTY_FG, font=self.font_msg)

        # 2. Game Grid
        cols = len(data.target)
        box_size = 60
        gap = 10
        start_x = 310 - (cols * (box_size + gap) - gap) / 2
        start_y = 60

        rows = max(BOARD_ROWS, data.max_attempts)
        matrix = wordHandle.board_matrix(data.guesses, data.target, rows=rows,
                                         strict=self.engine.config.strict_feedback)
        for row in range(rows):
            word = data.guesses[row] if row < len(data.guesses) else ""
            for col in range(cols):
                bx = start_x + col * (box_size + gap)
                by = start_y + row * (box_size + gap)

                bg_color = COLOR_BOX_EMPTY_BG
                text_color = COLOR_BOX_EMPTY_FG
                code = int(matrix[row, col])
                if code != wordHandle.EMPTY:
                    bg_color = CODE_COLORS[code]
                    text_color = "#FFFFFF"

                self.draw_rounded_rect(bx, by, bx + box_size, by + box_size, 20, fill=bg_color)
                char = word[col] if col < len(word) else ""
                self.canvas.create_text(bx + box_size / 2, by + box_size / 2, text=char,
                                        fill=text_color, font=self.font_box)

        # 3. Input row
        input_y = start_y + rows * (box_size + gap) + 30
        self.canvas.create_window(250, input_y, window=self.entry)
        self.draw_button(400, input_y - 22, 90, 44, "Try", "btn_try")

        # 4. Message line
        msg = data.last_message
        if msg is not None:
            color = COLOR_ERROR_TEXT if msg.kind == MessageKind.ERROR else COLOR_INFO_TEXT
            self.canvas.create_text(310, input_y + 45, text=msg.text, fill=color, font=self.font_msg)

        # 5. Keyboard
        kb_start_y = input_y + 70
        key_states = wordHandle.letter_states(data.guesses, data.target,
                                              strict=self.engine.config.strict_feedback)
        for i, row_keys in enumerate(KEYBOARD_LAYOUT):
            row_w = len(row_keys) * (KEY_W + KEY_GAP)
            start_x_kb = 310 - (row_w / 2)
            for j, char in enumerate(row_keys):
                kx = start_x_kb + j * (KEY_W + KEY_GAP)
                ky = kb_start_y + i * (KEY_H + KEY_GAP)
                k_bg, k_fg = key_colors(key_states.get(char, wordHandle.EMPTY))
                tag = f"key_{char}"
                self.draw_rounded_rect(kx, ky, kx + KEY_W, ky + KEY_H, 10, fill=k_bg, tags=tag)
                self.canvas.create_text(kx + KEY_W / 2, ky + KEY_H / 2, text=char, fill=k_fg,
                                        font=self.font_btn, tags=tag)

        # Special Keys
        last_row_w = len(KEYBOARD_LAYOUT[2]) * (KEY_W + KEY_GAP)
        special_y = kb_start_y + 2 * (KEY_H + KEY_GAP)
        enter_x = 310 + last_row_w / 2 + 5
        self.draw_rounded_rect(enter_x, special_y, enter_x + 70, special_y + KEY_H, 10,
                               fill=COLOR_BOX_EMPTY_BG, tags="key_enter")
        self.canvas.create_text(enter_x + 35, special_y + KEY_H / 2, text="Enter", fill=COLOR_BOX_EMPTY_FG,
                                font=self.font_btn, tags="key_enter")
        back_x = 310 - last_row_w / 2 - 55
        self.draw_rounded_rect(back_x, special_y, back_x + 50, special_y + KEY_H, 10,
                               fill=COLOR_BOX_EMPTY_BG, tags="key_back")
        self.canvas.create_text(back_x + 25, special_y + KEY_H / 2, text="Del", fill=COLOR_BOX_EMPTY_FG,
                                font=self.font_btn, tags="key_back")

        # 6. Inline buttons
        btn_y = kb_start_y + len(KEYBOARD_LAYOUT) * (KEY_H + KEY_GAP) + 15
        btn_w = 130
        for i, (tag, label) in enumerate(INLINE_BUTTONS):
            self.draw_button(30 + i * (btn_w + 10), btn_y, btn_w, 44, label, tag)

        # 7. Footer
        footer = f"Guesses: {len(data.guesses)}  {'(finished)' if data.finished else ''}"
        self.canvas.create_text(310, btn_y + 70, text=footer, fill=COLOR_BOX_EMPTY_FG, font=self.font_msg)

    # --- Interaction Handlers ---

    def on_message(self, message: Message):
        logger.info("%s", message.text)

    def submit_action(self):
        self.engine.submit_guess(self.entry.get())
        self.entry.delete(0, tk.END)

    def handle_click(self, event):
        tag = clicked_tag(self.canvas, event.x, event.y)
        if tag is None:
            return

        if tag == "btn_try" or tag == "key_enter":
            self.submit_action()
        elif tag == "key_back":
            self.entry.delete(len(self.entry.get()) - 1, tk.END)
        elif tag.startswith("key_"):
            self.entry.insert(tk.END, tag.split("_")[1])
        elif tag == "btn_enable_timed":
            self.engine.enable_timed_mode()
        elif tag == "btn_pause":
            self.engine.pause()
        elif tag == "btn_resume":
            self.engine.resume()
        elif tag == "btn_share":
            self.engine.share_score()

    def handle_unmap(self, event):
        # Minimised: autosave like a backgrounded app
        if event.widget is self.root:
            self.engine.on_suspend()

    def handle_close(self):
        self.engine.close()
        self.root.destroy()


def start(store, config=None, new_game=False, timed=False):
    root = tk.Tk()
    engine = GameEngine(store, TkClock(root), config=config, share=ClipboardShare(root))
    app = WordGuessUI(root, engine)
    engine.load_saved()
    if new_game or timed:
        engine.new_game(timed=timed)
    app.UI_update()
    root.mainloop()
    return engine
