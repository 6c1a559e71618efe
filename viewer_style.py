# viewer_style.py
# Colors and fonts shared by the Tkinter windows.

BG_MAIN = "#f0f2f5"
BG_TOOLBAR = "#2f3e4e"
BG_PANEL = "#ffffff"
BG_BUTTON = "#3d5a80"
FG_BUTTON = "#ffffff"
FG_TEXT = "#1f2933"
FG_SUBTEXT = "#52606d"

FONT_HEADER = ("Segoe UI", 11, "bold")
FONT_TEXT = ("Segoe UI", 10)
FONT_MONO = ("Consolas", 10)

ZOOM_STEP = 1.25
HISTOGRAM_SIZE = 160
PALETTE_COLUMNS = 16
PALETTE_CELL = 16
