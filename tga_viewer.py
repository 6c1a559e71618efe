import tkinter as tk
from tkinter import filedialog, messagebox, ttk
from pathlib import Path

from PIL import ImageTk

import viewer_style as style
from orientation import flip_horizontally, flip_vertically
from tga_header import TGAType, read_tga_header
from tga_info import channel_histograms, header_info, plot_histogram_image
from tgacodec import load_any, read_palette, save_any

HIST_COLORS = {"R": "red", "G": "green", "B": "blue", "A": "black", "Gray": "gray"}


def read_file_details(path):
    """Header of a TGA file and its color map as (r, g, b) tuples (None when not indexed)."""
    with open(path, "rb") as fp:
        header = read_tga_header(fp)
        palette = read_palette(fp, header)
    if not palette:
        return header, None
    return header, [tuple(c[:3]) for c in palette]


# ==== TGA Viewer ====
class TGAViewer(tk.Frame):
    def __init__(self, master, file_path=None):
        super().__init__(master, bg=style.BG_MAIN)
        self.master = master
        self.pack(fill="both", expand=True)

        # Toolbar
        toolbar = tk.Frame(self, bg=style.BG_TOOLBAR, padx=10, pady=8)
        toolbar.pack(side="top", fill="x")
        for text, cmd in (("Open", self.open_file), ("Save As", self.save_as),
                          ("Zoom In", self.zoom_in), ("Zoom Out", self.zoom_out),
                          ("Flip H", self.flip_h), ("Flip V", self.flip_v)):
            tk.Button(toolbar, text=text, command=cmd,
                      bg=style.BG_BUTTON, fg=style.FG_BUTTON,
                      font=("Segoe UI", 10, "bold"), relief="flat", padx=10, pady=4).pack(side="left", padx=5)
        tk.Label(toolbar, text="Save as:", bg=style.BG_TOOLBAR, fg=style.FG_BUTTON).pack(side="left", padx=(15, 4))
        self.save_type = tk.StringVar(value=TGAType.RGB_RLE.name)
        ttk.Combobox(toolbar, textvariable=self.save_type, state="readonly", width=12,
                     values=[t.name for t in TGAType]).pack(side="left")

        # Main Frame
        main_frame = tk.Frame(self, bg=style.BG_MAIN)
        main_frame.pack(fill="both", expand=True, padx=10, pady=10)

        # Canvas frame
        canvas_frame = tk.Frame(main_frame, bg=style.BG_MAIN)
        canvas_frame.pack(side="left", fill="both", expand=True, padx=(0, 10))
        self.canvas = tk.Canvas(canvas_frame, bg=style.BG_PANEL, cursor="cross")
        self.canvas.pack(side="top", fill="both", expand=True)
        self.scroll_y = tk.Scrollbar(canvas_frame, orient="vertical", command=self.canvas.yview)
        self.scroll_y.pack(side="right", fill="y")
        self.scroll_x = tk.Scrollbar(main_frame, orient="horizontal", command=self.canvas.xview)
        self.scroll_x.pack(side="bottom", fill="x")
        self.canvas.configure(yscrollcommand=self.scroll_y.set, xscrollcommand=self.scroll_x.set)

        self.canvas.bind("<Button-1>", self.get_pixel_info)
        self.canvas.bind("<ButtonPress-2>", self.start_pan)
        self.canvas.bind("<B2-Motion>", self.pan_image)
        self.canvas.bind("<MouseWheel>", self.on_mousewheel)
        self.canvas.bind("<Button-4>", self.on_mousewheel_linux)
        self.canvas.bind("<Button-5>", self.on_mousewheel_linux)

        # Info Panel
        info_frame = tk.Frame(main_frame, bg=style.BG_PANEL, bd=2, relief="groove", padx=15, pady=15)
        info_frame.pack(side="right", fill="y")
        tk.Label(info_frame, text="Pixel Info", font=style.FONT_HEADER,
                 bg=style.BG_PANEL, fg=style.FG_TEXT).pack(anchor="w", pady=(0, 5))
        self.pixel_label = tk.Label(info_frame,
            text="Click on the image to view pixel RGBA values.",
            font=style.FONT_TEXT, justify="left", bg=style.BG_PANEL, fg=style.FG_SUBTEXT)
        self.pixel_label.pack(anchor="w", pady=(0, 10))
        self.color_preview = tk.Canvas(info_frame, width=80, height=50, bg="#cccccc", bd=1, relief="solid")
        self.color_preview.pack(anchor="w", pady=(0, 20))
        tk.Frame(info_frame, height=2, bg="#e0e0e0").pack(fill="x", pady=10)
        tk.Label(info_frame, text="Header Info", font=style.FONT_HEADER,
                 bg=style.BG_PANEL, fg=style.FG_TEXT).pack(anchor="w", pady=(0, 5))
        self.header_text = tk.Text(info_frame, height=12, width=40,
                                   font=style.FONT_MONO, bg="#f9f9f9", fg="#222",
                                   relief="flat", wrap="none")
        self.header_text.pack(anchor="w", pady=(0, 5))
        self.header_text.configure(state="disabled")
        tk.Label(info_frame, text="Color Map", font=style.FONT_HEADER,
                 bg=style.BG_PANEL, fg=style.FG_TEXT).pack(anchor="w", pady=(10, 5))
        self.palette_canvas = tk.Canvas(info_frame, width=256, height=128, bg="#fff", bd=1, relief="solid")
        self.palette_canvas.pack(anchor="w")

        # Histogram strip
        self.hist_frame = tk.Frame(canvas_frame, bg=style.BG_MAIN)
        self.hist_frame.pack(side="bottom", fill="x", pady=(10, 0))

        # Vars
        self.tga = None
        self.image = None
        self.tk_img = None
        self.zoom_factor = 1.0
        self.filename = file_path
        self.pan_start = None
        self.palette = None
        self.hist_refs = []

        if file_path:
            self.load_file(file_path)

    # ==== File Handling ====
    def open_file(self):
        file_path = filedialog.askopenfilename(
            filetypes=[("TGA files", "*.tga"), ("Image files", "*.png;*.jpg;*.jpeg;*.bmp;*.gif")])
        if file_path:
            self.load_file(file_path)

    def load_file(self, file_path):
        try:
            path = Path(file_path)
            self.tga = load_any(path)
            self.filename = file_path
            if path.suffix.lower() == ".tga":
                header, self.palette = read_file_details(path)
                self.show_header_info(header_info(path, header, self.tga))
            else:
                self.palette = None
                self.show_header_info({"Filename": path.name, "Image Dimensions": f"{self.tga.width}x{self.tga.height}"})
            self.zoom_factor = 1.0
            self.refresh()
            self.draw_palette()
        except Exception as e:
            messagebox.showerror("Error", f"Failed to open image:\n{e}")

    def save_as(self):
        if not self.tga:
            return
        file_path = filedialog.asksaveasfilename(defaultextension=".tga",
                                                 filetypes=[("TGA files", "*.tga"), ("PNG files", "*.png")])
        if not file_path:
            return
        try:
            save_any(file_path, self.tga, TGAType.from_name(self.save_type.get()))
        except Exception as e:
            messagebox.showerror("Error", f"Failed to save image:\n{e}")

    def flip_h(self):
        if self.tga:
            flip_horizontally(self.tga)
            self.refresh()

    def flip_v(self):
        if self.tga:
            flip_vertically(self.tga)
            self.refresh()

    def refresh(self):
        self.image = self.tga.to_pil()
        self.display_image()
        self.show_histograms()

    # ==== Display & Zoom ====
    def display_image(self, img=None):
        if img is None: img = self.image
        if img:
            w = max(1, int(img.width*self.zoom_factor))
            h = max(1, int(img.height*self.zoom_factor))
            img_resized = img.resize((w, h))
            self.tk_img = ImageTk.PhotoImage(img_resized)
            self.canvas.delete("all")
            self.canvas.create_image(0, 0, anchor="nw", image=self.tk_img)
            self.canvas.config(scrollregion=self.canvas.bbox("all"))

    def zoom_in(self): self.zoom_factor *= style.ZOOM_STEP; self.display_image()
    def zoom_out(self): self.zoom_factor /= style.ZOOM_STEP; self.display_image()
    def on_mousewheel(self, event): self.zoom_in() if event.delta > 0 else self.zoom_out()
    def on_mousewheel_linux(self, event):
        if event.num == 4: self.zoom_in()
        elif event.num == 5: self.zoom_out()
    def start_pan(self, event): self.pan_start = (event.x, event.y)
    def pan_image(self, event):
        if self.pan_start:
            dx = self.pan_start[0]-event.x
            dy = self.pan_start[1]-event.y
            self.canvas.xview_scroll(int(dx/2), "units")
            self.canvas.yview_scroll(int(dy/2), "units")
            self.pan_start = (event.x, event.y)

    # ==== Pixel info ====
    def get_pixel_info(self, event):
        if self.tga:
            x = int(self.canvas.canvasx(event.x)/self.zoom_factor)
            y = int(self.canvas.canvasy(event.y)/self.zoom_factor)
            if 0 <= x < self.tga.width and 0 <= y < self.tga.height:
                px = self.tga.pixel(x, y)
                r, g, b = px[:3]
                text = f"X:{x}\nY:{y}\nR:{r}\nG:{g}\nB:{b}"
                if len(px) == 4:
                    text += f"\nA:{px[3]}"
                self.pixel_label.config(text=text)
                self.color_preview.config(bg=f"#{r:02x}{g:02x}{b:02x}")

    # ==== Header info ====
    def show_header_info(self, info):
        text = "\n".join(f"{k}: {v}" for k, v in info.items())
        self.header_text.configure(state="normal")
        self.header_text.delete("1.0", "end")
        self.header_text.insert("1.0", text)
        self.header_text.configure(state="disabled")

    # ==== Palette ====
    def draw_palette(self):
        self.palette_canvas.delete("all")
        if not self.palette: return
        PAD = 2; cols = style.PALETTE_COLUMNS; cell = style.PALETTE_CELL
        total = min(256, len(self.palette))
        rows = (total+cols-1)//cols
        self.palette_canvas.config(width=cols*cell+PAD*2, height=rows*cell+PAD*2)
        for i, (r, g, b) in enumerate(self.palette[:total]):
            col = i % cols; row = i//cols
            x = PAD+col*cell; y = PAD+row*cell
            self.palette_canvas.create_rectangle(x, y, x+cell, y+cell, fill=f"#{r:02x}{g:02x}{b:02x}", outline="")

    # ==== Histograms ====
    def show_histograms(self):
        for w in self.hist_frame.winfo_children():
            w.destroy()
        self.hist_refs.clear()
        if not self.tga.width or not self.tga.height:
            return
        for name, hist in channel_histograms(self.tga).items():
            frame = tk.Frame(self.hist_frame, bg=style.BG_MAIN)
            frame.pack(side="left", padx=5, pady=5)
            tk.Label(frame, text=f"{name} Histogram", bg=style.BG_MAIN).pack()
            hist_img = ImageTk.PhotoImage(plot_histogram_image(hist, color=HIST_COLORS[name],
                                                               width=style.HISTOGRAM_SIZE,
                                                               height=style.HISTOGRAM_SIZE))
            tk.Label(frame, image=hist_img, bg=style.BG_MAIN).pack()
            self.hist_refs.append(hist_img)


# ==== Main ====
if __name__ == "__main__":
    root = tk.Tk()
    root.title("TGA Viewer")
    root.geometry("1200x800")
    app = TGAViewer(root)
    app.pack(fill="both", expand=True)
    root.mainloop()
