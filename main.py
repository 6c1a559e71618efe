import sys
import tkinter as tk
from tkinter import filedialog
from tga_viewer import TGAViewer


class ImageApp(tk.Tk):
    def __init__(self, file_path=None):
        super().__init__()
        self.title("TGA Toolkit")
        self.geometry("1200x800")
        self.viewer_frame = None

        # Menu
        menubar = tk.Menu(self)
        file_menu = tk.Menu(menubar, tearoff=0)
        file_menu.add_command(label="Open Image", command=self.open_image)
        file_menu.add_separator()
        file_menu.add_command(label="Exit", command=self.quit)
        menubar.add_cascade(label="File", menu=file_menu)
        self.config(menu=menubar)

        self.show_viewer(file_path)

    def show_viewer(self, file_path):
        if self.viewer_frame:
            self.viewer_frame.destroy()
        self.viewer_frame = TGAViewer(self, file_path)
        self.viewer_frame.pack(fill="both", expand=True)

    def open_image(self):
        file_path = filedialog.askopenfilename(
            filetypes=[("TGA Files", "*.tga"), ("Image Files", "*.png;*.jpg;*.jpeg;*.bmp")])
        if file_path:
            self.show_viewer(file_path)


if __name__ == "__main__":
    app = ImageApp(sys.argv[1] if len(sys.argv) > 1 else None)
    app.mainloop()
