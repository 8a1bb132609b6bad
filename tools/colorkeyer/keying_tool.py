import tkinter as tk
from tkinter import ttk, filedialog, colorchooser, messagebox
from PIL import Image, ImageTk
import threading

from color_keyer import DIRECTIONS
from keyer_host import key_image
from keyer_params import NODE_HELP, PARAMS, build_parameters, default_value, method_label

PREVIEW_SIZE = (500, 500)


def params_from_state(state):
    """KeyingParameters from the GUI's plain-value state dict."""
    values = {name: state[name] for name in PARAMS if name in state}
    return build_parameters(**values)


class KeyingApp:
    def __init__(self, root):
        self.root = root
        self.root.title("Simple Color Keyer")
        self.root.geometry("1000x760")

        # State
        self.original_image = None # Full Res
        self.preview_image = None  # Small Res for UI
        self.key_color_hex = default_value("key_color")

        self.setup_ui()

    def setup_ui(self):
        # Top Bar
        top_frame = tk.Frame(self.root, pady=10)
        top_frame.pack(fill=tk.X)
        tk.Button(top_frame, text="Open Image", command=self.load_image).pack(side=tk.LEFT, padx=10)
        tk.Button(top_frame, text="Save Result", command=self.save_image, bg="#dddddd").pack(side=tk.LEFT, padx=10)
        tk.Button(top_frame, text="Help", command=self.show_help).pack(side=tk.LEFT, padx=10)

        content = tk.Frame(self.root)
        content.pack(fill=tk.BOTH, expand=True)

        # Left Control Panel
        controls = tk.Frame(content, width=300, padx=10, pady=10, relief=tk.RIDGE, borderwidth=2)
        controls.pack(side=tk.LEFT, fill=tk.Y)

        self.btn_color = tk.Button(controls, text="Pick Key Color", bg=self.key_color_hex, command=self.pick_color)
        self.btn_color.pack(fill=tk.X, pady=(0, 10))

        def make_slider(parent, name):
            spec = PARAMS[name]
            var = tk.DoubleVar(value=spec["default"])
            ttk.Label(parent, text=spec["label"]).pack(anchor=tk.W, pady=(6,0))
            ttk.Scale(parent, from_=spec["min"], to=spec["max"], variable=var,
                      command=lambda v: self.trigger_update()).pack(fill=tk.X)
            return var

        self.vars = {}
        self.vars["tolerance"] = make_slider(controls, "tolerance")
        self.vars["gain"] = make_slider(controls, "gain")

        ttk.Label(controls, text=PARAMS["method"]["label"]).pack(anchor=tk.W, pady=(10,0))
        self.vars["method"] = tk.StringVar(value=default_value("method"))
        ttk.OptionMenu(controls, self.vars["method"], default_value("method"),
                       *PARAMS["method"]["choices"], command=lambda _: self.trigger_update()).pack(fill=tk.X)

        self.vars["invert"] = tk.BooleanVar(value=False)
        ttk.Checkbutton(controls, text="Invert", variable=self.vars["invert"], command=self.trigger_update).pack(anchor=tk.W, pady=5)
        self.var_maskonly = tk.BooleanVar(value=False)
        ttk.Checkbutton(controls, text="Show Mask Only", variable=self.var_maskonly, command=self.trigger_update).pack(anchor=tk.W)

        ttk.Label(controls, text="6-Direction Color Expansion").pack(anchor=tk.W, pady=(12,0))
        for name in DIRECTIONS:
            self.vars[name] = make_slider(controls, name)

        # Right Image Panel
        self.canvas_frame = tk.Frame(content, bg="#333333")
        self.canvas_frame.pack(side=tk.RIGHT, fill=tk.BOTH, expand=True)
        self.canvas = tk.Canvas(self.canvas_frame, bg="#333333", highlightthickness=0)
        self.canvas.pack(fill=tk.BOTH, expand=True, padx=10, pady=10)

        # Status
        self.status_var = tk.StringVar(value="Ready. Load an image to begin.")
        tk.Label(self.root, textvariable=self.status_var, relief=tk.SUNKEN, anchor=tk.W).pack(side=tk.BOTTOM, fill=tk.X)

    # --- Logic ---

    def show_help(self):
        messagebox.showinfo("Simple Color Keyer", NODE_HELP)

    def pick_color(self):
        color = colorchooser.askcolor(color=self.key_color_hex, title="Select Key Color")
        if color[1]:
            self.key_color_hex = color[1]
            self.btn_color.configure(bg=self.key_color_hex)
            self.trigger_update()

    def load_image(self):
        path = filedialog.askopenfilename(filetypes=[("Images", "*.png *.jpg *.jpeg")])
        if not path: return

        try:
            self.original_image = Image.open(path).convert("RGB")
        except OSError as e:
            messagebox.showerror("Error", f"Failed to load image: {e}")
            return

        self.preview_image = self.original_image.copy()
        self.preview_image.thumbnail(PREVIEW_SIZE)
        self.status_var.set(f"Loaded {path}")
        self.trigger_update()

    def get_state(self):
        state = {name: var.get() for name, var in self.vars.items()}
        state["key_color"] = self.key_color_hex
        return state

    def trigger_update(self):
        if not self.preview_image: return

        self.status_var.set("Processing preview...")
        self.root.update_idletasks() # Force UI refresh

        try:
            params = params_from_state(self.get_state())
        except ValueError as e:
            self.status_var.set(f"Invalid settings: {e}")
            return

        res_img = key_image(self.preview_image, params, mask_only=self.var_maskonly.get())
        self.display_image(res_img)
        self.status_var.set(f"Preview Updated ({method_label(params.method)}).")

    def display_image(self, img):
        self.tk_img = ImageTk.PhotoImage(img)

        # Center image in canvas
        cw = self.canvas.winfo_width()
        ch = self.canvas.winfo_height()

        self.canvas.delete("all")
        self.canvas.create_image(cw//2, ch//2, image=self.tk_img)

    def save_image(self):
        if not self.original_image: return

        path = filedialog.asksaveasfilename(defaultextension=".png", filetypes=[("PNG", "*.png")])
        if not path: return

        try:
            params = params_from_state(self.get_state())
        except ValueError as e:
            messagebox.showerror("Error", str(e))
            return

        self.status_var.set("Processing Full Resolution... This may take a while.")
        threading.Thread(
            target=self.bg_save,
            args=(path, params, self.var_maskonly.get()),
            daemon=True,
        ).start()

    def bg_save(self, path, params, mask_only):
        error = None
        try:
            final_img = key_image(self.original_image, params, mask_only=mask_only)
            final_img.save(path)
        except Exception as e:
            # Worker thread: hand every failure back to the UI thread
            error = e
        self.root.after(0, self.save_finished, path, error)

    def save_finished(self, path, error):
        if error:
            messagebox.showerror("Error", str(error))
            self.status_var.set("Error saving.")
        else:
            messagebox.showinfo("Success", f"Saved to {path}")
            self.status_var.set("Saved.")


def main():
    root = tk.Tk()
    KeyingApp(root)
    root.mainloop()


if __name__ == "__main__":
    main()
