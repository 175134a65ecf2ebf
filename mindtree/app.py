"""Main MindTree application."""

import logging
import sys
from typing import Optional

import gi
gi.require_version("Gtk", "4.0")
gi.require_version("Adw", "1")
gi.require_version("Gdk", "4.0")
from gi.repository import Gtk, Gio, GLib, Adw

from mindtree import __version__, __app_id__
from mindtree.canvas import MindTreeCanvas
from mindtree.editor import Editor
from mindtree.model import Node
from mindtree.storage import Storage, DEFAULT_SESSION
from mindtree.widgets import InspectorPanel, NotesPanel

logger = logging.getLogger(__name__)


class MindTreeWindow(Adw.ApplicationWindow):
    """Main application window."""

    def __init__(self, app: Adw.Application, storage: Storage):
        super().__init__(application=app)
        self.storage = storage

        settings = storage.load_settings()
        self.editor = Editor.from_session(storage.load_session(DEFAULT_SESSION), settings=settings)
        self.editor.on_changed = self._on_editor_changed

        self.set_title("MindTree")
        self.set_default_size(1400, 900)

        self._build_ui()
        self._setup_shortcuts()

        self._autosave_timeout_id: Optional[int] = None
        self._setup_autosave()

        self.connect("close-request", self._on_close_request)
        self._on_editor_changed()

    def _build_ui(self):
        """Build the main UI layout."""
        main_box = Gtk.Box(orientation=Gtk.Orientation.VERTICAL)
        main_box.append(self._build_header())

        self.main_paned = Gtk.Paned(orientation=Gtk.Orientation.HORIZONTAL)
        self.main_paned.set_vexpand(True)

        # Canvas + notes
        self.canvas_paned = Gtk.Paned(orientation=Gtk.Orientation.HORIZONTAL)

        self.canvas = MindTreeCanvas(self.editor)
        self.canvas.on_edit_requested = self._edit_node_text

        canvas_frame = Gtk.Frame()
        canvas_frame.set_child(self.canvas)
        self.canvas_paned.set_start_child(canvas_frame)
        self.canvas_paned.set_shrink_start_child(False)

        self.notes_panel = NotesPanel(self.editor)
        self.canvas_paned.set_end_child(self.notes_panel)
        self.canvas_paned.set_shrink_end_child(False)
        self.canvas_paned.set_resize_end_child(False)

        self.main_paned.set_start_child(self.canvas_paned)

        # Inspector
        self.inspector = InspectorPanel(self.editor)
        self.main_paned.set_end_child(self.inspector)
        self.main_paned.set_shrink_end_child(False)
        self.main_paned.set_resize_end_child(False)

        self.toast_overlay = Adw.ToastOverlay()
        self.toast_overlay.set_child(self.main_paned)
        main_box.append(self.toast_overlay)

        self.set_content(main_box)

    def _build_header(self) -> Adw.HeaderBar:
        """Build the header bar."""
        header = Adw.HeaderBar()

        menu = Gio.Menu()
        view_section = Gio.Menu()
        view_section.append("Preview Mode", "win.toggle-preview")
        view_section.append("Toggle Grid", "win.toggle-grid")
        view_section.append("Toggle Snapping", "win.toggle-snap")
        view_section.append("Zoom to 100%", "win.zoom-100")
        menu.append_section(None, view_section)

        help_section = Gio.Menu()
        help_section.append("About MindTree", "win.show-about")
        menu.append_section(None, help_section)

        menu_btn = Gtk.MenuButton()
        menu_btn.set_icon_name("open-menu-symbolic")
        menu_btn.set_tooltip_text("Menu")
        popover = Gtk.PopoverMenu()
        popover.set_menu_model(menu)
        menu_btn.set_popover(popover)
        header.pack_start(menu_btn)

        # Edit buttons
        self.buttons = {}
        for name, icon, tooltip in (
            ("undo", "edit-undo-symbolic", "Undo (Ctrl+Z)"),
            ("redo", "edit-redo-symbolic", "Redo (Ctrl+Shift+Z)"),
            ("cut", "edit-cut-symbolic", "Cut (Ctrl+X)"),
            ("copy", "edit-copy-symbolic", "Copy (Ctrl+C)"),
            ("paste", "edit-paste-symbolic", "Paste (Ctrl+V)"),
        ):
            btn = Gtk.Button()
            btn.set_icon_name(icon)
            btn.set_tooltip_text(tooltip)
            btn.set_action_name(f"win.{name}")
            header.pack_start(btn)
            self.buttons[name] = btn

        self.title_label = Gtk.Label(label="MindTree")
        self.title_label.add_css_class("title")
        header.set_title_widget(self.title_label)

        notes_btn = Gtk.Button()
        notes_btn.set_icon_name("accessories-text-editor-symbolic")
        notes_btn.set_tooltip_text("Notes (Ctrl+Return)")
        notes_btn.set_action_name("win.open-notes")
        header.pack_end(notes_btn)

        add_btn = Gtk.Button()
        add_btn.set_icon_name("list-add-symbolic")
        add_btn.set_tooltip_text("Add Child (Tab)")
        add_btn.set_action_name("win.add-child")
        header.pack_end(add_btn)

        return header

    def _setup_shortcuts(self):
        """Setup window actions and keyboard shortcuts.

        Editing keys (Tab, Delete, Ctrl+Z, Ctrl+C ...) are handled by the
        canvas so that text entries keep their own bindings.
        """
        actions = [
            ("undo", self.editor.undo, None),
            ("redo", self.editor.redo, None),
            ("cut", self.editor.cut, None),
            ("copy", self.editor.copy, None),
            ("paste", self.editor.paste, None),
            ("add-child", self._add_child, None),
            ("save", self._save, "<Control>s"),
            ("open-notes", self._open_notes_for_selected, "<Control>Return"),
            ("toggle-preview", self.editor.toggle_preview_mode, "<Control>p"),
            ("toggle-grid", self.canvas.toggle_grid, None),
            ("toggle-snap", self._toggle_snap, None),
            ("zoom-100", self.canvas.zoom_to_100, "<Control>1"),
            ("zoom-in", self.canvas.zoom_in, "<Control>plus"),
            ("zoom-out", self.canvas.zoom_out, "<Control>minus"),
            ("show-about", self._show_about, None),
            ("quit", lambda: self.close(), "<Control>q"),
        ]

        self.actions = {}
        for name, callback, accel in actions:
            action = Gio.SimpleAction.new(name, None)
            action.connect("activate", lambda a, p, cb=callback: cb())
            self.add_action(action)
            self.actions[name] = action

            if accel:
                self.get_application().set_accels_for_action(f"win.{name}", [accel])

        self.get_application().set_accels_for_action("win.zoom-in", ["<Control>plus", "<Control>equal"])

    def _setup_autosave(self):
        """Setup auto-save timer."""
        interval = self.editor.settings.autosave_interval

        if self._autosave_timeout_id:
            GLib.source_remove(self._autosave_timeout_id)
            self._autosave_timeout_id = None

        if interval > 0:
            self._autosave_timeout_id = GLib.timeout_add_seconds(interval, self._do_autosave)

    def _do_autosave(self) -> bool:
        """Perform auto-save."""
        self._save()
        return True  # Continue timer

    def _save(self):
        self.notes_panel.save_if_pending()
        # A half-finished drag would persist its coalesced entry
        if self.editor.history.is_coalescing:
            return
        self.storage.save_session(self.editor.snapshot(), DEFAULT_SESSION)
        logger.debug("Session saved")

    def _on_close_request(self, window) -> bool:
        self.canvas.coordinator.blur()
        self._save()
        return False

    # ==================== Editor ====================

    def _on_editor_changed(self):
        """Refresh everything that renders editor state."""
        editor = self.editor
        self.actions["undo"].set_enabled(editor.can_undo)
        self.actions["redo"].set_enabled(editor.can_redo)
        self.actions["cut"].set_enabled(editor.can_cut)
        self.actions["copy"].set_enabled(editor.can_copy)
        self.actions["paste"].set_enabled(editor.can_paste)

        undo_label = editor.history.undo_description
        redo_label = editor.history.redo_description
        self.buttons["undo"].set_tooltip_text(f"Undo {undo_label}" if undo_label else "Undo")
        self.buttons["redo"].set_tooltip_text(f"Redo {redo_label}" if redo_label else "Redo")

        self.title_label.set_label("MindTree (Preview)" if editor.is_preview_mode else "MindTree")

        self.inspector.refresh()
        self.notes_panel.refresh()
        self.canvas.queue_draw()

    def _add_child(self):
        selected = self.editor.selection.first
        if selected:
            self.editor.add_child(selected)

    def _toggle_snap(self):
        engine = self.canvas.coordinator.snap_engine
        engine.enabled = not engine.enabled
        self.editor.settings.snap_enabled = engine.enabled
        self.storage.save_settings(self.editor.settings)
        self._show_toast("Snapping on" if engine.enabled else "Snapping off")

    def _open_notes_for_selected(self):
        self.editor.toggle_notes_panel(self.editor.selection.first)

    def _edit_node_text(self, node: Node):
        """Prompt for a node's text."""
        dialog = Adw.MessageDialog(
            transient_for=self,
            heading="Edit Topic",
        )

        entry = Gtk.Entry()
        entry.set_text(node.text)
        entry.set_margin_start(16)
        entry.set_margin_end(16)
        dialog.set_extra_child(entry)

        dialog.add_response("cancel", "Cancel")
        dialog.add_response("save", "Save")
        dialog.set_default_response("save")
        dialog.connect("response", lambda d, r: self._confirm_edit(r, node.id, entry.get_text()))
        entry.connect("activate", lambda e: dialog.response("save"))
        dialog.present()
        entry.grab_focus()

    def _confirm_edit(self, response: str, node_id: str, text: str):
        if response == "save" and text.strip():
            self.editor.set_text(node_id, text.strip())

    def _show_about(self):
        """Show about dialog."""
        about = Adw.AboutWindow(
            transient_for=self,
            application_name="MindTree",
            application_icon="applications-graphics",
            developer_name="MindTree Project",
            version=__version__,
            license_type=Gtk.License.MIT_X11,
            comments="A tree-document mind map editor",
        )
        about.present()

    def _show_toast(self, message: str):
        """Show a toast notification."""
        toast = Adw.Toast(title=message)
        toast.set_timeout(3)
        self.toast_overlay.add_toast(toast)


class MindTreeApp(Adw.Application):
    """Main application class."""

    def __init__(self):
        super().__init__(
            application_id=__app_id__,
            flags=Gio.ApplicationFlags.DEFAULT_FLAGS
        )
        self.storage: Optional[Storage] = None
        self.window: Optional[MindTreeWindow] = None

    def do_startup(self):
        """Initialize application."""
        Adw.Application.do_startup(self)
        self.storage = Storage()

    def do_activate(self):
        """Activate application."""
        if not self.window:
            self.window = MindTreeWindow(self, self.storage)

        self.window.present()

    def do_shutdown(self):
        """Shutdown application."""
        if self.storage:
            self.storage.close()

        Adw.Application.do_shutdown(self)


def main() -> int:
    """Application entry point."""
    app = MindTreeApp()
    return app.run(sys.argv)


if __name__ == "__main__":
    sys.exit(main())
