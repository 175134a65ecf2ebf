"""Side panels for the MindTree window."""

from typing import Optional

import gi

gi.require_version("Gtk", "4.0")
gi.require_version("Adw", "1")
from gi.repository import Gtk, Gdk, GLib, Pango

from mindtree.editor import Editor
from mindtree.icons import palette
from mindtree.model import Node, EdgeType


def _rgba_to_hex(rgba: Gdk.RGBA) -> str:
    return "#{:02x}{:02x}{:02x}".format(
        int(round(rgba.red * 255)), int(round(rgba.green * 255)), int(round(rgba.blue * 255)))


def _hex_to_rgba(value: Optional[str], fallback: str) -> Gdk.RGBA:
    rgba = Gdk.RGBA()
    if not value or not rgba.parse(value):
        rgba.parse(fallback)
    return rgba


def _panel_header(title: str) -> Gtk.Box:
    header = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=8)
    header.set_margin_start(16)
    header.set_margin_end(16)
    header.set_margin_top(12)
    header.set_margin_bottom(12)

    label = Gtk.Label(label=title)
    label.set_hexpand(True)
    label.set_halign(Gtk.Align.START)
    label.add_css_class("heading")
    header.append(label)
    return header


class InspectorPanel(Gtk.Box):
    """Property editor for the first selected node.

    Every control writes through an `Editor` command, so each change is one
    undo step. `refresh()` re-reads the node after any editor change; while it
    runs, control signals are ignored.
    """

    def __init__(self, editor: Editor):
        super().__init__(orientation=Gtk.Orientation.VERTICAL)
        self.editor = editor
        self.current_node: Optional[Node] = None
        self._updating = False

        self.set_size_request(280, -1)
        self.append(_panel_header("INSPECTOR"))
        self.append(Gtk.Separator(orientation=Gtk.Orientation.HORIZONTAL))

        self.empty_label = Gtk.Label(label="No node selected")
        self.empty_label.add_css_class("dim-label")
        self.empty_label.set_vexpand(True)
        self.empty_label.set_valign(Gtk.Align.CENTER)
        self.append(self.empty_label)

        self.content = Gtk.Box(orientation=Gtk.Orientation.VERTICAL, spacing=12)
        self.content.set_margin_start(16)
        self.content.set_margin_end(16)
        self.content.set_margin_top(12)
        self.append(self.content)

        # Text
        self.text_entry = Gtk.Entry()
        self.text_entry.connect("activate", self._on_text_activate)
        self._add_row("Text", self.text_entry)

        # Icons
        icon_box = Gtk.FlowBox()
        icon_box.set_selection_mode(Gtk.SelectionMode.NONE)
        icon_box.set_max_children_per_line(6)
        for name, emoji in palette():
            btn = Gtk.Button(label=emoji)
            btn.set_tooltip_text(name)
            btn.add_css_class("flat")
            btn.connect("clicked", self._on_icon_clicked, emoji)
            icon_box.append(btn)
        self._add_row("Icon", icon_box)

        # Colors
        self.bg_button = Gtk.ColorButton()
        self.bg_button.connect("color-set", self._on_color_set)
        self._add_row("Background", self.bg_button)

        self.fg_button = Gtk.ColorButton()
        self.fg_button.connect("color-set", self._on_color_set)
        self._add_row("Text color", self.fg_button)

        # Font size and width
        self.font_spin = Gtk.SpinButton.new_with_range(8, 72, 1)
        self.font_spin.connect("value-changed", self._on_font_size_changed)
        self._add_row("Font size", self.font_spin)

        self.width_spin = Gtk.SpinButton.new_with_range(40, 800, 10)
        self.width_spin.connect("value-changed", self._on_width_changed)
        self._add_row("Width", self.width_spin)

        # Edge
        self.edge_box = Gtk.Box(orientation=Gtk.Orientation.VERTICAL, spacing=8)
        self.edge_dropdown = Gtk.DropDown.new_from_strings([t.value.capitalize() for t in EdgeType])
        self.edge_dropdown.connect("notify::selected", self._on_edge_type_changed)
        self.edge_box.append(self.edge_dropdown)

        self.dashed_check = Gtk.CheckButton(label="Dashed")
        self.dashed_check.connect("toggled", self._on_dashed_toggled)
        self.edge_box.append(self.dashed_check)

        self.edge_label_entry = Gtk.Entry()
        self.edge_label_entry.set_placeholder_text("Edge label")
        self.edge_label_entry.connect("activate", self._on_edge_label_activate)
        self.edge_box.append(self.edge_label_entry)
        self._add_row("Connection", self.edge_box)

        # Notes
        self.notes_button = Gtk.Button(label="Notes...")
        self.notes_button.connect("clicked", self._on_notes_clicked)
        self.content.append(self.notes_button)

        self.refresh()

    def _add_row(self, title: str, widget: Gtk.Widget):
        label = Gtk.Label(label=title)
        label.set_halign(Gtk.Align.START)
        label.add_css_class("dim-label")
        self.content.append(label)
        self.content.append(widget)

    def refresh(self):
        """Re-read the first selected node into the controls."""
        node = self.editor.find(self.editor.selection.first)
        self.current_node = node
        self.empty_label.set_visible(node is None)
        self.content.set_visible(node is not None)
        if node is None:
            return

        self._updating = True
        try:
            style = node.style
            size = node.footprint(self.editor.settings.default_size)
            edge = node.edge_style

            if not self.text_entry.has_focus():
                self.text_entry.set_text(node.text)
            self.bg_button.set_rgba(_hex_to_rgba(style.background_color if style else None, "#e0e0e0"))
            self.fg_button.set_rgba(_hex_to_rgba(style.color if style else None, "#000000"))
            self.font_spin.set_value(style.font_size if style and style.font_size
                                     else self.editor.settings.default_font_size)
            self.width_spin.set_value(size.width)

            self.edge_box.set_sensitive(not node.is_root)
            edge_type = edge.type if edge and edge.type else EdgeType.CURVED
            self.edge_dropdown.set_selected(list(EdgeType).index(edge_type))
            self.dashed_check.set_active(bool(edge and edge.dashed))
            if not self.edge_label_entry.has_focus():
                self.edge_label_entry.set_text(node.edge_label or "")
        finally:
            self._updating = False

    # ==================== Signal handlers ====================

    def _on_text_activate(self, entry):
        if self.current_node and entry.get_text().strip():
            self.editor.set_text(self.current_node.id, entry.get_text().strip())

    def _on_icon_clicked(self, button, emoji: str):
        if self.current_node:
            self.editor.toggle_icon(self.current_node.id, emoji)

    def _on_color_set(self, button):
        if self._updating or not self.current_node:
            return
        if button is self.bg_button:
            self.editor.set_node_style(self.current_node.id,
                                       background_color=_rgba_to_hex(button.get_rgba()))
        else:
            self.editor.set_node_style(self.current_node.id, color=_rgba_to_hex(button.get_rgba()))

    def _on_font_size_changed(self, spin):
        if self._updating or not self.current_node:
            return
        self.editor.set_node_style(self.current_node.id, font_size=spin.get_value_as_int())

    def _on_width_changed(self, spin):
        if self._updating or not self.current_node:
            return
        self.editor.set_node_size(self.current_node.id, width=spin.get_value())

    def _on_edge_type_changed(self, dropdown, _pspec):
        if self._updating or not self.current_node:
            return
        edge_type = list(EdgeType)[dropdown.get_selected()]
        self.editor.set_edge_style(self.current_node.id, type=edge_type)

    def _on_dashed_toggled(self, check):
        if self._updating or not self.current_node:
            return
        self.editor.set_edge_style(self.current_node.id, dashed=check.get_active())

    def _on_edge_label_activate(self, entry):
        if self.current_node:
            self.editor.set_edge_label(self.current_node.id, entry.get_text().strip() or None)

    def _on_notes_clicked(self, button):
        if self.current_node:
            self.editor.toggle_notes_panel(self.current_node.id)


class NotesPanel(Gtk.Box):
    """Right sidebar for editing the notes of `editor.active_notes_node`."""

    SAVE_DELAY_MS = 1000

    def __init__(self, editor: Editor):
        super().__init__(orientation=Gtk.Orientation.VERTICAL)
        self.editor = editor
        self.current_node_id: Optional[str] = None

        self.set_size_request(350, -1)
        self.append(_panel_header("NOTES"))

        # Node info
        self.node_info = Gtk.Label(label="")
        self.node_info.set_halign(Gtk.Align.START)
        self.node_info.set_margin_start(16)
        self.node_info.set_margin_bottom(8)
        self.node_info.set_ellipsize(Pango.EllipsizeMode.END)
        self.node_info.add_css_class("dim-label")
        self.append(self.node_info)

        self.append(Gtk.Separator(orientation=Gtk.Orientation.HORIZONTAL))

        scrolled = Gtk.ScrolledWindow()
        scrolled.set_vexpand(True)
        scrolled.set_policy(Gtk.PolicyType.AUTOMATIC, Gtk.PolicyType.AUTOMATIC)

        self.text_view = Gtk.TextView()
        self.text_view.set_wrap_mode(Gtk.WrapMode.WORD_CHAR)
        self.text_view.set_left_margin(16)
        self.text_view.set_right_margin(16)
        self.text_view.set_top_margin(16)
        self.text_view.set_bottom_margin(16)

        self.text_buffer = self.text_view.get_buffer()
        self.text_buffer.connect("changed", self._on_text_changed)

        scrolled.set_child(self.text_view)
        self.append(scrolled)

        self.status_label = Gtk.Label(label="")
        self.status_label.set_halign(Gtk.Align.END)
        self.status_label.set_margin_end(16)
        self.status_label.set_margin_top(8)
        self.status_label.set_margin_bottom(8)
        self.status_label.add_css_class("dim-label")
        self.append(self.status_label)

        self._save_timeout_id: Optional[int] = None
        self._pending_save = False

    def refresh(self):
        """Follow `editor.active_notes_node`; hides itself when none is open."""
        node = self.editor.active_notes_node
        self.set_visible(node is not None)
        if node is None:
            self.save_if_pending()
            self.current_node_id = None
            return

        if node.id != self.current_node_id:
            self.save_if_pending()
            self.current_node_id = node.id
            self._load(node)
        elif not self._pending_save:
            # Undo/redo may have changed the notes underneath us
            if self._buffer_text() != (node.notes or ""):
                self._load(node)
        self.node_info.set_label(f"Node: {node.text}")

    def _load(self, node: Node):
        self.text_buffer.handler_block_by_func(self._on_text_changed)
        self.text_buffer.set_text(node.notes or "")
        self.text_buffer.handler_unblock_by_func(self._on_text_changed)
        self.status_label.set_label("")

    def _buffer_text(self) -> str:
        start = self.text_buffer.get_start_iter()
        end = self.text_buffer.get_end_iter()
        return self.text_buffer.get_text(start, end, True)

    def _on_text_changed(self, buffer):
        """Handle text changes - schedule a commit."""
        if not self.current_node_id:
            return

        self._pending_save = True
        self.status_label.set_label("Unsaved changes...")

        if self._save_timeout_id:
            GLib.source_remove(self._save_timeout_id)
        self._save_timeout_id = GLib.timeout_add(self.SAVE_DELAY_MS, self._do_save)

    def _do_save(self) -> bool:
        """Commit the buffer as the node's notes."""
        if not self.current_node_id or not self._pending_save:
            self._save_timeout_id = None
            return False
        if self.editor.history.is_coalescing:
            # A drag owns the history; keep the timer and retry after it
            if self._save_timeout_id is None:
                self._save_timeout_id = GLib.timeout_add(self.SAVE_DELAY_MS, self._do_save)
                return False
            return True

        self._save_timeout_id = None

        self._pending_save = False
        self.editor.set_notes(self.current_node_id, self._buffer_text())
        self.status_label.set_label("Saved")
        return False

    def save_if_pending(self):
        """Force commit if there are pending changes."""
        if self._save_timeout_id:
            GLib.source_remove(self._save_timeout_id)
            self._save_timeout_id = None
        if self._pending_save:
            self._do_save()
