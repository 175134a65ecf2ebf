"""Canvas widget for rendering the document tree and capturing gestures."""

import math
from typing import Optional, Callable, Tuple

import gi

gi.require_version("Gtk", "4.0")
gi.require_version("Gdk", "4.0")
from gi.repository import Gtk, Gdk

import cairo

from mindtree.editor import Editor
from mindtree.interaction import InteractionCoordinator, GestureState
from mindtree.model import Node, EdgeType, Position
from mindtree.session import ViewState


def parse_hex_color(value: Optional[str]) -> Optional[Tuple[float, float, float]]:
    """Parse '#rrggbb' into a cairo RGB triple."""
    if not value:
        return None
    try:
        color = value.lstrip('#')
        r = int(color[0:2], 16) / 255
        g = int(color[2:4], 16) / 255
        b = int(color[4:6], 16) / 255
    except (ValueError, IndexError):
        return None
    return (r, g, b)


class MindTreeCanvas(Gtk.DrawingArea):
    """Custom canvas widget rendering an `Editor`'s document."""

    COLORS = {
        'bg_primary': (0.98, 0.98, 0.98),
        'grid_dots': (0.85, 0.85, 0.85),
        'surface': (0.878, 0.878, 0.878),         # #e0e0e0
        'border_subtle': (0.7, 0.7, 0.7),
        'border_active': (0.2, 0.45, 0.9),
        'drop_target': (0.15, 0.7, 0.35),
        'text_primary': (0.0, 0.0, 0.0),
        'text_muted': (0.45, 0.45, 0.45),
        'edge': (0.627, 0.627, 0.627),            # #a0a0a0
        'guide': (0.95, 0.3, 0.55),
        'root_node': (0.82, 0.87, 0.97),
    }

    NODE_PADDING = 12
    GRID_SIZE = 30
    MIN_ZOOM = 0.25
    MAX_ZOOM = 4.0

    def __init__(self, editor: Editor):
        super().__init__()

        self.editor = editor
        self.coordinator = InteractionCoordinator(editor)

        # Panning state
        self.is_panning = False
        self.pan_start_x = 0.0
        self.pan_start_y = 0.0
        self.drag_start_x = 0.0
        self.drag_start_y = 0.0
        self.last_mouse_x = 0.0
        self.last_mouse_y = 0.0
        self.hovered_node_id: Optional[str] = None

        self.show_grid = True

        # Callbacks
        self.on_edit_requested: Optional[Callable[[Node], None]] = None

        self.set_draw_func(self._on_draw)
        self.set_focusable(True)
        self.set_can_focus(True)
        self.set_hexpand(True)
        self.set_vexpand(True)

        self._setup_event_controllers()

    def _setup_event_controllers(self):
        """Setup mouse and keyboard event controllers."""
        click_ctrl = Gtk.GestureClick()
        click_ctrl.set_button(1)
        click_ctrl.connect("pressed", self._on_click)
        self.add_controller(click_ctrl)

        motion_ctrl = Gtk.EventControllerMotion()
        motion_ctrl.connect("motion", self._on_motion)
        motion_ctrl.connect("leave", self._on_leave)
        self.add_controller(motion_ctrl)

        scroll_ctrl = Gtk.EventControllerScroll()
        scroll_ctrl.set_flags(Gtk.EventControllerScrollFlags.BOTH_AXES)
        scroll_ctrl.connect("scroll", self._on_scroll)
        self.add_controller(scroll_ctrl)

        key_ctrl = Gtk.EventControllerKey()
        key_ctrl.connect("key-pressed", self._on_key_pressed)
        self.add_controller(key_ctrl)

        focus_ctrl = Gtk.EventControllerFocus()
        focus_ctrl.connect("leave", lambda c: self.coordinator.blur())
        self.add_controller(focus_ctrl)

        drag_ctrl = Gtk.GestureDrag()
        drag_ctrl.set_button(1)
        drag_ctrl.connect("drag-begin", self._on_drag_begin)
        drag_ctrl.connect("drag-update", self._on_drag_update)
        drag_ctrl.connect("drag-end", self._on_drag_end)
        self.add_controller(drag_ctrl)

    # ==================== Coordinates ====================

    @property
    def zoom(self) -> float:
        return self.editor.view_state.scale

    def to_document(self, x: float, y: float) -> Position:
        """Convert widget coordinates to document space."""
        view = self.editor.view_state
        return Position((x - view.x) / view.scale, (y - view.y) / view.scale)

    def _set_view(self, x: float, y: float, scale: float):
        self.editor.set_view_state(ViewState(x, y, scale))
        self.queue_draw()

    # ==================== Drawing ====================

    def _on_draw(self, area, cr, width, height):
        """Main drawing function."""
        cr.save()

        cr.set_source_rgb(*self.COLORS['bg_primary'])
        cr.paint()

        if self.show_grid:
            self._draw_grid(cr, width, height)

        view = self.editor.view_state
        cr.translate(view.x, view.y)
        cr.scale(view.scale, view.scale)

        document = self.editor.document
        self._draw_edges(cr, document)

        for node in self.editor.visible_nodes():
            self._draw_node(cr, node)

        self._draw_guides(cr, width, height)

        cr.restore()

    def _draw_grid(self, cr, width: float, height: float):
        """Draw dot grid pattern."""
        cr.save()
        cr.set_source_rgb(*self.COLORS['grid_dots'])

        view = self.editor.view_state
        effective_grid = self.GRID_SIZE * view.scale
        offset_x = view.x % effective_grid
        offset_y = view.y % effective_grid

        x = offset_x
        while x < width:
            y = offset_y
            while y < height:
                cr.arc(x, y, 1.2, 0, 2 * math.pi)
                cr.fill()
                y += effective_grid
            x += effective_grid

        cr.restore()

    def _center(self, node: Node) -> Tuple[float, float]:
        size = node.footprint(self.editor.settings.default_size)
        return node.position.x + size.width / 2, node.position.y + size.height / 2

    def _draw_edges(self, cr, parent: Node):
        """Draw the incoming edge of every visible child."""
        if parent.is_collapsed:
            return

        start_x, start_y = self._center(parent)
        for child in parent.children:
            end_x, end_y = self._center(child)
            edge = child.edge_style

            cr.save()
            cr.set_source_rgb(*self.COLORS['edge'])
            cr.set_line_width(2)
            cr.set_line_cap(cairo.LINE_CAP_ROUND)
            if edge is not None and edge.dashed:
                cr.set_dash([6.0, 4.0])

            cr.move_to(start_x, start_y)
            if edge is not None and edge.type == EdgeType.STRAIGHT:
                cr.line_to(end_x, end_y)
            else:
                cr.curve_to(start_x + 50, start_y, end_x - 50, end_y, end_x, end_y)
            cr.stroke()
            cr.restore()

            if child.edge_label:
                self._draw_edge_label(cr, child.edge_label,
                                      (start_x + end_x) / 2, (start_y + end_y) / 2)

            self._draw_edges(cr, child)

    def _draw_edge_label(self, cr, label: str, x: float, y: float):
        cr.save()
        cr.select_font_face("Sans", cairo.FONT_SLANT_NORMAL, cairo.FONT_WEIGHT_NORMAL)
        cr.set_font_size(11)
        extents = cr.text_extents(label)

        cr.set_source_rgb(*self.COLORS['bg_primary'])
        cr.rectangle(x - extents.width / 2 - 4, y - extents.height / 2 - 3,
                     extents.width + 8, extents.height + 6)
        cr.fill()

        cr.set_source_rgb(*self.COLORS['text_muted'])
        cr.move_to(x - extents.width / 2, y + extents.height / 2)
        cr.show_text(label)
        cr.restore()

    def _draw_node(self, cr, node: Node):
        """Draw a single node."""
        size = node.footprint(self.editor.settings.default_size)
        x, y, w, h = node.position.x, node.position.y, size.width, size.height
        is_selected = node.id in self.editor.selection
        is_drop_target = node.id == self.editor.drop_target_id
        is_hovered = node.id == self.hovered_node_id

        cr.save()

        self._draw_rounded_rect(cr, x, y, w, h, 6)
        style = node.style
        bg = parse_hex_color(style.background_color if style else None)
        if bg is None:
            bg = self.COLORS['root_node'] if node.is_root else self.COLORS['surface']
        cr.set_source_rgb(*bg)
        cr.fill_preserve()

        if is_drop_target:
            cr.set_source_rgb(*self.COLORS['drop_target'])
            cr.set_line_width(3)
        elif is_selected:
            cr.set_source_rgb(*self.COLORS['border_active'])
            cr.set_line_width(2)
        elif is_hovered:
            cr.set_source_rgb(*self.COLORS['text_muted'])
            cr.set_line_width(1.5)
        else:
            cr.set_source_rgb(*self.COLORS['border_subtle'])
            cr.set_line_width(1)
        cr.stroke()

        # Text, prefixed with the icon
        text = f"{node.icon} {node.text}" if node.icon else node.text
        fg = parse_hex_color(style.color if style else None) or self.COLORS['text_primary']
        font_size = (style.font_size if style and style.font_size else
                     self.editor.settings.default_font_size)

        cr.set_source_rgb(*fg)
        cr.select_font_face("Sans", cairo.FONT_SLANT_NORMAL,
                            cairo.FONT_WEIGHT_BOLD if node.is_root else cairo.FONT_WEIGHT_NORMAL)
        cr.set_font_size(font_size)

        extents = cr.text_extents(text)
        max_width = w - self.NODE_PADDING * 2
        while extents.width > max_width and len(text) > 3:
            text = text[:-4] + "..."
            extents = cr.text_extents(text)

        cr.move_to(x + self.NODE_PADDING, y + h / 2 + extents.height / 2 - 2)
        cr.show_text(text)

        # Collapsed indicator with hidden child count
        if node.is_collapsed and node.children:
            indicator_x = x + w - 14
            indicator_y = y + h / 2
            cr.set_source_rgb(*self.COLORS['text_muted'])
            cr.set_line_width(1.5)
            cr.move_to(indicator_x - 4, indicator_y)
            cr.line_to(indicator_x + 4, indicator_y)
            cr.move_to(indicator_x, indicator_y - 4)
            cr.line_to(indicator_x, indicator_y + 4)
            cr.stroke()
            cr.set_font_size(9)
            cr.move_to(indicator_x - 4, indicator_y + 14)
            cr.show_text(str(len(node.children)))

        # Notes indicator
        if node.notes:
            cr.set_source_rgba(*self.COLORS['border_active'], 0.8)
            cr.arc(x + w - 8, y + 8, 4, 0, 2 * math.pi)
            cr.fill()

        cr.restore()

    def _draw_guides(self, cr, width: float, height: float):
        """Draw active alignment guides across the visible area."""
        guides = self.editor.guides
        if not guides.active:
            return

        top_left = self.to_document(0, 0)
        bottom_right = self.to_document(width, height)

        cr.save()
        cr.set_source_rgb(*self.COLORS['guide'])
        cr.set_line_width(1 / self.zoom)
        cr.set_dash([4.0 / self.zoom, 4.0 / self.zoom])
        if guides.x is not None:
            cr.move_to(guides.x, top_left.y)
            cr.line_to(guides.x, bottom_right.y)
        if guides.y is not None:
            cr.move_to(top_left.x, guides.y)
            cr.line_to(bottom_right.x, guides.y)
        cr.stroke()
        cr.restore()

    def _draw_rounded_rect(self, cr, x: float, y: float, w: float, h: float, radius: float):
        """Draw a rounded rectangle path."""
        cr.new_path()
        cr.arc(x + w - radius, y + radius, radius, -math.pi / 2, 0)
        cr.arc(x + w - radius, y + h - radius, radius, 0, math.pi / 2)
        cr.arc(x + radius, y + h - radius, radius, math.pi / 2, math.pi)
        cr.arc(x + radius, y + radius, radius, math.pi, 3 * math.pi / 2)
        cr.close_path()

    # ==================== Pointer ====================

    def _on_click(self, gesture, n_press, x, y):
        """Grab focus; a double click edits the node's text."""
        self.grab_focus()
        if n_press == 2:
            node = self.coordinator.node_at(self.to_document(x, y))
            if node is not None and self.on_edit_requested:
                self.on_edit_requested(node)

    def _on_motion(self, controller, x, y):
        """Track hover."""
        self.last_mouse_x = x
        self.last_mouse_y = y

        node = self.coordinator.node_at(self.to_document(x, y))
        new_hover = node.id if node is not None else None
        if new_hover != self.hovered_node_id:
            self.hovered_node_id = new_hover
            self.queue_draw()

    def _on_leave(self, controller):
        """Handle mouse leaving canvas."""
        if self.hovered_node_id:
            self.hovered_node_id = None
            self.queue_draw()

    def _on_scroll(self, controller, dx, dy):
        """Ctrl+scroll zooms towards the pointer."""
        state = controller.get_current_event_state()
        if not state & Gdk.ModifierType.CONTROL_MASK:
            return False

        view = self.editor.view_state
        zoom_factor = 1.1 if dy < 0 else 0.9
        new_zoom = max(self.MIN_ZOOM, min(self.MAX_ZOOM, view.scale * zoom_factor))
        if new_zoom != view.scale:
            mouse_x, mouse_y = self.last_mouse_x, self.last_mouse_y
            self._set_view(
                mouse_x - (mouse_x - view.x) * (new_zoom / view.scale),
                mouse_y - (mouse_y - view.y) * (new_zoom / view.scale),
                new_zoom,
            )
        return True

    def _on_drag_begin(self, gesture, start_x, start_y):
        """Start of a drag: either a node gesture or a pan."""
        self.drag_start_x = start_x
        self.drag_start_y = start_y
        shift = bool(gesture.get_current_event_state() & Gdk.ModifierType.SHIFT_MASK)

        node_id = None
        if not self.editor.is_preview_mode:
            node_id = self.coordinator.pointer_down(self.to_document(start_x, start_y), shift=shift)
        if node_id is None:
            self.is_panning = True
            self.pan_start_x = self.editor.view_state.x
            self.pan_start_y = self.editor.view_state.y
        else:
            self.is_panning = False
        self.queue_draw()

    def _on_drag_update(self, gesture, offset_x, offset_y):
        """Drag movement: move the node or pan the view."""
        if self.is_panning:
            self._set_view(self.pan_start_x + offset_x, self.pan_start_y + offset_y, self.zoom)
            return
        point = self.to_document(self.drag_start_x + offset_x, self.drag_start_y + offset_y)
        self.coordinator.pointer_move(point, zoom=self.zoom)

    def _on_drag_end(self, gesture, offset_x, offset_y):
        """End of drag."""
        if self.is_panning:
            self.is_panning = False
            return
        self.coordinator.pointer_up()

    # ==================== Keyboard ====================

    def _on_key_pressed(self, controller, keyval, keycode, state):
        """Map keys to editor commands."""
        ctrl = state & Gdk.ModifierType.CONTROL_MASK
        shift = state & Gdk.ModifierType.SHIFT_MASK
        selected = self.editor.selection.first

        if keyval == Gdk.KEY_Escape:
            if self.coordinator.state != GestureState.IDLE:
                self.coordinator.cancel()
            else:
                self.editor.clear_selection()
            return True

        # No commands while a drag owns the history
        if self.editor.is_preview_mode or self.coordinator.state == GestureState.DRAGGING:
            return False

        if keyval == Gdk.KEY_Tab:
            if selected:
                self.editor.add_child(selected)
            return True
        elif keyval in (Gdk.KEY_Delete, Gdk.KEY_BackSpace):
            self.editor.delete_selected()
            return True
        elif keyval == Gdk.KEY_F2:
            node = self.editor.find(selected)
            if node is not None and self.on_edit_requested:
                self.on_edit_requested(node)
            return True
        elif keyval == Gdk.KEY_space and ctrl:
            if selected:
                self.editor.toggle_collapse(selected)
            return True
        elif keyval == Gdk.KEY_z and ctrl and not shift:
            self.editor.undo()
            return True
        elif (keyval == Gdk.KEY_z and ctrl and shift) or (keyval == Gdk.KEY_y and ctrl):
            self.editor.redo()
            return True
        elif keyval == Gdk.KEY_c and ctrl:
            self.editor.copy()
            return True
        elif keyval == Gdk.KEY_x and ctrl:
            self.editor.cut()
            return True
        elif keyval == Gdk.KEY_v and ctrl:
            self.editor.paste()
            return True

        return False

    # ==================== View ====================

    def zoom_in(self):
        """Increase zoom level."""
        view = self.editor.view_state
        self._set_view(view.x, view.y, min(self.MAX_ZOOM, view.scale * 1.2))

    def zoom_out(self):
        """Decrease zoom level."""
        view = self.editor.view_state
        self._set_view(view.x, view.y, max(self.MIN_ZOOM, view.scale / 1.2))

    def zoom_to_100(self):
        view = self.editor.view_state
        self._set_view(view.x, view.y, 1.0)

    def toggle_grid(self):
        self.show_grid = not self.show_grid
        self.queue_draw()
