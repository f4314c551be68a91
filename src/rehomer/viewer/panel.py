"""
Viewer Panel - live outline of a watched model.

Polls a ModelWatcher every frame. When the model or one of its scripts
changes on disk the model is reconverted and the tree and dependency table
are rebuilt.
"""

import logging

import dearpygui.dearpygui as dpg

from .outline import dependency_rows, outline_rows
from .watcher import ModelWatcher

logger = logging.getLogger(__name__)

# Theme colors
ACCENT = (0, 212, 255, 255)
MUTED = (136, 136, 136, 255)
ERROR = (255, 100, 100, 255)
KIND_COLORS = {
    "node": (220, 220, 220, 255),
    "link": (255, 200, 80, 255),
    "geometry": (150, 200, 255, 255),
    "material": (100, 255, 100, 255),
    "spatial": MUTED,
}


class ViewerPanel:
    """Model tree plus dependency table for one watched model."""

    TAG = "model_viewer"
    STATUS_TAG = "model_viewer_status"
    TREE_TAG = "model_viewer_tree"
    DEPS_TAG = "model_viewer_deps"

    def __init__(self, watcher: ModelWatcher, width: int = 700, height: int = 600, pos: tuple = (10, 30)):
        self.watcher = watcher
        self.width = width
        self.height = height
        self.pos = pos
        self._create_panel()

    def _create_panel(self):
        """Create the panel window."""
        with dpg.window(
            label=f"Model: {self.watcher.name}",
            tag=self.TAG,
            width=self.width,
            height=self.height,
            pos=self.pos,
        ):
            dpg.add_text("Waiting for model...", tag=self.STATUS_TAG, color=MUTED)
            dpg.add_button(label="Reconvert", callback=self._on_reconvert)
            dpg.add_separator()

            dpg.add_text("Scene", color=ACCENT)
            with dpg.child_window(tag=self.TREE_TAG, height=300, border=True):
                pass

            dpg.add_text("Dependencies", color=ACCENT)
            with dpg.table(tag=self.DEPS_TAG, header_row=True, resizable=True,
                           borders_innerH=True, borders_outerH=True):
                dpg.add_table_column(label="Original")
                dpg.add_table_column(label="Current")
                dpg.add_table_column(label="Uses", width_fixed=True)
                dpg.add_table_column(label="Source")

    def update(self):
        """Per-frame poll."""
        if self.watcher.poll():
            self.refresh()
        elif self.watcher.last_error:
            dpg.set_value(self.STATUS_TAG, self.watcher.last_error)
            dpg.configure_item(self.STATUS_TAG, color=ERROR)

    def _on_reconvert(self):
        if self.watcher.load_model() is not None:
            self.refresh()

    def refresh(self):
        """Rebuild the tree and table from the watcher's current model."""
        info = self.watcher.model
        if info is None:
            return

        dpg.set_value(self.STATUS_TAG, f"{info.model_name}: {len(info.get_dependencies())} dependencies")
        dpg.configure_item(self.STATUS_TAG, color=MUTED)

        dpg.delete_item(self.TREE_TAG, children_only=True)
        for row in outline_rows(info.model_root):
            dpg.add_text(row.text(), parent=self.TREE_TAG, color=KIND_COLORS.get(row.kind, MUTED))

        # Keep the columns, drop the rows
        dpg.delete_item(self.DEPS_TAG, children_only=True, slot=1)
        for values in dependency_rows(info):
            with dpg.table_row(parent=self.DEPS_TAG):
                for value in values:
                    dpg.add_text(value)
        logger.debug("Viewer refreshed: %s", info.model_name)


class ViewerApp:
    """Viewport and frame loop around one ViewerPanel."""

    def __init__(self, watcher: ModelWatcher, width: int = 760, height: int = 700):
        self.width = width
        self.height = height

        dpg.create_context()
        dpg.create_viewport(
            title=f"Asset Rehomer - {watcher.name}",
            width=width,
            height=height,
        )
        self.panel = ViewerPanel(watcher, width=width - 40, height=height - 80)

    def show(self):
        """Show the main window."""
        dpg.setup_dearpygui()
        dpg.show_viewport()

    def run(self):
        """Run the main event loop, polling the watcher each frame."""
        while dpg.is_dearpygui_running():
            self.panel.update()
            dpg.render_dearpygui_frame()

    def shutdown(self):
        """Shutdown the application."""
        dpg.destroy_context()
