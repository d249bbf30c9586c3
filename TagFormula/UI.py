# UI.py
""""PySide6 user interface for the Tag Formula Calculator.

Structure
---------
- Formula window: chip row with two edit slots, suggestion list, result line
- Settings UI: modal dialog for user preferences

Responsibilities (Formula window)
---------------------------------
- Forward every user event to FormulaSession (the only owner of state)
- Re-render chips, slots, suggestions and result after each change
- Fetch the suggestion catalog once, off the UI thread
- Show evaluation errors and copy the result to the clipboard (Shift + click)

Responsibilities (Settings)
---------------------------
- Load Current Settings and Settings Descriptions via Config_Manager
- Validate user input (e.g. minimum decimal places)
- Save and apply theme changes immediately


Threading Note
--------------
The catalog is fetched in a Worker(QObject) running on a plain thread. The result
(or error) is emitted via a Qt signal and handed to the session back on the UI thread.
"""

import sys
import json
import threading

from PySide6 import QtWidgets
from PySide6.QtCore import Qt, QObject, Signal
import pyperclip

from . import error as E  # Imports error.py as a module
from . import config_manager as config_manager  # Imports config_manager.py as a module
from . import SuggestionEngine as SuggestionEngine
from .FormulaSession import FormulaSession
from .TagEngine import LEFT, RIGHT

TAG_STYLE = "padding: 4px 8px; background-color: #e0e0e0; border-radius: 4px;"
TAG_STYLE_DARK = "padding: 4px 8px; background-color: #2e2e2e; color: white; border-radius: 4px;"
ERROR_STYLE = "color: #d32f2f;"


# Keys that remove a chip from an empty slot or a chip gap
DELETE_KEYS = (Qt.Key.Key_Backspace, Qt.Key.Key_Delete)


def is_shift_pressed(modifiers):
    """""

    Small and simple check, whether shift is held in the modifiers of an event.
    Used for the "Shift + click copies the result" setting.

    """""

    return bool(modifiers & Qt.KeyboardModifier.ShiftModifier)


def copy_requested(setting_value_list, result, shift_held):
    """True if a click on the result should copy it to the clipboard."""
    return bool(result) and setting_value_list.get("copy_result_on_shift") == True and shift_held


class Worker(QObject):
    """""

    Runs on a seperate thread and fetches the suggestion catalog exactly once.
    Emits the entries (or the error) back to the formula window.

    """""

    job_finished = Signal(object, object)  # entries, error

    def __init__(self, url=None):
        super().__init__()
        self.url = url

    def run_fetch(self):

        try:
            entries = SuggestionEngine.fetch_catalog(self.url)
            self.job_finished.emit(entries, None)

        except E.CatalogError as e:
            # Known failure (no network, bad status, malformed body)
            self.job_finished.emit(None, e)

        except Exception as e:
            # Unexpected crash we didn't plan for
            critical_error = E.CatalogError(
                message=f"Unexpected crash: {e}",
                code="9999",
                equation=self.url
            )
            self.job_finished.emit(None, critical_error)


class SettingsDialog(QtWidgets.QDialog):
    """""

    Settings window. Every setting in config.json gets a widget, based on its type:
    1. Checkboxes   (bool)
    2. Input Fields (int and str)

    """""

    settings_saved = Signal()  # Signal to tell the main window to update

    def __init__(self, parent=None):
        super().__init__(parent)
        self.widgets = {}  # key -> widget, read back on save

        # --- 1. Window Setup ---
        self.setWindowTitle("Formula Settings")
        self.setMinimumSize(360, 240)

        main_layout = QtWidgets.QVBoxLayout(self)

        # --- 2. Load Settings ---
        self.setting_value_list = config_manager.load_setting_value("all")
        self.setting_description_list = config_manager.load_setting_description("all")

        # --- 3. Build Widgets ---
        for key_value, value in self.setting_value_list.items():
            description = self.setting_description_list.get(key_value, key_value)

            # --- 3a. Checkbox Builder (for Boolean settings) ---
            if isinstance(value, bool):
                checkbox = QtWidgets.QCheckBox(description)
                checkbox.setChecked(value)
                main_layout.addWidget(checkbox)
                self.widgets[key_value] = checkbox

            # --- 3b. Input Field Builder (for Integer and Text settings) ---
            else:
                row_h_layout = QtWidgets.QHBoxLayout()
                main_layout.addLayout(row_h_layout)
                label_text = description + " (min. 2):" if key_value == "decimal_places" else description + ":"
                label = QtWidgets.QLabel(label_text)
                input_field = QtWidgets.QLineEdit()
                if isinstance(value, int):
                    input_field.setPlaceholderText(str(value))  # Show current value as placeholder
                else:
                    input_field.setText(str(value))

                row_h_layout.addWidget(label)
                row_h_layout.addWidget(input_field)
                row_h_layout.setStretch(1, 1)  # Make input field expand
                self.widgets[key_value] = input_field

        # --- 4. OK / Cancel Buttons ---
        button_box = QtWidgets.QDialogButtonBox(QtWidgets.QDialogButtonBox.Ok | QtWidgets.QDialogButtonBox.Cancel)
        main_layout.addWidget(button_box)
        main_layout.addStretch(1)

        button_box.accepted.connect(lambda: self.save_settings(self.setting_value_list))
        button_box.rejected.connect(self.reject)

        self.update_darkmode()

    def save_settings(self, setting_value_list):
        for key_value, widget in self.widgets.items():

            # --- 1. Handle Checkboxes ---
            if isinstance(widget, QtWidgets.QCheckBox):
                setting_value_list[key_value] = widget.isChecked()
                continue

            # --- 2. Handle Input Fields ---
            new_value_str = widget.text().strip()
            old_value = setting_value_list[key_value]

            if not isinstance(old_value, int):
                if new_value_str != "":
                    setting_value_list[key_value] = new_value_str
                continue

            # If user left it blank, keep the old value
            if new_value_str == "":
                continue

            try:
                # --- 3. Validation ---
                new_value_int = int(new_value_str)
                if key_value == "decimal_places" and new_value_int < 2:
                    raise ValueError(f"'{new_value_int}' is too small. Minimum is 2.")
                setting_value_list[key_value] = new_value_int

            except ValueError as e:
                # --- 4. Input Validation Error ---
                # Show an error box and STOP the save process
                QtWidgets.QMessageBox.critical(self, "Invalid Input:",
                                               f"Error in input for '{key_value}':\n\n{e}\n\nPlease correct your input.")
                return

        # --- 5. Write to File ---
        saved_settings = config_manager.save_setting(setting_value_list)

        if saved_settings != {}:
            self.settings_saved.emit()
            self.accept()
        else:
            error_code = "5002"
            QtWidgets.QMessageBox.critical(self, "Error",
                                           f"Error {error_code}: {E.ERROR_MESSAGES[error_code]}config.json")

    def update_darkmode(self):
        # Applies the darkmode stylesheet if the setting is True
        if self.setting_value_list.get("darkmode") == True:
            self.setStyleSheet("""
                        QDialog {background-color: #121212;}
                        QLabel {color: white;}
                        QCheckBox {color: white;}
                        QLineEdit {background-color: #444444;color: white;border: 1px solid #666666;}
                        QDialogButtonBox QPushButton {background-color: #666666;color: white;}""")
        else:
            self.setStyleSheet("")


class EditSlot(QtWidgets.QLineEdit):
    """Text input on one side of the chip row."""

    focus_lost = Signal(object)  # widget that received the focus (or None)
    delete_on_empty = Signal()

    def __init__(self, side, parent=None):
        super().__init__(parent)
        self.side = side
        self.setFrame(False)
        if side == RIGHT:
            self.setPlaceholderText("Type here...")
            self.setMinimumWidth(120)
        else:
            self.setFixedWidth(16)

    def keyPressEvent(self, event):
        if event.key() in DELETE_KEYS and self.text() == "":
            self.delete_on_empty.emit()
            return
        if event.key() in (Qt.Key.Key_Return, Qt.Key.Key_Enter) and self.side == RIGHT:
            # Enter evaluates like leaving the field
            self.clearFocus()
            return
        super().keyPressEvent(event)

    def focusOutEvent(self, event):
        super().focusOutEvent(event)
        self.focus_lost.emit(QtWidgets.QApplication.focusWidget())


class ChipGap(QtWidgets.QLineEdit):
    """Tiny focusable gap after a chip; Backspace/Delete removes that chip."""

    delete_requested = Signal(int)

    def __init__(self, index, parent=None):
        super().__init__(parent)
        self.index = index
        self.setFrame(False)
        self.setFixedWidth(6)

    def keyPressEvent(self, event):
        if event.key() in DELETE_KEYS:
            self.delete_requested.emit(self.index)
            return
        # The gap never holds text
        event.ignore()


class ResultLabel(QtWidgets.QLabel):
    clicked = Signal(bool)  # True if Shift was held during the click

    def mousePressEvent(self, event):
        self.clicked.emit(is_shift_pressed(event.modifiers()))
        super().mousePressEvent(event)


class FormulaWindow(QtWidgets.QWidget):

    def __init__(self, session=None):
        super().__init__()

        # --- 1. Load Settings ---
        self.setting_value_list = config_manager.load_setting_value("all")

        # --- 2. Session (all formula state lives there) ---
        self.session = session if session is not None else FormulaSession()
        self.session.on_change = self.render
        self.worker_instance = None
        self.chip_widgets = []

        # --- 3. Window Setup ---
        self.setWindowTitle("Tag Formula Calculator")
        self.resize(520, 260)
        self.setFocusPolicy(Qt.FocusPolicy.ClickFocus)  # Clicking the background leaves the input
        main_v_layout = QtWidgets.QVBoxLayout(self)

        # --- 4. Chip Row: [left slot] [chips ...] [right slot] ---
        self.row_frame = QtWidgets.QFrame()
        self.row_frame.setObjectName("chipRow")
        self.row_layout = QtWidgets.QHBoxLayout(self.row_frame)
        self.row_layout.setContentsMargins(8, 8, 8, 8)
        self.row_layout.setSpacing(2)

        self.left_slot = EditSlot(LEFT)
        self.right_slot = EditSlot(RIGHT)
        self.chips_layout = QtWidgets.QHBoxLayout()
        self.chips_layout.setSpacing(2)

        self.row_layout.addWidget(self.left_slot)
        self.row_layout.addLayout(self.chips_layout)
        self.row_layout.addWidget(self.right_slot, 1)

        settings_button = QtWidgets.QToolButton()
        settings_button.setText("⚙")
        settings_button.clicked.connect(self.open_settings)
        self.row_layout.addWidget(settings_button)

        main_v_layout.addWidget(self.row_frame)

        # --- 5. Suggestion List ---
        self.suggestion_list = QtWidgets.QListWidget()
        self.suggestion_list.itemClicked.connect(self.handle_suggestion_clicked)
        main_v_layout.addWidget(self.suggestion_list)

        # --- 6. Result Line ---
        self.result_label = ResultLabel()
        self.result_label.clicked.connect(self.handle_result_clicked)
        main_v_layout.addWidget(self.result_label)
        main_v_layout.addStretch(1)

        # --- 7. Slot Connections ---
        self.left_slot.textEdited.connect(lambda text: self.session.on_buffer_change(LEFT, text))
        self.right_slot.textEdited.connect(lambda text: self.session.on_buffer_change(RIGHT, text))
        self.right_slot.focus_lost.connect(self.handle_right_focus_lost)
        self.right_slot.delete_on_empty.connect(self.session.on_right_backspace)

        self.update_darkmode()
        self.render(self.session)

    # --- Catalog ---
    def load_catalog(self):
        """Start the one-shot catalog fetch on a background thread."""
        if self.worker_instance is not None:
            return
        self.worker_instance = Worker(self.setting_value_list.get("catalog_url"))
        self.worker_instance.job_finished.connect(self.handle_catalog_result)
        my_thread = threading.Thread(target=self.worker_instance.run_fetch, daemon=True)
        my_thread.start()

    def handle_catalog_result(self, entries, catalog_error):
        if catalog_error is not None:
            print(f"Catalog unavailable ({catalog_error})")
            self.session.on_catalog_failed(catalog_error)
        else:
            self.session.on_catalog_loaded(entries)

    # --- Event Handlers ---
    def handle_right_focus_lost(self, new_focus):
        # Moving into the suggestion list or a chip gap is part of editing, not a commit
        if new_focus is self.suggestion_list or isinstance(new_focus, (ChipGap, EditSlot)):
            return
        self.session.on_commit()

    def handle_suggestion_clicked(self, item):
        entry = item.data(Qt.ItemDataRole.UserRole)
        self.session.on_suggestion_select(entry)
        if self.session.focus == RIGHT:
            self.right_slot.setFocus()

    def handle_chip_delete(self, index):
        self.session.on_token_delete(index)

    def handle_peek(self, token):
        QtWidgets.QMessageBox.information(self, token.display_name, json.dumps(token.inputs))

    def handle_result_clicked(self, shift_held):
        if copy_requested(self.setting_value_list, self.session.final_result, shift_held):
            pyperclip.copy(self.session.final_result)

    # --- Rendering ---
    def render(self, session):
        # --- 1. Edit Slots ---
        self.left_slot.setVisible(session.left_visible)
        if self.left_slot.text() != session.left_buffer:
            self.left_slot.setText(session.left_buffer)
        if self.right_slot.text() != session.right_buffer:
            self.right_slot.setText(session.right_buffer)

        # --- 2. Chips ---
        self.render_chips(session.tokens)

        # --- 3. Suggestions ---
        self.suggestion_list.clear()
        for entry in session.filtered_suggestions:
            item = QtWidgets.QListWidgetItem(entry.name)
            item.setData(Qt.ItemDataRole.UserRole, entry)
            self.suggestion_list.addItem(item)
        self.suggestion_list.setVisible(len(session.filtered_suggestions) > 0)

        # --- 4. Result ---
        if session.final_result:
            self.result_label.setText(f"Final: {session.final_result}")
            self.result_label.setVisible(True)
        else:
            self.result_label.setVisible(False)
        self.render_error(session.last_error)

    def render_chips(self, tokens):
        for widget in self.chip_widgets:
            self.chips_layout.removeWidget(widget)
            widget.deleteLater()
        self.chip_widgets = []

        darkmode = self.setting_value_list.get("darkmode") == True
        for index, token in enumerate(tokens):
            chip = QtWidgets.QFrame()
            chip_layout = QtWidgets.QHBoxLayout(chip)
            chip_layout.setContentsMargins(0, 0, 0, 0)
            label = QtWidgets.QLabel(token.display_name)
            if token.is_tag:
                label.setStyleSheet(TAG_STYLE_DARK if darkmode else TAG_STYLE)
                if token.category:
                    label.setToolTip(token.category)
            chip_layout.addWidget(label)

            if token.inputs:
                peek_button = QtWidgets.QToolButton()
                peek_button.setText("👁")
                peek_button.setAutoRaise(True)
                peek_button.clicked.connect(lambda checked=False, t=token: self.handle_peek(t))
                chip_layout.addWidget(peek_button)

            if index != len(tokens) - 1:
                gap = ChipGap(index)
                gap.delete_requested.connect(self.handle_chip_delete)
                chip_layout.addWidget(gap)

            self.chips_layout.addWidget(chip)
            self.chip_widgets.append(chip)

    def render_error(self, math_error):
        if math_error is None:
            self.result_label.setStyleSheet("color: white;" if self.setting_value_list.get("darkmode") == True else "")
            self.result_label.setToolTip("")
            return
        error_code = math_error.code
        self.result_label.setStyleSheet(ERROR_STYLE)
        self.result_label.setToolTip(
            f"Error {error_code}: {E.ERROR_MESSAGES.get(error_code, 'Unknown error')}\n"
            f"Details: {math_error.message}\nExpression: {math_error.equation}")

    def update_darkmode(self):
        if self.setting_value_list.get("darkmode") == True:
            self.setStyleSheet("background-color: #121212; color: white;")
            self.row_frame.setStyleSheet("QFrame#chipRow {border: 1px solid #444444; border-radius: 4px;}")
        else:
            self.setStyleSheet("")
            self.row_frame.setStyleSheet(
                "QFrame#chipRow {border: 1px solid #ccc; border-radius: 4px; background-color: white;}")

    def open_settings(self):
        settings_dialog = SettingsDialog(self)
        settings_dialog.exec()  # "exec" makes the dialog modal (blocks main window)

        # Reload settings after dialog closes
        self.setting_value_list = config_manager.load_setting_value("all")
        self.update_darkmode()
        self.render(self.session)


def main():
    # --- Main Application Entry Point ---
    app = QtWidgets.QApplication()
    window = FormulaWindow()
    window.show()
    window.load_catalog()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
